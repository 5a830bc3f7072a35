from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PredictRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    home_team: str = Field(..., alias="homeTeam")
    away_team: str = Field(..., alias="awayTeam")
    league: str = Field(..., description="League name as displayed (e.g. 'Premier League')")

    @field_validator("home_team", "away_team", "league")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class OutcomeSchema(BaseModel):
    outcome: str
    probability: str
    odds: str
    market: str
    suggestion: str
    rationale: str


class PredictResponse(BaseModel):
    success: bool = True
    goals: List[OutcomeSchema]
    halftime: List[OutcomeSchema]
    corners: List[OutcomeSchema]
    cards: List[OutcomeSchema]
    handicaps: List[OutcomeSchema]
    predictions: Dict[str, Any]


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
