from dataclasses import dataclass


@dataclass(frozen=True)
class MatchInput:
    home_team: str
    away_team: str
    league: str

    @property
    def title(self) -> str:
        return f"{self.home_team} vs {self.away_team}"
