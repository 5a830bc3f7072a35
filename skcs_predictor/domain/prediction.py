from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, List


class Suggestion(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


@dataclass
class Outcome:
    outcome: str
    probability: int
    odds: str
    market: str
    suggestion: Suggestion
    rationale: str

    def to_dict(self) -> Dict[str, str]:
        data = asdict(self)
        data["probability"] = f"{self.probability}%"
        data["suggestion"] = self.suggestion.value
        return data


MarketGroup = List[Outcome]
