from __future__ import annotations

from typing import Dict, Tuple

HOME_WIN = "homeWin"
DRAW = "draw"
AWAY_WIN = "awayWin"
BTTS = "btts"
OVER_2_5 = "over25"
FIRST_HALF_GOALS = "firstHalfGoals"
CORNERS_HIGH = "cornersHigh"
CARDS_HIGH = "cardsHigh"

MARKET_KEYS: Tuple[str, ...] = (
    HOME_WIN,
    DRAW,
    AWAY_WIN,
    BTTS,
    OVER_2_5,
    FIRST_HALF_GOALS,
    CORNERS_HIGH,
    CARDS_HIGH,
)

# market key -> integer percentage
MarketAnchors = Dict[str, int]


class MissingMarketKey(KeyError):
    """A provider did not supply one of the markets in MARKET_KEYS."""

    def __init__(self, market: str, source: str = "unknown"):
        super().__init__(market)
        self.market = market
        self.source = source

    def __str__(self) -> str:
        return f"Market '{self.market}' missing from {self.source} anchors"


def clamp_probability(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    # round() would use banker's rounding (0.5 -> 0)
    if value >= 0:
        return int(value + 0.5)
    return -int(-value + 0.5)


def percent(value: float) -> int:
    """Round and clamp to an integer percentage in [0, 100]."""
    return int(clamp_probability(round_half_up(value)))
