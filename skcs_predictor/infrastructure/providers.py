from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Mapping, Optional

from skcs_predictor.domain.markets import (
    AWAY_WIN,
    BTTS,
    CARDS_HIGH,
    CORNERS_HIGH,
    DRAW,
    FIRST_HALF_GOALS,
    HOME_WIN,
    MARKET_KEYS,
    OVER_2_5,
    MarketAnchors,
    MissingMarketKey,
)

BASELINE_ANCHORS: Dict[str, int] = {
    HOME_WIN: 31,
    DRAW: 29,
    AWAY_WIN: 40,
    BTTS: 65,
    OVER_2_5: 58,
    FIRST_HALF_GOALS: 62,
    CORNERS_HIGH: 55,
    CARDS_HIGH: 48,
}

EXPERT_FEED: Dict[str, int] = {
    "expert_win": 35,
    "expert_draw": 30,
    "expert_away": 35,
    "expert_btts": 68,
    "expert_over25": 60,
    "expert_first_half": 64,
    "expert_corners": 58,
    "expert_cards": 50,
}

EXPERT_KEY_MAP: Dict[str, str] = {
    HOME_WIN: "expert_win",
    DRAW: "expert_draw",
    AWAY_WIN: "expert_away",
    BTTS: "expert_btts",
    OVER_2_5: "expert_over25",
    FIRST_HALF_GOALS: "expert_first_half",
    CORNERS_HIGH: "expert_corners",
    CARDS_HIGH: "expert_cards",
}


class MarketProvider(ABC):
    """Source of anchor percentages for one match."""

    name: str = "provider"

    @abstractmethod
    def supply(self, home_team: str, away_team: str, league: str) -> MarketAnchors:
        ...

    def rationale(self, home_team: str, away_team: str) -> str:
        return ""


class BaselineProvider(MarketProvider):
    name = "model"

    def __init__(self, anchors: Optional[Mapping[str, int]] = None):
        self.anchors = dict(BASELINE_ANCHORS if anchors is None else anchors)

    def supply(self, home_team: str, away_team: str, league: str) -> MarketAnchors:
        # static until a real model is plugged in; the match is ignored
        for key in MARKET_KEYS:
            if key not in self.anchors:
                raise MissingMarketKey(key, self.name)
        return dict(self.anchors)

    def rationale(self, home_team: str, away_team: str) -> str:
        return "Model merges form, xG, and squad depth."


class ExpertProvider(MarketProvider):
    """
    Reads the expert feed, whose keys use the feed's own naming
    (expert_win, expert_over25, ...), and maps it onto the market keys.
    """

    name = "expert"

    def __init__(
        self,
        feed: Optional[Mapping[str, int]] = None,
        key_map: Optional[Mapping[str, str]] = None,
    ):
        self.feed = dict(EXPERT_FEED if feed is None else feed)
        self.key_map = dict(EXPERT_KEY_MAP if key_map is None else key_map)

    def supply(self, home_team: str, away_team: str, league: str) -> MarketAnchors:
        anchors: MarketAnchors = {}
        for key in MARKET_KEYS:
            feed_key = self.key_map.get(key)
            if feed_key is None or feed_key not in self.feed:
                raise MissingMarketKey(key, self.name)
            anchors[key] = self.feed[feed_key]
        return anchors

    def rationale(self, home_team: str, away_team: str) -> str:
        return f"Consensus tips {away_team} for pressing and goals against {home_team}."
