from __future__ import annotations

from skcs_predictor.domain.markets import (
    MARKET_KEYS,
    MarketAnchors,
    MissingMarketKey,
    percent,
)

W_MODEL = 0.6
W_EXPERT = 0.4


def blend(baseline: MarketAnchors, expert: MarketAnchors) -> MarketAnchors:
    """
    Weighted average of the baseline and expert percentages, market by market.

    Both inputs must carry every key in MARKET_KEYS; a missing key raises
    MissingMarketKey instead of producing a silent default.
    """
    blended: MarketAnchors = {}
    for key in MARKET_KEYS:
        if key not in baseline:
            raise MissingMarketKey(key, "baseline")
        if key not in expert:
            raise MissingMarketKey(key, "expert")
        blended[key] = percent(baseline[key] * W_MODEL + expert[key] * W_EXPERT)
    return blended
