from __future__ import annotations

from typing import Any, Dict, List, Optional

from skcs_predictor.application.blending import blend
from skcs_predictor.application.market_derivation import derive_markets
from skcs_predictor.application.presenter import Presenter
from skcs_predictor.config import Settings
from skcs_predictor.domain.markets import MarketAnchors
from skcs_predictor.domain.match import MatchInput
from skcs_predictor.infrastructure.odds_client import ApiSportsClient
from skcs_predictor.infrastructure.providers import (
    BaselineProvider,
    ExpertProvider,
    MarketProvider,
)
from skcs_predictor.logging_config import get_logger

logger = get_logger(__name__)


class PredictionService:
    def __init__(
        self,
        baseline: Optional[MarketProvider] = None,
        expert: Optional[MarketProvider] = None,
        odds_client: Optional[ApiSportsClient] = None,
    ):
        self.baseline = baseline or BaselineProvider()
        self.expert = expert or ExpertProvider()
        self.odds_client = odds_client

    @classmethod
    def from_settings(cls, settings: Settings) -> "PredictionService":
        odds_client = None
        if settings.odds_lookup_enabled:
            odds_client = ApiSportsClient(
                api_key=settings.apisports_key,
                base_url=settings.apisports_base_url,
                league_id=settings.apisports_league_id,
                season=settings.apisports_season,
                timeout=settings.odds_lookup_timeout,
            )
        else:
            logger.info("odds_lookup_skipped", reason="APISPORTS_KEY not set")
        return cls(odds_client=odds_client)

    def blended_anchors(self, match: MatchInput) -> MarketAnchors:
        baseline = self.baseline.supply(match.home_team, match.away_team, match.league)
        expert = self.expert.supply(match.home_team, match.away_team, match.league)
        return blend(baseline, expert)

    async def predict_for_match(self, match: MatchInput) -> Dict[str, Any]:
        """
        Runs providers -> blend -> derive -> present for one match.

        The advisory odds lookup only changes display values; when it fails or
        is disabled the body has the same shape.
        """
        anchors = self.blended_anchors(match)
        derived = derive_markets(anchors)

        enrichment = None
        if self.odds_client is not None:
            enrichment = await self.odds_client.lookup(match)
            if enrichment is not None:
                logger.info("odds_lookup_applied", fixture_id=enrichment.fixture_id, match=match.title)

        body = Presenter(match).render(derived, sources=self._sources(match), enrichment=enrichment)

        logger.info(
            "prediction_completed",
            home_team=match.home_team,
            away_team=match.away_team,
            league=match.league,
            enriched=enrichment is not None,
        )
        return body

    def _sources(self, match: MatchInput) -> List[Dict[str, str]]:
        return [
            {"name": provider.name, "rationale": provider.rationale(match.home_team, match.away_team)}
            for provider in (self.baseline, self.expert)
        ]
