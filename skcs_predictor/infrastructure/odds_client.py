from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from skcs_predictor.domain.match import MatchInput
from skcs_predictor.logging_config import get_logger

logger = get_logger(__name__)


class OddsLookupError(Exception):
    pass


@dataclass(frozen=True)
class FixtureEnrichment:
    fixture_id: int
    kickoff: Optional[str] = None
    venue: Optional[str] = None
    home_percent: Optional[float] = None
    draw_percent: Optional[float] = None
    away_percent: Optional[float] = None
    advice: Optional[str] = None

    @property
    def has_percentages(self) -> bool:
        return None not in (self.home_percent, self.draw_percent, self.away_percent)


class ApiSportsClient:
    """
    Best-effort fixture and prediction lookup against API-Sports (football v3).

    One attempt per request, bounded by ``timeout`` seconds in total.
    ``lookup`` never raises: any failure is logged and reported as ``None``.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://v3.football.api-sports.io",
        league_id: int = 39,
        season: int = 2025,
        timeout: float = 3.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not api_key or not api_key.strip():
            raise OddsLookupError("APISPORTS_KEY is empty")
        self.api_key = api_key.strip()
        self.base_url = base_url.rstrip("/")
        self.league_id = league_id
        self.season = season
        self.timeout = timeout
        self._transport = transport

    async def lookup(self, match: MatchInput) -> Optional[FixtureEnrichment]:
        try:
            enrichment = await asyncio.wait_for(self._lookup(match), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("odds_lookup_failed", error_type="TimeoutError", match=match.title)
            return None
        except (
            httpx.HTTPError,
            OddsLookupError,
            ValueError,
            KeyError,
            TypeError,
            IndexError,
            AttributeError,
        ) as e:
            logger.warning(
                "odds_lookup_failed",
                error_type=type(e).__name__,
                error_message=str(e),
                match=match.title,
            )
            return None

        if enrichment is None:
            logger.info("odds_lookup_no_fixture", match=match.title)
        return enrichment

    async def _lookup(self, match: MatchInput) -> Optional[FixtureEnrichment]:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            headers={"x-apisports-key": self.api_key},
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            fixtures = await self._get(
                client,
                "/fixtures",
                {"league": self.league_id, "season": self.season, "team": match.home_team},
            )
            fixture = self._find_fixture(fixtures, match)
            if fixture is None:
                return None

            fixture_info = _as_dict(fixture.get("fixture"), "fixture")
            fixture_id = int(fixture_info["id"])
            venue = _as_dict(fixture_info.get("venue"), "fixture.venue")

            predictions = await self._get(client, "/predictions", {"fixture": fixture_id})
            prediction = _as_dict(predictions[0].get("predictions"), "predictions") if predictions else {}
            pct = _as_dict(prediction.get("percent"), "predictions.percent")

            return FixtureEnrichment(
                fixture_id=fixture_id,
                kickoff=_as_str(fixture_info.get("date")),
                venue=_as_str(venue.get("name")),
                home_percent=_parse_percent(pct.get("home", pct.get("win_home"))),
                draw_percent=_parse_percent(pct.get("draw", pct.get("win_draw"))),
                away_percent=_parse_percent(pct.get("away", pct.get("win_away"))),
                advice=_as_str(prediction.get("advice")),
            )

    async def _get(self, client: httpx.AsyncClient, path: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        resp = await client.get(path, params=params)
        resp.raise_for_status()
        payload = resp.json()
        if not isinstance(payload, dict):
            raise OddsLookupError(f"Unexpected payload for {path}")
        response = payload.get("response")
        if not isinstance(response, list):
            raise OddsLookupError(f"Missing 'response' list for {path}")
        if not all(isinstance(item, dict) for item in response):
            raise OddsLookupError(f"Non-object entry in 'response' for {path}")
        return response

    @staticmethod
    def _find_fixture(fixtures: List[Dict[str, Any]], match: MatchInput) -> Optional[Dict[str, Any]]:
        home = match.home_team.lower()
        away = match.away_team.lower()
        for fixture in fixtures:
            teams = _as_dict(fixture.get("teams"), "teams")
            home_name = str(_as_dict(teams.get("home"), "teams.home").get("name", "")).lower()
            away_name = str(_as_dict(teams.get("away"), "teams.away").get("name", "")).lower()
            if home_name == home and away_name == away:
                return fixture
        return None


def _as_dict(value: Any, what: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise OddsLookupError(f"Expected an object for '{what}', got {type(value).__name__}")
    return value


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _parse_percent(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip().rstrip("%")
    number = float(value)
    if number != number:  # NaN
        return None
    return max(0.0, min(100.0, number))
