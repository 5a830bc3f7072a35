import asyncio

import httpx
import pytest

from skcs_predictor.domain.match import MatchInput
from skcs_predictor.infrastructure.odds_client import ApiSportsClient, OddsLookupError

FIXTURES = {
    "response": [
        {
            "fixture": {"id": 1, "date": "2025-08-16T14:00:00+00:00", "venue": {"name": "Anfield"}},
            "teams": {"home": {"name": "Liverpool"}, "away": {"name": "Burnley"}},
        },
        {
            "fixture": {"id": 1035037, "date": "2025-08-22T19:00:00+00:00", "venue": {"name": "Turf Moor"}},
            "teams": {"home": {"name": "Burnley"}, "away": {"name": "Chelsea"}},
        },
    ]
}

PREDICTIONS = {
    "response": [
        {
            "predictions": {
                "advice": "Double chance : Chelsea or draw",
                "percent": {"home": "20%", "draw": "25%", "away": "55%"},
            }
        }
    ]
}


def _client(handler, timeout=3.0):
    return ApiSportsClient(api_key="test-key", timeout=timeout, transport=httpx.MockTransport(handler))


def _lookup(client, match=None):
    match = match or MatchInput(home_team="Burnley", away_team="Chelsea", league="Premier League")
    return asyncio.run(client.lookup(match))


def test_lookup_finds_fixture_and_predictions():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/fixtures":
            return httpx.Response(200, json=FIXTURES)
        if request.url.path == "/predictions":
            return httpx.Response(200, json=PREDICTIONS)
        return httpx.Response(404)

    enrichment = _lookup(_client(handler))

    assert enrichment is not None
    assert enrichment.fixture_id == 1035037
    assert enrichment.venue == "Turf Moor"
    assert enrichment.kickoff == "2025-08-22T19:00:00+00:00"
    assert (enrichment.home_percent, enrichment.draw_percent, enrichment.away_percent) == (20, 25, 55)
    assert enrichment.advice == "Double chance : Chelsea or draw"

    assert seen[0].headers["x-apisports-key"] == "test-key"
    assert seen[0].url.params["team"] == "Burnley"
    assert seen[0].url.params["league"] == "39"
    assert seen[1].url.params["fixture"] == "1035037"


def test_team_match_is_case_insensitive():
    def handler(request):
        if request.url.path == "/fixtures":
            return httpx.Response(200, json=FIXTURES)
        return httpx.Response(200, json={"response": []})

    match = MatchInput(home_team="BURNLEY", away_team="chelsea", league="Premier League")
    enrichment = _lookup(_client(handler), match)
    assert enrichment.fixture_id == 1035037
    assert not enrichment.has_percentages
    assert enrichment.advice is None


def test_legacy_percent_keys():
    legacy = {"response": [{"predictions": {"percent": {"win_home": "10", "win_draw": 30, "win_away": "60%"}}}]}

    def handler(request):
        if request.url.path == "/fixtures":
            return httpx.Response(200, json=FIXTURES)
        return httpx.Response(200, json=legacy)

    enrichment = _lookup(_client(handler))
    assert (enrichment.home_percent, enrichment.draw_percent, enrichment.away_percent) == (10, 30, 60)


def test_no_matching_fixture():
    def handler(request):
        return httpx.Response(200, json={"response": []})

    assert _lookup(_client(handler)) is None


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"errors": "boom"}),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json=["unexpected"]),
        httpx.Response(200, json={"errors": {"token": "invalid"}}),
    ],
)
def test_failures_fall_back_to_none(response):
    def handler(request):
        return response

    assert _lookup(_client(handler)) is None


def _prediction(percent):
    return {"response": [{"predictions": {"percent": percent}}]}


@pytest.mark.parametrize(
    "fixtures, predictions",
    [
        ({"response": ["garbage"]}, PREDICTIONS),
        ({"response": [{"teams": ["x"]}]}, PREDICTIONS),
        ({"response": [{"teams": {"home": "Burnley", "away": "Chelsea"}}]}, PREDICTIONS),
        (FIXTURES, {"response": ["garbage"]}),
        (FIXTURES, {"response": [{"predictions": "garbage"}]}),
        (FIXTURES, _prediction("45%")),
        (FIXTURES, _prediction({"home": ["45%"], "draw": "25%", "away": "30%"})),
    ],
)
def test_malformed_payloads_fall_back_to_none(fixtures, predictions):
    def handler(request):
        if request.url.path == "/fixtures":
            return httpx.Response(200, json=fixtures)
        return httpx.Response(200, json=predictions)

    assert _lookup(_client(handler)) is None


def test_non_string_display_fields_are_dropped():
    fixtures = {
        "response": [
            {
                "fixture": {"id": 7, "date": 20250822, "venue": {"name": ["Turf Moor"]}},
                "teams": {"home": {"name": "Burnley"}, "away": {"name": "Chelsea"}},
            }
        ]
    }
    predictions = {"response": [{"predictions": {"advice": {"text": "x"}, "percent": {}}}]}

    def handler(request):
        if request.url.path == "/fixtures":
            return httpx.Response(200, json=fixtures)
        return httpx.Response(200, json=predictions)

    enrichment = _lookup(_client(handler))
    assert enrichment.fixture_id == 7
    assert enrichment.kickoff is None
    assert enrichment.venue is None
    assert enrichment.advice is None


def test_network_error_falls_back_to_none():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    assert _lookup(_client(handler)) is None


def test_slow_upstream_is_abandoned():
    async def handler(request):
        await asyncio.sleep(1)
        return httpx.Response(200, json=FIXTURES)

    assert _lookup(_client(handler, timeout=0.05)) is None


def test_empty_key_is_rejected():
    with pytest.raises(OddsLookupError):
        ApiSportsClient(api_key="  ")
