import json

import pytest

from skcs_predictor.application.market_derivation import derive_handicaps, derive_markets
from skcs_predictor.application.presenter import DEFAULT_EXPERT_NOTES, HANDICAP_LABELS, POPULAR_LIMIT, Presenter
from skcs_predictor.infrastructure.odds_client import FixtureEnrichment

AGGREGATE_KEYS = {
    "match", "source", "methodology", "all", "popular", "winner", "bookings",
    "goals_detail", "halves", "corners_detail", "scores", "handicaps_detail",
    "teams", "player_specials", "expert_notes", "legend",
}
OUTCOME_KEYS = {"outcome", "probability", "odds", "market", "suggestion", "rationale"}


@pytest.fixture
def body(match, blended):
    return Presenter(match).render(derive_markets(blended))


def _outcomes(body):
    return body["predictions"]["all"]


def test_top_level_shape(body):
    assert body["success"] is True
    for group in ("goals", "halftime", "corners", "cards", "handicaps"):
        assert body[group], group
    assert set(body["predictions"]) == AGGREGATE_KEYS


def test_outcome_entries(body):
    for outcome in _outcomes(body):
        assert set(outcome) == OUTCOME_KEYS
        assert outcome["probability"].endswith("%")
        p = int(outcome["probability"][:-1])
        assert 0 <= p <= 100
        assert 1.10 <= float(outcome["odds"]) <= 10.00
        assert outcome["suggestion"] in ("Low", "Medium", "High")
        assert "{" not in outcome["outcome"] and "{" not in outcome["rationale"]


def test_winner_uses_team_names(body):
    full_time = body["predictions"]["winner"]["full_time"]
    assert [o["outcome"] for o in full_time] == ["1 = Burnley", "X = Draw", "2 = Chelsea"]
    assert [o["probability"] for o in full_time] == ["33%", "29%", "38%"]
    assert full_time[0]["odds"] == "3.03"


def test_goal_group_pairs_over_and_under(body):
    goals = {o["outcome"]: o["probability"] for o in body["goals"]}
    assert goals["Goals Over 2.5"] == "59%"
    assert goals["Goals Under 2.5"] == "41%"
    assert goals["Goals Over 0.5"] == "71%"


def test_popular_is_sorted(body):
    popular = body["predictions"]["popular"]
    assert len(popular) == POPULAR_LIMIT
    probs = [int(o["probability"][:-1]) for o in popular]
    assert probs == sorted(probs, reverse=True)


def test_player_specials_use_fixed_prices(body):
    specials = body["predictions"]["player_specials"]
    booked = specials[0]
    assert booked["outcome"] == "Player to be booked"
    assert booked["probability"] == "30%"
    assert booked["odds"] == "3.20"
    assert booked["suggestion"] == "Low"


def test_match_without_enrichment(body):
    match = body["predictions"]["match"]
    assert match["title"] == "Burnley vs Chelsea"
    assert match["kickoff"] is None
    assert match["venue"] is None
    assert body["predictions"]["source"]["external"] is None
    assert body["predictions"]["expert_notes"] == DEFAULT_EXPERT_NOTES


def test_render_is_idempotent(match, blended):
    first = Presenter(match).render(derive_markets(blended))
    second = Presenter(match).render(derive_markets(blended))
    assert json.dumps(first, sort_keys=True) == json.dumps(second, sort_keys=True)


def test_enrichment_overrides_display_values_only(match, blended, body):
    enrichment = FixtureEnrichment(
        fixture_id=1035037,
        kickoff="2025-08-22T19:00:00+00:00",
        venue="Turf Moor",
        home_percent=20,
        draw_percent=25,
        away_percent=55,
        advice="Double chance : Chelsea or draw",
    )
    enriched = Presenter(match).render(derive_markets(blended), enrichment=enrichment)

    assert set(enriched) == set(body)
    assert set(enriched["predictions"]) == set(body["predictions"])

    full_time = enriched["predictions"]["winner"]["full_time"]
    assert [o["odds"] for o in full_time] == ["5.00", "4.00", "1.82"]
    assert [o["probability"] for o in full_time] == ["33%", "29%", "38%"]

    assert enriched["predictions"]["match"]["venue"] == "Turf Moor"
    assert enriched["predictions"]["source"]["external"] == "api-sports"
    assert enriched["predictions"]["expert_notes"] == "Double chance : Chelsea or draw"
    assert enriched["goals"] == body["goals"]


def test_partial_enrichment_keeps_computed_odds(match, blended, body):
    enrichment = FixtureEnrichment(fixture_id=1, venue="Turf Moor")
    enriched = Presenter(match).render(derive_markets(blended), enrichment=enrichment)
    assert enriched["predictions"]["winner"] == body["predictions"]["winner"]
    assert enriched["predictions"]["expert_notes"] == DEFAULT_EXPERT_NOTES


def test_teams_are_split_by_side(body):
    teams = body["predictions"]["teams"]
    assert all(o["outcome"].startswith("Burnley") for o in teams["home"])
    assert all(o["outcome"].startswith("Chelsea") for o in teams["away"])
    assert len(teams["home"]) == len(teams["away"]) == 4


def test_handicap_lines_are_labelled_per_side(body):
    lines = body["predictions"]["handicaps_detail"]["lines"]
    assert [o["outcome"] for o in lines] == [
        "Burnley -1.5", "Burnley -0.5", "Burnley +0.5", "Burnley +1.5",
        "Chelsea -1.5", "Chelsea -0.5", "Chelsea +0.5", "Chelsea +1.5",
    ]
    assert [o["probability"] for o in lines] == ["15%", "33%", "62%", "75%", "17%", "38%", "67%", "79%"]
    assert all(o["market"] == "Handicap" for o in lines)
    assert body["handicaps"][: len(lines)] == lines


def test_every_handicap_key_has_a_label():
    keys = derive_handicaps({"home": 40, "draw": 30, "away": 30}, {"1X": 70, "X2": 60, "12": 70})
    assert set(keys) == set(HANDICAP_LABELS)
