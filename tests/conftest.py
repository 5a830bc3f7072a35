import pytest

from skcs_predictor.application.blending import blend
from skcs_predictor.domain.match import MatchInput
from skcs_predictor.infrastructure.providers import BASELINE_ANCHORS, BaselineProvider, ExpertProvider


@pytest.fixture
def match() -> MatchInput:
    return MatchInput(home_team="Burnley", away_team="Chelsea", league="Premier League")


@pytest.fixture
def blended(match):
    baseline = BaselineProvider().supply(match.home_team, match.away_team, match.league)
    expert = ExpertProvider().supply(match.home_team, match.away_team, match.league)
    return blend(baseline, expert)


@pytest.fixture
def flat_anchors():
    """Every market at the same value; tests override what they need."""
    return {key: 50 for key in BASELINE_ANCHORS}
