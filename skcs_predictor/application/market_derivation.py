"""
Expands the blended anchors into the families of related outcomes shown in
the betting tabs (goal lines, first half, double chance, handicaps, combos).

Every function here is pure and works on integer percentages. Values coming
from a misbehaving provider are clamped to [0, 100] before use.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from skcs_predictor.domain.markets import (
    AWAY_WIN,
    BTTS,
    CARDS_HIGH,
    CORNERS_HIGH,
    DRAW,
    FIRST_HALF_GOALS,
    HOME_WIN,
    OVER_2_5,
    MarketAnchors,
    MissingMarketKey,
    clamp_probability,
    percent,
)
from skcs_predictor.domain.prediction import Suggestion

MIN_ODDS = 1.1
MAX_ODDS = 10.0

# (line, floor, offset); the anchor line has no floor and offset 0
LineTable = Sequence[Tuple[float, Optional[int], int]]

GOAL_LINES: LineTable = (
    (0.5, 70, 12),
    (1.5, 62, 4),
    (2.5, None, 0),
    (3.5, 32, -26),
    (4.5, 22, -36),
    (5.5, 14, -44),
)

FIRST_HALF_GOAL_LINES: LineTable = (
    (0.5, 58, 6),
    (1.5, 46, -6),
)

CORNER_LINES: LineTable = (
    (6.5, 82, 22),
    (7.5, 72, 15),
    (8.5, 62, 8),
    (9.5, None, 0),
    (10.5, 40, -10),
    (11.5, 30, -18),
    (12.5, 20, -26),
)

FIRST_HALF_CORNER_LINES: LineTable = (
    (3.5, 60, 4),
    (4.5, 45, -10),
    (5.5, 30, -22),
    (6.5, 18, -34),
)

CARD_LINES: LineTable = (
    (0.5, 88, 40),
    (1.5, 78, 28),
    (2.5, 64, 14),
    (3.5, None, 0),
    (4.5, 30, -16),
    (5.5, 20, -28),
    (6.5, 12, -36),
    (7.5, 8, -42),
)

FIRST_HALF_CARD_LINES: LineTable = (
    (0.5, 60, 12),
    (1.5, 36, -14),
    (2.5, 18, -30),
    (3.5, 8, -40),
    (4.5, 4, -45),
)

FIRST_HALF_HOME_FACTOR = 0.9
FIRST_HALF_DRAW_FACTOR = 1.2
FIRST_HALF_AWAY_FACTOR = 0.9

HOME_SCORE_SHARES = (("1-0", 0.28), ("2-0", 0.22), ("2-1", 0.26), ("3-0", 0.10), ("3-1", 0.14))
DRAW_SCORE_SHARES = (("0-0", 0.30), ("1-1", 0.50), ("2-2", 0.20))
AWAY_SCORE_SHARES = (("0-1", 0.28), ("0-2", 0.22), ("1-2", 0.26), ("0-3", 0.10), ("1-3", 0.14))


@dataclass(frozen=True)
class LineProbability:
    line: float
    over: int
    under: int


@dataclass(frozen=True)
class Combo:
    key: str
    probability: int


@dataclass
class DerivedMarkets:
    full_time: Dict[str, int]
    double_chance: Dict[str, int]
    draw_no_bet: Dict[str, int]
    btts: Dict[str, int]
    goals: List[LineProbability]
    first_half_goals: List[LineProbability]
    first_half_result: Dict[str, int]
    corners: List[LineProbability]
    first_half_corners: List[LineProbability]
    team_corners: Dict[str, int]
    cards: List[LineProbability]
    first_half_cards: List[LineProbability]
    handicaps: Dict[str, int]
    combos: List[Combo] = field(default_factory=list)
    correct_scores: Dict[str, int] = field(default_factory=dict)
    team_goals: Dict[str, int] = field(default_factory=dict)


def display_odds(probability: float) -> str:
    """Decimal odds for a percentage, bounded to [1.10, 10.00]."""
    p = clamp_probability(probability, 1, 99)
    odds = clamp_probability(1 / (p / 100), MIN_ODDS, MAX_ODDS)
    return f"{odds:.2f}"


def confidence_label(probability: float) -> Suggestion:
    if probability >= 70:
        return Suggestion.HIGH
    if probability >= 50:
        return Suggestion.MEDIUM
    return Suggestion.LOW


def combine(a: float, b: float, weight_a: float = 0.5) -> int:
    """
    Fixed-weight average of two marginal percentages.

    Used for every combination market. Not a joint probability.
    """
    return percent(a * weight_a + b * (1 - weight_a))


def line_family(anchor: float, table: LineTable) -> List[LineProbability]:
    family: List[LineProbability] = []
    ceiling = 100
    anchor = clamp_probability(anchor)
    for line, floor, offset in table:
        value = anchor + offset
        if floor is not None:
            value = max(floor, value)
        over = min(percent(value), ceiling)
        ceiling = over
        family.append(LineProbability(line=line, over=over, under=100 - over))
    return family


def derive_totals(anchors: MarketAnchors) -> List[LineProbability]:
    return line_family(_anchor(anchors, OVER_2_5), GOAL_LINES)


def derive_first_half(anchors: MarketAnchors) -> Tuple[List[LineProbability], Dict[str, int]]:
    goals = line_family(_anchor(anchors, FIRST_HALF_GOALS), FIRST_HALF_GOAL_LINES)
    # not renormalised; the three values need not sum to 100
    result = {
        "home": percent(_anchor(anchors, HOME_WIN) * FIRST_HALF_HOME_FACTOR),
        "draw": percent(_anchor(anchors, DRAW) * FIRST_HALF_DRAW_FACTOR),
        "away": percent(_anchor(anchors, AWAY_WIN) * FIRST_HALF_AWAY_FACTOR),
    }
    return goals, result


def derive_fulltime(anchors: MarketAnchors) -> Tuple[Dict[str, int], Dict[str, int], Dict[str, int]]:
    home = _anchor(anchors, HOME_WIN)
    draw = _anchor(anchors, DRAW)
    away = _anchor(anchors, AWAY_WIN)

    full_time = {"home": percent(home), "draw": percent(draw), "away": percent(away)}
    double_chance = {
        "1X": percent(home + draw),
        "X2": percent(draw + away),
        "12": percent(home + away),
    }

    if home + away > 0:
        dnb_home = percent(home / (home + away) * 100)
    else:
        dnb_home = 50
    draw_no_bet = {"home": dnb_home, "away": 100 - dnb_home}
    return full_time, double_chance, draw_no_bet


def derive_handicaps(full_time: Dict[str, int], double_chance: Dict[str, int]) -> Dict[str, int]:
    home, away = full_time["home"], full_time["away"]
    return {
        "home-1.5": percent(home * 0.45),
        "home-0.5": home,
        "home+0.5": double_chance["1X"],
        "home+1.5": percent(double_chance["1X"] + percent(away * 0.35)),
        "away-1.5": percent(away * 0.45),
        "away-0.5": away,
        "away+0.5": double_chance["X2"],
        "away+1.5": percent(double_chance["X2"] + percent(home * 0.35)),
    }


def derive_corners(anchors: MarketAnchors) -> Tuple[List[LineProbability], List[LineProbability], Dict[str, int]]:
    anchor = _anchor(anchors, CORNERS_HIGH)
    home = _anchor(anchors, HOME_WIN)
    away = _anchor(anchors, AWAY_WIN)
    home_more = percent(50 + (home - away) / 2)
    return (
        line_family(anchor, CORNER_LINES),
        line_family(anchor, FIRST_HALF_CORNER_LINES),
        {"home": home_more, "away": 100 - home_more},
    )


def derive_cards(anchors: MarketAnchors) -> Tuple[List[LineProbability], List[LineProbability]]:
    anchor = _anchor(anchors, CARDS_HIGH)
    return line_family(anchor, CARD_LINES), line_family(anchor, FIRST_HALF_CARD_LINES)


def compose_double_chance_combos(
    double_chance: Dict[str, int],
    goals: List[LineProbability],
    btts_yes: int,
) -> List[Combo]:
    over_1_5 = find_line(goals, 1.5).over
    under_3_5 = find_line(goals, 3.5).under
    combos: List[Combo] = []
    for key, value in double_chance.items():
        combos.append(Combo(f"{key}&over1.5", combine(value, over_1_5)))
        combos.append(Combo(f"{key}&under3.5", combine(value, under_3_5)))
        combos.append(Combo(f"{key}&btts", combine(value, btts_yes, 0.55)))
    return combos


def compose_btts_combos(goals: List[LineProbability], btts_yes: int) -> List[Combo]:
    btts_no = 100 - btts_yes
    return [
        Combo("btts&over2.5", combine(btts_yes, find_line(goals, 2.5).over)),
        Combo("btts&under3.5", combine(btts_yes, find_line(goals, 3.5).under)),
        Combo("no_btts&under2.5", combine(btts_no, find_line(goals, 2.5).under)),
        Combo("no_goal", combine(btts_no, find_line(goals, 0.5).under)),
    ]


def derive_correct_scores(full_time: Dict[str, int]) -> Dict[str, int]:
    scores: Dict[str, int] = {}
    for bucket, shares in (
        ("home", HOME_SCORE_SHARES),
        ("draw", DRAW_SCORE_SHARES),
        ("away", AWAY_SCORE_SHARES),
    ):
        for score, share in shares:
            scores[score] = percent(full_time[bucket] * share)
    return scores


def derive_team_goals(
    full_time: Dict[str, int],
    double_chance: Dict[str, int],
    btts_yes: int,
    over_2_5: int,
) -> Dict[str, int]:
    home_over_0_5 = combine(btts_yes, double_chance["1X"])
    away_over_0_5 = combine(btts_yes, double_chance["X2"])
    home_clean_sheet = 100 - away_over_0_5
    away_clean_sheet = 100 - home_over_0_5
    return {
        "home_over0.5": home_over_0_5,
        "home_over1.5": min(home_over_0_5, percent(combine(full_time["home"], over_2_5) - 15)),
        "away_over0.5": away_over_0_5,
        "away_over1.5": min(away_over_0_5, percent(combine(full_time["away"], over_2_5) - 15)),
        "home_clean_sheet": home_clean_sheet,
        "away_clean_sheet": away_clean_sheet,
        "home_win_to_nil": percent(min(full_time["home"], home_clean_sheet) * 0.6),
        "away_win_to_nil": percent(min(full_time["away"], away_clean_sheet) * 0.6),
    }


def derive_markets(anchors: MarketAnchors) -> DerivedMarkets:
    full_time, double_chance, draw_no_bet = derive_fulltime(anchors)
    goals = derive_totals(anchors)
    first_half_goals, first_half_result = derive_first_half(anchors)
    corners, first_half_corners, team_corners = derive_corners(anchors)
    cards, first_half_cards = derive_cards(anchors)

    btts_yes = percent(_anchor(anchors, BTTS))
    over_2_5 = find_line(goals, 2.5).over

    return DerivedMarkets(
        full_time=full_time,
        double_chance=double_chance,
        draw_no_bet=draw_no_bet,
        btts={"yes": btts_yes, "no": 100 - btts_yes},
        goals=goals,
        first_half_goals=first_half_goals,
        first_half_result=first_half_result,
        corners=corners,
        first_half_corners=first_half_corners,
        team_corners=team_corners,
        cards=cards,
        first_half_cards=first_half_cards,
        handicaps=derive_handicaps(full_time, double_chance),
        combos=compose_double_chance_combos(double_chance, goals, btts_yes)
        + compose_btts_combos(goals, btts_yes),
        correct_scores=derive_correct_scores(full_time),
        team_goals=derive_team_goals(full_time, double_chance, btts_yes, over_2_5),
    )


def _anchor(anchors: MarketAnchors, key: str) -> float:
    try:
        return clamp_probability(anchors[key])
    except KeyError:
        raise MissingMarketKey(key, "blended") from None


def find_line(family: List[LineProbability], line: float) -> LineProbability:
    for entry in family:
        if entry.line == line:
            return entry
    raise KeyError(f"no {line} line")
