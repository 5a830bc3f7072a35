from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from skcs_predictor.application.blending import W_EXPERT, W_MODEL
from skcs_predictor.application.market_derivation import (
    DerivedMarkets,
    LineProbability,
    confidence_label,
    display_odds,
)
from skcs_predictor.domain.markets import percent
from skcs_predictor.domain.match import MatchInput
from skcs_predictor.domain.prediction import MarketGroup, Outcome
from skcs_predictor.infrastructure.odds_client import FixtureEnrichment

DEFAULT_EXPERT_NOTES = "Consensus from AI, experts, and markets."
POPULAR_LIMIT = 6

METHODOLOGY = (
    f"Each core market blends the baseline model ({W_MODEL:.0%}) with the expert "
    f"feed ({W_EXPERT:.0%}). Goal, corner and card lines are extrapolated from a "
    "single anchor line with fixed floors; combination markets average their two "
    "legs. Odds are the inverse of the probability, bounded to 1.10 - 10.00."
)

LEGEND = {
    "High": "probability of 70% or more",
    "Medium": "probability from 50% to 69%",
    "Low": "probability below 50%",
    "odds": "decimal odds implied by the probability",
}

RATIONALES = {
    "1X2": "Blended model and expert view on {home} v {away} in the {league}.",
    "Double Chance": "Covers two of the three results for {home} v {away}.",
    "Draw No Bet": "Stake returned on a draw; win share of {home} against {away}.",
    "Goals": "Goal line extrapolated from the blended over 2.5 outlook.",
    "BTTS": "Attacking output of both {home} and {away}.",
    "Result & Goals": "Result cover paired with a goal line.",
    "Result & BTTS": "Result cover paired with both teams scoring.",
    "Goals Combo": "Both-teams-to-score outlook paired with a goal line.",
    "First Half Goals": "Early tempo expected from {home} and {away}.",
    "First Half Result": "First halves lean towards the draw.",
    "Corners": "Wide play and set-piece volume in the {league}.",
    "First Half Corners": "Share of the corner count expected before the break.",
    "Team Corners": "Territorial edge between {home} and {away}.",
    "Cards": "Expected intensity and referee profile for the {league}.",
    "First Half Cards": "Bookings expected before the break.",
    "Handicap": "Result adjusted by the handicap line.",
    "Correct Score": "Share of the matching result spread over likely scorelines.",
    "Team Goals": "Scoring outlook for each side.",
    "Player Specials": "Fixed price; not modelled.",
}

# not computed: fixed probability and odds
PLAYER_SPECIALS = (
    ("Player to be booked", 30, "3.20"),
    ("Anytime goalscorer - {home} striker", 38, "2.60"),
    ("Anytime goalscorer - {away} striker", 36, "2.75"),
    ("Player to score or assist - {home} playmaker", 42, "2.30"),
)

COMBO_LABELS = {
    "1X&over1.5": ("{home} or Draw & Over 1.5", "Result & Goals"),
    "1X&under3.5": ("{home} or Draw & Under 3.5", "Result & Goals"),
    "1X&btts": ("{home} or Draw & BTTS Yes", "Result & BTTS"),
    "X2&over1.5": ("{away} or Draw & Over 1.5", "Result & Goals"),
    "X2&under3.5": ("{away} or Draw & Under 3.5", "Result & Goals"),
    "X2&btts": ("{away} or Draw & BTTS Yes", "Result & BTTS"),
    "12&over1.5": ("{home} or {away} & Over 1.5", "Result & Goals"),
    "12&under3.5": ("{home} or {away} & Under 3.5", "Result & Goals"),
    "12&btts": ("{home} or {away} & BTTS Yes", "Result & BTTS"),
    "btts&over2.5": ("BTTS Yes & Over 2.5", "Goals Combo"),
    "btts&under3.5": ("BTTS Yes & Under 3.5", "Goals Combo"),
    "no_btts&under2.5": ("BTTS No & Under 2.5", "Goals Combo"),
    "no_goal": ("No team scores", "Goals Combo"),
}

HANDICAP_LABELS = {
    "home-1.5": "{home} -1.5",
    "home-0.5": "{home} -0.5",
    "home+0.5": "{home} +0.5",
    "home+1.5": "{home} +1.5",
    "away-1.5": "{away} -1.5",
    "away-0.5": "{away} -0.5",
    "away+0.5": "{away} +0.5",
    "away+1.5": "{away} +1.5",
}

TEAM_GOAL_LABELS = {
    "home_over0.5": "{home} Over 0.5 goals",
    "home_over1.5": "{home} Over 1.5 goals",
    "home_clean_sheet": "{home} clean sheet",
    "home_win_to_nil": "{home} to win to nil",
    "away_over0.5": "{away} Over 0.5 goals",
    "away_over1.5": "{away} Over 1.5 goals",
    "away_clean_sheet": "{away} clean sheet",
    "away_win_to_nil": "{away} to win to nil",
}


class Presenter:
    """Turns derived markets into the response body. No arithmetic beyond formatting."""

    def __init__(self, match: MatchInput):
        self.match = match
        self.names = {"home": match.home_team, "away": match.away_team, "league": match.league}

    def render(
        self,
        derived: DerivedMarkets,
        sources: Sequence[Dict[str, str]] = (),
        enrichment: Optional[FixtureEnrichment] = None,
    ) -> Dict[str, Any]:
        winner = self._winner(derived, enrichment)
        double_chance = self._double_chance(derived)
        draw_no_bet = self._draw_no_bet(derived)
        btts = self._btts(derived)
        goal_lines = self._lines(derived.goals, "Goals", "Goals")
        combos = self._combos(derived)
        result_combos = [o for o in combos if o.market != "Goals Combo"]
        goal_combos = [o for o in combos if o.market == "Goals Combo"]

        fh_goals = self._lines(derived.first_half_goals, "First Half Goals", "1st Half Goals")
        fh_result = self._first_half_result(derived)
        corners = self._lines(derived.corners, "Corners", "Total Corners")
        fh_corners = self._lines(derived.first_half_corners, "First Half Corners", "Halftime Corners")
        team_corners = self._team_corners(derived)
        cards = self._lines(derived.cards, "Cards", "Total Cards")
        fh_cards = self._lines(derived.first_half_cards, "First Half Cards", "Halftime Cards")
        handicaps = self._handicaps(derived)
        scores = self._scores(derived)
        team_goals = self._team_goals(derived)
        home_goals = [o for key, o in team_goals if key.startswith("home")]
        away_goals = [o for key, o in team_goals if key.startswith("away")]
        specials = self._player_specials()

        groups: Dict[str, MarketGroup] = {
            "goals": goal_lines + btts + goal_combos,
            "halftime": fh_goals + fh_result,
            "corners": corners + fh_corners + team_corners,
            "cards": cards + fh_cards,
            "handicaps": handicaps + draw_no_bet,
        }

        all_outcomes: MarketGroup = (
            winner
            + double_chance
            + result_combos
            + groups["goals"]
            + groups["halftime"]
            + groups["corners"]
            + groups["cards"]
            + groups["handicaps"]
            + scores
            + home_goals
            + away_goals
            + specials
        )
        popular_pool = winner + double_chance + btts + [
            o for o in goal_lines if o.outcome in ("Goals Over 2.5", "Goals Under 2.5")
        ]
        popular = sorted(popular_pool, key=lambda o: o.probability, reverse=True)[:POPULAR_LIMIT]

        aggregate = {
            "match": {
                "title": self.match.title,
                "home": self.match.home_team,
                "away": self.match.away_team,
                "league": self.match.league,
                "kickoff": enrichment.kickoff if enrichment else None,
                "venue": enrichment.venue if enrichment else None,
            },
            "source": {
                "providers": list(sources),
                "weights": {"model": W_MODEL, "expert": W_EXPERT},
                "external": "api-sports" if enrichment else None,
            },
            "methodology": METHODOLOGY,
            "all": _dump(all_outcomes),
            "popular": _dump(popular),
            "winner": {
                "full_time": _dump(winner),
                "double_chance": _dump(double_chance),
                "combos": _dump(result_combos),
            },
            "bookings": {
                "total": _dump(cards),
                "first_half": _dump(fh_cards),
                "specials": _dump(specials[:1]),
            },
            "goals_detail": {
                "totals": _dump(goal_lines),
                "btts": _dump(btts),
                "combos": _dump(goal_combos),
            },
            "halves": {
                "first_half_result": _dump(fh_result),
                "first_half_goals": _dump(fh_goals),
            },
            "corners_detail": {
                "total": _dump(corners),
                "first_half": _dump(fh_corners),
                "teams": _dump(team_corners),
            },
            "scores": _dump(scores),
            "handicaps_detail": {
                "lines": _dump(handicaps),
                "draw_no_bet": _dump(draw_no_bet),
            },
            "teams": {
                "home": _dump(home_goals),
                "away": _dump(away_goals),
            },
            "player_specials": _dump(specials),
            "expert_notes": (enrichment.advice if enrichment and enrichment.advice else DEFAULT_EXPERT_NOTES),
            "legend": dict(LEGEND),
        }

        body: Dict[str, Any] = {"success": True}
        body.update({name: _dump(group) for name, group in groups.items()})
        body["predictions"] = aggregate
        return body

    def _outcome(self, label: str, probability: float, market: str, odds: Optional[str] = None) -> Outcome:
        p = percent(probability)
        return Outcome(
            outcome=label.format(**self.names),
            probability=p,
            odds=odds if odds is not None else display_odds(p),
            market=market,
            suggestion=confidence_label(p),
            rationale=RATIONALES[market].format(**self.names),
        )

    def _winner(self, derived: DerivedMarkets, enrichment: Optional[FixtureEnrichment]) -> MarketGroup:
        ft = derived.full_time
        odds = {"home": None, "draw": None, "away": None}
        if enrichment is not None and enrichment.has_percentages:
            odds = {
                "home": display_odds(enrichment.home_percent),
                "draw": display_odds(enrichment.draw_percent),
                "away": display_odds(enrichment.away_percent),
            }
        return [
            self._outcome("1 = {home}", ft["home"], "1X2", odds["home"]),
            self._outcome("X = Draw", ft["draw"], "1X2", odds["draw"]),
            self._outcome("2 = {away}", ft["away"], "1X2", odds["away"]),
        ]

    def _double_chance(self, derived: DerivedMarkets) -> MarketGroup:
        dc = derived.double_chance
        return [
            self._outcome("1X = {home} or Draw", dc["1X"], "Double Chance"),
            self._outcome("X2 = {away} or Draw", dc["X2"], "Double Chance"),
            self._outcome("12 = {home} or {away}", dc["12"], "Double Chance"),
        ]

    def _draw_no_bet(self, derived: DerivedMarkets) -> MarketGroup:
        return [
            self._outcome("{home} (Draw No Bet)", derived.draw_no_bet["home"], "Draw No Bet"),
            self._outcome("{away} (Draw No Bet)", derived.draw_no_bet["away"], "Draw No Bet"),
        ]

    def _btts(self, derived: DerivedMarkets) -> MarketGroup:
        return [
            self._outcome("BTTS Yes", derived.btts["yes"], "BTTS"),
            self._outcome("BTTS No", derived.btts["no"], "BTTS"),
        ]

    def _lines(self, family: List[LineProbability], market: str, prefix: str) -> MarketGroup:
        outcomes: MarketGroup = []
        for entry in family:
            outcomes.append(self._outcome(f"{prefix} Over {entry.line}", entry.over, market))
            outcomes.append(self._outcome(f"{prefix} Under {entry.line}", entry.under, market))
        return outcomes

    def _combos(self, derived: DerivedMarkets) -> MarketGroup:
        outcomes: MarketGroup = []
        for combo in derived.combos:
            label, market = COMBO_LABELS[combo.key]
            outcomes.append(self._outcome(label, combo.probability, market))
        return outcomes

    def _first_half_result(self, derived: DerivedMarkets) -> MarketGroup:
        fh = derived.first_half_result
        return [
            self._outcome("1st Half: {home}", fh["home"], "First Half Result"),
            self._outcome("1st Half: Draw", fh["draw"], "First Half Result"),
            self._outcome("1st Half: {away}", fh["away"], "First Half Result"),
        ]

    def _team_corners(self, derived: DerivedMarkets) -> MarketGroup:
        return [
            self._outcome("Most Corners: {home}", derived.team_corners["home"], "Team Corners"),
            self._outcome("Most Corners: {away}", derived.team_corners["away"], "Team Corners"),
        ]

    def _handicaps(self, derived: DerivedMarkets) -> MarketGroup:
        return [
            self._outcome(HANDICAP_LABELS[key], probability, "Handicap")
            for key, probability in derived.handicaps.items()
        ]

    def _scores(self, derived: DerivedMarkets) -> MarketGroup:
        return [
            self._outcome(f"Correct Score {score}", probability, "Correct Score")
            for score, probability in derived.correct_scores.items()
        ]

    def _team_goals(self, derived: DerivedMarkets) -> List[Tuple[str, Outcome]]:
        return [
            (key, self._outcome(TEAM_GOAL_LABELS[key], probability, "Team Goals"))
            for key, probability in derived.team_goals.items()
        ]

    def _player_specials(self) -> MarketGroup:
        return [
            self._outcome(label, probability, "Player Specials", odds)
            for label, probability, odds in PLAYER_SPECIALS
        ]


def _dump(outcomes: Sequence[Outcome]) -> List[Dict[str, str]]:
    return [o.to_dict() for o in outcomes]
