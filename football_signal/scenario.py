"""
Scenario classifier.

Selects exactly one ScenarioTag per snapshot from an ordered rule table.
Rules are evaluated top to bottom and the first match wins, so precedence
is a property of the table: the blowout rule sits first and vetoes every
other scenario once a game is decided.
"""
import logging
from typing import Callable, NamedTuple, Optional

from football_signal.state import MatchSnapshot, ScenarioTag, TeamStrengthInfo

log = logging.getLogger("football_signal.scenario")

BLOWOUT_MARGIN = 3
STRONG_BEHIND_MIN_GAP = 10.0
STRONG_DRAW_XG_EDGE = 0.5


class ScenarioRule(NamedTuple):
    name: str
    predicate: Callable[[MatchSnapshot, Optional[TeamStrengthInfo]], bool]
    tag: ScenarioTag


# ═══════════════════════════════════════════════════════════════════════
#  Predicates
# ═══════════════════════════════════════════════════════════════════════

def _is_blowout(m: MatchSnapshot, s: Optional[TeamStrengthInfo]) -> bool:
    return abs(m.goal_diff) >= BLOWOUT_MARGIN


def _strong_trailing(m: MatchSnapshot, s: Optional[TeamStrengthInfo]) -> bool:
    if s is None or s.strength_gap < STRONG_BEHIND_MIN_GAP:
        return False
    return (s.is_home_strong and m.goal_diff < 0) or (s.is_away_strong and m.goal_diff > 0)


def _strong_drawing_on_top(m: MatchSnapshot, s: Optional[TeamStrengthInfo]) -> bool:
    if s is None or m.goal_diff != 0:
        return False
    return ((s.is_home_strong and m.xg_home > m.xg_away + STRONG_DRAW_XG_EDGE)
            or (s.is_away_strong and m.xg_away > m.xg_home + STRONG_DRAW_XG_EDGE))


def _strong_leading(m: MatchSnapshot, s: Optional[TeamStrengthInfo]) -> bool:
    if s is None:
        return False
    return (s.is_home_strong and m.goal_diff > 0) or (s.is_away_strong and m.goal_diff < 0)


def _scoreless_late(m: MatchSnapshot, s: Optional[TeamStrengthInfo]) -> bool:
    return m.total_goals == 0 and m.minute >= 70


def _low_scoring_in_debt(m: MatchSnapshot, s: Optional[TeamStrengthInfo]) -> bool:
    return m.total_goals <= 1 and m.xg_debt >= 1.5 and m.minute >= 75


def _xg_debt(m: MatchSnapshot, s: Optional[TeamStrengthInfo]) -> bool:
    return m.xg_debt >= 1.0


def _high_volume(m: MatchSnapshot, s: Optional[TeamStrengthInfo]) -> bool:
    return m.total_shots >= 20 and m.xg_total >= 2.0


# ═══════════════════════════════════════════════════════════════════════
#  Rule table (order is precedence)
# ═══════════════════════════════════════════════════════════════════════

SCENARIO_RULES: tuple[ScenarioRule, ...] = (
    ScenarioRule("blowout", _is_blowout, ScenarioTag.BLOWOUT),
    ScenarioRule("strong_trailing", _strong_trailing, ScenarioTag.STRONG_BEHIND),
    ScenarioRule("strong_drawing_on_top", _strong_drawing_on_top, ScenarioTag.STRONG_BEHIND),
    ScenarioRule("strong_leading", _strong_leading, ScenarioTag.WEAK_DEFEND),
    ScenarioRule("scoreless_late", _scoreless_late, ScenarioTag.DEADLOCK_BREAK),
    ScenarioRule("low_scoring_in_debt", _low_scoring_in_debt, ScenarioTag.DEADLOCK_BREAK),
    ScenarioRule("xg_debt", _xg_debt, ScenarioTag.OVER_SPRINT),
    ScenarioRule("high_volume", _high_volume, ScenarioTag.OVER_SPRINT),
)

DEFAULT_SCENARIO = ScenarioTag.BALANCED_LATE


def classify_scenario(
    match: MatchSnapshot,
    strength: Optional[TeamStrengthInfo] = None,
    rules: tuple[ScenarioRule, ...] = SCENARIO_RULES,
) -> ScenarioTag:
    """First matching rule's tag, else BALANCED_LATE.

    Args:
        match:    Match snapshot.
        strength: Optional standings-derived strength; without it the
                  STRONG_BEHIND / WEAK_DEFEND rules never fire.
        rules:    Ordered rule table.
    """
    for rule in rules:
        if rule.predicate(match, strength):
            log.debug("fixture=%s scenario=%s via %s", match.fixture_id, rule.tag.value, rule.name)
            return rule.tag
    return DEFAULT_SCENARIO


# ═══════════════════════════════════════════════════════════════════════
#  Display labels
# ═══════════════════════════════════════════════════════════════════════

_LABELS: dict[ScenarioTag, tuple[str, str]] = {
    ScenarioTag.OVER_SPRINT: ("Over sprint", "#22c55e"),
    ScenarioTag.STRONG_BEHIND: ("Favourite chasing", "#f97316"),
    ScenarioTag.DEADLOCK_BREAK: ("Deadlock break", "#eab308"),
    ScenarioTag.WEAK_DEFEND: ("Underdog defending", "#6366f1"),
    ScenarioTag.BLOWOUT: ("Blowout", "#6b7280"),
    ScenarioTag.BALANCED_LATE: ("Balanced late game", "#06b6d4"),
}


def scenario_label(tag: ScenarioTag) -> tuple[str, str]:
    """(label, colour) for dashboards."""
    return _LABELS[tag]
