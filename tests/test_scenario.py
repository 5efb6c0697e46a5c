import pytest

from football_signal.scenario import SCENARIO_RULES, ScenarioRule, classify_scenario, scenario_label
from football_signal.state import ScenarioTag, TeamStrengthInfo

HOME_STRONG = TeamStrengthInfo.from_strengths(85, 60)
AWAY_STRONG = TeamStrengthInfo.from_strengths(55, 88)


def test_team_strength_from_strengths() -> None:
    assert HOME_STRONG.is_home_strong
    assert not HOME_STRONG.is_away_strong
    assert HOME_STRONG.strength_gap == 25
    assert AWAY_STRONG.is_away_strong

    close = TeamStrengthInfo.from_strengths(80, 70)
    assert not close.is_home_strong and not close.is_away_strong
    weak = TeamStrengthInfo.from_strengths(65, 40)
    assert not weak.is_home_strong


@pytest.mark.parametrize(("home", "away"), [(4, 0), (0, 3), (5, 1)])
def test_blowout_vetoes_every_other_rule(make_match, home: int, away: int) -> None:
    match = make_match(minute=72, score_home=home, score_away=away)
    assert classify_scenario(match, HOME_STRONG) == ScenarioTag.BLOWOUT
    assert classify_scenario(match) == ScenarioTag.BLOWOUT


def test_strong_side_trailing(make_match) -> None:
    match = make_match(minute=80, score_home=0, score_away=1, shots_home=8, shots_away=4, xg_home=1.0, xg_away=0.4)
    assert classify_scenario(match, HOME_STRONG) == ScenarioTag.STRONG_BEHIND

    away_trailing = make_match(minute=80, score_home=1, score_away=0, shots_home=4, shots_away=8)
    assert classify_scenario(away_trailing, AWAY_STRONG) == ScenarioTag.STRONG_BEHIND


def test_strong_side_drawing_but_on_top(make_match) -> None:
    match = make_match(minute=80, score_home=1, score_away=1, shots_home=10, shots_away=4,
                       xg_home=1.9, xg_away=0.8)
    assert classify_scenario(match, HOME_STRONG) == ScenarioTag.STRONG_BEHIND


def test_strong_side_leading_is_weak_defend(make_match) -> None:
    match = make_match(minute=80, score_home=1, score_away=0, shots_home=10, shots_away=4,
                       xg_home=1.2, xg_away=0.3)
    assert classify_scenario(match, HOME_STRONG) == ScenarioTag.WEAK_DEFEND


def test_scoreless_late_is_deadlock(make_match) -> None:
    match = make_match(minute=72, shots_home=5, shots_away=4, xg_home=0.6, xg_away=0.4)
    assert classify_scenario(match) == ScenarioTag.DEADLOCK_BREAK


def test_low_scoring_with_debt_is_deadlock(make_match) -> None:
    match = make_match(minute=78, score_home=1, score_away=0)
    assert classify_scenario(match) == ScenarioTag.DEADLOCK_BREAK


def test_xg_debt_is_over_sprint(make_match) -> None:
    match = make_match(minute=70, score_home=1, score_away=1, shots_home=9, shots_away=7,
                       xg_home=1.9, xg_away=1.3)
    assert classify_scenario(match) == ScenarioTag.OVER_SPRINT


def test_high_volume_is_over_sprint(make_match) -> None:
    match = make_match(minute=70, score_home=2, score_away=1, shots_home=13, shots_away=9,
                       xg_home=2.0, xg_away=1.5)
    assert classify_scenario(match) == ScenarioTag.OVER_SPRINT


def test_defaults_to_balanced_late(make_match) -> None:
    match = make_match(minute=82, score_home=2, score_away=1, shots_home=6, shots_away=4,
                       xg_home=1.0, xg_away=0.5)
    assert classify_scenario(match) == ScenarioTag.BALANCED_LATE


def test_strength_rules_need_strength(make_match) -> None:
    match = make_match(minute=70, score_home=0, score_away=1, shots_home=5, shots_away=3,
                       xg_home=0.6, xg_away=0.4)
    assert classify_scenario(match) == ScenarioTag.BALANCED_LATE
    assert classify_scenario(match, HOME_STRONG) == ScenarioTag.STRONG_BEHIND


def test_custom_rule_table(make_match) -> None:
    rules = (ScenarioRule("always", lambda m, s: True, ScenarioTag.WEAK_DEFEND),)
    assert classify_scenario(make_match(), rules=rules) == ScenarioTag.WEAK_DEFEND
    assert classify_scenario(make_match(), rules=()) == ScenarioTag.BALANCED_LATE


def test_blowout_rule_comes_first() -> None:
    assert SCENARIO_RULES[0].tag == ScenarioTag.BLOWOUT


@pytest.mark.parametrize("tag", list(ScenarioTag))
def test_every_tag_has_a_label(tag: ScenarioTag) -> None:
    label, colour = scenario_label(tag)
    assert label
    assert colour.startswith("#")
