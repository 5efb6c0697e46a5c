import pytest

from football_signal.components import (
    data_age_seconds,
    round_half_up,
    score_base,
    score_edge,
    score_market,
    score_quality,
    score_timing,
    urgency_bonus,
)
from football_signal.config import SignalThresholds
from football_signal.state import ScenarioTag, TeamStrengthInfo


def test_round_half_up_is_not_bankers_rounding() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4) == 2
    assert round_half_up(0.5) == 1


def test_data_age_seconds(make_match, now) -> None:
    assert data_age_seconds(make_match(), now) is None
    assert data_age_seconds(make_match(data_timestamp=now - 42), now) == 42


# ── Base ────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    ("minute", "home", "away", "expected"),
    [
        (79, 0, 0, 0.0),
        (84, 1, 1, 10.0),
        (86, 0, 0, 16.0),
        (84, 0, 1, 14.0),
        (84, 1, 0, 7.0),
        (90, 0, 2, 6.0),
        (90, 2, 0, 0.0),
    ],
)
def test_urgency_bonus(minute: float, home: int, away: int, expected: float) -> None:
    assert urgency_bonus(minute, home, away) == pytest.approx(expected)


def test_base_scoreless_late(make_match) -> None:
    base = score_base(make_match())
    assert base.score_state == 8
    assert base.goals_bonus == 5
    assert base.urgency_bonus == pytest.approx(15.5)
    assert base.total == pytest.approx(17.0)
    assert base.is_draw


def test_base_one_goal_game(make_match) -> None:
    base = score_base(make_match(minute=90, score_home=1, score_away=0))
    assert base.total == pytest.approx(5 + 6 + 10 / 3)
    assert not base.is_draw


def test_base_stays_within_range(make_match) -> None:
    for home, away in [(0, 0), (1, 0), (2, 2), (5, 0)]:
        for minute in (30, 70, 85, 95):
            base = score_base(make_match(minute=minute, score_home=home, score_away=away))
            assert 0 <= base.total <= 20


# ── Edge ────────────────────────────────────────────────────────────────

def test_edge_without_windows(make_match) -> None:
    edge = score_edge(make_match(), ScenarioTag.DEADLOCK_BREAK)
    assert edge.pressure_index == 0
    assert edge.xg_velocity == 0
    assert edge.shot_quality == 4
    assert edge.strength_gap == 0
    assert edge.trailing_pressure == 4
    assert edge.scenario_bonus == 8
    assert edge.total == pytest.approx(16.0)


def test_edge_with_windows_is_clamped(make_match) -> None:
    match = make_match(shots_last_15=6, xg_last_15=0.5, corners_last_15=2)
    edge = score_edge(match, ScenarioTag.DEADLOCK_BREAK)
    assert edge.pressure_index == pytest.approx(7 + 4.5 / 7 * 3)
    assert edge.xg_velocity == pytest.approx(5.5)
    assert edge.total == 30
    assert "high pressure" in edge.description[0]


def test_edge_blowout_penalty_never_goes_negative(make_match) -> None:
    match = make_match(minute=72, score_home=4, shots_home=0, shots_away=0,
                       shots_on_home=0, shots_on_away=0, xg_home=0, xg_away=0)
    edge = score_edge(match, ScenarioTag.BLOWOUT)
    assert edge.scenario_bonus == -5
    assert edge.total == 0


def test_edge_strong_behind_uses_raw_strength_gap(make_match) -> None:
    strength = TeamStrengthInfo.from_strengths(85, 60)
    match = make_match(minute=82, score_home=0, score_away=1)
    edge = score_edge(match, ScenarioTag.STRONG_BEHIND, strength)
    assert edge.strength_gap == 5
    assert edge.scenario_bonus == 10
    assert edge.trailing_pressure == 5

    close = TeamStrengthInfo.from_strengths(80, 68)
    assert score_edge(match, ScenarioTag.STRONG_BEHIND, close).scenario_bonus == 7


def test_edge_over_sprint_bonus_scales_with_debt(make_match) -> None:
    match = make_match(score_home=1, score_away=1, xg_home=2.0, xg_away=1.2)
    assert score_edge(match, ScenarioTag.OVER_SPRINT).scenario_bonus == pytest.approx(4.8)


# ── Timing ──────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    ("minute", "window"),
    [(60, 0.0), (65, 2.0), (70, 5.0), (75, 8.0), (80, 12.0), (85, 16.0), (90, 20.0), (97, 20.0)],
)
def test_timing_window_curve(make_match, minute: float, window: float) -> None:
    timing = score_timing(make_match(minute=minute, score_home=3), is_warmup=False)
    assert timing.window_score == pytest.approx(window)


def test_timing_urgency_only_when_active(make_match) -> None:
    active = score_timing(make_match(minute=85), is_warmup=False)
    assert active.urgency_bonus == 3
    assert active.total == pytest.approx(19.0)
    assert active.is_peak_window

    warm = score_timing(make_match(minute=78), is_warmup=True)
    assert warm.urgency_bonus == 0
    assert not warm.is_peak_window


def test_timing_urgency_tiers(make_match) -> None:
    assert score_timing(make_match(minute=88, score_home=1), False).urgency_bonus == 4
    assert score_timing(make_match(minute=83, score_home=1), False).urgency_bonus == 2
    assert score_timing(make_match(minute=83, score_home=2), False).urgency_bonus == 0


def test_timing_follows_injected_phase_bounds(make_match) -> None:
    shifted = SignalThresholds(warmup_minute=70, active_minute=85)

    assert score_timing(make_match(minute=67, score_home=3), False, shifted).window_score == 0

    before_active = score_timing(make_match(minute=83, score_home=1), False, shifted)
    assert before_active.urgency_bonus == 0
    assert not before_active.is_peak_window

    late = score_timing(make_match(minute=88, score_home=1), False, shifted)
    assert late.urgency_bonus == 4
    assert late.is_peak_window


def test_base_urgency_starts_with_active_phase(make_match) -> None:
    shifted = SignalThresholds(active_minute=85)
    assert score_base(make_match(minute=82)).urgency_bonus == pytest.approx(9.0)
    assert score_base(make_match(minute=82), shifted).urgency_bonus == 0
    assert score_base(make_match(minute=86), shifted).urgency_bonus == pytest.approx(13.5)


# ── Market ──────────────────────────────────────────────────────────────

def test_market_absent(make_match) -> None:
    market = score_market(make_match(), None, ScenarioTag.DEADLOCK_BREAK)
    assert market.total == 0
    assert market.has_data is False


def test_market_price_and_consistency(make_match, make_market) -> None:
    market = score_market(make_match(), make_market(), ScenarioTag.DEADLOCK_BREAK)
    assert market.line_movement == 0
    assert market.price_drift == 4
    assert market.consistency == 6
    assert market.total == pytest.approx(10.0)
    assert market.has_data


def test_market_line_movement(make_match, make_market) -> None:
    market = score_market(make_match(), make_market(over_odds_prev=1.70), ScenarioTag.DEADLOCK_BREAK)
    assert market.line_movement == pytest.approx(5.0)
    assert market.total == pytest.approx(15.0)


def test_market_total_is_capped(make_match, make_market) -> None:
    market = score_market(
        make_match(), make_market(over_odds=1.45, over_odds_prev=2.2), ScenarioTag.OVER_SPRINT,
    )
    assert market.total == 20


def test_market_strong_behind_handicap_split(make_match, make_market) -> None:
    snap = make_market(over_odds=1.95, ah_line=-0.5, ah_home=1.70, ah_away=2.10)
    market = score_market(make_match(), snap, ScenarioTag.STRONG_BEHIND)
    assert market.consistency == 4
    assert market.price_drift == 0


# ── Quality ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    ("age", "freshness"),
    [(10, 3.0), (90, 1.0), (200, 0.0), (400, -3.0)],
)
def test_quality_freshness_bands(make_match, now, age: float, freshness: float) -> None:
    quality = score_quality(make_match(data_timestamp=now - age), now)
    assert quality.freshness == freshness
    assert quality.total == pytest.approx(5 + freshness)


def test_quality_without_timestamp(make_match, now) -> None:
    quality = score_quality(make_match(), now)
    assert quality.freshness == 0
    assert quality.total == 5


def test_quality_zero_shots_anomaly(make_match, now) -> None:
    quality = score_quality(make_match(minute=40, shots_home=0, shots_away=0), now)
    assert quality.anomaly_penalty == -5
    assert quality.total == 0

    early = score_quality(make_match(minute=25, shots_home=0, shots_away=0), now)
    assert early.anomaly_penalty == 0


def test_quality_floor(make_match, now) -> None:
    match = make_match(minute=60, shots_home=0, shots_away=0, stats_available=False,
                       events_available=False, data_timestamp=now - 900)
    quality = score_quality(match, now)
    assert quality.data_completeness == -5
    assert quality.total == -10
