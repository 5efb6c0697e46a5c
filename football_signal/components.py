"""
Component scorers: Base, Edge, Timing, Market, Quality.

Each scorer is a pure function of the match snapshot, the scenario tag and,
where relevant, the market snapshot or team strength. Each returns a
bounded total plus the sub-terms behind it. Missing inputs degrade to a
neutral contribution; nothing here raises on absent data.

Ranges:
    Base      0 – 20
    Edge      0 – 30   (scenario bonus may be negative inside the sum)
    Timing    0 – 20   window, plus up to 4 urgency when active
    Market    0 – 20   (has_data=False without a market snapshot)
    Quality −10 – +10
"""
import math
from typing import Optional

from football_signal.config import DEFAULT_THRESHOLDS, FRESH_AGE_S, RECENT_AGE_S, STALE_AGE_S, SignalThresholds
from football_signal.mappers import (
    PiecewiseLinearMapper,
    over_odds_change_to_score,
    pressure_index,
    score_diff_to_base,
    xg_velocity_to_score,
)
from football_signal.state import (
    BaseScore,
    EdgeScore,
    MarketScore,
    MarketSnapshot,
    MatchSnapshot,
    QualityScore,
    ScenarioTag,
    TeamStrengthInfo,
    TimingScore,
)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def data_age_seconds(match: MatchSnapshot, now: float) -> Optional[float]:
    """Seconds since the upstream data was captured, or None if unknown."""
    if match.data_timestamp is None:
        return None
    return now - match.data_timestamp


# ═══════════════════════════════════════════════════════════════════════
#  Base (0–20)
# ═══════════════════════════════════════════════════════════════════════

def urgency_bonus(minute: float, score_home: int, score_away: int, start_minute: float = 80) -> float:
    """Late-game will-to-score bonus, active from start_minute (80′) onward.

    Level games and one-goal games grow more urgent by 0.5 per minute;
    a home side chasing one goal is the most urgent; a 0-0 at 85′+ adds 5.
    """
    if minute < start_minute:
        return 0.0

    diff = score_home - score_away
    abs_diff = abs(diff)
    time_urgency = (minute - start_minute) * 0.5

    if abs_diff == 0:
        bonus = 8 + time_urgency
    elif abs_diff == 1:
        bonus = (12 + time_urgency) if diff < 0 else (5 + time_urgency)
    else:
        bonus = 6.0 if diff < 0 else 0.0

    if score_home == 0 and score_away == 0 and minute >= 85:
        bonus += 5

    return bonus


def _goals_openness(total_goals: int) -> float:
    if total_goals == 0:
        return 5.0
    if total_goals == 1:
        return 6.0
    if total_goals == 2:
        return 5.0
    if total_goals == 3:
        return 3.0
    return 1.0


def score_base(match: MatchSnapshot, thresholds: SignalThresholds = DEFAULT_THRESHOLDS) -> BaseScore:
    """Scoreline state + openness + urgency (urgency/3, at most 4).

    Urgency starts with the active phase (thresholds.active_minute).
    """
    state = score_diff_to_base(match.goal_diff, match.total_goals)
    goals = _goals_openness(match.total_goals)
    urgency = urgency_bonus(match.minute, match.score_home, match.score_away,
                            start_minute=thresholds.active_minute)

    total = min(20.0, state + goals + min(4.0, urgency / 3))

    description = []
    if match.goal_diff == 0:
        description.append("level game")
    if urgency >= 8:
        description.append(f"late urgency ({urgency:.1f})")

    return BaseScore(
        total=total,
        score_state=state,
        goals_bonus=goals,
        urgency_bonus=urgency,
        total_goals=match.total_goals,
        goal_diff=match.goal_diff,
        is_draw=match.goal_diff == 0,
        description=tuple(description),
    )


# ═══════════════════════════════════════════════════════════════════════
#  Edge (0–30)
# ═══════════════════════════════════════════════════════════════════════

def _shot_quality(accuracy: float) -> float:
    if accuracy >= 50:
        return 6.0
    if accuracy >= 40:
        return 4.0
    if accuracy >= 30:
        return 2.0
    return 0.0


def _trailing_pressure(abs_diff: int, minute: float) -> float:
    if abs_diff == 1:
        if minute >= 85:
            return 6.0
        if minute >= 80:
            return 5.0
        return 3.0
    if abs_diff == 0 and minute >= 80:
        return 4.0
    if abs_diff == 2 and minute >= 85:
        return 2.0
    return 0.0


def _scenario_bonus(
    scenario: ScenarioTag,
    match: MatchSnapshot,
    strength: Optional[TeamStrengthInfo],
) -> float:
    if scenario == ScenarioTag.OVER_SPRINT:
        return min(10.0, match.xg_debt * 4)
    if scenario == ScenarioTag.STRONG_BEHIND:
        gap = strength.strength_gap if strength is not None else 0.0
        if gap >= 15:
            return 10.0
        if gap >= 10:
            return 7.0
        return 4.0
    if scenario == ScenarioTag.DEADLOCK_BREAK:
        if match.total_goals == 0 and match.xg_total >= 1.5:
            return 8.0
        return 5.0
    if scenario == ScenarioTag.WEAK_DEFEND:
        return 3.0
    if scenario == ScenarioTag.BLOWOUT:
        return -5.0
    return 2.0


def score_edge(
    match: MatchSnapshot,
    scenario: ScenarioTag,
    strength: Optional[TeamStrengthInfo] = None,
) -> EdgeScore:
    """Attacking edge for the late window.

    Sums recent pressure, xG velocity, shot quality, strength gap, trailing
    pressure and a scenario bonus (negative for BLOWOUT), clamped to 0–30.
    Missing 15-minute windows count as zero.
    """
    shots_last_15 = match.shots_last_15 or 0
    xg_last_15 = match.xg_last_15 or 0.0
    corners_last_15 = match.corners_last_15 or 0

    # Shots on target are not tracked per window: estimate 40% of shots
    pressure = pressure_index(
        shots_last_15,
        round_half_up(shots_last_15 * 0.4),
        xg_last_15,
        corners_last_15,
    )
    velocity = xg_velocity_to_score(xg_last_15)
    quality = _shot_quality(match.shot_accuracy)
    gap = min(8.0, strength.strength_gap / 5) if strength is not None else 0.0
    trailing = _trailing_pressure(abs(match.goal_diff), match.minute)
    bonus = _scenario_bonus(scenario, match, strength)

    total = pressure + velocity + quality + gap + trailing + bonus

    description = []
    if pressure >= 8:
        description.append(f"high pressure ({pressure:.1f}/12)")
    if velocity >= 5:
        description.append("xG rising fast")
    if quality >= 4:
        description.append("good shot quality")
    if gap >= 5:
        description.append("clear strength gap")
    if trailing >= 4:
        description.append("chasing pressure")
    if bonus >= 6:
        description.append(f"scenario favourable ({scenario.value})")
    elif bonus < 0:
        description.append(f"scenario penalty ({scenario.value})")

    return EdgeScore(
        total=max(0.0, min(30.0, total)),
        pressure_index=pressure,
        xg_velocity=velocity,
        shot_quality=quality,
        strength_gap=gap,
        trailing_pressure=trailing,
        scenario_bonus=bonus,
        description=tuple(description),
    )


# ═══════════════════════════════════════════════════════════════════════
#  Timing (0–20 + urgency)
# ═══════════════════════════════════════════════════════════════════════

late_window_to_score = PiecewiseLinearMapper(
    [
        (65, 75, 2, 8),     # warm-up
        (75, 80, 8, 12),    # build-up
        (80, 85, 12, 16),   # golden window
        (85, 90, 16, 20),   # final push
    ],
    cap=20,                 # stoppage time
    name="late_window_to_score",
)


def _timing_urgency(minute: float, abs_diff: int) -> float:
    if minute >= 88 and abs_diff <= 1:
        return 4.0
    if minute >= 85 and abs_diff == 0:
        return 3.0
    if minute >= 82 and abs_diff == 1:
        return 2.0
    return 0.0


def score_timing(
    match: MatchSnapshot,
    is_warmup: bool,
    thresholds: SignalThresholds = DEFAULT_THRESHOLDS,
) -> TimingScore:
    """Late-window curve (2 at 65′ → 20 at 90′+) plus urgency when active.

    The curve is calibrated on absolute minutes; the phase thresholds only
    decide where window credit starts and where the peak window opens.
    Clock urgency is never paid before the active phase.
    """
    minute = match.minute
    active = not is_warmup and minute >= thresholds.active_minute
    window = 0.0 if minute < thresholds.warmup_minute else late_window_to_score(minute)
    urgency = _timing_urgency(minute, abs(match.goal_diff)) if active else 0.0
    is_peak = thresholds.active_minute <= minute <= 90

    description = []
    if is_peak:
        description.append("peak window")
    if urgency > 0:
        description.append(f"clock urgency (+{urgency:.0f})")

    return TimingScore(
        total=window + urgency,
        minute=minute,
        window_score=window,
        is_peak_window=is_peak,
        urgency_bonus=urgency,
        description=tuple(description),
    )


# ═══════════════════════════════════════════════════════════════════════
#  Market (0–20)
# ═══════════════════════════════════════════════════════════════════════

NO_MARKET = MarketScore(
    total=0.0,
    line_movement=0.0,
    price_drift=0.0,
    consistency=0.0,
    has_data=False,
    description=("no market data",),
)


def _price_drift(over_odds: Optional[float]) -> float:
    if not over_odds:
        return 0.0
    if over_odds < 1.5:
        return 6.0
    if over_odds < 1.65:
        return 4.0
    if over_odds < 1.8:
        return 2.0
    return 0.0


def _consistency(match: MatchSnapshot, market: MarketSnapshot, scenario: ScenarioTag) -> float:
    over = market.over_odds
    if scenario in (ScenarioTag.OVER_SPRINT, ScenarioTag.DEADLOCK_BREAK):
        if match.xg_debt > 1.0 and over and over < 1.8:
            return 6.0
        if match.xg_debt > 0.5 and over and over < 2.0:
            return 3.0
    elif scenario == ScenarioTag.STRONG_BEHIND:
        if market.ah_home and market.ah_away and abs(market.ah_home - market.ah_away) > 0.2:
            return 4.0
    return 0.0


def score_market(
    match: MatchSnapshot,
    market: Optional[MarketSnapshot],
    scenario: ScenarioTag,
) -> MarketScore:
    """Line movement + price level + stats/market agreement.

    Without a market snapshot the component is zero with has_data=False.
    """
    if market is None:
        return NO_MARKET

    movement = over_odds_change_to_score(market.over_odds_prev, market.over_odds)
    drift = _price_drift(market.over_odds)
    consistency = _consistency(match, market, scenario)

    description = []
    if movement > 0:
        description.append(f"over price shortening (+{movement:.1f})")
    if drift >= 4:
        description.append(f"over priced short ({market.over_odds:.2f})")
    if consistency > 0:
        description.append("stats and market agree")

    return MarketScore(
        total=min(20.0, movement + drift + consistency),
        line_movement=movement,
        price_drift=drift,
        consistency=consistency,
        has_data=True,
        description=tuple(description),
    )


# ═══════════════════════════════════════════════════════════════════════
#  Quality (−10 – +10)
# ═══════════════════════════════════════════════════════════════════════

ANOMALY_MINUTE = 30


def score_quality(match: MatchSnapshot, now: float) -> QualityScore:
    """Data completeness and freshness, minus anomaly penalties.

    Args:
        match: Snapshot under evaluation.
        now:   Epoch seconds used to age ``match.data_timestamp``.
    """
    completeness = 0.0
    if match.stats_available:
        completeness += 3
    if match.events_available:
        completeness += 2
    if not match.stats_available and not match.events_available:
        completeness = -5.0

    freshness = 0.0
    age = data_age_seconds(match, now)
    if age is not None:
        if age < FRESH_AGE_S:
            freshness = 3.0
        elif age < RECENT_AGE_S:
            freshness = 1.0
        elif age > STALE_AGE_S:
            freshness = -3.0

    # No shots at all this deep into a match means the feed is broken
    anomaly = -5.0 if match.minute > ANOMALY_MINUTE and match.total_shots == 0 else 0.0

    description = []
    if completeness < 0:
        description.append("no stats or events")
    if freshness < 0:
        description.append(f"stale data ({age:.0f}s)")
    if anomaly < 0:
        description.append(f"zero shots after {ANOMALY_MINUTE}′")

    return QualityScore(
        total=max(-10.0, min(10.0, completeness + freshness + anomaly)),
        data_completeness=completeness,
        freshness=freshness,
        anomaly_penalty=anomaly,
        description=tuple(description),
    )
