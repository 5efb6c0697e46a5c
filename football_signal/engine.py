"""
Late-match signal assembler.

One call per snapshot: classify the scenario, run the five component
scorers and the confidence estimator, then map (score, confidence, phase)
onto an action and, when actionable, a bet plan.

Phases (pure function of the minute):
    inactive   minute < 65      → always IGNORE, no bet plan
    warmup     65 ≤ minute < 80 → score capped at 75, at most WATCH
    active     minute ≥ 80      → BET / PREPARE / WATCH / IGNORE

Assumptions:
    1. The engine holds no state between calls. Drift detection relies on
       the caller passing previous-tick prices inside the MarketSnapshot.
    2. BLOWOUT vetoes every action regardless of score.
    3. The Poisson late-goal probability is reported next to the score,
       never folded into it.
    4. Feeds without 15-minute windows get them estimated from match
       totals for the Edge scorer. Confidence only credits windows the
       feed actually supplied.

No execution logic. No API calls. Pure model layer.
"""
import logging
import time
from typing import Optional

from football_signal.components import (
    data_age_seconds,
    score_base,
    score_edge,
    score_market,
    score_quality,
    score_timing,
)
from football_signal.config import DEFAULT_THRESHOLDS, RECENT_AGE_S, SignalThresholds
from football_signal.confidence import compute_confidence
from football_signal.model import late_goal_probability
from football_signal.scenario import classify_scenario
from football_signal.state import (
    Action,
    BetPlan,
    EdgeScore,
    MarketSnapshot,
    MatchSnapshot,
    Phase,
    ScenarioTag,
    ScoreBreakdown,
    Signal,
    SignalReasons,
    TeamStrengthInfo,
)

log = logging.getLogger("football_signal.engine")

MODULE_VERSION = "v1.0"


# ═══════════════════════════════════════════════════════════════════════
#  Phase helpers
# ═══════════════════════════════════════════════════════════════════════

def phase_for_minute(minute: float, thresholds: SignalThresholds = DEFAULT_THRESHOLDS) -> Phase:
    if minute < thresholds.warmup_minute:
        return Phase.INACTIVE
    if minute < thresholds.active_minute:
        return Phase.WARMUP
    return Phase.ACTIVE


def should_trigger(minute: float, thresholds: SignalThresholds = DEFAULT_THRESHOLDS) -> bool:
    """True once the match has entered the late window."""
    return minute >= thresholds.warmup_minute


def is_worth_watching(signal: Signal) -> bool:
    return signal.action != Action.IGNORE and signal.scenario_tag != ScenarioTag.BLOWOUT


# ═══════════════════════════════════════════════════════════════════════
#  Action + bet plan
# ═══════════════════════════════════════════════════════════════════════

def decide_action(
    score: float,
    confidence: float,
    phase: Phase,
    scenario: ScenarioTag,
    thresholds: SignalThresholds = DEFAULT_THRESHOLDS,
) -> Action:
    """First matching gate wins: blowout, inactive, warm-up, active tiers."""
    if scenario == ScenarioTag.BLOWOUT:
        return Action.IGNORE
    if phase == Phase.INACTIVE:
        return Action.IGNORE

    t = thresholds
    if phase == Phase.WARMUP:
        if score >= t.warmup_min_score and confidence >= t.warmup_min_confidence:
            return Action.WATCH
        return Action.IGNORE

    if score >= t.bet_score and confidence >= t.bet_confidence:
        return Action.BET
    if score >= t.prepare_score and confidence >= t.prepare_confidence:
        return Action.PREPARE
    if score >= t.watch_score:
        return Action.WATCH
    return Action.IGNORE


def _odds_floor(confidence: float) -> float:
    if confidence >= 80:
        return 1.50
    if confidence >= 70:
        return 1.65
    return 1.80


def _stake_pct(action: Action, confidence: float) -> float:
    if action == Action.BET:
        return 2.0 if confidence >= 80 else 1.5
    return 1.0 if confidence >= 65 else 0.5


def _ttl_minutes(minute: float) -> int:
    if minute >= 88:
        return 2
    if minute >= 85:
        return 3
    if minute >= 80:
        return 5
    return 8


def build_bet_plan(
    action: Action,
    confidence: float,
    minute: float,
    phase: Phase,
    scenario: ScenarioTag,
    market: Optional[MarketSnapshot],
    strength: Optional[TeamStrengthInfo] = None,
) -> Optional[BetPlan]:
    """Bet plan for BET / PREPARE in the active phase, else None.

    Over/under on the quoted line by default (2.5 if unknown). A favourite
    chasing with a known handicap line plays the Asian handicap on the
    strong side; an underdog defending plays the under.
    """
    if phase != Phase.ACTIVE or action not in (Action.BET, Action.PREPARE):
        return None

    market_type = "OU"
    selection = "OVER"
    line = market.ou_line if market is not None and market.ou_line is not None else 2.5

    if scenario == ScenarioTag.STRONG_BEHIND:
        if market is not None and market.ah_line is not None:
            market_type = "AH"
            line = market.ah_line
            selection = "HOME" if strength is not None and strength.is_home_strong else "AWAY"
    elif scenario == ScenarioTag.WEAK_DEFEND:
        selection = "UNDER"

    return BetPlan(
        market=market_type,
        line=line,
        selection=selection,
        odds_min=_odds_floor(confidence),
        stake_pct=_stake_pct(action, confidence),
        ttl_minutes=_ttl_minutes(minute),
    )


# ═══════════════════════════════════════════════════════════════════════
#  Tags + reasons
# ═══════════════════════════════════════════════════════════════════════

def build_tags(
    match: MatchSnapshot,
    scenario: ScenarioTag,
    edge: EdgeScore,
    is_warmup: bool,
) -> tuple[str, ...]:
    tags = [scenario.value]
    if is_warmup:
        tags.append("WARMUP")

    minute = match.minute
    if minute >= 88:
        tags.append("INJURY_TIME")
    elif minute >= 85:
        tags.append("FINAL_PUSH")
    elif minute >= 80:
        tags.append("LATE_STAGE")
    elif minute >= 70:
        tags.append("WARMING_UP")

    abs_diff = abs(match.goal_diff)
    if match.total_goals == 0:
        tags.append("SCORELESS")
    if abs_diff == 1 and minute >= 80:
        tags.append("ONE_GOAL_GAME")
    if abs_diff == 0 and minute >= 75:
        tags.append("DRAW_PRESSURE")

    if edge.pressure_index >= 10:
        tags.append("HIGH_PRESSURE")
    if edge.xg_velocity >= 6:
        tags.append("XG_SURGE")

    if match.xg_debt >= 1.5:
        tags.append("XG_DEBT_HIGH")
    elif match.xg_debt >= 1.0:
        tags.append("XG_DEBT")

    return tuple(tags)


def _line_movement(market: Optional[MarketSnapshot]) -> Optional[str]:
    if market is None or not market.over_odds_prev or not market.over_odds:
        return None
    change = market.over_odds - market.over_odds_prev
    if change < -0.05:
        return "DOWN"
    if change > 0.05:
        return "UP"
    return "STABLE"


def _market_sentiment(market: Optional[MarketSnapshot]) -> Optional[str]:
    if market is None or not market.win_home or not market.win_away:
        return None
    if market.win_home < market.win_away - 0.3:
        return "HOME_FAVORED"
    if market.win_away < market.win_home - 0.3:
        return "AWAY_FAVORED"
    return "BALANCED"


def build_reasons(
    match: MatchSnapshot,
    market: Optional[MarketSnapshot],
    tags: tuple[str, ...],
    now: float,
) -> SignalReasons:
    """Echo the raw inputs behind a signal so it can be audited later."""
    minute = match.minute
    if match.goal_diff > 0:
        status = "home_leading"
    elif match.goal_diff < 0:
        status = "away_leading"
    else:
        status = "draw"

    shots_last_15 = match.shots_last_15 or 0
    shots_prev_15 = match.shots_prev_15 or 0
    xg_last_15 = match.xg_last_15 or 0.0

    shots_diff = match.shots_home - match.shots_away
    if shots_diff > 5:
        pressure_direction = "HOME"
    elif shots_diff < -5:
        pressure_direction = "AWAY"
    else:
        pressure_direction = "BALANCED"

    shots_delta = shots_last_15 - shots_prev_15
    if shots_delta > 2:
        momentum = "INCREASING"
    elif shots_delta < -2:
        momentum = "DECREASING"
    else:
        momentum = "STABLE"

    over = market.over_odds if market is not None else None
    age = data_age_seconds(match, now)

    return SignalReasons(
        tags=tags,
        state={
            "minute": minute,
            "score_home": match.score_home,
            "score_away": match.score_away,
            "status": status,
            "score_diff": match.goal_diff,
            "is_second_half": minute > 45,
            "is_injury_time": minute > 90,
        },
        stats={
            "shots_total": match.total_shots,
            "shots_on_total": match.total_shots_on,
            "shot_accuracy": match.shot_accuracy,
            "xg_home": match.xg_home,
            "xg_away": match.xg_away,
            "xg_total": match.xg_total,
            "xg_debt": match.xg_debt,
            "corners_total": match.total_corners,
            "possession_home": match.possession_home,
            "possession_away": match.possession_away,
            "dangerous_attacks_home": match.dangerous_home,
            "dangerous_attacks_away": match.dangerous_away,
        },
        market={
            "over_odds": over,
            "under_odds": market.under_odds if market is not None else None,
            "ah_line": market.ah_line if market is not None else None,
            "ah_home": market.ah_home if market is not None else None,
            "ah_away": market.ah_away if market is not None else None,
            "implied_over_prob": round(100 * 0.95 / over) if over else None,
            "line_movement": _line_movement(market),
            "market_sentiment": _market_sentiment(market),
        },
        deltas={
            "shots_last_15": shots_last_15,
            "shots_delta": shots_delta,
            "xg_last_15": xg_last_15,
            "xg_velocity": xg_last_15 if minute > 15 else 0.0,
            "corners_last_15": match.corners_last_15 or 0,
            "pressure_direction": pressure_direction,
            "momentum_trend": momentum,
        },
        checks={
            "has_stats": match.stats_available,
            "has_events": match.events_available,
            "has_odds": market is not None,
            "stats_fresh": age is not None and age < RECENT_AGE_S,
        },
    )


# ═══════════════════════════════════════════════════════════════════════
#  Entry point
# ═══════════════════════════════════════════════════════════════════════

def compute_signal(
    match: MatchSnapshot,
    market: Optional[MarketSnapshot] = None,
    strength: Optional[TeamStrengthInfo] = None,
    thresholds: SignalThresholds = DEFAULT_THRESHOLDS,
    now: Optional[float] = None,
) -> Signal:
    """Score one match snapshot.

    Args:
        match:      Current match snapshot.
        market:     Current market snapshot (with previous-tick prices),
                    or None when no odds are available.
        strength:   Standings-derived strength, or None.
        thresholds: Phase boundaries and action gates.
        now:        Epoch seconds used to age the data; defaults to the
                    wall clock.

    Returns:
        A fresh Signal. Never raises on missing data.
    """
    now = time.time() if now is None else now

    phase = phase_for_minute(match.minute, thresholds)
    is_warmup = phase == Phase.WARMUP
    scenario = classify_scenario(match, strength)

    base = score_base(match, thresholds)
    edge = score_edge(match.with_estimated_windows(), scenario, strength)
    timing = score_timing(match, is_warmup, thresholds)
    market_score = score_market(match, market, scenario)
    quality = score_quality(match, now)
    breakdown = ScoreBreakdown(base=base, edge=edge, timing=timing,
                               market=market_score, quality=quality)

    score = breakdown.raw_total
    if is_warmup:
        score = min(score, thresholds.warmup_score_cap)
    score = max(0.0, min(100.0, score))

    confidence = compute_confidence(match, market, quality, scenario, is_warmup, thresholds)
    action = decide_action(score, confidence.total, phase, scenario, thresholds)
    bet_plan = build_bet_plan(action, confidence.total, match.minute, phase,
                              scenario, market, strength)

    tags = build_tags(match, scenario, edge, is_warmup)
    reasons = build_reasons(match, market, tags, now)

    signal = Signal(
        fixture_id=match.fixture_id,
        minute=match.minute,
        score=score,
        confidence=confidence.total,
        action=action,
        scenario_tag=scenario,
        phase=phase,
        is_warmup=is_warmup,
        poisson_goal_prob=late_goal_probability(match.xg_total, match.minute, match.goal_diff),
        score_breakdown=breakdown,
        confidence_breakdown=confidence,
        reasons=reasons,
        bet_plan=bet_plan,
        team_strength=strength,
        captured_at=now,
        version=MODULE_VERSION,
    )

    log.debug(
        "fixture=%s min=%.0f scenario=%s score=%.1f conf=%.0f → %s",
        match.fixture_id, match.minute, scenario.value, score, confidence.total, action.value,
    )
    if action in (Action.BET, Action.PREPARE):
        log.info("%s: %s", action.value, signal)

    return signal


# ═══════════════════════════════════════════════════════════════════════
#  Self-test
# ═══════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG, format="%(message)s")

    now_ts = time.time()
    live_market = MarketSnapshot(over_odds=1.55, under_odds=2.40, ou_line=2.5, over_odds_prev=1.70)

    cases = [
        # (label, snapshot)
        ("0-0 85′, xG 2.9", MatchSnapshot(
            fixture_id=1, minute=85, xg_home=1.8, xg_away=1.1,
            shots_home=12, shots_away=9, shots_on_home=6, shots_on_away=4,
            data_timestamp=now_ts)),
        ("1-1 72′ warm-up", MatchSnapshot(
            fixture_id=2, minute=72, score_home=1, score_away=1, xg_home=1.4, xg_away=0.9,
            shots_home=11, shots_away=7, shots_on_home=5, shots_on_away=3,
            data_timestamp=now_ts)),
        ("4-0 72′ blowout", MatchSnapshot(fixture_id=3, minute=72, score_home=4)),
        ("0-1 88′ chasing", MatchSnapshot(
            fixture_id=4, minute=88, score_away=1, xg_home=2.2, xg_away=0.6,
            shots_home=18, shots_away=5, shots_on_home=8, shots_on_away=2,
            data_timestamp=now_ts)),
    ]

    print("=" * 72)
    print("  LATE SIGNAL ENGINE: SELF-TEST")
    print("=" * 72)
    for label, snap in cases:
        sig = compute_signal(snap, live_market, now=now_ts)
        print(f"  {label:<20} {sig}")
        if sig.bet_plan:
            print(f"  {'':<20} plan: {sig.bet_plan}")
    print("=" * 72)
