"""
Confidence estimator.

How much the score can be trusted, independent of how high it is. Four
sub-scores, each bounded, summed to 0–100:

    data_completeness         0–35   which inputs the feed actually supplied
    freshness_stability       0–20   base 10, moved by Quality's terms
    cross_source_consistency  0–25   do the stats agree with each other
    market_confirmation       0–20   does a live market back the reading

During warm-up the total is discounted (×0.8 by default): the 15-minute
window has not matured yet.
"""
from typing import Optional

from football_signal.components import round_half_up
from football_signal.config import DEFAULT_THRESHOLDS, SignalThresholds
from football_signal.state import (
    ConfidenceBreakdown,
    MarketSnapshot,
    MatchSnapshot,
    QualityScore,
    ScenarioTag,
)

XG_PER_SHOT_RANGE = (0.05, 0.2)
"""Plausible xG per shot; outside it the stats feed is suspect."""

POSSESSION_EDGE = 55.0
"""Possession share (%) above which a side is treated as dominant."""


def _data_completeness(match: MatchSnapshot) -> float:
    score = 0.0
    if match.stats_available:
        score += 15
    if match.events_available:
        score += 10
    if match.xg_home > 0 or match.xg_away > 0:
        score += 5
    if match.shots_last_15 is not None:
        score += 5
    return score


def _freshness_stability(quality: QualityScore) -> float:
    score = 10.0
    if quality.freshness > 0:
        score += quality.freshness * 3
    if quality.anomaly_penalty < 0:
        score += quality.anomaly_penalty * 2
    return max(0.0, min(20.0, score))


def _possession_agrees(match: MatchSnapshot) -> Optional[bool]:
    """Does the side with the ball also take more shots? None if undecidable."""
    if match.possession_home is None or match.possession_away is None:
        return None
    if match.possession_home >= POSSESSION_EDGE:
        return match.shots_home >= match.shots_away
    if match.possession_away >= POSSESSION_EDGE:
        return match.shots_away >= match.shots_home
    return None


def _cross_source_consistency(match: MatchSnapshot) -> float:
    score = 10.0
    if match.total_shots > 0 and match.xg_total > 0:
        xg_per_shot = match.xg_total / match.total_shots
        low, high = XG_PER_SHOT_RANGE
        if low <= xg_per_shot <= high:
            score += 10
        else:
            score -= 5

    agrees = _possession_agrees(match)
    if agrees is True:
        score += 5
    elif agrees is False:
        score -= 3

    return max(0.0, min(25.0, score))


def _market_confirmation(
    match: MatchSnapshot,
    market: Optional[MarketSnapshot],
    scenario: ScenarioTag,
) -> float:
    if market is None:
        return 0.0

    score = 5.0
    if market.is_live:
        score += 5

    if scenario in (ScenarioTag.OVER_SPRINT, ScenarioTag.DEADLOCK_BREAK):
        over = market.over_odds
        if match.xg_total > match.total_goals + 1.0 and over and over < 1.8:
            score += 10

    return min(20.0, score)


def compute_confidence(
    match: MatchSnapshot,
    market: Optional[MarketSnapshot],
    quality: QualityScore,
    scenario: ScenarioTag,
    is_warmup: bool,
    thresholds: SignalThresholds = DEFAULT_THRESHOLDS,
) -> ConfidenceBreakdown:
    """Blend the four evidence sources into a 0–100 confidence.

    Args:
        match:      Match snapshot.
        market:     Market snapshot, or None when no odds were available.
        quality:    Quality component already computed for this snapshot.
        scenario:   Classified scenario.
        is_warmup:  Apply the warm-up discount.
        thresholds: Supplies the warm-up discount factor.
    """
    completeness = _data_completeness(match)
    freshness = _freshness_stability(quality)
    consistency = _cross_source_consistency(match)
    confirmation = _market_confirmation(match, market, scenario)

    total: float = completeness + freshness + consistency + confirmation
    if is_warmup:
        total = round_half_up(total * thresholds.warmup_confidence_factor)

    return ConfidenceBreakdown(
        total=min(100.0, float(total)),
        data_completeness=completeness,
        freshness_stability=freshness,
        cross_source_consistency=consistency,
        market_confirmation=confirmation,
    )
