"""
Continuous mapper library.

Turns raw match / market metrics into bounded sub-scores with smooth
curves instead of hard thresholds, so a one-shot change in a stat never
makes a score jump by a whole bracket.

Shapes:
    - Piecewise-linear:  ordered contiguous ranges, linear inside each,
                         saturating below the first and above the last.
    - Sigmoid:           smooth S between two output bounds.
    - Bell curve:        Gaussian bump centred on a given minute.
    - Trapezoid:         ramp up, plateau, ramp down, zero outside.

The pre-configured instances below are calibration constants; their
tables must not be altered without recalibrating the whole engine.

No state. No I/O. Every mapper is total over finite real inputs.
"""
import math
from dataclasses import dataclass
from typing import Optional, Sequence


# ═══════════════════════════════════════════════════════════════════════
#  Mapper primitives
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class MapperRange:
    """One segment of a piecewise-linear mapper."""
    min: float
    max: float
    output_min: float
    output_max: float


class PiecewiseLinearMapper:
    """Callable piecewise-linear mapper built from contiguous ranges.

    Below the first range's ``min`` the output is that range's
    ``output_min``; at or above the last range's ``max`` it is ``cap``
    when given, otherwise the last range's ``output_max``.

    Raises:
        ValueError: At construction, if a range is empty or inverted, or
            two consecutive ranges leave a gap or overlap.
    """

    def __init__(
        self,
        ranges: Sequence[tuple[float, float, float, float]],
        cap: Optional[float] = None,
        name: str = "",
    ) -> None:
        self.ranges = tuple(MapperRange(*r) for r in ranges)
        self.cap = cap
        self.name = name
        self._validate()

    def _validate(self) -> None:
        for r in self.ranges:
            if not r.min < r.max:
                raise ValueError(
                    f"mapper {self.name or '<anon>'}: range [{r.min}, {r.max}] is empty or inverted"
                )
        for prev, nxt in zip(self.ranges, self.ranges[1:]):
            if prev.max != nxt.min:
                kind = "gap" if prev.max < nxt.min else "overlap"
                raise ValueError(
                    f"mapper {self.name or '<anon>'}: {kind} between "
                    f"[{prev.min}, {prev.max}] and [{nxt.min}, {nxt.max}]"
                )

    @property
    def domain(self) -> tuple[float, float]:
        if not self.ranges:
            return 0.0, 0.0
        return self.ranges[0].min, self.ranges[-1].max

    def __call__(self, value: float) -> float:
        if not self.ranges:
            return 0.0

        first = self.ranges[0]
        if value <= first.min:
            return first.output_min

        last = self.ranges[-1]
        if value >= last.max:
            return self.cap if self.cap is not None else last.output_max

        for r in self.ranges:
            if r.min <= value <= r.max:
                ratio = (value - r.min) / (r.max - r.min)
                return r.output_min + ratio * (r.output_max - r.output_min)

        # Unreachable for contiguous ranges (NaN input lands here)
        return 0.0

    def __repr__(self) -> str:
        return f"PiecewiseLinearMapper({self.name or '<anon>'}, domain={self.domain}, cap={self.cap})"


def sigmoid_mapper(
    value: float,
    midpoint: float,
    steepness: float,
    output_min: float,
    output_max: float,
) -> float:
    """S-curve between ``output_min`` and ``output_max``, centred on ``midpoint``."""
    x = (value - midpoint) * steepness
    # Split on sign so exp() never overflows for extreme inputs
    if x >= 0:
        s = 1.0 / (1.0 + math.exp(-x))
    else:
        ex = math.exp(x)
        s = ex / (1.0 + ex)
    return output_min + s * (output_max - output_min)


def bell_curve_mapper(value: float, peak: float, spread: float, max_output: float) -> float:
    """Gaussian bump: ``max_output`` at ``peak``, decaying with ``spread``."""
    distance = value - peak
    return max_output * math.exp(-(distance * distance) / (2.0 * spread * spread))


def trapezoid_mapper(
    value: float,
    ramp_start: float,
    plateau_start: float,
    plateau_end: float,
    ramp_end: float,
    max_output: float,
) -> float:
    """Zero outside (ramp_start, ramp_end), flat ``max_output`` on the plateau."""
    if value <= ramp_start or value >= ramp_end:
        return 0.0
    if plateau_start <= value <= plateau_end:
        return max_output
    if value < plateau_start:
        return max_output * (value - ramp_start) / (plateau_start - ramp_start)
    return max_output * (ramp_end - value) / (ramp_end - plateau_end)


# ═══════════════════════════════════════════════════════════════════════
#  Pre-configured mappers: shots
# ═══════════════════════════════════════════════════════════════════════

shots_to_score = PiecewiseLinearMapper(
    [
        (0, 5, 0, 2),
        (5, 15, 2, 8),
        (15, 25, 8, 12),
    ],
    cap=12,
    name="shots_to_score",
)
"""Total shots → 0–12."""

shots_on_to_score = PiecewiseLinearMapper(
    [
        (0, 3, 0, 2),
        (3, 8, 2, 5),
        (8, 15, 5, 8),
    ],
    cap=8,
    name="shots_on_to_score",
)
"""Shots on target → 0–8."""

shot_accuracy_to_score = PiecewiseLinearMapper(
    [
        (0, 20, 0, 1),
        (20, 35, 1, 3),
        (35, 50, 3, 5),
        (50, 70, 5, 6),
    ],
    cap=6,
    name="shot_accuracy_to_score",
)
"""Shot accuracy (%) → 0–6."""

recent_shots_to_score = PiecewiseLinearMapper(
    [
        (0, 2, 0, 2),
        (2, 5, 2, 5),
        (5, 8, 5, 8),
        (8, 12, 8, 10),
    ],
    cap=10,
    name="recent_shots_to_score",
)
"""Shots in the last 15 minutes → 0–10."""


def shots_delta_to_score(delta: float) -> float:
    """Change in shot rate between windows → −4…+6 (positive = attack building)."""
    if delta <= -4:
        return -4.0
    if delta >= 6:
        return 6.0
    return sigmoid_mapper(delta, 1, 0.5, -4, 6)


# ═══════════════════════════════════════════════════════════════════════
#  Pre-configured mappers: xG
# ═══════════════════════════════════════════════════════════════════════

xg_to_score = PiecewiseLinearMapper(
    [
        (0, 0.5, 0, 1),
        (0.5, 1.5, 1, 4),
        (1.5, 2.5, 4, 7),
        (2.5, 4.0, 7, 10),
    ],
    cap=10,
    name="xg_to_score",
)
"""Total xG → 0–10."""

xg_last15_to_score = PiecewiseLinearMapper(
    [
        (0, 0.2, 0, 2),
        (0.2, 0.6, 2, 5),
        (0.6, 1.0, 5, 7),
        (1.0, 1.5, 7, 8),
    ],
    cap=8,
    name="xg_last15_to_score",
)
"""xG in the last 15 minutes → 0–8."""

xg_debt_to_score = PiecewiseLinearMapper(
    [
        (0, 0.5, 0, 1),
        (0.5, 1.0, 1, 3),
        (1.0, 1.5, 3, 5),
        (1.5, 2.5, 5, 8),
    ],
    cap=8,
    name="xg_debt_to_score",
)
"""xG minus actual goals → 0–8."""

xg_velocity_to_score = PiecewiseLinearMapper(
    [
        (0, 0.15, 0, 2),
        (0.15, 0.4, 2, 5),
        (0.4, 0.8, 5, 7),
        (0.8, 1.2, 7, 8),
    ],
    cap=8,
    name="xg_velocity_to_score",
)
"""xG growth per 15 minutes → 0–8."""


# ═══════════════════════════════════════════════════════════════════════
#  Pre-configured mappers: corners
# ═══════════════════════════════════════════════════════════════════════

corners_to_score = PiecewiseLinearMapper(
    [
        (0, 4, 0, 1),
        (4, 8, 1, 3),
        (8, 12, 3, 5),
        (12, 18, 5, 6),
    ],
    cap=6,
    name="corners_to_score",
)
"""Total corners → 0–6."""

recent_corners_to_score = PiecewiseLinearMapper(
    [
        (0, 1, 0, 1),
        (1, 3, 1, 2.5),
        (3, 5, 2.5, 4),
    ],
    cap=4,
    name="recent_corners_to_score",
)
"""Corners in the last 15 minutes → 0–4."""


# ═══════════════════════════════════════════════════════════════════════
#  Composite indices
# ═══════════════════════════════════════════════════════════════════════

_pressure_to_score = PiecewiseLinearMapper(
    [
        (0, 3, 0, 3),
        (3, 8, 3, 7),
        (8, 15, 7, 10),
        (15, 25, 10, 12),
    ],
    cap=12,
    name="pressure_index",
)


def pressure_index(
    shots_last_15: float,
    shots_on_last_15: float,
    xg_last_15: float,
    corners_last_15: float,
) -> float:
    """Recent-window attacking pressure → 0–12.

    Weights: shots 1, shots on target 2, xG 3, corners 0.5.
    """
    raw = shots_last_15 + 2 * shots_on_last_15 + 3 * xg_last_15 + 0.5 * corners_last_15
    return _pressure_to_score(raw)


_strength_diff_to_score = PiecewiseLinearMapper(
    [
        (0, 5, 0, 2),
        (5, 15, 2, 5),
        (15, 30, 5, 8),
    ],
    cap=8,
    name="strength_diff",
)


def strength_gap_to_score(
    strong_strength: float,
    weak_strength: float,
    handicap_line: Optional[float] = None,
) -> float:
    """Strength difference plus Asian-handicap depth → 0–10."""
    score = _strength_diff_to_score(strong_strength - weak_strength)

    handicap_bonus = 0.0
    if handicap_line is not None:
        depth = abs(handicap_line)
        if depth >= 1.5:
            handicap_bonus = 2.0
        elif depth >= 1.0:
            handicap_bonus = 1.5
        elif depth >= 0.5:
            handicap_bonus = 1.0

    return min(10.0, score + handicap_bonus)


def trailing_state_to_score(is_strong_trailing: bool, is_strong_drawing: bool, minute: float) -> float:
    """Pressure on a favourite that is behind or level → 0–6."""
    if is_strong_trailing:
        score = 4.0
        if minute >= 80:
            score += 2
        elif minute >= 70:
            score += 1
    elif is_strong_drawing:
        score = 2.0
        if minute >= 80:
            score += 1
    else:
        return 0.0
    return min(6.0, score)


# ═══════════════════════════════════════════════════════════════════════
#  Score-state tables
# ═══════════════════════════════════════════════════════════════════════

def score_diff_to_base(diff: int, total_goals: int) -> float:
    """Goal difference → base state points (0–8). Level games score highest."""
    abs_diff = abs(diff)
    if abs_diff == 0:
        if total_goals == 0:
            return 8.0
        if total_goals <= 2:
            return 6.0
        return 4.0
    if abs_diff == 1:
        return 5.0
    if abs_diff == 2:
        return 2.0
    return 0.0


def game_state_to_bias(score_home: int, score_away: int, minute: float) -> float:
    """Scorelines that historically favour late goals → 0–4."""
    diff = score_home - score_away
    total = score_home + score_away

    bias = 0.0
    if total == 0 and minute >= 70:
        bias += 3
    if abs(diff) == 1 and minute >= 75:
        bias += 2
    if 2 <= total <= 4:
        bias += 1
    if total <= 1 and minute >= 65:
        bias += 2

    return min(4.0, bias)


# ═══════════════════════════════════════════════════════════════════════
#  Market mappers
# ═══════════════════════════════════════════════════════════════════════

def over_odds_change_to_score(prev_odds: Optional[float], curr_odds: Optional[float]) -> float:
    """Over-price shortening between ticks → 0–10 (one point per 0.03 drop)."""
    if not prev_odds or not curr_odds:
        return 0.0
    change = prev_odds - curr_odds
    if change <= 0:
        return 0.0
    if change >= 0.3:
        return 10.0
    return change / 0.03


def ah_line_change_to_score(prev_line: Optional[float], curr_line: Optional[float]) -> float:
    """Asian-handicap line tightening → 0–8 (four points per quarter line)."""
    if prev_line is None or curr_line is None:
        return 0.0
    change = abs(curr_line) - abs(prev_line)
    if change >= 0:
        return 0.0
    if change <= -0.5:
        return 8.0
    return abs(change) * 16


def mispricing_to_score(model_prob: float, implied_prob: float) -> float:
    """Model-vs-market probability gap, in percentage points → 0–20."""
    gap = model_prob - implied_prob
    if gap <= 0:
        return 0.0
    if gap >= 30:
        return 20.0
    return gap / 30 * 20


# ═══════════════════════════════════════════════════════════════════════
#  Minute windows
# ═══════════════════════════════════════════════════════════════════════

def minute_to_timing_score_over(minute: float) -> float:
    """Over-goals window: ramps from 65′, plateau 78–88′, fades by 95′.

    Deep stoppage time (95′+) uses a smaller secondary trapezoid.
    """
    if minute < 65:
        return 0.0
    if minute >= 95:
        return trapezoid_mapper(minute, 88, 90, 95, 100, 15)
    return trapezoid_mapper(minute, 65, 78, 88, 95, 20)


def minute_to_timing_score_market(minute: float) -> float:
    """Market-anomaly window: half-time bump plus a late plateau, capped at 20."""
    ht_bonus = bell_curve_mapper(minute, 45, 5, 10)
    late_bonus = trapezoid_mapper(minute, 75, 80, 90, 95, 15) if minute >= 75 else 0.0
    base = min(minute / 10, 5) if minute >= 10 else 0.0
    return min(20.0, base + ht_bonus + late_bonus)


PRECONFIGURED = {
    "shots_to_score": shots_to_score,
    "shots_on_to_score": shots_on_to_score,
    "shot_accuracy_to_score": shot_accuracy_to_score,
    "xg_to_score": xg_to_score,
    "xg_last15_to_score": xg_last15_to_score,
    "xg_debt_to_score": xg_debt_to_score,
    "recent_shots_to_score": recent_shots_to_score,
    "xg_velocity_to_score": xg_velocity_to_score,
    "corners_to_score": corners_to_score,
    "recent_corners_to_score": recent_corners_to_score,
}
