"""
Late-goal probability model.

Poisson estimate of P(at least one more goal) from the match's total xG
rate, the time left (with a stoppage allowance), and a late-game intensity
multiplier.

Assumptions:
    1. Goals arrive as a Poisson process whose base rate is the match's
       observed xG per 90 minutes.
    2. Five minutes of stoppage are added to regulation time.
    3. Intensity rises late in the game (fatigue, risk-taking) and when
       the home side is chasing:
           λ = (xG / 90) × remaining × multiplier
           multiplier = phase_base + fatigue + desperation

Surfaced for display only; it never feeds back into the signal score.

No execution logic. No API calls. Pure model layer.
"""
import math
from dataclasses import dataclass

# ═══════════════════════════════════════════════════════════════════════
#  Tunable Constants
# ═══════════════════════════════════════════════════════════════════════

TOTAL_MATCH_MINUTES = 90.0
"""Regulation match length in minutes."""

STOPPAGE_ALLOWANCE = 5.0
"""Minutes of added time assumed when computing what is left."""

PHASE_MULTIPLIERS = {
    "early": 0.85,       # 0-15′: cautious opening
    "mid": 1.0,          # 15-75′
    "late": 1.25,        # 75-85′
    "extra_late": 1.45,  # 85′+: desperation
}

FATIGUE_PER_MINUTE = 0.003
"""Added multiplier per minute played beyond 75′."""

DESPERATION_BONUS = 0.15
"""Added multiplier when the home side trails."""


# ═══════════════════════════════════════════════════════════════════════
#  Time multiplier
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TimeMultiplier:
    multiplier: float
    phase: str
    base: float
    fatigue: float
    desperation: float


def time_multiplier(minute: float, score_diff: int) -> TimeMultiplier:
    """Goal-rate multiplier for this point of the match.

    Args:
        minute:     Elapsed minute.
        score_diff: Home minus away goals (negative = home trailing).
    """
    if minute < 15:
        phase = "early"
    elif minute >= 85:
        phase = "extra_late"
    elif minute >= 75:
        phase = "late"
    else:
        phase = "mid"

    base = PHASE_MULTIPLIERS[phase]
    fatigue = (minute - 75) * FATIGUE_PER_MINUTE if minute > 75 else 0.0
    desperation = DESPERATION_BONUS if score_diff < 0 else 0.0

    return TimeMultiplier(
        multiplier=base + fatigue + desperation,
        phase=phase,
        base=base,
        fatigue=fatigue,
        desperation=desperation,
    )


# ═══════════════════════════════════════════════════════════════════════
#  Poisson late-goal probability
# ═══════════════════════════════════════════════════════════════════════

def _poisson_pmf(lam: float, k: int) -> float:
    """Poisson probability mass function P(X=k | λ), computed in log space."""
    if lam <= 0.0:
        return 1.0 if k == 0 else 0.0
    if k < 0:
        return 0.0
    return math.exp(-lam + k * math.log(lam) - math.lgamma(k + 1))


def remaining_minutes(minute: float) -> float:
    """Minutes left including the stoppage allowance, never negative."""
    return max(0.0, TOTAL_MATCH_MINUTES - minute + STOPPAGE_ALLOWANCE)


def late_goal_lambda(total_xg: float, minute: float, score_diff: int) -> float:
    """Expected goals over the rest of the match."""
    rate = max(total_xg, 0.0) / TOTAL_MATCH_MINUTES
    return rate * remaining_minutes(minute) * time_multiplier(minute, score_diff).multiplier


def late_goal_probability(total_xg: float, minute: float, score_diff: int) -> float:
    """P(at least one more goal) in [0, 1].

    Args:
        total_xg:   Combined xG of both sides so far.
        minute:     Elapsed minute.
        score_diff: Home minus away goals.

    Returns:
        1 − P(0 goals | λ).
    """
    lam = late_goal_lambda(total_xg, minute, score_diff)
    return 1.0 - _poisson_pmf(lam, 0)
