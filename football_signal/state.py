"""
Late-match signal data model: input snapshots, scoring breakdowns, outputs.

These are pure data containers, immutable once built. Each poll produces
fresh snapshots; the engine never mutates or remembers them.
"""
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Optional


# ═══════════════════════════════════════════════════════════════════════
#  Closed vocabularies
# ═══════════════════════════════════════════════════════════════════════

class ScenarioTag(str, Enum):
    OVER_SPRINT = "OVER_SPRINT"        # xG well ahead of goals, busy attack
    STRONG_BEHIND = "STRONG_BEHIND"    # favourite trailing or pressing a draw
    DEADLOCK_BREAK = "DEADLOCK_BREAK"  # 0-0 or low-scoring stalemate
    WEAK_DEFEND = "WEAK_DEFEND"        # underdog leading, sitting deep
    BLOWOUT = "BLOWOUT"                # 3+ goal margin, game decided
    BALANCED_LATE = "BALANCED_LATE"


class Action(str, Enum):
    BET = "BET"
    PREPARE = "PREPARE"
    WATCH = "WATCH"
    IGNORE = "IGNORE"


class Phase(str, Enum):
    INACTIVE = "inactive"
    WARMUP = "warmup"
    ACTIVE = "active"


class FetchStatus(str, Enum):
    SUCCESS = "SUCCESS"
    EMPTY = "EMPTY"


# ═══════════════════════════════════════════════════════════════════════
#  Input: Match / Market / Strength snapshots
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class MatchSnapshot:
    """Immutable snapshot of one match at one minute.

    Attributes:
        fixture_id:       Upstream fixture identifier.
        minute:           Elapsed match minute (0–120+), stoppage included.
        score_home:       Goals scored by the home side.
        score_away:       Goals scored by the away side.
        shots_*:          Total shots per side.
        shots_on_*:       Shots on target per side.
        xg_*:             Expected goals per side.
        corners_*:        Corners per side.
        possession_*:     Ball possession in percent.
        dangerous_*:      Dangerous attacks per side.
        shots_last_15:    Shots (both sides) in the last 15 minutes, if known.
        xg_last_15:       xG (both sides) in the last 15 minutes, if known.
        shots_prev_15:    Shots in the 15 minutes before that, if known.
        corners_last_15:  Corners in the last 15 minutes, if known.
        stats_available:  Statistics endpoint returned data for this poll.
        events_available: Events endpoint returned data for this poll.
        data_timestamp:   Epoch seconds when the upstream data was captured.
    """
    fixture_id: int
    minute: float
    score_home: int = 0
    score_away: int = 0
    shots_home: int = 0
    shots_away: int = 0
    shots_on_home: int = 0
    shots_on_away: int = 0
    xg_home: float = 0.0
    xg_away: float = 0.0
    corners_home: int = 0
    corners_away: int = 0
    possession_home: Optional[float] = None
    possession_away: Optional[float] = None
    dangerous_home: Optional[int] = None
    dangerous_away: Optional[int] = None
    # ── Short-window deltas (None = feed does not provide them) ─────
    shots_last_15: Optional[int] = None
    xg_last_15: Optional[float] = None
    shots_prev_15: Optional[int] = None
    corners_last_15: Optional[int] = None
    # ── Data-quality flags ──────────────────────────────────────────
    stats_available: bool = True
    events_available: bool = True
    data_timestamp: Optional[float] = None

    @property
    def total_goals(self) -> int:
        return self.score_home + self.score_away

    @property
    def goal_diff(self) -> int:
        """Positive = home leads."""
        return self.score_home - self.score_away

    @property
    def total_shots(self) -> int:
        return self.shots_home + self.shots_away

    @property
    def total_shots_on(self) -> int:
        return self.shots_on_home + self.shots_on_away

    @property
    def total_corners(self) -> int:
        return self.corners_home + self.corners_away

    @property
    def xg_total(self) -> float:
        return self.xg_home + self.xg_away

    @property
    def xg_debt(self) -> float:
        """Total xG minus goals actually scored."""
        return self.xg_total - self.total_goals

    @property
    def shot_accuracy(self) -> float:
        """Shots on target as a percentage of all shots (0 when no shots)."""
        if self.total_shots <= 0:
            return 0.0
        return self.total_shots_on / self.total_shots * 100.0

    def with_estimated_windows(self) -> "MatchSnapshot":
        """Fill missing 15-minute windows from full-match totals.

        For feeds without minute-level events: a quarter of all shots and
        a fifth of all xG are attributed to the last 15 minutes. Values the
        feed did provide are kept as-is.
        """
        return replace(
            self,
            shots_last_15=(self.shots_last_15 if self.shots_last_15 is not None
                           else round(self.total_shots * 0.25)),
            xg_last_15=(self.xg_last_15 if self.xg_last_15 is not None
                        else self.xg_total * 0.2),
        )


@dataclass(frozen=True)
class MarketSnapshot:
    """Live bookmaker quotes for one fixture at one instant.

    Absence of a market is expressed as ``None`` at the call site, never
    as a half-filled snapshot. Previous-tick prices are supplied by the
    caller for drift detection; the engine keeps no history.
    """
    over_odds: Optional[float] = None
    under_odds: Optional[float] = None
    ou_line: Optional[float] = None
    ah_line: Optional[float] = None
    ah_home: Optional[float] = None
    ah_away: Optional[float] = None
    win_home: Optional[float] = None
    win_draw: Optional[float] = None
    win_away: Optional[float] = None
    # ── Previous tick ───────────────────────────────────────────────
    over_odds_prev: Optional[float] = None
    under_odds_prev: Optional[float] = None
    ah_line_prev: Optional[float] = None
    is_live: bool = True
    bookmaker: str = ""


STRONG_TEAM_MIN_STRENGTH = 70.0
STRONG_TEAM_MIN_MARGIN = 15.0


@dataclass(frozen=True)
class TeamStrengthInfo:
    """Standings-derived strength for both sides, treated as validated input."""
    home_strength: float
    away_strength: float
    is_home_strong: bool
    is_away_strong: bool
    strength_gap: float

    @classmethod
    def from_strengths(cls, home_strength: float, away_strength: float) -> "TeamStrengthInfo":
        """A side is strong at >= 70 and more than 15 points clear of its opponent."""
        return cls(
            home_strength=home_strength,
            away_strength=away_strength,
            is_home_strong=(home_strength >= STRONG_TEAM_MIN_STRENGTH
                            and home_strength > away_strength + STRONG_TEAM_MIN_MARGIN),
            is_away_strong=(away_strength >= STRONG_TEAM_MIN_STRENGTH
                            and away_strength > home_strength + STRONG_TEAM_MIN_MARGIN),
            strength_gap=abs(home_strength - away_strength),
        )


# ═══════════════════════════════════════════════════════════════════════
#  Component breakdowns
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BaseScore:
    total: float              # 0–20
    score_state: float        # goal-difference table, 0–8
    goals_bonus: float        # openness bonus, 0–6
    urgency_bonus: float      # raw late-game urgency (contributes /3, max 4)
    total_goals: int
    goal_diff: int
    is_draw: bool
    description: tuple[str, ...] = ()


@dataclass(frozen=True)
class EdgeScore:
    total: float              # 0–30
    pressure_index: float     # 0–12
    xg_velocity: float        # 0–8
    shot_quality: float       # 0–6
    strength_gap: float       # 0–8
    trailing_pressure: float  # 0–6
    scenario_bonus: float     # −5–10
    description: tuple[str, ...] = ()


@dataclass(frozen=True)
class TimingScore:
    total: float              # window + urgency
    minute: float
    window_score: float       # 0–20
    is_peak_window: bool
    urgency_bonus: float      # 0–4, never while warming up
    description: tuple[str, ...] = ()


@dataclass(frozen=True)
class MarketScore:
    total: float              # 0–20
    line_movement: float
    price_drift: float
    consistency: float
    has_data: bool
    description: tuple[str, ...] = ()


@dataclass(frozen=True)
class QualityScore:
    total: float              # −10–+10
    data_completeness: float
    freshness: float
    anomaly_penalty: float
    description: tuple[str, ...] = ()


@dataclass(frozen=True)
class ScoreBreakdown:
    base: BaseScore
    edge: EdgeScore
    timing: TimingScore
    market: MarketScore
    quality: QualityScore

    @property
    def raw_total(self) -> float:
        """Unclamped sum of the five components."""
        return (self.base.total + self.edge.total + self.timing.total
                + self.market.total + self.quality.total)

    def as_dict(self) -> dict:
        return {
            "base": asdict(self.base),
            "edge": asdict(self.edge),
            "timing": asdict(self.timing),
            "market": asdict(self.market),
            "quality": asdict(self.quality),
        }


@dataclass(frozen=True)
class ConfidenceBreakdown:
    total: float                     # 0–100
    data_completeness: float         # 0–35
    freshness_stability: float       # 0–20
    cross_source_consistency: float  # 0–25
    market_confirmation: float       # 0–20


# ═══════════════════════════════════════════════════════════════════════
#  Output: Signal
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BetPlan:
    market: str               # "OU" or "AH"
    line: float
    selection: str            # "OVER", "UNDER", "HOME", "AWAY"
    odds_min: float
    stake_pct: float
    ttl_minutes: int


@dataclass(frozen=True)
class SignalReasons:
    """Audit trail: tags plus raw metric echoes behind a signal.

    The echo dicts take part in equality but not in hashing, so a Signal
    stays hashable.
    """
    tags: tuple[str, ...]
    state: dict = field(default_factory=dict, hash=False)
    stats: dict = field(default_factory=dict, hash=False)
    market: dict = field(default_factory=dict, hash=False)
    deltas: dict = field(default_factory=dict, hash=False)
    checks: dict = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class Signal:
    """Engine output for one snapshot. Built fresh on every call."""
    fixture_id: int
    minute: float
    score: float
    confidence: float
    action: Action
    scenario_tag: ScenarioTag
    phase: Phase
    is_warmup: bool
    poisson_goal_prob: float
    score_breakdown: ScoreBreakdown
    confidence_breakdown: ConfidenceBreakdown
    reasons: SignalReasons
    bet_plan: Optional[BetPlan] = None
    team_strength: Optional[TeamStrengthInfo] = None
    captured_at: float = 0.0
    version: str = "v1.0"

    def as_dict(self) -> dict:
        """Flat-ish dict for JSON serialization / warehouse rows."""
        return {
            "fixture_id": self.fixture_id,
            "minute": self.minute,
            "score": round(self.score, 2),
            "confidence": round(self.confidence, 2),
            "action": self.action.value,
            "scenario_tag": self.scenario_tag.value,
            "phase": self.phase.value,
            "is_warmup": self.is_warmup,
            "poisson_goal_prob": round(self.poisson_goal_prob, 4),
            "score_breakdown": self.score_breakdown.as_dict(),
            "confidence_breakdown": asdict(self.confidence_breakdown),
            "bet_plan": asdict(self.bet_plan) if self.bet_plan else None,
            "reasons": asdict(self.reasons),
            "team_strength": asdict(self.team_strength) if self.team_strength else None,
            "captured_at": self.captured_at,
            "_version": self.version,
        }

    def __str__(self) -> str:
        return (
            f"fixture={self.fixture_id} {self.minute:.0f}' | "
            f"{self.scenario_tag.value} {self.phase.value} | "
            f"score={self.score:.1f} conf={self.confidence:.0f} → {self.action.value} | "
            f"P(goal)={self.poisson_goal_prob:.3f}"
        )


# ═══════════════════════════════════════════════════════════════════════
#  Output: Odds line table
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class OddsLine:
    line: float
    over: Optional[float]
    under: Optional[float]
    is_main: bool = False


@dataclass(frozen=True)
class OddsLineTable:
    """Canonical over/under view of one odds payload."""
    main_line: Optional[float] = None
    main_over: Optional[float] = None
    main_under: Optional[float] = None
    over_1_5: Optional[float] = None
    under_1_5: Optional[float] = None
    over_2_5: Optional[float] = None
    under_2_5: Optional[float] = None
    over_3_5: Optional[float] = None
    under_3_5: Optional[float] = None
    all_lines: tuple[OddsLine, ...] = ()
    asian_handicap_line: Optional[float] = None
    asian_handicap_home: Optional[float] = None
    asian_handicap_away: Optional[float] = None
    win_home: Optional[float] = None
    win_draw: Optional[float] = None
    win_away: Optional[float] = None
    bookmaker: str = ""
    is_live: bool = True
    fetch_status: FetchStatus = FetchStatus.EMPTY

    def reference(self, line: float) -> tuple[Optional[float], Optional[float]]:
        """(over, under) from the fixed 1.5 / 2.5 / 3.5 slots."""
        if line == 1.5:
            return self.over_1_5, self.under_1_5
        if line == 2.5:
            return self.over_2_5, self.under_2_5
        if line == 3.5:
            return self.over_3_5, self.under_3_5
        return None, None

    def as_dict(self) -> dict:
        out = asdict(self)
        out["fetch_status"] = self.fetch_status.value
        return out
