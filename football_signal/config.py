"""
Signal engine configuration: loaded from .env, calibrated defaults.
"""
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# ── Logging ──────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))
LOG_FILE = os.getenv("LOG_FILE", "signal_engine.log")
ODDS_LOG_LEVEL = os.getenv("ODDS_LOG_LEVEL", "INFO")    # resolver drops are DEBUG noise

# ── Late-module phases ───────────────────────────────────────────────
WARMUP_MINUTE = int(os.getenv("LATE_WARMUP_MINUTE", "65"))    # 65-79: warm-up
ACTIVE_MINUTE = int(os.getenv("LATE_ACTIVE_MINUTE", "80"))    # 80+:   active
WARMUP_SCORE_CAP = float(os.getenv("LATE_WARMUP_SCORE_CAP", "75"))
WARMUP_CONFIDENCE_FACTOR = float(os.getenv("LATE_WARMUP_CONFIDENCE_FACTOR", "0.8"))

# ── Action thresholds ────────────────────────────────────────────────
WARMUP_MIN_SCORE = float(os.getenv("LATE_WARMUP_MIN_SCORE", "60"))
WARMUP_MIN_CONFIDENCE = float(os.getenv("LATE_WARMUP_MIN_CONFIDENCE", "40"))
BET_SCORE = float(os.getenv("LATE_BET_SCORE", "85"))
BET_CONFIDENCE = float(os.getenv("LATE_BET_CONFIDENCE", "70"))
PREPARE_SCORE = float(os.getenv("LATE_PREPARE_SCORE", "75"))
PREPARE_CONFIDENCE = float(os.getenv("LATE_PREPARE_CONFIDENCE", "55"))
WATCH_SCORE = float(os.getenv("LATE_WATCH_SCORE", "65"))

# ── Data freshness bands (seconds) ───────────────────────────────────
FRESH_AGE_S = 60.0        # age < this   → +3
RECENT_AGE_S = 120.0      # age < this   → +1, also "stats_fresh" check
STALE_AGE_S = 300.0       # age > this   → −3

# ── Odds line resolution ─────────────────────────────────────────────
# Main-line fallback when no value carries main=true. Order matters.
ODDS_FALLBACK_LINES = (2.5, 2.25, 2.0, 1.75, 1.5)
ODDS_REFERENCE_LINES = (1.5, 2.5, 3.5)
ODDS_TREND_EPSILON = float(os.getenv("ODDS_TREND_EPSILON", "0.02"))

# Provider bet ids
LIVE_BET_OVER_UNDER_LINE = 36
LIVE_BET_MATCH_GOALS = 25
LIVE_BET_ASIAN_HANDICAP = 33
LIVE_BET_FULLTIME_RESULT = 59
PREMATCH_BET_MATCH_WINNER = 1
PREMATCH_BET_OVER_UNDER = 5
PREMATCH_BET_ASIAN_HANDICAP = 8

# Pre-match bookmaker preference: Bet365, Bwin, 1xBet, Unibet, Pinnacle
PREFERRED_BOOKMAKERS = [8, 6, 11, 3, 1]


@dataclass(frozen=True)
class SignalThresholds:
    """Phase boundaries and action gates for one engine invocation."""
    warmup_minute: int = WARMUP_MINUTE
    active_minute: int = ACTIVE_MINUTE
    warmup_score_cap: float = WARMUP_SCORE_CAP
    warmup_confidence_factor: float = WARMUP_CONFIDENCE_FACTOR
    warmup_min_score: float = WARMUP_MIN_SCORE
    warmup_min_confidence: float = WARMUP_MIN_CONFIDENCE
    bet_score: float = BET_SCORE
    bet_confidence: float = BET_CONFIDENCE
    prepare_score: float = PREPARE_SCORE
    prepare_confidence: float = PREPARE_CONFIDENCE
    watch_score: float = WATCH_SCORE


DEFAULT_THRESHOLDS = SignalThresholds()
