"""
Late-match football signal engine.

Scores live match snapshots from 65′ onward into a bounded signal
(score, confidence, action, bet plan, audit trail) and resolves noisy
bookmaker odds payloads into a canonical over/under line table.
Pure computation: no network, no storage, no state between calls.
"""
from football_signal.config import DEFAULT_THRESHOLDS, SignalThresholds
from football_signal.engine import compute_signal, is_worth_watching, phase_for_minute, should_trigger
from football_signal.model import late_goal_probability
from football_signal.odds_lines import market_snapshot_from_table, price_trend, resolve_odds_line
from football_signal.scenario import classify_scenario, scenario_label
from football_signal.state import (
    Action,
    FetchStatus,
    MarketSnapshot,
    MatchSnapshot,
    OddsLine,
    OddsLineTable,
    Phase,
    ScenarioTag,
    Signal,
    TeamStrengthInfo,
)

__all__ = [
    "compute_signal", "resolve_odds_line", "market_snapshot_from_table", "price_trend",
    "classify_scenario", "scenario_label", "late_goal_probability",
    "phase_for_minute", "should_trigger", "is_worth_watching",
    "MatchSnapshot", "MarketSnapshot", "TeamStrengthInfo", "Signal",
    "OddsLine", "OddsLineTable", "Action", "Phase", "ScenarioTag", "FetchStatus",
    "SignalThresholds", "DEFAULT_THRESHOLDS",
]
