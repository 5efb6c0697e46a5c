import pytest

from football_signal.state import MarketSnapshot, MatchSnapshot

NOW = 1_700_000_000.0


@pytest.fixture
def now() -> float:
    return NOW


@pytest.fixture
def make_match():
    def _make(**overrides) -> MatchSnapshot:
        fields = {
            "fixture_id": 1001,
            "minute": 85,
            "score_home": 0,
            "score_away": 0,
            "shots_home": 12,
            "shots_away": 9,
            "shots_on_home": 6,
            "shots_on_away": 4,
            "xg_home": 1.8,
            "xg_away": 1.1,
        }
        fields.update(overrides)
        return MatchSnapshot(**fields)

    return _make


@pytest.fixture
def make_market():
    def _make(**overrides) -> MarketSnapshot:
        fields = {"over_odds": 1.55, "under_odds": 2.35, "ou_line": 2.5}
        fields.update(overrides)
        return MarketSnapshot(**fields)

    return _make
