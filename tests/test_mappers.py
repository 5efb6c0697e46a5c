import pytest

from football_signal.mappers import (
    PRECONFIGURED,
    PiecewiseLinearMapper,
    ah_line_change_to_score,
    game_state_to_bias,
    minute_to_timing_score_market,
    minute_to_timing_score_over,
    mispricing_to_score,
    over_odds_change_to_score,
    pressure_index,
    score_diff_to_base,
    shots_delta_to_score,
    shots_to_score,
    sigmoid_mapper,
    strength_gap_to_score,
    trailing_state_to_score,
    trapezoid_mapper,
)


@pytest.mark.parametrize("name", sorted(PRECONFIGURED))
def test_preconfigured_mapper_is_non_decreasing(name: str) -> None:
    mapper = PRECONFIGURED[name]
    low, high = mapper.domain
    span = high - low
    points = [low - 1 + i * (span + 2) / 400 for i in range(401)]
    outputs = [mapper(p) for p in points]
    assert all(b >= a for a, b in zip(outputs, outputs[1:]))


@pytest.mark.parametrize("name", sorted(PRECONFIGURED))
def test_preconfigured_mapper_saturates_at_boundaries(name: str) -> None:
    mapper = PRECONFIGURED[name]
    low, high = mapper.domain
    assert mapper(low - 100) == mapper.ranges[0].output_min
    assert mapper(high + 100) == mapper.cap


def test_shots_to_score_examples() -> None:
    assert shots_to_score(0) == 0
    assert shots_to_score(100) == 12
    assert shots_to_score(10) == pytest.approx(5.0)
    assert shots_to_score(20) == pytest.approx(10.0)


def test_mapper_rejects_gap() -> None:
    with pytest.raises(ValueError, match="gap"):
        PiecewiseLinearMapper([(0, 5, 0, 1), (6, 10, 1, 2)], name="gappy")


def test_mapper_rejects_overlap() -> None:
    with pytest.raises(ValueError, match="overlap"):
        PiecewiseLinearMapper([(0, 5, 0, 1), (4, 10, 1, 2)])


def test_mapper_rejects_inverted_range() -> None:
    with pytest.raises(ValueError, match="empty or inverted"):
        PiecewiseLinearMapper([(5, 5, 0, 1)])


def test_empty_mapper_returns_zero() -> None:
    mapper = PiecewiseLinearMapper([])
    assert mapper(42) == 0.0
    assert mapper.domain == (0.0, 0.0)


def test_mapper_without_cap_uses_last_output() -> None:
    mapper = PiecewiseLinearMapper([(0, 10, 0, 5)])
    assert mapper(50) == 5


def test_pressure_index_weights() -> None:
    assert pressure_index(0, 0, 0, 0) == 0
    # raw = 6 + 2*2 + 3*0.5 + 0.5*2 = 12.5
    assert pressure_index(6, 2, 0.5, 2) == pytest.approx(7 + 4.5 / 7 * 3)
    assert pressure_index(40, 20, 5, 10) == 12


def test_sigmoid_is_centred_and_overflow_safe() -> None:
    assert sigmoid_mapper(1, 1, 0.5, -4, 6) == pytest.approx(1.0)
    assert sigmoid_mapper(-1e6, 0, 1, 0, 1) == pytest.approx(0.0)
    assert sigmoid_mapper(1e6, 0, 1, 0, 1) == pytest.approx(1.0)


@pytest.mark.parametrize(
    ("delta", "expected"),
    [(-10, -4.0), (-4, -4.0), (6, 6.0), (12, 6.0), (1, 1.0)],
)
def test_shots_delta_to_score(delta: float, expected: float) -> None:
    assert shots_delta_to_score(delta) == pytest.approx(expected)


def test_trapezoid_shape() -> None:
    assert trapezoid_mapper(65, 65, 78, 88, 95, 20) == 0
    assert trapezoid_mapper(70, 65, 78, 88, 95, 20) == pytest.approx(20 * 5 / 13)
    assert trapezoid_mapper(80, 65, 78, 88, 95, 20) == 20
    assert trapezoid_mapper(95, 65, 78, 88, 95, 20) == 0


def test_over_odds_change_to_score() -> None:
    assert over_odds_change_to_score(1.70, 1.55) == pytest.approx(5.0)
    assert over_odds_change_to_score(2.0, 1.6) == 10.0
    assert over_odds_change_to_score(1.55, 1.70) == 0.0
    assert over_odds_change_to_score(None, 1.70) == 0.0


def test_ah_line_change_to_score() -> None:
    assert ah_line_change_to_score(-1.0, -0.75) == pytest.approx(4.0)
    assert ah_line_change_to_score(-1.5, -0.5) == 8.0
    assert ah_line_change_to_score(-0.5, -1.0) == 0.0
    assert ah_line_change_to_score(None, -1.0) == 0.0


def test_mispricing_to_score() -> None:
    assert mispricing_to_score(60, 45) == pytest.approx(10.0)
    assert mispricing_to_score(40, 45) == 0.0
    assert mispricing_to_score(90, 45) == 20.0


@pytest.mark.parametrize(
    ("diff", "total", "expected"),
    [(0, 0, 8.0), (0, 2, 6.0), (0, 4, 4.0), (1, 1, 5.0), (-1, 3, 5.0), (2, 2, 2.0), (-3, 3, 0.0)],
)
def test_score_diff_to_base(diff: int, total: int, expected: float) -> None:
    assert score_diff_to_base(diff, total) == expected


def test_strength_gap_to_score_adds_handicap_depth() -> None:
    assert strength_gap_to_score(85, 60) == pytest.approx(7.0)
    assert strength_gap_to_score(85, 60, -1.5) == pytest.approx(9.0)
    assert strength_gap_to_score(95, 40, 2.0) == 10.0


def test_trailing_state_to_score() -> None:
    assert trailing_state_to_score(True, False, 82) == 6.0
    assert trailing_state_to_score(True, False, 72) == 5.0
    assert trailing_state_to_score(False, True, 82) == 3.0
    assert trailing_state_to_score(False, False, 82) == 0.0


def test_game_state_to_bias_is_capped() -> None:
    assert game_state_to_bias(0, 0, 75) == 4.0
    assert game_state_to_bias(3, 3, 30) == 0.0


def test_minute_windows() -> None:
    assert minute_to_timing_score_over(60) == 0.0
    assert minute_to_timing_score_over(80) == 20.0
    assert minute_to_timing_score_over(96) == pytest.approx(12.0)
    assert minute_to_timing_score_market(45) == pytest.approx(14.5)
    assert minute_to_timing_score_market(85) == 20.0
