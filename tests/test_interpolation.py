import numpy as np
import pytest
from pyeloss.utils.interpolation import Interpolator, QueryKind, QueryResult, interpolate


@pytest.fixture
def two_point_table():
    return [100.0, 200.0], [3.0, 4.0]


def test_empty_table_is_absent():
    result = interpolate(0.0, [], [])
    assert result == QueryResult.absent()
    assert result.kind is QueryKind.ABSENT
    assert not result.is_interp
    assert not result.is_extrap
    assert not result.is_value
    assert result.to_value() is None


def test_length_mismatch_raises():
    with pytest.raises(ValueError, match="length mismatch"):
        interpolate(1.0, [1.0, 2.0], [1.0])


def test_interior_point(two_point_table):
    xs, ys = two_point_table
    result = interpolate(150.0, xs, ys)
    assert result.is_interp
    assert result.to_interp() == pytest.approx(3.5)
    assert result.to_extrap() is None


def test_below_range_extrapolates_first_segment(two_point_table):
    xs, ys = two_point_table
    result = interpolate(10.0, xs, ys)
    assert result.is_extrap
    assert result.is_value
    assert result.to_interp() is None
    assert result.to_extrap() == pytest.approx(2.1)
    assert result.to_value() == pytest.approx(2.1)


def test_above_range_extrapolates_last_segment(two_point_table):
    xs, ys = two_point_table
    result = interpolate(210.0, xs, ys)
    assert result.is_extrap
    assert result.to_extrap() == pytest.approx(4.1)


@pytest.mark.parametrize("x, expected", [(100.0, 3.0), (200.0, 4.0)])
def test_exact_hit_on_edges_is_interpolated(two_point_table, x, expected):
    xs, ys = two_point_table
    result = interpolate(x, xs, ys)
    assert result.is_interp
    assert result.to_interp() == expected


def test_exact_hits_return_table_values():
    xs = [0.1, 0.5, 1.0, 2.0, 5.0]
    ys = [7.0, 9.5, 8.25, 6.0, 3.125]
    for x, y in zip(xs, ys):
        assert interpolate(x, xs, ys) == QueryResult.interpolated(y)


def test_single_point_table_is_flat():
    assert interpolate(100.0, [100.0], [3.0]) == QueryResult.interpolated(3.0)
    assert interpolate(50.0, [100.0], [3.0]) == QueryResult.extrapolated(3.0)
    assert interpolate(500.0, [100.0], [3.0]) == QueryResult.extrapolated(3.0)


def test_interior_value_lies_between_monotonic_neighbours():
    xs = [1.0, 2.0, 4.0, 8.0]
    ys = [10.0, 8.0, 5.0, 4.5]
    for x in np.linspace(1.01, 7.99, 25):
        result = interpolate(float(x), xs, ys)
        i = int(np.searchsorted(xs, x))
        assert result.is_interp
        assert min(ys[i - 1], ys[i]) < result.value < max(ys[i - 1], ys[i])


def test_extrapolation_uses_edge_segments():
    xs = [1.0, 2.0, 4.0]
    ys = [10.0, 8.0, 5.0]
    assert interpolate(0.0, xs, ys).to_extrap() == pytest.approx(12.0)
    assert interpolate(6.0, xs, ys).to_extrap() == pytest.approx(2.0)


def test_interpolator_query_and_vector_interpolation(two_point_table):
    interp = Interpolator(*two_point_table)
    assert len(interp) == 2
    assert interp.query(150.0).is_interp
    result = interp.interpolate(energy=[10.0, 150.0, 210.0])
    assert isinstance(result, np.ndarray)
    np.testing.assert_allclose(result, [2.1, 3.5, 4.1])


def test_interpolator_scalar_output_converted_to_array(two_point_table):
    result = Interpolator(*two_point_table).interpolate(energy=120.0)
    assert result.shape == (1,)


def test_interpolator_empty_table_raises():
    interp = Interpolator([], [])
    assert interp.query(1.0).kind is QueryKind.ABSENT
    with pytest.raises(ValueError, match="empty table"):
        interp.interpolate(energy=1.0)


def test_interpolator_length_mismatch_raises():
    with pytest.raises(ValueError, match="length mismatch"):
        Interpolator([1.0, 2.0, 3.0], [1.0, 2.0])
