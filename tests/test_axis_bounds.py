import pytest

from moto_drivetrain.engine import densify
from moto_drivetrain.performance import AxisBounds, estimate_bounds
from moto_drivetrain.utils.constants import BOUNDS_MIN_SPEED_MPH, BOUNDS_MIN_TIME_S


@pytest.fixture
def stock_only(stock):
    return {'Stock': stock}


@pytest.fixture
def bounds(spec, stock_only):
    return estimate_bounds(spec, densify(stock_only), stock_only)


def test_bounds_structure(bounds):
    assert isinstance(bounds, AxisBounds)
    assert bounds.accel.max_g == 1.0


def test_speed_and_time_floors(bounds):
    assert bounds.wheel.max_speed >= BOUNDS_MIN_SPEED_MPH
    assert bounds.accel.max_speed >= BOUNDS_MIN_SPEED_MPH
    assert bounds.accel.max_time >= BOUNDS_MIN_TIME_S


def test_wheel_torque_bound(bounds):
    # 36.76 lb-ft peak * first gear overall ratio on 13/50, plus 5%, rounded up to 100
    assert bounds.wheel.max_torque == 900.0
    assert bounds.wheel.max_speed == 160.0


def test_dyno_bounds(bounds):
    assert bounds.dyno.max_hp == 80.0
    assert bounds.dyno.max_torque == 50.0
    assert bounds.dyno.min_rpm == 3000.0
    assert bounds.dyno.max_rpm == 12000.0


def test_accel_bounds_are_rounded(bounds):
    assert bounds.accel.max_distance % 100 == 0
    assert bounds.accel.max_speed % 10 == 0
    assert bounds.accel.max_distance > 0


def test_bounds_use_most_powerful_dataset(spec, datasets, dense_curve):
    bounds = estimate_bounds(spec, dense_curve, datasets)
    # Race peaks at 74 hp
    assert bounds.dyno.max_hp == 90.0
    assert bounds.dyno.min_rpm == 2500.0


def test_bounds_from_dense_curve_only(spec, dense_curve):
    bounds = estimate_bounds(spec, dense_curve)
    assert bounds.dyno.min_rpm == dense_curve.rpm_min
    assert bounds.dyno.max_rpm == dense_curve.rpm_max
    assert bounds.accel.max_time >= BOUNDS_MIN_TIME_S
