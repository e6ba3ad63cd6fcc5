import numpy as np
import pytest

from moto_drivetrain.transmission import OPTIMAL, ShiftPolicy, StrategyType, solve_shift_points, solve_shifts
from moto_drivetrain.transmission.shift_strategy import _fallback_shift_rpm, _fallback_shift_speed
from moto_drivetrain.utils.validation import ConfigurationError


def _plan(spec, dense_curve, policy=OPTIMAL, dataset='Stock'):
    return solve_shifts(dense_curve, dataset, spec.gear_ratios, spec.final_drive, policy, spec)


def test_plan_covers_every_gear(spec, dense_curve):
    plan = _plan(spec, dense_curve)
    assert sorted(plan.gears) == [1, 2, 3, 4, 5, 6]
    assert sorted(plan.shift_rpm) == [1, 2, 3, 4, 5]
    assert plan.gears[6].shift_rpm is None
    assert plan.gears[6].shift_speed is None


def test_optimal_shift_speeds_increase(spec, dense_curve):
    plan = _plan(spec, dense_curve)
    speeds = [plan.shift_speed[g] for g in sorted(plan.shift_speed)]
    assert all(a < b for a, b in zip(speeds, speeds[1:]))


def test_optimal_shift_rpm_within_grid(spec, dense_curve):
    plan = _plan(spec, dense_curve)
    for rpm in plan.shift_rpm.values():
        assert dense_curve.rpm_min <= rpm <= dense_curve.rpm_max


def test_optimal_shift_uses_redline_without_crossover(spec, dense_curve):
    # First gear always out-pulls second on this curve
    plan = _plan(spec, dense_curve)
    assert plan.shift_rpm[1] == dense_curve.rpm_max


def test_optimal_shift_at_torque_crossover(spec, dense_curve):
    plan = _plan(spec, dense_curve)
    ratios = spec.gear_ratios
    rpm = plan.shift_rpm[2]
    assert dense_curve.rpm_min < rpm < dense_curve.rpm_max

    hp = dense_curve.hp_for('Stock')
    step = ratios[3] / ratios[2]

    def torque(r, ratio):
        return np.interp(r, dense_curve.rpm, hp) * 5252 / r * ratio

    # Second gear pulls harder just below the shift point, third just above
    assert torque(rpm * step - 50 * step, ratios[3]) < torque(rpm - 50, ratios[2])
    assert torque(rpm * step + 50 * step, ratios[3]) > torque(rpm + 50, ratios[2])


def test_custom_policy_clamps_to_grid(spec, dense_curve):
    high = _plan(spec, dense_curve, 999999)
    low = _plan(spec, dense_curve, 1)
    assert all(rpm == dense_curve.rpm_max for rpm in high.shift_rpm.values())
    assert all(rpm == dense_curve.rpm_min for rpm in low.shift_rpm.values())


def test_custom_policy_in_range(spec, dense_curve):
    plan = _plan(spec, dense_curve, ShiftPolicy.custom(9000))
    assert set(plan.shift_rpm.values()) == {9000.0}
    assert plan.policy.strategy_type == StrategyType.CUSTOM


def test_non_numeric_policy_falls_back_to_optimal(spec, dense_curve):
    for value in ('optimal', None, float('nan'), 'fast'):
        plan = _plan(spec, dense_curve, value)
        assert plan.policy.is_optimal


def test_should_upshift(spec, dense_curve):
    plan = _plan(spec, dense_curve)
    threshold = plan.shift_speed[1]
    assert not plan.should_upshift(1, threshold - 0.1)
    assert plan.should_upshift(1, threshold)
    assert not plan.should_upshift(6, 500.0)


def test_clipped_curve_stays_between_shift_speeds(spec, dense_curve):
    plan = _plan(spec, dense_curve)
    speed, torque, rpm = plan.clipped_curve(3)
    assert len(speed) == len(torque) == len(rpm) > 0
    assert speed.min() >= plan.shift_speed[2]
    assert speed.max() <= plan.shift_speed[3]

    full_speed, _, _ = plan.clipped_curve(1)
    assert full_speed[0] == plan.gears[1].speed[0]


def test_torque_after_shift(spec, dense_curve):
    plan = _plan(spec, dense_curve)
    assert plan.torque_after_shift(1) > 0
    assert plan.torque_after_shift(6) == 0.0


def test_fallbacks_replace_non_finite_values(spec, dense_curve):
    rpm = dense_curve.rpm
    assert _fallback_shift_rpm(float('nan'), rpm, 1) == rpm[-1]
    assert _fallback_shift_rpm(8000.0, rpm, 1) == 8000.0

    speed = _fallback_shift_speed(float('inf'), rpm, 2.92, spec.final_drive, spec, 1)
    assert np.isfinite(speed)
    assert speed == pytest.approx(_plan(spec, dense_curve, 999999).shift_speed[1])


def test_flat_zero_power_curve_shifts_at_grid_minimum(spec):
    rpm = np.linspace(3000, 12000, 751)
    plan = solve_shift_points(np.zeros_like(rpm), rpm, spec.gear_ratios, spec.final_drive, OPTIMAL, spec)
    assert all(value == 3000.0 for value in plan.shift_rpm.values())


@pytest.mark.parametrize("value,expected", [
    ('optimal', None),
    ('OPTIMAL', None),
    (None, None),
    (9000, 9000.0),
    ('12500', 12500.0),
])
def test_parse_policy(value, expected):
    policy = ShiftPolicy.parse(value)
    assert policy.rpm == expected
    assert policy.is_optimal == (expected is None)


@pytest.mark.parametrize("value", [3399, 16001, 'fast', float('nan')])
def test_parse_policy_rejects_out_of_domain(value):
    with pytest.raises(ConfigurationError):
        ShiftPolicy.parse(value)


def test_policy_str():
    assert str(OPTIMAL) == 'optimal'
    assert str(ShiftPolicy.custom(11000)) == '11000 RPM'
