import numpy as np
import pytest

from moto_drivetrain.transmission import (
    final_drive_ratio, gear_curves, overall_ratio, overall_ratios, rpm_to_speed, speed_to_rpm,
    top_speed_at_rpm, wheel_to_engine_torque, wheel_torque
)


def test_final_drive_ratio():
    assert final_drive_ratio(14, 48) == pytest.approx(48 / 14)


def test_overall_ratio(spec):
    assert overall_ratio(2.92, spec.final_drive, spec) == pytest.approx(2.029 * 2.92 * 48 / 14)


def test_speed_to_rpm_known_value(spec):
    # 60 mph in first on 14/48
    expected = 60 * 2.029 * 2.92 * (48 / 14) * 1056 / 77.15
    assert speed_to_rpm(60.0, 2.92, spec.final_drive, spec) == pytest.approx(expected)


@pytest.mark.parametrize("front,rear", [(13, 50), (14, 48), (16, 42)])
def test_speed_rpm_inverse(spec, front, rear):
    fd = final_drive_ratio(front, rear)
    speeds = np.array([0.5, 12.0, 60.0, 133.3])
    for ratio in spec.gear_ratios.values():
        rpm = speed_to_rpm(speeds, ratio, fd, spec)
        np.testing.assert_allclose(rpm_to_speed(rpm, ratio, fd, spec), speeds)


def test_wheel_torque_inverse(spec):
    torque = wheel_torque(8000.0, 54.0, 2.05, spec.final_drive, spec)
    assert torque == pytest.approx(54.0 * 5252 / 8000 * 2.029 * 2.05 * 48 / 14)
    assert wheel_to_engine_torque(torque, 2.05, spec.final_drive, spec) == pytest.approx(54.0 * 5252 / 8000)


def test_gear_curves_shapes(spec, dense_curve):
    torque, speed = gear_curves(dense_curve.rpm, dense_curve.hp_for('Stock'), spec.gear_ratios,
                                spec.final_drive, spec)
    assert sorted(torque) == [1, 2, 3, 4, 5, 6]
    for gear in torque:
        assert torque[gear].shape == dense_curve.rpm.shape
        assert np.all(np.diff(speed[gear]) > 0)
    # Lower gears multiply torque more and reach less speed
    assert np.all(torque[1] > torque[6])
    assert speed[1][-1] < speed[6][-1]


def test_overall_ratios_ordered_by_gear(spec):
    ratios = overall_ratios(spec.gear_ratios, spec.final_drive, spec)
    assert len(ratios) == 6
    assert ratios == sorted(ratios, reverse=True)


def test_top_speed_at_rpm(spec):
    expected = rpm_to_speed(12000.0, 1.03, spec.final_drive, spec)
    assert top_speed_at_rpm(12000.0, spec.gear_ratios, spec.final_drive, spec) == pytest.approx(expected)
