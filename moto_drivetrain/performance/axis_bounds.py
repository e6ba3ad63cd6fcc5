"""
Axis bounds module for motorcycle drivetrain performance simulation.

Chart ranges are derived once per vehicle from a worst-case envelope (largest
final drive, heaviest load, slowest shift) so that charts keep a fixed scale
while the user changes sprockets, mass or shift settings.
"""

import math
import numpy as np
from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping, Optional
import logging

from ..engine.dyno_curve import DenseCurve, DynoDataset, engine_torque
from ..transmission.gearing import final_drive_ratio, rpm_to_speed, wheel_torque
from ..transmission.shift_strategy import OPTIMAL
from ..utils.constants import (
    BOUNDS_MIN_FRONT_SPROCKET, BOUNDS_MAX_REAR_SPROCKET, BOUNDS_WHEEL_TORQUE_SPROCKETS,
    BOUNDS_MAX_MASS_LB, BOUNDS_MAX_SHIFT_TIME_MS, BOUNDS_MIN_SPEED_MPH, BOUNDS_MIN_TIME_S,
    DEFAULT_TIME_STEP
)
from .acceleration import simulate

if TYPE_CHECKING:
    from ..core.vehicle import VehicleSpec

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("Axis_Bounds")


@dataclass(frozen=True)
class WheelBounds:
    """Wheel-torque chart: speed (mph) by wheel torque (lb-ft)."""
    max_speed: float
    max_torque: float


@dataclass(frozen=True)
class DynoBounds:
    """Dyno chart: power (hp) and engine torque (lb-ft) over RPM."""
    max_hp: float
    max_torque: float
    min_rpm: float
    max_rpm: float


@dataclass(frozen=True)
class AccelBounds:
    """Acceleration charts: time (s), speed (mph), distance (ft), g."""
    max_time: float
    max_speed: float
    max_distance: float
    max_g: float = 1.0


@dataclass(frozen=True)
class AxisBounds:
    """Fixed chart ranges of one vehicle."""
    wheel: WheelBounds
    dyno: DynoBounds
    accel: AccelBounds


def _round_up(value: float, margin: float, step: float) -> float:
    """Add a proportional margin and round up to a multiple of step."""
    return float(math.ceil(value * margin / step) * step)


def estimate_bounds(spec: 'VehicleSpec', dense_curve: DenseCurve,
                    datasets: Optional[Mapping[str, DynoDataset]] = None,
                    dt: float = DEFAULT_TIME_STEP) -> AxisBounds:
    """
    Estimate fixed chart ranges from a worst-case envelope.

    The dataset with the highest power sample drives every estimate. Wheel and
    dyno ranges come from its raw samples when `datasets` is given (its dense
    curve otherwise); acceleration ranges come from one simulation at the
    largest final drive, mass and shift time the inputs allow.

    Args:
        spec: Vehicle specification
        dense_curve: Dense curve of the vehicle
        datasets: Raw dyno datasets, keyed like the dense curve
        dt: Simulation time step in s

    Returns:
        AxisBounds
    """
    if datasets:
        dataset_name = max(datasets, key=lambda name: float(np.max(datasets[name].hp)))
        rpm = datasets[dataset_name].rpm
        hp = datasets[dataset_name].hp
    else:
        dataset_name = dense_curve.max_power_dataset()
        rpm = dense_curve.rpm
        hp = dense_curve.hp_for(dataset_name)

    # Wheel torque chart
    wheel_final_drive = final_drive_ratio(*BOUNDS_WHEEL_TORQUE_SPROCKETS)
    max_wheel_speed = 0.0
    max_wheel_torque = 0.0
    for ratio in spec.gear_ratios.values():
        max_wheel_speed = max(max_wheel_speed, float(np.max(rpm_to_speed(rpm, ratio, wheel_final_drive, spec))))
        max_wheel_torque = max(max_wheel_torque, float(np.max(wheel_torque(rpm, hp, ratio, wheel_final_drive, spec))))

    wheel = WheelBounds(
        max_speed=max(BOUNDS_MIN_SPEED_MPH, _round_up(max_wheel_speed, 1.1, 10)),
        max_torque=_round_up(max_wheel_torque, 1.05, 100)
    )

    # Dyno chart
    dyno = DynoBounds(
        max_hp=_round_up(float(np.max(hp)), 1.1, 10),
        max_torque=_round_up(float(np.max(engine_torque(rpm, hp))), 1.1, 10),
        min_rpm=float(rpm[0]),
        max_rpm=float(rpm[-1])
    )

    # Acceleration charts
    extreme_final_drive = final_drive_ratio(BOUNDS_MIN_FRONT_SPROCKET, BOUNDS_MAX_REAR_SPROCKET)
    sample = simulate(dense_curve, dataset_name, extreme_final_drive, spec,
                      mass=BOUNDS_MAX_MASS_LB, shift_time_ms=BOUNDS_MAX_SHIFT_TIME_MS,
                      shift_policy=OPTIMAL, dt=dt)

    accel = AccelBounds(
        max_time=max(BOUNDS_MIN_TIME_S, float(math.ceil(float(np.max(sample.time)) * 1.1))),
        max_speed=max(BOUNDS_MIN_SPEED_MPH, _round_up(float(np.max(sample.speed)), 1.1, 10)),
        # Full run distance with 100% margin so the curve past MIN_TERMINATION_TIME stays visible
        max_distance=_round_up(float(np.max(sample.distance)), 2.0, 100),
        max_g=1.0
    )

    bounds = AxisBounds(wheel=wheel, dyno=dyno, accel=accel)
    logger.info(f"Axis bounds from '{dataset_name}': wheel {wheel.max_speed:.0f} mph / {wheel.max_torque:.0f} lb-ft, "
                f"dyno {dyno.max_hp:.0f} hp, accel {accel.max_time:.0f} s / {accel.max_speed:.0f} mph")
    return bounds
