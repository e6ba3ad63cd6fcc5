"""
Shift strategy module for motorcycle drivetrain performance simulation.

This module determines the upshift points of a sequential motorcycle gearbox
for a given dyno curve and final drive. Two strategies are supported:

- Optimal: shift where the next gear stops delivering less wheel torque. For each
  RPM r in the current gear, the next gear is evaluated at r * (next ratio /
  current ratio), the RPM the engine drops to right after the shift, and the
  first point where the torque difference turns non-negative is located by
  linear interpolation of the zero crossing.
- Custom: shift at a fixed engine RPM, clamped into the dyno curve's RPM range.

The solver never raises on numeric degeneracy: a non-finite shift RPM falls back
to the top of the RPM grid, so the acceleration simulator always receives a
finite, in-range threshold for every gear but the top one.
"""

import numpy as np
from dataclasses import dataclass
from enum import Enum, auto
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, Mapping, Optional, Tuple, Union
import logging

from ..engine.dyno_curve import DenseCurve, interpolate
from ..utils.constants import MIN_CUSTOM_SHIFT_RPM, MAX_CUSTOM_SHIFT_RPM
from ..utils.validation import ConfigurationError, validate_in_range
from .gearing import gear_curves, rpm_to_speed

if TYPE_CHECKING:
    from ..core.vehicle import VehicleSpec

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("Shift_Strategy")


class StrategyType(Enum):
    """Enumeration of shift strategy types."""
    OPTIMAL = auto()  # Shift at the wheel-torque crossover of adjacent gears
    CUSTOM = auto()   # Shift at a fixed user-defined RPM


@dataclass(frozen=True)
class ShiftPolicy:
    """
    Shift policy: the optimal sentinel or a fixed custom shift RPM.
    """
    strategy_type: StrategyType = StrategyType.OPTIMAL
    rpm: Optional[float] = None

    def __post_init__(self):
        if self.strategy_type == StrategyType.CUSTOM and self.rpm is None:
            raise ConfigurationError("Custom shift policy requires an RPM")

    @property
    def is_optimal(self) -> bool:
        return self.strategy_type == StrategyType.OPTIMAL

    @classmethod
    def optimal(cls) -> 'ShiftPolicy':
        return cls(StrategyType.OPTIMAL)

    @classmethod
    def custom(cls, rpm: float) -> 'ShiftPolicy':
        return cls(StrategyType.CUSTOM, float(rpm))

    @classmethod
    def parse(cls, value: Union['ShiftPolicy', str, float, int, None]) -> 'ShiftPolicy':
        """
        Parse user input into a shift policy, rejecting out-of-domain RPM values.

        Accepts None or "optimal" (case-insensitive) for the optimal policy, and
        numbers or numeric strings for a custom RPM between MIN_CUSTOM_SHIFT_RPM
        and MAX_CUSTOM_SHIFT_RPM.

        Raises:
            ConfigurationError: If the value is not a valid policy
        """
        if isinstance(value, ShiftPolicy):
            return value
        if value is None or (isinstance(value, str) and value.strip().lower() == 'optimal'):
            return cls.optimal()

        rpm = validate_in_range(value, "shift RPM", (MIN_CUSTOM_SHIFT_RPM, MAX_CUSTOM_SHIFT_RPM))
        return cls.custom(rpm)

    @classmethod
    def coerce(cls, value: Union['ShiftPolicy', str, float, int, None]) -> 'ShiftPolicy':
        """
        Convert a policy value without domain checks.

        Anything that is not a finite number is treated as the optimal policy;
        numeric values are kept as-is and clamped later against the RPM grid.
        """
        if isinstance(value, ShiftPolicy):
            return value
        try:
            rpm = float(value)
        except (TypeError, ValueError):
            return cls.optimal()
        if not np.isfinite(rpm):
            return cls.optimal()
        return cls.custom(rpm)

    def __str__(self) -> str:
        if self.is_optimal:
            return "optimal"
        return f"{self.rpm:.0f} RPM"


OPTIMAL = ShiftPolicy.optimal()


@dataclass(frozen=True, eq=False)
class GearShiftData:
    """
    Wheel-torque and speed curves of one gear, and its upshift point.

    shift_rpm and shift_speed are None for the top gear.
    """
    gear: int
    wheel_torque: np.ndarray
    speed: np.ndarray
    shift_rpm: Optional[float] = None
    shift_speed: Optional[float] = None

    def __str__(self) -> str:
        if self.shift_rpm is None:
            return f"Gear {self.gear}: top gear"
        return f"Shift from {self.gear} to {self.gear + 1} at {self.shift_rpm:.0f} RPM / {self.shift_speed:.1f} mph"


@dataclass(frozen=True, eq=False)
class ShiftPlan:
    """
    Per-gear curves and shift thresholds for one dataset, final drive and policy.
    """
    rpm: np.ndarray
    gears: Mapping[int, GearShiftData]
    final_drive: float
    policy: ShiftPolicy

    @property
    def top_gear(self) -> int:
        return max(self.gears)

    @property
    def shift_rpm(self) -> Dict[int, float]:
        """Shift RPM by gear, for gears 1..N-1."""
        return {g: data.shift_rpm for g, data in self.gears.items() if data.shift_rpm is not None}

    @property
    def shift_speed(self) -> Dict[int, float]:
        """Shift speed (mph) by gear, for gears 1..N-1."""
        return {g: data.shift_speed for g, data in self.gears.items() if data.shift_speed is not None}

    def should_upshift(self, gear: int, speed: float) -> bool:
        """
        Check whether the speed threshold of the current gear has been reached.

        Args:
            gear: Current gear
            speed: Road speed in mph

        Returns:
            True if an upshift is due, False otherwise (always False in top gear)
        """
        data = self.gears.get(gear)
        if data is None or data.shift_speed is None:
            return False
        return speed >= data.shift_speed

    def clipped_curve(self, gear: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Get the part of a gear's wheel-torque curve actually used under this plan.

        Points below the previous gear's shift speed and above this gear's shift
        speed are dropped.

        Returns:
            Tuple of (speed, wheel torque, rpm) arrays
        """
        data = self.gears[gear]
        mask = np.ones(len(self.rpm), dtype=bool)
        previous = self.gears.get(gear - 1)
        if previous is not None and previous.shift_speed is not None:
            mask &= data.speed >= previous.shift_speed
        if data.shift_speed is not None:
            mask &= data.speed <= data.shift_speed
        return data.speed[mask], data.wheel_torque[mask], self.rpm[mask]

    def torque_after_shift(self, gear: int) -> float:
        """
        Wheel torque of the next gear at this gear's shift speed.

        Returns the torque of the first grid point of gear + 1 at or above the
        shift speed, or 0.0 when the next gear never reaches that speed.
        """
        data = self.gears[gear]
        following = self.gears.get(gear + 1)
        if data.shift_speed is None or following is None:
            return 0.0
        idx = np.flatnonzero(following.speed >= data.shift_speed)
        if idx.size == 0:
            return 0.0
        return float(following.wheel_torque[idx[0]])


def _lerp_root(x1: float, y1: float, x2: float, y2: float) -> float:
    """Linear interpolation of the x at which y crosses zero between two points."""
    return x1 + (0.0 - y1) * (x2 - x1) / (y2 - y1)


def _optimal_shift_rpm(rpm: np.ndarray, torque_current: np.ndarray,
                       torque_next: np.ndarray, step_ratio: float) -> float:
    """
    Find the RPM at which the next gear stops delivering less wheel torque.

    Args:
        rpm: Dense RPM grid
        torque_current: Wheel torque of the current gear over the grid
        torque_next: Wheel torque of the next gear over the grid
        step_ratio: next gear ratio / current gear ratio

    Returns:
        Shift RPM (may be non-finite for degenerate curves)
    """
    # Next-gear torque at the RPM the engine drops to, minus current-gear torque
    diff = interpolate(rpm, torque_next, rpm * step_ratio) - torque_current

    crossings = np.flatnonzero(diff >= 0)
    if crossings.size == 0:
        return float(rpm[-1])

    idx = int(crossings[0])
    if idx == 0:
        return float(rpm[0])

    return float(_lerp_root(rpm[idx - 1], diff[idx - 1], rpm[idx], diff[idx]))


def _fallback_shift_rpm(shift_rpm: float, rpm: np.ndarray, gear: int) -> float:
    """Replace a non-finite shift RPM with the top of the RPM grid."""
    if np.isfinite(shift_rpm):
        return shift_rpm
    logger.warning(f"Shift RPM for gear {gear} is not finite ({shift_rpm}); using {rpm[-1]:.0f} RPM")
    return float(rpm[-1])


def _fallback_shift_speed(shift_speed: float, rpm: np.ndarray, gear_ratio: float,
                          final_drive: float, spec: 'VehicleSpec', gear: int) -> float:
    """Replace a non-finite shift speed with the speed at the top of the RPM grid."""
    if np.isfinite(shift_speed):
        return shift_speed
    logger.warning(f"Shift speed for gear {gear} is not finite ({shift_speed}); using grid maximum")
    return float(rpm_to_speed(rpm[-1], gear_ratio, final_drive, spec))


def solve_shift_points(hp: np.ndarray, rpm: np.ndarray, gear_ratios: Mapping[int, float],
                       final_drive: float, policy, spec: 'VehicleSpec') -> ShiftPlan:
    """
    Calculate the per-gear curves and upshift points over a dense RPM grid.

    Args:
        hp: Dense horsepower array
        rpm: Dense RPM grid (strictly increasing, all > 0)
        gear_ratios: Mapping of gear number (1..N) to gearbox ratio
        final_drive: Final drive ratio
        policy: ShiftPolicy, "optimal" or a custom RPM
        spec: Vehicle specification (primary drive and tire circumference)

    Returns:
        ShiftPlan with gears 1..N; shift points for gears 1..N-1
    """
    rpm = np.asarray(rpm, dtype=float)
    hp = np.asarray(hp, dtype=float)
    policy = ShiftPolicy.coerce(policy)
    ratios = {int(g): float(r) for g, r in sorted(gear_ratios.items())}
    top_gear = max(ratios)

    torque_by_gear, speed_by_gear = gear_curves(rpm, hp, ratios, final_drive, spec)

    gears = {}
    for gear in ratios:
        if gear == top_gear:
            gears[gear] = GearShiftData(gear, torque_by_gear[gear], speed_by_gear[gear])
            continue

        if policy.is_optimal:
            shift_rpm = _optimal_shift_rpm(rpm, torque_by_gear[gear], torque_by_gear[gear + 1],
                                           ratios[gear + 1] / ratios[gear])
        else:
            shift_rpm = float(np.clip(policy.rpm, rpm[0], rpm[-1]))

        shift_rpm = _fallback_shift_rpm(shift_rpm, rpm, gear)
        shift_speed = float(rpm_to_speed(shift_rpm, ratios[gear], final_drive, spec))
        shift_speed = _fallback_shift_speed(shift_speed, rpm, ratios[gear], final_drive, spec, gear)

        gears[gear] = GearShiftData(gear, torque_by_gear[gear], speed_by_gear[gear],
                                    shift_rpm, shift_speed)
        logger.debug(str(gears[gear]))

    return ShiftPlan(rpm=rpm, gears=MappingProxyType(gears), final_drive=final_drive, policy=policy)


def solve_shifts(dense_curve: DenseCurve, dataset_name: str, gear_ratios: Mapping[int, float],
                 final_drive: float, shift_policy, spec: 'VehicleSpec') -> ShiftPlan:
    """
    Calculate shift points for one dyno dataset of a densified vehicle curve.

    Args:
        dense_curve: Dense curve of the vehicle
        dataset_name: Dyno dataset to use (e.g. "Stock")
        gear_ratios: Mapping of gear number (1..N) to gearbox ratio
        final_drive: Final drive ratio (rear / front sprocket teeth)
        shift_policy: ShiftPolicy, "optimal" or a custom RPM
        spec: Vehicle specification

    Returns:
        ShiftPlan
    """
    plan = solve_shift_points(dense_curve.hp_for(dataset_name), dense_curve.rpm,
                              gear_ratios, final_drive, shift_policy, spec)
    shift_rpm = {g: round(r) for g, r in plan.shift_rpm.items()}
    logger.info(f"Shift points for '{dataset_name}' (final drive {final_drive:.3f}, {plan.policy}): {shift_rpm}")
    return plan
