"""
Acceleration performance module for motorcycle drivetrain performance simulation.

This module provides the straight-line acceleration simulator: a fixed time-step
integration of longitudinal motion under drive force, rolling resistance and
aerodynamic drag, with sequential upshifts at the thresholds of the shift
strategy and a configurable power interruption while each shift is in progress.
It also provides performance metrics and a convenience simulator bound to a
catalog vehicle.
"""

import os
import numpy as np
import pandas as pd
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple
import logging

from ..engine.dyno_curve import DenseCurve, interpolate
from ..transmission.gearing import speed_to_rpm, wheel_torque
from ..transmission.shift_strategy import OPTIMAL, ShiftPlan, ShiftPolicy, solve_shift_points, solve_shifts
from ..utils.constants import (
    AIR_DENSITY_SEA_LEVEL, GRAVITY, LBFT_TO_NM, LBS_TO_KG, MS_TO_MPH, M_TO_FT,
    DEFAULT_TIME_STEP, DEFAULT_SHIFT_TIME_MS, MAX_SIMULATION_STEPS, MIN_TERMINATION_TIME,
    STEADY_STATE_ACCEL, STEADY_STATE_MIN_SPEED_MPH, STEADY_STATE_WINDOW,
    STEADY_STATE_SPEED_EPS_MPH, QUARTER_MILE_FT
)
from ..utils.validation import ConfigurationError, validate_simulation_inputs

if TYPE_CHECKING:
    from ..core.vehicle import VehicleRecord, VehicleSpec

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("Acceleration_Performance")

# Chart views of an acceleration run: (x series, y series)
ACCEL_VIEWS = {
    'accel_ts': ('time', 'speed'),
    'accel_td': ('time', 'distance'),
    'accel_tg': ('time', 'acceleration_g'),
    'accel_sg': ('speed', 'acceleration_g'),
}


@dataclass(frozen=True)
class ShiftEvent:
    """An upshift: when it started, at what speed (mph), and the gear left."""
    time: float
    speed: float
    gear: int


def _readonly(values, dtype=float) -> np.ndarray:
    array = np.array(values, dtype=dtype)
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class AccelSample:
    """
    Time series of one acceleration run.

    All arrays are indexed by simulation step and have equal length. The first
    sample is always t=0, v=0, s=0 in first gear.

    Attributes:
        time: Elapsed time in s
        speed: Road speed in mph
        acceleration: Longitudinal acceleration in m/s²
        distance: Distance covered in ft
        gear: Engaged gear
        shift_events: Upshifts in the order they started
        stop_reason: 'redline', 'steady_state' or 'step_limit'
    """
    time: np.ndarray
    speed: np.ndarray
    acceleration: np.ndarray
    distance: np.ndarray
    gear: np.ndarray
    shift_events: Tuple[ShiftEvent, ...] = ()
    stop_reason: str = 'step_limit'

    def __post_init__(self):
        for name in ('time', 'speed', 'acceleration', 'distance'):
            object.__setattr__(self, name, _readonly(getattr(self, name)))
        object.__setattr__(self, 'gear', _readonly(self.gear, dtype=int))
        object.__setattr__(self, 'shift_events', tuple(self.shift_events))

    def __len__(self) -> int:
        return len(self.time)

    @property
    def acceleration_g(self) -> np.ndarray:
        return self.acceleration / GRAVITY

    @property
    def final_gear(self) -> int:
        return int(self.gear[-1])

    @property
    def top_speed(self) -> float:
        return float(np.max(self.speed))

    def view(self, name: str) -> Tuple[np.ndarray, np.ndarray]:
        """
        Get the (x, y) series of an acceleration chart view.

        Args:
            name: One of 'accel_ts', 'accel_td', 'accel_tg', 'accel_sg'

        Returns:
            Tuple of (x values, y values)
        """
        if name not in ACCEL_VIEWS:
            raise ConfigurationError(f"Unknown acceleration view '{name}', available: {list(ACCEL_VIEWS)}")
        x_name, y_name = ACCEL_VIEWS[name]
        return getattr(self, x_name), getattr(self, y_name)

    def time_to_speed(self, target_speed: float) -> Optional[float]:
        """Interpolated time (s) to reach a speed in mph, or None if never reached."""
        return _interpolate_crossing(self.speed, self.time, target_speed)

    def time_to_distance(self, target_distance: float) -> Optional[float]:
        """Interpolated time (s) to cover a distance in ft, or None if never reached."""
        return _interpolate_crossing(self.distance, self.time, target_distance)

    def to_dataframe(self) -> pd.DataFrame:
        """Time series as a DataFrame, one row per simulation step."""
        return pd.DataFrame({
            'time_s': self.time,
            'speed_mph': self.speed,
            'acceleration_mps2': self.acceleration,
            'acceleration_g': self.acceleration_g,
            'distance_ft': self.distance,
            'gear': self.gear,
        })

    def shift_events_dataframe(self) -> pd.DataFrame:
        """Shift events as a DataFrame."""
        return pd.DataFrame(
            [(e.time, e.speed, e.gear) for e in self.shift_events],
            columns=['time_s', 'speed_mph', 'from_gear']
        )


def _interpolate_crossing(series: np.ndarray, time: np.ndarray, target: float) -> Optional[float]:
    """Time at which a non-decreasing series first reaches a target value."""
    if len(series) == 0 or np.max(series) < target:
        return None
    idx = int(np.searchsorted(series, target))
    if idx == 0:
        return float(time[0])
    # Linear interpolation
    t0, t1 = time[idx - 1], time[idx]
    s0, s1 = series[idx - 1], series[idx]
    if s1 == s0:
        return float(t1)
    return float(t0 + (t1 - t0) * (target - s0) / (s1 - s0))


def _cooldown_steps(shift_time_ms: float, dt: float) -> int:
    """Number of zero-traction steps per shift, rounded half up."""
    return max(0, int(np.floor(shift_time_ms / 1000.0 / dt + 0.5)))


def simulate_acceleration(hp: np.ndarray, rpm: np.ndarray, final_drive: float, spec: 'VehicleSpec',
                          dt: float = DEFAULT_TIME_STEP, mass: Optional[float] = None,
                          shift_time_ms: float = DEFAULT_SHIFT_TIME_MS,
                          shift_policy=OPTIMAL) -> AccelSample:
    """
    Simulate a full-throttle run from standstill over a dense dyno curve.

    Each step: start an upshift once the gear's shift speed is reached; apply
    zero drive force while the shift is in progress, engaging the next gear
    when it completes; stop at redline in top gear after MIN_TERMINATION_TIME;
    integrate drive minus rolling and aero resistance (never below zero); stop
    at a steady terminal speed after MIN_TERMINATION_TIME. The run is capped at
    MAX_SIMULATION_STEPS steps.

    Args:
        hp: Dense horsepower array
        rpm: Dense RPM grid
        final_drive: Final drive ratio
        spec: Vehicle specification
        dt: Time step in s
        mass: Bike plus rider mass in lb (defaults to spec.default_mass)
        shift_time_ms: Power interruption per upshift in ms
        shift_policy: ShiftPolicy, "optimal" or a custom RPM

    Returns:
        AccelSample
    """
    if mass is None:
        mass = spec.default_mass
    mass, shift_time_ms, dt = validate_simulation_inputs(mass, shift_time_ms, dt)

    rpm = np.asarray(rpm, dtype=float)
    hp = np.asarray(hp, dtype=float)
    rpm_min, rpm_max = float(rpm[0]), float(rpm[-1])
    ratios = spec.gear_ratios
    top_gear = spec.top_gear
    wheel_radius = spec.wheel_radius_m
    mass_kg = mass * LBS_TO_KG

    plan = solve_shift_points(hp, rpm, ratios, final_drive, shift_policy, spec)

    def tractive_force(speed_mph: float, gear: int) -> float:
        engine_rpm = min(max(speed_to_rpm(speed_mph, ratios[gear], final_drive, spec), rpm_min), rpm_max)
        power = interpolate(rpm, hp, engine_rpm)
        return wheel_torque(engine_rpm, power, ratios[gear], final_drive, spec) * LBFT_TO_NM / wheel_radius

    rolling_force = spec.crr * mass_kg * GRAVITY
    cooldown_steps = _cooldown_steps(shift_time_ms, dt)

    gear = 1
    t = v = s = 0.0
    cooldown = 0
    pending_gear = None

    times, speeds, accels, distances, gears = [0.0], [0.0], [0.0], [0.0], [gear]
    shift_events = []
    stop_reason = 'step_limit'

    for _ in range(MAX_SIMULATION_STEPS):
        speed_mph = v * MS_TO_MPH

        if cooldown == 0 and pending_gear is None and gear < top_gear and plan.should_upshift(gear, speed_mph):
            shift_events.append(ShiftEvent(t, speed_mph, gear))
            pending_gear = gear + 1
            cooldown = cooldown_steps
            if cooldown == 0:
                # Instantaneous shift
                gear, pending_gear = pending_gear, None

        if cooldown > 0:
            drive_force = 0.0
            cooldown -= 1
            if cooldown == 0 and pending_gear is not None:
                gear, pending_gear = pending_gear, None
        else:
            drive_force = tractive_force(speed_mph, gear)

        engine_rpm = speed_to_rpm(speed_mph, ratios[gear], final_drive, spec)
        if t >= MIN_TERMINATION_TIME and gear == top_gear and engine_rpm >= rpm_max:
            stop_reason = 'redline'
            break

        aero_force = 0.5 * AIR_DENSITY_SEA_LEVEL * spec.cda * v * v
        net_force = max(0.0, drive_force - rolling_force - aero_force)
        a = net_force / mass_kg

        # Constant-acceleration update over one step
        s += v * dt + 0.5 * a * dt * dt
        v += a * dt
        t += dt

        times.append(t)
        speeds.append(v * MS_TO_MPH)
        accels.append(a)
        distances.append(s * M_TO_FT)
        gears.append(gear)

        if t >= MIN_TERMINATION_TIME and a < STEADY_STATE_ACCEL and speeds[-1] > STEADY_STATE_MIN_SPEED_MPH:
            if (len(speeds) > STEADY_STATE_WINDOW and
                    abs(speeds[-1] - speeds[-STEADY_STATE_WINDOW]) < STEADY_STATE_SPEED_EPS_MPH):
                stop_reason = 'steady_state'
                break
    else:
        logger.warning(f"Acceleration run hit the {MAX_SIMULATION_STEPS} step limit at t={t:.1f}s, "
                       f"{v * MS_TO_MPH:.1f} mph in gear {gear}")

    logger.debug(f"Acceleration run finished ({stop_reason}): {len(times)} samples, "
                 f"{len(shift_events)} shifts, {v * MS_TO_MPH:.1f} mph")

    return AccelSample(
        time=times,
        speed=speeds,
        acceleration=accels,
        distance=distances,
        gear=gears,
        shift_events=shift_events,
        stop_reason=stop_reason
    )


def simulate(dense_curve: DenseCurve, dataset_name: str, final_drive: float, spec: 'VehicleSpec',
             mass: Optional[float] = None, shift_time_ms: float = DEFAULT_SHIFT_TIME_MS,
             shift_policy=OPTIMAL, dt: float = DEFAULT_TIME_STEP) -> AccelSample:
    """
    Simulate an acceleration run for one dyno dataset of a densified vehicle curve.

    Args:
        dense_curve: Dense curve of the vehicle
        dataset_name: Dyno dataset to use (e.g. "Stock")
        final_drive: Final drive ratio (rear / front sprocket teeth)
        spec: Vehicle specification
        mass: Bike plus rider mass in lb (defaults to spec.default_mass)
        shift_time_ms: Power interruption per upshift in ms
        shift_policy: ShiftPolicy, "optimal" or a custom RPM
        dt: Time step in s

    Returns:
        AccelSample
    """
    sample = simulate_acceleration(dense_curve.hp_for(dataset_name), dense_curve.rpm, final_drive, spec,
                                   dt=dt, mass=mass, shift_time_ms=shift_time_ms,
                                   shift_policy=shift_policy)
    logger.info(f"Acceleration simulation completed for '{dataset_name}': {sample.time[-1]:.1f}s, "
                f"{sample.top_speed:.1f} mph, gear {sample.final_gear} ({sample.stop_reason})")
    return sample


def analyze_performance_metrics(sample: AccelSample) -> Dict:
    """
    Calculate acceleration performance metrics of a run.

    Args:
        sample: Results from simulate

    Returns:
        Dictionary with performance metrics; times are None when not reached
    """
    accel = sample.acceleration
    peak_idx = int(np.argmax(accel))

    quarter_mile_time = sample.time_to_distance(QUARTER_MILE_FT)
    quarter_mile_speed = None
    if quarter_mile_time is not None:
        quarter_mile_speed = float(np.interp(quarter_mile_time, sample.time, sample.speed))

    metrics = {
        'time_to_60mph': sample.time_to_speed(60.0),
        'time_to_100mph': sample.time_to_speed(100.0),
        'quarter_mile_time': quarter_mile_time,
        'quarter_mile_speed': quarter_mile_speed,
        'peak_acceleration': float(accel[peak_idx]),
        'peak_acceleration_g': float(accel[peak_idx] / GRAVITY),
        'peak_acceleration_time': float(sample.time[peak_idx]),
        'top_speed': sample.top_speed,
        'final_gear': sample.final_gear,
        'shift_count': len(sample.shift_events),
        'duration': float(sample.time[-1]),
        'stop_reason': sample.stop_reason
    }

    return metrics


class AccelerationSimulator:
    """
    Acceleration simulator bound to one catalog vehicle.

    Holds the user-adjustable inputs (dataset, sprockets, mass, shift time,
    shift policy) and caches results per input combination. The underlying
    calculation is the stateless `simulate` function.
    """

    def __init__(self, vehicle: 'VehicleRecord'):
        """
        Initialize the acceleration simulator with a vehicle record.

        Args:
            vehicle: Catalog vehicle to simulate
        """
        self.vehicle = vehicle
        self.results_cache = {}  # Cache for simulation results

        # Default parameters
        self.dataset = vehicle.default_dataset
        self.front = vehicle.spec.sprockets.front
        self.rear = vehicle.spec.sprockets.rear
        self.mass = vehicle.spec.default_mass
        self.shift_time_ms = DEFAULT_SHIFT_TIME_MS
        self.shift_policy = OPTIMAL
        self.time_step = DEFAULT_TIME_STEP

        logger.info(f"Acceleration simulator initialized for {vehicle.name}")

    @property
    def final_drive(self) -> float:
        return self.rear / self.front

    def configure(self,
                  dataset: Optional[str] = None,
                  front: Optional[int] = None,
                  rear: Optional[int] = None,
                  mass: Optional[float] = None,
                  shift_time_ms: Optional[float] = None,
                  shift_policy=None,
                  time_step: Optional[float] = None):
        """
        Configure simulation parameters.

        Args:
            dataset: Dyno dataset name
            front: Front sprocket teeth
            rear: Rear sprocket teeth
            mass: Bike plus rider mass in lb
            shift_time_ms: Power interruption per upshift in ms
            shift_policy: "optimal", a custom RPM or a ShiftPolicy
            time_step: Time step in s
        """
        if dataset is not None:
            self.vehicle.dense_curve.hp_for(dataset)
            self.dataset = dataset

        if front is not None or rear is not None:
            sprockets = self.vehicle.spec.with_sprockets(self.front if front is None else front,
                                                         self.rear if rear is None else rear).sprockets
            self.front, self.rear = sprockets.front, sprockets.rear

        self.mass, self.shift_time_ms, self.time_step = validate_simulation_inputs(
            self.mass if mass is None else mass,
            self.shift_time_ms if shift_time_ms is None else shift_time_ms,
            self.time_step if time_step is None else time_step
        )

        if shift_policy is not None:
            self.shift_policy = ShiftPolicy.parse(shift_policy)

        logger.info(f"Configured simulator: {self.dataset}, F{self.front}/R{self.rear}, "
                    f"{self.mass:.0f} lb, {self.shift_time_ms:.0f} ms, {self.shift_policy}")

    def _cache_key(self) -> Tuple:
        return (self.dataset, self.front, self.rear, self.mass, self.shift_time_ms,
                self.shift_policy, self.time_step)

    def shift_plan(self) -> ShiftPlan:
        """Shift plan for the current configuration."""
        return solve_shifts(self.vehicle.dense_curve, self.dataset, self.vehicle.spec.gear_ratios,
                            self.final_drive, self.shift_policy, self.vehicle.spec)

    def simulate_acceleration(self) -> AccelSample:
        """
        Simulate an acceleration run with the current configuration.

        Returns:
            AccelSample (cached per configuration)
        """
        cache_key = self._cache_key()
        if cache_key in self.results_cache:
            logger.info("Using cached acceleration results")
            return self.results_cache[cache_key]

        sample = simulate(self.vehicle.dense_curve, self.dataset, self.final_drive, self.vehicle.spec,
                          mass=self.mass, shift_time_ms=self.shift_time_ms,
                          shift_policy=self.shift_policy, dt=self.time_step)

        self.results_cache[cache_key] = sample
        return sample

    def export_results(self, sample: AccelSample, save_dir: str) -> Dict[str, str]:
        """
        Save a run's time series and shift events to CSV.

        Args:
            sample: Results from simulate_acceleration
            save_dir: Directory to save files in (created if missing)

        Returns:
            Dictionary with the paths of the written files
        """
        os.makedirs(save_dir, exist_ok=True)
        paths = {
            'time_series': os.path.join(save_dir, f"{self.vehicle.vehicle_id}_acceleration.csv"),
            'shift_events': os.path.join(save_dir, f"{self.vehicle.vehicle_id}_shift_events.csv"),
        }
        sample.to_dataframe().to_csv(paths['time_series'], index=False)
        sample.shift_events_dataframe().to_csv(paths['shift_events'], index=False)

        logger.info(f"Acceleration results saved to {save_dir}")
        return paths


@dataclass(frozen=True)
class StoredConfiguration:
    """A frozen set of acceleration inputs, replayed for side-by-side comparison."""
    vehicle: 'VehicleRecord' = field(compare=False)
    dataset: str
    front: int
    rear: int
    mass: float
    shift_time_ms: float = DEFAULT_SHIFT_TIME_MS
    shift_policy: ShiftPolicy = OPTIMAL

    def __post_init__(self):
        sprockets = self.vehicle.spec.with_sprockets(self.front, self.rear).sprockets
        object.__setattr__(self, 'front', sprockets.front)
        object.__setattr__(self, 'rear', sprockets.rear)
        mass, shift_time_ms, _ = validate_simulation_inputs(self.mass, self.shift_time_ms, DEFAULT_TIME_STEP)
        object.__setattr__(self, 'mass', mass)
        object.__setattr__(self, 'shift_time_ms', shift_time_ms)
        object.__setattr__(self, 'shift_policy', ShiftPolicy.parse(self.shift_policy))

    @property
    def label(self) -> str:
        return (f"{self.vehicle.name} (F{self.front}/R{self.rear} {self.dataset}, "
                f"{self.mass:.0f} lb, {self.shift_time_ms:.0f} ms, {self.shift_policy})")

    def run(self) -> AccelSample:
        """Replay the simulation for this configuration."""
        return simulate(self.vehicle.dense_curve, self.dataset, self.rear / self.front, self.vehicle.spec,
                        mass=self.mass, shift_time_ms=self.shift_time_ms, shift_policy=self.shift_policy)


def compare_configurations(configurations: List[StoredConfiguration]) -> Tuple[List[AccelSample], pd.DataFrame]:
    """
    Replay the simulation for several stored configurations.

    Args:
        configurations: Configurations to compare

    Returns:
        Tuple of (one AccelSample per configuration, summary DataFrame)
    """
    samples = [config.run() for config in configurations]

    rows = []
    for config, sample in zip(configurations, samples):
        metrics = analyze_performance_metrics(sample)
        rows.append({
            'configuration': config.label,
            'time_to_60mph': metrics['time_to_60mph'],
            'time_to_100mph': metrics['time_to_100mph'],
            'quarter_mile_time': metrics['quarter_mile_time'],
            'quarter_mile_speed': metrics['quarter_mile_speed'],
            'peak_acceleration_g': metrics['peak_acceleration_g'],
            'top_speed': metrics['top_speed'],
        })

    return samples, pd.DataFrame(rows)
