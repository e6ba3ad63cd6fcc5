"""
Motorcycle drivetrain performance simulation.

Dyno curves, gearing kinematics, shift-point solving and straight-line
acceleration simulation for chain-driven sequential-gearbox motorcycles.
"""

__version__ = '0.1.0'

from .utils.validation import ConfigurationError
from .engine import DynoDataset, DenseCurve, densify, interpolate, load_dyno_csv
from .transmission import ShiftPolicy, ShiftPlan, OPTIMAL, solve_shifts, speed_to_rpm, rpm_to_speed, wheel_torque
from .core import VehicleSpec, VehicleRecord, Sprockets, load_vehicle_catalog, load_vehicle
from .performance import (
    AccelSample, simulate, analyze_performance_metrics, AccelerationSimulator,
    StoredConfiguration, compare_configurations, AxisBounds, estimate_bounds
)

__all__ = [
    '__version__',
    'ConfigurationError',

    # Engine
    'DynoDataset',
    'DenseCurve',
    'densify',
    'interpolate',
    'load_dyno_csv',

    # Transmission
    'ShiftPolicy',
    'ShiftPlan',
    'OPTIMAL',
    'solve_shifts',
    'speed_to_rpm',
    'rpm_to_speed',
    'wheel_torque',

    # Core
    'VehicleSpec',
    'VehicleRecord',
    'Sprockets',
    'load_vehicle_catalog',
    'load_vehicle',

    # Performance
    'AccelSample',
    'simulate',
    'analyze_performance_metrics',
    'AccelerationSimulator',
    'StoredConfiguration',
    'compare_configurations',
    'AxisBounds',
    'estimate_bounds'
]
