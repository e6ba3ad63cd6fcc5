"""
Performance analysis module for motorcycle drivetrain performance simulation.

This module provides the straight-line acceleration simulator, its performance
metrics and configuration comparison, and the fixed chart ranges derived from
a worst-case acceleration run.
"""

# Import from acceleration module
from .acceleration import (
    ShiftEvent,
    AccelSample,
    ACCEL_VIEWS,
    simulate_acceleration,
    simulate,
    analyze_performance_metrics,
    AccelerationSimulator,
    StoredConfiguration,
    compare_configurations
)

# Import from axis bounds module
from .axis_bounds import (
    WheelBounds,
    DynoBounds,
    AccelBounds,
    AxisBounds,
    estimate_bounds
)

# Define package exports
__all__ = [
    # Acceleration
    'ShiftEvent',
    'AccelSample',
    'ACCEL_VIEWS',
    'simulate_acceleration',
    'simulate',
    'analyze_performance_metrics',
    'AccelerationSimulator',
    'StoredConfiguration',
    'compare_configurations',

    # Axis bounds
    'WheelBounds',
    'DynoBounds',
    'AccelBounds',
    'AxisBounds',
    'estimate_bounds'
]
