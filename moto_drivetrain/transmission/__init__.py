"""
Transmission module for motorcycle drivetrain performance simulation.

This module provides the drivetrain kinematics of a chain-driven sequential
motorcycle gearbox and the shift strategies that decide when to upshift.

The transmission system consists of:
1. Gearing functions (primary drive, gearbox, final drive sprockets)
2. Shift strategy solving (optimal torque-crossover or custom RPM)
"""

# Import gearing functions
from .gearing import (
    final_drive_ratio,
    overall_ratio,
    overall_ratios,
    speed_to_rpm,
    rpm_to_speed,
    wheel_torque,
    wheel_to_engine_torque,
    engine_torque,
    gear_curves,
    top_speed_at_rpm
)

# Import shift strategy components
from .shift_strategy import (
    StrategyType,
    ShiftPolicy,
    OPTIMAL,
    GearShiftData,
    ShiftPlan,
    solve_shift_points,
    solve_shifts
)

# Define public API
__all__ = [
    # Gearing
    'final_drive_ratio',
    'overall_ratio',
    'overall_ratios',
    'speed_to_rpm',
    'rpm_to_speed',
    'wheel_torque',
    'wheel_to_engine_torque',
    'engine_torque',
    'gear_curves',
    'top_speed_at_rpm',

    # Shift strategy
    'StrategyType',
    'ShiftPolicy',
    'OPTIMAL',
    'GearShiftData',
    'ShiftPlan',
    'solve_shift_points',
    'solve_shifts'
]
