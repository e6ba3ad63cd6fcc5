"""
Engine module for motorcycle drivetrain performance simulation.

This module provides the dyno-curve side of the model: raw dyno datasets,
the piecewise-linear interpolator and the dense resampling shared by the shift
solver and the acceleration simulator.
"""

from .dyno_curve import (
    interpolate,
    engine_torque,
    DynoDataset,
    DenseCurve,
    densify,
    load_dyno_csv,
    datasets_from_mapping
)

__all__ = [
    'interpolate',
    'engine_torque',
    'DynoDataset',
    'DenseCurve',
    'densify',
    'load_dyno_csv',
    'datasets_from_mapping'
]
