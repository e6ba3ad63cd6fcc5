"""
Utility modules for motorcycle drivetrain performance simulation.

This package provides utility modules for constants, plotting, and validation
used throughout the drivetrain simulation project.
"""

# Import key functions and objects for easier access
from .constants import (
    # Physical constants
    GRAVITY, AIR_DENSITY_SEA_LEVEL,

    # Drivetrain constants
    HP_TORQUE_CONSTANT, MPH_RPM_CONSTANT, DENSE_POINTS,

    # Unit conversion factors
    LBS_TO_KG, KG_TO_LBS, LBFT_TO_NM, NM_TO_LBFT, INCH_TO_M,
    MPH_TO_MS, MS_TO_MPH, MPH_TO_KMH, M_TO_FT, FT_TO_M, HP_TO_KW,

    # Unit conversion functions
    mph_to_kmh, ft_to_m, lb_to_kg, lbft_to_nm, hp_to_kw,
    convert_for_display, UnitSystem,

    # Simulation reference values
    DEFAULT_TIME_STEP, DEFAULT_MASS_LB, DEFAULT_SHIFT_TIME_MS,
    MAX_SIMULATION_STEPS, MIN_TERMINATION_TIME,
    MIN_CUSTOM_SHIFT_RPM, MAX_CUSTOM_SHIFT_RPM,
)

# Import validation functions
from .validation import (
    ConfigurationError,
    validate_in_range, validate_positive, validate_dyno_samples,
    validate_gear_ratios, validate_simulation_inputs,
)

# Define what is exported by default
__all__ = [
    # Constants
    'GRAVITY', 'AIR_DENSITY_SEA_LEVEL',
    'HP_TORQUE_CONSTANT', 'MPH_RPM_CONSTANT', 'DENSE_POINTS',
    'LBS_TO_KG', 'KG_TO_LBS', 'LBFT_TO_NM', 'NM_TO_LBFT', 'INCH_TO_M',
    'MPH_TO_MS', 'MS_TO_MPH', 'MPH_TO_KMH', 'M_TO_FT', 'FT_TO_M', 'HP_TO_KW',
    'mph_to_kmh', 'ft_to_m', 'lb_to_kg', 'lbft_to_nm', 'hp_to_kw',
    'convert_for_display', 'UnitSystem',
    'DEFAULT_TIME_STEP', 'DEFAULT_MASS_LB', 'DEFAULT_SHIFT_TIME_MS',
    'MAX_SIMULATION_STEPS', 'MIN_TERMINATION_TIME',
    'MIN_CUSTOM_SHIFT_RPM', 'MAX_CUSTOM_SHIFT_RPM',

    # Validation
    'ConfigurationError',
    'validate_in_range', 'validate_positive', 'validate_dyno_samples',
    'validate_gear_ratios', 'validate_simulation_inputs',
]
