"""
Constants module for motorcycle drivetrain performance simulation.

This module provides physical constants, unit conversion factors, and reference values
used throughout the drivetrain, shift-point and acceleration calculations.

The numeric core works in the conventional imperial dyno unit system:
power in horsepower, torque in lb-ft, road speed in mph, tire circumference in
inches and vehicle mass in pounds. The acceleration integrator converts to SI
internally and reports acceleration in m/s².
"""

import numpy as np
from enum import Enum

# Physical constants
GRAVITY = 9.80665  # m/s², standard gravity
AIR_DENSITY_SEA_LEVEL = 1.225  # kg/m³, air density at sea level (15°C, 1013.25 hPa)

# Drivetrain constants
HP_TORQUE_CONSTANT = 5252.0  # lb-ft·rpm/hp, torque = hp * 5252 / rpm
MPH_RPM_CONSTANT = 1056.0  # in·rpm/mph per unit overall ratio (63360 in/mile / 60 min/h)

# Unit conversion factors
LBS_TO_KG = 0.45359237  # Convert pounds to kg
KG_TO_LBS = 2.20462  # Convert kg to pounds
LBFT_TO_NM = 1.3558179483  # Convert lb·ft to N·m
NM_TO_LBFT = 1.0 / LBFT_TO_NM  # Convert N·m to lb·ft
INCH_TO_M = 0.0254  # Convert inches to meters
MPH_TO_MS = 0.44704  # Convert mph to m/s
MS_TO_MPH = 2.236936  # Convert m/s to mph
MPH_TO_KMH = 1.609344  # Convert mph to km/h
M_TO_FT = 3.28084  # Convert meters to feet
FT_TO_M = 0.3048  # Convert feet to meters
HP_TO_KW = 0.7457  # Convert horsepower to kilowatts
QUARTER_MILE_FT = 1320.0  # ft

# Dense grid resolution (intervals; the grid holds DENSE_POINTS + 1 samples)
DENSE_POINTS = 750

# Simulation reference values
DEFAULT_TIME_STEP = 0.02  # s
DEFAULT_MASS_LB = 580.0  # lb, bike plus rider
DEFAULT_SHIFT_TIME_MS = 80.0  # ms, power interruption per upshift
MAX_SIMULATION_STEPS = 20000
MIN_TERMINATION_TIME = 35.0  # s, no redline/steady-state stop before this
STEADY_STATE_ACCEL = 0.01  # m/s², below this the run may be considered settled
STEADY_STATE_MIN_SPEED_MPH = 60.0  # mph, cruise floor for the steady-state exit
STEADY_STATE_WINDOW = 200  # samples
STEADY_STATE_SPEED_EPS_MPH = 0.1  # mph

# Shift policy domain accepted from the user
MIN_CUSTOM_SHIFT_RPM = 3400
MAX_CUSTOM_SHIFT_RPM = 16000

# Worst-case envelopes for axis bounds
BOUNDS_MIN_FRONT_SPROCKET = 12
BOUNDS_MAX_REAR_SPROCKET = 53
BOUNDS_WHEEL_TORQUE_SPROCKETS = (13, 50)  # front, rear; roughly 800 lb-ft at the wheel
BOUNDS_MAX_MASS_LB = 1000.0
BOUNDS_MAX_SHIFT_TIME_MS = 300.0
BOUNDS_MIN_SPEED_MPH = 160.0
BOUNDS_MIN_TIME_S = 35.0


def mph_to_kmh(speed_mph):
    """Convert speed from mph to km/h."""
    return speed_mph * MPH_TO_KMH


def ft_to_m(distance_ft):
    """Convert distance from feet to meters."""
    return distance_ft * FT_TO_M


def lb_to_kg(mass_lb):
    """Convert mass from pounds to kilograms."""
    return mass_lb * LBS_TO_KG


def lbft_to_nm(torque_lbft):
    """Convert torque from lb·ft to N·m."""
    return torque_lbft * LBFT_TO_NM


def hp_to_kw(power_hp):
    """Convert power from horsepower to kilowatts."""
    return power_hp * HP_TO_KW


class UnitSystem(Enum):
    """Display unit systems for charts and reports."""
    IMPERIAL = 'imperial'  # mph, ft, lb, lb-ft, hp
    METRIC = 'metric'      # km/h, m, kg, N·m, kW


# Display conversion factors from the core's base units, keyed by unit system
DISPLAY_UNITS = {
    UnitSystem.IMPERIAL: {
        'speed': (1.0, 'mph'),
        'distance': (1.0, 'ft'),
        'mass': (1.0, 'lb'),
        'torque': (1.0, 'lb-ft'),
        'power': (1.0, 'hp'),
    },
    UnitSystem.METRIC: {
        'speed': (MPH_TO_KMH, 'km/h'),
        'distance': (FT_TO_M, 'm'),
        'mass': (LBS_TO_KG, 'kg'),
        'torque': (LBFT_TO_NM, 'N·m'),
        'power': (HP_TO_KW, 'kW'),
    },
}


def convert_for_display(values, quantity: str, unit_system: UnitSystem = UnitSystem.IMPERIAL):
    """
    Convert values in the core's base units into the requested display units.

    Args:
        values: Scalar or array in base units
        quantity: One of 'speed', 'distance', 'mass', 'torque', 'power'
        unit_system: Target unit system

    Returns:
        Tuple of (converted values, unit label)
    """
    factor, label = DISPLAY_UNITS[UnitSystem(unit_system)][quantity]
    return np.asarray(values, dtype=float) * factor, label
