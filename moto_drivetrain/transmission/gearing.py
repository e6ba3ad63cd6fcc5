"""
Gearing system module for motorcycle drivetrain performance simulation.

This module provides the drivetrain kinematics of a chain-driven motorcycle:
conversions between road speed and engine RPM, and between engine power and
wheel torque, through the primary drive, the gearbox and the final drive
sprockets.

Units: speed in mph, tire circumference in inches, power in hp, torque in lb-ft.
All functions accept scalars or numpy arrays and hold no state. The `spec`
argument is any object exposing `primary_drive` and `tire_circumference`
(normally a VehicleSpec).
"""

import numpy as np
from typing import TYPE_CHECKING, Dict, List, Tuple
import logging

from ..engine.dyno_curve import engine_torque
from ..utils.constants import MPH_RPM_CONSTANT

if TYPE_CHECKING:
    from ..core.vehicle import VehicleSpec

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("Gearing_System")


def final_drive_ratio(front_teeth: int, rear_teeth: int) -> float:
    """
    Calculate the final drive ratio of a sprocket combination.

    Args:
        front_teeth: Teeth on the countershaft (drive) sprocket
        rear_teeth: Teeth on the rear wheel (driven) sprocket

    Returns:
        Final drive ratio (rear / front)
    """
    return rear_teeth / front_teeth


def overall_ratio(gear_ratio: float, final_drive: float, spec: 'VehicleSpec') -> float:
    """
    Calculate the overall reduction from crankshaft to rear wheel.

    Args:
        gear_ratio: Gearbox ratio of the selected gear
        final_drive: Final drive ratio
        spec: Vehicle specification

    Returns:
        primary_drive * gear_ratio * final_drive
    """
    return spec.primary_drive * gear_ratio * final_drive


def speed_to_rpm(speed, gear_ratio: float, final_drive: float, spec: 'VehicleSpec'):
    """
    Calculate the engine speed for a road speed in a given gear.

    Args:
        speed: Road speed in mph
        gear_ratio: Gearbox ratio of the selected gear
        final_drive: Final drive ratio
        spec: Vehicle specification

    Returns:
        Engine speed in RPM
    """
    return speed * overall_ratio(gear_ratio, final_drive, spec) * MPH_RPM_CONSTANT / spec.tire_circumference


def rpm_to_speed(rpm, gear_ratio: float, final_drive: float, spec: 'VehicleSpec'):
    """
    Calculate the road speed for an engine speed in a given gear.

    Args:
        rpm: Engine speed in RPM
        gear_ratio: Gearbox ratio of the selected gear
        final_drive: Final drive ratio
        spec: Vehicle specification

    Returns:
        Road speed in mph
    """
    return rpm * spec.tire_circumference / (overall_ratio(gear_ratio, final_drive, spec) * MPH_RPM_CONSTANT)


def wheel_torque(rpm, hp, gear_ratio: float, final_drive: float, spec: 'VehicleSpec'):
    """
    Calculate the torque at the rear wheel.

    Drivetrain losses are not modelled; dyno figures are taken as delivered.

    Args:
        rpm: Engine speed in RPM (must be > 0)
        hp: Engine power in hp at that RPM
        gear_ratio: Gearbox ratio of the selected gear
        final_drive: Final drive ratio
        spec: Vehicle specification

    Returns:
        Wheel torque in lb-ft
    """
    return engine_torque(rpm, hp) * overall_ratio(gear_ratio, final_drive, spec)


def wheel_to_engine_torque(torque, gear_ratio: float, final_drive: float, spec: 'VehicleSpec'):
    """
    Calculate the engine torque that produces a given wheel torque.

    Args:
        torque: Wheel torque in lb-ft
        gear_ratio: Gearbox ratio of the selected gear
        final_drive: Final drive ratio
        spec: Vehicle specification

    Returns:
        Engine torque in lb-ft
    """
    return torque / overall_ratio(gear_ratio, final_drive, spec)


def gear_curves(rpm: np.ndarray, hp: np.ndarray, gear_ratios: Dict[int, float],
                final_drive: float, spec: 'VehicleSpec') -> Tuple[Dict[int, np.ndarray], Dict[int, np.ndarray]]:
    """
    Calculate wheel-torque and road-speed curves of every gear over an RPM grid.

    Args:
        rpm: Engine speed grid in RPM
        hp: Horsepower at each grid point
        gear_ratios: Mapping of gear number to gearbox ratio
        final_drive: Final drive ratio
        spec: Vehicle specification

    Returns:
        Tuple of (wheel torque by gear, speed by gear)
    """
    torque_by_gear = {}
    speed_by_gear = {}
    for gear, ratio in gear_ratios.items():
        torque_by_gear[gear] = wheel_torque(rpm, hp, ratio, final_drive, spec)
        speed_by_gear[gear] = rpm_to_speed(rpm, ratio, final_drive, spec)
    return torque_by_gear, speed_by_gear


def overall_ratios(gear_ratios: Dict[int, float], final_drive: float, spec: 'VehicleSpec') -> List[float]:
    """
    Calculate the overall drive ratios for each gear.

    Returns:
        List of overall ratios ordered by gear
    """
    ratios = [overall_ratio(gear_ratios[gear], final_drive, spec) for gear in sorted(gear_ratios)]
    logger.debug(f"Overall gear ratios: {[f'{ratio:.2f}' for ratio in ratios]}")
    return ratios


def top_speed_at_rpm(rpm: float, gear_ratios: Dict[int, float], final_drive: float,
                     spec: 'VehicleSpec') -> float:
    """
    Calculate the geared speed at an engine RPM in the top gear.

    Returns:
        Speed in mph
    """
    top_gear = max(gear_ratios)
    return float(rpm_to_speed(rpm, gear_ratios[top_gear], final_drive, spec))

