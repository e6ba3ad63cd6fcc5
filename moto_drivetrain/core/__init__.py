"""
Core module for motorcycle drivetrain performance simulation.

This module provides the immutable vehicle specification, the vehicle record
that pairs it with dyno datasets, and the vehicle catalog loader.
"""

from .vehicle import (
    Sprockets,
    VehicleSpec,
    VehicleRecord,
    load_vehicle_catalog,
    load_vehicle,
    DEFAULT_VEHICLE_ID
)

__all__ = [
    'Sprockets',
    'VehicleSpec',
    'VehicleRecord',
    'load_vehicle_catalog',
    'load_vehicle',
    'DEFAULT_VEHICLE_ID'
]
