"""
Vehicle module for motorcycle drivetrain performance simulation.

This module defines the immutable vehicle specification consumed by the
drivetrain kinematics, shift-point solver and acceleration simulator, the
vehicle record that groups a specification with its dyno datasets, and the
loader for YAML/JSON vehicle catalogs.

Every calculation receives the VehicleSpec explicitly; no drivetrain state is
shared between calls, so switching vehicles or replaying a stored
configuration never needs to swap anything in and out.
"""

import os
import json
import dataclasses
from dataclasses import dataclass, field
from functools import cached_property
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional
import numpy as np
import yaml
import logging

from ..engine import DynoDataset, DenseCurve, densify, datasets_from_mapping
from ..transmission.gearing import final_drive_ratio
from ..utils.constants import DEFAULT_MASS_LB, INCH_TO_M
from ..utils.validation import (
    ConfigurationError, validate_gear_ratios, validate_in_range, validate_positive
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("Vehicle")

DEFAULT_VEHICLE_ID = 'kawasaki-zx4rr'


@dataclass(frozen=True)
class Sprockets:
    """Front (countershaft) and rear sprocket tooth counts."""
    front: int
    rear: int

    def __post_init__(self):
        for name in ('front', 'rear'):
            value = getattr(self, name)
            if int(value) != value or value <= 0:
                raise ConfigurationError(f"{name} sprocket must be a positive tooth count, got {value}")
            object.__setattr__(self, name, int(value))

    @property
    def ratio(self) -> float:
        return final_drive_ratio(self.front, self.rear)


@dataclass(frozen=True, eq=False)
class VehicleSpec:
    """
    Drivetrain and resistance parameters of one motorcycle.

    Attributes:
        primary_drive: Primary (crank to clutch) reduction ratio
        tire_circumference: Rolling circumference of the rear tire in inches
        gear_ratios: Mapping of gear number (1..N) to gearbox ratio
        crr: Rolling-resistance coefficient
        cda: Drag area (Cd * frontal area) in m²
        sprockets: Stock sprocket combination
        default_mass: Default bike plus rider mass in lb
    """
    primary_drive: float
    tire_circumference: float
    gear_ratios: Mapping[int, float]
    crr: float
    cda: float
    sprockets: Sprockets
    default_mass: float = DEFAULT_MASS_LB

    def __post_init__(self):
        object.__setattr__(self, 'primary_drive', validate_positive(self.primary_drive, "primary_drive"))
        object.__setattr__(self, 'tire_circumference',
                           validate_positive(self.tire_circumference, "tire_circumference"))
        object.__setattr__(self, 'gear_ratios', MappingProxyType(validate_gear_ratios(self.gear_ratios)))
        object.__setattr__(self, 'crr', validate_in_range(self.crr, "Crr", (0.0, None)))
        object.__setattr__(self, 'cda', validate_in_range(self.cda, "CdA", (0.0, None)))
        object.__setattr__(self, 'default_mass', validate_positive(self.default_mass, "default_mass"))
        if not isinstance(self.sprockets, Sprockets):
            object.__setattr__(self, 'sprockets', Sprockets(*self.sprockets))

    @property
    def num_gears(self) -> int:
        return len(self.gear_ratios)

    @property
    def top_gear(self) -> int:
        return self.num_gears

    @property
    def wheel_radius_m(self) -> float:
        """Rear wheel rolling radius in meters."""
        return self.tire_circumference * INCH_TO_M / (2 * np.pi)

    @property
    def final_drive(self) -> float:
        """Final drive ratio of the stock sprockets."""
        return self.sprockets.ratio

    def with_sprockets(self, front: int, rear: int) -> 'VehicleSpec':
        """Return a copy of this specification with different sprockets."""
        return dataclasses.replace(self, sprockets=Sprockets(front, rear))

    @classmethod
    def from_specifications(cls, specs: Mapping[str, Any]) -> 'VehicleSpec':
        """
        Build a specification from a catalog 'specifications' block.

        Args:
            specs: Dictionary with primary_drive, tire_circ_in, gear_ratios,
                Crr, CdA, sprockets {front, rear} and default_weight_lb

        Returns:
            VehicleSpec
        """
        required = ('primary_drive', 'tire_circ_in', 'gear_ratios', 'Crr', 'CdA', 'sprockets')
        missing = [key for key in required if key not in specs]
        if missing:
            raise ConfigurationError(f"Vehicle specification missing keys: {missing}")

        sprockets = specs['sprockets']
        if not isinstance(sprockets, Mapping) or 'front' not in sprockets or 'rear' not in sprockets:
            raise ConfigurationError("Vehicle specification 'sprockets' needs 'front' and 'rear'")

        return cls(
            primary_drive=specs['primary_drive'],
            tire_circumference=specs['tire_circ_in'],
            gear_ratios=specs['gear_ratios'],
            crr=specs['Crr'],
            cda=specs['CdA'],
            sprockets=Sprockets(sprockets['front'], sprockets['rear']),
            default_mass=specs.get('default_weight_lb', DEFAULT_MASS_LB)
        )


@dataclass(frozen=True, eq=False)
class VehicleRecord:
    """A catalog entry: vehicle specification plus its named dyno datasets."""
    vehicle_id: str
    name: str
    spec: VehicleSpec
    datasets: Mapping[str, DynoDataset] = field(default_factory=dict)

    def __post_init__(self):
        if not self.datasets:
            raise ConfigurationError(f"Vehicle '{self.vehicle_id}' has no dyno datasets")
        object.__setattr__(self, 'datasets', MappingProxyType(dict(self.datasets)))

    @cached_property
    def dense_curve(self) -> DenseCurve:
        """Dense resampling of all datasets, built once per record."""
        return densify(self.datasets)

    @property
    def default_dataset(self) -> str:
        """'Stock' when available, otherwise the first dataset."""
        if 'Stock' in self.datasets:
            return 'Stock'
        return next(iter(self.datasets))

    @classmethod
    def from_dict(cls, vehicle_id: str, data: Mapping[str, Any]) -> 'VehicleRecord':
        """
        Build a record from a catalog entry.

        Args:
            vehicle_id: Catalog key of the vehicle
            data: Dictionary with name, specifications and hp_data_sets

        Returns:
            VehicleRecord
        """
        if 'specifications' not in data or 'hp_data_sets' not in data:
            raise ConfigurationError(
                f"Vehicle '{vehicle_id}' needs 'specifications' and 'hp_data_sets'")

        return cls(
            vehicle_id=vehicle_id,
            name=data.get('name', vehicle_id),
            spec=VehicleSpec.from_specifications(data['specifications']),
            datasets=datasets_from_mapping(data['hp_data_sets'])
        )


def load_vehicle_catalog(config_path: str) -> Dict[str, VehicleRecord]:
    """
    Load a vehicle catalog from a YAML or JSON file.

    Args:
        config_path: Path to the catalog file

    Returns:
        Dictionary mapping vehicle id to VehicleRecord, in file order
    """
    if not os.path.exists(config_path):
        raise ConfigurationError(f"Vehicle catalog not found: {config_path}")

    with open(config_path, 'r') as f:
        if config_path.lower().endswith('.json'):
            config = json.load(f)
        else:
            config = yaml.safe_load(f)

    if not isinstance(config, Mapping) or not config:
        raise ConfigurationError(f"Vehicle catalog {config_path} is empty or malformed")

    # Catalogs may nest entries under a top-level 'vehicles' key
    if 'vehicles' in config and isinstance(config['vehicles'], Mapping):
        config = config['vehicles']

    catalog = {}
    for vehicle_id, data in config.items():
        catalog[str(vehicle_id)] = VehicleRecord.from_dict(str(vehicle_id), data)

    logger.info(f"Vehicle catalog loaded from {config_path}: {list(catalog)}")
    return catalog


def load_vehicle(config_path: str, vehicle_id: Optional[str] = None) -> VehicleRecord:
    """
    Load one vehicle from a catalog file.

    Args:
        config_path: Path to the catalog file
        vehicle_id: Vehicle to load (defaults to DEFAULT_VEHICLE_ID, else the first entry)

    Returns:
        VehicleRecord
    """
    catalog = load_vehicle_catalog(config_path)

    if vehicle_id is None:
        vehicle_id = DEFAULT_VEHICLE_ID if DEFAULT_VEHICLE_ID in catalog else next(iter(catalog))

    if vehicle_id not in catalog:
        raise ConfigurationError(f"Vehicle '{vehicle_id}' not found in {config_path}, "
                                 f"available: {list(catalog)}")

    return catalog[vehicle_id]
