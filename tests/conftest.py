"""Shared fixtures for the drivetrain simulation tests."""

import os

import matplotlib
matplotlib.use('Agg')

import pytest
import yaml

from moto_drivetrain.core import Sprockets, VehicleRecord, VehicleSpec
from moto_drivetrain.engine import DynoDataset, densify

REPO_CATALOG = os.path.join(os.path.dirname(__file__), '..', 'configs', 'vehicles', 'motorcycles.yaml')

GEAR_RATIOS = {1: 2.92, 2: 2.05, 3: 1.62, 4: 1.33, 5: 1.15, 6: 1.03}

# Peaks at 70 hp at 10000 RPM
STOCK_SAMPLES = [
    [3000, 15.0], [4000, 22.0], [5000, 30.0], [6000, 38.0], [7000, 46.0],
    [8000, 54.0], [9000, 62.0], [10000, 70.0], [11000, 68.0], [12000, 62.0],
]

# Wider span than Stock, so it gets clamped to the Stock grid
RACE_SAMPLES = [
    [2500, 12.0], [4000, 24.0], [6000, 41.0], [8000, 58.0], [10000, 74.0],
    [12000, 68.0], [13000, 60.0],
]


@pytest.fixture
def spec():
    return VehicleSpec(
        primary_drive=2.029,
        tire_circumference=77.15,
        gear_ratios=GEAR_RATIOS,
        crr=0.015,
        cda=0.35,
        sprockets=Sprockets(14, 48),
        default_mass=580.0
    )


@pytest.fixture
def stock():
    return DynoDataset.from_pairs('Stock', STOCK_SAMPLES)


@pytest.fixture
def datasets(stock):
    return {'Stock': stock, 'Race': DynoDataset.from_pairs('Race', RACE_SAMPLES)}


@pytest.fixture
def dense_curve(datasets):
    return densify(datasets)


@pytest.fixture
def record(spec, datasets):
    return VehicleRecord('test-bike', 'Test Bike', spec, datasets)


@pytest.fixture
def catalog_data():
    return {
        'vehicles': {
            'test-bike': {
                'name': 'Test Bike',
                'specifications': {
                    'primary_drive': 2.029,
                    'tire_circ_in': 77.15,
                    'gear_ratios': dict(GEAR_RATIOS),
                    'Crr': 0.015,
                    'CdA': 0.35,
                    'sprockets': {'front': 14, 'rear': 48},
                    'default_weight_lb': 580,
                },
                'hp_data_sets': {
                    'Stock': STOCK_SAMPLES,
                    'Race': RACE_SAMPLES,
                },
            }
        }
    }


@pytest.fixture
def catalog_file(tmp_path, catalog_data):
    path = tmp_path / 'vehicles.yaml'
    path.write_text(yaml.safe_dump(catalog_data, sort_keys=False))
    return str(path)
