"""
Dyno curve module for motorcycle drivetrain performance simulation.

This module holds the engine side of the drivetrain model: sparse dyno
measurements (RPM vs horsepower), the piecewise-linear interpolator used for
every curve lookup, and the densifier that resamples all datasets of a vehicle
onto one shared high-resolution RPM grid.
"""

import os
import numpy as np
import pandas as pd
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union
import logging

from ..utils.constants import DENSE_POINTS, HP_TORQUE_CONSTANT
from ..utils.validation import ConfigurationError, validate_dyno_samples

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("Dyno_Curve")

ArrayLike = Union[Sequence[float], np.ndarray]


def interpolate(xs: ArrayLike, ys: ArrayLike, x):
    """
    Piecewise-linear lookup with flat clamping outside the sample domain.

    `xs` must be strictly increasing with at least 2 samples; this is the
    caller's responsibility and is not checked here.

    Args:
        xs: Sample x values
        ys: Sample y values, same length as xs
        x: Query point, or an array of query points

    Returns:
        Interpolated value (float, NaN for a NaN query), or an ndarray for array queries
    """
    xs = np.asarray(xs, dtype=float)
    ys = np.asarray(ys, dtype=float)

    if np.ndim(x) > 0:
        return np.interp(np.asarray(x, dtype=float), xs, ys)

    x = float(x)
    if np.isnan(x):
        return float('nan')
    if x <= xs[0]:
        return float(ys[0])
    if x >= xs[-1]:
        return float(ys[-1])

    # Binary search: xs[lo] <= x < xs[hi]
    hi = int(np.searchsorted(xs, x, side='right'))
    lo = hi - 1
    x1, x2 = xs[lo], xs[hi]
    y1, y2 = ys[lo], ys[hi]
    return float(y1 + (y2 - y1) * (x - x1) / (x2 - x1))


def engine_torque(rpm, hp):
    """
    Convert engine power to engine torque.

    Args:
        rpm: Engine speed in RPM (must be > 0)
        hp: Power in horsepower

    Returns:
        Torque in lb-ft
    """
    return hp * HP_TORQUE_CONSTANT / rpm


def _readonly(values) -> np.ndarray:
    array = np.array(values, dtype=float)
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class DynoDataset:
    """
    A named dyno run: horsepower measured at strictly increasing RPM points.

    Several datasets usually coexist for one vehicle (e.g. "Stock" and "Race").
    """
    name: str
    rpm: np.ndarray
    hp: np.ndarray

    def __post_init__(self):
        rpm = _readonly(self.rpm)
        hp = _readonly(self.hp)
        validate_dyno_samples(self.name, rpm, hp)
        object.__setattr__(self, 'rpm', rpm)
        object.__setattr__(self, 'hp', hp)

    @classmethod
    def from_pairs(cls, name: str, pairs: Sequence[Sequence[float]]) -> 'DynoDataset':
        """
        Build a dataset from a sequence of [rpm, hp] pairs.

        Args:
            name: Dataset name
            pairs: Sequence of (rpm, hp) samples

        Returns:
            DynoDataset
        """
        try:
            samples = np.array(pairs, dtype=float)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Dyno dataset '{name}' has malformed samples: {e}")

        if samples.ndim != 2 or samples.shape[1] != 2:
            raise ConfigurationError(f"Dyno dataset '{name}' must be a list of [rpm, hp] pairs")

        return cls(name, samples[:, 0], samples[:, 1])

    @property
    def rpm_min(self) -> float:
        return float(self.rpm[0])

    @property
    def rpm_max(self) -> float:
        return float(self.rpm[-1])

    @property
    def engine_torque(self) -> np.ndarray:
        """Engine torque (lb-ft) at each sample."""
        return engine_torque(self.rpm, self.hp)

    def power_at(self, rpm):
        """Horsepower at the given RPM (clamped to the measured range)."""
        return interpolate(self.rpm, self.hp, rpm)

    def peak_power(self) -> Tuple[float, float]:
        """
        Find the RPM at which power is maximum.

        Returns:
            Tuple of (rpm, hp) at peak power
        """
        idx = int(np.argmax(self.hp))
        return float(self.rpm[idx]), float(self.hp[idx])

    def peak_torque(self) -> Tuple[float, float]:
        """
        Find the RPM at which torque is maximum.

        Returns:
            Tuple of (rpm, torque in lb-ft) at peak torque
        """
        torque = self.engine_torque
        idx = int(np.argmax(torque))
        return float(self.rpm[idx]), float(torque[idx])


@dataclass(frozen=True, eq=False)
class DenseCurve:
    """
    Dyno datasets resampled onto one shared, uniform RPM grid.

    The grid spans the first dataset's RPM range and has DENSE_POINTS + 1
    samples. Every dataset has one horsepower value per grid point.
    """
    rpm: np.ndarray
    hp: Mapping[str, np.ndarray]

    @property
    def names(self) -> List[str]:
        return list(self.hp.keys())

    @property
    def rpm_min(self) -> float:
        return float(self.rpm[0])

    @property
    def rpm_max(self) -> float:
        return float(self.rpm[-1])

    def hp_for(self, name: str) -> np.ndarray:
        """
        Get the dense horsepower array of a dataset.

        Raises:
            ConfigurationError: If the dataset does not exist
        """
        if name not in self.hp:
            raise ConfigurationError(f"Unknown dyno dataset '{name}', available: {self.names}")
        return self.hp[name]

    def engine_torque(self, name: str) -> np.ndarray:
        """Engine torque (lb-ft) of a dataset over the dense grid."""
        return engine_torque(self.rpm, self.hp_for(name))

    def max_power_dataset(self) -> str:
        """Name of the dataset with the highest horsepower value."""
        return max(self.hp, key=lambda name: float(np.max(self.hp[name])))


def densify(datasets: Mapping[str, DynoDataset], points: int = DENSE_POINTS) -> DenseCurve:
    """
    Resample every dyno dataset of a vehicle onto one uniform RPM grid.

    The grid is built from the first dataset's RPM span only. Datasets that
    extend beyond that span are clamped to it, not extrapolated.

    Args:
        datasets: Mapping of dataset name to DynoDataset (insertion ordered)
        points: Number of grid intervals (grid holds points + 1 samples)

    Returns:
        DenseCurve shared by all datasets
    """
    if not datasets:
        raise ConfigurationError("At least one dyno dataset is required")

    first = next(iter(datasets.values()))
    rpm_grid = _readonly(np.linspace(first.rpm_min, first.rpm_max, points + 1))

    dense_hp = {}
    for name, dataset in datasets.items():
        if dataset.rpm_min < first.rpm_min or dataset.rpm_max > first.rpm_max:
            logger.debug(f"Dataset '{name}' spans {dataset.rpm_min:.0f}-{dataset.rpm_max:.0f} RPM, "
                         f"clamped to {first.rpm_min:.0f}-{first.rpm_max:.0f} RPM")
        dense_hp[name] = _readonly(interpolate(dataset.rpm, dataset.hp, rpm_grid))

    logger.info(f"Densified {len(dense_hp)} dyno dataset(s) onto {len(rpm_grid)} RPM points "
                f"({rpm_grid[0]:.0f}-{rpm_grid[-1]:.0f} RPM)")

    return DenseCurve(rpm=rpm_grid, hp=MappingProxyType(dense_hp))


def load_dyno_csv(file_path: str, name: Optional[str] = None,
                  rpm_column: str = 'RPM', hp_column: str = 'HP') -> DynoDataset:
    """
    Load a dyno dataset from a CSV file.

    Args:
        file_path: Path to dyno data file (CSV format)
        name: Dataset name (defaults to the file name without extension)
        rpm_column: Column name for RPM values
        hp_column: Column name for horsepower values

    Returns:
        DynoDataset sorted by RPM
    """
    if name is None:
        name = os.path.splitext(os.path.basename(file_path))[0]

    if not os.path.exists(file_path):
        raise ConfigurationError(f"Dyno data file not found: {file_path}")

    data = pd.read_csv(file_path)

    # Check if required columns exist
    if rpm_column not in data.columns or hp_column not in data.columns:
        raise ConfigurationError(
            f"Required columns '{rpm_column}' and/or '{hp_column}' not found in {file_path}")

    data = data[[rpm_column, hp_column]].dropna().sort_values(rpm_column)

    logger.info(f"Loaded dyno dataset '{name}' with {len(data)} samples from {file_path}")

    return DynoDataset(name, data[rpm_column].to_numpy(), data[hp_column].to_numpy())


def datasets_from_mapping(hp_data_sets: Mapping[str, Sequence[Sequence[float]]]) -> Dict[str, DynoDataset]:
    """
    Build DynoDataset objects from a mapping of name to [rpm, hp] pairs.

    Args:
        hp_data_sets: Mapping as stored in vehicle catalogs

    Returns:
        Ordered dictionary of DynoDataset objects
    """
    return {str(name): DynoDataset.from_pairs(str(name), pairs) for name, pairs in hp_data_sets.items()}
