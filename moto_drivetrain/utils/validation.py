"""
Validation utilities for motorcycle drivetrain performance simulation.

This module provides the configuration error type and the boundary checks applied
to dyno datasets, vehicle specifications and simulation inputs. Malformed input is
rejected here with a descriptive message instead of surfacing as NaN deep inside
the shift solver or the acceleration integrator.
"""

import numpy as np
from typing import Dict, Mapping, Optional, Tuple
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("Validation")


class ConfigurationError(ValueError):
    """Raised when a vehicle, dyno dataset or simulation input is malformed."""


def validate_in_range(value: float, name: str,
                      valid_range: Tuple[Optional[float], Optional[float]],
                      inclusive_min: bool = True) -> float:
    """
    Validate that a value is finite and within a range.

    Args:
        value: Value to validate
        name: Parameter name used in the error message
        valid_range: (minimum, maximum) tuple, either bound may be None
        inclusive_min: Whether the minimum itself is allowed

    Returns:
        The value as a float

    Raises:
        ConfigurationError: If the value is not a finite number or is out of range
    """
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")

    if not np.isfinite(value):
        raise ConfigurationError(f"{name} must be finite, got {value}")

    min_value, max_value = valid_range
    if min_value is not None:
        if inclusive_min and value < min_value:
            raise ConfigurationError(f"{name} must be >= {min_value}, got {value}")
        if not inclusive_min and value <= min_value:
            raise ConfigurationError(f"{name} must be > {min_value}, got {value}")
    if max_value is not None and value > max_value:
        raise ConfigurationError(f"{name} must be <= {max_value}, got {value}")

    return value


def validate_positive(value: float, name: str) -> float:
    """Validate that a value is a finite number strictly greater than zero."""
    return validate_in_range(value, name, (0.0, None), inclusive_min=False)


def validate_dyno_samples(name: str, rpm: np.ndarray, hp: np.ndarray):
    """
    Validate raw dyno samples.

    Args:
        name: Dataset name used in error messages
        rpm: RPM samples
        hp: Horsepower samples

    Raises:
        ConfigurationError: If the samples cannot form a valid dyno curve
    """
    if rpm.ndim != 1 or hp.ndim != 1:
        raise ConfigurationError(f"Dyno dataset '{name}' must be one-dimensional")
    if len(rpm) != len(hp):
        raise ConfigurationError(
            f"Dyno dataset '{name}' has {len(rpm)} RPM samples but {len(hp)} HP samples")
    if len(rpm) < 2:
        raise ConfigurationError(f"Dyno dataset '{name}' needs at least 2 samples, got {len(rpm)}")
    if not (np.all(np.isfinite(rpm)) and np.all(np.isfinite(hp))):
        raise ConfigurationError(f"Dyno dataset '{name}' contains non-finite samples")
    if rpm[0] <= 0:
        raise ConfigurationError(f"Dyno dataset '{name}' RPM must be positive, got {rpm[0]}")
    if np.any(np.diff(rpm) <= 0):
        raise ConfigurationError(f"Dyno dataset '{name}' RPM samples must be strictly increasing")


def validate_gear_ratios(gear_ratios: Mapping[int, float]) -> Dict[int, float]:
    """
    Validate a gear-ratio mapping and normalise its keys to ints.

    Gear indices must be exactly 1..N. Ratios are expected to decrease with gear
    index; a non-decreasing step is logged but accepted.

    Returns:
        Dictionary mapping gear number to ratio, ordered by gear
    """
    if not gear_ratios:
        raise ConfigurationError("Vehicle must define at least one gear ratio")

    try:
        ratios = {int(gear): float(ratio) for gear, ratio in gear_ratios.items()}
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid gear ratio table: {e}")

    expected = set(range(1, len(ratios) + 1))
    if set(ratios) != expected:
        raise ConfigurationError(
            f"Gear indices must be 1..{len(ratios)}, got {sorted(ratios)}")

    for gear in sorted(ratios):
        validate_positive(ratios[gear], f"gear_ratios[{gear}]")
        if gear > 1 and ratios[gear] >= ratios[gear - 1]:
            logger.warning(f"Gear {gear} ratio {ratios[gear]} is not lower than gear {gear - 1} "
                           f"ratio {ratios[gear - 1]}")

    return {gear: ratios[gear] for gear in sorted(ratios)}


def validate_simulation_inputs(mass: float, shift_time_ms: float, dt: float) -> Tuple[float, float, float]:
    """
    Validate acceleration simulation inputs.

    Returns:
        Tuple of (mass, shift_time_ms, dt) as floats
    """
    mass = validate_positive(mass, "mass")
    shift_time_ms = validate_in_range(shift_time_ms, "shift_time_ms", (0.0, None))
    dt = validate_positive(dt, "dt")
    return mass, shift_time_ms, dt
