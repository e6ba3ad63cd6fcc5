"""
Plotting utilities for motorcycle drivetrain performance simulation.

This module renders the three chart families of the toolkit with matplotlib:
the dyno chart (power and engine torque over RPM), the wheel-torque chart
(one curve per gear with shift-point connectors) and the four acceleration
views. Chart ranges come from AxisBounds so the scale stays fixed while
sprockets, mass or shift settings change.
"""

import numpy as np
import matplotlib.pyplot as plt
from scipy.interpolate import CubicSpline
from typing import Dict, List, Optional, Union
import os
import logging

from .constants import GRAVITY, UnitSystem, convert_for_display

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("Plotting")


# Default style settings for plots
DEFAULT_FIG_SIZE = (12, 8)
DEFAULT_DPI = 150
DEFAULT_LINE_WIDTH = 2
DEFAULT_FONT_SIZE = 10
DEFAULT_TITLE_SIZE = 14
DEFAULT_LABEL_SIZE = 12
DEFAULT_LEGEND_SIZE = 9
DEFAULT_GRID_ALPHA = 0.3
DEFAULT_SAVE_FORMAT = 'png'

# One color per gear, reused for datasets in the dyno chart
GEAR_COLORS = ['#e41a1c', '#377eb8', '#4daf4a', '#984ea3', '#ff7f00', '#a65628', '#f781bf', '#999999']

# Acceleration views: (x quantity, y quantity, x label, y label, title)
ACCEL_VIEW_LAYOUT = {
    'accel_ts': ('time', 'speed', 'Time', 'Speed', 'Speed vs Time'),
    'accel_td': ('time', 'distance', 'Time', 'Distance', 'Distance vs Time'),
    'accel_tg': ('time', 'g', 'Time', 'Acceleration', 'Acceleration vs Time'),
    'accel_sg': ('speed', 'g', 'Speed', 'Acceleration', 'Acceleration vs Speed'),
}


#------------------------------------------------------------------------------
# Utility functions
#------------------------------------------------------------------------------

def set_plot_style(style: str = 'default') -> None:
    """
    Set global matplotlib style for consistent plots.

    Args:
        style: Style name ('default', 'clean', 'dark')
    """
    if style == 'default':
        plt.style.use('default')
    elif style == 'clean':
        plt.style.use('seaborn-v0_8-whitegrid')
    elif style == 'dark':
        plt.style.use('dark_background')
    else:
        logger.warning(f"Unknown style: {style}. Using default.")
        plt.style.use('default')

    plt.rcParams['font.size'] = DEFAULT_FONT_SIZE
    plt.rcParams['axes.titlesize'] = DEFAULT_TITLE_SIZE
    plt.rcParams['axes.labelsize'] = DEFAULT_LABEL_SIZE
    plt.rcParams['legend.fontsize'] = DEFAULT_LEGEND_SIZE
    plt.rcParams['figure.figsize'] = DEFAULT_FIG_SIZE
    plt.rcParams['lines.linewidth'] = DEFAULT_LINE_WIDTH
    plt.rcParams['grid.alpha'] = DEFAULT_GRID_ALPHA


def save_plot(fig: plt.Figure, filename: str, directory: Optional[str] = None,
              format: str = DEFAULT_SAVE_FORMAT, dpi: int = DEFAULT_DPI) -> str:
    """
    Save a plot to file with proper directory handling.

    Args:
        fig: Matplotlib figure to save
        filename: Base filename (without extension)
        directory: Directory to save in (created if doesn't exist)
        format: File format ('png', 'pdf', 'svg', etc.)
        dpi: Resolution for raster formats

    Returns:
        Full path to saved file
    """
    if '.' in os.path.basename(filename):
        base, ext = os.path.splitext(filename)
        if ext[1:].lower() != format.lower():
            logger.warning(f"Filename extension ({ext}) doesn't match format ({format}). Using {format}.")
        filename = base

    if directory:
        os.makedirs(directory, exist_ok=True)
        filepath = os.path.join(directory, f"{filename}.{format}")
    else:
        filepath = f"{filename}.{format}"

    fig.savefig(filepath, format=format, dpi=dpi, bbox_inches='tight')
    logger.info(f"Plot saved to {filepath}")

    return filepath


def smooth_curve(x: np.ndarray, y: np.ndarray, points: int = 300):
    """
    Smooth sparse dyno samples with a cubic spline for display.

    Args:
        x: Strictly increasing sample positions
        y: Sample values
        points: Number of output points

    Returns:
        Tuple of (x, y) arrays; the input unchanged when there are too few samples
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if len(x) < 3:
        return x, y
    x_smooth = np.linspace(x[0], x[-1], points)
    return x_smooth, CubicSpline(x, y)(x_smooth)


def _display(values, quantity: str, unit_system: Union[UnitSystem, str]):
    """Convert base-unit values for display; time and g pass through."""
    if quantity == 'time':
        return np.asarray(values, dtype=float), 's'
    if quantity == 'g':
        return np.asarray(values, dtype=float), 'g'
    return convert_for_display(values, quantity, unit_system)


def _accel_series(sample, quantity: str) -> np.ndarray:
    if quantity == 'g':
        return sample.acceleration / GRAVITY
    return getattr(sample, quantity)


def _accel_limit(bounds, quantity: str) -> Optional[float]:
    if bounds is None:
        return None
    return {
        'time': bounds.accel.max_time,
        'speed': bounds.accel.max_speed,
        'distance': bounds.accel.max_distance,
        'g': bounds.accel.max_g,
    }[quantity]


#------------------------------------------------------------------------------
# Dyno and wheel torque plotting functions
#------------------------------------------------------------------------------

def plot_dyno_curves(datasets: Dict, bounds=None, unit_system: Union[UnitSystem, str] = UnitSystem.IMPERIAL,
                     title: Optional[str] = None, save_path: Optional[str] = None) -> plt.Figure:
    """
    Plot power and engine torque over RPM for each dyno dataset.

    Raw samples are drawn as markers with a cubic-spline line through them.

    Args:
        datasets: Mapping of dataset name to DynoDataset
        bounds: AxisBounds for fixed ranges (optional)
        unit_system: Display unit system
        title: Plot title
        save_path: Path to save plot (if None, not saved)

    Returns:
        Matplotlib figure
    """
    fig, ax_power = plt.subplots(figsize=DEFAULT_FIG_SIZE)
    ax_torque = ax_power.twinx()

    power_unit = torque_unit = None
    for i, (name, dataset) in enumerate(datasets.items()):
        color = GEAR_COLORS[i % len(GEAR_COLORS)]

        rpm_s, hp_s = smooth_curve(dataset.rpm, dataset.hp)
        power, power_unit = _display(hp_s, 'power', unit_system)
        ax_power.plot(rpm_s, power, '-', color=color, label=f"{name} power")
        raw_power, _ = _display(dataset.hp, 'power', unit_system)
        ax_power.plot(dataset.rpm, raw_power, 'o', color=color, markersize=3)

        rpm_t, tq_t = smooth_curve(dataset.rpm, dataset.engine_torque)
        torque, torque_unit = _display(tq_t, 'torque', unit_system)
        ax_torque.plot(rpm_t, torque, '--', color=color, label=f"{name} torque")

    ax_power.set_xlabel('Engine Speed (RPM)')
    ax_power.set_ylabel(f'Power ({power_unit})')
    ax_torque.set_ylabel(f'Torque ({torque_unit})')
    ax_power.grid(True, alpha=DEFAULT_GRID_ALPHA)

    if bounds is not None:
        ax_power.set_xlim(bounds.dyno.min_rpm, bounds.dyno.max_rpm)
        ax_power.set_ylim(0, float(_display(bounds.dyno.max_hp, 'power', unit_system)[0]))
        ax_torque.set_ylim(0, float(_display(bounds.dyno.max_torque, 'torque', unit_system)[0]))

    lines_1, labels_1 = ax_power.get_legend_handles_labels()
    lines_2, labels_2 = ax_torque.get_legend_handles_labels()
    ax_power.legend(lines_1 + lines_2, labels_1 + labels_2, loc='lower right')

    ax_power.set_title(title or 'Dyno Curves')
    plt.tight_layout()

    if save_path:
        save_plot(fig, save_path)

    return fig


def plot_wheel_torque(plan, bounds=None, unit_system: Union[UnitSystem, str] = UnitSystem.IMPERIAL,
                      clip: bool = False, show_shift_points: bool = True,
                      title: Optional[str] = None, save_path: Optional[str] = None) -> plt.Figure:
    """
    Plot wheel torque against road speed for every gear of a shift plan.

    Args:
        plan: ShiftPlan from solve_shifts
        bounds: AxisBounds for fixed ranges (optional)
        unit_system: Display unit system
        clip: Only draw each gear between the previous and its own shift speed
        show_shift_points: Draw a connector at each shift speed down to the next gear's torque
        title: Plot title
        save_path: Path to save plot (if None, not saved)

    Returns:
        Matplotlib figure
    """
    fig, ax = plt.subplots(figsize=DEFAULT_FIG_SIZE)

    speed_unit = torque_unit = None
    for gear, data in plan.gears.items():
        color = GEAR_COLORS[(gear - 1) % len(GEAR_COLORS)]
        if clip:
            speed, torque, _ = plan.clipped_curve(gear)
        else:
            speed, torque = data.speed, data.wheel_torque
        if len(speed) == 0:
            continue

        speed, speed_unit = _display(speed, 'speed', unit_system)
        torque, torque_unit = _display(torque, 'torque', unit_system)

        if data.shift_rpm is not None:
            shift_speed = float(_display(data.shift_speed, 'speed', unit_system)[0])
            label = f"Gear {gear} ({data.shift_rpm:.0f} RPM / {shift_speed:.1f} {speed_unit})"
        else:
            top_speed = float(_display(data.speed[-1], 'speed', unit_system)[0])
            label = f"Gear {gear} ({plan.rpm[-1]:.0f} RPM / {top_speed:.1f} {speed_unit})"
        ax.plot(speed, torque, '-', color=color, label=label)

    if bounds is not None:
        ax.set_xlim(0, float(_display(bounds.wheel.max_speed, 'speed', unit_system)[0]))
        ax.set_ylim(0, float(_display(bounds.wheel.max_torque, 'torque', unit_system)[0]))

    if show_shift_points:
        for gear, data in plan.gears.items():
            if data.shift_speed is None:
                continue
            color = GEAR_COLORS[(gear - 1) % len(GEAR_COLORS)]
            x = float(_display(data.shift_speed, 'speed', unit_system)[0])
            y_next = float(_display(plan.torque_after_shift(gear), 'torque', unit_system)[0])
            y_top = ax.get_ylim()[1] * 0.97
            ax.plot([x, x], [y_next, y_top], '-', color=color, linewidth=1)
            ax.text(x, y_top, f"{x:.1f}", color=color, ha='center', va='bottom', fontsize=8)

    ax.set_xlabel(f'Speed ({speed_unit})')
    ax.set_ylabel(f'Wheel Torque ({torque_unit})')
    ax.grid(True, alpha=DEFAULT_GRID_ALPHA)
    ax.legend(loc='upper right')

    ax.set_title(title or f'Wheel Torque by Gear (final drive {plan.final_drive:.3f}, {plan.policy} shifts)')
    plt.tight_layout()

    if save_path:
        save_plot(fig, save_path)

    return fig


#------------------------------------------------------------------------------
# Acceleration plotting functions
#------------------------------------------------------------------------------

def _draw_accel_view(ax, sample, view: str, bounds, unit_system, label: Optional[str] = None,
                     color: Optional[str] = None):
    x_quantity, y_quantity, x_name, y_name, view_title = ACCEL_VIEW_LAYOUT[view]
    x, x_unit = _display(_accel_series(sample, x_quantity), x_quantity, unit_system)
    y, y_unit = _display(_accel_series(sample, y_quantity), y_quantity, unit_system)

    ax.plot(x, y, '-', color=color, label=label)
    ax.set_xlabel(f'{x_name} ({x_unit})')
    ax.set_ylabel(f'{y_name} ({y_unit})')
    ax.set_title(view_title)
    ax.grid(True, alpha=DEFAULT_GRID_ALPHA)

    x_limit = _accel_limit(bounds, x_quantity)
    y_limit = _accel_limit(bounds, y_quantity)
    if x_limit is not None:
        ax.set_xlim(0, float(_display(x_limit, x_quantity, unit_system)[0]))
    if y_limit is not None:
        ax.set_ylim(0, float(_display(y_limit, y_quantity, unit_system)[0]))


def plot_acceleration(sample, bounds=None, unit_system: Union[UnitSystem, str] = UnitSystem.IMPERIAL,
                      views: Optional[List[str]] = None, show_shift_points: bool = True,
                      title: Optional[str] = None, save_path: Optional[str] = None) -> plt.Figure:
    """
    Plot acceleration views of one run.

    Args:
        sample: AccelSample from simulate
        bounds: AxisBounds for fixed ranges (optional)
        unit_system: Display unit system
        views: Views to draw (defaults to all four)
        show_shift_points: Mark shift starts on the speed/time view
        title: Plot title
        save_path: Path to save plot (if None, not saved)

    Returns:
        Matplotlib figure
    """
    views = list(views or ACCEL_VIEW_LAYOUT)
    unknown = [view for view in views if view not in ACCEL_VIEW_LAYOUT]
    if unknown:
        raise ValueError(f"Unknown acceleration views: {unknown}")

    cols = 2 if len(views) > 1 else 1
    rows = int(np.ceil(len(views) / cols))
    fig, axes = plt.subplots(rows, cols, figsize=(12, 5 * rows), squeeze=False)

    for ax, view in zip(axes.flat, views):
        _draw_accel_view(ax, sample, view, bounds, unit_system, color='#377eb8')

        if show_shift_points and view == 'accel_ts':
            for event in sample.shift_events:
                speed = float(_display(event.speed, 'speed', unit_system)[0])
                color = GEAR_COLORS[(event.gear - 1) % len(GEAR_COLORS)]
                ax.plot(event.time, speed, 'o', color=color, markersize=5)

    # Hide unused axes
    for ax in list(axes.flat)[len(views):]:
        ax.set_visible(False)

    fig.suptitle(title or 'Acceleration Performance', fontsize=DEFAULT_TITLE_SIZE + 2)
    plt.tight_layout()

    if save_path:
        save_plot(fig, save_path)

    return fig


def plot_acceleration_comparison(samples: List, labels: List[str], view: str = 'accel_ts', bounds=None,
                                 unit_system: Union[UnitSystem, str] = UnitSystem.IMPERIAL,
                                 title: Optional[str] = None, save_path: Optional[str] = None) -> plt.Figure:
    """
    Overlay one acceleration view of several runs.

    Args:
        samples: AccelSample per configuration
        labels: Legend label per configuration
        view: Acceleration view to draw
        bounds: AxisBounds for fixed ranges (optional)
        unit_system: Display unit system
        title: Plot title
        save_path: Path to save plot (if None, not saved)

    Returns:
        Matplotlib figure
    """
    if view not in ACCEL_VIEW_LAYOUT:
        raise ValueError(f"Unknown acceleration view: {view}")
    if len(samples) != len(labels):
        raise ValueError("samples and labels must have the same length")

    fig, ax = plt.subplots(figsize=DEFAULT_FIG_SIZE)
    for i, (sample, label) in enumerate(zip(samples, labels)):
        _draw_accel_view(ax, sample, view, bounds, unit_system, label=label,
                         color=GEAR_COLORS[i % len(GEAR_COLORS)])

    ax.legend(loc='best')
    if title:
        ax.set_title(title)
    plt.tight_layout()

    if save_path:
        save_plot(fig, save_path)

    return fig
