import os

import matplotlib.pyplot as plt
import numpy as np
import pytest

from moto_drivetrain.performance import estimate_bounds, simulate
from moto_drivetrain.transmission import solve_shifts
from moto_drivetrain.utils.constants import UnitSystem
from moto_drivetrain.utils.plotting import (
    plot_acceleration, plot_acceleration_comparison, plot_dyno_curves, plot_wheel_torque, save_plot,
    smooth_curve
)


@pytest.fixture
def plan(spec, dense_curve):
    return solve_shifts(dense_curve, 'Stock', spec.gear_ratios, spec.final_drive, 'optimal', spec)


@pytest.fixture
def sample(spec, dense_curve):
    return simulate(dense_curve, 'Stock', spec.final_drive, spec)


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close('all')


def test_smooth_curve_passes_through_samples(stock):
    x, y = smooth_curve(stock.rpm, stock.hp, points=len(stock.rpm))
    np.testing.assert_allclose(x, stock.rpm)
    np.testing.assert_allclose(y, stock.hp)


def test_smooth_curve_short_input():
    x, y = smooth_curve([1000, 2000], [1.0, 2.0])
    assert list(y) == [1.0, 2.0]


def test_dyno_chart_uses_bounds(spec, datasets, dense_curve):
    bounds = estimate_bounds(spec, dense_curve, datasets)
    fig = plot_dyno_curves(datasets, bounds)
    ax = fig.axes[0]
    assert ax.get_xlim() == (bounds.dyno.min_rpm, bounds.dyno.max_rpm)
    assert ax.get_ylim() == (0, bounds.dyno.max_hp)


def test_wheel_torque_chart_metric_units(plan):
    fig = plot_wheel_torque(plan, unit_system=UnitSystem.METRIC, clip=True)
    ax = fig.axes[0]
    assert 'km/h' in ax.get_xlabel()
    assert len([line for line in ax.get_lines() if line.get_label().startswith('Gear')]) == 6


def test_acceleration_chart_four_views(sample):
    fig = plot_acceleration(sample)
    visible = [ax for ax in fig.axes if ax.get_visible()]
    assert len(visible) == 4


def test_acceleration_chart_single_view(sample):
    fig = plot_acceleration(sample, views=['accel_td'], show_shift_points=False)
    assert len(fig.axes) == 1
    assert 'Distance' in fig.axes[0].get_ylabel()


def test_acceleration_chart_rejects_unknown_view(sample):
    with pytest.raises(ValueError):
        plot_acceleration(sample, views=['accel_xx'])


def test_comparison_chart(sample):
    fig = plot_acceleration_comparison([sample, sample], ['A', 'B'], view='accel_sg')
    labels = [text.get_text() for text in fig.axes[0].get_legend().get_texts()]
    assert labels == ['A', 'B']


def test_save_plot(tmp_path, sample):
    fig = plot_acceleration(sample, views=['accel_ts'])
    path = save_plot(fig, 'run.png', str(tmp_path))
    assert path.endswith('run.png')
    assert os.path.exists(path)
