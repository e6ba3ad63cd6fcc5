import os

import numpy as np
import pandas as pd
import pytest

from moto_drivetrain.performance import (
    AccelSample, AccelerationSimulator, ShiftEvent, StoredConfiguration, analyze_performance_metrics,
    compare_configurations, simulate, simulate_acceleration
)
from moto_drivetrain.transmission import ShiftPolicy
from moto_drivetrain.utils.constants import MAX_SIMULATION_STEPS, MIN_TERMINATION_TIME
from moto_drivetrain.utils.validation import ConfigurationError


@pytest.fixture
def sample(spec, dense_curve):
    return simulate(dense_curve, 'Stock', spec.final_drive, spec, mass=580, shift_time_ms=80)


def test_run_starts_at_rest_in_first_gear(sample):
    assert sample.time[0] == 0.0
    assert sample.speed[0] == 0.0
    assert sample.distance[0] == 0.0
    assert sample.gear[0] == 1


def test_series_are_non_decreasing(sample):
    assert np.all(np.diff(sample.time) > 0)
    assert np.all(np.diff(sample.speed) >= 0)
    assert np.all(np.diff(sample.distance) >= 0)
    assert np.all(np.diff(sample.gear) >= 0)
    assert np.all(sample.acceleration >= 0)


def test_series_have_equal_length(sample):
    lengths = {len(sample.time), len(sample.speed), len(sample.acceleration),
               len(sample.distance), len(sample.gear)}
    assert lengths == {len(sample)}
    assert len(sample) <= MAX_SIMULATION_STEPS + 1


def test_reference_run(sample):
    assert len(sample.shift_events) == 5
    assert sample.shift_events[0].time < 3.0
    assert sample.shift_events[0].gear == 1
    assert [e.gear for e in sample.shift_events] == [1, 2, 3, 4, 5]
    assert sample.final_gear == 6
    assert sample.time[-1] >= MIN_TERMINATION_TIME
    assert sample.stop_reason in ('redline', 'steady_state')
    assert 100.0 < sample.top_speed < 160.0


def test_no_drive_force_during_shift(sample):
    event = sample.shift_events[0]
    k = int(np.argmin(np.abs(sample.time - event.time)))

    # 80 ms at 20 ms steps: four coasting steps, gear engaged on the last one
    np.testing.assert_array_equal(sample.acceleration[k + 1:k + 5], 0.0)
    assert sample.acceleration[k + 5] > 0
    assert sample.gear[k + 3] == event.gear
    assert sample.gear[k + 4] == event.gear + 1


def test_instant_shift_engages_next_gear_immediately(spec, dense_curve):
    sample = simulate(dense_curve, 'Stock', spec.final_drive, spec, shift_time_ms=0)
    event = sample.shift_events[0]
    k = int(np.argmin(np.abs(sample.time - event.time)))

    assert sample.gear[k + 1] == event.gear + 1
    assert sample.acceleration[k + 1] > 0
    assert sample.final_gear == 6


def test_shift_events_bounded_by_gear_count(spec, dense_curve):
    for shift_ms in (0, 80, 300):
        for mass in (100, 580, 2000):
            sample = simulate(dense_curve, 'Stock', spec.final_drive, spec, mass=mass, shift_time_ms=shift_ms)
            assert len(sample.shift_events) <= spec.num_gears - 1
            assert np.all(np.diff(sample.gear) >= 0)
            assert len(sample) <= MAX_SIMULATION_STEPS + 1


def test_heavier_bike_is_slower(spec, dense_curve):
    light = analyze_performance_metrics(simulate(dense_curve, 'Stock', spec.final_drive, spec, mass=450))
    heavy = analyze_performance_metrics(simulate(dense_curve, 'Stock', spec.final_drive, spec, mass=800))
    assert light['time_to_60mph'] < heavy['time_to_60mph']


def test_custom_policy_shifts_earlier(spec, dense_curve, sample):
    early = simulate(dense_curve, 'Stock', spec.final_drive, spec, shift_policy=ShiftPolicy.custom(6000))
    assert early.shift_events[0].speed < sample.shift_events[0].speed


def test_default_mass_from_spec(spec, dense_curve, sample):
    default = simulate(dense_curve, 'Stock', spec.final_drive, spec)
    np.testing.assert_array_equal(default.speed, sample.speed)


def test_step_limit_returns_partial_run(spec, dense_curve):
    sample = simulate_acceleration(dense_curve.hp_for('Stock'), dense_curve.rpm, spec.final_drive, spec,
                                   dt=0.001)
    assert len(sample) == MAX_SIMULATION_STEPS + 1
    assert sample.stop_reason == 'step_limit'
    assert sample.time[-1] == pytest.approx(MAX_SIMULATION_STEPS * 0.001)


@pytest.mark.parametrize("kwargs", [
    {'mass': 0},
    {'mass': -10},
    {'shift_time_ms': -1},
    {'dt': 0},
])
def test_invalid_inputs_rejected(spec, dense_curve, kwargs):
    with pytest.raises(ConfigurationError):
        simulate(dense_curve, 'Stock', spec.final_drive, spec, **kwargs)


def test_unknown_dataset_rejected(spec, dense_curve):
    with pytest.raises(ConfigurationError):
        simulate(dense_curve, 'Turbo', spec.final_drive, spec)


def _linear_sample():
    return AccelSample(
        time=[0.0, 1.0, 2.0, 3.0],
        speed=[0.0, 50.0, 100.0, 120.0],
        acceleration=[0.0, 9.80665, 4.0, 2.0],
        distance=[0.0, 500.0, 1200.0, 2000.0],
        gear=[1, 1, 2, 3],
        shift_events=[ShiftEvent(1.5, 75.0, 1), ShiftEvent(2.5, 110.0, 2)],
        stop_reason='redline'
    )


def test_metrics_interpolate_targets():
    metrics = analyze_performance_metrics(_linear_sample())

    assert metrics['time_to_60mph'] == pytest.approx(1.2)
    assert metrics['time_to_100mph'] == pytest.approx(2.0)
    assert metrics['quarter_mile_time'] == pytest.approx(2.15)
    assert metrics['quarter_mile_speed'] == pytest.approx(103.0)
    assert metrics['peak_acceleration_g'] == pytest.approx(1.0)
    assert metrics['peak_acceleration_time'] == 1.0
    assert metrics['top_speed'] == 120.0
    assert metrics['final_gear'] == 3
    assert metrics['shift_count'] == 2


def test_metrics_unreached_targets_are_none():
    sample = AccelSample(time=[0.0, 1.0], speed=[0.0, 30.0], acceleration=[0.0, 1.0],
                         distance=[0.0, 20.0], gear=[1, 1])
    metrics = analyze_performance_metrics(sample)
    assert metrics['time_to_60mph'] is None
    assert metrics['quarter_mile_time'] is None
    assert metrics['quarter_mile_speed'] is None


def test_sample_views():
    sample = _linear_sample()
    x, y = sample.view('accel_ts')
    np.testing.assert_array_equal(x, sample.time)
    np.testing.assert_array_equal(y, sample.speed)

    x, y = sample.view('accel_sg')
    np.testing.assert_array_equal(x, sample.speed)
    assert y[1] == pytest.approx(1.0)

    with pytest.raises(ConfigurationError):
        sample.view('accel_xx')


def test_sample_dataframes():
    sample = _linear_sample()
    df = sample.to_dataframe()
    assert list(df.columns) == ['time_s', 'speed_mph', 'acceleration_mps2', 'acceleration_g',
                                'distance_ft', 'gear']
    assert len(df) == 4

    events = sample.shift_events_dataframe()
    assert list(events['from_gear']) == [1, 2]


def test_simulator_configure_and_cache(record):
    simulator = AccelerationSimulator(record)
    assert simulator.dataset == 'Stock'
    assert (simulator.front, simulator.rear) == (14, 48)

    first = simulator.simulate_acceleration()
    assert simulator.simulate_acceleration() is first

    simulator.configure(rear=52, shift_policy='optimal')
    assert simulator.final_drive == pytest.approx(52 / 14)
    assert simulator.simulate_acceleration() is not first
    assert len(simulator.results_cache) == 2


def test_simulator_rejects_bad_configuration(record):
    simulator = AccelerationSimulator(record)
    with pytest.raises(ConfigurationError):
        simulator.configure(dataset='Turbo')
    with pytest.raises(ConfigurationError):
        simulator.configure(shift_policy=20000)
    with pytest.raises(ConfigurationError):
        simulator.configure(front=0)


def test_simulator_export(record, tmp_path):
    simulator = AccelerationSimulator(record)
    sample = simulator.simulate_acceleration()
    paths = simulator.export_results(sample, str(tmp_path / 'out'))

    assert os.path.exists(paths['time_series'])
    exported = pd.read_csv(paths['time_series'])
    assert len(exported) == len(sample)
    assert len(pd.read_csv(paths['shift_events'])) == len(sample.shift_events)


def test_compare_configurations_replays_each(record, spec, dense_curve):
    configs = [
        StoredConfiguration(record, 'Stock', 14, 48, 580.0),
        StoredConfiguration(record, 'Race', 15, 45, 600.0, 120.0, ShiftPolicy.custom(11000)),
    ]
    samples, summary = compare_configurations(configs)

    assert len(samples) == 2
    assert list(summary['configuration']) == [c.label for c in configs]
    direct = simulate(dense_curve, 'Stock', 48 / 14, spec, mass=580.0)
    np.testing.assert_array_equal(samples[0].speed, direct.speed)


@pytest.mark.parametrize("kwargs", [
    {'mass': -5},
    {'mass': 0},
    {'shift_time_ms': -10},
    {'time_step': 0},
])
def test_simulator_rejects_bad_run_inputs(record, kwargs):
    simulator = AccelerationSimulator(record)
    with pytest.raises(ConfigurationError):
        simulator.configure(**kwargs)


@pytest.mark.parametrize("front, rear, mass", [
    (0, 48, 580.0),
    (-14, 48, 580.0),
    (14, 48, -1.0),
])
def test_stored_configuration_rejects_bad_inputs(record, front, rear, mass):
    with pytest.raises(ConfigurationError):
        StoredConfiguration(record, 'Stock', front, rear, mass)
