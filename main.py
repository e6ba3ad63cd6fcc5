#!/usr/bin/env python3
"""
Motorcycle Acceleration Simulation

This script loads a vehicle from the catalog, solves its shift points, runs a
full-throttle acceleration simulation and reports the results, with CSV export
and charts of the dyno curves, wheel torque by gear and acceleration views.
"""

import os
import argparse
import matplotlib
import matplotlib.pyplot as plt

from moto_drivetrain.core import load_vehicle, DEFAULT_VEHICLE_ID
from moto_drivetrain.transmission import ShiftPolicy, overall_ratios, top_speed_at_rpm
from moto_drivetrain.performance import (
    AccelerationSimulator, StoredConfiguration, analyze_performance_metrics,
    compare_configurations, estimate_bounds
)
from moto_drivetrain.utils.constants import UnitSystem, DEFAULT_SHIFT_TIME_MS
from moto_drivetrain.utils.validation import ConfigurationError
from moto_drivetrain.utils.plotting import (
    set_plot_style, save_plot, plot_dyno_curves, plot_wheel_torque, plot_acceleration,
    plot_acceleration_comparison
)

DEFAULT_CATALOG = os.path.join('configs', 'vehicles', 'motorcycles.yaml')
DEFAULT_OUTPUT_DIR = os.path.join('data', 'output', 'acceleration')


def parse_args(argv=None):
    """
    Parse command line arguments.

    Returns:
        argparse.Namespace
    """
    parser = argparse.ArgumentParser(description="Motorcycle drivetrain acceleration simulation")
    parser.add_argument("--catalog", default=DEFAULT_CATALOG, help="Vehicle catalog (YAML or JSON)")
    parser.add_argument("--vehicle", default=None, help=f"Vehicle id (default: {DEFAULT_VEHICLE_ID})")
    parser.add_argument("--dataset", default=None, help="Dyno dataset name (default: Stock)")
    parser.add_argument("--front", type=int, default=None, help="Front sprocket teeth")
    parser.add_argument("--rear", type=int, default=None, help="Rear sprocket teeth")
    parser.add_argument("--mass", type=float, default=None, help="Bike plus rider mass in lb")
    parser.add_argument("--shift-ms", type=float, default=DEFAULT_SHIFT_TIME_MS,
                        help="Power interruption per upshift in ms")
    parser.add_argument("--shift-rpm", default="optimal", help="'optimal' or a fixed shift RPM")
    parser.add_argument("--compare", nargs='*', default=None, metavar="FRONT/REAR",
                        help="Also compare these sprocket combinations, e.g. 14/48 15/45")
    parser.add_argument("--units", choices=[u.value for u in UnitSystem], default=UnitSystem.IMPERIAL.value)
    parser.add_argument("--output-dir", default=DEFAULT_OUTPUT_DIR)
    parser.add_argument("--no-plots", action="store_true", default=False)
    return parser.parse_args(argv)


def print_shift_points(simulator):
    """Print the drivetrain ratios and shift points of the current configuration."""
    spec = simulator.vehicle.spec
    plan = simulator.shift_plan()

    print(f"\nFinal drive: {simulator.front}/{simulator.rear} = {simulator.final_drive:.3f}")
    ratios = overall_ratios(spec.gear_ratios, simulator.final_drive, spec)
    print("Overall ratios: " + ", ".join(f"{gear}: {ratio:.2f}" for gear, ratio in zip(spec.gear_ratios, ratios)))

    print(f"\nShift points ({plan.policy}):")
    for gear in sorted(plan.gears):
        print(f"  {plan.gears[gear]}")

    redline = float(plan.rpm[-1])
    print(f"  Geared top speed at {redline:.0f} RPM: "
          f"{top_speed_at_rpm(redline, spec.gear_ratios, simulator.final_drive, spec):.1f} mph")

    return plan


def print_metrics(metrics):
    """Print acceleration performance metrics."""
    def fmt(value, unit, digits=2):
        return "not reached" if value is None else f"{value:.{digits}f} {unit}"

    print("\nAcceleration results:")
    print(f"  0-60 mph:           {fmt(metrics['time_to_60mph'], 's')}")
    print(f"  0-100 mph:          {fmt(metrics['time_to_100mph'], 's')}")
    print(f"  Quarter mile:       {fmt(metrics['quarter_mile_time'], 's')} "
          f"@ {fmt(metrics['quarter_mile_speed'], 'mph', 1)}")
    print(f"  Peak acceleration:  {metrics['peak_acceleration_g']:.2f} g at {metrics['peak_acceleration_time']:.2f} s")
    print(f"  Top speed:          {metrics['top_speed']:.1f} mph in gear {metrics['final_gear']}")
    print(f"  Shifts:             {metrics['shift_count']}")
    print(f"  Run ended after {metrics['duration']:.2f} s ({metrics['stop_reason']})")


def parse_sprockets(value):
    """Parse a FRONT/REAR sprocket string."""
    try:
        front, rear = value.split('/')
        return int(front), int(rear)
    except ValueError:
        raise ConfigurationError(f"Sprockets must be given as FRONT/REAR, got {value!r}")


def main(argv=None):
    """Main function to run the acceleration simulation."""
    args = parse_args(argv)

    print("Motorcycle Drivetrain - Acceleration Simulation")
    print("===============================================")

    try:
        vehicle = load_vehicle(args.catalog, args.vehicle)

        simulator = AccelerationSimulator(vehicle)
        simulator.configure(
            dataset=args.dataset,
            front=args.front,
            rear=args.rear,
            mass=args.mass,
            shift_time_ms=args.shift_ms,
            shift_policy=ShiftPolicy.parse(args.shift_rpm)
        )
        configurations = [
            StoredConfiguration(vehicle, simulator.dataset, front, rear, simulator.mass,
                                simulator.shift_time_ms, simulator.shift_policy)
            for front, rear in (parse_sprockets(value) for value in args.compare or [])
        ]
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        return 1

    print(f"\nVehicle: {vehicle.name} ({simulator.dataset} dyno, {simulator.mass:.0f} lb, "
          f"{simulator.shift_time_ms:.0f} ms shifts)")

    plan = print_shift_points(simulator)

    sample = simulator.simulate_acceleration()
    metrics = analyze_performance_metrics(sample)
    print_metrics(metrics)

    os.makedirs(args.output_dir, exist_ok=True)
    paths = simulator.export_results(sample, args.output_dir)
    print(f"\nTime series exported to {paths['time_series']}")

    samples, labels = [sample], [f"F{simulator.front}/R{simulator.rear}"]
    if configurations:
        compared, summary = compare_configurations(configurations)
        samples.extend(compared)
        labels.extend(f"F{c.front}/R{c.rear}" for c in configurations)
        print("\nConfiguration comparison:")
        print(summary.to_string(index=False, float_format=lambda x: f"{x:.2f}"))
        summary.to_csv(os.path.join(args.output_dir, f"{vehicle.vehicle_id}_comparison.csv"), index=False)

    if not args.no_plots:
        matplotlib.use('Agg')
        set_plot_style('clean')
        units = UnitSystem(args.units)
        bounds = estimate_bounds(vehicle.spec, vehicle.dense_curve, vehicle.datasets)

        figures = {
            'dyno': plot_dyno_curves(vehicle.datasets, bounds, units, title=f"{vehicle.name} Dyno"),
            'wheel_torque': plot_wheel_torque(plan, bounds, units, clip=True),
            'acceleration': plot_acceleration(sample, bounds, units, title=f"{vehicle.name} Acceleration"),
        }
        if len(samples) > 1:
            figures['comparison'] = plot_acceleration_comparison(samples, labels, 'accel_ts', bounds, units,
                                                                 title='Sprocket Comparison')

        for name, fig in figures.items():
            save_plot(fig, f"{vehicle.vehicle_id}_{name}", args.output_dir)
            plt.close(fig)

    print("\nSimulation completed successfully!")
    print(f"Results saved to: {args.output_dir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
