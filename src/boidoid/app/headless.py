from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from dataclasses import replace
from pathlib import Path
from typing import Optional

from ..sim.core.config import ConfigError, SimulationConfig, preset
from ..sim.core.flock import FlockSimulation
from ..sim.types.metrics import TickMetrics

logger = logging.getLogger(__name__)

_BASIC_HEADER = [
    "tick",
    "population",
    "neighbor_checks",
    "avg_speed",
    "tick_ms",
]

_DETAILED_HEADER = [
    "tick",
    "population",
    "neighbor_checks",
    "neighbor_links",
    "avg_neighbors",
    "isolated",
    "avg_speed",
    "min_speed",
    "max_speed",
    "boundary_turns",
    "centroid_x",
    "centroid_y",
    "spread",
    "polarization",
    "tick_ms",
    "tick_ms_per_agent",
]


def _format_basic_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.population,
        metrics.neighbor_checks,
        f"{metrics.average_speed:.4f}",
        f"{tick_ms:.3f}",
    ]


def _format_detailed_row(simulation: FlockSimulation, metrics: TickMetrics, tick_ms: float) -> list[object]:
    population = metrics.population
    if population <= 0:
        isolated = 0
        min_speed = 0.0
        max_speed = 0.0
        centroid_x = 0.0
        centroid_y = 0.0
        spread = 0.0
        polarization = 0.0
        tick_ms_per_agent = 0.0
    else:
        isolated = 0
        min_speed = math.inf
        max_speed = 0.0
        sum_x = 0.0
        sum_y = 0.0
        heading_x = 0.0
        heading_y = 0.0
        for agent in simulation.agents:
            if not agent.neighbors:
                isolated += 1
            velocity = agent.velocity
            speed = math.hypot(velocity.x, velocity.y)
            min_speed = min(min_speed, speed)
            max_speed = max(max_speed, speed)
            if speed > 0.0:
                heading_x += velocity.x / speed
                heading_y += velocity.y / speed
            sum_x += agent.position.x
            sum_y += agent.position.y
        centroid_x = sum_x / population
        centroid_y = sum_y / population
        spread = (
            sum(
                math.hypot(agent.position.x - centroid_x, agent.position.y - centroid_y)
                for agent in simulation.agents
            )
            / population
        )
        # 1.0 when every agent heads the same way, near 0.0 for random headings.
        polarization = math.hypot(heading_x, heading_y) / population
        tick_ms_per_agent = tick_ms / population

    return [
        metrics.tick,
        population,
        metrics.neighbor_checks,
        metrics.neighbor_links,
        f"{metrics.average_neighbors:.4f}",
        isolated,
        f"{metrics.average_speed:.4f}",
        f"{min_speed:.4f}",
        f"{max_speed:.4f}",
        metrics.boundary_turns,
        f"{centroid_x:.4f}",
        f"{centroid_y:.4f}",
        f"{spread:.4f}",
        f"{polarization:.4f}",
        f"{tick_ms:.3f}",
        f"{tick_ms_per_agent:.4f}",
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p95": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / len(values)),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p95": _percentile(sorted_values, 0.95),
        "p99": _percentile(sorted_values, 0.99),
    }


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    log_format: str = "detailed",
    summary_path: Optional[Path] = None,
    summary_window: int = 5000,
    config: Optional[SimulationConfig] = None,
) -> FlockSimulation:
    config = replace(config) if config is not None else SimulationConfig()
    if seed is not None:
        config.seed = seed

    log_mode = log_format.lower().strip()
    if log_mode not in {"basic", "detailed"}:
        raise ValueError(f"Unknown log format: {log_format}")

    simulation = FlockSimulation.from_config(config)
    bounds_height = config.bounds_height
    bounds_width = config.bounds_width

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_DETAILED_HEADER if log_mode == "detailed" else _BASIC_HEADER)

    tick_ms_series: list[float] = []
    speed_series: list[float] = []
    neighbor_series: list[float] = []
    max_tick_ms = (-1.0, -1)
    max_avg_neighbors = (-1.0, -1)

    try:
        for _ in range(steps):
            metrics = simulation.tick(bounds_height, bounds_width)
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms

            if summary_path:
                tick_ms_series.append(tick_ms)
                speed_series.append(metrics.average_speed)
                neighbor_series.append(metrics.average_neighbors)
                if tick_ms > max_tick_ms[0]:
                    max_tick_ms = (tick_ms, metrics.tick)
                if metrics.average_neighbors > max_avg_neighbors[0]:
                    max_avg_neighbors = (metrics.average_neighbors, metrics.tick)

            if writer:
                if log_mode == "detailed":
                    writer.writerow(_format_detailed_row(simulation, metrics, tick_ms))
                else:
                    writer.writerow(_format_basic_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()

    if summary_path:
        window = max(1, int(summary_window))
        tail_slice = slice(max(0, len(tick_ms_series) - window), len(tick_ms_series))
        summary = {
            "steps": steps,
            "seed": config.seed,
            "population": config.population,
            "bounds": [bounds_height, bounds_width],
            "log_format": log_mode,
            "deterministic_log": deterministic_log,
            "tick_ms": _summary_stats(tick_ms_series),
            "avg_speed": _summary_stats(speed_series),
            "avg_neighbors": _summary_stats(neighbor_series),
            "peaks": {
                "tick_ms": {"value": float(max_tick_ms[0]), "tick": max_tick_ms[1]},
                "avg_neighbors": {"value": float(max_avg_neighbors[0]), "tick": max_avg_neighbors[1]},
            },
            "tail_window": {
                "window": window,
                "tick_ms": _summary_stats(tick_ms_series[tail_slice]),
                "avg_speed": _summary_stats(speed_series[tail_slice]),
                "avg_neighbors": _summary_stats(neighbor_series[tail_slice]),
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
        logger.info("Wrote run summary to %s", summary_path)

    return simulation


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless flocking simulation")
    parser.add_argument("--steps", type=int, default=3000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML configuration file")
    parser.add_argument("--preset", default=None, help="Named configuration preset (terminal, window)")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument(
        "--log-format",
        choices=["basic", "detailed"],
        default="detailed",
        help="CSV format to write when --log is provided.",
    )
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument(
        "--summary-window",
        type=int,
        default=5000,
        help="Tail window size (ticks) for summary stats.",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="WARNING", help="Python logging level")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        if args.config is not None:
            config = SimulationConfig.from_yaml(args.config)
        elif args.preset is not None:
            config = preset(args.preset)
        else:
            config = None

        run_headless(
            args.steps,
            args.seed,
            args.log,
            deterministic_log=args.deterministic_log,
            log_format=args.log_format,
            summary_path=args.summary,
            summary_window=args.summary_window,
            config=config,
        )
    except ConfigError:
        logger.exception("Invalid configuration")
        raise


if __name__ == "__main__":
    main()
