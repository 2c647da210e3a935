from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from time import perf_counter
from typing import List, Sequence

from ..sim.core.config import FlockConfig
from ..sim.core.flock import initialize
from ..sim.core.rng import DeterministicRng

logger = logging.getLogger(__name__)

FIELD_SIZE = 1000
DEFAULT_SIZES = (250, 500)


@dataclass(frozen=True)
class BenchmarkResult:
    population: int
    ticks: int
    total_ms: float

    @property
    def ms_per_tick(self) -> float:
        return self.total_ms / self.ticks if self.ticks else 0.0


def run_benchmark(
    sizes: Sequence[int] = DEFAULT_SIZES,
    ticks: int = 20,
    radius: float = 20.0,
    seed: int = 0,
    config: FlockConfig | None = None,
) -> List[BenchmarkResult]:
    config = config if config is not None else FlockConfig()
    results: List[BenchmarkResult] = []
    for size in sizes:
        simulation = initialize(radius, size, FIELD_SIZE, FIELD_SIZE, config, rng=DeterministicRng(seed))
        start = perf_counter()
        for _ in range(ticks):
            simulation.tick(FIELD_SIZE, FIELD_SIZE)
        total_ms = (perf_counter() - start) * 1000.0
        result = BenchmarkResult(population=size, ticks=ticks, total_ms=total_ms)
        logger.info("%d agents: %.3f ms/tick over %d ticks", size, result.ms_per_tick, ticks)
        results.append(result)
    return results


def main() -> None:
    parser = argparse.ArgumentParser(description="Time flock ticks on a 1000x1000 field")
    parser.add_argument("--sizes", type=int, nargs="+", default=list(DEFAULT_SIZES))
    parser.add_argument("--ticks", type=int, default=20)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--log-level", default="WARNING", help="Python logging level")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    for result in run_benchmark(args.sizes, ticks=args.ticks, seed=args.seed):
        print(f"Benchmark{result.population}\t{result.ticks}\t{result.ms_per_tick:.3f} ms/tick")


if __name__ == "__main__":
    main()
