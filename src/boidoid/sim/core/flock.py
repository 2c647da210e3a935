from __future__ import annotations

import logging
from time import perf_counter
from typing import List, Optional, Protocol, Tuple

from pygame.math import Vector2

from .agent import Agent
from .config import FlockConfig, SimulationConfig, validate_world
from .rng import DeterministicRng
from ..systems import metrics as metrics_system, neighbors, steering
from ..types.metrics import TickMetrics

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    def reset(self) -> None: ...

    def next_range(self, low: float, high: float) -> float: ...

    def next_unit_circle(self) -> Vector2: ...


class FlockSimulation:
    def __init__(
        self,
        config: FlockConfig,
        perception_radius: float,
        population_size: int,
        bounds_height: float,
        bounds_width: float,
        rng: Optional[RandomSource] = None,
        placement: str = "full",
    ):
        validate_world(perception_radius, population_size, bounds_height, bounds_width, placement)
        self._config = config
        self._radius = float(perception_radius)
        self._population_size = population_size
        self._initial_bounds = (bounds_height, bounds_width)
        self._placement = placement
        self._rng = rng if rng is not None else DeterministicRng(0)
        self._agents: List[Agent] = []
        self._tick = 0
        self._metrics: TickMetrics | None = None
        self._bootstrap_population()
        logger.info(
            "Flock initialized: %d agents, radius %.2f, bounds %sx%s (%s placement)",
            population_size,
            self._radius,
            bounds_height,
            bounds_width,
            placement,
        )

    @classmethod
    def from_config(cls, config: SimulationConfig) -> "FlockSimulation":
        return cls(
            config.flock,
            config.perception_radius,
            config.population,
            config.bounds_height,
            config.bounds_width,
            rng=DeterministicRng(config.seed),
            placement=config.placement,
        )

    @property
    def config(self) -> FlockConfig:
        return self._config

    @property
    def perception_radius(self) -> float:
        return self._radius

    @property
    def agents(self) -> List[Agent]:
        return self._agents

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    @property
    def ticks_elapsed(self) -> int:
        return self._tick

    def reset(self) -> None:
        self._rng.reset()
        self._agents.clear()
        self._tick = 0
        self._metrics = None
        self._bootstrap_population()

    def positions(self) -> Tuple[Vector2, ...]:
        return tuple(Vector2(agent.position) for agent in self._agents)

    def tick(self, bounds_height: float, bounds_width: float) -> TickMetrics:
        if not self._agents:
            self._metrics = metrics_system.create_metrics(self._tick, self._agents, 0, 0, 0.0)
            return self._metrics

        start = perf_counter()
        agents = self._agents
        config = self._config
        checks = neighbors.rebuild_neighbors(agents, self._radius)

        # Every new velocity is computed before any agent moves.
        updates: List[Vector2] = []
        boundary_turns = 0
        for agent in agents:
            velocity, turns = steering.compute_velocity(agent, agents, config, bounds_height, bounds_width)
            updates.append(velocity)
            boundary_turns += turns

        for agent, velocity in zip(agents, updates):
            agent.velocity = velocity
            agent.position = Vector2(agent.position.x + velocity.x, agent.position.y + velocity.y)

        duration_ms = (perf_counter() - start) * 1000.0
        self._metrics = metrics_system.create_metrics(self._tick, agents, checks, boundary_turns, duration_ms)
        self._tick += 1
        logger.debug(
            "tick %d: %d neighbor links, avg speed %.3f, %d boundary turns, %.2f ms",
            self._metrics.tick,
            self._metrics.neighbor_links,
            self._metrics.average_speed,
            boundary_turns,
            duration_ms,
        )
        return self._metrics

    def _bootstrap_population(self) -> None:
        bounds_height, bounds_width = self._initial_bounds
        if self._placement == "centered":
            side = min(bounds_height, bounds_width)
            x_low = (bounds_width - side) / 2.0
            y_low = (bounds_height - side) / 2.0
            x_high = x_low + side
            y_high = y_low + side
        else:
            x_low, x_high = 0.0, float(bounds_width)
            y_low, y_high = 0.0, float(bounds_height)

        min_speed = self._config.min_speed
        for _ in range(self._population_size):
            position = Vector2(self._rng.next_range(x_low, x_high), self._rng.next_range(y_low, y_high))
            velocity = self._rng.next_unit_circle() * min_speed
            self._agents.append(Agent(position=position, velocity=velocity))


def initialize(
    radius: float,
    population_size: int,
    bounds_height: float,
    bounds_width: float,
    config: FlockConfig,
    rng: Optional[RandomSource] = None,
    placement: str = "full",
) -> FlockSimulation:
    return FlockSimulation(config, radius, population_size, bounds_height, bounds_width, rng=rng, placement=placement)


def tick(simulation: FlockSimulation, bounds_height: float, bounds_width: float) -> TickMetrics:
    return simulation.tick(bounds_height, bounds_width)


def positions(simulation: FlockSimulation) -> Tuple[Vector2, ...]:
    return simulation.positions()
