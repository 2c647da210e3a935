from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    population: int
    neighbor_checks: int
    neighbor_links: int
    average_neighbors: float
    average_speed: float
    boundary_turns: int
    tick_duration_ms: float = 0.0
