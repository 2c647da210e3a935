from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from pygame.math import Vector2


@dataclass(slots=True)
class Agent:
    position: Vector2
    velocity: Vector2
    # Indices into the owning simulation's population, valid for the current tick only.
    neighbors: List[int] = field(default_factory=list)
