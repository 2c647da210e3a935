from __future__ import annotations

import math
from typing import List

from ..core.agent import Agent


def rebuild_neighbors(agents: List[Agent], radius: float) -> int:
    """
    Recompute every agent's neighbor indices by comparing all unordered pairs.

    Two agents are neighbors when their distance is strictly below `radius`.
    The relation is symmetric and never includes the agent itself.
    Returns the number of pair comparisons performed.
    """

    for agent in agents:
        agent.neighbors.clear()

    count = len(agents)
    checks = 0
    for i in range(count):
        first = agents[i]
        pos_x = first.position.x
        pos_y = first.position.y
        first_neighbors = first.neighbors
        for j in range(i + 1, count):
            second = agents[j]
            offset_x = second.position.x - pos_x
            offset_y = second.position.y - pos_y
            checks += 1
            if math.sqrt(offset_x * offset_x + offset_y * offset_y) < radius:
                first_neighbors.append(j)
                second.neighbors.append(i)
    return checks
