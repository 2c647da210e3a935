from __future__ import annotations

from typing import List, Tuple

from pygame.math import Vector2

from ..core.agent import Agent
from ..core.config import FlockConfig
from ..utils.math2d import add, distance, magnitude, scale, subtract


def separation(agent: Agent, agents: List[Agent], config: FlockConfig) -> Vector2:
    # Raw offsets are summed without per-neighbor normalization.
    total = Vector2()
    position = agent.position
    for index in agent.neighbors:
        other = agents[index].position
        if distance(position, other) < config.separation_threshold:
            total = add(total, subtract(position, other))
    return scale(total, config.separation_factor)


def alignment(agent: Agent, agents: List[Agent], config: FlockConfig) -> Vector2:
    count = len(agent.neighbors)
    if count == 0:
        return Vector2()
    total = Vector2()
    for index in agent.neighbors:
        total = add(total, agents[index].velocity)
    return scale(total, config.alignment_factor / count)


def cohesion(agent: Agent, agents: List[Agent], config: FlockConfig) -> Vector2:
    count = len(agent.neighbors)
    if count == 0:
        return Vector2()
    total = Vector2()
    for index in agent.neighbors:
        total = add(total, agents[index].position)
    centroid = scale(total, 1.0 / count)
    return scale(subtract(centroid, agent.position), config.cohesion_factor)


def apply_boundary(
    velocity: Vector2,
    position: Vector2,
    config: FlockConfig,
    bounds_height: float,
    bounds_width: float,
) -> Tuple[Vector2, int]:
    impulse = config.turn_impulse
    margin = config.margin
    vx = velocity.x
    vy = velocity.y
    turns = 0
    if position.x < margin:
        vx += impulse
        turns += 1
    if position.x > bounds_width - margin:
        vx -= impulse
        turns += 1
    if position.y < margin:
        vy += impulse
        turns += 1
    if position.y > bounds_height - margin:
        vy -= impulse
        turns += 1
    return Vector2(vx, vy), turns


def clamp_speed(velocity: Vector2, config: FlockConfig) -> Vector2:
    speed = magnitude(velocity)
    if speed > config.max_speed:
        return scale(velocity, config.max_speed / speed)
    if speed < config.min_speed:
        if speed == 0.0:
            # No heading to preserve; fall back to +x.
            return Vector2(config.min_speed, 0.0)
        return scale(velocity, config.min_speed / speed)
    return Vector2(velocity)


def compute_velocity(
    agent: Agent,
    agents: List[Agent],
    config: FlockConfig,
    bounds_height: float,
    bounds_width: float,
) -> Tuple[Vector2, int]:
    """
    Return the agent's next velocity and how many boundary impulses were applied.

    Reads only the pre-tick positions and velocities of `agent` and its neighbors.
    """

    steered = add(agent.velocity, separation(agent, agents, config))
    steered = add(steered, alignment(agent, agents, config))
    steered = add(steered, cohesion(agent, agents, config))
    steered, turns = apply_boundary(steered, agent.position, config, bounds_height, bounds_width)
    return clamp_speed(steered, config), turns
