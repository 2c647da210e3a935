from __future__ import annotations

from pygame.math import Vector2
from pytest import approx

from boidoid.sim.core.agent import Agent
from boidoid.sim.core.config import FlockConfig
from boidoid.sim.systems.steering import (
    alignment,
    apply_boundary,
    clamp_speed,
    cohesion,
    compute_velocity,
    separation,
)

CONFIG = FlockConfig()


def _agent(x: float, y: float, vx: float = 0.0, vy: float = 0.0) -> Agent:
    return Agent(position=Vector2(x, y), velocity=Vector2(vx, vy))


def _with_neighbors(agents: list[Agent]) -> list[Agent]:
    agents[0].neighbors = list(range(1, len(agents)))
    return agents


def test_separation_sums_raw_offsets_inside_threshold_only():
    agents = _with_neighbors([_agent(0, 0), _agent(1, 0), _agent(2, 0), _agent(0, -0.5), _agent(5, 5)])

    result = separation(agents[0], agents, CONFIG)

    # (0,0)-(1,0) + (0,0)-(0,-0.5); the neighbor exactly at the threshold is ignored
    assert result.x == approx(-1.0 * CONFIG.separation_factor)
    assert result.y == approx(0.5 * CONFIG.separation_factor)


def test_separation_of_coincident_agents_is_zero():
    agents = _with_neighbors([_agent(3, 3), _agent(3, 3)])

    result = separation(agents[0], agents, CONFIG)

    assert result.x == 0.0
    assert result.y == 0.0


def test_alignment_averages_neighbor_velocities():
    agents = _with_neighbors([_agent(0, 0, 9, 9), _agent(1, 0, 2, 0), _agent(0, 1, 0, 2)])

    result = alignment(agents[0], agents, CONFIG)

    assert result.x == approx(1.0 * CONFIG.alignment_factor)
    assert result.y == approx(1.0 * CONFIG.alignment_factor)


def test_cohesion_points_toward_centroid():
    agents = _with_neighbors([_agent(0, 0), _agent(10, 0), _agent(0, 10)])

    result = cohesion(agents[0], agents, CONFIG)

    assert result.x == approx(5.0 * CONFIG.cohesion_factor)
    assert result.y == approx(5.0 * CONFIG.cohesion_factor)


def test_empty_neighbor_set_contributes_nothing():
    agents = [_agent(0, 0, 1, 1)]

    for rule in (separation, alignment, cohesion):
        result = rule(agents[0], agents, CONFIG)
        assert (result.x, result.y) == (0.0, 0.0)


def test_boundary_impulses_apply_per_axis():
    low_corner, turns = apply_boundary(Vector2(), Vector2(0.0, 0.0), CONFIG, 100, 100)
    assert (low_corner.x, low_corner.y) == (approx(0.2), approx(0.2))
    assert turns == 2

    high_corner, turns = apply_boundary(Vector2(), Vector2(90.0, 90.0), CONFIG, 100, 100)
    assert (high_corner.x, high_corner.y) == (approx(-0.2), approx(-0.2))
    assert turns == 2

    left_edge, turns = apply_boundary(Vector2(1.0, 0.0), Vector2(10.0, 50.0), CONFIG, 100, 100)
    assert (left_edge.x, left_edge.y) == (approx(1.2), 0.0)
    assert turns == 1

    inside, turns = apply_boundary(Vector2(1.0, 0.0), Vector2(50.0, 50.0), CONFIG, 100, 100)
    assert (inside.x, inside.y) == (1.0, 0.0)
    assert turns == 0


def test_narrow_bounds_can_push_both_ways():
    # With the field narrower than two margins both checks fire and cancel.
    velocity, turns = apply_boundary(Vector2(), Vector2(20.0, 50.0), CONFIG, 100, 40)
    assert velocity.x == approx(0.0)
    assert turns == 2


def test_clamp_speed_bounds():
    fast = clamp_speed(Vector2(10.0, 0.0), CONFIG)
    assert (fast.x, fast.y) == (approx(CONFIG.max_speed), 0.0)

    slow = clamp_speed(Vector2(0.0, 0.5), CONFIG)
    assert (slow.x, slow.y) == (0.0, approx(CONFIG.min_speed))

    diagonal = clamp_speed(Vector2(3.0, 4.0), CONFIG)
    assert diagonal.length() == approx(CONFIG.max_speed)
    assert diagonal.x / diagonal.y == approx(0.75)

    cruising = Vector2(1.5, 0.0)
    result = clamp_speed(cruising, CONFIG)
    assert result == cruising
    assert result is not cruising


def test_clamp_speed_zero_velocity_gets_default_heading():
    result = clamp_speed(Vector2(), CONFIG)
    assert (result.x, result.y) == (CONFIG.min_speed, 0.0)

    resting = FlockConfig(min_speed=0.0)
    result = clamp_speed(Vector2(), resting)
    assert (result.x, result.y) == (0.0, 0.0)


def test_compute_velocity_combines_rules_without_mutating():
    agents = [_agent(500, 500, 1, 0), _agent(510, 500, 0, 1)]
    agents[0].neighbors = [1]
    agents[1].neighbors = [0]

    velocity, turns = compute_velocity(agents[0], agents, CONFIG, 1000, 1000)

    assert turns == 0
    assert velocity.x == approx(1.0 + 10.0 * CONFIG.cohesion_factor)
    assert velocity.y == approx(CONFIG.alignment_factor)
    assert agents[0].velocity == Vector2(1, 0)
    assert agents[0].position == Vector2(500, 500)
