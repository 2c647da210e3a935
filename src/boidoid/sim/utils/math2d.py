from __future__ import annotations

import math

from pygame.math import Vector2


def add(a: Vector2, b: Vector2) -> Vector2:
    return Vector2(a.x + b.x, a.y + b.y)


def subtract(a: Vector2, b: Vector2) -> Vector2:
    return Vector2(a.x - b.x, a.y - b.y)


def scale(vector: Vector2, scalar: float) -> Vector2:
    return Vector2(vector.x * scalar, vector.y * scalar)


def magnitude(vector: Vector2) -> float:
    return math.sqrt(vector.x * vector.x + vector.y * vector.y)


def distance(a: Vector2, b: Vector2) -> float:
    offset_x = a.x - b.x
    offset_y = a.y - b.y
    return math.sqrt(offset_x * offset_x + offset_y * offset_y)
