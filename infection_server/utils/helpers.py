# infection_server/utils/helpers.py
"""Utility functions and helpers."""

import math
import random

from infection_server.config.settings import (
    CANVAS_SIZE,
    DIRECTIONS,
    EMOJI_TIERS,
    ENTITY_SIZE,
    NPC_MAX_STEPS,
    NPC_MIN_STEPS,
)

MAX_COORD = CANVAS_SIZE - ENTITY_SIZE


def strength(emoji: str) -> int:
    """Rank of an emoji in the infection hierarchy; unknown emoji rank as default."""
    try:
        return EMOJI_TIERS.index(emoji)
    except ValueError:
        return 0


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_to_world(x: float, y: float) -> tuple:
    """Clamp a top-left position to world boundaries."""
    return clamp(x, 0, MAX_COORD), clamp(y, 0, MAX_COORD)


def distance_sq(x1: float, y1: float, x2: float, y2: float) -> float:
    """Squared distance between two points."""
    dx = x2 - x1
    dy = y2 - y1
    return dx * dx + dy * dy


def normalize(dx: float, dy: float) -> tuple:
    """Unit vector of (dx, dy), or (0, 0) for a zero vector."""
    length = math.hypot(dx, dy)
    if length == 0:
        return 0.0, 0.0
    return dx / length, dy / length


def random_position(rng: random.Random = random) -> tuple:
    """Random in-bounds top-left position."""
    return rng.uniform(0, MAX_COORD), rng.uniform(0, MAX_COORD)


def random_direction(rng: random.Random = random) -> tuple:
    return rng.choice(DIRECTIONS)


def random_steps(rng: random.Random = random) -> int:
    return rng.randint(NPC_MIN_STEPS, NPC_MAX_STEPS)


def is_number(value) -> bool:
    """True for finite ints and floats, excluding bools."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
