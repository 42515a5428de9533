"""Presentation order for a session's question pool."""

import random
from typing import List, Optional, Sequence


def generate_question_order(pool_size: int, rng: Optional[random.Random] = None) -> List[int]:
    """
    Return a uniformly shuffled permutation of ``range(pool_size)``.

    ``random.shuffle`` is an unbiased Fisher-Yates shuffle. Call this once
    per new session; a resumed session must reuse its stored order.
    """
    if pool_size < 0:
        raise ValueError("pool_size must not be negative")
    order = list(range(pool_size))
    (rng or random).shuffle(order)
    return order


def is_valid_order(order: Optional[Sequence[int]], pool_size: int) -> bool:
    """True when ``order`` contains every index of ``[0, pool_size)`` exactly once."""
    if not order or len(order) != pool_size:
        return False
    try:
        return sorted(int(index) for index in order) == list(range(pool_size))
    except (TypeError, ValueError):
        return False
