from __future__ import annotations

import random
from typing import List, Optional

from .ball import GroupId
from .levels import DEFAULT_CAPACITY, Level


def deal_level(
    groups: int,
    capacity: int = DEFAULT_CAPACITY,
    empty_holders: int = 2,
    seed: Optional[int] = None,
    number: int = 0,
) -> Level:
    """Shuffles `capacity` balls of each group into full holders and adds empty ones."""
    if groups < 1:
        raise ValueError('at least one group is required')
    if capacity < 1:
        raise ValueError('capacity must be >= 1')
    if empty_holders < 0:
        raise ValueError('empty_holders must be >= 0')
    rng = random.Random(seed)
    balls: List[GroupId] = [g for g in range(groups) for _ in range(capacity)]
    rng.shuffle(balls)
    columns = [balls[i * capacity:(i + 1) * capacity] for i in range(groups)]
    columns.extend([] for _ in range(empty_holders))
    return Level.build(number, columns, capacity)
