from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .ball import Ball, GroupId
from .errors import CapacityExceeded, EmptyHolder


@dataclass(eq=False)
class Holder:
    """A capacity-bounded stack of balls, stored bottom-to-top."""
    capacity: int
    balls: List[Ball] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError(f'capacity must be >= 1, got {self.capacity}')
        self.balls = list(self.balls)
        if len(self.balls) > self.capacity:
            raise CapacityExceeded(
                f'{len(self.balls)} balls do not fit in a holder of capacity {self.capacity}'
            )

    @classmethod
    def filled(cls, capacity: int, balls: Iterable[Ball]) -> 'Holder':
        return cls(capacity=capacity, balls=list(balls))

    def top_ball(self) -> Optional[Ball]:
        return self.balls[-1] if self.balls else None

    def is_full(self) -> bool:
        return len(self.balls) == self.capacity

    def has_any_balls(self) -> bool:
        return bool(self.balls)

    def push_ball(self, ball: Ball) -> None:
        """Places a ball on top. Pushing onto a full holder is a caller bug."""
        if self.is_full():
            raise CapacityExceeded(f'holder is full (capacity {self.capacity})')
        self.balls.append(ball)

    def pop_top_ball(self) -> Ball:
        """Removes and returns the top ball."""
        if not self.balls:
            raise EmptyHolder('cannot remove a ball from an empty holder')
        return self.balls.pop()

    def groups(self) -> Tuple[GroupId, ...]:
        return tuple(b.group_id for b in self.balls)
