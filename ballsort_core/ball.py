from __future__ import annotations

from dataclasses import dataclass

GroupId = int


@dataclass(frozen=True)
class Ball:
    """A ball with a fixed group (color). `uid` is its identity within a session."""
    uid: int
    group_id: GroupId

    def __post_init__(self) -> None:
        if self.group_id < 0:
            raise ValueError(f'group id must be >= 0, got {self.group_id}')
