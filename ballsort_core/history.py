from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional

from .ball import Ball


@dataclass(frozen=True)
class MoveRecord:
    """One ball moved from the top of `source` to the top of `target` (holder ids)."""
    source: int
    target: int
    ball: Ball


class MoveHistory:
    """LIFO stack of executed moves."""

    def __init__(self) -> None:
        self._records: List[MoveRecord] = []

    def push(self, record: MoveRecord) -> None:
        self._records.append(record)

    def pop(self) -> MoveRecord:
        if not self._records:
            raise IndexError('pop from empty move history')
        return self._records.pop()

    def peek(self) -> Optional[MoveRecord]:
        return self._records[-1] if self._records else None

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)

    def __iter__(self) -> Iterator[MoveRecord]:
        return iter(self._records)
