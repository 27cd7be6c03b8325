from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .ball import GroupId

DEFAULT_CAPACITY = 4


class GameMode(Enum):
    EASY = 'easy'
    MEDIUM = 'medium'
    HARD = 'hard'


@dataclass(frozen=True)
class Level:
    """Read-only level description: one column of group ids (bottom-to-top) per holder."""
    number: int
    columns: Tuple[Tuple[GroupId, ...], ...]
    capacity: int = DEFAULT_CAPACITY

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError(f'level {self.number}: capacity must be >= 1')
        if not self.columns:
            raise ValueError(f'level {self.number}: at least one column is required')
        for i, col in enumerate(self.columns):
            if len(col) > self.capacity:
                raise ValueError(
                    f'level {self.number}: column {i} holds {len(col)} balls, capacity is {self.capacity}'
                )
            if any(g < 0 for g in col):
                raise ValueError(f'level {self.number}: column {i} has a negative group id')

    @classmethod
    def build(cls, number: int, columns: Iterable[Sequence[int]], capacity: int = DEFAULT_CAPACITY) -> 'Level':
        return cls(number=int(number), columns=tuple(tuple(int(g) for g in col) for col in columns), capacity=int(capacity))

    @property
    def holder_count(self) -> int:
        return len(self.columns)

    def total_balls(self) -> int:
        return sum(len(col) for col in self.columns)

    def group_counts(self) -> Dict[GroupId, int]:
        return dict(Counter(g for col in self.columns for g in col))


LevelPack = Dict[GameMode, Tuple[Level, ...]]


def _column_values(col: Any) -> List[int]:
    # Authoring tools serialize columns as {"values": [...]}
    if isinstance(col, dict):
        col = col.get('values') or []
    return [int(g) for g in col]


def level_from_json(obj: Dict[str, Any]) -> Level:
    """Decodes a level from either {"no", "map": [{"values"}]} or {"number", "columns", "capacity"}."""
    if 'map' in obj:
        number = obj.get('no', obj.get('number', 0))
        raw_columns = obj['map']
    else:
        number = obj.get('number', 0)
        raw_columns = obj['columns']
    capacity = obj.get('capacity', DEFAULT_CAPACITY)
    return Level.build(number, (_column_values(c) for c in raw_columns), capacity)


def level_to_json(level: Level) -> Dict[str, Any]:
    return {
        'number': level.number,
        'columns': [list(col) for col in level.columns],
        'capacity': level.capacity,
    }


def parse_level_pack(obj: Dict[str, Any]) -> LevelPack:
    pack: LevelPack = {}
    for key, levels in obj.items():
        try:
            mode = GameMode(str(key).lower())
        except ValueError:
            raise ValueError(f'unknown game mode in level pack: {key!r}') from None
        # The original pack format wraps each mode as {"levels": [...]}
        if isinstance(levels, dict):
            levels = levels.get('levels') or []
        pack[mode] = tuple(level_from_json(item) for item in levels)
    return pack


def load_level_pack(path: str) -> LevelPack:
    """Reads a JSON level pack keyed by game mode name."""
    with open(path, 'r', encoding='utf-8') as f:
        return parse_level_pack(json.load(f))


def find_level(pack: LevelPack, mode: GameMode, number: int) -> Optional[Level]:
    for level in pack.get(mode, ()):
        if level.number == number:
            return level
    return None


def next_level(pack: LevelPack, mode: GameMode, number: int) -> Optional[Level]:
    """Returns the level following `number` in `mode`, or None after the last one."""
    levels = pack.get(mode, ())
    for i, level in enumerate(levels):
        if level.number == number:
            return levels[i + 1] if i + 1 < len(levels) else None
    return None
