from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

from .ball import Ball, GroupId
from .config import Settings
from .errors import CapacityExceeded, EmptyHolder, InvalidPhase, InvalidSelection
from .history import MoveHistory, MoveRecord
from .holder import Holder
from .layout import Layout, Point, positions_for_holders
from .levels import Level
from .rules import can_move, is_solved

logger = logging.getLogger(__name__)


class Phase(Enum):
    NOT_STARTED = 'not_started'
    PLAYING = 'playing'
    OVER = 'over'


@dataclass(frozen=True)
class NoSelection:
    pass


@dataclass(frozen=True)
class Selected:
    holder_id: int


Selection = Union[NoSelection, Selected]
NO_SELECTION = NoSelection()


@dataclass(frozen=True)
class HolderView:
    """Read-only view of one holder for presentation code."""
    holder_id: int
    capacity: int
    groups: Tuple[GroupId, ...]
    is_pending: bool

    @property
    def top_group(self) -> Optional[GroupId]:
        return self.groups[-1] if self.groups else None


@dataclass(frozen=True)
class MoveEvent:
    source: int
    target: int
    ball: Ball
    undo: bool
    holders: Tuple[HolderView, ...]


@dataclass(frozen=True)
class LevelWonEvent:
    level_number: int
    moves: int


Event = Union[MoveEvent, LevelWonEvent]
Listener = Callable[[Event], None]


def _build_holders(level: Level) -> List[Holder]:
    holders: List[Holder] = []
    uid = 0
    for column in level.columns:
        balls = []
        for group in column:
            balls.append(Ball(uid=uid, group_id=group))
            uid += 1
        holders.append(Holder.filled(level.capacity, balls))
    return holders


class PuzzleEngine:
    """
    Owns one puzzle session: the holders, the pending selection, the undo
    history and the phase. Presentation code sends selections and undo
    requests and reads snapshots; it is told about results through listeners.
    """

    def __init__(self, level: Level, settings: Optional[Settings] = None) -> None:
        self.level = level
        self.settings = settings or Settings()
        self.phase = Phase.NOT_STARTED
        self.selection: Selection = NO_SELECTION
        self.history = MoveHistory()
        self._holders: List[Holder] = _build_holders(level)
        self._listeners: List[Listener] = []

    # ---------- lifecycle ----------

    def start(self) -> 'PuzzleEngine':
        if self.phase is not Phase.NOT_STARTED:
            raise InvalidPhase(f'cannot start a session in phase {self.phase.value}')
        self.phase = Phase.PLAYING
        logger.info('Level %d started with %d holders', self.level.number, len(self._holders))
        return self

    def restart(self) -> None:
        """Reloads the level's initial contents and resumes play."""
        self._holders = _build_holders(self.level)
        self.history.clear()
        self.selection = NO_SELECTION
        self.phase = Phase.PLAYING
        logger.info('Level %d restarted', self.level.number)

    @classmethod
    def resume(
        cls,
        level: Level,
        holders: Sequence[Sequence[Ball]],
        history: Iterable[Tuple[int, int, int]],
        selection: Optional[int] = None,
        phase: Phase = Phase.PLAYING,
        settings: Optional[Settings] = None,
    ) -> 'PuzzleEngine':
        """
        Rebuilds a session from serialized parts. `history` items are
        (source, target, ball uid), oldest first. The history is replayed
        forward from the level's initial board with the normal move rules,
        and the result must equal `holders` ball for ball.
        """
        engine = cls(level, settings)
        if len(holders) != level.holder_count:
            raise ValueError(f'expected {level.holder_count} holders, got {len(holders)}')

        for step, (source, target, uid) in enumerate(history):
            engine._check_holder_id(source)
            engine._check_holder_id(target)
            src = engine._holders[source]
            dst = engine._holders[target]
            top = src.top_ball()
            if source == target or top is None or top.uid != uid:
                raise ValueError(f'history step {step}: ball {uid} is not on top of holder {source}')
            if not can_move(src, dst):
                raise ValueError(f'history step {step}: illegal move from {source} to {target}')
            engine.history.push(MoveRecord(source=source, target=target, ball=top))
            dst.push_ball(src.pop_top_ball())

        if [h.balls for h in engine._holders] != [list(col) for col in holders]:
            raise ValueError('holder contents do not match the level and its history')

        if phase is Phase.OVER and not is_solved(engine._holders):
            raise ValueError('phase is over but the board is not solved')
        if phase is Phase.NOT_STARTED and engine.history:
            raise ValueError('a session that has not started cannot have moves')

        if selection is not None:
            if phase is not Phase.PLAYING:
                raise ValueError(f'no holder can be pending in phase {phase.value}')
            engine._check_holder_id(selection)
            if not engine._holders[selection].has_any_balls():
                raise ValueError('the pending holder must have balls')
            engine.selection = Selected(selection)
        engine.phase = phase
        return engine

    # ---------- listeners ----------

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    def _emit(self, event: Event) -> None:
        for listener in list(self._listeners):
            listener(event)

    # ---------- queries ----------

    @property
    def holder_count(self) -> int:
        return len(self._holders)

    @property
    def move_count(self) -> int:
        return len(self.history)

    def holder(self, holder_id: int) -> Holder:
        self._check_holder_id(holder_id)
        return self._holders[holder_id]

    def holders(self) -> Tuple[Holder, ...]:
        return tuple(self._holders)

    def pending_holder_id(self) -> Optional[int]:
        return self.selection.holder_id if isinstance(self.selection, Selected) else None

    def is_pending(self, holder_id: int) -> bool:
        self._check_holder_id(holder_id)
        return self.pending_holder_id() == holder_id

    def has_undo(self) -> bool:
        return bool(self.history)

    def snapshot(self) -> Tuple[HolderView, ...]:
        pending = self.pending_holder_id()
        return tuple(
            HolderView(holder_id=i, capacity=h.capacity, groups=h.groups(), is_pending=(i == pending))
            for i, h in enumerate(self._holders)
        )

    def layout(self, origin: Point = (0.0, 0.0)) -> Layout:
        return positions_for_holders(
            len(self._holders), self.settings.min_spacing, self.settings.aspect, origin
        )

    # ---------- commands ----------

    def select_holder(self, holder_id: int) -> Optional[MoveRecord]:
        """
        Handles a click on a holder. Returns the MoveRecord when the click
        completed a legal move, otherwise None (selection changed or no-op).
        """
        self._require_playing('select a holder')
        self._check_holder_id(holder_id)
        holder = self._holders[holder_id]
        pending = self.pending_holder_id()

        if pending is None:
            if holder.has_any_balls():
                self.selection = Selected(holder_id)
            return None

        if pending == holder_id:
            if self.settings.deselect_on_reselect:
                self.selection = NO_SELECTION
            return None

        source = self._holders[pending]
        if not can_move(source, holder):
            # Redirect the selection to the clicked holder
            self.selection = Selected(holder_id)
            return None

        record = MoveRecord(source=pending, target=holder_id, ball=source.top_ball())
        self.history.push(record)
        holder.push_ball(source.pop_top_ball())
        self.selection = NO_SELECTION
        logger.debug('Moved ball %d (group %d) from %d to %d',
                     record.ball.uid, record.ball.group_id, record.source, record.target)
        self._emit(MoveEvent(record.source, record.target, record.ball, False, self.snapshot()))
        self.check_win()
        return record

    def undo(self) -> Optional[MoveRecord]:
        """Reverses the latest move. No-op (returns None) when there is nothing to undo."""
        self._require_playing('undo')
        if not self.history:
            return None
        record = self.history.peek()
        source = self._holders[record.source]
        target = self._holders[record.target]
        # Nothing is mutated unless the whole reversal can be applied
        if target.top_ball() != record.ball:
            raise EmptyHolder(f'ball {record.ball.uid} is not on top of holder {record.target}')
        if source.is_full():
            raise CapacityExceeded(f'holder {record.source} has no room to take ball {record.ball.uid} back')
        self.history.pop()
        source.push_ball(target.pop_top_ball())
        self.selection = NO_SELECTION
        logger.debug('Undid move of ball %d from %d to %d', record.ball.uid, record.source, record.target)
        self._emit(MoveEvent(record.target, record.source, record.ball, True, self.snapshot()))
        return record

    def check_win(self) -> bool:
        """Ends the session when the board is solved; notifies listeners only once."""
        if self.phase is not Phase.PLAYING:
            return self.phase is Phase.OVER
        if not is_solved(self._holders):
            return False
        self.phase = Phase.OVER
        self.selection = NO_SELECTION
        logger.info('Level %d solved in %d moves', self.level.number, self.move_count)
        self._emit(LevelWonEvent(level_number=self.level.number, moves=self.move_count))
        return True

    # ---------- helpers ----------

    def _require_playing(self, action: str) -> None:
        if self.phase is not Phase.PLAYING:
            raise InvalidPhase(f'cannot {action} in phase {self.phase.value}')

    def _check_holder_id(self, holder_id: int) -> None:
        if isinstance(holder_id, bool) or not isinstance(holder_id, int):
            raise InvalidSelection(f'holder id must be an int, got {holder_id!r}')
        if not 0 <= holder_id < len(self._holders):
            raise InvalidSelection(f'no holder {holder_id} on a board of {len(self._holders)}')
