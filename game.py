from __future__ import annotations

# Facade module that re-exports the ball-sort core.
# The Flask app and the tests import from here; single-responsibility
# modules live under ballsort_core/*.

from ballsort_core.ball import Ball, GroupId
from ballsort_core.holder import Holder
from ballsort_core.errors import (
    BallSortError,
    EmptyHolder,
    CapacityExceeded,
    InvalidSelection,
    InvalidPhase,
)
from ballsort_core.levels import (
    DEFAULT_CAPACITY,
    GameMode,
    Level,
    LevelPack,
    level_from_json,
    level_to_json,
    parse_level_pack,
    load_level_pack,
    find_level,
    next_level,
)
from ballsort_core.deal import deal_level
from ballsort_core.layout import Layout, Point, positions_for_holders
from ballsort_core.history import MoveRecord, MoveHistory
from ballsort_core.rules import can_move, is_homogeneous, is_solved
from ballsort_core.engine import (
    Phase,
    NoSelection,
    Selected,
    Selection,
    NO_SELECTION,
    HolderView,
    MoveEvent,
    LevelWonEvent,
    PuzzleEngine,
)
from ballsort_core.config import Settings, load_settings
from ballsort_core.render import render_holders


def new_session(level: Level, settings: Settings | None = None) -> PuzzleEngine:
    """Builds an engine for `level` and enters the playing phase."""
    return PuzzleEngine(level, settings).start()


def main() -> None:
    # CLI driver delegated to ballsort_core.cli
    from ballsort_core.cli import main as _main
    _main()


if __name__ == '__main__':
    main()
