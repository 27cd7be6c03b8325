from __future__ import annotations

import argparse
import logging
from typing import Callable, List, Optional

from .config import Settings, load_settings
from .deal import deal_level
from .engine import Event, LevelWonEvent, Phase, PuzzleEngine
from .errors import InvalidSelection
from .layout import positions_for_holders
from .levels import GameMode, Level, find_level, load_level_pack
from .logging_config import setup_logging
from .render import render_holders

logger = logging.getLogger(__name__)

HELP = "Commands: 'a b' move from holder a to b, 'a' select a holder, 'u' undo, 'r' restart, 'q' quit"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Ball-sort puzzle in the terminal')
    parser.add_argument('--levels', default=None, help='JSON level pack (defaults to BALLSORT_LEVELS)')
    parser.add_argument('--mode', choices=[m.value for m in GameMode], default=GameMode.EASY.value,
                        help='Game mode inside the level pack')
    parser.add_argument('--level', type=int, default=1, help='Level number inside the pack')
    parser.add_argument('--groups', type=int, default=4, help='Colors in a random deal (no pack)')
    parser.add_argument('--capacity', type=int, default=4, help='Holder capacity in a random deal')
    parser.add_argument('--empty', type=int, default=2, help='Empty holders in a random deal')
    parser.add_argument('--seed', type=int, default=None, help='RNG seed for the random deal')
    parser.add_argument('--layout', action='store_true', help='Print holder positions and exit')
    parser.add_argument('--log-level', default=None, help='Logging level (defaults to BALLSORT_LOG_LEVEL)')
    return parser


def resolve_level(args: argparse.Namespace, settings: Settings) -> Level:
    path = args.levels or settings.levels_path
    if path:
        pack = load_level_pack(path)
        level = find_level(pack, GameMode(args.mode), args.level)
        if level is None:
            raise SystemExit(f'error: level {args.level} not found in {args.mode} of {path}')
        logger.info('Loaded level %d (%s) from %s', level.number, args.mode, path)
        return level
    try:
        return deal_level(args.groups, capacity=args.capacity, empty_holders=args.empty, seed=args.seed)
    except ValueError as e:
        raise SystemExit(f'error: {e}') from None


def print_layout(level: Level, settings: Settings) -> None:
    layout = positions_for_holders(level.holder_count, settings.min_spacing, settings.aspect)
    print(f'Rows: {list(layout.rows)}  expected width: {layout.expected_width:.2f}  '
          f'view half-height: {layout.view_half_height():.2f}')
    for i, (x, y) in enumerate(layout.positions):
        print(f'  holder {i}: ({x:.2f}, {y:.2f})')


def run_command(engine: PuzzleEngine, text: str, out: Callable[[str], None] = print) -> bool:
    """Applies one line of input. Returns False when the player quits."""
    tokens = text.replace(',', ' ').split()
    if not tokens:
        return True
    cmd = tokens[0].lower()
    if cmd in ('q', 'quit', 'exit'):
        return False
    if cmd in ('u', 'undo'):
        if engine.undo() is None:
            out('Nothing to undo.')
        return True
    if cmd in ('r', 'restart'):
        engine.restart()
        return True
    if cmd in ('h', 'help', '?'):
        out(HELP)
        return True
    try:
        ids = [int(t) for t in tokens[:2]]
    except ValueError:
        out('Could not parse. ' + HELP)
        return True
    try:
        for holder_id in ids:
            if engine.phase is not Phase.PLAYING:
                break
            engine.select_holder(holder_id)
    except InvalidSelection as e:
        out(f'Invalid holder: {e}')
    return True


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    try:
        setup_logging(args.log_level or settings.log_level, settings.log_file)
    except ValueError as e:
        raise SystemExit(f'error: {e}') from None

    level = resolve_level(args, settings)
    if args.layout:
        print_layout(level, settings)
        return

    engine = PuzzleEngine(level, settings)

    def on_event(event: Event) -> None:
        if isinstance(event, LevelWonEvent):
            print(f'Solved level {event.level_number} in {event.moves} moves!')

    engine.add_listener(on_event)
    engine.start()
    engine.check_win()
    print(f'Level {level.number}')
    print(HELP)
    while True:
        print(render_holders(engine.snapshot()))
        if engine.phase is Phase.OVER:
            break
        try:
            text = input('> ').strip()
        except EOFError:
            break
        if not run_command(engine, text):
            break
