from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from flask import Flask, jsonify, request

from ballsort_core.ball import Ball
from ballsort_core.config import Settings, load_settings
from ballsort_core.deal import deal_level
from ballsort_core.engine import Event, LevelWonEvent, MoveEvent, Phase, PuzzleEngine
from ballsort_core.errors import BallSortError
from ballsort_core.layout import Layout, positions_for_holders
from ballsort_core.levels import (
    GameMode,
    Level,
    LevelPack,
    find_level,
    level_from_json,
    level_to_json,
    load_level_pack,
    next_level,
)
from ballsort_core.logging_config import setup_logging

SETTINGS = load_settings()
logger = logging.getLogger("ballsort_core.app")

app = Flask(__name__)

_pack_cache: Dict[str, LevelPack] = {}

# Upper bounds for /api/new deals
MAX_DEAL_GROUPS = 12
MAX_DEAL_CAPACITY = 8
MAX_DEAL_EMPTY = 6


def _level_pack() -> Optional[LevelPack]:
    path = SETTINGS.levels_path
    if not path or not os.path.isfile(path):
        return None
    if path not in _pack_cache:
        _pack_cache[path] = load_level_pack(path)
        logger.info("Loaded level pack %s", path)
    return _pack_cache[path]


# ---------- JSON encoding ----------

def ball_to_json(b: Ball) -> Dict[str, Any]:
    return {"id": int(b.uid), "group": int(b.group_id)}


def layout_to_json(layout: Layout) -> Dict[str, Any]:
    return {
        "positions": [[float(x), float(y)] for (x, y) in layout.positions],
        "expectedWidth": float(layout.expected_width),
        "rows": list(layout.rows),
        "viewHalfHeight": float(layout.view_half_height()),
    }


def state_to_json(engine: PuzzleEngine) -> Dict[str, Any]:
    return {
        "level": level_to_json(engine.level),
        "holders": [[ball_to_json(b) for b in h.balls] for h in engine.holders()],
        "pending": engine.pending_holder_id(),
        "history": [
            {"from": int(r.source), "to": int(r.target), "ball": int(r.ball.uid)}
            for r in engine.history
        ],
        "phase": engine.phase.value,
        "hasUndo": engine.has_undo(),
        "moves": engine.move_count,
    }


def json_to_state(obj: Dict[str, Any], settings: Optional[Settings] = None) -> PuzzleEngine:
    level = level_from_json(obj["level"])
    holders = [
        [Ball(uid=int(b["id"]), group_id=int(b["group"])) for b in col]
        for col in obj["holders"]
    ]
    history = [(int(h["from"]), int(h["to"]), int(h["ball"])) for h in obj.get("history", [])]
    pending = obj.get("pending")
    return PuzzleEngine.resume(
        level,
        holders,
        history,
        selection=None if pending is None else int(pending),
        phase=Phase(str(obj.get("phase", Phase.PLAYING.value))),
        settings=settings or SETTINGS,
    )


def event_to_json(event: Event) -> Dict[str, Any]:
    if isinstance(event, MoveEvent):
        return {
            "type": "move",
            "from": event.source,
            "to": event.target,
            "ball": ball_to_json(event.ball),
            "undo": event.undo,
        }
    if isinstance(event, LevelWonEvent):
        return {"type": "won", "level": event.level_number, "moves": event.moves}
    raise TypeError(f"cannot encode event {event!r}")


def _load_body_state(body: Dict[str, Any]) -> Tuple[Optional[PuzzleEngine], Any]:
    s_in = body.get("state")
    if not isinstance(s_in, dict):
        return None, (jsonify({"ok": False, "error": "state required"}), 400)
    try:
        return json_to_state(s_in), None
    except (KeyError, TypeError, ValueError, BallSortError) as e:
        return None, (jsonify({"ok": False, "error": f"bad state: {e}"}), 400)


def _session_response(engine: PuzzleEngine, events: List[Event]) -> Any:
    return jsonify({
        "ok": True,
        "state": state_to_json(engine),
        "events": [event_to_json(e) for e in events],
        "won": engine.phase is Phase.OVER,
    })


def _resolve_new_level(body: Dict[str, Any]) -> Tuple[Optional[Level], Any]:
    if isinstance(body.get("level"), dict):
        try:
            return level_from_json(body["level"]), None
        except (KeyError, TypeError, ValueError) as e:
            return None, (jsonify({"ok": False, "error": f"bad level: {e}"}), 400)
    if "number" in body or "after" in body:
        pack = _level_pack()
        if pack is None:
            return None, (jsonify({"ok": False, "error": "No level pack configured (set BALLSORT_LEVELS)."}), 404)
        try:
            mode = GameMode(str(body.get("mode", GameMode.EASY.value)).lower())
            after = body.get("after")
            number = int(body["number"] if after is None else after)
        except (TypeError, ValueError) as e:
            return None, (jsonify({"ok": False, "error": f"bad level selector: {e}"}), 400)
        level = find_level(pack, mode, number) if after is None else next_level(pack, mode, number)
        if level is None:
            where = f"after {number}" if after is not None else str(number)
            return None, (jsonify({"ok": False, "error": f"level {where} not found in {mode.value}"}), 404)
        return level, None
    try:
        groups = int(body.get("groups", 4))
        capacity = int(body.get("capacity", 4))
        empty = int(body.get("empty", 2))
        if groups > MAX_DEAL_GROUPS or capacity > MAX_DEAL_CAPACITY or empty > MAX_DEAL_EMPTY:
            raise ValueError(
                f"deals are limited to {MAX_DEAL_GROUPS} groups, capacity {MAX_DEAL_CAPACITY} "
                f"and {MAX_DEAL_EMPTY} empty holders"
            )
        level = deal_level(groups, capacity=capacity, empty_holders=empty, seed=body.get("seed", None))
    except (TypeError, ValueError) as e:
        return None, (jsonify({"ok": False, "error": f"bad deal: {e}"}), 400)
    return level, None


# ---------- Game API ----------

@app.post("/api/new")
def api_new() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    level, err = _resolve_new_level(body)
    if err is not None:
        return err
    engine = PuzzleEngine(level, SETTINGS).start()
    engine.check_win()
    return jsonify({
        "ok": True,
        "state": state_to_json(engine),
        "layout": layout_to_json(engine.layout()),
        "won": engine.phase is Phase.OVER,
    })


@app.post("/api/select")
def api_select() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    engine, err = _load_body_state(body)
    if err is not None:
        return err
    events: List[Event] = []
    engine.add_listener(events.append)
    try:
        engine.select_holder(body.get("holder"))
    except BallSortError as e:
        return jsonify({"ok": False, "error": str(e)}), 400
    return _session_response(engine, events)


@app.post("/api/undo")
def api_undo() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    engine, err = _load_body_state(body)
    if err is not None:
        return err
    events: List[Event] = []
    engine.add_listener(events.append)
    try:
        engine.undo()
    except BallSortError as e:
        return jsonify({"ok": False, "error": str(e)}), 400
    return _session_response(engine, events)


@app.post("/api/restart")
def api_restart() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    engine, err = _load_body_state(body)
    if err is not None:
        return err
    engine.restart()
    return _session_response(engine, [])


@app.post("/api/layout")
def api_layout() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    try:
        count = int(body["count"])
        spacing = float(body.get("minSpacing", SETTINGS.min_spacing))
        aspect = float(body.get("aspect", SETTINGS.aspect))
        ox, oy = body.get("origin", [0.0, 0.0])
        layout = positions_for_holders(count, spacing, aspect, (float(ox), float(oy)))
    except (KeyError, TypeError, ValueError) as e:
        return jsonify({"ok": False, "error": f"bad layout request: {e}"}), 400
    return jsonify({"ok": True, "layout": layout_to_json(layout)})


@app.get("/api/levels")
def api_levels() -> Any:
    pack = _level_pack()
    if pack is None:
        return jsonify({"ok": False, "error": "No level pack configured (set BALLSORT_LEVELS)."}), 404
    return jsonify({
        "ok": True,
        "modes": {mode.value: [lv.number for lv in levels] for mode, levels in pack.items()},
    })


# Entrypoint for "python app.py"
if __name__ == "__main__":
    setup_logging(SETTINGS.log_level, SETTINGS.log_file)
    port = int(os.getenv("PORT", "5000"))
    app.run(host="0.0.0.0", port=port, debug=SETTINGS.debug)
