"""
Ball-sort puzzle core Python package.

This package contains the data structures and pure-logic helpers behind the
puzzle; game.py re-exports them and app.py serves them over HTTP.
Modules:
- ball.py, holder.py: Ball, Holder
- levels.py, deal.py: Level data, level packs and random deals
- layout.py: holder placement
- history.py, rules.py, engine.py: undo stack, legality/win rules, PuzzleEngine
- config.py, logging_config.py: environment settings and logging setup
"""
