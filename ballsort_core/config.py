from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

_TRUTHY = ('1', 'true', 'yes', 'on')


def _env_flag(name: str, default: str = '0') -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f'{name} must be a number, got {raw!r}') from None
    if value <= 0:
        raise ValueError(f'{name} must be > 0, got {raw!r}')
    return value


@dataclass(frozen=True)
class Settings:
    """Runtime knobs shared by the engine, the CLI and the HTTP API."""
    levels_path: Optional[str] = None
    min_spacing: float = 1.5
    aspect: float = 9 / 16
    deselect_on_reselect: bool = False
    log_level: str = 'INFO'
    log_file: Optional[str] = None
    debug: bool = False


def load_settings() -> Settings:
    """Builds Settings from BALLSORT_* environment variables."""
    return Settings(
        levels_path=os.getenv('BALLSORT_LEVELS') or None,
        min_spacing=_env_float('BALLSORT_MIN_SPACING', 1.5),
        aspect=_env_float('BALLSORT_ASPECT', 9 / 16),
        deselect_on_reselect=_env_flag('BALLSORT_DESELECT'),
        log_level=os.getenv('BALLSORT_LOG_LEVEL', 'INFO').upper(),
        log_file=os.getenv('BALLSORT_LOG_FILE') or None,
        debug=_env_flag('FLASK_DEBUG', os.getenv('DEBUG', '0')),
    )
