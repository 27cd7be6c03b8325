from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

Point = Tuple[float, float]

SINGLE_ROW_MAX = 6
MIN_WIDTH_UNITS = 4


@dataclass(frozen=True)
class Layout:
    """Holder positions plus the width the arrangement needs."""
    positions: Tuple[Point, ...]
    expected_width: float
    rows: Tuple[int, ...]  # holder count per row, top row first
    aspect: float

    def view_half_height(self) -> float:
        """Orthographic half-height that fits `expected_width` into the viewport."""
        return 0.5 * self.expected_width / self.aspect


def _row(count: int, spacing: float, center_x: float, y: float) -> List[Point]:
    start_x = center_x - ((count - 1) / 2.0) * spacing
    return [(start_x + i * spacing, y) for i in range(count)]


def positions_for_holders(
    count: int,
    min_spacing: float,
    aspect: float,
    origin: Point = (0.0, 0.0),
    row_offset_divisor: float = 6.0,
    row_nudge: Optional[float] = None,
) -> Layout:
    """
    Places `count` holders around `origin`.
    Up to six holders share one row; more are split into a top row of
    ceil(count / 2) and a bottom row with the rest. The rows sit at
    +/- (implied viewport height / row_offset_divisor) and are both shifted
    down by `row_nudge` (one spacing unit by default).
    """
    if count < 1:
        raise ValueError(f'holder count must be >= 1, got {count}')
    if min_spacing <= 0:
        raise ValueError('min_spacing must be > 0')
    if aspect <= 0:
        raise ValueError('aspect must be > 0')

    ox, oy = float(origin[0]), float(origin[1])
    expected_width = MIN_WIDTH_UNITS * min_spacing

    if count <= SINGLE_ROW_MAX:
        expected_width = max(count * min_spacing, expected_width)
        return Layout(
            positions=tuple(_row(count, min_spacing, ox, oy)),
            expected_width=expected_width,
            rows=(count,),
            aspect=aspect,
        )

    top_count = math.ceil(count / 2)
    bottom_count = count - top_count
    expected_width = max(expected_width, (top_count + 1) * min_spacing)
    height = expected_width / aspect
    nudge = min_spacing if row_nudge is None else row_nudge
    offset = height / row_offset_divisor

    positions = _row(top_count, min_spacing, ox, oy + offset - nudge)
    positions.extend(_row(bottom_count, min_spacing, ox, oy - offset - nudge))
    return Layout(
        positions=tuple(positions),
        expected_width=expected_width,
        rows=(top_count, bottom_count),
        aspect=aspect,
    )
