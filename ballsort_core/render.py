from __future__ import annotations

from typing import List, Sequence

from .engine import HolderView


def _cell(group: int) -> str:
    return f'{group:>2}'


def render_holders(views: Sequence[HolderView]) -> str:
    """Generates a text picture of the board: holders side by side, top ball up, '^' under the pending one."""
    if not views:
        return ''
    depth = max(v.capacity for v in views)
    lines: List[str] = []
    for level in range(depth - 1, -1, -1):
        row: List[str] = []
        for v in views:
            if level >= v.capacity:
                row.append('    ')
            elif level < len(v.groups):
                row.append(f'|{_cell(v.groups[level])}|')
            else:
                row.append('|  |')
        lines.append(' '.join(row).rstrip())
    lines.append(' '.join('+--+' for _ in views))
    lines.append(' '.join(f' {v.holder_id:<2} ' for v in views).rstrip())
    marks = ' '.join(' ^^ ' if v.is_pending else '    ' for v in views).rstrip()
    if marks:
        lines.append(marks)
    return '\n'.join(lines)
