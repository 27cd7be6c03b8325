from __future__ import annotations

from typing import Iterable, Set

from .ball import GroupId
from .holder import Holder


def can_move(source: Holder, target: Holder) -> bool:
    """A ball may land on an empty holder, or on a matching top ball with room left."""
    src_top = source.top_ball()
    if src_top is None:
        return False
    dst_top = target.top_ball()
    if dst_top is None:
        return True
    return dst_top.group_id == src_top.group_id and not target.is_full()


def is_homogeneous(holder: Holder) -> bool:
    """True for an empty holder or one whose balls all share a group."""
    return len(set(holder.groups())) <= 1


def is_solved(holders: Iterable[Holder]) -> bool:
    """Every holder homogeneous and no group spread over two holders."""
    seen: Set[GroupId] = set()
    for holder in holders:
        if not is_homogeneous(holder):
            return False
        top = holder.top_ball()
        if top is None:
            continue
        if top.group_id in seen:
            return False
        seen.add(top.group_id)
    return True
