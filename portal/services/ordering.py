"""
Pure helpers for dense 1-based rank sequences.

A list of N items is dense when its ranks are exactly {1, ..., N}.
"""

from __future__ import annotations

from typing import Iterable, Sequence, TypeVar

from portal.core.exceptions import ValidationError

T = TypeVar("T")


def next_order(orders: Iterable[int]) -> int:
    """Rank for an item appended after the current maximum."""
    return max(orders, default=0) + 1


def is_dense(orders: Iterable[int]) -> bool:
    """True if ``orders`` is exactly 1..N with no duplicates."""
    ranks = sorted(orders)
    return ranks == list(range(1, len(ranks) + 1))


def shift_window(old_order: int, new_order: int) -> tuple[int, int, int]:
    """
    Describe how the other items shift when one moves from ``old_order``.

    Returns ``(low, high, delta)``: every other item with
    ``low <= order <= high`` has ``delta`` added to its order.

    - Moving down (new > old): items in (old, new] shift left by one.
    - Moving up (new < old): items in [new, old) shift right by one.
    """
    if new_order > old_order:
        return old_order + 1, new_order, -1
    if new_order < old_order:
        return new_order, old_order - 1, 1
    return 0, -1, 0


def move(items: Sequence[T], old_index: int, new_index: int) -> list[T]:
    """Array move: take the item at ``old_index`` and insert it at ``new_index``."""
    if not 0 <= old_index < len(items):
        raise IndexError(f"old_index {old_index} out of range")
    if not 0 <= new_index < len(items):
        raise IndexError(f"new_index {new_index} out of range")
    result = list(items)
    result.insert(new_index, result.pop(old_index))
    return result


def validate_permutation(current_ids: Sequence[str], ordered_ids: Sequence[str]) -> None:
    """
    Check ``ordered_ids`` is a permutation of ``current_ids``.

    Raises ValidationError for a foreign id, a missing id or a duplicate.
    """
    known = set(current_ids)
    for item_id in ordered_ids:
        if item_id not in known:
            raise ValidationError(f"Achievement ID {item_id} does not exist in this list.")

    if len(ordered_ids) != len(current_ids) or len(set(ordered_ids)) != len(ordered_ids):
        raise ValidationError("orderedIds must include all achievements in the list exactly once.")
