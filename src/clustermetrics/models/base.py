"""
Merge primitives shared by every metric record.

All metric records mutate in place through ``merge``. The zero value of a
record is the merge identity, and no merge ever raises: inconsistent inputs
degrade to "unset" (``None``) or are skipped.
"""

import copy
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, MutableMapping, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

M = TypeVar("M", bound="Mergeable")
K = TypeVar("K")


class Mergeable(ABC):
    """
    Base class for records that can absorb another record of the same type.

    Subclasses implement ``merge``; ``add`` is kept as an alias because the
    interval series and the totals helpers speak in terms of adding buckets.
    """

    @abstractmethod
    def merge(self, other: Optional[Any]) -> None:
        """Merge ``other`` into this record in place. ``None`` is a no-op."""

    def add(self, other: Optional[Any]) -> None:
        self.merge(other)


def later(current: Optional[datetime], candidate: Optional[datetime]) -> Optional[datetime]:
    """Return the later of two optional timestamps; an unset value always loses."""
    if candidate is None:
        return current
    if current is None or current < candidate:
        return candidate
    return current


def sum_counters(target: MutableMapping[K, Any], other: Optional[Mapping[K, Any]]) -> None:
    """Add every counter of ``other`` into ``target``, creating missing keys."""
    if not other:
        return
    for key, value in other.items():
        target[key] = target.get(key, 0) + value


def merge_map(
    target: MutableMapping[K, M],
    other: Optional[Mapping[K, M]],
    factory: Optional[Callable[[], M]] = None,
) -> None:
    """
    Merge a keyed collection of records.

    A key present only in ``other`` is adopted as a deep copy so that the
    source snapshot is never aliased. When ``factory`` is given, missing keys
    are instead created fresh and merged, which is equivalent for records whose
    zero value is the identity but keeps the receiver's own type.
    """
    if not other:
        return
    for key, value in other.items():
        if value is None:
            continue
        existing = target.get(key)
        if existing is None:
            if factory is None:
                target[key] = copy.deepcopy(value)
                continue
            existing = factory()
            target[key] = existing
        existing.merge(value)


def add_fields(target: Any, other: Any, names: Iterable[str]) -> None:
    """Sum the named numeric attributes of ``other`` into ``target``."""
    for name in names:
        setattr(target, name, getattr(target, name) + getattr(other, name))


def select_min(current, candidate, current_empty: bool, candidate_empty: bool):
    """
    Two-sided minimum used for bounded pairs of windowed records.

    An empty side takes the value of the non-empty side before comparing so
    that a zero-valued empty record never wins the minimum.
    """
    if current_empty:
        current = candidate
    if candidate_empty:
        candidate = current
    return min(current, candidate)


def select_max(current, candidate, current_empty: bool, candidate_empty: bool):
    """Two-sided maximum, the counterpart of ``select_min``."""
    if current_empty:
        current = candidate
    if candidate_empty:
        candidate = current
    return max(current, candidate)


def merge_time_range(
    current: Tuple[Optional[datetime], Optional[datetime]],
    candidate: Tuple[Optional[datetime], Optional[datetime]],
    current_empty: bool,
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Combine the (start, end) window of two windowed records.

    An empty receiver adopts the candidate's window. Afterwards a window stays
    valid only while both sides agree: if both sides have a value and the
    values differ, that bound becomes unset, which also unsets the other bound.
    """
    if current_empty:
        return candidate

    start, end = current
    other_start, other_end = candidate
    if start is not None and other_start is not None and start != other_start:
        logger.debug(f"Time range start mismatch ({start} != {other_start}), clearing range")
        return None, None
    if end is not None and other_end is not None and end != other_end:
        logger.debug(f"Time range end mismatch ({end} != {other_end}), clearing range")
        return None, None
    return start, end


def collapse_identity(
    current: Tuple[Optional[int], Optional[int], Optional[int]],
    candidate: Tuple[Optional[int], Optional[int], Optional[int]],
    current_empty: bool,
) -> Tuple[Optional[int], Optional[int], Optional[int]]:
    """
    Merge a (pool, set, disk) identity that is only meaningful while uniform.

    Each level becomes ``None`` as soon as two merged inputs disagree, and a
    coarser level that is unset forces every finer level unset as well. Once
    unset, a level never becomes set again.
    """
    if current_empty:
        pool, set_idx, disk = candidate
    else:
        pool, set_idx, disk = (
            value if value == other else None
            for value, other in zip(current, candidate)
        )
    if pool is None:
        set_idx = None
    if set_idx is None:
        disk = None
    return pool, set_idx, disk
