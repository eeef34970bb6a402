"""
Arena-backed multi-resolution histogram.

Bins live in one contiguous list. Each bin records the slots of its
children, kept sorted by the child's last index element, so two trees
can be walked in lock-step with a sorted merge.

Example:
    >>> hist = Histogram(root_count=10, root_size=4)
    >>> hist.add_bin((0,), count=4, size=1)
    >>> hist.add_bin((0, 2), count=1, size=0.25)
    >>> hist.num_bins
    3
"""

from __future__ import annotations

import bisect
import math
import operator
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from pyramid_match.domain.interfaces.histogram_interface import HistogramInterface
from pyramid_match.utils.exceptions import (
    DuplicateBinError,
    InvalidBinError,
    MissingParentBinError,
)

BinPath = Tuple[int, ...]
BinEntry = Tuple[Sequence[int], float, float]


@dataclass
class Bin:
    """
    One node of a histogram tree.

    Attributes:
        index: Root-relative path; element d is the selector chosen at depth d.
        count: Number of points that fell into the bin.
        size: Size of the region covered by the bin.
        slot: Position of the bin in its histogram's arena.
        children: Arena slots of child bins, ascending by last index element.
    """

    index: BinPath
    count: float = 0.0
    size: float = 0.0
    slot: int = 0
    children: List[int] = field(default_factory=list)

    @property
    def depth(self) -> int:
        return len(self.index)

    def is_leaf(self) -> bool:
        return not self.children


def _check_quantity(path: Sequence, name: str, value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidBinError(
            f"Bin {name} must be a number",
            path=path,
            reason=f"{name}={value!r}",
        ) from e
    if not math.isfinite(value) or value < 0:
        raise InvalidBinError(
            f"Bin {name} must be finite and non-negative",
            path=path,
            reason=f"{name}={value!r}",
        )
    return value


def _normalize_path(path: Sequence[int]) -> BinPath:
    try:
        return tuple(operator.index(element) for element in path)
    except TypeError as e:
        raise InvalidBinError(
            "Bin index path must contain integers only",
            path=tuple(path),
            reason=str(e),
        ) from e


class Histogram(HistogramInterface):
    """
    Multi-resolution histogram whose bins are stored in an arena.

    The root bin always exists at slot 0 with the empty path. Bins are
    added top-down: a bin's parent path must already be present, and the
    children of a bin never hold more points than the bin itself.
    """

    ROOT_SLOT = 0

    def __init__(self, root_count: float = 0.0, root_size: float = 0.0) -> None:
        root = Bin(
            index=(),
            count=_check_quantity((), "count", root_count),
            size=_check_quantity((), "size", root_size),
            slot=self.ROOT_SLOT,
        )
        self._bins: List[Bin] = [root]
        self._slots_by_path: dict[BinPath, int] = {(): self.ROOT_SLOT}
        # Sum of child counts per slot
        self._child_totals: List[float] = [0.0]

    @classmethod
    def from_bins(
        cls,
        entries: Iterable[BinEntry],
        root_count: float = 0.0,
        root_size: float = 0.0,
    ) -> "Histogram":
        """
        Build a histogram from (path, count, size) entries in any order.

        An entry with an empty path sets the root's count and size; at most
        one such entry is allowed. Entries are inserted shallowest first,
        so parents precede children.

        Raises:
            DuplicateBinError: Two entries share a path, the empty one included.
        """
        normalized = [(_normalize_path(path), count, size) for path, count, size in entries]
        normalized.sort(key=lambda entry: len(entry[0]))

        hist = cls(root_count=root_count, root_size=root_size)
        root_seen = False
        for path, count, size in normalized:
            if not path:
                if root_seen:
                    raise DuplicateBinError("Root bin given more than once", path=path)
                root_seen = True
                root = hist.root
                root.count = _check_quantity(path, "count", count)
                root.size = _check_quantity(path, "size", size)
                continue
            hist.add_bin(path, count, size)
        return hist

    def add_bin(self, path: Sequence[int], count: float = 0.0, size: float = 0.0) -> Bin:
        """
        Insert a bin below its existing parent.

        Args:
            path: Non-empty index path of the new bin.
            count: Non-negative point count.
            size: Non-negative region size.

        Returns:
            The inserted Bin.

        Raises:
            InvalidBinError: Path is empty or not integral, a value is negative,
                or the parent's children would outweigh the parent.
            MissingParentBinError: The parent path has no bin yet.
            DuplicateBinError: A bin already exists at the path.
        """
        key = _normalize_path(path)
        if not key:
            raise InvalidBinError("The root bin cannot be added twice", path=key, reason="empty path")
        if key in self._slots_by_path:
            raise DuplicateBinError(path=key)

        parent_slot = self._slots_by_path.get(key[:-1])
        if parent_slot is None:
            raise MissingParentBinError(path=key)

        new_bin = Bin(
            index=key,
            count=_check_quantity(key, "count", count),
            size=_check_quantity(key, "size", size),
            slot=len(self._bins),
        )

        parent = self._bins[parent_slot]
        children_total = self._child_totals[parent_slot] + new_bin.count
        if children_total > parent.count and not math.isclose(children_total, parent.count):
            raise InvalidBinError(
                "Children count exceeds parent count",
                path=key,
                reason=f"children={children_total!r} > parent={parent.count!r}",
            )

        self._bins.append(new_bin)
        self._slots_by_path[key] = new_bin.slot
        self._child_totals[parent_slot] = children_total
        self._child_totals.append(0.0)

        siblings = self._bins[parent_slot].children
        position = bisect.bisect_left(
            siblings, key[-1], key=lambda slot: self._bins[slot].index[-1]
        )
        siblings.insert(position, new_bin.slot)
        return new_bin

    def find(self, path: Sequence[int]) -> Optional[Bin]:
        """Return the bin at a path, or None when absent."""
        slot = self._slots_by_path.get(_normalize_path(path))
        if slot is None:
            return None
        return self._bins[slot]

    @property
    def root(self) -> Bin:
        return self._bins[self.ROOT_SLOT]

    @property
    def root_slot(self) -> int:
        return self.ROOT_SLOT

    @property
    def num_bins(self) -> int:
        return len(self._bins)

    def bin_at(self, slot: int) -> Bin:
        return self._bins[slot]

    def child_slots(self, slot: int) -> Sequence[int]:
        return self._bins[slot].children

    def __len__(self) -> int:
        return len(self._bins)

    def __iter__(self) -> Iterator[Bin]:
        """Yield bins in pre-order, children by ascending selector."""
        stack = [self.ROOT_SLOT]
        while stack:
            current = self._bins[stack.pop()]
            yield current
            stack.extend(reversed(current.children))

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (tuple, list)):
            return False
        try:
            return _normalize_path(path) in self._slots_by_path
        except InvalidBinError:
            return False

    def __repr__(self) -> str:
        return (
            f"Histogram(num_bins={self.num_bins}, "
            f"root_count={self.root.count}, root_size={self.root.size})"
        )
