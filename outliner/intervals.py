"""Active vertical coverage maintained while sweeping across the edges."""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from typing import Iterator, List, Tuple

from .errors import OutlineInvariantError

Interval = Tuple[float, float]


class ActiveIntervals:
    """Sorted ``(y1, y2)`` spans covered by the boxes the sweep is inside.

    Intervals are kept in ``y1`` order (equal starts stay in insertion order)
    and are never coalesced: two identical boxes insert two identical spans,
    and each right edge takes exactly one of them back out.
    """

    def __init__(self) -> None:
        self._starts: List[float] = []
        self._intervals: List[Interval] = []

    def __len__(self) -> int:
        return len(self._intervals)

    def __iter__(self) -> Iterator[Interval]:
        return iter(self._intervals)

    def locate(self, y: float) -> int:
        """Index of the first interval whose start is ``>= y``."""
        return bisect_left(self._starts, y)

    def insert(self, y1: float, y2: float) -> None:
        index = bisect_right(self._starts, y1)
        self._starts.insert(index, y1)
        self._intervals.insert(index, (y1, y2))

    def remove(self, y1: float, y2: float) -> None:
        # locate() anchors on the leftmost interval starting at y1, so every
        # duplicate start lies at or after the anchor.
        index = self.locate(y1)
        for i in range(index, len(self._intervals)):
            start, end = self._intervals[i]
            if start != y1:
                break
            if end == y2:
                del self._starts[i]
                del self._intervals[i]
                return
        raise OutlineInvariantError(f"no active interval ({y1}, {y2}) to remove")

    def break_edge(self, y1: float, y2: float) -> List[Interval]:
        """Return the parts of ``[y1, y2]`` not covered by any active interval."""
        fragments: List[List[float]] = [[y1, y2]]
        # Only intervals starting strictly before y2 can overlap the edge.
        for start, end in self._intervals[: self.locate(y2)]:
            j = 0
            count = len(fragments)
            while j < count:
                low, high = fragments[j]
                if end <= low or high <= start:
                    j += 1
                    continue
                if low >= start:
                    if high > end:
                        fragments[j][0] = end
                        j += 1
                        continue
                    del fragments[j]
                    if not fragments:
                        return []
                    count -= 1
                    continue
                fragments[j][1] = start
                if high > end:
                    fragments.append([end, high])
                j += 1
        return [(low, high) for low, high in fragments]


__all__ = ["ActiveIntervals", "Interval"]
