"""Union outlines and line strips for a set of axis-aligned boxes.

The :class:`Outliner` takes the rectangles of a text selection and produces
the boundary of their union as closed rectilinear polygons, plus one strip
per visual text line for underline and strikeout strokes. Every coordinate in
the results is relative to the returned bounding box and lies in ``[0, 1]``.
"""

from __future__ import annotations

import logging
import math
import os
from typing import Dict, List, Mapping, NamedTuple, Sequence, Tuple

from .errors import InvalidBoxesError, OutlineInvariantError
from .intervals import ActiveIntervals
from .lines import LineRun, compute_line_runs
from .types import BoundingBox, LineStrip, LineStripResult, OutlineResult, Point, Polygon

logger = logging.getLogger(__name__)

NUMBER_OF_DIGITS = 4
EPSILON = 10 ** -NUMBER_OF_DIGITS
MAX_BOXES = int(os.getenv("OUTLINER_MAX_BOXES", "10000"))


class VerticalEdge(NamedTuple):
    x: float
    y1: float
    y2: float
    is_left: bool
    # False for boxes that collapsed to zero width or height.
    solid: bool


Fragment = Tuple[float, float, float]


def quantize_down(value: float) -> float:
    return math.floor(value / EPSILON) * EPSILON


def quantize_up(value: float) -> float:
    return math.ceil(value / EPSILON) * EPSILON


def _check_boxes(boxes: Sequence[Mapping[str, float]], border_width: float, inner_margin: float) -> None:
    if not boxes:
        raise InvalidBoxesError("at least one box is required")
    if len(boxes) > MAX_BOXES:
        raise InvalidBoxesError(f"too many boxes: {len(boxes)} > {MAX_BOXES}")
    if not (math.isfinite(border_width) and math.isfinite(inner_margin)):
        raise InvalidBoxesError("border width and inner margin must be finite")
    for idx, box in enumerate(boxes):
        try:
            values = (box["x"], box["y"], box["width"], box["height"])
        except KeyError as exc:
            raise InvalidBoxesError(f"box {idx} is missing {exc.args[0]!r}") from exc
        if not all(math.isfinite(value) for value in values):
            raise InvalidBoxesError(f"box {idx} has non-finite coordinates")
        if box["width"] < 0 or box["height"] < 0:
            raise InvalidBoxesError(f"box {idx} has a negative size")
        x, y, width, height = values
        # Every bound must still be finite once scaled onto the epsilon grid.
        bounds = (x - border_width, x + width + border_width, y - border_width, y + height + border_width)
        if not all(math.isfinite(bound / EPSILON) for bound in bounds):
            raise InvalidBoxesError(f"box {idx} is too large to quantize")


class Outliner:
    """Compute union outlines and text-line strips for one batch of boxes.

    ``border_width`` grows (or shrinks, when negative) every box before the
    union is taken. ``inner_margin`` pads the bounding box so that a stroked
    outline is not clipped by it. ``is_ltr`` only affects which edge provides
    ``box["last_point"]``. Build a new instance for each batch.
    """

    def __init__(
        self,
        boxes: Sequence[Mapping[str, float]],
        border_width: float = 0.0,
        inner_margin: float = 0.0,
        is_ltr: bool = True,
        skip_line_rects: bool = False,
    ) -> None:
        _check_boxes(boxes, border_width, inner_margin)

        edges: List[VerticalEdge] = []
        quantized: List[Tuple[float, float, float, float]] = []
        min_x = min_y = math.inf
        max_x = max_y = -math.inf
        for box in boxes:
            x, y = box["x"], box["y"]
            x1 = quantize_down(x - border_width)
            x2 = quantize_up(x + box["width"] + border_width)
            y1 = quantize_down(y - border_width)
            y2 = quantize_up(y + box["height"] + border_width)
            solid = x1 < x2 and y1 < y2
            edges.append(VerticalEdge(x1, y1, y2, True, solid))
            edges.append(VerticalEdge(x2, y1, y2, False, solid))
            quantized.append((x1, y1, x2, y2))

            min_x = min(min_x, x1)
            max_x = max(max_x, x2)
            min_y = min(min_y, y1)
            max_y = max(max_y, y2)

        width = max_x - min_x + 2 * inner_margin
        height = max_y - min_y + 2 * inner_margin
        if not (width > 0 and height > 0):
            raise InvalidBoxesError("boxes enclose no area")
        if not (math.isfinite(width) and math.isfinite(height)):
            raise InvalidBoxesError("bounding box is too large")
        shifted_x = min_x - inner_margin
        shifted_y = min_y - inner_margin

        edges.sort(key=lambda edge: (edge.x, edge.y1, edge.y2))
        last_edge = edges[-1] if is_ltr else edges[-2]
        last_point: Point = (last_edge.x, last_edge.y2)

        self._origin: Point = (shifted_x, shifted_y)
        self._size: Tuple[float, float] = (width, height)
        self._box: BoundingBox = {
            "x": shifted_x,
            "y": shifted_y,
            "width": width,
            "height": height,
            "last_point": last_point,
        }
        self._edges: List[VerticalEdge] = [
            VerticalEdge(self._rel_x(edge.x), self._rel_y(edge.y1), self._rel_y(edge.y2), edge.is_left, edge.solid)
            for edge in edges
        ]

        self._line_strips: List[LineStrip] = []
        if not skip_line_rects:
            self._line_strips = [self._to_strip(run) for run in compute_line_runs(quantized)]

        logger.debug(
            "Outliner prepared %d boxes -> %d edges, %d line strips",
            len(boxes),
            len(self._edges),
            len(self._line_strips),
        )

    @property
    def box(self) -> BoundingBox:
        return dict(self._box)  # type: ignore[return-value]

    def _rel_x(self, x: float) -> float:
        return (x - self._origin[0]) / self._size[0]

    def _rel_y(self, y: float) -> float:
        return (y - self._origin[1]) / self._size[1]

    def _to_strip(self, run: LineRun) -> LineStrip:
        x1, y1, x2, y2 = run
        return {
            "x1": self._rel_x(x1),
            "y1": self._rel_y(y1),
            "x2": self._rel_x(x2),
            "y2": self._rel_y(y2),
        }

    def get_outlines(self) -> OutlineResult:
        """Sweep the edges left to right and trace the union boundary."""
        # Left edges lose whatever was already covered before they start;
        # right edges lose whatever stays covered after they end.
        intervals = ActiveIntervals()
        fragments: List[Fragment] = []
        for edge in self._edges:
            if not edge.solid:
                continue
            if edge.is_left:
                fragments.extend((edge.x, y1, y2) for y1, y2 in intervals.break_edge(edge.y1, edge.y2))
                intervals.insert(edge.y1, edge.y2)
            else:
                intervals.remove(edge.y1, edge.y2)
                fragments.extend((edge.x, y1, y2) for y1, y2 in intervals.break_edge(edge.y1, edge.y2))
        if len(intervals):
            raise OutlineInvariantError(f"{len(intervals)} intervals still active after the sweep")

        polygons = _trace_polygons(fragments)
        logger.debug("Traced %d polygons from %d boundary edges", len(polygons), len(fragments))
        return {
            "polygons": polygons,
            "box": self.box,
            "line_strips": [dict(strip) for strip in self._line_strips],  # type: ignore[misc]
        }

    def get_line_strips(self) -> LineStripResult:
        return {
            "box": self.box,
            "line_strips": [dict(strip) for strip in self._line_strips],  # type: ignore[misc]
        }


def _link_fragments(fragments: Sequence[Fragment]) -> Tuple[List[List[int]], Dict[int, None]]:
    """Pair up fragment endpoints along horizontal connectors.

    Endpoints sorted by ``(y, x)`` come in consecutive pairs, each pair being
    the two ends of one horizontal boundary segment. The first link of every
    fragment is made at its ``y1`` end, the second at its ``y2`` end. An odd
    number of endpoints on any row shows up as a pair straddling two rows.
    """
    vertices: List[Tuple[float, float, int]] = []
    for idx, (x, y1, y2) in enumerate(fragments):
        vertices.append((y1, x, idx))
        vertices.append((y2, x, idx))
    vertices.sort(key=lambda vertex: (vertex[0], vertex[1]))

    neighbors: List[List[int]] = [[] for _ in fragments]
    # dict keeps insertion order, which makes the tracing deterministic.
    unvisited: Dict[int, None] = {}
    for i in range(0, len(vertices), 2):
        y_a, _, a = vertices[i]
        y_b, _, b = vertices[i + 1]
        if y_a != y_b:
            raise OutlineInvariantError(f"horizontal connector spans y={y_a} and y={y_b}")
        neighbors[a].append(b)
        neighbors[b].append(a)
        unvisited[a] = None
        unvisited[b] = None
    return neighbors, unvisited


def _trace_polygons(fragments: Sequence[Fragment]) -> List[Polygon]:
    neighbors, unvisited = _link_fragments(fragments)
    polygons: List[Polygon] = []
    while unvisited:
        current = next(iter(unvisited))
        del unvisited[current]
        x, y1, y2 = fragments[current]
        last_x, last_y = x, y1
        polygon: Polygon = [(x, y2)]
        polygons.append(polygon)

        while True:
            following = next((n for n in neighbors[current] if n in unvisited), None)
            if following is None:
                break
            del unvisited[following]
            current = following
            x, y1, y2 = fragments[current]
            if last_x != x:
                polygon.append((last_x, last_y))
                polygon.append((x, last_y))
                last_x = x
            last_y = y2 if last_y == y1 else y1
        polygon.append((last_x, last_y))
    return polygons


__all__ = ["Outliner", "VerticalEdge", "EPSILON", "MAX_BOXES", "quantize_down", "quantize_up"]
