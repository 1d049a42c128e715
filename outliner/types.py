"""Typed structures shared by the outline modules."""

from __future__ import annotations

from typing import List, Literal, Tuple, TypedDict

Point = Tuple[float, float]
Polygon = List[Point]
DecorationKind = Literal["underline", "strikeout"]


class InputBox(TypedDict):
    """Axis-aligned rectangle in page units."""

    x: float
    y: float
    width: float
    height: float


class BoundingBox(TypedDict):
    """Box enclosing every quantized edge, in page units."""

    x: float
    y: float
    width: float
    height: float
    last_point: Point


class LineStrip(TypedDict):
    """Horizontal run of same-baseline boxes, box-relative."""

    x1: float
    y1: float
    x2: float
    y2: float


class DecorationLine(LineStrip):
    """Stroke placed on a line strip; ``stroke_width`` is a percentage."""

    stroke_width: float


class OutlineResult(TypedDict):
    polygons: List[Polygon]
    box: BoundingBox
    line_strips: List[LineStrip]


class LineStripResult(TypedDict):
    box: BoundingBox
    line_strips: List[LineStrip]


class HighlightShapes(TypedDict):
    """Fill outlines plus the thicker focus outlines drawn around them."""

    fill: OutlineResult
    focus: OutlineResult
    anchor: Point


class UnderlineShapes(TypedDict):
    strips: LineStripResult
    anchor: Point


__all__ = [
    "Point",
    "Polygon",
    "DecorationKind",
    "InputBox",
    "BoundingBox",
    "LineStrip",
    "DecorationLine",
    "OutlineResult",
    "LineStripResult",
    "HighlightShapes",
    "UnderlineShapes",
]
