"""Ready-made outline requests for highlight and underline annotations."""

from __future__ import annotations

from typing import List, Mapping, Sequence

from .engine import Outliner
from .types import BoundingBox, HighlightShapes, InputBox, LineStripResult, Point, UnderlineShapes

HIGHLIGHT_BORDER_WIDTH = 0.001
FOCUS_BORDER_WIDTH = 0.0025
FOCUS_INNER_MARGIN = 0.001


def _anchor(last_point: Point, box: BoundingBox) -> Point:
    x, y = last_point
    return ((x - box["x"]) / box["width"], (y - box["y"]) / box["height"])


def highlight_shapes(boxes: Sequence[Mapping[str, float]], is_ltr: bool = True) -> HighlightShapes:
    """Fill outlines, a slightly larger focus outline and the toolbar anchor.

    The anchor is the focus outline's last point expressed relative to the
    fill box, where a toolbar or caret can be attached.
    """
    fill = Outliner(boxes, border_width=HIGHLIGHT_BORDER_WIDTH).get_outlines()
    focus = Outliner(
        boxes,
        border_width=FOCUS_BORDER_WIDTH,
        inner_margin=FOCUS_INNER_MARGIN,
        is_ltr=is_ltr,
        skip_line_rects=True,
    ).get_outlines()
    return {
        "fill": fill,
        "focus": focus,
        "anchor": _anchor(focus["box"]["last_point"], fill["box"]),
    }


def underline_shapes(boxes: Sequence[Mapping[str, float]], is_ltr: bool = True) -> UnderlineShapes:
    strips = Outliner(boxes, border_width=HIGHLIGHT_BORDER_WIDTH, is_ltr=is_ltr).get_line_strips()
    return {"strips": strips, "anchor": _anchor(strips["box"]["last_point"], strips["box"])}


def to_page_rects(result: LineStripResult) -> List[InputBox]:
    """Scale box-relative line strips back to page-unit rectangles."""
    box = result["box"]
    rects: List[InputBox] = []
    for strip in result["line_strips"]:
        rects.append(
            {
                "x": box["x"] + strip["x1"] * box["width"],
                "y": box["y"] + strip["y1"] * box["height"],
                "width": (strip["x2"] - strip["x1"]) * box["width"],
                "height": (strip["y2"] - strip["y1"]) * box["height"],
            }
        )
    return rects


__all__ = [
    "HIGHLIGHT_BORDER_WIDTH",
    "FOCUS_BORDER_WIDTH",
    "FOCUS_INNER_MARGIN",
    "highlight_shapes",
    "underline_shapes",
    "to_page_rects",
]
