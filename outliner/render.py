"""Turn outline results into SVG markup and raster previews."""

from __future__ import annotations

import io
import logging
import math
from typing import Iterable, List, Optional, Sequence, Tuple
from xml.sax.saxutils import quoteattr

from PIL import Image, ImageColor, ImageDraw

from .types import DecorationKind, DecorationLine, LineStrip, Polygon

logger = logging.getLogger(__name__)

# Fraction of the strip height the stroke is raised above the baseline.
DECORATION_SHIFT = {"underline": 0.1, "strikeout": 0.41}
STROKE_WIDTH_PERCENT = 10


def _num(value: float) -> str:
    text = ("%.6f" % value).rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def polygons_to_svg_path(polygons: Iterable[Polygon]) -> str:
    """Encode rectilinear loops as an SVG path using only H and V moves."""
    buffer: List[str] = []
    for polygon in polygons:
        if not polygon:
            continue
        prev_x, prev_y = polygon[0]
        buffer.append(f"M{_num(prev_x)} {_num(prev_y)}")
        for x, y in polygon[1:]:
            if x == prev_x:
                buffer.append(f"V{_num(y)}")
                prev_y = y
            elif y == prev_y:
                buffer.append(f"H{_num(x)}")
                prev_x = x
        buffer.append("Z")
    return " ".join(buffer)


def decoration_lines(strips: Iterable[LineStrip], kind: DecorationKind = "underline") -> List[DecorationLine]:
    """Place one horizontal stroke per strip, raised by a fraction of its height."""
    if kind not in DECORATION_SHIFT:
        raise ValueError(f"unknown decoration kind: {kind!r}")
    shift = DECORATION_SHIFT[kind]
    lines: List[DecorationLine] = []
    for strip in strips:
        height = strip["y2"] - strip["y1"]
        y = strip["y2"] - height * shift
        lines.append(
            {
                "x1": strip["x1"],
                "y1": y,
                "x2": strip["x2"],
                "y2": y,
                "stroke_width": height * STROKE_WIDTH_PERCENT,
            }
        )
    return lines


def render_svg(
    polygons: Optional[Sequence[Polygon]] = None,
    strips: Optional[Sequence[LineStrip]] = None,
    kind: DecorationKind = "underline",
    color: str = "#fff066",
    opacity: float = 1.0,
    outline_color: Optional[str] = None,
) -> str:
    """Standalone SVG document in the unit square, stretched to its container.

    ``outline_color`` strokes the polygon boundary with a non-scaling hairline.
    """
    parts = [
        '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 1 1" '
        'preserveAspectRatio="none" width="100%" height="100%">'
    ]
    if polygons:
        stroke = ""
        if outline_color:
            stroke = f" stroke={quoteattr(outline_color)} vector-effect=\"non-scaling-stroke\""
        parts.append(
            f"<path d={quoteattr(polygons_to_svg_path(polygons))} "
            f"fill={quoteattr(color)} fill-opacity=\"{_num(opacity)}\"{stroke}/>"
        )
    for line in decoration_lines(strips or [], kind):
        parts.append(
            f'<line x1="{_num(line["x1"])}" y1="{_num(line["y1"])}" '
            f'x2="{_num(line["x2"])}" y2="{_num(line["y2"])}" '
            f"stroke={quoteattr(color)} stroke-opacity=\"{_num(opacity)}\" "
            f'stroke-width="{_num(line["stroke_width"])}%"/>'
        )
    parts.append("</svg>")
    return "".join(parts)


def _rgba(color: str, opacity: float) -> Tuple[int, int, int, int]:
    rgb = ImageColor.getrgb(color)
    return (rgb[0], rgb[1], rgb[2], int(round(255 * max(0.0, min(1.0, opacity)))))


def render_png(
    width: int,
    height: int,
    polygons: Optional[Sequence[Polygon]] = None,
    strips: Optional[Sequence[LineStrip]] = None,
    kind: DecorationKind = "underline",
    color: str = "#fff066",
    opacity: float = 1.0,
    outline_color: Optional[str] = None,
) -> bytes:
    """Rasterize box-relative shapes onto a transparent ``width x height`` PNG."""
    fill = _rgba(color, opacity)
    image = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)

    for polygon in polygons or []:
        points = [(x * width, y * height) for x, y in polygon]
        if len(points) < 3:
            continue
        outline = _rgba(outline_color, 1.0) if outline_color else None
        draw.polygon(points, fill=fill, outline=outline)

    # SVG resolves percentage stroke widths against the normalized diagonal.
    diagonal = math.hypot(width, height) / math.sqrt(2)
    for line in decoration_lines(strips or [], kind):
        stroke = max(1, int(round(line["stroke_width"] / 100.0 * diagonal)))
        draw.line(
            [(line["x1"] * width, line["y1"] * height), (line["x2"] * width, line["y2"] * height)],
            fill=fill,
            width=stroke,
        )

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    logger.debug("Rendered %dx%d preview (%d bytes)", width, height, buffer.tell())
    return buffer.getvalue()


__all__ = [
    "DECORATION_SHIFT",
    "STROKE_WIDTH_PERCENT",
    "polygons_to_svg_path",
    "decoration_lines",
    "render_svg",
    "render_png",
]
