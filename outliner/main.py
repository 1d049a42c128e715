"""FastAPI server exposing the outline engine."""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, List, Literal, Optional, TypeVar

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, Field

from .engine import Outliner
from .errors import InvalidBoxesError, OutlineInvariantError
from .render import render_png, render_svg
from .shapes import highlight_shapes, underline_shapes

logger = logging.getLogger(__name__)

PREVIEW_SIZE = int(os.getenv("OUTLINER_PREVIEW_SIZE", "512"))

T = TypeVar("T")

app: FastAPI = FastAPI(title="Selection Outliner API", version="0.1.0")


class Box(BaseModel):
    x: float
    y: float
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)


class ShapeRequest(BaseModel):
    boxes: List[Box]
    is_ltr: bool = True

    def box_dicts(self) -> List[Dict[str, float]]:
        return [box.model_dump() for box in self.boxes]


class OutlineRequest(ShapeRequest):
    border_width: float = 0.0
    inner_margin: float = 0.0
    skip_line_rects: bool = False


class PreviewRequest(OutlineRequest):
    kind: Literal["highlight", "underline", "strikeout"] = "highlight"
    width: int = Field(default=PREVIEW_SIZE, ge=1, le=4096)
    height: int = Field(default=PREVIEW_SIZE, ge=1, le=4096)
    color: str = Field(default="#fff066", description="Any color Pillow's ImageColor understands")
    opacity: float = Field(default=1.0, ge=0.0, le=1.0)
    outline_color: Optional[str] = Field(default=None, description="Stroke color for highlight polygon edges")


def _compute(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run an engine call, turning engine errors into HTTP errors."""
    try:
        return func(*args, **kwargs)
    except InvalidBoxesError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except OutlineInvariantError as exc:
        logger.exception("Outline computation failed")
        raise HTTPException(status_code=500, detail="Outline computation failed") from exc


def _outliner(req: OutlineRequest) -> Outliner:
    return _compute(
        Outliner,
        req.box_dicts(),
        border_width=req.border_width,
        inner_margin=req.inner_margin,
        is_ltr=req.is_ltr,
        skip_line_rects=req.skip_line_rects,
    )


@app.post("/outlines")
def outlines(req: OutlineRequest) -> Dict[str, Any]:
    outliner = _outliner(req)
    result = _compute(outliner.get_outlines)
    logger.info("Outlined %d boxes into %d polygons", len(req.boxes), len(result["polygons"]))
    return dict(result)


@app.post("/line-strips")
def line_strips(req: OutlineRequest) -> Dict[str, Any]:
    return dict(_outliner(req).get_line_strips())


@app.post("/highlight")
def highlight(req: ShapeRequest) -> Dict[str, Any]:
    return dict(_compute(highlight_shapes, req.box_dicts(), is_ltr=req.is_ltr))


@app.post("/underline")
def underline(req: ShapeRequest) -> Dict[str, Any]:
    return dict(_compute(underline_shapes, req.box_dicts(), is_ltr=req.is_ltr))


def _preview_shapes(req: PreviewRequest) -> Dict[str, Any]:
    outliner = _outliner(req)
    if req.kind == "highlight":
        return {"polygons": _compute(outliner.get_outlines)["polygons"]}
    return {"strips": outliner.get_line_strips()["line_strips"], "kind": req.kind}


@app.post("/preview")
def preview(req: PreviewRequest) -> Response:
    shapes = _preview_shapes(req)
    try:
        png = render_png(
            req.width,
            req.height,
            color=req.color,
            opacity=req.opacity,
            outline_color=req.outline_color,
            **shapes,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return Response(content=png, media_type="image/png")


@app.post("/preview.svg")
def preview_svg(req: PreviewRequest) -> Response:
    svg = render_svg(
        color=req.color,
        opacity=req.opacity,
        outline_color=req.outline_color,
        **_preview_shapes(req),
    )
    return Response(content=svg, media_type="image/svg+xml")


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


def run() -> None:
    import uvicorn

    from .logging_config import configure_logging

    configure_logging()
    uvicorn.run(
        app,
        host=os.getenv("OUTLINER_HOST", "127.0.0.1"),
        port=int(os.getenv("OUTLINER_PORT", "8000")),
        log_config=None,
    )
