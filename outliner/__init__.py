"""Union outlines and line strips for text-selection rectangles."""

from fastapi import FastAPI

from .engine import Outliner
from .errors import InvalidBoxesError, OutlineInvariantError, OutlinerError
from .main import app as _app

app: FastAPI = _app

__all__ = ["app", "Outliner", "OutlinerError", "InvalidBoxesError", "OutlineInvariantError"]
