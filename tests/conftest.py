"""Shared fixtures for the outliner tests."""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

import pytest
from fastapi.testclient import TestClient

from outliner.main import app


def make_box(x: float, y: float, width: float, height: float) -> Dict[str, float]:
    return {"x": x, "y": y, "width": width, "height": height}


def polygon_area(polygon: Sequence[Tuple[float, float]]) -> float:
    """Absolute shoelace area of an implicitly closed polygon."""
    total = 0.0
    for i, (x1, y1) in enumerate(polygon):
        x2, y2 = polygon[(i + 1) % len(polygon)]
        total += x1 * y2 - x2 * y1
    return abs(total) / 2.0


def as_points(polygon: List[List[float]]) -> List[Tuple[float, float]]:
    return [(float(x), float(y)) for x, y in polygon]


@pytest.fixture
def api_client() -> TestClient:
    return TestClient(app)
