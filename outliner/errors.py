"""Exceptions raised by the outline engine."""

from __future__ import annotations


class OutlinerError(Exception):
    """Base class for every outline engine failure."""


class InvalidBoxesError(OutlinerError, ValueError):
    """The caller supplied boxes the engine cannot outline."""


class OutlineInvariantError(OutlinerError, AssertionError):
    """Internal bookkeeping went wrong; never caused by valid input."""


__all__ = ["OutlinerError", "InvalidBoxesError", "OutlineInvariantError"]
