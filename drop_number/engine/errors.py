"""
Engine Errors
=============

Caller-error exceptions raised by the drop engine. Gameplay rejections
(a full column) are reported through DropOutcome, not raised.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class for errors raised by the merge engine."""


class InvalidBoardState(EngineError, ValueError):
    """Board is not a non-empty rectangular grid of valid tile values."""


class InvalidColumn(EngineError, ValueError):
    """Drop column lies outside the board."""

    def __init__(self, column: int, cols: int):
        super().__init__(f"Invalid column {column}: must be between 0 and {cols - 1}")
        self.column = column
        self.cols = cols


class InvalidValue(EngineError, ValueError):
    """Dropped value is not a positive seed value times a power of two."""

    def __init__(self, value):
        super().__init__(f"Invalid value {value!r}: must be a positive seed value times a power of two")
        self.value = value


class OutOfBoundsError(EngineError, IndexError):
    """Cell access outside the board."""

    def __init__(self, row: int, col: int, rows: int, cols: int):
        super().__init__(
            f"Cell ({row}, {col}) out of range for {rows}x{cols} board"
        )
        self.row = row
        self.col = col
