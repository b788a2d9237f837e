"""
Board Model
===========

Fixed-size grid of non-negative tile values backed by a numpy array.
Row 0 is the top of the board; 0 marks an empty cell.
"""

from __future__ import annotations

from typing import Iterator, List, NamedTuple, Sequence, Tuple

import numpy as np

from drop_number.engine.errors import InvalidBoardState, OutOfBoundsError


class Position(NamedTuple):
    """A cell coordinate."""
    row: int
    col: int


class Tile(NamedTuple):
    """A non-empty cell and its value."""
    row: int
    col: int
    value: int

    @property
    def position(self) -> Position:
        return Position(self.row, self.col)


class Board:
    """
    Rectangular tile grid.

    Engine operations never mutate a caller's board: they work on clone()
    and hand the clone back.
    """

    __slots__ = ("_cells",)

    def __init__(self, cells: np.ndarray):
        """
        Wrap an existing 2D integer array (not copied).

        Args:
            cells: Array of shape (rows, cols).
        """
        if cells.ndim != 2 or cells.shape[0] == 0 or cells.shape[1] == 0:
            raise InvalidBoardState(f"Board must be a non-empty 2D grid, got shape {cells.shape}")
        self._cells = cells

    # Construction -----------------------------------------------------------

    @classmethod
    def empty(cls, rows: int, cols: int) -> "Board":
        """Create an all-zero board."""
        if rows < 1 or cols < 1:
            raise InvalidBoardState(f"Board must have positive dimensions, got {rows}x{cols}")
        return cls(np.zeros((rows, cols), dtype=np.int64))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "Board":
        """
        Build a board from nested row lists (e.g. restored game state).

        Raises:
            InvalidBoardState: If the rows are empty, ragged, or not integers.
        """
        if rows is None or len(rows) == 0:
            raise InvalidBoardState("Board must be a non-empty 2D grid")
        width = len(rows[0])
        if width == 0 or any(len(r) != width for r in rows):
            raise InvalidBoardState("Board rows must be non-empty and equal length")
        for r in rows:
            for v in r:
                if isinstance(v, bool) or not isinstance(v, (int, np.integer)):
                    raise InvalidBoardState(f"Board cells must be integers, got {v!r}")
        return cls(np.array(rows, dtype=np.int64))

    @classmethod
    def coerce(cls, board: "Board | Sequence[Sequence[int]]") -> "Board":
        """Accept either a Board or nested lists; lists are converted."""
        if isinstance(board, Board):
            return board
        if isinstance(board, np.ndarray):
            if board.ndim != 2 or not np.issubdtype(board.dtype, np.integer):
                raise InvalidBoardState("Board array must be a 2D integer array")
            return cls(board.astype(np.int64, copy=True))
        return cls.from_rows(board)

    # Shape ------------------------------------------------------------------

    @property
    def rows(self) -> int:
        return int(self._cells.shape[0])

    @property
    def cols(self) -> int:
        return int(self._cells.shape[1])

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.rows, self.cols)

    @property
    def cells(self) -> np.ndarray:
        """Underlying array. Writes through to the board."""
        return self._cells

    def is_in_bounds(self, row: int, col: int) -> bool:
        """True if (row, col) addresses a cell; negative indices never wrap."""
        return 0 <= row < self.rows and 0 <= col < self.cols

    def _check(self, row: int, col: int) -> None:
        if not self.is_in_bounds(row, col):
            raise OutOfBoundsError(row, col, self.rows, self.cols)

    # Access -----------------------------------------------------------------

    def get(self, row: int, col: int) -> int:
        self._check(row, col)
        return int(self._cells[row, col])

    def set(self, row: int, col: int, value: int) -> None:
        self._check(row, col)
        if value < 0:
            raise ValueError(f"Tile values must be non-negative, got {value}")
        self._cells[row, col] = value

    def column(self, col: int) -> np.ndarray:
        """Copy of one column, top to bottom."""
        self._check(0, col)
        return self._cells[:, col].copy()

    def clone(self) -> "Board":
        return Board(self._cells.copy())

    def reset(self) -> None:
        """Clear every cell in place."""
        self._cells.fill(0)

    # Queries ----------------------------------------------------------------

    def is_full(self) -> bool:
        return not bool((self._cells == 0).any())

    def is_column_full(self, col: int) -> bool:
        self._check(0, col)
        return not bool((self._cells[:, col] == 0).any())

    def count_empty(self) -> int:
        return int((self._cells == 0).sum())

    def max_tile(self) -> int:
        return int(self._cells.max())

    def tiles(self) -> Iterator[Tile]:
        """Non-empty cells in row-major order."""
        for row, col in zip(*np.nonzero(self._cells)):
            yield Tile(int(row), int(col), int(self._cells[row, col]))

    def to_list(self) -> List[List[int]]:
        """Plain nested lists of Python ints (for persistence)."""
        return self._cells.tolist()

    # Dunder -----------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Board):
            return self.shape == other.shape and bool(np.array_equal(self._cells, other._cells))
        if isinstance(other, (list, tuple)):
            try:
                return self.to_list() == [list(r) for r in other]
            except TypeError:
                return False
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        return f"Board({self.to_list()!r})"

    def render(self) -> str:
        """Fixed-width text rendering, '.' for empty cells."""
        width = max(4, len(str(self.max_tile())) + 1)
        lines = []
        for row in self._cells:
            lines.append("".join(
                f"{int(v):>{width}d}" if v else f"{'.':>{width}}" for v in row
            ))
        lines.append("-" * (width * self.cols))
        lines.append("".join(f"{f'C{c}':>{width}}" for c in range(self.cols)))
        return "\n".join(lines)


def reset_board(rows: int, cols: int) -> Board:
    """Create a new all-zero board."""
    return Board.empty(rows, cols)
