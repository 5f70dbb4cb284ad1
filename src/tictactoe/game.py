"""Core rules for 3x3 tic-tac-toe: terminal-state evaluation and game sessions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

Player = str  # "X" or "O"
Board = List[str]

EMPTY = " "
MARKS: Tuple[Player, Player] = ("X", "O")
CELL_VALUES = frozenset((EMPTY,) + MARKS)

# Rows, then columns, then diagonals.
WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

CENTER = 4
CORNERS: Tuple[int, ...] = (0, 2, 6, 8)


class InvalidBoardError(ValueError):
    """Raised when a board is not 9 cells of ' ', 'X' or 'O'."""


class Outcome(str, Enum):
    IN_PROGRESS = "in_progress"
    X_WINS = "x_wins"
    O_WINS = "o_wins"
    DRAW = "draw"

    @property
    def winner(self) -> Optional[Player]:
        if self is Outcome.X_WINS:
            return "X"
        if self is Outcome.O_WINS:
            return "O"
        return None

    @property
    def is_terminal(self) -> bool:
        return self is not Outcome.IN_PROGRESS

    @classmethod
    def win_for(cls, mark: Player) -> "Outcome":
        return cls.X_WINS if mark == "X" else cls.O_WINS


def validate_board(board: Sequence[str]) -> None:
    if len(board) != 9:
        raise InvalidBoardError(f"Board must have 9 cells, got {len(board)}")
    for index, cell in enumerate(board):
        if cell not in CELL_VALUES:
            raise InvalidBoardError(f"Invalid value {cell!r} in cell {index}")


def opponent_of(mark: Player) -> Player:
    if mark == "X":
        return "O"
    if mark == "O":
        return "X"
    raise ValueError(f"Unknown player mark {mark!r}")


def empty_cells(board: Sequence[str]) -> List[int]:
    return [i for i, c in enumerate(board) if c == EMPTY]


def winning_line(board: Sequence[str]) -> Optional[Tuple[int, int, int]]:
    """First completed line in fixed order, or None."""
    for a, b, c in WINNING_LINES:
        v = board[a]
        if v != EMPTY and v == board[b] == board[c]:
            return (a, b, c)
    return None


def board_outcome(board: Sequence[str]) -> Outcome:
    line = winning_line(board)
    if line is not None:
        return Outcome.win_for(board[line[0]])
    if EMPTY not in board:
        return Outcome.DRAW
    return Outcome.IN_PROGRESS


def evaluate(board: Sequence[str]) -> Outcome:
    """Classify a board as won, drawn or still in progress.

    Lines are checked rows first, then columns, then diagonals, and the first
    completed one decides the winner. A full board without a completed line
    is a draw.
    """
    validate_board(board)
    return board_outcome(board)


# ---------- Game session ----------


@dataclass
class TicTacToeGame:
    """Single game following NotStarted -> InProgress -> won/drawn."""

    cells: Board = field(default_factory=lambda: [EMPTY] * 9)
    current_player: Player = "X"
    started: bool = False

    def __post_init__(self) -> None:
        validate_board(self.cells)
        opponent_of(self.current_player)

    # ---- API used by UI & AI ----

    @property
    def outcome(self) -> Outcome:
        return board_outcome(self.cells)

    @property
    def status(self) -> str:
        if not self.started:
            return "not_started"
        return self.outcome.value

    @property
    def winner(self) -> Optional[Player]:
        return self.outcome.winner

    @property
    def drawn(self) -> bool:
        return self.outcome is Outcome.DRAW

    @property
    def finished(self) -> bool:
        return self.started and self.outcome.is_terminal

    def available_moves(self) -> List[int]:
        if not self.started or self.outcome.is_terminal:
            return []
        return empty_cells(self.cells)

    def start(self) -> None:
        if self.started:
            raise ValueError("Game already started")
        self.started = True

    def play_move(self, index: int) -> Outcome:
        """Place the current player's mark and pass the turn."""
        if not self.started:
            raise ValueError("Game has not started")
        if self.outcome.is_terminal:
            raise ValueError("Game already finished")
        if not 0 <= index < 9:
            raise ValueError(f"Cell index {index} is off the board")
        if self.cells[index] != EMPTY:
            raise ValueError("Cell already occupied")

        self.cells[index] = self.current_player
        outcome = self.outcome
        if not outcome.is_terminal:
            self.current_player = opponent_of(self.current_player)
        return outcome

    def reset(self) -> None:
        self.cells = [EMPTY] * 9
        self.current_player = "X"
        self.started = False

    def clone(self) -> "TicTacToeGame":
        return TicTacToeGame(
            cells=self.cells.copy(),
            current_player=self.current_player,
            started=self.started,
        )
