"""Tic-tac-toe package exposing game rules, the minimax AI, and the web API."""

from .ai import MinimaxAI, select_move
from .game import InvalidBoardError, Outcome, TicTacToeGame, evaluate
from .leaderboard import Leaderboard
from .ui import app

__all__ = [
    "InvalidBoardError",
    "Leaderboard",
    "MinimaxAI",
    "Outcome",
    "TicTacToeGame",
    "app",
    "evaluate",
    "select_move",
]
