"""Minimax AI with alpha-beta pruning, draw re-scoring and an opening shortcut."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence
import logging
import random

from .game import (
    CENTER,
    CORNERS,
    EMPTY,
    Board,
    Player,
    TicTacToeGame,
    board_outcome,
    empty_cells,
    opponent_of,
    validate_board,
)


logger = logging.getLogger(__name__)

WIN_SCORE = 100
# Wider than any reachable score; used as the initial search window.
SCORE_BOUND = 1000

CENTER_WEIGHT = 3
CORNER_WEIGHT = 2


@contextmanager
def _placed(board: Board, index: int, mark: Player) -> Iterator[None]:
    """Place ``mark`` for the duration of the block, then clear the cell."""
    board[index] = mark
    try:
        yield
    finally:
        board[index] = EMPTY


def position_heuristic(board: Sequence[str], mark: Player) -> int:
    """Static positional score: centre +/-3, each corner +/-2."""
    opp = opponent_of(mark)
    score = 0
    if board[CENTER] == mark:
        score += CENTER_WEIGHT
    elif board[CENTER] == opp:
        score -= CENTER_WEIGHT
    for k in CORNERS:
        if board[k] == mark:
            score += CORNER_WEIGHT
        elif board[k] == opp:
            score -= CORNER_WEIGHT
    return score


def opening_move(board: Sequence[str]) -> Optional[int]:
    """Book reply for the first two plies, or None when search is needed."""
    filled = len(board) - len(empty_cells(board))
    if filled == 0:
        return CENTER
    if filled == 1 and board[CENTER] == EMPTY:
        return CENTER
    return None


class _Search:
    """Scratch board plus the two marks for one top-level decision."""

    def __init__(self, board: Sequence[str], mark: Player) -> None:
        self.board: Board = list(board)
        self.me = mark
        self.opp = opponent_of(mark)

    def minimax(
        self, depth: int, maximizing: bool, alpha: int, beta: int, rescore: bool = True
    ) -> int:
        """Score the scratch board with ``alpha``/``beta`` pruning.

        With ``rescore`` a score of exactly 0 is replaced by the heuristic of
        the board as it stands here, i.e. with the move that led here placed.
        A result at or below ``alpha`` (at or above ``beta``) is only a bound
        and comes back clamped to that edge of the window.
        """
        outcome = board_outcome(self.board)
        if outcome.is_terminal:
            if outcome.winner == self.me:
                return WIN_SCORE - depth
            if outcome.winner == self.opp:
                return depth - WIN_SCORE
            return position_heuristic(self.board, self.me) if rescore else 0

        draw_value = position_heuristic(self.board, self.me) if rescore else None
        # 0 maps to draw_value, so 0 must stay inside the search window
        # whenever draw_value lies inside the caller's window.
        lo, hi = alpha, beta
        if draw_value is not None:
            if alpha >= 0 and draw_value > alpha:
                lo = -1
            if beta <= 0 and draw_value < beta:
                hi = 1

        mark = self.me if maximizing else self.opp
        best = -SCORE_BOUND if maximizing else SCORE_BOUND
        a, b = lo, hi
        for index in empty_cells(self.board):
            with _placed(self.board, index, mark):
                score = self.minimax(depth + 1, not maximizing, a, b)
            if maximizing:
                best = max(best, score)
                a = max(a, best)
            else:
                best = min(best, score)
                b = min(b, best)
            if b <= a:
                break

        if best <= lo:
            return alpha
        if best >= hi:
            return beta
        if best == 0 and draw_value is not None:
            return draw_value
        return best


def score_moves(board: Sequence[str], mark: Player) -> Dict[int, int]:
    """Search score of every empty cell as ``mark``'s next move.

    Each candidate is placed on a private copy of the board and searched with
    the opponent to move at depth 0 and the full window. Wins score
    ``100 - depth``, losses ``depth - 100`` and exactly drawn lines are
    replaced by :func:`position_heuristic`. The caller's board is untouched.
    """
    validate_board(board)
    search = _Search(board, mark)
    scores: Dict[int, int] = {}
    for index in empty_cells(search.board):
        with _placed(search.board, index, mark):
            scores[index] = search.minimax(
                0, False, -SCORE_BOUND, SCORE_BOUND, rescore=False
            )
    return scores


def select_move(
    board: Sequence[str], mark: Player, rng: Optional[random.Random] = None
) -> int:
    """Pick the best empty cell for ``mark``.

    The opening shortcut answers the first two plies with the centre. Past
    that, every empty cell is scored with :func:`score_moves` and one of the
    top-scoring cells is drawn uniformly from ``rng``.
    """
    validate_board(board)
    opponent_of(mark)
    if not empty_cells(board):
        raise RuntimeError("No valid moves available")
    if board_outcome(board).is_terminal:
        raise ValueError("Game already finished")

    book = opening_move(board)
    if book is not None:
        logger.debug("Opening shortcut for %s: cell %d", mark, book)
        return book

    scores = score_moves(board, mark)
    best_score = max(scores.values())
    best_moves: List[int] = [i for i, s in scores.items() if s == best_score]
    move = (rng or random.Random()).choice(best_moves)
    logger.debug(
        "Scores for %s: %s; picked %d from %s", mark, scores, move, best_moves
    )
    return move


@dataclass
class MinimaxAI:
    """AI player bound to a mark, with an injectable random source.

    ``rng`` only decides between equally scored moves; seed it for
    reproducible play.
    """

    player: Player = "O"
    rng: random.Random = field(default_factory=random.Random, repr=False)

    def __post_init__(self) -> None:
        opponent_of(self.player)

    def choose(self, game: TicTacToeGame) -> int:
        if game.current_player != self.player:
            raise ValueError("It is not this AI player's turn")
        if not game.available_moves():
            raise RuntimeError("No valid moves available")
        return select_move(game.cells, self.player, self.rng)
