"""Unit tests for board evaluation and the game session."""

import itertools

import pytest

from tictactoe.game import (
    WINNING_LINES,
    InvalidBoardError,
    Outcome,
    TicTacToeGame,
    evaluate,
    winning_line,
)


def board_from(text):
    """Build a board from a 9-character string, '.' for empty."""
    return [" " if c == "." else c for c in text]


@pytest.mark.parametrize("line", WINNING_LINES)
@pytest.mark.parametrize("mark", ["X", "O"])
def test_completed_line_wins_for_its_mark(line, mark):
    other = "O" if mark == "X" else "X"
    board = [" "] * 9
    for index in line:
        board[index] = mark
    # Scatter the other mark without completing a line of its own.
    free = [i for i in range(9) if i not in line]
    for index in free[:2]:
        board[index] = other

    assert evaluate(board) is Outcome.win_for(mark)
    assert evaluate(board).winner == mark


def test_full_board_without_line_is_draw():
    assert evaluate(board_from("XOXXOOOXX")) is Outcome.DRAW


def test_full_board_with_line_is_a_win():
    assert evaluate(board_from("XXXOOXOXO")) is Outcome.X_WINS


def test_board_with_empty_cell_and_no_line_is_in_progress():
    assert evaluate(board_from("XO.......")) is Outcome.IN_PROGRESS
    assert evaluate([" "] * 9) is Outcome.IN_PROGRESS


def test_every_full_board_without_line_is_draw():
    for cells in itertools.product("XO", repeat=9):
        board = list(cells)
        if winning_line(board) is None:
            assert evaluate(board) is Outcome.DRAW


def test_lines_checked_rows_first():
    # Both the top row and the left column are complete.
    board = board_from("XXXX..X..")
    assert winning_line(board) == (0, 1, 2)


def test_evaluate_is_idempotent_and_pure():
    board = board_from("XO.XO....")
    snapshot = list(board)
    assert evaluate(board) is evaluate(board)
    assert board == snapshot


@pytest.mark.parametrize(
    "board",
    [
        [" "] * 8,
        [" "] * 10,
        ["X", "O", "Z", " ", " ", " ", " ", " ", " "],
        [None] * 9,
        ["x"] + [" "] * 8,
    ],
)
def test_malformed_boards_rejected(board):
    with pytest.raises(InvalidBoardError):
        evaluate(board)


def test_new_game_is_not_started():
    game = TicTacToeGame()
    assert game.status == "not_started"
    assert game.available_moves() == []
    with pytest.raises(ValueError):
        game.play_move(0)


def test_moves_alternate_after_start():
    game = TicTacToeGame()
    game.start()
    assert game.status == "in_progress"
    assert len(game.available_moves()) == 9

    game.play_move(0)
    assert game.cells[0] == "X"
    assert game.current_player == "O"
    game.play_move(4)
    assert game.cells[4] == "O"
    assert game.current_player == "X"


def test_occupied_and_off_board_cells_rejected():
    game = TicTacToeGame()
    game.start()
    game.play_move(0)
    with pytest.raises(ValueError):
        game.play_move(0)
    with pytest.raises(ValueError):
        game.play_move(9)
    assert game.current_player == "O"


def test_win_ends_game_and_blocks_further_moves():
    game = TicTacToeGame()
    game.start()
    for index in (0, 3, 1, 4):
        game.play_move(index)
    assert game.play_move(2) is Outcome.X_WINS
    assert game.finished
    assert game.winner == "X"
    assert game.status == "x_wins"
    assert game.available_moves() == []
    with pytest.raises(ValueError):
        game.play_move(5)


def test_draw_detected():
    game = TicTacToeGame()
    game.start()
    for index in (0, 1, 2, 4, 3, 5, 7, 6, 8):
        game.play_move(index)
    assert game.drawn
    assert game.status == "draw"


def test_reset_returns_to_not_started():
    game = TicTacToeGame()
    game.start()
    for index in (0, 3, 1, 4, 2):
        game.play_move(index)
    game.reset()
    assert game.status == "not_started"
    assert game.cells == [" "] * 9
    assert game.current_player == "X"
    game.start()
    assert game.status == "in_progress"


def test_start_twice_rejected():
    game = TicTacToeGame()
    game.start()
    with pytest.raises(ValueError):
        game.start()


def test_clone_is_independent():
    game = TicTacToeGame()
    game.start()
    game.play_move(0)
    copy = game.clone()
    copy.play_move(4)
    assert game.cells[4] == " "
    assert game.current_player == "O"
