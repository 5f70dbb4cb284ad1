"""FastAPI service for playing tic-tac-toe against the minimax AI."""

from __future__ import annotations

import logging
import os
import random
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .ai import MinimaxAI
from .game import EMPTY, TicTacToeGame, winning_line
from .leaderboard import Leaderboard, result_for


logger = logging.getLogger(__name__)

HUMAN_PLAYER = "X"
AI_PLAYER = "O"

AI_THINK_DELAY: float = float(os.environ.get("TICTACTOE_AI_DELAY", "0.5"))
LEADERBOARD_PATH: Optional[str] = os.environ.get("TICTACTOE_LEADERBOARD_PATH") or None


@dataclass
class GameSession:
    """Container for an active game, its AI opponent and the human's identity."""

    game: TicTacToeGame
    ai: MinimaxAI
    player_id: Optional[str] = None
    username: Optional[str] = None
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    ai_pending: bool = False
    result_recorded: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, GameSession] = {}
LEADERBOARD = Leaderboard(LEADERBOARD_PATH)
app = FastAPI(title="Tic-Tac-Toe", description="Tic-tac-toe against a minimax AI")


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    model_config = ConfigDict(populate_by_name=True)

    player_id: Optional[str] = Field(default=None, alias="playerId", max_length=64)
    username: Optional[str] = Field(default=None, max_length=64)
    seed: Optional[int] = Field(
        default=None, description="Seed for the AI's tie-breaking random source"
    )

    @field_validator("player_id", "username")
    @classmethod
    def strip_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    model_config = ConfigDict(populate_by_name=True)

    cell_index: int = Field(alias="cellIndex", ge=0, le=8)


def _create_session(request: NewGameRequest) -> Tuple[str, GameSession]:
    """Create and start a new session and register it for later access."""

    game = TicTacToeGame()
    game.start()
    ai = MinimaxAI(player=AI_PLAYER, rng=random.Random(request.seed))
    session = GameSession(
        game=game,
        ai=ai,
        player_id=request.player_id,
        username=request.username or request.player_id,
    )
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info("Created game %s for player %s", session_id, session.player_id)
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _record_result(game_id: str, session: GameSession) -> None:
    """Tally a finished game once. Caller holds ``session.lock``."""

    game = session.game
    if not game.finished or session.result_recorded:
        return
    session.result_recorded = True
    logger.info("Game %s finished: %s", game_id, game.status)
    if session.player_id is None:
        return
    LEADERBOARD.record(
        session.player_id,
        session.username or session.player_id,
        result_for(game.outcome, HUMAN_PLAYER),
    )


def _run_ai_turn(game_id: str) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    if AI_THINK_DELAY > 0:
        time.sleep(AI_THINK_DELAY)

    with session.lock:
        try:
            game = session.game
            if not game.started or game.finished:
                return
            if game.current_player != session.ai.player:
                return
            cell_index = session.ai.choose(game)
            game.play_move(cell_index)
            session.move_log.append(
                {"player": session.ai.player, "cellIndex": cell_index}
            )
            logger.info("AI played cell %d in game %s", cell_index, game_id)
            _record_result(game_id, session)
        finally:
            session.ai_pending = False


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        game = session.game
        line = winning_line(game.cells)
        state: Dict[str, object] = {
            "id": game_id,
            "status": game.status,
            "currentPlayer": game.current_player,
            "cells": [c if c != EMPTY else "" for c in game.cells],
            "winner": game.winner,
            "drawn": game.drawn,
            "winningLine": list(line) if line else None,
            "availableMoves": game.available_moves(),
            "moveLog": list(session.move_log),
            "aiPending": session.ai_pending,
            "playerId": session.player_id,
        }
        if session.move_log:
            state["lastMove"] = session.move_log[-1]
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    cell_index: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    should_schedule_ai = False
    with session.lock:
        game = session.game
        if not game.started:
            raise HTTPException(status_code=400, detail="Game has not started")
        if game.finished:
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")

        if game.current_player != HUMAN_PLAYER:
            raise HTTPException(status_code=400, detail="It is not your turn")

        try:
            game.play_move(cell_index)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        session.move_log.append({"player": HUMAN_PLAYER, "cellIndex": cell_index})
        _record_result(game_id, session)

        should_schedule_ai = (
            not game.finished and game.current_player == session.ai.player
        )
        if should_schedule_ai:
            session.ai_pending = True

    if should_schedule_ai and background_tasks is not None:
        background_tasks.add_task(_run_ai_turn, game_id)


@app.post("/api/game")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    game_id, session = _create_session(request)
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(game_id, session, request.cell_index, background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/reset")
def reset_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")
        session.game.reset()
        session.move_log.clear()
        session.result_recorded = False
    logger.info("Reset game %s", game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/start")
def start_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        try:
            session.game.start()
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
    logger.info("Started game %s", game_id)
    return _serialize_session(game_id, session)


@app.get("/api/leaderboard")
def get_leaderboard() -> List[Dict[str, object]]:
    return [
        {
            "playerId": entry.player_id,
            "username": entry.username,
            "wins": entry.wins,
            "losses": entry.losses,
            "draws": entry.draws,
        }
        for entry in LEADERBOARD.standings()
    ]
