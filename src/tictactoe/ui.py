"""FastAPI-powered web UI for playing tic-tac-toe in the browser."""

from __future__ import annotations

import logging
import random
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from .ai import AI_PLAYER, HUMAN_PLAYER, Difficulty, MinimaxAI
from .game import Board, Field as Cell

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """Container for an active game and its optional AI opponent."""

    board: Board
    ai: Optional[MinimaxAI]
    current_player: Cell = HUMAN_PLAYER
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    ai_pending: bool = False
    touched_at: float = field(default_factory=time.time)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def winner(self) -> Optional[Cell]:
        winner = self.board.has_won()
        return None if winner is Cell.FREE else winner

    @property
    def finished(self) -> bool:
        return self.winner is not None or self.board.is_full()


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="Tic-tac-toe", description="Tic-tac-toe against a minimax AI")

AI_THINK_DELAY: Tuple[float, float] = (0.3, 0.8)
SESSION_TTL_SECONDS = 60 * 60  # 1 hour


def _cleanup_sessions() -> None:
    """Forget games nobody has looked at for ``SESSION_TTL_SECONDS``."""

    now = time.time()
    expired = [
        game_id
        for game_id, session in list(SESSIONS.items())
        if not session.ai_pending and now - session.touched_at >= SESSION_TTL_SECONDS
    ]
    for game_id in expired:
        SESSIONS.pop(game_id, None)
    if expired:
        logger.info("expired %d idle game(s)", len(expired))


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    difficulty: Optional[Difficulty] = Field(
        default=Difficulty.MEDIUM,
        description="AI strength; null starts a game between two humans",
    )


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    x: int = Field(ge=0, le=2)
    y: int = Field(ge=0, le=2)


def _create_session(difficulty: Optional[Difficulty]) -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    _cleanup_sessions()
    ai = MinimaxAI(difficulty=difficulty) if difficulty is not None else None
    session = GameSession(board=Board(), ai=ai)
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info(
        "new game id=%s opponent=%s",
        session_id,
        difficulty.value if difficulty is not None else "human",
    )
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        session = SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc
    session.touched_at = time.time()
    return session


def _other(player: Cell) -> Cell:
    return Cell.O if player is Cell.X else Cell.X


def _log_if_finished(game_id: str, session: GameSession) -> None:
    if session.finished:
        winner = session.winner
        logger.info(
            "game over id=%s result=%s",
            game_id,
            winner.value if winner is not None else "draw",
        )


def _run_ai_turn(game_id: str) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, random.uniform(*AI_THINK_DELAY)))

    with session.lock:
        try:
            if not session.ai or session.finished:
                return
            if session.current_player is not AI_PLAYER:
                return
            x, y = session.ai.make_move(session.board)
            session.move_log.append({"player": AI_PLAYER.value, "x": x, "y": y})
            session.current_player = HUMAN_PLAYER
            _log_if_finished(game_id, session)
        finally:
            session.ai_pending = False


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        board = session.board
        winner = session.winner
        ai = session.ai

        ai_moved = any(m["player"] == AI_PLAYER.value for m in session.move_log)
        stats: Optional[Dict[str, object]] = None
        if ai is not None and ai_moved:
            stats = {
                "iterations": ai.iterations,
                "depth": ai.depth,
                "elapsed": ai.last_elapsed,
                "wasRandom": ai.last_was_random,
            }

        state: Dict[str, object] = {
            "id": game_id,
            "difficulty": ai.difficulty.value if ai is not None else None,
            "cells": [c.value if c is not Cell.FREE else "" for c in board.cells],
            "currentPlayer": session.current_player.value,
            "winner": winner.value if winner is not None else None,
            "drawn": winner is None and board.is_full(),
            "moveLog": list(session.move_log),
            "aiPending": session.ai_pending,
            "stats": stats,
        }
        if session.move_log:
            state["lastMove"] = session.move_log[-1]
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    x: int,
    y: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    should_schedule_ai = False
    with session.lock:
        if session.finished:
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")

        player = session.current_player
        if not session.board.make_move(x, y, player):
            logger.debug("rejected move id=%s x=%d y=%d: occupied", game_id, x, y)
            raise HTTPException(status_code=400, detail="Cell already occupied")

        session.move_log.append({"player": player.value, "x": x, "y": y})
        session.current_player = _other(player)
        _log_if_finished(game_id, session)

        should_schedule_ai = (
            session.ai is not None
            and not session.finished
            and session.current_player is AI_PLAYER
        )
        if should_schedule_ai:
            session.ai_pending = True

    if should_schedule_ai and background_tasks is not None:
        background_tasks.add_task(_run_ai_turn, game_id)


@app.post("/api/game")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    game_id, session = _create_session(request.difficulty)
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
    _apply_player_move(game_id, session, request.x, request.y, background_tasks)
    return _serialize_session(game_id, session)


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>Tic-tac-toe</title>
    <style>
      body { font-family: system-ui, sans-serif; display: flex; flex-direction: column;
             align-items: center; gap: 1rem; margin-top: 2rem; }
      #board { display: grid; grid-template-columns: repeat(3, 100px);
               grid-template-rows: repeat(3, 100px); }
      .cell { border: 2px solid #000; font-size: 64px; display: flex;
              align-items: center; justify-content: center; cursor: pointer; }
      .cell.X { color: #0000ff; }
      .cell.O { color: #ff0000; }
      #stats { font-size: 0.85rem; color: #555; min-height: 1.2em; }
    </style>
  </head>
  <body>
    <div>
      <select id=\"difficulty\">
        <option value=\"easy\">Easy</option>
        <option value=\"medium\" selected>Medium</option>
        <option value=\"hard\">Hard</option>
        <option value=\"\">Two players</option>
      </select>
      <button id=\"new-game\">New game</button>
    </div>
    <div id=\"board\"></div>
    <div id=\"status\"></div>
    <div id=\"stats\"></div>
    <script>
      let state = null;

      async function api(path, body) {
        const options = body === undefined ? {} : {
          method: "POST",
          headers: { "Content-Type": "application/json" },
          body: JSON.stringify(body),
        };
        const response = await fetch(path, options);
        const payload = await response.json();
        if (!response.ok) {
          throw new Error(payload.detail || response.statusText);
        }
        return payload;
      }

      function render() {
        const board = document.getElementById("board");
        board.innerHTML = "";
        state.cells.forEach((mark, index) => {
          const cell = document.createElement("div");
          cell.className = "cell " + mark;
          cell.textContent = mark;
          cell.onclick = () => play(index % 3, Math.floor(index / 3));
          board.appendChild(cell);
        });

        let status = state.currentPlayer + " to move";
        if (state.winner) status = state.winner + " wins";
        else if (state.drawn) status = "Draw";
        else if (state.aiPending) status = "Computer is thinking...";
        document.getElementById("status").textContent = status;

        const s = state.stats;
        document.getElementById("stats").textContent = s
          ? `random: ${s.wasRandom}, time: ${s.elapsed.toFixed(4)}s, ` +
            `iterations: ${s.iterations}, depth: ${s.depth}`
          : "";

        if (state.aiPending) setTimeout(refresh, 250);
      }

      async function refresh() {
        state = await api(`/api/game/${state.id}`);
        render();
      }

      async function play(x, y) {
        if (!state || state.winner || state.drawn || state.aiPending) return;
        try {
          state = await api(`/api/game/${state.id}/move`, { x, y });
          render();
        } catch (error) {
          document.getElementById("status").textContent = error.message;
        }
      }

      async function newGame() {
        const value = document.getElementById("difficulty").value;
        state = await api("/api/game", { difficulty: value || null });
        render();
      }

      document.getElementById("new-game").onclick = newGame;
      newGame();
    </script>
  </body>
</html>
"""
