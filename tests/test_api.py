"""Tests for the FastAPI tic-tac-toe interface."""

from __future__ import annotations

from fastapi.testclient import TestClient

from tictactoe import ui
from tictactoe.ai import MinimaxAI
from tictactoe.game import Board, Field
from tictactoe.ui import app


client = TestClient(app)
ui.AI_THINK_DELAY = (0.0, 0.0)


def _new_game(difficulty="hard"):
    response = client.post("/api/game", json={"difficulty": difficulty})
    assert response.status_code == 200
    return response.json()


def _move(game_id, x, y):
    return client.post(f"/api/game/{game_id}/move", json={"x": x, "y": y})


def test_create_game_and_first_move():
    payload = _new_game("hard")
    assert payload["currentPlayer"] == "X"
    assert payload["difficulty"] == "hard"
    assert payload["cells"] == [""] * 9
    assert payload["moveLog"] == []
    assert payload["stats"] is None

    game_id = payload["id"]
    move_response = _move(game_id, 1, 1)
    assert move_response.status_code == 200
    state = move_response.json()
    assert state["moveLog"][0] == {"player": "X", "x": 1, "y": 1}
    assert state["cells"][4] == "X"
    assert state["currentPlayer"] == "O"
    assert state["aiPending"] is True

    follow_up = client.get(f"/api/game/{game_id}")
    assert follow_up.status_code == 200
    final_state = follow_up.json()
    assert final_state["currentPlayer"] == "X"
    assert final_state["aiPending"] is False
    assert final_state["lastMove"] == {"player": "O", "x": 0, "y": 0}
    assert final_state["cells"][0] == "O"
    assert final_state["stats"]["wasRandom"] is False
    assert final_state["stats"]["iterations"] > 0


def test_default_difficulty_is_medium():
    response = client.post("/api/game", json={})
    assert response.status_code == 200
    assert response.json()["difficulty"] == "medium"


def test_rejects_unknown_difficulty():
    response = client.post("/api/game", json={"difficulty": "impossible"})
    assert response.status_code == 422


def test_rejects_out_of_range_coordinates():
    game_id = _new_game()["id"]
    assert _move(game_id, 3, 0).status_code == 422
    assert _move(game_id, 0, -1).status_code == 422


def test_occupied_cell_rejected():
    game_id = _new_game(None)["id"]
    assert _move(game_id, 0, 0).status_code == 200

    duplicate_move = _move(game_id, 0, 0)
    assert duplicate_move.status_code == 400
    assert duplicate_move.json()["detail"] == "Cell already occupied"

    state = client.get(f"/api/game/{game_id}").json()
    assert state["currentPlayer"] == "O"
    assert len(state["moveLog"]) == 1


def test_unknown_game_is_404():
    assert client.get("/api/game/missing").status_code == 404
    assert _move("missing", 0, 0).status_code == 404


def test_two_player_game_until_win():
    payload = _new_game(None)
    assert payload["difficulty"] is None
    game_id = payload["id"]

    # X takes the top row while O plays the middle row.
    for x, y in [(0, 0), (0, 1), (1, 0), (1, 1), (2, 0)]:
        state = _move(game_id, x, y).json()
        assert state["aiPending"] is False

    assert state["winner"] == "X"
    assert state["drawn"] is False
    assert state["cells"][:3] == ["X", "X", "X"]

    finished = _move(game_id, 2, 2)
    assert finished.status_code == 400
    assert finished.json()["detail"] == "Game already finished"


def test_two_player_draw():
    game_id = _new_game(None)["id"]
    # X O X
    # X O O
    # O X X
    moves = [(0, 0), (1, 0), (2, 0), (1, 1), (0, 1), (2, 1), (1, 2), (0, 2), (2, 2)]
    for x, y in moves:
        state = _move(game_id, x, y).json()

    assert state["winner"] is None
    assert state["drawn"] is True


def test_move_rejected_while_ai_pending():
    game_id, session = ui._create_session(None)
    session.ai = MinimaxAI()
    session.ai_pending = True

    response = _move(game_id, 0, 0)
    assert response.status_code == 400
    assert response.json()["detail"] == "AI is completing its move"


def test_ai_finishes_forced_win():
    game_id, session = ui._create_session(None)
    session.ai = MinimaxAI()
    # _ _ O
    # X O X
    # _ O _
    F, X, O = Field.FREE, Field.X, Field.O
    session.board = Board(cells=[F, F, O, X, O, X, F, O, F])

    # X takes (0, 0); the AI answers with the winning (1, 0).
    state = _move(game_id, 0, 0).json()
    assert state["aiPending"] is True

    final_state = client.get(f"/api/game/{game_id}").json()
    assert final_state["winner"] == "O"
    assert final_state["lastMove"] == {"player": "O", "x": 1, "y": 0}


def test_index_serves_page():
    response = client.get("/")
    assert response.status_code == 200
    assert "Tic-tac-toe" in response.text


def test_idle_games_expire():
    stale_id, stale = ui._create_session(None)
    fresh_id, _ = ui._create_session(None)
    stale.touched_at -= ui.SESSION_TTL_SECONDS + 1

    _new_game(None)

    assert stale_id not in ui.SESSIONS
    assert fresh_id in ui.SESSIONS
    assert client.get(f"/api/game/{stale_id}").status_code == 404


def test_reading_a_game_keeps_it_alive():
    game_id, session = ui._create_session(None)
    session.touched_at -= ui.SESSION_TTL_SECONDS + 1

    assert client.get(f"/api/game/{game_id}").status_code == 200
    _new_game(None)

    assert game_id in ui.SESSIONS
