"""Tic-tac-toe package exposing the board, the minimax AI, and the web application."""

from .ai import Difficulty, MinimaxAI, NoLegalMoveError
from .game import Board, Field
from .ui import app

__all__ = ["Board", "Difficulty", "Field", "MinimaxAI", "NoLegalMoveError", "app"]
