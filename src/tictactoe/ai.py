"""Minimax opponent with difficulty-tiered randomization."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional
import logging
import random
import time

from .game import SIZE, Board, Field, Move

logger = logging.getLogger(__name__)

AI_PLAYER = Field.O
HUMAN_PLAYER = Field.X

WIN, LOSS, DRAW = 1, -1, 0


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# Chance that a move is chosen by search rather than at random.
OPTIMAL_PROBABILITY: Dict[Difficulty, float] = {
    Difficulty.EASY: 0.0,
    Difficulty.MEDIUM: 0.5,
    Difficulty.HARD: 1.0,
}


class NoLegalMoveError(RuntimeError):
    """The AI was asked to move on a board without free cells."""


@dataclass
class MinimaxAI:
    """Computer player for ``O`` using exhaustive, unpruned minimax.

    ``iterations`` and ``depth`` are diagnostics only: they are reset by every
    ``make_move`` and never influence the choice of move. ``depth`` holds the
    depth of the last terminal position evaluated, not of the chosen line.
    """

    difficulty: Difficulty = Difficulty.HARD
    optimal_probability: Optional[float] = None
    rng: random.Random = field(default_factory=random.Random, repr=False)

    iterations: int = field(default=0, init=False)
    depth: int = field(default=0, init=False)
    last_was_random: bool = field(default=False, init=False)
    last_elapsed: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        self.difficulty = Difficulty(self.difficulty)
        if self.optimal_probability is None:
            self.optimal_probability = OPTIMAL_PROBABILITY[self.difficulty]
        if not 0.0 <= self.optimal_probability <= 1.0:
            raise ValueError(
                f"optimal_probability must be within [0, 1], "
                f"got {self.optimal_probability}"
            )

    # ---- public API ----

    def make_move(self, board: Board) -> Move:
        """Commit one ``O`` move on ``board`` and return it."""
        started = time.perf_counter()
        self.iterations = 0
        self.depth = 0

        if self._plays_optimally():
            move = self.make_move_minimax(board)
            self.last_was_random = False
        else:
            move = self.make_move_random(board)
            self.last_was_random = True

        self.last_elapsed = time.perf_counter() - started
        logger.info(
            "ai move difficulty=%s move=%s was_rand=%s delta_time=%.6f "
            "iterations=%d depth=%d",
            self.difficulty.value,
            move,
            self.last_was_random,
            self.last_elapsed,
            self.iterations,
            self.depth,
        )
        return move

    def make_move_random(self, board: Board) -> Move:
        free = board.get_free()
        if not free:
            raise NoLegalMoveError("No legal move available: the board is full")
        x, y = free[self.rng.randrange(len(free))]
        board.make_move(x, y, AI_PLAYER)
        return x, y

    def make_move_minimax(self, board: Board) -> Move:
        free = board.get_free()
        if not free:
            raise NoLegalMoveError("No legal move available: the board is full")

        move = self._winning_move(board)
        if move is None:
            move = self._best_move(board, free)
        board.make_move(move[0], move[1], AI_PLAYER)
        return move

    def minimax(self, board: Board, depth: int, maximizing: bool) -> int:
        """Score ``board`` for O: +1 win, -1 loss, 0 draw, assuming best play."""
        self.iterations += 1

        winner = board.has_won()
        if winner is AI_PLAYER:
            self.depth = depth
            return WIN
        if winner is HUMAN_PLAYER:
            self.depth = depth
            return LOSS
        if board.is_full():
            self.depth = depth
            return DRAW

        if maximizing:
            best = LOSS - 1
            for x, y in board.get_free():
                with board.trial(x, y, AI_PLAYER):
                    best = max(best, self.minimax(board, depth + 1, False))
        else:
            best = WIN + 1
            for x, y in board.get_free():
                with board.trial(x, y, HUMAN_PLAYER):
                    best = min(best, self.minimax(board, depth + 1, True))
        return best

    # ---- helpers ----

    def _plays_optimally(self) -> bool:
        p = self.optimal_probability
        if p >= 1.0:
            return True
        if p <= 0.0:
            return False
        return self.rng.random() < p

    def _best_move(self, board: Board, free: List[Move]) -> Move:
        best_move, best_score = free[0], LOSS - 1
        for x, y in free:
            with board.trial(x, y, AI_PLAYER):
                score = self.minimax(board, 0, False)
            # Strict comparison: the first of equally scored moves wins.
            if score > best_score:
                best_move, best_score = (x, y), score
        return best_move

    def _winning_move(self, board: Board) -> Optional[Move]:
        """First cell in reading order (``y`` outer) that completes a line for O.

        Keep this order rather than ``get_free()``: on ``_ _ O / X O X / _ O _``
        both (0, 2) and (1, 0) win at once, and (1, 0), the first winning cell
        row by row, is the move played there.
        """
        for y in range(SIZE):
            for x in range(SIZE):
                if board.get(x, y) is not Field.FREE:
                    continue
                with board.trial(x, y, AI_PLAYER):
                    if board.has_won() is AI_PLAYER:
                        return x, y
        return None
