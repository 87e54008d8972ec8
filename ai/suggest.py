# ai/suggest.py
"""
Optional move hints from a UCI engine (Stockfish) through python-chess.

The engine only sees the definite part of the position (FEN); whatever it
answers is checked against our own rules before it is shown. Any failure
(engine missing, crash, timeout, illegal suggestion) ends up as
HintUnavailable, never as a game error.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

import chess
import chess.engine

from qchess.config import Config
from qchess.game import GameState, legal_destinations
from qchess.moves import Move
from qchess.notation import move_from_uci, to_chess_board

logger = logging.getLogger(__name__)

_ENGINE_ERRORS = (chess.engine.EngineError, asyncio.TimeoutError, OSError)


class HintUnavailable(Exception):
    pass


class MoveSuggester:
    def __init__(
        self,
        path: str = Config.STOCKFISH_PATH,
        *,
        depth: int = Config.SUGGEST_DEPTH,
        movetime: float = Config.SUGGEST_MOVETIME,
        timeout: float = Config.SUGGEST_TIMEOUT,
        retries: int = Config.SUGGEST_RETRIES,
    ):
        self._path = path
        self._depth = depth
        self._movetime = movetime
        self._timeout = timeout
        self._retries = retries
        self._engine: Optional[chess.engine.SimpleEngine] = None

    def start(self) -> None:
        self.stop()
        self._engine = chess.engine.SimpleEngine.popen_uci(self._path, timeout=self._timeout)

    def stop(self) -> None:
        if self._engine is None:
            return
        try:
            self._engine.quit()
        except _ENGINE_ERRORS as exc:
            # engine sudah mati duluan
            logger.debug("engine quit failed: %s", exc)
        self._engine = None

    def __enter__(self) -> "MoveSuggester":
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    def _play_with_retry(self, board: chess.Board) -> chess.engine.PlayResult:
        """Run engine.play with one restart attempt on engine failure."""
        limit = chess.engine.Limit(depth=self._depth, time=self._movetime)
        last_error: Optional[BaseException] = None
        for attempt in range(self._retries + 1):
            try:
                if self._engine is None:
                    self.start()
                return self._engine.play(board, limit)
            except _ENGINE_ERRORS as exc:
                logger.warning("engine call failed (attempt %d): %s", attempt + 1, exc)
                last_error = exc
                self.stop()
        raise HintUnavailable("move engine unavailable") from last_error

    def suggest(self, state: GameState) -> Move:
        if state.is_over or state.pending is not None:
            raise HintUnavailable("no hint for this position")

        board = to_chess_board(state)
        if not board.is_valid():
            # contoh: raja hilang, atau bidak quantum bikin posisi aneh
            raise HintUnavailable(f"position cannot be analysed: {board.fen()}")

        result = self._play_with_retry(board)
        if result.move is None:
            raise HintUnavailable("engine returned no move")

        try:
            move = move_from_uci(result.move.uci())
        except ValueError as exc:
            logger.info("discarding malformed suggestion %s", result.move)
            raise HintUnavailable("malformed suggestion") from exc

        if move.to_sq not in legal_destinations(state, move.from_sq):
            logger.info("discarding illegal suggestion %s", result.move.uci())
            raise HintUnavailable(f"suggested move {result.move.uci()} is not legal here")
        return move
