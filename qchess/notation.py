"""
Conversion to and from standard chess notation, backed by python-chess.

- FEN export covers the definite part of the position only: superposed
  pieces have no classical square, so they are left out. This is what the
  hint engine gets to see.
- FEN import builds a GameState (all pieces definite), handy for setting up
  positions.
- UCI strings map to classical Move actions.
"""
from __future__ import annotations

from typing import Dict, Tuple

import chess

from .board import Board
from .game import GameState
from .moves import Move
from .piece import BLACK, WHITE, Piece
from .special import CASTLING_ROOKS, pawn_start_rank


def _castling_rights(board: Board) -> chess.Bitboard:
    rights = chess.BB_EMPTY
    for (king_from, _king_to), (rook_from, _rook_to) in CASTLING_ROOKS.items():
        king = board.piece_at(king_from)
        rook = board.piece_at(rook_from)
        if king is None or rook is None or king.kind != "K" or rook.kind != "R":
            continue
        if king.color != rook.color or king.has_moved or rook.has_moved:
            continue
        if chess.square_rank(king_from) != (0 if king.color == WHITE else 7):
            continue
        rights |= chess.BB_SQUARES[rook_from]
    return rights


def to_chess_board(state: GameState) -> chess.Board:
    cb = chess.Board(None)
    for p in state.board:
        if p.is_superposed:
            continue
        piece_type = chess.PIECE_SYMBOLS.index(p.kind.lower())
        cb.set_piece_at(p.square, chess.Piece(piece_type, p.color == WHITE))
    cb.turn = chess.WHITE if state.turn == WHITE else chess.BLACK
    cb.castling_rights = _castling_rights(state.board)
    cb.ep_square = state.en_passant
    cb.fullmove_number = len(state.history) // 2 + 1
    return cb


def state_to_fen(state: GameState) -> str:
    return to_chess_board(state).fen()


def state_from_fen(fen: str) -> GameState:
    """Build a GameState from FEN. Raises ValueError on malformed input."""
    cb = chess.Board(fen)
    counters: Dict[Tuple[str, str], int] = {}
    pieces = []
    for sq, cp in sorted(cb.piece_map().items()):
        color = WHITE if cp.color == chess.WHITE else BLACK
        kind = cp.symbol().upper()
        n = counters.get((color, kind), 0)
        counters[(color, kind)] = n + 1

        if kind == "P":
            has_moved = chess.square_rank(sq) != pawn_start_rank(color)
        elif kind == "K":
            has_moved = not cb.has_castling_rights(cp.color)
        elif kind == "R":
            has_moved = not cb.castling_rights & chess.BB_SQUARES[sq]
        else:
            has_moved = False
        pieces.append(Piece(f"{color}_{kind.lower()}{n}", kind, color, (sq,), has_moved=has_moved))

    return GameState(
        board=Board(pieces),
        turn=WHITE if cb.turn == chess.WHITE else BLACK,
        en_passant=cb.ep_square,
    )


def move_from_uci(uci: str) -> Move:
    """'e7e8q' -> Move(e7, e8, 'Q'). Raises ValueError for anything else."""
    mv = chess.Move.from_uci(uci.strip())
    if not mv:
        raise ValueError(f"null move {uci!r} is not playable")
    promotion = chess.piece_symbol(mv.promotion).upper() if mv.promotion else None
    return Move(mv.from_square, mv.to_square, promotion)


def move_to_uci(move: Move) -> str:
    promotion = chess.PIECE_SYMBOLS.index(move.promotion.lower()) if move.promotion else None
    return chess.Move(move.from_sq, move.to_sq, promotion).uci()
