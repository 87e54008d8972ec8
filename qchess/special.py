# qchess/special.py
"""
Special-move resolver: castling, en passant and promotion.

`resolve_move` applies one classical move to a board snapshot and is shared by
the real move path and the king-safety simulation in Rules.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import chess

from .board import Board
from .moves import MoveKind
from .piece import WHITE, Piece

# (king_from, king_to) -> (rook_from, rook_to)
CASTLING_ROOKS = {
    (chess.E1, chess.G1): (chess.H1, chess.F1),
    (chess.E1, chess.C1): (chess.A1, chess.D1),
    (chess.E8, chess.G8): (chess.H8, chess.F8),
    (chess.E8, chess.C8): (chess.A8, chess.D8),
}


def pawn_direction(color: str) -> int:
    return 1 if color == WHITE else -1


def pawn_start_rank(color: str) -> int:
    return 1 if color == WHITE else 6


def promotion_rank(color: str) -> int:
    return 7 if color == WHITE else 0


def is_promotion(piece: Piece, to_sq: int) -> bool:
    return piece.kind == "P" and chess.square_rank(to_sq) == promotion_rank(piece.color)


def is_castle(piece: Piece, from_sq: int, to_sq: int) -> bool:
    return piece.kind == "K" and (from_sq, to_sq) in CASTLING_ROOKS


def castle_rook_squares(king_from: int, king_to: int) -> Optional[Tuple[int, int]]:
    return CASTLING_ROOKS.get((king_from, king_to))


def en_passant_victim_square(from_sq: int, to_sq: int) -> int:
    """Victim pawn: file of the destination, rank of the origin."""
    return chess.square(chess.square_file(to_sq), chess.square_rank(from_sq))


def is_en_passant(piece: Piece, from_sq: int, to_sq: int, en_passant: Optional[int]) -> bool:
    return (
        piece.kind == "P"
        and en_passant is not None
        and to_sq == en_passant
        and chess.square_file(from_sq) != chess.square_file(to_sq)
    )


@dataclass(frozen=True)
class Resolution:
    board: Board
    kind: MoveKind
    captured: Optional[Piece] = None
    rook: Optional[Tuple[str, int, int]] = None  # (rook id, from, to)


def _remove_at(board: Board, square: int, mover: Piece) -> Tuple[Board, Optional[Piece]]:
    for target in board.pieces_at(square):
        if target.pid == mover.pid:
            continue
        # superposed target only shows up in simulation (real captures measure first):
        # judge the move as if the capture succeeds
        return board.without(target.pid), target
    return board, None


def resolve_move(
    board: Board,
    piece: Piece,
    to_sq: int,
    en_passant: Optional[int] = None,
    promotion: Optional[str] = None,
) -> Resolution:
    """Apply a classical move of a definite piece, with its special side effects."""
    from_sq = piece.square

    if is_castle(piece, from_sq, to_sq):
        rook_from, rook_to = castle_rook_squares(from_sq, to_sq)
        rook = board.piece_at(rook_from)
        new_board = board.with_piece(piece.moved_to(to_sq), rook.moved_to(rook_to))
        return Resolution(new_board, MoveKind.CASTLE, rook=(rook.pid, rook_from, rook_to))

    if is_en_passant(piece, from_sq, to_sq, en_passant) and board.is_empty(to_sq):
        victim_sq = en_passant_victim_square(from_sq, to_sq)
        new_board, captured = _remove_at(board, victim_sq, piece)
        return Resolution(new_board.with_piece(piece.moved_to(to_sq)), MoveKind.EN_PASSANT, captured)

    new_board, captured = _remove_at(board, to_sq, piece)
    moved = piece.moved_to(to_sq)
    kind = MoveKind.CLASSICAL
    if promotion is not None and is_promotion(piece, to_sq):
        moved = moved.clone(kind=promotion)
        kind = MoveKind.PROMOTION
    return Resolution(new_board.with_piece(moved), kind, captured)
