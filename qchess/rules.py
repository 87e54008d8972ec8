# qchess/rules.py
from __future__ import annotations

from enum import Enum
from typing import Iterator, Optional, Set

import chess

from .board import Board
from .piece import Piece, WHITE, opponent
from .special import CASTLING_ROOKS, pawn_direction, pawn_start_rank, resolve_move

KNIGHT_OFFSETS = [(2, 1), (2, -1), (-2, 1), (-2, -1), (1, 2), (1, -2), (-1, 2), (-1, -2)]
KING_OFFSETS = [(df, dr) for df in (-1, 0, 1) for dr in (-1, 0, 1) if (df, dr) != (0, 0)]
DIAGONALS = [(1, 1), (1, -1), (-1, 1), (-1, -1)]
ORTHOGONALS = [(1, 0), (-1, 0), (0, 1), (0, -1)]


class Termination(str, Enum):
    NONE = "none"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"


def _on_board(f: int, r: int) -> bool:
    return 0 <= f < 8 and 0 <= r < 8


class Rules:
    @staticmethod
    def get_valid_moves(
        board: Board,
        piece: Piece,
        en_passant: Optional[int] = None,
        ignore_check: bool = False,
    ) -> Set[int]:
        """
        Legal destinations of a definite piece (unordered).
        Superposed pieces cannot move classically: they have to be measured first.
        With ignore_check the king-safety filter and castling are skipped; this is
        the pseudo-legal set used to compute attacks.
        """
        if piece.is_superposed:
            return set()

        sq = piece.square
        color = piece.color
        f, r = chess.square_file(sq), chess.square_rank(sq)
        moves: Set[int] = set()
        kind = piece.kind

        # Logic pawn
        if kind == "P":
            d = pawn_direction(color)
            nr = r + d
            if 0 <= nr < 8:
                # Forward 1
                one = chess.square(f, nr)
                if board.is_empty(one):
                    moves.add(one)
                    # Forward 2
                    if r == pawn_start_rank(color) and not piece.has_moved:
                        two = chess.square(f, r + 2 * d)
                        if board.is_empty(two):
                            moves.add(two)

                # Captures
                for df in (-1, 1):
                    nf = f + df
                    if not 0 <= nf < 8:
                        continue
                    target = chess.square(nf, nr)
                    colors = board.colors_at(target)
                    if colors and color not in colors:
                        moves.add(target)
                    elif target == en_passant and not colors:
                        victim = board.piece_at(chess.square(nf, r))
                        if victim is not None and victim.kind == "P" and victim.color != color:
                            moves.add(target)

        # Logic knight / king (fixed offsets)
        elif kind in ("N", "K"):
            offsets = KNIGHT_OFFSETS if kind == "N" else KING_OFFSETS
            for df, dr in offsets:
                nf, nr = f + df, r + dr
                if _on_board(nf, nr):
                    target = chess.square(nf, nr)
                    if color not in board.colors_at(target):
                        moves.add(target)
            if kind == "K" and not ignore_check:
                moves.update(Rules._castling_moves(board, piece))

        # Logic sliding pieces (B, R, Q)
        elif kind in ("B", "R", "Q"):
            directions = []
            if kind in ("B", "Q"):
                directions += DIAGONALS
            if kind in ("R", "Q"):
                directions += ORTHOGONALS

            for df, dr in directions:
                nf, nr = f + df, r + dr
                while _on_board(nf, nr):
                    target = chess.square(nf, nr)
                    colors = board.colors_at(target)
                    if not colors:
                        moves.add(target)
                    else:
                        if color not in colors:
                            moves.add(target)
                        break  # tabrak bidak
                    nf += df
                    nr += dr

        if ignore_check:
            return moves

        # Final filter: no destination may leave our own king in check
        return {
            to_sq for to_sq in moves
            if not Rules.is_in_check(Rules.simulate(board, piece, to_sq, en_passant), color)
        }

    @staticmethod
    def _castling_moves(board: Board, king: Piece) -> Iterator[int]:
        if king.has_moved:
            return
        color = king.color
        home = 0 if color == WHITE else 7
        if king.square != chess.square(4, home):
            return

        attacked = Rules.attacked_squares(board, opponent(color))
        if king.square in attacked:
            return

        for (king_from, king_to), (rook_from, _rook_to) in CASTLING_ROOKS.items():
            if king_from != king.square:
                continue
            rook = board.piece_at(rook_from)
            if rook is None or rook.kind != "R" or rook.color != color or rook.has_moved:
                continue
            lo, hi = sorted((king_from, rook_from))
            if any(not board.is_empty(s) for s in range(lo + 1, hi)):
                continue
            step = 1 if king_to > king_from else -1
            if any(s in attacked for s in range(king_from + step, king_to + step, step)):
                continue
            yield king_to

    @staticmethod
    def attacked_squares(board: Board, color: str) -> Set[int]:
        """Squares attacked by the definite pieces of `color`."""
        attacked: Set[int] = set()
        for p in board.pieces_of(color):
            if p.is_superposed:
                continue
            if p.kind == "P":
                # pawns attack diagonally whether or not something stands there
                f, r = chess.square_file(p.square), chess.square_rank(p.square)
                nr = r + pawn_direction(color)
                for nf in (f - 1, f + 1):
                    if _on_board(nf, nr):
                        attacked.add(chess.square(nf, nr))
            else:
                attacked |= Rules.get_valid_moves(board, p, ignore_check=True)
        return attacked

    @staticmethod
    def is_in_check(board: Board, color: str) -> bool:
        king = board.king_of(color)
        if king is None:
            return True  # king sudah ketangkap

        attacked = Rules.attacked_squares(board, opponent(color))
        return any(pos in attacked for pos in king.positions)

    @staticmethod
    def simulate(board: Board, piece: Piece, to_sq: int, en_passant: Optional[int] = None) -> Board:
        """Hypothetical board with the move applied (captures removed)."""
        return resolve_move(board, piece, to_sq, en_passant).board

    @staticmethod
    def has_legal_move(board: Board, color: str, en_passant: Optional[int] = None) -> bool:
        for p in board.pieces_of(color):
            if not p.is_superposed and Rules.get_valid_moves(board, p, en_passant):
                return True
        return False

    @staticmethod
    def terminal_status(board: Board, color: str, en_passant: Optional[int] = None) -> Termination:
        """Game-end check for the side to move (superposed pieces do not count)."""
        if Rules.has_legal_move(board, color, en_passant):
            return Termination.NONE
        if Rules.is_in_check(board, color):
            return Termination.CHECKMATE
        return Termination.STALEMATE
