"""
Board snapshot for quantum chess.

- A board is the set of live pieces keyed by id; squares are python-chess
  square indices (a1 = 0, h8 = 63).
- Snapshots are never mutated in place: every update returns a new Board, so
  rules can simulate "what-if" positions freely.
"""
from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

import chess

from .piece import BLACK, WHITE, Piece

RC = Tuple[int, int]


def rc_to_square(r: int, c: int) -> chess.Square:
    """
    Convert internal (r,c) with r=0 at top (rank 8) into python-chess square index.
    python-chess: square(file_index, rank_index) where rank_index=0 is rank 1.
    """
    return chess.square(c, 7 - r)


def square_to_rc(sq: chess.Square) -> RC:
    """
    Convert python-chess square index into internal (r,c) with r=0 at top (rank 8).
    """
    return (7 - chess.square_rank(sq), chess.square_file(sq))


_BACK_RANK = ("R", "N", "B", "Q", "K", "B", "N", "R")
_BACK_RANK_IDS = ("r0", "n0", "b0", "q", "k", "b1", "n1", "r1")


class Board:
    def __init__(self, pieces: Iterable[Piece] = ()):
        self._pieces: Dict[str, Piece] = {p.pid: p for p in pieces}
        self._occ: Optional[Dict[int, List[Piece]]] = None  # square -> pieces, built lazily

    @classmethod
    def initial(cls) -> "Board":
        board = cls()
        board._init_setup()
        return board

    def _init_setup(self):
        for f, (kind, suffix) in enumerate(zip(_BACK_RANK, _BACK_RANK_IDS)):
            for color, back, pawns in ((WHITE, 0, 1), (BLACK, 7, 6)):
                pid = f"{color}_{suffix}"
                self._pieces[pid] = Piece(pid, kind, color, (chess.square(f, back),))
                pid = f"{color}_p{f}"
                self._pieces[pid] = Piece(pid, "P", color, (chess.square(f, pawns),))

    # --- basic helpers ---
    def __iter__(self) -> Iterator[Piece]:
        return iter(self._pieces.values())

    def __len__(self) -> int:
        return len(self._pieces)

    def __contains__(self, pid: str) -> bool:
        return pid in self._pieces

    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._pieces == other._pieces

    def __repr__(self) -> str:
        return f"Board({', '.join(p.describe() for p in self)})"

    def get(self, pid: str) -> Optional[Piece]:
        return self._pieces.get(pid)

    def _occupancy(self) -> Dict[int, List[Piece]]:
        if self._occ is None:
            occ: Dict[int, List[Piece]] = {}
            for p in self._pieces.values():
                for sq in p.positions:
                    occ.setdefault(sq, []).append(p)
            self._occ = occ
        return self._occ

    def pieces_at(self, square: int) -> List[Piece]:
        """All pieces listing the square (bisa >1 kalau superposisi)."""
        return list(self._occupancy().get(square, ()))

    def piece_at(self, square: int) -> Optional[Piece]:
        """The definite piece standing on the square, if any."""
        for p in self._occupancy().get(square, ()):
            if not p.is_superposed:
                return p
        return None

    def is_empty(self, square: int) -> bool:
        return square not in self._occupancy()

    def colors_at(self, square: int) -> Set[str]:
        return {p.color for p in self._occupancy().get(square, ())}

    def is_superposed(self, square: int) -> bool:
        return any(p.is_superposed for p in self.pieces_at(square))

    def is_entangled(self, square: int) -> bool:
        return any(p.is_entangled for p in self.pieces_at(square))

    def pieces_of(self, color: str) -> List[Piece]:
        return [p for p in self._pieces.values() if p.color == color]

    def superposed_pieces(self) -> List[Piece]:
        return sorted((p for p in self._pieces.values() if p.is_superposed), key=lambda p: p.pid)

    def king_of(self, color: str) -> Optional[Piece]:
        for p in self._pieces.values():
            if p.kind == "K" and p.color == color:
                return p
        return None

    # --- snapshot updates (return new boards) ---
    def with_piece(self, *pieces: Piece) -> "Board":
        new_board = Board(self._pieces.values())
        for p in pieces:
            new_board._pieces[p.pid] = p
        return new_board

    def without(self, *pids: str) -> "Board":
        return Board(p for p in self._pieces.values() if p.pid not in pids)
