# qchess/piece.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import FrozenSet, Optional, Tuple

import chess  # python-chess

WHITE = "w"
BLACK = "b"
KINDS = ("P", "N", "B", "R", "Q", "K")


def opponent(color: str) -> str:
    return BLACK if color == WHITE else WHITE


@dataclass(frozen=True)
class Piece:
    """Bidak quantum chess: satu posisi (klasik) atau dua posisi (superposisi)."""
    pid: str
    kind: str    # 'K', 'Q', dst
    color: str   # 'w', 'b'
    positions: Tuple[int, ...]  # python-chess square index
    entangled_with: FrozenSet[str] = field(default_factory=frozenset)
    has_moved: bool = False

    @property
    def code(self) -> str:
        return f"{self.color}{self.kind}"

    @property
    def is_superposed(self) -> bool:
        return len(self.positions) > 1

    @property
    def is_entangled(self) -> bool:
        return bool(self.entangled_with)

    @property
    def square(self) -> Optional[int]:
        """Square of a definite piece, None while superposed."""
        if self.is_superposed:
            return None
        return self.positions[0]

    def clone(self, **changes) -> "Piece":
        """Copy with changes (pieces are shared between board snapshots)."""
        return replace(self, **changes)

    def moved_to(self, square: int) -> "Piece":
        return replace(self, positions=(square,), has_moved=True)

    def collapsed_to(self, square: int) -> "Piece":
        return replace(self, positions=(square,), entangled_with=frozenset())

    def describe(self) -> str:
        squares = "&".join(chess.square_name(sq) for sq in self.positions)
        return f"{self.code}@{squares}"
