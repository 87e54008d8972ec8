"""
Actions a player can submit, and the records kept in the move history.

Actions identify pieces by square (what a client clicks), except Entangle,
which may target either color and names the two pieces by id.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

import chess


@dataclass(frozen=True)
class Move:
    from_sq: int
    to_sq: int
    promotion: Optional[str] = None  # 'Q' | 'R' | 'B' | 'N', optional inline choice


@dataclass(frozen=True)
class Superpose:
    from_sq: int
    targets: Tuple[int, int]


@dataclass(frozen=True)
class Entangle:
    first: str
    second: str


@dataclass(frozen=True)
class Measure:
    square: int


@dataclass(frozen=True)
class Promote:
    kind: str


@dataclass(frozen=True)
class Teleport:
    from_sq: int
    to_sq: int


@dataclass(frozen=True)
class Swap:
    first_sq: int
    second_sq: int


@dataclass(frozen=True)
class Clone:
    kind: str
    to_sq: int


Action = Union[Move, Superpose, Entangle, Measure, Promote, Teleport, Swap, Clone]

# one-time special actions, keyed by name in the per-color usage flags
SPECIAL_ACTIONS = {Teleport: "teleport", Swap: "swap", Clone: "clone"}


class MoveKind(str, Enum):
    CLASSICAL = "classical"
    SUPERPOSITION = "superposition"
    ENTANGLEMENT = "entanglement"
    MEASUREMENT = "measurement"
    EN_PASSANT = "en_passant"
    CASTLE = "castle"
    PROMOTION = "promotion"
    TELEPORT = "teleport"
    SWAP = "swap"
    CLONE = "clone"

    @property
    def is_quantum(self) -> bool:
        return self in (MoveKind.SUPERPOSITION, MoveKind.ENTANGLEMENT, MoveKind.MEASUREMENT)


@dataclass(frozen=True)
class Record:
    """One entry of the move history. Only the fields of its kind are set."""
    kind: MoveKind
    color: str
    piece: str                          # piece kind letter
    pid: str
    from_sq: Optional[int] = None
    to_sq: Optional[int] = None
    destinations: Tuple[int, ...] = field(default_factory=tuple)
    partner: Optional[str] = None       # entanglement / swap partner, failed capture target
    collapsed_to: Optional[int] = None
    promotion: Optional[str] = None
    captured: Optional[str] = None

    def describe(self) -> str:
        """Move-history line, e.g. 'w N: g1->f3' or 'w Q SUPER d1->d4&h5'."""
        name = chess.square_name
        head = f"{self.color} {self.piece}"
        if self.kind is MoveKind.SUPERPOSITION:
            return f"{head} SUPER {name(self.from_sq)}->{'&'.join(name(s) for s in self.destinations)}"
        if self.kind is MoveKind.ENTANGLEMENT:
            return f"{head} ENTANGLE {self.pid}<->{self.partner}"
        if self.kind is MoveKind.MEASUREMENT and self.partner:
            # capture attempt on a superposed piece that landed elsewhere
            return (
                f"{head}: {name(self.from_sq)}->{name(self.to_sq)} x FAILED"
                f" ({self.partner} -> {name(self.collapsed_to)})"
            )
        if self.kind is MoveKind.MEASUREMENT:
            return f"{head} MEASURE {self.pid} -> {name(self.collapsed_to)}"
        if self.kind is MoveKind.SWAP:
            return f"{head} SWAP {name(self.from_sq)}<->{name(self.to_sq)}"
        if self.kind is MoveKind.CLONE:
            return f"{head} CLONE @{name(self.to_sq)}"
        if self.kind is MoveKind.TELEPORT:
            return f"{head} TELEPORT {name(self.from_sq)}->{name(self.to_sq)}"

        text = f"{head}: {name(self.from_sq)}->{name(self.to_sq)}"
        if self.kind is MoveKind.CASTLE:
            text += " O-O" if chess.square_file(self.to_sq) == 6 else " O-O-O"
        if self.captured:
            text += " x"
        if self.kind is MoveKind.EN_PASSANT:
            text += " e.p."
        if self.promotion:
            text += f"={self.promotion}"
        return text
