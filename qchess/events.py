from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Moved:
    pid: str
    from_sq: int
    to_sq: int


@dataclass(frozen=True)
class Captured:
    pid: str
    square: int


@dataclass(frozen=True)
class CaptureFailed:
    """Attacked a superposed piece that collapsed somewhere else."""
    attacker: str
    target: str
    square: int


@dataclass(frozen=True)
class Castled:
    king: str
    rook: str
    rook_from: int
    rook_to: int


@dataclass(frozen=True)
class PromotionPending:
    pid: str
    from_sq: int
    to_sq: int


@dataclass(frozen=True)
class Promoted:
    pid: str
    kind: str


@dataclass(frozen=True)
class Superposed:
    pid: str
    positions: Tuple[int, ...]


@dataclass(frozen=True)
class Entangled:
    first: str
    second: str


@dataclass(frozen=True)
class Collapsed:
    pid: str
    square: int
    cause: str  # 'measure' | 'decay' | 'entanglement' | 'capture'


@dataclass(frozen=True)
class Teleported:
    pid: str
    from_sq: int
    to_sq: int


@dataclass(frozen=True)
class Swapped:
    first: str
    second: str


@dataclass(frozen=True)
class Cloned:
    pid: str
    kind: str
    square: int


@dataclass(frozen=True)
class TurnPassed:
    turn: str


@dataclass(frozen=True)
class Check:
    color: str


@dataclass(frozen=True)
class GameOver:
    termination: str
    winner: Optional[str]
