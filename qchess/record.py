"""
Finished-game summary handed to the persistence collaborator.

Counters follow the stats kept for each stored game: total / classical /
quantum / special moves, plus superpositions, entanglements and
measurements, and the same split per color.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, Optional, Protocol, Sequence

from .moves import MoveKind, Record
from .piece import BLACK, WHITE


@dataclass
class GameSummary:
    result: str = "*"
    winner: Optional[str] = None
    total_moves: int = 0
    classical_moves: int = 0
    quantum_moves: int = 0
    superpositions: int = 0
    entanglements: int = 0
    measurements: int = 0
    specials: int = 0
    per_color: Dict[str, Dict[str, int]] = field(
        default_factory=lambda: {c: {"classical": 0, "quantum": 0, "special": 0} for c in (WHITE, BLACK)}
    )

    def to_dict(self) -> dict:
        return asdict(self)


_SPECIAL_KINDS = (MoveKind.TELEPORT, MoveKind.SWAP, MoveKind.CLONE)


def summarize(history: Sequence[Record], result: str = "*", winner: Optional[str] = None) -> GameSummary:
    summary = GameSummary(result=result, winner=winner)
    for record in history:
        summary.total_moves += 1
        if record.kind.is_quantum:
            summary.quantum_moves += 1
            bucket = "quantum"
        elif record.kind in _SPECIAL_KINDS:
            summary.specials += 1
            bucket = "special"
        else:
            summary.classical_moves += 1
            bucket = "classical"
        summary.per_color[record.color][bucket] += 1

        if record.kind is MoveKind.SUPERPOSITION:
            summary.superpositions += 1
        elif record.kind is MoveKind.ENTANGLEMENT:
            summary.entanglements += 1
        elif record.kind is MoveKind.MEASUREMENT:
            summary.measurements += 1
    return summary


class GameStore(Protocol):
    """Persistence collaborator: receives the move list and summary of a finished game."""

    def save(self, history: Sequence[Record], summary: GameSummary) -> None:
        ...
