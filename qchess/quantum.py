# qchess/quantum.py
"""
Quantum state engine:
- superposition: a definite piece is split across two empty squares
- entanglement: two superposed pieces share their collapse fate
- measurement / decay: a superposed piece collapses to one of its squares

Collapse is correlated across entanglement: when a piece collapses to its
i-th position, every entangled partner collapses to its own i-th position
(transitively), and all of them drop their links.
"""
from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence, Tuple

import chess

from .board import Board
from .config import Config
from .errors import IllegalDestination, InvalidEntanglementTarget, InvalidSelection
from .events import Collapsed
from .piece import Piece
from .rules import Rules

logger = logging.getLogger(__name__)


def superpose(board: Board, piece: Piece, targets: Sequence[int]) -> Board:
    """Split satu bidak jadi 2 posisi (50% + 50%)."""
    if piece.is_superposed:
        raise InvalidSelection("piece is already superposed")
    if piece.kind == "K":
        raise InvalidSelection("kings cannot enter superposition")
    if len(targets) != Config.MAX_POSITIONS or len(set(targets)) != len(targets):
        raise IllegalDestination("superposition needs two distinct squares")
    for t in targets:
        if not 0 <= t < 64:
            raise IllegalDestination(f"square {t} is off the board")
        if not board.is_empty(t):
            raise IllegalDestination(f"{chess.square_name(t)} is not empty")
        if piece.kind == "P" and chess.square_rank(t) in (0, 7):
            raise IllegalDestination("pawns cannot stand on the first or last rank")

    new_board = board.with_piece(piece.clone(positions=tuple(targets), has_moved=True))
    if Rules.is_in_check(new_board, piece.color):
        raise IllegalDestination("superposition would leave the king in check")

    logger.debug("superposed %s -> %s", piece.pid, [chess.square_name(t) for t in targets])
    return new_board


def entangle(board: Board, first: Piece, second: Piece) -> Board:
    if first.pid == second.pid:
        raise InvalidEntanglementTarget("cannot entangle a piece with itself")
    for p in (first, second):
        if not p.is_superposed:
            raise InvalidEntanglementTarget(f"{p.pid} is not superposed")
    if second.pid in first.entangled_with:
        raise InvalidEntanglementTarget(f"{first.pid} and {second.pid} are already entangled")

    logger.debug("entangled %s <-> %s", first.pid, second.pid)
    return board.with_piece(
        first.clone(entangled_with=first.entangled_with | {second.pid}),
        second.clone(entangled_with=second.entangled_with | {first.pid}),
    )


def collapse(
    board: Board,
    piece: Piece,
    index: Optional[int],
    rng: random.Random,
    cause: str,
) -> Tuple[Board, List[Collapsed]]:
    """
    Collapse `piece` to positions[index] (random if index is None) and propagate
    to everything entangled with it.
    """
    events: List[Collapsed] = []
    queue: List[Tuple[str, Optional[int], str]] = [(piece.pid, index, cause)]
    done = set()

    while queue:
        pid, idx, why = queue.pop(0)
        current = board.get(pid)
        if pid in done or current is None or not current.is_superposed:
            continue
        done.add(pid)

        if idx is None or not 0 <= idx < len(current.positions):
            idx = rng.randrange(len(current.positions))
        square = current.positions[idx]

        board = board.with_piece(current.collapsed_to(square))
        for other_id in sorted(current.entangled_with):
            other = board.get(other_id)
            if other is None:
                continue
            board = board.with_piece(other.clone(entangled_with=other.entangled_with - {pid}))
            queue.append((other_id, idx, "entanglement"))

        logger.debug("collapsed %s -> %s (%s)", pid, chess.square_name(square), why)
        events.append(Collapsed(pid, square, why))

    return board, events


def measure(board: Board, piece: Piece, rng: random.Random) -> Tuple[Board, List[Collapsed]]:
    if not piece.is_superposed:
        raise InvalidSelection("only superposed pieces can be measured")
    return collapse(board, piece, rng.randrange(len(piece.positions)), rng, "measure")


def decay(
    board: Board,
    rng: random.Random,
    probability: float = Config.DECAY_PROBABILITY,
) -> Tuple[Board, List[Collapsed]]:
    """Passive decay: every superposed piece collapses with `probability`."""
    events: List[Collapsed] = []
    for p in board.superposed_pieces():
        current = board.get(p.pid)
        if current is None or not current.is_superposed:
            continue  # sudah collapse lewat entanglement
        if rng.random() < probability:
            board, collapsed = collapse(board, current, rng.randrange(len(current.positions)), rng, "decay")
            events.extend(collapsed)
    return board, events
