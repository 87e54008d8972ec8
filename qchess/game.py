"""
Action application and turn state.

`apply_action(state, action, rng)` is the single entry point of the rules
engine: it validates one action against an immutable GameState and returns the
next state plus the events that happened. Rejected actions raise an
ActionRejected subclass and leave the state untouched.

`QuantumGame` wraps that function for interactive clients (seeded RNG,
human readable move log, optional seat check and persistence hook).
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, FrozenSet, List, Optional, Protocol, Set, Tuple, Type

import chess

from . import quantum
from .board import Board
from .config import Config
from .errors import (
    ActionAlreadyUsed,
    ActionRejected,
    AmbiguousPendingPromotion,
    IllegalDestination,
    InvalidEntanglementTarget,
    InvalidSelection,
)
from .events import (
    CaptureFailed,
    Captured,
    Castled,
    Check,
    Cloned,
    Collapsed,
    Entangled,
    GameOver,
    Moved,
    Promoted,
    PromotionPending,
    Superposed,
    Swapped,
    Teleported,
    TurnPassed,
)
from .moves import (
    SPECIAL_ACTIONS,
    Action,
    Clone,
    Entangle,
    Measure,
    Move,
    MoveKind,
    Promote,
    Record,
    Superpose,
    Swap,
    Teleport,
)
from .piece import BLACK, WHITE, Piece, opponent
from .record import GameStore, GameSummary, summarize
from .rules import Rules, Termination
from .special import is_promotion, promotion_rank, resolve_move

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingPromotion:
    pid: str
    from_sq: int
    to_sq: int


@dataclass(frozen=True)
class GameState:
    board: Board
    turn: str = WHITE
    en_passant: Optional[int] = None
    pending: Optional[PendingPromotion] = None
    used: FrozenSet[Tuple[str, str]] = field(default_factory=frozenset)  # (color, action name)
    history: Tuple[Record, ...] = ()
    termination: Termination = Termination.NONE
    winner: Optional[str] = None

    @property
    def is_over(self) -> bool:
        return self.termination is not Termination.NONE

    def has_used(self, color: str, name: str) -> bool:
        return (color, name) in self.used


@dataclass(frozen=True)
class Outcome:
    state: GameState
    events: Tuple[object, ...]


def initial_state() -> GameState:
    return GameState(board=Board.initial())


# --- helpers ---
def _check_square(square: int, error: Type[ActionRejected]) -> None:
    if not isinstance(square, int) or not 0 <= square < 64:
        raise error(f"square {square!r} is off the board")


def _own_definite_piece(state: GameState, square: int) -> Piece:
    _check_square(square, InvalidSelection)
    piece = state.board.piece_at(square)
    if piece is None:
        if state.board.is_superposed(square):
            raise InvalidSelection("superposed pieces must be measured before they can move")
        raise InvalidSelection(f"no piece on {chess.square_name(square)}")
    if piece.color != state.turn:
        raise InvalidSelection("wrong side to move")
    return piece


def _ensure_king_safe(board: Board, color: str) -> None:
    if Rules.is_in_check(board, color):
        raise IllegalDestination("action would leave the king in check")


def _ensure_empty(board: Board, square: int) -> None:
    _check_square(square, IllegalDestination)
    if not board.is_empty(square):
        raise IllegalDestination(f"{chess.square_name(square)} is not empty")


def _ensure_pawn_rank(kind: str, square: int) -> None:
    if kind == "P" and chess.square_rank(square) in (promotion_rank(WHITE), promotion_rank(BLACK)):
        raise IllegalDestination("pawns cannot stand on the first or last rank")


def _finish_turn(
    state: GameState,
    board: Board,
    record: Record,
    events: List[object],
    rng: random.Random,
    en_passant: Optional[int] = None,
    used: Optional[str] = None,
) -> Outcome:
    """Pass the turn, run passive decay, then check the new side to move."""
    turn = opponent(state.turn)
    events.append(TurnPassed(turn))

    board, decayed = quantum.decay(board, rng)
    events.extend(decayed)

    status = Rules.terminal_status(board, turn, en_passant)
    winner = None
    if Rules.is_in_check(board, turn):
        events.append(Check(turn))
    if status is Termination.CHECKMATE:
        winner = state.turn
    if status is not Termination.NONE:
        events.append(GameOver(status.value, winner))
        logger.info("game over: %s (winner=%s)", status.value, winner)

    new_used = state.used | {(state.turn, used)} if used else state.used
    new_state = replace(
        state,
        board=board,
        turn=turn,
        en_passant=en_passant,
        pending=None,
        used=new_used,
        history=state.history + (record,),
        termination=status,
        winner=winner,
    )
    return Outcome(new_state, tuple(events))


# --- classical moves ---
def _execute_move(
    state: GameState,
    piece: Piece,
    to_sq: int,
    promotion: Optional[str],
    rng: random.Random,
) -> Outcome:
    board = state.board
    color = state.turn
    from_sq = piece.square
    events: List[object] = []

    # Target quantum: diukur dulu, capture bisa gagal
    for target in board.pieces_at(to_sq):
        if not target.is_superposed:
            continue
        board, collapsed = quantum.collapse(board, target, None, rng, "capture")
        events.extend(collapsed)
        if board.piece_at(to_sq) is None:
            events.append(CaptureFailed(piece.pid, target.pid, to_sq))
            landed = next(e.square for e in collapsed if e.pid == target.pid)
            record = Record(
                MoveKind.MEASUREMENT, color, piece.kind, piece.pid,
                from_sq=from_sq, to_sq=to_sq, partner=target.pid, collapsed_to=landed,
            )
            return _finish_turn(state, board, record, events, rng)
        break

    res = resolve_move(board, board.get(piece.pid), to_sq, state.en_passant, promotion)
    events.append(Moved(piece.pid, from_sq, to_sq))
    if res.captured is not None:
        events.append(Captured(res.captured.pid, res.captured.positions[0]))
    if res.rook is not None:
        events.append(Castled(piece.pid, *res.rook))
    if res.kind is MoveKind.PROMOTION:
        events.append(Promoted(piece.pid, promotion))

    en_passant = None
    if piece.kind == "P" and abs(chess.square_rank(to_sq) - chess.square_rank(from_sq)) == 2:
        en_passant = (from_sq + to_sq) // 2

    record = Record(
        res.kind, color, piece.kind, piece.pid,
        from_sq=from_sq,
        to_sq=to_sq,
        promotion=promotion if res.kind is MoveKind.PROMOTION else None,
        captured=res.captured.pid if res.captured is not None else None,
    )
    return _finish_turn(state, res.board, record, events, rng, en_passant=en_passant)


def _apply_move(state: GameState, action: Move, rng: random.Random) -> Outcome:
    piece = _own_definite_piece(state, action.from_sq)
    _check_square(action.to_sq, IllegalDestination)
    if action.to_sq not in Rules.get_valid_moves(state.board, piece, state.en_passant):
        raise IllegalDestination(
            f"{chess.square_name(action.from_sq)}->{chess.square_name(action.to_sq)} is not legal"
        )

    if is_promotion(piece, action.to_sq):
        if action.promotion is None:
            # tunggu pilihan promosi; turn belum pindah
            pending = PendingPromotion(piece.pid, action.from_sq, action.to_sq)
            return Outcome(
                replace(state, pending=pending),
                (PromotionPending(piece.pid, action.from_sq, action.to_sq),),
            )
        if action.promotion not in Config.PROMOTION_KINDS:
            raise InvalidSelection(f"cannot promote to {action.promotion!r}")
        return _execute_move(state, piece, action.to_sq, action.promotion, rng)

    return _execute_move(state, piece, action.to_sq, None, rng)


def _apply_promote(state: GameState, action: Promote, rng: random.Random) -> Outcome:
    if action.kind not in Config.PROMOTION_KINDS:
        raise InvalidSelection(f"cannot promote to {action.kind!r}")
    pending = state.pending
    piece = state.board.get(pending.pid)
    return _execute_move(replace(state, pending=None), piece, pending.to_sq, action.kind, rng)


# --- quantum actions ---
def _apply_superpose(state: GameState, action: Superpose, rng: random.Random) -> Outcome:
    piece = _own_definite_piece(state, action.from_sq)
    for t in action.targets:
        _check_square(t, IllegalDestination)
    board = quantum.superpose(state.board, piece, action.targets)
    record = Record(
        MoveKind.SUPERPOSITION, state.turn, piece.kind, piece.pid,
        from_sq=action.from_sq,
        destinations=tuple(action.targets),
    )
    return _finish_turn(state, board, record, [Superposed(piece.pid, tuple(action.targets))], rng)


def _apply_entangle(state: GameState, action: Entangle, rng: random.Random) -> Outcome:
    first = state.board.get(action.first)
    second = state.board.get(action.second)
    if first is None or second is None:
        raise InvalidEntanglementTarget("unknown piece")
    board = quantum.entangle(state.board, first, second)
    record = Record(MoveKind.ENTANGLEMENT, state.turn, first.kind, first.pid, partner=second.pid)
    return _finish_turn(state, board, record, [Entangled(first.pid, second.pid)], rng)


def _apply_measure(state: GameState, action: Measure, rng: random.Random) -> Outcome:
    _check_square(action.square, InvalidSelection)
    candidates = [
        p for p in state.board.pieces_at(action.square)
        if p.is_superposed and p.color == state.turn
    ]
    if not candidates:
        raise InvalidSelection(f"no superposed piece of yours on {chess.square_name(action.square)}")
    piece = candidates[0]
    board, collapsed = quantum.measure(state.board, piece, rng)
    landed = next(e.square for e in collapsed if e.pid == piece.pid)
    record = Record(MoveKind.MEASUREMENT, state.turn, piece.kind, piece.pid, collapsed_to=landed)
    return _finish_turn(state, board, record, list(collapsed), rng)


# --- once-per-game special actions ---
def _apply_teleport(state: GameState, action: Teleport, rng: random.Random) -> Outcome:
    piece = _own_definite_piece(state, action.from_sq)
    _ensure_empty(state.board, action.to_sq)
    _ensure_pawn_rank(piece.kind, action.to_sq)
    board = state.board.with_piece(piece.moved_to(action.to_sq))
    _ensure_king_safe(board, state.turn)
    record = Record(
        MoveKind.TELEPORT, state.turn, piece.kind, piece.pid,
        from_sq=action.from_sq, to_sq=action.to_sq,
    )
    events = [Teleported(piece.pid, action.from_sq, action.to_sq)]
    return _finish_turn(state, board, record, events, rng, used="teleport")


def _apply_swap(state: GameState, action: Swap, rng: random.Random) -> Outcome:
    first = _own_definite_piece(state, action.first_sq)
    second = _own_definite_piece(state, action.second_sq)
    if first.pid == second.pid:
        raise InvalidSelection("swap needs two different pieces")
    _ensure_pawn_rank(first.kind, action.second_sq)
    _ensure_pawn_rank(second.kind, action.first_sq)
    board = state.board.with_piece(first.moved_to(action.second_sq), second.moved_to(action.first_sq))
    _ensure_king_safe(board, state.turn)
    record = Record(
        MoveKind.SWAP, state.turn, first.kind, first.pid,
        from_sq=action.first_sq, to_sq=action.second_sq, partner=second.pid,
    )
    return _finish_turn(state, board, record, [Swapped(first.pid, second.pid)], rng, used="swap")


def _clone_id(board: Board, color: str, kind: str) -> str:
    n = 0
    while f"{color}_{kind.lower()}c{n}" in board:
        n += 1
    return f"{color}_{kind.lower()}c{n}"


def _apply_clone(state: GameState, action: Clone, rng: random.Random) -> Outcome:
    if action.kind not in Config.CLONE_KINDS:
        raise InvalidSelection(f"cannot clone a {action.kind!r}")
    _ensure_empty(state.board, action.to_sq)
    _ensure_pawn_rank(action.kind, action.to_sq)
    pid = _clone_id(state.board, state.turn, action.kind)
    # hasMoved=True: clone tidak boleh double-step / castling
    board = state.board.with_piece(Piece(pid, action.kind, state.turn, (action.to_sq,), has_moved=True))
    _ensure_king_safe(board, state.turn)
    record = Record(MoveKind.CLONE, state.turn, action.kind, pid, to_sq=action.to_sq)
    return _finish_turn(state, board, record, [Cloned(pid, action.kind, action.to_sq)], rng, used="clone")


_HANDLERS: Dict[type, Callable[[GameState, object, random.Random], Outcome]] = {
    Move: _apply_move,
    Promote: _apply_promote,
    Superpose: _apply_superpose,
    Entangle: _apply_entangle,
    Measure: _apply_measure,
    Teleport: _apply_teleport,
    Swap: _apply_swap,
    Clone: _apply_clone,
}


def apply_action(state: GameState, action: Action, rng: random.Random) -> Outcome:
    """Validate and apply one action. Raises ActionRejected on any rule violation."""
    if state.is_over:
        raise InvalidSelection("the game is over")
    if state.pending is not None and not isinstance(action, Promote):
        raise AmbiguousPendingPromotion("choose a promotion piece first")
    if isinstance(action, Promote) and state.pending is None:
        raise InvalidSelection("no promotion is pending")

    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise InvalidSelection(f"unknown action {action!r}")

    special = SPECIAL_ACTIONS.get(type(action))
    if special is not None and state.has_used(state.turn, special):
        raise ActionAlreadyUsed(f"{special} was already used")

    return handler(state, action, rng)


def legal_destinations(state: GameState, square: int) -> Set[int]:
    """Highlight helper: destinations of the side to move's definite piece on `square`."""
    if state.is_over or state.pending is not None:
        return set()
    piece = state.board.piece_at(square)
    if piece is None or piece.color != state.turn:
        return set()
    return Rules.get_valid_moves(state.board, piece, state.en_passant)


def is_terminal(state: GameState) -> Termination:
    return Rules.terminal_status(state.board, state.turn, state.en_passant)


class SeatResolver(Protocol):
    """Authentication collaborator: which color may `caller` act as (None = spectator)."""

    def color_for(self, caller: object) -> Optional[str]:
        ...


class QuantumGame:
    """
    API yang dipakai App/Renderer/Bot:
      - get_valid_moves(square) -> Set[int]
      - apply(action) -> List[event]   (raises ActionRejected)
      - move_log: List[str]
      - turn_color: 'w'|'b'
      - is_game_over(), result()
    """

    def __init__(
        self,
        state: Optional[GameState] = None,
        *,
        seed: Optional[int] = None,
        store: Optional[GameStore] = None,
        seats: Optional[SeatResolver] = None,
    ):
        self.rng = random.Random(seed)
        self.state = state if state is not None else initial_state()
        self.store = store
        self.seats = seats
        self.move_log: List[str] = []

    @property
    def board(self) -> Board:
        return self.state.board

    @property
    def turn_color(self) -> str:
        return self.state.turn

    @property
    def pending_promotion(self) -> Optional[PendingPromotion]:
        return self.state.pending

    def get_valid_moves(self, square: int) -> Set[int]:
        return legal_destinations(self.state, square)

    def is_in_check(self, color: Optional[str] = None) -> bool:
        return Rules.is_in_check(self.state.board, color or self.state.turn)

    def apply(self, action: Action, caller: object = None) -> List[object]:
        if self.seats is not None and self.seats.color_for(caller) != self.state.turn:
            raise InvalidSelection("caller may not act for the side to move")

        try:
            outcome = apply_action(self.state, action, self.rng)
        except ActionRejected as exc:
            logger.info("rejected %r: %s", action, exc.message)
            raise

        before = len(self.state.history)
        self.state = outcome.state
        for record in self.state.history[before:]:
            self.move_log.append(record.describe())
        for event in outcome.events:
            if isinstance(event, Collapsed) and event.cause == "decay":
                self.move_log.append(f"DECAY {event.pid} -> {chess.square_name(event.square)}")

        if self.is_game_over():
            self.move_log.append(f"GAME OVER: {self.result()}")
            if self.store is not None:
                self.store.save(self.state.history, self.summary())
        return list(outcome.events)

    def is_game_over(self) -> bool:
        return self.state.is_over

    def result(self) -> str:
        if self.state.termination is Termination.CHECKMATE:
            return "1-0" if self.state.winner == WHITE else "0-1"
        if self.state.termination is Termination.STALEMATE:
            return "1/2-1/2"
        return "*"

    def summary(self) -> GameSummary:
        return summarize(self.state.history, self.result(), self.state.winner)

    def reset(self) -> None:
        self.state = initial_state()
        self.move_log = []
