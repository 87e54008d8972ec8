import chess
import pytest

from qchess import quantum
from qchess.errors import (
    ActionAlreadyUsed,
    AmbiguousPendingPromotion,
    IllegalDestination,
    InvalidSelection,
)
from qchess.events import Check, GameOver, PromotionPending
from qchess.game import QuantumGame, apply_action, initial_state, is_terminal, legal_destinations
from qchess.moves import Clone, Move, MoveKind, Promote, Superpose, Swap, Teleport
from qchess.notation import state_from_fen
from qchess.piece import BLACK, WHITE
from qchess.record import summarize
from qchess.rules import Termination


class FakeStore:
    def __init__(self):
        self.saved = []

    def save(self, history, summary):
        self.saved.append((history, summary))


class FixedSeat:
    def __init__(self, color):
        self.color = color

    def color_for(self, caller):
        return self.color


def test_classical_move_passes_turn_and_sets_en_passant(rng):
    outcome = apply_action(initial_state(), Move(chess.E2, chess.E4), rng)
    state = outcome.state
    assert state.turn == BLACK
    assert state.en_passant == chess.E3
    assert state.history[-1].kind is MoveKind.CLASSICAL
    assert state.history[-1].describe() == "w P: e2->e4"

    state = apply_action(state, Move(chess.G8, chess.F6), rng).state
    assert state.en_passant is None
    assert state.turn == WHITE


def test_rejected_action_leaves_state_untouched():
    game = QuantumGame(seed=1)
    before = game.state
    with pytest.raises(IllegalDestination):
        game.apply(Move(chess.E2, chess.E5))
    with pytest.raises(InvalidSelection):
        game.apply(Move(chess.E7, chess.E5))
    with pytest.raises(InvalidSelection):
        game.apply(Move(chess.E4, chess.E5))
    with pytest.raises(IllegalDestination):
        game.apply(Move(chess.E2, 99))
    assert game.state is before
    assert game.move_log == []


def test_reversible_moves_restore_the_position(rng):
    state = initial_state()
    for mv in (
        Move(chess.G1, chess.F3),
        Move(chess.G8, chess.F6),
        Move(chess.F3, chess.G1),
        Move(chess.F6, chess.G8),
    ):
        state = apply_action(state, mv, rng).state
    positions = {p.pid: p.positions for p in state.board}
    assert positions == {p.pid: p.positions for p in initial_state().board}
    assert state.turn == WHITE
    assert len(state.history) == 4


def test_promotion_waits_for_a_choice(rng):
    state = state_from_fen("7k/4P3/8/8/8/8/8/K7 w - - 0 1")
    outcome = apply_action(state, Move(chess.E7, chess.E8), rng)
    pending = outcome.state
    assert pending.pending is not None
    assert pending.turn == WHITE
    assert isinstance(outcome.events[0], PromotionPending)
    assert legal_destinations(pending, chess.A1) == set()

    with pytest.raises(AmbiguousPendingPromotion):
        apply_action(pending, Move(chess.A1, chess.A2), rng)
    with pytest.raises(InvalidSelection):
        apply_action(pending, Promote("K"), rng)

    done = apply_action(pending, Promote("Q"), rng)
    queen = done.state.board.piece_at(chess.E8)
    assert queen.kind == "Q"
    assert queen.color == WHITE
    assert done.state.turn == BLACK
    assert done.state.pending is None
    assert done.state.history[-1].kind is MoveKind.PROMOTION
    assert done.state.history[-1].describe() == "w P: e7->e8=Q"
    assert Check(BLACK) in done.events


def test_inline_promotion(rng):
    state = state_from_fen("7k/4P3/8/8/8/8/8/K7 w - - 0 1")
    outcome = apply_action(state, Move(chess.E7, chess.E8, "N"), rng)
    assert outcome.state.board.piece_at(chess.E8).kind == "N"
    assert outcome.state.turn == BLACK


def test_promote_without_pending_is_rejected(rng):
    with pytest.raises(InvalidSelection):
        apply_action(initial_state(), Promote("Q"), rng)


def test_checkmate_ends_the_game(rng):
    store = FakeStore()
    game = QuantumGame(state_from_fen("7k/8/6K1/8/8/8/8/Q7 w - - 0 1"), seed=3, store=store)
    events = game.apply(Move(chess.A1, chess.A8))

    assert GameOver("checkmate", WHITE) in events
    assert game.is_game_over()
    assert game.result() == "1-0"
    assert game.move_log[-1] == "GAME OVER: 1-0"
    assert is_terminal(game.state) is Termination.CHECKMATE

    assert len(store.saved) == 1
    history, summary = store.saved[0]
    assert len(history) == 1
    assert summary.result == "1-0"
    assert summary.winner == WHITE
    assert summary.classical_moves == 1

    with pytest.raises(InvalidSelection):
        game.apply(Move(chess.H8, chess.G8))


def test_stalemate_is_a_draw():
    game = QuantumGame(state_from_fen("7k/8/6K1/8/8/8/8/5Q2 w - - 0 1"), seed=3)
    game.apply(Move(chess.F1, chess.F7))
    assert game.state.termination is Termination.STALEMATE
    assert game.state.winner is None
    assert game.result() == "1/2-1/2"


def test_teleport_once_per_color(rng):
    state = apply_action(initial_state(), Teleport(chess.G1, chess.E4), rng).state
    assert state.board.piece_at(chess.E4).pid == "w_n1"
    assert state.has_used(WHITE, "teleport")
    assert state.history[-1].kind is MoveKind.TELEPORT

    state = apply_action(state, Teleport(chess.G8, chess.E5), rng).state
    assert state.has_used(BLACK, "teleport")

    with pytest.raises(ActionAlreadyUsed):
        apply_action(state, Teleport(chess.B1, chess.D4), rng)


def test_teleport_needs_an_empty_square(rng):
    with pytest.raises(IllegalDestination):
        apply_action(initial_state(), Teleport(chess.G1, chess.E2), rng)


def test_swap(rng):
    state = apply_action(initial_state(), Swap(chess.D1, chess.E1), rng).state
    assert state.board.piece_at(chess.D1).kind == "K"
    assert state.board.piece_at(chess.E1).kind == "Q"
    assert state.turn == BLACK
    assert state.history[-1].describe() == "w Q SWAP d1<->e1"


def test_swap_cannot_put_a_pawn_on_the_back_rank(rng):
    with pytest.raises(IllegalDestination):
        apply_action(initial_state(), Swap(chess.E2, chess.G1), rng)


def test_clone(rng):
    state = apply_action(initial_state(), Clone("Q", chess.E4), rng).state
    clone = state.board.piece_at(chess.E4)
    assert clone.pid == "w_qc0"
    assert clone.kind == "Q"
    assert clone.has_moved
    assert len(state.board) == 33

    with pytest.raises(InvalidSelection):
        apply_action(state, Clone("K", chess.E5), rng)


def test_special_rejections_do_not_consume_the_action(rng):
    state = initial_state()
    with pytest.raises(IllegalDestination):
        apply_action(state, Clone("R", chess.E2), rng)
    assert not state.has_used(WHITE, "clone")
    state = apply_action(state, Clone("R", chess.E3), rng).state
    assert state.has_used(WHITE, "clone")


def test_seat_check():
    game = QuantumGame(seed=1, seats=FixedSeat(BLACK))
    with pytest.raises(InvalidSelection):
        game.apply(Move(chess.E2, chess.E4), caller="someone")
    assert game.state.history == ()


def test_move_log_and_summary(no_decay):
    game = QuantumGame(seed=5)
    game.apply(Superpose(chess.G1, (chess.F3, chess.H3)))
    game.apply(Move(chess.E7, chess.E5))
    assert game.move_log == ["w N SUPER g1->f3&h3", "b P: e7->e5"]

    summary = game.summary()
    assert summary.total_moves == 2
    assert summary.quantum_moves == 1
    assert summary.superpositions == 1
    assert summary.per_color[WHITE]["quantum"] == 1
    assert summary.per_color[BLACK]["classical"] == 1
    assert summary.to_dict()["result"] == "*"


def test_decay_entries_in_move_log(monkeypatch):
    real_decay = quantum.decay
    monkeypatch.setattr(quantum, "decay", lambda board, rng: real_decay(board, rng, probability=1.0))
    game = QuantumGame(seed=5)
    game.apply(Superpose(chess.G1, (chess.F3, chess.H3)))
    assert game.move_log[-1].startswith("DECAY w_n1 -> ")
    assert not game.board.get("w_n1").is_superposed


def test_reset():
    game = QuantumGame(seed=1)
    game.apply(Move(chess.E2, chess.E4))
    game.reset()
    assert game.state == initial_state()
    assert game.move_log == []
    assert game.turn_color == WHITE


def test_summary_per_color_counts_add_up(rng):
    state = initial_state()
    for action in (
        Teleport(chess.G1, chess.E4),
        Move(chess.E7, chess.E5),
        Clone("N", chess.D4),
        Swap(chess.D8, chess.E8),
    ):
        state = apply_action(state, action, rng).state

    summary = summarize(state.history)
    assert summary.specials == 3
    assert summary.classical_moves == 1
    assert summary.per_color[WHITE] == {"classical": 0, "quantum": 0, "special": 2}
    assert summary.per_color[BLACK] == {"classical": 1, "quantum": 0, "special": 1}
    total = {k: sum(c[k] for c in summary.per_color.values()) for k in ("classical", "quantum", "special")}
    assert total == {
        "classical": summary.classical_moves,
        "quantum": summary.quantum_moves,
        "special": summary.specials,
    }
