import random

import chess
import pytest

from qchess.board import Board
from qchess.errors import IllegalDestination
from qchess.game import GameState, apply_action, initial_state, legal_destinations
from qchess.moves import Move, MoveKind
from qchess.notation import state_from_fen
from qchess.piece import BLACK, WHITE, Piece
from qchess.rules import Rules, Termination


def moves_of(state, square):
    piece = state.board.piece_at(square)
    return Rules.get_valid_moves(state.board, piece, state.en_passant)


def test_opening_moves():
    state = initial_state()
    assert moves_of(state, chess.E2) == {chess.E3, chess.E4}
    assert moves_of(state, chess.G1) == {chess.F3, chess.H3}
    assert moves_of(state, chess.A1) == set()
    assert moves_of(state, chess.C1) == set()
    assert moves_of(state, chess.E1) == set()


def test_pawn_blocked_and_double_step_after_move():
    state = state_from_fen("4k3/8/8/8/8/4p3/4P3/4K3 w - - 0 1")
    assert moves_of(state, chess.E2) == set()

    # pawn that already moved does not double step
    state = state_from_fen("4k3/8/8/8/8/4P3/8/4K3 w - - 0 1")
    assert moves_of(state, chess.E3) == {chess.E4}


def test_pawn_captures_diagonally():
    state = state_from_fen("4k3/8/8/8/8/3p1b2/4P3/4K3 w - - 0 1")
    assert moves_of(state, chess.E2) == {chess.E3, chess.E4, chess.D3, chess.F3}


def test_sliding_piece_stops_at_first_occupant():
    state = state_from_fen("4k3/8/8/8/R2p1P2/8/8/4K3 w - - 0 1")
    rook = moves_of(state, chess.A4)
    assert chess.D4 in rook
    assert chess.E4 not in rook
    assert chess.A8 in rook and chess.A1 in rook


def test_knight_on_edge():
    state = state_from_fen("4k3/8/8/8/8/8/8/N3K3 w - - 0 1")
    assert moves_of(state, chess.A1) == {chess.B3, chess.C2}


def test_castling_both_sides():
    state = state_from_fen("4k3/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    king = moves_of(state, chess.E1)
    assert {chess.G1, chess.C1} <= king


def test_castling_through_attacked_square():
    state = state_from_fen("4kr2/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    king = moves_of(state, chess.E1)
    assert chess.G1 not in king
    assert chess.C1 in king


def test_no_castling_out_of_check_or_after_rook_moved():
    state = state_from_fen("4r1k1/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    king = moves_of(state, chess.E1)
    assert chess.G1 not in king and chess.C1 not in king

    state = state_from_fen("4k3/8/8/8/8/8/8/R3K2R w Q - 0 1")
    king = moves_of(state, chess.E1)
    assert chess.G1 not in king
    assert chess.C1 in king


def test_castling_moves_the_rook(rng):
    state = state_from_fen("4k3/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    outcome = apply_action(state, Move(chess.E1, chess.G1), rng)
    board = outcome.state.board
    assert board.piece_at(chess.G1).kind == "K"
    assert board.piece_at(chess.F1).kind == "R"
    assert board.is_empty(chess.H1)
    assert outcome.state.history[-1].kind is MoveKind.CASTLE


def test_en_passant(rng):
    state = state_from_fen("4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 1")
    assert moves_of(state, chess.E5) == {chess.D6, chess.E6}

    outcome = apply_action(state, Move(chess.E5, chess.D6), rng)
    board = outcome.state.board
    assert board.piece_at(chess.D6).kind == "P"
    assert board.is_empty(chess.D5)
    assert outcome.state.history[-1].kind is MoveKind.EN_PASSANT
    assert outcome.state.history[-1].captured == "b_p0"


def test_en_passant_target_expires(rng):
    state = initial_state()
    for mv in (Move(chess.E2, chess.E4), Move(chess.A7, chess.A6), Move(chess.E4, chess.E5)):
        state = apply_action(state, mv, rng).state
    state = apply_action(state, Move(chess.D7, chess.D5), rng).state
    assert state.en_passant == chess.D6
    assert chess.D6 in legal_destinations(state, chess.E5)

    state = apply_action(state, Move(chess.H2, chess.H3), rng).state
    state = apply_action(state, Move(chess.H7, chess.H6), rng).state
    assert state.en_passant is None
    assert chess.D6 not in legal_destinations(state, chess.E5)


def test_pinned_piece_cannot_leave_the_line():
    state = state_from_fen("4k3/4r3/8/8/8/8/4B3/4K3 w - - 0 1")
    assert moves_of(state, chess.E2) == set()


def test_king_cannot_step_into_attack():
    state = state_from_fen("4k3/8/8/8/8/8/3r4/4K3 w - - 0 1")
    king = moves_of(state, chess.E1)
    assert king == {chess.D2, chess.F1}


def test_missing_king_counts_as_check():
    board = Board([Piece("b_k", "K", BLACK, (chess.E8,))])
    assert Rules.is_in_check(board, WHITE)
    assert Rules.terminal_status(board, WHITE) is Termination.CHECKMATE


def test_superposed_piece_blocks_but_does_not_attack():
    board = Board([
        Piece("w_k", "K", WHITE, (chess.E1,)),
        Piece("w_r", "R", WHITE, (chess.A4,)),
        Piece("b_k", "K", BLACK, (chess.H8,)),
        Piece("b_r", "R", BLACK, (chess.E5, chess.D4)),
    ])
    assert not Rules.is_in_check(board, WHITE)
    rook = Rules.get_valid_moves(board, board.get("w_r"))
    assert chess.D4 in rook
    assert chess.E4 not in rook
    assert Rules.get_valid_moves(board, board.get("b_r")) == set()


def test_move_generation_is_idempotent():
    state = initial_state()
    board = state.board
    first = Rules.get_valid_moves(board, board.get("w_n1"))
    second = Rules.get_valid_moves(board, board.get("w_n1"))
    assert first == second
    assert board == initial_state().board


def test_attacked_squares_include_pawn_diagonals():
    state = state_from_fen("4k3/8/8/8/8/8/4P3/4K3 w - - 0 1")
    attacked = Rules.attacked_squares(state.board, WHITE)
    assert {chess.D3, chess.F3} <= attacked
    assert chess.E3 not in attacked


@pytest.mark.parametrize("seed", [1, 7, 42])
def test_random_playout_never_leaves_king_in_check(seed):
    rng = random.Random(seed)
    state = initial_state()
    for _ in range(80):
        if state.is_over:
            break
        options = [
            (p.square, to_sq)
            for p in state.board.pieces_of(state.turn)
            for to_sq in legal_destinations(state, p.square)
        ]
        assert options, "no legal move but game not over"
        from_sq, to_sq = rng.choice(sorted(options))
        mover = state.turn
        state = apply_action(state, Move(from_sq, to_sq, "Q"), rng).state
        assert not Rules.is_in_check(state.board, mover)
        assert state.turn != mover


def test_king_may_capture_either_branch_of_a_superposed_piece():
    board = Board([
        Piece("w_k", "K", WHITE, (chess.D4,)),
        Piece("b_n", "N", BLACK, (chess.E5, chess.C4)),
        Piece("b_k", "K", BLACK, (chess.H8,)),
    ])
    king = Rules.get_valid_moves(board, board.get("w_k"))
    assert {chess.E5, chess.C4} <= king


def test_capturing_a_superposed_blocker_cannot_expose_the_king():
    board = Board([
        Piece("w_k", "K", WHITE, (chess.E1,)),
        Piece("w_r", "R", WHITE, (chess.A1,)),
        Piece("b_r", "R", BLACK, (chess.E8,)),
        Piece("b_n", "N", BLACK, (chess.E4, chess.A5)),
        Piece("b_k", "K", BLACK, (chess.H8,)),
    ])
    assert chess.A5 not in Rules.get_valid_moves(board, board.get("w_r"))

    state = GameState(board=board)
    for seed in range(40):
        with pytest.raises(IllegalDestination):
            apply_action(state, Move(chess.A1, chess.A5), random.Random(seed))
