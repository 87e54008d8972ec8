import chess

from ai.bot import Bot
from qchess.board import Board
from qchess.game import GameState, QuantumGame
from qchess.moves import Move, Promote
from qchess.notation import state_from_fen
from qchess.piece import BLACK, WHITE, Piece


def test_bots_play_a_game_without_errors():
    game = QuantumGame(seed=11)
    bots = {WHITE: Bot(WHITE, seed=1, split_chance=0.3), BLACK: Bot(BLACK, seed=2, split_chance=0.3)}
    for _ in range(60):
        if game.is_game_over():
            break
        before = len(game.state.history)
        mover = game.turn_color
        bots[mover].make_move(game)
        assert len(game.state.history) == before + 1
        assert game.turn_color != mover


def test_bot_waits_for_its_turn():
    game = QuantumGame(seed=1)
    Bot(BLACK, seed=1).make_move(game)
    assert game.state.history == ()


def test_bot_promotes_to_queen():
    game = QuantumGame(state_from_fen("7k/4P3/8/8/8/8/8/K7 w - - 0 1"), seed=1)
    game.apply(Move(chess.E7, chess.E8))
    assert Bot(WHITE).choose_action(game) == Promote("Q")


def test_bot_has_nothing_to_do():
    # Ka1 boxed in by the queen on b3; a superposed knight has no classical move
    board = Board([
        Piece("w_k", "K", WHITE, (chess.A1,)),
        Piece("w_n", "N", WHITE, (chess.E4, chess.F4)),
        Piece("b_q", "Q", BLACK, (chess.B3,)),
        Piece("b_k", "K", BLACK, (chess.H8,)),
    ])
    game = QuantumGame(GameState(board=board), seed=1)
    assert Bot(WHITE, seed=3).choose_action(game) is None
