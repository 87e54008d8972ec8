import logging
import random

from qchess.errors import ActionRejected
from qchess.moves import Move, Promote, Superpose
from qchess.special import is_promotion

logger = logging.getLogger(__name__)


class Bot:
    def __init__(self, color='b', seed=None, split_chance=0.25):
        self.color = color  # 'w' or 'b'
        self.rng = random.Random(seed)
        self.split_chance = split_chance

    def choose_action(self, game):
        if game.pending_promotion is not None:
            return Promote("Q")

        board = game.board
        candidates = []
        for piece in board.pieces_of(self.color):
            if piece.is_superposed:
                continue
            for to_sq in sorted(game.get_valid_moves(piece.square)):
                candidates.append((piece, to_sq))

        if not candidates:
            return None  # tanpa langkah klasik game sudah selesai

        # chance split
        if self.rng.random() < self.split_chance:
            by_start = {}
            for piece, to_sq in candidates:
                if piece.kind != "K" and board.is_empty(to_sq) and not is_promotion(piece, to_sq):
                    by_start.setdefault(piece.square, []).append(to_sq)
            starts = [s for s, ds in by_start.items() if len(ds) >= 2]
            if starts:
                s = self.rng.choice(starts)
                return Superpose(s, tuple(self.rng.sample(by_start[s], 2)))

        piece, to_sq = self.rng.choice(candidates)
        promotion = "Q" if is_promotion(piece, to_sq) else None
        return Move(piece.square, to_sq, promotion)

    def make_move(self, game):
        if game.turn_color != self.color or game.is_game_over():
            return

        action = self.choose_action(game)
        if action is None:
            return
        try:
            game.apply(action)
        except ActionRejected as exc:
            if not isinstance(action, Superpose):
                raise
            # split ditolak (mis. raja jadi terbuka): main langkah biasa
            logger.info("bot split rejected: %s", exc.message)
            self.split_chance, chance = 0.0, self.split_chance
            try:
                self.make_move(game)
            finally:
                self.split_chance = chance
