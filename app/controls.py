"""
Multi-step input builder for the client.

Clicks are collected per mode (select piece, pick target A, pick target B...)
until they form a complete action for the rules engine. The builder keeps no
game state of its own beyond the current selection; everything it reads comes
from the QuantumGame passed to click(). Legality is left to the engine.
"""
from enum import Enum

from qchess.config import Config as EngineConfig
from qchess.moves import Clone, Entangle, Measure, Move, Superpose, Swap, Teleport


class Mode(str, Enum):
    CLASSICAL = "classical"
    SUPERPOSITION = "superposition"
    ENTANGLEMENT = "entanglement"
    MEASURE = "measure"
    TELEPORT = "teleport"
    SWAP = "swap"
    CLONE = "clone"


HINTS = {
    Mode.CLASSICAL: "Click a piece, then a target square",
    Mode.SUPERPOSITION: "Pick your piece, then target A, then target B",
    Mode.ENTANGLEMENT: "Pick two superposed pieces",
    Mode.MEASURE: "Click one of your superposed pieces",
    Mode.TELEPORT: "Pick your piece, then any empty square (once per game)",
    Mode.SWAP: "Pick two of your pieces (once per game)",
    Mode.CLONE: "Click an empty square (once per game, K cycles piece)",
}


class ActionBuilder:
    def __init__(self):
        self.mode = Mode.CLASSICAL
        self.clone_kind = "Q"
        self.message = ""
        self.reset()

    def reset(self):
        self.selected = None     # square of the first pick
        self.targets = []        # split targets picked so far
        self.first_pid = None    # entanglement candidate
        self.valid_moves = set()

    def set_mode(self, mode):
        # toggle: pencet lagi -> balik ke classical
        self.mode = Mode.CLASSICAL if mode == self.mode else mode
        self.message = ""
        self.reset()

    def cycle_clone_kind(self):
        kinds = EngineConfig.CLONE_KINDS
        self.clone_kind = kinds[(kinds.index(self.clone_kind) + 1) % len(kinds)]

    @property
    def prompt(self):
        lines = [f"Mode: {self.mode.value}", HINTS[self.mode]]
        if self.mode == Mode.CLONE:
            lines.append(f"Clone piece: {self.clone_kind}")
        if self.message:
            lines.append(self.message)
        return lines

    def click(self, game, square):
        """Feed one clicked square. Returns a complete action or None."""
        self.message = ""
        handler = getattr(self, f"_click_{self.mode.value}")
        return handler(game, square)

    def _own_definite(self, game, square):
        piece = game.board.piece_at(square)
        if piece is not None and piece.color == game.turn_color:
            return piece
        return None

    def _click_classical(self, game, square):
        if self.selected is not None:
            if square in self.valid_moves:
                action = Move(self.selected, square)
                self.reset()
                return action
            self.reset()
            if self._own_definite(game, square) is None:
                self.message = "Invalid move."
                return None

        if self._own_definite(game, square) is None:
            if game.board.is_superposed(square):
                self.message = "Superposed piece: measure it first."
            else:
                self.message = "No selectable piece here."
            return None
        self.selected = square
        self.valid_moves = game.get_valid_moves(square)
        return None

    def _click_superposition(self, game, square):
        if self.selected is None:
            if self._own_definite(game, square) is None:
                self.message = "Select a valid piece for superposition."
                return None
            self.selected = square
            return None
        if square == self.selected or square in self.targets:
            self.message = "Choose a different square."
            return None
        self.targets.append(square)
        if len(self.targets) < 2:
            return None
        action = Superpose(self.selected, tuple(self.targets))
        self.reset()
        return action

    def _click_entanglement(self, game, square):
        superposed = [p for p in game.board.pieces_at(square) if p.is_superposed]
        if not superposed:
            self.message = "Select a superposed piece."
            return None
        piece = superposed[0]
        if self.first_pid is None:
            self.first_pid = piece.pid
            self.selected = square
            return None
        if piece.pid == self.first_pid:
            self.message = "Select a different superposed piece."
            return None
        action = Entangle(self.first_pid, piece.pid)
        self.reset()
        return action

    def _click_measure(self, game, square):
        return Measure(square)

    def _click_teleport(self, game, square):
        if self.selected is None:
            if self._own_definite(game, square) is None:
                self.message = "Select one of your pieces."
                return None
            self.selected = square
            return None
        action = Teleport(self.selected, square)
        self.reset()
        return action

    def _click_swap(self, game, square):
        if self._own_definite(game, square) is None:
            self.message = "Select one of your pieces."
            return None
        if self.selected is None:
            self.selected = square
            return None
        if square == self.selected:
            self.message = "Select a different piece."
            return None
        action = Swap(self.selected, square)
        self.reset()
        return action

    def _click_clone(self, game, square):
        return Clone(self.clone_kind, square)
