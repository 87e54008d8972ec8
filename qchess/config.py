import os


class Config:
    # Quantum rules
    DECAY_PROBABILITY = float(os.environ.get("QCHESS_DECAY_PROBABILITY", "0.25"))
    MAX_POSITIONS = 2

    # Pieces available for promotion / clone
    PROMOTION_KINDS = ("Q", "R", "B", "N")
    CLONE_KINDS = ("Q", "R", "B", "N", "P")

    # Stockfish hint (UCI)
    STOCKFISH_PATH = os.environ.get("QCHESS_STOCKFISH_PATH", "stockfish")
    SUGGEST_DEPTH = int(os.environ.get("QCHESS_SUGGEST_DEPTH", "10"))
    SUGGEST_MOVETIME = float(os.environ.get("QCHESS_SUGGEST_MOVETIME", "1.0"))
    SUGGEST_TIMEOUT = float(os.environ.get("QCHESS_SUGGEST_TIMEOUT", "10.0"))
    SUGGEST_RETRIES = 1
