import random

import pytest

from qchess import quantum


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def no_decay(monkeypatch):
    """Turn off passive decay so superposed pieces stay put between turns."""
    monkeypatch.setattr(quantum, "decay", lambda board, rng, probability=0.0: (board, []))
