"""Shared fixtures for the Nyan Rush tests."""
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


class FixedDoorRng:
    """Random source that always puts the door at the same row."""

    def __init__(self, door_start):
        self.door_start = door_start
        self.calls = []

    def integers(self, low, high):
        self.calls.append((low, high))
        assert low <= self.door_start < high
        return self.door_start


@pytest.fixture
def door_at():
    """Factory: door_at(8) -> rng whose doors all start at row 8."""
    return FixedDoorRng
