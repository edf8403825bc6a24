import itertools

import pytest


class StubRandom:
    """Stands in for ``random.Random``; ``uniform`` returns preset values in turn."""

    def __init__(self, values):
        self._values = itertools.cycle(values)
        self.calls = []

    def uniform(self, a, b):
        self.calls.append((a, b))
        return next(self._values)


@pytest.fixture
def stub_random():
    return StubRandom
