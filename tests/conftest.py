import pytest

from allocator import TrackingAllocator


class Recorder(object):
    # Stands in for a key or value disposer and remembers every handle it was given.
    def __init__(self):
        self.calls = []

    def __call__(self, handle):
        self.calls.append(handle)

    # Number of times this exact object was disposed
    def count(self, handle):
        return sum(1 for call in self.calls if call is handle)


@pytest.fixture
def key_disposer():
    return Recorder()


@pytest.fixture
def value_disposer():
    return Recorder()


@pytest.fixture
def tracker():
    return TrackingAllocator()
