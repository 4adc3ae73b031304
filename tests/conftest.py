# tests/conftest.py
import pytest

from pycombinators.State import ParseState


@pytest.fixture
def make_state():
    def _make(input_data, prefill=1024):
        return ParseState(input_data, prefill=prefill)

    return _make
