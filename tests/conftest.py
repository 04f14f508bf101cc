import os
import random
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def cross_rows():
    return ("00100",
            "00100",
            "11111",
            "00100",
            "00100")
