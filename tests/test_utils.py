import math

import pytest

from mechcore.utils import try_float


@pytest.mark.parametrize("raw,expected", [
    ("2.5", 2.5),
    (3, 3.0),
    (" -1e2 ", -100.0),
])
def test_try_float_parses(raw, expected):
    assert try_float(raw) == expected


@pytest.mark.parametrize("raw", ["abc", None, "", math.inf, "nan", [1.0]])
def test_try_float_rejects(raw):
    assert try_float(raw) is None
