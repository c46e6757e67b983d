import pytest

from marginalia.annotations.anchor import Anchor, substring
from marginalia.errors import InvalidAnnotation, InvalidRange


def test_validate_accepts_full_range():
    Anchor(0, 5).validate(5)


def test_validate_negative_start():
    with pytest.raises(InvalidRange, match="negative"):
        Anchor(-1, 3).validate(10)


def test_validate_end_past_length():
    with pytest.raises(InvalidRange, match="exceeds"):
        Anchor(2, 11).validate(10)


def test_validate_empty_range():
    with pytest.raises(InvalidRange):
        Anchor(4, 4).validate(10)


def test_validate_reversed_range():
    with pytest.raises(InvalidRange):
        Anchor(6, 2).validate(10)


def test_validate_non_integer_offsets():
    with pytest.raises(InvalidRange, match="integers"):
        Anchor("1", 3).validate(10)
    with pytest.raises(InvalidRange):
        Anchor(True, 3).validate(10)


def test_invalid_range_is_invalid_annotation():
    with pytest.raises(InvalidAnnotation):
        Anchor(3, 1).validate(10)


def test_is_valid():
    assert Anchor(0, 1).is_valid(1)
    assert not Anchor(0, 2).is_valid(1)
    assert not Anchor(None, 2).is_valid(5)


def test_substring():
    assert substring("The quick brown fox", Anchor(4, 9)) == "quick"

