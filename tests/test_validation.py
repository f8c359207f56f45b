"""Tests for input validation helpers."""

import pytest

from qbitclient.exceptions import ValidationError
from qbitclient.utils.validation import (
    join_values,
    require_non_empty,
    validate_choice,
    validate_hash,
    validate_hashes,
    validate_int_range,
    validate_rid,
    validate_url,
)


V1 = "0123456789ABCDEF0123456789abcdef01234567"
V2 = "f" * 64


def test_validate_hash_accepts_v1_and_v2():
    assert validate_hash(V1) == V1.lower()
    assert validate_hash(V2) == V2


@pytest.mark.parametrize("value", [None, "", "   ", "abc", "g" * 40, "a" * 41])
def test_validate_hash_rejects(value):
    with pytest.raises(ValidationError) as exc_info:
        validate_hash(value)

    assert exc_info.value.field == "hash"
    assert exc_info.value.error_code == "VALIDATION_ERROR"


def test_validate_hashes_forms():
    assert validate_hashes("all") == "all"
    assert validate_hashes("ALL") == "all"
    assert validate_hashes(V1) == V1.lower()
    assert validate_hashes([V1, V2]) == f"{V1.lower()}|{V2}"
    assert validate_hashes(f"{V1}|{V2}") == f"{V1.lower()}|{V2}"


@pytest.mark.parametrize("value", [None, "", [], ["nothex"]])
def test_validate_hashes_rejects(value):
    with pytest.raises(ValidationError):
        validate_hashes(value)


def test_validate_rid():
    assert validate_rid(0) == 0
    assert validate_rid(42) == 42
    for bad in (-1, "1", 1.0, True, None):
        with pytest.raises(ValidationError):
            validate_rid(bad)


def test_validate_url():
    assert validate_url("https://qb.example:8443") == "https://qb.example:8443"
    for bad in ("", "ftp://host", "localhost:8080", "http://"):
        with pytest.raises(ValidationError):
            validate_url(bad)


def test_validate_int_range():
    assert validate_int_range(5, minimum=0, maximum=10) == 5
    with pytest.raises(ValidationError):
        validate_int_range(-1, minimum=0)
    with pytest.raises(ValidationError):
        validate_int_range(11, maximum=10)
    with pytest.raises(ValidationError):
        validate_int_range("5")


def test_validate_choice():
    assert validate_choice("a", ["a", "b"]) == "a"
    with pytest.raises(ValidationError) as exc_info:
        validate_choice("c", ["a", "b"], field="mode")

    assert "a, b" in exc_info.value.message


def test_join_values():
    assert join_values("one", ",") == "one"
    assert join_values([" a ", "", "b"], ",") == "a,b"
    assert join_values([0, 3], "|") == "0|3"
    with pytest.raises(ValidationError):
        join_values(["", "  "], ",", field="tags")


def test_require_non_empty_strips():
    assert require_non_empty("  name ") == "name"
    with pytest.raises(ValidationError):
        require_non_empty(5)
