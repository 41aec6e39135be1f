from __future__ import annotations

import pytest

from optipic.utils import format_bytes, format_percent, get_extension, safe_number, to_boolean


@pytest.mark.parametrize(
    ("value", "expected"),
    [("123", 123), (456, 456), ("12.5", 12.5), (" 7 ", 7)],
)
def test_safe_number_parses_valid_values(value, expected) -> None:
    assert safe_number(value, 0) == expected


@pytest.mark.parametrize("value", [None, "", "invalid", "nan", "inf", b"123", {"a": 1}, 0])
def test_safe_number_falls_back(value) -> None:
    assert safe_number(value, 10) == 10


@pytest.mark.parametrize("value", ["true", "1", 1, True])
def test_to_boolean_truthy_forms(value) -> None:
    assert to_boolean(value) is True


@pytest.mark.parametrize("value", ["false", "0", 0, 2, False, None, "TRUE", "yes", object(), [1]])
def test_to_boolean_everything_else_is_false(value) -> None:
    assert to_boolean(value) is False


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("file.txt", "txt"),
        ("MyPhoto.JPG", "jpg"),
        ("archive.tar.gz", "gz"),
        ("file", ""),
        ("file.", ""),
        (".config", "config"),
    ],
)
def test_get_extension(name: str, expected: str) -> None:
    assert get_extension(name) == expected


def test_format_bytes() -> None:
    assert format_bytes(0) == "0 B"
    assert format_bytes(512) == "512.0 B"
    assert format_bytes(1024) == "1.0 KB"
    assert format_bytes(1536) == "1.5 KB"
    assert format_bytes(1024 * 1024) == "1.0 MB"
    assert format_bytes(1024 * 1024 * 1024) == "1.0 GB"


def test_format_percent_rounds() -> None:
    assert format_percent(12.3) == "12%"
    assert format_percent(99.9) == "100%"
    assert format_percent(50.5) == "51%"
