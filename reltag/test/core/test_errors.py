"""Tests for reltag.core.errors module."""

from reltag.core.errors import ErrorCode


def test_values_are_stable() -> None:
    assert [int(c) for c in ErrorCode] == [0, 1, 2, 3, 4, 5]


def test_str_is_human_readable() -> None:
    assert str(ErrorCode.WORKSPACE_ERROR) == "workspace error"

