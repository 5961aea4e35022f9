"""Tests for reltag.release.semver module."""

from __future__ import annotations

import pytest

from reltag.core.result import Err, Ok
from reltag.release.semver import SemVer, parse_semver


class TestParseSemver:
    def test_plain(self) -> None:
        assert parse_semver("2.3.0") == Ok(SemVer(2, 3, 0))

    def test_prerelease_and_build(self) -> None:
        result = parse_semver("1.0.0-rc.1+build.5")

        assert isinstance(result, Ok)
        assert result.value.prerelease == "rc.1"
        assert result.value.build == "build.5"
        assert str(result.value) == "1.0.0-rc.1+build.5"

    @pytest.mark.parametrize(
        "value",
        ["1.2", "1.2.3.4", "01.2.3", "1.2.3-", "1.2.3-01", "1.2.3+", " 1.2.3", "1.2.3\n", "x.y.z"],
    )
    def test_rejects(self, value: str) -> None:
        result = parse_semver(value)
        assert isinstance(result, Err)
        assert result.error.value == value

    def test_empty_is_named(self) -> None:
        result = parse_semver("")
        assert isinstance(result, Err)
        assert result.error.message == "invalid semantic version: <empty>"

    def test_v_prefix_hint(self) -> None:
        result = parse_semver("v1.2.3")
        assert isinstance(result, Err)
        assert result.error.hint == "Drop the 'v' prefix: 1.2.3"

    def test_generic_hint(self) -> None:
        result = parse_semver("1.2")
        assert isinstance(result, Err)
        assert result.error.hint is not None
        assert "MAJOR.MINOR.PATCH" in result.error.hint

