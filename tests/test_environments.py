"""Unit tests for mandata.foundation.environments."""

from __future__ import annotations

import pytest

from mandata.foundation.environments import ENVIRONMENTS, Environment, normalize_environment


@pytest.mark.unit
class TestEnvironment:
    def test_members_compare_as_strings(self) -> None:
        assert Environment.PRODUCTION == "production"
        assert Environment("test") is Environment.TEST

    def test_order(self) -> None:
        assert ENVIRONMENTS == ("production", "development", "test")


@pytest.mark.unit
class TestNormalizeEnvironment:
    def test_member(self) -> None:
        result = normalize_environment(Environment.DEVELOPMENT)
        assert result == "development"
        assert type(result) is str

    def test_custom_name_kept(self) -> None:
        assert normalize_environment("staging") == "staging"

    def test_non_string_rejected(self) -> None:
        with pytest.raises(TypeError, match="int"):
            normalize_environment(3)  # type: ignore[arg-type]
