"""Unit tests for mandata.foundation.coercion."""

from __future__ import annotations

import ipaddress
from datetime import UTC, datetime, timedelta, timezone
from enum import StrEnum
from urllib.parse import SplitResult

import httpx
import pytest

from mandata.foundation.coercion import coerce, resolve_type
from mandata.foundation.exceptions import (
    CoercionError,
    IncompatibleType,
    MustBeDefined,
    UnknownType,
)
from mandata.foundation.value_types import AddressRange, KeyedMapping, VariableType


class _Region(StrEnum):
    NAME = "name"


@pytest.mark.unit
class TestResolveType:
    def test_none_is_string(self) -> None:
        assert resolve_type(None) is VariableType.STRING

    def test_member_passes_through(self) -> None:
        assert resolve_type(VariableType.IP_RANGE) is VariableType.IP_RANGE

    def test_string_value(self) -> None:
        assert resolve_type("integer") is VariableType.INTEGER

    def test_hyphenated_alias(self) -> None:
        assert resolve_type("ip-range") is VariableType.IP_RANGE
        assert resolve_type("ip-address") is VariableType.IP_ADDRESS

    def test_addressable_uri_alias(self) -> None:
        assert resolve_type("addressable-uri") is VariableType.ADDRESSABLE

    def test_unknown_tag(self) -> None:
        with pytest.raises(UnknownType) as exc_info:
            resolve_type("bogus")
        assert exc_info.value.message == "unknown type bogus"


@pytest.mark.unit
class TestBoolean:
    @pytest.mark.parametrize("raw", ["true", "TRUE", "True", "1", 1, True, " 1"])
    def test_truthy(self, raw: object) -> None:
        assert coerce(raw, "boolean") is True

    @pytest.mark.parametrize("raw", ["false", "0", "", "yes", "2", "on", None, False, 0])
    def test_falsy(self, raw: object) -> None:
        assert coerce(raw, "boolean") is False

    def test_leading_digits_are_interpreted(self) -> None:
        assert coerce("1abc", "boolean") is True
        assert coerce("10", "boolean") is False

    def test_float_string(self) -> None:
        assert coerce("1.0", "boolean") is True


@pytest.mark.unit
class TestInteger:
    def test_parses_decimal(self) -> None:
        assert coerce("42", "integer") == 42

    def test_negative(self) -> None:
        assert coerce("-7", "integer") == -7

    def test_native_int_passes_through(self) -> None:
        assert coerce(8080, "integer") == 8080

    def test_non_numeric_message_includes_text(self) -> None:
        with pytest.raises(CoercionError) as exc_info:
            coerce("forty-two", "integer")
        assert "forty-two" in exc_info.value.message
        assert exc_info.value.type_tag == "integer"

    def test_empty_string_fails(self) -> None:
        with pytest.raises(CoercionError):
            coerce("", "integer")

    def test_float_string_fails(self) -> None:
        with pytest.raises(CoercionError, match="4.5"):
            coerce("4.5", "integer")

    def test_bool_rejected(self) -> None:
        with pytest.raises(CoercionError):
            coerce(True, "integer")

    def test_none_fails(self) -> None:
        with pytest.raises(CoercionError):
            coerce(None, "integer")


@pytest.mark.unit
class TestFloat:
    def test_parses(self) -> None:
        assert coerce("2.5", "float") == 2.5

    def test_integer_string(self) -> None:
        assert coerce("3", "float") == 3.0

    def test_none_is_zero(self) -> None:
        assert coerce(None, "float") == 0.0

    def test_non_numeric_message_includes_text(self) -> None:
        with pytest.raises(CoercionError) as exc_info:
            coerce("fast", "float")
        assert "fast" in exc_info.value.message

    @pytest.mark.parametrize("raw", ["nan", "NaN", "inf", "-Infinity", float("inf")])
    def test_non_finite_rejected(self, raw: object) -> None:
        with pytest.raises(CoercionError, match="not a finite number"):
            coerce(raw, "float")

    def test_underscores_rejected(self) -> None:
        with pytest.raises(CoercionError, match="underscores are not allowed"):
            coerce("1_0", "float")

    def test_exponent_accepted(self) -> None:
        assert coerce("1e3", "float") == 1000.0


@pytest.mark.unit
class TestUrl:
    def test_parses_components(self) -> None:
        url = coerce("https://user@example.com:8443/path?q=1#frag", "url")
        assert isinstance(url, SplitResult)
        assert url.scheme == "https"
        assert url.hostname == "example.com"
        assert url.port == 8443
        assert url.path == "/path"
        assert url.query == "q=1"

    def test_none_must_be_defined(self) -> None:
        with pytest.raises(MustBeDefined):
            coerce(None, "url")

    def test_whitespace_rejected(self) -> None:
        with pytest.raises(CoercionError, match="not a url"):
            coerce("not a url", "url")

    def test_non_ascii_rejected(self) -> None:
        with pytest.raises(CoercionError):
            coerce("http://example.com/café", "url")

    def test_invalid_port_rejected(self) -> None:
        with pytest.raises(CoercionError):
            coerce("http://example.com:99999/", "url")


@pytest.mark.unit
class TestAddressable:
    def test_parses(self) -> None:
        url = coerce("https://example.com/path", "addressable")
        assert isinstance(url, httpx.URL)
        assert url.host == "example.com"
        assert url.path == "/path"

    def test_tolerates_non_ascii(self) -> None:
        url = coerce("http://example.com/café", "addressable")
        assert url.path == "/café"

    def test_tolerates_relative_reference(self) -> None:
        url = coerce("/relative/path", "addressable")
        assert url.path == "/relative/path"

    def test_none_must_be_defined(self) -> None:
        with pytest.raises(MustBeDefined):
            coerce(None, "addressable")


@pytest.mark.unit
class TestIpAddress:
    def test_ipv4(self) -> None:
        assert coerce("10.0.0.1", "ip_address") == ipaddress.ip_address("10.0.0.1")

    def test_ipv6(self) -> None:
        assert coerce("::1", "ip_address") == ipaddress.ip_address("::1")

    def test_invalid(self) -> None:
        with pytest.raises(CoercionError, match="300.1.1.1"):
            coerce("300.1.1.1", "ip_address")

    def test_none_must_be_defined(self) -> None:
        with pytest.raises(MustBeDefined):
            coerce(None, "ip_address")


@pytest.mark.unit
class TestIpRange:
    def test_cidr_block(self) -> None:
        value = coerce("172.17.16.0/24", "ip_range")
        assert isinstance(value, AddressRange)
        assert "172.17.16.15" in value
        assert "172.17.17.1" not in value

    def test_explicit_bounds(self) -> None:
        value = coerce("172.17.16.116..172.17.16.131", "ip_range")
        assert "172.17.16.128" in value
        assert "172.17.16.116" in value
        assert "172.17.16.131" in value
        assert "172.17.16.132" not in value

    def test_ipv6_bounds(self) -> None:
        value = coerce("::1..::ff", "ip_range")
        assert "::10" in value

    def test_cidr_with_host_bits(self) -> None:
        value = coerce("10.1.2.3/16", "ip_range")
        assert "10.1.255.255" in value

    def test_reversed_bounds(self) -> None:
        with pytest.raises(CoercionError):
            coerce("10.0.0.9..10.0.0.1", "ip_range")

    def test_mixed_versions(self) -> None:
        with pytest.raises(CoercionError):
            coerce("10.0.0.1..::1", "ip_range")

    def test_garbage(self) -> None:
        with pytest.raises(CoercionError, match="everywhere"):
            coerce("everywhere", "ip_range")

    def test_none_must_be_defined(self) -> None:
        with pytest.raises(MustBeDefined):
            coerce(None, "ip_range")


@pytest.mark.unit
class TestTimestamp:
    def test_utc_designator(self) -> None:
        value = coerce("2024-03-01T12:00:00Z", "timestamp")
        assert value == datetime(2024, 3, 1, 12, 0, tzinfo=UTC)

    def test_offset_normalized_to_utc(self) -> None:
        value = coerce("2024-03-01T14:00:00+02:00", "timestamp")
        assert value == datetime(2024, 3, 1, 12, 0, tzinfo=UTC)
        assert value.utcoffset() == timedelta(0)

    def test_naive_taken_as_utc(self) -> None:
        value = coerce("2024-03-01T12:00:00", "timestamp")
        assert value.tzinfo is UTC

    def test_datetime_passes_through_normalized(self) -> None:
        local = datetime(2024, 3, 1, 7, 0, tzinfo=timezone(timedelta(hours=-5)))
        assert coerce(local, "timestamp") == datetime(2024, 3, 1, 12, 0, tzinfo=UTC)

    def test_invalid(self) -> None:
        with pytest.raises(CoercionError, match="yesterday"):
            coerce("yesterday", "timestamp")

    def test_none_must_be_defined(self) -> None:
        with pytest.raises(MustBeDefined):
            coerce(None, "timestamp")


@pytest.mark.unit
class TestString:
    def test_none_is_empty(self) -> None:
        assert coerce(None, "string") == ""

    def test_untyped_is_string(self) -> None:
        assert coerce(42, None) == "42"

    def test_passes_through(self) -> None:
        assert coerce("beef", "string") == "beef"


@pytest.mark.unit
class TestHash:
    def test_mapping_accepted(self) -> None:
        value = coerce({"name": "eu-west-1"}, "hash")
        assert isinstance(value, KeyedMapping)
        assert value["name"] == "eu-west-1"

    def test_lookup_is_representation_insensitive(self) -> None:
        value = coerce({":name": "eu-west-1"}, "hash")
        assert value["name"] == "eu-west-1"
        assert value[_Region.NAME] == "eu-west-1"

    def test_string_rejected(self) -> None:
        with pytest.raises(IncompatibleType) as exc_info:
            coerce("name=eu-west-1", "hash")
        assert exc_info.value.actual == "str"

    def test_list_rejected(self) -> None:
        with pytest.raises(IncompatibleType, match="list"):
            coerce(["a"], "hash")


@pytest.mark.unit
class TestArray:
    def test_delimited(self) -> None:
        assert coerce("a,b,c", "array", delimiter=",") == ["a", "b", "c"]

    def test_delimited_requires_string(self) -> None:
        with pytest.raises(IncompatibleType):
            coerce(["a", "b"], "array", delimiter=",")

    def test_empty_delimiter_is_a_coercion_error(self) -> None:
        with pytest.raises(CoercionError, match="empty delimiter"):
            coerce("a,b", "array", delimiter="")

    def test_list_passes_through(self) -> None:
        assert coerce(["a", "b"], "array") == ["a", "b"]

    def test_tuple_becomes_list(self) -> None:
        assert coerce(("a", "b"), "array") == ["a", "b"]

    def test_scalar_wrapped(self) -> None:
        assert coerce("a,b", "array") == ["a,b"]
        assert coerce(3, "array") == [3]

    def test_none_is_empty(self) -> None:
        assert coerce(None, "array") == []

    def test_mapping_becomes_pairs(self) -> None:
        assert coerce({"a": 1}, "array") == [("a", 1)]


@pytest.mark.unit
class TestUnknownType:
    def test_unknown_tag_names_type(self) -> None:
        with pytest.raises(UnknownType, match="decimal"):
            coerce("1", "decimal")
