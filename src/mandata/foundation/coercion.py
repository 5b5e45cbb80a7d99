"""Coercion of raw configuration values into typed values.

Each supported :class:`VariableType` maps to a pure function taking the
raw value (a string from the environment, or any scalar/structured value
from a mapping or parsed file) and returning the typed value. Parser
failures are always re-raised as :class:`ConfigError` subclasses.

Rules worth knowing:

- ``boolean`` never fails: ``"true"`` (any case) or anything whose integer
  interpretation is 1 is ``True``, everything else ``False``.
- ``string`` and ``float`` have empty values (``""`` and ``0.0``), while
  ``url``, ``addressable``, ``ip_address``, ``ip_range`` and ``timestamp``
  raise :class:`MustBeDefined` for ``None``.
- ``hash`` only accepts values that are already mappings.

Example:
    >>> from mandata.foundation.coercion import coerce
    >>> coerce("1", "boolean")
    True
    >>> coerce("a,b", "array", delimiter=",")
    ['a', 'b']
"""

from __future__ import annotations

import ipaddress
import math
import re
import string
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any
from urllib.parse import SplitResult, urlsplit

import httpx

from mandata.foundation.exceptions import (
    CoercionError,
    IncompatibleType,
    MustBeDefined,
    UnknownType,
)
from mandata.foundation.value_types import AddressRange, KeyedMapping, VariableType

__all__ = ["coerce", "resolve_type"]

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_RANGE = re.compile(r"^\s*(?P<first>[^.\s][^\s]*?)\.\.(?P<last>[^\s]+)\s*$")
# Unreserved, reserved and percent characters of RFC 3986.
_URI_CHARS = frozenset(string.ascii_letters + string.digits + "-._~:/?#[]@!$&'()*+,;=%")


def resolve_type(type_tag: VariableType | str | None) -> VariableType:
    """Map a declared type tag to its VariableType.

    Args:
        type_tag: VariableType member, its string value, or None for string.

    Returns:
        The matching VariableType.

    Raises:
        UnknownType: If the tag does not name a supported type.
    """
    if type_tag is None:
        return VariableType.STRING
    try:
        return VariableType(type_tag)
    except ValueError:
        raise UnknownType(type_tag) from None


def _leading_int(value: object) -> int:
    """Lenient integer interpretation: leading digits of the string form, else 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def _to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).lower() == "true" or _leading_int(value) == 1


def _to_integer(value: Any) -> int:
    if isinstance(value, bool | float):
        raise CoercionError("integer", value, f"{type(value).__name__} is not an integer")
    if isinstance(value, int):
        return value
    try:
        return int(str(value), 10)
    except ValueError as exc:
        raise CoercionError("integer", value) from exc


def _to_float(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, str) and "_" in value:
        raise CoercionError("float", value, "underscores are not allowed")
    try:
        result = float(value)
    except (TypeError, ValueError) as exc:
        raise CoercionError("float", value) from exc
    if not math.isfinite(result):
        raise CoercionError("float", value, "not a finite number")
    return result


def _to_url(value: Any) -> SplitResult:
    if value is None:
        raise MustBeDefined()
    text = str(value)
    invalid = sorted({char for char in text if char not in _URI_CHARS})
    if invalid:
        raise CoercionError("url", text, f"illegal characters {''.join(invalid)!r}")
    try:
        parsed = urlsplit(text)
        # Port validation is lazy in urlsplit; force it.
        parsed.port  # noqa: B018
    except ValueError as exc:
        raise CoercionError("url", text, str(exc)) from exc
    return parsed


def _to_addressable(value: Any) -> httpx.URL:
    if value is None:
        raise MustBeDefined()
    try:
        return httpx.URL(str(value))
    except (httpx.InvalidURL, TypeError, ValueError) as exc:
        raise CoercionError("addressable", value, str(exc)) from exc


def _to_ip_address(value: Any) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
    if value is None:
        raise MustBeDefined()
    try:
        return ipaddress.ip_address(str(value).strip())
    except ValueError as exc:
        raise CoercionError("ip_address", value) from exc


def _to_ip_range(value: Any) -> AddressRange:
    if value is None:
        raise MustBeDefined()
    text = str(value)
    try:
        match = _RANGE.match(text)
        if match:
            return AddressRange.from_bounds(match.group("first"), match.group("last"))
        return AddressRange.from_network(text.strip())
    except ValueError as exc:
        raise CoercionError("ip_range", value, str(exc)) from exc


def _to_timestamp(value: Any) -> datetime:
    if value is None:
        raise MustBeDefined()
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip())
        except ValueError as exc:
            raise CoercionError("timestamp", value) from exc
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _to_string(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _to_hash(value: Any) -> KeyedMapping:
    if not isinstance(value, Mapping):
        raise IncompatibleType("hash", type(value).__name__)
    return KeyedMapping(value)


def _to_array(value: Any, delimiter: str | None = None) -> list[Any]:
    if delimiter is not None:
        if not delimiter:
            raise CoercionError("array", value, "empty delimiter")
        if not isinstance(value, str):
            raise IncompatibleType("delimited string", type(value).__name__)
        return value.split(delimiter)
    if value is None:
        return []
    if isinstance(value, list | tuple | set | frozenset):
        return list(value)
    if isinstance(value, Mapping):
        return list(value.items())
    return [value]


_COERCERS: dict[VariableType, Callable[[Any], Any]] = {
    VariableType.STRING: _to_string,
    VariableType.BOOLEAN: _to_boolean,
    VariableType.INTEGER: _to_integer,
    VariableType.FLOAT: _to_float,
    VariableType.URL: _to_url,
    VariableType.ADDRESSABLE: _to_addressable,
    VariableType.IP_ADDRESS: _to_ip_address,
    VariableType.IP_RANGE: _to_ip_range,
    VariableType.TIMESTAMP: _to_timestamp,
    VariableType.HASH: _to_hash,
}


def coerce(
    value: Any,
    type_tag: VariableType | str | None = None,
    *,
    delimiter: str | None = None,
) -> Any:
    """Coerce a raw value to the declared type.

    Args:
        value: Raw value from a source or a string default.
        type_tag: Declared type; None means string.
        delimiter: Split character(s) for delimited ``array`` values.

    Returns:
        The typed value.

    Raises:
        UnknownType: If the type tag is not supported.
        MustBeDefined: If value is None for a type without an empty value.
        IncompatibleType: If the value has the wrong shape for the type.
        CoercionError: If the value cannot be parsed as the type.
    """
    variable_type = resolve_type(type_tag)
    if variable_type is VariableType.ARRAY:
        return _to_array(value, delimiter)
    return _COERCERS[variable_type](value)
