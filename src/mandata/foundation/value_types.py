"""Typed value objects produced by coercion.

VariableType is the closed set of type tags a declaration can name.
AddressRange and KeyedMapping are the structured results of the
``ip_range`` and ``hash`` coercions.
"""

from __future__ import annotations

import ipaddress
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum, StrEnum
from typing import Any

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


class VariableType(StrEnum):
    """Type tags selecting the coercion applied to a raw value."""

    STRING = "string"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    URL = "url"
    ADDRESSABLE = "addressable"
    IP_ADDRESS = "ip_address"
    IP_RANGE = "ip_range"
    TIMESTAMP = "timestamp"
    HASH = "hash"
    ARRAY = "array"

    @classmethod
    def _missing_(cls, value: object) -> VariableType | None:
        # Accept hyphenated spellings and the long name for addressable URIs.
        if isinstance(value, str):
            normalized = value.strip().lower().replace("-", "_")
            if normalized == "addressable_uri":
                return cls.ADDRESSABLE
            for member in cls:
                if member.value == normalized:
                    return member
        return None


def normalize_key(key: object) -> str:
    """Normalize a mapping key so its representation does not matter.

    ``"PORT"``, ``":PORT"`` and an Enum member whose value is ``"PORT"``
    all normalize to ``"PORT"``. Case is preserved.
    """
    if isinstance(key, Enum):
        key = key.value
    key = str(key)
    if key.startswith(":") and len(key) > 1:
        return key[1:]
    return key


class KeyedMapping(Mapping[str, Any]):
    """Read-only mapping with representation-insensitive key lookup.

    Keys are stored in normalized form (see :func:`normalize_key`), so a
    value loaded under ``"region"`` can be read with ``"region"``,
    ``":region"`` or a StrEnum member valued ``"region"``.

    Example:
        >>> m = KeyedMapping({"region": "eu-west-1"})
        >>> m[":region"]
        'eu-west-1'
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[Any, Any] | None = None) -> None:
        self._data: dict[str, Any] = {}
        for key, value in (data or {}).items():
            self._data[normalize_key(key)] = value

    def __getitem__(self, key: object) -> Any:
        return self._data[normalize_key(key)]

    def __contains__(self, key: object) -> bool:
        return normalize_key(key) in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, KeyedMapping):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self._data == {normalize_key(k): v for k, v in other.items()}
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._data!r})"


@dataclass(frozen=True, slots=True)
class AddressRange:
    """Inclusive range of IP addresses of a single IP version.

    Attributes:
        first: Lowest address in the range.
        last: Highest address in the range.

    Raises:
        ValueError: If the bounds mix IP versions or are reversed.

    Example:
        >>> r = AddressRange.from_network("172.17.16.0/24")
        >>> "172.17.16.15" in r
        True
    """

    first: IPAddress
    last: IPAddress

    def __post_init__(self) -> None:
        """Validate bound versions and ordering on construction."""
        if self.first.version != self.last.version:
            msg = f"Cannot mix IPv{self.first.version} and IPv{self.last.version} bounds"
            raise ValueError(msg)
        if self.first > self.last:
            msg = f"Range start {self.first} is after range end {self.last}"
            raise ValueError(msg)

    @classmethod
    def from_network(cls, cidr: str) -> AddressRange:
        """Build the range covered by a CIDR block (host bits are masked)."""
        network = ipaddress.ip_network(cidr, strict=False)
        return cls(network.network_address, network.broadcast_address)

    @classmethod
    def from_bounds(cls, first: str, last: str) -> AddressRange:
        """Build a range from two address literals."""
        return cls(ipaddress.ip_address(first.strip()), ipaddress.ip_address(last.strip()))

    def __contains__(self, item: object) -> bool:
        if isinstance(item, str):
            try:
                item = ipaddress.ip_address(item)
            except ValueError:
                return False
        if not isinstance(item, ipaddress.IPv4Address | ipaddress.IPv6Address):
            return False
        if item.version != self.first.version:
            return False
        return self.first <= item <= self.last

    @property
    def size(self) -> int:
        """Number of addresses in the range."""
        return int(self.last) - int(self.first) + 1

    def __str__(self) -> str:
        return f"{self.first}..{self.last}"
