"""Configuration sources: normalization of the raw source argument.

A resolution call accepts a mapping, a path to a structured file, or
nothing (meaning the process environment). :func:`load_source` turns any
of these into a :class:`ConfigSource`, a read-only snapshot built once per
call.

Missing files are strict only in production: elsewhere they behave like an
empty source, so a local checkout runs without a config file.
"""

from __future__ import annotations

import json
import logging
import os
import tomllib
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import yaml

from mandata.foundation.environments import Environment, normalize_environment
from mandata.foundation.exceptions import LoaderError
from mandata.foundation.value_types import normalize_key

logger = logging.getLogger(__name__)

__all__ = ["ConfigSource", "load_source", "parse_file"]

_YAML_SUFFIXES = frozenset({".yaml", ".yml"})


class ConfigSource(Mapping[str, Any]):
    """Read-only key to raw value lookup for one resolution call.

    Keys are normalized with :func:`normalize_key`, so ``"PORT"``,
    ``":PORT"`` and a StrEnum member valued ``"PORT"`` all address the same
    entry. Lookups stay case-sensitive.

    Args:
        data: Raw mapping to snapshot.
        explicit: False when the data came from the process environment.
        origin: Human-readable description of where the data came from.
    """

    __slots__ = ("_data", "explicit", "origin")

    def __init__(
        self,
        data: Mapping[Any, Any] | None = None,
        *,
        explicit: bool = True,
        origin: str = "mapping",
    ) -> None:
        self._data: dict[str, Any] = {normalize_key(k): v for k, v in (data or {}).items()}
        self.explicit = explicit
        self.origin = origin

    @classmethod
    def from_environ(cls) -> ConfigSource:
        """Snapshot the process environment."""
        return cls(os.environ, explicit=False, origin="environ")

    def __getitem__(self, key: object) -> Any:
        return self._data[normalize_key(key)]

    def __contains__(self, key: object) -> bool:
        return normalize_key(key) in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(origin={self.origin!r}, keys={len(self._data)})"


def parse_file(path: str | os.PathLike[str]) -> dict[str, Any]:
    """Parse a structured configuration file into a mapping.

    The parser is chosen by suffix: ``.json`` and ``.toml`` use their
    standard library parsers, everything else is read as YAML.

    Args:
        path: File to parse.

    Returns:
        Top-level mapping of the document (empty for an empty document).

    Raises:
        LoaderError: If the file cannot be read or parsed, or its top level
            is not a mapping.
    """
    file_path = Path(path)
    suffix = file_path.suffix.lower()
    try:
        if suffix == ".toml":
            with file_path.open("rb") as f:
                data: Any = tomllib.load(f)
        else:
            text = file_path.read_text(encoding="utf-8")
            if suffix == ".json":
                data = json.loads(text) if text.strip() else None
            else:
                data = yaml.safe_load(text)
    except OSError as exc:
        raise LoaderError(f"Cannot read configuration file ({exc.strerror})", file_path) from exc
    except (
        yaml.YAMLError,
        json.JSONDecodeError,
        tomllib.TOMLDecodeError,
        UnicodeDecodeError,
    ) as exc:
        raise LoaderError("Cannot parse configuration file", file_path) from exc

    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise LoaderError(
            f"Configuration file must contain a mapping, not {type(data).__name__}",
            file_path,
        )
    return dict(data)


def load_source(
    environment: Environment | str,
    raw: ConfigSource | Mapping[Any, Any] | str | os.PathLike[str] | None = None,
) -> ConfigSource:
    """Normalize a raw source argument into a ConfigSource.

    Args:
        environment: Active environment; decides how a missing file is treated.
        raw: Mapping, path to a structured file, existing ConfigSource, or
            None for the process environment.

    Returns:
        ConfigSource snapshot for this resolution call.

    Raises:
        LoaderError: If the file is missing in production, cannot be parsed,
            or the argument is of an unsupported type.
    """
    env = normalize_environment(environment)

    if raw is None:
        return ConfigSource.from_environ()
    if isinstance(raw, ConfigSource):
        return raw
    if isinstance(raw, Mapping):
        return ConfigSource(raw)
    if isinstance(raw, str | os.PathLike):
        path = Path(raw)
        if path.is_file():
            data = parse_file(path)
            logger.debug(
                "config_file_loaded",
                extra={"path": str(path), "keys": len(data)},
            )
            return ConfigSource(data, origin=str(path))
        if path.exists():
            raise LoaderError("Configuration path is not a file", path)
        if env == Environment.PRODUCTION:
            raise LoaderError("Configuration file not found", path)
        logger.info(
            "config_file_missing",
            extra={"path": str(path), "environment": env},
        )
        return ConfigSource({}, origin=str(path))

    raise LoaderError(f"Unsupported configuration source type {type(raw).__name__}")
