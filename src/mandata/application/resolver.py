"""Batch resolution of a declaration set against a configuration source.

Every declaration is evaluated, even after another one has failed, so a
broken deployment reports all of its configuration problems at once. The
failures are raised together as a single :class:`AggregateError`, sorted by
variable name. Values are only handed to a binder once the whole batch has
resolved.

Example:
    >>> from mandata import optional, required, resolve
    >>> config = resolve(
    ...     "development",
    ...     {"PORT": required(type="integer", default=42)},
    ...     {},
    ... )
    >>> config.PORT
    42
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator, Mapping
from typing import TYPE_CHECKING, Any

from mandata.foundation.declaration import ResolvedValue, VariableDeclaration
from mandata.foundation.environments import Environment, normalize_environment
from mandata.foundation.exceptions import (
    AggregateError,
    ConfigError,
    EnvironmentConflictError,
    InvalidDeclarationError,
)
from mandata.infra.settings import MODE_VARIABLE, RuntimeSettings
from mandata.infra.sources import ConfigSource, load_source

if TYPE_CHECKING:
    from mandata.infra.binding import Binder

logger = logging.getLogger(__name__)

__all__ = [
    "ResolvedConfig",
    "ResolvedValue",
    "resolve",
    "resolve_all",
    "resolve_runtime_environment",
]

Declarations = Mapping[str, VariableDeclaration] | Iterable[tuple[str, VariableDeclaration]]
RawSource = ConfigSource | Mapping[Any, Any] | str | os.PathLike[str] | None


class ResolvedConfig(Mapping[str, Any]):
    """Read-only result of a successful resolution.

    Maps variable names to typed values; declared names are also readable
    as attributes. The underlying :class:`ResolvedValue` entries (with
    their origin) are kept in ``entries``.

    Args:
        environment: Environment the values were resolved for.
        entries: Resolved values, one per declared variable.
    """

    __slots__ = ("_values", "entries", "environment")

    def __init__(self, environment: str, entries: Iterable[ResolvedValue]) -> None:
        self.environment = environment
        self.entries: tuple[ResolvedValue, ...] = tuple(sorted(entries, key=lambda e: e.name))
        self._values: dict[str, Any] = {entry.name: entry.value for entry in self.entries}

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._values[name]
        except KeyError:
            msg = f"{name!r} was not declared"
            raise AttributeError(msg) from None

    def __repr__(self) -> str:
        names = list(self._values)
        return f"{self.__class__.__name__}(environment={self.environment!r}, names={names!r})"


def _declaration_items(declarations: Declarations) -> list[tuple[str, VariableDeclaration]]:
    """Validate and list ``(name, declaration)`` pairs."""
    items = declarations.items() if isinstance(declarations, Mapping) else declarations
    checked: list[tuple[str, VariableDeclaration]] = []
    for name, declaration in items:
        if not isinstance(declaration, VariableDeclaration):
            raise InvalidDeclarationError(
                f"{name} is declared with a {type(declaration).__name__}, "
                "not a VariableDeclaration",
                variable=str(name),
            )
        checked.append((str(name), declaration))
    return checked


def resolve_all(
    environment: Environment | str,
    declarations: Declarations,
    source: Mapping[str, Any],
) -> ResolvedConfig:
    """Evaluate every declaration against an already normalized source.

    Args:
        environment: Active environment.
        declarations: Mapping (or pairs) of variable name to declaration.
        source: Key to raw value lookup, typically a ConfigSource.

    Returns:
        ResolvedConfig holding every typed value.

    Raises:
        AggregateError: If one or more declarations failed; lists every
            failure sorted by variable name.
        InvalidDeclarationError: If a value in ``declarations`` is not a
            VariableDeclaration.
    """
    env = normalize_environment(environment)
    resolved: list[ResolvedValue] = []
    errors: list[tuple[str, str]] = []

    for name, declaration in _declaration_items(declarations):
        try:
            entry = declaration.resolve(env, source, name)
        except ConfigError as exc:
            errors.append((name, exc.message))
            continue
        resolved.append(entry)
        logger.debug(
            "config_variable_resolved",
            extra={"variable": name, "environment": env, "origin": entry.origin},
        )

    if errors:
        error = AggregateError(errors)
        logger.warning(
            "config_resolution_failed",
            extra={"environment": env, "variables": list(error.names)},
        )
        raise error

    return ResolvedConfig(env, resolved)


def _publish(
    config: ResolvedConfig,
    config_source: ConfigSource,
    binder: Binder | None,
) -> ResolvedConfig:
    """Bind every resolved value, then log the successful resolution.

    Every name is checked with the binder before the first one is bound, so
    a collision leaves the binder's target untouched.
    """
    if binder is not None:
        for entry in config.entries:
            binder.check(entry.name, entry.value)
        for entry in config.entries:
            binder.bind(entry.name, entry.value)

    logger.info(
        "config_resolved",
        extra={
            "environment": config.environment,
            "variables": len(config),
            "source": config_source.origin,
        },
    )
    return config


def resolve(
    environment: Environment | str,
    declarations: Declarations,
    source: RawSource = None,
    *,
    binder: Binder | None = None,
) -> ResolvedConfig:
    """Resolve a declaration set and optionally bind the results.

    Args:
        environment: Active environment.
        declarations: Mapping (or pairs) of variable name to declaration.
        source: Mapping, path to a structured file, ConfigSource, or None
            for the process environment.
        binder: Receives every resolved value after the whole batch succeeded.

    Returns:
        ResolvedConfig holding every typed value.

    Raises:
        LoaderError: If the source cannot be loaded; raised before any
            declaration is evaluated.
        AggregateError: If one or more declarations failed.
        BindingError: If the binder rejects a name; nothing is bound then.
    """
    env = normalize_environment(environment)
    config_source = load_source(env, source)
    config = resolve_all(env, declarations, config_source)
    return _publish(config, config_source, binder)


def resolve_runtime_environment(
    declarations: Declarations,
    source: RawSource = None,
    *,
    binder: Binder | None = None,
    settings: RuntimeSettings | None = None,
) -> ResolvedConfig:
    """Resolve for the runtime mode taken from the ``ENVIRONMENT`` variable.

    The mode defaults to ``development``. It is bound and returned under
    ``ENVIRONMENT`` in its normalized (lower-case) form.

    Args:
        declarations: Mapping (or pairs) of variable name to declaration;
            must not declare ``ENVIRONMENT``.
        source: Same as for :func:`resolve`.
        binder: Same as for :func:`resolve`.
        settings: Runtime settings. If not provided, the mode is read from
            the same process environment snapshot the call resolves against.

    Raises:
        InvalidDeclarationError: If ``ENVIRONMENT`` is declared.
        EnvironmentConflictError: If an explicit source sets ``ENVIRONMENT``
            to a different mode than the process environment.
        LoaderError: If the source cannot be loaded.
        AggregateError: If one or more declarations failed.
        BindingError: If the binder rejects a name; nothing is bound then.
    """
    items = _declaration_items(declarations)
    if any(name == MODE_VARIABLE for name, _ in items):
        raise InvalidDeclarationError(
            f"{MODE_VARIABLE} is set from the runtime mode and must not be declared",
            variable=MODE_VARIABLE,
        )

    if settings is None:
        environ = ConfigSource.from_environ()
        settings = RuntimeSettings(**{MODE_VARIABLE: environ.get(MODE_VARIABLE)})
        if source is None:
            source = environ
    mode = settings.environment
    config_source = load_source(mode, source)

    if config_source.explicit:
        source_mode = config_source.get(MODE_VARIABLE)
        if source_mode is not None and str(source_mode).strip().lower() != mode:
            raise EnvironmentConflictError(MODE_VARIABLE, mode, source_mode)

    config = resolve_all(mode, items, config_source)
    mode_entry = ResolvedValue(name=MODE_VARIABLE, value=mode, origin="default")
    config = ResolvedConfig(mode, (*config.entries, mode_entry))
    return _publish(config, config_source, binder)
