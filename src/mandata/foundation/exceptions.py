"""Configuration error hierarchy for type-safe error handling.

Every failure raised while declaring, loading, resolving or binding
configuration derives from :class:`ConfigError`. Errors carry a
machine-readable ``error_code`` and structured ``context`` for logging,
while ``message`` stays short and stable so aggregated reports render the
same way on every run.

Example:
    >>> from mandata.foundation.exceptions import MustBeDefined
    >>> raise MustBeDefined()
    MustBeDefined: must be defined
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable

__all__ = [
    "AggregateError",
    "BindingError",
    "CoercionError",
    "ConfigError",
    "EnvironmentConflictError",
    "IncompatibleType",
    "InvalidDeclarationError",
    "LoaderError",
    "MissingDefault",
    "MustBeDefined",
    "UnknownType",
]


class ConfigError(Exception):
    """Base class for all configuration errors.

    Attributes:
        error_code: Machine-readable error code.
        message: Human-readable error description, without context.
        context: Structured debugging information (variable names, paths).

    Example:
        >>> raise ConfigError("Resolution failed", context={"variable": "PORT"})
        ConfigError: Resolution failed (variable=PORT)
    """

    error_code: str = "CONFIG_ERROR"

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize configuration error with message and optional context.

        Args:
            message: Human-readable error description.
            context: Structured debugging information. Keys should be snake_case.
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """String representation including context for logging."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message

    def __repr__(self) -> str:
        """Detailed representation for debugging."""
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class MustBeDefined(ConfigError):
    """Raised when a value is required but absent.

    Used both for variables required in the active environment and for
    types that have no sensible empty value (URLs, addresses, timestamps).
    """

    error_code: str = "MUST_BE_DEFINED"

    def __init__(self, **context: Any) -> None:
        super().__init__("must be defined", context)


class MissingDefault(ConfigError):
    """Raised when a declaration does not cover every optional environment.

    Every environment a variable is not required in needs its own default,
    unless a catch-all ``default`` was declared.

    Attributes:
        environments: Environments left without a default.
    """

    error_code: str = "MISSING_DEFAULT"

    def __init__(self, environments: Iterable[str] = (), **context: Any) -> None:
        self.environments = tuple(environments)
        if self.environments:
            context = {"environments": ",".join(self.environments), **context}
        super().__init__("missing default value", context)


class UnknownType(ConfigError):
    """Raised when a declaration names a type with no coercion.

    Attributes:
        type_tag: The unrecognized type tag.
    """

    error_code: str = "UNKNOWN_TYPE"

    def __init__(self, type_tag: object) -> None:
        self.type_tag = type_tag
        super().__init__(f"unknown type {type_tag}", {"type": str(type_tag)})


class IncompatibleType(ConfigError):
    """Raised when a raw value has the wrong shape for its declared type.

    Example:
        >>> raise IncompatibleType("hash", "str")
        IncompatibleType: expected hash, got str
    """

    error_code: str = "INCOMPATIBLE_TYPE"

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"expected {expected}, got {actual}",
            {"expected": expected, "actual": actual},
        )


class CoercionError(ConfigError):
    """Raised when a present value cannot be parsed as its declared type.

    The message always includes the offending raw text.

    Attributes:
        type_tag: Declared type that failed to parse.
        raw_value: The value that could not be coerced.
    """

    error_code: str = "COERCION_ERROR"

    def __init__(self, type_tag: str, raw_value: object, reason: str | None = None) -> None:
        self.type_tag = type_tag
        self.raw_value = raw_value
        message = f"invalid {type_tag} value: {str(raw_value)!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class LoaderError(ConfigError):
    """Raised when a configuration source cannot be loaded.

    Covers missing files in strict environments, unreadable or unparsable
    files, and unsupported source arguments. Aborts resolution before any
    variable is evaluated.

    Attributes:
        path: Path of the file involved, if any.
    """

    error_code: str = "LOADER_ERROR"

    def __init__(self, reason: str, path: object | None = None) -> None:
        self.path = None if path is None else str(path)
        self.reason = reason
        message = reason if self.path is None else f"{reason}: {self.path}"
        super().__init__(message)


class InvalidDeclarationError(ConfigError):
    """Raised when a declaration is built with illegal options."""

    error_code: str = "INVALID_DECLARATION"

    def __init__(self, reason: str, **context: Any) -> None:
        self.reason = reason
        super().__init__(f"Invalid declaration: {reason}", context)


class EnvironmentConflictError(ConfigError):
    """Raised when the runtime mode disagrees with an explicit source."""

    error_code: str = "ENVIRONMENT_CONFLICT"

    def __init__(self, variable: str, mode: str, source_value: object) -> None:
        self.variable = variable
        self.mode = mode
        self.source_value = source_value
        super().__init__(
            f"{variable} is {mode!r} in the process environment "
            f"but {source_value!r} in the configuration source",
            {"variable": variable},
        )


class BindingError(ConfigError):
    """Raised when a resolved value cannot be bound under its name."""

    error_code: str = "BINDING_ERROR"

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Cannot bind {name}: {reason}", {"name": name})


class AggregateError(ConfigError):
    """Raised once for a resolution where one or more variables failed.

    Per-variable failures are sorted by variable name and rendered as
    ``"NAME: message"`` pairs joined by commas, so the same broken input
    always yields the same message.

    Attributes:
        errors: ``(name, message)`` pairs in ascending name order.

    Example:
        >>> raise AggregateError([("PORT", "must be defined"), ("A_SECRET", "must be defined")])
        AggregateError: A_SECRET: must be defined, PORT: must be defined
    """

    error_code: str = "AGGREGATE_ERROR"

    def __init__(self, errors: Iterable[tuple[str, str]]) -> None:
        self.errors: tuple[tuple[str, str], ...] = tuple(
            sorted(((str(name), message) for name, message in errors), key=lambda e: e[0])
        )
        message = ", ".join(f"{name}: {error}" for name, error in self.errors)
        super().__init__(message)

    @property
    def names(self) -> tuple[str, ...]:
        """Names of the variables that failed, in report order."""
        return tuple(name for name, _ in self.errors)
