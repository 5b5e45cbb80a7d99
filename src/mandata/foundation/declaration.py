"""Variable declarations and the per-variable resolution algorithm.

A :class:`VariableDeclaration` describes one variable's policy: the
environments it is required in, its type, and its defaults. Resolution
against a source runs in a fixed order:

  1. Required-value check (``MustBeDefined``)
  2. Default-completeness check (``MissingDefault``), on every call
  3. Source value, unless absent or the environment is ``test``
  4. Environment-specific default, then the catch-all ``default``
  5. Coercion: source values always, defaults only when they are strings

Declarations hold no per-call state and can be reused across resolutions.
"""

from __future__ import annotations

from collections.abc import Iterable, Sized
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from mandata.foundation.coercion import coerce
from mandata.foundation.environments import ENVIRONMENTS, Environment, normalize_environment
from mandata.foundation.exceptions import InvalidDeclarationError, MissingDefault, MustBeDefined
from mandata.foundation.value_types import VariableType

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = ["DeclarationOptions", "ResolvedValue", "VariableDeclaration", "is_missing"]

_DEFAULT_KEYS: frozenset[str] = frozenset({"default", *ENVIRONMENTS})


def is_missing(value: object) -> bool:
    """Whether a raw source value counts as absent for the required check.

    ``None``, ``False``, the empty string and empty collections are missing.
    Numeric zero and whitespace-only strings are present.
    """
    if value is None or value is False:
        return True
    if isinstance(value, Sized):
        return len(value) == 0
    return False


class DeclarationOptions(BaseModel):
    """Closed set of options a declaration accepts.

    Any key outside ``required_in``, ``type``, ``delimiter``, ``default``,
    ``production``, ``development`` and ``test`` is rejected. Which default
    keys were supplied (even as ``None``) is read from ``model_fields_set``.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    required_in: frozenset[str] = frozenset()
    type: VariableType | str | None = None
    delimiter: str | None = None
    default: Any = None
    production: Any = None
    development: Any = None
    test: Any = None

    @field_validator("required_in", mode="before")
    @classmethod
    def _normalize_required_in(cls, v: Any) -> frozenset[str]:
        if v is None:
            return frozenset()
        if isinstance(v, str):
            return frozenset({normalize_environment(v)})
        if isinstance(v, Iterable):
            return frozenset(normalize_environment(env) for env in v)
        msg = f"required_in must be an environment or a collection of them, got {v!r}"
        raise ValueError(msg)

    @model_validator(mode="after")
    def _validate_delimiter(self) -> DeclarationOptions:
        if self.delimiter is None:
            return self
        if not self.delimiter:
            msg = "delimiter must not be empty"
            raise ValueError(msg)
        try:
            is_array = self.type is not None and VariableType(self.type) is VariableType.ARRAY
        except ValueError:
            is_array = False
        if not is_array:
            msg = f"delimiter is only allowed with type 'array', not {self.type!r}"
            raise ValueError(msg)
        return self


@dataclass(frozen=True, slots=True)
class ResolvedValue:
    """A successfully resolved variable.

    Attributes:
        name: Variable name as declared.
        value: Typed value after coercion.
        origin: Whether the raw value came from the source or a default.
    """

    name: str
    value: Any
    origin: Literal["source", "default"]


class VariableDeclaration:
    """Immutable resolution policy for a single variable.

    Args:
        **options: Declaration options (see :class:`DeclarationOptions`).

    Raises:
        InvalidDeclarationError: If an unknown option is given, or the
            delimiter is empty or declared for a non-array type.

    Example:
        >>> port = VariableDeclaration(required_in="production", type="integer", default=42)
        >>> port.evaluate("development", {}, "PORT")
        42
    """

    __slots__ = ("_options",)

    def __init__(self, **options: Any) -> None:
        try:
            validated = DeclarationOptions(**options)
        except PydanticValidationError as exc:
            raise _invalid_declaration(exc) from exc
        object.__setattr__(self, "_options", validated)

    def __setattr__(self, name: str, value: Any) -> None:
        msg = f"{self.__class__.__name__} is immutable"
        raise AttributeError(msg)

    def __reduce__(self) -> tuple[Any, ...]:
        # copy and pickle rebuild through __init__ since __setattr__ refuses writes.
        return (_restore_declaration, (self.declared_options(),))

    @property
    def options(self) -> DeclarationOptions:
        """The validated options."""
        return self._options

    @property
    def required_in(self) -> frozenset[str]:
        """Environments in which a value must be supplied by the source."""
        return self._options.required_in

    @property
    def type(self) -> VariableType | str | None:
        """Declared type tag (None means string)."""
        return self._options.type

    @property
    def delimiter(self) -> str | None:
        """Delimiter for array values, if declared."""
        return self._options.delimiter

    def declared_options(self) -> dict[str, Any]:
        """Options exactly as supplied at construction."""
        return {key: getattr(self._options, key) for key in self._options.model_fields_set}

    def replace(self, **overrides: Any) -> VariableDeclaration:
        """Return a new declaration with ``overrides`` merged over these options."""
        return VariableDeclaration(**{**self.declared_options(), **overrides})

    def has_default(self, environment: Environment | str) -> bool:
        """Whether a default applies to ``environment`` (own or catch-all)."""
        env = normalize_environment(environment)
        fields_set = self._options.model_fields_set
        return "default" in fields_set or (env in _DEFAULT_KEYS and env in fields_set)

    def default_for(self, environment: Environment | str) -> Any:
        """Raw default for ``environment``: its own slot, else the catch-all."""
        env = normalize_environment(environment)
        if env in ENVIRONMENTS and env in self._options.model_fields_set:
            return getattr(self._options, env)
        return self._options.default

    def is_required_in(self, environment: Environment | str) -> bool:
        """Whether ``environment`` requires a value from the source."""
        return normalize_environment(environment) in self._options.required_in

    def resolve(
        self,
        environment: Environment | str,
        source: Mapping[str, Any],
        name: str,
    ) -> ResolvedValue:
        """Resolve this declaration against a source.

        Args:
            environment: Active environment.
            source: Normalized key to raw value lookup.
            name: Variable name to look up.

        Returns:
            ResolvedValue with the typed value and its origin.

        Raises:
            MustBeDefined: Required here and missing from the source, or the
                selected value is None for a type with no empty value.
            MissingDefault: Some optional environment has no default.
            UnknownType: The declared type is not supported.
            IncompatibleType: The value has the wrong shape for the type.
            CoercionError: The value cannot be parsed as the type.
        """
        env = normalize_environment(environment)
        raw = source.get(name)

        if self.is_required_in(env) and is_missing(raw):
            raise MustBeDefined(variable=name, environment=env)

        self._check_missing_default()

        if raw is not None and env != Environment.TEST:
            value = coerce(raw, self._options.type, delimiter=self._options.delimiter)
            return ResolvedValue(name=name, value=value, origin="source")

        default = self.default_for(env)
        # Only string defaults are coerced, so a None default stays None.
        if isinstance(default, str):
            default = coerce(default, self._options.type, delimiter=self._options.delimiter)
        return ResolvedValue(name=name, value=default, origin="default")

    def evaluate(
        self,
        environment: Environment | str,
        source: Mapping[str, Any],
        name: str,
    ) -> Any:
        """Resolve this declaration and return only the typed value."""
        return self.resolve(environment, source, name).value

    def _check_missing_default(self) -> None:
        if "default" in self._options.model_fields_set:
            return
        undefaulted = [
            env.value
            for env in ENVIRONMENTS
            if env not in self._options.required_in and env not in self._options.model_fields_set
        ]
        if undefaulted:
            raise MissingDefault(undefaulted)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VariableDeclaration):
            return NotImplemented
        return self.declared_options() == other.declared_options()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        options = ", ".join(f"{k}={v!r}" for k, v in sorted(self.declared_options().items()))
        return f"{self.__class__.__name__}({options})"


def _invalid_declaration(exc: PydanticValidationError) -> InvalidDeclarationError:
    """Translate pydantic validation errors into a single declaration error."""
    unknown = sorted(
        str(error["loc"][0]) for error in exc.errors() if error["type"] == "extra_forbidden"
    )
    if unknown:
        return InvalidDeclarationError(f"unknown options {', '.join(unknown)}", options=unknown)
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or "options"
    return InvalidDeclarationError(f"{field}: {first['msg']}", field=field)


def _restore_declaration(options: dict[str, Any]) -> VariableDeclaration:
    return VariableDeclaration(**options)
