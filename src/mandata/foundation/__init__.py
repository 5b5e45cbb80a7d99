"""mandata foundation -- pure resolution primitives.

Environments, the error taxonomy, value types, the coercion library and
variable declarations. Nothing in this package performs I/O.
"""

from mandata.foundation.coercion import coerce, resolve_type
from mandata.foundation.declaration import (
    DeclarationOptions,
    ResolvedValue,
    VariableDeclaration,
    is_missing,
)
from mandata.foundation.environments import ENVIRONMENTS, Environment, normalize_environment
from mandata.foundation.exceptions import (
    AggregateError,
    BindingError,
    CoercionError,
    ConfigError,
    EnvironmentConflictError,
    IncompatibleType,
    InvalidDeclarationError,
    LoaderError,
    MissingDefault,
    MustBeDefined,
    UnknownType,
)
from mandata.foundation.value_types import AddressRange, KeyedMapping, VariableType, normalize_key

__all__ = [
    "ENVIRONMENTS",
    "AddressRange",
    "AggregateError",
    "BindingError",
    "CoercionError",
    "ConfigError",
    "DeclarationOptions",
    "Environment",
    "EnvironmentConflictError",
    "IncompatibleType",
    "InvalidDeclarationError",
    "KeyedMapping",
    "LoaderError",
    "MissingDefault",
    "MustBeDefined",
    "ResolvedValue",
    "UnknownType",
    "VariableDeclaration",
    "VariableType",
    "coerce",
    "is_missing",
    "normalize_environment",
    "normalize_key",
    "resolve_type",
]
