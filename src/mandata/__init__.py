"""mandata -- environment-aware, typed configuration declarations.

Declare each variable once with its requiredness, type and defaults, then
resolve the whole set for an environment in a single pass:

    from mandata import api_credential, optional, required, resolve

    config = resolve(
        "production",
        {
            "A_SECRET": api_credential(),
            "PORT": required(type="integer", default=42),
            "SPROCKET_ENABLED": optional(type="boolean", default=False),
        },
    )
    config.PORT

Every failing variable is reported together in one AggregateError.
"""

from mandata.application import (
    DUMMY_API_KEY,
    DUMMY_CRYPTO_SECRET,
    ResolvedConfig,
    api_credential,
    crypto_secret,
    optional,
    redis_url,
    required,
    required_in_production,
    resolve,
    resolve_all,
    resolve_runtime_environment,
    service_url,
)
from mandata.foundation import (
    ENVIRONMENTS,
    AddressRange,
    AggregateError,
    BindingError,
    CoercionError,
    ConfigError,
    Environment,
    EnvironmentConflictError,
    IncompatibleType,
    InvalidDeclarationError,
    KeyedMapping,
    LoaderError,
    MissingDefault,
    MustBeDefined,
    ResolvedValue,
    UnknownType,
    VariableDeclaration,
    VariableType,
    coerce,
)
from mandata.infra import (
    MODE_VARIABLE,
    Binder,
    ConfigSource,
    DictBinder,
    ModuleBinder,
    load_source,
)

__all__ = [
    "DUMMY_API_KEY",
    "DUMMY_CRYPTO_SECRET",
    "ENVIRONMENTS",
    "MODE_VARIABLE",
    "AddressRange",
    "AggregateError",
    "Binder",
    "BindingError",
    "CoercionError",
    "ConfigError",
    "ConfigSource",
    "DictBinder",
    "Environment",
    "EnvironmentConflictError",
    "IncompatibleType",
    "InvalidDeclarationError",
    "KeyedMapping",
    "LoaderError",
    "MissingDefault",
    "ModuleBinder",
    "MustBeDefined",
    "ResolvedConfig",
    "ResolvedValue",
    "UnknownType",
    "VariableDeclaration",
    "VariableType",
    "api_credential",
    "coerce",
    "crypto_secret",
    "load_source",
    "optional",
    "redis_url",
    "required",
    "required_in_production",
    "resolve",
    "resolve_all",
    "resolve_runtime_environment",
    "service_url",
]
