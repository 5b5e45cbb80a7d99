"""mandata application -- declaration builders and batch resolution."""

from mandata.application.builders import (
    DUMMY_API_KEY,
    DUMMY_CRYPTO_SECRET,
    api_credential,
    crypto_secret,
    optional,
    redis_url,
    required,
    required_in_production,
    service_url,
)
from mandata.application.resolver import (
    ResolvedConfig,
    resolve,
    resolve_all,
    resolve_runtime_environment,
)

__all__ = [
    "DUMMY_API_KEY",
    "DUMMY_CRYPTO_SECRET",
    "ResolvedConfig",
    "api_credential",
    "crypto_secret",
    "optional",
    "redis_url",
    "required",
    "required_in_production",
    "resolve",
    "resolve_all",
    "resolve_runtime_environment",
    "service_url",
]
