"""Declaration builders used to write configuration schemas.

Each builder pre-fills requiredness, type or defaults and returns a
:class:`VariableDeclaration`. Options passed by the caller always win over
the pre-filled ones.

Example:
    >>> from mandata.application.builders import api_credential, required
    >>> schema = {
    ...     "A_SECRET": api_credential(development=None),
    ...     "PORT": required(type="integer", default=42),
    ... }
"""

from __future__ import annotations

from typing import Any

from mandata.foundation.declaration import VariableDeclaration
from mandata.foundation.environments import Environment

__all__ = [
    "DUMMY_API_KEY",
    "DUMMY_CRYPTO_SECRET",
    "api_credential",
    "crypto_secret",
    "optional",
    "redis_url",
    "required",
    "required_in_production",
    "service_url",
]

DUMMY_API_KEY: str = "dummy_api_key"
DUMMY_CRYPTO_SECRET: str = (
    "dummysecretdummysecretdummysecretdummysecretdummysecretdummysecretdummysecre"
)


def required(**options: Any) -> VariableDeclaration:
    """Declare a variable that must be supplied in production.

    Other environments fall back to defaults: give either a catch-all
    ``default`` or one default per optional environment. Pass
    ``required_in`` to require it elsewhere too.
    """
    options.setdefault("required_in", Environment.PRODUCTION)
    return VariableDeclaration(**options)


required_in_production = required


def optional(**options: Any) -> VariableDeclaration:
    """Declare a variable that falls back to defaults when not supplied.

    You must either specify a ``default``, or defaults for each of
    ``production``, ``development`` and ``test``.
    """
    return VariableDeclaration(**options)


def api_credential(**options: Any) -> VariableDeclaration:
    """Declare a credential for an external API (username, key, token).

    Shorthand for ``required(type="string", default=DUMMY_API_KEY)``.
    """
    return required(**{"type": "string", "default": DUMMY_API_KEY, **options})


def crypto_secret(**options: Any) -> VariableDeclaration:
    """Declare a secret key used by an encryption or signing algorithm.

    Differs from :func:`api_credential` only in its dummy default. To
    generate a production secret, try ``openssl rand -hex 256``.
    """
    return required(**{"type": "string", "default": DUMMY_CRYPTO_SECRET, **options})


def service_url(development: str, test: str, **options: Any) -> VariableDeclaration:
    """Declare a service URL required in production with local endpoints elsewhere."""
    return required(**{"development": development, "test": test, **options})


def redis_url(**options: Any) -> VariableDeclaration:
    """Declare a Redis URL; development and test use local databases 1 and 3."""
    return service_url(
        **{"development": "redis://localhost/1", "test": "redis://localhost/3", **options}
    )
