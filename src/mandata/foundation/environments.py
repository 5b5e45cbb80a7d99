"""Deployment environments that drive requiredness and defaulting.

Only the three members of :class:`Environment` receive special treatment.
Any other identifier (e.g. ``"staging"``) is still accepted wherever an
environment is expected and simply matches no per-environment default.

Example:
    >>> from mandata.foundation.environments import Environment
    >>> Environment.TEST == "test"
    True
"""

from __future__ import annotations

from enum import StrEnum


class Environment(StrEnum):
    """Closed set of environments with dedicated default slots."""

    PRODUCTION = "production"
    DEVELOPMENT = "development"
    TEST = "test"


ENVIRONMENTS: tuple[Environment, ...] = (
    Environment.PRODUCTION,
    Environment.DEVELOPMENT,
    Environment.TEST,
)


def normalize_environment(value: Environment | str) -> str:
    """Return the plain string form of an environment identifier.

    Args:
        value: Environment member or arbitrary environment name.

    Returns:
        The environment name as a plain ``str``.

    Raises:
        TypeError: If value is neither a string nor an Environment.
    """
    if isinstance(value, Environment):
        return value.value
    if isinstance(value, str):
        return value
    msg = f"Environment must be a string, got {type(value).__name__}"
    raise TypeError(msg)
