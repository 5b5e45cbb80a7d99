"""Runtime settings read from the process environment.

The runtime mode (``ENVIRONMENT``) selects which environment a
:func:`mandata.application.resolver.resolve_runtime_environment` call
resolves for. It defaults to ``development`` when unset.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mandata.foundation.environments import Environment

MODE_VARIABLE: str = "ENVIRONMENT"


class RuntimeSettings(BaseSettings):
    """Runtime mode configuration from environment variables.

    Loads configuration from environment variables:
    - ENVIRONMENT: Runtime mode (production, development, test, or any
      other name). Default: development

    Example:
        >>> RuntimeSettings(ENVIRONMENT="Production").environment
        'production'
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        populate_by_name=True,
    )

    environment: str = Field(
        default=Environment.DEVELOPMENT.value,
        alias=MODE_VARIABLE,
        description="Runtime mode used to select defaults and requiredness",
    )

    @field_validator("environment", mode="before")
    @classmethod
    def normalize_environment(cls, v: Any) -> str:
        """Lower-case and strip the mode; blank means development."""
        if v is None:
            return Environment.DEVELOPMENT.value
        text = str(v).strip().lower()
        return text or Environment.DEVELOPMENT.value

    @property
    def is_production(self) -> bool:
        """True when running in production."""
        return self.environment == Environment.PRODUCTION

