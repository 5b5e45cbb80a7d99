"""Structured logging configuration using structlog.

The library itself logs through stdlib ``logging`` under the ``mandata``
logger (``config_resolved``, ``config_resolution_failed``,
``config_file_missing`` and friends, with context passed as ``extra``).
:func:`configure_logging` attaches a handler to that logger which renders
those records through the same structlog chain as structlog-native events:
JSON in production, console output elsewhere, and secret-looking keys
redacted by :class:`SensitiveDataProcessor` in both.

Resolution never logs configuration values, only variable names and
origins.

Usage:
    from mandata.infra.logging import configure_logging, get_logger
    configure_logging()

    logger = get_logger(__name__)
    logger.info("config_loaded", variables=12, environment="production")
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from collections.abc import MutableMapping

Processor = structlog.types.Processor

SENSITIVE_FIELDS: frozenset[str] = frozenset(
    {
        "password",
        "passwd",
        "token",
        "authorization",
        "api_key",
        "apikey",
        "secret",
        "secret_key",
        "private_key",
        "credential",
        "credentials",
    }
)

# Substrings marking a key as sensitive (e.g. A_SECRET, DB_PASSWORD, AUTH_TOKEN).
SENSITIVE_FRAGMENTS: tuple[str, ...] = ("password", "token", "secret", "credential")

REDACTED_VALUE: str = "***REDACTED***"

LIBRARY_LOGGER: str = "mandata"

_HANDLER_NAME: str = "mandata.structlog"


class LoggingSettings(BaseSettings):
    """Logging configuration settings from environment variables.

    Loads configuration from environment variables:
    - LOG_LEVEL: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - ENVIRONMENT: Runtime mode (development, production, test, ...)

    Example:
        >>> LoggingSettings(log_level="debug", environment="production").use_json_logs
        True
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        populate_by_name=True,
    )

    log_level: str = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Minimum log level to output",
    )
    environment: str = Field(
        default="development",
        alias="ENVIRONMENT",
        description="Runtime mode for format selection",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        """Normalize log level to uppercase."""
        if isinstance(v, str):
            return v.strip().upper()
        return str(v)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known level.

        Raises:
            ValueError: If log level is not a valid Python logging level.
        """
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v not in valid_levels:
            msg = f"log_level must be one of {sorted(valid_levels)}"
            raise ValueError(msg)
        return v

    @property
    def use_json_logs(self) -> bool:
        """JSON logs in production, console output everywhere else."""
        return self.environment.strip().lower() == "production"

    @property
    def log_level_int(self) -> int:
        """Log level as a logging module constant."""
        return getattr(logging, self.log_level, logging.INFO)


class SensitiveDataProcessor:
    """Structlog processor redacting secret-looking fields from log context.

    A field is redacted when its lower-cased name is in SENSITIVE_FIELDS or
    contains one of SENSITIVE_FRAGMENTS.

    Example:
        >>> processor = SensitiveDataProcessor()
        >>> processor(None, "info", {"event": "loaded", "A_SECRET": "beef"})["A_SECRET"]
        '***REDACTED***'
    """

    def __call__(
        self,
        logger: Any,
        method_name: str,
        event_dict: MutableMapping[str, Any],
    ) -> MutableMapping[str, Any]:
        for key in list(event_dict.keys()):
            if self._is_sensitive(key):
                event_dict[key] = REDACTED_VALUE
        return event_dict

    def _is_sensitive(self, key: str) -> bool:
        key_lower = key.lower()
        if key_lower in SENSITIVE_FIELDS:
            return True
        return any(fragment in key_lower for fragment in SENSITIVE_FRAGMENTS)


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached LoggingSettings instance.

    Clear cache with ``get_logging_settings.cache_clear()`` for testing.
    """
    return LoggingSettings()


def configure_logging(settings: LoggingSettings | None = None) -> None:
    """Configure structlog and route the library's stdlib records through it.

    Shared chain: log level, ISO 8601 UTC timestamps, sensitive data
    redaction, exception formatting, then a JSON renderer in production or a
    console renderer elsewhere. Records from the ``mandata`` stdlib loggers
    additionally get their logger name and ``extra`` fields merged into the
    event before redaction.

    Calling this again replaces the handler installed by the previous call.
    Records still propagate to the root logger.

    Args:
        settings: Optional LoggingSettings. Loaded from the environment if
            not provided.
    """
    if settings is None:
        settings = get_logging_settings()

    shared: list[Processor] = [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        SensitiveDataProcessor(),
        structlog.processors.format_exc_info,
    ]

    renderer: Processor
    if settings.use_json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[structlog.contextvars.merge_contextvars, *shared, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(settings.log_level_int),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.ExtraAdder(),
            *shared,
        ],
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )
    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(formatter)

    library_logger = logging.getLogger(LIBRARY_LOGGER)
    for existing in list(library_logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            library_logger.removeHandler(existing)
    library_logger.addHandler(handler)
    library_logger.setLevel(settings.log_level_int)


def get_logger(name: str | None = None) -> structlog.typing.WrappedLogger:
    """Get a structlog logger bound to the given name.

    Args:
        name: Logger name (typically ``__name__``). If None, returns an
            unbound logger.
    """
    logger = structlog.get_logger()
    if name is not None:
        logger = logger.bind(logger=name)
    return logger
