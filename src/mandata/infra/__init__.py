"""mandata infra -- sources, binding adapters, settings and logging."""

from mandata.infra.binding import Binder, DictBinder, ModuleBinder
from mandata.infra.logging import LoggingSettings, configure_logging, get_logger
from mandata.infra.settings import MODE_VARIABLE, RuntimeSettings
from mandata.infra.sources import ConfigSource, load_source, parse_file

__all__ = [
    "MODE_VARIABLE",
    "Binder",
    "ConfigSource",
    "DictBinder",
    "LoggingSettings",
    "ModuleBinder",
    "RuntimeSettings",
    "configure_logging",
    "get_logger",
    "load_source",
    "parse_file",
]
