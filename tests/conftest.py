"""Shared fixtures for mandata tests."""

from __future__ import annotations

import logging
import sys
import types
from typing import TYPE_CHECKING

import pytest

from mandata import api_credential, optional, redis_url, required
from mandata.infra.logging import LIBRARY_LOGGER, get_logging_settings

if TYPE_CHECKING:
    from collections.abc import Iterator

    from mandata import VariableDeclaration


@pytest.fixture()
def scratch_module() -> Iterator[types.ModuleType]:
    """An importable, empty module removed again after the test."""
    module = types.ModuleType("mandata_scratch_settings")
    sys.modules[module.__name__] = module
    yield module
    sys.modules.pop(module.__name__, None)


@pytest.fixture(autouse=True)
def _reset_cached_settings() -> Iterator[None]:
    """Keep cached settings from leaking between tests."""
    get_logging_settings.cache_clear()
    yield
    get_logging_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_library_logger() -> Iterator[None]:
    """Drop handlers configure_logging attached to the library logger."""
    yield
    library_logger = logging.getLogger(LIBRARY_LOGGER)
    for handler in list(library_logger.handlers):
        library_logger.removeHandler(handler)
    library_logger.setLevel(logging.NOTSET)


@pytest.fixture()
def production_declarations() -> dict[str, VariableDeclaration]:
    """A typical application schema used across resolution tests."""
    return {
        "A_SECRET": api_credential(),
        "PORT": required(type="integer", default=42),
        "REDIS_URL": redis_url(type="url"),
        "NUM_THREADS": optional(type="integer", default=2, test=1),
        "ALLOWED_IPS": optional(type="ip_range", default="127.0.0.1/32"),
    }
