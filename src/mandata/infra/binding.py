"""Binding adapters that publish resolved values under their names.

The resolver only returns values; where they end up is decided by a
:class:`Binder`. :class:`ModuleBinder` sets them as attributes of a module
so application code can ``from myapp import settings`` and read
``settings.PORT``. :class:`DictBinder` collects them into a dict.
"""

from __future__ import annotations

import importlib
import inspect
import logging
import sys
from typing import Any, Protocol, runtime_checkable

from mandata.foundation.exceptions import BindingError

logger = logging.getLogger(__name__)

__all__ = ["Binder", "DictBinder", "ModuleBinder"]


@runtime_checkable
class Binder(Protocol):
    """Protocol for publishing a resolved value under its variable name.

    The resolver calls :meth:`check` for every name before the first
    :meth:`bind`, so a rejected name leaves the target untouched.
    """

    def check(self, name: str, value: Any) -> None:
        """Raise BindingError if ``value`` cannot be bound under ``name``."""
        ...

    def bind(self, name: str, value: Any) -> None:
        """Bind ``value`` under ``name``."""
        ...


class ModuleBinder:
    """Bind resolved values as attributes of a module or namespace object.

    A name already holding a module, class or function on the target is a
    collision and raises :class:`BindingError`; plain values are replaced.

    Args:
        target: Module (or any object accepting attributes) to bind into.

    Example:
        >>> import types
        >>> settings = types.ModuleType("settings")
        >>> binder = ModuleBinder(settings)
        >>> binder.bind("PORT", 42)
        >>> settings.PORT
        42
    """

    def __init__(self, target: Any) -> None:
        self._target = target
        self._bound: list[str] = []

    @classmethod
    def for_module(cls, module_name: str) -> ModuleBinder:
        """Create a binder for a module by dotted name, importing it if needed."""
        module = sys.modules.get(module_name)
        if module is None:
            module = importlib.import_module(module_name)
        return cls(module)

    @property
    def target(self) -> Any:
        """The namespace values are bound into."""
        return self._target

    @property
    def bound_names(self) -> tuple[str, ...]:
        """Names bound by this binder, in binding order."""
        return tuple(self._bound)

    def check(self, name: str, value: Any) -> None:
        """Validate that ``name`` can be set on the target.

        Raises:
            BindingError: If the name is not an identifier, or already holds
                a module, class or function.
        """
        if not name.isidentifier():
            raise BindingError(name, "not a valid identifier")
        existing = getattr(self._target, name, None)
        if inspect.ismodule(existing) or inspect.isclass(existing) or inspect.isroutine(existing):
            raise BindingError(name, f"already defined as {type(existing).__name__}")

    def bind(self, name: str, value: Any) -> None:
        """Set ``name`` on the target after :meth:`check`."""
        self.check(name, value)
        setattr(self._target, name, value)
        if name not in self._bound:
            self._bound.append(name)
        logger.debug(
            "config_value_bound",
            extra={
                "variable": name,
                "target": getattr(self._target, "__name__", repr(self._target)),
            },
        )

    def unbind_all(self) -> None:
        """Remove every attribute this binder has set."""
        for name in self._bound:
            if hasattr(self._target, name):
                delattr(self._target, name)
        self._bound.clear()


class DictBinder:
    """Collect bindings into a plain dict.

    Rebinding a name with a value of a different type raises
    :class:`BindingError`.
    """

    def __init__(self) -> None:
        self.values: dict[str, Any] = {}

    def check(self, name: str, value: Any) -> None:
        """Reject rebinding ``name`` with a value of a different type."""
        if name in self.values:
            existing = self.values[name]
            if existing is not None and value is not None and type(existing) is not type(value):
                raise BindingError(
                    name,
                    f"already bound to a {type(existing).__name__}, not {type(value).__name__}",
                )

    def bind(self, name: str, value: Any) -> None:
        """Store ``value`` under ``name``."""
        self.check(name, value)
        self.values[name] = value
