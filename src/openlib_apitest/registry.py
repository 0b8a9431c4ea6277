"""Execution-unit scoped registry of scenario contexts.

Behave step definitions and standalone pytest tests that run on the same thread
share one :class:`ScenarioContext` through this registry. Threads running in
parallel each get their own context.
"""

import logging
import threading
import weakref
from typing import Callable, Dict, MutableMapping, Optional

from .context import ScenarioContext
from .types import ExecutionUnit

__all__ = ["ContextRegistry", "registry", "get_context", "set_context", "clear_context"]

logger = logging.getLogger(__name__)


def current_unit() -> ExecutionUnit:
    """Returns the token of the calling execution unit (the current Thread object)."""
    return threading.current_thread()


class ContextRegistry:
    """
    Maps execution units to their scenario context.

    The table is partitioned by unit token: each unit only reads and writes its
    own key, so units never observe or perturb each other's context.

    Every operation accepts an explicit ``unit`` token. When omitted, the calling
    thread is used. Threads are held weakly: the context of a finished thread goes
    away with its Thread object and is never handed to a thread started later,
    even when the interpreter reuses the thread ident.
    """

    def __init__(self, context_factory: Callable[[], ScenarioContext] = ScenarioContext):
        self._thread_contexts: MutableMapping[threading.Thread, ScenarioContext] = weakref.WeakKeyDictionary()
        self._token_contexts: Dict[ExecutionUnit, ScenarioContext] = {}
        self._context_factory = context_factory

    def __len__(self) -> int:
        return len(self._thread_contexts) + len(self._token_contexts)

    def __contains__(self, unit: ExecutionUnit) -> bool:
        return unit in self._table(unit)

    def _table(self, unit: ExecutionUnit) -> MutableMapping[ExecutionUnit, ScenarioContext]:
        if isinstance(unit, threading.Thread):
            return self._thread_contexts
        return self._token_contexts

    def get_context(self, unit: Optional[ExecutionUnit] = None) -> ScenarioContext:
        """Returns the context of the unit, creating a fresh one on first access.

        Args:
            unit (Optional[ExecutionUnit]): The unit token. Defaults to the calling thread.

        Returns:
            ScenarioContext: The unit's context. Never None.
        """
        if unit is None:
            unit = current_unit()

        table = self._table(unit)
        context = table.get(unit)
        if context is None:
            context = table.setdefault(unit, self._context_factory())
            logger.debug("Created scenario context for execution unit %r", unit)

        return context

    def set_context(self, context: ScenarioContext, unit: Optional[ExecutionUnit] = None) -> None:
        """Associates the context with the unit, replacing any prior association."""
        if unit is None:
            unit = current_unit()

        self._table(unit)[unit] = context

    def clear_context(self, unit: Optional[ExecutionUnit] = None) -> None:
        """Removes the unit's association. The next get_context() creates a new context."""
        if unit is None:
            unit = current_unit()

        if self._table(unit).pop(unit, None) is not None:
            logger.debug("Removed scenario context for execution unit %r", unit)

    def clear_all(self) -> None:
        """Drops the association of every unit."""
        self._thread_contexts.clear()
        self._token_contexts.clear()


registry = ContextRegistry()
"""Process-wide registry used by the hooks, steps and standalone tests."""


def get_context(unit: Optional[ExecutionUnit] = None) -> ScenarioContext:
    return registry.get_context(unit)


def set_context(context: ScenarioContext, unit: Optional[ExecutionUnit] = None) -> None:
    registry.set_context(context, unit)


def clear_context(unit: Optional[ExecutionUnit] = None) -> None:
    registry.clear_context(unit)
