# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Execution-context scoped transaction state.

A :class:`TransactionContext` holds everything the transaction manager binds
for one logical execution context: the resources of the current transaction
(keyed by the resource they belong to), the active synchronization registry,
and metadata describing the current transaction.

Contexts are passed explicitly to manager operations. When a caller does not
pass one, :meth:`TransactionContext.current` returns the context bound to the
current thread or asyncio task through a ``ContextVar``. The binding records
its owner (the running asyncio task, else the thread), so a task that inherits
its parent's ``ContextVar`` values still gets a context of its own on first
use and concurrent execution contexts never observe each other's state.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from txcore.kernel.exceptions import IllegalTransactionStateException
from txcore.transaction.definition import Isolation
from txcore.transaction.synchronization import (
    TransactionSynchronization,
    sort_synchronizations,
)

_transaction_context_var: ContextVar[tuple[object, TransactionContext] | None] = ContextVar(
    "txcore_transaction_context", default=None
)


def _execution_owner() -> object:
    """The running asyncio task, or the current thread id outside an event loop."""
    try:
        task = asyncio.current_task()
    except RuntimeError:
        task = None
    return task if task is not None else threading.get_ident()


class TransactionContext:
    """Resources, synchronizations and metadata of one execution context.

    Not thread-safe: a context must only be used by the execution context
    that owns it.
    """

    def __init__(self) -> None:
        self._resources: dict[Any, Any] = {}
        self._synchronizations: list[TransactionSynchronization] | None = None
        self.current_transaction_name: str | None = None
        self.current_transaction_read_only: bool = False
        self.current_isolation_level: Isolation | None = None
        self.actual_transaction_active: bool = False

    # -- resources -----------------------------------------------------------

    @property
    def resources(self) -> dict[Any, Any]:
        """Snapshot of the currently bound resources."""
        return dict(self._resources)

    def has_resource(self, key: Any) -> bool:
        return key in self._resources

    def get_resource(self, key: Any) -> Any | None:
        return self._resources.get(key)

    def bind_resource(self, key: Any, value: Any) -> None:
        """Bind *value* for *key*; a key can only be bound once at a time."""
        if value is None:
            raise ValueError("Value must not be None")
        if key in self._resources:
            raise IllegalTransactionStateException(
                f"Already value [{self._resources[key]!r}] for key [{key!r}] bound to context"
            )
        self._resources[key] = value

    def unbind_resource(self, key: Any) -> Any:
        """Unbind and return the resource for *key*."""
        if key not in self._resources:
            raise IllegalTransactionStateException(f"No value for key [{key!r}] bound to context")
        return self._resources.pop(key)

    def unbind_resource_if_possible(self, key: Any) -> Any | None:
        return self._resources.pop(key, None)

    # -- synchronization -----------------------------------------------------

    def is_synchronization_active(self) -> bool:
        return self._synchronizations is not None

    def init_synchronization(self) -> None:
        """Open a new, empty synchronization scope."""
        if self._synchronizations is not None:
            raise IllegalTransactionStateException("Cannot activate transaction synchronization - already active")
        self._synchronizations = []

    def register_synchronization(self, synchronization: TransactionSynchronization) -> None:
        """Register a synchronization with the active scope."""
        if self._synchronizations is None:
            raise IllegalTransactionStateException("Transaction synchronization is not active")
        self._synchronizations.append(synchronization)

    def get_synchronizations(self) -> list[TransactionSynchronization]:
        """Ordered snapshot of the registered synchronizations."""
        if self._synchronizations is None:
            raise IllegalTransactionStateException("Transaction synchronization is not active")
        if not self._synchronizations:
            return []
        return sort_synchronizations(self._synchronizations)

    def clear_synchronization(self) -> None:
        """Close the active synchronization scope."""
        if self._synchronizations is None:
            raise IllegalTransactionStateException("Cannot deactivate transaction synchronization - not active")
        self._synchronizations = None

    def clear(self) -> None:
        """Reset synchronization scope and transaction metadata; resources stay bound."""
        self._synchronizations = None
        self.current_transaction_name = None
        self.current_transaction_read_only = False
        self.current_isolation_level = None
        self.actual_transaction_active = False

    # -- execution-context binding -------------------------------------------

    @classmethod
    def init(cls) -> TransactionContext:
        """Create and bind a new context for the current thread or task."""
        ctx = cls()
        _transaction_context_var.set((_execution_owner(), ctx))
        return ctx

    @classmethod
    def current(cls) -> TransactionContext:
        """Return the context of the current thread or task, creating it on first use.

        A binding inherited from another task or thread is never shared: the
        caller gets a fresh context bound to itself.
        """
        binding = _transaction_context_var.get()
        if binding is None or binding[0] != _execution_owner():
            return cls.init()
        return binding[1]

    @classmethod
    def reset_current(cls) -> None:
        """Forget the context bound to the current thread or task."""
        _transaction_context_var.set(None)

    @contextmanager
    def activate(self) -> Iterator[TransactionContext]:
        """Bind this context as current for the duration of a ``with`` block.

        Tasks spawned inside the block do not inherit the binding.
        """
        token = _transaction_context_var.set((_execution_owner(), self))
        try:
            yield self
        finally:
            _transaction_context_var.reset(token)

    def __repr__(self) -> str:
        return (
            f"TransactionContext(resources={len(self._resources)}, "
            f"synchronization_active={self.is_synchronization_active()}, "
            f"name={self.current_transaction_name!r})"
        )
