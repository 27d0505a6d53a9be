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
"""Programmatic transaction demarcation around a unit of work."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, Protocol, TypeVar, runtime_checkable

from txcore.kernel.exceptions import (
    TransactionException,
    TransactionSystemException,
    UndeclaredFailureException,
)
from txcore.transaction.context import TransactionContext
from txcore.transaction.definition import DEFAULT_DEFINITION, TransactionDefinition
from txcore.transaction.manager import PlatformTransactionManager
from txcore.transaction.status import TransactionStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")

TransactionCallback = Callable[[TransactionStatus], T]


@runtime_checkable
class CallbackPreferringPlatformTransactionManager(PlatformTransactionManager, Protocol):
    """A manager that runs callbacks itself instead of handing out statuses."""

    def execute(self, definition: TransactionDefinition, callback: TransactionCallback[T]) -> T:
        """Run *callback* inside a transaction described by *definition*."""
        ...


class TransactionTemplate:
    """Runs a unit of work inside a managed transaction.

    The work receives the :class:`TransactionStatus` and may call
    ``set_rollback_only()`` on it. A normal return commits; any raised
    exception rolls back and propagates.

    Args:
        transaction_manager: Manager that demarcates the transactions.
        definition: Transaction definition; REQUIRED defaults when omitted.
        declared_exceptions: Exception types the work is allowed to raise.
            ``None`` declares every exception. Otherwise any other
            ``Exception`` (transaction exceptions excepted) is re-raised as
            :class:`UndeclaredFailureException` after the rollback.

    Usage:
        template = TransactionTemplate(manager, TransactionDefinition(name="transfer"))
        balance = template.execute(lambda status: accounts.transfer(src, dst, amount))
    """

    def __init__(
        self,
        transaction_manager: PlatformTransactionManager,
        definition: TransactionDefinition | None = None,
        *,
        declared_exceptions: tuple[type[BaseException], ...] | None = None,
    ) -> None:
        if transaction_manager is None:
            raise ValueError("Property 'transaction_manager' is required")
        self._transaction_manager = transaction_manager
        self._definition = definition if definition is not None else DEFAULT_DEFINITION
        self._declared_exceptions = declared_exceptions

    @property
    def transaction_manager(self) -> PlatformTransactionManager:
        return self._transaction_manager

    @property
    def definition(self) -> TransactionDefinition:
        return self._definition

    def with_definition(self, **overrides: Any) -> TransactionTemplate:
        """Return a template sharing this manager with a derived definition."""
        return TransactionTemplate(
            self._transaction_manager,
            self._definition.derive(**overrides),
            declared_exceptions=self._declared_exceptions,
        )

    def execute(self, action: TransactionCallback[T], context: TransactionContext | None = None) -> T:
        """Run *action* in a transaction and return its result.

        A callback-preferring manager resolves the current context itself, so an
        explicit *context* is activated around its ``execute`` call.
        """
        if isinstance(self._transaction_manager, CallbackPreferringPlatformTransactionManager):
            if context is None:
                return self._transaction_manager.execute(self._definition, action)
            with context.activate():
                return self._transaction_manager.execute(self._definition, action)

        status = self._transaction_manager.get_transaction(self._definition, context)
        try:
            result = action(status)
        except BaseException as ex:
            self._rollback_on_exception(status, ex)
            if self._is_undeclared(ex):
                raise UndeclaredFailureException("TransactionCallback threw undeclared exception", ex) from ex
            raise
        self._transaction_manager.commit(status)
        return result

    def execute_without_result(
        self,
        action: Callable[[TransactionStatus], Any],
        context: TransactionContext | None = None,
    ) -> None:
        """Run *action* in a transaction, discarding its result."""
        self.execute(action, context)

    @contextmanager
    def transaction(self, context: TransactionContext | None = None) -> Iterator[TransactionStatus]:
        """Demarcate a ``with`` block: commit on normal exit, roll back on error."""
        status = self._transaction_manager.get_transaction(self._definition, context)
        try:
            yield status
        except BaseException as ex:
            self._rollback_on_exception(status, ex)
            raise
        self._transaction_manager.commit(status)

    def _is_undeclared(self, ex: BaseException) -> bool:
        if self._declared_exceptions is None:
            return False
        if not isinstance(ex, Exception) or isinstance(ex, TransactionException):
            return False
        return not isinstance(ex, self._declared_exceptions)

    def _rollback_on_exception(self, status: TransactionStatus, ex: BaseException) -> None:
        logger.debug("Initiating transaction rollback on application exception", exc_info=ex)
        try:
            self._transaction_manager.rollback(status)
        except TransactionSystemException as rollback_ex:
            logger.error("Application exception overridden by rollback exception", exc_info=ex)
            rollback_ex.init_application_exception(ex)
            raise
        except BaseException:
            logger.error("Application exception overridden by rollback exception", exc_info=ex)
            raise
