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
"""Transaction status: the handle a caller holds for one transaction attempt."""

from __future__ import annotations

from typing import Any

from txcore.kernel.exceptions import (
    IllegalTransactionStateException,
    NestedTransactionNotSupportedException,
)
from txcore.transaction.context import TransactionContext
from txcore.transaction.suspension import SuspendedResourcesHolder
from txcore.transaction.synchronization import invoke_flush


class TransactionObject:
    """Manager-specific transaction object with explicit capability queries.

    Managers subclass this to expose what their underlying resource can do.
    The defaults describe a resource with no global rollback-only state, no
    flushing and no savepoint support.
    """

    def is_rollback_only(self) -> bool:
        """Whether the shared underlying transaction has been marked rollback-only."""
        return False

    def set_rollback_only(self) -> None:
        """Mark the shared underlying transaction rollback-only."""

    def flush(self) -> None:
        """Flush the underlying resource, if supported."""

    def supports_savepoints(self) -> bool:
        return False

    def create_savepoint(self) -> Any:
        raise NestedTransactionNotSupportedException(f"Transaction object [{self!r}] does not support savepoints")

    def rollback_to_savepoint(self, savepoint: Any) -> None:
        raise NestedTransactionNotSupportedException(f"Transaction object [{self!r}] does not support savepoints")

    def release_savepoint(self, savepoint: Any) -> None:
        raise NestedTransactionNotSupportedException(f"Transaction object [{self!r}] does not support savepoints")


class TransactionStatus:
    """Status of a transaction attempt as seen by application code.

    ``rollback_only`` and ``completed`` are monotonic: once set they are
    never reset.
    """

    def __init__(self) -> None:
        self._rollback_only = False
        self._completed = False
        self._savepoint: Any = None

    # -- rollback-only -------------------------------------------------------

    def set_rollback_only(self) -> None:
        """Make the only possible outcome of this transaction a rollback."""
        self._rollback_only = True

    def is_rollback_only(self) -> bool:
        return self.is_local_rollback_only() or self.is_global_rollback_only()

    def is_local_rollback_only(self) -> bool:
        return self._rollback_only

    def is_global_rollback_only(self) -> bool:
        return False

    # -- completion ----------------------------------------------------------

    def is_new_transaction(self) -> bool:
        return False

    def is_completed(self) -> bool:
        return self._completed

    def set_completed(self) -> None:
        self._completed = True

    def flush(self) -> None:
        """Flush the underlying resource; a no-op by default."""

    # -- savepoints ----------------------------------------------------------

    @property
    def savepoint(self) -> Any:
        return self._savepoint

    def has_savepoint(self) -> bool:
        return self._savepoint is not None

    def create_and_hold_savepoint(self) -> None:
        """Create a savepoint and hold it for this status."""
        self._savepoint = self._get_savepoint_manager().create_savepoint()

    def rollback_to_held_savepoint(self) -> None:
        """Roll back to the held savepoint and release it."""
        if self._savepoint is None:
            raise IllegalTransactionStateException(
                "Cannot roll back to savepoint - no savepoint associated with current transaction"
            )
        manager = self._get_savepoint_manager()
        manager.rollback_to_savepoint(self._savepoint)
        manager.release_savepoint(self._savepoint)
        self._savepoint = None

    def release_held_savepoint(self) -> None:
        if self._savepoint is None:
            raise IllegalTransactionStateException(
                "Cannot release savepoint - no savepoint associated with current transaction"
            )
        self._get_savepoint_manager().release_savepoint(self._savepoint)
        self._savepoint = None

    def create_savepoint(self) -> Any:
        """Create a programmatic savepoint within the current transaction."""
        return self._get_savepoint_manager().create_savepoint()

    def rollback_to_savepoint(self, savepoint: Any) -> None:
        self._get_savepoint_manager().rollback_to_savepoint(savepoint)

    def release_savepoint(self, savepoint: Any) -> None:
        self._get_savepoint_manager().release_savepoint(savepoint)

    def _get_savepoint_manager(self) -> TransactionObject:
        raise NestedTransactionNotSupportedException("This transaction does not support savepoints")


class DefaultTransactionStatus(TransactionStatus):
    """Status implementation used by :class:`AbstractPlatformTransactionManager`.

    Holds the manager's transaction object (absent when running
    non-transactionally), whether this call began it, whether it opened a new
    synchronization scope, and the resources it suspended.
    """

    def __init__(
        self,
        transaction: TransactionObject | None,
        new_transaction: bool,
        new_synchronization: bool,
        read_only: bool,
        suspended_resources: SuspendedResourcesHolder | None,
        context: TransactionContext,
    ) -> None:
        super().__init__()
        self._transaction = transaction
        self._new_transaction = new_transaction
        self._new_synchronization = new_synchronization
        self._read_only = read_only
        self._suspended_resources = suspended_resources
        self._context = context

    @property
    def transaction(self) -> TransactionObject:
        if self._transaction is None:
            raise IllegalTransactionStateException("No transaction active")
        return self._transaction

    @property
    def context(self) -> TransactionContext:
        return self._context

    @property
    def suspended_resources(self) -> SuspendedResourcesHolder | None:
        return self._suspended_resources

    def has_transaction(self) -> bool:
        return self._transaction is not None

    def is_new_transaction(self) -> bool:
        return self.has_transaction() and self._new_transaction

    def is_new_synchronization(self) -> bool:
        return self._new_synchronization

    def is_read_only(self) -> bool:
        return self._read_only

    def is_participating(self) -> bool:
        """Whether this status joined a transaction it does not own (and holds no savepoint)."""
        return self.has_transaction() and not self._new_transaction and not self.has_savepoint()

    def set_rollback_only(self) -> None:
        super().set_rollback_only()
        if self.is_participating() and not self._completed:
            # The owner's commit must see this even if the participant never completes.
            self.transaction.set_rollback_only()

    def is_global_rollback_only(self) -> bool:
        return self._transaction is not None and self._transaction.is_rollback_only()

    def flush(self) -> None:
        if self._transaction is not None:
            self._transaction.flush()
        if self._context.is_synchronization_active():
            invoke_flush(self._context.get_synchronizations())

    def supports_savepoints(self) -> bool:
        return self._transaction is not None and self._transaction.supports_savepoints()

    def _get_savepoint_manager(self) -> TransactionObject:
        if not self.supports_savepoints():
            raise NestedTransactionNotSupportedException(
                f"Transaction object [{self._transaction!r}] does not support savepoints"
            )
        return self.transaction

    def __repr__(self) -> str:
        return (
            f"DefaultTransactionStatus(new_transaction={self.is_new_transaction()}, "
            f"new_synchronization={self._new_synchronization}, savepoint={self.has_savepoint()}, "
            f"rollback_only={self._rollback_only}, completed={self._completed})"
        )
