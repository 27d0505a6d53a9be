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
"""Transaction manager driving a single :class:`ResourceDriver`."""

from __future__ import annotations

import logging
from typing import Any

from txcore.config.properties.transaction import TransactionManagerProperties
from txcore.core.config import Config
from txcore.kernel.exceptions import (
    CannotCreateTransactionException,
    HeuristicCompletionException,
    TransactionException,
    TransactionSystemException,
)
from txcore.transaction.context import TransactionContext
from txcore.transaction.definition import TransactionDefinition
from txcore.transaction.driver import ResourceDriver, ResourceHeuristicError
from txcore.transaction.manager import AbstractPlatformTransactionManager
from txcore.transaction.status import DefaultTransactionStatus, TransactionObject

logger = logging.getLogger(__name__)


class ResourceHolder:
    """Driver handle bound to a context while its transaction is active.

    Shared by every status participating in the transaction, so the
    rollback-only mark set by a participant is visible to the owner.
    """

    def __init__(self, handle: Any) -> None:
        self.handle = handle
        self.transaction_active = True
        self.savepoint_counter = 0
        self._rollback_only = False

    @property
    def rollback_only(self) -> bool:
        return self._rollback_only

    def set_rollback_only(self) -> None:
        self._rollback_only = True

    def reset_rollback_only(self) -> None:
        """Clear the mark after the work that caused it was rolled back to a savepoint."""
        self._rollback_only = False

    def __repr__(self) -> str:
        return f"ResourceHolder(handle={self.handle!r}, rollback_only={self._rollback_only})"


class ResourceTransactionObject(TransactionObject):
    """Transaction object of :class:`ResourceTransactionManager`."""

    def __init__(self, driver: ResourceDriver, holder: ResourceHolder | None = None) -> None:
        self._driver = driver
        self.holder = holder
        self.new_holder = False

    def set_holder(self, holder: ResourceHolder | None, new_holder: bool) -> None:
        self.holder = holder
        self.new_holder = new_holder

    @property
    def handle(self) -> Any:
        if self.holder is None:
            raise TransactionSystemException("No resource transaction bound")
        return self.holder.handle

    def is_rollback_only(self) -> bool:
        return self.holder is not None and self.holder.rollback_only

    def set_rollback_only(self) -> None:
        if self.holder is not None:
            self.holder.set_rollback_only()

    def flush(self) -> None:
        if self.holder is not None and self._driver.supports_flush():
            self._driver.flush(self.holder.handle)

    def supports_savepoints(self) -> bool:
        return self._driver.supports_savepoints()

    def create_savepoint(self) -> Any:
        try:
            savepoint = self._driver.create_savepoint(self.handle)
        except TransactionException:
            raise
        except Exception as ex:
            raise CannotCreateTransactionException("Could not create savepoint") from ex
        if self.holder is not None:
            self.holder.savepoint_counter += 1
        return savepoint

    def rollback_to_savepoint(self, savepoint: Any) -> None:
        try:
            self._driver.rollback_to_savepoint(self.handle, savepoint)
        except TransactionException:
            raise
        except Exception as ex:
            raise TransactionSystemException("Could not roll back to savepoint") from ex
        if self.holder is not None:
            self.holder.reset_rollback_only()

    def release_savepoint(self, savepoint: Any) -> None:
        try:
            self._driver.release_savepoint(self.handle, savepoint)
        except Exception:
            logger.debug("Could not explicitly release savepoint", exc_info=True)

    def __repr__(self) -> str:
        return f"ResourceTransactionObject(holder={self.holder!r}, new_holder={self.new_holder})"


class ResourceTransactionManager(AbstractPlatformTransactionManager):
    """Transaction manager for a single resource driver.

    Binds a :class:`ResourceHolder` per driver in the transaction context,
    suspends by unbinding it, uses driver savepoints for NESTED, and
    translates driver failures into the transaction exception hierarchy.

    Usage:
        manager = ResourceTransactionManager(SqlAlchemyResourceDriver(engine))
        status = manager.get_transaction(TransactionDefinition())
        try:
            ...
        except Exception:
            manager.rollback(status)
            raise
        manager.commit(status)
    """

    def __init__(self, driver: ResourceDriver, **options: Any) -> None:
        super().__init__(**options)
        self._driver = driver

    @classmethod
    def from_config(cls, driver: ResourceDriver, config: Config) -> ResourceTransactionManager:
        """Create a manager configured from ``txcore.transaction`` properties."""
        manager = cls(driver)
        manager.configure(config.bind(TransactionManagerProperties))
        return manager

    @property
    def driver(self) -> ResourceDriver:
        return self._driver

    def current_handle(self, context: TransactionContext | None = None) -> Any | None:
        """Return the driver handle bound in *context*, or ``None`` outside a transaction."""
        ctx = context if context is not None else TransactionContext.current()
        holder: ResourceHolder | None = ctx.get_resource(self._driver.resource_key)
        return holder.handle if holder is not None else None

    # -- template methods ----------------------------------------------------

    def do_get_transaction(self, ctx: TransactionContext) -> ResourceTransactionObject:
        holder: ResourceHolder | None = ctx.get_resource(self._driver.resource_key)
        return ResourceTransactionObject(self._driver, holder)

    def is_existing_transaction(self, transaction: TransactionObject) -> bool:
        tx = self._resource_object(transaction)
        return tx.holder is not None and tx.holder.transaction_active

    def do_begin(
        self,
        transaction: TransactionObject,
        definition: TransactionDefinition,
        ctx: TransactionContext,
    ) -> None:
        tx = self._resource_object(transaction)
        timeout = self.determine_timeout(definition)
        try:
            handle = self._driver.begin(definition.isolation, timeout, definition.read_only)
        except TransactionException:
            raise
        except Exception as ex:
            raise CannotCreateTransactionException("Could not open resource transaction") from ex
        logger.debug("Began resource transaction [%r]", handle)

        holder = ResourceHolder(handle)
        tx.set_holder(holder, new_holder=True)
        ctx.bind_resource(self._driver.resource_key, holder)

    def do_suspend(self, transaction: TransactionObject, ctx: TransactionContext) -> Any:
        tx = self._resource_object(transaction)
        tx.set_holder(None, new_holder=False)
        return ctx.unbind_resource(self._driver.resource_key)

    def do_resume(
        self,
        transaction: TransactionObject | None,
        suspended_resources: Any,
        ctx: TransactionContext,
    ) -> None:
        ctx.bind_resource(self._driver.resource_key, suspended_resources)

    def do_commit(self, status: DefaultTransactionStatus) -> None:
        handle = self._resource_object(status.transaction).handle
        logger.debug("Committing resource transaction [%r]", handle)
        try:
            self._driver.commit(handle)
        except ResourceHeuristicError as ex:
            raise HeuristicCompletionException(ex.outcome, ex) from ex
        except TransactionException:
            raise
        except Exception as ex:
            raise TransactionSystemException("Could not commit resource transaction") from ex

    def do_rollback(self, status: DefaultTransactionStatus) -> None:
        handle = self._resource_object(status.transaction).handle
        logger.debug("Rolling back resource transaction [%r]", handle)
        try:
            self._driver.rollback(handle)
        except TransactionException:
            raise
        except Exception as ex:
            raise TransactionSystemException("Could not roll back resource transaction") from ex

    def do_set_rollback_only(self, status: DefaultTransactionStatus) -> None:
        tx = self._resource_object(status.transaction)
        logger.debug("Setting resource transaction [%r] rollback-only", tx.holder)
        tx.set_rollback_only()

    def do_cleanup_after_completion(self, transaction: TransactionObject, ctx: TransactionContext) -> None:
        tx = self._resource_object(transaction)
        if not tx.new_holder or tx.holder is None:
            return
        ctx.unbind_resource_if_possible(self._driver.resource_key)
        tx.holder.transaction_active = False
        try:
            self._driver.release(tx.holder.handle)
        except Exception:
            logger.debug("Could not release resource after transaction", exc_info=True)

    @staticmethod
    def _resource_object(transaction: TransactionObject) -> ResourceTransactionObject:
        if not isinstance(transaction, ResourceTransactionObject):
            raise TransactionSystemException(f"Unexpected transaction object [{transaction!r}]")
        return transaction
