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
"""Transaction manager engine: propagation, commit/rollback sequencing, suspend/resume.

:class:`AbstractPlatformTransactionManager` implements the complete workflow
and delegates the resource-specific steps (begin, commit, rollback, suspend,
resume) to template methods implemented by concrete managers such as
:class:`~txcore.transaction.resource.ResourceTransactionManager`.

Workflow handled here:

* determine whether a transaction already exists in the execution context
* apply the propagation behaviour of the requested definition
* suspend and resume outer transactions (resources and synchronizations)
* check the rollback-only flags on commit
* decide between real rollback and rollback-only marking for participants
* trigger the registered synchronizations in order
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Protocol, runtime_checkable

from txcore.config.properties.transaction import TransactionManagerProperties
from txcore.kernel.exceptions import (
    IllegalTransactionStateException,
    InvalidTimeoutException,
    NestedTransactionNotSupportedException,
    TransactionException,
    UnexpectedRollbackException,
)
from txcore.transaction.context import TransactionContext
from txcore.transaction.definition import (
    DEFAULT_DEFINITION,
    TIMEOUT_DEFAULT,
    Isolation,
    Propagation,
    TransactionDefinition,
)
from txcore.transaction.status import DefaultTransactionStatus, TransactionObject, TransactionStatus
from txcore.transaction.suspension import SuspendedResourcesHolder
from txcore.transaction.synchronization import (
    SynchronizationStatus,
    TransactionSynchronization,
    invoke_after_commit,
    invoke_after_completion,
    invoke_before_commit,
    invoke_before_completion,
    invoke_resume,
    invoke_suspend,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class PlatformTransactionManager(Protocol):
    """Port for imperative transaction management."""

    def get_transaction(
        self,
        definition: TransactionDefinition | None = None,
        context: TransactionContext | None = None,
    ) -> TransactionStatus:
        """Return a currently active transaction or create a new one, per *definition*."""
        ...

    def commit(self, status: TransactionStatus) -> None:
        """Commit the transaction of *status*, honouring its rollback-only state."""
        ...

    def rollback(self, status: TransactionStatus) -> None:
        """Roll back the transaction of *status*."""
        ...


class SynchronizationPolicy(enum.Enum):
    """When the manager opens a synchronization scope."""

    ALWAYS = "always"
    """Also for empty transactions (SUPPORTS / NOT_SUPPORTED / NEVER without a transaction)."""

    ON_ACTUAL_TRANSACTION = "on_actual_transaction"
    """Only for actual transactions."""

    NEVER = "never"
    """Never; synchronizations cannot be registered."""


class AbstractPlatformTransactionManager:
    """Base transaction manager implementing the standard propagation workflow.

    Subclasses implement :meth:`do_get_transaction`, :meth:`do_begin`,
    :meth:`do_commit` and :meth:`do_rollback`; suspension, savepoints and
    participation support are opt-in through the remaining ``do_*`` hooks.

    Args:
        transaction_synchronization: When to open synchronization scopes.
        default_timeout: Timeout in seconds applied when a definition uses
            the default (``-1``).
        nested_transaction_allowed: Whether NESTED is allowed at all.
        nested_fallback_to_required: NESTED on a transaction without savepoint
            support joins the transaction instead of failing.
        validate_existing_transaction: Reject participation with an
            incompatible isolation level or read-only flag.
        global_rollback_on_participation_failure: A failed participant marks
            the whole transaction rollback-only.
        fail_early_on_global_rollback_only: Raise
            ``UnexpectedRollbackException`` as early as possible.
        rollback_on_commit_failure: Roll back when the commit call itself fails.
    """

    def __init__(
        self,
        *,
        transaction_synchronization: SynchronizationPolicy = SynchronizationPolicy.ALWAYS,
        default_timeout: int = TIMEOUT_DEFAULT,
        nested_transaction_allowed: bool = True,
        nested_fallback_to_required: bool = False,
        validate_existing_transaction: bool = False,
        global_rollback_on_participation_failure: bool = True,
        fail_early_on_global_rollback_only: bool = False,
        rollback_on_commit_failure: bool = False,
    ) -> None:
        if default_timeout < TIMEOUT_DEFAULT:
            raise InvalidTimeoutException("Invalid default timeout", default_timeout)
        self.transaction_synchronization = transaction_synchronization
        self.default_timeout = default_timeout
        self.nested_transaction_allowed = nested_transaction_allowed
        self.nested_fallback_to_required = nested_fallback_to_required
        self.validate_existing_transaction = validate_existing_transaction
        self.global_rollback_on_participation_failure = global_rollback_on_participation_failure
        self.fail_early_on_global_rollback_only = fail_early_on_global_rollback_only
        self.rollback_on_commit_failure = rollback_on_commit_failure

    def configure(self, properties: TransactionManagerProperties) -> None:
        """Apply bound ``txcore.transaction`` properties."""
        if properties.default_timeout < TIMEOUT_DEFAULT:
            raise InvalidTimeoutException("Invalid default timeout", properties.default_timeout)
        self.transaction_synchronization = SynchronizationPolicy(properties.transaction_synchronization.lower())
        self.default_timeout = properties.default_timeout
        self.nested_transaction_allowed = properties.nested_transaction_allowed
        self.nested_fallback_to_required = properties.nested_fallback_to_required
        self.validate_existing_transaction = properties.validate_existing_transaction
        self.global_rollback_on_participation_failure = properties.global_rollback_on_participation_failure
        self.fail_early_on_global_rollback_only = properties.fail_early_on_global_rollback_only
        self.rollback_on_commit_failure = properties.rollback_on_commit_failure

    # =========================================================================
    # get_transaction
    # =========================================================================

    def get_transaction(
        self,
        definition: TransactionDefinition | None = None,
        context: TransactionContext | None = None,
    ) -> DefaultTransactionStatus:
        """Return a status for the current transaction or a new one, per *definition*.

        Raises:
            IllegalTransactionStateException: For propagation conflicts.
            NestedTransactionNotSupportedException: NESTED cannot be honoured.
            CannotCreateTransactionException: The resource could not begin.
        """
        definition = definition if definition is not None else DEFAULT_DEFINITION
        ctx = context if context is not None else TransactionContext.current()

        transaction = self.do_get_transaction(ctx)

        if self.is_existing_transaction(transaction):
            return self._handle_existing_transaction(definition, transaction, ctx)

        if definition.timeout < TIMEOUT_DEFAULT:
            raise InvalidTimeoutException("Invalid transaction timeout", definition.timeout)

        propagation = definition.propagation
        if propagation is Propagation.MANDATORY:
            raise IllegalTransactionStateException(
                "No existing transaction found for transaction marked with propagation 'mandatory'"
            )

        if propagation in (Propagation.REQUIRED, Propagation.REQUIRES_NEW, Propagation.NESTED):
            suspended = self.suspend(ctx, None)
            logger.debug("Creating new transaction with name [%s]: %s", definition.name, definition)
            try:
                return self._start_transaction(definition, transaction, ctx, suspended)
            except BaseException as ex:
                self._resume_after_begin_exception(ctx, None, suspended, ex)
                raise

        if definition.isolation is not Isolation.DEFAULT:
            logger.warning(
                "Custom isolation level specified but no actual transaction initiated; "
                "isolation level will effectively be ignored: %s",
                definition,
            )
        new_synchronization = self.transaction_synchronization is SynchronizationPolicy.ALWAYS
        return self._prepare_transaction_status(ctx, definition, None, True, new_synchronization, None)

    def _start_transaction(
        self,
        definition: TransactionDefinition,
        transaction: TransactionObject,
        ctx: TransactionContext,
        suspended: SuspendedResourcesHolder | None,
    ) -> DefaultTransactionStatus:
        new_synchronization = self.transaction_synchronization is not SynchronizationPolicy.NEVER
        status = self._new_transaction_status(ctx, definition, transaction, True, new_synchronization, suspended)
        self.do_begin(transaction, definition, ctx)
        self._prepare_synchronization(status, definition)
        return status

    def _handle_existing_transaction(
        self,
        definition: TransactionDefinition,
        transaction: TransactionObject,
        ctx: TransactionContext,
    ) -> DefaultTransactionStatus:
        propagation = definition.propagation

        if propagation is Propagation.NEVER:
            raise IllegalTransactionStateException(
                "Existing transaction found for transaction marked with propagation 'never'"
            )

        if propagation is Propagation.NOT_SUPPORTED:
            logger.debug("Suspending current transaction")
            suspended = self.suspend(ctx, transaction)
            new_synchronization = self.transaction_synchronization is SynchronizationPolicy.ALWAYS
            return self._prepare_transaction_status(ctx, definition, None, False, new_synchronization, suspended)

        if propagation is Propagation.REQUIRES_NEW:
            logger.debug("Suspending current transaction, creating new transaction with name [%s]", definition.name)
            suspended = self.suspend(ctx, transaction)
            try:
                return self._start_transaction(definition, transaction, ctx, suspended)
            except BaseException as ex:
                self._resume_after_begin_exception(ctx, transaction, suspended, ex)
                raise

        if propagation is Propagation.NESTED:
            nested = self._handle_nested_transaction(definition, transaction, ctx)
            if nested is not None:
                return nested

        # REQUIRED, SUPPORTS, MANDATORY (and NESTED falling back): participate.
        logger.debug("Participating in existing transaction")
        if self.validate_existing_transaction:
            self._validate_participation(definition, ctx)
        new_synchronization = self.transaction_synchronization is not SynchronizationPolicy.NEVER
        return self._prepare_transaction_status(ctx, definition, transaction, False, new_synchronization, None)

    def _handle_nested_transaction(
        self,
        definition: TransactionDefinition,
        transaction: TransactionObject,
        ctx: TransactionContext,
    ) -> DefaultTransactionStatus | None:
        """Create a savepoint-backed status, or ``None`` to fall back to participation."""
        if not self.nested_transaction_allowed:
            raise NestedTransactionNotSupportedException(
                "Transaction manager does not allow nested transactions by default - "
                "enable 'nested_transaction_allowed' to activate"
            )
        logger.debug("Creating nested transaction with name [%s]", definition.name)

        if not self.use_savepoint_for_nested_transaction():
            # Genuinely nested begin on resources that support it natively.
            return self._start_transaction(definition, transaction, ctx, None)

        if not transaction.supports_savepoints():
            if self.nested_fallback_to_required:
                logger.debug("Transaction does not support savepoints - participating in existing transaction")
                return None
            raise NestedTransactionNotSupportedException(
                f"Transaction object [{transaction!r}] does not support savepoints"
            )

        status = self._prepare_transaction_status(ctx, definition, transaction, False, False, None)
        status.create_and_hold_savepoint()
        logger.debug("Created savepoint for nested transaction")
        return status

    def _validate_participation(self, definition: TransactionDefinition, ctx: TransactionContext) -> None:
        if definition.isolation is not Isolation.DEFAULT:
            current = ctx.current_isolation_level
            if current is None or current is not definition.isolation:
                raise IllegalTransactionStateException(
                    f"Participating transaction with definition [{definition}] specifies isolation level "
                    f"which is incompatible with existing transaction: "
                    f"{current.value if current is not None else '(unknown)'}"
                )
        if not definition.read_only and ctx.current_transaction_read_only:
            raise IllegalTransactionStateException(
                f"Participating transaction with definition [{definition}] is not marked as read-only "
                f"but existing transaction is"
            )

    def _prepare_transaction_status(
        self,
        ctx: TransactionContext,
        definition: TransactionDefinition,
        transaction: TransactionObject | None,
        new_transaction: bool,
        new_synchronization: bool,
        suspended: SuspendedResourcesHolder | None,
    ) -> DefaultTransactionStatus:
        status = self._new_transaction_status(
            ctx, definition, transaction, new_transaction, new_synchronization, suspended
        )
        self._prepare_synchronization(status, definition)
        return status

    def _new_transaction_status(
        self,
        ctx: TransactionContext,
        definition: TransactionDefinition,
        transaction: TransactionObject | None,
        new_transaction: bool,
        new_synchronization: bool,
        suspended: SuspendedResourcesHolder | None,
    ) -> DefaultTransactionStatus:
        actual_new_synchronization = new_synchronization and not ctx.is_synchronization_active()
        return DefaultTransactionStatus(
            transaction,
            new_transaction,
            actual_new_synchronization,
            definition.read_only,
            suspended,
            ctx,
        )

    def _prepare_synchronization(self, status: DefaultTransactionStatus, definition: TransactionDefinition) -> None:
        if not status.is_new_synchronization():
            return
        ctx = status.context
        ctx.actual_transaction_active = status.has_transaction()
        ctx.current_isolation_level = definition.isolation if definition.isolation is not Isolation.DEFAULT else None
        ctx.current_transaction_read_only = definition.read_only
        ctx.current_transaction_name = definition.name
        ctx.init_synchronization()

    def determine_timeout(self, definition: TransactionDefinition) -> int:
        """Definition timeout, or the manager default when the definition uses the default."""
        if definition.timeout != TIMEOUT_DEFAULT:
            return definition.timeout
        return self.default_timeout

    # =========================================================================
    # suspend / resume
    # =========================================================================

    def suspend(
        self,
        ctx: TransactionContext,
        transaction: TransactionObject | None,
    ) -> SuspendedResourcesHolder | None:
        """Suspend the current transaction and its synchronizations.

        Returns ``None`` when there was nothing to suspend.
        """
        if ctx.is_synchronization_active():
            suspended_synchronizations = self._do_suspend_synchronization(ctx)
            try:
                suspended_resources = None
                if transaction is not None:
                    suspended_resources = self.do_suspend(transaction, ctx)
                holder = SuspendedResourcesHolder(
                    suspended_resources,
                    suspended_synchronizations,
                    name=ctx.current_transaction_name,
                    read_only=ctx.current_transaction_read_only,
                    isolation_level=ctx.current_isolation_level,
                    was_active=ctx.actual_transaction_active,
                )
                ctx.current_transaction_name = None
                ctx.current_transaction_read_only = False
                ctx.current_isolation_level = None
                ctx.actual_transaction_active = False
                return holder
            except BaseException:
                self._do_resume_synchronization(ctx, suspended_synchronizations)
                raise

        if transaction is not None:
            return SuspendedResourcesHolder(self.do_suspend(transaction, ctx))

        return None

    def resume(
        self,
        ctx: TransactionContext,
        transaction: TransactionObject | None,
        holder: SuspendedResourcesHolder | None,
    ) -> None:
        """Resume the transaction parked in *holder*; the holder is consumed."""
        if holder is None:
            return
        holder.consume()
        if holder.suspended_resources is not None:
            self.do_resume(transaction, holder.suspended_resources, ctx)
        if holder.suspended_synchronizations is not None:
            ctx.actual_transaction_active = holder.was_active
            ctx.current_isolation_level = holder.isolation_level
            ctx.current_transaction_read_only = holder.read_only
            ctx.current_transaction_name = holder.name
            self._do_resume_synchronization(ctx, holder.suspended_synchronizations)

    def _resume_after_begin_exception(
        self,
        ctx: TransactionContext,
        transaction: TransactionObject | None,
        holder: SuspendedResourcesHolder | None,
        begin_ex: BaseException,
    ) -> None:
        try:
            self.resume(ctx, transaction, holder)
        except BaseException:
            logger.error(
                "Inner transaction begin exception overridden by outer transaction resume exception",
                exc_info=begin_ex,
            )
            raise

    def _do_suspend_synchronization(self, ctx: TransactionContext) -> list[TransactionSynchronization]:
        suspended = ctx.get_synchronizations()
        invoke_suspend(suspended)
        ctx.clear_synchronization()
        return suspended

    def _do_resume_synchronization(
        self,
        ctx: TransactionContext,
        suspended: list[TransactionSynchronization],
    ) -> None:
        ctx.init_synchronization()
        invoke_resume(suspended)
        for sync in suspended:
            ctx.register_synchronization(sync)

    # =========================================================================
    # commit
    # =========================================================================

    def commit(self, status: TransactionStatus) -> None:
        """Commit *status*, or roll back if it has been marked rollback-only.

        Raises:
            IllegalTransactionStateException: The status is already completed.
            UnexpectedRollbackException: A participant forced a rollback.
            HeuristicCompletionException: The resource reported a heuristic outcome.
            TransactionSystemException: The resource failed to commit.
        """
        tx_status = self._check_not_completed(status)

        if tx_status.is_local_rollback_only():
            logger.debug("Transactional code has requested rollback")
            self._process_rollback(tx_status, unexpected=False)
            return

        if tx_status.is_global_rollback_only():
            logger.debug("Global transaction is marked as rollback-only but transactional code requested commit")
            self._process_rollback(tx_status, unexpected=True)
            return

        self._process_commit(tx_status)

    def _process_commit(self, status: DefaultTransactionStatus) -> None:
        try:
            try:
                self.prepare_for_commit(status)
                self._trigger_before_commit(status)
            except BaseException as ex:
                # Nothing has been committed yet: always roll back.
                self._trigger_before_completion(status)
                self._do_rollback_on_commit_exception(status, ex)
                raise

            before_completion_invoked = False
            try:
                unexpected_rollback = False
                self._trigger_before_completion(status)
                before_completion_invoked = True

                if status.has_savepoint():
                    logger.debug("Releasing transaction savepoint")
                    unexpected_rollback = status.is_global_rollback_only()
                    status.release_held_savepoint()
                elif status.is_new_transaction():
                    logger.debug("Initiating transaction commit")
                    unexpected_rollback = status.is_global_rollback_only()
                    self.do_commit(status)
                elif self.fail_early_on_global_rollback_only:
                    unexpected_rollback = status.is_global_rollback_only()

                if unexpected_rollback:
                    raise UnexpectedRollbackException(
                        "Transaction silently rolled back because it has been marked as rollback-only"
                    )
            except UnexpectedRollbackException:
                self._trigger_after_completion(status, SynchronizationStatus.ROLLED_BACK)
                raise
            except TransactionException as ex:
                if self.rollback_on_commit_failure:
                    self._do_rollback_on_commit_exception(status, ex)
                else:
                    self._trigger_after_completion(status, SynchronizationStatus.UNKNOWN)
                raise
            except BaseException as ex:
                if not before_completion_invoked:
                    self._trigger_before_completion(status)
                self._do_rollback_on_commit_exception(status, ex)
                raise

            try:
                self._trigger_after_commit(status)
            finally:
                self._trigger_after_completion(status, SynchronizationStatus.COMMITTED)
        finally:
            self._cleanup_after_completion(status)

    # =========================================================================
    # rollback
    # =========================================================================

    def rollback(self, status: TransactionStatus) -> None:
        """Roll back *status*; participants mark the shared transaction rollback-only.

        Raises:
            IllegalTransactionStateException: The status is already completed.
            TransactionSystemException: The resource failed to roll back.
        """
        tx_status = self._check_not_completed(status)
        self._process_rollback(tx_status, unexpected=False)

    def _process_rollback(self, status: DefaultTransactionStatus, unexpected: bool) -> None:
        try:
            unexpected_rollback = unexpected
            try:
                self._trigger_before_completion(status)

                if status.has_savepoint():
                    logger.debug("Rolling back transaction to savepoint")
                    status.rollback_to_held_savepoint()
                elif status.is_new_transaction():
                    logger.debug("Initiating transaction rollback")
                    self.do_rollback(status)
                else:
                    if status.has_transaction():
                        if status.is_local_rollback_only() or self.global_rollback_on_participation_failure:
                            logger.debug(
                                "Participating transaction failed - marking existing transaction as rollback-only"
                            )
                            self.do_set_rollback_only(status)
                        else:
                            logger.debug(
                                "Participating transaction failed - letting transaction originator decide on rollback"
                            )
                    else:
                        logger.debug("Should roll back transaction but cannot - no transaction available")
                    if not self.fail_early_on_global_rollback_only:
                        unexpected_rollback = False
            except BaseException:
                self._trigger_after_completion(status, SynchronizationStatus.UNKNOWN)
                raise

            self._trigger_after_completion(status, SynchronizationStatus.ROLLED_BACK)

            if unexpected_rollback:
                raise UnexpectedRollbackException(
                    "Transaction rolled back because it has been marked as rollback-only"
                )
        finally:
            self._cleanup_after_completion(status)

    def _do_rollback_on_commit_exception(self, status: DefaultTransactionStatus, ex: BaseException) -> None:
        try:
            if status.is_new_transaction():
                logger.debug("Initiating transaction rollback after commit exception", exc_info=ex)
                self.do_rollback(status)
            elif status.has_transaction() and self.global_rollback_on_participation_failure:
                logger.debug("Marking existing transaction as rollback-only after commit exception", exc_info=ex)
                self.do_set_rollback_only(status)
        except BaseException:
            logger.error("Commit exception overridden by rollback exception", exc_info=ex)
            self._trigger_after_completion(status, SynchronizationStatus.UNKNOWN)
            raise
        self._trigger_after_completion(status, SynchronizationStatus.ROLLED_BACK)

    # =========================================================================
    # synchronization triggers
    # =========================================================================

    def _trigger_before_commit(self, status: DefaultTransactionStatus) -> None:
        if status.is_new_synchronization():
            invoke_before_commit(status.context.get_synchronizations(), status.is_read_only())

    def _trigger_before_completion(self, status: DefaultTransactionStatus) -> None:
        if status.is_new_synchronization():
            invoke_before_completion(status.context.get_synchronizations())

    def _trigger_after_commit(self, status: DefaultTransactionStatus) -> None:
        if status.is_new_synchronization():
            invoke_after_commit(status.context.get_synchronizations())

    def _trigger_after_completion(self, status: DefaultTransactionStatus, completion: SynchronizationStatus) -> None:
        if not status.is_new_synchronization():
            return
        ctx = status.context
        synchronizations = ctx.get_synchronizations()
        ctx.clear_synchronization()
        if not status.has_transaction() or status.is_new_transaction():
            invoke_after_completion(synchronizations, completion)
        elif synchronizations:
            # The outer transaction decides the real outcome.
            self.register_after_completion_with_existing_transaction(status.transaction, synchronizations, ctx)

    def _cleanup_after_completion(self, status: DefaultTransactionStatus) -> None:
        status.set_completed()
        ctx = status.context
        if status.is_new_synchronization():
            ctx.clear()
        if status.is_new_transaction():
            self.do_cleanup_after_completion(status.transaction, ctx)
        if status.suspended_resources is not None:
            logger.debug("Resuming suspended transaction after completion of inner transaction")
            transaction = status.transaction if status.has_transaction() else None
            self.resume(ctx, transaction, status.suspended_resources)

    @staticmethod
    def _check_not_completed(status: TransactionStatus) -> DefaultTransactionStatus:
        if status.is_completed():
            raise IllegalTransactionStateException(
                "Transaction is already completed - do not call commit or rollback more than once per transaction"
            )
        if not isinstance(status, DefaultTransactionStatus):
            raise IllegalTransactionStateException(
                f"Transaction status [{status!r}] was not created by this transaction manager"
            )
        return status

    # =========================================================================
    # Template methods
    # =========================================================================

    def do_get_transaction(self, ctx: TransactionContext) -> TransactionObject:
        """Return a transaction object reflecting the state bound in *ctx*."""
        raise NotImplementedError

    def is_existing_transaction(self, transaction: TransactionObject) -> bool:
        """Whether *transaction* represents an already active transaction."""
        return False

    def use_savepoint_for_nested_transaction(self) -> bool:
        """Whether NESTED uses savepoints rather than a native nested begin."""
        return True

    def do_begin(
        self,
        transaction: TransactionObject,
        definition: TransactionDefinition,
        ctx: TransactionContext,
    ) -> None:
        """Begin a new underlying transaction honouring *definition*."""
        raise NotImplementedError

    def do_suspend(self, transaction: TransactionObject, ctx: TransactionContext) -> Any:
        """Unbind the resources of *transaction* from *ctx* and return them."""
        raise IllegalTransactionStateException(
            f"Transaction manager [{type(self).__name__}] does not support transaction suspension"
        )

    def do_resume(
        self,
        transaction: TransactionObject | None,
        suspended_resources: Any,
        ctx: TransactionContext,
    ) -> None:
        """Rebind *suspended_resources* to *ctx*."""
        raise IllegalTransactionStateException(
            f"Transaction manager [{type(self).__name__}] does not support transaction suspension"
        )

    def prepare_for_commit(self, status: DefaultTransactionStatus) -> None:
        """Hook invoked before ``before_commit`` synchronizations."""

    def do_commit(self, status: DefaultTransactionStatus) -> None:
        """Commit the underlying transaction of *status*."""
        raise NotImplementedError

    def do_rollback(self, status: DefaultTransactionStatus) -> None:
        """Roll back the underlying transaction of *status*."""
        raise NotImplementedError

    def do_set_rollback_only(self, status: DefaultTransactionStatus) -> None:
        """Mark the shared underlying transaction of a participant rollback-only."""
        raise IllegalTransactionStateException(
            "Participating in existing transactions is not supported - when 'is_existing_transaction' "
            "returns True, appropriate 'do_set_rollback_only' behavior must be provided"
        )

    def register_after_completion_with_existing_transaction(
        self,
        transaction: TransactionObject,
        synchronizations: list[TransactionSynchronization],
        ctx: TransactionContext,
    ) -> None:
        """Hand *synchronizations* to the outer transaction.

        The default cannot defer, so ``after_completion`` runs immediately
        with an UNKNOWN status.
        """
        logger.debug(
            "Cannot register after-completion callbacks with existing transaction - "
            "processing them immediately with outcome status 'unknown'"
        )
        invoke_after_completion(synchronizations, SynchronizationStatus.UNKNOWN)

    def do_cleanup_after_completion(self, transaction: TransactionObject, ctx: TransactionContext) -> None:
        """Release resources of a transaction this manager began."""
