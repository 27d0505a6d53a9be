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
"""Transaction synchronization callbacks and their ordered invocation.

Synchronizations are registered on a :class:`~txcore.transaction.context.TransactionContext`
while a synchronization scope is active. Every lifecycle event is delivered
across the whole registered set in a single pass, ascending by
:attr:`TransactionSynchronization.order`; synchronizations keeping the
default order run last, in registration order.

Failures from ``before_commit`` and ``after_commit`` propagate to the caller.
Failures from every other callback are logged and swallowed so they never
mask the primary commit or rollback result.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from enum import IntEnum

logger = logging.getLogger(__name__)

ORDER_HIGHEST = -sys.maxsize - 1
ORDER_LOWEST = sys.maxsize


class SynchronizationStatus(IntEnum):
    """Completion status passed to :meth:`TransactionSynchronization.after_completion`."""

    COMMITTED = 0
    ROLLED_BACK = 1
    UNKNOWN = 2


class TransactionSynchronization:
    """Callback object notified at defined points of a transaction's lifecycle.

    Subclass and override the hooks you need; every hook is a no-op by
    default. Set :attr:`order` to run before synchronizations with a higher
    value.
    """

    order: int = ORDER_LOWEST

    def suspend(self) -> None:
        """Unbind resources from the context when the transaction is suspended."""

    def resume(self) -> None:
        """Rebind resources to the context when the transaction is resumed."""

    def flush(self) -> None:
        """Flush the underlying session to the datastore, if applicable."""

    def before_commit(self, read_only: bool) -> None:
        """Invoked before commit; an exception here aborts the commit."""

    def before_completion(self) -> None:
        """Invoked before commit or rollback, after ``before_commit``."""

    def after_commit(self) -> None:
        """Invoked after a successful commit."""

    def after_completion(self, status: SynchronizationStatus) -> None:
        """Invoked after commit or rollback with the final status."""


def sort_synchronizations(
    synchronizations: Iterable[TransactionSynchronization],
) -> list[TransactionSynchronization]:
    """Return *synchronizations* ordered ascending by ``order`` (stable)."""
    return sorted(synchronizations, key=lambda sync: sync.order)


def invoke_suspend(synchronizations: Iterable[TransactionSynchronization]) -> None:
    for sync in synchronizations:
        try:
            sync.suspend()
        except Exception:
            logger.error("TransactionSynchronization.suspend threw exception", exc_info=True)


def invoke_resume(synchronizations: Iterable[TransactionSynchronization]) -> None:
    for sync in synchronizations:
        try:
            sync.resume()
        except Exception:
            logger.error("TransactionSynchronization.resume threw exception", exc_info=True)


def invoke_flush(synchronizations: Iterable[TransactionSynchronization]) -> None:
    for sync in synchronizations:
        sync.flush()


def invoke_before_commit(synchronizations: Iterable[TransactionSynchronization], read_only: bool) -> None:
    for sync in synchronizations:
        sync.before_commit(read_only)


def invoke_before_completion(synchronizations: Iterable[TransactionSynchronization]) -> None:
    for sync in synchronizations:
        try:
            sync.before_completion()
        except Exception:
            logger.error("TransactionSynchronization.before_completion threw exception", exc_info=True)


def invoke_after_commit(synchronizations: Iterable[TransactionSynchronization]) -> None:
    for sync in synchronizations:
        sync.after_commit()


def invoke_after_completion(
    synchronizations: Iterable[TransactionSynchronization],
    status: SynchronizationStatus,
) -> None:
    for sync in synchronizations:
        try:
            sync.after_completion(status)
        except Exception:
            logger.error("TransactionSynchronization.after_completion threw exception", exc_info=True)
