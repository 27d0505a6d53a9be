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
"""In-memory resource driver that records every call, for tests."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any

from txcore.kernel.types import HeuristicOutcome
from txcore.transaction.definition import Isolation
from txcore.transaction.driver import BaseResourceDriver, ResourceHeuristicError


@dataclass
class InMemoryTransaction:
    """Handle returned by :meth:`InMemoryResourceDriver.begin`."""

    id: int
    isolation: Isolation
    timeout: int
    read_only: bool
    state: str = "active"
    savepoints: list[str] = field(default_factory=list)
    released: bool = False


class InMemoryResourceDriver(BaseResourceDriver):
    """Resource driver keeping transactions in memory.

    Every call is appended to :attr:`events` as ``(operation, transaction_id, *args)``.
    Failures can be injected by setting :attr:`begin_error`,
    :attr:`commit_error`, :attr:`rollback_error` or :attr:`heuristic_outcome`.

    Args:
        savepoints: Report savepoint support.
        flush: Report flush support.
    """

    def __init__(self, *, savepoints: bool = True, flush: bool = False) -> None:
        self._savepoints = savepoints
        self._flush = flush
        self._ids = itertools.count(1)
        self.events: list[tuple[Any, ...]] = []
        self.transactions: list[InMemoryTransaction] = []
        self.begin_error: Exception | None = None
        self.commit_error: Exception | None = None
        self.rollback_error: Exception | None = None
        self.heuristic_outcome: HeuristicOutcome | None = None

    def operations(self, operation: str | None = None) -> list[tuple[Any, ...]]:
        """Recorded events, optionally filtered by operation name."""
        if operation is None:
            return list(self.events)
        return [event for event in self.events if event[0] == operation]

    def begin(self, isolation: Isolation, timeout: int, read_only: bool) -> InMemoryTransaction:
        if self.begin_error is not None:
            self.events.append(("begin_failed", None))
            raise self.begin_error
        tx = InMemoryTransaction(next(self._ids), isolation, timeout, read_only)
        self.transactions.append(tx)
        self.events.append(("begin", tx.id))
        return tx

    def commit(self, handle: InMemoryTransaction) -> None:
        self.events.append(("commit", handle.id))
        if self.heuristic_outcome is not None:
            handle.state = "heuristic"
            raise ResourceHeuristicError(self.heuristic_outcome)
        if self.commit_error is not None:
            handle.state = "unknown"
            raise self.commit_error
        handle.state = "committed"

    def rollback(self, handle: InMemoryTransaction) -> None:
        self.events.append(("rollback", handle.id))
        if self.rollback_error is not None:
            handle.state = "unknown"
            raise self.rollback_error
        handle.state = "rolled_back"

    def release(self, handle: InMemoryTransaction) -> None:
        self.events.append(("release", handle.id))
        handle.released = True

    def supports_savepoints(self) -> bool:
        return self._savepoints

    def create_savepoint(self, handle: InMemoryTransaction) -> str:
        name = f"SAVEPOINT_{len(handle.savepoints) + 1}"
        handle.savepoints.append(name)
        self.events.append(("savepoint", handle.id, name))
        return name

    def rollback_to_savepoint(self, handle: InMemoryTransaction, savepoint: str) -> None:
        self.events.append(("rollback_to_savepoint", handle.id, savepoint))
        del handle.savepoints[handle.savepoints.index(savepoint) + 1:]

    def release_savepoint(self, handle: InMemoryTransaction, savepoint: str) -> None:
        self.events.append(("release_savepoint", handle.id, savepoint))
        if savepoint in handle.savepoints:
            handle.savepoints.remove(savepoint)

    def supports_flush(self) -> bool:
        return self._flush

    def flush(self, handle: InMemoryTransaction) -> None:
        self.events.append(("flush", handle.id))
