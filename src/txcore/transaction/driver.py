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
"""Resource driver contract orchestrated by :class:`ResourceTransactionManager`.

A driver owns the actual begin/commit/rollback primitives of one kind of
resource (a database engine, a messaging session, ...). Optional abilities
are reported through explicit capability queries rather than discovered by
type inspection.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from txcore.kernel.types import HeuristicOutcome
from txcore.transaction.definition import Isolation


class ResourceHeuristicError(Exception):
    """Raised by a driver when a commit ended with a non-uniform outcome."""

    def __init__(self, outcome: HeuristicOutcome, message: str | None = None) -> None:
        super().__init__(message or f"Heuristic outcome: {outcome.label}")
        self.outcome = outcome


@runtime_checkable
class ResourceDriver(Protocol):
    """Structural contract for resource drivers."""

    @property
    def resource_key(self) -> Any:
        """Key under which the driver's transaction is bound in a context."""
        ...

    def begin(self, isolation: Isolation, timeout: int, read_only: bool) -> Any:
        """Begin a transaction and return an opaque handle."""
        ...

    def commit(self, handle: Any) -> None: ...

    def rollback(self, handle: Any) -> None: ...

    def release(self, handle: Any) -> None:
        """Release the handle after its transaction completed."""
        ...

    def supports_savepoints(self) -> bool: ...

    def create_savepoint(self, handle: Any) -> Any: ...

    def rollback_to_savepoint(self, handle: Any, savepoint: Any) -> None: ...

    def release_savepoint(self, handle: Any, savepoint: Any) -> None: ...

    def supports_flush(self) -> bool: ...

    def flush(self, handle: Any) -> None: ...


class BaseResourceDriver:
    """Convenience base class: optional capabilities default to unsupported.

    Subclasses implement :meth:`begin`, :meth:`commit` and :meth:`rollback`
    and override the capability queries for what their resource supports.
    """

    @property
    def resource_key(self) -> Any:
        return self

    def begin(self, isolation: Isolation, timeout: int, read_only: bool) -> Any:
        raise NotImplementedError

    def commit(self, handle: Any) -> None:
        raise NotImplementedError

    def rollback(self, handle: Any) -> None:
        raise NotImplementedError

    def release(self, handle: Any) -> None:
        """No-op by default."""

    def supports_savepoints(self) -> bool:
        return False

    def create_savepoint(self, handle: Any) -> Any:
        raise NotImplementedError(f"{type(self).__name__} does not support savepoints")

    def rollback_to_savepoint(self, handle: Any, savepoint: Any) -> None:
        raise NotImplementedError(f"{type(self).__name__} does not support savepoints")

    def release_savepoint(self, handle: Any, savepoint: Any) -> None:
        raise NotImplementedError(f"{type(self).__name__} does not support savepoints")

    def supports_flush(self) -> bool:
        return False

    def flush(self, handle: Any) -> None:
        """No-op by default."""
