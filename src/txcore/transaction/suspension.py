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
"""Holder for the state parked while a transaction is suspended."""

from __future__ import annotations

from typing import Any

from txcore.kernel.exceptions import IllegalTransactionStateException
from txcore.transaction.definition import Isolation
from txcore.transaction.synchronization import TransactionSynchronization


class SuspendedResourcesHolder:
    """Snapshot of a suspended transaction's resources and synchronizations.

    Created by the manager on suspend and consumed exactly once by the
    matching resume.
    """

    def __init__(
        self,
        suspended_resources: Any = None,
        suspended_synchronizations: list[TransactionSynchronization] | None = None,
        name: str | None = None,
        read_only: bool = False,
        isolation_level: Isolation | None = None,
        was_active: bool = False,
    ) -> None:
        self.suspended_resources = suspended_resources
        self.suspended_synchronizations = suspended_synchronizations
        self.name = name
        self.read_only = read_only
        self.isolation_level = isolation_level
        self.was_active = was_active
        self._consumed = False

    @property
    def consumed(self) -> bool:
        return self._consumed

    def consume(self) -> None:
        """Mark the holder as resumed; a holder cannot be resumed twice."""
        if self._consumed:
            raise IllegalTransactionStateException("Suspended resources have already been resumed")
        self._consumed = True

    def __repr__(self) -> str:
        syncs = len(self.suspended_synchronizations) if self.suspended_synchronizations is not None else None
        return (
            f"SuspendedResourcesHolder(resources={self.suspended_resources!r}, "
            f"synchronizations={syncs}, name={self.name!r}, consumed={self._consumed})"
        )
