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
"""Transaction definitions: propagation, isolation, timeout and read-only hint."""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass
from typing import Any

TIMEOUT_DEFAULT = -1
"""Use the underlying resource's default timeout."""


class Propagation(enum.Enum):
    """Transaction propagation behaviour."""

    REQUIRED = "REQUIRED"
    """Join the current transaction; create a new one if none exists."""

    SUPPORTS = "SUPPORTS"
    """Join the current transaction; run non-transactionally if none exists."""

    MANDATORY = "MANDATORY"
    """Join the current transaction; fail if none exists."""

    REQUIRES_NEW = "REQUIRES_NEW"
    """Always create a new transaction, suspending the current one."""

    NOT_SUPPORTED = "NOT_SUPPORTED"
    """Run non-transactionally, suspending the current transaction."""

    NEVER = "NEVER"
    """Run non-transactionally; fail if a transaction exists."""

    NESTED = "NESTED"
    """Run within a savepoint of the current transaction; behave like REQUIRED otherwise."""


class Isolation(enum.Enum):
    """Transaction isolation level.

    Values are the level names understood by SQL databases (and by
    SQLAlchemy's ``isolation_level`` execution option).
    """

    DEFAULT = "DEFAULT"
    READ_UNCOMMITTED = "READ UNCOMMITTED"
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"
    SERIALIZABLE = "SERIALIZABLE"


@dataclass(frozen=True)
class TransactionDefinition:
    """Immutable description of the transaction a unit of work wants.

    ``read_only`` is an advisory hint and ``timeout`` is only propagated to
    the resource; both may be ignored by resources that cannot honour them.
    Use :meth:`derive` to compose a new definition from this one.
    """

    propagation: Propagation = Propagation.REQUIRED
    isolation: Isolation = Isolation.DEFAULT
    timeout: int = TIMEOUT_DEFAULT
    read_only: bool = False
    name: str | None = None

    def derive(self, **overrides: Any) -> TransactionDefinition:
        """Return a copy with *overrides* applied."""
        return dataclasses.replace(self, **overrides)

    def __str__(self) -> str:
        parts = [f"PROPAGATION_{self.propagation.value}", f"ISOLATION_{self.isolation.value.replace(' ', '_')}"]
        if self.timeout != TIMEOUT_DEFAULT:
            parts.append(f"timeout_{self.timeout}")
        if self.read_only:
            parts.append("readOnly")
        return ",".join(parts)


DEFAULT_DEFINITION = TransactionDefinition()
"""Shared default definition: REQUIRED, default isolation, default timeout."""
