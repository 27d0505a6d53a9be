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
"""Transaction manager configuration properties."""

from __future__ import annotations

from dataclasses import dataclass

from txcore.core.config import config_properties


@config_properties(prefix="txcore.transaction")
@dataclass
class TransactionManagerProperties:
    """Configuration for transaction managers (txcore.transaction.*).

    ``nested_fallback_to_required`` selects what NESTED does on a resource
    without savepoint support: join the existing transaction when ``True``,
    raise ``NestedTransactionNotSupportedException`` when ``False``.
    """

    transaction_synchronization: str = "always"
    default_timeout: int = -1
    nested_transaction_allowed: bool = True
    nested_fallback_to_required: bool = False
    validate_existing_transaction: bool = False
    global_rollback_on_participation_failure: bool = True
    fail_early_on_global_rollback_only: bool = False
    rollback_on_commit_failure: bool = False
