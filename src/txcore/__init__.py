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
"""txcore: transaction-boundary coordination core.

Lets independently written units of work declare how they participate in a
transactional scope (join, require new, run outside, nest) and guarantees
consistent commit, rollback and resume semantics across nesting levels.
"""

from txcore.kernel.exceptions import (
    HeuristicCompletionException,
    IllegalTransactionStateException,
    NestedTransactionNotSupportedException,
    TransactionException,
    TransactionSystemException,
    UnexpectedRollbackException,
)
from txcore.kernel.types import HeuristicOutcome
from txcore.transaction import (
    Isolation,
    Propagation,
    ResourceTransactionManager,
    SynchronizationStatus,
    TransactionContext,
    TransactionDefinition,
    TransactionStatus,
    TransactionSynchronization,
    TransactionTemplate,
)

__version__ = "0.1.0"

__all__ = [
    "HeuristicCompletionException",
    "HeuristicOutcome",
    "IllegalTransactionStateException",
    "Isolation",
    "NestedTransactionNotSupportedException",
    "Propagation",
    "ResourceTransactionManager",
    "SynchronizationStatus",
    "TransactionContext",
    "TransactionDefinition",
    "TransactionException",
    "TransactionStatus",
    "TransactionSynchronization",
    "TransactionSystemException",
    "TransactionTemplate",
    "UnexpectedRollbackException",
    "__version__",
]
