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
"""txcore Transaction: propagation-aware transaction coordination."""

from txcore.transaction.attribute import TransactionAttribute
from txcore.transaction.attribute_source import (
    AbstractFallbackTransactionAttributeSource,
    NameMatchTransactionAttributeSource,
    TransactionAttributeSource,
)
from txcore.transaction.context import TransactionContext
from txcore.transaction.definition import (
    DEFAULT_DEFINITION,
    TIMEOUT_DEFAULT,
    Isolation,
    Propagation,
    TransactionDefinition,
)
from txcore.transaction.driver import BaseResourceDriver, ResourceDriver, ResourceHeuristicError
from txcore.transaction.manager import (
    AbstractPlatformTransactionManager,
    PlatformTransactionManager,
    SynchronizationPolicy,
)
from txcore.transaction.resource import ResourceHolder, ResourceTransactionManager, ResourceTransactionObject
from txcore.transaction.status import DefaultTransactionStatus, TransactionObject, TransactionStatus
from txcore.transaction.suspension import SuspendedResourcesHolder
from txcore.transaction.synchronization import (
    ORDER_HIGHEST,
    ORDER_LOWEST,
    SynchronizationStatus,
    TransactionSynchronization,
)
from txcore.transaction.template import CallbackPreferringPlatformTransactionManager, TransactionTemplate

__all__ = [
    # Definition
    "DEFAULT_DEFINITION",
    "TIMEOUT_DEFAULT",
    "Isolation",
    "Propagation",
    "TransactionDefinition",
    "TransactionAttribute",
    # Attribute sources
    "TransactionAttributeSource",
    "AbstractFallbackTransactionAttributeSource",
    "NameMatchTransactionAttributeSource",
    # Context & synchronization
    "TransactionContext",
    "TransactionSynchronization",
    "SynchronizationStatus",
    "ORDER_HIGHEST",
    "ORDER_LOWEST",
    "SuspendedResourcesHolder",
    # Status
    "TransactionStatus",
    "DefaultTransactionStatus",
    "TransactionObject",
    # Managers
    "PlatformTransactionManager",
    "AbstractPlatformTransactionManager",
    "SynchronizationPolicy",
    "ResourceTransactionManager",
    "ResourceTransactionObject",
    "ResourceHolder",
    # Drivers
    "ResourceDriver",
    "BaseResourceDriver",
    "ResourceHeuristicError",
    # Template
    "TransactionTemplate",
    "CallbackPreferringPlatformTransactionManager",
]
