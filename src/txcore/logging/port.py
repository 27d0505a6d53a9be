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
"""Logging configuration contract for txcore.

The transaction engine never configures logging itself: every engine module
logs through ``logging.getLogger(__name__)`` (``txcore.transaction.manager``,
``txcore.transaction.synchronization`` and so on) and leaves rendering to
whichever :class:`LoggingPort` the application installs.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from txcore.core.config import Config


@runtime_checkable
class LoggingPort(Protocol):
    """How an application wires txcore's log output.

    ``configure`` binds the ``txcore.logging`` section to
    :class:`~txcore.config.properties.logging.LoggingProperties`. Its ``level``
    mapping holds the root level under ``root`` and per-logger overrides under
    logger names, e.g. ``txcore.transaction.manager: DEBUG`` to trace
    propagation decisions. ``format`` selects ``console`` or ``json`` output.

    ``set_level`` targets the stdlib logger of that name, so it reaches the
    engine modules directly.
    """

    def configure(self, config: Config) -> None: ...
    def get_logger(self, name: str) -> Any: ...
    def set_level(self, name: str, level: str) -> None: ...
