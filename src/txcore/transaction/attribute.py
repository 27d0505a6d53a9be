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
"""Transaction attributes: a definition plus rollback rules and a descriptor."""

from __future__ import annotations

from dataclasses import dataclass

from txcore.transaction.definition import TransactionDefinition


@dataclass(frozen=True)
class TransactionAttribute(TransactionDefinition):
    """Definition resolved for a call site.

    ``rollback_for`` / ``no_rollback_for`` refine which failures roll back.
    The most specific matching rule wins, measured by distance in the
    exception's MRO; on a tie the no-rollback rule wins. Without a matching
    rule every failure rolls back.
    """

    qualifier: str | None = None
    descriptor: str | None = None
    rollback_for: tuple[type[BaseException], ...] = ()
    no_rollback_for: tuple[type[BaseException], ...] = ()

    def rollback_on(self, ex: BaseException) -> bool:
        """Whether *ex* should roll back the transaction."""
        mro = type(ex).__mro__
        winner: bool | None = None
        best_depth = len(mro)

        for rule_types, rollback in ((self.no_rollback_for, False), (self.rollback_for, True)):
            for rule_type in rule_types:
                if rule_type in mro:
                    depth = mro.index(rule_type)
                    if depth < best_depth:
                        best_depth = depth
                        winner = rollback

        if winner is None:
            return True
        return winner

    def __str__(self) -> str:
        text = super().__str__()
        rules = [f"-{t.__name__}" for t in self.rollback_for] + [f"+{t.__name__}" for t in self.no_rollback_for]
        if rules:
            text += "," + ",".join(rules)
        if self.qualifier:
            text += f"; '{self.qualifier}'"
        return text
