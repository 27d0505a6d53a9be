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
"""Kernel value types shared across the transaction core."""

from __future__ import annotations

from enum import IntEnum


class HeuristicOutcome(IntEnum):
    """Outcome reported by a coordinator that could not complete uniformly.

    The integer values are stable and part of the public contract:
    ``HeuristicCompletionException.outcome_state`` exposes them directly.
    """

    UNKNOWN = 0
    COMMITTED = 1
    ROLLED_BACK = 2
    MIXED = 3

    @property
    def label(self) -> str:
        """Human-readable label used in exception messages."""
        return _LABELS[self]

    @classmethod
    def from_state(cls, state: int) -> HeuristicOutcome:
        """Map a raw integer state to an outcome, falling back to UNKNOWN."""
        try:
            return cls(state)
        except ValueError:
            return cls.UNKNOWN


_LABELS = {
    HeuristicOutcome.UNKNOWN: "unknown",
    HeuristicOutcome.COMMITTED: "committed",
    HeuristicOutcome.ROLLED_BACK: "rolled back",
    HeuristicOutcome.MIXED: "mixed",
}
