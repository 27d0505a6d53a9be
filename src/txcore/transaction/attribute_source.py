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
"""Resolution and caching of transaction attributes per call site.

Resolution results are memoized per ``(function, target class)`` call-site
identity. Negative results are cached too, through a sentinel, so repeated
lookups of non-transactional methods stay cheap.
"""

from __future__ import annotations

import fnmatch
import logging
import sys
import threading
from collections.abc import Callable, Mapping
from typing import Any, Protocol, runtime_checkable

from txcore.transaction.attribute import TransactionAttribute

logger = logging.getLogger(__name__)

_NULL_TRANSACTION_ATTRIBUTE = TransactionAttribute(descriptor="null")


@runtime_checkable
class TransactionAttributeSource(Protocol):
    """Supplies the transaction attribute for a method, or ``None``."""

    def get_transaction_attribute(
        self,
        method: Callable[..., Any],
        target_cls: type | None = None,
    ) -> TransactionAttribute | None: ...


def _unwrap(method: Any) -> Any:
    if isinstance(method, (staticmethod, classmethod)):
        return method.__func__
    return getattr(method, "__func__", method)


def _declaring_class(func: Any, target_cls: type | None) -> type | None:
    name = getattr(func, "__name__", None)
    if name is None:
        return None
    if target_cls is not None:
        for klass in target_cls.__mro__:
            if _unwrap(klass.__dict__.get(name)) is func:
                return klass

    parts = getattr(func, "__qualname__", "").split(".")[:-1]
    if not parts or "<locals>" in parts:
        return None
    owner: Any = sys.modules.get(getattr(func, "__module__", ""))
    for part in parts:
        owner = getattr(owner, part, None)
        if owner is None:
            return None
    return owner if isinstance(owner, type) else None


def _qualified_name(func: Any, target_cls: type | None) -> str:
    owner = target_cls if target_cls is not None else _declaring_class(func, None)
    if owner is None:
        return getattr(func, "__qualname__", repr(func))
    return f"{owner.__module__}.{owner.__qualname__}.{func.__name__}"


class AbstractFallbackTransactionAttributeSource:
    """Caching attribute source with method → class fallback.

    Lookup order: the most specific method on the target class, then the
    class declaring it, then the originally passed method and its declaring
    class. Subclasses implement :meth:`find_method_attribute` and
    :meth:`find_class_attribute`.
    """

    def __init__(self, allow_public_methods_only: bool = False) -> None:
        self.allow_public_methods_only = allow_public_methods_only
        self._attribute_cache: dict[Any, TransactionAttribute] = {}
        self._lock = threading.Lock()

    def get_transaction_attribute(
        self,
        method: Callable[..., Any],
        target_cls: type | None = None,
    ) -> TransactionAttribute | None:
        func = _unwrap(method)
        if getattr(func, "__qualname__", "").startswith("object."):
            return None

        cache_key = self.get_cache_key(func, target_cls)
        cached = self._attribute_cache.get(cache_key)
        if cached is not None:
            return None if cached is _NULL_TRANSACTION_ATTRIBUTE else cached

        attribute = self.compute_transaction_attribute(func, target_cls)
        if attribute is None:
            with self._lock:
                self._attribute_cache.setdefault(cache_key, _NULL_TRANSACTION_ATTRIBUTE)
            return None

        identification = _qualified_name(func, target_cls)
        if attribute.descriptor is None:
            attribute = attribute.derive(descriptor=identification)
        logger.debug("Adding transactional method '%s' with attribute: %s", identification, attribute)
        with self._lock:
            return self._attribute_cache.setdefault(cache_key, attribute)

    def get_cache_key(self, func: Any, target_cls: type | None) -> Any:
        return (func, target_cls)

    def clear_cache(self) -> None:
        with self._lock:
            self._attribute_cache.clear()

    def compute_transaction_attribute(self, func: Any, target_cls: type | None) -> TransactionAttribute | None:
        if self.allow_public_methods_only and func.__name__.startswith("_"):
            return None

        specific = func
        if target_cls is not None:
            candidate = _unwrap(getattr(target_cls, func.__name__, None))
            if callable(candidate):
                specific = candidate

        attribute = self.find_method_attribute(specific)
        if attribute is not None:
            return attribute

        declaring = _declaring_class(specific, target_cls)
        if declaring is not None:
            attribute = self.find_class_attribute(declaring)
            if attribute is not None:
                return attribute

        if specific is not func:
            attribute = self.find_method_attribute(func)
            if attribute is not None:
                return attribute
            declaring = _declaring_class(func, None)
            if declaring is not None:
                attribute = self.find_class_attribute(declaring)
                if attribute is not None:
                    return attribute

        return None

    def find_method_attribute(self, func: Any) -> TransactionAttribute | None:
        raise NotImplementedError

    def find_class_attribute(self, cls: type) -> TransactionAttribute | None:
        raise NotImplementedError


class NameMatchTransactionAttributeSource(AbstractFallbackTransactionAttributeSource):
    """Attribute source keyed by method-name patterns and by class.

    Patterns use ``fnmatch`` syntax (``save*``, ``*_readonly``). An exact
    name wins over patterns; among patterns the longest one wins.

    Usage:
        source = NameMatchTransactionAttributeSource({
            "find*": TransactionAttribute(read_only=True),
            "*": TransactionAttribute(),
        })
    """

    def __init__(
        self,
        name_map: Mapping[str, TransactionAttribute] | None = None,
        class_map: Mapping[type, TransactionAttribute] | None = None,
        allow_public_methods_only: bool = False,
    ) -> None:
        super().__init__(allow_public_methods_only=allow_public_methods_only)
        self._name_map: dict[str, TransactionAttribute] = dict(name_map or {})
        self._class_map: dict[type, TransactionAttribute] = dict(class_map or {})

    def add_method(self, pattern: str, attribute: TransactionAttribute) -> None:
        self._name_map[pattern] = attribute
        self.clear_cache()

    def add_class(self, cls: type, attribute: TransactionAttribute) -> None:
        self._class_map[cls] = attribute
        self.clear_cache()

    def find_method_attribute(self, func: Any) -> TransactionAttribute | None:
        name = getattr(func, "__name__", None)
        if name is None:
            return None
        if name in self._name_map:
            return self._name_map[name]

        best_pattern: str | None = None
        for pattern in self._name_map:
            if fnmatch.fnmatchcase(name, pattern) and (best_pattern is None or len(pattern) > len(best_pattern)):
                best_pattern = pattern
        return self._name_map[best_pattern] if best_pattern is not None else None

    def find_class_attribute(self, cls: type) -> TransactionAttribute | None:
        return self._class_map.get(cls)
