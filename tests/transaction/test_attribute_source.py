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
"""Tests for transaction attribute resolution and caching."""

from __future__ import annotations

from typing import Any

from txcore.transaction import (
    NameMatchTransactionAttributeSource,
    Propagation,
    TransactionAttribute,
    TransactionAttributeSource,
)

READ_ONLY = TransactionAttribute(read_only=True)
WRITE = TransactionAttribute()
AUDIT = TransactionAttribute(propagation=Propagation.REQUIRES_NEW)


class OrderService:
    def place_order(self) -> None: ...

    def find_order(self) -> None: ...

    def find_order_history(self) -> None: ...

    def _recalculate(self) -> None: ...


class PriorityOrderService(OrderService):
    def place_order(self) -> None: ...


class CountingSource(NameMatchTransactionAttributeSource):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.lookups = 0

    def find_method_attribute(self, func: Any) -> TransactionAttribute | None:
        self.lookups += 1
        return super().find_method_attribute(func)


class TestNameMatching:
    def test_conforms_to_protocol(self):
        assert isinstance(NameMatchTransactionAttributeSource(), TransactionAttributeSource)

    def test_exact_name(self):
        source = NameMatchTransactionAttributeSource({"place_order": WRITE})
        attribute = source.get_transaction_attribute(OrderService.place_order, OrderService)
        assert attribute is not None
        assert not attribute.read_only

    def test_pattern(self):
        source = NameMatchTransactionAttributeSource({"find_*": READ_ONLY})
        attribute = source.get_transaction_attribute(OrderService.find_order, OrderService)
        assert attribute is not None
        assert attribute.read_only

    def test_exact_name_beats_pattern(self):
        source = NameMatchTransactionAttributeSource({"find_*": READ_ONLY, "find_order": AUDIT})
        attribute = source.get_transaction_attribute(OrderService.find_order, OrderService)
        assert attribute.propagation is Propagation.REQUIRES_NEW

    def test_longest_pattern_wins(self):
        source = NameMatchTransactionAttributeSource({"find_*": READ_ONLY, "find_order_*": AUDIT})
        attribute = source.get_transaction_attribute(OrderService.find_order_history, OrderService)
        assert attribute.propagation is Propagation.REQUIRES_NEW

    def test_no_match(self):
        source = NameMatchTransactionAttributeSource({"find_*": READ_ONLY})
        assert source.get_transaction_attribute(OrderService.place_order, OrderService) is None

    def test_descriptor_is_qualified_name(self):
        source = NameMatchTransactionAttributeSource({"place_order": WRITE})
        attribute = source.get_transaction_attribute(OrderService.place_order, OrderService)
        assert attribute.descriptor == f"{OrderService.__module__}.OrderService.place_order"

    def test_explicit_descriptor_is_kept(self):
        source = NameMatchTransactionAttributeSource({"place_order": WRITE.derive(descriptor="orders.place")})
        attribute = source.get_transaction_attribute(OrderService.place_order, OrderService)
        assert attribute.descriptor == "orders.place"

    def test_object_methods_are_never_transactional(self):
        source = NameMatchTransactionAttributeSource({"*": WRITE})
        assert source.get_transaction_attribute(object.__repr__, OrderService) is None

    def test_public_methods_only(self):
        source = NameMatchTransactionAttributeSource({"*": WRITE}, allow_public_methods_only=True)
        assert source.get_transaction_attribute(OrderService._recalculate, OrderService) is None
        assert source.get_transaction_attribute(OrderService.place_order, OrderService) is not None


class TestClassFallback:
    def test_class_attribute_applies_to_methods(self):
        source = NameMatchTransactionAttributeSource(class_map={OrderService: READ_ONLY})
        attribute = source.get_transaction_attribute(OrderService.find_order, OrderService)
        assert attribute.read_only

    def test_method_attribute_beats_class_attribute(self):
        source = NameMatchTransactionAttributeSource({"place_order": WRITE}, {OrderService: READ_ONLY})
        attribute = source.get_transaction_attribute(OrderService.place_order, OrderService)
        assert not attribute.read_only

    def test_most_specific_method_on_target_class(self):
        source = NameMatchTransactionAttributeSource(class_map={PriorityOrderService: AUDIT})
        attribute = source.get_transaction_attribute(OrderService.place_order, PriorityOrderService)
        assert attribute.propagation is Propagation.REQUIRES_NEW
        assert source.get_transaction_attribute(OrderService.place_order) is None

    def test_falls_back_to_original_method_class(self):
        source = NameMatchTransactionAttributeSource(class_map={OrderService: READ_ONLY})
        attribute = source.get_transaction_attribute(OrderService.place_order, PriorityOrderService)
        assert attribute is not None
        assert attribute.read_only

    def test_inherited_method_uses_declaring_class(self):
        source = NameMatchTransactionAttributeSource(class_map={OrderService: READ_ONLY})
        attribute = source.get_transaction_attribute(PriorityOrderService.find_order, PriorityOrderService)
        assert attribute.read_only

    def test_bound_method(self):
        source = NameMatchTransactionAttributeSource({"find_*": READ_ONLY})
        service = OrderService()
        assert source.get_transaction_attribute(service.find_order, OrderService).read_only


class TestCaching:
    def test_positive_result_is_cached(self):
        source = CountingSource({"place_order": WRITE})
        first = source.get_transaction_attribute(OrderService.place_order, OrderService)
        second = source.get_transaction_attribute(OrderService.place_order, OrderService)
        assert first is second
        assert source.lookups == 1

    def test_negative_result_is_cached(self):
        source = CountingSource()
        assert source.get_transaction_attribute(OrderService.place_order, OrderService) is None
        assert source.get_transaction_attribute(OrderService.place_order, OrderService) is None
        assert source.lookups == 1

    def test_cache_key_includes_target_class(self):
        source = CountingSource({"place_order": WRITE})
        source.get_transaction_attribute(OrderService.place_order, OrderService)
        source.get_transaction_attribute(OrderService.place_order, PriorityOrderService)
        assert source.lookups == 2

    def test_adding_mappings_clears_cache(self):
        source = CountingSource()
        assert source.get_transaction_attribute(OrderService.find_order, OrderService) is None

        source.add_method("find_*", READ_ONLY)
        assert source.get_transaction_attribute(OrderService.find_order, OrderService).read_only

        source.add_class(OrderService, AUDIT)
        attribute = source.get_transaction_attribute(OrderService._recalculate, OrderService)
        assert attribute.propagation is Propagation.REQUIRES_NEW
