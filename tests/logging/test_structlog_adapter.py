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
"""Tests for StructlogAdapter: default LoggingPort implementation."""

import logging

import pytest
import structlog

from txcore.core.config import Config
from txcore.logging.port import LoggingPort
from txcore.logging.structlog_adapter import StructlogAdapter


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


class TestStructlogAdapterConformance:
    def test_implements_logging_port(self):
        assert isinstance(StructlogAdapter(), LoggingPort)


class TestStructlogAdapterConfigure:
    def test_configure_with_defaults(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({}))
        assert adapter._root_level == "INFO"
        assert adapter._format == "console"

    def test_configure_reads_root_level(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({"txcore": {"logging": {"level": {"root": "debug"}}}}))
        assert adapter._root_level == "DEBUG"
        assert logging.getLogger().level == logging.DEBUG

    def test_configure_reads_format(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({"txcore": {"logging": {"format": "JSON"}}}))
        assert adapter._format == "json"

    def test_configure_reads_per_module_levels(self):
        adapter = StructlogAdapter()
        config = Config({"txcore": {"logging": {"level": {"root": "INFO", "txcore.transaction": "DEBUG"}}}})
        adapter.configure(config)
        assert adapter._module_levels == {"txcore.transaction": "DEBUG"}
        assert logging.getLogger("txcore.transaction").level == logging.DEBUG

    def test_root_handler_uses_processor_formatter(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({}))
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0].formatter, structlog.stdlib.ProcessorFormatter)


class TestStructlogAdapterLoggers:
    def test_get_logger_returns_logger(self):
        logger = StructlogAdapter().get_logger("txcore.test")
        assert hasattr(logger, "info")

    def test_set_level(self):
        adapter = StructlogAdapter()
        adapter.set_level("txcore.engine", "WARNING")
        assert logging.getLogger("txcore.engine").level == logging.WARNING

    def test_set_level_unknown_falls_back_to_info(self):
        adapter = StructlogAdapter()
        adapter.set_level("txcore.other", "CHATTY")
        assert logging.getLogger("txcore.other").level == logging.INFO
