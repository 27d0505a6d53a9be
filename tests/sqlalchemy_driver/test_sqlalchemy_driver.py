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
"""Tests for the SQLAlchemy resource driver against in-memory SQLite."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from sqlalchemy import Integer, String, create_engine, event, func, select, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from txcore.sqlalchemy import SqlAlchemyResourceDriver, SqlAlchemyTransactionHandle
from txcore.transaction import (
    Propagation,
    ResourceTransactionManager,
    TransactionContext,
    TransactionDefinition,
    TransactionTemplate,
)


class Base(DeclarativeBase):
    pass


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner: Mapped[str] = mapped_column(String(50))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # pysqlite defers BEGIN on its own; let SQLAlchemy emit it so savepoints work.
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def ctx() -> TransactionContext:
    return TransactionContext()


def _owners(engine) -> list[str]:
    with engine.connect() as conn:
        return list(conn.execute(select(Account.owner).order_by(Account.id)).scalars())


def _insert(manager: ResourceTransactionManager, ctx: TransactionContext, owner: str) -> None:
    handle: SqlAlchemyTransactionHandle = manager.current_handle(ctx)
    handle.connection.execute(text("INSERT INTO accounts (owner) VALUES (:owner)"), {"owner": owner})


class TestSqlAlchemyResourceDriver:
    def test_resource_key_is_engine(self, engine):
        driver = SqlAlchemyResourceDriver(engine)
        assert driver.resource_key is engine
        assert driver.supports_savepoints()
        assert not driver.supports_flush()

    def test_commit_persists(self, engine, ctx):
        manager = ResourceTransactionManager(SqlAlchemyResourceDriver(engine))
        TransactionTemplate(manager).execute(lambda status: _insert(manager, ctx, "alice"), ctx)
        assert _owners(engine) == ["alice"]

    def test_rollback_discards(self, engine, ctx):
        manager = ResourceTransactionManager(SqlAlchemyResourceDriver(engine))

        def work(status):
            _insert(manager, ctx, "bob")
            raise LookupError("abort")

        with pytest.raises(LookupError):
            TransactionTemplate(manager).execute(work, ctx)
        assert _owners(engine) == []

    def test_connection_released_after_completion(self, engine, ctx):
        manager = ResourceTransactionManager(SqlAlchemyResourceDriver(engine))
        status = manager.get_transaction(TransactionDefinition(read_only=True), ctx)
        handle = manager.current_handle(ctx)
        manager.commit(status)
        assert handle.connection.closed
        assert not ctx.has_resource(engine)

    def test_rollback_clears_inactive_transaction(self, engine):
        transaction = MagicMock(is_active=False)
        handle = SqlAlchemyTransactionHandle(connection=MagicMock(), transaction=transaction)

        SqlAlchemyResourceDriver(engine).rollback(handle)

        transaction.rollback.assert_called_once_with()

    def test_rollback_after_failed_statement_frees_connection(self, engine, ctx):
        driver = SqlAlchemyResourceDriver(engine)
        manager = ResourceTransactionManager(driver)
        status = manager.get_transaction(TransactionDefinition(), ctx)
        handle = manager.current_handle(ctx)

        with pytest.raises(OperationalError, match="no such table"):
            handle.connection.execute(text("SELECT * FROM missing_table"))
        manager.rollback(status)

        assert not handle.transaction.is_active
        assert handle.connection.closed
        assert _owners(engine) == []

    def test_nested_rollback_to_savepoint(self, engine, ctx):
        manager = ResourceTransactionManager(SqlAlchemyResourceDriver(engine))
        template = TransactionTemplate(manager)
        nested = template.with_definition(propagation=Propagation.NESTED)

        def inner(status):
            assert status.has_savepoint()
            _insert(manager, ctx, "carol")
            raise LookupError("abort inner")

        def outer(status):
            _insert(manager, ctx, "alice")
            with pytest.raises(LookupError):
                nested.execute(inner, ctx)
            _insert(manager, ctx, "dave")

        template.execute(outer, ctx)
        assert _owners(engine) == ["alice", "dave"]

    def test_nested_commit_releases_savepoint(self, engine, ctx):
        manager = ResourceTransactionManager(SqlAlchemyResourceDriver(engine))
        template = TransactionTemplate(manager)
        nested = template.with_definition(propagation=Propagation.NESTED)

        def outer(status):
            _insert(manager, ctx, "alice")
            nested.execute(lambda inner_status: _insert(manager, ctx, "erin"), ctx)

        template.execute(outer, ctx)
        assert _owners(engine) == ["alice", "erin"]


class TestSessionIntegration:
    def test_session_flushed_on_commit(self, engine, ctx):
        driver = SqlAlchemyResourceDriver(engine, session_factory=sessionmaker())
        manager = ResourceTransactionManager(driver)
        assert driver.supports_flush()

        def work(status):
            manager.current_handle(ctx).session.add(Account(owner="frank"))

        TransactionTemplate(manager).execute(work, ctx)
        assert _owners(engine) == ["frank"]

    def test_status_flush_writes_pending_objects(self, engine, ctx):
        driver = SqlAlchemyResourceDriver(engine, session_factory=sessionmaker())
        manager = ResourceTransactionManager(driver)

        def work(status):
            handle = manager.current_handle(ctx)
            handle.session.add(Account(owner="grace"))
            status.flush()
            return handle.connection.execute(select(func.count()).select_from(Account)).scalar_one()

        assert TransactionTemplate(manager).execute(work, ctx) == 1

    def test_session_rollback_discards(self, engine, ctx):
        driver = SqlAlchemyResourceDriver(engine, session_factory=sessionmaker())
        manager = ResourceTransactionManager(driver)
        status = manager.get_transaction(TransactionDefinition(), ctx)
        handle = manager.current_handle(ctx)
        handle.session.add(Account(owner="heidi"))
        handle.session.flush()

        manager.rollback(status)

        assert _owners(engine) == []
