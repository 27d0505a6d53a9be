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
"""SQLAlchemy resource driver: one ``Connection`` per transaction."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Connection, Engine
from sqlalchemy.engine import NestedTransaction, RootTransaction
from sqlalchemy.orm import Session, sessionmaker

from txcore.transaction.definition import Isolation
from txcore.transaction.driver import BaseResourceDriver

logger = logging.getLogger(__name__)

_READ_ONLY_DIALECTS = frozenset({"postgresql"})
_TIMEOUT_DIALECTS = frozenset({"postgresql"})


@dataclass
class SqlAlchemyTransactionHandle:
    """Connection, root transaction and optional ORM session of one transaction."""

    connection: Connection
    transaction: RootTransaction
    session: Session | None = None


class SqlAlchemyResourceDriver(BaseResourceDriver):
    """Drives transactions on a SQLAlchemy ``Engine``.

    Isolation levels map to the ``isolation_level`` execution option; a level
    the dialect rejects is an error. The read-only hint and the timeout are
    applied on PostgreSQL and silently ignored elsewhere. Savepoints use
    ``Connection.begin_nested()``.

    With a *session_factory*, each transaction also gets an ORM ``Session``
    bound to its connection; it is flushed before commit and on
    ``status.flush()``.
    """

    def __init__(self, engine: Engine, session_factory: sessionmaker[Session] | None = None) -> None:
        self._engine = engine
        self._session_factory = session_factory

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def resource_key(self) -> Any:
        return self._engine

    def begin(self, isolation: Isolation, timeout: int, read_only: bool) -> SqlAlchemyTransactionHandle:
        connection = self._engine.connect()
        try:
            if isolation is not Isolation.DEFAULT:
                connection.execution_options(isolation_level=isolation.value)
            transaction = connection.begin()
            dialect = connection.dialect.name
            if read_only:
                if dialect in _READ_ONLY_DIALECTS:
                    connection.exec_driver_sql("SET TRANSACTION READ ONLY")
                else:
                    logger.debug("Read-only hint ignored for dialect '%s'", dialect)
            if timeout > 0:
                if dialect in _TIMEOUT_DIALECTS:
                    connection.exec_driver_sql(f"SET LOCAL statement_timeout = {int(timeout) * 1000}")
                else:
                    logger.debug("Transaction timeout ignored for dialect '%s'", dialect)
            session = self._session_factory(bind=connection) if self._session_factory is not None else None
        except Exception:
            connection.close()
            raise
        return SqlAlchemyTransactionHandle(connection, transaction, session)

    def commit(self, handle: SqlAlchemyTransactionHandle) -> None:
        if handle.session is not None:
            handle.session.flush()
        handle.transaction.commit()

    def rollback(self, handle: SqlAlchemyTransactionHandle) -> None:
        # An inactive transaction still holds the connection until rolled back.
        handle.transaction.rollback()

    def release(self, handle: SqlAlchemyTransactionHandle) -> None:
        if handle.session is not None:
            handle.session.close()
        handle.connection.close()

    def supports_savepoints(self) -> bool:
        return True

    def create_savepoint(self, handle: SqlAlchemyTransactionHandle) -> NestedTransaction:
        if handle.session is not None:
            handle.session.flush()
        return handle.connection.begin_nested()

    def rollback_to_savepoint(self, handle: SqlAlchemyTransactionHandle, savepoint: NestedTransaction) -> None:
        savepoint.rollback()
        if handle.session is not None:
            handle.session.expire_all()

    def release_savepoint(self, handle: SqlAlchemyTransactionHandle, savepoint: NestedTransaction) -> None:
        if savepoint.is_active:
            savepoint.commit()

    def supports_flush(self) -> bool:
        return self._session_factory is not None

    def flush(self, handle: SqlAlchemyTransactionHandle) -> None:
        if handle.session is not None:
            handle.session.flush()
