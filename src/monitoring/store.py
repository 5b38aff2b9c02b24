# This module implements the monitoring store on top of SQLAlchemy Core.
# It offers the small document-store surface the API and the sweep consume: equality queries,
# get, add with generated ids, set-with-merge, and a ping collection under every monitored function.
# Every SQLAlchemy failure is re-raised as StoreError naming the operation that failed.

from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    ForeignKey,
    Index,
    MetaData,
    String,
    Table,
    inspect,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Engine, RowMapping
from sqlalchemy.exc import SQLAlchemyError

from src.common.db import can_connect
from src.monitoring.models import FUNCTION_FIELDS, IDENTITY_FIELDS, FunctionPing, MonitoredFunction

LOGGER = logging.getLogger("monitoring.store")

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

DEFAULT_FUNCTION_TABLE_NAME = "monitored_functions"
DEFAULT_PING_TABLE_NAME = "function_pings"


class StoreError(RuntimeError):
    """Raised when a store read or write fails."""

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")


def _safe_identifier(identifier: str) -> str:
    if not _IDENTIFIER_RE.match(identifier):
        raise ValueError(f"Unsafe SQL identifier: {identifier!r}")
    return identifier


def _new_id() -> str:
    return uuid.uuid4().hex


class MonitoringStore:
    """Explicit store handle shared by the API services and the sweep."""

    def __init__(
        self,
        *,
        engine: Engine,
        function_table_name: str = DEFAULT_FUNCTION_TABLE_NAME,
        ping_table_name: str = DEFAULT_PING_TABLE_NAME,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._engine = engine
        self._id_factory = id_factory
        self._metadata = MetaData()
        function_table_name = _safe_identifier(function_table_name)
        ping_table_name = _safe_identifier(ping_table_name)

        self.functions = Table(
            function_table_name,
            self._metadata,
            Column("id", String(64), primary_key=True),
            Column("function_name", String(255), nullable=False),
            Column("project_id", String(255), nullable=False),
            Column("region", String(64), nullable=False),
            Column("tag", String(255), nullable=True),
            Column("function_url", String(2048), nullable=True),
            Column("enabled", Boolean, nullable=False, default=False),
            Index(f"ix_{function_table_name}_identity", "function_name", "project_id", "region", "tag"),
        )
        self.pings = Table(
            ping_table_name,
            self._metadata,
            Column("id", String(64), primary_key=True),
            Column(
                "monitored_function_id",
                String(64),
                ForeignKey(f"{function_table_name}.id"),
                nullable=False,
            ),
            Column("timestamp", BigInteger, nullable=False),
            Column("response_duration", BigInteger, nullable=True),
            Index(f"ix_{ping_table_name}_function_ts", "monitored_function_id", "timestamp"),
        )

    def create_schema(self) -> None:
        with self._wrap("create_schema"):
            self._metadata.create_all(self._engine, checkfirst=True)

    def can_connect(self) -> bool:
        return can_connect(self._engine)

    def table_exists(self, table_name: str) -> bool:
        safe_table = _safe_identifier(table_name)
        with self._wrap("table_exists"):
            return bool(inspect(self._engine).has_table(safe_table))

    def close(self) -> None:
        self._engine.dispose()

    def list_functions(self) -> list[MonitoredFunction]:
        return self.find_functions({})

    def find_functions(self, filters: Mapping[str, Any]) -> list[MonitoredFunction]:
        """Return functions matching every given field by equality; `None` matches NULL."""

        unknown = sorted(set(filters) - set(FUNCTION_FIELDS))
        if unknown:
            raise ValueError(f"Unknown monitored function fields: {unknown}")

        query = select(self.functions)
        for field, value in filters.items():
            column = self.functions.c[field]
            query = query.where(column.is_(None) if value is None else column == value)
        query = query.order_by(self.functions.c.id)

        with self._wrap("find_functions"):
            with self._engine.connect() as connection:
                rows = connection.execute(query).mappings().all()
        return [self._function_from_row(row) for row in rows]

    def get_function(self, function_id: str) -> MonitoredFunction | None:
        query = select(self.functions).where(self.functions.c.id == function_id)
        with self._wrap("get_function"):
            with self._engine.connect() as connection:
                row = connection.execute(query).mappings().first()
        return self._function_from_row(row) if row is not None else None

    def add_function(self, payload: Mapping[str, Any]) -> str:
        values = self._clean_function_payload(payload)
        missing = [field for field in IDENTITY_FIELDS + ("enabled",) if field not in values]
        if missing:
            raise ValueError(f"Missing monitored function fields: {missing}")

        function_id = self._id_factory()
        with self._wrap("add_function"):
            with self._engine.begin() as connection:
                connection.execute(insert(self.functions).values(id=function_id, **values))
        LOGGER.info("monitored function created id=%s name=%s", function_id, values["function_name"])
        return function_id

    def merge_function(self, function_id: str, payload: Mapping[str, Any]) -> None:
        """Overwrite the given fields of one function; fields not in `payload` are kept."""

        values = self._clean_function_payload(payload)
        if not values:
            return
        statement = update(self.functions).where(self.functions.c.id == function_id).values(**values)
        with self._wrap("merge_function"):
            with self._engine.begin() as connection:
                result = connection.execute(statement)
        if result.rowcount == 0:
            raise StoreError("merge_function", f"monitored function {function_id!r} does not exist")

    def add_ping(self, function_id: str, ping: FunctionPing) -> str:
        ping_id = self._id_factory()
        with self._wrap("add_ping"):
            with self._engine.begin() as connection:
                connection.execute(
                    insert(self.pings).values(
                        id=ping_id,
                        monitored_function_id=function_id,
                        timestamp=ping.timestamp,
                        response_duration=ping.response_duration,
                    )
                )
        return ping_id

    def list_pings(self, function_id: str) -> list[FunctionPing]:
        """Return all pings of one function ordered by timestamp ascending."""

        query = (
            select(self.pings.c.timestamp, self.pings.c.response_duration)
            .where(self.pings.c.monitored_function_id == function_id)
            .order_by(self.pings.c.timestamp.asc(), self.pings.c.id.asc())
        )
        with self._wrap("list_pings"):
            with self._engine.connect() as connection:
                rows = connection.execute(query).mappings().all()
        return [
            FunctionPing(
                timestamp=int(row["timestamp"]),
                response_duration=(
                    int(row["response_duration"]) if row["response_duration"] is not None else None
                ),
            )
            for row in rows
        ]

    @contextmanager
    def _wrap(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            LOGGER.error("store operation failed operation=%s error=%s", operation, exc)
            raise StoreError(operation, str(exc)) from exc

    def _clean_function_payload(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        unknown = sorted(set(payload) - set(FUNCTION_FIELDS))
        if unknown:
            raise ValueError(f"Unknown monitored function fields: {unknown}")
        return {field: payload[field] for field in FUNCTION_FIELDS if field in payload}

    @staticmethod
    def _function_from_row(row: RowMapping) -> MonitoredFunction:
        return MonitoredFunction(
            id=str(row["id"]),
            function_name=str(row["function_name"]),
            project_id=str(row["project_id"]),
            region=str(row["region"]),
            tag=row["tag"],
            function_url=row["function_url"],
            enabled=bool(row["enabled"]),
        )
