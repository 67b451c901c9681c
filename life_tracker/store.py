"""
Persistence collaborators.

Both stores expose the same four row operations used by the trackers:
``select`` (equality filters, created-since, ordering), ``insert``,
``update`` by id and ``delete`` by id set. Rows travel as plain dicts.
Any backend failure surfaces as :class:`StoreError`.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping, Protocol

import httpx
from sqlalchemy import bindparam, create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .errors import StoreError

logger = logging.getLogger(__name__)

TABLE_FOOD = "food_entries"
TABLE_SHOPPING = "shopping_items"
TABLE_EXERCISE = "exercise_entries"
TABLE_WEIGHT = "weight_entries"
TABLE_BANK = "bank_accounts"
TABLE_BILLS = "bills_subscriptions"

BASE_COLUMNS = {
    "id": "TEXT PRIMARY KEY",
    "user_id": "TEXT",
    "created_at": "TEXT NOT NULL",
}

SCHEMA: dict[str, dict[str, str]] = {
    TABLE_FOOD: {
        "name": "TEXT NOT NULL",
        "calories": "REAL NOT NULL",
    },
    TABLE_SHOPPING: {
        "name": "TEXT NOT NULL",
        "completed": "BOOLEAN NOT NULL DEFAULT 0",
    },
    TABLE_EXERCISE: {
        "exercise": "TEXT NOT NULL",
        "sets": "INTEGER NOT NULL",
        "reps": "INTEGER NOT NULL",
        "weight": "REAL NOT NULL",
    },
    TABLE_WEIGHT: {
        "weight": "REAL NOT NULL",
        "unit": "TEXT CHECK (unit IN ('kg','lbs')) NOT NULL DEFAULT 'kg'",
    },
    TABLE_BANK: {
        "account_name": "TEXT NOT NULL",
        "account_type": "TEXT NOT NULL",
        "balance": "REAL NOT NULL DEFAULT 0",
        "currency": "TEXT NOT NULL DEFAULT 'USD'",
        "bank_name": "TEXT NOT NULL",
        "account_number_last_four": "TEXT",
        "is_active": "BOOLEAN NOT NULL DEFAULT 1",
    },
    TABLE_BILLS: {
        "name": "TEXT NOT NULL",
        "amount": "REAL NOT NULL",
        "due_date": "TEXT NOT NULL",
        "category": "TEXT NOT NULL",
        "status": "TEXT CHECK (status IN ('pending','paid','overdue')) NOT NULL DEFAULT 'pending'",
        "frequency": "TEXT NOT NULL DEFAULT 'monthly'",
        "notes": "TEXT",
    },
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def timestamp(moment: datetime) -> str:
    """Stored form of a moment: UTC ISO-8601, fixed width so strings sort."""
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment.astimezone(timezone.utc).isoformat(timespec="microseconds")


class Store(Protocol):
    def select(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        since: datetime | None = None,
        order_by: str | None = "created_at",
        descending: bool = False,
    ) -> list[dict]: ...

    def insert(self, table: str, values: Mapping[str, Any]) -> dict: ...

    def update(self, table: str, row_id: str, values: Mapping[str, Any]) -> dict: ...

    def delete(self, table: str, row_ids: Iterable[str]) -> int: ...

    def close(self) -> None: ...


def make_engine(db_url: str) -> Engine:
    if db_url.startswith("sqlite"):
        return create_engine(db_url, connect_args={"check_same_thread": False})
    return create_engine(db_url)


# -----------------------------
# SQL database (SQLAlchemy)
# -----------------------------

class SqlStore:
    def __init__(self, engine: Engine, *, schema=None, clock: Callable[[], datetime] | None = None):
        self.engine = engine
        self.schema = schema or SCHEMA
        self.clock = clock or _utcnow
        self.create_tables()

    def close(self) -> None:
        self.engine.dispose()

    def create_tables(self) -> None:
        with self.engine.begin() as conn:
            for table in self.schema:
                cols = ",\n                ".join(f"{name} {decl}" for name, decl in self._columns(table).items())
                conn.execute(text(f"""
                    CREATE TABLE IF NOT EXISTS {table} (
                        {cols}
                    )
                """))

    def _columns(self, table: str) -> dict[str, str]:
        if table not in self.schema:
            raise ValueError(f"Unknown table: {table}")
        return {**BASE_COLUMNS, **self.schema[table]}

    def _check_columns(self, table: str, names: Iterable[str]) -> None:
        columns = self._columns(table)
        unknown = [n for n in names if n not in columns]
        if unknown:
            raise ValueError(f"Unknown column(s) for {table}: {', '.join(unknown)}")

    def _row(self, table: str, mapping: Mapping[str, Any]) -> dict:
        row = dict(mapping)
        for name, decl in self._columns(table).items():
            if decl.startswith("BOOLEAN") and row.get(name) is not None:
                row[name] = bool(row[name])
        return row

    def select(self, table, *, filters=None, since=None, order_by="created_at", descending=False):
        columns = self._columns(table)
        filters = dict(filters or {})
        self._check_columns(table, filters)
        clauses = []
        params: dict[str, Any] = {}
        for i, (name, value) in enumerate(filters.items()):
            clauses.append(f"{name} = :f{i}")
            params[f"f{i}"] = value
        if since is not None:
            clauses.append("created_at >= :since")
            params["since"] = timestamp(since)

        query = f"SELECT {', '.join(columns)} FROM {table}"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        if order_by:
            self._check_columns(table, [order_by])
            direction = "DESC" if descending else "ASC"
            query += f" ORDER BY {order_by} {direction}"
            if order_by != "created_at":
                query += f", created_at {direction}"

        logger.debug("select %s filters=%s since=%s", table, filters, since)
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(text(query), params).mappings().all()
        except SQLAlchemyError as exc:
            logger.exception("Error selecting from %s", table)
            raise StoreError(f"Failed to read {table}.") from exc
        return [self._row(table, r) for r in rows]

    def insert(self, table, values):
        row = {"id": uuid.uuid4().hex, "created_at": timestamp(self.clock()), **values}
        self._check_columns(table, row)
        names = list(row)
        try:
            with self.engine.begin() as conn:
                conn.execute(
                    text(f"""
                        INSERT INTO {table} ({', '.join(names)})
                        VALUES ({', '.join(':' + n for n in names)})
                    """),
                    row,
                )
        except SQLAlchemyError as exc:
            logger.exception("Error inserting into %s", table)
            raise StoreError(f"Failed to add to {table}.") from exc
        return self._row(table, row)

    def update(self, table, row_id, values):
        values = dict(values)
        if not values:
            raise ValueError("Nothing to update")
        if "id" in values:
            raise ValueError("The id column cannot be updated")
        self._check_columns(table, values)
        assignments = ",\n                    ".join(f"{n} = :{n}" for n in values)
        try:
            with self.engine.begin() as conn:
                result = conn.execute(
                    text(f"""
                        UPDATE {table}
                        SET {assignments}
                        WHERE id = :_row_id
                    """),
                    {**values, "_row_id": row_id},
                )
                if not result.rowcount:
                    raise StoreError(f"No row {row_id} in {table}.")
                row = conn.execute(
                    text(f"SELECT {', '.join(self._columns(table))} FROM {table} WHERE id = :id"),
                    {"id": row_id},
                ).mappings().first()
        except SQLAlchemyError as exc:
            logger.exception("Error updating %s in %s", row_id, table)
            raise StoreError(f"Failed to update {table}.") from exc
        return self._row(table, row)

    def delete(self, table, row_ids):
        ids = list(row_ids)
        self._columns(table)
        if not ids:
            return 0
        stmt = text(f"DELETE FROM {table} WHERE id IN :ids").bindparams(bindparam("ids", expanding=True))
        try:
            with self.engine.begin() as conn:
                result = conn.execute(stmt, {"ids": ids})
        except SQLAlchemyError as exc:
            logger.exception("Error deleting from %s", table)
            raise StoreError(f"Failed to delete from {table}.") from exc
        return result.rowcount


# -----------------------------
# Hosted backend (PostgREST over HTTP)
# -----------------------------

def _literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class RestStore:
    """Row access through a hosted PostgREST endpoint (``/rest/v1/<table>``)."""

    def __init__(self, base_url: str, api_key: str, *, client: httpx.Client | None = None, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.client = client or httpx.Client(timeout=timeout)

    def _headers(self, representation: bool = False) -> dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if representation:
            headers["Prefer"] = "return=representation"
        return headers

    def close(self) -> None:
        self.client.close()

    def _send(self, method: str, table: str, *, params=None, json=None, representation=False) -> Any:
        """Issue one request and return its decoded JSON body."""
        url = f"{self.base_url}/rest/v1/{table}"
        try:
            response = self.client.request(
                method, url, params=params, json=json, headers=self._headers(representation)
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Error calling %s %s: %s", method, table, exc)
            raise StoreError(f"Request to {table} failed.") from exc
        try:
            return response.json()
        except ValueError as exc:
            logger.error("Unreadable response from %s %s: %s", method, table, exc)
            raise StoreError(f"Unreadable response from {table}.") from exc

    def select(self, table, *, filters=None, since=None, order_by="created_at", descending=False):
        params = [("select", "*")]
        for name, value in (filters or {}).items():
            params.append((name, f"eq.{_literal(value)}"))
        if since is not None:
            params.append(("created_at", f"gte.{timestamp(since)}"))
        if order_by:
            params.append(("order", f"{order_by}.{'desc' if descending else 'asc'}"))
        logger.debug("select %s params=%s", table, params)
        return self._send("GET", table, params=params)

    def insert(self, table, values):
        rows = self._send("POST", table, json=[dict(values)], representation=True)
        if not rows:
            raise StoreError(f"Insert into {table} returned no row.")
        return rows[0]

    def update(self, table, row_id, values):
        rows = self._send(
            "PATCH", table, params={"id": f"eq.{row_id}"}, json=dict(values), representation=True
        )
        if not rows:
            raise StoreError(f"No row {row_id} in {table}.")
        return rows[0]

    def delete(self, table, row_ids):
        ids = list(row_ids)
        if not ids:
            return 0
        rows = self._send(
            "DELETE", table, params={"id": f"in.({','.join(ids)})"}, representation=True
        )
        return len(rows)
