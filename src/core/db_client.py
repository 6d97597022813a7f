"""SQLite record store with CRUD operations over the household collections."""

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from src.core import schema
from src.core.errors import DatabaseError, RecordNotFoundError


logger = logging.getLogger(__name__)

FilterValue = str | int | float | None


def _validate_collection_name(collection: str) -> None:
    """Validate that a collection name contains only alphanumeric characters and underscores."""
    if not re.match(r"^[a-zA-Z_][a-zA-Z0-9_]*$", collection):
        msg = f"Invalid collection name: {collection}. Only alphanumeric characters and underscores are allowed."
        raise ValueError(msg)


def sanitize_param(value: str | int | float | bool | None) -> str:
    """Escape a value for safe embedding in filter queries via json.dumps."""
    return json.dumps(str(value), ensure_ascii=False)[1:-1]


def _convert_record_ids(record: dict[str, Any]) -> dict[str, Any]:
    """Convert the integer primary key to a string for Pydantic compatibility."""
    converted = record.copy()
    if isinstance(converted.get("id"), int):
        converted["id"] = str(converted["id"])
    return converted


def _serialize_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict | list):
        return json.dumps(value)
    return value


def _get_sql_operator(op: str) -> str:
    """Map filter operator to SQL operator."""
    op_map = {
        "=": "=",
        "!=": "!=",
        ">": ">",
        "<": "<",
        ">=": ">=",
        "<=": "<=",
        "~": "LIKE",
    }
    sql_op = op_map.get(op)
    if not sql_op:
        msg = f"Unsupported operator: {op}"
        raise ValueError(msg)
    return sql_op


_COMPARISON_RE = re.compile(r"""^(\w+)\s*(!=|>=|<=|=|>|<|~)\s*"((?:[^"\\]|\\.)*)"$""")


def _parse_single_comparison(comparison: str) -> tuple[str, FilterValue]:
    """Parse a single comparison expression into a SQL condition and parameter."""
    match = _COMPARISON_RE.match(comparison.strip())
    if not match:
        msg = f"Invalid filter syntax: {comparison}"
        raise ValueError(msg)

    field, op, raw_value = match.groups()
    value = json.loads(f'"{raw_value}"')

    sql_op = _get_sql_operator(op)
    if sql_op == "LIKE":
        escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        return f"{field} LIKE ? ESCAPE '\\'", f"%{escaped}%"

    return f"{field} {sql_op} ?", value


def _split_and_conditions(filter_query: str) -> list[str]:
    """Split filter query by && while leaving quoted values untouched."""
    parts = []
    current = ""
    in_quotes = False
    escaped = False

    for char in filter_query:
        current += char
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == '"':
            in_quotes = not in_quotes
        elif not in_quotes and current.endswith("&&"):
            parts.append(current[:-2].strip())
            current = ""

    if current.strip():
        parts.append(current.strip())

    return parts


def parse_filter(filter_query: str) -> tuple[str, list[FilterValue]]:
    """Parse filter syntax into a SQL WHERE clause and parameter list.

    Supports ``field = "value"``, ``!=``, ``<``, ``>``, ``~`` (case-insensitive contains)
    joined with ``&&``. Values must be double-quoted and escaped with ``sanitize_param``.
    """
    if not filter_query.strip():
        return "", []

    conditions = []
    params: list[FilterValue] = []
    for part in _split_and_conditions(filter_query):
        cond, value = _parse_single_comparison(part)
        conditions.append(cond)
        params.append(value)

    return " AND ".join(conditions), params


def parse_sort(sort: str) -> str:
    """Translate ``field``, ``+field`` or ``-field`` into an ORDER BY clause body."""
    if not sort:
        return "id ASC"

    match = re.match(r"^([+-]?)([A-Za-z_][A-Za-z0-9_]*)$", sort.strip())
    if not match:
        logger.warning("Invalid sort parameter, using default", extra={"sort": sort})
        return "id ASC"

    direction = "DESC" if match.group(1) == "-" else "ASC"
    # id breaks ties so records written in the same instant keep insertion order
    return f"{match.group(2)} {direction}, id {direction}"


class RecordStore:
    """Async CRUD access to the household collections backed by a single SQLite connection.

    Construct once at startup with ``await RecordStore.open(path)`` and pass the
    instance to every service call.
    """

    def __init__(self, conn: aiosqlite.Connection, *, db_path: Path) -> None:
        self._conn = conn
        self.db_path = db_path

    @classmethod
    async def open(cls, db_path: str | Path) -> "RecordStore":
        """Open (creating if needed) the database file and ensure the schema exists."""
        path = Path(db_path).resolve()
        path.parent.mkdir(parents=True, exist_ok=True)

        conn = await aiosqlite.connect(str(path))
        await conn.execute("PRAGMA journal_mode = WAL")
        store = cls(conn, db_path=path)
        await store.init_schema()

        logger.info("Opened SQLite record store", extra={"db_path": str(path)})
        return store

    async def close(self) -> None:
        """Close the underlying connection."""
        try:
            await self._conn.close()
            logger.info("Closed SQLite record store", extra={"db_path": str(self.db_path)})
        except Exception as e:
            logger.warning("Error closing SQLite connection", extra={"error": str(e)})

    async def init_schema(self) -> None:
        """Create tables and indexes if they do not exist yet."""
        await schema.init_db(self._conn)

    async def create_record(self, *, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a new record and return it with its assigned id."""
        try:
            _validate_collection_name(collection)

            columns = list(data.keys())
            columns_str = ", ".join(columns)
            placeholders_str = ", ".join("?" for _ in columns)
            values = [_serialize_value(data[key]) for key in columns]

            query = f"INSERT INTO {collection} ({columns_str}) VALUES ({placeholders_str})"  # noqa: S608 - collection is validated
            cursor = await self._conn.execute(query, values)
            await self._conn.commit()

            record_id = cursor.lastrowid
            result = await self.get_record(collection=collection, record_id=str(record_id))

            logger.info("Created record", extra={"collection": collection, "record_id": record_id})
            return result
        except Exception as e:
            if isinstance(e, aiosqlite.OperationalError) and "no such table" in str(e):
                logger.error("Table not found", extra={"collection": collection})
                msg = f"Table '{collection}' does not exist. Call init_schema() first."
                raise DatabaseError(msg) from e
            logger.error("create_record_failed", extra={"collection": collection, "error": str(e)})
            msg = f"Failed to create record in {collection}: {e}"
            raise DatabaseError(msg) from e

    async def get_record(self, *, collection: str, record_id: str) -> dict[str, Any]:
        """Fetch a single record by ID, raising RecordNotFoundError if not found."""
        try:
            _validate_collection_name(collection)

            query = f"SELECT * FROM {collection} WHERE id = ?"  # noqa: S608 - collection is validated
            cursor = await self._conn.execute(query, (int(record_id),))
            row = await cursor.fetchone()

            if row is None:
                msg = f"Record not found in {collection}: {record_id}"
                raise RecordNotFoundError(msg)

            columns = [description[0] for description in cursor.description]
            return _convert_record_ids(dict(zip(columns, row, strict=True)))
        except RecordNotFoundError:
            raise
        except Exception as e:
            logger.error("get_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
            msg = f"Failed to get record from {collection}: {e}"
            raise DatabaseError(msg) from e

    async def update_record(self, *, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Update a record by ID and return the updated record."""
        if not data:
            msg = "Empty update payload"
            raise ValueError(msg)

        try:
            _validate_collection_name(collection)

            set_clause = ", ".join(f"{key} = ?" for key in data)
            values = [_serialize_value(val) for val in data.values()]
            values.append(int(record_id))

            query = f"UPDATE {collection} SET {set_clause} WHERE id = ?"  # noqa: S608 - collection is validated
            cursor = await self._conn.execute(query, values)
            await self._conn.commit()

            if cursor.rowcount == 0:
                msg = f"Record not found in {collection}: {record_id}"
                raise RecordNotFoundError(msg)

            logger.info("Updated record", extra={"collection": collection, "record_id": record_id})
            return await self.get_record(collection=collection, record_id=record_id)
        except RecordNotFoundError:
            raise
        except Exception as e:
            logger.error(
                "update_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)}
            )
            msg = f"Failed to update record in {collection}: {e}"
            raise DatabaseError(msg) from e

    async def delete_record(self, *, collection: str, record_id: str) -> None:
        """Delete a record by ID, raising RecordNotFoundError if not found."""
        try:
            _validate_collection_name(collection)

            query = f"DELETE FROM {collection} WHERE id = ?"  # noqa: S608 - collection is validated
            cursor = await self._conn.execute(query, (int(record_id),))
            await self._conn.commit()

            if cursor.rowcount == 0:
                msg = f"Record not found in {collection}: {record_id}"
                raise RecordNotFoundError(msg)

            logger.info("Deleted record", extra={"collection": collection, "record_id": record_id})
        except RecordNotFoundError:
            raise
        except Exception as e:
            logger.error(
                "delete_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)}
            )
            msg = f"Failed to delete record from {collection}: {e}"
            raise DatabaseError(msg) from e

    async def list_records(
        self,
        *,
        collection: str,
        page: int = 1,
        per_page: int | None = None,
        filter_query: str = "",
        sort: str = "",
    ) -> list[dict[str, Any]]:
        """List records with optional filtering, sorting, and pagination.

        Without ``per_page`` every matching record is returned.
        """
        try:
            _validate_collection_name(collection)

            where_clause, params = parse_filter(filter_query)
            if where_clause:
                where_clause = f"WHERE {where_clause}"

            query = f"SELECT * FROM {collection} {where_clause} ORDER BY {parse_sort(sort)}"  # noqa: S608 - collection is validated
            if per_page is not None:
                query += " LIMIT ? OFFSET ?"
                params.extend([per_page, (page - 1) * per_page])

            cursor = await self._conn.execute(query, params)
            rows = await cursor.fetchall()

            columns = [description[0] for description in cursor.description]
            records = [_convert_record_ids(dict(zip(columns, row, strict=True))) for row in rows]

            logger.debug("Listed records", extra={"collection": collection, "count": len(records)})
            return records
        except Exception as e:
            logger.error("list_records_failed", extra={"collection": collection, "error": str(e)})
            msg = f"Failed to list records from {collection}: {e}"
            raise DatabaseError(msg) from e

    async def get_first_record(self, *, collection: str, filter_query: str, sort: str = "") -> dict[str, Any] | None:
        """Return the first record matching the filter, or None."""
        records = await self.list_records(collection=collection, filter_query=filter_query, sort=sort, per_page=1)
        return records[0] if records else None
