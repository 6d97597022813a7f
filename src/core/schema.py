"""SQLite schema management (code-first approach)."""

import logging

import aiosqlite


logger = logging.getLogger(__name__)


# Central list of all collections in the schema
COLLECTIONS = [
    "expenses",
    "groceries",
    "chores",
    "user_preferences",
    "processed_messages",
]


TABLE_SCHEMAS: dict[str, str] = {
    # Expenses are immutable once written; amount is in currency units
    "expenses": """
        CREATE TABLE IF NOT EXISTS expenses (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            participant_id TEXT NOT NULL,
            participant_name TEXT NOT NULL,
            amount REAL NOT NULL CHECK (amount >= 0),
            description TEXT NOT NULL DEFAULT '',
            created_at TEXT NOT NULL
        )
    """,
    "groceries": """
        CREATE TABLE IF NOT EXISTS groceries (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            added_by_name TEXT NOT NULL,
            added_by_id TEXT,
            added_at TEXT NOT NULL
        )
    """,
    # assigned_by_id is NULL when the chore was assigned to someone other than the issuer;
    # assigned_to_id is NULL when the assignee could not be resolved to a member
    "chores": """
        CREATE TABLE IF NOT EXISTS chores (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            description TEXT NOT NULL,
            assigned_to_name TEXT NOT NULL,
            assigned_to_id TEXT,
            assigned_by_id TEXT,
            status TEXT NOT NULL DEFAULT 'pending' CHECK (status IN ('pending', 'completed')),
            assigned_at TEXT NOT NULL
        )
    """,
    "user_preferences": """
        CREATE TABLE IF NOT EXISTS user_preferences (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            participant_id TEXT NOT NULL UNIQUE,
            display_name TEXT NOT NULL,
            emoji TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """,
    "processed_messages": """
        CREATE TABLE IF NOT EXISTS processed_messages (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            message_id TEXT NOT NULL UNIQUE,
            from_phone TEXT NOT NULL,
            processed_at TEXT NOT NULL,
            success INTEGER NOT NULL DEFAULT 0,
            error_message TEXT
        )
    """,
}


# Columns added after a table was first released, as (column, type)
ADDED_COLUMNS: dict[str, list[tuple[str, str]]] = {
    "chores": [("assigned_to_id", "TEXT")],
}


INDEXES: list[str] = [
    "CREATE INDEX IF NOT EXISTS idx_expenses_participant ON expenses (participant_id)",
    "CREATE INDEX IF NOT EXISTS idx_groceries_name ON groceries (name)",
    "CREATE INDEX IF NOT EXISTS idx_chores_status ON chores (status, assigned_at)",
]


async def _add_missing_columns(conn: aiosqlite.Connection, table_name: str, columns: list[tuple[str, str]]) -> None:
    cursor = await conn.execute(f"PRAGMA table_info({table_name})")
    existing = {row[1] for row in await cursor.fetchall()}

    for column, column_type in columns:
        if column not in existing:
            await conn.execute(f"ALTER TABLE {table_name} ADD COLUMN {column} {column_type}")
            logger.info("Added missing column", extra={"table": table_name, "column": column})


async def init_db(conn: aiosqlite.Connection) -> None:
    """Create all tables and indexes. Safe to call on every startup."""
    for table_name in COLLECTIONS:
        await conn.execute(TABLE_SCHEMAS[table_name])
        logger.debug("Ensured table exists", extra={"table": table_name})

    for table_name, columns in ADDED_COLUMNS.items():
        await _add_missing_columns(conn, table_name, columns)

    for index_sql in INDEXES:
        await conn.execute(index_sql)

    await conn.commit()
    logger.info("Database schema initialized", extra={"tables": len(COLLECTIONS)})
