"""
SQLite database integration, migrations and the record store.

This module provides functions for obtaining a database connection
(``get_connection``), applying migrations on application start
(``init_db``) and a small set of record-level helpers (``insert``,
``find_by_id``, ``find_by_predicate``, ``count_by_predicate``,
``update``, ``delete`` and ``paginate``) that the services build on.

Every helper opens its own connection and closes it before returning,
so request handlers running in FastAPI's thread pool never share a
connection.  Table and column names passed to the helpers come from
constants in the service modules; values are always bound as
parameters.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

from .config import settings
from .query import SQLITE_MAX_INTEGER, Predicate, fits_integer, where_clause

DEFAULT_ORDER = "id ASC"


def resolve_path(value: str) -> str:
    """Resolve a configured path relative to the project root."""
    if os.path.isabs(value):
        return value
    base_dir = Path(__file__).resolve().parent.parent.parent  # library_api/
    return str((base_dir / value).resolve())


def get_database_path() -> str:
    return resolve_path(settings.database_url)


def _casefold(value: Any) -> Any:
    return value.casefold() if isinstance(value, str) else value


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` objects keyed by column name.
    Foreign key enforcement is switched on for every connection since
    SQLite disables it by default; the contact → address cascade relies
    on it.  A Unicode aware ``casefold`` function is registered for
    case-insensitive search (see ``query.Predicate.contains``).
    """
    conn = sqlite3.connect(get_database_path())
    conn.row_factory = sqlite3.Row
    conn.create_function("casefold", 1, _casefold, deterministic=True)
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Yield a cursor, commit on success and always close the connection."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


MIGRATIONS: List[tuple] = [
    # Migration 1: initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS user_categories (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            description TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            email TEXT NOT NULL UNIQUE,
            username TEXT NOT NULL UNIQUE,
            password TEXT NOT NULL,
            user_category_id INTEGER,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(user_category_id) REFERENCES user_categories(id)
                ON UPDATE CASCADE ON DELETE SET NULL
        );

        CREATE TABLE IF NOT EXISTS contacts (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            first_name TEXT NOT NULL,
            last_name TEXT,
            email TEXT,
            phone TEXT,
            gender TEXT,
            profile_image TEXT,
            user_id INTEGER NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(user_id) REFERENCES users(id) ON UPDATE CASCADE ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS addresses (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            street TEXT,
            city TEXT,
            province TEXT,
            country TEXT NOT NULL,
            postal_code TEXT,
            contact_id INTEGER NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(contact_id) REFERENCES contacts(id) ON UPDATE CASCADE ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS authors (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            address TEXT,
            phone TEXT,
            email TEXT,
            website TEXT,
            bio TEXT,
            profile_image TEXT,
            social_media TEXT,
            nationality TEXT,
            birth_date DATE,
            categories TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS loans (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            member_id INTEGER NOT NULL,
            librarian_id INTEGER NOT NULL,
            loan_date TIMESTAMP NOT NULL,
            return_date TIMESTAMP,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(member_id) REFERENCES users(id) ON UPDATE CASCADE ON DELETE CASCADE,
            FOREIGN KEY(librarian_id) REFERENCES users(id) ON UPDATE CASCADE ON DELETE CASCADE
        );
        """,
    ),
    # Migration 2: token denylist and lookup indices
    (
        2,
        """
        -- Revoked tokens are keyed by their jti claim.  Rows can be purged
        -- once expires_at has passed since the token is dead anyway.
        CREATE TABLE IF NOT EXISTS revoked_tokens (
            jti TEXT PRIMARY KEY,
            expires_at INTEGER NOT NULL,
            revoked_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE INDEX IF NOT EXISTS idx_contacts_user_id ON contacts(user_id);
        CREATE INDEX IF NOT EXISTS idx_addresses_contact_id ON addresses(contact_id);
        CREATE INDEX IF NOT EXISTS idx_loans_member_id ON loans(member_id);
        CREATE INDEX IF NOT EXISTS idx_loans_librarian_id ON loans(librarian_id);
        CREATE INDEX IF NOT EXISTS idx_revoked_tokens_expires_at ON revoked_tokens(expires_at);
        """,
    ),
]


def init_db(seed: bool = False) -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any new migrations defined in
    ``MIGRATIONS``.  When ``seed`` is true the default user categories
    are inserted as well (see ``core.seed``).
    """
    db_dir = os.path.dirname(get_database_path())
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)
    with get_cursor() as cursor:
        cursor.execute("CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)")
        cursor.execute("SELECT MAX(version) AS version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
                current_version = version
    if seed:
        from .seed import seed_user_categories

        seed_user_categories()


# ---------------------------------------------------------------------------
# Record store
# ---------------------------------------------------------------------------

def _row_dict(row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
    return dict(row) if row is not None else None


def insert(table: str, values: Mapping[str, Any]) -> Dict[str, Any]:
    """Insert a row and return it as stored (including defaults)."""
    columns = list(values.keys())
    placeholders = ", ".join("?" for _ in columns)
    with get_cursor() as cursor:
        cursor.execute(
            f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})",
            tuple(values[c] for c in columns),
        )
        row = cursor.execute(f"SELECT * FROM {table} WHERE id = ?", (cursor.lastrowid,)).fetchone()
    return dict(row)


def find_by_id(table: str, record_id: int) -> Optional[Dict[str, Any]]:
    if not fits_integer(record_id):
        return None
    with get_cursor() as cursor:
        row = cursor.execute(f"SELECT * FROM {table} WHERE id = ?", (record_id,)).fetchone()
    return _row_dict(row)


def find_one(table: str, predicate: Predicate) -> Optional[Dict[str, Any]]:
    """Return the first row (by primary key) matching ``predicate``."""
    where, params = where_clause(predicate)
    with get_cursor() as cursor:
        row = cursor.execute(
            f"SELECT * FROM {table}{where} ORDER BY {DEFAULT_ORDER} LIMIT 1", params
        ).fetchone()
    return _row_dict(row)


def find_by_predicate(table: str, predicate: Optional[Predicate] = None) -> List[Dict[str, Any]]:
    where, params = where_clause(predicate)
    with get_cursor() as cursor:
        rows = cursor.execute(f"SELECT * FROM {table}{where} ORDER BY {DEFAULT_ORDER}", params).fetchall()
    return [dict(r) for r in rows]


def count_by_predicate(table: str, predicate: Optional[Predicate] = None) -> int:
    where, params = where_clause(predicate)
    with get_cursor() as cursor:
        row = cursor.execute(f"SELECT COUNT(*) AS count FROM {table}{where}", params).fetchone()
    return int(row["count"])


def find_by_ids(table: str, ids: Sequence[int]) -> Dict[int, Dict[str, Any]]:
    """Return rows keyed by id for the distinct ``ids`` given."""
    unique = sorted({i for i in ids if i is not None and fits_integer(i)})
    if not unique:
        return {}
    placeholders = ", ".join("?" for _ in unique)
    with get_cursor() as cursor:
        rows = cursor.execute(f"SELECT * FROM {table} WHERE id IN ({placeholders})", tuple(unique)).fetchall()
    return {row["id"]: dict(row) for row in rows}


def update(table: str, record_id: int, values: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """Apply ``values`` to one row and return the row after the update.

    Only the given columns are written; an empty mapping leaves the row
    untouched.  Returns ``None`` if the row
    does not exist.
    """
    if not fits_integer(record_id):
        return None
    with get_cursor() as cursor:
        if values:
            columns = list(values.keys())
            assignments = ", ".join(f"{c} = ?" for c in columns)
            cursor.execute(
                f"UPDATE {table} SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                tuple(values[c] for c in columns) + (record_id,),
            )
        row = cursor.execute(f"SELECT * FROM {table} WHERE id = ?", (record_id,)).fetchone()
    return _row_dict(row)


def delete(table: str, record_id: int) -> bool:
    """Delete one row; dependent rows go through the schema's FK cascades."""
    if not fits_integer(record_id):
        return False
    with get_cursor() as cursor:
        cursor.execute(f"DELETE FROM {table} WHERE id = ?", (record_id,))
        affected = cursor.rowcount
    return affected > 0


def paginate(table: str, predicate: Optional[Predicate], page: int, size: int) -> tuple:
    """Return ``(rows, total)`` for one page of ``predicate`` matches.

    ``total`` is the number of rows matching the predicate before the
    page window is applied.  A page beyond the last one, however large,
    yields no rows.
    """
    where, params = where_clause(predicate)
    offset = (page - 1) * size
    with get_cursor() as cursor:
        total = cursor.execute(f"SELECT COUNT(*) AS count FROM {table}{where}", params).fetchone()["count"]
        if offset > SQLITE_MAX_INTEGER:
            # No table can hold that many rows.
            rows = []
        else:
            rows = cursor.execute(
                f"SELECT * FROM {table}{where} ORDER BY {DEFAULT_ORDER} LIMIT ? OFFSET ?",
                params + (size, offset),
            ).fetchall()
    return [dict(r) for r in rows], int(total)
