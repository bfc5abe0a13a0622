"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), running an atomic unit of work
(``unit_of_work``) and applying migrations on application start
(``init_db``).  It uses SQLite as a lightweight embedded database; to
switch to another DBMS you would replace connection logic and adapt
SQL syntax accordingly.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .config import settings


logger = logging.getLogger(__name__)

# Seconds a connection waits for another writer to release the lock.
BUSY_TIMEOUT = 10.0


def _resolve(path: str) -> Path:
    """Resolve ``path`` relative to the package directory unless absolute."""
    if os.path.isabs(path):
        return Path(path)
    base_dir = Path(__file__).resolve().parent.parent.parent  # recycle_points_api/
    return (base_dir / path).resolve()


def get_database_path() -> str:
    """Compute the path to the SQLite database file."""
    return str(_resolve(settings.database_url))


def get_uploads_path() -> Path:
    """Directory where uploaded point images are stored."""
    return _resolve(settings.uploads_dir) / "images"


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be accessed by
    name.  Foreign key enforcement is switched on for every connection
    because SQLite keeps it disabled by default.
    """
    db_path = get_database_path()
    conn = sqlite3.connect(db_path, timeout=BUSY_TIMEOUT)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


@contextmanager
def unit_of_work() -> Iterator[sqlite3.Connection]:
    """Run a block of writes as one transaction.

    ``BEGIN IMMEDIATE`` takes the database write lock up front, so two
    units of work never interleave their writes.  The transaction is
    committed when the block exits normally and rolled back when it
    raises; in both cases the connection is closed.
    """
    conn = get_connection()
    try:
        conn.execute("BEGIN IMMEDIATE")
        yield conn
        conn.commit()
    except BaseException:
        conn.rollback()
        logger.debug("Unit of work rolled back")
        raise
    finally:
        conn.close()


ITEM_SEED = [
    (1, "Lâmpadas", "lampadas.svg"),
    (2, "Pilhas e Baterias", "baterias.svg"),
    (3, "Papéis e Papelão", "papeis-papelao.svg"),
    (4, "Resíduos Eletrônicos", "eletronicos.svg"),
    (5, "Resíduos Orgânicos", "organicos.svg"),
    (6, "Óleo de Cozinha", "oleo.svg"),
]


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any new migrations defined in
    the list below.  If you add a new migration, append it with an
    incremented version number.  The item catalog is seeded afterwards.
    """
    migrations: list[tuple[int, str]] = [
        # Migration 1: Initial schema
        (
            1,
            """
            CREATE TABLE IF NOT EXISTS items (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                image TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS points (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                image TEXT,
                name TEXT NOT NULL,
                email TEXT NOT NULL UNIQUE,
                password TEXT NOT NULL,
                whatsapp TEXT NOT NULL,
                latitude REAL NOT NULL,
                longitude REAL NOT NULL,
                city TEXT NOT NULL,
                uf TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS point_items (
                point_id INTEGER NOT NULL,
                item_id INTEGER NOT NULL,
                PRIMARY KEY (point_id, item_id),
                FOREIGN KEY(point_id) REFERENCES points(id),
                FOREIGN KEY(item_id) REFERENCES items(id)
            );
            """,
        ),
        # Migration 2: lookups by location and by item
        (
            2,
            """
            CREATE INDEX IF NOT EXISTS idx_points_city_uf ON points(city, uf);
            CREATE INDEX IF NOT EXISTS idx_point_items_item_id ON point_items(item_id);
            """,
        ),
    ]

    _resolve(settings.database_url).parent.mkdir(parents=True, exist_ok=True)
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in migrations:
            if version > current_version:
                logger.info("Applying migration %s", version)
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version

        cursor.executemany(
            "INSERT OR IGNORE INTO items (id, title, image) VALUES (?, ?, ?)",
            ITEM_SEED,
        )
    get_uploads_path().mkdir(parents=True, exist_ok=True)
