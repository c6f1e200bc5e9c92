"""SQLite database connection and schema management."""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path

SCHEMA = """
CREATE TABLE IF NOT EXISTS accounts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    description TEXT DEFAULT '',
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS holdings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    account_id INTEGER NOT NULL,
    asset_type INTEGER NOT NULL,
    currency TEXT NOT NULL,
    quantity TEXT NOT NULL DEFAULT '0',
    price TEXT DEFAULT NULL,
    description TEXT DEFAULT '',
    symbol TEXT DEFAULT '',
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (account_id) REFERENCES accounts(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS holding_regions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    holding_id INTEGER NOT NULL,
    region TEXT NOT NULL,
    weight TEXT NOT NULL,
    FOREIGN KEY (holding_id) REFERENCES holdings(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS portfolio_history (
    date TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    assets TEXT NOT NULL DEFAULT '[]'
);
"""


DB_FILENAME = "portfolio.db"
DB_PATH_ENV = "PD_DB_PATH"


class Database:
    """One SQLite connection with foreign keys on and rows addressable by column name."""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None
        self._depth = 0

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self.db_path)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
        return self._conn

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def initialize(self) -> "Database":
        self.conn.executescript(SCHEMA)
        self.conn.commit()
        return self

    @contextmanager
    def transaction(self):
        """Group writes into one commit. Nested blocks join the outermost one."""
        self._depth += 1
        try:
            yield self.conn
        except Exception:
            self._depth -= 1
            if self._depth == 0:
                self.conn.rollback()
            raise
        self._depth -= 1
        if self._depth == 0:
            self.conn.commit()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None


_db: Database | None = None


def find_project_root() -> Path:
    """Nearest directory above this package holding a pyproject.toml, else the cwd."""
    for parent in Path(__file__).resolve().parents:
        if (parent / "pyproject.toml").exists():
            return parent
    return Path.cwd()


def default_db_path() -> Path:
    override = os.environ.get(DB_PATH_ENV)
    return Path(override) if override else find_project_root() / DB_FILENAME


def get_db() -> Database:
    """Shared database, created and migrated on first use."""
    global _db
    if _db is None:
        _db = Database(default_db_path()).initialize()
    return _db


def set_db_path(path: str | Path) -> Database:
    global _db
    if _db is not None:
        _db.close()
    _db = Database(path).initialize()
    return _db
