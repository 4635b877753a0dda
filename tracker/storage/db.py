# tracker/storage/db.py

import sqlite3
from pathlib import Path

from tracker.utils.log import get_logger

logger = get_logger(__name__)

SCHEMA_PATH = Path(__file__).with_name("schema.sql")

# profiles own their checklist rows (ON DELETE CASCADE); the server opens
# one connection per request from a worker thread
PRAGMAS = (
    "PRAGMA foreign_keys = ON;",
    "PRAGMA busy_timeout = 5000;",
)


def get_connection(db_path: str) -> sqlite3.Connection:
    """
    Open the tracker DB with rows as sqlite3.Row and the pragmas above applied.
    """
    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    for pragma in PRAGMAS:
        conn.execute(pragma)
    return conn


def init_db(db_path: str, schema_path: Path = SCHEMA_PATH) -> sqlite3.Connection:
    """
    Apply the (idempotent) schema and return a live connection.

    Parameters
    ----------
    db_path
        SQLite file, or ":memory:".
    schema_path
        DDL script; every statement must be `IF NOT EXISTS`.
    """
    conn = get_connection(db_path)
    logger.debug("Applying DB schema %s to %s", schema_path, db_path)
    conn.executescript(schema_path.read_text(encoding="utf-8"))
    conn.commit()
    return conn
