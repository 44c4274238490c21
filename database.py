import logging
import re
import secrets
import sqlite3
import time
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

DATABASE_NAME = "libraryDB"

_OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")

SAMPLE_BOOKS: List[Dict[str, Any]] = [
    {"title": "The Lean Startup", "author": "Eric Ries", "isbn": "978-0307887894", "available": True},
    {"title": "Zero to One", "author": "Peter Thiel", "isbn": "978-0804139298", "available": False, "borrowedBy": "John Doe"},
    {"title": "The Innovators Dilemma", "author": "Clayton Christensen", "isbn": "978-1633691780", "available": True},
    {"title": "Thinking Fast and Slow", "author": "Daniel Kahneman", "isbn": "978-0374533557", "available": True},
    {"title": "The Black Swan", "author": "Nassim Taleb", "isbn": "978-0812973815", "available": False, "borrowedBy": "Jane Smith"},
    {"title": "Sapiens", "author": "Yuval Noah Harari", "isbn": "978-0062316097", "available": True},
]


def get_db_connection(db_file: str) -> sqlite3.Connection:
    """Establishes a connection to the SQLite database."""
    conn = sqlite3.connect(db_file)
    conn.row_factory = sqlite3.Row
    return conn


def new_object_id() -> str:
    """Return a 24-hex-character document id: 4 bytes of seconds, 8 random bytes."""
    return f"{int(time.time()) & 0xFFFFFFFF:08x}{secrets.token_hex(8)}"


def is_object_id(value: str) -> bool:
    return isinstance(value, str) and bool(_OBJECT_ID_RE.match(value))


def create_tables(db_file: str) -> None:
    """Creates the users and books tables if they don't exist."""
    conn = get_db_connection(db_file)
    try:
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                email TEXT NOT NULL UNIQUE,
                password TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS books (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                author TEXT NOT NULL,
                isbn TEXT NOT NULL UNIQUE,
                available INTEGER NOT NULL DEFAULT 1,
                borrowed_by TEXT DEFAULT NULL
            )
        """)
        conn.commit()
    finally:
        conn.close()


def seed_sample_books(db_file: str) -> int:
    """Insert the sample books when the books table is empty.

    All six records go in with a single ``executemany`` inside one
    transaction. Returns the number of inserted books, 0 if the table
    already held data.
    """
    conn = get_db_connection(db_file)
    try:
        cursor = conn.cursor()
        cursor.execute("SELECT COUNT(*) FROM books")
        if cursor.fetchone()[0] > 0:
            return 0  # Catalog already has data, nothing to seed

        rows = [
            (new_object_id(), item["title"], item["author"], item["isbn"],
             int(item["available"]), item.get("borrowedBy"))
            for item in SAMPLE_BOOKS
        ]
        cursor.executemany(
            "INSERT INTO books (id, title, author, isbn, available, borrowed_by) VALUES (?, ?, ?, ?, ?, ?)",
            rows,
        )
        conn.commit()
        logger.info("Sample data seeded")
        return len(rows)
    finally:
        conn.close()


def initialize_database(db_file: str, seed: bool = False) -> int:
    """Initializes the database, creating tables and seeding sample books if asked.

    Returns the number of seeded books.
    """
    create_tables(db_file)
    logger.debug(f"Database initialized: {db_file}")
    if seed:
        return seed_sample_books(db_file)
    return 0
