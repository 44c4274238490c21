"""Account signup and login.

Passwords are stored as salted PBKDF2-SHA256 hashes. Login still requires
the exact email and the exact password given at signup; no token or
session is issued, so every later request is unauthenticated.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import os
import sqlite3
from typing import Any, Optional

from config import database_file
from database import get_db_connection, initialize_database, new_object_id
from errors import AuthError, ConflictError, StorageError
from user import User
from validators import FieldValidator

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 260_000
_HASH_SCHEME = "pbkdf2_sha256"


def _hash_password(password: str, salt: bytes | None = None, iterations: int = PBKDF2_ITERATIONS) -> str:
    salt = salt or os.urandom(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{_HASH_SCHEME}${iterations}${salt.hex()}${digest.hex()}"


def _verify_password(password: str, stored: str) -> bool:
    try:
        scheme, iterations, salt_hex, _ = stored.split("$")
    except ValueError:
        return False
    if scheme != _HASH_SCHEME:
        return False
    candidate = _hash_password(password, bytes.fromhex(salt_hex), int(iterations))
    return hmac.compare_digest(candidate, stored)


class AccountService:
    """Creates users and checks credentials against the users table."""

    def __init__(self, db_file: Optional[str] = None) -> None:
        self.db_file = db_file or database_file()
        initialize_database(self.db_file)

    def signup(self, name: Any, email: Any, password: Any) -> User:
        """Register a new user. Emails must be unique (exact match)."""
        fields = {
            "name": FieldValidator.strict_text("name", name),
            "email": FieldValidator.strict_text("email", email),
            "password": FieldValidator.strict_text("password", password),
        }
        FieldValidator.require("User", fields, ("name", "email", "password"))
        if self.find_by_email(fields["email"]):
            raise ConflictError("Email already exists")

        user = User(
            id=new_object_id(),
            name=fields["name"],
            email=fields["email"],
            password=_hash_password(fields["password"]),
        )
        conn = get_db_connection(self.db_file)
        try:
            conn.execute(
                "INSERT INTO users (id, name, email, password) VALUES (?, ?, ?, ?)",
                (user.id, user.name, user.email, user.password),
            )
            conn.commit()
            row = conn.execute("SELECT created_at FROM users WHERE id = ?", (user.id,)).fetchone()
            if row:
                user.created_at = row[0]
        except sqlite3.IntegrityError as e:
            raise ConflictError("Email already exists") from e
        except sqlite3.Error as e:
            logger.error(f"Storage failure during signup: {e}")
            raise StorageError(str(e)) from e
        finally:
            conn.close()
        logger.info(f"User created: {user.email}")
        return user

    def login(self, email: Any, password: Any) -> User:
        """Return the user whose email and password both match, else raise AuthError."""
        email = FieldValidator.strict_text("email", email)
        password = FieldValidator.strict_text("password", password)
        if not email or not password:
            raise AuthError("Invalid credentials")
        user = self.find_by_email(email)
        if user is None or not _verify_password(password, user.password):
            logger.info(f"Login failed: {email}")
            raise AuthError("Invalid credentials")
        logger.info(f"Login successful: {email}")
        return user

    def find_by_email(self, email: str) -> Optional[User]:
        conn = get_db_connection(self.db_file)
        try:
            row = conn.execute(
                "SELECT id, name, email, password, created_at FROM users WHERE email = ?", (email,)
            ).fetchone()
            return User.from_row(dict(row)) if row else None
        except sqlite3.Error as e:
            logger.error(f"Storage failure during user lookup: {e}")
            raise StorageError(str(e)) from e
        finally:
            conn.close()
