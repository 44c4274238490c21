import logging
import sqlite3
from typing import Any, Dict, List, Optional

from book import COLUMNS, Book, build_new_book, cast_fields
from config import database_file
from database import get_db_connection, initialize_database, is_object_id, new_object_id
from errors import ConflictError, NotFoundError, StateError, StorageError, ValidationError
from validators import FieldValidator

logger = logging.getLogger(__name__)

_SELECT_BOOK = "SELECT id, title, author, isbn, available, borrowed_by FROM books"


class Library:
    """Manages the book collection and its persistence.

    Every call opens a fresh connection and re-reads storage; nothing is
    cached between calls.
    """

    def __init__(self, db_file: Optional[str] = None) -> None:
        self.db_file = db_file or database_file()
        initialize_database(self.db_file)

    # ------------------------- Core operations ------------------------- #
    def list_books(self) -> List[Book]:
        """List every book in insertion order (fresh on every call)."""
        conn = self._connect()
        try:
            rows = conn.execute(f"{_SELECT_BOOK} ORDER BY rowid").fetchall()
            return [Book.from_row(dict(row)) for row in rows]
        except sqlite3.Error as e:
            raise self._storage_error("list books", e) from e
        finally:
            conn.close()

    def find_book(self, book_id: str) -> Optional[Book]:
        self._check_id(book_id)
        conn = self._connect()
        try:
            row = conn.execute(f"{_SELECT_BOOK} WHERE id = ?", (book_id.lower(),)).fetchone()
            return Book.from_row(dict(row)) if row else None
        except sqlite3.Error as e:
            raise self._storage_error("find book", e) from e
        finally:
            conn.close()

    def find_book_by_isbn(self, isbn: str) -> Optional[Book]:
        conn = self._connect()
        try:
            row = conn.execute(f"{_SELECT_BOOK} WHERE isbn = ?", (isbn,)).fetchone()
            return Book.from_row(dict(row)) if row else None
        except sqlite3.Error as e:
            raise self._storage_error("find book", e) from e
        finally:
            conn.close()

    def add_book(self, payload: Dict[str, Any]) -> Book:
        """Create a book from arbitrary JSON fields. Prevents duplicates by ISBN."""
        fields = build_new_book(payload)
        if self.find_book_by_isbn(fields["isbn"]):
            raise ConflictError(f"Book with ISBN {fields['isbn']} already exists.")

        book = Book(
            id=new_object_id(),
            title=fields["title"],
            author=fields["author"],
            isbn=fields["isbn"],
            available=fields["available"],
            borrowed_by=fields["borrowedBy"],
        )
        conn = self._connect()
        try:
            conn.execute(
                "INSERT INTO books (id, title, author, isbn, available, borrowed_by) VALUES (?, ?, ?, ?, ?, ?)",
                (book.id, book.title, book.author, book.isbn, int(book.available), book.borrowed_by),
            )
            conn.commit()
        except sqlite3.IntegrityError as e:
            raise ConflictError(f"Book with ISBN {book.isbn} already exists.") from e
        except sqlite3.Error as e:
            raise self._storage_error("add book", e) from e
        finally:
            conn.close()
        logger.info(f"Book added: {book.id} ({book.isbn})")
        return book

    def update_book(self, book_id: str, payload: Dict[str, Any]) -> Optional[Book]:
        """Apply the known fields of ``payload`` to a book.

        Requiredness is not re-checked on update. Returns None when no book
        has the given (well-formed) id.
        """
        book = self.find_book(book_id)
        if book is None:
            return None
        fields = cast_fields(payload)
        if not fields:
            return book

        assignments = ", ".join(f"{COLUMNS[key]} = ?" for key in fields)
        values = [int(v) if key == "available" else v for key, v in fields.items()]
        conn = self._connect()
        try:
            conn.execute(f"UPDATE books SET {assignments} WHERE id = ?", (*values, book.id))
            conn.commit()
        except sqlite3.IntegrityError as e:
            if "isbn" in fields and "UNIQUE" in str(e):
                raise ConflictError(f"Book with ISBN {fields['isbn']} already exists.") from e
            raise ValidationError(f"Book validation failed: {e}") from e
        except sqlite3.Error as e:
            raise self._storage_error("update book", e) from e
        finally:
            conn.close()
        return self.find_book(book.id)

    def remove_book(self, book_id: str) -> bool:
        """Delete a book. Returns whether a record existed; callers may ignore it."""
        self._check_id(book_id)
        conn = self._connect()
        try:
            cursor = conn.execute("DELETE FROM books WHERE id = ?", (book_id.lower(),))
            conn.commit()
        except sqlite3.Error as e:
            raise self._storage_error("delete book", e) from e
        finally:
            conn.close()
        if cursor.rowcount > 0:
            logger.info(f"Book deleted: {book_id}")
            return True
        return False

    def borrow_book(self, book_id: str, borrower: Any = None) -> Book:
        """Mark an available book as borrowed.

        The availability check and the write are two separate statements,
        so concurrent borrows of the same book can both succeed.
        """
        book = self._get_existing(book_id)
        if not book.available:
            raise StateError("Book not available")
        book.available = False
        book.borrowed_by = FieldValidator.cast_text("borrowedBy", borrower)
        self._save(book)
        logger.info(f"Book borrowed: {book.id} by {book.borrowed_by}")
        return book

    def return_book(self, book_id: str) -> Book:
        """Mark a book as available again, whether or not it was borrowed."""
        book = self._get_existing(book_id)
        book.available = True
        book.borrowed_by = None
        self._save(book)
        logger.info(f"Book returned: {book.id}")
        return book

    def count_books(self) -> int:
        conn = self._connect()
        try:
            return conn.execute("SELECT COUNT(*) FROM books").fetchone()[0]
        except sqlite3.Error as e:
            raise self._storage_error("count books", e) from e
        finally:
            conn.close()

    # ------------------------- Persistence ------------------------- #
    def _connect(self) -> sqlite3.Connection:
        try:
            return get_db_connection(self.db_file)
        except sqlite3.Error as e:
            raise self._storage_error("connect", e) from e

    def _get_existing(self, book_id: str) -> Book:
        book = self.find_book(book_id)
        if book is None:
            raise NotFoundError("Book not found")
        return book

    def _save(self, book: Book) -> None:
        conn = self._connect()
        try:
            conn.execute(
                "UPDATE books SET title = ?, author = ?, isbn = ?, available = ?, borrowed_by = ? WHERE id = ?",
                (book.title, book.author, book.isbn, int(book.available), book.borrowed_by, book.id),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise self._storage_error("save book", e) from e
        finally:
            conn.close()

    # ------------------------- Utilities ------------------------- #
    @staticmethod
    def _check_id(book_id: str) -> None:
        if not is_object_id(book_id):
            raise ValidationError(
                f'Cast to ObjectId failed for value "{book_id}" (type string) at path "_id" for model "Book"'
            )

    @staticmethod
    def _storage_error(action: str, exc: Exception) -> StorageError:
        logger.error(f"Storage failure during {action}: {exc}")
        return StorageError(str(exc))

    def close(self) -> None:
        """Compatibility helper: connections are opened per operation, so nothing to close."""
        return None
