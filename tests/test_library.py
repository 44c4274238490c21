import pytest

from errors import ConflictError, NotFoundError, StateError, ValidationError
from library import Library

MISSING_ID = "0123456789abcdef01234567"


def _add(lib, **overrides):
    payload = {"title": "Ulysses", "author": "James Joyce", "isbn": "9780199535675"}
    payload.update(overrides)
    return lib.add_book(payload)


def test_add_list_and_find(lib):
    assert lib.list_books() == []

    book = _add(lib)

    assert len(book.id) == 24
    assert book.available is True
    assert book.borrowed_by is None
    assert lib.find_book(book.id).title == "Ulysses"
    assert [b.isbn for b in lib.list_books()] == ["9780199535675"]


def test_list_keeps_insertion_order(lib):
    _add(lib, title="Zeta", isbn="1")
    _add(lib, title="Alpha", isbn="2")
    assert [b.title for b in lib.list_books()] == ["Zeta", "Alpha"]


def test_add_duplicate_isbn(lib):
    _add(lib)

    with pytest.raises(ConflictError, match="Book with ISBN 9780199535675 already exists."):
        _add(lib, title="Another title")

    assert lib.count_books() == 1


def test_add_missing_required_fields(lib):
    with pytest.raises(ValidationError) as excinfo:
        lib.add_book({"title": "", "isbn": "123"})

    message = str(excinfo.value)
    assert message.startswith("Book validation failed:")
    assert "title: Path `title` is required." in message
    assert "author: Path `author` is required." in message
    assert "isbn: Path" not in message
    assert lib.count_books() == 0


def test_add_casts_and_ignores_unknown_fields(lib):
    book = lib.add_book({
        "title": "Numbers",
        "author": "Someone",
        "isbn": 9781234567897,
        "available": "false",
        "borrowedBy": "Ann",
        "pages": 300,
        "_id": "not-an-id",
    })
    assert book.isbn == "9781234567897"
    assert book.available is False
    assert book.borrowed_by == "Ann"
    assert book.id != "not-an-id"
    assert "pages" not in book.to_dict()


def test_add_rejects_uncastable_values(lib):
    with pytest.raises(ValidationError, match="Cast to string failed"):
        _add(lib, title={"nested": True})
    with pytest.raises(ValidationError, match="Cast to Boolean failed"):
        _add(lib, available="maybe")


def test_persistence(db_file):
    lib = Library(db_file=db_file)
    book = _add(lib, title="Sapiens", author="Yuval Noah Harari", isbn="9780099590088")

    # New instance should read persisted data from SQLite
    lib2 = Library(db_file=db_file)
    assert lib2.find_book(book.id).title == "Sapiens"


def test_update_book_partial(lib):
    book = _add(lib)

    updated = lib.update_book(book.id, {"title": "Only Title Changed"})
    assert updated.title == "Only Title Changed"
    assert updated.author == "James Joyce"

    updated = lib.update_book(book.id, {"author": "Only Author Changed", "unknown": 1})
    assert updated.title == "Only Title Changed"
    assert updated.author == "Only Author Changed"


def test_update_can_leave_availability_inconsistent(lib):
    book = _add(lib)

    updated = lib.update_book(book.id, {"available": False})

    assert updated.available is False
    assert updated.borrowed_by is None


def test_update_book_not_found_returns_none(lib):
    assert lib.update_book(MISSING_ID, {"title": "New Title"}) is None


def test_update_malformed_id(lib):
    with pytest.raises(ValidationError, match='Cast to ObjectId failed for value "abc"'):
        lib.update_book("abc", {"title": "New Title"})


def test_update_duplicate_isbn(lib):
    _add(lib, isbn="111")
    second = _add(lib, isbn="222")

    with pytest.raises(ConflictError):
        lib.update_book(second.id, {"isbn": "111"})

    assert lib.find_book(second.id).isbn == "222"


def test_remove(lib):
    book = _add(lib)
    assert lib.remove_book(book.id) is True
    assert lib.remove_book(book.id) is False  # Nothing left to remove
    assert lib.count_books() == 0


def test_remove_malformed_id(lib):
    with pytest.raises(ValidationError):
        lib.remove_book("nonexistent")


def test_borrow_and_return(lib):
    book = _add(lib)

    borrowed = lib.borrow_book(book.id, "Leopold Bloom")
    assert borrowed.available is False
    assert borrowed.borrowed_by == "Leopold Bloom"
    assert lib.find_book(book.id).borrowed_by == "Leopold Bloom"

    returned = lib.return_book(book.id)
    assert returned.available is True
    assert returned.borrowed_by is None
    assert lib.find_book(book.id).available is True


def test_borrow_unavailable_book_leaves_record_unchanged(lib):
    book = _add(lib, available=False, borrowedBy="John Doe")

    with pytest.raises(StateError, match="Book not available"):
        lib.borrow_book(book.id, "Someone Else")

    stored = lib.find_book(book.id)
    assert stored.available is False
    assert stored.borrowed_by == "John Doe"


def test_return_available_book_is_not_an_error(lib):
    book = _add(lib)

    returned = lib.return_book(book.id)

    assert returned.available is True
    assert returned.borrowed_by is None


def test_borrow_and_return_unknown_book(lib):
    with pytest.raises(NotFoundError, match="Book not found"):
        lib.borrow_book(MISSING_ID, "Someone")
    with pytest.raises(NotFoundError):
        lib.return_book(MISSING_ID)
