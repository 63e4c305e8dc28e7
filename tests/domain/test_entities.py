"""
Tests for domain entities.
"""

import pytest
from datetime import datetime, timedelta, UTC

from library_backend.domain.entities import (
    CatalogBook,
    Copy,
    CopyStatus,
    LoanRecord,
    Session,
)


T0 = datetime(2025, 3, 1, 10, 0, tzinfo=UTC)


class TestCatalogBook:
    """Tests for the CatalogBook entity."""

    def test_create_book_with_minimum_data(self):
        book = CatalogBook(isbn="9789865020059", title="Atomic Habits", author="James Clear")

        assert book.isbn == "9789865020059"
        assert book.description is None
        assert book.image_url is None

    def test_book_validation_empty_isbn(self):
        with pytest.raises(ValueError, match="isbn cannot be empty"):
            CatalogBook(isbn="  ", title="Title", author="Author")

    def test_book_validation_isbn_too_long(self):
        with pytest.raises(ValueError, match="cannot exceed 13"):
            CatalogBook(isbn="97898650200591", title="Title", author="Author")

    def test_book_validation_empty_title(self):
        with pytest.raises(ValueError, match="title cannot be empty"):
            CatalogBook(isbn="123", title="", author="Author")

    def test_book_validation_empty_author(self):
        with pytest.raises(ValueError, match="author cannot be empty"):
            CatalogBook(isbn="123", title="Title", author=" ")

    def test_books_with_same_isbn_are_equal(self):
        a = CatalogBook(isbn="123", title="First", author="A")
        b = CatalogBook(isbn="123", title="Second", author="B")

        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1


class TestCopy:
    """Tests for the Copy entity."""

    def test_new_copy_defaults_to_available(self):
        copy = Copy(copy_id=None, isbn="123")

        assert copy.status == CopyStatus.AVAILABLE
        assert copy.is_available()
        assert copy.stored_at.tzinfo is not None

    def test_mark_borrowed_returns_new_copy(self):
        copy = Copy(copy_id=7, isbn="123")

        borrowed = copy.mark_borrowed()

        assert borrowed.status == CopyStatus.BORROWED
        assert not borrowed.is_available()
        assert copy.status == CopyStatus.AVAILABLE
        assert borrowed.copy_id == 7

    def test_mark_available_round_trip(self):
        copy = Copy(copy_id=7, isbn="123", status=CopyStatus.BORROWED)

        assert copy.mark_available().is_available()

    def test_status_values_are_wire_strings(self):
        assert CopyStatus.AVAILABLE.value == "Available"
        assert CopyStatus.BORROWED.value == "Borrowed"
        assert CopyStatus("Borrowed") is CopyStatus.BORROWED


class TestLoanRecord:
    """Tests for the LoanRecord entity."""

    def test_new_record_is_open(self):
        record = LoanRecord(record_id=1, user_id=1, copy_id=1, borrowed_at=T0)

        assert record.is_open()
        assert record.returned_at is None

    def test_returned_before_borrowed_rejected(self):
        with pytest.raises(ValueError, match="cannot be earlier than"):
            LoanRecord(
                record_id=1,
                user_id=1,
                copy_id=1,
                borrowed_at=T0,
                returned_at=T0 - timedelta(seconds=1),
            )

    def test_returned_equal_to_borrowed_allowed(self):
        record = LoanRecord(record_id=1, user_id=1, copy_id=1, borrowed_at=T0, returned_at=T0)

        assert not record.is_open()

    def test_close_sets_returned_at(self):
        record = LoanRecord(record_id=1, user_id=1, copy_id=1, borrowed_at=T0)

        closed = record.close(T0 + timedelta(days=3))

        assert closed.returned_at == T0 + timedelta(days=3)
        assert not closed.is_open()
        assert record.is_open()

    def test_close_clamps_clock_going_backwards(self):
        """
        GIVEN an open loan
        WHEN it is closed with a timestamp earlier than borrowed_at
        THEN returned_at is clamped to borrowed_at
        """
        record = LoanRecord(record_id=1, user_id=1, copy_id=1, borrowed_at=T0)

        closed = record.close(T0 - timedelta(minutes=5))

        assert closed.returned_at == T0

    def test_close_twice_rejected(self):
        record = LoanRecord(record_id=1, user_id=1, copy_id=1, borrowed_at=T0).close(T0)

        with pytest.raises(ValueError, match="already closed"):
            record.close(T0 + timedelta(hours=1))


class TestSession:
    """Tests for the Session entity."""

    def test_session_expiry_boundary(self):
        session = Session(token="t", user_id=1, issued_at=T0, expires_at=T0 + timedelta(hours=1))

        assert not session.is_expired(T0 + timedelta(minutes=59))
        assert session.is_expired(T0 + timedelta(hours=1))
