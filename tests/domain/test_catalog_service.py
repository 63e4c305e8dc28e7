"""
Tests for CatalogService: adding titles, stocking copies, listings and seeding.
"""

import pytest

from library_backend.domain.entities import CatalogBook, CopyStatus
from library_backend.domain.errors import BookAlreadyExists, BookNotFound, InvalidInput
from library_backend.domain.services import BorrowingService, CatalogService
from library_backend.seed_data import DEFAULT_BOOKS

from tests.domain.fakes import FakeLibraryStore


@pytest.fixture
def store():
    return FakeLibraryStore()


@pytest.fixture
def service(store):
    return CatalogService(store=store)


class TestAddBook:

    def test_add_book_strips_fields(self, service, store):
        book = service.add_book(isbn=" 9789865020059 ", title=" Atomic Habits ", author="James Clear")

        assert book.isbn == "9789865020059"
        assert book.title == "Atomic Habits"
        assert "9789865020059" in store.state.books

    def test_add_book_blank_title(self, service, store):
        with pytest.raises(InvalidInput, match="title cannot be empty"):
            service.add_book(isbn="123", title="   ", author="Author")

        assert store.write_calls == 0

    def test_add_book_missing_isbn(self, service):
        with pytest.raises(InvalidInput):
            service.add_book(isbn=None, title="Title", author="Author")

    def test_add_duplicate_isbn(self, service, store):
        service.add_book(isbn="123", title="First", author="A")

        with pytest.raises(BookAlreadyExists) as exc_info:
            service.add_book(isbn="123", title="Second", author="B")

        assert exc_info.value.isbn == "123"
        assert store.state.books["123"].title == "First"


class TestStockCopy:

    def test_stock_copy_starts_available(self, service, store):
        service.add_book(isbn="123", title="Title", author="Author")

        copy = service.stock_copy("123")

        assert copy.copy_id is not None
        assert copy.status == CopyStatus.AVAILABLE
        assert store.state.copies[copy.copy_id].isbn == "123"

    def test_stock_copy_unknown_isbn(self, service, store):
        with pytest.raises(BookNotFound):
            service.stock_copy("000")

        assert store.state.copies == {}


class TestLookups:

    def test_get_book(self, service):
        service.add_book(isbn="123", title="Title", author="Author")

        assert service.get_book("123").title == "Title"

    def test_get_book_unknown(self, service):
        with pytest.raises(BookNotFound):
            service.get_book("missing")

    def test_find_by_title_and_author_ignore_case(self, service):
        service.add_book(isbn="1", title="Deep Work", author="Cal Newport")
        service.add_book(isbn="2", title="Digital Minimalism", author="Cal Newport")

        assert [b.isbn for b in service.find_by_title("deep work")] == ["1"]
        assert [b.isbn for b in service.find_by_author(" CAL NEWPORT ")] == ["1", "2"]

    def test_list_books_with_inventory(self, store, service):
        """
        GIVEN a title with two copies, one of them on loan, and a title with none
        WHEN the catalog is listed
        THEN counts reflect total and available copies per title
        """
        service.add_book(isbn="1", title="Peak", author="Anders Ericsson")
        service.add_book(isbn="2", title="Flow", author="Mihaly Csikszentmihalyi")
        first = service.stock_copy("1")
        service.stock_copy("1")
        user_id = store.add_user()
        BorrowingService(store=store).borrow(user_id, first.copy_id)

        listing = {b.isbn: b for b in service.list_books_with_inventory()}

        assert (listing["1"].total_copies, listing["1"].available_copies) == (2, 1)
        assert (listing["2"].total_copies, listing["2"].available_copies) == (0, 0)


class TestSeedIfEmpty:

    def test_seed_empty_catalog(self, service, store):
        summary = service.seed_if_empty(DEFAULT_BOOKS, copies_per_book=2)

        assert summary.n_books == len(DEFAULT_BOOKS)
        assert summary.n_copies == 2 * len(DEFAULT_BOOKS)
        assert not summary.skipped
        assert len(store.state.copies) == 2 * len(DEFAULT_BOOKS)
        assert all(c.is_available() for c in store.state.copies.values())

    def test_seed_skips_populated_catalog(self, service, store):
        service.add_book(isbn="1", title="Existing", author="Someone")

        summary = service.seed_if_empty(DEFAULT_BOOKS)

        assert summary.skipped
        assert summary.n_books == 0
        assert list(store.state.books) == ["1"]

    def test_seed_is_atomic(self, service, store):
        """A duplicate inside the seed list rolls the whole seed back."""
        books = [
            CatalogBook(isbn="1", title="A", author="X"),
            CatalogBook(isbn="1", title="B", author="Y"),
        ]

        with pytest.raises(BookAlreadyExists) as exc_info:
            service.seed_if_empty(books)

        assert exc_info.value.isbn == "1"
        assert store.state.books == {}
        assert store.rollbacks == 1

    def test_seed_negative_copies(self, service):
        with pytest.raises(InvalidInput):
            service.seed_if_empty(DEFAULT_BOOKS, copies_per_book=-1)
