"""
Tests for SqliteLibraryStore and its repositories.

Validates the SQLite implementation of the storage ports, including
transaction commit/rollback, the storage-level loan constraints and
timestamp round-tripping.

Test Pattern: AAA (Arrange-Act-Assert)
"""

import sqlite3
from datetime import datetime, timedelta, UTC

import pytest

from library_backend.domain.entities import CatalogBook, Copy, CopyStatus, Session, User
from library_backend.domain.errors import CopyNotFound, NoActiveLoan, StorageError
from library_backend.domain.services import BorrowingService
from library_backend.infrastructure.db import SqliteLibraryStore
from library_backend.infrastructure.db.sqlite_schema import format_timestamp, parse_timestamp


T0 = datetime(2025, 3, 1, 10, 0, tzinfo=UTC)


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def store(tmp_path):
    """A store backed by a fresh database file for each test."""
    return SqliteLibraryStore(tmp_path / "library.db")


@pytest.fixture
def user_id(store):
    with store.write() as tx:
        user = tx.users.add(User(
            user_id=None,
            phone_number="0912345678",
            user_name="Alice",
            password_hash="hash",
            salt="salt",
        ))
    return user.user_id


@pytest.fixture
def copy_id(store):
    with store.write() as tx:
        tx.catalog.add(CatalogBook(isbn="9789865020059", title="Atomic Habits", author="James Clear"))
        copy = tx.inventory.add(Copy(copy_id=None, isbn="9789865020059"))
    return copy.copy_id


def count_rows(store, table):
    conn = sqlite3.connect(store.db_path)
    try:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
    finally:
        conn.close()


# ============================================================================
# INITIALIZATION TESTS
# ============================================================================

class TestStoreInitialization:

    def test_creates_parent_directory_and_file(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "library.db"

        store = SqliteLibraryStore(db_path)

        assert db_path.exists()
        assert store.is_ready()

    def test_reopening_existing_database_keeps_data(self, tmp_path, copy_id):
        # copy_id fixture used the "store" fixture's file
        reopened = SqliteLibraryStore(tmp_path / "library.db")

        with reopened.read() as tx:
            assert tx.inventory.get(copy_id) is not None

    def test_uses_wal_journal(self, store):
        conn = sqlite3.connect(store.db_path)
        try:
            mode = conn.execute("PRAGMA journal_mode").fetchone()[0]
        finally:
            conn.close()

        assert mode.lower() == "wal"


# ============================================================================
# TRANSACTION TESTS
# ============================================================================

class TestTransactions:

    def test_commit_on_success(self, store):
        with store.write() as tx:
            tx.catalog.add(CatalogBook(isbn="1", title="Peak", author="Anders Ericsson"))

        with store.read() as tx:
            assert tx.catalog.get("1").title == "Peak"

    def test_rollback_on_exception(self, store):
        """
        GIVEN a write block that inserts a book and then raises
        WHEN the block exits
        THEN the insert is not visible afterwards
        """
        with pytest.raises(RuntimeError):
            with store.write() as tx:
                tx.catalog.add(CatalogBook(isbn="1", title="Peak", author="Anders Ericsson"))
                raise RuntimeError("boom")

        assert count_rows(store, "books") == 0

    def test_sqlite_error_becomes_storage_error(self, store):
        with pytest.raises(StorageError, match="Database error"):
            with store.write() as tx:
                tx.catalog.add(CatalogBook(isbn="1", title="Peak", author="Anders Ericsson"))
                tx.inventory._conn.execute("SELECT * FROM missing_table")

        assert count_rows(store, "books") == 0

    def test_write_lock_timeout_becomes_storage_error(self, tmp_path):
        """
        GIVEN another connection holding the write lock
        WHEN a write transaction starts with a short busy timeout
        THEN it fails with StorageError instead of hanging
        """
        store = SqliteLibraryStore(tmp_path / "locked.db", timeout=0.1)
        blocker = sqlite3.connect(store.db_path, isolation_level=None)
        blocker.execute("BEGIN IMMEDIATE")
        try:
            with pytest.raises(StorageError):
                with store.write():
                    pass
        finally:
            blocker.execute("ROLLBACK")
            blocker.close()

    def test_readers_not_blocked_by_writer(self, store, copy_id):
        with store.write() as tx:
            tx.inventory.set_status(copy_id, CopyStatus.BORROWED)

            # A concurrent reader sees the last committed state.
            with store.read() as reader:
                assert reader.inventory.get(copy_id).status == CopyStatus.AVAILABLE

        with store.read() as reader:
            assert reader.inventory.get(copy_id).status == CopyStatus.BORROWED


# ============================================================================
# LEDGER CONSTRAINT TESTS
# ============================================================================

class TestLoanLedger:

    def test_second_open_loan_for_copy_rejected(self, store, user_id, copy_id):
        with store.write() as tx:
            tx.ledger.open_loan(user_id, copy_id, T0)

        with pytest.raises(ValueError, match="ledger constraints"):
            with store.write() as tx:
                tx.ledger.open_loan(user_id, copy_id, T0 + timedelta(minutes=1))

        assert count_rows(store, "loan_records") == 1

    def test_closed_loans_do_not_block_new_loan(self, store, user_id, copy_id):
        with store.write() as tx:
            record = tx.ledger.open_loan(user_id, copy_id, T0)
            tx.ledger.close_loan(record.close(T0 + timedelta(hours=1)))
            tx.ledger.open_loan(user_id, copy_id, T0 + timedelta(hours=2))

        assert count_rows(store, "loan_records") == 2

    def test_close_loan_twice_rejected(self, store, user_id, copy_id):
        with store.write() as tx:
            record = tx.ledger.open_loan(user_id, copy_id, T0)
            closed = record.close(T0 + timedelta(hours=1))
            tx.ledger.close_loan(closed)

        with pytest.raises(ValueError, match="is not open"):
            with store.write() as tx:
                tx.ledger.close_loan(closed)

    def test_loan_for_unknown_copy_rejected(self, store, user_id):
        with pytest.raises(ValueError):
            with store.write() as tx:
                tx.ledger.open_loan(user_id, 999, T0)

    def test_returned_before_borrowed_rejected_by_storage(self, store, user_id, copy_id):
        with store.write() as tx:
            record = tx.ledger.open_loan(user_id, copy_id, T0)

        with pytest.raises(StorageError):
            with store.write() as tx:
                tx.ledger._conn.execute(
                    "UPDATE loan_records SET returned_at = ? WHERE record_id = ?",
                    (format_timestamp(T0 - timedelta(days=1)), record.record_id),
                )

    def test_find_open_queries(self, store, user_id, copy_id):
        with store.write() as tx:
            record = tx.ledger.open_loan(user_id, copy_id, T0)

        with store.read() as tx:
            assert tx.ledger.find_open_by_copy(copy_id) == record
            assert tx.ledger.find_open(user_id, copy_id) == record
            assert tx.ledger.find_open(user_id + 1, copy_id) is None

    def test_history_order_and_pagination(self, store, user_id):
        """
        GIVEN four loans borrowed a minute apart
        WHEN the history is listed with and without paging
        THEN records come newest first and pages slice that order
        """
        with store.write() as tx:
            tx.catalog.add(CatalogBook(isbn="1", title="Flow", author="M. C."))
            copies = [tx.inventory.add(Copy(copy_id=None, isbn="1")).copy_id for _ in range(4)]
            for i, c in enumerate(copies):
                tx.ledger.open_loan(user_id, c, T0 + timedelta(minutes=i))

        with store.read() as tx:
            history = tx.ledger.list_by_user(user_id)
            page = tx.ledger.list_by_user(user_id, limit=2, offset=1)
            active = tx.ledger.list_open_by_user(user_id)

        assert [r.copy_id for r in history] == list(reversed(copies))
        assert [r.copy_id for r in page] == [copies[2], copies[1]]
        assert len(active) == 4


# ============================================================================
# REPOSITORY TESTS
# ============================================================================

class TestRepositories:

    def test_catalog_duplicate_isbn(self, store):
        with store.write() as tx:
            tx.catalog.add(CatalogBook(isbn="1", title="A", author="X"))

        with pytest.raises(ValueError):
            with store.write() as tx:
                tx.catalog.add(CatalogBook(isbn="1", title="B", author="Y"))

    def test_catalog_search_ignores_case(self, store):
        with store.write() as tx:
            tx.catalog.add(CatalogBook(isbn="1", title="Deep Work", author="Cal Newport"))

        with store.read() as tx:
            assert [b.isbn for b in tx.catalog.find_by_title("DEEP WORK")] == ["1"]
            assert [b.isbn for b in tx.catalog.find_by_author("cal newport")] == ["1"]
            assert tx.catalog.count() == 1

    def test_inventory_counts(self, store, copy_id):
        with store.write() as tx:
            tx.inventory.add(Copy(copy_id=None, isbn="9789865020059"))
            tx.inventory.set_status(copy_id, CopyStatus.BORROWED)

        with store.read() as tx:
            counts = tx.inventory.counts_by_isbn()
            borrowed = tx.inventory.list_by_status(CopyStatus.BORROWED)

        assert counts == {"9789865020059": (2, 1)}
        assert [c.copy_id for c in borrowed] == [copy_id]

    def test_set_status_unknown_copy(self, store):
        with pytest.raises(StorageError, match="vanished"):
            with store.write() as tx:
                tx.inventory.set_status(999, CopyStatus.BORROWED)

    def test_invalid_copy_isbn_rejected(self, store):
        with pytest.raises(ValueError):
            with store.write() as tx:
                tx.inventory.add(Copy(copy_id=None, isbn="no-such-isbn"))

    def test_duplicate_phone_rejected(self, store, user_id):
        with pytest.raises(ValueError):
            with store.write() as tx:
                tx.users.add(User(
                    user_id=None,
                    phone_number="0912345678",
                    user_name="Other",
                    password_hash="h",
                    salt="s",
                ))

    def test_sessions_round_trip_and_expiry(self, store, user_id):
        with store.write() as tx:
            tx.sessions.add(Session(token="old", user_id=user_id, issued_at=T0, expires_at=T0 + timedelta(hours=1)))
            tx.sessions.add(Session(token="new", user_id=user_id, issued_at=T0, expires_at=T0 + timedelta(hours=3)))

        with store.write() as tx:
            removed = tx.sessions.delete_expired(T0 + timedelta(hours=2))

        with store.read() as tx:
            assert tx.sessions.get("old") is None
            assert tx.sessions.get("new").expires_at == T0 + timedelta(hours=3)
        assert removed == 1


# ============================================================================
# SERVICE INTEGRATION TESTS
# ============================================================================

class TestBorrowingAgainstSqlite:

    def test_borrow_and_return_keep_status_coherent(self, store, user_id, copy_id):
        service = BorrowingService(store=store)

        service.borrow(user_id, copy_id)
        with store.read() as tx:
            assert tx.inventory.get(copy_id).status == CopyStatus.BORROWED
            assert tx.ledger.find_open_by_copy(copy_id) is not None

        service.return_copy(user_id, copy_id)
        with store.read() as tx:
            assert tx.inventory.get(copy_id).status == CopyStatus.AVAILABLE
            assert tx.ledger.find_open_by_copy(copy_id) is None

    def test_ids_beyond_storable_range_are_unknown(self, store, user_id):
        service = BorrowingService(store=store)

        assert service.is_available(2**63) is False
        with pytest.raises(CopyNotFound):
            service.borrow(user_id, 2**63)
        with pytest.raises(NoActiveLoan):
            service.return_copy(user_id, 2**63)

    def test_history_view_joins_catalog(self, store, user_id, copy_id):
        service = BorrowingService(store=store)
        service.borrow(user_id, copy_id)

        [view] = service.describe_loans(service.get_history(user_id))

        assert view.title == "Atomic Habits"
        assert view.is_open


class TestTimestamps:

    def test_format_is_fixed_width(self):
        a = format_timestamp(datetime(2025, 1, 1, tzinfo=UTC))
        b = format_timestamp(datetime(2025, 1, 1, 0, 0, 0, 123456, tzinfo=UTC))

        assert len(a) == len(b)
        assert a < b

    def test_round_trip(self):
        value = datetime(2025, 1, 1, 12, 30, 5, 42, tzinfo=UTC)

        assert parse_timestamp(format_timestamp(value)) == value
        assert parse_timestamp(None) is None

    def test_naive_treated_as_utc(self):
        assert format_timestamp(datetime(2025, 1, 1)).endswith("+00:00")
