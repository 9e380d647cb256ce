from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from catalog.book import Book
from catalog.clock import SystemClock
from catalog.loan import Loan
from catalog.reader import Reader
from catalog.storage import JsonStorage, PathLike, StorageError

logger = logging.getLogger(__name__)


class LibraryManager:
    """Holds the books, readers and loans of one catalog and enforces the loan rules.

    Every mutation returns ``True`` when it was applied and ``False`` when it
    was rejected (unknown key, duplicate key or a book that is out on loan).
    A rejected call never changes state.
    """

    def __init__(self, clock: Optional[Any] = None, storage: Optional[JsonStorage] = None) -> None:
        self.clock = clock or SystemClock()
        self.storage = storage or JsonStorage()
        self.books: List[Book] = []
        self.readers: List[Reader] = []
        self.loans: List[Loan] = []

    # ------------------------- Books ------------------------- #
    def add_book(self, book: Book) -> bool:
        """Add a book unless its ISBN is already in the catalog."""
        if self.find_book(book.isbn):
            logger.info("Rejected book %s: ISBN already exists", book.isbn)
            return False
        book.is_available = True
        self.books.append(book)
        logger.debug("Added book %s", book.isbn)
        return True

    def remove_book(self, isbn: str) -> bool:
        """Remove a book. Books that are out on loan cannot be removed."""
        book = self.find_book(isbn)
        if not book:
            return False
        if not book.is_available:
            logger.info("Rejected removal of %s: book is on loan", isbn)
            return False
        self.books.remove(book)
        logger.debug("Removed book %s", isbn)
        return True

    def find_book(self, isbn: str) -> Optional[Book]:
        for book in self.books:
            if book.isbn == isbn:
                return book
        return None

    def list_books(self) -> List[Book]:
        return list(self.books)

    # ------------------------- Readers ------------------------- #
    def next_reader_id(self) -> int:
        return max((reader.id for reader in self.readers), default=0) + 1

    def add_reader(self, reader: Reader) -> bool:
        if self.find_reader(reader.id):
            logger.info("Rejected reader %s: Id already exists", reader.id)
            return False
        self.readers.append(reader)
        logger.debug("Added reader %s", reader.id)
        return True

    def remove_reader(self, reader_id: int) -> bool:
        """Remove a reader together with their active loans.

        Returned loans stay in the history and keep pointing at the removed Id.
        """
        reader = self.find_reader(reader_id)
        if not reader:
            return False
        before = len(self.loans)
        self.loans = [loan for loan in self.loans if not (loan.reader_id == reader_id and loan.is_active)]
        self.readers.remove(reader)
        logger.debug("Removed reader %s and %d active loans", reader_id, before - len(self.loans))
        return True

    def find_reader(self, reader_id: int) -> Optional[Reader]:
        for reader in self.readers:
            if reader.id == reader_id:
                return reader
        return None

    def list_readers(self) -> List[Reader]:
        return list(self.readers)

    # ------------------------- Loans ------------------------- #
    def issue_loan(self, isbn: str, reader_id: int) -> bool:
        book = self.find_book(isbn)
        if not book or not book.is_available:
            logger.info("Rejected loan of %s: book missing or unavailable", isbn)
            return False
        if not self.find_reader(reader_id):
            logger.info("Rejected loan of %s: reader %s not found", isbn, reader_id)
            return False
        self.loans.append(Loan(book_isbn=isbn, reader_id=reader_id, loan_date=self.clock.now_iso()))
        book.mark_as_loaned()
        logger.debug("Issued %s to reader %s", isbn, reader_id)
        return True

    def return_book(self, isbn: str, reader_id: int) -> bool:
        loan = next(
            (loan for loan in self.loans if loan.book_isbn == isbn and loan.reader_id == reader_id and loan.is_active),
            None,
        )
        if loan is None:
            logger.info("Rejected return of %s by reader %s: no active loan", isbn, reader_id)
            return False
        loan.return_date = self.clock.now_iso()
        # The loan is closed even if the book record has gone missing
        book = self.find_book(isbn)
        if book:
            book.mark_as_available()
        logger.debug("Reader %s returned %s", reader_id, isbn)
        return True

    def list_loans(self) -> List[Loan]:
        return list(self.loans)

    # ------------------------- Queries ------------------------- #
    def search_books(self, term: str) -> List[Book]:
        """Case-insensitive substring search over title and author."""
        if not term:
            return list(self.books)
        q = term.lower()
        return [b for b in self.books if q in b.title.lower() or q in b.author.lower()]

    def available_books(self) -> List[Book]:
        return [b for b in self.books if b.is_available]

    def active_loans(self) -> List[Loan]:
        return [loan for loan in self.loans if loan.is_active]

    def get_statistics(self) -> Dict[str, Any]:
        """Get catalog statistics."""
        return {
            "total_books": len(self.books),
            "available_books": len(self.available_books()),
            "total_readers": len(self.readers),
            "active_loans": len(self.active_loans()),
            "total_loans": len(self.loans),
        }

    # ------------------------- Persistence ------------------------- #
    def save(self, books_file: PathLike, readers_file: PathLike, loans_file: PathLike) -> List[StorageError]:
        """Write the three collections to their files.

        Every file is attempted even if an earlier one fails. Returns the
        failures, one per file that could not be written; an empty list
        means everything was saved.
        """
        failures: List[StorageError] = []
        for records, destination in (
            (self.books, books_file),
            (self.readers, readers_file),
            (self.loans, loans_file),
        ):
            try:
                self.storage.write([item.to_dict() for item in records], destination)
            except StorageError as e:
                logger.error("Save failed: %s", e)
                failures.append(e)
        return failures

    def load(self, books_file: PathLike, readers_file: PathLike, loans_file: PathLike) -> bool:
        """Replace the in-memory collections with the contents of the three files.

        A missing file leaves its collection empty. If any file is unreadable
        or malformed, all three collections are left empty and ``False`` is
        returned.
        """
        self._clear()
        try:
            books = self._read(books_file, Book.from_dict)
            readers = self._read(readers_file, Reader.from_dict)
            loans = self._read(loans_file, Loan.from_dict)
        except StorageError as e:
            logger.warning("Could not load catalog, starting empty: %s", e)
            return False

        self.books, self.readers, self.loans = books, readers, loans
        logger.info("Loaded %d books, %d readers, %d loans", len(books), len(readers), len(loans))
        return True

    def _read(self, destination: PathLike, factory: Callable[[Any], Any]) -> List[Any]:
        try:
            return [factory(item) for item in self.storage.read(destination)]
        except StorageError as e:
            if e.destination is None:
                e.destination = str(destination)
            raise

    def _clear(self) -> None:
        self.books = []
        self.readers = []
        self.loans = []
