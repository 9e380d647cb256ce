from __future__ import annotations

from typing import Any, Optional

from catalog.storage import StorageError, text_field


class Loan:
    """A borrowing record linking a book (by ISBN) to a reader (by Id).

    ``return_date`` is ``None`` while the loan is active.
    """

    def __init__(self, book_isbn: str, reader_id: int, loan_date: str, return_date: Optional[str] = None) -> None:
        self.book_isbn = book_isbn
        self.reader_id = reader_id
        self.loan_date = loan_date
        self.return_date = return_date

    @property
    def is_active(self) -> bool:
        return self.return_date is None

    def __str__(self) -> str:  # pragma: no cover
        if self.is_active:
            return f"ISBN: {self.book_isbn} ReaderId: {self.reader_id} since {self.loan_date}"
        return f"ISBN: {self.book_isbn} ReaderId: {self.reader_id} {self.loan_date} -> {self.return_date}"

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"Loan(book_isbn={self.book_isbn!r}, reader_id={self.reader_id!r}, "
            f"loan_date={self.loan_date!r}, return_date={self.return_date!r})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Loan):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        # ReturnDate is always written, null while the loan is active
        return {
            "BookISBN": self.book_isbn,
            "ReaderId": self.reader_id,
            "LoanDate": self.loan_date,
            "ReturnDate": self.return_date,
        }

    @staticmethod
    def from_dict(data: Any) -> "Loan":
        if not isinstance(data, dict):
            raise StorageError(f"Expected a loan object, got {type(data).__name__}")
        reader_id = data.get("ReaderId", 0)
        if isinstance(reader_id, bool) or not isinstance(reader_id, int):
            raise StorageError(f"ReaderId must be an integer, got {reader_id!r}")
        return_date = text_field(data, "ReturnDate", default=None, allow_none=True)
        return Loan(
            book_isbn=text_field(data, "BookISBN"),
            reader_id=reader_id,
            loan_date=text_field(data, "LoanDate"),
            return_date=return_date,
        )
