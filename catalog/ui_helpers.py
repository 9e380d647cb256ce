import os
import json
from typing import List, Any, Dict
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"

_console = Console()

def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode

def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()

def _status(book: Any) -> str:
    return "Available" if book.is_available else "Loaned"

def print_books(books: List[Any], empty_message: str = "No books in library.") -> None:
    """Print books in the current output mode.
    - plain: 'Title - Author - ISBN - Status' lines
    - json: JSON array of the persisted book objects
    - rich: Rich table
    """
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
        return

    if not books:
        print(empty_message)
        return

    if mode == "rich":
        table = Table(title="📚 Books", show_lines=True, header_style="bold cyan")
        table.add_column("ISBN", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("Status", style="green")
        for b in books:
            table.add_row(escape(b.isbn), escape(b.title), escape(b.author), _status(b))
        _console.print(table)
    else:
        for b in books:
            print(f"{b.title} - {b.author} - {b.isbn} - {_status(b)}")

def print_readers(readers: List[Any]) -> None:
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps([r.to_dict() for r in readers], ensure_ascii=False))
        return

    if not readers:
        print("No readers registered.")
        return

    if mode == "rich":
        table = Table(title="👤 Readers", show_lines=True, header_style="bold cyan")
        table.add_column("Id", style="magenta", no_wrap=True)
        table.add_column("Name", style="white")
        table.add_column("Email", style="white")
        for r in readers:
            table.add_row(str(r.id), escape(r.name), escape(r.email))
        _console.print(table)
    else:
        for r in readers:
            print(f"{r.id} - {r.name} - {r.email}")

def print_loans(loans: List[Any], empty_message: str = "No active loans.") -> None:
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps([loan.to_dict() for loan in loans], ensure_ascii=False))
        return

    if not loans:
        print(empty_message)
        return

    if mode == "rich":
        table = Table(title="📖 Active Loans", show_lines=True, header_style="bold cyan")
        table.add_column("ISBN", style="magenta", no_wrap=True)
        table.add_column("Reader Id", style="white")
        table.add_column("Since", style="white")
        for loan in loans:
            table.add_row(escape(loan.book_isbn), str(loan.reader_id), escape(loan.loan_date))
        _console.print(table)
    else:
        for loan in loans:
            print(f"ISBN: {loan.book_isbn} ReaderId: {loan.reader_id} since {loan.loan_date}")

def print_report(available: List[Any], active: List[Any]) -> None:
    """Print the available-books and active-loans report."""
    if get_output_mode() == "json":
        print(json.dumps({
            "available_books": [b.to_dict() for b in available],
            "active_loans": [loan.to_dict() for loan in active],
        }, ensure_ascii=False))
        return

    print("Available books:")
    print_books(available, empty_message="No available books.")
    print("Active loans:")
    print_loans(active, empty_message="No active loans.")

def print_stats_result(stats: Dict[str, Any]) -> None:
    """Print statistics in the current output mode."""
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps(stats, ensure_ascii=False))
    elif mode == "rich":
        content = (
            f"[bold]Total Books:[/] {stats.get('total_books', 0)}\n"
            f"[bold]Available Books:[/] {stats.get('available_books', 0)}\n"
            f"[bold]Readers:[/] {stats.get('total_readers', 0)}\n"
            f"[bold]Active Loans:[/] {stats.get('active_loans', 0)}\n"
            f"[bold]Total Loans:[/] {stats.get('total_loans', 0)}"
        )
        _console.print(Panel.fit(content, title="📊 Stats", border_style="blue"))
    else:
        print(f"Total Books: {stats.get('total_books', 0)}")
        print(f"Available Books: {stats.get('available_books', 0)}")
        print(f"Readers: {stats.get('total_readers', 0)}")
        print(f"Active Loans: {stats.get('active_loans', 0)}")
        print(f"Total Loans: {stats.get('total_loans', 0)}")
