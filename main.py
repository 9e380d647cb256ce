import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import Prompt
from rich.markup import escape
from rich import box
import typer

from catalog.book import Book
from catalog.library import LibraryManager
from catalog.reader import Reader
from catalog.ui_helpers import (
    print_books,
    print_loans,
    print_readers,
    print_report,
    print_stats_result,
    set_output_mode,
)
from config import settings

APP_NAME = settings.app_name

console = Console()
logger = logging.getLogger("catalog.cli")

DataPaths = Tuple[Path, Path, Path]


def _configure_logging() -> None:
    logging.basicConfig(
        level=settings.effective_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def open_manager(paths: DataPaths) -> LibraryManager:
    """Build a manager and load the catalog files at ``paths``."""
    manager = LibraryManager()
    if not manager.load(*paths):
        logger.warning("Catalog files under %s could not be read; starting with an empty catalog", paths[0].parent)
    return manager


def save_manager(manager: LibraryManager, paths: DataPaths) -> bool:
    """Save the catalog and print one line per file that failed."""
    failures = manager.save(*paths)
    for failure in failures:
        print(f"Save failed for {failure.destination}: {failure.__cause__ or failure}")
    return not failures


# --- Typer CLI application ---
app = typer.Typer(help="Library catalog CLI")


@app.callback()
def _global_options(
    ctx: typer.Context,
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    ),
    data_dir: Optional[str] = typer.Option(
        None,
        "--data-dir",
        "-d",
        help="Directory holding books.json, readers.json and loans.json",
    ),
):
    """Global options for the CLI (output mode, data location)."""
    _configure_logging()
    if output:
        set_output_mode(output)
    ctx.obj = settings.data_paths(data_dir)


def _commit(manager: LibraryManager, paths: DataPaths) -> None:
    if not save_manager(manager, paths):
        raise typer.Exit(code=1)


@app.command("list")
def cli_list(ctx: typer.Context):
    """List every book in the catalog."""
    print_books(open_manager(ctx.obj).list_books())


@app.command("add-book")
def cli_add_book(ctx: typer.Context, title: str, author: str, isbn: str):
    """Add a book to the catalog."""
    manager = open_manager(ctx.obj)
    if manager.add_book(Book(title=title, author=author, isbn=isbn)):
        print("Book added.")
        _commit(manager, ctx.obj)
    else:
        print("Book exists.")


@app.command("remove-book")
def cli_remove_book(ctx: typer.Context, isbn: str):
    """Remove a book that is not on loan."""
    manager = open_manager(ctx.obj)
    if manager.remove_book(isbn):
        print("Removed.")
        _commit(manager, ctx.obj)
    else:
        print("Remove failed (not found or loaned).")


@app.command("add-reader")
def cli_add_reader(ctx: typer.Context, name: str, email: str):
    """Register a reader; the Id is assigned automatically."""
    manager = open_manager(ctx.obj)
    reader = Reader(id=manager.next_reader_id(), name=name, email=email)
    manager.add_reader(reader)
    print(f"Reader added with Id={reader.id}")
    _commit(manager, ctx.obj)


@app.command("remove-reader")
def cli_remove_reader(ctx: typer.Context, reader_id: int):
    """Remove a reader and their active loans."""
    manager = open_manager(ctx.obj)
    if manager.remove_reader(reader_id):
        print("Removed.")
        _commit(manager, ctx.obj)
    else:
        print("Not found.")


@app.command("readers")
def cli_readers(ctx: typer.Context):
    """List registered readers."""
    print_readers(open_manager(ctx.obj).list_readers())


@app.command("issue")
def cli_issue(ctx: typer.Context, isbn: str, reader_id: int):
    """Lend a book to a reader."""
    manager = open_manager(ctx.obj)
    if manager.issue_loan(isbn, reader_id):
        print("Issued.")
        _commit(manager, ctx.obj)
    else:
        print("Issue failed.")


@app.command("return")
def cli_return(ctx: typer.Context, isbn: str, reader_id: int):
    """Return a book lent to a reader."""
    manager = open_manager(ctx.obj)
    if manager.return_book(isbn, reader_id):
        print("Returned.")
        _commit(manager, ctx.obj)
    else:
        print("Return failed.")


@app.command("search")
def cli_search(ctx: typer.Context, term: str = typer.Argument("", help="Text to look for in title or author")):
    """Search books by title or author (empty term lists everything)."""
    books = open_manager(ctx.obj).search_books(term)
    print_books(books, empty_message="No matching books.")


@app.command("report")
def cli_report(ctx: typer.Context):
    """Show available books and active loans."""
    manager = open_manager(ctx.obj)
    print_report(manager.available_books(), manager.active_loans())


@app.command("stats")
def cli_stats(ctx: typer.Context):
    """Show catalog statistics."""
    print_stats_result(open_manager(ctx.obj).get_statistics())


# --- Interactive menu ---
def _ask_reader_id() -> Optional[int]:
    raw = Prompt.ask("ReaderId").strip()
    try:
        return int(raw)
    except ValueError:
        console.print("[red]Reader id must be an integer.[/]")
        return None


def _menu_add_book(manager: LibraryManager) -> None:
    title = Prompt.ask("Title")
    author = Prompt.ask("Author")
    isbn = Prompt.ask("ISBN").strip()
    if manager.add_book(Book(title=title, author=author, isbn=isbn)):
        console.print("[green]Book added.[/]")
    else:
        console.print("[yellow]Book exists.[/]")


def _menu_remove_book(manager: LibraryManager) -> None:
    isbn = Prompt.ask("ISBN to remove").strip()
    if manager.remove_book(isbn):
        console.print("[green]Removed.[/]")
    else:
        console.print("[red]Remove failed (not found or loaned).[/]")


def _menu_add_reader(manager: LibraryManager) -> None:
    reader_id = manager.next_reader_id()
    name = Prompt.ask("Name")
    email = Prompt.ask("Email")
    manager.add_reader(Reader(id=reader_id, name=name, email=email))
    console.print(f"[green]Reader added with Id={reader_id}[/]")


def _menu_remove_reader(manager: LibraryManager) -> None:
    reader_id = _ask_reader_id()
    if reader_id is None:
        return
    if manager.remove_reader(reader_id):
        console.print("[green]Removed.[/]")
    else:
        console.print("[yellow]Not found.[/]")


def _menu_issue(manager: LibraryManager) -> None:
    reader_id = _ask_reader_id()
    if reader_id is None:
        return
    isbn = Prompt.ask("ISBN").strip()
    if manager.issue_loan(isbn, reader_id):
        console.print("[green]Issued.[/]")
    else:
        console.print("[red]Issue failed.[/]")


def _menu_return(manager: LibraryManager) -> None:
    reader_id = _ask_reader_id()
    if reader_id is None:
        return
    isbn = Prompt.ask("ISBN").strip()
    if manager.return_book(isbn, reader_id):
        console.print("[green]Returned.[/]")
    else:
        console.print("[red]Return failed.[/]")


def _menu_search(manager: LibraryManager) -> None:
    query = Prompt.ask("Search term", default="")
    books = manager.search_books(query)
    if not books:
        console.print(f"[yellow]🔍 No books match '{escape(query)}'.[/]")
        return

    table = Table(title=f"🔎 Results for '{escape(query)}'", show_lines=True, header_style="bold cyan")
    table.add_column("Title", style="white")
    table.add_column("Author", style="white")
    table.add_column("ISBN", style="magenta", no_wrap=True)
    table.add_column("Status")
    for book in books:
        status = "[green]Available[/]" if book.is_available else "[red]Loaned[/]"
        table.add_row(escape(book.title), escape(book.author), escape(book.isbn), status)
    console.print(table)


def _menu_report(manager: LibraryManager) -> None:
    available = Table(title="Available books", header_style="bold cyan")
    available.add_column("Title")
    available.add_column("Author")
    available.add_column("ISBN", style="magenta", no_wrap=True)
    for book in manager.available_books():
        available.add_row(escape(book.title), escape(book.author), escape(book.isbn))
    console.print(available)

    loans = Table(title="Active loans", header_style="bold cyan")
    loans.add_column("ISBN", style="magenta", no_wrap=True)
    loans.add_column("ReaderId")
    loans.add_column("Since")
    for loan in manager.active_loans():
        loans.add_row(escape(loan.book_isbn), str(loan.reader_id), loan.loan_date)
    console.print(loans)


MENU_ACTIONS = {
    "1": _menu_add_book,
    "2": _menu_remove_book,
    "3": _menu_add_reader,
    "4": _menu_remove_reader,
    "5": _menu_issue,
    "6": _menu_return,
    "7": _menu_search,
    "8": _menu_report,
}


def run_menu(data_dir: Optional[str] = None) -> None:
    """Interactive menu for the catalog. Changes are written only on Save & Exit."""
    paths = settings.data_paths(data_dir)
    manager = open_manager(paths)
    console.print(f"[dim]Library system started. Loaded {len(manager.books)} books, {len(manager.readers)} readers.[/]")

    def render_menu() -> None:
        menu_items = [
            ("1", "Add book", "➕"),
            ("2", "Remove book", "🗑️"),
            ("3", "Add reader", "👤"),
            ("4", "Remove reader", "🚫"),
            ("5", "Issue book", "📤"),
            ("6", "Return book", "📥"),
            ("7", "Search books", "🔎"),
            ("8", "Reports", "📊"),
            ("9", "Save & Exit", "💾"),
            ("0", "Exit without save", "🚪"),
        ]

        table = Table.grid(padding=(0, 2))
        table.add_column(justify="right", style="bold cyan", width=4)
        table.add_column(justify="left", style="white")
        for key, label, icon in menu_items:
            table.add_row(f"[reverse]{key}[/]", f"{icon} {label}")

        console.print(Panel(table, title=APP_NAME, border_style="cyan", box=box.HEAVY, padding=(1, 2)))

    while True:
        render_menu()
        choice = Prompt.ask("Choice", choices=[*MENU_ACTIONS, "9", "0"], default="8").strip()

        if choice in MENU_ACTIONS:
            MENU_ACTIONS[choice](manager)
        elif choice == "9":
            if save_manager(manager, paths):
                console.print("[green]Saved. Exiting.[/]")
                break
            console.print("[red]Save failed. Changes are still in memory; retry or choose 0 to discard.[/]")
        else:
            console.print("[yellow]Exit without save.[/]")
            break
        console.print()


def run() -> None:
    """Entry point: one-shot commands when arguments are given, the menu otherwise."""
    if len(sys.argv) > 1:
        app()
    else:
        _configure_logging()
        run_menu()


if __name__ == "__main__":
    run()
