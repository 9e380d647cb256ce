import json
from unittest.mock import MagicMock

from typer.testing import CliRunner

import main
from main import app
from catalog.book import Book
from catalog.library import LibraryManager
from catalog.reader import Reader

runner = CliRunner()


def _invoke(tmp_path, *args):
    return runner.invoke(app, ["--data-dir", str(tmp_path), *args])

def _load(data_paths):
    manager = LibraryManager()
    assert manager.load(*data_paths)
    return manager


def test_list_no_books(tmp_path):
    result = _invoke(tmp_path, "list")
    assert result.exit_code == 0
    assert "No books in library." in result.stdout

def test_add_book_persists(tmp_path, data_paths):
    result = _invoke(tmp_path, "add-book", "Dune", "Frank Herbert", "111")
    assert result.exit_code == 0
    assert "Book added." in result.stdout
    assert _load(data_paths).find_book("111").title == "Dune"

def test_add_duplicate_book(tmp_path):
    _invoke(tmp_path, "add-book", "Dune", "Frank Herbert", "111")
    result = _invoke(tmp_path, "add-book", "Other", "Someone", "111")
    assert result.exit_code == 0
    assert "Book exists." in result.stdout

def test_add_reader_assigns_next_id(tmp_path, data_paths):
    first = _invoke(tmp_path, "add-reader", "Ada", "ada@example.com")
    second = _invoke(tmp_path, "add-reader", "Bob", "bob@example.com")
    assert "Reader added with Id=1" in first.stdout
    assert "Reader added with Id=2" in second.stdout
    assert [r.id for r in _load(data_paths).list_readers()] == [1, 2]

def test_loan_lifecycle_through_cli(tmp_path, data_paths):
    _invoke(tmp_path, "add-book", "Dune", "Frank Herbert", "111")
    _invoke(tmp_path, "add-reader", "Ada", "ada@example.com")

    assert "Issued." in _invoke(tmp_path, "issue", "111", "1").stdout
    assert "Issue failed." in _invoke(tmp_path, "issue", "111", "1").stdout
    assert "Remove failed (not found or loaned)." in _invoke(tmp_path, "remove-book", "111").stdout

    report = _invoke(tmp_path, "report")
    assert "ISBN: 111 ReaderId: 1 since" in report.stdout
    assert "No available books." in report.stdout

    assert "Returned." in _invoke(tmp_path, "return", "111", "1").stdout
    assert "Return failed." in _invoke(tmp_path, "return", "111", "1").stdout
    assert "Removed." in _invoke(tmp_path, "remove-book", "111").stdout

    manager = _load(data_paths)
    assert manager.list_books() == []
    assert len(manager.list_loans()) == 1
    assert manager.active_loans() == []

def test_remove_reader_not_found(tmp_path):
    result = _invoke(tmp_path, "remove-reader", "5")
    assert result.exit_code == 0
    assert "Not found." in result.stdout

def test_remove_reader_requires_integer(tmp_path):
    result = _invoke(tmp_path, "remove-reader", "abc")
    assert result.exit_code != 0

def test_search_plain_output(tmp_path):
    _invoke(tmp_path, "add-book", "Dune", "Frank Herbert", "111")
    _invoke(tmp_path, "add-book", "Emma", "Jane Austen", "222")
    result = _invoke(tmp_path, "search", "herbert")
    assert result.exit_code == 0
    assert "Dune - Frank Herbert - 111 - Available" in result.stdout
    assert "Emma" not in result.stdout

def test_search_json_output(tmp_path):
    _invoke(tmp_path, "add-book", "Dune", "Frank Herbert", "111")
    result = runner.invoke(app, ["--output", "json", "--data-dir", str(tmp_path), "search"])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == [{"Title": "Dune", "Author": "Frank Herbert", "ISBN": "111", "IsAvailable": True}]

def test_readers_and_stats(tmp_path):
    _invoke(tmp_path, "add-reader", "Ada", "ada@example.com")
    assert "1 - Ada - ada@example.com" in _invoke(tmp_path, "readers").stdout
    stats = _invoke(tmp_path, "stats")
    assert "Total Books: 0" in stats.stdout
    assert "Readers: 1" in stats.stdout

def test_corrupt_files_start_empty(tmp_path, data_paths):
    books_file, _, _ = data_paths
    books_file.write_text("not json", encoding="utf-8")
    result = _invoke(tmp_path, "list")
    assert result.exit_code == 0
    assert "No books in library." in result.stdout

def test_save_failure_exits_non_zero(tmp_path, monkeypatch):
    from catalog.storage import StorageError

    error = StorageError("Could not write file: disk full", tmp_path / "books.json")
    monkeypatch.setattr(LibraryManager, "save", MagicMock(return_value=[error]))
    result = _invoke(tmp_path, "add-book", "Dune", "Frank Herbert", "111")
    assert result.exit_code == 1
    assert f"Save failed for {tmp_path / 'books.json'}" in result.stdout


# ------------------------- Interactive menu ------------------------- #
def _answers(monkeypatch, *answers):
    ask = MagicMock(side_effect=list(answers))
    monkeypatch.setattr(main.Prompt, "ask", ask)
    return ask

def test_menu_save_and_exit(tmp_path, data_paths, monkeypatch):
    _answers(
        monkeypatch,
        "1", "Dune", "Herbert", "111",
        "3", "Ada", "ada@example.com",
        "5", "1", "111",
        "9",
    )
    main.run_menu(str(tmp_path))

    manager = _load(data_paths)
    assert manager.find_book("111").is_available is False
    assert manager.find_reader(1) == Reader(1, "Ada", "ada@example.com")
    assert len(manager.active_loans()) == 1

def test_menu_exit_without_save_discards_changes(tmp_path, data_paths, monkeypatch):
    manager = LibraryManager()
    manager.add_book(Book("Emma", "Jane Austen", "222"))
    manager.save(*data_paths)

    _answers(monkeypatch, "2", "222", "0")
    main.run_menu(str(tmp_path))

    assert _load(data_paths).find_book("222") is not None

def test_menu_rejects_non_numeric_reader_id(tmp_path, data_paths, monkeypatch):
    ask = _answers(monkeypatch, "4", "abc", "9")
    main.run_menu(str(tmp_path))
    assert ask.call_count == 3
    assert _load(data_paths).list_readers() == []

def test_menu_offers_only_listed_choices(tmp_path, monkeypatch):
    ask = _answers(monkeypatch, "0")
    main.run_menu(str(tmp_path))
    assert ask.call_args_list[0].kwargs["choices"] == ["1", "2", "3", "4", "5", "6", "7", "8", "9", "0"]


# ------------------------- Rich output ------------------------- #
def test_rich_list_shows_markup_like_titles(tmp_path, data_paths):
    manager = LibraryManager()
    manager.add_book(Book("Notes [/]", "Anon [bold]", "1"))
    manager.add_reader(Reader(1, "[red]Ada", "ada@example.com"))
    manager.issue_loan("1", 1)
    manager.save(*data_paths)

    for command in ("list", "search", "readers", "report"):
        result = runner.invoke(app, ["--output", "rich", "--data-dir", str(tmp_path), command])
        assert result.exit_code == 0, result.output
    listing = runner.invoke(app, ["--output", "rich", "--data-dir", str(tmp_path), "list"])
    assert "Notes [/]" in listing.stdout
    assert "Anon [bold]" in listing.stdout
