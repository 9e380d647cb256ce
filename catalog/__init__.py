"""Library Catalog - Core Package

This package contains the core catalog modules:
- Catalog state and loan rules (library.py)
- Data models (book.py, reader.py, loan.py)
- JSON persistence (storage.py)
- Time source for loan timestamps (clock.py)
- CLI output helpers (ui_helpers.py)
"""
