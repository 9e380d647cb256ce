import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple
from dotenv import load_dotenv

load_dotenv()

@dataclass
class Settings:
    # Data files
    data_dir: str = os.getenv("LIBRARY_DATA_DIR", ".")
    books_file: str = os.getenv("LIBRARY_BOOKS_FILE", "books.json")
    readers_file: str = os.getenv("LIBRARY_READERS_FILE", "readers.json")
    loans_file: str = os.getenv("LIBRARY_LOANS_FILE", "loans.json")

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "WARNING")

    # Application
    app_name: str = os.getenv("APP_NAME", "Library Catalog")
    debug: bool = os.getenv("DEBUG", "False").lower() in ("true", "1", "yes")

    def data_paths(self, data_dir: Optional[str] = None) -> Tuple[Path, Path, Path]:
        """Return the books, readers and loans file paths.

        An explicit ``data_dir`` overrides the configured one.
        """
        base = Path(data_dir or self.data_dir)
        return base / self.books_file, base / self.readers_file, base / self.loans_file

    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level.upper()


settings = Settings()
