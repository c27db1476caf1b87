from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Union

from models import IngestIssue
from sources.registry import register


logger = logging.getLogger(__name__)


class CsvImportSource:
    """Rows of one import CSV, or of every ``*.csv`` file in a directory.

    Files are read lazily, one row at a time. Each row gains a ``_source``
    key (``<file>:<line>``) so skips and errors can be traced back.
    Undecodable bytes are replaced rather than aborting the read; a file the
    csv parser rejects is recorded in ``issues`` and the next file is read.
    """

    source_name = "csv_import"
    entity_type = "employee"

    def __init__(self, path: Union[str, Path], encoding: str = "utf-8-sig", errors: str = "replace") -> None:
        self.path = Path(path)
        self.encoding = encoding
        self.errors = errors
        self.issues: List[IngestIssue] = []

    def files(self) -> List[Path]:
        if self.path.is_dir():
            return sorted(p for p in self.path.iterdir() if p.is_file() and p.suffix.lower() == ".csv")
        if self.path.is_file():
            return [self.path]
        raise FileNotFoundError(f"Import path not found: {self.path}")

    def rows(self) -> Iterator[Dict[str, Any]]:
        for file_path in self.files():
            logger.info("Reading %s", file_path, extra={"step": "load_rows"})
            try:
                with file_path.open("r", encoding=self.encoding, errors=self.errors, newline="") as f:
                    reader = csv.DictReader(f)
                    for row in reader:
                        # Header is line 1
                        row["_source"] = f"{file_path.name}:{reader.line_num}"
                        yield row
            except (csv.Error, UnicodeDecodeError) as e:
                self.issues.append(IngestIssue(kind="error", source=file_path.name, reason=f"unreadable file: {e}"))
                logger.error(
                    "Stopped reading %s: %s",
                    file_path,
                    e,
                    extra={"step": "load_rows", "status": "error", "error": type(e).__name__},
                )


register(CsvImportSource.source_name, CsvImportSource)
