"""Upload file readers (file I/O only)."""

from __future__ import annotations

from pathlib import Path

from progress_ingestion.adapters.base import SourcePreview, UploadSource, normalize_column
from progress_ingestion.adapters.csv_adapter import CsvUploadSource
from progress_ingestion.adapters.xlsx_adapter import XlsxUploadSource

_READERS: dict[str, type] = {
    ".csv": CsvUploadSource,
    ".xlsx": XlsxUploadSource,
}


def source_for(path: Path) -> UploadSource | None:
    """Reader for a file suffix, or None when the file can only be parsed remotely."""
    reader = _READERS.get(path.suffix.lower())
    return reader() if reader is not None else None


__all__ = [
    "CsvUploadSource",
    "SourcePreview",
    "UploadSource",
    "XlsxUploadSource",
    "normalize_column",
    "source_for",
]
