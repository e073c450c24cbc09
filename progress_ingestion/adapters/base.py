"""
Upload source protocol and preview result.

Contract:
    UploadSource.read() yields one dict per data row, keyed by normalized
    column name.
    UploadSource.preview() returns the column list, row count and a few
    sample rows without holding the whole file.

Architecture: progress_ingestion/adapters. File I/O only; no network.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Protocol, runtime_checkable

SAMPLE_SIZE = 5


def normalize_column(name: Any) -> str:
    """``" Code Type "`` -> ``"code_type"``; blank -> ``""``."""
    if name is None:
        return ""
    text = re.sub(r"[\s\-]+", "_", str(name).strip().lower())
    return text.strip("_")


@runtime_checkable
class UploadSource(Protocol):
    def read(self, source_path: Path) -> Iterator[dict[str, Any]]:
        ...

    def preview(self, source_path: Path) -> "SourcePreview":
        ...


@dataclass(frozen=True)
class SourcePreview:
    row_count: int
    columns: tuple[str, ...]
    sample_rows: tuple[dict[str, Any], ...]
    encoding: str | None = None

    def missing(self, required: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(c for c in required if c not in self.columns)
