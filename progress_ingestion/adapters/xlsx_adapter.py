"""
XLSX upload reader.

Reads the active sheet with openpyxl in read-only mode.  The first row is
the header; duplicate header names get a numeric suffix.  Whole numbers
stored as floats come back as ints so ``10.0`` does not show up as a code
value.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator

import openpyxl

from progress_ingestion.adapters.base import SAMPLE_SIZE, SourcePreview, normalize_column


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, float) and value == int(value):
        return int(value)
    if isinstance(value, str):
        return value.strip()
    return value


def _headers(row: tuple[Any, ...]) -> list[str]:
    headers: list[str] = []
    for idx, value in enumerate(row):
        key = normalize_column(value) or f"column_{idx + 1}"
        base, n = key, 0
        while key in headers:
            n += 1
            key = f"{base}_{n}"
        headers.append(key)
    # Trailing unnamed columns are formatting leftovers.
    while headers and headers[-1].startswith("column_") and not normalize_column(row[len(headers) - 1]):
        headers.pop()
    return headers


class XlsxUploadSource:
    def _rows(self, source_path: Path) -> Iterator[tuple[list[str], dict[str, Any]]]:
        wb = openpyxl.load_workbook(source_path, read_only=True, data_only=True)
        try:
            rows = wb.active.iter_rows(values_only=True)
            first = next(rows, None)
            if first is None:
                return
            headers = _headers(first)
            yield headers, {}
            for row in rows:
                values = [_cell(v) for v in row[: len(headers)]]
                if not any(v != "" for v in values):
                    continue
                yield headers, dict(zip(headers, values))
        finally:
            wb.close()

    def read(self, source_path: Path) -> Iterator[dict[str, Any]]:
        for _, record in self._rows(source_path):
            if record:
                yield record

    def preview(self, source_path: Path) -> SourcePreview:
        columns: tuple[str, ...] = ()
        sample: list[dict[str, Any]] = []
        count = 0
        for headers, record in self._rows(source_path):
            columns = tuple(headers)
            if not record:
                continue
            count += 1
            if len(sample) < SAMPLE_SIZE:
                sample.append(record)
        return SourcePreview(row_count=count, columns=columns, sample_rows=tuple(sample))
