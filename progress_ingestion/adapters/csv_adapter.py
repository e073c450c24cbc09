"""
CSV upload reader.

csv.DictReader over a utf-8-sig handle so an Excel-written BOM does not end
up in the first column name.  Column names are normalized; rows whose cells
are all blank are skipped.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Iterator

from progress_ingestion.adapters.base import SAMPLE_SIZE, SourcePreview, normalize_column

ENCODING = "utf-8-sig"


def _normalized_rows(reader: csv.DictReader) -> Iterator[dict[str, Any]]:
    columns = [normalize_column(c) for c in reader.fieldnames or ()]
    for raw in reader:
        values = [(raw.get(original) or "").strip() for original in reader.fieldnames or ()]
        if not any(values):
            continue
        yield dict(zip(columns, values))


class CsvUploadSource:
    def read(self, source_path: Path) -> Iterator[dict[str, Any]]:
        with source_path.open("r", encoding=ENCODING, newline="") as f:
            yield from _normalized_rows(csv.DictReader(f))

    def preview(self, source_path: Path) -> SourcePreview:
        with source_path.open("r", encoding=ENCODING, newline="") as f:
            reader = csv.DictReader(f)
            columns = tuple(normalize_column(c) for c in reader.fieldnames or ())
            sample: list[dict[str, Any]] = []
            count = 0
            for row in _normalized_rows(reader):
                count += 1
                if len(sample) < SAMPLE_SIZE:
                    sample.append(row)
        return SourcePreview(
            row_count=count,
            columns=columns,
            sample_rows=tuple(sample),
            encoding=ENCODING,
        )
