"""
Master-code bulk upload (``progress_modules.master_data.bulk_upload``).

Responsibility
--------------
Validate-then-commit for a CSV/XLSX file of master codes.  The file is
checked locally (suffix, required header columns), sent once as a dry run,
and only sent for real after the user acknowledges the dry-run result.

Architecture position
---------------------
**Modules layer** -- uses ``progress_ingestion`` readers for the local check
and the kernel ``StagedAction`` gate shared with confirmations.

Invariants enforced
-------------------
* No request is made for a file that fails the local check.
* The file is read once; the commit sends the bytes whose dry run was
  acknowledged, even if the file on disk has changed since.
* Commit is refused while no dry-run result exists, or when the dry run
  found no valid rows.

Failure modes
-------------
* Wrong suffix -> ``UnsupportedUploadFileError``.
* Missing ``code_type`` / ``code_value`` headers -> ``MissingUploadColumnsError``.
* Unreadable or empty file -> ``InputValidationError``.
"""

from __future__ import annotations

import csv
import zipfile
from pathlib import Path

from openpyxl.utils.exceptions import InvalidFileException

from progress_ingestion.adapters import SourcePreview, source_for
from progress_kernel.domain.staged import StagedAction, StageState
from progress_kernel.exceptions import (
    InputValidationError,
    MissingUploadColumnsError,
    UnsupportedUploadFileError,
)
from progress_kernel.logging_config import get_logger
from progress_modules.master_data.models import (
    ALLOWED_UPLOAD_SUFFIXES,
    REQUIRED_UPLOAD_COLUMNS,
    TEMPLATE_COLUMNS,
    BulkUploadResult,
    UploadFile,
)
from progress_modules.master_data.service import MasterCodeService

logger = get_logger("modules.master_data.bulk_upload")

COMMIT_PROMPT = (
    "Are you sure you want to commit these changes? "
    "This will create/update master codes in the database."
)

_TEMPLATE_EXAMPLES = (
    ("SKILL_LEVEL", "SENIOR", "Senior", "Senior technician"),
    ("EQUIPMENT_TYPE", "CRANE", "Crane", "Mobile or tower crane"),
)


def precheck_upload(path: Path) -> SourcePreview | None:
    """
    Local structural check before any upload.

    Returns the preview for CSV/XLSX files.  ``.xls`` cannot be read locally
    and is passed through to the backend with ``None``.
    """
    if path.suffix.lower() not in ALLOWED_UPLOAD_SUFFIXES:
        raise UnsupportedUploadFileError(path.name, ALLOWED_UPLOAD_SUFFIXES)
    if not path.is_file():
        raise InputValidationError({"file": f"File not found: {path}"})

    source = source_for(path)
    if source is None:
        return None
    try:
        preview = source.preview(path)
    except (OSError, ValueError, csv.Error, zipfile.BadZipFile, InvalidFileException) as exc:
        raise InputValidationError({"file": f"Could not read {path.name}: {exc}"}) from exc

    missing = preview.missing(REQUIRED_UPLOAD_COLUMNS)
    if missing:
        raise MissingUploadColumnsError(path.name, missing)
    if preview.row_count == 0:
        raise InputValidationError({"file": f"{path.name} has no data rows"})
    return preview


def write_template(path: Path) -> Path:
    """Write a CSV with the upload header and two example rows."""
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(TEMPLATE_COLUMNS)
        writer.writerows(_TEMPLATE_EXAMPLES)
    logger.info("master_code_template_written", extra={"path": str(path)})
    return path


class BulkUploadWorkflow:
    """
    Dry run, acknowledge, commit.

    Contract:
        ``validate(path)`` -> dry-run result.
        ``begin_commit()`` -> prompt text.
        ``commit()`` -> committed result.
    Guarantees:
        Choosing another file discards the previous dry run.
    """

    def __init__(self, service: MasterCodeService):
        self._service = service
        self.preview: SourcePreview | None = None
        self._staged: StagedAction[UploadFile, BulkUploadResult, BulkUploadResult] = StagedAction(
            "master_code_upload",
            preview=lambda upload: self._service.bulk_upload(upload, dry_run=True),
            commit=lambda upload: self._service.bulk_upload(upload, dry_run=False),
            can_commit=lambda result: result.valid_rows > 0,
        )

    @property
    def state(self) -> StageState:
        return self._staged.state

    @property
    def selected_file(self) -> Path | None:
        upload = self._staged.key
        return upload.path if upload is not None else None

    @property
    def upload(self) -> UploadFile | None:
        return self._staged.key

    @property
    def validation(self) -> BulkUploadResult | None:
        return self._staged.preview

    @property
    def committed(self) -> BulkUploadResult | None:
        return self._staged.result

    @property
    def can_commit(self) -> bool:
        return self._staged.commit_allowed

    def validate(self, path: Path) -> BulkUploadResult:
        if self._staged.state is StageState.COMMITTING:
            raise InputValidationError({"file": "An upload is already in progress"})
        self.preview = None
        if self._staged.state is not StageState.IDLE:
            self._staged.reset()
        self.preview = precheck_upload(path)
        return self._staged.stage(UploadFile.read(path))

    def begin_commit(self) -> str:
        self._staged.request_commit()
        return COMMIT_PROMPT

    def cancel_commit(self) -> None:
        self._staged.cancel()

    def commit(self) -> BulkUploadResult:
        return self._staged.commit()

    def reset(self) -> None:
        self.preview = None
        self._staged.reset()
