"""
Master code models (``progress_modules.master_data.models``).

Master codes are tenant lookup values grouped by ``code_type`` (e.g. skill
levels, equipment types).  The bulk-upload result mirrors what the backend
returns for both a dry run and a commit.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from progress_kernel.domain.wire import parse_bool
from progress_kernel.exceptions import InputValidationError

REQUIRED_UPLOAD_COLUMNS = ("code_type", "code_value")
TEMPLATE_COLUMNS = ("code_type", "code_value", "short_description", "long_description")
ALLOWED_UPLOAD_SUFFIXES = (".csv", ".xlsx", ".xls")


@dataclass(frozen=True)
class MasterCode:
    code_id: int
    code_type: str
    code_value: str
    short_description: str | None = None
    long_description: str | None = None
    active: bool = True

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> MasterCode:
        return cls(
            code_id=data["codeId"],
            code_type=data.get("codeType") or "",
            code_value=data.get("codeValue") or "",
            short_description=data.get("shortDescription"),
            long_description=data.get("longDescription"),
            active=parse_bool(data.get("activateFlag"), True),
        )


@dataclass(frozen=True)
class MasterCodeDraft:
    code_type: str
    code_value: str
    short_description: str | None = None
    long_description: str | None = None
    active: bool = True

    def validate(self) -> None:
        errors: dict[str, str] = {}
        if not self.code_type.strip():
            errors["codeType"] = "Code type is required"
        elif len(self.code_type) > 100:
            errors["codeType"] = "Code type must not exceed 100 characters"
        if not self.code_value.strip():
            errors["codeValue"] = "Code value is required"
        elif len(self.code_value) > 255:
            errors["codeValue"] = "Code value must not exceed 255 characters"
        if self.short_description and len(self.short_description) > 500:
            errors["shortDescription"] = "Short description must not exceed 500 characters"
        if errors:
            raise InputValidationError(errors)

    def to_payload(self) -> dict[str, Any]:
        return {
            "codeType": self.code_type.strip(),
            "codeValue": self.code_value.strip(),
            "shortDescription": self.short_description or None,
            "longDescription": self.long_description or None,
            "activateFlag": self.active,
        }


@dataclass(frozen=True)
class CodeTypeCount:
    """Active count per type; the backend also says whether radios fit."""

    code_type: str
    active_count: int
    use_radio: bool

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> CodeTypeCount:
        return cls(
            code_type=data.get("codeType") or "",
            active_count=int(data.get("activeCount") or 0),
            use_radio=bool(data.get("useRadio")),
        )


class UploadAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    SKIP = "SKIP"


@dataclass(frozen=True)
class BulkUploadRow:
    row_number: int
    code_type: str | None
    code_value: str | None
    short_description: str | None
    valid: bool
    errors: tuple[str, ...]
    action: UploadAction | None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> BulkUploadRow:
        action = data.get("action")
        return cls(
            row_number=int(data.get("rowNumber") or 0),
            code_type=data.get("codeType"),
            code_value=data.get("codeValue"),
            short_description=data.get("shortDescription"),
            valid=bool(data.get("valid")),
            errors=tuple(data.get("errors") or ()),
            action=UploadAction(action) if action else None,
        )


@dataclass(frozen=True)
class BulkUploadResult:
    dry_run: bool
    total_rows: int
    valid_rows: int
    invalid_rows: int
    created_count: int
    updated_count: int
    skipped_count: int
    rows: tuple[BulkUploadRow, ...]

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> BulkUploadResult:
        return cls(
            dry_run=bool(data.get("dryRun")),
            total_rows=int(data.get("totalRows") or 0),
            valid_rows=int(data.get("validRows") or 0),
            invalid_rows=int(data.get("invalidRows") or 0),
            created_count=int(data.get("createdCount") or 0),
            updated_count=int(data.get("updatedCount") or 0),
            skipped_count=int(data.get("skippedCount") or 0),
            rows=tuple(BulkUploadRow.from_payload(r) for r in data.get("rows") or ()),
        )

    @property
    def has_errors(self) -> bool:
        return self.invalid_rows > 0

    def invalid(self) -> list[BulkUploadRow]:
        return [r for r in self.rows if not r.valid]


@dataclass(frozen=True)
class UploadFile:
    """File name and content, read once; the dry run and the commit send these bytes."""

    name: str
    content: bytes = field(repr=False)
    path: Path | None = None

    @classmethod
    def read(cls, path: Path) -> UploadFile:
        try:
            return cls(path.name, path.read_bytes(), path)
        except OSError as exc:
            raise InputValidationError({"file": f"Could not read {path.name}: {exc}"}) from exc

    @property
    def content_type(self) -> str:
        return mimetypes.guess_type(self.name)[0] or "application/octet-stream"
