"""Master codes and their CSV/XLSX bulk upload."""

from progress_modules.master_data.bulk_upload import (
    COMMIT_PROMPT,
    BulkUploadWorkflow,
    precheck_upload,
    write_template,
)
from progress_modules.master_data.models import (
    BulkUploadResult,
    BulkUploadRow,
    CodeTypeCount,
    MasterCode,
    MasterCodeDraft,
    UploadAction,
    UploadFile,
)
from progress_modules.master_data.service import MasterCodeService

__all__ = [
    "COMMIT_PROMPT",
    "BulkUploadResult",
    "BulkUploadRow",
    "BulkUploadWorkflow",
    "CodeTypeCount",
    "MasterCode",
    "MasterCodeDraft",
    "MasterCodeService",
    "UploadAction",
    "UploadFile",
    "precheck_upload",
    "write_template",
]
