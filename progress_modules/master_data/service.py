"""REST calls for master codes, including the multipart bulk upload."""

from __future__ import annotations

from progress_client.transport import ApiClient
from progress_kernel.logging_config import get_logger
from progress_modules.master_data.models import (
    BulkUploadResult,
    CodeTypeCount,
    MasterCode,
    MasterCodeDraft,
    UploadFile,
)
from progress_modules.projects.service import _page_content

logger = get_logger("modules.master_data.service")

_BASE = "/api/master-codes"


class MasterCodeService:
    """
    ``/api/master-codes`` wrapper.

    Contract:
        ``bulk_upload(upload, dry_run=True)`` only validates; the backend
        writes nothing until the same content is sent with ``dry_run=False``.
    """

    def __init__(self, client: ApiClient):
        self._client = client

    def list_codes(
        self,
        code_type: str | None = None,
        search: str | None = None,
        active_only: bool = False,
        page: int = 0,
        size: int = 20,
    ) -> list[MasterCode]:
        body = self._client.get(
            _BASE,
            {
                "codeType": code_type or None,
                "search": search or None,
                "activeOnly": str(active_only).lower(),
                "page": page,
                "size": size,
            },
        )
        return [MasterCode.from_payload(c) for c in _page_content(body)]

    def get_code(self, code_id: int) -> MasterCode:
        return MasterCode.from_payload(self._client.get(f"{_BASE}/{code_id}"))

    def by_type(self, code_type: str) -> list[MasterCode]:
        body = self._client.get(f"{_BASE}/by-type/{code_type}")
        return [MasterCode.from_payload(c) for c in body or []]

    def code_types(self) -> list[str]:
        return sorted(self._client.get(f"{_BASE}/code-types") or [])

    def count(self, code_type: str, limit: int = 3) -> CodeTypeCount:
        body = self._client.get(f"{_BASE}/count", {"codeType": code_type, "limit": limit})
        return CodeTypeCount.from_payload(body or {"codeType": code_type})

    def create_code(self, draft: MasterCodeDraft) -> MasterCode:
        draft.validate()
        code = MasterCode.from_payload(self._client.post(_BASE, draft.to_payload()))
        logger.info("master_code_created", extra={"code_type": code.code_type})
        return code

    def update_code(self, code_id: int, draft: MasterCodeDraft) -> MasterCode:
        draft.validate()
        code = MasterCode.from_payload(self._client.put(f"{_BASE}/{code_id}", draft.to_payload()))
        logger.info("master_code_updated", extra={"code_id": code_id})
        return code

    def delete_code(self, code_id: int) -> None:
        self._client.delete(f"{_BASE}/{code_id}")
        logger.info("master_code_deleted", extra={"code_id": code_id})

    def refresh_cache(self, code_type: str | None = None) -> str:
        body = self._client.post(f"{_BASE}/refresh-cache", params={"codeType": code_type or None})
        return (body or {}).get("message") or "Cache refreshed"

    def bulk_upload(self, upload: UploadFile, dry_run: bool = True) -> BulkUploadResult:
        # Sent as bytes; a replay after token refresh must resend the full content.
        body = self._client.request(
            "POST",
            f"{_BASE}/bulk-upload",
            files={"file": (upload.name, upload.content, upload.content_type)},
            data={"dryRun": "true" if dry_run else "false"},
        )
        result = BulkUploadResult.from_payload(body or {})
        logger.info(
            "master_code_bulk_upload",
            extra={
                "file_name": upload.name,
                "dry_run": dry_run,
                "total_rows": result.total_rows,
                "invalid_rows": result.invalid_rows,
            },
        )
        return result
