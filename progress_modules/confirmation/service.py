"""REST calls for WBS confirmations."""

from __future__ import annotations

from datetime import date

from progress_client.transport import ApiClient
from progress_kernel.domain.wire import date_to_wire
from progress_modules.confirmation.models import Confirmation, ConfirmationSummary


class ConfirmationService:
    """
    ``/api/confirmations`` wrapper.

    Contract:
        ``summary(..., preview_date=...)`` is a read; only ``confirm``
        creates a record and only ``undo`` removes one.
    """

    def __init__(self, client: ApiClient):
        self._client = client

    def summary(self, wbs_id: int, preview_date: date | None = None) -> ConfirmationSummary:
        body = self._client.get(
            f"/api/confirmations/wbs/{wbs_id}/summary",
            {"previewDate": date_to_wire(preview_date)},
        )
        return ConfirmationSummary.from_payload(body)

    def history(self, wbs_id: int) -> list[Confirmation]:
        body = self._client.get(f"/api/confirmations/wbs/{wbs_id}")
        return [Confirmation.from_payload(c) for c in body or []]

    def confirm(self, wbs_id: int, confirmation_date: date, remarks: str | None) -> ConfirmationSummary | None:
        body = self._client.post(
            f"/api/confirmations/wbs/{wbs_id}",
            {"confirmationDate": date_to_wire(confirmation_date), "remarks": remarks or None},
        )
        return ConfirmationSummary.from_payload(body) if body else None

    def undo(self, confirmation_id: int) -> ConfirmationSummary | None:
        body = self._client.delete(f"/api/confirmations/{confirmation_id}")
        return ConfirmationSummary.from_payload(body) if body else None
