"""Tests for master codes and the dry-run / commit bulk upload."""

import pytest

from progress_kernel.domain.staged import StageState
from progress_kernel.exceptions import (
    InputValidationError,
    MissingUploadColumnsError,
    UnsupportedUploadFileError,
    WorkflowStateError,
)
from progress_modules.master_data import (
    COMMIT_PROMPT,
    BulkUploadWorkflow,
    MasterCodeDraft,
    MasterCodeService,
    UploadAction,
    precheck_upload,
    write_template,
)

UPLOAD_PATH = "/api/master-codes/bulk-upload"


def _result(dry_run: bool, valid: int, invalid: int = 0) -> dict:
    rows = [
        {"rowNumber": 2, "codeType": "SKILL", "codeValue": "SENIOR", "valid": True, "action": "CREATE"}
    ]
    if invalid:
        rows.append({"rowNumber": 3, "codeType": "", "valid": False, "errors": ["Code type is required"]})
    return {
        "dryRun": dry_run,
        "totalRows": valid + invalid,
        "validRows": valid,
        "invalidRows": invalid,
        "createdCount": 0 if dry_run else valid,
        "rows": rows,
    }


def _upload_handler(call):
    dry_run = b'name="dryRun"\r\n\r\ntrue' in call.body
    return 200, _result(dry_run, valid=1, invalid=1)


def _csv(tmp_path, text="code_type,code_value\nSKILL,SENIOR\n,\n", name="codes.csv"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Local pre-check
# ---------------------------------------------------------------------------


class TestPrecheck:
    """Structural checks before any request."""

    def test_unsupported_suffix(self, tmp_path):
        path = _csv(tmp_path, name="codes.txt")
        with pytest.raises(UnsupportedUploadFileError):
            precheck_upload(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(InputValidationError):
            precheck_upload(tmp_path / "absent.csv")

    def test_missing_required_columns(self, tmp_path):
        path = _csv(tmp_path, "code_type,description\nSKILL,x\n")
        with pytest.raises(MissingUploadColumnsError) as exc_info:
            precheck_upload(path)
        assert exc_info.value.missing == ("code_value",)

    def test_no_data_rows(self, tmp_path):
        with pytest.raises(InputValidationError):
            precheck_upload(_csv(tmp_path, "code_type,code_value\n"))

    def test_corrupt_xlsx(self, tmp_path):
        path = tmp_path / "codes.xlsx"
        path.write_bytes(b"not a zip")
        with pytest.raises(InputValidationError):
            precheck_upload(path)

    def test_xls_passed_through(self, tmp_path):
        path = tmp_path / "codes.xls"
        path.write_bytes(b"\xd0\xcf\x11\xe0")
        assert precheck_upload(path) is None

    def test_template_passes_precheck(self, tmp_path):
        path = write_template(tmp_path / "template.csv")
        preview = precheck_upload(path)
        assert preview.row_count == 2
        assert preview.columns[:2] == ("code_type", "code_value")


# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------


class TestBulkUploadWorkflow:
    """Dry run, acknowledge, commit."""

    def test_invalid_file_sends_nothing(self, backend, api_client, tmp_path):
        workflow = BulkUploadWorkflow(MasterCodeService(api_client))
        with pytest.raises(MissingUploadColumnsError):
            workflow.validate(_csv(tmp_path, "a,b\n1,2\n"))
        assert backend.calls == []
        assert workflow.state is StageState.IDLE

    def test_dry_run_then_commit(self, backend, api_client, tmp_path):
        backend.route("POST", UPLOAD_PATH, handler=_upload_handler)
        workflow = BulkUploadWorkflow(MasterCodeService(api_client))
        path = _csv(tmp_path)

        validation = workflow.validate(path)

        assert validation.dry_run
        assert validation.has_errors
        assert [r.row_number for r in validation.invalid()] == [3]
        assert validation.rows[0].action is UploadAction.CREATE
        assert workflow.preview.row_count == 1
        assert workflow.can_commit

        assert workflow.begin_commit() == COMMIT_PROMPT
        committed = workflow.commit()

        assert not committed.dry_run
        assert committed.created_count == 1
        sent = backend.calls_to("POST", UPLOAD_PATH)
        assert len(sent) == 2
        assert b'filename="codes.csv"' in sent[0].body
        assert b"SKILL,SENIOR" in sent[1].body
        assert b'name="dryRun"\r\n\r\nfalse' in sent[1].body

    def test_commit_sends_validated_content_after_file_changes(self, backend, api_client, tmp_path):
        backend.route("POST", UPLOAD_PATH, handler=_upload_handler)
        workflow = BulkUploadWorkflow(MasterCodeService(api_client))
        path = _csv(tmp_path)
        workflow.validate(path)
        workflow.begin_commit()
        path.write_text("code_type,code_value\nOTHER,CHANGED\n", encoding="utf-8")

        workflow.commit()

        dry_run, commit = backend.calls_to("POST", UPLOAD_PATH)
        assert b"SKILL,SENIOR" in dry_run.body
        assert b"SKILL,SENIOR" in commit.body
        assert b"OTHER,CHANGED" not in commit.body
        assert workflow.upload.content == b"code_type,code_value\nSKILL,SENIOR\n,\n"
        assert workflow.selected_file == path

    def test_commit_requires_prompt(self, backend, api_client, tmp_path):
        backend.route("POST", UPLOAD_PATH, handler=_upload_handler)
        workflow = BulkUploadWorkflow(MasterCodeService(api_client))
        workflow.validate(_csv(tmp_path))
        with pytest.raises(WorkflowStateError):
            workflow.commit()
        assert len(backend.calls_to("POST", UPLOAD_PATH)) == 1

    def test_no_valid_rows_blocks_commit(self, backend, api_client, tmp_path):
        backend.route("POST", UPLOAD_PATH, (200, _result(True, valid=0, invalid=1)))
        workflow = BulkUploadWorkflow(MasterCodeService(api_client))
        workflow.validate(_csv(tmp_path))
        assert not workflow.can_commit
        with pytest.raises(WorkflowStateError):
            workflow.begin_commit()

    def test_new_file_discards_previous_dry_run(self, backend, api_client, tmp_path):
        backend.route("POST", UPLOAD_PATH, handler=_upload_handler)
        workflow = BulkUploadWorkflow(MasterCodeService(api_client))
        first = _csv(tmp_path, name="first.csv")
        second = _csv(tmp_path, name="second.csv")
        workflow.validate(first)
        workflow.begin_commit()
        workflow.validate(second)
        assert workflow.state is StageState.STAGED
        assert workflow.selected_file == second

    def test_replay_after_refresh_resends_file(self, backend, api_client, tmp_path):
        backend.route("POST", UPLOAD_PATH, (401, None), (200, _result(True, valid=1)))
        backend.route("POST", "/api/auth/refresh", (200, {"token": "access-2"}))
        workflow = BulkUploadWorkflow(MasterCodeService(api_client))
        workflow.validate(_csv(tmp_path))
        sent = backend.calls_to("POST", UPLOAD_PATH)
        assert len(sent) == 2
        assert b"SKILL,SENIOR" in sent[1].body


# ---------------------------------------------------------------------------
# Master code CRUD
# ---------------------------------------------------------------------------


class TestMasterCodeService:
    def test_draft_validation(self, backend, api_client):
        with pytest.raises(InputValidationError) as exc_info:
            MasterCodeService(api_client).create_code(MasterCodeDraft(code_type="", code_value="x" * 256))
        assert set(exc_info.value.field_errors) == {"codeType", "codeValue"}
        assert backend.calls == []

    def test_list_codes_params(self, backend, api_client):
        backend.route(
            "GET",
            "/api/master-codes",
            (200, {"content": [{"codeId": 1, "codeType": "SKILL", "codeValue": "SENIOR"}]}),
        )
        codes = MasterCodeService(api_client).list_codes(code_type="SKILL")
        assert codes[0].code_value == "SENIOR"
        assert backend.calls[0].params["codeType"] == "SKILL"
        assert "search" not in backend.calls[0].params

    def test_count(self, backend, api_client):
        backend.route("GET", "/api/master-codes/count", (200, {"codeType": "SKILL", "activeCount": 2, "useRadio": True}))
        count = MasterCodeService(api_client).count("SKILL")
        assert count.use_radio and count.active_count == 2

    def test_refresh_cache_message(self, backend, api_client):
        backend.route("POST", "/api/master-codes/refresh-cache", (200, None))
        assert MasterCodeService(api_client).refresh_cache("SKILL") == "Cache refreshed"
        assert backend.calls[0].params == {"codeType": "SKILL"}
