"""CLI view: master codes and bulk upload."""

from pathlib import Path

from progress_kernel.exceptions import (
    InputValidationError,
    ProgressConsoleError,
    RuleViolationError,
    SessionError,
)
from progress_modules.master_data import BulkUploadWorkflow, MasterCodeDraft, write_template
from scripts.cli import config as cli_config
from scripts.cli.util import W, ask, ask_int, confirm, header, print_error


def _print_result(result) -> None:
    label = "DRY RUN" if result.dry_run else "COMMITTED"
    print(
        f"\n  [{label}] rows {result.total_rows}  valid {result.valid_rows}  invalid {result.invalid_rows}"
    )
    if not result.dry_run:
        print(
            f"  created {result.created_count}  updated {result.updated_count}  skipped {result.skipped_count}"
        )
    for row in result.rows:
        action = row.action.value if row.action else "-"
        status = "ok" if row.valid else "; ".join(row.errors)
        print(f"    {row.row_number:>4}  {(row.code_type or '')[:16]:<16} {(row.code_value or '')[:16]:<16} {action:<6} {status[:24]}")


def _bulk_upload(ctx) -> None:
    cli_config.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
    files = sorted(
        p for p in cli_config.UPLOAD_DIR.iterdir() if p.suffix.lower() in (".csv", ".xlsx", ".xls")
    )
    for i, p in enumerate(files, 1):
        print(f"    {i:>2}. {p.name}")
    raw = ask(f"File number or path (files in {cli_config.UPLOAD_DIR})")
    if not raw:
        return
    path = files[int(raw) - 1] if raw.isdigit() and 0 < int(raw) <= len(files) else Path(raw).expanduser()

    flow = BulkUploadWorkflow(ctx.master_codes)
    try:
        result = flow.validate(path)
    except InputValidationError as exc:
        print_error(exc)
        return
    if flow.preview is not None:
        print(f"\n  {path.name}: {flow.preview.row_count} row(s), columns {', '.join(flow.preview.columns)}")
    _print_result(result)
    if not flow.can_commit:
        print("\n  Nothing valid to commit.")
        return
    if confirm(flow.begin_commit()):
        _print_result(flow.commit())
    else:
        flow.cancel_commit()


def show_master_data(ctx):
    code_type = None
    search = None

    while True:
        header("MASTER DATA")
        try:
            codes = ctx.master_codes.list_codes(code_type=code_type, search=search, size=50)
        except SessionError:
            raise
        except ProgressConsoleError as exc:
            print_error(exc)
            return
        print(f"  {'ID':>6}  {'Type':<18} {'Value':<18} {'Description':<22}")
        print("  " + "-" * (W - 4))
        for c in codes:
            flag = "" if c.active else "  (inactive)"
            print(f"  {c.code_id:>6}  {c.code_type[:18]:<18} {c.code_value[:18]:<18} {(c.short_description or '')[:22]:<22}{flag}")
        if not codes:
            print("    (none)")
        print("\n  F filter   N new   E edit   D delete   U bulk upload   T write template   C refresh cache   Q back")
        choice = ask("Pick").upper()
        if choice == "Q":
            return
        by_id = {c.code_id: c for c in codes}
        try:
            if choice == "F":
                print("  Types: " + ", ".join(ctx.master_codes.code_types()))
                code_type = ask("Code type (blank for any)") or None
                search = ask("Search") or None
            elif choice == "N":
                ctx.master_codes.create_code(
                    MasterCodeDraft(
                        code_type=ask("Code type", code_type),
                        code_value=ask("Code value"),
                        short_description=ask("Short description") or None,
                        long_description=ask("Long description") or None,
                    )
                )
                print("  Code created.")
            elif choice == "E":
                code = by_id.get(ask_int("Code ID"))
                if code is None:
                    print("  No such code.")
                    continue
                ctx.master_codes.update_code(
                    code.code_id,
                    MasterCodeDraft(
                        code_type=ask("Code type", code.code_type),
                        code_value=ask("Code value", code.code_value),
                        short_description=ask("Short description", code.short_description) or None,
                        long_description=ask("Long description", code.long_description) or None,
                        active=confirm("Active?"),
                    ),
                )
                print("  Code updated.")
            elif choice == "D":
                code = by_id.get(ask_int("Code ID"))
                if code is not None and confirm(f"Delete {code.code_type}/{code.code_value}?"):
                    ctx.master_codes.delete_code(code.code_id)
                    print("  Code deleted.")
            elif choice == "U":
                _bulk_upload(ctx)
            elif choice == "T":
                cli_config.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
                path = write_template(cli_config.UPLOAD_DIR / cli_config.TEMPLATE_NAME)
                print(f"  Template written to {path}")
            elif choice == "C":
                print(f"  {ctx.master_codes.refresh_cache(code_type)}")
        except InputValidationError as exc:
            print_error(exc)
        except RuleViolationError:
            pass  # shown by the global violation display
        except SessionError:
            raise
        except ProgressConsoleError as exc:
            print_error(exc)
