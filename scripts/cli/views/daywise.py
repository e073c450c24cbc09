"""CLI view: day-wise plan vs actual grid for the selected task."""

from progress_kernel.exceptions import (
    InputValidationError,
    ProgressConsoleError,
    RuleViolationError,
    SessionError,
)
from progress_modules.daywise import DayWiseGrid, GridState, SubmitOutcome, TaskUpdateDraft
from progress_modules.daywise.grid import parse_quantity
from scripts.cli.util import W, ask, ask_date, ask_int, confirm, fmt_date, fmt_qty, fmt_signed, header, print_error


def _print_grid(grid: DayWiseGrid) -> None:
    print(f"  {'#':>3}  {'ID':>6} {'Date':<10} {'Plan':>9} {'Actual':>9} {'Var':>8}  {'Remarks':<22}")
    print("  " + "-" * (W - 4))
    for i, row in enumerate(grid.rows):
        flags = ""
        if row.is_locked:
            flags = " [locked]"
        elif not row.can_edit:
            flags = " [read-only]"
        elif row.is_over_plan:
            flags = " [over plan]"
        mark = "*" if i in grid.selection else " "
        print(
            f" {mark}{i:>3}  {row.update_id or '':>6} {fmt_date(row.update_date):<10} {fmt_qty(row.planned_qty):>9} "
            f"{fmt_qty(row.actual_qty):>9} {fmt_signed(row.variance):>8}  {(row.remarks or '')[:22]:<22}{flags}"
        )
    s = grid.summary()
    print("  " + "-" * (W - 4))
    print(
        f"  {'Total':<22} {fmt_qty(s.total_planned):>9} {fmt_qty(s.total_actual):>9} "
        f"{fmt_signed(s.total_variance):>8}  over plan: {s.over_plan_count}  locked: {s.locked_count}"
    )


def _print_submit(result) -> None:
    if result.outcome is SubmitOutcome.SUBMITTED:
        print(f"\n  Saved {result.submitted_count} update(s).")
        if not result.refreshed:
            print("  Saved, but the refresh failed; use L to reload.")
    elif result.outcome is SubmitOutcome.BLOCKED_LOCALLY:
        print(f"\n  Not sent: {result.offending_count} row(s) exceed plan.")
    elif result.outcome is SubmitOutcome.NOTHING_TO_SUBMIT:
        print(f"\n  {result.message}")
    elif result.outcome is SubmitOutcome.FAILED:
        print(f"\n  ! {result.message}")
    # REJECTED_BY_RULE is shown by the global violation display.


def _print_history(ctx) -> None:
    updates = ctx.updates.list_updates(ctx.task.task_id)
    print(f"\n  {'ID':>6} {'Date':<10} {'Plan':>9} {'Actual':>9} {'Daily':>9}  {'Remarks':<22}")
    print("  " + "-" * (W - 4))
    for u in updates:
        print(
            f"  {u.update_id:>6} {fmt_date(u.update_date):<10} {fmt_qty(u.planned_qty):>9} "
            f"{fmt_qty(u.actual_qty):>9} {fmt_qty(u.daily_update_qty):>9}  {(u.remarks or '')[:22]:<22}"
        )
    if not updates:
        print("    (no saved updates)")


def _save_single(ctx) -> bool:
    """One-date upsert outside the grid; True when saved."""
    update_date = ask_date("Update date")
    if update_date is None:
        return False
    raw_plan = ask("Plan qty (blank = task plan)")
    draft = TaskUpdateDraft(
        task_id=ctx.task.task_id,
        update_date=update_date,
        actual_qty=parse_quantity(ask("Actual qty")),
        planned_qty=parse_quantity(raw_plan, "planned_qty") if raw_plan else None,
        remarks=ask("Remarks") or None,
    )
    saved = ctx.updates.save_update(draft)
    print(f"  Saved update {saved.update_id} for {fmt_date(saved.update_date)}.")
    return True


def show_daywise(ctx, violation_modal=None):
    if ctx.task is None:
        print("\n  Select a task first (P).\n")
        return
    grid = DayWiseGrid(ctx.updates, ctx.task.task_id)
    grid.load_rows()

    while True:
        header(f"DAY-WISE UPDATES  {ctx.task.label}")
        if grid.state is GridState.ERROR:
            print(f"\n  ! {grid.error_message}")
            print("\n  R retry   Q back")
        else:
            _print_grid(grid)
            if grid.violation is not None and violation_modal is not None:
                violation_modal.show(grid.violation)
                grid.dismiss_violation()
            print("\n  E edit actual   K remarks   B bulk set   D delete   S save   L reload")
            print("  H saved updates   A save one date   Q back")
        choice = ask("Pick").upper()
        if choice == "Q":
            if grid.dirty and not confirm("Discard unsaved edits?"):
                continue
            return
        if choice in ("R", "L"):
            if grid.state is GridState.ERROR:
                grid.retry()
            else:
                grid.load_rows()
        elif grid.state is GridState.ERROR:
            print("  Nothing loaded; R to retry.")
        elif choice == "E":
            idx = ask_int("Row #")
            if idx is None:
                continue
            try:
                if not grid.edit_cell(idx, "actual_qty", ask("Actual qty")):
                    print("  Row is locked or not editable.")
            except InputValidationError as exc:
                print_error(exc)
            except IndexError:
                print(f"  No row {idx}.")
        elif choice == "K":
            idx = ask_int("Row #")
            if idx is None:
                continue
            try:
                if not grid.edit_cell(idx, "remarks", ask("Remarks")):
                    print("  Row is locked or not editable.")
            except InputValidationError as exc:
                print_error(exc)
            except IndexError:
                print(f"  No row {idx}.")
        elif choice == "B":
            raw = ask("Row numbers (comma separated, blank = all)")
            try:
                indices = sorted({int(x) for x in raw.split(",") if x.strip()}) if raw else range(len(grid.rows))
            except ValueError:
                print("  Row numbers must be integers.")
                continue
            grid.begin_bulk_selection()
            try:
                for idx in indices:
                    grid.toggle_selection(idx)
                _print_grid(grid)
                applied = grid.bulk_apply(None, ask("Actual qty for marked rows"))
            except InputValidationError as exc:
                grid.cancel_bulk_selection()
                print_error(exc)
                continue
            except IndexError as exc:
                grid.cancel_bulk_selection()
                print(f"  No row {exc.args[0]}.")
                continue
            print(f"  Applied to {applied} row(s).")
        elif choice == "D":
            update_id = ask_int("Update ID")
            if update_id is None:
                continue
            try:
                removed = grid.delete_row(
                    update_id,
                    lambda row: confirm(f"Delete update for {fmt_date(row.update_date)}?"),
                )
            except KeyError:
                print(f"  No saved row with update id {update_id}.")
                continue
            if not removed and grid.error_message:
                print(f"  ! {grid.error_message}")
        elif choice == "S":
            if not grid.can_submit:
                print("  Nothing can be saved in the current state.")
                continue
            _print_submit(grid.submit())
        elif choice in ("H", "A"):
            if choice == "A" and grid.dirty:
                print("  Save or reload the grid first.")
                continue
            try:
                if choice == "H":
                    _print_history(ctx)
                elif _save_single(ctx):
                    grid.load_rows()
            except InputValidationError as exc:
                print_error(exc)
            except RuleViolationError:
                pass  # shown by the global violation display
            except SessionError:
                raise
            except ProgressConsoleError as exc:
                print_error(exc)
