"""CLI view: plan versions of the selected task."""

from decimal import Decimal, InvalidOperation

from progress_kernel.exceptions import (
    PlanVersionIntegrityError,
    ProgressConsoleError,
    RuleViolationError,
    SessionError,
)
from progress_modules.planning import (
    CreationMode,
    DailyEntry,
    DailyPlanLine,
    DateRangeSplit,
    PlanVersionBoard,
    SingleLineQuick,
    SplitType,
)
from scripts.cli.util import (
    W,
    ask,
    ask_date,
    ask_int,
    confirm,
    fmt_date,
    fmt_qty,
    fmt_signed,
    header,
    print_error,
)


def _decimal(raw: str) -> Decimal | None:
    try:
        return Decimal(raw.strip()) if raw.strip() else None
    except InvalidOperation:
        return None


def _print_versions(board: PlanVersionBoard) -> None:
    try:
        active = board.active_version
    except PlanVersionIntegrityError as exc:
        print(f"\n  ! {exc}")
        active = None
    print(f"  {'ID':>6}  {'Ver':>4}  {'Date':<10}  {'Description':<36}")
    print("  " + "-" * (W - 4))
    for v in board.versions:
        flag = "  ACTIVE" if v.is_active else ""
        print(f"  {v.version_id:>6}  {v.version_no:>4}  {fmt_date(v.version_date):<10}  {(v.description or '')[:36]:<36}{flag}")
    if not board.versions:
        print("    (no plan versions)")
    elif active is not None:
        print(f"\n  Active: version {active.version_no}")


def _read_creation(ctx):
    """Ask for a mode and its input; None when the user backs out."""
    print("  1 Daily entry   2 Date range split   3 Single line")
    mode = ask("Mode")
    if mode == "1":
        lines = []
        print("  Enter one line per date; blank date to finish.")
        while True:
            day = ask_date("Date")
            if day is None:
                break
            qty = _decimal(ask("Quantity"))
            lines.append(DailyPlanLine(day, qty))
        return CreationMode.DAILY_ENTRY, DailyEntry(tuple(lines))
    if mode == "2":
        start = ask_date("Start date")
        end = ask_date("End date")
        if start is None or end is None:
            return None
        total = _decimal(ask("Total quantity"))
        print("  Split: " + "  ".join(f"{i + 1} {s.value}" for i, s in enumerate(SplitType)))
        split_idx = ask_int("Split type") or 1
        split = list(SplitType)[max(0, min(split_idx, len(SplitType)) - 1)]
        count = None
        custom: tuple[Decimal, ...] = ()
        if split in (SplitType.EQUAL_SPLIT, SplitType.CUSTOM_SPLIT):
            count = ask_int("Split count")
        if split is SplitType.CUSTOM_SPLIT:
            raw = ask("Custom quantities (comma separated)")
            custom = tuple(q for q in (_decimal(x) for x in raw.split(",")) if q is not None)
        return CreationMode.DATE_RANGE_SPLIT, DateRangeSplit(start, end, total, split, count, custom)
    if mode == "3":
        day = ask_date("Date", ctx.clock.today())
        if day is None:
            return None
        return CreationMode.SINGLE_LINE_QUICK, SingleLineQuick(day, _decimal(ask("Quantity")))
    return None


def _print_comparison(comparison) -> None:
    v1, v2 = comparison.version1, comparison.version2
    print(f"\n  Version {v1.version_no} vs version {v2.version_no}")
    print(f"  {'Date':<10} {'V' + str(v1.version_no):>10} {'V' + str(v2.version_no):>10} {'Diff':>9}  Status")
    for line in comparison.lines:
        print(
            f"  {fmt_date(line.planned_date):<10} {fmt_qty(line.qty_version1):>10} "
            f"{fmt_qty(line.qty_version2):>10} {fmt_signed(line.difference or 0):>9}  {line.status.value}"
        )
    s = comparison.summary
    if s is not None:
        print(
            f"\n  Days {s.total_days_version1} -> {s.total_days_version2}  "
            f"(new {s.new_days}, removed {s.removed_days})  "
            f"Qty {fmt_qty(s.total_qty_version1)} -> {fmt_qty(s.total_qty_version2)}"
        )


def show_plans(ctx):
    if ctx.task is None:
        print("\n  Select a task first (P).\n")
        return
    board = PlanVersionBoard(ctx.plans, ctx.projects, ctx.task.task_id, ctx.rules)
    try:
        board.refresh()
    except SessionError:
        raise
    except ProgressConsoleError as exc:
        print_error(exc)
        return

    while True:
        header(f"PLAN VERSIONS  {board.task.label if board.task else ctx.task.label}")
        _print_versions(board)
        print("\n  V view lines   N new version   A activate   R revert   C compare   Q back")
        choice = ask("Pick").upper()
        if choice == "Q":
            return
        try:
            if choice == "V":
                version_id = ask_int("Version ID")
                if version_id is None:
                    continue
                for line in board.select(version_id):
                    print(f"    {line.line_number:>3}  {fmt_date(line.planned_date)}  {fmt_qty(line.planned_qty):>10}  {line.description or ''}")
            elif choice == "N":
                creation = _read_creation(ctx)
                if creation is None:
                    continue
                mode, payload = creation
                if board.create(mode, payload, description=ask("Description") or None):
                    print("  Plan version created.")
                else:
                    check = board.date_check
                    print(f"  ! {check.message} ({check.violation.rule_label})")
            elif choice == "A":
                version_id = ask_int("Version ID")
                if version_id is not None:
                    active = board.activate(version_id)
                    print(f"  Active version is now {active.version_no if active else '-'}.")
            elif choice == "R":
                version_id = ask_int("Version ID")
                if version_id is not None and board.revert(
                    version_id,
                    lambda v: confirm(f"Revert task to version {v.version_no}?"),
                ):
                    print("  Task reverted.")
            elif choice == "C":
                v1 = ask_int("First version ID")
                v2 = ask_int("Second version ID")
                if v1 is not None and v2 is not None:
                    _print_comparison(board.compare(v1, v2))
        except KeyError as exc:
            print(f"  ! {exc.args[0]}")
        except RuleViolationError:
            pass  # shown by the global violation display
        except SessionError:
            raise
        except ProgressConsoleError as exc:
            print_error(exc)
