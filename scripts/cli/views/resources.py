"""CLI view: manpower and equipment allocations on the selected WBS."""

from decimal import Decimal, InvalidOperation

from progress_kernel.exceptions import (
    InputValidationError,
    ProgressConsoleError,
    RuleViolationError,
    SessionError,
)
from progress_modules.resources import AllocationForm, ResourceType
from scripts.cli.util import W, ask, ask_date, ask_int, confirm, fmt_amount, fmt_date, header, print_error


def _print_allocations(ctx, wbs_id: int) -> dict:
    by_id = {}
    for rtype in ResourceType:
        allocations = ctx.resources.list_allocations(rtype, wbs_id)
        print(f"\n  --- {rtype.value.title()} ---")
        if not allocations:
            print("    (none)")
            continue
        print(f"    {'ID':>6}  {'Resource':<24} {'From':<10} {'To':<10} {'Cost':>12}")
        print(f"    {'-'*6}  {'-'*24} {'-'*10} {'-'*10} {'-'*12}")
        for a in allocations:
            by_id[(rtype, a.allocation_id)] = a
            print(
                f"    {a.allocation_id:>6}  {a.resource_name[:24]:<24} {fmt_date(a.start_date):<10} "
                f"{fmt_date(a.end_date):<10} {fmt_amount(a.total_cost):>12}"
            )
    summary = ctx.resources.cost_summary(wbs_id)
    print(
        f"\n  Cost: manpower {fmt_amount(summary.manpower_cost)}   "
        f"equipment {fmt_amount(summary.equipment_cost)}   total {fmt_amount(summary.total_cost)}"
    )
    return by_id


def _pick_type() -> ResourceType | None:
    raw = ask("Type (M)anpower / (E)quipment").upper()
    if raw.startswith("M"):
        return ResourceType.MANPOWER
    if raw.startswith("E"):
        return ResourceType.EQUIPMENT
    return None


def _fill_form(ctx, form: AllocationForm) -> bool:
    options = ctx.resources.options(form.resource_type, ask("Search resources") or None)
    for o in options:
        rate = f"  {fmt_amount(o.rate_per_day)}/day" if o.rate_per_day is not None else ""
        print(f"    {o.id:>6}  {o.name[:30]:<30} {o.category or ''}{rate}")
    resource_id = ask_int("Resource ID")
    if resource_id is None and form.resource_id is None:
        return False
    if resource_id is not None:
        form.set_resource(resource_id)
    form.set_dates(
        ask_date("Start date", form.start_date or ctx.clock.today()),
        ask_date("End date", form.end_date),
    )
    raw_hours = ask("Hours per day", str(form.hours_per_day) if form.hours_per_day is not None else None)
    try:
        form.hours_per_day = Decimal(raw_hours) if raw_hours else None
    except InvalidOperation:
        print(f"  Not a number: {raw_hours}")
        return False
    form.remarks = ask("Remarks", form.remarks) or None
    if form.preview is not None:
        p = form.preview
        print(f"\n  Estimated: {p.total_days} day(s) x {fmt_amount(p.rate_per_day)} = {fmt_amount(p.total_cost)}")
    else:
        print("\n  No cost estimate available.")
    return True


def show_resources(ctx):
    if ctx.wbs is None:
        print("\n  Select a WBS node first (P).\n")
        return
    wbs_id = ctx.wbs.wbs_id

    while True:
        header(f"RESOURCES  {ctx.wbs.wbs_code} {ctx.wbs.wbs_name}")
        try:
            allocations = _print_allocations(ctx, wbs_id)
        except SessionError:
            raise
        except ProgressConsoleError as exc:
            print_error(exc)
            allocations = {}
        print("\n  N new   E edit   D delete   T timeline   Q back")
        choice = ask("Pick").upper()
        if choice == "Q":
            return
        try:
            if choice == "N":
                rtype = _pick_type()
                if rtype is None:
                    continue
                form = AllocationForm(ctx.resources, rtype, wbs_id)
                if _fill_form(ctx, form) and confirm("Save allocation?"):
                    form.submit()
                    print("  Allocation saved.")
            elif choice == "E":
                rtype = _pick_type()
                allocation = allocations.get((rtype, ask_int("Allocation ID")))
                if allocation is None:
                    print("  No such allocation.")
                    continue
                form = AllocationForm.for_existing(ctx.resources, allocation)
                if _fill_form(ctx, form) and confirm("Save changes?"):
                    form.submit()
                    print("  Allocation updated.")
            elif choice == "D":
                rtype = _pick_type()
                allocation = allocations.get((rtype, ask_int("Allocation ID")))
                if allocation is None:
                    print("  No such allocation.")
                    continue
                if confirm(f"Delete allocation of {allocation.resource_name}?"):
                    ctx.resources.delete_allocation(rtype, allocation.allocation_id)
                    print("  Allocation deleted.")
            elif choice == "T":
                print()
                for item in ctx.resources.timeline(wbs_id):
                    print(
                        f"    {item.resource_type:<10} {item.resource_name[:28]:<28} "
                        f"{fmt_date(item.start_date)} .. {fmt_date(item.end_date)}  ({item.duration_days}d)"
                    )
                ask("Enter to continue")
        except InputValidationError as exc:
            print_error(exc)
        except RuleViolationError:
            pass  # shown by the global violation display
        except SessionError:
            raise
        except ProgressConsoleError as exc:
            print_error(exc)
