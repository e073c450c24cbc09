"""CLI view: confirm (freeze) the selected WBS node."""

from progress_kernel.exceptions import AuthorizationDeniedError, InputValidationError
from progress_modules.confirmation import ConfirmationWorkflow, LockLevel
from scripts.cli.util import W, ask, ask_date, ask_int, confirm, fmt_date, fmt_qty, header, print_error


def _print_state(flow: ConfirmationWorkflow) -> None:
    banner = flow.banner()
    marker = {LockLevel.BLOCKING: "!!", LockLevel.INFORMATIONAL: " i", LockLevel.NONE: "  "}[banner.level]
    print(f"\n  {marker} {banner.text}")
    s = flow.summary
    if s is not None:
        print(
            f"\n  Planned {fmt_qty(s.planned_qty)}   Actual {fmt_qty(s.actual_qty)}   "
            f"Confirmed to date {fmt_qty(s.confirmed_qty_to_date)}   "
            f"Last confirmed {fmt_date(s.last_confirmation_date)}"
        )
    if flow.selected_date is not None:
        print(f"  Preview for {fmt_date(flow.selected_date)}: {fmt_qty(flow.preview_qty)}")
    print(f"\n  {'ID':>6}  {'Date':<10} {'Qty':>10}  {'Remarks':<30}")
    print("  " + "-" * (W - 4))
    latest = flow.latest_confirmation()
    for c in sorted(flow.history, key=lambda c: c.confirmation_date, reverse=True):
        tag = "  latest" if latest is not None and c.confirmation_id == latest.confirmation_id else ""
        print(f"  {c.confirmation_id:>6}  {fmt_date(c.confirmation_date):<10} {fmt_qty(c.confirmed_qty):>10}  {(c.remarks or '')[:30]:<30}{tag}")
    if not flow.history:
        print("    (no confirmations)")
    if flow.error_message:
        print(f"\n  ! {flow.error_message}")


def show_confirmations(ctx):
    if ctx.wbs is None:
        print("\n  Select a WBS node first (P).\n")
        return
    flow = ConfirmationWorkflow(ctx.confirmations, ctx.auth, ctx.wbs.wbs_id, ctx.clock)
    flow.load()

    while True:
        header(f"CONFIRMATIONS  {ctx.wbs.wbs_code} {ctx.wbs.wbs_name}")
        _print_state(flow)
        actions = ["D pick date"]
        if flow.can_confirm:
            actions.append("C confirm")
        if flow.can_undo:
            actions.append("U undo latest")
        actions += ["L reload", "Q back"]
        print("\n  " + "   ".join(actions))
        choice = ask("Pick").upper()
        if choice == "Q":
            return
        if choice == "L":
            flow.load()
        elif choice == "D":
            day = ask_date("Confirmation date", ctx.clock.today())
            if day is not None:
                flow.select_date(day)
        elif choice == "C":
            flow.remarks = ask("Remarks") or None
            try:
                prompt = flow.begin_confirm()
            except (AuthorizationDeniedError, InputValidationError) as exc:
                print_error(exc)
                continue
            if confirm(prompt.text):
                if flow.confirm() is not None:
                    print("  WBS confirmed.")
            else:
                flow.cancel_confirm()
        elif choice == "U":
            confirmation_id = ask_int("Confirmation ID")
            if confirmation_id is None:
                continue
            try:
                undone = flow.undo(
                    confirmation_id,
                    lambda c: confirm(f"Undo confirmation of {fmt_date(c.confirmation_date)}?"),
                )
            except (AuthorizationDeniedError, InputValidationError) as exc:
                print_error(exc)
                continue
            if undone:
                print("  Confirmation undone.")
