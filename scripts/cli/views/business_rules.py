"""CLI view: tenant business-rule administration."""

from progress_kernel.exceptions import ProgressConsoleError, RuleViolationError, SessionError
from progress_modules.business_rules import BusinessRuleDraft, filter_rules
from scripts.cli.util import W, ask, ask_int, confirm, header, print_error


def _edit_draft(draft: BusinessRuleDraft | None) -> BusinessRuleDraft:
    rule_number = ask_int(f"Rule number{f' [{draft.rule_number}]' if draft else ''}")
    return BusinessRuleDraft(
        rule_number=rule_number if rule_number is not None else (draft.rule_number if draft else None),
        control_point=ask("Control point", draft.control_point if draft else None),
        applicability=ask("Applicability Y/N", draft.applicability if draft else "Y").upper(),
        rule_value=ask("Rule value", draft.rule_value if draft else None) or None,
        description=ask("Description", draft.description if draft else None) or None,
        active=draft.active if draft else True,
    )


def show_business_rules(ctx):
    control_point = None
    active_only = False
    query = None

    while True:
        header("BUSINESS RULES")
        try:
            rules = ctx.rules.list_rules()
        except SessionError:
            raise
        except ProgressConsoleError as exc:
            print_error(exc)
            return
        shown = filter_rules(rules, control_point, active_only, query)
        filters = [f"control point={control_point}" if control_point else "", "active only" if active_only else "", f"search='{query}'" if query else ""]
        active_filters = ", ".join(f for f in filters if f)
        if active_filters:
            print(f"  Filter: {active_filters}")
        print(f"  {'ID':>5}  {'No.':>5}  {'Control point':<18} {'App':<3} {'Value':<10} {'Description':<20}")
        print("  " + "-" * (W - 4))
        for r in shown:
            flag = "" if r.active else "  (inactive)"
            print(
                f"  {r.rule_id:>5}  {r.rule_number:>5}  {r.control_point[:18]:<18} {r.applicability:<3} "
                f"{(r.rule_value or '')[:10]:<10} {(r.description or '')[:20]:<20}{flag}"
            )
        print(f"\n  {len(shown)} of {len(rules)} rules")
        print("\n  F filter   N new   E edit   T toggle active   D delete   V validate   Q back")
        choice = ask("Pick").upper()
        if choice == "Q":
            return
        by_id = {r.rule_id: r for r in rules}
        try:
            if choice == "F":
                points = ctx.rules.control_points()
                print("  Control points: " + ", ".join(points))
                control_point = ask("Control point (blank for any)") or None
                active_only = confirm("Active only?")
                query = ask("Search (number, description, control point)") or None
            elif choice == "N":
                ctx.rules.create_rule(_edit_draft(None))
                print("  Rule created.")
            elif choice == "E":
                rule = by_id.get(ask_int("Rule ID"))
                if rule is None:
                    print("  No such rule.")
                    continue
                ctx.rules.update_rule(rule.rule_id, _edit_draft(BusinessRuleDraft.from_rule(rule)))
                print("  Rule updated.")
            elif choice == "T":
                rule = by_id.get(ask_int("Rule ID"))
                if rule is None:
                    print("  No such rule.")
                    continue
                toggled = ctx.rules.toggle_active(rule.rule_id)
                print(f"  Rule {toggled.rule_number} is now {'active' if toggled.active else 'inactive'}.")
            elif choice == "D":
                rule = by_id.get(ask_int("Rule ID"))
                if rule is not None and confirm(f"Delete rule {rule.rule_number}?"):
                    ctx.rules.delete_rule(rule.rule_id)
                    print("  Rule deleted.")
            elif choice == "V":
                rule_number = ask_int("Rule number")
                if rule_number is None:
                    continue
                check = ctx.rules.validate_single(
                    rule_number,
                    entity_type=ask("Entity type (e.g. TASK_UPDATE)") or None,
                    entity_id=ask_int("Entity ID"),
                    update_date=ctx.clock.today(),
                )
                if check.valid:
                    print(f"  {check.message}")
                else:
                    print(f"  {check.violation.rule_label}: {check.message}")
                    if check.violation.hint:
                        print(f"  Hint: {check.violation.hint}")
        except RuleViolationError:
            pass  # shown by the global violation display
        except SessionError:
            raise
        except ProgressConsoleError as exc:
            print_error(exc)
