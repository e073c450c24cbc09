"""CLI view: pick project, WBS node and task to work on."""

from progress_kernel.exceptions import ProgressConsoleError, SessionError
from scripts.cli.util import W, ask, ask_int, fmt_qty, header, print_error


def show_navigator(ctx):
    """Walk project -> WBS -> task; the picks become the working context."""
    header("PROJECTS")
    search = ask("Search (blank for all)")
    try:
        projects = ctx.projects.list_projects(search=search or None)
    except SessionError:
        raise
    except ProgressConsoleError as exc:
        print_error(exc)
        return
    if not projects:
        print("\n  No projects found.\n")
        return
    print(f"  {'ID':>6}  {'Code':<14} {'Name':<40}")
    print(f"  {'-'*6}  {'-'*14} {'-'*40}")
    for p in projects:
        print(f"  {p.project_id:>6}  {p.project_code[:14]:<14} {p.project_name[:40]:<40}")

    project_id = ask_int("Project ID")
    if project_id is None:
        return
    try:
        roots = ctx.projects.wbs_hierarchy(project_id)
    except SessionError:
        raise
    except ProgressConsoleError as exc:
        print_error(exc)
        return

    nodes = {}
    print()
    print(f"  {'WBS':>6}  {'Code / Name':<44} {'Plan':>8} {'Actual':>8}")
    print("  " + "-" * (W - 4))
    for root in roots:
        for depth, node in root.walk():
            nodes[node.wbs_id] = node
            name = f"{'  ' * depth}{node.wbs_code} {node.wbs_name}"
            lock = "  [locked]" if node.is_locked else ""
            print(f"  {node.wbs_id:>6}  {name[:44]:<44} {fmt_qty(node.planned_qty):>8} {fmt_qty(node.actual_qty):>8}{lock}")
    if not nodes:
        print("    (no WBS nodes)")
        return

    wbs_id = ask_int("WBS ID")
    if wbs_id is None:
        return
    if wbs_id not in nodes:
        print(f"  Unknown WBS {wbs_id}.")
        return
    ctx.wbs = nodes[wbs_id]
    ctx.task = None

    try:
        tasks = ctx.projects.list_tasks(wbs_id)
    except SessionError:
        raise
    except ProgressConsoleError as exc:
        print_error(exc)
        return
    if not tasks:
        print("\n  WBS selected; it has no tasks.\n")
        return
    print()
    for t in tasks:
        print(f"  {t.task_id:>6}  {t.label[:44]:<44} {fmt_qty(t.planned_qty):>8} {t.unit or ''}")
    task_id = ask_int("Task ID (blank to keep WBS only)")
    ctx.task = next((t for t in tasks if t.task_id == task_id), None)
    if task_id is not None and ctx.task is None:
        print(f"  Unknown task {task_id}.")
