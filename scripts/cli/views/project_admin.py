"""CLI view: create, edit and delete projects, WBS nodes and tasks."""

from decimal import Decimal, InvalidOperation

from progress_kernel.exceptions import (
    InputValidationError,
    ProgressConsoleError,
    RuleViolationError,
    SessionError,
)
from progress_modules.projects import ProjectDraft, TaskDraft, WbsDraft
from scripts.cli.util import W, ask, ask_date, ask_int, confirm, fmt_date, fmt_qty, header, print_error


def _ask_qty(label: str, default: Decimal | None = None) -> Decimal | None:
    raw = ask(label, str(default) if default is not None else None)
    if not raw:
        return None
    try:
        return Decimal(raw)
    except InvalidOperation:
        raise InputValidationError({"plannedQty": "Enter a number"}) from None


def _project_form(current: ProjectDraft | None = None) -> ProjectDraft:
    current = current or ProjectDraft("", "")
    return ProjectDraft(
        project_code=ask("Project code", current.project_code or None),
        project_name=ask("Project name", current.project_name or None),
        description=ask("Description", current.description) or None,
        start_date=ask_date("Start date", current.start_date),
        end_date=ask_date("End date", current.end_date),
        status=ask("Status", current.status) or None,
    )


def _wbs_form(current: WbsDraft) -> WbsDraft:
    return WbsDraft(
        project_id=current.project_id,
        parent_wbs_id=ask_int("Parent WBS ID (blank for root)") if current.parent_wbs_id is None else current.parent_wbs_id,
        wbs_code=ask("WBS code", current.wbs_code or None),
        wbs_name=ask("WBS name", current.wbs_name or None),
        start_date=ask_date("Start date", current.start_date),
        end_date=ask_date("End date", current.end_date),
        planned_qty=_ask_qty("Planned qty", current.planned_qty),
        status=ask("Status", current.status) or None,
    )


def _task_form(current: TaskDraft) -> TaskDraft:
    return TaskDraft(
        project_id=current.project_id,
        wbs_id=current.wbs_id,
        task_code=ask("Task code", current.task_code or None),
        task_name=ask("Task name", current.task_name or None),
        start_date=ask_date("Start date", current.start_date),
        end_date=ask_date("End date", current.end_date),
        planned_qty=_ask_qty("Planned qty", current.planned_qty),
        unit=ask("Unit", current.unit) or None,
        status=ask("Status", current.status) or None,
    )


def _run(action) -> None:
    """Run one maintenance action; errors print inline and the screen stays."""
    try:
        action()
    except InputValidationError as exc:
        print_error(exc)
    except RuleViolationError:
        pass  # shown by the global violation display
    except SessionError:
        raise
    except ProgressConsoleError as exc:
        print_error(exc)


def _tasks_screen(ctx, wbs) -> None:
    while True:
        header(f"TASKS  {wbs.wbs_code} {wbs.wbs_name}")
        try:
            tasks = ctx.projects.list_tasks(wbs.wbs_id)
        except SessionError:
            raise
        except ProgressConsoleError as exc:
            print_error(exc)
            return
        for t in tasks:
            print(f"  {t.task_id:>6}  {t.label[:40]:<40} {fmt_qty(t.planned_qty):>8} {t.unit or '':<6} {fmt_date(t.start_date)}")
        if not tasks:
            print("    (no tasks)")
        print("\n  N new   E edit   D delete   Q back")
        choice = ask("Pick").upper()
        if choice == "Q":
            return
        by_id = {t.task_id: t for t in tasks}

        def new():
            ctx.projects.create_task(_task_form(TaskDraft(wbs.project_id, wbs.wbs_id, "", "")))
            print("  Task created.")

        def edit():
            task = by_id.get(ask_int("Task ID"))
            if task is None:
                print("  No such task.")
                return
            ctx.projects.update_task(task.task_id, _task_form(TaskDraft.of(task)))
            print("  Task updated.")

        def delete():
            task = by_id.get(ask_int("Task ID"))
            if task is not None and confirm(f"Delete task {task.label}?"):
                ctx.projects.delete_task(task.task_id)
                if ctx.task is not None and ctx.task.task_id == task.task_id:
                    ctx.task = None
                print("  Task deleted.")

        action = {"N": new, "E": edit, "D": delete}.get(choice)
        if action is not None:
            _run(action)


def _wbs_screen(ctx, project) -> None:
    while True:
        header(f"WBS  {project.project_code} {project.project_name}")
        try:
            roots = ctx.projects.wbs_hierarchy(project.project_id)
        except SessionError:
            raise
        except ProgressConsoleError as exc:
            print_error(exc)
            return
        nodes = {}
        for root in roots:
            for depth, node in root.walk():
                nodes[node.wbs_id] = node
                name = f"{'  ' * depth}{node.wbs_code} {node.wbs_name}"
                print(f"  {node.wbs_id:>6}  {name[:44]:<44} {fmt_qty(node.planned_qty):>8}")
        if not nodes:
            print("    (no WBS nodes)")
        print("\n  N new   E edit   D delete   T tasks   Q back")
        choice = ask("Pick").upper()
        if choice == "Q":
            return

        def new():
            ctx.projects.create_wbs(_wbs_form(WbsDraft(project.project_id, "", "")))
            print("  WBS created.")

        def edit():
            node = nodes.get(ask_int("WBS ID"))
            if node is None:
                print("  No such WBS.")
                return
            ctx.projects.update_wbs(node.wbs_id, _wbs_form(WbsDraft.of(node)))
            print("  WBS updated.")

        def delete():
            node = nodes.get(ask_int("WBS ID"))
            if node is not None and confirm(f"Delete {node.wbs_code} and everything under it?"):
                ctx.projects.delete_wbs(node.wbs_id)
                if ctx.wbs is not None and ctx.wbs.wbs_id == node.wbs_id:
                    ctx.wbs = None
                    ctx.task = None
                print("  WBS deleted.")

        if choice == "T":
            node = nodes.get(ask_int("WBS ID"))
            if node is None:
                print("  No such WBS.")
            else:
                _tasks_screen(ctx, node)
            continue
        action = {"N": new, "E": edit, "D": delete}.get(choice)
        if action is not None:
            _run(action)


def show_project_admin(ctx):
    while True:
        header("PROJECT STRUCTURE")
        try:
            projects = ctx.projects.list_projects(size=50)
        except SessionError:
            raise
        except ProgressConsoleError as exc:
            print_error(exc)
            return
        print(f"  {'ID':>6}  {'Code':<14} {'Name':<34} {'Status':<10}")
        print("  " + "-" * (W - 4))
        for p in projects:
            print(f"  {p.project_id:>6}  {p.project_code[:14]:<14} {p.project_name[:34]:<34} {(p.status or '')[:10]:<10}")
        if not projects:
            print("    (none)")
        print("\n  N new   E edit   D delete   W WBS and tasks   Q back")
        choice = ask("Pick").upper()
        if choice == "Q":
            return
        by_id = {p.project_id: p for p in projects}

        def new():
            ctx.projects.create_project(_project_form())
            print("  Project created.")

        def edit():
            project = by_id.get(ask_int("Project ID"))
            if project is None:
                print("  No such project.")
                return
            ctx.projects.update_project(project.project_id, _project_form(ProjectDraft.of(project)))
            print("  Project updated.")

        def delete():
            project = by_id.get(ask_int("Project ID"))
            if project is not None and confirm(f"Delete {project.project_code} with its WBS and tasks?"):
                ctx.projects.delete_project(project.project_id)
                if ctx.wbs is not None and ctx.wbs.project_id == project.project_id:
                    ctx.wbs = None
                    ctx.task = None
                print("  Project deleted.")

        if choice == "W":
            project = by_id.get(ask_int("Project ID"))
            if project is None:
                print("  No such project.")
            else:
                _wbs_screen(ctx, project)
            continue
        action = {"N": new, "E": edit, "D": delete}.get(choice)
        if action is not None:
            _run(action)
