"""CLI menu: print main menu."""

from scripts.cli.util import W


def print_menu(ctx):
    """Print the main interactive menu with the current working context."""
    user = ctx.auth.current_user()
    tenant = ctx.auth.current_tenant()
    print()
    print("=" * W)
    print("  PROJECT PROGRESS CONSOLE".center(W))
    print("=" * W)
    print(f"  User: {user.display_name}" + (f"   Tenant: {tenant.tenant_code}" if tenant else ""))
    wbs = f"{ctx.wbs.wbs_code} {ctx.wbs.wbs_name}" if ctx.wbs else "(none)"
    task = ctx.task.label if ctx.task else "(none)"
    print(f"  WBS:  {wbs}")
    print(f"  Task: {task}")
    print()
    print("  Navigate:")
    print("    P   Pick project / WBS / task")
    print()
    print("  Task:")
    print("    U   Day-wise updates (plan vs actual)")
    print("    V   Plan versions (create, activate, revert, compare)")
    print()
    print("  WBS:")
    print("    C   Confirmations (freeze, undo)")
    print("    R   Resource allocations")
    print()
    print("  Admin:")
    print("    B   Business rules")
    print("    M   Master data (codes, bulk upload)")
    print("    S   Project structure (projects, WBS, tasks)")
    print()
    print("  Other:")
    print("    O   Log out")
    print("    Q   Quit")
    print()
