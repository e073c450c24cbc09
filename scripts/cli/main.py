"""CLI main loop: login, menu dispatch, forced logout back to login."""

import getpass
import logging
import sys

from progress_kernel.exceptions import ProgressConsoleError, SessionError
from progress_kernel.logging_config import configure_logging, get_logger
from scripts.cli import config as cli_config
from scripts.cli.context import build_context
from scripts.cli.menu import print_menu
from scripts.cli.util import ask, print_error
from scripts.cli.views import (
    GlobalViolationModal,
    show_business_rules,
    show_confirmations,
    show_daywise,
    show_master_data,
    show_navigator,
    show_plans,
    show_project_admin,
    show_resources,
)


logger = get_logger("cli")


class _FlushingFileHandler(logging.FileHandler):
    """FileHandler that flushes after every emit so the console log updates immediately."""

    def emit(self, record: logging.LogRecord) -> None:
        super().emit(record)
        self.flush()


def _setup_logging():
    log_path = cli_config.LOG_PATH
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = _FlushingFileHandler(str(log_path), mode="a")
    configure_logging(level=cli_config.SETTINGS.log_level, handler=handler)
    logger.info("console_starting", extra={"log_path": str(log_path)})
    return log_path


def _login(ctx) -> bool:
    """Prompt until login succeeds; False when the user gives up."""
    print("\n  Log in to", cli_config.SETTINGS.api_base_url)
    while True:
        tenant = ask("Tenant code")
        if not tenant:
            return False
        email = ask("Email")
        password = getpass.getpass("  Password: ")
        try:
            user = ctx.auth.login(tenant, email, password)
        except ProgressConsoleError as exc:
            print_error(exc)
            continue
        print(f"\n  Welcome, {user.display_name}.")
        return True


def _session_loop(ctx) -> bool:
    """Menu loop for one login; True to go back to login, False to quit."""
    views = {
        "P": show_navigator,
        "V": show_plans,
        "C": show_confirmations,
        "R": show_resources,
        "B": show_business_rules,
        "M": show_master_data,
        "S": show_project_admin,
    }
    with GlobalViolationModal(ctx.channel) as display:
        while True:
            try:
                print_menu(ctx)
                choice = ask("Pick").upper()
                if choice == "Q":
                    print("\n  Goodbye.\n")
                    return False
                if choice == "O":
                    ctx.auth.logout()
                    print("\n  Logged out.")
                    return True
                if choice == "U":
                    show_daywise(ctx, display.modal)
                elif choice in views:
                    views[choice](ctx)
                else:
                    print(f"\n  Unknown command '{choice}'. Try P, U, V, C, R, B, M, S, O, or Q.")
            except SessionError as exc:
                print(f"\n  {exc}\n  Please log in again.")
                ctx.wbs = None
                ctx.task = None
                return True


def main() -> int:
    log_path = _setup_logging()
    print(f"  Logging to: {log_path}", file=sys.stderr)

    ctx = build_context(cli_config.SETTINGS)
    ctx.client.add_session_listener(
        lambda reason: logger.info("forced_logout", extra={"reason": reason})
    )

    try:
        while True:
            if not ctx.auth.is_authenticated and not _login(ctx):
                break
            if not _session_loop(ctx):
                break
    except (EOFError, KeyboardInterrupt):
        print("\n")
    return 0
