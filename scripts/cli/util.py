"""CLI utilities: formatting, prompts, logging mute/restore."""

import logging
from datetime import date
from decimal import Decimal

from progress_kernel.exceptions import InputValidationError, ProgressConsoleError

W = 72


def header(title: str) -> None:
    print()
    print("=" * W)
    print(f"  {title}".center(W))
    print("=" * W)


def fmt_qty(v) -> str:
    """Quantities: up to two decimals, thousands separators."""
    if v is None:
        return "-"
    d = Decimal(str(v))
    return f"{d:,.2f}".rstrip("0").rstrip(".") if d % 1 else f"{d:,.0f}"


def fmt_signed(v) -> str:
    d = Decimal(str(v))
    return f"+{fmt_qty(d)}" if d > 0 else fmt_qty(d)


def fmt_amount(v) -> str:
    if v is None:
        return "-"
    d = Decimal(str(v))
    return f"{d:,.2f}"


def fmt_date(d: date | None) -> str:
    return d.isoformat() if d else "-"


def ask(label: str, default: str | None = None) -> str:
    suffix = f" [{default}]" if default else ""
    value = input(f"  {label}{suffix}: ").strip()
    return value or (default or "")


def ask_int(label: str) -> int | None:
    raw = ask(label)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        print(f"  Not a number: {raw}")
        return None


def ask_date(label: str, default: date | None = None) -> date | None:
    raw = ask(label, default.isoformat() if default else None)
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        print(f"  Not a date (YYYY-MM-DD): {raw}")
        return None


def confirm(question: str) -> bool:
    return ask(f"{question} [y/N]").lower() in ("y", "yes")


def print_error(exc: ProgressConsoleError) -> None:
    """Inline error line; field errors one per line."""
    if isinstance(exc, InputValidationError) and exc.field_errors:
        for field, message in exc.field_errors.items():
            print(f"  ! {field}: {message}")
        return
    print(f"  ! {exc}")


def enable_quiet_logging():
    """Mute console handlers so CLI output stays clean. Returns list to pass to restore_logging."""
    root = logging.getLogger("progress_console")
    muted = []
    for h in root.handlers:
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler):
            muted.append((h, h.level))
            h.setLevel(logging.CRITICAL + 1)
    return muted


def restore_logging(muted):
    for h, orig_level in muted:
        h.setLevel(orig_level)
