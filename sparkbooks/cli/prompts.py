"""Small prompt helpers shared by the menus."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import questionary
from rich.console import Console

from sparkbooks.models import parse_money

console = Console()


def ask_money(message: str, default: str = "", allow_zero: bool = True) -> Decimal | None:
    """Prompt until a valid amount is typed. ``None`` means the user cancelled."""
    while True:
        answer = questionary.text(message, default=default).ask()
        if answer is None:
            return None
        parsed = parse_money(answer)
        if parsed is not None and (parsed > 0 or (allow_zero and parsed == 0)):
            return parsed
        console.print("[red]Invalid amount. Try again.[/red]")


def ask_date(message: str, default: date | None = None) -> date | None:
    """Prompt for an ISO date. Empty input keeps ``default``."""
    while True:
        answer = questionary.text(message, default=default.isoformat() if default else "").ask()
        if answer is None:
            return None
        answer = answer.strip()
        if not answer:
            return default
        try:
            return date.fromisoformat(answer)
        except ValueError:
            console.print("[red]Invalid date. Use YYYY-MM-DD.[/red]")


def optional(text: str | None) -> str | None:
    if text is None:
        return None
    text = text.strip()
    return text or None
