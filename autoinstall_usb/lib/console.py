"""Operator-facing output.

Everything printed here is also sent to the log so the log file holds the
full story of a run, not only the commands.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.markup import escape

logger = logging.getLogger("autoinstall_usb.console")

console = Console(highlight=False, emoji=False, soft_wrap=True)


def log(msg: str) -> None:
    logger.info(msg)
    console.print(f"[bold blue]==> {escape(msg)}[/bold blue]")


def ok(msg: str) -> None:
    logger.info(msg)
    console.print(f"[green]✓ {escape(msg)}[/green]")


def warn(msg: str) -> None:
    logger.warning(msg)
    console.print(f"[yellow]! {escape(msg)}[/yellow]")


def info(msg: str) -> None:
    logger.info(msg)
    console.print(f"[cyan]  {escape(msg)}[/cyan]")


def error(msg: str) -> None:
    logger.error(msg)
    console.print(f"[bold red]✗ {escape(msg)}[/bold red]")


def plain(msg: str = "") -> None:
    console.print(escape(msg))


def ask(prompt: str) -> str:
    """Read one line from the operator. A closed stdin reads as an empty answer."""

    try:
        answer = console.input(f"[bold]{escape(prompt)}[/bold]")
    except EOFError:
        console.print()
        logger.info("Prompt %r got end of input", prompt)
        return ""
    logger.info("Prompt %r answered %r", prompt, answer)
    return answer
