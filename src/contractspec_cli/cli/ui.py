"""Reusable UI helpers for ContractSpec CLI interactions."""

from __future__ import annotations

from typing import Mapping

import readchar
import typer
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.table import Table


def get_key() -> str:
    """Get a single keypress in a cross-platform way using readchar."""
    key = readchar.readkey()

    if key in (readchar.key.UP, readchar.key.CTRL_P, "k"):
        return "up"
    if key in (readchar.key.DOWN, readchar.key.CTRL_N, "j"):
        return "down"

    if key == readchar.key.ENTER:
        return "enter"

    if key == readchar.key.ESC or key == "\x1b":
        return "escape"

    if key == readchar.key.CTRL_C:
        raise KeyboardInterrupt

    return key


def select_with_arrows(
    options: Mapping[str, str],
    prompt_text: str = "Select an option",
    default_key: str | None = None,
    console: Console | None = None,
) -> str:
    """Let the operator pick one of *options* with the arrow keys.

    Args:
        options: Mapping of returned key -> label shown to the operator.
        prompt_text: Panel title.
        default_key: Option highlighted initially.
        console: Console to render on.

    Returns:
        The key of the chosen option.

    Raises:
        typer.Exit: If the operator cancels with Esc or Ctrl+C.
    """
    console = console or Console()
    option_keys = list(options.keys())
    if not option_keys:
        raise ValueError("select_with_arrows() requires at least one option")

    selected_index = option_keys.index(default_key) if default_key in option_keys else 0

    def build_panel() -> Panel:
        table = Table.grid(padding=(0, 2))
        table.add_column(style="cyan", justify="left", width=3)
        table.add_column(style="white", justify="left")

        for i, key in enumerate(option_keys):
            if i == selected_index:
                table.add_row("▶", f"[bold cyan]{options[key]}[/bold cyan]")
            else:
                table.add_row(" ", options[key])

        table.add_row("", "")
        table.add_row("", "[dim]Use ↑/↓ to navigate, Enter to select, Esc to cancel[/dim]")

        return Panel(
            table,
            title=f"[bold]{prompt_text}[/bold]",
            border_style="cyan",
            padding=(1, 2),
        )

    console.print()

    with Live(build_panel(), console=console, transient=True, auto_refresh=False) as live:
        while True:
            try:
                key = get_key()
            except KeyboardInterrupt:
                console.print("\n[yellow]Selection cancelled[/yellow]")
                raise typer.Exit(1)

            if key == "up":
                selected_index = (selected_index - 1) % len(option_keys)
            elif key == "down":
                selected_index = (selected_index + 1) % len(option_keys)
            elif key == "enter":
                return option_keys[selected_index]
            elif key == "escape":
                console.print("\n[yellow]Selection cancelled[/yellow]")
                raise typer.Exit(1)

            live.update(build_panel(), refresh=True)


__all__ = ["get_key", "select_with_arrows"]
