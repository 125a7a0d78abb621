"""
ContractSpec CLI - guided workflows for contract-first API development.

Usage:
    contractspec vibe list
    contractspec vibe run <workflow-id> [--track quick|product|regulated] [--dry-run]
"""

import sys

import typer
from rich.align import Align
from rich.console import Console
from rich.text import Text
from typer.core import TyperGroup

from contractspec_cli.cli.commands import vibe

TAGLINE = "ContractSpec - contract-first API development"

console = Console()


class BannerGroup(TyperGroup):
    """Custom group that shows the tagline before help."""

    def format_help(self, ctx, formatter):
        show_banner()
        super().format_help(ctx, formatter)


app = typer.Typer(
    name="contractspec",
    help="Manage ContractSpec contracts and run guided workflows",
    add_completion=False,
    invoke_without_command=True,
    cls=BannerGroup,
)

app.add_typer(vibe.app, name="vibe")


def show_banner():
    """Display the tagline."""
    console.print(Align.center(Text(TAGLINE, style="bold bright_cyan")))
    console.print()


@app.callback()
def callback(ctx: typer.Context):
    """Show the tagline when no subcommand is provided."""
    if ctx.invoked_subcommand is None and "--help" not in sys.argv and "-h" not in sys.argv:
        show_banner()
        console.print(Align.center("[dim]Run 'contractspec --help' for usage information[/dim]"))
        console.print()


def main():
    app()


if __name__ == "__main__":
    main()
