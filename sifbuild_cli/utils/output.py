"""
Output utilities for sifbuild CLI using Rich
"""

from typing import Sequence
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from sifbuild_core.model import BuildResult, Command

console = Console(highlight=False, soft_wrap=True)


def print_success(message: str):
    """Print success message with green checkmark"""
    console.print(f"✓ {message}", style="bold green")


def print_error(message: str):
    """Print error message with red X"""
    console.print(f"✗ {message}", style="bold red")


def print_warning(message: str):
    """Print warning message with yellow triangle"""
    console.print(f"⚠ {message}", style="bold yellow")


def print_info(message: str):
    """Print info message with blue icon"""
    console.print(f"ℹ {message}", style="bold blue")


def print_command(command: Command, prefix: str = ""):
    """Print a command line verbatim, without markup or wrapping"""
    console.print(f"{prefix}{command.render()}", markup=False, soft_wrap=True)


def print_result_table(result: BuildResult):
    """Print the steps of a build with their exit codes"""
    table = Table(title="Build steps", show_header=True, header_style="bold cyan")
    table.add_column("#")
    table.add_column("Command")
    table.add_column("Status")

    for index, step in enumerate(result.steps, start=1):
        if not step.ran:
            status = "[dim]not run[/dim]"
        elif step.succeeded:
            status = "[green]ok[/green]"
        else:
            status = f"[red]exit {step.returncode}[/red]"
        table.add_row(str(index), escape(step.command.render()), status)

    console.print(table)


class ConsoleReporter:
    """
    Rich implementation of the orchestrator's BuildReporter.
    """

    def info(self, message: str) -> None:
        print_info(escape(message))

    def warning(self, message: str) -> None:
        print_warning(escape(message))

    def planned(self, commands: Sequence[Command]) -> None:
        noun = "Command" if len(commands) == 1 else "Commands"
        console.print(f"{noun} that run when not in dry run (-d) mode:")
        for command in commands:
            print_command(command, prefix="  ")

    def running(self, command: Command) -> None:
        console.print()
        print_command(command, prefix="** Running: ")
