"""
Error handling utilities for sifbuild CLI
"""

import sys
from typing import Optional
from rich.markup import escape
from rich.panel import Panel

from sifbuild_core.exceptions import (
    SifBuildError, ConflictingSourcesError, MissingSourceError, InvalidContainerKindError,
    InvalidVersionError, InvalidToolNameError, ConfigurationError, KindDisabledError, SourceNotFoundError,
    OutputExistsError, DependencyError, ImageNotFoundError, CommandFailedError
)
from sifbuild_cli.utils.config import SYSTEM_CONFIG_PATH
from sifbuild_cli.utils.output import console


class CLIError(Exception):
    """Base exception for CLI errors"""

    def __init__(self, message: str, exit_code: int = 1):
        self.message = message
        self.exit_code = exit_code
        super().__init__(message)


def format_exception(exc: Exception, context: Optional[str] = None) -> str:
    """
    Format exception with context

    Args:
        exc: The exception to format
        context: Optional context about where error occurred

    Returns:
        Formatted error message
    """
    lines = []

    if context:
        lines.append(f"Error in {context}:")

    lines.append(f"{type(exc).__name__}: {str(exc)}")

    return "\n".join(lines)


def suggest_fix(exc: Exception) -> Optional[str]:
    """
    Suggest fixes for common errors

    Args:
        exc: The exception to analyze

    Returns:
        Suggestion string or None
    """
    if isinstance(exc, (ConflictingSourcesError, MissingSourceError)):
        return "Pass exactly one of -a, -b or -c."

    if isinstance(exc, InvalidContainerKindError):
        return "Use -t sandbox or -t sif."

    if isinstance(exc, KindDisabledError):
        return f"Container kinds are enabled by the administrator under 'policy' in {SYSTEM_CONFIG_PATH}."

    if isinstance(exc, ConfigurationError):
        return "Policy switches take the YAML booleans true or false, unquoted."

    if isinstance(exc, InvalidVersionError):
        return "Versions are dotted numbers, e.g. -v 1.28 or -v 2.3.4."

    if isinstance(exc, InvalidToolNameError):
        return "Pass the container name prefix with -n, e.g. -n mytool."

    if isinstance(exc, SourceNotFoundError):
        return "Check that the path exists and is spelled correctly."

    if isinstance(exc, OutputExistsError):
        return "Remove the existing container or choose another -n/-v."

    if isinstance(exc, DependencyError):
        return f"Install {exc.program or 'the tool'} or make its environment module available."

    if isinstance(exc, ImageNotFoundError):
        return "List local images with 'podman images' and check the reference."

    if isinstance(exc, CommandFailedError):
        return "Scroll up for the output of the failing command."

    error_msg = str(exc).lower()

    if "permission denied" in error_msg:
        return "Check file permissions or run with appropriate privileges."

    if "yaml" in error_msg:
        return "Check that the configuration file is valid YAML."

    return None


def show_error(exc: Exception, context: Optional[str] = None, verbose: bool = False):
    """
    Display error message to user

    Args:
        exc: The exception to display
        context: Optional context about where error occurred
        verbose: Show full traceback if True
    """
    if verbose and not isinstance(exc, (SifBuildError, CLIError)):
        # Show full traceback in verbose mode
        console.print_exception()
    else:
        # Show formatted error message
        error_msg = format_exception(exc, context)
        console.print(Panel(escape(error_msg), title="Error", border_style="red"))

        # Show suggestion if available
        suggestion = suggest_fix(exc)
        if suggestion:
            console.print(f"\n💡 [cyan]Suggestion:[/cyan] {escape(suggestion)}")


def handle_cli_error(exc: Exception, verbose: bool = False):
    """
    Handle CLI error and exit with appropriate code

    Args:
        exc: The exception to handle
        verbose: Show full traceback if True
    """
    if isinstance(exc, CLIError):
        show_error(exc, verbose=verbose)
        sys.exit(exc.exit_code)
    else:
        show_error(exc, verbose=verbose)
        sys.exit(1)
