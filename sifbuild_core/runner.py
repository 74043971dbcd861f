"""
Process spawning for external build tools
"""

import logging
import subprocess
from pathlib import Path

from sifbuild_core.constants import COMMAND_NOT_FOUND
from sifbuild_core.model.command import Command

logger = logging.getLogger(__name__)


class CommandRunner:
    """
    Runs Command objects without a shell.

    ``run`` streams output to the terminal and returns the exit status.
    ``capture`` collects text output for short queries such as image lookups.
    """

    def __init__(self, cwd: str | Path | None = None):
        self.cwd = Path(cwd) if cwd is not None else None

    def run(self, command: Command) -> int:
        """
        Run a command to completion.

        Args:
            command: Command to spawn

        Returns:
            Exit status, or 127 when the program could not be found
        """
        logger.debug("Spawning %s", command.argv)
        try:
            result = subprocess.run(command.argv, cwd=self.cwd, capture_output=False)
        except FileNotFoundError:
            logger.error("Program not found: %s", command.program)
            return COMMAND_NOT_FOUND
        logger.debug("%s exited with %d", command.program, result.returncode)
        return result.returncode

    def capture(self, command: Command) -> subprocess.CompletedProcess:
        """
        Run a command and capture its text output.

        A missing program yields a CompletedProcess with status 127 and
        empty stdout.
        """
        logger.debug("Querying %s", command.argv)
        try:
            return subprocess.run(
                command.argv,
                cwd=self.cwd,
                capture_output=True,
                text=True
            )
        except FileNotFoundError:
            logger.error("Program not found: %s", command.program)
            return subprocess.CompletedProcess(command.argv, COMMAND_NOT_FOUND, "", "")
