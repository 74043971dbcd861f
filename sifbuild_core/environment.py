"""
Environment module provisioning

HPC sites ship apptainer and podman as environment modules (Lmod or
Environment Modules). ``module`` is a shell function, so loading one means
running a login shell and importing the environment it leaves behind.
"""

import logging
import os
import shlex
import shutil
import subprocess
from typing import MutableMapping

logger = logging.getLogger(__name__)


def parse_env_block(data: str) -> dict[str, str]:
    """
    Parse NUL-separated ``env -0`` output into a dict.

    Entries without '=' (e.g. exported shell functions spilling over)
    are skipped.
    """
    env = {}
    for entry in data.split("\0"):
        if not entry or "=" not in entry:
            continue
        key, _, value = entry.partition("=")
        if key:
            env[key] = value
    return env


class ModuleProvisioner:
    """
    Makes programs available, loading environment modules when needed.

    Args:
        shell: Shell used to evaluate ``module load`` (must support -l and -c)
        environ: Environment to update in place (default: os.environ)
    """

    def __init__(self, shell: str = "bash", environ: MutableMapping[str, str] | None = None):
        self.shell = shell
        self.environ = environ if environ is not None else os.environ
        self.loaded: list[str] = []

    def which(self, program: str) -> str | None:
        """Locate a program on the managed environment's PATH"""
        return shutil.which(program, path=self.environ.get("PATH"))

    def load(self, module: str) -> bool:
        """
        Load an environment module into the managed environment.

        Returns:
            True if ``module load`` succeeded
        """
        script = f"module load {shlex.quote(module)} >/dev/null 2>&1 && env -0"
        logger.debug("Loading module %s via %s", module, self.shell)
        try:
            result = subprocess.run(
                [self.shell, "-lc", script],
                capture_output=True,
                text=True,
                env=dict(self.environ)
            )
        except FileNotFoundError:
            logger.warning("Cannot load module %s: shell %s not found", module, self.shell)
            return False

        if result.returncode != 0:
            logger.warning("module load %s failed with exit code %d", module, result.returncode)
            return False

        loaded_env = parse_env_block(result.stdout)
        if not loaded_env:
            logger.warning("module load %s produced no environment", module)
            return False

        for key, value in loaded_env.items():
            if self.environ.get(key) != value:
                self.environ[key] = value
        self.loaded.append(module)
        logger.debug("Loaded module %s", module)
        return True

    def ensure(self, program: str, module: str | None = None) -> str | None:
        """
        Find a program, loading ``module`` first if it is not on PATH.

        Args:
            program: Executable name
            module: Environment module providing it (skipped when None)

        Returns:
            Absolute path of the program, or None if still unavailable
        """
        path = self.which(program)
        if path:
            return path

        if not module:
            return None

        logger.info("%s not found on PATH, trying 'module load %s'", program, module)
        if not self.load(module):
            return None
        return self.which(program)
