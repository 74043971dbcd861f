"""
Build outcome primitives
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sifbuild_core.exceptions import CommandFailedError
from sifbuild_core.model.command import Command
from sifbuild_core.model.request import BuildMode


@dataclass
class StepResult:
    """
    One external invocation. ``returncode`` stays None when the step was not run.
    """
    command: Command
    returncode: int | None = None

    @property
    def ran(self) -> bool:
        return self.returncode is not None

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


@dataclass
class BuildResult:
    """
    Outcome of one orchestrator run.
    """
    output_path: Path
    mode: BuildMode
    dry_run: bool = False
    steps: list[StepResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        if self.dry_run:
            return True
        return bool(self.steps) and all(step.succeeded for step in self.steps)

    @property
    def failed_step(self) -> StepResult | None:
        """First step that ran and failed, if any"""
        for step in self.steps:
            if step.ran and not step.succeeded:
                return step
        return None

    def raise_for_status(self) -> None:
        """
        Raise if the build failed.

        Raises:
            CommandFailedError: A step returned non-zero or nothing ran
        """
        if self.success:
            return
        failed = self.failed_step
        if failed is None:
            raise CommandFailedError("build failed: no build step ran")
        raise CommandFailedError(
            f"build failed: {failed.command.render()} exited with {failed.returncode}",
            returncode=failed.returncode
        )

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary"""
        return {
            "output_path": str(self.output_path),
            "mode": self.mode.value,
            "dry_run": self.dry_run,
            "success": self.success,
            "steps": [
                {"command": step.command.render(), "returncode": step.returncode}
                for step in self.steps
            ],
        }
