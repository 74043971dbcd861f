"""
Unit tests for Command and BuildResult
"""

import pytest
from pathlib import Path

from sifbuild_core.exceptions import CommandFailedError
from sifbuild_core.model import BuildMode, BuildResult, Command, StepResult


class TestCommand:
    """Tests for structured commands"""

    def test_of_converts_arguments(self):
        command = Command.of("apptainer", "build", Path("/work/mytool-1.0"), "mytool.def")
        assert command.args == ("build", "/work/mytool-1.0", "mytool.def")

    def test_argv(self):
        command = Command.of("podman", "build", "-t", "myproject/mytool", ".")
        assert command.argv == ["podman", "build", "-t", "myproject/mytool", "."]

    def test_render_plain(self):
        command = Command.of("podman", "build", "-t", "myproject/mytool", ".")
        assert command.render() == "podman build -t myproject/mytool ."
        assert str(command) == command.render()

    def test_render_quotes_unsafe_arguments(self):
        command = Command.of("apptainer", "build", "/work/my tool-1.0", "x; rm -rf /")
        assert command.render() == "apptainer build '/work/my tool-1.0' 'x; rm -rf /'"
        # argv carries the raw strings, nothing is interpreted by a shell
        assert command.argv[-1] == "x; rm -rf /"

    def test_commands_are_values(self):
        assert Command.of("a", "b") == Command("a", ("b",))
        assert len({Command.of("a", "b"), Command.of("a", "b")}) == 1


class TestBuildResult:
    """Tests for build outcomes"""

    def make(self, *returncodes, dry_run=False):
        steps = [StepResult(Command.of("step", str(i)), rc) for i, rc in enumerate(returncodes)]
        return BuildResult(Path("/work/mytool-1.0"), BuildMode.CONTEXT, dry_run=dry_run, steps=steps)

    def test_all_steps_succeeded(self):
        result = self.make(0, 0)
        assert result.success
        assert result.exit_code == 0
        assert result.failed_step is None

    def test_failed_step(self):
        result = self.make(1, None)
        assert not result.success
        assert result.exit_code == 1
        assert result.failed_step is result.steps[0]

    def test_unrun_step_is_not_success(self):
        result = self.make(0, None)
        assert not result.success
        assert result.failed_step is None

    def test_no_steps_is_not_success(self):
        assert not self.make().success

    def test_dry_run_always_succeeds(self):
        result = self.make(None, None, dry_run=True)
        assert result.success
        result.raise_for_status()

    def test_raise_for_status(self):
        with pytest.raises(CommandFailedError) as exc_info:
            self.make(0, 4).raise_for_status()
        assert exc_info.value.returncode == 4
        assert "step 1" in str(exc_info.value)

    def test_raise_for_status_nothing_ran(self):
        with pytest.raises(CommandFailedError):
            self.make(0, None).raise_for_status()

    def test_to_dict(self):
        data = self.make(0, 2).to_dict()
        assert data == {
            "output_path": "/work/mytool-1.0",
            "mode": "context",
            "dry_run": False,
            "success": False,
            "steps": [
                {"command": "step 0", "returncode": 0},
                {"command": "step 1", "returncode": 2},
            ],
        }

    def test_step_flags(self):
        step = StepResult(Command.of("x"))
        assert not step.ran
        assert not step.succeeded
