"""
Test-suite wide fixtures

No test spawns apptainer or podman. FakeRunner records the commands the
orchestrator would spawn and answers its queries (version, image lookups);
FakeProvisioner decides which tools are "installed" or loadable as modules.
"""

import subprocess

import pytest

from sifbuild_core.config import BuildPolicy, OrchestratorConfig
from sifbuild_core.orchestrator import BuildOrchestrator
from sifbuild_cli.utils import config as cli_config


class FakeRunner:
    """Stands in for CommandRunner"""

    def __init__(self, returncodes=(), images=("myproject/mytool:latest",),
                 builder_version="apptainer version 1.1.3"):
        self.returncodes = list(returncodes)
        self.images = list(images)
        self.builder_version = builder_version
        self.ran = []
        self.captured = []

    def run(self, command):
        self.ran.append(command)
        return self.returncodes.pop(0) if self.returncodes else 0

    def capture(self, command):
        self.captured.append(command)
        args = command.args

        if args[:1] == ("version",):
            return subprocess.CompletedProcess(command.argv, 0, self.builder_version + "\n", "")

        if args[:2] == ("images", "-q"):
            found = args[2] in self.images or f"{args[2]}:latest" in self.images
            return subprocess.CompletedProcess(command.argv, 0, "3f2a9c1d7e4b\n" if found else "", "")

        if args[:2] == ("images", "--format"):
            listing = "".join(f"{image}\n" for image in self.images)
            return subprocess.CompletedProcess(command.argv, 0, listing, "")

        return subprocess.CompletedProcess(command.argv, 1, "", f"unexpected query {command}")


class FakeProvisioner:
    """Stands in for ModuleProvisioner"""

    def __init__(self, available=("apptainer", "podman"), loadable=()):
        self.available = set(available)
        self.loadable = set(loadable)
        self.loads = []

    def ensure(self, program, module=None):
        if program in self.available:
            return f"/usr/bin/{program}"
        if module:
            self.loads.append(module)
            if program in self.loadable:
                return f"/opt/modules/{module}/bin/{program}"
        return None


class RecordingReporter:
    """Collects orchestrator progress instead of printing it"""

    def __init__(self):
        self.messages = []
        self.plans = []
        self.running_commands = []
        self.warnings = []

    def info(self, message):
        self.messages.append(message)

    def warning(self, message):
        self.warnings.append(message)

    def planned(self, commands):
        self.plans.append(list(commands))

    def running(self, command):
        self.running_commands.append(command)


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def fake_provisioner():
    return FakeProvisioner()


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def open_config():
    """Configuration with both container kinds enabled"""
    return OrchestratorConfig(policy=BuildPolicy(sif_allowed=True, sandbox_allowed=True))


@pytest.fixture
def orchestrator(open_config, fake_runner, fake_provisioner, reporter):
    return BuildOrchestrator(
        open_config,
        runner=fake_runner,
        provisioner=fake_provisioner,
        reporter=reporter
    )


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Empty working directory holding a recipe file"""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "mytool.def").write_text("Bootstrap: docker\nFrom: ubuntu:22.04\n")
    return tmp_path


@pytest.fixture
def make_provisioner():
    """Factory for provisioners with a chosen set of installed/loadable tools"""
    return FakeProvisioner


@pytest.fixture(autouse=True)
def system_config(tmp_path, monkeypatch):
    """Site-wide config location; absent unless a test writes it"""
    path = tmp_path / "etc" / "sifbuild.yaml"
    path.parent.mkdir()
    monkeypatch.setattr(cli_config, "SYSTEM_CONFIG_PATH", str(path))
    return path
