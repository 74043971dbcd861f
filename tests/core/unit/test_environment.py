"""
Unit tests for environment module provisioning
"""

import subprocess

import pytest

from sifbuild_core import environment
from sifbuild_core.environment import ModuleProvisioner, parse_env_block


class TestParseEnvBlock:
    """Tests for env -0 parsing"""

    def test_basic(self):
        data = "PATH=/opt/podman/bin:/usr/bin\0HOME=/home/user\0"
        assert parse_env_block(data) == {"PATH": "/opt/podman/bin:/usr/bin", "HOME": "/home/user"}

    def test_values_with_newlines_and_equals(self):
        data = "MULTI=line1\nline2\0OPTS=a=b=c\0"
        assert parse_env_block(data) == {"MULTI": "line1\nline2", "OPTS": "a=b=c"}

    def test_skips_garbage(self):
        assert parse_env_block("noequals\0=novalue\0\0") == {}


class FakeCompleted:
    """Builds CompletedProcess objects for patched subprocess.run"""

    def __init__(self, returncode=0, stdout=""):
        self.returncode = returncode
        self.stdout = stdout
        self.calls = []

    def __call__(self, argv, **kwargs):
        self.calls.append((argv, kwargs))
        return subprocess.CompletedProcess(argv, self.returncode, self.stdout, "")


class TestModuleProvisioner:
    """Tests for ModuleProvisioner"""

    @pytest.fixture
    def environ(self):
        return {"PATH": "/usr/bin", "HOME": "/home/user"}

    def test_found_on_path(self, environ, monkeypatch):
        monkeypatch.setattr(environment.shutil, "which", lambda program, path=None: f"/usr/bin/{program}")
        run = FakeCompleted()
        monkeypatch.setattr(environment.subprocess, "run", run)

        provisioner = ModuleProvisioner(environ=environ)
        assert provisioner.ensure("podman", "podman") == "/usr/bin/podman"
        assert run.calls == []

    def test_load_updates_environment(self, environ, monkeypatch):
        def which(program, path=None):
            return f"/opt/podman/bin/{program}" if path and "/opt/podman/bin" in path else None

        monkeypatch.setattr(environment.shutil, "which", which)
        run = FakeCompleted(stdout="PATH=/opt/podman/bin:/usr/bin\0HOME=/home/user\0LOADEDMODULES=podman\0")
        monkeypatch.setattr(environment.subprocess, "run", run)

        provisioner = ModuleProvisioner(environ=environ)
        assert provisioner.ensure("podman", "podman") == "/opt/podman/bin/podman"
        assert environ["PATH"] == "/opt/podman/bin:/usr/bin"
        assert environ["LOADEDMODULES"] == "podman"
        assert provisioner.loaded == ["podman"]

    def test_module_name_is_quoted(self, environ, monkeypatch):
        monkeypatch.setattr(environment.shutil, "which", lambda program, path=None: None)
        run = FakeCompleted(returncode=1)
        monkeypatch.setattr(environment.subprocess, "run", run)

        ModuleProvisioner(environ=environ).load("podman; touch /tmp/pwned")
        argv, kwargs = run.calls[0]
        assert argv[:2] == ["bash", "-lc"]
        assert "module load 'podman; touch /tmp/pwned'" in argv[2]
        assert kwargs["env"] == environ

    def test_load_failure(self, environ, monkeypatch):
        monkeypatch.setattr(environment.shutil, "which", lambda program, path=None: None)
        monkeypatch.setattr(environment.subprocess, "run", FakeCompleted(returncode=1))

        provisioner = ModuleProvisioner(environ=environ)
        assert provisioner.ensure("podman", "podman") is None
        assert environ == {"PATH": "/usr/bin", "HOME": "/home/user"}
        assert provisioner.loaded == []

    def test_load_without_output(self, environ, monkeypatch):
        monkeypatch.setattr(environment.subprocess, "run", FakeCompleted(stdout=""))
        assert ModuleProvisioner(environ=environ).load("podman") is False

    def test_shell_missing(self, environ, monkeypatch):
        def run(argv, **kwargs):
            raise FileNotFoundError(argv[0])

        monkeypatch.setattr(environment.subprocess, "run", run)
        assert ModuleProvisioner(shell="no-such-shell", environ=environ).load("podman") is False

    def test_still_missing_after_load(self, environ, monkeypatch):
        monkeypatch.setattr(environment.shutil, "which", lambda program, path=None: None)
        monkeypatch.setattr(environment.subprocess, "run", FakeCompleted(stdout="PATH=/usr/bin\0"))

        provisioner = ModuleProvisioner(environ=environ)
        assert provisioner.ensure("podman", "podman") is None
        assert provisioner.loaded == ["podman"]

    def test_no_module_configured(self, environ, monkeypatch):
        monkeypatch.setattr(environment.shutil, "which", lambda program, path=None: None)
        run = FakeCompleted()
        monkeypatch.setattr(environment.subprocess, "run", run)

        assert ModuleProvisioner(environ=environ).ensure("podman", "") is None
        assert run.calls == []

    def test_which_uses_managed_path(self, environ, tmp_path):
        program = tmp_path / "apptainer"
        program.write_text("#!/bin/sh\n")
        program.chmod(0o755)
        environ["PATH"] = str(tmp_path)
        assert ModuleProvisioner(environ=environ).which("apptainer") == str(program)
