"""
Build orchestrator - validates, plans and runs container builds

Recipe Mode:   apptainer build [--sandbox] <output> <recipe.def>
Context Mode:  podman build -t <project> .
               apptainer build [--sandbox] <output> docker://<latest image>
Image Mode:    apptainer build [--sandbox] <output> docker://<image>
"""

import logging
from pathlib import Path
from typing import Protocol, Sequence

from sifbuild_core.config import OrchestratorConfig
from sifbuild_core.constants import DOCKER_TRANSPORT
from sifbuild_core.environment import ModuleProvisioner
from sifbuild_core.exceptions import (
    DependencyError, ImageNotFoundError, OutputExistsError
)
from sifbuild_core.model import BuildMode, BuildRequest, BuildResult, Command, StepResult
from sifbuild_core.runner import CommandRunner

logger = logging.getLogger(__name__)


class BuildReporter(Protocol):
    """Receives user-facing progress from the orchestrator."""

    def info(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def planned(self, commands: Sequence[Command]) -> None:
        """Commands that would run outside dry-run mode"""
        ...

    def running(self, command: Command) -> None: ...


class PrintReporter:
    """Plain stdout reporter used when no other reporter is supplied"""

    def info(self, message: str) -> None:
        print(message)

    def warning(self, message: str) -> None:
        print(f"WARNING: {message}")

    def planned(self, commands: Sequence[Command]) -> None:
        noun = "Command" if len(commands) == 1 else "Commands"
        print(f"{noun} that run when not in dry run (-d) mode:")
        for command in commands:
            print(f"  {command.render()}")

    def running(self, command: Command) -> None:
        print(f"** Running: {command.render()}")


def with_transport(image: str) -> str:
    """Prefix an image reference with docker:// unless it already has it"""
    if image.startswith(DOCKER_TRANSPORT):
        return image
    return DOCKER_TRANSPORT + image


class BuildOrchestrator:
    """
    Turns a BuildRequest into one or two external commands and runs them.

    All collaborators are injected so tests can substitute fakes:

    Args:
        config: Immutable policy and tool configuration
        runner: Spawns commands (default: CommandRunner)
        provisioner: Locates tools, loading modules if needed (default: ModuleProvisioner)
        reporter: Receives progress output (default: PrintReporter)
    """

    def __init__(
        self,
        config: OrchestratorConfig | None = None,
        runner: CommandRunner | None = None,
        provisioner: ModuleProvisioner | None = None,
        reporter: BuildReporter | None = None,
    ):
        self.config = config or OrchestratorConfig()
        self.runner = runner or CommandRunner()
        self.provisioner = provisioner or ModuleProvisioner()
        self.reporter = reporter or PrintReporter()

    @property
    def tools(self):
        return self.config.tools

    def request_from_options(self, cwd: Path | str | None = None, **options) -> BuildRequest:
        """Validate raw options against this orchestrator's policy"""
        return BuildRequest.from_options(
            policy=self.config.policy,
            cwd=cwd,
            context_file=self.tools.context_file,
            **options
        )

    def resolve_output_path(self, request: BuildRequest, cwd: Path | str | None = None) -> Path:
        """
        Compute the container path and make sure nothing is there yet.

        Raises:
            OutputExistsError: A file, directory or dangling symlink exists at the path
        """
        base = Path(cwd) if cwd is not None else Path.cwd()
        output_path = base.absolute() / request.output_name
        if output_path.exists() or output_path.is_symlink():
            raise OutputExistsError(
                f"container {output_path} already exists. Please remove it before continuing.",
                path=str(output_path)
            )
        return output_path

    def ensure_dependencies(self, request: BuildRequest) -> dict[str, str]:
        """
        Make sure the external tools for this request are available.

        Context and image builds need the engine client; every build needs
        the image builder. Missing tools are loaded as environment modules.
        In a dry run a missing builder is reported as a warning instead.

        Returns:
            Mapping of program name to resolved path

        Raises:
            DependencyError: A tool is still missing after loading its module
                (for the builder, only outside dry runs)
        """
        resolved = {}

        if request.mode in (BuildMode.CONTEXT, BuildMode.IMAGE):
            engine = self.tools.engine
            path = self.provisioner.ensure(engine, self.tools.engine_module)
            if not path:
                raise DependencyError(
                    f"{engine} will not install using the command 'module load {self.tools.engine_module}'. "
                    f"It is required to build a container from a Dockerfile or docker image",
                    program=engine
                )
            resolved[engine] = path

        builder = self.tools.builder
        self.reporter.info(f"Loading {builder} modules...")
        path = self.provisioner.ensure(builder, self.tools.builder_module)
        if not path:
            message = (
                f"{builder} will not install using the command 'module load {self.tools.builder_module}'. "
                f"It is required for every build"
            )
            if not request.dry_run:
                raise DependencyError(message, program=builder)
            # Dry runs only print commands
            self.reporter.warning(message)
            return resolved
        resolved[builder] = path

        version = self.builder_version()
        if version:
            self.reporter.info(f"{builder} version: {version}")

        return resolved

    def builder_version(self) -> str:
        """Version string reported by the image builder, or '' if unavailable"""
        result = self.runner.capture(Command.of(self.tools.builder, "version"))
        if result.returncode != 0:
            logger.debug("%s version exited with %d", self.tools.builder, result.returncode)
            return ""
        return result.stdout.strip()

    def image_exists(self, image: str) -> bool:
        """True if the engine has ``image`` in local storage"""
        result = self.runner.capture(Command.of(self.tools.engine, "images", "-q", image))
        return result.returncode == 0 and bool(result.stdout.strip())

    def latest_image(self) -> str:
        """
        Most recently created local image, as repository:tag.

        Raises:
            ImageNotFoundError: The engine lists no images
        """
        result = self.runner.capture(
            Command.of(self.tools.engine, "images", "--format", "{{.Repository}}:{{.Tag}}")
        )
        lines = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        if result.returncode != 0 or not lines:
            raise ImageNotFoundError(f"No local {self.tools.engine} images found")
        return lines[0]

    def build_command(self, request: BuildRequest, output_path: Path, source: str) -> Command:
        """apptainer build [--sandbox] <output> <source>"""
        args = ["build"]
        if request.sandbox:
            args.append("--sandbox")
        args.extend([str(output_path), source])
        return Command.of(self.tools.builder, *args)

    def engine_build_command(self, request: BuildRequest) -> Command:
        """podman build -t <project> ."""
        return Command.of(self.tools.engine, "build", "-t", request.source, ".")

    def plan(self, request: BuildRequest, output_path: Path) -> list[Command]:
        """
        Commands for the request, in execution order.

        The context-mode conversion names the project image; ``execute``
        swaps in the engine's newest image once the first step has run.
        """
        if request.mode is BuildMode.RECIPE:
            return [self.build_command(request, output_path, request.source)]

        if request.mode is BuildMode.CONTEXT:
            return [
                self.engine_build_command(request),
                self.build_command(request, output_path, with_transport(request.source)),
            ]

        return [self.build_command(request, output_path, with_transport(request.source))]

    def execute(self, request: BuildRequest, cwd: Path | str | None = None) -> BuildResult:
        """
        Resolve, check, plan and run (or print) a build.

        Args:
            request: Validated request
            cwd: Directory the container is created in (default: current directory)

        Returns:
            BuildResult; dry runs always succeed

        Raises:
            SifBuildError: Output exists, tools missing or image not found
        """
        output_path = self.resolve_output_path(request, cwd)
        self.reporter.info(f"Building {output_path}")

        self.ensure_dependencies(request)

        if request.mode is BuildMode.IMAGE and not self.image_exists(request.source):
            raise ImageNotFoundError(f"Docker image {request.source} not found locally")

        commands = self.plan(request, output_path)
        result = BuildResult(output_path=output_path, mode=request.mode, dry_run=request.dry_run)

        if request.dry_run:
            self.reporter.planned(commands)
            result.steps = [StepResult(command) for command in commands]
            return result

        for index, command in enumerate(commands):
            if index > 0 and request.mode is BuildMode.CONTEXT:
                command = self.build_command(request, output_path, with_transport(self.latest_image()))

            self.reporter.running(command)
            returncode = self.runner.run(command)
            result.steps.append(StepResult(command, returncode))

            if returncode != 0:
                logger.debug("Step %d failed, skipping remaining steps", index + 1)
                result.steps.extend(StepResult(rest) for rest in commands[index + 1:])
                break

        return result

    def run(self, request: BuildRequest, cwd: Path | str | None = None) -> BuildResult:
        """
        Like ``execute`` but raises on a failed build.

        Raises:
            CommandFailedError: An external command returned non-zero
        """
        result = self.execute(request, cwd)
        result.raise_for_status()
        return result
