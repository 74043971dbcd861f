"""
Build request primitives and option validation
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING
import re

from sifbuild_core.constants import SIF_SUFFIX, VERSION_PATTERN, DEFAULT_CONTEXT_FILE
from sifbuild_core.exceptions import (
    ConflictingSourcesError, MissingSourceError, InvalidContainerKindError,
    InvalidVersionError, InvalidToolNameError, KindDisabledError, SourceNotFoundError
)

if TYPE_CHECKING:
    from sifbuild_core.config import BuildPolicy


class ContainerKind(Enum):
    """Output container layout"""
    SANDBOX = "sandbox"
    SIF = "sif"


class BuildMode(Enum):
    """Where the container is built from"""
    RECIPE = "recipe"  # -a: Apptainer definition file
    CONTEXT = "context"  # -b: Dockerfile in the working directory
    IMAGE = "image"  # -c: existing local image


_VERSION_RE = re.compile(VERSION_PATTERN)


def is_valid_version(version: str | None) -> bool:
    """True for dotted numeric versions such as 1, 1.28 or 2.3.4"""
    if not version:
        return False
    return _VERSION_RE.fullmatch(version) is not None


def strip_sif_suffix(name: str | None) -> str:
    """Remove one trailing .sif from a tool name"""
    if not name:
        return ""
    if name.endswith(SIF_SUFFIX):
        return name[:-len(SIF_SUFFIX)]
    return name


@dataclass(frozen=True)
class BuildRequest:
    """
    A validated request to build one container.

    Exactly one source is set, the version is dotted numeric and the tool
    name carries no .sif suffix. Use ``from_options`` to construct one from
    raw command-line values.
    """
    mode: BuildMode
    source: str
    tool_name: str
    version: str
    kind: ContainerKind
    dry_run: bool = False

    @property
    def sandbox(self) -> bool:
        return self.kind is ContainerKind.SANDBOX

    @property
    def tool_and_version(self) -> str:
        return f"{self.tool_name}-{self.version}"

    @property
    def output_name(self) -> str:
        """File or directory name of the container, relative to the working directory"""
        if self.kind is ContainerKind.SIF:
            return self.tool_and_version + SIF_SUFFIX
        return self.tool_and_version

    @classmethod
    def from_options(
        cls,
        def_file: str | None = None,
        docker_project: str | None = None,
        docker_image: str | None = None,
        tool_name: str | None = None,
        version: str | None = None,
        container_type: str | None = None,
        dry_run: bool = False,
        policy: BuildPolicy | None = None,
        cwd: Path | str | None = None,
        context_file: str = DEFAULT_CONTEXT_FILE,
    ) -> BuildRequest:
        """
        Validate raw option values and build a request.

        Checks run in a fixed order and the first failure is raised:
        sources, container type, policy, source files, version, tool name.

        Args:
            def_file: Recipe file (-a)
            docker_project: Image name to build from the local Dockerfile (-b)
            docker_image: Existing local image reference (-c)
            tool_name: Output name prefix (-n)
            version: Dotted numeric version (-v)
            container_type: "sandbox" or "sif" (-t)
            dry_run: Print commands only (-d)
            policy: Administrative switches; all kinds allowed when None
            cwd: Directory used to resolve relative paths (default: current directory)
            context_file: File that must exist in cwd for context builds

        Returns:
            Validated BuildRequest

        Raises:
            RequestError: Invalid or conflicting options
            ConfigurationError: Container kind disabled by policy
            SourceNotFoundError: Recipe or context file missing
        """
        base = Path(cwd) if cwd is not None else Path.cwd()

        sources = [
            (BuildMode.RECIPE, def_file),
            (BuildMode.CONTEXT, docker_project),
            (BuildMode.IMAGE, docker_image),
        ]
        given = [(mode, value) for mode, value in sources if value]
        if len(given) > 1:
            raise ConflictingSourcesError(
                "You must use options -a (build from def file), -b (build from Dockerfile - "
                "myuser/repository-name) and -c (build from docker image) exclusively (not together)."
            )
        if not given:
            raise MissingSourceError(
                "No build source given. Use one of -a <def file>, -b <myproject/repository-name> "
                "or -c <docker image>."
            )
        mode, source = given[0]

        kinds = {kind.value: kind for kind in ContainerKind}
        if container_type not in kinds:
            raise InvalidContainerKindError(
                f"Unknown container type requested: {container_type or ''}. Valid values are <sandbox|sif>."
            )
        kind = kinds[container_type]

        if policy is not None and not policy.allows(kind):
            other = "sif image" if kind is ContainerKind.SANDBOX else "sandbox"
            raise KindDisabledError(
                f"{kind.value} container requested, but {kind.value} support disabled. "
                f"Please build the container as a {other}",
                kind=kind.value
            )

        if mode is BuildMode.RECIPE:
            recipe = Path(source)
            if not recipe.is_absolute():
                recipe = base / recipe
            if not recipe.is_file():
                raise SourceNotFoundError(f"File not found (-a option): {source}", path=source)

        if mode is BuildMode.CONTEXT and not (base / context_file).is_file():
            raise SourceNotFoundError(
                f"{context_file} not found. Please change directory to where the {context_file} is located.",
                path=str(base / context_file)
            )

        if not version:
            raise InvalidVersionError(
                "Version missing. You must enter a version number for the tool. "
                "This will be added into the container name."
            )
        if not is_valid_version(version):
            raise InvalidVersionError(f"Version (-v) option is not a valid number: {version}")

        name = strip_sif_suffix(tool_name)
        if not name:
            raise InvalidToolNameError(
                "Absent tool name (-n <tool_name>). This is the prefix of the file or directory "
                "being built and will have the -v version number added (e.g. mytool-2.34 or "
                "mytool-2.34.sif). It must not already exist."
            )

        return cls(
            mode=mode,
            source=source,
            tool_name=name,
            version=version,
            kind=kind,
            dry_run=dry_run,
        )
