"""
sifbuild Core - Apptainer container builds from recipes, Dockerfiles and images

Recipe Mode: build from an Apptainer definition file
Context Mode: build a Dockerfile with podman, then convert the image
Image Mode: convert an existing local image
"""

from sifbuild_core.config import BuildPolicy, ToolsConfig, OrchestratorConfig
from sifbuild_core.model import BuildMode, ContainerKind, BuildRequest, BuildResult, Command
from sifbuild_core.orchestrator import BuildOrchestrator

__version__ = "0.1.0"

__all__ = [
    "BuildPolicy",
    "ToolsConfig",
    "OrchestratorConfig",
    "BuildMode",
    "ContainerKind",
    "BuildRequest",
    "BuildResult",
    "Command",
    "BuildOrchestrator",
]
