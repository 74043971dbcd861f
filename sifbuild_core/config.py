"""
Configuration objects for the build orchestrator
"""

from dataclasses import dataclass, field
from sifbuild_core.constants import (
    DEFAULT_BUILDER, DEFAULT_ENGINE, DEFAULT_BUILDER_MODULE,
    DEFAULT_ENGINE_MODULE, DEFAULT_CONTEXT_FILE
)
from sifbuild_core.model.request import ContainerKind


@dataclass(frozen=True)
class BuildPolicy:
    """
    Administrative switches for which container kinds may be built.
    """
    sif_allowed: bool = False  # Packed .sif images
    sandbox_allowed: bool = True  # Unpacked sandbox directories

    def allows(self, kind: ContainerKind) -> bool:
        if kind is ContainerKind.SIF:
            return self.sif_allowed
        return self.sandbox_allowed


@dataclass(frozen=True)
class ToolsConfig:
    """
    External programs and the environment modules that provide them.
    """
    builder: str = DEFAULT_BUILDER  # Image builder (apptainer)
    engine: str = DEFAULT_ENGINE  # Container engine client (podman)
    builder_module: str = DEFAULT_BUILDER_MODULE
    engine_module: str = DEFAULT_ENGINE_MODULE
    context_file: str = DEFAULT_CONTEXT_FILE  # Must exist in cwd for context builds


@dataclass(frozen=True)
class OrchestratorConfig:
    """
    Complete configuration handed to BuildOrchestrator.
    """
    policy: BuildPolicy = field(default_factory=BuildPolicy)
    tools: ToolsConfig = field(default_factory=ToolsConfig)
