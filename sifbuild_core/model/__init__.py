"""
Model primitives for sifbuild
"""

from sifbuild_core.model.request import BuildMode, ContainerKind, BuildRequest, strip_sif_suffix, is_valid_version
from sifbuild_core.model.command import Command
from sifbuild_core.model.result import StepResult, BuildResult

__all__ = [
    "BuildMode",
    "ContainerKind",
    "BuildRequest",
    "strip_sif_suffix",
    "is_valid_version",
    "Command",
    "StepResult",
    "BuildResult",
]
