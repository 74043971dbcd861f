"""
Centralized constants and defaults for sifbuild
"""

# External tools
DEFAULT_BUILDER = "apptainer"
DEFAULT_ENGINE = "podman"

# Environment modules loaded when a tool is not on PATH
DEFAULT_BUILDER_MODULE = "apptainer/1.1.3"
DEFAULT_ENGINE_MODULE = "podman"

# File that must exist in the working directory for context builds
DEFAULT_CONTEXT_FILE = "Dockerfile"

# Packed archive suffix
SIF_SUFFIX = ".sif"

# Transport prefix apptainer expects for OCI registry images
DOCKER_TRANSPORT = "docker://"

# Dotted numeric version, e.g. 1, 1.28, 2.3.4
VERSION_PATTERN = r"^[0-9]+(\.[0-9]+)*$"

# Exit status reported when a program cannot be spawned at all
COMMAND_NOT_FOUND = 127
