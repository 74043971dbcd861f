"""
CLI Configuration utilities

Loads and saves CLI configuration from .sifbuild.yaml
"""

import copy
import logging
import yaml
from pathlib import Path
from typing import Dict, Any, Optional

from sifbuild_core.config import BuildPolicy, ToolsConfig, OrchestratorConfig
from sifbuild_core.constants import (
    DEFAULT_BUILDER, DEFAULT_ENGINE, DEFAULT_BUILDER_MODULE,
    DEFAULT_ENGINE_MODULE, DEFAULT_CONTEXT_FILE
)
from sifbuild_core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".sifbuild.yaml"

# Site-wide file, the only place the policy section is read from
SYSTEM_CONFIG_PATH = "/etc/sifbuild.yaml"

ADMIN_SECTIONS = ("policy",)


class CLIConfig:
    """
    Manages CLI configuration from .sifbuild.yaml files.

    Configuration is loaded in this order (last wins):
    1. Built-in defaults
    2. System config (/etc/sifbuild.yaml)
    3. User home directory config (~/.sifbuild.yaml)
    4. Current directory config (./.sifbuild.yaml)

    An explicit config file replaces steps 3 and 4. The ``policy`` section
    is administrative: it is only taken from the system config and ignored
    in every other file.
    """

    DEFAULT_CONFIG = {
        "policy": {
            "sif_allowed": False,
            "sandbox_allowed": True
        },
        "tools": {
            "builder": DEFAULT_BUILDER,
            "engine": DEFAULT_ENGINE,
            "builder_module": DEFAULT_BUILDER_MODULE,
            "engine_module": DEFAULT_ENGINE_MODULE,
            "context_file": DEFAULT_CONTEXT_FILE
        }
    }

    def __init__(
        self,
        config_file: Optional[str] = None,
        system_file: Optional[str] = None,
        user_files: bool = True
    ):
        """
        Initialize CLI config.

        Args:
            config_file: Optional path to config file. If None, searches standard locations.
            system_file: Site-wide config (default: SYSTEM_CONFIG_PATH)
            user_files: Also read the user/explicit config files
        """
        self.config: Dict[str, Any] = copy.deepcopy(self.DEFAULT_CONFIG)
        self.loaded_files: list = []
        self.system_file = system_file or SYSTEM_CONFIG_PATH

        if Path(self.system_file).exists():
            self.load_from_file(self.system_file, admin=True)

        if not user_files:
            return

        if config_file:
            # Load specific config file
            self.load_from_file(config_file)
        else:
            # Load from standard locations
            self.load_standard_configs()

    def load_standard_configs(self):
        """Load config from standard locations in order."""
        # User home directory config
        home_config = Path.home() / CONFIG_FILENAME
        if home_config.exists():
            self.load_from_file(str(home_config))

        # Current directory config
        local_config = Path.cwd() / CONFIG_FILENAME
        if local_config.exists() and local_config != home_config:
            self.load_from_file(str(local_config))

    def load_from_file(self, config_file: str, admin: bool = False):
        """
        Load configuration from a YAML file.

        Unreadable or malformed files are skipped; configuration is optional.

        Args:
            config_file: Path to config file
            admin: File may set administrative sections (policy)
        """
        try:
            with open(config_file, 'r') as f:
                loaded_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.debug("Ignoring config file %s: %s", config_file, e)
            return

        if not isinstance(loaded_config, dict):
            logger.debug("Ignoring config file %s: top level is not a mapping", config_file)
            return

        if not admin:
            for section in ADMIN_SECTIONS:
                if section in loaded_config:
                    logger.warning(
                        "Ignoring '%s' section in %s: it is only read from %s",
                        section, config_file, self.system_file
                    )
                    loaded_config.pop(section)

        self._merge_config(loaded_config)
        self.loaded_files.append(config_file)
        logger.debug("Loaded config file %s", config_file)

    def _merge_config(self, new_config: Dict[str, Any]):
        """Recursively merge new config into existing config."""
        for key, value in new_config.items():
            if key in self.config and isinstance(self.config[key], dict) and isinstance(value, dict):
                # Recursively merge nested dicts
                self.config[key].update(value)
            else:
                self.config[key] = value

    def get(self, section: str, option: str, default: Any = None) -> Any:
        """
        Get a config value from a section.

        Args:
            section: Section name (e.g., 'policy', 'tools')
            option: Option name (e.g., 'sif_allowed', 'builder')
            default: Default value if not found

        Returns:
            Configuration value or default
        """
        if section in self.config and isinstance(self.config[section], dict):
            return self.config[section].get(option, default)
        return default

    def _policy_flag(self, option: str, default: bool) -> bool:
        value = self.get("policy", option, default)
        # Quoted "false" or "no" would otherwise read as enabled
        if not isinstance(value, bool):
            raise ConfigurationError(
                f"policy.{option} in {self.system_file} must be true or false, got {value!r}"
            )
        return value

    def to_policy(self) -> BuildPolicy:
        """
        Administrative switches as a BuildPolicy.

        Raises:
            ConfigurationError: A switch is not a YAML boolean
        """
        return BuildPolicy(
            sif_allowed=self._policy_flag("sif_allowed", False),
            sandbox_allowed=self._policy_flag("sandbox_allowed", True),
        )

    def to_orchestrator_config(self) -> OrchestratorConfig:
        """Build the immutable configuration the orchestrator consumes."""
        tools = ToolsConfig(
            builder=str(self.get("tools", "builder", DEFAULT_BUILDER)),
            engine=str(self.get("tools", "engine", DEFAULT_ENGINE)),
            builder_module=str(self.get("tools", "builder_module", DEFAULT_BUILDER_MODULE)),
            engine_module=str(self.get("tools", "engine_module", DEFAULT_ENGINE_MODULE)),
            context_file=str(self.get("tools", "context_file", DEFAULT_CONTEXT_FILE)),
        )
        return OrchestratorConfig(policy=self.to_policy(), tools=tools)

    def save(self, config_file: str):
        """
        Save current configuration to a file.

        Args:
            config_file: Path to save config to
        """
        with open(config_file, 'w') as f:
            yaml.dump(self.config, f, default_flow_style=False)

    def to_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary."""
        return copy.deepcopy(self.config)


def load_cli_config(config_file: Optional[str] = None) -> CLIConfig:
    """
    Load CLI configuration.

    Args:
        config_file: Optional path to config file

    Returns:
        CLIConfig instance
    """
    return CLIConfig(config_file)


def load_policy() -> BuildPolicy:
    """Policy switches from the system config alone."""
    return CLIConfig(user_files=False).to_policy()


def create_default_config(output_file: str = CONFIG_FILENAME):
    """
    Create a default user configuration file.

    The policy section is left out; it is only honoured in the system config.

    Args:
        output_file: Path to create config file at
    """
    user_config = {
        key: value for key, value in CLIConfig.DEFAULT_CONFIG.items()
        if key not in ADMIN_SECTIONS
    }
    with open(output_file, "w") as f:
        yaml.dump(user_config, f, default_flow_style=False)
