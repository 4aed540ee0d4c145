"""
Configuration and defaults.

Settings live in ``.symtree/config.yaml`` under the workspace root (or the
file named by ``SYMTREE_CONFIG``). Every key is optional; a missing file
means defaults throughout.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from .core.errors import ConfigError
from .hierarchy.clicks import DEFAULT_DOUBLE_CLICK_TIMEOUT_MS
from .hierarchy.render import IconTheme

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SYMTREE_CONFIG"
DEFAULT_CONFIG_PATH = Path(".symtree/config.yaml")

WORKSPACE_FOLDER_VARIABLE = "${workspaceFolder}"

# Environment forwarded to the backend process.
FORWARDED_ENV: List[str] = ["ProgramData", "PATH", "CPATH", "LIBRARY_PATH"]

DEFAULT_INITIALIZATION_OPTIONS: Dict[str, Any] = {
    "cacheDirectory": ".ccls-cache",
}


class LaunchConfig(BaseModel):
    command: str = "ccls"
    args: List[str] = Field(default_factory=list)
    forward_env: List[str] = Field(default_factory=lambda: list(FORWARDED_ENV))


class TreeViewConfig(BaseModel):
    double_click_timeout_ms: int = Field(default=DEFAULT_DOUBLE_CLICK_TIMEOUT_MS, ge=0)


class MethodConfig(BaseModel):
    """RPC method names understood by the backend."""
    call: str = "$ccls/call"
    inheritance: str = "$ccls/inheritance"
    info: str = "$ccls/info"
    reload: str = "$ccls/reload"


class SymtreeConfig(BaseModel):
    launch: LaunchConfig = Field(default_factory=LaunchConfig)
    initialization_options: Dict[str, Any] = Field(default_factory=dict)
    tree_views: TreeViewConfig = Field(default_factory=TreeViewConfig)
    path_conversion_rules: List[Dict[str, str]] = Field(default_factory=list)
    methods: MethodConfig = Field(default_factory=MethodConfig)
    icons: IconTheme = Field(default_factory=lambda: IconTheme(base="▲", derived="▼"))

    def resolved_initialization_options(self, workspace_root: Path) -> Dict[str, Any]:
        """Defaults overlaid with the user's options, with variables substituted."""
        merged = {**DEFAULT_INITIALIZATION_OPTIONS, **self.initialization_options}
        return {key: resolve_variables(value, workspace_root) for key, value in merged.items()}

    def backend_env(self) -> Dict[str, str]:
        return {name: os.environ[name] for name in self.launch.forward_env if name in os.environ}


def resolve_variables(value: Any, workspace_root: Path) -> Any:
    """Replace ``${workspaceFolder}`` in strings, lists and nested mappings."""
    if isinstance(value, str):
        return value.replace(WORKSPACE_FOLDER_VARIABLE, str(workspace_root))
    if isinstance(value, list):
        return [resolve_variables(v, workspace_root) for v in value]
    if isinstance(value, dict):
        return {k: resolve_variables(v, workspace_root) for k, v in value.items()}
    return value


def find_config_path(workspace_root: Path, explicit: Optional[Path] = None) -> Path:
    if explicit is not None:
        return explicit
    from_env = os.getenv(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env)
    return workspace_root / DEFAULT_CONFIG_PATH


def load_config(workspace_root: Path, config_path: Optional[Path] = None) -> SymtreeConfig:
    """
    Load the configuration for a workspace.

    Args:
        workspace_root: Directory the backend indexes.
        config_path: Explicit configuration file; overrides the lookup.

    Returns:
        SymtreeConfig: Parsed settings, or defaults when no file exists.

    Raises:
        ConfigError: If the file exists but is not valid.
    """
    path = find_config_path(workspace_root, config_path)
    if not path.exists():
        logger.debug(f"No config at {path}, using defaults")
        return SymtreeConfig()

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")

    try:
        config = SymtreeConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info(f"Loaded configuration from {path}")
    return config
