"""
Configuration management for cfs.

Handles loading and saving user configuration from:
- XDG config directory: ~/.config/cfs/config.json
- Fallback: ~/.cfs/config.json
"""

import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict, field

logger = logging.getLogger(__name__)


@dataclass
class LoaderConfig:
    """Graph loading settings."""
    config_name: str = "config.yaml"
    cached: bool = False


@dataclass
class DelegateConfig:
    """Defaults for real-file delegates."""
    index_name: str = "index"
    ext: str = ""


@dataclass
class SerializerConfig:
    """Graph serialization settings."""
    indent: int = 2
    index_tag: str = "!index"
    global_tag: str = "!global"
    parent_tag: str = "!parent"


@dataclass
class CLIConfig:
    """CLI default options."""
    verbose: bool = False
    color: bool = True


@dataclass
class CfsConfig:
    """Main cfs configuration."""
    loader: LoaderConfig = field(default_factory=LoaderConfig)
    delegate: DelegateConfig = field(default_factory=DelegateConfig)
    serializer: SerializerConfig = field(default_factory=SerializerConfig)
    cli: CLIConfig = field(default_factory=CLIConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "loader": asdict(self.loader),
            "delegate": asdict(self.delegate),
            "serializer": asdict(self.serializer),
            "cli": asdict(self.cli),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CfsConfig':
        """Create from dictionary."""
        return cls(
            loader=LoaderConfig(**data.get("loader", {})),
            delegate=DelegateConfig(**data.get("delegate", {})),
            serializer=SerializerConfig(**data.get("serializer", {})),
            cli=CLIConfig(**data.get("cli", {})),
        )


def get_config_path() -> Path:
    """
    Get configuration file path.

    1. ~/.config/cfs/config.json when ~/.config exists
    2. Fallback: ~/.cfs/config.json

    Returns:
        Path to config file
    """
    xdg_config_home = Path.home() / ".config"
    if xdg_config_home.exists():
        config_dir = xdg_config_home / "cfs"
    else:
        config_dir = Path.home() / ".cfs"

    return config_dir / "config.json"


def load_config() -> CfsConfig:
    """
    Load configuration from file.

    Returns:
        CfsConfig instance with loaded values or defaults
    """
    config_path = get_config_path()

    if not config_path.exists():
        return CfsConfig()

    try:
        with open(config_path, 'r') as f:
            data = json.load(f)
        return CfsConfig.from_dict(data)
    except (json.JSONDecodeError, OSError, TypeError) as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        logger.warning("Using default configuration")
        return CfsConfig()


def save_config(config: CfsConfig) -> Path:
    """
    Save configuration to file.

    Args:
        config: Configuration to save

    Returns:
        Path the configuration was written to
    """
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)

    logger.info(f"Configuration saved to {config_path}")
    return config_path


def ensure_config_exists() -> Path:
    """
    Ensure configuration file exists, creating with defaults if not.

    Returns:
        Path to config file
    """
    config_path = get_config_path()

    if not config_path.exists():
        save_config(CfsConfig())
        logger.info(f"Created default configuration at {config_path}")

    return config_path


def update_config(
    # Loader settings
    loader_config_name: Optional[str] = None,
    loader_cached: Optional[bool] = None,
    # Delegate settings
    delegate_index_name: Optional[str] = None,
    delegate_ext: Optional[str] = None,
    # Serializer settings
    serializer_indent: Optional[int] = None,
    # CLI settings
    cli_verbose: Optional[bool] = None,
    cli_color: Optional[bool] = None,
) -> CfsConfig:
    """
    Update configuration.

    Only updates provided values, leaving others unchanged.
    """
    config = load_config()

    if loader_config_name is not None:
        config.loader.config_name = loader_config_name
    if loader_cached is not None:
        config.loader.cached = loader_cached

    if delegate_index_name is not None:
        config.delegate.index_name = delegate_index_name
    if delegate_ext is not None:
        config.delegate.ext = delegate_ext

    if serializer_indent is not None:
        config.serializer.indent = serializer_indent

    if cli_verbose is not None:
        config.cli.verbose = cli_verbose
    if cli_color is not None:
        config.cli.color = cli_color

    save_config(config)
    return config
