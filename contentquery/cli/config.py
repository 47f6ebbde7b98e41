"""Configuration management for contentquery CLI.

Supports configuration from multiple sources with the following priority:
1. Command-line arguments
2. Environment variables
3. Configuration file (~/.contentquery/config.yaml)
4. Default values
"""

import os
import json
from pathlib import Path
from typing import Dict, Any, Optional
import logging

import yaml

from contentquery.query.exceptions import ConfigurationError
from contentquery.query.models import DEFAULT_FULL_TEXT_SEARCH_FIELDS


logger = logging.getLogger(__name__)

# Configuration file locations to check
CONFIG_LOCATIONS = [
    Path.home() / ".contentquery" / "config.yaml",
    Path.home() / ".contentquery" / "config.json",
    Path.cwd() / ".contentquery" / "config.yaml",
    Path.cwd() / ".contentquery" / "config.json",
    Path.cwd() / "contentquery.yaml",
    Path.cwd() / "contentquery.json",
]

# Default configuration
DEFAULT_CONFIG = {
    "content_dir": "content",
    "output": "table",
    "limit": None,
    "deep": False,
    "full_text_search_fields": list(DEFAULT_FULL_TEXT_SEARCH_FIELDS),
    "verbose": False,
}


def get_config_file() -> Optional[Path]:
    """Find configuration file in standard locations.

    Returns:
        Path to config file if found, None otherwise
    """
    for config_path in CONFIG_LOCATIONS:
        if config_path.exists():
            logger.debug(f"Found config file at {config_path}")
            return config_path
    return None


def load_config_file(config_path: Path) -> Dict[str, Any]:
    """Load configuration from file (YAML or JSON).

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        content = config_path.read_text()

        if config_path.suffix in [".yaml", ".yml"]:
            config = yaml.safe_load(content) or {}
        elif config_path.suffix == ".json":
            config = json.loads(content)
        else:
            raise ConfigurationError(f"Unsupported config file format: {config_path.suffix}")

    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Invalid config file {config_path}: {e}", e)
    except OSError as e:
        raise ConfigurationError(f"Error reading config file {config_path}: {e}", e)

    if not isinstance(config, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")
    return config


def save_config_file(config: Dict[str, Any], config_path: Path, format: str = "json") -> bool:
    """Save configuration to file.

    Args:
        config: Configuration dictionary
        config_path: Path where to save configuration
        format: File format (json or yaml)

    Returns:
        True if successful, False otherwise
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        if format == "yaml":
            content = yaml.safe_dump(config, default_flow_style=False, sort_keys=False)
        else:
            content = json.dumps(config, indent=2)

        config_path.write_text(content)
        logger.info(f"Configuration saved to {config_path}")
        return True

    except OSError as e:
        logger.error(f"Error saving config file: {e}")
        return False


def get_content_dir() -> str:
    """Get content directory from env var, config file, or default.

    Priority:
    1. CONTENTQUERY_DIR environment variable
    2. content_dir from config file
    3. ./content (default)
    """
    if "CONTENTQUERY_DIR" in os.environ:
        return os.environ["CONTENTQUERY_DIR"]

    config_file = get_config_file()
    if config_file:
        try:
            config = load_config_file(config_file)
            if "content_dir" in config:
                return config["content_dir"]
        except ConfigurationError as e:
            logger.debug(f"Could not load content_dir from config: {e}")

    return DEFAULT_CONFIG["content_dir"]


def get_config(override: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Get CLI configuration from all sources.

    Configuration priority (highest to lowest):
    1. Override parameters
    2. Environment variables
    3. Configuration file
    4. Default values

    Args:
        override: Configuration overrides (typically from CLI args);
                  None values are ignored

    Returns:
        Complete configuration dictionary
    """
    # Start with defaults
    config = DEFAULT_CONFIG.copy()
    config["full_text_search_fields"] = list(DEFAULT_FULL_TEXT_SEARCH_FIELDS)

    # Layer in config file if it exists
    config_file = get_config_file()
    if config_file:
        try:
            file_config = load_config_file(config_file)
            config.update(file_config)
            logger.debug(f"Loaded config from {config_file}")
        except ConfigurationError as e:
            logger.warning(f"Could not load config file: {e}")

    # Layer in environment variables
    if "CONTENTQUERY_DIR" in os.environ:
        config["content_dir"] = os.environ["CONTENTQUERY_DIR"]
    if "CONTENTQUERY_OUTPUT" in os.environ:
        config["output"] = os.environ["CONTENTQUERY_OUTPUT"]
    if "CONTENTQUERY_LIMIT" in os.environ:
        try:
            config["limit"] = int(os.environ["CONTENTQUERY_LIMIT"])
        except ValueError:
            logger.warning("Invalid CONTENTQUERY_LIMIT environment variable")
    if "CONTENTQUERY_SEARCH_FIELDS" in os.environ:
        fields = os.environ["CONTENTQUERY_SEARCH_FIELDS"].split(",")
        config["full_text_search_fields"] = [f.strip() for f in fields if f.strip()]
    if "CONTENTQUERY_VERBOSE" in os.environ:
        config["verbose"] = os.environ["CONTENTQUERY_VERBOSE"].lower() in ["true", "1", "yes"]

    # Layer in overrides (highest priority)
    if override:
        config.update({key: value for key, value in override.items() if value is not None})

    return config


def init_config(config_path: Optional[Path] = None) -> bool:
    """Initialize a new configuration file.

    Args:
        config_path: Path where to create config file (default: ~/.contentquery/config.json)

    Returns:
        True if successful, False otherwise
    """
    if config_path is None:
        config_path = Path.home() / ".contentquery" / "config.json"

    format = "yaml" if config_path.suffix in [".yaml", ".yml"] else "json"
    return save_config_file(DEFAULT_CONFIG, config_path, format=format)
