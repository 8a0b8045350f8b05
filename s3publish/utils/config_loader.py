"""
Settings file loader and validator for upload runs.

Pipelines that publish several artifact sets keep the non-secret part of the
upload configuration in a YAML file checked into the repository. Credentials
never belong in it; they come from the environment.

Example settings file (.s3publish.yaml):
    ```yaml
    version: "1.0"
    bucket: my-site
    endpoint: https://minio.example.com
    region: us-east-1
    acl: public-read
    source: dist/**/*
    target: releases/1.2.0
    exclude:
      - dist/**/*.map
      - dist/**/.DS_Store
    path_style: true
    compress: true
    ```

Usage:
    >>> from s3publish.utils.config_loader import load_config, validate_config
    >>> settings = load_config(".s3publish.yaml")
    >>> errors = validate_config(settings)
    >>> if not errors:
    ...     print(f"Publishing {settings['source']}")
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from s3publish.uploader.uploader import VALID_ACLS
from s3publish.utils.logging import get_logger

logger = get_logger(__name__)


# Supported settings file versions
SUPPORTED_VERSIONS = ["1.0"]

STRING_KEYS = ["bucket", "source", "target", "endpoint", "region", "acl"]
BOOL_KEYS = ["path_style", "dry_run", "compress"]
SECRET_KEYS = ["access_key", "secret_key"]
KNOWN_KEYS = ["version", "exclude"] + STRING_KEYS + BOOL_KEYS


@dataclass
class ConfigError:
    """Validation error in a settings file."""

    field: str
    message: str
    value: Optional[Any] = None

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.field}: {self.message} (got: {self.value})"
        return f"{self.field}: {self.message}"


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load settings from a YAML file.

    Args:
        config_path: Path to YAML settings file

    Returns:
        Dictionary containing parsed settings

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the path is not a file, is empty or not a mapping
        yaml.YAMLError: If YAML is malformed
    """
    path = Path(config_path)
    logger.info(f"Loading settings from: {path}")

    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    if not path.is_file():
        raise ValueError(f"Settings path is not a file: {path}")

    try:
        with open(path, "r") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML: {e}")
        raise

    if config is None:
        raise ValueError("Settings file is empty")

    if not isinstance(config, dict):
        raise ValueError(
            f"Settings file must contain a mapping, got {type(config).__name__}"
        )

    logger.info(f"✓ Settings loaded for bucket: {config.get('bucket', 'unknown')}")
    return dict(config)


def validate_config(config: Dict[str, Any]) -> List[ConfigError]:
    """
    Validate settings against the expected schema.

    Every key is optional here. Bucket and source may be left to the
    environment or flags; they are required only after all layers merge.

    Args:
        config: Settings dictionary to validate

    Returns:
        List of validation errors (empty if valid)

    Example:
        >>> errors = validate_config({"version": "1.0", "acl": "everyone"})
        >>> for error in errors:
        ...     print(f"❌ {error}")
        ❌ acl: Invalid canned ACL (valid: [...]) (got: everyone)
    """
    errors: List[ConfigError] = []

    if "version" not in config:
        errors.append(ConfigError("version", "Missing required field"))
    elif str(config["version"]) not in SUPPORTED_VERSIONS:
        errors.append(
            ConfigError(
                "version",
                f"Unsupported version (supported: {SUPPORTED_VERSIONS})",
                config["version"],
            )
        )

    for key in STRING_KEYS:
        if key in config and not isinstance(config[key], str):
            errors.append(
                ConfigError(key, "Must be a string", type(config[key]).__name__)
            )

    acl = config.get("acl")
    if isinstance(acl, str) and acl not in VALID_ACLS:
        errors.append(
            ConfigError("acl", f"Invalid canned ACL (valid: {VALID_ACLS})", acl)
        )

    for key in BOOL_KEYS:
        if key in config and not isinstance(config[key], bool):
            errors.append(
                ConfigError(key, "Must be true or false", config[key])
            )

    errors.extend(_validate_exclude(config.get("exclude")))

    for key in SECRET_KEYS:
        if key in config:
            errors.append(
                ConfigError(
                    key,
                    "Credentials must not be stored in the settings file; "
                    "use PLUGIN_ACCESS_KEY / PLUGIN_SECRET_KEY",
                )
            )

    for key in config:
        if key not in KNOWN_KEYS and key not in SECRET_KEYS:
            errors.append(ConfigError(key, "Unknown setting"))

    if errors:
        logger.warning(f"Settings validation failed with {len(errors)} errors")
    else:
        logger.info("✓ Settings validation passed")

    return errors


def _validate_exclude(exclude: Any) -> List[ConfigError]:
    """Validate the exclude setting (list of patterns or comma string)."""
    errors: List[ConfigError] = []

    if exclude is None or isinstance(exclude, str):
        return errors

    if not isinstance(exclude, list):
        errors.append(
            ConfigError("exclude", "Must be a list of patterns", type(exclude).__name__)
        )
        return errors

    for i, pattern in enumerate(exclude):
        if not isinstance(pattern, str) or not pattern:
            errors.append(
                ConfigError(f"exclude[{i}]", "Must be a non-empty string", pattern)
            )

    return errors


def get_config_example() -> str:
    """
    Get an example settings file.

    Returns:
        YAML template for a typical static-site publish
    """
    return """version: "1.0"
bucket: my-site
acl: public-read
source: dist/**/*
target: releases/1.2.0
exclude:
  - dist/**/*.map
compress: true
"""
