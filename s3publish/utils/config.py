"""
Environment configuration loader for s3publish.

Builds the UploadConfig for a run from, in increasing precedence: a YAML
settings file, environment variables (optionally seeded from a .env file)
and explicit overrides such as command-line flags.

Environment variables follow the pipeline plugin convention (PLUGIN_*), with
the usual AWS/S3 names accepted as fallbacks.
"""

import os
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from dotenv import load_dotenv

from s3publish.uploader.uploader import UploadConfig
from s3publish.utils.logging import get_logger

logger = get_logger(__name__)

# Field name -> environment variables, first one set wins
ENV_VARS: Dict[str, Tuple[str, ...]] = {
    "endpoint": ("PLUGIN_ENDPOINT", "S3_ENDPOINT"),
    "access_key": ("PLUGIN_ACCESS_KEY", "AWS_ACCESS_KEY_ID"),
    "secret_key": ("PLUGIN_SECRET_KEY", "AWS_SECRET_ACCESS_KEY"),
    "bucket": ("PLUGIN_BUCKET", "S3_BUCKET"),
    "region": ("PLUGIN_REGION", "AWS_REGION", "AWS_DEFAULT_REGION"),
    "acl": ("PLUGIN_ACL",),
    "source": ("PLUGIN_SOURCE",),
    "target": ("PLUGIN_TARGET",),
    "exclude": ("PLUGIN_EXCLUDE",),
    "path_style": ("PLUGIN_PATH_STYLE",),
    "dry_run": ("PLUGIN_DRY_RUN",),
    "compress": ("PLUGIN_COMPRESS",),
}

BOOL_FIELDS = ("path_style", "dry_run", "compress")
REQUIRED_FIELDS = ("bucket", "source")

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")

DEFAULT_ENV_FILE = ".env"


def parse_bool(value: Union[str, bool], name: str = "value") -> bool:
    """
    Parse a boolean flag from its environment-variable form.

    Raises:
        ValueError: If the value is not a recognised boolean spelling
    """
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean (true/false), got: {value!r}")


def parse_list(value: Union[str, Iterable[str], None]) -> Tuple[str, ...]:
    """Split a comma-separated string (or pass through a list) into patterns."""
    if value is None:
        return ()
    if isinstance(value, str):
        items: Iterable[str] = value.split(",")
    else:
        items = value
    return tuple(item.strip() for item in items if item and item.strip())


def load_env_file(env_file: Optional[str] = None) -> bool:
    """
    Load variables from a .env file without overriding ones already set.

    Args:
        env_file: Path to the file; ".env" in the working directory when None

    Returns:
        True if a file was loaded

    Raises:
        FileNotFoundError: If an explicitly named file does not exist
    """
    path = Path(env_file or DEFAULT_ENV_FILE)
    if not path.is_file():
        if env_file:
            raise FileNotFoundError(f"Env file not found: {path}")
        return False

    load_dotenv(path, override=False)
    logger.info(f"Loaded environment from {path}")
    return True


def settings_from_env(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Read every configured field from the environment.

    Only fields with a variable set are returned, so the result can be
    layered over file settings.
    """
    if environ is None:
        environ = os.environ

    settings: Dict[str, Any] = {}
    for field_name, names in ENV_VARS.items():
        for name in names:
            if name in environ:
                settings[field_name] = environ[name]
                break
    return settings


def build_upload_config(*sources: Mapping[str, Any]) -> UploadConfig:
    """
    Merge settings mappings into an UploadConfig.

    Later mappings take precedence; ``None`` values never override. Keys that
    are not UploadConfig fields are ignored.

    Raises:
        ValueError: If a required field is missing or a flag is malformed
    """
    known = {f.name for f in fields(UploadConfig)}
    merged: Dict[str, Any] = {}
    for source in sources:
        for key, value in source.items():
            if key in known and value is not None:
                merged[key] = value

    for name in ("bucket", "source", "endpoint", "access_key", "secret_key",
                 "target", "region", "acl"):
        if name in merged:
            merged[name] = str(merged[name]).strip()

    for name in REQUIRED_FIELDS:
        if not merged.get(name):
            env_name = ENV_VARS[name][0]
            raise ValueError(
                f"{env_name} environment variable is required. "
                f"Set it in .env, export it or pass --{name}."
            )

    for name in BOOL_FIELDS:
        if name in merged:
            merged[name] = parse_bool(merged[name], ENV_VARS[name][0])

    if "exclude" in merged:
        merged["exclude"] = parse_list(merged["exclude"])

    # Blank region/acl fall back to the defaults
    for name in ("region", "acl"):
        if name in merged and not merged[name]:
            del merged[name]

    return UploadConfig(**merged)


def config_from_env(
    overrides: Optional[Mapping[str, Any]] = None,
    file_settings: Optional[Mapping[str, Any]] = None,
    env_file: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> UploadConfig:
    """
    Load the run configuration.

    Precedence, lowest first: ``file_settings``, environment variables,
    ``overrides``. The .env file is only read when reading ``os.environ``.

    Returns:
        UploadConfig instance with loaded values

    Raises:
        ValueError: If required settings are missing or malformed

    Example:
        >>> config = config_from_env(overrides={"dry_run": True})
        >>> print(config.bucket)
        my-site
    """
    if environ is None:
        load_env_file(env_file)

    return build_upload_config(
        file_settings or {},
        settings_from_env(environ),
        overrides or {},
    )
