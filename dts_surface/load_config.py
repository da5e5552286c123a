"""Logic for loading the generator configuration document."""

import logging
from pathlib import Path
from typing import Any

import yaml

from dts_surface.errors import ConfigurationError
from dts_surface.generator_config import (
    DEFAULT_BANNER,
    DEFAULT_MAX_INVOCATIONS,
    GeneratorConfig,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "root": "",
    "index": "",
    "output": None,
    "package": None,
    "drop_types": [],
    "convert_to_any": [],
    "exclude_tags": [],
    "drop_generics": [],
    "rename_types": {},
    "include": [],
    "map": {},
    "flatten_enums": False,
    "banner": DEFAULT_BANNER,
    "max_invocations": DEFAULT_MAX_INVOCATIONS,
    "strict_collisions": False,
}

LIST_KEYS = ("drop_types", "convert_to_any", "exclude_tags", "drop_generics", "include")
MAPPING_KEYS = ("rename_types", "map")
BOOL_KEYS = ("flatten_enums", "strict_collisions")


def load_config(path: str | Path) -> GeneratorConfig:
    """Load a JSON (or YAML) configuration file and merge it with defaults.

    The document is merged shallowly: any key present in the file replaces the
    default value entirely.
    """
    p = Path(path)
    try:
        user_config = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        msg = f"Malformed configuration {p}: {e}"
        raise ConfigurationError(msg) from e
    if not isinstance(user_config, dict):
        msg = f"Configuration root must be an object: {p}"
        raise ConfigurationError(msg)

    for key in sorted(set(user_config) - set(DEFAULT_CONFIG)):
        logger.warning("Ignoring unknown configuration key: %s", key)

    config = {**DEFAULT_CONFIG, **user_config}
    _validate(config, p)

    return GeneratorConfig(
        config_dir=p.parent,
        root=str(config["root"] or ""),
        index=str(config["index"]),
        output=config["output"] or None,
        package=config["package"] or None,
        drop_types=frozenset(config["drop_types"]),
        convert_to_any=frozenset(config["convert_to_any"]),
        exclude_tags=frozenset(config["exclude_tags"]),
        drop_generics=frozenset(config["drop_generics"]),
        rename_types={str(k): str(v) for k, v in config["rename_types"].items()},
        include=tuple(str(x) for x in config["include"]),
        map={str(k): str(v) for k, v in config["map"].items()},
        flatten_enums=config["flatten_enums"],
        banner=str(config["banner"]),
        max_invocations=int(config["max_invocations"]),
        strict_collisions=config["strict_collisions"],
    )


def _validate(config: dict[str, Any], path: Path) -> None:
    """Reject values whose type cannot be used by the generator."""
    if not config["index"]:
        msg = f"Configuration {path} does not name an index file"
        raise ConfigurationError(msg)
    for key in LIST_KEYS:
        if not isinstance(config[key], list):
            msg = f"Configuration key '{key}' must be a list"
            raise ConfigurationError(msg)
    for key in MAPPING_KEYS:
        if not isinstance(config[key], dict):
            msg = f"Configuration key '{key}' must be an object"
            raise ConfigurationError(msg)
    for key in BOOL_KEYS:
        if not isinstance(config[key], bool):
            msg = f"Configuration key '{key}' must be true or false"
            raise ConfigurationError(msg)
    limit = config["max_invocations"]
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        msg = "Configuration key 'max_invocations' must be a positive integer"
        raise ConfigurationError(msg)
