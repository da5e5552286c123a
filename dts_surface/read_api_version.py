"""Logic for deriving the API version from a package manifest."""

import json
import re
from pathlib import Path

from dts_surface.errors import ConfigurationError

PATCH_COMPONENT_RE = re.compile(r"\.\d+$")


def read_api_version(package_path: Path) -> str:
    """Read package.json and drop the trailing patch component (1.2.3 -> 1.2)."""
    try:
        data = json.loads(package_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        msg = f"Malformed package manifest {package_path}: {e}"
        raise ConfigurationError(msg) from e
    version = data.get("version") if isinstance(data, dict) else None
    if not isinstance(version, str) or not version:
        msg = f"No version string in {package_path}"
        raise ConfigurationError(msg)
    return PATCH_COMPONENT_RE.sub("", version)
