"""Logic for mapping a module specifier to a declaration file path."""

import os
from pathlib import Path

from dts_surface.generator_config import GeneratorConfig

DECLARATION_SUFFIX = ".d.ts"
PACKAGE_ENTRY = Path("src") / "index.d.ts"


def resolve_module_path(specifier: str, importer: Path, config: GeneratorConfig) -> Path:
    """Resolve an import/export specifier seen in importer to a file path.

    - A configured map prefix is substituted and resolved from the config dir.
    - Relative specifiers resolve next to the importing file.
    - Specifiers with a path separator resolve under the declaration root.
    - Bare package names resolve to <root>/<name>/src/index.d.ts.
    """
    for prefix, target in config.map.items():
        if specifier.startswith(prefix):
            return _normalize(config.config_dir / specifier.replace(prefix, target, 1))

    if specifier.startswith("."):
        return _declaration_file(importer.parent / _strip_js(specifier))

    if "/" in specifier:
        return _declaration_file(config.config_dir / config.root / specifier)

    return _normalize(config.config_dir / config.root / specifier / PACKAGE_ENTRY)


def _strip_js(specifier: str) -> str:
    # ESM-style "./foo.js" refers to the declarations in "./foo.d.ts".
    return specifier[:-3] if specifier.endswith(".js") else specifier


def _declaration_file(base: Path) -> Path:
    candidate = _normalize(base.parent / (base.name + DECLARATION_SUFFIX))
    if not candidate.exists():
        directory_index = _normalize(base / ("index" + DECLARATION_SUFFIX))
        if directory_index.exists():
            return directory_index
    return candidate


def _normalize(path: Path) -> Path:
    """Collapse "." and ".." segments without touching the filesystem."""
    return Path(os.path.normpath(path))
