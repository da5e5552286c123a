"""Tests for module specifier resolution."""

from pathlib import Path

from dts_surface.generator_config import GeneratorConfig
from dts_surface.resolve_module_path import resolve_module_path


def _config(tmp_path: Path, **kwargs) -> GeneratorConfig:
    return GeneratorConfig(config_dir=tmp_path, root="types", index="index.d.ts", **kwargs)


def test_relative_specifier(tmp_path: Path) -> None:
    """Verify that relative specifiers resolve next to the importing file."""
    importer = tmp_path / "types" / "core" / "index.d.ts"
    path = resolve_module_path("../util/strings", importer, _config(tmp_path))
    assert path == tmp_path / "types" / "util" / "strings.d.ts"


def test_relative_specifier_with_js_extension(tmp_path: Path) -> None:
    """Verify that an ESM-style .js suffix maps to the declaration file."""
    importer = tmp_path / "types" / "index.d.ts"
    path = resolve_module_path("./shapes.js", importer, _config(tmp_path))
    assert path == tmp_path / "types" / "shapes.d.ts"


def test_relative_directory_falls_back_to_index(tmp_path: Path) -> None:
    """Verify that a directory specifier resolves to its index file."""
    (tmp_path / "types" / "shapes").mkdir(parents=True)
    (tmp_path / "types" / "shapes" / "index.d.ts").write_text("", encoding="utf-8")
    importer = tmp_path / "types" / "index.d.ts"
    path = resolve_module_path("./shapes", importer, _config(tmp_path))
    assert path == tmp_path / "types" / "shapes" / "index.d.ts"


def test_specifier_with_separator_resolves_under_root(tmp_path: Path) -> None:
    """Verify that pathed specifiers resolve under the declaration root."""
    importer = tmp_path / "types" / "a" / "index.d.ts"
    path = resolve_module_path("geometry/point", importer, _config(tmp_path))
    assert path == tmp_path / "types" / "geometry" / "point.d.ts"


def test_bare_package_name(tmp_path: Path) -> None:
    """Verify that bare names resolve to the package's src/index.d.ts."""
    importer = tmp_path / "types" / "index.d.ts"
    path = resolve_module_path("geometry", importer, _config(tmp_path))
    assert path == tmp_path / "types" / "geometry" / "src" / "index.d.ts"


def test_mapped_prefix(tmp_path: Path) -> None:
    """Verify that a configured prefix mapping is applied first."""
    config = _config(tmp_path, map={"@scope/": "vendor/"})
    importer = tmp_path / "types" / "index.d.ts"
    path = resolve_module_path("@scope/lib/index.d.ts", importer, config)
    assert path == tmp_path / "vendor" / "lib" / "index.d.ts"
