"""Data model for the declaration generator configuration."""

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_MAX_INVOCATIONS = 1_000_000
DEFAULT_BANNER = "/*! API v{version} */"


@dataclass(frozen=True)
class GeneratorConfig:
    """Settings for one generator run. Paths are relative to config_dir."""

    config_dir: Path
    root: str
    index: str
    output: str | None = None
    package: str | None = None
    drop_types: frozenset[str] = frozenset()
    convert_to_any: frozenset[str] = frozenset()
    exclude_tags: frozenset[str] = frozenset()
    drop_generics: frozenset[str] = frozenset()
    rename_types: dict[str, str] = field(default_factory=dict)
    include: tuple[str, ...] = ()
    map: dict[str, str] = field(default_factory=dict)  # specifier prefix -> path
    flatten_enums: bool = False
    banner: str = DEFAULT_BANNER
    max_invocations: int = DEFAULT_MAX_INVOCATIONS
    strict_collisions: bool = False

    @property
    def index_path(self) -> Path:
        """Entry declaration file."""
        return self.config_dir / self.root / self.index

    @property
    def output_path(self) -> Path | None:
        """Output file, or None to write to stdout."""
        return self.config_dir / self.output if self.output else None

    @property
    def package_path(self) -> Path | None:
        """package.json used for the version banner."""
        return self.config_dir / self.package if self.package else None

    @property
    def include_paths(self) -> list[Path]:
        """Files prepended verbatim to the output."""
        return [self.config_dir / name for name in self.include]

    def is_dropped(self, name: str) -> bool:
        """Check if a type name is removed or made opaque."""
        return name in self.drop_types or name in self.convert_to_any

    def is_excluded(self, tags: set[str]) -> bool:
        """Check if any of the annotation tags marks an exclusion."""
        return not self.exclude_tags.isdisjoint(tags)
