"""Data model for the per-file state of one resolver invocation."""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from dts_surface.reference_graph import ReferenceGraph

WILDCARD = "*"  # re-export of whatever the caller is still missing


class ReferenceOrigin(Enum):
    """Where in the source a type name was mentioned."""

    HERITAGE_IDENTIFIER = 0
    HERITAGE_QUALIFIED = 1
    TYPE_IDENTIFIER = 2
    TYPE_QUALIFIED = 3
    REEXPORT = 4


@dataclass
class ResolutionState:
    """Everything learned about one file during one resolver call."""

    file: Path
    wanted: list[str] | None  # None means "keep everything public"
    remaining: list[str] | None = None  # wanted names not yet found
    found: dict[str, str] = field(default_factory=dict)
    extra: dict[str, str] = field(default_factory=dict)
    referenced: Counter[str] = field(default_factory=Counter)
    reference_origins: dict[str, set[ReferenceOrigin]] = field(default_factory=dict)
    referenced_by: ReferenceGraph = field(default_factory=ReferenceGraph)
    imported: dict[str, str] = field(default_factory=dict)  # local name -> specifier
    recursive_targets: dict[str, list[str]] = field(default_factory=dict)
    exported_variable_statements: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Start with every wanted name outstanding."""
        if self.remaining is None and self.wanted is not None:
            self.remaining = list(self.wanted)

    def add_found_type(self, name: str, text: str) -> None:
        """Register a kept declaration as found or as a promotion candidate."""
        if self.wanted is None:
            self.found[name] = text
        elif self.remaining is not None and name in self.remaining:
            self.found[name] = text
            self.remaining.remove(name)
        else:
            self.extra[name] = text

    def add_reference(self, container: str, name: str, origin: ReferenceOrigin) -> None:
        """Record a mention of name inside container."""
        self.referenced_by.add(container, name)
        self.referenced[name] += 1
        self.reference_origins.setdefault(name, set()).add(origin)

    def add_recursive_target(self, specifier: str, name: str) -> None:
        """Queue a name (or the wildcard) to be looked up in another module."""
        targets = self.recursive_targets.setdefault(specifier, [])
        if name not in targets:
            targets.append(name)

    def add_exported_variable(self, text: str) -> None:
        """Collect an exported variable statement once, in discovery order."""
        if text not in self.exported_variable_statements:
            self.exported_variable_statements.append(text)
