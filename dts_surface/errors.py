"""Exception types raised while generating the public declaration file."""

from collections.abc import Sequence
from pathlib import Path


class DeclarationGeneratorError(Exception):
    """Base class for all fatal generator errors."""


class ConfigurationError(DeclarationGeneratorError):
    """The configuration document has a missing or malformed value."""


class DeclarationParseError(DeclarationGeneratorError):
    """A declaration file could not be parsed without syntax errors."""


class UnhandledConstructError(DeclarationGeneratorError):
    """A type mention has a shape the resolver does not understand."""


class DeclarationCollisionError(DeclarationGeneratorError):
    """Two files produced different text for the same declaration name."""


class ResolutionError(DeclarationGeneratorError):
    """Failure during dependency resolution, with the file and call stack."""

    def __init__(self, message: str, file: Path, stack: Sequence[Path] = ()) -> None:
        """Store the offending file and the active call stack."""
        super().__init__(message)
        self.file = file
        self.stack = tuple(stack)

    def describe(self) -> str:
        """Render the error with the offending file and call stack."""
        lines = [str(self), f"  file: {self.file}"]
        if self.stack:
            lines.append("  stack:")
            lines.extend(f"    {entry}" for entry in self.stack)
        return "\n".join(lines)


class CircularDependencyError(ResolutionError):
    """A file was re-entered while already on the active call stack."""


class RunawayRecursionError(ResolutionError):
    """The global invocation ceiling was exceeded."""


class ConsistencyViolationError(ResolutionError):
    """A lookup entry disagreed with the expected state. Indicates a bug."""
