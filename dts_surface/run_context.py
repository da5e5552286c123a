"""Process-wide state shared by every resolver call in one run."""

import logging
from collections.abc import Sequence
from pathlib import Path

from dts_surface.errors import (
    ConsistencyViolationError,
    DeclarationCollisionError,
    RunawayRecursionError,
)
from dts_surface.generator_config import DEFAULT_MAX_INVOCATIONS

logger = logging.getLogger(__name__)

LookupKey = tuple[Path, str]
LookupValue = bool | LookupKey  # True, False, or a redirect to another file


class RunContext:
    """Memo table, accumulated declarations and the invocation budget."""

    def __init__(
        self,
        max_invocations: int = DEFAULT_MAX_INVOCATIONS,
        *,
        strict_collisions: bool = False,
    ) -> None:
        """Initialize empty state for a run."""
        self.max_invocations = max_invocations
        self.strict_collisions = strict_collisions
        self.lookups: dict[LookupKey, LookupValue] = {}
        self.master: dict[str, str] = {}
        self.invocations = 0
        self._seen_variables: set[str] = set()
        self._variable_index = 0

    def count_invocation(self, file: Path, stack: Sequence[Path]) -> None:
        """Charge one resolver call against the ceiling."""
        self.invocations += 1
        if self.invocations > self.max_invocations:
            msg = f"Resolver exceeded {self.max_invocations} invocations"
            raise RunawayRecursionError(msg, file, stack)

    def is_memoized(self, file: Path, name: str) -> bool:
        """Check if name was already looked up in file."""
        return (file, name) in self.lookups

    def memoize(self, file: Path, name: str, found: bool) -> None:
        """Record whether name was found in file. True is never downgraded."""
        if self.lookups.get((file, name)) is True:
            return
        if not found and isinstance(self.lookups.get((file, name)), tuple):
            return
        self.lookups[(file, name)] = found

    def redirect(self, file: Path, child: Path, name: str, stack: Sequence[Path]) -> None:
        """Point file's entry for name at the child file that declares it."""
        target = self.lookups.get((child, name))
        if target is not True:
            msg = (
                f"Expected {child}:{name} to be resolved, found {target!r} "
                f"while redirecting from {file}"
            )
            raise ConsistencyViolationError(msg, file, stack)
        current = self.lookups.get((file, name))
        if current is None or current is False:
            self.lookups[(file, name)] = (child, name)

    def add_declaration(self, name: str, text: str) -> None:
        """Write a kept declaration into master. The last writer wins."""
        existing = self.master.get(name)
        if existing is not None and existing != text:
            if self.strict_collisions:
                msg = f"Conflicting declarations for '{name}'"
                raise DeclarationCollisionError(msg)
            logger.warning("Declaration '%s' redefined; keeping the later text", name)
        self.master[name] = text

    def add_variable_statement(self, text: str) -> None:
        """Append an exported variable statement under a synthetic key, once."""
        if text in self._seen_variables:
            return
        self._seen_variables.add(text)
        self.master[f"__variable_{self._variable_index}"] = text
        self._variable_index += 1

    def master_text(self) -> str:
        """Concatenated text of every kept declaration, in discovery order."""
        return "\n".join(self.master.values())
