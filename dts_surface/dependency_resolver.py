"""Cross-file dependency resolution for declaration files."""

import logging
import os
from collections.abc import Sequence
from pathlib import Path

from dts_surface.collect_dependencies import DependencyCollector
from dts_surface.errors import CircularDependencyError
from dts_surface.frontend import parse_declarations
from dts_surface.generator_config import GeneratorConfig
from dts_surface.resolution_state import WILDCARD, ResolutionState
from dts_surface.resolve_module_path import resolve_module_path
from dts_surface.run_context import RunContext

logger = logging.getLogger(__name__)


class DependencyResolver:
    """Computes the set of declarations needed to satisfy a set of names.

    Results accumulate in the shared RunContext: its lookups table memoizes
    which (file, name) pairs were already examined and its master map holds
    every kept declaration in discovery order.
    """

    def __init__(self, config: GeneratorConfig, context: RunContext | None = None) -> None:
        """Initialize the resolver with a configuration and run state."""
        self.config = config
        self.context = context or RunContext(
            config.max_invocations, strict_collisions=config.strict_collisions
        )

    def resolve(
        self,
        file: Path,
        wanted: Sequence[str] | None = None,
        depth: int = 0,
        stack: Sequence[Path] = (),
    ) -> ResolutionState:
        """Resolve wanted names (or every public declaration) from file."""
        file = Path(os.path.normpath(file))
        stack = tuple(stack)
        if file in stack:
            msg = f"Circular dependency on {file}"
            raise CircularDependencyError(msg, file, stack)
        self.context.count_invocation(file, stack)

        logger.debug(
            "%sreading %s for %s",
            "  " * depth,
            file,
            ", ".join(wanted) if wanted is not None else "all public types",
        )

        source = parse_declarations(file.read_text(encoding="utf-8"), str(file))
        state = ResolutionState(file=file, wanted=list(wanted) if wanted is not None else None)
        DependencyCollector(self.config, source, state).collect()

        keys = self._surviving_references(state)
        self._promote_extra_types(state, keys)
        self._memoize(state)

        child_stack = (*stack, file)
        self._resolve_reexports(state, depth, child_stack)
        self._accumulate(state)
        self._resolve_imports(state, keys, depth, child_stack)
        return state

    def _surviving_references(self, state: ResolutionState) -> list[str]:
        """Referenced names that belong to the ownership chain of a wanted name."""
        keys = list(state.referenced)
        if state.wanted is None:
            return keys
        roots = set(state.wanted)
        return [key for key in keys if state.referenced_by.is_reachable_from(key, roots)]

    def _promote_extra_types(self, state: ResolutionState, keys: list[str]) -> None:
        """Keep same-file declarations that a surviving reference needs."""
        for name, text in state.extra.items():
            if name in keys and name not in state.found:
                state.found[name] = text
                self.context.memoize(state.file, name, found=True)

    def _memoize(self, state: ResolutionState) -> None:
        if state.wanted is not None:
            for name in state.wanted:
                self.context.memoize(state.file, name, found=name in state.found)
        for name in state.found:
            self.context.memoize(state.file, name, found=True)

    def _resolve_reexports(
        self, state: ResolutionState, depth: int, stack: tuple[Path, ...]
    ) -> None:
        """Follow "export ... from" statements for names still outstanding."""
        if not state.recursive_targets:
            return

        outstanding: list[str] | None = None
        if state.wanted is not None:
            outstanding = [name for name in state.wanted if name not in state.found]
            if not outstanding:
                return

        for specifier, names in state.recursive_targets.items():
            path = resolve_module_path(specifier, state.file, self.config)

            sublist: list[str] | None
            if WILDCARD in names:
                sublist = list(outstanding) if outstanding is not None else None
            elif outstanding is not None:
                sublist = [name for name in names if name in outstanding]
            else:
                sublist = list(names)

            if sublist is not None:
                sublist = [n for n in sublist if not self.context.is_memoized(path, n)]
                if not sublist:
                    continue

            child = self.resolve(path, sublist, depth + 1, stack)
            for name in child.found:
                self.context.redirect(state.file, path, name, stack)

            if outstanding is not None:
                outstanding = [name for name in outstanding if name not in child.found]
                if not outstanding:
                    break

    def _accumulate(self, state: ResolutionState) -> None:
        for name, text in state.found.items():
            self.context.add_declaration(name, text)
        for statement in state.exported_variable_statements:
            self.context.add_variable_statement(statement)

    def _resolve_imports(
        self,
        state: ResolutionState,
        keys: list[str],
        depth: int,
        stack: tuple[Path, ...],
    ) -> None:
        """Read imported declarations that surviving references depend on."""
        grouped: dict[str, list[str]] = {}
        for name in keys:
            if name not in state.found and name in state.imported:
                grouped.setdefault(state.imported[name], []).append(name)

        for specifier, names in grouped.items():
            path = resolve_module_path(specifier, state.file, self.config)
            pending = [name for name in names if not self.context.is_memoized(path, name)]
            if pending:
                self.resolve(path, pending, depth + 1, stack)
