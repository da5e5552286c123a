"""Tests for the memo table and accumulated declarations of a run."""

import logging
from pathlib import Path

import pytest

from dts_surface.errors import (
    ConsistencyViolationError,
    DeclarationCollisionError,
    RunawayRecursionError,
)
from dts_surface.run_context import RunContext

INDEX = Path("/types/index.d.ts")
CHILD = Path("/types/child.d.ts")


def test_memoize_never_downgrades_true() -> None:
    """Verify that a found entry stays found."""
    context = RunContext()
    context.memoize(INDEX, "A", found=True)
    context.memoize(INDEX, "A", found=False)
    assert context.lookups[(INDEX, "A")] is True
    assert context.is_memoized(INDEX, "A")
    assert not context.is_memoized(CHILD, "A")


def test_redirect_requires_resolved_target() -> None:
    """Verify that redirecting to an unresolved entry is a consistency error."""
    context = RunContext()
    with pytest.raises(ConsistencyViolationError) as excinfo:
        context.redirect(INDEX, CHILD, "A", [INDEX])
    assert excinfo.value.file == INDEX
    assert str(INDEX) in excinfo.value.describe()


def test_redirect_replaces_false_but_not_true() -> None:
    """Verify that redirects upgrade misses and leave found entries alone."""
    context = RunContext()
    context.memoize(CHILD, "A", found=True)
    context.memoize(CHILD, "B", found=True)
    context.memoize(INDEX, "A", found=False)
    context.memoize(INDEX, "B", found=True)

    context.redirect(INDEX, CHILD, "A", [])
    context.redirect(INDEX, CHILD, "B", [])

    assert context.lookups[(INDEX, "A")] == (CHILD, "A")
    assert context.lookups[(INDEX, "B")] is True
    assert (INDEX, "C") not in context.lookups


def test_false_does_not_overwrite_redirect() -> None:
    """Verify that a later miss keeps an existing redirect."""
    context = RunContext()
    context.memoize(CHILD, "A", found=True)
    context.redirect(INDEX, CHILD, "A", [])
    context.memoize(INDEX, "A", found=False)
    assert context.lookups[(INDEX, "A")] == (CHILD, "A")


def test_invocation_ceiling() -> None:
    """Verify that exceeding the invocation ceiling aborts the run."""
    context = RunContext(max_invocations=2)
    context.count_invocation(INDEX, [])
    context.count_invocation(INDEX, [])
    with pytest.raises(RunawayRecursionError):
        context.count_invocation(CHILD, [INDEX])


def test_add_declaration_last_writer_wins(caplog: pytest.LogCaptureFixture) -> None:
    """Verify that a redefinition keeps the later text and logs a warning."""
    context = RunContext()
    context.add_declaration("A", "interface A {}")
    context.add_declaration("B", "interface B {}")
    with caplog.at_level(logging.WARNING):
        context.add_declaration("A", "interface A { x: string }")
    assert list(context.master) == ["A", "B"]
    assert context.master["A"] == "interface A { x: string }"
    assert "A" in caplog.text


def test_add_declaration_strict_collisions() -> None:
    """Verify that strict mode rejects differing texts for one name."""
    context = RunContext(strict_collisions=True)
    context.add_declaration("A", "interface A {}")
    context.add_declaration("A", "interface A {}")
    with pytest.raises(DeclarationCollisionError):
        context.add_declaration("A", "interface A { x: string }")


def test_variable_statements_are_deduplicated() -> None:
    """Verify that identical variable statements are accumulated once."""
    context = RunContext()
    context.add_variable_statement("export declare const a: number;")
    context.add_variable_statement("export declare const b: number;")
    context.add_variable_statement("export declare const a: number;")
    assert list(context.master) == ["__variable_0", "__variable_1"]
    assert context.master_text() == (
        "export declare const a: number;\nexport declare const b: number;"
    )
