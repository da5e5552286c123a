"""Tests for output cleanup, versioning and final assembly."""

import json
from pathlib import Path

import pytest

from dts_surface.assemble_output import assemble_output, render_banner
from dts_surface.clean_printed_output import (
    break_inline_comments,
    clean_printed_output,
    strip_private_remarks,
)
from dts_surface.errors import ConfigurationError
from dts_surface.read_api_version import read_api_version


def test_break_inline_comments() -> None:
    """Verify that block comments after code move to their own line."""
    text = "export interface A { a: number; /** Doc. */ b: string; }"
    assert break_inline_comments(text) == (
        "export interface A { a: number;\n/** Doc. */ b: string; }"
    )


def test_break_inline_comments_after_any_code() -> None:
    """Verify that a comment following any token on the same line is moved."""
    text = "export declare const a: number /* units */;"
    assert break_inline_comments(text) == "export declare const a: number\n/* units */;"


def test_break_inline_comments_leaves_own_line_comments() -> None:
    """Verify that comments already on their own line are untouched."""
    text = "export interface A {\n    /** Doc. */\n    a: number;\n}"
    assert break_inline_comments(text) == text


def test_strip_private_remarks_before_tag() -> None:
    """Verify that remarks are removed up to the next tag."""
    text = "/**\n * Summary.\n *\n * @privateRemarks note\n * @public\n */"
    assert strip_private_remarks(text) == "/**\n * Summary.\n *\n * @public\n */"


def test_strip_private_remarks_at_end() -> None:
    """Verify that trailing remarks and the empty line before them go."""
    text = "/**\n * Summary.\n *\n * @privateRemarks note\n */\nexport interface A {}"
    assert strip_private_remarks(text) == "/**\n * Summary.\n */\nexport interface A {}"


def test_clean_printed_output_plain_text() -> None:
    """Verify that text without comments is unchanged."""
    text = "export interface A {\n    a: number;\n}\n"
    assert clean_printed_output(text) == text


def test_read_api_version(tmp_path: Path) -> None:
    """Verify that the patch component is dropped from the version."""
    package = tmp_path / "package.json"
    package.write_text(json.dumps({"name": "lib", "version": "31.4.2"}), encoding="utf-8")
    assert read_api_version(package) == "31.4"


def test_read_api_version_missing(tmp_path: Path) -> None:
    """Verify that a manifest without a version is rejected."""
    package = tmp_path / "package.json"
    package.write_text(json.dumps({"name": "lib"}), encoding="utf-8")
    with pytest.raises(ConfigurationError, match="version"):
        read_api_version(package)


def test_render_banner() -> None:
    """Verify that the banner template receives version and year."""
    assert render_banner("/*! v{version} (c) {year} */", "2.5", year=2024) == (
        "/*! v2.5 (c) 2024 */"
    )


def test_assemble_output(tmp_path: Path) -> None:
    """Verify include files, banner and body are concatenated in order."""
    first = tmp_path / "first.d.ts"
    second = tmp_path / "second.d.ts"
    first.write_text("// first\n", encoding="utf-8")
    second.write_text("// second\n", encoding="utf-8")

    out = assemble_output(
        "export interface A {}\n", [first, second], banner="/*! API v1.0 */"
    )
    assert out == "// first\n// second\n/*! API v1.0 */\nexport interface A {}\n"


def test_assemble_output_without_banner() -> None:
    """Verify that the banner is optional."""
    assert assemble_output("export interface A {}\n", []) == "export interface A {}\n"
