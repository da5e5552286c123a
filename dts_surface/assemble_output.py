"""Logic for assembling the final declaration file."""

import datetime
from pathlib import Path

from dts_surface.clean_printed_output import clean_printed_output


def render_banner(template: str, version: str, year: int | None = None) -> str:
    """Fill the banner template with the API version and the current year."""
    if year is None:
        year = datetime.date.today().year
    return template.format(version=version, year=year)


def assemble_output(
    printed: str,
    include_paths: list[Path],
    banner: str | None = None,
) -> str:
    """Concatenate include files, the optional banner and the cleaned text."""
    parts = [p.read_text(encoding="utf-8") for p in include_paths]
    if banner:
        parts.append(banner + "\n")
    parts.append(clean_printed_output(printed))
    return "".join(parts)
