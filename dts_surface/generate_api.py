"""Generate a single public declaration file from a tree of .d.ts files.

Reads a JSON configuration naming the declaration root and index file,
collects the exported declarations reachable from the index, applies the
redaction policy and writes the result to the configured output (or stdout).
"""

import argparse
import logging
import sys

from dts_surface.errors import DeclarationGeneratorError, ResolutionError
from dts_surface.run_generation import run_generation

DEFAULT_CONFIG_FILE = "./api-config.json"


def main(argv: list[str] | None = None) -> int:
    """Run the generator from the command line."""
    ap = argparse.ArgumentParser(
        description="Extract the public API surface of a declaration file tree.",
    )
    ap.add_argument(
        "-c",
        "--config",
        default=DEFAULT_CONFIG_FILE,
        help=f"Path to the JSON configuration file (default: {DEFAULT_CONFIG_FILE})",
    )
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        return run_generation(args)
    except ResolutionError as e:
        print(f"Error: {e.describe()}", file=sys.stderr)
    except (DeclarationGeneratorError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
