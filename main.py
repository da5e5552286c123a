"""Command-line entry point for generating the public declaration file."""

from dts_surface.generate_api import main

if __name__ == "__main__":
    raise SystemExit(main())
