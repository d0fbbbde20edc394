"""Entry point for ``python -m phptypes``."""

from phptypes.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
