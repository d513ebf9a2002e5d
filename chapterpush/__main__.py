"""Module entrypoint for running chapterpush as ``python -m chapterpush``."""

from __future__ import annotations

from chapterpush.cli import main


if __name__ == "__main__":
    main()
