"""Module entrypoint for running tweesplit as ``python -m tweesplit``."""

from __future__ import annotations

from tweesplit.cli import main


if __name__ == "__main__":
    main()
