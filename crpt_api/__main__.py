"""Module entrypoint for running the client as ``python -m crpt_api``."""

from __future__ import annotations

from crpt_api.cli import main


if __name__ == "__main__":
    main()
