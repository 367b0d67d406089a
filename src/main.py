"""Run script.

Why it exists:
- Lets `python -m main` work from inside `src/` during development.
- Keeps a simple entry point next to the installed `fastlane-desk` script.
"""

from __future__ import annotations

from cli.main import run


def main() -> None:
    run()


if __name__ == "__main__":
    main()
