from __future__ import annotations

import logging
import sys
from pathlib import Path


def _ensure_repo_root_on_path() -> None:
    """Put the repository root on ``sys.path`` when run as a plain script."""
    repo_root_str = str(Path(__file__).resolve().parent.parent)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


try:
    # python -m fraction_quest
    from .app import run  # type: ignore[attr-defined]
except ImportError:
    # python fraction_quest/__main__.py
    _ensure_repo_root_on_path()
    from fraction_quest.app import run  # type: ignore[attr-defined]


def main() -> int:
    """Entry point for running the game from the command line."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
