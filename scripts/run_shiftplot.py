from __future__ import annotations

import sys
from pathlib import Path


_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))


from shiftplot.cli import main  # noqa: E402


if __name__ == "__main__":
    main(default_config=_REPO_ROOT / "config.yaml")
