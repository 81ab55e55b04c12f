from __future__ import annotations

"""Write the plotting calls of a run as a standalone, replayable script."""

import pprint
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

_HEADER = '''\
"""Generated by shiftplot on {timestamp}.

Replays {n_tasks} shift panel(s) with the attribute map and formats resolved at run time.
"""

from shiftplot.plotting.matplotlib import plot_task, plot_worker_init

'''


def render_commands_script(
    tasks: Sequence[Dict[str, Any]],
    *,
    font_family: Optional[str] = None,
    attribute_map: Optional[Sequence[Dict[str, Any]]] = None,
    formats: Optional[Dict[str, Dict[Any, str]]] = None,
    timestamp: Optional[str] = None,
) -> str:
    stamp = timestamp or datetime.now().isoformat(timespec="seconds")
    parts = [_HEADER.format(timestamp=stamp, n_tasks=len(tasks))]

    if attribute_map is not None:
        parts.append(f"ATTRIBUTE_MAP = {pprint.pformat(list(attribute_map), sort_dicts=False)}\n\n")
    if formats is not None:
        parts.append(f"FORMATS = {pprint.pformat(formats, sort_dicts=False)}\n\n")

    parts.append(f"plot_worker_init({font_family!r})\n")
    for i, task in enumerate(tasks, start=1):
        title = str(task.get("title", "")).replace("\n", " ")
        parts.append(f"\n# panel {i}: {title}\n")
        parts.append(f"plot_task({pprint.pformat(dict(task), sort_dicts=False, width=100)})\n")
    return "".join(parts)


def write_commands_script(path: Path, tasks: Sequence[Dict[str, Any]], **kwargs: Any) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_commands_script(tasks, **kwargs), encoding="utf-8")
    return path
