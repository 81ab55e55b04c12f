from __future__ import annotations

"""Process-safe Matplotlib plot task entrypoints.

Tasks are plain dicts so they can be pickled into a
`concurrent.futures.ProcessPoolExecutor` and also written out verbatim by
`shiftplot.core.codegen`.
"""

from typing import Any, Dict, Optional

from .shared import as_codes, as_ndarray, as_output_path
from .shift import plot_shift


def plot_worker_init(font_family: Optional[str]) -> None:
    import matplotlib

    matplotlib.use("Agg", force=True)
    import matplotlib.pyplot as plt  # noqa: F401

    plt.rcParams["axes.unicode_minus"] = False
    if font_family:
        plt.rcParams["font.family"] = font_family


def _maybe_export_plotly_html(task: Dict[str, Any]) -> None:
    if not bool(task.get("plotly_html", False)):
        return

    from ..plotly.shift_html import export_task_html

    html_path = export_task_html(task)
    print(f"Wrote: {html_path}")


def plot_task(task: Dict[str, Any]) -> None:
    import matplotlib.pyplot as plt

    kind = task["kind"]
    if kind == "shift":
        plot_shift(
            output_path=as_output_path(task["output_path"]),
            title=str(task.get("title", "")),
            x=as_ndarray(task["x"]),
            y=as_ndarray(task["y"]),
            codes=as_codes(task["codes"]),
            attribute_map=task["attribute_map"],
            x_label=task["x_label"],
            y_label=task["y_label"],
            width_px=int(task["width_px"]),
            height_px=int(task["height_px"]),
            dpi=int(task["dpi"]),
            shift_style=task["shift_style"],
            common_style=task["common_style"],
        )
        _maybe_export_plotly_html(task)
        return

    plt.close("all")
    raise ValueError(f"Unknown plot task kind: {kind!r}")


__all__ = ["plot_task", "plot_worker_init"]
