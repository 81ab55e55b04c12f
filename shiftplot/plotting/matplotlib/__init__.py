"""Matplotlib rendering helpers."""

from .shift import plot_shift
from .task import plot_task, plot_worker_init

__all__ = [
    "plot_shift",
    "plot_task",
    "plot_worker_init",
]
