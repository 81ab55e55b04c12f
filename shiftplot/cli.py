from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from .core.visualizer import ShiftPlotVisualizer


def parse_args(argv: Optional[List[str]] = None, *, default_config: Optional[Path] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Shift plots (post-baseline vs. baseline) by treatment arm")
    parser.add_argument(
        "--config",
        type=str,
        default=str(default_config or Path("config.yaml")),
        help="Path to YAML config.",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Output directory (overrides output.output_dir; 'work' writes to a temp dir).",
    )
    parser.add_argument(
        "--print-code",
        action="store_true",
        default=None,
        help="Also write the generated plotting commands as a Python script.",
    )
    parser.add_argument(
        "--plotly-html",
        action="store_true",
        default=None,
        help="Also write an interactive Plotly HTML next to each image.",
    )
    parser.add_argument(
        "--sample",
        action="store_true",
        help="Render only the first by-group.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None, *, default_config: Optional[Path] = None) -> None:
    args = parse_args(argv, default_config=default_config)
    visualizer = ShiftPlotVisualizer(Path(args.config))
    visualizer.config = visualizer.config.with_overrides(
        output_dir=args.output_dir,
        print_code=args.print_code,
        plotly_html=args.plotly_html,
    )
    visualizer.run(sample=args.sample)


if __name__ == "__main__":
    main()
