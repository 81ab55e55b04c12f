from pathlib import Path

from shiftplot.cli import main

if __name__ == "__main__":
    main(default_config=Path(__file__).resolve().parent / "config.yaml")
