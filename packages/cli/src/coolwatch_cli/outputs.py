"""Publishing run results as pipeline outputs."""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.table import Table

console = Console()
logger = logging.getLogger(__name__)


def write_outputs(outputs: dict[str, str], path: str | None = None) -> None:
    """Append ``key=value`` lines to the GITHUB_OUTPUT file, or print them when not in Actions."""
    target = path or os.environ.get("GITHUB_OUTPUT")
    if target:
        with open(target, "a", encoding="utf-8") as f:
            for key, value in outputs.items():
                # key=value lines are single-line only.
                value = str(value).replace("\n", " ")
                f.write(f"{key}={value}\n")
        logger.debug("Wrote %d output(s) to %s", len(outputs), target)
        return

    table = Table(title="Outputs", show_header=True, header_style="bold cyan")
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key, value in outputs.items():
        table.add_row(key, str(value))
    console.print(table)
