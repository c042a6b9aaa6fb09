"""Plain-text rendering of search progress and accepted solutions."""

from __future__ import annotations

import sys
from typing import List, Optional, TextIO

from .solver.model import Placement


def _fmt(value: float, decimals: int) -> str:
    rendered = f"{round(value, decimals):.{decimals}f}"
    if rendered.startswith("-") and float(rendered) == 0.0:
        rendered = rendered[1:]
    return rendered


def format_placement(placement: Placement, decimals: int = 2) -> str:
    lines: List[str] = ["Planet,x,y,z"]
    for name, (x, y, z) in placement.as_dict().items():
        lines.append(f"{name},{_fmt(x, decimals)},{_fmt(y, decimals)},{_fmt(z, decimals)}")
    return "\n".join(lines) + "\n"


def format_solution(sequence: int, quality: float, placement: Placement, decimals: int = 2) -> str:
    return (
        f"Solution Number: {sequence}\n"
        f"Solution Quality: {_fmt(quality, decimals)}\n"
        "\n"
        f"{format_placement(placement, decimals)}"
    )


def format_progress(attempt: int, iterations: int, max_force: float) -> str:
    return f"Attempt: {attempt} - Iteration: {iterations} - Accuracy: {max_force:.4f}"


class ConsoleReporter:
    """Writes progress on a single rewritten line and each solution as a block."""

    def __init__(self, stream: Optional[TextIO] = None, *, decimals: int = 2, show_progress: bool = True):
        self.stream = stream if stream is not None else sys.stdout
        self.decimals = decimals
        self.show_progress = show_progress
        self._progress_width = 0

    def _clear_progress(self) -> None:
        if self._progress_width:
            self.stream.write("\r" + " " * self._progress_width + "\r")
            self._progress_width = 0

    def progress(self, attempt: int, iterations: int, max_force: float) -> None:
        if not self.show_progress:
            return
        line = format_progress(attempt, iterations, max_force)
        padding = max(self._progress_width - len(line), 0)
        self.stream.write("\r" + line + " " * padding)
        self.stream.flush()
        self._progress_width = len(line)

    def solution(self, sequence: int, quality: float, placement: Placement) -> None:
        self._clear_progress()
        self.stream.write(format_solution(sequence, quality, placement, self.decimals))
        self.stream.write("\n")
        self.stream.flush()

    def finish(self) -> None:
        self._clear_progress()
        self.stream.flush()


__all__ = [
    "ConsoleReporter",
    "format_placement",
    "format_progress",
    "format_solution",
]
