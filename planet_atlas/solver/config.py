"""Process-wide relaxation defaults picked up by new ``SearchOptions``."""

from __future__ import annotations

import copy

from .model import SolveOptions

_DEFAULT_SOLVE_OPTIONS = SolveOptions()


def get_solve_options() -> SolveOptions:
    """Return a private copy of the current defaults."""

    return copy.deepcopy(_DEFAULT_SOLVE_OPTIONS)


def set_solve_options(options: SolveOptions) -> None:
    """Replace the defaults; later edits to ``options`` do not leak in."""

    global _DEFAULT_SOLVE_OPTIONS
    _DEFAULT_SOLVE_OPTIONS = copy.deepcopy(options)


__all__ = ["get_solve_options", "set_solve_options"]
