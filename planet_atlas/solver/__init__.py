"""Solver façade: random start, spring relaxation and optional polish."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from ..constraints import ConstraintGraph
from ..polish import PolishOptions, polish_placement
from .config import get_solve_options, set_solve_options
from .model import (
    AlignmentError,
    Placement,
    PlanetName,
    RelaxationResult,
    Solution,
    SolveOptions,
    Triple,
)
from .relaxation import (
    ProgressCallback,
    clamp_forces,
    compute_forces,
    random_placement,
    relax,
    step,
)

logger = logging.getLogger(__name__)


def solve(
    graph: ConstraintGraph,
    rng: np.random.Generator,
    options: Optional[SolveOptions] = None,
    *,
    progress: Optional[ProgressCallback] = None,
    attempt: int = 0,
) -> RelaxationResult:
    """Relax a fresh random placement of ``graph`` and polish it when requested."""

    options = options or get_solve_options()
    result = relax(graph, rng, options, progress=progress, attempt=attempt)
    if not options.polish:
        return result

    polished = polish_placement(result.placement, graph, PolishOptions(enable=True))
    worst = max(polished.residuals.items(), key=lambda item: item[1], default=None)
    logger.debug(
        "Attempt %d: polish success=%s iterations=%d worst residual %s",
        attempt,
        polished.success,
        polished.iterations,
        worst,
    )
    return RelaxationResult(
        placement=polished.placement,
        cycles=result.cycles,
        iterations=result.iterations,
        converged=result.converged,
        max_force=result.max_force,
        notes=list(result.notes) + list(polished.notes),
    )


__all__ = [
    "AlignmentError",
    "Placement",
    "PlanetName",
    "ProgressCallback",
    "RelaxationResult",
    "Solution",
    "SolveOptions",
    "Triple",
    "clamp_forces",
    "compute_forces",
    "get_solve_options",
    "random_placement",
    "relax",
    "set_solve_options",
    "solve",
    "step",
]
