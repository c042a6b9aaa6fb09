"""Least-squares polishing stage for relaxed placements."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
from scipy.optimize import least_squares

from ..constraints import ConstraintGraph
from ..solver.math_utils import row_norms
from ..solver.model import Placement

logger = logging.getLogger(__name__)


@dataclass
class PolishOptions:
    """Configuration knobs for the polishing optimizer."""

    enable: bool = True
    loss: str = "linear"
    max_nfev: Optional[int] = None
    ftol: float = 1e-12


@dataclass
class PolishResult:
    placement: Placement
    success: bool
    iterations: int
    residuals: Dict[Tuple[str, str], float] = field(default_factory=dict)
    notes: List[str] = field(default_factory=list)


def _distance_residuals(flat: np.ndarray, graph: ConstraintGraph) -> np.ndarray:
    positions = flat.reshape(-1, 3)
    edges = graph.edges
    return row_norms(positions[edges.first] - positions[edges.second]) - edges.target


def polish_placement(
    placement: Placement,
    graph: ConstraintGraph,
    options: Optional[PolishOptions] = None,
) -> PolishResult:
    """Refine ``placement`` so implied distances match the measurements more closely."""

    options = options or PolishOptions()
    if not options.enable or len(graph.edges.target) == 0:
        return PolishResult(placement=placement, success=True, iterations=0)

    initial = np.array(placement.positions_for(graph.planets), dtype=float).ravel()
    result = least_squares(
        _distance_residuals,
        initial,
        args=(graph,),
        method="trf",
        loss=options.loss,
        ftol=options.ftol,
        max_nfev=options.max_nfev,
    )

    polished = Placement(graph.planets, result.x.reshape(-1, 3))
    # repeated measurements of one pair share a key and their residuals add up
    breakdown: Dict[Tuple[str, str], float] = {}
    for constraint, residual in zip(graph.constraint_set, result.fun):
        breakdown[constraint.key] = breakdown.get(constraint.key, 0.0) + abs(float(residual))

    logger.debug(
        "Polish finished success=%s nfev=%d cost=%.3e", result.success, result.nfev, float(result.cost)
    )
    return PolishResult(
        placement=polished,
        success=bool(result.success),
        iterations=int(result.nfev),
        residuals=breakdown,
        notes=[] if result.success else ["least_squares did not converge"],
    )


__all__ = [
    "PolishOptions",
    "PolishResult",
    "polish_placement",
]
