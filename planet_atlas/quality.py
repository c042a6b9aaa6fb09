"""Fit quality of a placement against the measured distances."""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

import numpy as np

from .constraints import Constraint
from .solver.model import Placement


def _residuals(placement: Placement, constraints: Iterable[Constraint]) -> List[Tuple[Constraint, float]]:
    out: List[Tuple[Constraint, float]] = []
    for constraint in constraints:
        actual = placement.distance(constraint.planet_one, constraint.planet_two)
        out.append((constraint, actual - constraint.distance))
    return out


def score_placement(placement: Placement, constraints: Iterable[Constraint]) -> float:
    """Mean absolute deviation between implied and measured distances.

    Lower is better; ``0.0`` is a perfect fit. An empty constraint set scores ``0.0``.
    """

    residuals = _residuals(placement, constraints)
    if not residuals:
        return 0.0
    return float(np.mean([abs(value) for _, value in residuals]))


def residual_breakdown(placement: Placement, constraints: Iterable[Constraint]) -> List[Dict[str, object]]:
    """Signed per-constraint residuals (``actual - measured``) for diagnostics."""

    return [
        {
            "planets": (constraint.planet_one, constraint.planet_two),
            "measured": constraint.distance,
            "actual": constraint.distance + value,
            "residual": value,
        }
        for constraint, value in _residuals(placement, constraints)
    ]


__all__ = ["residual_breakdown", "score_placement"]
