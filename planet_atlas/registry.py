"""Append-only store of accepted solutions with duplicate detection."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Optional

import numpy as np

from .solver.math_utils import row_norms
from .solver.model import Placement, Solution, Triple

logger = logging.getLogger(__name__)

DUPLICATE_TOLERANCE = 0.001


def same_placement(a: Placement, b: Placement, tolerance: float = DUPLICATE_TOLERANCE) -> bool:
    """``True`` when every planet of ``a`` lies within ``tolerance`` of its location in ``b``."""

    if set(a.names) != set(b.names):
        return False
    drift = row_norms(a.positions - b.positions_for(a.names))
    return bool(np.all(drift <= tolerance))


def is_duplicate(
    candidate: Placement,
    accepted: Iterable[Placement],
    tolerance: float = DUPLICATE_TOLERANCE,
) -> bool:
    """Return ``True`` if ``candidate`` matches any previously accepted placement."""

    return any(same_placement(candidate, previous, tolerance) for previous in accepted)


class SolutionRegistry:
    """Accepted solutions in discovery order; entries are never removed."""

    def __init__(self, tolerance: float = DUPLICATE_TOLERANCE):
        self.tolerance = tolerance
        self._solutions: List[Solution] = []

    def __len__(self) -> int:
        return len(self._solutions)

    def __iter__(self) -> Iterator[Solution]:
        return iter(tuple(self._solutions))

    @property
    def solutions(self) -> List[Solution]:
        return list(self._solutions)

    def is_duplicate(self, placement: Placement) -> bool:
        return is_duplicate(placement, (solution.placement for solution in self._solutions), self.tolerance)

    def accept(
        self,
        placement: Placement,
        quality: float,
        *,
        triple: Optional[Triple] = None,
        flatness: float = 0.0,
        attempt: int = 0,
    ) -> Solution:
        solution = Solution(
            sequence=len(self._solutions) + 1,
            quality=float(quality),
            placement=placement,
            triple=triple,
            flatness=float(flatness),
            attempt=attempt,
        )
        self._solutions.append(solution)
        logger.debug("Registered solution %d from attempt %d", solution.sequence, attempt)
        return solution


__all__ = ["DUPLICATE_TOLERANCE", "SolutionRegistry", "is_duplicate", "same_placement"]
