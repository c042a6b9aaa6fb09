"""Canonical orientation of solved placements for comparison and display."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import combinations
from typing import Optional, Sequence

import numpy as np

from .solver.math_utils import X_AXIS, Y_AXIS, Z_AXIS, rotation_taking
from .solver.model import AlignmentError, PlanetName, Placement, Triple

logger = logging.getLogger(__name__)

ALIGNMENT_TOLERANCE = 1e-4


@dataclass
class CanonicalResult:
    """Flattest aligned placement plus the triple that produced it."""

    placement: Placement
    flatness: float
    triple: Triple


def _rotate(positions: np.ndarray, rotation) -> np.ndarray:
    if rotation is None:
        return positions
    return rotation.apply(positions)


def align_to_reference(placement: Placement, triple: Sequence[PlanetName]) -> Placement:
    """Rigidly move ``placement`` into the frame defined by ``triple``.

    Afterwards the first planet sits at the origin, the second on the
    positive x-axis and the third on the x/y-plane with ``y >= 0``. When
    there is a fourth planet, the first one outside the triple (in placement
    order) is given a non-negative z by mirroring if needed.
    """

    if len(triple) != 3 or len(set(triple)) != 3:
        raise ValueError(f"reference triple must name three distinct planets, got {tuple(triple)!r}")
    p1, p2, p3 = (placement.index(name) for name in triple)
    positions = np.array(placement.positions, dtype=float)

    # 1) first reference planet to the origin
    positions = positions - positions[p1]

    # 2) second reference planet onto +x
    positions = _rotate(positions, rotation_taking(positions[p2], X_AXIS, half_turn_axis=Z_AXIS))

    # 3) third reference planet's offset from the p1-p2 line (now the x-axis) into the x/y-plane, y >= 0
    offset = np.array([0.0, positions[p3, 1], positions[p3, 2]])
    target = np.array([0.0, abs(offset[1]), 0.0])
    if target[1] == 0.0:
        target = Y_AXIS * float(np.linalg.norm(offset))
    positions = _rotate(positions, rotation_taking(offset, target, half_turn_axis=X_AXIS))

    # 4) pin the handedness with the first planet outside the triple
    reference_set = {p1, p2, p3}
    free = next((idx for idx in range(len(positions)) if idx not in reference_set), None)
    if free is not None and positions[free, 2] < 0.0:
        positions[:, 2] = -positions[:, 2]

    z_values = positions[[p1, p2, p3], 2]
    if np.any(np.abs(z_values) >= ALIGNMENT_TOLERANCE) or not np.all(np.isfinite(positions)):
        raise AlignmentError(tuple(triple), z_values)

    return placement.with_positions(positions)


def flatness(placement: Placement) -> float:
    """Sample standard deviation of every z-coordinate (lower is flatter)."""

    z_values = placement.positions[:, 2]
    if len(z_values) < 2:
        return 0.0
    return float(np.std(z_values, ddof=1))


def canonicalize(placement: Placement, planets: Optional[Sequence[PlanetName]] = None) -> CanonicalResult:
    """Return the flattest alignment over every reference triple.

    Triples are enumerated with :func:`itertools.combinations` over
    ``planets`` (placement order by default); the first triple reaching the
    lowest flatness wins.
    """

    names = tuple(planets) if planets is not None else placement.names
    if len(names) < 3:
        raise ValueError(f"canonicalize needs at least three planets, got {len(names)}")

    best: Optional[CanonicalResult] = None
    for triple in combinations(names, 3):
        aligned = align_to_reference(placement, triple)
        score = flatness(aligned)
        if best is None or score < best.flatness:
            best = CanonicalResult(placement=aligned, flatness=score, triple=triple)

    assert best is not None
    logger.debug("Flattest alignment %s with flatness %.4g", best.triple, best.flatness)
    return best


__all__ = [
    "ALIGNMENT_TOLERANCE",
    "CanonicalResult",
    "align_to_reference",
    "canonicalize",
    "flatness",
]
