"""Spring relaxation of planet locations against measured distances."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Sequence

import numpy as np

from ..constraints import ConstraintGraph
from .math_utils import row_norms
from .model import PlanetName, Placement, RelaxationResult, SolveOptions

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, float], None]


def random_placement(planets: Sequence[PlanetName], rng: np.random.Generator) -> Placement:
    """Place every planet independently and uniformly inside the unit cube."""

    return Placement(tuple(planets), rng.random((len(planets), 3)))


def compute_forces(positions: np.ndarray, graph: ConstraintGraph) -> np.ndarray:
    """Return the ``(n, 3)`` resultant restoring force on every planet.

    Each constraint pushes its endpoints apart when they are closer than the
    measured distance and pulls them together when farther. Coincident
    endpoints have no direction and contribute nothing.
    """

    edges = graph.edges
    delta = positions[edges.first] - positions[edges.second]
    current = row_norms(delta)

    unit = np.zeros_like(delta)
    separated = current > 0.0
    unit[separated] = delta[separated] / current[separated, None]

    edge_force = (edges.target - current)[:, None] * unit
    forces = np.zeros_like(positions)
    # unbuffered so repeated endpoints accumulate
    np.add.at(forces, edges.first, edge_force)
    np.add.at(forces, edges.second, -edge_force)
    return forces


def clamp_forces(forces: np.ndarray, max_step: float, magnitudes: Optional[np.ndarray] = None) -> np.ndarray:
    """Limit each force vector to ``max_step`` while keeping its direction."""

    if magnitudes is None:
        magnitudes = row_norms(forces)
    scale = np.ones_like(magnitudes)
    over = magnitudes > max_step
    scale[over] = max_step / magnitudes[over]
    return forces * scale[:, None]


def _ordered_positions(placement: Placement, graph: ConstraintGraph) -> np.ndarray:
    if placement.names == graph.planets:
        return np.array(placement.positions, dtype=float)
    return np.array(placement.positions_for(graph.planets), dtype=float)


def step(placement: Placement, graph: ConstraintGraph, options: Optional[SolveOptions] = None) -> Placement:
    """Advance ``placement`` by one clamped micro-step and return the new value."""

    options = options or SolveOptions()
    positions = _ordered_positions(placement, graph)
    forces = compute_forces(positions, graph)
    return Placement(graph.planets, positions + clamp_forces(forces, options.max_step))


def relax(
    graph: ConstraintGraph,
    rng: np.random.Generator,
    options: Optional[SolveOptions] = None,
    *,
    progress: Optional[ProgressCallback] = None,
    attempt: int = 0,
    initial: Optional[Placement] = None,
) -> RelaxationResult:
    """Relax a random placement until no planet moves during a whole cycle.

    A cycle is ``options.cycle_length`` micro-steps. The loop is unbounded
    unless ``options.max_cycles`` is set. ``progress`` receives
    ``(attempt, iterations, max_force)`` at most once per
    ``options.progress_interval`` seconds.
    """

    options = options or SolveOptions()
    if initial is None:
        initial = random_placement(graph.planets, rng)
    positions = _ordered_positions(initial, graph)

    cycle_length = max(1, int(options.cycle_length))
    cycles = 0
    max_force = 0.0
    converged = False
    last_emit = time.monotonic()

    logger.debug(
        "Relaxing %d planet(s) against %d constraint(s) (attempt %d)",
        len(graph.planets),
        len(graph.edges.target),
        attempt,
    )

    while True:
        if options.max_cycles is not None and cycles >= options.max_cycles:
            break
        cycles += 1
        cycle_start = positions.copy()

        for _ in range(cycle_length):
            forces = compute_forces(positions, graph)
            magnitudes = row_norms(forces)
            max_force = float(magnitudes.max()) if magnitudes.size else 0.0

            if progress is not None:
                now = time.monotonic()
                if now - last_emit > options.progress_interval:
                    progress(attempt, cycles * cycle_length, max_force)
                    last_emit = now

            positions = positions + clamp_forces(forces, options.max_step, magnitudes)

        moved = row_norms(positions - cycle_start)
        if not np.any(moved > options.convergence_threshold):
            converged = True
            break

    notes = []
    if not converged:
        notes.append(f"stopped after {cycles} cycle(s) without converging")
        logger.warning("Attempt %d: relaxation hit max_cycles=%s before converging", attempt, options.max_cycles)
    else:
        logger.debug("Attempt %d: converged after %d iteration(s), max force %.3g", attempt, cycles * cycle_length, max_force)

    return RelaxationResult(
        placement=Placement(graph.planets, positions),
        cycles=cycles,
        iterations=cycles * cycle_length,
        converged=converged,
        max_force=max_force,
        notes=notes,
    )


__all__ = [
    "ProgressCallback",
    "clamp_forces",
    "compute_forces",
    "random_placement",
    "relax",
    "step",
]
