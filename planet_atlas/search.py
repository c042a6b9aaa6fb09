"""Repeated relax/canonicalize/deduplicate search for distinct arrangements."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, List, Optional, Union

import numpy as np

from .constraints import Constraint, ConstraintError, ConstraintGraph, ConstraintSet
from .orientation import canonicalize
from .quality import score_placement
from .registry import DUPLICATE_TOLERANCE, SolutionRegistry
from .solver import ProgressCallback, SolveOptions, get_solve_options, solve
from .solver.model import Placement, Solution

logger = logging.getLogger(__name__)

SolutionCallback = Callable[[int, float, Placement], None]


@dataclass
class SearchOptions:
    """Search policy. Every limit defaults to ``None`` which means unbounded."""

    seed: Optional[int] = None
    max_attempts: Optional[int] = None
    max_solutions: Optional[int] = None
    max_seconds: Optional[float] = None
    duplicate_tolerance: float = DUPLICATE_TOLERANCE
    solve: SolveOptions = field(default_factory=get_solve_options)

    def stop_reason(self, attempts: int, solutions: int, elapsed: float) -> Optional[str]:
        if self.max_attempts is not None and attempts >= self.max_attempts:
            return "max_attempts"
        if self.max_solutions is not None and solutions >= self.max_solutions:
            return "max_solutions"
        if self.max_seconds is not None and elapsed >= self.max_seconds:
            return "max_seconds"
        return None


@dataclass
class SearchReport:
    attempts: int = 0
    duplicates: int = 0
    unconverged: int = 0
    elapsed: float = 0.0
    stop_reason: Optional[str] = None
    solutions: List[Solution] = field(default_factory=list)


class SearchLoop:
    """Drive sequential attempts and emit each new canonical arrangement.

    ``on_solution`` receives ``(sequence, quality, placement)`` for every
    accepted solution; ``on_progress`` receives the throttled relaxation
    progress ``(attempt, iterations, max_force)``.
    """

    def __init__(
        self,
        constraints: Union[ConstraintSet, Iterable[Constraint]],
        options: Optional[SearchOptions] = None,
        *,
        on_solution: Optional[SolutionCallback] = None,
        on_progress: Optional[ProgressCallback] = None,
        registry: Optional[SolutionRegistry] = None,
    ) -> None:
        if not isinstance(constraints, ConstraintSet):
            constraints = ConstraintSet(constraints)
        if len(constraints.planets) < 3:
            raise ConstraintError(
                f"need at least three planets to orient a solution, got {len(constraints.planets)}"
            )
        self.constraints = constraints
        self.options = options or SearchOptions()
        self.graph = ConstraintGraph(constraints)
        self.registry = registry or SolutionRegistry(self.options.duplicate_tolerance)
        self.on_solution = on_solution
        self.on_progress = on_progress
        self.report = SearchReport()
        self._seed_sequence = np.random.SeedSequence(self.options.seed)

        components = self.graph.components()
        if len(components) > 1:
            logger.warning(
                "Constraint graph has %d disconnected components; their relative placement is arbitrary",
                len(components),
            )
        logger.info(
            "Search ready: %d planet(s), %d constraint(s), seed=%s",
            len(self.graph.planets),
            len(constraints),
            self.options.seed,
        )

    def _next_rng(self) -> np.random.Generator:
        (child,) = self._seed_sequence.spawn(1)
        return np.random.default_rng(child)

    def attempt(self, attempt_number: int, rng: np.random.Generator) -> Optional[Solution]:
        """Run one attempt; return the accepted solution or ``None`` for a duplicate."""

        result = solve(
            self.graph,
            rng,
            self.options.solve,
            progress=self.on_progress,
            attempt=attempt_number,
        )
        if not result.converged:
            self.report.unconverged += 1

        canonical = canonicalize(result.placement)
        if self.registry.is_duplicate(canonical.placement):
            self.report.duplicates += 1
            logger.debug("Attempt %d: duplicate of an accepted solution, discarded", attempt_number)
            return None

        quality = score_placement(canonical.placement, self.constraints)
        solution = self.registry.accept(
            canonical.placement,
            quality,
            triple=canonical.triple,
            flatness=canonical.flatness,
            attempt=attempt_number,
        )
        logger.info(
            "Attempt %d: accepted solution %d quality=%.4g flatness=%.4g triple=%s",
            attempt_number,
            solution.sequence,
            quality,
            canonical.flatness,
            canonical.triple,
        )
        if self.on_solution is not None:
            self.on_solution(solution.sequence, solution.quality, solution.placement)
        return solution

    def iter_solutions(self) -> Iterator[Solution]:
        """Yield accepted solutions until the stop policy fires (never, by default)."""

        started = time.monotonic()
        report = self.report
        while True:
            report.elapsed = time.monotonic() - started
            reason = self.options.stop_reason(report.attempts, len(self.registry), report.elapsed)
            if reason is not None:
                report.stop_reason = reason
                report.solutions = self.registry.solutions
                logger.info(
                    "Search stopped (%s) after %d attempt(s): %d solution(s), %d duplicate(s)",
                    reason,
                    report.attempts,
                    len(self.registry),
                    report.duplicates,
                )
                return

            report.attempts += 1
            logger.debug("Starting attempt %d", report.attempts)
            solution = self.attempt(report.attempts, self._next_rng())
            if solution is not None:
                report.solutions = self.registry.solutions
                yield solution

    def run(self) -> SearchReport:
        for _ in self.iter_solutions():
            pass
        return self.report


def search(
    constraints: Union[ConstraintSet, Iterable[Constraint]],
    options: Optional[SearchOptions] = None,
    *,
    on_solution: Optional[SolutionCallback] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> SearchReport:
    """Convenience wrapper around :class:`SearchLoop`."""

    return SearchLoop(constraints, options, on_solution=on_solution, on_progress=on_progress).run()


__all__ = [
    "SearchLoop",
    "SearchOptions",
    "SearchReport",
    "SolutionCallback",
    "search",
]
