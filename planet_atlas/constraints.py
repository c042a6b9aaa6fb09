"""Distance constraints between planets and their adjacency view."""

from __future__ import annotations

import logging
import math
import numbers
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Sequence, Set, Tuple

import numpy as np

logger = logging.getLogger(__name__)

PlanetName = str


class ConstraintError(ValueError):
    """Raised when constraint data cannot be used to build a constraint graph."""


@dataclass(frozen=True)
class Constraint:
    """Measured distance between two planets; endpoints are interchangeable."""

    planet_one: PlanetName
    planet_two: PlanetName
    distance: float

    def involves(self, name: PlanetName) -> bool:
        return name == self.planet_one or name == self.planet_two

    def other(self, name: PlanetName) -> PlanetName:
        if name == self.planet_one:
            return self.planet_two
        if name == self.planet_two:
            return self.planet_one
        raise KeyError(f"Planet '{name}' is not an endpoint of {self.planet_one}-{self.planet_two}")

    @property
    def key(self) -> Tuple[PlanetName, PlanetName]:
        a, b = self.planet_one, self.planet_two
        return (a, b) if a <= b else (b, a)


def _coerce_distance(value: object, position: int) -> float:
    if isinstance(value, bool):
        raise ConstraintError(f"[rule {position}] distance must be a number, got {value!r}")
    if isinstance(value, numbers.Real):
        distance = float(value)
    elif isinstance(value, str):
        try:
            distance = float(value)
        except ValueError as exc:
            raise ConstraintError(f"[rule {position}] distance must be a number, got {value!r}") from exc
    else:
        raise ConstraintError(f"[rule {position}] distance must be a number, got {value!r}")
    if not math.isfinite(distance):
        raise ConstraintError(f"[rule {position}] distance must be finite, got {distance!r}")
    if distance < 0.0:
        raise ConstraintError(f"[rule {position}] distance must be non-negative, got {distance!r}")
    return distance


def _check_name(value: object, position: int, field_name: str) -> PlanetName:
    if not isinstance(value, str) or not value.strip():
        raise ConstraintError(f"[rule {position}] {field_name} must be a non-empty name, got {value!r}")
    if value != value.strip():
        raise ConstraintError(
            f"[rule {position}] {field_name} has surrounding whitespace, got {value!r}"
        )
    return value


def make_constraint(planet_one: object, planet_two: object, distance: object, *, position: int = 1) -> Constraint:
    """Validate raw record fields and build a :class:`Constraint`."""

    one = _check_name(planet_one, position, "planet_one")
    two = _check_name(planet_two, position, "planet_two")
    if one == two:
        raise ConstraintError(f"[rule {position}] endpoints must be distinct, got {one}-{two}")
    return Constraint(one, two, _coerce_distance(distance, position))


class ConstraintSet:
    """Ordered, immutable collection of distance constraints.

    Duplicate or contradictory measurements of the same pair are all kept;
    each one contributes its own force during relaxation.
    """

    def __init__(self, constraints: Iterable[Constraint]):
        items: List[Constraint] = []
        for position, constraint in enumerate(constraints, start=1):
            if not isinstance(constraint, Constraint):
                raise ConstraintError(f"[rule {position}] expected Constraint, got {type(constraint).__name__}")
            items.append(
                make_constraint(
                    constraint.planet_one,
                    constraint.planet_two,
                    constraint.distance,
                    position=position,
                )
            )
        self._constraints: Tuple[Constraint, ...] = tuple(items)

        # planet_one values first, then planet_two values, each in first-seen order
        order: List[PlanetName] = []
        seen: Set[PlanetName] = set()
        for name in [c.planet_one for c in items] + [c.planet_two for c in items]:
            if name not in seen:
                seen.add(name)
                order.append(name)
        self._planets: Tuple[PlanetName, ...] = tuple(order)
        logger.debug(
            "Built constraint set with %d constraint(s) over %d planet(s)",
            len(self._constraints),
            len(self._planets),
        )

    @classmethod
    def from_records(cls, records: Iterable[Sequence[object]]) -> "ConstraintSet":
        """Build from ``(planet_one, planet_two, distance)`` tuples."""

        constraints = []
        for position, record in enumerate(records, start=1):
            if len(record) != 3:
                raise ConstraintError(f"[rule {position}] expected 3 fields, got {len(record)}")
            constraints.append(make_constraint(*record, position=position))
        return cls(constraints)

    @property
    def planets(self) -> Tuple[PlanetName, ...]:
        return self._planets

    @property
    def constraints(self) -> Tuple[Constraint, ...]:
        return self._constraints

    def __len__(self) -> int:
        return len(self._constraints)

    def __iter__(self) -> Iterator[Constraint]:
        return iter(self._constraints)

    def __getitem__(self, index: int) -> Constraint:
        return self._constraints[index]

    def __repr__(self) -> str:
        return f"ConstraintSet(constraints={len(self._constraints)}, planets={len(self._planets)})"

    def distances_between(self, a: PlanetName, b: PlanetName) -> List[float]:
        """Return every measured distance recorded for the unordered pair ``a``-``b``."""

        key = (a, b) if a <= b else (b, a)
        return [c.distance for c in self._constraints if c.key == key]

    def scaled(self, factor: float) -> "ConstraintSet":
        return ConstraintSet(Constraint(c.planet_one, c.planet_two, c.distance * factor) for c in self._constraints)


@dataclass(frozen=True)
class EdgeArrays:
    first: np.ndarray
    second: np.ndarray
    target: np.ndarray


class ConstraintGraph:
    """Per-planet view of the constraints touching each planet."""

    def __init__(self, constraint_set: ConstraintSet):
        self.constraint_set = constraint_set
        self.planets: Tuple[PlanetName, ...] = constraint_set.planets
        self.index: Dict[PlanetName, int] = {name: idx for idx, name in enumerate(self.planets)}

        incident: Dict[PlanetName, List[Constraint]] = defaultdict(list)
        for constraint in constraint_set:
            for endpoint in (constraint.planet_one, constraint.planet_two):
                if endpoint not in self.index:
                    raise ConstraintError(f"Constraint references unknown planet '{endpoint}'")
            incident[constraint.planet_one].append(constraint)
            incident[constraint.planet_two].append(constraint)
        self._incident: Dict[PlanetName, Tuple[Constraint, ...]] = {
            name: tuple(incident.get(name, ())) for name in self.planets
        }

        count = len(constraint_set)
        self.edges = EdgeArrays(
            first=np.fromiter((self.index[c.planet_one] for c in constraint_set), dtype=np.intp, count=count),
            second=np.fromiter((self.index[c.planet_two] for c in constraint_set), dtype=np.intp, count=count),
            target=np.fromiter((c.distance for c in constraint_set), dtype=float, count=count),
        )

    @classmethod
    def from_constraints(cls, constraints: Iterable[Constraint]) -> "ConstraintGraph":
        if isinstance(constraints, ConstraintSet):
            return cls(constraints)
        return cls(ConstraintSet(constraints))

    def __len__(self) -> int:
        return len(self.planets)

    def incident(self, name: PlanetName) -> Tuple[Constraint, ...]:
        try:
            return self._incident[name]
        except KeyError as exc:
            raise ConstraintError(f"Unknown planet '{name}'") from exc

    def neighbours(self, name: PlanetName) -> List[PlanetName]:
        seen: Set[PlanetName] = set()
        ordered: List[PlanetName] = []
        for constraint in self.incident(name):
            other = constraint.other(name)
            if other not in seen:
                seen.add(other)
                ordered.append(other)
        return ordered

    def components(self) -> List[List[PlanetName]]:
        visited: Set[PlanetName] = set()
        groups: List[List[PlanetName]] = []
        for start in self.planets:
            if start in visited:
                continue
            group: List[PlanetName] = []
            stack = [start]
            visited.add(start)
            while stack:
                current = stack.pop()
                group.append(current)
                for other in self.neighbours(current):
                    if other not in visited:
                        visited.add(other)
                        stack.append(other)
            groups.append(group)
        return groups

    def is_connected(self) -> bool:
        return len(self.components()) <= 1

    def degree(self, name: PlanetName) -> int:
        return len(self.incident(name))


__all__ = [
    "Constraint",
    "ConstraintError",
    "ConstraintGraph",
    "ConstraintSet",
    "EdgeArrays",
    "make_constraint",
]
