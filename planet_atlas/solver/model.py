"""Core data structures for the relaxation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

PlanetName = str
Vector3 = Tuple[float, float, float]
Triple = Tuple[PlanetName, PlanetName, PlanetName]


class AlignmentError(RuntimeError):
    """Raised when a reference triple fails to land on the x/y-plane."""

    def __init__(self, triple: Sequence[PlanetName], z_values: Sequence[float]):
        rendered = ", ".join(f"{name}={z:.6g}" for name, z in zip(triple, z_values))
        super().__init__(f"Alignment failed for reference triple ({rendered})")
        self.triple = tuple(triple)
        self.z_values = tuple(float(z) for z in z_values)


@dataclass(frozen=True, eq=False)
class Placement:
    """Immutable snapshot of every planet location.

    ``positions`` is a read-only ``(n, 3)`` array whose rows follow ``names``.
    Copy it (``np.array(placement.positions)``) before handing it to an API
    that needs a writable buffer, such as ``Rotation.apply`` on newer scipy.
    """

    names: Tuple[PlanetName, ...]
    positions: np.ndarray

    def __post_init__(self) -> None:
        names = tuple(self.names)
        positions = np.array(self.positions, dtype=float, copy=True)
        if positions.shape != (len(names), 3):
            raise ValueError(
                f"positions must have shape ({len(names)}, 3), got {positions.shape}"
            )
        if len(set(names)) != len(names):
            raise ValueError("planet names must be unique")
        positions.flags.writeable = False
        object.__setattr__(self, "names", names)
        object.__setattr__(self, "positions", positions)
        object.__setattr__(self, "_index", {name: idx for idx, name in enumerate(names)})

    @classmethod
    def from_mapping(cls, coords: Mapping[PlanetName, Sequence[float]]) -> "Placement":
        names = tuple(coords.keys())
        positions = np.array([[float(v) for v in coords[name]] for name in names], dtype=float)
        return cls(names, positions.reshape(len(names), 3))

    def __len__(self) -> int:
        return len(self.names)

    def __contains__(self, name: object) -> bool:
        return name in self._index  # type: ignore[attr-defined]

    def index(self, name: PlanetName) -> int:
        try:
            return self._index[name]  # type: ignore[attr-defined]
        except KeyError as exc:
            raise KeyError(f"Unknown planet '{name}' in placement") from exc

    def location(self, name: PlanetName) -> np.ndarray:
        return self.positions[self.index(name)]

    def distance(self, a: PlanetName, b: PlanetName) -> float:
        return float(np.linalg.norm(self.location(a) - self.location(b)))

    def positions_for(self, names: Iterable[PlanetName]) -> np.ndarray:
        """Return rows reordered to follow ``names``."""

        return self.positions[[self.index(name) for name in names]]

    def with_positions(self, positions: np.ndarray) -> "Placement":
        return Placement(self.names, positions)

    def as_dict(self) -> Dict[PlanetName, Vector3]:
        return {
            name: (float(row[0]), float(row[1]), float(row[2]))
            for name, row in zip(self.names, self.positions)
        }

    def rounded(self, decimals: int = 2) -> Dict[PlanetName, Vector3]:
        """Return display coordinates; never feed these back into comparisons."""

        return {
            name: (round(x, decimals), round(y, decimals), round(z, decimals))
            for name, (x, y, z) in self.as_dict().items()
        }


@dataclass
class SolveOptions:
    """Relaxation knobs; defaults match the classic step sizes."""

    max_step: float = 1e-4
    cycle_length: int = 100
    convergence_threshold: float = 5e-4
    max_cycles: Optional[int] = None
    progress_interval: float = 0.1
    polish: bool = False


@dataclass
class RelaxationResult:
    placement: Placement
    cycles: int
    iterations: int
    converged: bool
    max_force: float
    notes: List[str] = field(default_factory=list)


@dataclass(frozen=True, eq=False)
class Solution:
    """Accepted, canonicalized and deduplicated placement."""

    sequence: int
    quality: float
    placement: Placement
    triple: Optional[Triple] = None
    flatness: float = 0.0
    attempt: int = 0


__all__ = [
    "AlignmentError",
    "PlanetName",
    "Placement",
    "RelaxationResult",
    "Solution",
    "SolveOptions",
    "Triple",
    "Vector3",
]
