import math

import numpy as np
import pytest

from planet_atlas.constraints import ConstraintGraph, ConstraintSet
from planet_atlas.polish import PolishOptions, polish_placement
from planet_atlas.solver import Placement


def _triangle_graph():
    return ConstraintGraph(
        ConstraintSet.from_records([("A", "B", 3.0), ("B", "C", 4.0), ("A", "C", 5.0)])
    )


def _rough_placement():
    return Placement.from_mapping(
        {"A": (0.0, 0.0, 0.0), "B": (3.02, 0.01, 0.0), "C": (3.0, 3.97, 0.02)}
    )


def test_polish_brings_distances_to_measurements():
    graph = _triangle_graph()

    result = polish_placement(_rough_placement(), graph, PolishOptions())

    assert result.success
    assert result.iterations > 0
    for constraint in graph.constraint_set:
        measured = result.placement.distance(constraint.planet_one, constraint.planet_two)
        assert math.isclose(measured, constraint.distance, abs_tol=1e-6)
    assert set(result.residuals) == {("A", "B"), ("B", "C"), ("A", "C")}


def test_polish_returns_placement_in_graph_order():
    rough = Placement.from_mapping(
        {"C": (3.0, 3.97, 0.02), "A": (0.0, 0.0, 0.0), "B": (3.02, 0.01, 0.0)}
    )

    result = polish_placement(rough, _triangle_graph())

    assert result.placement.names == ("A", "B", "C")


def test_disabled_polish_is_a_no_op():
    placement = _rough_placement()

    result = polish_placement(placement, _triangle_graph(), PolishOptions(enable=False))

    assert result.placement is placement
    assert result.iterations == 0
    assert np.array_equal(result.placement.positions, placement.positions)


def test_residuals_keep_hyphenated_names_apart_and_sum_repeats():
    graph = ConstraintGraph(
        ConstraintSet.from_records(
            [("A-B", "C", 1.0), ("A", "B-C", 1.0), ("A", "B-C", 2.0), ("A", "C", 1.5)]
        )
    )
    rough = Placement.from_mapping(
        {"A-B": (0.0, 0.0, 0.0), "A": (0.3, 0.9, 0.0), "C": (1.1, 0.0, 0.1), "B-C": (0.2, 2.1, 0.4)}
    )

    result = polish_placement(rough, graph)

    assert set(result.residuals) == {("A-B", "C"), ("A", "B-C"), ("A", "C")}
    measured = result.placement.distance("A", "B-C")
    assert result.residuals[("A", "B-C")] == pytest.approx(abs(measured - 1.0) + abs(measured - 2.0))
    assert result.residuals[("A", "B-C")] == pytest.approx(1.0, abs=1e-6)
