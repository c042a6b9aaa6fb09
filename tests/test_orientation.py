import math

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

import planet_atlas.orientation as orientation
from planet_atlas.orientation import align_to_reference, canonicalize, flatness
from planet_atlas.solver import AlignmentError, Placement

SCATTER = {
    "A": (0.31, -0.42, 0.77),
    "B": (1.52, 0.18, -0.35),
    "C": (-0.64, 1.09, 0.26),
    "D": (0.12, 0.55, 1.41),
    "E": (0.93, -0.81, -0.58),
}


def _placement(coords):
    return Placement.from_mapping(coords)


def _moved(placement, *, rotvec, shift, mirror=False):
    positions = Rotation.from_rotvec(rotvec).apply(np.array(placement.positions)) + np.asarray(shift)
    if mirror:
        positions[:, 0] = -positions[:, 0]
    return placement.with_positions(positions)


def _pairwise(placement):
    pos = placement.positions
    return np.linalg.norm(pos[:, None, :] - pos[None, :, :], axis=-1)


@pytest.mark.parametrize("triple", [("A", "B", "C"), ("D", "A", "E"), ("E", "C", "B")])
def test_alignment_places_reference_triple_in_frame(triple):
    aligned = align_to_reference(_placement(SCATTER), triple)
    p1, p2, p3 = (aligned.location(name) for name in triple)

    assert np.allclose(p1, 0.0, atol=1e-9)
    assert p2[0] > 0.0
    assert p2[1] == pytest.approx(0.0, abs=1e-9)
    assert p2[2] == pytest.approx(0.0, abs=1e-9)
    assert p3[1] >= 0.0
    assert p3[2] == pytest.approx(0.0, abs=1e-9)

    free = next(name for name in aligned.names if name not in triple)
    assert aligned.location(free)[2] >= 0.0


def test_alignment_preserves_pairwise_distances():
    original = _placement(SCATTER)

    aligned = align_to_reference(original, ("B", "E", "D"))

    assert np.allclose(_pairwise(aligned), _pairwise(original), atol=1e-9)


@pytest.mark.parametrize("mirror", [False, True])
def test_alignment_ignores_rigid_motion_and_mirroring(mirror):
    original = _placement(SCATTER)
    moved = _moved(original, rotvec=(0.4, -1.3, 2.2), shift=(5.0, -3.0, 0.7), mirror=mirror)

    first = align_to_reference(original, ("C", "A", "D"))
    second = align_to_reference(moved, ("C", "A", "D"))

    assert np.allclose(first.positions, second.positions, atol=1e-9)


def test_second_reference_on_negative_x_axis_is_turned_around():
    placement = _placement(
        {"A": (0.0, 0.0, 0.0), "B": (-2.0, 0.0, 0.0), "C": (0.0, 1.0, 0.5), "D": (0.3, 0.2, 0.9)}
    )

    aligned = align_to_reference(placement, ("A", "B", "C"))

    assert np.allclose(aligned.location("B"), [2.0, 0.0, 0.0], atol=1e-9)
    assert aligned.location("C")[1] >= 0.0


def test_third_reference_below_axis_is_mirrored_up():
    placement = _placement({"A": (0.0, 0.0, 0.0), "B": (1.0, 0.0, 0.0), "C": (0.5, -1.0, 0.0)})

    aligned = align_to_reference(placement, ("A", "B", "C"))

    assert np.allclose(aligned.location("C"), [0.5, 1.0, 0.0], atol=1e-9)


def test_third_reference_straight_above_axis_is_laid_flat():
    placement = _placement({"A": (0.0, 0.0, 0.0), "B": (1.0, 0.0, 0.0), "C": (0.5, 0.0, 1.0)})

    aligned = align_to_reference(placement, ("A", "B", "C"))

    assert np.allclose(aligned.location("C"), [0.5, 1.0, 0.0], atol=1e-9)


def test_collinear_reference_triple_still_aligns():
    placement = _placement(
        {"A": (1.0, 1.0, 1.0), "B": (2.0, 2.0, 2.0), "C": (3.0, 3.0, 3.0), "D": (0.0, 1.0, 0.0)}
    )

    aligned = align_to_reference(placement, ("A", "B", "C"))

    assert np.allclose(aligned.location("C"), [2.0 * math.sqrt(3.0), 0.0, 0.0], atol=1e-9)


def test_alignment_rejects_bad_triple():
    with pytest.raises(ValueError):
        align_to_reference(_placement(SCATTER), ("A", "A", "B"))


def test_alignment_failure_is_fatal(monkeypatch):
    monkeypatch.setattr(orientation, "rotation_taking", lambda *args, **kwargs: None)
    placement = _placement({"A": (0.0, 0.0, 0.0), "B": (1.0, 0.0, 1.0), "C": (0.0, 1.0, 0.0)})

    with pytest.raises(AlignmentError) as exc:
        align_to_reference(placement, ("A", "B", "C"))

    assert exc.value.triple == ("A", "B", "C")
    assert "Alignment failed" in str(exc.value)


def test_flatness_is_sample_standard_deviation_of_z():
    placement = _placement({"A": (0.0, 0.0, 0.0), "B": (1.0, 0.0, 0.0), "C": (0.0, 1.0, 0.0), "D": (0.0, 0.0, 2.0)})

    assert flatness(placement) == pytest.approx(1.0)


def test_canonicalize_picks_flattest_triple():
    placement = _placement(SCATTER)

    result = canonicalize(placement)

    for triple in [("A", "B", "C"), ("A", "D", "E"), ("B", "C", "E"), ("C", "D", "E")]:
        assert result.flatness <= flatness(align_to_reference(placement, triple)) + 1e-12
    assert result.flatness == pytest.approx(flatness(result.placement))
    assert np.allclose(result.placement.location(result.triple[0]), 0.0, atol=1e-9)


def test_canonicalize_breaks_ties_by_enumeration_order():
    placement = _placement(
        {"A": (0.2, 0.1, 3.0), "B": (1.7, 0.4, 3.0), "C": (0.5, 1.9, 3.0), "D": (-0.8, 0.6, 3.0)}
    )

    result = canonicalize(placement)

    assert result.triple == ("A", "B", "C")
    assert result.flatness == pytest.approx(0.0, abs=1e-12)


def test_canonicalize_equilateral_triangle():
    half = math.sqrt(3.0) / 2.0
    placement = _placement({"A": (0.3, 0.2, 0.1), "B": (0.3, 1.2, 0.1), "C": (0.3 + half, 0.7, 0.1)})

    result = canonicalize(placement)

    assert result.triple == ("A", "B", "C")
    assert np.allclose(result.placement.location("B"), [1.0, 0.0, 0.0], atol=1e-9)
    assert np.allclose(result.placement.location("C"), [0.5, half, 0.0], atol=1e-9)


def test_canonicalize_is_invariant_under_rigid_motion():
    original = _placement(SCATTER)
    moved = _moved(original, rotvec=(-2.0, 0.3, 0.9), shift=(-1.0, 4.0, 2.5), mirror=True)

    first = canonicalize(original)
    second = canonicalize(moved)

    assert first.triple == second.triple
    assert np.allclose(first.placement.positions, second.placement.positions, atol=1e-9)


def test_canonicalize_needs_three_planets():
    with pytest.raises(ValueError):
        canonicalize(_placement({"A": (0.0, 0.0, 0.0), "B": (1.0, 0.0, 0.0)}))
