import pytest

from config import CFG
from errors import EmptyShapeError
from solver.pieces import Template
from solver.symmetry import CUBE_ROTATIONS, CUBE_SYMMETRIES, normalize, orientations, transforms

ASYMMETRIC = [(0, 0, 0), (1, 0, 0), (1, 1, 0), (1, 1, 1), (1, 1, 2)]
SQUARE = [(0, 0, 0), (0, 1, 0), (1, 0, 0), (1, 1, 0)]


def test_transform_tables_have_expected_sizes():
    assert len(CUBE_ROTATIONS) == 24
    assert len(CUBE_SYMMETRIES) == 48
    assert len(transforms(2)) == 4
    assert len(transforms(2, True)) == 8


def test_identity_comes_first():
    assert CUBE_ROTATIONS[0] == ((0, 1, 2), (1, 1, 1))


def test_asymmetric_piece_has_24_orientations():
    assert len(orientations(ASYMMETRIC)) == 24


def test_asymmetric_piece_has_48_orientations_with_mirror_images():
    assert len(orientations(ASYMMETRIC, reflections=True)) == 48


def test_square_has_3_orientations():
    assert len(orientations(SQUARE)) == 3


def test_unit_cube_has_one_orientation():
    assert orientations([(0, 0, 0)]) == (((0, 0, 0),),)


def test_planar_l_tromino_in_2d():
    l_tromino = [(0, 0), (1, 0), (0, 1)]
    assert len(orientations(l_tromino)) == 4
    assert len(orientations([(0, 0), (1, 0)])) == 2


def test_orientations_are_normalized_and_sorted():
    for orientation in orientations(ASYMMETRIC):
        assert orientation[0] == (0, 0, 0)
        assert list(orientation) == sorted(orientation)
        assert normalize(orientation) == orientation


def test_orientation_sequence_is_deterministic():
    assert orientations(ASYMMETRIC) == orientations(list(reversed(ASYMMETRIC)))


def test_first_orientation_is_the_normalized_shape():
    shape = [(2, 2, 2), (3, 2, 2), (2, 3, 2)]
    assert orientations(shape)[0] == normalize(Template(shape).shape)


def test_empty_shape_is_rejected():
    with pytest.raises(EmptyShapeError):
        orientations([])


def test_template_reflections_follow_config(monkeypatch):
    monkeypatch.setattr(CFG, "ALLOW_REFLECTIONS", True)
    assert len(Template(ASYMMETRIC)) == 48
    monkeypatch.setattr(CFG, "ALLOW_REFLECTIONS", False)
    assert len(Template(ASYMMETRIC)) == 24
