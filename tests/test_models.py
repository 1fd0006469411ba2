import pickle

import pytest

from errors import (
    CoordinateError,
    DimensionMismatchError,
    DuplicateCoordinateError,
    EmptyShapeError,
    PackingError,
    PlacementError,
    ShapeError,
)
from models import Coordinate, Placement, Target, normalize_shape
from solver.pieces import Template


def test_coordinate_behaves_like_an_integer_tuple():
    c = Coordinate(1, 2, 3)
    assert c == (1, 2, 3)
    assert hash(c) == hash((1, 2, 3))
    assert (c.x, c.y, c.z) == (1, 2, 3)
    assert c.dimensions == 3
    assert str(c) == "(1, 2, 3)"
    assert repr(c) == "Coordinate(1, 2, 3)"


def test_coordinate_ordering_is_lexicographic():
    cells = [Coordinate(1, 0, 0), Coordinate(0, 1, 1), Coordinate(0, 0, 2), Coordinate(0, 1, 0)]
    assert sorted(cells) == [
        Coordinate(0, 0, 2),
        Coordinate(0, 1, 0),
        Coordinate(0, 1, 1),
        Coordinate(1, 0, 0),
    ]


def test_translate_and_offset_to_are_inverse():
    a = Coordinate(1, -2, 3)
    b = Coordinate(4, 0, -1)
    offset = a.offset_to(b)
    assert offset == (3, 2, -4)
    assert a.translate(offset) == b
    assert isinstance(a.translate(offset), Coordinate)


def test_translate_rejects_other_dimension():
    with pytest.raises(DimensionMismatchError):
        Coordinate(0, 0, 0).translate((1, 1))


@pytest.mark.parametrize("bad", [(1.5, 0, 0), ("a", 0, 0), ()])
def test_coordinate_rejects_non_integer_components(bad):
    with pytest.raises(CoordinateError):
        Coordinate(*bad)


def test_coordinate_of_rejects_scalars():
    with pytest.raises(CoordinateError):
        Coordinate.of(5)


def test_coordinate_survives_pickling():
    c = Coordinate(3, 1, 4)
    clone = pickle.loads(pickle.dumps(c))
    assert clone == c
    assert isinstance(clone, Coordinate)


def test_normalize_shape_sorts_and_validates():
    shape = normalize_shape([(1, 0, 0), (0, 0, 0), (0, 1, 0)])
    assert shape == ((0, 0, 0), (0, 1, 0), (1, 0, 0))
    assert all(isinstance(c, Coordinate) for c in shape)


def test_normalize_shape_errors():
    with pytest.raises(EmptyShapeError):
        normalize_shape([])
    with pytest.raises(DuplicateCoordinateError):
        normalize_shape([(0, 0, 0), (0, 0, 0)])
    with pytest.raises(DimensionMismatchError):
        normalize_shape([(0, 0, 0), (0, 1)])


def test_error_taxonomy_shares_a_root():
    assert issubclass(EmptyShapeError, ShapeError)
    assert issubclass(ShapeError, PackingError)
    assert issubclass(ShapeError, ValueError)
    assert issubclass(PlacementError, PackingError)


def test_target_exposes_canonical_order():
    target = Target([(1, 0, 0), (0, 1, 0), (0, 0, 0)])
    assert target.ordered == ((0, 0, 0), (0, 1, 0), (1, 0, 0))
    assert list(target) == list(target.ordered)
    assert len(target) == 3
    assert (0, 1, 0) in target
    assert (2, 0, 0) not in target
    assert target.contains_all([(0, 0, 0), (1, 0, 0)])
    assert not target.contains_all([(0, 0, 0), (5, 5, 5)])
    assert target.dimensions == 3
    assert target == Target([(0, 0, 0), (0, 1, 0), (1, 0, 0)])


def test_target_rejects_empty_and_duplicates():
    with pytest.raises(EmptyShapeError):
        Target([])
    with pytest.raises(DuplicateCoordinateError):
        Target([(0, 0, 0), (0, 0, 0)])


def test_placement_footprint_is_translated_orientation():
    bar = Template([(0, 0, 0), (1, 0, 0)])
    orientation = bar.orientations[0]
    placement = Placement(bar, orientation, (2, 3, 4))
    assert placement.footprint == ((2, 3, 4), (3, 3, 4))
    assert placement.cells == frozenset({(2, 3, 4), (3, 3, 4)})
    assert placement.anchor == (2, 3, 4)
    assert isinstance(placement.offset, Coordinate)
    assert str(placement) == "[(2, 3, 4)(3, 3, 4)]"


def test_placement_requires_an_orientation_of_its_template():
    bar = Template([(0, 0, 0), (1, 0, 0)])
    other = Template([(0, 0, 0), (1, 0, 0), (2, 0, 0)])
    with pytest.raises(PlacementError):
        Placement(bar, other.orientations[0], (0, 0, 0))
