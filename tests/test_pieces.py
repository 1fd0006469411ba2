import pickle

import pytest

from errors import OutOfStockError
from solver.pieces import Bag, Template

DOMINO = [(0, 0, 0), (1, 0, 0)]


def test_templates_are_distinct_identities():
    a = Template(DOMINO)
    b = Template(DOMINO)
    assert a.shape == b.shape
    assert a != b
    assert a.uid != b.uid
    assert a == a


def test_template_identity_survives_pickling():
    a = Template(DOMINO, "bar")
    clone = pickle.loads(pickle.dumps(a))
    assert clone == a
    assert hash(clone) == hash(a)
    assert clone.name == "bar"
    assert clone.orientations == a.orientations


def test_with_name_returns_a_new_piece():
    a = Template(DOMINO)
    named = a.with_name("d")
    assert named.name == "d"
    assert named.shape == a.shape
    assert named != a


def test_template_iteration_is_restartable():
    t = Template([(0, 0, 0), (1, 0, 0), (0, 1, 0)])
    first = list(t)
    assert list(t) == first
    assert len(t) == len(first) == 12
    assert t.size == 3


def test_bag_counts_repeats_in_first_seen_order():
    a = Template(DOMINO)
    b = Template([(0, 0, 0)])
    bag = Bag([a, b, a])
    assert bag.templates() == (a, b)
    assert bag.count(a) == 2
    assert bag.count(b) == 1
    assert len(bag) == 3
    assert bag == Bag.from_counts([(2, a), (1, b)])


def test_take_and_give_back_restore_the_bag():
    a = Template(DOMINO)
    bag = Bag([a, a])
    before = bag.copy()
    bag.take(a)
    assert bag.count(a) == 1
    bag.give_back(a)
    assert bag == before


def test_exhausted_template_drops_out_of_templates():
    a = Template(DOMINO)
    b = Template([(0, 0, 0)])
    bag = Bag([a, b])
    bag.take(a)
    assert bag.templates() == (b,)
    assert a not in bag
    bag.take(b)
    assert bag.is_empty()
    with pytest.raises(OutOfStockError):
        bag.take(b)


def test_copy_is_independent():
    a = Template(DOMINO)
    bag = Bag([a])
    clone = bag.copy()
    clone.take(a)
    assert bag.count(a) == 1
    assert clone.count(a) == 0


def test_from_counts_rejects_negative_counts():
    with pytest.raises(ValueError):
        Bag.from_counts([(-1, Template(DOMINO))])


def test_zero_counts_do_not_affect_equality():
    a = Template(DOMINO)
    b = Template([(0, 0, 0)])
    assert Bag.from_counts([(0, a), (1, b)]) == Bag([b])


@pytest.mark.parametrize("attr", ["uid", "name", "shape", "reflections", "_orientations"])
def test_template_is_immutable(attr):
    t = Template(DOMINO, "d")
    before = getattr(t, attr)
    with pytest.raises(AttributeError):
        setattr(t, attr, 99999)
    with pytest.raises(AttributeError):
        delattr(t, attr)
    assert getattr(t, attr) == before


def test_bag_keeps_its_count_after_attempted_mutation():
    t = Template(DOMINO)
    bag = Bag([t])
    with pytest.raises(AttributeError):
        t.uid = 99999
    assert t in bag
    assert bag.count(t) == 1
