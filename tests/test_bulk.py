import pytest

from polysolid import bulk
from polysolid.geom import close, point
from polysolid.primitives import add_box

from conftest import face_count


@pytest.fixture
def row(make_box):
    """A base plate with two posts standing on it."""
    base = make_box(point(0, 0, 0), point(4, 1, 1), name='base')
    posts = [make_box(point(0, 0, 1), point(1, 1, 2), name='post0'),
             make_box(point(3, 0, 1), point(4, 1, 2), name='post1')]
    return base, posts


def test_solid(row, model):
    base, posts = row
    assert bulk.solid([base] + posts)
    open_group = model.entities.add_group()
    add_box(open_group.entities, point(0, 0, 0), point(1, 1, 1))
    open_group.entities.erase_entities([open_group.entities.faces[0]])
    assert not bulk.solid([base, open_group])


def test_within(make_box):
    a = make_box(point(0, 0, 0), point(2, 2, 2))
    b = make_box(point(1, 0, 0), point(3, 2, 2))
    assert bulk.within(point(0.5, 1, 1), [a, b])
    assert bulk.within(point(2.5, 1, 1), [a, b])
    assert not bulk.within(point(5, 1, 1), [a, b])
    assert bulk.within(point(1.5, 1, 1), [a, b])
    assert not bulk.within(point(1.5, 1, 1), [a, b], odd_even=True)
    assert bulk.within(point(0.5, 1, 1), [a, b], odd_even=True)


def test_within_needs_solids(make_box, model):
    a = make_box(point(0, 0, 0), point(2, 2, 2))
    open_group = model.entities.add_group()
    open_group.entities.add_face([point(0, 0, 0), point(1, 0, 0), point(1, 1, 0)])
    assert bulk.within(point(1, 1, 1), [a, open_group]) is None


def test_union(row):
    base, posts = row
    assert bulk.union(base, posts) is True
    assert close(base.volume, 6.0)
    assert not any(p.valid for p in posts)
    assert len(posts) == 2


def test_union_stops_at_failure(row, model):
    base, posts = row
    open_group = model.entities.add_group()
    open_group.entities.add_face([point(0, 0, 5), point(1, 0, 5), point(1, 1, 5)])
    assert bulk.union(base, [posts[0], open_group, posts[1]]) is None
    assert not posts[0].valid
    assert posts[1].valid


def test_subtract_from_several_targets(make_box):
    targets = [make_box(point(0, 0, 0), point(2, 2, 2)),
               make_box(point(4, 0, 0), point(6, 2, 2))]
    cutter = make_box(point(1, -1, 1), point(5, 3, 3), name='cutter')
    assert bulk.subtract(targets, [cutter]) is True
    for target in targets:
        assert close(target.volume, 6.0)
    assert not cutter.valid


def test_subtract_single_target(make_box):
    target = make_box(point(0, 0, 0), point(2, 2, 2))
    cutter = make_box(point(1, 1, 0), point(3, 3, 2))
    assert bulk.subtract(target, [cutter]) is True
    assert face_count(target) == 8
    assert not cutter.valid


def test_trim_keeps_modifiers(make_box):
    targets = [make_box(point(0, 0, 0), point(2, 2, 2)),
               make_box(point(4, 0, 0), point(6, 2, 2))]
    cutter = make_box(point(1, -1, 1), point(5, 3, 3))
    assert bulk.trim(targets, [cutter]) is True
    assert cutter.valid
    assert close(cutter.volume, 32.0)
    for target in targets:
        assert close(target.volume, 6.0)


def test_intersect(make_box):
    target = make_box(point(0, 0, 0), point(3, 3, 3))
    a = make_box(point(1, 0, 0), point(4, 3, 3))
    b = make_box(point(0, 1, 0), point(3, 4, 3))
    assert bulk.intersect(target, [a, b]) is True
    assert close(target.volume, 12.0)
    assert face_count(target) == 6
