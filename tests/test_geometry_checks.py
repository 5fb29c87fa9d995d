from polysolid.geom import point
from polysolid.geometry_checks import (
    CheckResult,
    container_oriented,
    container_watertight,
)
from polysolid.primitives import add_box


def _open_box(model):
    g = model.entities.add_group()
    add_box(g.entities, point(0, 0, 0), point(1, 1, 1))
    g.entities.erase_entities([g.entities.faces[0]])
    return g


def test_check_result_truthiness():
    assert CheckResult(True, [])
    assert not CheckResult(False, ['broken'])


def test_box_is_watertight(make_box):
    result = container_watertight(make_box(point(0, 0, 0), point(1, 1, 1)))
    assert result.ok
    assert result.warnings == []


def test_open_box_has_boundary_edges(model):
    result = container_watertight(_open_box(model))
    assert not result.ok
    assert result.warnings == ['4 boundary edges detected']


def test_loose_edges_reported(make_box):
    g = make_box(point(0, 0, 0), point(1, 1, 1))
    g.entities.add_line(point(3, 0, 0), point(4, 0, 0))
    result = container_watertight(g)
    assert not result.ok
    assert any('loose edges' in w for w in result.warnings)


def test_non_manifold_edges_reported(model):
    g = model.entities.add_group()
    add_box(g.entities, point(0, 0, 0), point(1, 1, 1))
    add_box(g.entities, point(1, 1, 0), point(2, 2, 1))
    result = container_watertight(g)
    assert not result.ok
    assert any('multiplicity >2' in w for w in result.warnings)


def test_box_is_oriented(make_box):
    result = container_oriented(make_box(point(0, 0, 0), point(1, 1, 1)))
    assert result.ok
    assert result.warnings == []


def test_flipped_face_detected(make_box):
    g = make_box(point(0, 0, 0), point(1, 1, 1))
    g.entities.faces[0].reverse()
    result = container_oriented(g)
    assert not result.ok
    assert any('same direction' in w for w in result.warnings)


def test_inward_faces_detected(make_box):
    g = make_box(point(0, 0, 0), point(1, 1, 1))
    for face in g.entities.faces:
        face.reverse()
    result = container_oriented(g)
    assert not result.ok
    assert any('point inwards' in w for w in result.warnings)
