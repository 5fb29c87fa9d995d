import pytest

from polysolid.entities import (
    ComponentInstance,
    Face,
    Group,
    TopologyError,
    Vertex,
    edge_between,
)
from polysolid.geom import close, point, vclose
from polysolid.mesh import entities_volume
from polysolid.primitives import add_box, box_group, extrude
from polysolid.xform import Scale, Translation


def _square(x0, y0, x1, y1, z=0.0):
    return [point(x0, y0, z), point(x1, y0, z), point(x1, y1, z), point(x0, y1, z)]


class TestWelding:

    def test_vertices_weld(self, model):
        ents = model.entities
        ents.add_line(point(0, 0, 0), point(1, 0, 0))
        ents.add_line(point(1, 0, 0), point(1, 1, 0))
        assert len(ents.vertices) == 3
        assert len(ents.edges) == 2

    def test_existing_edge_is_reused(self, model):
        ents = model.entities
        e0 = ents.add_line(point(0, 0, 0), point(1, 0, 0))
        e1 = ents.add_line(point(1, 0, 0), point(0, 0, 0))
        assert e0 == e1
        assert len(ents.edges) == 1

    def test_vertex_on_edge_splits_it(self, model):
        ents = model.entities
        ents.add_line(point(0, 0, 0), point(2, 0, 0))
        ents.add_line(point(1, 0, 0), point(1, 1, 0))
        assert len(ents.edges) == 3
        assert len(ents.vertices) == 4

    def test_crossing_lines_split(self, model):
        ents = model.entities
        ents.add_line(point(0, 0, 0), point(2, 0, 0))
        chain = ents.add_line(point(1, -1, 0), point(1, 1, 0))
        assert len(chain) == 2
        assert len(ents.edges) == 4
        assert ents.find_vertex(point(1, 0, 0)) is not None

    def test_overlapping_collinear_lines(self, model):
        ents = model.entities
        ents.add_line(point(0, 0, 0), point(2, 0, 0))
        chain = ents.add_line(point(1, 0, 0), point(3, 0, 0))
        assert len(chain) == 2
        assert len(ents.edges) == 3


class TestFaces:

    def test_add_face(self, model):
        ents = model.entities
        face = ents.add_face(_square(0, 0, 1, 1), material='red')
        assert face.material == 'red'
        assert len(ents.edges) == 4
        assert all(len(e.faces) == 1 for e in ents.edges)
        assert vclose(face.normal, [0, 0, 1, 1])
        assert close(face.area, 1.0)

    def test_degenerate_face_rejected(self, model):
        with pytest.raises(ValueError):
            model.entities.add_face([point(0, 0, 0), point(1, 0, 0), point(2, 0, 0)])
        with pytest.raises(ValueError):
            model.entities.add_face([point(0, 0, 0), point(1, 0, 0)])

    def test_duplicate_face_not_added(self, model):
        ents = model.entities
        f0 = ents.add_face(_square(0, 0, 1, 1))
        f1 = ents.add_face(list(reversed(_square(0, 0, 1, 1))))
        assert f0 is f1
        assert len(ents.faces) == 1

    def test_face_with_hole(self, model):
        ents = model.entities
        face = ents.add_face(_square(0, 0, 4, 4), [list(reversed(_square(1, 1, 3, 3)))])
        assert len(face.inner_loops) == 1
        assert close(face.area, 12.0)
        assert len(ents.edges) == 8

    def test_line_across_face_splits_it(self, model):
        ents = model.entities
        face = ents.add_face(_square(0, 0, 2, 2), material='wood')
        face.attributes['tag'] = 7
        ents.add_line(point(1, 0, 0), point(1, 2, 0))
        assert len(ents.faces) == 2
        assert len(ents.edges) == 7
        assert face in ents.faces
        for f in ents.faces:
            assert f.material == 'wood'
            assert f.attributes == {'tag': 7}
            assert close(f.area, 2.0)
            assert vclose(f.normal, [0, 0, 1, 1])
        chord = edge_between(ents.find_vertex(point(1, 0, 0)), ents.find_vertex(point(1, 2, 0)))
        assert len(chord.faces) == 2

    def test_dangling_line_does_not_split(self, model):
        ents = model.entities
        ents.add_face(_square(0, 0, 2, 2))
        ents.add_line(point(1, 0, 0), point(1, 1, 0))
        assert len(ents.faces) == 1
        assert len(ents.faces[0].outer_loop) == 5

    def test_reverse(self, model):
        face = model.entities.add_face(_square(0, 0, 1, 1))
        face.reverse()
        assert vclose(face.normal, [0, 0, -1, 1])

    def test_missing_edge_is_a_topology_error(self):
        face = Face([Vertex(point(0, 0, 0)), Vertex(point(1, 0, 0)), Vertex(point(0, 1, 0))])
        with pytest.raises(TopologyError):
            face.edges


class TestErase:

    def test_erase_face_keeps_edges(self, model):
        ents = model.entities
        face = ents.add_face(_square(0, 0, 1, 1))
        ents.erase_entities([face])
        assert ents.faces == []
        assert len(ents.edges) == 4
        assert not face.valid

    def test_erase_seam_merges_and_heals(self, model):
        ents = model.entities
        face = ents.add_face(_square(0, 0, 2, 2), material='wood')
        ents.add_line(point(1, 0, 0), point(1, 2, 0))
        chord = edge_between(ents.find_vertex(point(1, 0, 0)), ents.find_vertex(point(1, 2, 0)))
        ents.erase_entities([chord])
        assert len(ents.faces) == 1
        merged = ents.faces[0]
        assert merged.material == 'wood'
        assert close(merged.area, 4.0)
        assert len(ents.edges) == 4
        assert len(ents.vertices) == 4
        assert not chord.valid

    def test_erase_corner_edge_removes_faces(self, model):
        g = box_group(model.entities, point(0, 0, 0), point(1, 1, 1))
        ents = g.entities
        edge = ents.edges[0]
        ents.erase_entities([edge])
        assert len(ents.faces) == 4
        assert len(ents.edges) == 11

    def test_erase_loose_edge_removes_orphan_vertices(self, model):
        ents = model.entities
        edge = ents.add_line(point(0, 0, 0), point(1, 0, 0))[0]
        ents.erase_entities([edge])
        assert ents.edges == []
        assert ents.vertices == []

    def test_erase_rejects_junk(self, model):
        with pytest.raises(ValueError):
            model.entities.erase_entities(['not an entity'])


class TestContainers:

    def test_box_group(self, model):
        g = box_group(model.entities, point(0, 0, 0), point(1, 2, 3), name='Box', material='red')
        assert isinstance(g, Group)
        assert g.name == 'Box'
        assert g.material == 'red'
        assert len(g.entities.faces) == 6
        assert len(g.entities.edges) == 12
        assert len(g.entities.vertices) == 8
        assert close(g.volume, 6.0)
        assert g.definition in model.definitions

    def test_volume_follows_transformation(self, model):
        g = box_group(model.entities, point(0, 0, 0), point(1, 1, 1))
        g.transformation = Scale(2)
        assert close(g.volume, 8.0)
        g.transformation = Scale(-1, 1, 1)
        assert close(g.volume, 1.0)

    def test_extrude_with_hole(self, model):
        g = model.entities.add_group()
        extrude(g.entities, [(0, 0), (4, 0), (4, 4), (0, 4)], 1.0,
                holes=[[(1, 1), (3, 1), (3, 3), (1, 3)]])
        assert len(g.entities.faces) == 10
        assert close(g.volume, 12.0)

    def test_copy_shares_definition(self, model):
        g = box_group(model.entities, point(0, 0, 0), point(1, 1, 1))
        other = g.copy()
        assert other.definition is g.definition
        assert len(g.definition.instances) == 2

    def test_make_unique(self, model):
        g = box_group(model.entities, point(0, 0, 0), point(1, 1, 1))
        other = g.copy()
        old = g.definition
        g.make_unique()
        assert g.definition is not old
        assert other.definition is old
        assert len(g.entities.faces) == 6
        assert len(model.definitions) == 2
        # a lone group stays as it is
        single = g.definition
        g.make_unique()
        assert g.definition is single

    def test_explode_places_geometry(self, model):
        g = box_group(model.entities, point(0, 0, 0), point(1, 1, 1))
        g.transformation = Translation([10, 0, 0])
        g.explode()
        assert not g.valid
        assert len(model.entities.faces) == 6
        assert model.entities.find_vertex(point(11, 1, 1)) is not None
        assert model.definitions == []

    def test_explode_mirrored_keeps_faces_outward(self, model):
        g = box_group(model.entities, point(0, 0, 0), point(1, 1, 1))
        g.transformation = Scale(-1, 1, 1)
        g.explode()
        assert len(model.entities.faces) == 6
        assert close(entities_volume(model.entities), 1.0)

    def test_component_definition_survives_erase(self, model):
        definition = model.add_definition('Cube')
        add_box(definition.entities, point(0, 0, 0), point(1, 1, 1))
        inst = model.entities.add_instance(definition, Translation([2, 0, 0]))
        assert isinstance(inst, ComponentInstance)
        inst.erase()
        assert definition in model.definitions
        assert model.entities.instances == []

    def test_group_definition_dropped_with_last_instance(self, model):
        g = box_group(model.entities, point(0, 0, 0), point(1, 1, 1))
        definition = g.definition
        g.erase()
        assert definition not in model.definitions
        assert not definition.valid

    def test_nested_instance_moves_up_on_explode(self, model):
        outer = model.entities.add_group('outer')
        inner = box_group(outer.entities, point(0, 0, 0), point(1, 1, 1), name='inner')
        outer.transformation = Translation([0, 0, 5])
        outer.explode()
        instances = model.entities.instances
        assert len(instances) == 1
        assert instances[0].name == 'inner'
        assert instances[0].definition is inner.definition
        assert close(instances[0].transformation.get(2, 3), 5.0)
