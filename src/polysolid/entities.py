## boundary mesh kernel for polysolid
## Copyright (c) 2025 polysolid contributors

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""Boundary mesh kernel.

Topology hierarchy:

- Model: root of a document, owns definitions and top level entities
- Definition: named geometry shared by one or more container instances
- Group / ComponentInstance: a placed definition (the "container")
- Entities: flat collection of vertices, edges, faces and nested containers
- Vertex: a position shared by edges and faces
- Edge: two vertices and the faces that use it
- Face: a planar outer loop plus optional hole loops, with material,
  layer and attributes

Geometry inserted into an ``Entities`` is merged with what is already
there: coincident vertices weld, edges split at vertices lying on them
and where they cross, faces split along edges drawn across them, and a
face identical to an existing one is not duplicated.  Erasing the edge
between two coplanar faces heals them into one face.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Sequence

from loguru import logger

from polysolid.arrangement import build_regions
from polysolid.geom import (
    dist,
    epsilon,
    isinsideline,
    linear_combination,
    point,
    pointcenter,
    samedirection,
    unsampleline,
    vclose,
)
from polysolid.planar import (
    classify_point,
    loop_area,
    plane_from_points,
    PointClass,
    same_plane,
    segment_closest,
    ON_FACE,
)
from polysolid.xform import IDENTITY, Matrix


class TopologyError(ValueError):
    """Raised when the mesh topology is inconsistent."""


# -----------------------------------------------------------------------------
# Entities
# -----------------------------------------------------------------------------

class Entity:
    """Base for everything that can live in a model."""

    def __init__(self):
        self.valid = True
        self.attributes: Dict[str, object] = {}


class Vertex(Entity):

    def __init__(self, position):
        super().__init__()
        self.position = point(position)
        self.edges: List["Edge"] = []

    @property
    def faces(self) -> List["Face"]:
        result = []
        for e in self.edges:
            for f in e.faces:
                if f not in result:
                    result.append(f)
        return result

    def __repr__(self):
        p = self.position
        return "Vertex({:g}, {:g}, {:g})".format(p[0], p[1], p[2])


class Edge(Entity):

    def __init__(self, start: Vertex, end: Vertex):
        super().__init__()
        self.start = start
        self.end = end
        self.faces: List["Face"] = []

    @property
    def vertices(self) -> List[Vertex]:
        return [self.start, self.end]

    @property
    def line(self):
        return [self.start.position, self.end.position]

    @property
    def length(self) -> float:
        return dist(self.start.position, self.end.position)

    @property
    def midpoint(self):
        return linear_combination(0.5, self.start.position, 0.5, self.end.position)

    def other_vertex(self, v: Vertex) -> Vertex:
        if v is self.start:
            return self.end
        if v is self.end:
            return self.start
        raise ValueError('vertex is not used by this edge')

    def __repr__(self):
        return "Edge({!r} -> {!r}, faces={})".format(self.start, self.end, len(self.faces))


def edge_between(a: Vertex, b: Vertex) -> Optional[Edge]:
    """Return the edge joining ``a`` and ``b`` if there is one."""
    for e in a.edges:
        if (e.start is a and e.end is b) or (e.start is b and e.end is a):
            return e
    return None


class Face(Entity):
    """Planar face bounded by an outer vertex loop and optional holes."""

    def __init__(self, outer: Sequence[Vertex], holes: Sequence[Sequence[Vertex]] = (),
                 material=None, layer=None):
        super().__init__()
        self.outer_loop: List[Vertex] = list(outer)
        self.inner_loops: List[List[Vertex]] = [list(h) for h in holes]
        self.material = material
        self.layer = layer

    @property
    def loops(self) -> List[List[Vertex]]:
        return [self.outer_loop] + self.inner_loops

    @property
    def vertices(self) -> List[Vertex]:
        result = []
        for loop in self.loops:
            for v in loop:
                if v not in result:
                    result.append(v)
        return result

    @property
    def edges(self) -> List[Edge]:
        result = []
        for loop in self.loops:
            for i, v in enumerate(loop):
                e = edge_between(v, loop[(i + 1) % len(loop)])
                if e is None:
                    raise TopologyError('face loop uses a missing edge')
                if e not in result:
                    result.append(e)
        return result

    def loop_positions(self):
        return [[v.position for v in loop] for loop in self.loops]

    @property
    def normal(self):
        plane = self.plane
        if plane is None:
            raise TopologyError('degenerate face has no normal')
        return plane[0]

    @property
    def plane(self):
        return plane_from_points([v.position for v in self.outer_loop])

    @property
    def area(self) -> float:
        total = loop_area([v.position for v in self.outer_loop])
        for hole in self.inner_loops:
            total -= loop_area([v.position for v in hole])
        if total < epsilon * epsilon:
            return 0.0
        return total

    def classify_point(self, p) -> PointClass:
        return classify_point(p, self.loop_positions(), self.plane)

    def reverse(self):
        """Flip the face orientation in place."""
        self.outer_loop.reverse()
        for hole in self.inner_loops:
            hole.reverse()
        return self

    def _insert_vertex(self, a: Vertex, b: Vertex, v: Vertex):
        for loop in self.loops:
            n = len(loop)
            for i in range(n):
                j = (i + 1) % n
                if (loop[i] is a and loop[j] is b) or (loop[i] is b and loop[j] is a):
                    loop.insert(i + 1, v)
                    break

    def _remove_vertex(self, v: Vertex):
        for loop in self.loops:
            while v in loop:
                loop.remove(v)

    def __repr__(self):
        return "Face({} vertices, holes={}, material={!r})".format(
            len(self.outer_loop), len(self.inner_loops), self.material)


def _faces_mergeable(f0: Face, f1: Face) -> bool:
    p0 = f0.plane
    p1 = f1.plane
    if p0 is None or p1 is None:
        return False
    return same_plane(p0, p1) and samedirection(p0[0], p1[0])


# -----------------------------------------------------------------------------
# Entities collection
# -----------------------------------------------------------------------------

class Entities:
    """Flat geometry collection owned by a definition or the model."""

    def __init__(self, parent):
        self.parent = parent
        self._vertices: List[Vertex] = []
        self._edges: List[Edge] = []
        self._faces: List[Face] = []
        self._instances: List["Container"] = []

    @property
    def model(self) -> "Model":
        if isinstance(self.parent, Model):
            return self.parent
        return self.parent.model

    def __iter__(self) -> Iterator[Entity]:
        return iter(self.to_a())

    def __len__(self) -> int:
        return len(self._edges) + len(self._faces) + len(self._instances)

    def to_a(self) -> List[Entity]:
        return list(self._edges) + list(self._faces) + list(self._instances)

    @property
    def vertices(self) -> List[Vertex]:
        return list(self._vertices)

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges)

    @property
    def faces(self) -> List[Face]:
        return list(self._faces)

    @property
    def instances(self) -> List["Container"]:
        return list(self._instances)

    # ----- vertices ---------------------------------------------------------

    def find_vertex(self, p) -> Optional[Vertex]:
        for v in self._vertices:
            if vclose(v.position, p):
                return v
        return None

    def add_vertex(self, p) -> Vertex:
        """Return the vertex at ``p``, creating (and welding) it if needed."""
        v = self.find_vertex(p)
        if v is not None:
            return v
        v = Vertex(p)
        self._vertices.append(v)
        self._split_edges_at(v)
        return v

    def _split_edges_at(self, v: Vertex):
        for e in list(self._edges):
            if v is e.start or v is e.end:
                continue
            if isinsideline(e.line, v.position):
                self._split_edge(e, v)

    def _split_edge(self, e: Edge, v: Vertex):
        a, b = e.start, e.end
        b.edges.remove(e)
        e.end = v
        v.edges.append(e)
        tail = Edge(v, b)
        tail.attributes = dict(e.attributes)
        tail.faces = list(e.faces)
        v.edges.append(tail)
        b.edges.append(tail)
        self._edges.append(tail)
        for f in e.faces:
            f._insert_vertex(a, b, v)

    def _remove_vertex(self, v: Vertex):
        if v.edges:
            raise TopologyError('cannot remove a vertex still used by edges')
        if v in self._vertices:
            self._vertices.remove(v)
        v.valid = False

    # ----- edges ------------------------------------------------------------

    def _vertex_chain(self, p0, p1) -> List[Vertex]:
        v0 = self.add_vertex(p0)
        v1 = self.add_vertex(p1)
        if v0 is v1:
            return [v0]
        seg = [v0.position, v1.position]
        for e in list(self._edges):
            if not e.valid or e.start in (v0, v1) or e.end in (v0, v1):
                continue
            hit = segment_closest(seg[0], seg[1], e.start.position, e.end.position)
            if hit is None:
                continue
            s, t, d = hit
            if d >= epsilon:
                continue
            x = linear_combination(1.0 - s, seg[0], s, seg[1])
            if vclose(x, seg[0]) or vclose(x, seg[1]):
                continue
            self.add_vertex(x)
        inner = [v for v in self._vertices
                 if v is not v0 and v is not v1 and isinsideline(seg, v.position)]
        inner.sort(key=lambda v: unsampleline(seg, v.position))
        for v in inner:
            self._split_edges_at(v)
        return [v0] + inner + [v1]

    def _edges_along(self, chain: Sequence[Vertex]):
        edges = []
        created = []
        for a, b in zip(chain, chain[1:]):
            e = edge_between(a, b)
            if e is None:
                e = Edge(a, b)
                a.edges.append(e)
                b.edges.append(e)
                self._edges.append(e)
                created.append(e)
            edges.append(e)
        return edges, created

    def add_line(self, p0, p1) -> List[Edge]:
        """Add a line segment, returning the chain of edges now covering it."""
        chain = self._vertex_chain(point(p0), point(p1))
        edges, created = self._edges_along(chain)
        if created:
            self._split_faces_by(created)
        return edges

    def add_edges(self, points) -> List[Edge]:
        """Add a polyline through ``points``."""
        result = []
        for p0, p1 in zip(points, points[1:]):
            result.extend(self.add_line(p0, p1))
        return result

    # ----- faces ------------------------------------------------------------

    def _loop_vertices(self, pts) -> List[Vertex]:
        loop: List[Vertex] = []
        n = len(pts)
        for i in range(n):
            chain = self._vertex_chain(point(pts[i]), point(pts[(i + 1) % n]))
            _, created = self._edges_along(chain)
            if created:
                self._split_faces_by(created)
            for v in chain[:-1]:
                if not loop or loop[-1] is not v:
                    loop.append(v)
        if len(loop) > 1 and loop[0] is loop[-1]:
            loop.pop()
        return self._refresh_loop(loop)

    def _refresh_loop(self, loop: List[Vertex]) -> List[Vertex]:
        # later segments of the same face may have split earlier ones
        result: List[Vertex] = []
        n = len(loop)
        for i in range(n):
            a = loop[i]
            b = loop[(i + 1) % n]
            result.append(a)
            if edge_between(a, b) is not None:
                continue
            seg = [a.position, b.position]
            inner = [v for v in self._vertices
                     if v is not a and v is not b and isinsideline(seg, v.position)]
            inner.sort(key=lambda v: unsampleline(seg, v.position))
            result.extend(inner)
            self._edges_along([a] + inner + [b])
        return result

    def _attach(self, face: Face):
        for e in face.edges:
            if face not in e.faces:
                e.faces.append(face)

    def _detach(self, face: Face):
        for loop in face.loops:
            n = len(loop)
            for i in range(n):
                e = edge_between(loop[i], loop[(i + 1) % n])
                if e is not None and face in e.faces:
                    e.faces.remove(face)

    def add_face(self, outer, holes=None, material=None, layer=None) -> Face:
        """Add a planar face.

        ``outer`` and each hole are point lists.  Returns the new face, or
        the existing face when one with exactly the same vertices is
        already present.
        """
        holes = holes or []
        if len(outer) < 3:
            raise ValueError('bad outer loop passed to add_face: need 3 or more points')
        if plane_from_points([point(p) for p in outer]) is None:
            raise ValueError('degenerate outer loop passed to add_face')
        outer_loop = self._loop_vertices(outer)
        hole_loops = [self._loop_vertices(h) for h in holes if len(h) >= 3]
        outer_loop = self._refresh_loop(outer_loop)

        wanted = set(outer_loop)
        for h in hole_loops:
            wanted.update(h)
        for f in self._faces:
            if set(f.vertices) == wanted:
                return f

        face = Face(outer_loop, hole_loops, material=material, layer=layer)
        self._faces.append(face)
        self._attach(face)
        pieces = self._retessellate(face)
        if len(pieces) > 1:
            pieces = self._drop_duplicates(pieces)
        return pieces[0] if pieces else face

    def _drop_duplicates(self, pieces: List[Face]) -> List[Face]:
        result = []
        for piece in pieces:
            wanted = set(piece.vertices)
            twin = None
            for f in self._faces:
                if f is not piece and f not in pieces and set(f.vertices) == wanted:
                    twin = f
                    break
            if twin is None:
                result.append(piece)
            else:
                self._remove_face(piece)
                result.append(twin)
        return result

    def _interior_edges(self, loops, plane, exclude) -> List[Edge]:
        result = []
        for e in self._edges:
            if e in exclude or not e.valid:
                continue
            if classify_point(e.midpoint, loops, plane) != PointClass.INSIDE:
                continue
            if classify_point(e.start.position, loops, plane) not in ON_FACE:
                continue
            if classify_point(e.end.position, loops, plane) not in ON_FACE:
                continue
            result.append(e)
        return result

    def _split_faces_by(self, new_edges: Sequence[Edge]):
        affected = []
        for e in new_edges:
            mid = e.midpoint
            for f in self._faces:
                if f in affected or f in e.faces:
                    continue
                if f.classify_point(mid) == PointClass.INSIDE:
                    affected.append(f)
        for f in affected:
            if f.valid:
                self._retessellate(f)

    def _rebuild(self, faces: Sequence[Face], edges: Sequence[Edge],
                 keep_inside, template: Face) -> List[Face]:
        """Replace ``faces`` with the regions bounded by ``edges``."""
        plane = template.plane
        segments = [(e.start, e.end, e) for e in edges]
        positions = {}
        for e in edges:
            positions[e.start] = e.start.position
            positions[e.end] = e.end.position
        regions, _ = build_regions(segments, positions, plane[0])

        kept = []
        for region in regions:
            sample = _region_sample(region, plane[0])
            if sample is not None and keep_inside(sample):
                kept.append(region)

        for f in faces:
            self._detach(f)
        result = []
        for i, region in enumerate(kept):
            if i < len(faces):
                face = faces[i]
                face.outer_loop = list(region.outer)
                face.inner_loops = [list(h) for h in region.holes]
            else:
                face = Face(region.outer, region.holes,
                            material=template.material, layer=template.layer)
                face.attributes = dict(template.attributes)
                self._faces.append(face)
            self._attach(face)
            result.append(face)
        for f in faces[len(kept):]:
            self._faces.remove(f)
            f.valid = False
        return result

    def _retessellate(self, face: Face) -> List[Face]:
        loops = face.loop_positions()
        plane = face.plane
        boundary = face.edges
        interior = self._interior_edges(loops, plane, boundary)
        if not interior:
            return [face]
        logger.debug("splitting face by {} interior edges", len(interior))

        def _inside(p):
            return classify_point(p, loops, plane) == PointClass.INSIDE

        return self._rebuild([face], boundary + interior, _inside, face)

    def _merge_faces(self, f0: Face, f1: Face, seam: Edge) -> List[Face]:
        loops0 = f0.loop_positions()
        loops1 = f1.loop_positions()
        plane0 = f0.plane
        plane1 = f1.plane
        edges = [e for e in f0.edges + f1.edges if e is not seam]
        edges = list(dict.fromkeys(edges))

        def _inside(p):
            return classify_point(p, loops0, plane0) in ON_FACE or \
                classify_point(p, loops1, plane1) in ON_FACE

        return self._rebuild([f0, f1], edges, _inside, f0)

    def _remove_face(self, face: Face):
        self._detach(face)
        if face in self._faces:
            self._faces.remove(face)
        face.valid = False

    def _remove_edge(self, e: Edge):
        for f in list(e.faces):
            self._remove_face(f)
        for v in (e.start, e.end):
            if e in v.edges:
                v.edges.remove(e)
        if e in self._edges:
            self._edges.remove(e)
        e.valid = False

    def _erase_edge(self, e: Edge):
        faces = [f for f in e.faces if f.valid]
        if len(faces) == 2 and faces[0] is not faces[1] and _faces_mergeable(faces[0], faces[1]):
            # the older face survives and lends its material
            faces.sort(key=self._faces.index)
            self._merge_faces(faces[0], faces[1], e)
        self._remove_edge(e)

    def _heal(self, vertices):
        for v in vertices:
            if not v.valid:
                continue
            if not v.edges:
                self._remove_vertex(v)
                continue
            if len(v.edges) != 2:
                continue
            e1, e2 = v.edges
            a = e1.other_vertex(v)
            b = e2.other_vertex(v)
            if a is b or not e1.faces:
                continue
            if set(map(id, e1.faces)) != set(map(id, e2.faces)):
                continue
            if not isinsideline([a.position, b.position], v.position):
                continue
            if edge_between(a, b) is not None:
                continue
            for f in e1.faces:
                f._remove_vertex(v)
            b.edges.remove(e2)
            v.edges.clear()
            if e1.start is v:
                e1.start = b
            else:
                e1.end = b
            b.edges.append(e1)
            self._edges.remove(e2)
            e2.valid = False
            self._remove_vertex(v)

    def erase_entities(self, items):
        """Erase faces, edges and containers.

        Erasing an edge between two coplanar faces merges them into the
        older of the two; erasing any other edge also erases the faces
        it bounds.
        """
        touched = []
        for item in list(items):
            if not isinstance(item, Entity):
                raise ValueError('bad entity passed to erase_entities: {!r}'.format(item))
            if not item.valid:
                continue
            if isinstance(item, Face):
                touched.extend(item.vertices)
                self._remove_face(item)
            elif isinstance(item, Edge):
                touched.extend(item.vertices)
                self._erase_edge(item)
            elif isinstance(item, Container):
                item.erase()
            else:
                raise ValueError('bad entity passed to erase_entities: {!r}'.format(item))
        self._heal(list(dict.fromkeys(touched)))

    # ----- containers -------------------------------------------------------

    def add_group(self, name: str = '') -> "Group":
        definition = self.model.add_definition(name, group=True)
        return self.add_instance(definition, IDENTITY, name=name)

    def add_instance(self, definition: "Definition", transformation: Matrix = IDENTITY,
                     name: str = '') -> "Container":
        cls = Group if definition.group else ComponentInstance
        inst = cls(definition, self, Matrix(transformation), name=name)
        definition.instances.append(inst)
        self._instances.append(inst)
        return inst

    def _forget_instance(self, inst: "Container"):
        if inst in self._instances:
            self._instances.remove(inst)


def _region_sample(region, normal):
    """Point strictly inside a traced region (centroid of its largest triangle)."""
    from polysolid.triangulator import triangulate_loops

    outer = [n.position for n in region.outer]
    holes = [[n.position for n in h] for h in region.holes]
    best = None
    best_area = 0.0
    for tri in triangulate_loops(outer, holes, normal):
        area = loop_area(tri)
        if area > best_area:
            best_area = area
            best = tri
    if best is None:
        return None
    return pointcenter(best)


def copy_geometry(source: Entities, target: Entities, transformation: Matrix = IDENTITY):
    """Copy the faces, loose edges and nested containers of ``source``
    into ``target``, mapping positions through ``transformation``."""

    mirrored = transformation.determinant() < 0.0
    for f in source.faces:
        loops = [[transformation.transform_point(p) for p in loop]
                 for loop in f.loop_positions()]
        if mirrored:
            for loop in loops:
                loop.reverse()
        before = len(target._faces)
        nf = target.add_face(loops[0], loops[1:], material=f.material, layer=f.layer)
        if len(target._faces) > before:
            nf.attributes = dict(f.attributes)
    for e in source.edges:
        if e.faces:
            continue
        target.add_line(transformation.transform_point(e.start.position),
                        transformation.transform_point(e.end.position))
    for inst in source.instances:
        child = target.add_instance(inst.definition, transformation * inst.transformation,
                                    name=inst.name)
        child.material = inst.material
        child.layer = inst.layer
        child.attributes = dict(inst.attributes)


# -----------------------------------------------------------------------------
# Definitions and containers
# -----------------------------------------------------------------------------

class Definition(Entity):

    def __init__(self, model: "Model", name: str = '', group: bool = False):
        super().__init__()
        self.model = model
        self.name = name
        self.group = group
        self.entities = Entities(self)
        self.instances: List["Container"] = []

    @property
    def count_instances(self) -> int:
        return len(self.instances)

    def __repr__(self):
        return "Definition({!r}, group={}, instances={})".format(
            self.name, self.group, len(self.instances))


class Container(Entity):
    """A placed definition: the operand type of the solid tools."""

    def __init__(self, definition: Definition, parent: Entities,
                 transformation: Matrix = IDENTITY, name: str = ''):
        super().__init__()
        self.definition = definition
        self.parent = parent
        self.transformation = Matrix(transformation)
        self.name = name
        self.material = None
        self.layer = None

    @property
    def model(self) -> "Model":
        return self.parent.model

    @property
    def entities(self) -> Entities:
        return self.definition.entities

    @property
    def volume(self) -> float:
        from polysolid.mesh import entities_volume
        return entities_volume(self.entities) * abs(self.transformation.determinant())

    def copy(self) -> "Container":
        """Place another instance of the same definition next to this one."""
        other = self.parent.add_instance(self.definition, self.transformation, name=self.name)
        other.material = self.material
        other.layer = self.layer
        other.attributes = dict(self.attributes)
        return other

    def erase(self):
        if not self.valid:
            return
        self.parent._forget_instance(self)
        if self in self.definition.instances:
            self.definition.instances.remove(self)
        if self.definition.group and not self.definition.instances:
            self.model._drop_definition(self.definition)
        self.valid = False

    def explode(self):
        """Move this container's geometry into its parent and remove it."""
        copy_geometry(self.entities, self.parent, self.transformation)
        self.erase()

    def __repr__(self):
        return "{}({!r})".format(type(self).__name__, self.name)


class Group(Container):

    def make_unique(self):
        """Give this group a private definition if copies share it."""
        if len(self.definition.instances) < 2:
            return self
        old = self.definition
        fresh = self.model.add_definition(old.name, group=True)
        copy_geometry(old.entities, fresh.entities)
        old.instances.remove(self)
        fresh.instances.append(self)
        self.definition = fresh
        logger.debug("made group {!r} unique", self.name)
        return self


class ComponentInstance(Container):
    pass


class Model:
    """Root of a document."""

    def __init__(self):
        self.definitions: List[Definition] = []
        self.entities = Entities(self)

    @property
    def model(self) -> "Model":
        return self

    def add_definition(self, name: str = '', group: bool = False) -> Definition:
        definition = Definition(self, name, group=group)
        self.definitions.append(definition)
        return definition

    def _drop_definition(self, definition: Definition):
        if definition in self.definitions:
            self.definitions.remove(definition)
        definition.valid = False
