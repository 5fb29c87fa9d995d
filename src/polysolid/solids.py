## boolean operations on polysolid containers
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

"""Solid operations on groups and component instances.

A container counts as solid when every edge of its own geometry binds
an even number of faces.  Nested containers are ignored throughout: a
wall with a window component cut into it is still a solid that can be
trimmed.

Union, subtract, trim and intersect edit the *primary* container in
place, so it keeps its name, material, layer, attributes and
transformation.  A primary ``Group`` is silently made unique first, a
primary ``ComponentInstance`` is edited through its definition (so every
instance of it changes).  The secondary operand is consumed through a
private copy and is never edited.

Face orientation decides what happens to touching faces, so operands
must have outward facing faces.  Operands must live in the same
``Entities``.

Return values follow one convention:

- ``None``: an operand was not solid, nothing was changed
- ``False``: the operation ran but the result is not solid (no rollback)
- ``True``: the result is solid
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Set, Tuple

from loguru import logger

from polysolid.config import get_settings
from polysolid.entities import Container, Edge, Entities, Face, Group
from polysolid.geom import (
    linear_combination,
    parallel,
    pointcenter,
    pointin,
    samedirection,
    sub,
    uniquepoints,
    vclose,
    vect,
    epsilon,
)
from polysolid.intersect import intersect_with
from polysolid.planar import ON_FACE, PointClass, intersect_line_plane, plane_distance
from polysolid.xform import IDENTITY

# Fixed, deliberately skewed ray direction for point classification.
RAY_DIRECTION = vect(234, 1343, 345, 1)


class InteriorPointError(ValueError):
    """Raised when no point strictly inside a face could be found."""


class Operator(Enum):
    UNION = 'union'
    SUBTRACT = 'subtract'
    TRIM = 'trim'
    INTERSECT = 'intersect'


@dataclass(frozen=True)
class Policy:
    """How one operator selects and treats faces.

    ``primary_interior`` / ``secondary_interior`` say whether faces of
    that operand lying *inside* the other operand are removed (True) or
    faces lying *outside* it are (False).  ``same_orientation`` filters
    the coincident face pairs removed from both operands.
    """

    primary_interior: bool
    secondary_interior: bool
    same_orientation: bool
    reverse_secondary: bool = False
    keep_secondary: bool = False


POLICIES = {
    Operator.UNION: Policy(True, True, False),
    Operator.SUBTRACT: Policy(True, False, True, reverse_secondary=True),
    Operator.TRIM: Policy(True, False, True, reverse_secondary=True, keep_secondary=True),
    Operator.INTERSECT: Policy(False, False, False),
}


# -----------------------------------------------------------------------------
# Queries
# -----------------------------------------------------------------------------

def is_solid(container) -> Optional[bool]:
    """Does every edge of ``container`` bind an even number of faces?

    Returns ``None`` when ``container`` is not a group or component.
    """
    if not isinstance(container, Container):
        return None
    return not any(len(e.faces) % 2 == 1 for e in container.entities.edges)


def within(point, container, on_boundary: bool = True,
           verify_solid: bool = True) -> Optional[bool]:
    """Is ``point`` (in the container's parent frame) inside ``container``?

    Returns ``on_boundary`` when the point lies on one of the faces, and
    ``None`` when ``verify_solid`` is set and the container isn't solid.
    """

    if verify_solid and not is_solid(container):
        return None
    if not isinstance(container, Container):
        raise ValueError('bad container passed to within: {!r}'.format(container))

    local = container.transformation.inverse().transform_point(point)
    hits = []
    for face in container.entities.faces:
        if face.classify_point(local) in ON_FACE:
            return on_boundary
        plane = face.plane
        if plane is None:
            continue
        hit = intersect_line_plane(local, RAY_DIRECTION, plane)
        if hit is None:
            continue
        if vclose(hit, local):
            continue
        if not samedirection(sub(hit, local), RAY_DIRECTION):
            continue
        if face.classify_point(hit) not in ON_FACE:
            continue
        hits.append(hit)

    # a ray through a shared edge or vertex hits every face there
    return len(uniquepoints(hits)) % 2 == 1


def interior_point(face: Face, corner_bias: Optional[float] = None):
    """Return a point strictly inside ``face``, or ``None`` if it has no area.

    Raises ``InteriorPointError`` if no such point could be found.
    """

    if face.area == 0.0:
        return None
    if corner_bias is None:
        corner_bias = get_settings().corner_bias
    rest = 1.0 - corner_bias

    centroid = pointcenter([v.position for v in face.outer_loop])
    if face.classify_point(centroid) == PointClass.INSIDE:
        return centroid

    for loop in face.loops:
        n = len(loop)
        for i in range(n):
            c0 = loop[i].position
            c1 = loop[i - 1].position
            c2 = loop[(i + 1) % n].position
            p = linear_combination(corner_bias, c0, rest, c2)
            p = linear_combination(corner_bias, p, rest, c1)
            if face.classify_point(p) == PointClass.INSIDE:
                return p

    raise InteriorPointError('no interior point found for {!r}'.format(face))


def corresponding_faces(container0, container1,
                        orientation: Optional[bool] = None) -> List[Tuple[Face, Face]]:
    """Face pairs of the two containers covering the same planar region.

    ``orientation`` True keeps pairs facing the same way, False keeps
    opposite facing pairs and None keeps both.
    """

    t0 = container0.transformation
    t1 = container1.transformation
    placed1 = []
    for f1 in container1.entities.faces:
        if f1.plane is None:
            continue
        placed1.append((f1, t1.transform_normal(f1.normal),
                        [t1.transform_point(v.position) for v in f1.vertices]))

    pairs = []
    for f0 in container0.entities.faces:
        if f0.plane is None:
            continue
        normal0 = t0.transform_normal(f0.normal)
        points0 = [t0.transform_point(v.position) for v in f0.vertices]
        for f1, normal1, points1 in placed1:
            if not parallel(normal0, normal1):
                continue
            if not all(pointin(p, points1) for p in points0):
                continue
            if orientation is not None and samedirection(normal0, normal1) != orientation:
                continue
            pairs.append((f0, f1))
    return pairs


def coplanar_edges(entities: Entities) -> Set[Edge]:
    """Edges binding exactly two faces that lie in the same plane."""

    result = set()
    for e in entities.edges:
        if len(e.faces) != 2:
            continue
        f0, f1 = e.faces
        plane = f1.plane
        if plane is None:
            continue
        if all(abs(plane_distance(plane, v.position)) <= epsilon for v in f0.vertices):
            result.add(e)
    return result


def naked_edges(entities: Entities) -> List[Edge]:
    """Edges binding exactly one face."""
    return [e for e in entities.edges if len(e.faces) == 1]


# -----------------------------------------------------------------------------
# Mutation helpers
# -----------------------------------------------------------------------------

def purge_edges(entities: Entities):
    """Erase edges binding fewer than two faces."""
    stale = [e for e in entities.edges if len(e.faces) < 2]
    if stale:
        logger.debug("purging {} edges", len(stale))
        entities.erase_entities(stale)


def move_into(destination: Container, to_move: Container, keep: bool = False):
    """Move the geometry of ``to_move`` into ``destination``.

    Both containers must live in the same ``Entities``.  ``to_move`` is
    erased unless ``keep`` is set.
    """

    if destination.parent is not to_move.parent:
        raise ValueError('move_into needs containers in the same drawing context')
    trans = destination.transformation.inverse() * to_move.transformation
    temp = destination.entities.add_instance(to_move.definition, trans)
    if not keep:
        to_move.erase()
    temp.explode()


def add_intersection_edges(container0: Container, container1: Container):
    """Insert the intersection of two containers as edges into both."""

    temp = container0.parent.add_group()
    intersect_with(container0.entities, container0.transformation,
                   temp.entities, IDENTITY,
                   container1.entities, container1.transformation)
    intersect_with(container1.entities, container1.transformation,
                   temp.entities, IDENTITY,
                   container0.entities, container0.transformation)
    move_into(container0, temp, keep=True)
    move_into(container1, temp)


def find_faces(scope: Container, reference: Container, interior: bool,
               on_surface: bool = False) -> List[Face]:
    """Faces of ``scope`` lying inside (``interior``) or outside ``reference``."""

    found = []
    for face in scope.entities.faces:
        try:
            p = interior_point(face)
        except InteriorPointError as exc:
            logger.warning("skipping face: {}", exc)
            continue
        if p is None:
            continue
        p = scope.transformation.transform_point(p)
        if within(p, reference, interior == on_surface, False) == interior:
            found.append(face)
    return found


def weld(entities: Entities, owner: Container):
    """Re-insert naked edges so coincident edges get welded."""

    if is_solid(owner):
        return
    naked = naked_edges(entities)
    logger.debug("weld repair on {} naked edges", len(naked))
    temp = entities.add_group()
    for e in naked:
        temp.entities.add_line(e.start.position, e.end.position)
    temp.explode()


# -----------------------------------------------------------------------------
# Boolean operations
# -----------------------------------------------------------------------------

def boolean(operator: Operator, primary, secondary) -> Optional[bool]:
    """Run ``operator`` with ``primary`` as the container that is kept."""

    policy = POLICIES[operator]
    if not is_solid(primary) or not is_solid(secondary):
        logger.debug("{}: operand is not solid", operator.value)
        return None
    if isinstance(primary, Group):
        primary.make_unique()

    temp = primary.parent.add_group()
    move_into(temp, secondary, keep=policy.keep_secondary)
    secondary = temp

    primary_ents = primary.entities
    secondary_ents = secondary.entities

    old_coplanar = coplanar_edges(primary_ents) | coplanar_edges(secondary_ents)

    add_intersection_edges(primary, secondary)

    to_remove = find_faces(primary, secondary, policy.primary_interior)
    to_remove1 = find_faces(secondary, primary, policy.secondary_interior)
    for f0, f1 in corresponding_faces(primary, secondary, policy.same_orientation):
        to_remove.append(f0)
        to_remove1.append(f1)
    logger.debug("{}: removing {} primary and {} secondary faces",
                 operator.value, len(to_remove), len(to_remove1))

    primary_ents.erase_entities(to_remove)
    secondary_ents.erase_entities(to_remove1)

    if policy.reverse_secondary:
        for face in secondary_ents.faces:
            face.reverse()

    move_into(primary, secondary)
    purge_edges(primary_ents)

    seams = coplanar_edges(primary_ents) - old_coplanar
    if seams:
        logger.debug("{}: erasing {} coplanar seams", operator.value, len(seams))
        primary_ents.erase_entities(seams)

    if get_settings().weld_repair:
        weld(primary_ents, primary)

    result = is_solid(primary)
    if not result:
        logger.warning("{} left {!r} not solid", operator.value, primary)
    return result


def union(primary, secondary) -> Optional[bool]:
    """Unite ``secondary`` into ``primary``; ``secondary`` is removed."""
    return boolean(Operator.UNION, primary, secondary)


def subtract(primary, secondary, keep_secondary: bool = False) -> Optional[bool]:
    """Cut ``secondary`` away from ``primary``.

    ``secondary`` is removed unless ``keep_secondary`` is set, which
    makes this a trim.
    """
    op = Operator.TRIM if keep_secondary else Operator.SUBTRACT
    return boolean(op, primary, secondary)


def trim(primary, secondary) -> Optional[bool]:
    """Cut ``secondary`` away from ``primary`` and keep ``secondary``."""
    return boolean(Operator.TRIM, primary, secondary)


def intersect(primary, secondary) -> Optional[bool]:
    """Keep only the part of ``primary`` inside ``secondary``."""
    return boolean(Operator.INTERSECT, primary, secondary)


__all__ = [
    'RAY_DIRECTION',
    'InteriorPointError',
    'Operator',
    'Policy',
    'POLICIES',
    'is_solid',
    'within',
    'interior_point',
    'corresponding_faces',
    'coplanar_edges',
    'naked_edges',
    'purge_edges',
    'move_into',
    'add_intersection_edges',
    'find_faces',
    'weld',
    'boolean',
    'union',
    'subtract',
    'trim',
    'intersect',
]
