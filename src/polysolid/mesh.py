"""Triangulated views of polysolid faces and containers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence, Tuple

from polysolid.geom import cross, epsilon, mag
from polysolid.triangulator import triangulate_loops
from polysolid.xform import IDENTITY, Matrix

Vec3 = Tuple[float, float, float]
TriTuple = Tuple[Vec3, Vec3, Vec3, Vec3]


@dataclass(frozen=True)
class Triangle:
    """Immutable triangle representation in XYZ space."""

    normal: Vec3
    v0: Vec3
    v1: Vec3
    v2: Vec3


def to_vec3(point_like: Sequence[float]) -> Vec3:
    """Return the XYZ components of a polysolid point/vector as a tuple."""

    if len(point_like) < 3:
        raise ValueError("value must have at least three components")
    return float(point_like[0]), float(point_like[1]), float(point_like[2])


def triangle_normal(v0: Vec3, v1: Vec3, v2: Vec3) -> Vec3 | None:
    """Return the unit normal of a triangle or ``None`` if degenerate."""

    ax, ay, az = v1[0] - v0[0], v1[1] - v0[1], v1[2] - v0[2]
    bx, by, bz = v2[0] - v0[0], v2[1] - v0[1], v2[2] - v0[2]
    n = cross([ax, ay, az, 1.0], [bx, by, bz, 1.0])
    length = mag(n)
    if length <= epsilon * epsilon:
        return None
    return (n[0] / length, n[1] / length, n[2] / length)


def face_triangles(face, transformation: Matrix = IDENTITY) -> Iterator[TriTuple]:
    """Yield ``(normal, v0, v1, v2)`` for one face, wound with the face."""

    loops = face.loop_positions()
    if not transformation.isidentity():
        loops = [[transformation.transform_point(p) for p in loop] for loop in loops]
        if transformation.determinant() < 0.0:
            for loop in loops:
                loop.reverse()
    plane = face.plane
    if plane is None:
        return
    normal = transformation.transform_normal(plane[0])
    for tri in triangulate_loops(loops[0], loops[1:], normal):
        v0, v1, v2 = (to_vec3(p) for p in tri)
        n = triangle_normal(v0, v1, v2)
        if n is None:
            continue
        yield n, v0, v1, v2


def mesh_view(container, transformation: Matrix | None = None) -> Iterator[TriTuple]:
    """Yield triangles for every face of a container.

    By default vertices are placed with the container's own
    transformation, i.e. in its parent's frame.  Nested containers are
    not included.
    """

    if transformation is None:
        transformation = container.transformation
    for face in container.entities.faces:
        yield from face_triangles(face, transformation)


def entities_volume(entities) -> float:
    """Signed volume enclosed by the faces of ``entities``.

    Positive for outward facing faces, negative when the faces point
    in.  Only meaningful for closed shells.
    """

    total = 0.0
    for face in entities.faces:
        for _, v0, v1, v2 in face_triangles(face):
            total += (v0[0] * (v1[1] * v2[2] - v1[2] * v2[1])
                      - v0[1] * (v1[0] * v2[2] - v1[2] * v2[0])
                      + v0[2] * (v1[0] * v2[1] - v1[1] * v2[0]))
    return total / 6.0


def triangles_from_mesh(mesh: Iterable[TriTuple]) -> Iterable[Triangle]:
    """Convert ``mesh_view`` output into ``Triangle`` instances."""

    for normal, v0, v1, v2 in mesh:
        yield Triangle(normal=normal, v0=v0, v1=v1, v2=v2)


__all__ = [
    'Triangle',
    'Vec3',
    'to_vec3',
    'triangle_normal',
    'face_triangles',
    'mesh_view',
    'entities_volume',
    'triangles_from_mesh',
]
