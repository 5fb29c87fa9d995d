"""Triangulation helpers for polysolid faces.

We delegate to ``mapbox-earcut`` (the fast ear clipping implementation
used by Mapbox GL).  Faces are projected into their own plane, ear
clipped, and the resulting indices are mapped back onto the original
3-D loop points so every triangle vertex is an actual face vertex.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

import numpy as np

try:
    import mapbox_earcut as _earcut
except ImportError as exc:  # pragma: no cover - import guard
    raise ImportError(
        "mapbox-earcut must be installed to triangulate faces with holes"
    ) from exc

from polysolid.geom import epsilon
from polysolid.planar import plane_frame, project

Point2D = Tuple[float, float]


def triangulate_polygon(outer: Sequence[Sequence[float]],
                        holes: Iterable[Sequence[Sequence[float]]] | None = None
                        ) -> List[List[int]]:
    """Return index triples covering ``outer`` minus any ``holes``.

    ``outer`` and each entry in ``holes`` is a sequence of XY-like
    points.  Indices refer to the concatenation of ``outer`` followed by
    the holes in order, as given (loops are not reordered, only their
    winding is checked).  Degenerate loops are ignored.
    """

    if holes is None:
        holes = []

    rings = [list(outer)] + [list(h) for h in holes]
    point_map: List[Point2D] = []
    index_map: List[int] = []
    ring_ends: List[int] = []
    offset = 0
    for n, ring in enumerate(rings):
        loop = [(float(p[0]), float(p[1])) for p in ring]
        ids = list(range(offset, offset + len(loop)))
        offset += len(loop)
        if len(loop) < 3 or abs(_signed_area(loop)) <= epsilon * epsilon:
            if n == 0:
                return []
            continue
        area = _signed_area(loop)
        if (n == 0 and area < 0) or (n > 0 and area > 0):
            loop.reverse()
            ids.reverse()
        point_map.extend(loop)
        index_map.extend(ids)
        ring_ends.append(len(point_map))

    vertices = np.asarray(point_map, dtype=np.float64)
    ring_array = np.asarray(ring_ends, dtype=np.uint32)
    indices = _earcut.triangulate_float64(vertices, ring_array)
    triangles: List[List[int]] = []
    for i in range(0, len(indices), 3):
        triangles.append([index_map[int(indices[i])],
                          index_map[int(indices[i + 1])],
                          index_map[int(indices[i + 2])]])
    return triangles


def triangulate_loops(outer, holes, normal) -> List[list]:
    """Triangulate a planar 3-D face given its loops and plane normal.

    Triangles come back as lists of three 3-D points wound
    counter-clockwise around ``normal``.
    """

    frame = plane_frame(normal)
    origin = outer[0]
    flat = [p for loop in [outer] + list(holes) for p in loop]
    outer2d = [project(p, origin, frame) for p in outer]
    holes2d = [[project(p, origin, frame) for p in h] for h in holes]
    result = []
    for a, b, c in triangulate_polygon(outer2d, holes2d):
        tri = [flat[a], flat[b], flat[c]]
        p0, p1, p2 = (project(q, origin, frame) for q in tri)
        if _signed_area([p0, p1, p2]) < 0:
            tri = [tri[0], tri[2], tri[1]]
        result.append(tri)
    return result


def _signed_area(loop: Sequence[Point2D]) -> float:
    total = 0.0
    for i, (x0, y0) in enumerate(loop):
        x1, y1 = loop[(i + 1) % len(loop)]
        total += x0 * y1 - x1 * y0
    return total / 2.0
