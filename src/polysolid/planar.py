"""Planar polygon geometry for polysolid faces.

A face is a planar polygon given as a list of loops, each loop a list of
points.  The first loop is the outer boundary, any further loops are
holes.  Every routine here works on plain point lists so it can be used
by the mesh kernel and by the boolean engine alike.

Classification answers come back as :class:`PointClass` members, which
mirror the categories a modelling host reports for a point against a
face: interior, on an edge, on a vertex, outside the boundary, or not in
the face's plane at all.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Sequence, Tuple

from polysolid.geom import (
    add,
    cross,
    dist,
    dot,
    epsilon,
    mag,
    normalize,
    point,
    scale3,
    sub,
    vclose,
)

Point2D = Tuple[float, float]


class PointClass(Enum):
    """Where a point lies relative to a planar face."""

    INSIDE = 'inside'
    ON_EDGE = 'on_edge'
    ON_VERTEX = 'on_vertex'
    OUTSIDE = 'outside'
    NOT_ON_PLANE = 'not_on_plane'


ON_FACE = (PointClass.INSIDE, PointClass.ON_EDGE, PointClass.ON_VERTEX)


def newell_normal(points: Sequence[Sequence[float]]) -> list:
    """Return the (unnormalised) Newell normal of a closed loop.

    The magnitude is twice the enclosed area, and the direction follows
    the right hand rule around the loop order.
    """

    nx = ny = nz = 0.0
    count = len(points)
    for i in range(count):
        p0 = points[i]
        p1 = points[(i + 1) % count]
        nx += (p0[1] - p1[1]) * (p0[2] + p1[2])
        ny += (p0[2] - p1[2]) * (p0[0] + p1[0])
        nz += (p0[0] - p1[0]) * (p0[1] + p1[1])
    return [nx, ny, nz, 1.0]


def loop_area(points: Sequence[Sequence[float]]) -> float:
    """Unsigned area enclosed by a planar loop."""
    return mag(newell_normal(points)) / 2.0


def plane_from_points(points: Sequence[Sequence[float]]):
    """Return ``(unit_normal, d)`` with ``dot(normal, p) == d`` on the
    plane, or ``None`` when the loop is degenerate."""

    n = newell_normal(points)
    if mag(n) < epsilon * epsilon:
        return None
    n = normalize(n)
    count = float(len(points))
    centroid = [sum(p[0] for p in points) / count,
                sum(p[1] for p in points) / count,
                sum(p[2] for p in points) / count, 1.0]
    return (n, dot(n, centroid))


def plane_distance(plane, p) -> float:
    """Signed distance from ``p`` to ``plane``."""
    n, d = plane
    return dot(n, p) - d


def plane_frame(normal) -> Tuple[list, list]:
    """Return in-plane unit axes ``(u, v)`` with ``u x v == normal``.

    Loops that run counter-clockwise in ``(u, v)`` coordinates run
    counter-clockwise around ``normal``.
    """

    n = normalize(normal)
    ax = [abs(n[0]), abs(n[1]), abs(n[2])]
    if ax[0] <= ax[1] and ax[0] <= ax[2]:
        helper = [1.0, 0.0, 0.0, 1.0]
    elif ax[1] <= ax[2]:
        helper = [0.0, 1.0, 0.0, 1.0]
    else:
        helper = [0.0, 0.0, 1.0, 1.0]
    u = normalize(cross(helper, n))
    v = cross(n, u)
    return u, v


def project(p, origin, frame) -> Point2D:
    """Coordinates of ``p`` in the 2-D frame anchored at ``origin``."""
    u, v = frame
    d = sub(p, origin)
    return (dot(d, u), dot(d, v))


def signed_area_2d(loop: Sequence[Point2D]) -> float:
    total = 0.0
    count = len(loop)
    for i in range(count):
        x0, y0 = loop[i]
        x1, y1 = loop[(i + 1) % count]
        total += x0 * y1 - x1 * y0
    return total / 2.0


def _dist2d(a: Point2D, b: Point2D) -> float:
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return (dx * dx + dy * dy) ** 0.5


def _segment_dist2d(p: Point2D, a: Point2D, b: Point2D) -> float:
    ex = b[0] - a[0]
    ey = b[1] - a[1]
    ee = ex * ex + ey * ey
    if ee < epsilon * epsilon:
        return _dist2d(p, a)
    t = ((p[0] - a[0]) * ex + (p[1] - a[1]) * ey) / ee
    t = max(0.0, min(1.0, t))
    return _dist2d(p, (a[0] + ex * t, a[1] + ey * t))


def _crossings(p: Point2D, loop: Sequence[Point2D]) -> int:
    count = 0
    n = len(loop)
    x, y = p
    for i in range(n):
        x0, y0 = loop[i]
        x1, y1 = loop[(i + 1) % n]
        if (y0 > y) != (y1 > y):
            xi = x0 + (y - y0) * (x1 - x0) / (y1 - y0)
            if xi > x:
                count += 1
    return count


def classify_2d(p: Point2D, loops: Sequence[Sequence[Point2D]]) -> PointClass:
    """Classify a 2-D point against a polygon with holes (even-odd)."""

    for loop in loops:
        for q in loop:
            if _dist2d(p, q) < epsilon:
                return PointClass.ON_VERTEX
    for loop in loops:
        n = len(loop)
        for i in range(n):
            if _segment_dist2d(p, loop[i], loop[(i + 1) % n]) < epsilon:
                return PointClass.ON_EDGE
    total = sum(_crossings(p, loop) for loop in loops)
    return PointClass.INSIDE if total % 2 == 1 else PointClass.OUTSIDE


def classify_point(p, loops: Sequence[Sequence[Sequence[float]]], plane=None) -> PointClass:
    """Classify 3-D point ``p`` against the planar polygon ``loops``."""

    if plane is None:
        plane = plane_from_points(loops[0])
    if plane is None:
        return PointClass.NOT_ON_PLANE
    if abs(plane_distance(plane, p)) > epsilon:
        return PointClass.NOT_ON_PLANE
    origin = loops[0][0]
    frame = plane_frame(plane[0])
    loops2d = [[project(q, origin, frame) for q in loop] for loop in loops]
    return classify_2d(project(p, origin, frame), loops2d)


def intersect_line_plane(origin, direction, plane):
    """Intersection of the infinite line ``origin + t*direction`` with
    ``plane``, or ``None`` when they are parallel."""

    n, d = plane
    denom = dot(n, direction)
    if abs(denom) < epsilon * mag(direction):
        return None
    t = (d - dot(n, origin)) / denom
    return add(origin, scale3(direction, t))


def plane_plane_line(plane0, plane1):
    """Common line of two planes as ``(origin, direction)``, or ``None``
    for parallel planes."""

    n0, d0 = plane0
    n1, d1 = plane1
    direction = cross(n0, n1)
    dd = dot(direction, direction)
    if dd < epsilon * epsilon:
        return None
    # origin = (d0 * (n1 x dir) + d1 * (dir x n0)) / |dir|^2
    a = scale3(cross(n1, direction), d0)
    b = scale3(cross(direction, n0), d1)
    origin = scale3(add(a, b), 1.0 / dd)
    return origin, direction


def segment_closest(a0, a1, b0, b1):
    """Closest approach of segments ``a0a1`` and ``b0b1``.

    Returns ``(s, t, distance)`` with the parameters along each segment,
    or ``None`` when the segments are parallel.
    """

    d1 = sub(a1, a0)
    d2 = sub(b1, b0)
    r = sub(a0, b0)
    a = dot(d1, d1)
    e = dot(d2, d2)
    f = dot(d2, r)
    if a < epsilon * epsilon or e < epsilon * epsilon:
        return None
    c = dot(d1, r)
    b = dot(d1, d2)
    denom = a * e - b * b
    if denom < (epsilon * epsilon) * a * e:
        return None
    s = max(0.0, min(1.0, (b * f - c * e) / denom))
    t = (b * s + f) / e
    if t < 0.0:
        t = 0.0
        s = max(0.0, min(1.0, -c / a))
    elif t > 1.0:
        t = 1.0
        s = max(0.0, min(1.0, (b - c) / a))
    pa = add(a0, scale3(d1, s))
    pb = add(b0, scale3(d2, t))
    return s, t, dist(pa, pb)


def clip_line_to_loops(origin, direction, loops, plane=None) -> List[Tuple[float, float]]:
    """Parameter intervals where the line ``origin + t*direction`` runs
    inside or along the boundary of the planar polygon ``loops``.

    The line is assumed to lie in the polygon's plane.
    """

    if plane is None:
        plane = plane_from_points(loops[0])
    if plane is None:
        return []
    base = loops[0][0]
    frame = plane_frame(plane[0])
    o2 = project(origin, base, frame)
    tip = project(add(origin, direction), base, frame)
    d2 = (tip[0] - o2[0], tip[1] - o2[1])
    dd = d2[0] * d2[0] + d2[1] * d2[1]
    if dd < epsilon * epsilon:
        return []
    loops2d = [[project(q, base, frame) for q in loop] for loop in loops]

    def _param(q):
        return ((q[0] - o2[0]) * d2[0] + (q[1] - o2[1]) * d2[1]) / dd

    dlen = dd ** 0.5
    params = []
    for loop in loops2d:
        n = len(loop)
        for i in range(n):
            a = loop[i]
            b = loop[(i + 1) % n]
            ex = b[0] - a[0]
            ey = b[1] - a[1]
            denom = d2[0] * ey - d2[1] * ex
            elen = (ex * ex + ey * ey) ** 0.5
            if abs(denom) < epsilon * dlen * max(elen, epsilon):
                # parallel; only collinear edges contribute breakpoints
                da = abs((a[0] - o2[0]) * d2[1] - (a[1] - o2[1]) * d2[0]) / dlen
                if da < epsilon:
                    params.append(_param(a))
                    params.append(_param(b))
                continue
            wx = a[0] - o2[0]
            wy = a[1] - o2[1]
            t = (wx * ey - wy * ex) / denom
            s = (wx * d2[1] - wy * d2[0]) / denom
            if -epsilon <= s * elen and s * elen <= elen + epsilon:
                params.append(t)

    params.sort()
    intervals: List[Tuple[float, float]] = []
    tol = epsilon / dlen
    for t0, t1 in zip(params, params[1:]):
        if t1 - t0 <= tol:
            continue
        tm = (t0 + t1) / 2.0
        mid = (o2[0] + d2[0] * tm, o2[1] + d2[1] * tm)
        if classify_2d(mid, loops2d) == PointClass.OUTSIDE:
            continue
        if intervals and abs(intervals[-1][1] - t0) <= tol:
            intervals[-1] = (intervals[-1][0], t1)
        else:
            intervals.append((t0, t1))
    return intervals


def clip_segment_to_loops(p0, p1, loops, plane=None) -> List[Tuple[list, list]]:
    """Pieces of segment ``p0p1`` lying inside or on the boundary of
    ``loops`` (the segment must lie in the polygon's plane)."""

    direction = sub(p1, p0)
    pieces = []
    for t0, t1 in clip_line_to_loops(p0, direction, loops, plane):
        t0 = max(0.0, t0)
        t1 = min(1.0, t1)
        if (t1 - t0) * mag(direction) <= epsilon:
            continue
        q0 = add(p0, scale3(direction, t0))
        q1 = add(p0, scale3(direction, t1))
        pieces.append((point(q0), point(q1)))
    return pieces


def same_plane(plane0, plane1) -> bool:
    """Do two planes coincide (either orientation)?"""
    n0, d0 = plane0
    n1, d1 = plane1
    if not vclose(n0, n1) and not vclose(n0, scale3(n1, -1.0)):
        return False
    if dot(n0, n1) > 0.0:
        return abs(d0 - d1) < epsilon
    return abs(d0 + d1) < epsilon
