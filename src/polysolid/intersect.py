"""Insert the intersection of two face sets as edges.

This is the mesh-intersection primitive the boolean engine seeds its
face splits with.  Both face sets are placed into a common frame, every
face pair is intersected, and the resulting segments are written as
loose edges into a target collection.  Adding those edges to an
``Entities`` that holds the faces splits the faces along them.
"""

from __future__ import annotations

from typing import List, Tuple

from loguru import logger

from polysolid.geom import add, epsilon, mag, pointbbox, bboxoverlap, scale3, vclose
from polysolid.planar import (
    clip_line_to_loops,
    clip_segment_to_loops,
    plane_from_points,
    plane_plane_line,
    same_plane,
)
from polysolid.xform import IDENTITY, Matrix


class _PlacedFace:
    """A face's loops and plane expressed in the common frame."""

    __slots__ = ('loops', 'plane', 'bbox')

    def __init__(self, face, transformation: Matrix):
        self.loops = [[transformation.transform_point(p) for p in loop]
                      for loop in face.loop_positions()]
        self.plane = plane_from_points(self.loops[0])
        self.bbox = pointbbox(self.loops[0])


def _placed(entities, transformation):
    result = []
    for face in entities.faces:
        placed = _PlacedFace(face, transformation)
        if placed.plane is not None:
            result.append(placed)
    return result


def _overlap(a, b) -> List[Tuple[float, float]]:
    result = []
    i = j = 0
    while i < len(a) and j < len(b):
        lo = max(a[i][0], b[j][0])
        hi = min(a[i][1], b[j][1])
        if hi > lo:
            result.append((lo, hi))
        if a[i][1] < b[j][1]:
            i += 1
        else:
            j += 1
    return result


def face_pair_segments(f0: _PlacedFace, f1: _PlacedFace) -> List[Tuple[list, list]]:
    """Segments along which ``f0`` meets ``f1`` (both in the same frame)."""

    if not bboxoverlap(f0.bbox, f1.bbox):
        return []
    if same_plane(f0.plane, f1.plane):
        segments = []
        for loop in f1.loops:
            n = len(loop)
            for i in range(n):
                segments.extend(clip_segment_to_loops(loop[i], loop[(i + 1) % n],
                                                      f0.loops, f0.plane))
        return segments

    common = plane_plane_line(f0.plane, f1.plane)
    if common is None:
        return []
    origin, direction = common
    spans = _overlap(clip_line_to_loops(origin, direction, f0.loops, f0.plane),
                     clip_line_to_loops(origin, direction, f1.loops, f1.plane))
    length = mag(direction)
    segments = []
    for t0, t1 in spans:
        if (t1 - t0) * length <= epsilon:
            continue
        p0 = add(origin, scale3(direction, t0))
        p1 = add(origin, scale3(direction, t1))
        if not vclose(p0, p1):
            segments.append((p0, p1))
    return segments


def intersect_with(entities, transformation: Matrix, target, target_transformation: Matrix,
                   others, others_transformation: Matrix = IDENTITY) -> int:
    """Write the intersection of ``entities`` with ``others`` into ``target``.

    ``transformation`` and ``others_transformation`` place the two face
    sets into a common frame; ``target_transformation`` places
    ``target`` into that same frame.  Segments are written in the
    target's own coordinates.  Returns the number of segments found.
    """

    faces0 = _placed(entities, transformation)
    faces1 = _placed(others, others_transformation)
    to_target = target_transformation.inverse()

    count = 0
    for f0 in faces0:
        for f1 in faces1:
            for p0, p1 in face_pair_segments(f0, f1):
                target.add_line(to_target.transform_point(p0),
                                to_target.transform_point(p1))
                count += 1
    logger.debug("intersection produced {} segments", count)
    return count
