"""Builders for simple solids inside an ``Entities``.

All builders add outward facing faces, so the results are valid
operands for the boolean operations in :mod:`polysolid.solids`.
"""

from __future__ import annotations

from typing import Optional, Sequence

from polysolid.geom import add, point, vect
from polysolid.planar import signed_area_2d


def _oriented(loop2d, ccw=True):
    pts = [(float(p[0]), float(p[1])) for p in loop2d]
    if (signed_area_2d(pts) > 0.0) != ccw:
        pts.reverse()
    return pts


def extrude(entities, polygon: Sequence, height: float, holes: Optional[Sequence] = None,
            z: float = 0.0, material=None, layer=None):
    """Extrude an XY ``polygon`` (with optional ``holes``) from ``z`` up by
    ``height``.  Returns the list of faces created."""

    if height <= 0.0:
        raise ValueError('bad height passed to extrude: {}'.format(height))
    if len(polygon) < 3:
        raise ValueError('bad polygon passed to extrude')
    outer = _oriented(polygon, ccw=True)
    inner = [_oriented(h, ccw=False) for h in (holes or [])]
    z1 = z + height

    def _at(loop, zz):
        return [point(x, y, zz) for x, y in loop]

    faces = []
    bottom = [list(reversed(_at(outer, z)))]
    bottom += [list(reversed(_at(h, z))) for h in inner]
    faces.append(entities.add_face(bottom[0], bottom[1:], material=material, layer=layer))

    for loop in [outer] + inner:
        n = len(loop)
        for i in range(n):
            x0, y0 = loop[i]
            x1, y1 = loop[(i + 1) % n]
            quad = [point(x0, y0, z), point(x1, y1, z), point(x1, y1, z1), point(x0, y0, z1)]
            faces.append(entities.add_face(quad, material=material, layer=layer))

    faces.append(entities.add_face(_at(outer, z1), [_at(h, z1) for h in inner],
                                   material=material, layer=layer))
    return faces


def add_box(entities, corner0, corner1, material=None, layer=None):
    """Axis aligned box spanning ``corner0`` to ``corner1``."""

    lo = [min(corner0[i], corner1[i]) for i in range(3)]
    hi = [max(corner0[i], corner1[i]) for i in range(3)]
    if any(hi[i] - lo[i] <= 0.0 for i in range(3)):
        raise ValueError('bad corners passed to add_box: zero thickness')
    square = [(lo[0], lo[1]), (hi[0], lo[1]), (hi[0], hi[1]), (lo[0], hi[1])]
    return extrude(entities, square, hi[2] - lo[2], z=lo[2], material=material, layer=layer)


def prism(entities, length, width, height, center=point(0, 0, 0), material=None, layer=None):
    """Box of the given size centred on ``center``."""

    half = vect(length / 2.0, width / 2.0, height / 2.0, 0)
    c0 = add(center, [-half[0], -half[1], -half[2], 0])
    c1 = add(center, half)
    return add_box(entities, c0, c1, material=material, layer=layer)


def box_group(entities, corner0, corner1, name: str = '', material=None, layer=None):
    """Create a group in ``entities`` holding an axis aligned box."""

    group = entities.add_group(name)
    add_box(group.entities, corner0, corner1)
    group.material = material
    group.layer = layer
    return group


__all__ = ['extrude', 'add_box', 'prism', 'box_group']
