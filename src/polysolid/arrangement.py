"""Rebuild planar face regions from a set of edges.

When a face gains edges across its interior, or two faces lose the edge
between them, the kernel hands every edge of the affected region to
:func:`build_regions`.  The edges must already be split wherever they
meet, so they only touch at shared nodes.  Regions are found by tracing
half-edge cycles: bounded regions come out counter-clockwise around the
plane normal, region outlines and holes come out clockwise.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from math import atan2
from typing import Dict, Hashable, List, Sequence, Tuple

from polysolid.geom import epsilon
from polysolid.planar import classify_2d, PointClass, plane_frame, project, signed_area_2d


@dataclass
class Region:
    """A face outline (CCW node cycle) with its hole cycles."""

    outer: List[Hashable]
    holes: List[List[Hashable]] = field(default_factory=list)
    area: float = 0.0


def _prune_dangling(adj, loose):
    changed = True
    while changed:
        changed = False
        for node in list(adj):
            nbrs = adj.get(node)
            if nbrs is None:
                continue
            if len(nbrs) == 0:
                del adj[node]
                changed = True
            elif len(nbrs) == 1:
                (other, key), = nbrs.items()
                loose.append(key)
                del adj[other][node]
                del adj[node]
                changed = True


def _trace_cycles(adj, xy):
    order = {}
    for node, nbrs in adj.items():
        x0, y0 = xy[node]
        order[node] = sorted(nbrs, key=lambda n: atan2(xy[n][1] - y0, xy[n][0] - x0))

    visited = set()
    cycles = []
    limit = 2 * sum(len(n) for n in adj.values()) + 2
    for start in adj:
        for nxt in order[start]:
            if (start, nxt) in visited:
                continue
            cycle = []
            a, b = start, nxt
            steps = 0
            while (a, b) not in visited:
                visited.add((a, b))
                cycle.append((a, b))
                around = order[b]
                c = around[around.index(a) - 1]
                a, b = b, c
                steps += 1
                if steps > limit:
                    raise RuntimeError('half-edge trace did not close')
            cycles.append(cycle)
    return cycles


def build_regions(segments: Sequence[Tuple[Hashable, Hashable, Hashable]],
                  positions: Dict[Hashable, Sequence[float]],
                  normal) -> Tuple[List[Region], List[Hashable]]:
    """Find the bounded regions formed by ``segments``.

    ``segments`` holds ``(node_a, node_b, key)`` triples, ``positions``
    maps nodes to 3-D points on a common plane with the given ``normal``.
    Returns the regions (largest first) and the keys of edges that do
    not bound any region (dangling edges and bridges).
    """

    loose: List[Hashable] = []
    if not segments:
        return [], loose
    origin = positions[segments[0][0]]
    frame = plane_frame(normal)
    xy = {node: project(p, origin, frame) for node, p in positions.items()}

    adj: Dict[Hashable, Dict[Hashable, Hashable]] = defaultdict(dict)
    for a, b, key in segments:
        if a == b:
            loose.append(key)
            continue
        adj[a][b] = key
        adj[b][a] = key
    adj = dict(adj)

    while True:
        _prune_dangling(adj, loose)
        if not adj:
            return [], loose
        cycles = _trace_cycles(adj, xy)
        bridges = []
        for cycle in cycles:
            halves = set(cycle)
            for a, b in cycle:
                if (b, a) in halves and (b, a) not in bridges and (a, b) not in bridges:
                    bridges.append((a, b))
        if not bridges:
            break
        for a, b in bridges:
            loose.append(adj[a][b])
            del adj[a][b]
            del adj[b][a]

    outers = []
    inners = []
    for cycle in cycles:
        nodes = [a for a, _ in cycle]
        area = signed_area_2d([xy[n] for n in nodes])
        if area > epsilon * epsilon:
            outers.append(Region(outer=nodes, area=area))
        else:
            inners.append(nodes)

    for nodes in inners:
        best = None
        for region in outers:
            if set(nodes) == set(region.outer):
                continue
            loop2d = [[xy[n] for n in region.outer]]
            classes = [classify_2d(xy[n], loop2d) for n in nodes]
            if PointClass.OUTSIDE in classes:
                continue
            if PointClass.INSIDE not in classes:
                continue
            if best is None or region.area < best.area:
                best = region
        if best is not None:
            best.holes.append(nodes)

    for region in outers:
        for hole in region.holes:
            region.area -= abs(signed_area_2d([xy[n] for n in hole]))
    outers.sort(key=lambda r: r.area, reverse=True)
    return outers, loose
