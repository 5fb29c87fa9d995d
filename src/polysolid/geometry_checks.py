"""Validation helpers for polysolid containers."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import List

from polysolid.geom import epsilon


@dataclass
class CheckResult:
    ok: bool
    warnings: List[str]

    def __bool__(self) -> bool:
        return self.ok


def container_watertight(container) -> CheckResult:
    """Check that every edge of ``container`` binds exactly two faces."""

    counts = Counter(len(e.faces) for e in container.entities.edges)
    warnings: List[str] = []
    ok = True
    if counts.get(0):
        ok = False
        warnings.append(f'{counts[0]} loose edges detected')
    if counts.get(1):
        ok = False
        warnings.append(f'{counts[1]} boundary edges detected')
    invalid = sum(n for faces, n in counts.items() if faces > 2)
    if invalid:
        ok = False
        warnings.append(f'{invalid} edges with multiplicity >2')
    return CheckResult(ok, warnings)


def container_oriented(container) -> CheckResult:
    """Check that neighbouring faces use their shared edges in opposite
    directions, and that the enclosed volume is positive."""

    inconsistent = 0
    for e in container.entities.edges:
        if len(e.faces) != 2:
            continue
        senses = [_edge_sense(f, e) for f in e.faces]
        if None not in senses and senses[0] == senses[1]:
            inconsistent += 1

    warnings: List[str] = []
    ok = True
    if inconsistent:
        ok = False
        warnings.append(f'{inconsistent} edges used in the same direction by both faces')
    volume = container.volume
    if volume < -epsilon:
        ok = False
        warnings.append(f'faces point inwards (volume {volume:.6g})')
    return CheckResult(ok, warnings)


def _edge_sense(face, edge):
    for loop in face.loops:
        n = len(loop)
        for i in range(n):
            a = loop[i]
            b = loop[(i + 1) % n]
            if a is edge.start and b is edge.end:
                return True
            if a is edge.end and b is edge.start:
                return False
    return None


__all__ = [
    'CheckResult',
    'container_watertight',
    'container_oriented',
]
