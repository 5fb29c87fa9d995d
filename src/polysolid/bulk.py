"""Solid operations on several containers at once.

Each mutating function applies the pairwise operation from
:mod:`polysolid.solids` one modifier at a time and stops at the first
one that does not report success.  Input lists are never modified.
"""

from __future__ import annotations

from typing import Optional, Sequence

from loguru import logger

from polysolid import solids


def solid(containers: Sequence) -> bool:
    """Are all ``containers`` solid?"""
    return all(solids.is_solid(c) for c in containers)


def within(point, containers: Sequence, on_boundary: bool = True,
           verify_solid: bool = True, odd_even: bool = False) -> Optional[bool]:
    """Is ``point`` inside any of ``containers``?

    With ``odd_even`` a point inside an even number of containers counts
    as outside, as if the containers had been combined by exclusion.
    """

    if verify_solid and not solid(containers):
        return None
    hits = [bool(solids.within(point, c, on_boundary, False)) for c in containers]
    if odd_even:
        return sum(hits) % 2 == 1
    return any(hits)


def _as_list(targets):
    if isinstance(targets, (list, tuple)):
        return list(targets)
    return [targets]


def union(target, modifiers: Sequence) -> Optional[bool]:
    """Unite every modifier into ``target``."""
    for modifier in list(modifiers):
        if not solids.union(target, modifier):
            logger.warning("bulk union stopped at {!r}", modifier)
            return None
    return True


def subtract(targets, modifiers: Sequence, keep: bool = False) -> Optional[bool]:
    """Subtract every modifier from every target.

    Modifiers are kept until the last target has been cut, and removed
    afterwards unless ``keep`` is set.
    """

    targets = _as_list(targets)
    for i, target in enumerate(targets):
        keep_now = keep or i < len(targets) - 1
        for modifier in list(modifiers):
            if not solids.subtract(target, modifier, keep_now):
                logger.warning("bulk subtract stopped at {!r}", modifier)
                return None
    return True


def trim(targets, modifiers: Sequence) -> Optional[bool]:
    """Subtract every modifier from every target, keeping the modifiers."""
    return subtract(targets, modifiers, True)


def intersect(target, modifiers: Sequence) -> Optional[bool]:
    """Intersect ``target`` with each modifier in turn."""
    for modifier in list(modifiers):
        if not solids.intersect(target, modifier):
            logger.warning("bulk intersect stopped at {!r}", modifier)
            return None
    return True


__all__ = ['solid', 'within', 'union', 'subtract', 'trim', 'intersect']
