# -*- coding: utf-8 -*-
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("polysolid")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

from polysolid.entities import (  # noqa: E402
    ComponentInstance,
    Container,
    Definition,
    Edge,
    Entities,
    Face,
    Group,
    Model,
    TopologyError,
    Vertex,
)
from polysolid.solids import (  # noqa: E402
    InteriorPointError,
    Operator,
    intersect,
    is_solid,
    subtract,
    trim,
    union,
    within,
)
