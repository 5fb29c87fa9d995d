"""STL import and export for polysolid containers."""

from __future__ import annotations

import re
import struct
from typing import Iterable, List

from loguru import logger

from polysolid.mesh import Triangle, mesh_view, triangles_from_mesh

_HEADER_SIZE = 80
_STRUCT_TRIANGLE = struct.Struct('<12fH')


def write_stl(container, path_or_file, *, binary: bool = True, name: str = 'polysolid') -> None:
    """Write the faces of ``container`` (placed in its parent frame) to STL.

    ``path_or_file`` can be a filesystem path or an open binary/text stream.
    """

    triangles = list(triangles_from_mesh(mesh_view(container)))
    logger.debug("writing {} triangles", len(triangles))

    if binary:
        _write_binary(triangles, path_or_file, name)
    else:
        _write_ascii(triangles, path_or_file, name)


def _write_binary(triangles: List[Triangle], path_or_file, name: str) -> None:
    close_when_done = False
    if hasattr(path_or_file, 'write'):
        stream = path_or_file
    else:
        stream = open(path_or_file, 'wb')
        close_when_done = True

    try:
        header = (name[:_HEADER_SIZE]).encode('ascii', errors='replace')
        header = header.ljust(_HEADER_SIZE, b' ')
        stream.write(header)
        stream.write(struct.pack('<I', len(triangles)))

        for tri in triangles:
            data = _STRUCT_TRIANGLE.pack(
                *tri.normal,
                *tri.v0,
                *tri.v1,
                *tri.v2,
                0,
            )
            stream.write(data)
    finally:
        if close_when_done:
            stream.close()


def _write_ascii(triangles: Iterable[Triangle], path_or_file, name: str) -> None:
    close_when_done = False
    if hasattr(path_or_file, 'write'):
        stream = path_or_file
    else:
        stream = open(path_or_file, 'w', encoding='ascii')
        close_when_done = True

    try:
        print(f"solid {name}", file=stream)
        for tri in triangles:
            print(f"  facet normal {tri.normal[0]:.6e} {tri.normal[1]:.6e} {tri.normal[2]:.6e}", file=stream)
            print("    outer loop", file=stream)
            for v in (tri.v0, tri.v1, tri.v2):
                print(f"      vertex {v[0]:.6e} {v[1]:.6e} {v[2]:.6e}", file=stream)
            print("    endloop", file=stream)
            print("  endfacet", file=stream)
        print(f"endsolid {name}", file=stream)
    finally:
        if close_when_done:
            stream.close()


# ---------------------------------------------------------------------------
# STL Import
# ---------------------------------------------------------------------------

_FLOAT = r'([eE\d.+-]+)'
_FACET = re.compile(
    r'facet\s+normal\s+' + r'\s+'.join([_FLOAT] * 3) + r'\s+'
    r'outer\s+loop\s+'
    + r'\s+'.join([r'vertex\s+' + r'\s+'.join([_FLOAT] * 3)] * 3) + r'\s+'
    r'endloop\s+endfacet',
    re.IGNORECASE
)


def _is_binary_stl(data: bytes) -> bool:
    """Binary STL has an 80 byte header, a count, then 50 bytes per triangle."""
    if len(data) < 84:
        return False
    tri_count = struct.unpack('<I', data[80:84])[0]
    if len(data) == 84 + tri_count * 50:
        rest = data[84:min(200, len(data))]
        return not (b'facet' in rest or b'vertex' in rest)
    return not data[:80].decode('ascii', errors='ignore').strip().lower().startswith('solid')


def _parse_binary_stl(data: bytes) -> List[Triangle]:
    tri_count = struct.unpack('<I', data[80:84])[0]
    triangles = []
    offset = 84
    for _ in range(tri_count):
        if offset + 50 > len(data):
            raise ValueError('truncated binary STL data')
        values = _STRUCT_TRIANGLE.unpack(data[offset:offset + 50])
        triangles.append(Triangle(normal=tuple(values[0:3]), v0=tuple(values[3:6]),
                                  v1=tuple(values[6:9]), v2=tuple(values[9:12])))
        offset += 50
    return triangles


def _parse_ascii_stl(text: str) -> List[Triangle]:
    triangles = []
    for match in _FACET.finditer(text):
        v = [float(g) for g in match.groups()]
        triangles.append(Triangle(normal=tuple(v[0:3]), v0=tuple(v[3:6]),
                                  v1=tuple(v[6:9]), v2=tuple(v[9:12])))
    return triangles


def read_stl(path_or_file) -> List[Triangle]:
    """Read triangles from a binary or ASCII STL file or stream."""

    if hasattr(path_or_file, 'read'):
        data = path_or_file.read()
    else:
        with open(path_or_file, 'rb') as fh:
            data = fh.read()
    if isinstance(data, str):
        return _parse_ascii_stl(data)
    if _is_binary_stl(data):
        return _parse_binary_stl(data)
    return _parse_ascii_stl(data.decode('ascii', errors='replace'))


def import_stl(entities, path_or_file, name: str = ''):
    """Read an STL file into a new group in ``entities``.

    Each triangle becomes a face; coincident vertices weld, so a closed
    STL mesh yields a solid group.
    """

    group = entities.add_group(name)
    skipped = 0
    for tri in read_stl(path_or_file):
        try:
            group.entities.add_face([list(tri.v0), list(tri.v1), list(tri.v2)])
        except ValueError:
            skipped += 1
    if skipped:
        logger.warning("skipped {} degenerate STL triangles", skipped)
    return group


__all__ = ['write_stl', 'read_stl', 'import_stl']
