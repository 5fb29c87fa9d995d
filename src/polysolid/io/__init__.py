"""I/O utilities for polysolid."""

from .stl import import_stl, read_stl, write_stl

__all__ = ['write_stl', 'read_stl', 'import_stl']
