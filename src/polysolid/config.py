"""Runtime settings and logging setup for polysolid.

Settings come from a small YAML mapping, e.g.::

    corner_bias: 0.95
    weld_repair: true
    log_level: DEBUG

``load_settings()`` reads the file named by its argument, or by the
``POLYSOLID_CONFIG`` environment variable, and falls back to defaults.
"""

from __future__ import annotations

import os
import sys
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional, Union

import yaml
from loguru import logger

CONFIG_ENV = "POLYSOLID_CONFIG"
LOG_FORMAT = "<level>{level: <8}</level> | {message}"


@dataclass
class SolidSettings:
    """Tunables for the boolean engine."""

    corner_bias: float = 0.95
    weld_repair: bool = True
    log_level: str = "WARNING"

    def __post_init__(self):
        if not 0.5 < self.corner_bias < 1.0:
            raise ValueError(f'bad corner_bias in settings: {self.corner_bias}')
        self.log_level = str(self.log_level).upper()

    def as_dict(self) -> dict:
        return asdict(self)


_active = SolidSettings()


def load_settings(path: Optional[Union[str, Path]] = None) -> SolidSettings:
    """Read settings from YAML, or return defaults when no file is given."""

    if path is None:
        path = os.environ.get(CONFIG_ENV)
    if not path:
        return SolidSettings()
    path = Path(path)
    with path.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    if not isinstance(data, dict):
        raise ValueError(f'bad settings file {path}: expected a mapping')
    known = {f.name for f in fields(SolidSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f'unknown settings in {path}: {", ".join(unknown)}')
    return SolidSettings(**data)


def get_settings() -> SolidSettings:
    return _active


def set_settings(settings: SolidSettings) -> SolidSettings:
    """Install ``settings`` as the active settings and return the old ones."""
    global _active
    old = _active
    _active = settings
    return old


def configure_logging(level: Optional[str] = None) -> None:
    """Replace loguru's default sink with a single stderr sink."""

    if level is None:
        level = _active.log_level
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level.upper())


__all__ = [
    'CONFIG_ENV',
    'SolidSettings',
    'load_settings',
    'get_settings',
    'set_settings',
    'configure_logging',
]
