"""Utility helpers for the lint engine."""

from .code import iter_dump_files
from .dump import load_unit, unit_from_mapping
from .fileio import read_yaml_file

__all__ = [
    "read_yaml_file",
    "load_unit",
    "unit_from_mapping",
    "iter_dump_files",
]
