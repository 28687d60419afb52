"""Instruction table generator for INST(...) databases."""

from .core import IdEnum, NameTable, TableGen, Task
from .errors import (
    CyclicDependencyError,
    DuplicateTaskError,
    ExtractionError,
    IncompleteRunError,
    IsaDescriptionError,
    RegionNotFoundError,
    TableGenError,
    UnknownDependencyError,
)
from .indexed import IndexedArray, IndexedString
from .records import InstDatabase, InstRecord

__all__ = [
    "CyclicDependencyError",
    "DuplicateTaskError",
    "ExtractionError",
    "IdEnum",
    "IncompleteRunError",
    "IndexedArray",
    "IndexedString",
    "InstDatabase",
    "InstRecord",
    "IsaDescriptionError",
    "NameTable",
    "RegionNotFoundError",
    "TableGen",
    "TableGenError",
    "Task",
    "UnknownDependencyError",
]
