"""Exceptions raised by the table generator."""
from __future__ import annotations


class TableGenError(RuntimeError):
    """Base class for every fatal generator error."""


class ExtractionError(TableGenError):
    """Raised when the instruction database region cannot be parsed."""


class UnknownDependencyError(TableGenError):
    """Raised when a task depends on a task that was never registered."""


class CyclicDependencyError(TableGenError):
    """Raised when the remaining tasks can never become ready."""


class DuplicateTaskError(TableGenError):
    """Raised when two tasks are registered under the same name."""


class RegionNotFoundError(TableGenError):
    """Raised when an injection marker is missing or duplicated."""


class IncompleteRunError(TableGenError):
    """Raised when a record still carries an unresolved index after the run."""


class IsaDescriptionError(TableGenError):
    """Raised when the ISA description file is malformed."""
