"""Exception hierarchy for rtfdoc.

Every error raised while building or serialising a document derives from
:class:`RTFError`, itself a :class:`ValueError` so callers that only care
about "bad input" can catch the builtin.
"""

from __future__ import annotations


class RTFError(ValueError):
    """Base class for all rtfdoc errors."""


class SchemaError(RTFError):
    """Construction input has the wrong shape, type or keyword."""


class StructuralError(RTFError):
    """An operation would break a node type's structural rules."""


class FormatError(RTFError):
    """A value cannot be parsed into the required unit or format."""
