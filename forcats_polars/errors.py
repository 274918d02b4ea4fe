"""Errors raised by the factor verbs

All of them are `ValueError`s, so callers that only care about bad input
can keep catching that. The `kind` attribute tells them apart.
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Kinds of failures a factor operation can report"""

    DuplicateLevel = "duplicate_level"
    UnknownLevel = "unknown_level"
    LengthMismatch = "length_mismatch"
    DuplicateMapping = "duplicate_mapping"
    AmbiguousGroup = "ambiguous_group"
    ConflictingArguments = "conflicting_arguments"


class FactorError(ValueError):
    """Base class of the factor errors"""

    kind: ErrorKind = None


class DuplicateLevelError(FactorError):
    """Levels repeated in a level set, or added twice"""

    kind = ErrorKind.DuplicateLevel


class UnknownLevelError(FactorError):
    """A label that is not a level of the factor"""

    kind = ErrorKind.UnknownLevel


class LengthMismatchError(FactorError):
    """Auxiliary values not aligned with the levels or the observations"""

    kind = ErrorKind.LengthMismatch


class DuplicateMappingError(FactorError):
    """An old level recoded more than once"""

    kind = ErrorKind.DuplicateMapping


class AmbiguousGroupError(FactorError):
    """An old level claimed by more than one group"""

    kind = ErrorKind.AmbiguousGroup


class ConflictingArgumentsError(FactorError):
    """Mutually exclusive arguments given together, or none given"""

    kind = ErrorKind.ConflictingArguments
