"""A polars backend of the forcats APIs of datar"""
from .version import __version__
from .errors import (
    ErrorKind,
    FactorError,
    DuplicateLevelError,
    UnknownLevelError,
    LengthMismatchError,
    DuplicateMappingError,
    AmbiguousGroupError,
    ConflictingArgumentsError,
)
from .factor import Factor
from . import plugin
