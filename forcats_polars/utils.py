"""Utilities for forcats_polars"""
from __future__ import annotations

from typing import Any, Iterable, List, Sequence

import numpy as np
import polars as pl
from datar.core.options import get_option
from datar.core.utils import logger
from datar.apis.base import (
    duplicated as _duplicated,
    intersect as _intersect,
    setdiff as _setdiff,
    union as _union,
    unique as _unique,
)
from datar_numpy.utils import is_scalar  # noqa: F401
from datar_numpy.api import sets as _  # noqa: F401


def inform(msg: str, *args: Any) -> None:
    """Log an info message if option `fct_inform` is on"""
    if get_option("fct_inform"):
        logger.info(msg, *args)


def is_null(x: Any) -> bool | Sequence[bool]:
    """Is x a null value?

    Args:
        x: The object to check

    Returns:
        True if x is a null value, False otherwise
    """
    if isinstance(x, float):
        return np.isnan(x)

    if is_scalar(x):
        return x is None

    return [is_null(i) for i in x]


# The set operations of datar-numpy, returning lists.
# Empty inputs are short-cut, numpy cannot tell their dtype.
def unique(x: Iterable) -> List:
    x = list(x)
    if not x:
        return []
    return _unique(x, __ast_fallback="normal", __backend="numpy").tolist()


def setdiff(x: Iterable, y: Iterable) -> List:
    x, y = list(x), list(y)
    if not x or not y:
        return unique(x)
    return _setdiff(x, y, __ast_fallback="normal", __backend="numpy").tolist()


def union(x: Iterable, y: Iterable) -> List:
    x, y = list(x), list(y)
    if not x or not y:
        return unique(x + y)
    return _union(x, y, __ast_fallback="normal", __backend="numpy").tolist()


def intersect(x: Iterable, y: Iterable) -> List:
    x, y = list(x), list(y)
    if not x or not y:
        return []
    return _intersect(
        x,
        y,
        __ast_fallback="normal",
        __backend="numpy",
    ).tolist()


def duplicated(x: Iterable) -> List:
    """Elements that appear more than once in x, in order"""
    x = list(x)
    dups = _duplicated(x, __ast_fallback="normal", __backend="numpy")
    return unique(elt for elt, dup in zip(x, dups) if dup)


def flatten_args(args: Iterable) -> List:
    """Flatten the arguments into a list of scalars

    `fct_relevel(f, "a", ["b", "c"])` and `fct_relevel(f, "a", "b", "c")`
    mean the same thing.
    """
    out = []
    for arg in args:
        if is_scalar(arg):
            out.append(arg)
        else:
            out.extend(flatten_args(arg))
    return out


def as_array(x: Any) -> np.ndarray:
    """Turn a sequence or a polars Series into a 1-d numpy array"""
    if isinstance(x, pl.Series):
        return x.to_numpy()
    if is_scalar(x):
        return np.array([x])
    return np.asarray(x)
