"""Lower-level functions to manipulate the levels

These keep the values of the observations unless stated otherwise,
only the level set changes.

See source https://github.com/tidyverse/forcats/blob/main/R/lvls.R
"""
from __future__ import annotations

from typing import Any, List, Sequence

import numpy as np
from datar.apis.forcats import (
    lvls_expand,
    lvls_reorder,
    lvls_revalue,
    lvls_union,
)

from ...errors import LengthMismatchError, UnknownLevelError
from ...factor import Factor, check_factor, remap
from ...utils import setdiff, union, unique


@lvls_reorder.register(object, backend="forcats_polars")
def _lvls_reorder(_f: Any, idx: Sequence[int]) -> Factor:
    """Reorder the levels by an index permutation

    Args:
        _f: The factor
        idx: The indexes of the current levels, in the new order

    Returns:
        The factor with levels `[levels[i] for i in idx]`
    """
    _f = check_factor(_f)
    idx = [int(i) for i in idx]
    if sorted(idx) != list(range(_f.nlevels)):
        raise LengthMismatchError(
            "`idx` must contain each index of the levels exactly once."
        )

    old_to_new = np.empty(len(idx), dtype=int)
    old_to_new[idx] = np.arange(len(idx))
    lvls = _f.levels
    return remap(
        _f,
        old_to_new.tolist(),
        [lvls[i] for i in idx],
        check_unique=False,
    )


@lvls_revalue.register(object, backend="forcats_polars")
def _lvls_revalue(_f: Any, new_levels: Sequence[str]) -> Factor:
    """Rename the levels by position

    Labels are allowed to repeat, the levels are kept as distinct slots.
    Use `fct_recode()` or `fct_relabel()` to merge levels sharing a label.

    Args:
        _f: The factor
        new_levels: The new labels, one for each level

    Returns:
        The relabelled factor, with the same codes
    """
    _f = check_factor(_f)
    new_levels = list(new_levels)
    if len(new_levels) != _f.nlevels:
        raise LengthMismatchError(
            f"`new_levels` must be the same length as `levels(_f)`: "
            f"expected {_f.nlevels} new levels, got {len(new_levels)}."
        )
    return Factor.from_codes(_f.codes, new_levels, check_unique=False)


@lvls_expand.register(object, backend="forcats_polars")
def _lvls_expand(_f: Any, new_levels: Sequence[str]) -> Factor:
    """Replace the levels by a superset of them, in the order given

    Args:
        _f: The factor
        new_levels: The new levels, must contain all the current ones

    Returns:
        The factor with the new level set
    """
    _f = check_factor(_f)
    new_levels = list(new_levels)
    missing = setdiff(_f.levels, new_levels)
    if missing:
        raise UnknownLevelError(
            f"Must include all existing levels. Missing: {missing}"
        )

    index = {lvl: i for i, lvl in reversed(list(enumerate(new_levels)))}
    return remap(_f, [index[lvl] for lvl in _f.levels], new_levels)


@lvls_union.register(object, backend="forcats_polars")
def _lvls_union(fs: Sequence[Any]) -> List[str]:
    """Union of the levels of the factors

    The levels of the first factor come first, then the new ones of the
    second, and so on.
    """
    out = []
    for f in fs:
        out = union(out, check_factor(f).levels)
    return out


def merge_levels(_f: Factor, new_labels: Sequence[str | None]) -> Factor:
    """Relabel the levels, merging the ones sharing a label

    Merged levels take the position of the first of them. A `None` label
    turns the observations of the level into missing values.
    """
    new_levels = unique(lbl for lbl in new_labels if lbl is not None)
    index = {lvl: i for i, lvl in enumerate(new_levels)}
    return remap(
        _f,
        [None if lbl is None else index[lbl] for lbl in new_labels],
        new_levels,
    )
