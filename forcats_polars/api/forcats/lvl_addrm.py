"""Add or remove levels

See source https://github.com/tidyverse/forcats/blob/main/R/expand.R,
https://github.com/tidyverse/forcats/blob/main/R/drop.R,
https://github.com/tidyverse/forcats/blob/main/R/na.R and
https://github.com/tidyverse/forcats/blob/main/R/unify.R
"""
from __future__ import annotations

from typing import Any, Iterable, List, Sequence

from pipda import register_func
from datar.apis.forcats import (
    fct_expand,
    fct_explicit_na,
    fct_drop,
    fct_unify,
)
from datar.core.options import get_option
from datar.core.utils import NotImplementedByCurrentBackendError

from ...errors import DuplicateLevelError, UnknownLevelError
from ...factor import Factor, check_factor, level_counts, remap
from ...utils import duplicated, flatten_args, intersect, setdiff
from .lvls import _lvls_expand, _lvls_union, merge_levels


@fct_expand.register(object, backend="forcats_polars")
def _fct_expand(_f: Any, *additional_levels: str | Iterable[str]) -> Factor:
    """Add levels to the end of the levels

    Args:
        _f: The factor
        *additional_levels: The levels to add

    Returns:
        The factor with the levels added

    Raises:
        DuplicateLevelError: When a level to add is already a level,
            or is given more than once
    """
    _f = check_factor(_f)
    new_levels = [str(lvl) for lvl in flatten_args(additional_levels)]
    dups = duplicated(new_levels)
    if dups:
        raise DuplicateLevelError(f"Levels given more than once: {dups}")

    existing = intersect(new_levels, _f.levels)
    if existing:
        raise DuplicateLevelError(f"Levels already exist: {existing}")

    # repeated labels from lvls_revalue() stay as they are
    return Factor.from_codes(
        _f.codes,
        _f.levels + new_levels,
        check_unique=False,
    )


@fct_explicit_na.register(object, backend="forcats_polars")
def _fct_explicit_na(_f: Any, na_level: str = None) -> Factor:
    """Turn missing values into a level

    Args:
        _f: The factor
        na_level: The label of the level for the missing values.
            Defaults to option `fct_na_level`. Added last if it is not
            a level already.

    Returns:
        The factor without missing values
    """
    _f = check_factor(_f)
    na_level = get_option("fct_na_level") if na_level is None else na_level
    lvls = _f.levels
    if na_level not in lvls:
        lvls.append(na_level)

    codes = _f.codes.fill_null(lvls.index(na_level))
    return Factor.from_codes(codes, lvls, check_unique=False)


@register_func(pipeable=True, dispatchable=True)
def fct_na_level_to_value(_f, extra_levels=None) -> Any:
    """Turn levels into missing values, the inverse of `fct_explicit_na()`

    Args:
        _f: A factor
        extra_levels: The levels whose observations become missing values

    Returns:
        The factor with the levels removed
    """
    raise NotImplementedByCurrentBackendError("fct_na_level_to_value", _f)


@fct_na_level_to_value.register(object, backend="forcats_polars")
def _fct_na_level_to_value(
    _f: Any,
    extra_levels: str | Iterable[str] = None,
) -> Factor:
    """Turn levels into missing values, the inverse of `fct_explicit_na()`

    Args:
        _f: The factor
        extra_levels: The levels whose observations become missing values.
            Defaults to option `fct_na_level`. The levels are removed.

    Returns:
        The factor
    """
    _f = check_factor(_f)
    if extra_levels is None:
        extra_levels = [get_option("fct_na_level")]
    to_na = set(flatten_args([extra_levels]))
    return merge_levels(
        _f,
        [None if lvl in to_na else lvl for lvl in _f.levels],
    )


@fct_drop.register(object, backend="forcats_polars")
def _fct_drop(_f: Any, only: str | Iterable[str] = None) -> Factor:
    """Drop levels without observations

    Args:
        _f: The factor
        only: Only drop these levels, if they are unused.
            Used levels named here are kept.

    Returns:
        The factor without the unused levels
    """
    _f = check_factor(_f)
    counts = level_counts(_f)
    lvls = _f.levels
    droppable = None if only is None else set(flatten_args([only]))
    # by slot, a repeated label can be used in one slot and not another
    kept = [
        i
        for i, count in enumerate(counts)
        if count > 0 or (droppable is not None and lvls[i] not in droppable)
    ]
    old_to_new = [None] * len(lvls)
    for new, old in enumerate(kept):
        old_to_new[old] = new
    return remap(_f, old_to_new, [lvls[i] for i in kept], check_unique=False)


@fct_unify.register(object, backend="forcats_polars")
def _fct_unify(
    fs: Sequence[Any],
    levels: Sequence[str] = None,
) -> List[Factor]:
    """Give a list of factors the same levels

    Args:
        fs: The factors
        levels: The common levels. Defaults to the union of the levels of
            all the factors, levels of the first factor first.

    Returns:
        The factors with the common levels, values unchanged

    Raises:
        UnknownLevelError: When `levels` misses a level of the factors
    """
    fs = [check_factor(f) for f in fs]
    all_levels = _lvls_union(fs)
    if levels is None:
        levels = all_levels
    else:
        levels = list(levels)
        missing = setdiff(all_levels, levels)
        if missing:
            raise UnknownLevelError(
                f"`levels` must include all levels of the factors. "
                f"Missing: {missing}"
            )

    return [_lvls_expand(f, levels) for f in fs]
