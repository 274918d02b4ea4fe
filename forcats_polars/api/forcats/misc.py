"""Summaries of factors

See source https://github.com/tidyverse/forcats/blob/main/R/count.R,
https://github.com/tidyverse/forcats/blob/main/R/fct_unique.R and
https://github.com/tidyverse/forcats/blob/main/R/match.R
"""
from __future__ import annotations

from typing import Any, Iterable

import numpy as np
import polars as pl

from datar.apis.forcats import fct_count, fct_match, fct_unique

from ...errors import UnknownLevelError
from ...factor import Factor, check_factor, code_array, level_counts
from ...utils import flatten_args, setdiff


@fct_count.register(object, backend="forcats_polars")
def _fct_count(
    _f: Any,
    sort: bool = False,
    prop: bool = False,
) -> pl.DataFrame:
    """Count the observations of each level

    Args:
        _f: The factor
        sort: Whether to sort the rows by count, largest first
        prop: Whether to add a column `p` of the proportions

    Returns:
        A data frame with the levels in column `f` and the counts in
        column `n`, one row per level in level order, including unused
        levels. If there are missing values, a row with `f` null is
        added last.
    """
    _f = check_factor(_f)
    labels = _f.levels
    counts = level_counts(_f).tolist()
    n_missing = _f.codes.null_count()
    if n_missing > 0:
        labels.append(None)
        counts.append(n_missing)

    df = pl.DataFrame(
        {
            "f": pl.Series(values=labels, dtype=pl.String),
            "n": pl.Series(values=counts, dtype=pl.Int64),
        }
    )
    if sort:
        df = df.sort("n", descending=True, maintain_order=True)
    if prop:
        df = df.with_columns((pl.col("n") / pl.col("n").sum()).alias("p"))
    return df


@fct_unique.register(object, backend="forcats_polars")
def _fct_unique(_f: Any) -> Factor:
    """The levels that have observations, in level order

    Returns:
        A factor with one observation for each used level, with the
        levels of `_f`
    """
    _f = check_factor(_f)
    codes = code_array(_f)
    used = np.unique(codes[codes >= 0])
    return Factor.from_codes(
        pl.Series(values=used.tolist(), dtype=pl.UInt32),
        _f.levels,
        check_unique=False,
    )


@fct_match.register(object, backend="forcats_polars")
def _fct_match(_f: Any, lvls: str | Iterable[str]) -> pl.Series:
    """Test which observations take one of the levels

    Args:
        _f: The factor
        lvls: The levels to look for. `None` matches the missing values.

    Returns:
        A boolean Series, one element for each observation

    Raises:
        UnknownLevelError: When a level is not a level of `_f`
    """
    _f = check_factor(_f)
    lvls = flatten_args([lvls])
    unknown = setdiff([lvl for lvl in lvls if lvl is not None], _f.levels)
    if unknown:
        raise UnknownLevelError(f"Levels not present in `_f`: {unknown}")

    codes = code_array(_f)
    idx = [i for i, lvl in enumerate(_f.levels) if lvl in set(lvls)]
    matched = np.isin(codes, idx)
    if None in lvls:
        matched |= codes < 0
    return pl.Series(values=matched, dtype=pl.Boolean)
