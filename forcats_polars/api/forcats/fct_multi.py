"""Verbs working on several factors

See source https://github.com/tidyverse/forcats/blob/main/R/fct_c.R and
https://github.com/tidyverse/forcats/blob/main/R/cross.R
"""
from __future__ import annotations

from itertools import product
from typing import Any

import numpy as np
import polars as pl

from datar.apis.forcats import fct_c, fct_cross

from ...errors import LengthMismatchError
from ...factor import Factor, check_factor, code_array
from ...utils import unique
from .lvls import _lvls_expand, _lvls_union


@fct_c.register(object, backend="forcats_polars")
def _fct_c(*fs: Any) -> Factor:
    """Concatenate factors, combining the levels

    Args:
        *fs: The factors, or values to be encoded as factors

    Returns:
        The factor with the values of all factors, and the levels of the
        first factor followed by the new levels of the next ones
    """
    if not fs:
        return Factor()

    fs = [check_factor(f) for f in fs]
    levels = _lvls_union(fs)
    codes = pl.concat([_lvls_expand(f, levels).codes for f in fs])
    return Factor.from_codes(codes, levels)


@fct_cross.register(object, backend="forcats_polars")
def _fct_cross(
    *fs: Any,
    sep: str = ":",
    keep_empty: bool = False,
) -> Factor:
    """Combine the levels of factors of the same length

    Args:
        *fs: The factors
        sep: The separator between the labels
        keep_empty: Whether to keep the combinations without observations

    Returns:
        The factor of combined labels. A missing value in any factor
        gives a missing value. The levels follow the order of the levels
        of the factors, the first factor varying slowest.
    """
    if not fs:
        return Factor()

    fs = [check_factor(f) for f in fs]
    lengths = unique([len(f) for f in fs])
    if len(lengths) > 1:
        raise LengthMismatchError(
            f"Factors must have the same length, got lengths {lengths}."
        )

    codes = np.column_stack([code_array(f) for f in fs])
    if keep_empty:
        combos = list(product(*(range(f.nlevels) for f in fs)))
    else:
        combos = sorted(
            {tuple(row) for row in codes.tolist() if min(row) >= 0}
        )

    def _label(combo):
        return sep.join(f.levels[code] for f, code in zip(fs, combo))

    values = [
        None if min(row) < 0 else _label(row) for row in codes.tolist()
    ]
    return Factor(values, levels=unique([_label(combo) for combo in combos]))
