"""Factor constructors and accessors from R-base"""
from __future__ import annotations

from typing import Any, Callable, List, Sequence

from datar.apis.base import (
    as_factor,
    droplevels,
    factor,
    is_factor,
    levels,
    nlevels,
)

from ...factor import Factor, check_factor
from ...utils import unique


@factor.register(object, backend="forcats_polars")
def _factor(
    x: Any = None,
    *,
    levels: Sequence[str] = None,
    collation: Callable[[str], Any] = None,
) -> Factor:
    """Encode values as a factor

    Args:
        x: The values
        levels: The levels, in order. Values not in it become missing.
            Defaults to the distinct values, sorted.
        collation: The key function to sort the distinct values with.
            Codepoint order if not given.

    Returns:
        The factor
    """
    if x is None:
        x = ()
    return Factor(x, levels=levels, collation=collation)


@as_factor.register(object, backend="forcats_polars")
def _as_factor(x: Any) -> Factor:
    """Turn x into a factor, levels in order of first appearance

    A factor is returned as is.
    """
    if isinstance(x, Factor):
        return x

    f = Factor(x)
    return Factor(f, levels=unique(val for val in f if val is not None))


@is_factor.register(object, backend="forcats_polars")
def _is_factor(x: Any) -> bool:
    return isinstance(x, Factor)


@levels.register(object, backend="forcats_polars")
def _levels(x: Any) -> List[str]:
    return check_factor(x).levels


@nlevels.register(object, backend="forcats_polars")
def _nlevels(x: Any) -> int:
    return check_factor(x).nlevels


@droplevels.register(object, backend="forcats_polars")
def _droplevels(x: Any) -> Factor:
    from ..forcats.lvl_addrm import _fct_drop

    return _fct_drop(x)
