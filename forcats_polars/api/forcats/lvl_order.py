"""Change the order of the levels

See source https://github.com/tidyverse/forcats/blob/main/R/lvls.R and
https://github.com/tidyverse/forcats/blob/main/R/reorder.R
"""
from __future__ import annotations

from typing import Any, Callable, List, Sequence

import numpy as np

from datar.apis.forcats import (
    fct_relevel,
    fct_inorder,
    fct_infreq,
    fct_inseq,
    fct_rev,
    fct_shift,
    fct_shuffle,
    fct_reorder,
    fct_reorder2,
    first2,
    last2,
)

from ...errors import LengthMismatchError, UnknownLevelError
from ...factor import Factor, check_factor, code_array, level_counts
from ...utils import as_array, flatten_args, is_null, setdiff, unique
from .lvls import _lvls_reorder


@fct_relevel.register(object, backend="forcats_polars")
def _fct_relevel(
    _f: Any,
    *lvls: str | Sequence[str] | Callable,
    after: int = 0,
) -> Factor:
    """Move the given levels to a new position

    Args:
        _f: The factor
        *lvls: The levels to move, in the order they should appear.
            A single function is called with the current levels and
            should return the levels to move.
        after: Where to move the levels to. `0` to move them to the front,
            `None` to the end.

    Returns:
        The factor with levels reordered

    Raises:
        UnknownLevelError: When a level to move is not a level of `_f`
    """
    _f = check_factor(_f)
    old_levels = _f.levels
    if len(lvls) == 1 and callable(lvls[0]):
        lvls = lvls[0](old_levels)

    lvls = unique(flatten_args(lvls))
    unknown = setdiff(lvls, old_levels)
    if unknown:
        raise UnknownLevelError(f"Unknown levels in `_f`: {unknown}")

    # slots, not labels: a label repeated by lvls_revalue() moves
    # all its slots together
    moved = [
        i for lvl in lvls for i, old in enumerate(old_levels) if old == lvl
    ]
    rest = setdiff(range(len(old_levels)), moved)
    if after is None or after > len(rest):
        after = len(rest)
    elif after < 0:
        after = max(len(rest) + after + 1, 0)

    return _lvls_reorder(_f, rest[:after] + moved + rest[after:])


@fct_inorder.register(object, backend="forcats_polars")
def _fct_inorder(_f: Any) -> Factor:
    """Reorder the levels by the first appearance of each level

    Unused levels are kept at the end, in their original order.
    """
    _f = check_factor(_f)
    codes = code_array(_f)
    codes = codes[codes >= 0]
    seen, first = np.unique(codes, return_index=True)
    idx = seen[np.argsort(first)].tolist()
    return _lvls_reorder(_f, idx + setdiff(range(_f.nlevels), idx))


@fct_infreq.register(object, backend="forcats_polars")
def _fct_infreq(
    _f: Any,
    w: Sequence[float] = None,
    descending: bool = True,
    collation: Callable[[str], Any] = None,
) -> Factor:
    """Reorder the levels by the number of observations of each level

    Ties keep the original order of the levels.

    Args:
        _f: The factor
        w: Optional weights of the observations, counted instead of 1s
        descending: Most frequent levels first or last
        collation: Key function to sort the distinct values, used only
            when `_f` is not a factor yet

    Returns:
        The factor with levels reordered
    """
    _f = check_factor(_f, collation=collation)
    counts = level_counts(_f, w)
    idx = np.argsort(-counts if descending else counts, kind="stable")
    return _lvls_reorder(_f, idx)


@fct_inseq.register(object, backend="forcats_polars")
def _fct_inseq(_f: Any) -> Factor:
    """Reorder the levels by their numeric value

    Levels that are not numbers are placed after the numeric ones.
    """
    _f = check_factor(_f)
    numbers = []
    for lvl in _f.levels:
        try:
            numbers.append(float(lvl))
        except ValueError:
            numbers.append(None)

    numeric = [i for i, num in enumerate(numbers) if num is not None]
    numeric = sorted(numeric, key=numbers.__getitem__)
    return _lvls_reorder(_f, numeric + setdiff(range(_f.nlevels), numeric))


@fct_rev.register(object, backend="forcats_polars")
def _fct_rev(_f: Any) -> Factor:
    """Reverse the order of the levels"""
    _f = check_factor(_f)
    return _lvls_reorder(_f, range(_f.nlevels - 1, -1, -1))


@fct_shift.register(object, backend="forcats_polars")
def _fct_shift(_f: Any, n: int = 1) -> Factor:
    """Rotate the levels

    Args:
        _f: The factor
        n: The number of positions each level moves to. Positive numbers
            move the levels toward the end, negative toward the front.
            The levels wrap around.

    Returns:
        The factor with levels rotated
    """
    _f = check_factor(_f)
    return _lvls_reorder(_f, np.roll(np.arange(_f.nlevels), n))


@fct_shuffle.register(object, backend="forcats_polars")
def _fct_shuffle(
    _f: Any,
    rng: np.random.Generator | int = None,
) -> Factor:
    """Randomly permute the levels

    Args:
        _f: The factor
        rng: A numpy random generator, or a seed to create one

    Returns:
        The factor with levels shuffled
    """
    _f = check_factor(_f)
    rng = np.random.default_rng(rng)
    return _lvls_reorder(_f, rng.permutation(_f.nlevels))


def _summarise_levels(
    _f: Factor,
    vectors: Sequence[Any],
    fun: Callable,
    args: Sequence[Any],
    kwargs: dict,
) -> List[Any]:
    """Apply fun to the values of each level, None for unused levels"""
    vectors = [as_array(vec) for vec in vectors]
    for vec in vectors:
        if len(vec) != len(_f):
            raise LengthMismatchError(
                f"Values to reorder by must be the same length as `_f` "
                f"({len(_f)}), not {len(vec)}."
            )

    codes = code_array(_f)
    out = []
    for i in range(_f.nlevels):
        mask = codes == i
        if not mask.any():
            out.append(None)
        else:
            out.append(fun(*(vec[mask] for vec in vectors), *args, **kwargs))
    return out


def _order_summary(summary: Sequence[Any], desc: bool) -> List[int]:
    """Indexes of the levels sorted by the summary, missing ones last"""
    present = [i for i, val in enumerate(summary) if not is_null(val)]
    present = sorted(present, key=summary.__getitem__, reverse=desc)
    return present + setdiff(range(len(summary)), present)


@fct_reorder.register(object, backend="forcats_polars")
def _fct_reorder(
    _f: Any,
    _x: Sequence[Any],
    *args: Any,
    _fun: Callable = np.median,
    _desc: bool = False,
    **kwargs: Any,
) -> Factor:
    """Reorder the levels by a summary of another variable

    Args:
        _f: The factor
        _x: The values to summarise, one for each observation
        *args: and
        **kwargs: Extra arguments for `_fun`
        _fun: The function to summarise all the values of a level to a
            scalar
        _desc: Whether to sort the levels in descending order

    Returns:
        The factor with levels reordered. Levels without observations
        are placed last.
    """
    _f = check_factor(_f)
    summary = _summarise_levels(_f, [_x], _fun, args, kwargs)
    return _lvls_reorder(_f, _order_summary(summary, _desc))


@fct_reorder2.register(object, backend="forcats_polars")
def _fct_reorder2(
    _f: Any,
    _x: Sequence[Any],
    _y: Sequence[Any],
    *args: Any,
    _fun: Callable = None,
    _desc: bool = True,
    **kwargs: Any,
) -> Factor:
    """Reorder the levels by a summary of two other variables

    Args:
        _f: The factor
        _x: and
        _y: The values to summarise, one for each observation
        *args: and
        **kwargs: Extra arguments for `_fun`
        _fun: The function to summarise the `x` and `y` values of a
            level to a scalar. Defaults to `last2()`
        _desc: Whether to sort the levels in descending order

    Returns:
        The factor with levels reordered
    """
    _f = check_factor(_f)
    _fun = _last2 if _fun is None else _fun
    summary = _summarise_levels(_f, [_x, _y], _fun, args, kwargs)
    return _lvls_reorder(_f, _order_summary(summary, _desc))


@first2.register(object, backend="forcats_polars")
def _first2(x: Sequence[Any], y: Sequence[Any]) -> Any:
    """The `y` value at the smallest `x`"""
    x = as_array(x)
    y = as_array(y)
    return y[np.argsort(x, kind="stable")[0]]


@last2.register(object, backend="forcats_polars")
def _last2(x: Sequence[Any], y: Sequence[Any]) -> Any:
    """The `y` value at the largest `x`"""
    x = as_array(x)
    y = as_array(y)
    return y[np.argsort(x, kind="stable")[-1]]
