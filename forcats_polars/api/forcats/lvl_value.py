"""Change the values of the levels

See source https://github.com/tidyverse/forcats/blob/main/R/recode.R,
https://github.com/tidyverse/forcats/blob/main/R/collapse.R,
https://github.com/tidyverse/forcats/blob/main/R/lump.R and
https://github.com/tidyverse/forcats/blob/main/R/other.R
"""
from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Sequence

import numpy as np

from datar.apis.forcats import (
    fct_anon,
    fct_recode,
    fct_collapse,
    fct_relabel,
    fct_lump,
    fct_lump_n,
    fct_lump_min,
    fct_lump_prop,
    fct_lump_lowfreq,
    fct_other,
)
from datar.core.options import get_option

from ...errors import (
    AmbiguousGroupError,
    ConflictingArgumentsError,
    DuplicateMappingError,
)
from ...factor import Factor, check_factor, level_counts
from ...utils import duplicated, flatten_args, inform, setdiff
from .lvl_order import _fct_relevel
from .lvls import _lvls_reorder, _lvls_revalue, merge_levels


@fct_anon.register(object, backend="forcats_polars")
def _fct_anon(
    _f: Any,
    prefix: str = "",
    rng: np.random.Generator | int = None,
) -> Factor:
    """Anonymise the levels

    Each level gets a label made of `prefix` and a zero-padded number,
    numbers assigned to the levels at random. The levels of the result are
    ordered by the new labels, so neither the labels nor their positions
    tell the original levels.

    Args:
        _f: The factor
        prefix: The prefix of the new labels
        rng: A numpy random generator, or a seed to create one

    Returns:
        The anonymised factor
    """
    _f = check_factor(_f)
    nlvls = _f.nlevels
    width = len(str(nlvls))
    labels = [f"{prefix}{i:0{width}d}" for i in range(1, nlvls + 1)]

    rng = np.random.default_rng(rng)
    perm = rng.permutation(nlvls)
    out = _lvls_revalue(_f, [labels[i] for i in perm])
    return _lvls_reorder(out, np.argsort(perm))


def _recode_pairs(args: Sequence[Any], kwargs: Mapping[str, str]) -> list:
    pairs = []
    for arg in args:
        if isinstance(arg, Mapping):
            pairs.extend(arg.items())
        else:
            pairs.extend(arg)
    pairs.extend(kwargs.items())

    for new, old in pairs:
        if not isinstance(old, str):
            raise TypeError(
                f"Old level to recode must be a string, got {old!r}. "
                "Use `fct_collapse()` to recode several levels at once."
            )
    return pairs


@fct_recode.register(object, backend="forcats_polars")
def _fct_recode(_f: Any, *args: Any, **kwargs: str) -> Factor:
    """Change the labels of the levels by hand

    Examples:
        >>> fct_recode(f, fruit="apple", veg="carrot")
        >>> fct_recode(f, [("fruit", "apple"), ("fruit", "banana")])
        >>> fct_recode(f, {"Total": "total", None: "unknown"})

    Args:
        _f: The factor
        *args: Mappings of new labels to old labels, or sequences of
            `(new, old)` pairs, for labels that are not valid keyword
            names or to map several old levels to one new label.
            A `None` new label turns the observations into missing values.
        **kwargs: The new labels as names and the old labels as values

    Returns:
        The factor with levels recoded. Levels recoded to the same label
        are merged at the position of the first of them.

    Raises:
        DuplicateMappingError: When an old level is recoded more than once
    """
    _f = check_factor(_f)
    pairs = _recode_pairs(args, kwargs)
    olds = [old for _, old in pairs]
    dups = duplicated(olds)
    if dups:
        raise DuplicateMappingError(f"Levels recoded more than once: {dups}")

    unknown = setdiff(olds, _f.levels)
    if unknown:
        inform("Unknown levels in `_f`, ignored: %s", unknown)

    mapping = {old: new for new, old in pairs}
    return merge_levels(_f, [mapping.get(lvl, lvl) for lvl in _f.levels])


@fct_collapse.register(object, backend="forcats_polars")
def _fct_collapse(
    _f: Any,
    other_level: str = None,
    _groups: Mapping[str, str | Iterable[str]] = None,
    **kwargs: str | Iterable[str],
) -> Factor:
    """Collapse groups of levels into new levels

    Examples:
        >>> fct_collapse(f, missing=["no answer", "not sure"], other="other")

    Args:
        _f: The factor
        other_level: If given, the label of a level collecting all the
            levels not named in any group, placed last
        _groups: A mapping of new labels to the old levels they collapse,
            for labels that are not valid keyword names
        **kwargs: The new labels as names and the old levels as values

    Returns:
        The collapsed factor. The new level takes the position of the first
        level it collapses.

    Raises:
        AmbiguousGroupError: When an old level is named in two groups
    """
    _f = check_factor(_f)
    groups = dict(_groups or {})
    groups.update(kwargs)

    mapping = {}
    for new, olds in groups.items():
        for old in flatten_args([olds]):
            if old in mapping and mapping[old] != new:
                raise AmbiguousGroupError(
                    f"Level {old!r} is in both group {mapping[old]!r} "
                    f"and group {new!r}."
                )
            mapping[old] = new

    unknown = setdiff(list(mapping), _f.levels)
    if unknown:
        inform("Unknown levels in `_f`, ignored: %s", unknown)

    if other_level is None:
        return merge_levels(_f, [mapping.get(lvl, lvl) for lvl in _f.levels])

    keep = [lvl in mapping for lvl in _f.levels]
    out = merge_levels(
        _f,
        [
            mapping[lvl] if kept else other_level
            for lvl, kept in zip(_f.levels, keep)
        ],
    )
    return _other_last(out, other_level)


@fct_relabel.register(object, backend="forcats_polars")
def _fct_relabel(_f: Any, _fun: Callable, *args: Any, **kwargs: Any) -> Factor:
    """Change the labels of the levels with a function

    Args:
        _f: The factor
        _fun: A function called with each label, returning the new label
        *args: and
        **kwargs: Extra arguments for `_fun`

    Returns:
        The relabelled factor. Levels getting the same label are merged
        at the position of the first of them.
    """
    _f = check_factor(_f)
    return merge_levels(
        _f,
        [_fun(lvl, *args, **kwargs) for lvl in _f.levels],
    )


def _other_last(_f: Factor, other_level: str) -> Factor:
    if other_level not in _f.levels:
        return _f
    return _fct_relevel(_f, other_level, after=None)


def _lump(_f: Factor, keep: Sequence[bool], other_level: str) -> Factor:
    """Lump the levels not kept into `other_level`, placed last"""
    if all(keep):
        inform("No levels to lump, `_f` returned as is.")
        return _f

    other_level = (
        get_option("fct_other_level") if other_level is None else other_level
    )
    out = merge_levels(
        _f,
        [lvl if kept else other_level for lvl, kept in zip(_f.levels, keep)],
    )
    return _other_last(out, other_level)


@fct_lump_n.register(object, backend="forcats_polars")
def _fct_lump_n(
    _f: Any,
    n: int,
    w: Sequence[float] = None,
    other_level: str = None,
) -> Factor:
    """Lump all levels except the `n` most frequent

    Args:
        _f: The factor
        n: The number of levels to keep. Negative to keep the `-n` least
            frequent levels instead. Ties keep the earlier levels.
        w: Optional weights of the observations, counted instead of 1s
        other_level: The label of the lumped level.
            Defaults to option `fct_other_level`.

    Returns:
        The lumped factor, with the lumped level last
    """
    _f = check_factor(_f)
    counts = level_counts(_f, w)
    if abs(n) >= _f.nlevels:
        return _lump(_f, [True] * _f.nlevels, other_level)

    order = np.argsort(-counts if n >= 0 else counts, kind="stable")
    keep = np.zeros(_f.nlevels, dtype=bool)
    keep[order[: abs(n)]] = True
    return _lump(_f, keep.tolist(), other_level)


@fct_lump_min.register(object, backend="forcats_polars")
def _fct_lump_min(
    _f: Any,
    min_: float,
    w: Sequence[float] = None,
    other_level: str = None,
) -> Factor:
    """Lump the levels that appear fewer than `min_` times

    Args:
        _f: The factor
        min_: The minimum count (or sum of weights) of a level to keep it
        w: Optional weights of the observations, counted instead of 1s
        other_level: The label of the lumped level.
            Defaults to option `fct_other_level`.

    Returns:
        The lumped factor, with the lumped level last
    """
    _f = check_factor(_f)
    counts = level_counts(_f, w)
    return _lump(_f, (counts >= min_).tolist(), other_level)


@fct_lump_prop.register(object, backend="forcats_polars")
def _fct_lump_prop(
    _f: Any,
    prop: float,
    w: Sequence[float] = None,
    other_level: str = None,
) -> Factor:
    """Lump the levels that appear in fewer than `prop` of the observations

    Args:
        _f: The factor
        prop: The minimum proportion of non-missing observations (or of
            total weight) of a level to keep it. If negative, keep the
            levels with a proportion of at most `-prop` instead.
        w: Optional weights of the observations, counted instead of 1s
        other_level: The label of the lumped level.
            Defaults to option `fct_other_level`.

    Returns:
        The lumped factor, with the lumped level last
    """
    _f = check_factor(_f)
    counts = level_counts(_f, w)
    total = counts.sum()
    if total == 0:
        return _lump(_f, [True] * _f.nlevels, other_level)

    props = counts / total
    keep = props >= prop if prop >= 0 else props <= -prop
    return _lump(_f, keep.tolist(), other_level)


@fct_lump_lowfreq.register(object, backend="forcats_polars")
def _fct_lump_lowfreq(_f: Any, other_level: str = None) -> Factor:
    """Lump the least frequent levels, keeping the lumped level the smallest

    Args:
        _f: The factor
        other_level: The label of the lumped level.
            Defaults to option `fct_other_level`.

    Returns:
        The lumped factor, with the lumped level last
    """
    _f = check_factor(_f)
    counts = level_counts(_f)
    order = np.argsort(-counts, kind="stable")

    left = counts.sum()
    cutoff = _f.nlevels
    for i, count in enumerate(counts[order]):
        left -= count
        if count > left:
            cutoff = i + 1
            break

    keep = np.ones(_f.nlevels, dtype=bool)
    keep[order[cutoff:]] = False
    return _lump(_f, keep.tolist(), other_level)


@fct_lump.register(object, backend="forcats_polars")
def _fct_lump(
    _f: Any,
    n: int = None,
    prop: float = None,
    w: Sequence[float] = None,
    other_level: str = None,
) -> Factor:
    """Lump levels together

    Uses `fct_lump_n()` if `n` is given, `fct_lump_prop()` if `prop` is
    given, otherwise `fct_lump_lowfreq()`.

    Raises:
        ConflictingArgumentsError: When both `n` and `prop` are given
    """
    if n is not None and prop is not None:
        raise ConflictingArgumentsError(
            "Must supply only one of `n` and `prop`."
        )

    if n is not None:
        return _fct_lump_n(_f, n, w=w, other_level=other_level)
    if prop is not None:
        return _fct_lump_prop(_f, prop, w=w, other_level=other_level)
    return _fct_lump_lowfreq(_f, other_level=other_level)


@fct_other.register(object, backend="forcats_polars")
def _fct_other(
    _f: Any,
    keep: str | Iterable[str] = None,
    drop: str | Iterable[str] = None,
    other_level: str = None,
) -> Factor:
    """Replace levels with "Other"

    Args:
        _f: The factor
        keep: The levels to keep, all the others are lumped
        drop: The levels to lump, all the others are kept
        other_level: The label of the lumped level.
            Defaults to option `fct_other_level`.

    Returns:
        The factor with levels lumped into the last level

    Raises:
        ConflictingArgumentsError: When both or neither of `keep` and
            `drop` are given
    """
    if (keep is None) == (drop is None):
        raise ConflictingArgumentsError(
            "Must supply exactly one of `keep` and `drop`."
        )

    _f = check_factor(_f)
    named = flatten_args([keep if drop is None else drop])
    unknown = setdiff(named, _f.levels)
    if unknown:
        inform("Unknown levels in `_f`, ignored: %s", unknown)

    named = set(named)
    if drop is None:
        kept = [lvl in named for lvl in _f.levels]
    else:
        kept = [lvl not in named for lvl in _f.levels]
    return _lump(_f, kept, other_level)
