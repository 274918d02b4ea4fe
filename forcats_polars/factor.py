"""The factor: a categorical vector of integer codes into ordered levels"""
from __future__ import annotations

from functools import singledispatch
from typing import Any, Callable, Iterator, List, Sequence

import numpy as np
import polars as pl

from .errors import DuplicateLevelError, LengthMismatchError
from .utils import duplicated, inform, is_scalar

CODE_DTYPE = pl.UInt32


def _as_strings(x: Any) -> pl.Series:
    """Turn values into a string Series, with nulls for missing values"""
    if isinstance(x, pl.Series):
        s = x
    elif isinstance(x, np.ndarray):
        s = pl.Series(values=x)
    elif is_scalar(x):
        s = pl.Series(values=[x], strict=False)
    else:
        s = pl.Series(values=list(x), strict=False)

    if s.dtype.is_float():
        s = s.fill_nan(None)
    return s.cast(pl.String)


def _check_levels(levels: Sequence) -> List[str]:
    levels = [str(lvl) for lvl in levels]
    dups = duplicated(levels)
    if dups:
        raise DuplicateLevelError(f"Duplicated levels: {dups}")
    return levels


def _null_codes(n: int) -> pl.Series:
    return pl.Series(values=[None] * n, dtype=CODE_DTYPE)


def _encode(strings: pl.Series, levels: Sequence[str]) -> pl.Series:
    """Look up the codes of the strings in the levels, missing if absent"""
    if not levels:
        return _null_codes(len(strings))

    return strings.replace_strict(
        list(levels),
        list(range(len(levels))),
        default=None,
        return_dtype=CODE_DTYPE,
    )


class Factor:
    """A categorical vector

    Each observation is stored as a code, an index into `levels`, or null
    when it is missing. The order of `levels` is the display order and is
    independent of the lexical order of the labels.

    Factors are never modified in place. All the verbs return new factors.

    Args:
        x: The values, strings or anything that can be turned into strings.
            `None` and `NaN` are missing values.
        levels: The levels, in order. Values not in the levels become
            missing. If not given, the distinct values sorted by
            `collation`. A polars Series with an Enum dtype keeps its
            categories as levels.
        collation: A key function used to sort the distinct values when
            `levels` is not given, for example `locale.strxfrm`.
            `None` to sort by codepoints.
    """

    __slots__ = ("_codes", "_levels")

    def __init__(
        self,
        x: Any = (),
        levels: Sequence[str] = None,
        collation: Callable[[str], Any] = None,
    ) -> None:
        if isinstance(x, Factor):
            if levels is None:
                self._codes = x._codes
                self._levels = x._levels
                return
            x = x.to_list()
        elif (
            levels is None
            and isinstance(x, pl.Series)
            and isinstance(x.dtype, pl.Enum)
        ):
            levels = x.dtype.categories.to_list()

        strings = _as_strings(x)
        if levels is None:
            distinct = strings.drop_nulls().unique(maintain_order=True)
            levels = sorted(distinct.to_list(), key=collation)
        else:
            levels = _check_levels(levels)

        codes = _encode(strings, levels)
        n_dropped = codes.null_count() - strings.null_count()
        if n_dropped > 0:
            inform(
                "%s value(s) not in `levels`, turned into missing values.",
                n_dropped,
            )

        self._codes = codes.alias("codes")
        self._levels = tuple(levels)

    @classmethod
    def from_codes(
        cls,
        codes: Sequence[int] | pl.Series,
        levels: Sequence[str],
        check_unique: bool = True,
    ) -> Factor:
        """Construct a factor from codes directly

        Args:
            codes: The codes, null/None for missing values
            levels: The levels
            check_unique: Whether to check the levels for duplicates

        Returns:
            The factor
        """
        if isinstance(codes, pl.Series):
            codes = codes.cast(CODE_DTYPE)
        else:
            codes = pl.Series(values=list(codes), dtype=CODE_DTYPE)

        levels = (
            _check_levels(levels)
            if check_unique
            else [str(lvl) for lvl in levels]
        )
        max_code = codes.max()
        if max_code is not None and max_code >= len(levels):
            raise LengthMismatchError(
                f"Code {max_code} out of bounds for {len(levels)} level(s)."
            )

        out = cls.__new__(cls)
        out._codes = codes.alias("codes")
        out._levels = tuple(levels)
        return out

    @property
    def codes(self) -> pl.Series:
        """The codes, null for missing values"""
        return self._codes.clone()

    @property
    def levels(self) -> List[str]:
        return list(self._levels)

    @property
    def nlevels(self) -> int:
        return len(self._levels)

    @property
    def values(self) -> List[str | None]:
        """The decoded values"""
        return self.to_list()

    def to_list(self) -> List[str | None]:
        levels = self._levels
        return [
            None if code is None else levels[code]
            for code in self._codes.to_list()
        ]

    def to_series(self, name: str = "") -> pl.Series:
        """Decode into a polars Series

        The dtype is an Enum of the levels, so the order of the levels
        is kept. With duplicated labels, a String Series is returned.
        """
        if duplicated(self._levels):
            return pl.Series(name, self.to_list(), dtype=pl.String)
        return pl.Series(name, self.to_list(), dtype=pl.Enum(self.levels))

    def copy(self) -> Factor:
        return Factor.from_codes(self._codes, self._levels, check_unique=False)

    def __len__(self) -> int:
        return len(self._codes)

    def __iter__(self) -> Iterator[str | None]:
        return iter(self.to_list())

    def __getitem__(self, key: int | slice) -> str | None | Factor:
        if isinstance(key, slice):
            return Factor.from_codes(
                self._codes[key],
                self._levels,
                check_unique=False,
            )
        code = self._codes[key]
        return None if code is None else self._levels[code]

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Factor):
            return NotImplemented
        return (
            self._levels == other._levels
            and self._codes.to_list() == other._codes.to_list()
        )

    __hash__ = None

    def __repr__(self) -> str:
        return f"Factor({self.to_list()!r}, levels={self.levels!r})"

    def __str__(self) -> str:
        values = " ".join("<NA>" if val is None else val for val in self)
        return f"[{values}]\nLevels: {' '.join(self._levels)}"


@singledispatch
def check_factor(x: Any, collation: Callable[[str], Any] = None) -> Factor:
    """Make sure x is a factor, encode it with the default policy if not"""
    return Factor(x, collation=collation)


@check_factor.register(Factor)
def _check_factor_factor(
    x: Factor,
    collation: Callable[[str], Any] = None,
) -> Factor:
    return x


def code_array(f: Factor) -> np.ndarray:
    """The codes as an int64 numpy array, -1 for missing values"""
    return f._codes.cast(pl.Int64).fill_null(-1).to_numpy()


def level_counts(f: Factor, w: Sequence[float] = None) -> np.ndarray:
    """Number of observations (or sum of weights) of each level

    Args:
        f: The factor
        w: Optional weights, one for each observation

    Returns:
        Counts in level order, including zeros for unused levels
    """
    codes = code_array(f)
    present = codes >= 0
    if w is None:
        return np.bincount(codes[present], minlength=f.nlevels)

    w = np.asarray(w if not isinstance(w, pl.Series) else w.to_numpy())
    if len(w) != len(codes):
        raise LengthMismatchError(
            f"`w` must be the same length as `_f` ({len(codes)}), "
            f"not {len(w)}."
        )
    return np.bincount(
        codes[present],
        weights=w[present].astype(float),
        minlength=f.nlevels,
    )


def remap(
    f: Factor,
    old_to_new: Sequence[int | None],
    levels: Sequence[str],
    check_unique: bool = True,
) -> Factor:
    """Recode the observations of f with a new level set

    Args:
        f: The factor
        old_to_new: For each level of f, the index of its level in `levels`,
            or None to turn its observations into missing values
        levels: The new levels
        check_unique: Whether to check the new levels for duplicates

    Returns:
        The new factor
    """
    if len(old_to_new) == 0:
        codes = _null_codes(len(f))
    else:
        mapping = [None if new is None else int(new) for new in old_to_new]
        codes = pl.Series(values=mapping, dtype=CODE_DTYPE).gather(f._codes)
    return Factor.from_codes(codes, levels, check_unique=check_unique)
