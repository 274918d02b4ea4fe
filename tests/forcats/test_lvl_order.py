# https://github.com/tidyverse/forcats/tree/main/tests/testthat
import pytest

import numpy as np
import polars as pl
from datar.base import factor
from datar.forcats import (
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
    lvls_revalue,
)
from forcats_polars import UnknownLevelError, LengthMismatchError

from ..conftest import assert_iterable_equal, assert_factor_equal


# fct_relevel
def test_relevel_moves_levels_to_front():
    f1 = factor(["a", "b", "c", "d"])
    f2 = fct_relevel(f1, "c", "b")
    assert f2.levels == ["c", "b", "a", "d"]
    assert_iterable_equal(f2, ["a", "b", "c", "d"])


def test_relevel_accepts_lists():
    f1 = factor(["a", "b", "c", "d"])
    f2 = fct_relevel(f1, ["d", "c"])
    assert f2.levels == ["d", "c", "a", "b"]


def test_relevel_after():
    f1 = factor(["a", "b", "c", "d"])
    assert fct_relevel(f1, "a", after=2).levels == ["b", "c", "a", "d"]
    assert fct_relevel(f1, "a", after=None).levels == ["b", "c", "d", "a"]
    assert fct_relevel(f1, "a", after=-1).levels == ["b", "c", "d", "a"]
    assert fct_relevel(f1, "a", after=100).levels == ["b", "c", "d", "a"]


def test_relevel_with_function():
    f1 = factor(["a", "b", "c"])
    f2 = fct_relevel(f1, lambda lvls: lvls[::-1])
    assert f2.levels == ["c", "b", "a"]


def test_relevel_unknown_level():
    f1 = factor(["a", "b"])
    with pytest.raises(UnknownLevelError, match="'c'"):
        fct_relevel(f1, "c")


def test_relevel_back_restores_levels():
    f1 = factor(["x", "y", "z", "x"])
    f2 = fct_relevel(f1, "z", "x")
    f3 = fct_relevel(f2, *f1.levels)
    assert_factor_equal(f3, f1)


# fct_inorder / fct_infreq / fct_inseq
def test_inorder():
    f1 = factor(["b", "b", "a", None, "c", "c", "c"], levels=["a", "b", "z", "c"])
    f2 = fct_inorder(f1)
    assert f2.levels == ["b", "a", "c", "z"]
    assert_iterable_equal(f2, ["b", "b", "a", None, "c", "c", "c"])

    assert fct_inorder(["y", "x", "y"]).levels == ["y", "x"]


def test_infreq():
    f1 = factor(["b", "b", "a", "c", "c", "c"])
    f2 = fct_infreq(f1)
    assert f2.levels == ["c", "b", "a"]

    f3 = fct_infreq(f1, descending=False)
    assert f3.levels == ["a", "b", "c"]


def test_infreq_ties_keep_level_order():
    f1 = factor(["d", "c", "b", "a", "a", "c"])
    assert fct_infreq(f1).levels == ["a", "c", "b", "d"]


def test_infreq_weights():
    f1 = factor(["a", "b", "c"])
    assert fct_infreq(f1, w=[1, 5, 2]).levels == ["b", "c", "a"]


def test_infreq_collation_for_raw_values():
    out = fct_infreq(["b", "B", "a"], collation=str.casefold)
    assert out.levels == ["a", "b", "B"]


def test_inseq():
    f1 = factor(["3", "1", "10", "x", "2"])
    assert fct_inseq(f1).levels == ["1", "2", "3", "10", "x"]


# fct_rev / fct_shift / fct_shuffle
def test_rev():
    f1 = factor(["a", "b", "c", None])
    f2 = fct_rev(f1)
    assert f2.levels == ["c", "b", "a"]
    assert_iterable_equal(f2, ["a", "b", "c", None])
    assert_factor_equal(fct_rev(f2), f1)


def test_shift():
    f1 = factor(["a", "b", "c"])
    assert fct_shift(f1).levels == ["c", "a", "b"]
    assert fct_shift(f1, -1).levels == ["b", "c", "a"]
    assert fct_shift(f1, 4).levels == ["c", "a", "b"]
    assert fct_shift(f1, 3).levels == ["a", "b", "c"]
    assert_iterable_equal(fct_shift(f1, 2), ["a", "b", "c"])


def test_shift_back_restores_levels():
    f1 = factor(["a", "b", "c", "d", "e"])
    assert fct_shift(fct_shift(f1, 2), -2) == f1


def test_shift_no_levels():
    f1 = factor([None, None])
    assert fct_shift(f1, 1).levels == []


def test_shuffle_is_reproducible():
    f1 = factor(list("abcdefgh"))
    f2 = fct_shuffle(f1, rng=np.random.default_rng(8888))
    f3 = fct_shuffle(f1, rng=8888)
    assert f2.levels == f3.levels
    assert sorted(f2.levels) == f1.levels
    assert_iterable_equal(f2, f1.to_list())


# fct_reorder / fct_reorder2
def test_reorder_by_median():
    f1 = factor(["a", "b", "c", "a", "b", "c"])
    x = [10, 1, 5, 0, 3, 6]
    # medians: a 5, b 2, c 5.5
    f2 = fct_reorder(f1, x)
    assert f2.levels == ["b", "a", "c"]
    assert_iterable_equal(f2, f1.to_list())

    f3 = fct_reorder(f1, x, _desc=True)
    assert f3.levels == ["c", "a", "b"]


def test_reorder_uses_all_values():
    f1 = factor(["a", "b", "a", "a"])
    x = [9, 5, 1, 1]
    # first value of a is 9, but the max of all values of a is the rank
    assert fct_reorder(f1, x, _fun=np.min).levels == ["a", "b"]
    assert fct_reorder(f1, x, _fun=np.max).levels == ["b", "a"]
    assert fct_reorder(f1, x, _fun=len).levels == ["b", "a"]


def test_reorder_ties_keep_level_order():
    f1 = factor(["c", "b", "a"])
    assert fct_reorder(f1, [1, 1, 1]).levels == ["a", "b", "c"]
    assert fct_reorder(f1, [1, 1, 1], _desc=True).levels == ["a", "b", "c"]


def test_reorder_unused_levels_last():
    f1 = factor(["a", "c"], levels=["a", "b", "c"])
    assert fct_reorder(f1, [2, 1]).levels == ["c", "a", "b"]
    assert fct_reorder(f1, [2, 1], _desc=True).levels == ["a", "c", "b"]


def test_reorder_extra_arguments():
    f1 = factor(["a", "b", "a", "b"])
    x = [1, 10, 3, 20]
    out = fct_reorder(f1, x, 0.9, _fun=np.quantile, _desc=True)
    assert out.levels == ["b", "a"]


def test_reorder_accepts_series():
    f1 = factor(["a", "b"])
    assert fct_reorder(f1, pl.Series([2, 1])).levels == ["b", "a"]


def test_reorder_length_mismatch():
    f1 = factor(["a", "b", "c"])
    with pytest.raises(LengthMismatchError):
        fct_reorder(f1, [1, 2])
    with pytest.raises(LengthMismatchError):
        fct_reorder2(f1, [1, 2, 3], [1, 2])


def test_reorder2():
    f1 = factor(["a", "a", "b", "b", "c", "c"])
    x = [1, 2, 1, 2, 1, 2]
    y = [5, 1, 2, 3, 4, 9]
    # last2: a 1, b 3, c 9, sorted descending
    f2 = fct_reorder2(f1, x, y)
    assert f2.levels == ["c", "b", "a"]
    assert_iterable_equal(f2, f1.to_list())

    # first2: a 5, b 2, c 4
    f3 = fct_reorder2(f1, x, y, _fun=first2, _desc=False)
    assert f3.levels == ["b", "c", "a"]


def test_first2_last2():
    x = [3, 1, 2]
    y = ["c", "a", "b"]
    assert first2(x, y) == "a"
    assert last2(x, y) == "c"


def test_relevel_moves_every_slot_of_a_repeated_label():
    f1 = lvls_revalue(factor(["a", "b", "c"]), ["x", "x", "y"])
    f2 = fct_relevel(f1, "y")
    assert f2.levels == ["y", "x", "x"]
    assert_iterable_equal(f2, ["x", "x", "y"])

    f3 = fct_relevel(f1, "x", after=None)
    assert f3.levels == ["y", "x", "x"]
    assert_iterable_equal(f3.codes, [1, 2, 0])
