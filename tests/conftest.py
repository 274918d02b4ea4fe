import pytest

from datar import options
options(backends=["numpy", "forcats_polars"])

from datar.base import factor  # noqa: E402

# Only after the backends are loaded, the options are added by them
options(fct_inform=False)


SENTINEL = 85258525.85258525

CLARITY_LEVELS = ["I1", "SI2", "SI1", "VS2", "VS1", "VVS2", "VVS1", "IF"]
CLARITY_COUNTS = [1790, 3655, 5066, 8171, 12258, 13065, 9194, 741]

COUNTRIES = [
    "Australia",
    "Austria",
    "Canada",
    "Denmark",
    "France",
    "Germany",
    "Italy",
    "Japan",
    "Norway",
    "Sweden",
    "Switzerland",
    "USA",
]


@pytest.fixture
def clarity():
    """The clarity of the diamonds, worst to best"""
    values = [
        lvl
        for lvl, count in zip(CLARITY_LEVELS, CLARITY_COUNTS)
        for _ in range(count)
    ]
    return factor(values, levels=CLARITY_LEVELS)


@pytest.fixture
def countries():
    values = [
        country
        for i, country in enumerate(COUNTRIES)
        for _ in range(i % 4 + 1)
    ]
    return factor(values)


@pytest.fixture
def medals():
    return factor(
        ["Gold", None, "Silver", "Bronze", None, "Gold", None, "Gold"]
    )


def assert_iterable_equal(x, y, na=SENTINEL, approx=False):
    from forcats_polars.utils import is_null

    x = [na if is_null(elt) else elt for elt in x]
    y = [na if is_null(elt) else elt for elt in y]
    if approx is True:
        x = pytest.approx(x)
    elif approx:
        x = pytest.approx(x, rel=approx)
    assert x == y, f"{x} != {y}"


def assert_factor_equal(x, y, na=8525.8525, approx=False):
    assert_iterable_equal(x, y, na=na, approx=approx)
    assert_iterable_equal(x.levels, y.levels, na=na, approx=approx)
