from datar.core.plugin import plugin

# For simplug to retrieve the version
from .version import __version__  # noqa: F401


@plugin.impl
def setup():
    from datar.core.options import add_option
    # Log the lenient operations (values dropped, unknown levels ignored)
    add_option("fct_inform", True)
    add_option("fct_other_level", "Other")
    add_option("fct_na_level", "(Missing)")


@plugin.impl
def base_api():
    from .api.base import factor  # noqa: F401


@plugin.impl
def forcats_api():
    from .api.base import factor  # noqa: F401, F811
    from .api.forcats import (  # noqa: F401
        fct_multi,
        lvl_addrm,
        lvl_order,
        lvl_value,
        lvls,
        misc,
    )
    return {
        "fct_na_level_to_value": lvl_addrm.fct_na_level_to_value,
    }


@plugin.impl
def get_versions():
    import polars

    return {
        "forcats-polars": __version__,
        "polars": polars.__version__,
    }
