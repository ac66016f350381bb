"""Lazy imports of the optional DataFrame and Spark libraries."""

from __future__ import annotations

import importlib
import types

# fprules extra that installs each optional package
EXTRAS = {
    "pyspark": "spark",
    "polars": "polars",
    "pyarrow": "arrow",
}


def import_optional_dependency(name: str, purpose: str = "") -> types.ModuleType:
    """
    Import an optional dependency.

    Parameters
    ----------
    name : str
        The module name, e.g. ``"pyspark.sql"``.
    purpose : str
        What needs the module; appended to the error message.

    Returns
    -------
    module

    Raises
    ------
    ImportError
        If the top-level package of ``name`` is not installed.  The message
        names the fprules extra that pulls it in.
    """
    package_name = name.split(".")[0]
    try:
        return importlib.import_module(name)
    except ModuleNotFoundError as e:
        # a package that is installed but fails on its own imports is not "missing"
        if e.name is None or e.name.split(".")[0] != package_name:
            raise
        msg = f"Missing optional dependency '{package_name}'."
        if package_name in EXTRAS:
            msg += f" Install it with `pip install fprules[{EXTRAS[package_name]}]`."
        else:
            msg += f" Install it with `pip install {package_name}`."
        if purpose:
            msg += f" {purpose}"
        raise ImportError(msg) from e
