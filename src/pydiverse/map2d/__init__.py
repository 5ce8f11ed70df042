# Copyright (c) QuantCo and pydiverse contributors 2025-2025
# SPDX-License-Identifier: BSD-3-Clause

from importlib.metadata import PackageNotFoundError, version

from ._internal.map2d import Map2d
from ._internal.targets import Dict, DictOfLists, ListOfDicts, Pandas, Polars, Target
from .errors import *
from .errors import __all__ as __errors

try:
    __version__ = version("pydiverse-map2d")
except PackageNotFoundError:
    __version__ = "0.0.0+dev"

__all__ = [
    "__version__",
    "Map2d",
    "Target",
    "Polars",
    "Pandas",
    "Dict",
    "DictOfLists",
    "ListOfDicts",
] + __errors
