# Copyright (c) QuantCo and pydiverse contributors 2025-2025
# SPDX-License-Identifier: BSD-3-Clause

# This module defines the config classes provided to the user to configure
# the output format of `Map2d.export`.


class Target: ...


class Polars(Target):
    def __init__(self, *, lazy: bool = False) -> None:
        self.lazy = lazy


class Pandas(Target): ...


class Dict(Target): ...


class DictOfLists(Target): ...


class ListOfDicts(Target): ...
