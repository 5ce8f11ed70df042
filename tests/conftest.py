# Copyright (c) QuantCo and pydiverse contributors 2025-2025
# SPDX-License-Identifier: BSD-3-Clause
import logging

import pytest

from pydiverse.common.util.structlog import setup_logging
from pydiverse.map2d import Map2d

# Setup


@pytest.fixture
def abc():
    m = Map2d()
    m.put("A", "x", 1)
    m.put("A", "y", 2)
    m.put("B", "x", 3)
    return m


@pytest.fixture
def empty():
    return Map2d()


setup_logging(log_level=logging.INFO)
