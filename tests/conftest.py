"""
Shared pytest fixtures for CROPFLUX tests.

This module provides:
- Soil parameters and a soil column for the soil-water tests
- Logging reset between tests that reconfigure structlog
"""

import logging

import numpy as np
import pytest
import structlog

from cropflux.config import SoilParameters
from cropflux.process.state import SoilLayerState


@pytest.fixture
def loam_params():
    """Loam column with explicit plant-available water bounds."""
    return SoilParameters(soil_type="loam", field_capacity=0.27, wilting_point=0.12)


@pytest.fixture
def four_layer_state():
    """1 m column in four equal layers, just below field capacity."""
    return SoilLayerState(
        depths=np.array([0.0, 0.25, 0.5, 0.75, 1.0]),
        water_content=np.array([0.25, 0.25, 0.25, 0.25]),
    )


@pytest.fixture
def reset_logging():
    """Restore structlog and the package logger after a test reconfigures them."""
    yield
    structlog.reset_defaults()
    pkg_logger = logging.getLogger("cropflux")
    for handler in list(pkg_logger.handlers):
        handler.close()
    pkg_logger.handlers.clear()
    pkg_logger.addHandler(logging.NullHandler())
    pkg_logger.setLevel(logging.NOTSET)
