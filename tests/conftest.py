"""Pytest configuration and shared fixtures."""
import pytest
from dataclasses import dataclass
from typing import Any

import modelparams.traversal as traversal_module
from modelparams import Param, reset_config


@dataclass
class Growth:
    """Two parameters with different metadata plus a plain field."""
    rate: Any
    capacity: Any
    label: str = "growth"


@dataclass
class Ecosystem:
    """Nested composite: dataclass, tuple and dict containers."""
    growth: Growth
    mortality: tuple
    extras: dict


@pytest.fixture(autouse=True)
def reset_modelparams_state():
    """Restore configuration and the composite registry after each test."""
    original_registry = dict(traversal_module._composite_registry)

    yield

    reset_config()
    traversal_module._composite_registry.clear()
    traversal_module._composite_registry.update(original_registry)
    traversal_module._handler_cache.clear()


@pytest.fixture
def growth():
    """Growth with a bounded rate and a capacity carrying units."""
    return Growth(rate=Param(0.1, bounds=(0.0, 1.0)), capacity=Param(100, units="ind"))


@pytest.fixture
def ecosystem(growth):
    """Four params spread over a dataclass, a tuple and a dict."""
    return Ecosystem(
        growth=growth,
        mortality=(Param(0.01, units="1/d"), 5),
        extras={"temp": Param(20.0, units="C"), "name": "pond"},
    )
