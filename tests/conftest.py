"""
Shared pytest fixtures for hexorder tests.

Ontology fixtures are function-scoped so tests may mutate the registries
freely.
"""

import pytest

from hexorder.models import HexGridConfig, SelectedUnit
from tests.helpers import MotionOntology, build_motion_ontology


# =============================================================================
# PROMETHEUS REGISTRY FIX
# =============================================================================
# Metrics register at import time; importing hexorder.metrics under a
# second module path would otherwise raise "Duplicated timeseries".


def _patch_prometheus_registry():
    from prometheus_client.registry import CollectorRegistry

    if getattr(CollectorRegistry, "_patched_for_tests", False):
        return

    original_register = CollectorRegistry.register

    def _safe_register(self, collector):
        try:
            return original_register(self, collector)
        except ValueError as e:
            if "Duplicated timeseries" not in str(e):
                raise

    CollectorRegistry.register = _safe_register
    CollectorRegistry._patched_for_tests = True


_patch_prometheus_registry()


@pytest.fixture
def motion() -> MotionOntology:
    """Motion ontology with the Subtract cost relation registered."""
    return build_motion_ontology()


@pytest.fixture
def grid() -> HexGridConfig:
    return HexGridConfig(map_radius=3)


@pytest.fixture
def selected() -> SelectedUnit:
    selection = SelectedUnit()
    selection.select("unit-1")
    return selection
