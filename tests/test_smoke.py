"""
Smoke test: baseline and import validation.

This test ensures that:
1. All modules import without errors
2. Core functions are callable
3. No background threads start on import (safe for testing)
"""

import importlib
import threading

import pytest

MODULES = [
    'statschart.config',
    'statschart.validators',
    'statschart.dom',
    'statschart.series_model',
    'statschart.scales',
    'statschart.paths',
    'statschart.interaction',
    'statschart.linechart',
    'statschart.stats_views',
    'statschart._render_svg',
    'statschart.services.data_fetcher',
    'statschart.services.render_jobs',
    'statschart.services.chart_service',
]


@pytest.mark.parametrize('name', MODULES)
def test_module_imports_successfully(name):
    """Test that each module can be imported without errors."""
    assert importlib.import_module(name) is not None


def test_core_functions_are_callable():
    """Test that the pipeline entry points exist."""
    from statschart.linechart import draw_chart
    from statschart.series_model import build_model
    from statschart.services.chart_service import ChartController
    from statschart.services.data_fetcher import fetch_series_payload

    assert callable(build_model)
    assert callable(draw_chart)
    assert callable(fetch_series_payload)
    assert callable(ChartController)


def test_no_threads_started_on_import():
    """Test that importing the service does not start worker threads."""
    before = threading.active_count()
    importlib.import_module('statschart.services.chart_service')
    assert threading.active_count() == before
