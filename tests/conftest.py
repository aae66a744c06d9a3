"""Shared fixtures for statschart tests."""

from concurrent.futures import Future

import pytest

from statschart.config import ChartConfig, ChartLabels
from statschart.dom import ChartContainer


class ImmediateExecutor:
    """Executor running submitted work synchronously in the calling thread."""

    def __init__(self):
        self.submitted = 0

    def submit(self, fn, *args, **kwargs):
        self.submitted += 1
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future

    def shutdown(self, wait=True):
        pass


@pytest.fixture
def scenario_payload():
    """Single series with a null gap in the middle."""
    return {
        'A': [
            {'date': '2020-01-01', 'count': 5},
            {'date': '2020-01-02', 'count': None},
            {'date': '2020-01-03', 'count': 7},
        ]
    }


@pytest.fixture
def two_series_payload():
    """One series with data and one entirely null."""
    return {
        'Visits': [
            {'date': '2020-01-01', 'count': 3},
            {'date': '2020-01-02', 'count': 9},
        ],
        'Nothing': [
            {'date': '2020-01-01', 'count': None},
            {'date': '2020-01-02', 'count': None},
        ],
    }


@pytest.fixture
def labels():
    return ChartLabels(y_axis='Number of Visits', tooltip_value='Visits')


@pytest.fixture
def immediate_executor():
    return ImmediateExecutor()


@pytest.fixture
def container():
    return ChartContainer('chart')


@pytest.fixture
def config(container):
    return ChartConfig(container=container, data_url='http://stats.test/api/v1/stats/total_visits/')
