"""
Unit tests for stats data retrieval.

Tests cover:
- Successful fetch with key order preserved
- HTTP errors, timeouts and connection failures
- Invalid JSON, duplicate series names and malformed payloads
- Stats URL construction and the default date range
"""

from datetime import date
from unittest import mock

import pytest
import requests

from statschart.services.data_fetcher import (
    DataFetchError,
    build_stats_url,
    fetch_series_payload,
    recent_time_delta,
)
from statschart.validators import PayloadError

URL = 'http://stats.test/api/v1/stats/total_visits/'


def _response(body, status_code=200, reason='OK'):
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response.url = URL
    response.encoding = 'utf-8'
    response._content = body.encode('utf-8')
    return response


class TestFetchSeriesPayload:
    """Test fetching the series payload."""

    def test_fetch_success(self):
        """Test that the payload is decoded with series order preserved."""
        body = ('{"Zeta": [{"date": "2020-01-01", "count": 1}],'
                ' "Alpha": [{"date": "2020-01-01", "count": null}]}')

        with mock.patch('requests.get', return_value=_response(body)) as mock_get:
            payload = fetch_series_payload(URL, timeout=3)

        assert list(payload) == ['Zeta', 'Alpha']
        assert payload['Alpha'][0]['count'] is None
        mock_get.assert_called_once()
        assert mock_get.call_args[0][0] == URL
        assert mock_get.call_args[1]['timeout'] == 3

    def test_fetch_uses_session(self):
        """Test that a provided session is used instead of requests.get."""
        session = mock.Mock()
        session.get.return_value = _response('{}')

        with mock.patch('requests.get') as mock_get:
            assert fetch_series_payload(URL, session=session) == {}

        session.get.assert_called_once()
        mock_get.assert_not_called()

    def test_http_error_status(self):
        """Test that a 500 answer becomes a DataFetchError."""
        response = _response('oops', status_code=500, reason='Internal Server Error')

        with mock.patch('requests.get', return_value=response):
            with pytest.raises(DataFetchError, match="Failed to fetch"):
                fetch_series_payload(URL)

    def test_timeout(self):
        """Test that a timeout becomes a DataFetchError."""
        with mock.patch('requests.get', side_effect=requests.exceptions.ReadTimeout('slow')):
            with pytest.raises(DataFetchError, match="timed out"):
                fetch_series_payload(URL)

    def test_connection_error(self):
        """Test that an unreachable host becomes a DataFetchError."""
        with mock.patch('requests.get', side_effect=requests.exceptions.ConnectionError('refused')):
            with pytest.raises(DataFetchError) as excinfo:
                fetch_series_payload(URL)

        assert isinstance(excinfo.value.__cause__, requests.exceptions.ConnectionError)

    def test_invalid_json(self):
        """Test that a non-JSON body is a payload error, not a fetch error."""
        with mock.patch('requests.get', return_value=_response('<html>not json</html>')):
            with pytest.raises(PayloadError, match="not valid JSON"):
                fetch_series_payload(URL)

    def test_duplicate_series_names(self):
        """Test that duplicate series names are refused."""
        body = '{"A": [], "A": [{"date": "2020-01-01", "count": 1}]}'

        with mock.patch('requests.get', return_value=_response(body)):
            with pytest.raises(PayloadError, match="Duplicate key"):
                fetch_series_payload(URL)

    def test_wrong_shape(self):
        """Test that a list payload is refused."""
        with mock.patch('requests.get', return_value=_response('[1, 2, 3]')):
            with pytest.raises(PayloadError, match="must be an object"):
                fetch_series_payload(URL)


class TestBuildStatsUrl:
    """Test stats endpoint URLs."""

    def test_url_with_params(self):
        url = build_stats_url('total_visits', {'start': '2020-01-01', 'end': '2020-01-31'},
                              base_url='http://localhost:5000/api/v1/')
        assert url == 'http://localhost:5000/api/v1/stats/total_visits/?start=2020-01-01&end=2020-01-31'

    def test_empty_params_dropped(self):
        url = build_stats_url('total_visits', {'start': '', 'end': None, 'interval': 'day'},
                              base_url='http://localhost:5000/api/v1/')
        assert url == 'http://localhost:5000/api/v1/stats/total_visits/?interval=day'

    def test_base_without_trailing_slash(self):
        url = build_stats_url('/total_developers/', base_url='http://localhost:5000/api/v1')
        assert url == 'http://localhost:5000/api/v1/stats/total_developers/'


class TestRecentTimeDelta:
    """Test the default date range."""

    def test_thirty_days_ending_today(self):
        assert recent_time_delta(today=date(2020, 3, 1)) == {
            'start': '2020-01-31',
            'end': '2020-03-01',
        }

    def test_custom_span(self):
        assert recent_time_delta(today=date(2020, 1, 8), days=7)['start'] == '2020-01-01'
