"""
Stats data retrieval.

Fetches the series payload from the stats API and builds the parameterized
endpoint URLs the chart pages use. Decoding refuses duplicate series names
instead of silently keeping the last one.
"""

import logging
from datetime import date, timedelta
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode, urljoin

import requests

from statschart.config import API_BASE, FETCH_TIMEOUT
from statschart.validators import PayloadError, reject_duplicate_keys, validate_payload

logger = logging.getLogger(__name__)

__all__ = [
    "DataFetchError",
    "build_stats_url",
    "recent_time_delta",
    "fetch_series_payload",
]


class DataFetchError(Exception):
    """Raised when the stats endpoint cannot be reached or answers with an error."""
    pass


def build_stats_url(endpoint: str, params: Optional[Mapping[str, Any]] = None,
                    base_url: str = API_BASE) -> str:
    """
    Build a stats API URL with query parameters.

    Empty parameter values are left out.

    Example:
        >>> build_stats_url('total_visits', {'start': '2020-01-01', 'interval': 'day'},
        ...                 base_url='http://localhost:5000/api/v1/')
        'http://localhost:5000/api/v1/stats/total_visits/?start=2020-01-01&interval=day'
    """
    if not base_url.endswith('/'):
        base_url += '/'
    url = urljoin(base_url, f"stats/{endpoint.strip('/')}/")
    query = {k: v for k, v in (params or {}).items() if v not in (None, '')}
    return f"{url}?{urlencode(query)}" if query else url


def recent_time_delta(today: Optional[date] = None, days: int = 30) -> Dict[str, str]:
    """Default chart range: the `days` days ending today, as ISO date strings."""
    end = today or date.today()
    start = end - timedelta(days=days)
    return {'start': start.isoformat(), 'end': end.isoformat()}


def fetch_series_payload(url: str, *, timeout: float = FETCH_TIMEOUT,
                         session: Optional[requests.Session] = None) -> Dict[str, Any]:
    """
    GET the series payload from `url`.

    Args:
        url: Data endpoint returning {series name: [{date, count}, ...]}
        timeout: Request timeout in seconds
        session: Optional requests session to reuse connections

    Returns:
        The decoded payload, key order preserved.

    Raises:
        DataFetchError: On connection errors, timeouts or HTTP error statuses
        PayloadError: If the body is not valid JSON, has duplicate keys or
            has the wrong shape
    """
    http = session or requests
    logger.info(f"Fetching series payload from {url}")
    try:
        response = http.get(url, timeout=timeout, headers={'Accept': 'application/json'})
        response.raise_for_status()
    except requests.exceptions.Timeout as e:
        logger.warning(f"Fetching {url} timed out after {timeout}s")
        raise DataFetchError(f"Request to {url} timed out") from e
    except requests.exceptions.RequestException as e:
        logger.warning(f"Fetching {url} failed: {e}")
        raise DataFetchError(f"Failed to fetch {url}: {e}") from e

    try:
        payload = response.json(object_pairs_hook=reject_duplicate_keys)
    except requests.exceptions.JSONDecodeError as e:
        logger.warning(f"Response from {url} is not valid JSON: {e}")
        raise PayloadError(f"Response from {url} is not valid JSON") from e

    validate_payload(payload)
    logger.debug(f"Payload from {url} holds {len(payload)} series")
    return payload
