"""
Input validation and sanitization utilities for chart payloads and options.

This module provides pure validation functions used across the package to
make sure that only well-formed series data reaches the chart pipeline.
"""

import math
import re
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from statschart.config import MARGIN

Count = Optional[Union[int, float]]

_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


class PayloadError(ValueError):
    """Raised when a series payload cannot be turned into chart data."""
    pass


def sanitize_filename(name: str, run_id: str) -> str:
    """
    Sanitize and uniquify a filename to prevent path traversal and collisions.

    Removes unsafe characters and appends run_id for uniqueness.

    Args:
        name: Original name, usually the chart's axis label
        run_id: Unique identifier for uniqueness

    Returns:
        Safe filename with .svg extension (e.g., "Number of Visits - Line Chart - abc123.svg")

    Example:
        >>> sanitize_filename("Number of Visits", "abc123")
        'Number of Visits - Line Chart - abc123.svg'

        >>> sanitize_filename("../../../etc/passwd", "def456")
        'etcpasswd - Line Chart - def456.svg'
    """
    # Keep alphanumeric, spaces, hyphens, underscores
    safe_name = re.sub(r'[^A-Za-z0-9 _\-]', '', name).strip()
    safe_name = safe_name[:50] if safe_name else 'Chart'
    return f"{safe_name} - Line Chart - {run_id}.svg"


def parse_sample_date(value: Any) -> date:
    """
    Parse a "YYYY-MM-DD" string into a calendar date.

    Raises:
        PayloadError: If the value is not a string in that exact format or
            names an impossible day. There is no fallback date.

    Example:
        >>> parse_sample_date('2020-01-03')
        datetime.date(2020, 1, 3)
    """
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise PayloadError(f"Invalid sample date: {value!r}")
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError as e:
        raise PayloadError(f"Invalid sample date: {value!r} ({e})") from e


def parse_count(value: Any) -> Count:
    """
    Normalize a sample count.

    None stays None (a missing observation). Finite numbers pass through
    untouched, including negative and very large values. Numeric strings are
    coerced to float; booleans, infinities, NaN and anything else are
    rejected, since none of them can be placed on a scale.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise PayloadError(f"Invalid sample count: {value!r}")
    if isinstance(value, int):
        try:
            float(value)
        except OverflowError as e:
            raise PayloadError(f"Invalid sample count: {value!r} is not a finite number") from e
        return value
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError as e:
            raise PayloadError(f"Invalid sample count: {value!r}") from e
    if isinstance(value, float):
        if not math.isfinite(value):
            raise PayloadError(f"Invalid sample count: {value!r} is not a finite number")
        return value
    raise PayloadError(f"Invalid sample count: {value!r}")


def reject_duplicate_keys(pairs: List[Tuple[str, Any]]) -> Dict[str, Any]:
    """
    JSON object hook refusing duplicate keys.

    Two series sharing a name are ambiguous, so instead of letting the
    decoder keep the last one the whole payload is rejected.
    """
    result: Dict[str, Any] = {}
    for key, value in pairs:
        if key in result:
            raise PayloadError(f"Duplicate key in payload: {key!r}")
        result[key] = value
    return result


def validate_payload(raw_payload: Any) -> Mapping[str, Sequence[Mapping[str, Any]]]:
    """
    Check the overall payload shape: series name -> list of sample objects.

    Returns:
        The payload itself, unchanged.

    Raises:
        PayloadError: If the payload is not a mapping of lists of objects
            with a "date" key.
    """
    if not isinstance(raw_payload, Mapping):
        raise PayloadError(
            f"Payload must be an object of series, got {type(raw_payload).__name__}"
        )

    for name, samples in raw_payload.items():
        if not isinstance(name, str) or not name:
            raise PayloadError(f"Series name must be a non-empty string: {name!r}")
        if not isinstance(samples, (list, tuple)):
            raise PayloadError(f"Series {name!r} must be a list of samples")
        for sample in samples:
            if not isinstance(sample, Mapping) or 'date' not in sample:
                raise PayloadError(f"Series {name!r} has a malformed sample: {sample!r}")

    return raw_payload


def validate_chart_config(config) -> None:
    """
    Validate the numeric options of a ChartConfig.

    Raises:
        ValueError: If the chart would have no drawable area or the options
            are out of range.
    """
    min_width = MARGIN['left'] + MARGIN['right']
    min_height = MARGIN['top'] + MARGIN['bottom']

    if config.container is None:
        raise ValueError("A container is required")
    if not isinstance(config.width, int) or config.width <= min_width:
        raise ValueError(f"Width must be an integer greater than {min_width}")
    if not isinstance(config.height, int) or config.height <= min_height:
        raise ValueError(f"Height must be an integer greater than {min_height}")
    if config.tick_padding < 0:
        raise ValueError("Tick padding must not be negative")
    if not config.data_url:
        raise ValueError("A data URL is required")
