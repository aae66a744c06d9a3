"""
Series model: turns a raw stats payload into typed series and domains.

The payload maps series names to samples, which are sorted by date here
so lines never run backwards. Series keep the
payload's key order (first-seen order of the JSON object), and that order
drives color assignment: the n-th series always gets the n-th palette
color, empty series included, so colors stay stable across re-renders as
long as the set of names does not change.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from statschart.validators import Count, parse_count, parse_sample_date, validate_payload

logger = logging.getLogger(__name__)

# d3 category10
CATEGORY10 = (
    '#1f77b4',
    '#ff7f0e',
    '#2ca02c',
    '#d62728',
    '#9467bd',
    '#8c564b',
    '#e377c2',
    '#7f7f7f',
    '#bcbd22',
    '#17becf',
)


@dataclass(frozen=True)
class Sample:
    """One observation; count is None when the observation is missing."""

    date: date
    count: Count

    @property
    def defined(self) -> bool:
        return self.count is not None


@dataclass(frozen=True)
class Series:
    """One named line."""

    name: str
    values: Tuple[Sample, ...]
    color: str

    @property
    def is_empty(self) -> bool:
        return not any(sample.defined for sample in self.values)

    @property
    def defined_values(self) -> Tuple[Sample, ...]:
        return tuple(sample for sample in self.values if sample.defined)


@dataclass
class LegendEntry:
    """Legend view of a non-empty series. Only `visible` ever changes."""

    name: str
    color: str
    visible: bool = True


@dataclass(frozen=True)
class ChartModel:
    """Everything a render pass needs to know about the data."""

    series: Tuple[Series, ...]
    date_extent: Optional[Tuple[date, date]]
    value_extent: Optional[Tuple[float, float]]
    legend_entries: List[LegendEntry] = field(default_factory=list)
    empty_count: int = 0

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to plot (drives the insufficient-data overlay)."""
        return not self.legend_entries

    @property
    def colors(self) -> Dict[str, str]:
        return {s.name: s.color for s in self.series}

    def get(self, name: str) -> Optional[Series]:
        for s in self.series:
            if s.name == name:
                return s
        return None


def color_for_index(index: int) -> str:
    return CATEGORY10[index % len(CATEGORY10)]


def assign_colors(names: Sequence[str]) -> Dict[str, str]:
    """Map series names to palette colors in the given order."""
    return {name: color_for_index(i) for i, name in enumerate(names)}


def _parse_samples(raw_samples: Sequence[Mapping[str, Any]]) -> Tuple[Sample, ...]:
    """Parse samples and order them by date (stable for repeated dates)."""
    samples = [
        Sample(date=parse_sample_date(raw['date']), count=parse_count(raw.get('count')))
        for raw in raw_samples
    ]
    return tuple(sorted(samples, key=lambda sample: sample.date))


def build_model(raw_payload: Mapping[str, Sequence[Mapping[str, Any]]],
                force_zero_min: bool = True) -> ChartModel:
    """
    Build typed series plus the shared date and value domains.

    Args:
        raw_payload: Mapping of series name to list of {"date", "count"} objects
        force_zero_min: Start the value domain at 0 instead of the data minimum

    Returns:
        ChartModel. `value_extent` is None when every series is empty, and
        `date_extent` is None when the payload holds no samples at all.

    Raises:
        PayloadError: If the payload shape is wrong or a date is malformed.

    Example:
        >>> model = build_model({'A': [{'date': '2020-01-01', 'count': 5}]})
        >>> model.value_extent
        (0, 5)
    """
    validate_payload(raw_payload)

    colors = assign_colors(list(raw_payload.keys()))
    series: List[Series] = []
    legend_entries: List[LegendEntry] = []
    empty_count = 0

    for name, raw_samples in raw_payload.items():
        logger.debug(f"Reading graph: {name}")
        current = Series(name=name, values=_parse_samples(raw_samples), color=colors[name])
        series.append(current)
        if current.is_empty:
            empty_count += 1
            logger.info(f"Found empty series: {name}")
        else:
            legend_entries.append(LegendEntry(name=name, color=current.color))

    all_dates = [sample.date for s in series for sample in s.values]
    date_extent = (min(all_dates), max(all_dates)) if all_dates else None

    value_extent = None
    counts = [sample.count for s in series for sample in s.defined_values]
    if counts:
        min_value, max_value = min(counts), max(counts)
        logger.debug(f"Minimum value found is: {min_value}")
        logger.debug(f"Maximum value found is: {max_value}")
        value_extent = (0 if force_zero_min else min_value, max_value)

    logger.info(
        f"Built {len(series)} series ({empty_count} empty), "
        f"dates={date_extent}, values={value_extent}"
    )
    return ChartModel(
        series=tuple(series),
        date_extent=date_extent,
        value_extent=value_extent,
        legend_entries=legend_entries,
        empty_count=empty_count,
    )
