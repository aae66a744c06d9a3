"""
Line and marker geometry for a series.

Lines are drawn with monotone cubic interpolation through the defined
samples only. A null sample is dropped from the point set without breaking
the line, so a gap in the data shows up as one smooth segment bridging the
missing days rather than as a visual break. Markers are produced for every
sample, null ones included, so marker indexes always line up with sample
indexes; the null markers are simply not painted.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence, Tuple

from statschart.scales import LinearScale, TimeScale, format_coord
from statschart.series_model import Sample, Series

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

MARKER_RADIUS = 3
LABEL_OFFSET = 10
_EPSILON = 1e-6


@dataclass(frozen=True)
class Marker:
    """One sample's point marker."""

    series_name: str
    index: int
    sample: Sample
    cx: float
    cy: float
    color: str

    @property
    def visible(self) -> bool:
        return self.sample.defined


@dataclass(frozen=True)
class LineLabel:
    series_name: str
    date: date
    x: float
    y: float


def _point(x: float, y: float) -> str:
    return f"{format_coord(x)},{format_coord(y)}"


def _slope(p0: Point, p1: Point) -> float:
    dx = p1[0] - p0[0]
    return (p1[1] - p0[1]) / dx if dx else 0.0


def _finite_differences(points: Sequence[Point]) -> List[float]:
    last = len(points) - 1
    m = [0.0] * len(points)
    d = m[0] = _slope(points[0], points[1])
    for i in range(1, last):
        previous = d
        d = _slope(points[i], points[i + 1])
        m[i] = (previous + d) / 2
    m[last] = d
    return m


def _monotone_tangents(points: Sequence[Point]) -> List[Point]:
    """Fritsch-Carlson tangents keeping the curve monotone between points."""
    m = _finite_differences(points)
    last = len(points) - 1

    for i in range(last):
        d = _slope(points[i], points[i + 1])
        if abs(d) < _EPSILON:
            m[i] = m[i + 1] = 0.0
        else:
            a = m[i] / d
            b = m[i + 1] / d
            s = a * a + b * b
            if s > 9:
                s = d * 3 / s ** 0.5
                m[i] = s * a
                m[i + 1] = s * b

    tangents = []
    for i in range(last + 1):
        s = (points[min(last, i + 1)][0] - points[max(0, i - 1)][0]) / (6 * (1 + m[i] * m[i]))
        tangents.append((s, m[i] * s))
    return tangents


def _hermite(points: Sequence[Point], tangents: Sequence[Point]) -> str:
    p0, t0 = points[0], tangents[0]
    p, t = points[1], tangents[1]
    path = [
        f"C{_point(p0[0] + t0[0], p0[1] + t0[1])},"
        f"{_point(p[0] - t[0], p[1] - t[1])},{_point(*p)}"
    ]
    for p, t in zip(points[2:], tangents[2:]):
        path.append(f"S{_point(p[0] - t[0], p[1] - t[1])},{_point(*p)}")
    return ''.join(path)


def monotone_path(points: Sequence[Point]) -> Optional[str]:
    """
    Build SVG path data through points using monotone interpolation.

    Returns None for no points; one or two points give straight segments.
    """
    if not points:
        return None
    if len(points) < 3:
        return 'M' + 'L'.join(_point(*p) for p in points)
    return 'M' + _point(*points[0]) + _hermite(points, _monotone_tangents(points))


def render_line(series: Series, x_scale: TimeScale, y_scale: LinearScale) -> Optional[str]:
    """
    Path data for one series: a single continuous path over its defined samples.

    Example:
        A series with counts 5, None, 7 yields a path through the first and
        third samples only, with no move-to in between.
    """
    points = [(x_scale(s.date), y_scale(s.count)) for s in series.defined_values]
    logger.debug(f"Line {series.name}: {len(points)} of {len(series.values)} samples defined")
    return monotone_path(points)


def render_points(series: Series, x_scale: TimeScale, y_scale: LinearScale) -> List[Marker]:
    """One marker per sample; null samples sit on the baseline and are not painted."""
    baseline = y_scale.range[0]
    return [
        Marker(
            series_name=series.name,
            index=i,
            sample=sample,
            cx=x_scale(sample.date),
            cy=y_scale(sample.count) if sample.defined else baseline,
            color=series.color,
        )
        for i, sample in enumerate(series.values)
    ]


def line_label(series: Series, x_scale: TimeScale, y_scale: LinearScale) -> Optional[LineLabel]:
    """Anchor for the series name at the end of its line (last defined sample)."""
    defined = series.defined_values
    if not defined:
        return None
    last = defined[-1]
    return LineLabel(
        series_name=series.name,
        date=last.date,
        x=x_scale(last.date),
        y=y_scale(last.count),
    )
