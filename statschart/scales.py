"""
Scales and axes built from a chart's domains.

Scales are plain functions of their domain and range; a new set is built
for every render pass since the domains change with every payload.
Tick selection follows d3's conventions (1/2/5 linear steps, calendar
time intervals).
"""

import bisect
import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, List, Optional, Sequence, Tuple

from statschart.dom import Element

logger = logging.getLogger(__name__)

TICK_SIZE = 6

# (interval, step, approximate length in days)
_TIME_INTERVALS = (
    ('day', 1, 1),
    ('day', 2, 2),
    ('week', 1, 7),
    ('month', 1, 30),
    ('month', 3, 91),
    ('year', 1, 365),
)


def format_coord(value: float) -> str:
    """Format a pixel coordinate compactly (at most 3 decimals, no trailing zeros)."""
    text = f"{value:.3f}".rstrip('0').rstrip('.')
    return '0' if text in ('-0', '') else text


def format_axis_date(value: date) -> str:
    """Abbreviated month plus space-padded day, e.g. 'Jan  3'."""
    return f"{value:%b} {value.day:>2}"


def format_tooltip_date(value: date) -> str:
    """Weekday, month, day and year, e.g. 'Fri, Jan  3, 2020'."""
    return f"{value:%a, %b} {value.day:>2}, {value.year}"


def _interpolate(t: float, range_: Tuple[float, float]) -> float:
    return range_[0] + t * (range_[1] - range_[0])


def tick_step(start: float, stop: float, count: int) -> float:
    """Step between 'nice' linear ticks: 1, 2 or 5 times a power of ten."""
    span = abs(stop - start)
    step = 10 ** math.floor(math.log10(span / count))
    err = count / span * step
    if err <= .15:
        step *= 10
    elif err <= .35:
        step *= 5
    elif err <= .75:
        step *= 2
    return step


class LinearScale:
    """Maps a numeric domain onto a pixel range."""

    def __init__(self, domain: Tuple[float, float], range_: Tuple[float, float]):
        self.domain = (float(domain[0]), float(domain[1]))
        self.range = (float(range_[0]), float(range_[1]))

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        span = d1 - d0
        # A zero-width domain maps everything onto the start of the range
        t = (float(value) - d0) / span if span else 0.0
        return _interpolate(t, self.range)

    def ticks(self, count: int = 10) -> List[float]:
        lo, hi = sorted(self.domain)
        if hi == lo:
            return [lo]
        step = tick_step(lo, hi, count)
        first, last = math.ceil(lo / step), math.floor(hi / step)
        return [round(i * step, 12) for i in range(first, last + 1)]

    def tick_format(self, count: int = 10) -> Callable[[float], str]:
        lo, hi = sorted(self.domain)
        precision = 0
        if hi != lo:
            precision = max(0, -math.floor(math.log10(tick_step(lo, hi, count)) + .01))
        return lambda value: f"{value:,.{precision}f}"


class TimeScale:
    """Maps a calendar-date domain onto a pixel range, linearly in days."""

    def __init__(self, domain: Tuple[date, date], range_: Tuple[float, float]):
        self.domain = domain
        self.range = (float(range_[0]), float(range_[1]))

    def __call__(self, value: date) -> float:
        d0, d1 = (d.toordinal() for d in self.domain)
        span = d1 - d0
        t = (value.toordinal() - d0) / span if span else 0.0
        return _interpolate(t, self.range)

    def _pick_interval(self, count: int) -> Tuple[str, int]:
        span = (self.domain[1] - self.domain[0]).days
        target = span / count
        durations = [days for _, _, days in _TIME_INTERVALS]
        i = bisect.bisect_right(durations, target)
        if i >= len(_TIME_INTERVALS):
            years = tick_step(self.domain[0].year, self.domain[1].year, count) if span >= 365 * 2 else 1
            return 'year', max(1, int(years))
        if i > 0 and target / durations[i - 1] < durations[i] / target:
            i -= 1
        name, step, _ = _TIME_INTERVALS[i]
        return name, step

    def ticks(self, count: int = 10) -> List[date]:
        start, stop = self.domain
        if start == stop:
            return [start]
        interval, step = self._pick_interval(count)

        ticks = []
        current = start
        while current <= stop:
            if interval == 'day' and (current.day - 1) % step == 0:
                ticks.append(current)
            elif interval == 'week' and current.weekday() == 6:
                ticks.append(current)
            elif interval == 'month' and current.day == 1 and (current.month - 1) % step == 0:
                ticks.append(current)
            elif interval == 'year' and current.month == 1 and current.day == 1 \
                    and current.year % step == 0:
                ticks.append(current)
            current += timedelta(days=1)
        return ticks


@dataclass
class Axis:
    """An axis generator: a scale plus the way its ticks are drawn."""

    scale: object
    orient: str
    tick_padding: int
    tick_format: Callable
    label: Optional[str] = None

    def ticks(self) -> Sequence:
        return self.scale.ticks()

    def draw(self, parent: Element) -> Element:
        """Append the axis markup (domain line, ticks, optional label) to parent."""
        horizontal = self.orient == 'bottom'
        r0, r1 = self.scale.range

        for tick in self.ticks():
            pos = format_coord(self.scale(tick))
            if horizontal:
                group = parent.append('g', {'transform': f'translate({pos},0)'}, classes=['tick'])
                group.append('line', {'y2': TICK_SIZE, 'x2': 0})
                group.append('text', {
                    'y': TICK_SIZE + self.tick_padding,
                    'x': 0,
                    'dy': '.71em',
                    'text-anchor': 'middle',
                }, text=self.tick_format(tick))
            else:
                group = parent.append('g', {'transform': f'translate(0,{pos})'}, classes=['tick'])
                group.append('line', {'x2': -TICK_SIZE, 'y2': 0})
                group.append('text', {
                    'x': -(TICK_SIZE + self.tick_padding),
                    'y': 0,
                    'dy': '.32em',
                    'text-anchor': 'end',
                }, text=self.tick_format(tick))

        if horizontal:
            d = f'M{format_coord(r0)},{TICK_SIZE}V0H{format_coord(r1)}V{TICK_SIZE}'
        else:
            d = f'M-{TICK_SIZE},{format_coord(r0)}H0V{format_coord(r1)}H-{TICK_SIZE}'
        parent.append('path', {'d': d}, classes=['domain'])

        if self.label:
            label = parent.append('text', {
                'transform': 'rotate(-90)',
                'y': 6,
                'dy': '5px',
            }, text=self.label)
            label.style['text-anchor'] = 'end'
        return parent


@dataclass(frozen=True)
class Scales:
    x_scale: TimeScale
    y_scale: LinearScale
    x_axis: Axis
    y_axis: Axis


def build_scales(date_extent: Tuple[date, date],
                 value_extent: Tuple[float, float],
                 width: int,
                 height: int,
                 tick_padding: int,
                 y_label: str = '') -> Scales:
    """
    Build the x/y scales and axis generators for one render pass.

    Args:
        date_extent: (min, max) date across all series
        value_extent: (min, max) value across all series
        width: Plot area width in pixels
        height: Plot area height in pixels
        tick_padding: Distance between each axis and its tick labels
        y_label: Unit label drawn rotated along the y-axis

    Returns:
        Scales with x mapped to [0, width] and y inverted onto [height, 0].
    """
    x_scale = TimeScale(date_extent, (0, width))
    y_scale = LinearScale(value_extent, (height, 0))
    logger.debug(f"Scales: x={date_extent}->(0, {width}), y={value_extent}->({height}, 0)")

    return Scales(
        x_scale=x_scale,
        y_scale=y_scale,
        x_axis=Axis(x_scale, 'bottom', tick_padding, format_axis_date),
        y_axis=Axis(y_scale, 'left', tick_padding, y_scale.tick_format(), label=y_label),
    )
