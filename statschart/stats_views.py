"""
Stats chart views.

Each view pairs a stats API endpoint with the localized labels of its
chart. A StatsChartPage keeps the selected date range and re-renders its
chart whenever a new range is submitted.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from statschart.config import API_BASE, ChartConfig, ChartLabels
from statschart.services.data_fetcher import build_stats_url, recent_time_delta
from statschart.validators import parse_sample_date

logger = logging.getLogger(__name__)


def _identity(message: str) -> str:
    return message


@dataclass(frozen=True)
class StatsView:
    """A stats chart: endpoint plus untranslated labels."""

    slug: str
    title: str
    tooltip_value: str
    y_axis: str
    interval: str = 'day'
    width: int = 950
    height: int = 440

    def labels(self, gettext: Callable[[str], str] = _identity) -> ChartLabels:
        return ChartLabels(y_axis=gettext(self.y_axis), tooltip_value=gettext(self.tooltip_value))


TOTAL_VISITS = StatsView(
    slug='total_visits',
    title='Total Visits',
    tooltip_value='Visits',
    y_axis='Number of Visits',
    width=790,
    height=400,
)
TOTAL_DEVELOPERS = StatsView(
    slug='total_developers',
    title='Total Developers',
    tooltip_value='Developers',
    y_axis='Number of Developers',
)
APPS_AVAILABLE_BY_TYPE = StatsView(
    slug='apps_available_by_type',
    title='Total Apps by App Type',
    tooltip_value='Apps',
    y_axis='Number of Apps',
)

VIEWS: Dict[str, StatsView] = {
    view.slug: view for view in (TOTAL_VISITS, TOTAL_DEVELOPERS, APPS_AVAILABLE_BY_TYPE)
}


class StatsChartPage:
    """
    One stats page: a container, a controller and the selected date range.

    Args:
        view: The StatsView to chart
        controller: ChartController to render with (its labels should come
            from view.labels())
        container: ChartContainer the chart mounts into
        base_url: Stats API base URL
        today: Optional override of today's date for the default range
    """

    def __init__(self, view: StatsView, controller, container, *,
                 base_url: str = API_BASE, today=None):
        self.view = view
        self.controller = controller
        self.container = container
        self.base_url = base_url
        default_range = recent_time_delta(today)
        self.start: str = default_range['start']
        self.end: str = default_range['end']
        self.future = None

    def data_url(self) -> str:
        return build_stats_url(
            self.view.slug,
            {'start': self.start, 'end': self.end, 'interval': self.view.interval},
            base_url=self.base_url,
        )

    def config(self) -> ChartConfig:
        return ChartConfig(
            container=self.container,
            width=self.view.width,
            height=self.view.height,
            data_url=self.data_url(),
        )

    def show(self):
        """Render the chart for the current range; returns the render future."""
        self.future = self.controller.render(self.config())
        return self.future

    def submit_range(self, start: Optional[str], end: Optional[str]):
        """
        Switch to a new date range and re-render; returns the render future.

        Raises:
            ValueError: If start or end is not a YYYY-MM-DD date
        """
        for value in (start, end):
            if value:
                parse_sample_date(value)
        self.start = start or ''
        self.end = end or ''
        logger.info(f"{self.view.slug}: date range changed to {self.start}..{self.end}")
        self.future = self.controller.re_render(self.config())
        return self.future
