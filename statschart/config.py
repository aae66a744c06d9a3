"""
Chart configuration and environment-driven settings.

Settings are read once from the environment (optionally populated from a
.env file). Per-render configuration lives in the immutable ChartConfig;
starting a new render pass means building a new ChartConfig, never
mutating a live one.
"""

import os
from dataclasses import dataclass, replace
from typing import Any, Dict, Tuple

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

API_BASE = os.getenv('STATSCHART_API_BASE', 'http://localhost:5000/api/v1/')
DEFAULT_DATA_URL = os.getenv(
    'STATSCHART_DATA_URL',
    'http://localhost:5000/api/v1/apps/bah/statistics/'
)
FETCH_TIMEOUT = float(os.getenv('STATSCHART_FETCH_TIMEOUT', 10))
MAX_WORKERS = int(os.getenv('STATSCHART_MAX_WORKERS', 2))

if FETCH_TIMEOUT <= 0:
    raise ValueError("STATSCHART_FETCH_TIMEOUT must be positive")
if MAX_WORKERS <= 0:
    raise ValueError("STATSCHART_MAX_WORKERS must be positive")

# Space between the plot area and the outer svg box (top, right, bottom, left)
MARGIN: Dict[str, int] = {'top': 20, 'right': 30, 'bottom': 40, 'left': 50}


@dataclass(frozen=True)
class ChartLabels:
    """Localized strings drawn into the chart."""

    y_axis: str = ''
    tooltip_value: str = ''
    no_data: str = 'Not enough data to display this chart.'


@dataclass(frozen=True)
class ChartConfig:
    """
    Options for a single render pass.

    Attributes:
        container: ChartContainer the chart is mounted into.
        width: Outer svg width in pixels (margins included).
        height: Outer svg height in pixels (margins included).
        force_zero_min: Start the value axis at 0 instead of the data minimum.
        line_labels: Append the series name to the end of each line.
        tick_padding: Distance between axes and their tick labels (px).
        data_url: Endpoint returning the series payload.
    """

    container: Any
    width: int = 950
    height: int = 440
    force_zero_min: bool = True
    line_labels: bool = False
    tick_padding: int = 8
    data_url: str = DEFAULT_DATA_URL

    @property
    def plot_size(self) -> Tuple[int, int]:
        """Width and height of the plot area inside the margins."""
        return (
            self.width - MARGIN['left'] - MARGIN['right'],
            self.height - MARGIN['top'] - MARGIN['bottom'],
        )

    def with_options(self, **changes) -> 'ChartConfig':
        """Return a new config for the next render pass."""
        return replace(self, **changes)
