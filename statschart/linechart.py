"""
Marketplace stats line chart.

Draws a ChartModel into a detached element tree: an svg with both axes and
one group per series (markers plus line), a tooltip box, and a legend of
the non-empty series. When nothing can be plotted the chart is reduced to
an empty svg plus the "insufficient data" cloak.

Each series is drawn into its own "graphline" group so the legend can hide
it as a unit.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from markupsafe import Markup

from statschart.config import MARGIN, ChartConfig, ChartLabels
from statschart.dom import Element
from statschart.interaction import LINE_WIDTH, InteractionLayer, Tooltip
from statschart.paths import LABEL_OFFSET, MARKER_RADIUS, Marker, line_label, render_line, render_points
from statschart.scales import Scales, build_scales, format_coord, format_tooltip_date
from statschart.series_model import ChartModel

logger = logging.getLogger(__name__)

SVG_NS = 'http://www.w3.org/2000/svg'
LEGEND_OFFSET = 45


@dataclass
class DrawnChart:
    """The elements and interaction handles produced by one render pass."""

    model: ChartModel
    svg: Element
    tooltip: Tooltip
    interaction: InteractionLayer
    scales: Optional[Scales] = None
    legend: Optional[Element] = None
    cloak: Optional[Element] = None
    groups: Dict[str, Element] = field(default_factory=dict)
    markers: Dict[str, List[Tuple[Element, Marker]]] = field(default_factory=dict)
    legend_links: Dict[str, Element] = field(default_factory=dict)

    @property
    def empty(self) -> bool:
        """Empty-state flag: nothing renderable, the host should show the cloak."""
        return self.model.is_empty

    @property
    def elements(self) -> List[Element]:
        return [el for el in (self.svg, self.tooltip.element, self.legend, self.cloak) if el is not None]

    def to_svg(self) -> Markup:
        return self.svg.to_markup()


def _draw_series(plot: Element, series, scales: Scales, line_labels: bool
                 ) -> Tuple[Element, List[Tuple[Element, Marker]]]:
    group = plot.append('g', {'data-series': series.name}, classes=['graphline', series.name])

    markers = []
    for marker in render_points(series, scales.x_scale, scales.y_scale):
        circle = group.append('circle', {
            'r': MARKER_RADIUS,
            'cx': format_coord(marker.cx),
            'cy': format_coord(marker.cy),
            'data-index': marker.index,
        }, classes=[series.name])
        circle.style['fill'] = marker.color
        if not marker.visible:
            circle.style['opacity'] = '0'
            circle.style['pointer-events'] = 'none'
        markers.append((circle, marker))

    path = group.append('path', {'d': render_line(series, scales.x_scale, scales.y_scale)},
                        classes=['line'])
    path.style['stroke'] = series.color
    path.style['stroke-width'] = LINE_WIDTH

    if line_labels:
        label = line_label(series, scales.x_scale, scales.y_scale)
        if label is not None:
            group.append('text', {
                'transform': f'translate({format_coord(label.x)},{format_coord(label.y)})',
                'x': LABEL_OFFSET,
                'dy': '3px',
            }, text=series.name)

    return group, markers


def draw_chart(model: ChartModel, config: ChartConfig, labels: ChartLabels) -> DrawnChart:
    """
    Draw one chart from a fully built model.

    Nothing is attached to the container here; the caller commits the
    returned elements once it knows the render pass is still wanted.

    Args:
        model: Series and domains for this pass
        config: Dimensions and drawing options
        labels: Localized axis, tooltip and empty-state strings

    Returns:
        DrawnChart with the svg, tooltip, legend and interaction handlers wired.
    """
    width, height = config.plot_size

    svg = Element('svg', {'xmlns': SVG_NS, 'width': config.width, 'height': config.height})
    plot = svg.append('g', {'transform': f"translate({MARGIN['left']},{MARGIN['top']})"})
    tooltip = Tooltip(Element('div', classes=['tooltip']))
    chart = DrawnChart(model=model, svg=svg, tooltip=tooltip, interaction=InteractionLayer(tooltip))

    if model.is_empty:
        logger.info("No renderable series, drawing the empty state")
        chart.cloak = Element('div', classes=['chartcloak'], text=labels.no_data)
        return chart

    scales = build_scales(model.date_extent, model.value_extent, width, height,
                          config.tick_padding, y_label=labels.y_axis)
    chart.scales = scales
    scales.x_axis.draw(plot.append('g', {'transform': f'translate(0,{height})'}, classes=['x', 'axis']))
    scales.y_axis.draw(plot.append('g', classes=['y', 'axis']))

    for series in model.series:
        group, markers = _draw_series(plot, series, scales, config.line_labels)
        chart.groups[series.name] = group
        chart.markers[series.name] = markers

    all_markers = [pair for pairs in chart.markers.values() for pair in pairs]
    chart.interaction.attach_tooltip(all_markers, format_tooltip_date, labels.tooltip_value)

    chart.legend = Element('div', classes=['legend'])
    chart.legend.style['top'] = f'{height + LEGEND_OFFSET}px'
    chart.legend_links = chart.interaction.attach_legend(model.legend_entries, chart.groups, chart.legend)

    logger.info(f"Drew {len(chart.groups)} series, {len(model.legend_entries)} in legend")
    return chart
