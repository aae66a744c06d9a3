"""
Tooltip and legend behaviour for a drawn chart.

Every handler is bound to an explicit context object (the marker or legend
entry it serves) with functools.partial, so a handler never depends on a
loop variable that has moved on by the time the event fires.

All state here is presentation state: toggling a series hides its group
of elements and flips its legend entry, but the Series data is untouched.
"""

import logging
from dataclasses import dataclass
from functools import partial
from typing import Callable, Dict, Mapping, Optional, Sequence, Tuple

from markupsafe import Markup

from statschart.dom import Element, Event
from statschart.paths import Marker
from statschart.series_model import LegendEntry

logger = logging.getLogger(__name__)

TOOLTIP_OFFSET = (95, 130)
TOOLTIP_OPACITY = 0.9
FADE_IN_MS = 200
FADE_OUT_MS = 500
LINE_WIDTH = '1.5px'
HIGHLIGHT_WIDTH = '2.5px'


@dataclass(frozen=True)
class MarkerContext:
    marker: Marker
    element: Element
    format_date: Callable
    value_label: str


@dataclass(frozen=True)
class LegendContext:
    entry: LegendEntry
    link: Element
    group: Element


class Tooltip:
    """
    The floating tooltip box.

    States: 'idle' (faded out) and 'hovered' (faded in over a marker).
    Fades are recorded as a target opacity plus a transition duration.
    """

    IDLE = 'idle'
    HOVERED = 'hovered'

    def __init__(self, element: Element):
        self.element = element
        self.state = self.IDLE
        self.element.style['opacity'] = '0'

    @property
    def visible(self) -> bool:
        return self.state == self.HOVERED

    def show(self, html: Markup, border_color: str, pointer: Tuple[float, float]) -> None:
        self.state = self.HOVERED
        self.element.html = html
        self.element.style.update({
            'transition': f'opacity {FADE_IN_MS}ms',
            'opacity': str(TOOLTIP_OPACITY),
            'border': f'2px solid {border_color}',
            'left': f'{pointer[0] + TOOLTIP_OFFSET[0]:g}px',
            'top': f'{pointer[1] + TOOLTIP_OFFSET[1]:g}px',
        })

    def hide(self) -> None:
        self.state = self.IDLE
        self.element.style.update({
            'transition': f'opacity {FADE_OUT_MS}ms',
            'opacity': '0',
        })


def tooltip_html(format_date: Callable, value_label: str, marker: Marker) -> Markup:
    return Markup('<p class="timeinfo">{}</p><b>{}:</b> {}').format(
        format_date(marker.sample.date), value_label, _format_count(marker.sample.count)
    )


def _format_count(count) -> str:
    if isinstance(count, float) and count.is_integer():
        return str(int(count))
    return str(count)


class InteractionLayer:
    """Binds tooltip and legend handlers to a drawn chart."""

    def __init__(self, tooltip: Tooltip):
        self.tooltip = tooltip
        self.legend: Dict[str, LegendContext] = {}

    # Tooltip
    def attach_tooltip(self, markers: Sequence[Tuple[Element, Marker]],
                       format_date: Callable, value_label: str) -> None:
        """
        Show the tooltip while the pointer is over a marker.

        Args:
            markers: (element, marker) pairs, one per sample
            format_date: Formats the sample date for the tooltip's first line
            value_label: Localized name of the value ("Visits", "Apps", ...)
        """
        for element, marker in markers:
            ctx = MarkerContext(marker, element, format_date, value_label)
            element.on('mouseover', partial(self._on_marker_over, ctx))
            element.on('mouseout', partial(self._on_marker_out, ctx))

    def _on_marker_over(self, ctx: MarkerContext, event: Event) -> None:
        # Unpainted markers (null samples) cannot be hovered
        if not ctx.marker.visible:
            return
        html = tooltip_html(ctx.format_date, ctx.value_label, ctx.marker)
        self.tooltip.show(html, ctx.marker.color, event.pointer)

    def _on_marker_out(self, ctx: MarkerContext, event: Event) -> None:
        if not ctx.marker.visible:
            return
        self.tooltip.hide()

    # Legend
    def attach_legend(self, legend_entries: Sequence[LegendEntry],
                      groups_by_name: Mapping[str, Element],
                      legend: Element) -> Dict[str, Element]:
        """
        Add one link per legend entry and wire its click and hover handlers.

        Click toggles the series group's visibility and the link's 'hidden'
        class. Hovering only thickens the series line.

        Returns:
            Mapping of series name to its legend link.
        """
        links = {}
        for entry in legend_entries:
            link = legend.append('a', {'href': '#', 'id': entry.name}, text=entry.name)
            link.style['color'] = entry.color
            ctx = LegendContext(entry, link, groups_by_name[entry.name])
            link.on('click', partial(self._on_legend_click, ctx))
            link.on('mouseover', partial(self._on_legend_over, ctx))
            link.on('mouseleave', partial(self._on_legend_leave, ctx))
            self.legend[entry.name] = ctx
            links[entry.name] = link
        return links

    def _on_legend_click(self, ctx: LegendContext, event: Event) -> None:
        event.prevent_default()
        ctx.entry.visible = ctx.group.toggle_display()
        ctx.link.toggle_class('hidden')
        logger.debug(f"Legend: series {ctx.entry.name} visible={ctx.entry.visible}")

    def _on_legend_over(self, ctx: LegendContext, event: Event) -> None:
        self._set_line_width(ctx.group, HIGHLIGHT_WIDTH)

    def _on_legend_leave(self, ctx: LegendContext, event: Event) -> None:
        self._set_line_width(ctx.group, LINE_WIDTH)

    @staticmethod
    def _set_line_width(group: Element, width: str) -> None:
        line: Optional[Element] = group.find('path', 'line')
        if line is not None:
            line.style['stroke-width'] = width

    # Convenience for hosts driving the chart programmatically
    def toggle_series(self, name: str) -> bool:
        """Click the legend entry for `name`; returns the series' new visibility."""
        ctx = self.legend[name]
        ctx.link.dispatch('click')
        return ctx.entry.visible
