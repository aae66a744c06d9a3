"""
Minimal element tree the chart is drawn into.

Elements carry attributes, inline style, CSS classes, child elements and
event handlers, and serialize to SVG/HTML markup. ChartContainer is the
host region a chart mounts into: it can be emptied, populated and torn
down, which is all the chart pipeline needs from a page.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from markupsafe import Markup, escape

logger = logging.getLogger(__name__)

_container_ids = itertools.count(1)


@dataclass
class Event:
    """A pointer event dispatched to an element."""

    type: str
    target: 'Element'
    pointer: Tuple[float, float] = (0.0, 0.0)
    default_prevented: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True


class Element:
    """A node of the chart's element tree."""

    def __init__(self, tag: str, attrs: Optional[Dict[str, Any]] = None, *,
                 classes: Optional[List[str]] = None, text: Optional[str] = None):
        self.tag = tag
        self.attrs: Dict[str, Any] = dict(attrs or {})
        self.style: Dict[str, str] = {}
        self.classes: List[str] = list(classes or [])
        self.children: List['Element'] = []
        self.text = text
        self.html: Optional[Markup] = None
        self.parent: Optional['Element'] = None
        self.handlers: Dict[str, List[Callable[[Event], None]]] = {}

    def __repr__(self):
        return f"<Element {self.tag} classes={self.classes!r}>"

    def append(self, tag: str, attrs: Optional[Dict[str, Any]] = None, **kwargs) -> 'Element':
        """Create a child element and return it."""
        child = Element(tag, attrs, **kwargs)
        return self.append_child(child)

    def append_child(self, child: 'Element') -> 'Element':
        child.parent = self
        self.children.append(child)
        return child

    # Classes
    def has_class(self, name: str) -> bool:
        return name in self.classes

    def add_class(self, name: str) -> None:
        if name not in self.classes:
            self.classes.append(name)

    def remove_class(self, name: str) -> None:
        if name in self.classes:
            self.classes.remove(name)

    def toggle_class(self, name: str) -> bool:
        """Flip a class; returns True when the class is now present."""
        if self.has_class(name):
            self.remove_class(name)
            return False
        self.add_class(name)
        return True

    # Visibility
    @property
    def displayed(self) -> bool:
        return self.style.get('display') != 'none'

    def toggle_display(self) -> bool:
        """Show a hidden element or hide a shown one; returns the new state."""
        if self.displayed:
            self.style['display'] = 'none'
            return False
        self.style.pop('display', None)
        return True

    # Events
    def on(self, event_type: str, handler: Callable[[Event], None]) -> None:
        self.handlers.setdefault(event_type, []).append(handler)

    def dispatch(self, event_type: str, pointer: Tuple[float, float] = (0.0, 0.0)) -> Event:
        """Run this element's handlers for event_type and return the event."""
        event = Event(event_type, self, pointer)
        for handler in self.handlers.get(event_type, []):
            handler(event)
        return event

    # Traversal
    def iter(self) -> Iterator['Element']:
        """Depth-first iteration over this element and its descendants."""
        yield self
        for child in self.children:
            yield from child.iter()

    def find_all(self, tag: Optional[str] = None, *classes: str) -> List['Element']:
        return [
            el for el in self.iter()
            if (tag is None or el.tag == tag) and all(el.has_class(c) for c in classes)
        ]

    def find(self, tag: Optional[str] = None, *classes: str) -> Optional['Element']:
        found = self.find_all(tag, *classes)
        return found[0] if found else None

    # Markup
    def to_markup(self) -> Markup:
        parts = [f'<{self.tag}']
        attrs = dict(self.attrs)
        if self.classes:
            attrs['class'] = ' '.join(self.classes)
        if self.style:
            attrs['style'] = '; '.join(f'{k}: {v}' for k, v in self.style.items())
        for key, value in attrs.items():
            if value is None:
                continue
            parts.append(f' {key}="{escape(value)}"')
        parts.append('>')

        if self.html is not None:
            parts.append(str(self.html))
        elif self.text is not None:
            parts.append(str(escape(self.text)))
        for child in self.children:
            parts.append(str(child.to_markup()))

        parts.append(f'</{self.tag}>')
        return Markup(''.join(parts))


class ChartContainer:
    """
    Host region for one chart.

    The container is cleared before every render pass and only receives new
    elements once a pass has fully built its chart. A torn-down container
    is no longer alive and refuses new content.
    """

    def __init__(self, container_id: str = 'chart'):
        self.container_id = container_id
        self.uid = next(_container_ids)
        self.children: List[Element] = []
        self.chart: Any = None
        self.cloaked = False
        self.error: Optional[str] = None
        self.alive = True
        self.revision = 0

    def __repr__(self):
        return f"<ChartContainer #{self.container_id} uid={self.uid}>"

    def empty(self) -> None:
        """Remove all content, including any error message and empty-state cloak."""
        self.children = []
        self.chart = None
        self.cloaked = False
        self.error = None
        self.revision += 1
        logger.debug(f"Container {self.container_id}: emptied (revision {self.revision})")

    def mount(self, chart) -> None:
        """Populate the container with a drawn chart."""
        if not self.alive:
            raise RuntimeError(f"Container {self.container_id} has been torn down")
        self.children = list(chart.elements)
        self.chart = chart
        self.cloaked = chart.empty
        self.revision += 1
        logger.debug(f"Container {self.container_id}: mounted chart (revision {self.revision})")

    def fail(self, message: str) -> None:
        self.error = message

    def teardown(self) -> None:
        self.empty()
        self.alive = False
        logger.info(f"Container {self.container_id}: torn down")

    def iter(self) -> Iterator[Element]:
        for child in self.children:
            yield from child.iter()

    def to_html(self) -> Markup:
        inner = Markup('').join(child.to_markup() for child in self.children)
        return Markup('<div id="{}">{}</div>').format(self.container_id, inner)
