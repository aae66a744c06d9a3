"""
Chart controller service.

Owns the render pipeline for chart containers: every render() call clears
the container, starts a new render pass in a thread pool and returns a
future for its outcome. Passes are numbered; only the most recent pass for a
container may draw (last call wins), so a slow fetch from an earlier date
range can never overwrite a newer chart. Containers do not affect each
other: one controller can drive several charts on a page.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Tuple

from statschart.config import MAX_WORKERS, ChartConfig, ChartLabels
from statschart.linechart import draw_chart
from statschart.series_model import build_model
from statschart.services.data_fetcher import fetch_series_payload
from statschart.services.render_jobs import ChartRenderError, RenderOutcome, render_pass_job
from statschart.validators import validate_chart_config

logger = logging.getLogger(__name__)

__all__ = [
    "ChartController",
    "ChartRenderError",
    "RenderOutcome",
    "RenderPassStore",
]


class RenderPassStore:
    """Thread-safe in-memory record of render passes with automatic expiration (TTL)."""

    def __init__(self, retention_minutes=60):
        """
        Initialize pass store.

        Args:
            retention_minutes: How long to keep finished passes in memory
        """
        self.passes: Dict[int, Dict[str, Any]] = {}
        self.retention_seconds = retention_minutes * 60
        self.lock = threading.Lock()

    def add(self, generation, container_id, data_url):
        with self.lock:
            self.passes[generation] = {
                'status': 'pending',
                'container_id': container_id,
                'data_url': data_url,
                'empty': None,
                'error': None,
                'created_at': datetime.now(),
            }
        logger.debug(f"Render pass {generation}: queued for {data_url}")

    def get(self, generation):
        """Retrieve a pass record, removing it if expired."""
        with self.lock:
            record = self.passes.get(generation)
            if record and self._is_expired(record):
                del self.passes[generation]
                return None
            return record

    def update(self, generation, updates):
        """Update pass fields atomically within lock."""
        with self.lock:
            if generation in self.passes:
                self.passes[generation].update(updates)
                if 'status' in updates:
                    logger.debug(f"Render pass {generation}: status updated to '{updates['status']}'")

    def _is_expired(self, record):
        age = (datetime.now() - record['created_at']).total_seconds()
        return age > self.retention_seconds

    def cleanup_expired(self):
        """Remove all expired pass records."""
        with self.lock:
            expired = [g for g, record in self.passes.items() if self._is_expired(record)]
            for generation in expired:
                del self.passes[generation]
            return len(expired)


class ChartController:
    """
    Renders line charts into containers, one pass at a time.

    Args:
        labels: Localized chart strings
        fetch_fn: Callable(url) -> raw payload (defaults to an HTTP GET)
        executor: Optional executor; a private thread pool is created otherwise

    Example:
        >>> controller = ChartController(ChartLabels(y_axis='Number of Visits', tooltip_value='Visits'))
        >>> future = controller.render(ChartConfig(container=ChartContainer('chart')))
        >>> future.result().status
        'done'
    """

    def __init__(self, labels: ChartLabels, *,
                 fetch_fn: Callable[[str], Any] = fetch_series_payload,
                 executor: Optional[ThreadPoolExecutor] = None):
        self.labels = labels
        self.fetch_fn = fetch_fn
        self.executor = executor or ThreadPoolExecutor(max_workers=MAX_WORKERS)
        self._owns_executor = executor is None
        self.passes = RenderPassStore()
        self._lock = threading.Lock()
        self._generation = 0
        # container uid -> newest pass number, and that pass's future
        self._latest: Dict[int, int] = {}
        self._pending: Dict[int, Tuple[int, Future]] = {}

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def render(self, config: ChartConfig) -> 'Future[RenderOutcome]':
        """
        Start a render pass for config.

        The container is emptied immediately; the new chart is mounted only
        once it has been fully built. Any pass still in flight for the same
        container is cancelled if it has not started yet and ignored
        otherwise. Passes for other containers are left alone.

        Returns:
            Future resolving to a RenderOutcome, or failing with the pass's
            error (DataFetchError, PayloadError, ChartRenderError).

        Raises:
            ValueError: If config has invalid dimensions or no data URL
        """
        validate_chart_config(config)

        container = config.container
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._latest[container.uid] = generation
            previous = self._pending.pop(container.uid, None)
            container.empty()

        if previous is not None:
            previous_generation, previous_future = previous
            if previous_future.cancel():
                logger.info(f"Render pass {previous_generation}: cancelled before it started")
                self.passes.update(previous_generation, {'status': 'superseded'})

        self.passes.cleanup_expired()
        self.passes.add(generation, container.container_id, config.data_url)

        future = self.executor.submit(
            render_pass_job,
            generation,
            config,
            labels=self.labels,
            fetch_fn=self.fetch_fn,
            model_fn=build_model,
            draw_fn=draw_chart,
            is_current_fn=self.is_current,
            commit_fn=self._commit,
            fail_fn=self._fail,
            pass_store=self.passes,
        )
        with self._lock:
            if self._latest.get(container.uid) == generation and not future.done():
                self._pending[container.uid] = (generation, future)
        logger.info(f"Render pass {generation}: queued for {config.data_url}")
        return future

    def re_render(self, new_config: ChartConfig) -> 'Future[RenderOutcome]':
        """Render again with a new config (e.g. a new date range); same as render()."""
        return self.render(new_config)

    def is_current(self, generation: int, container) -> bool:
        with self._lock:
            return self._is_current_locked(generation, container)

    def _is_current_locked(self, generation, container) -> bool:
        return self._latest.get(container.uid) == generation and container.alive

    def _commit(self, generation, container, chart) -> bool:
        with self._lock:
            if not self._is_current_locked(generation, container):
                return False
            container.mount(chart)
            return True

    def _fail(self, generation, container, message) -> None:
        with self._lock:
            if self._is_current_locked(generation, container):
                container.fail(message)

    def shutdown(self, wait: bool = True) -> None:
        """Shut down the private thread pool, if this controller created one."""
        if self._owns_executor:
            logger.info("Shutting down render thread pool...")
            self.executor.shutdown(wait=wait)
