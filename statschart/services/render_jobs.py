"""
Render pass handler for background execution.

A render pass is fetch -> model -> draw -> commit. Handlers run in a thread
pool, record progress in the pass store, and check before drawing and again
at commit time that no newer pass has been started in the meantime.
Failures are recorded and then re-raised so the caller's future fails.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from statschart.services.data_fetcher import DataFetchError
from statschart.validators import PayloadError

logger = logging.getLogger(__name__)


class ChartRenderError(Exception):
    """Raised when a chart cannot be drawn from an otherwise valid payload."""
    pass


@dataclass(frozen=True)
class RenderOutcome:
    """
    Result of a render pass.

    Attributes:
        generation: Pass number handed out by the controller
        status: 'done', or 'superseded' when a newer pass took over
        empty: Nothing renderable; the host should show the empty-state message
        chart: The committed DrawnChart ('done' only)
    """

    generation: int
    status: str
    empty: bool = False
    chart: Optional[Any] = None

    @property
    def committed(self) -> bool:
        return self.status == 'done'


def render_pass_job(
    generation: int,
    config,
    *,
    labels,
    fetch_fn,
    model_fn,
    draw_fn,
    is_current_fn,
    commit_fn,
    fail_fn,
    pass_store
) -> RenderOutcome:
    """
    Background worker running one render pass.

    Args:
        generation: Pass number; only the newest pass may draw
        config: ChartConfig for this pass
        labels: ChartLabels for axis/tooltip/empty-state text
        fetch_fn: Callable(url) -> raw payload
        model_fn: Callable(payload, force_zero_min) -> ChartModel
        draw_fn: Callable(model, config, labels) -> DrawnChart
        is_current_fn: Callable(generation, container) -> bool
        commit_fn: Callable(generation, container, chart) -> bool, mounts the
            chart atomically if the pass is still current
        fail_fn: Callable(generation, container, message), records a failure
            on the container if the pass is still current
        pass_store: RenderPassStore instance

    Returns:
        RenderOutcome

    Raises:
        DataFetchError: Endpoint unreachable or erroring
        PayloadError: Malformed payload or dates
        ChartRenderError: Unexpected failure while drawing
    """
    container = config.container
    logger.info(f"Render pass {generation}: started for {container!r}")

    try:
        pass_store.update(generation, {'status': 'running'})

        payload = fetch_fn(config.data_url)
        if not is_current_fn(generation, container):
            logger.info(f"Render pass {generation}: superseded before drawing")
            pass_store.update(generation, {'status': 'superseded'})
            return RenderOutcome(generation, 'superseded')

        model = model_fn(payload, config.force_zero_min)
        logger.info(f"Render pass {generation}: model built, empty={model.is_empty}")

        chart = draw_fn(model, config, labels)

        if not commit_fn(generation, container, chart):
            logger.info(f"Render pass {generation}: superseded at commit")
            pass_store.update(generation, {'status': 'superseded'})
            return RenderOutcome(generation, 'superseded', empty=model.is_empty)

        pass_store.update(generation, {'status': 'done', 'empty': model.is_empty, 'error': None})
        logger.info(f"Render pass {generation}: completed successfully")
        return RenderOutcome(generation, 'done', empty=model.is_empty, chart=chart)

    except (DataFetchError, PayloadError) as e:
        # Expected failures: bad endpoint or bad data
        logger.warning(f"Render pass {generation}: {e}")
        pass_store.update(generation, {'status': 'error', 'error': str(e)})
        fail_fn(generation, container, str(e))
        raise
    except Exception as e:
        logger.exception(f"Render pass {generation}: Unexpected error while rendering")
        pass_store.update(generation, {'status': 'error', 'error': f"Unexpected error: {e}"})
        fail_fn(generation, container, f"Unexpected error: {e}")
        raise ChartRenderError(f"Render pass {generation} failed: {e}") from e
