#!/usr/bin/env python3
"""
Helper script to render a stats line chart to an SVG file.

Usage:
    python -m statschart._render_svg <data_url> <y_axis_label> <tooltip_label> [<output_filename>]

If <output_filename> is not provided, a sanitized, unique name derived from
the y-axis label is used in the current working directory. The svg holds
the static chart only; tooltip and legend behaviour need a host page.
"""
import logging
import sys
import uuid
from pathlib import Path

from statschart.config import ChartConfig, ChartLabels
from statschart.dom import ChartContainer
from statschart.services.chart_service import ChartController
from statschart.validators import sanitize_filename


def _configure_logging():
    root = logging.getLogger('statschart')
    root.setLevel(logging.INFO)
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stdout)
        handler.setLevel(logging.INFO)
        handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s: %(message)s'))
        root.addHandler(handler)


def main(argv):
    if len(argv) < 3:
        print("Insufficient arguments", file=sys.stderr)
        return 2

    data_url = argv[0]
    labels = ChartLabels(y_axis=argv[1], tooltip_value=argv[2])
    output_filename = argv[3] if len(argv) > 3 else sanitize_filename(argv[1], uuid.uuid4().hex)

    _configure_logging()
    controller = ChartController(labels)
    try:
        container = ChartContainer('chart')
        outcome = controller.render(ChartConfig(container=container, data_url=data_url)).result()
        if outcome.empty:
            print(labels.no_data, file=sys.stderr)
        Path(output_filename).write_text(str(outcome.chart.to_svg()), encoding='utf-8')
        print(output_filename)
        return 0
    except Exception as e:
        print(f"Error rendering SVG: {e}", file=sys.stderr)
        return 3
    finally:
        controller.shutdown()


def cli():
    sys.exit(main(sys.argv[1:]))


if __name__ == '__main__':
    cli()
