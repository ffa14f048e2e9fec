"""Spans around the workflow's outbound calls.

Generation and submission each run inside an ``operation_span`` so they show
up as parents of the agent/LLM spans Strands creates. Without a configured
exporter the OpenTelemetry API hands out non-recording spans.
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

logger = logging.getLogger(__name__)

TRACER_NAME = "webprod.workflow"


def get_tracer() -> trace.Tracer:
    return trace.get_tracer(TRACER_NAME)


@contextmanager
def operation_span(name: str, **attributes: Any) -> Generator[trace.Span, None, None]:
    """Run a block inside a span named ``operation:{name}``.

    Exceptions are recorded on the span and re-raised.

    Example:
        with operation_span("generate", item_count=5) as span:
            issue = generator.generate(request)
            span.set_attribute("summary_length", len(issue.summary))
    """
    span_attributes = {f"operation.{key}": value for key, value in attributes.items()}

    with get_tracer().start_as_current_span(
        name=f"operation:{name}",
        attributes=span_attributes,
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
        except Exception as e:
            record_error(span, e)
            raise
        span.set_status(Status(StatusCode.OK))


def record_error(span: trace.Span, error: Exception) -> None:
    """Record an exception and mark the span as failed."""
    span.record_exception(error)
    span.set_status(Status(StatusCode.ERROR, str(error)))
    span.set_attribute("error.type", type(error).__name__)
