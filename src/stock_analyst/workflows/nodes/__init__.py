"""Convenience re-exports for workflow nodes."""
from __future__ import annotations

from . import (
    chart_builder,
    parse_response,
    query_model,
    render_dashboard,
    request,
)

__all__ = [
    "chart_builder",
    "parse_response",
    "query_model",
    "render_dashboard",
    "request",
]
