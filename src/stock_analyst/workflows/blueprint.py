"""Workflow blueprint describing pipeline stages and their handlers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, TYPE_CHECKING

from stock_analyst.workflows.nodes import (
    chart_builder,
    parse_response,
    query_model,
    render_dashboard,
    request,
)

if TYPE_CHECKING:
    from stock_analyst.workflows.context import WorkflowContext
    from stock_analyst.workflows.state import AnalysisState


@dataclass
class StageSpec:
    """Single LangGraph stage definition."""

    key: str
    description: str
    handler: Callable[["AnalysisState", "WorkflowContext"], "AnalysisState"]


def build_default_stages() -> List[StageSpec]:
    """Return the ordered stages for the analysis workflow."""
    return [
        StageSpec(
            key="build_request",
            description="Assemble the schema instruction and dated per-ticker prompt.",
            handler=request.run,
        ),
        StageSpec(
            key="query_model",
            description="Call Gemini with web search enabled; collect text and citations.",
            handler=query_model.run,
        ),
        StageSpec(
            key="parse_response",
            description="Extract the fenced JSON block and validate it into a report.",
            handler=parse_response.run,
        ),
        StageSpec(
            key="chart_builder",
            description="Render the close-price area chart (matplotlib).",
            handler=chart_builder.run,
        ),
        StageSpec(
            key="render_dashboard",
            description="Render the HTML dashboard from the validated report.",
            handler=render_dashboard.run,
        ),
    ]
