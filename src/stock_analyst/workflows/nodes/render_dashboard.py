"""LangGraph node responsible for the HTML dashboard."""
from __future__ import annotations

from stock_analyst.workflows.context import WorkflowContext
from stock_analyst.workflows.state import AnalysisState


def run(state: AnalysisState, context: WorkflowContext) -> AnalysisState:
    logs = state.setdefault("logs", [])
    errors = state.setdefault("errors", [])

    logs.append("DashboardRenderer -> render HTML output")
    try:
        state["html_report"] = context.renderer.render(state["report"], chart_png=state.get("chart_png"))
    except Exception as exc:  # pylint: disable=broad-except
        state["html_report"] = None
        errors.append(f"HTML render failed: {exc}")
    return state
