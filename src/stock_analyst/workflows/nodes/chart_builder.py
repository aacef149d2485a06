"""Chart builder node to render the price chart into state."""
from __future__ import annotations

from stock_analyst.presentation.chart import render_price_chart
from stock_analyst.workflows.context import WorkflowContext
from stock_analyst.workflows.state import AnalysisState


def run(state: AnalysisState, context: WorkflowContext) -> AnalysisState:
    logs = state.setdefault("logs", [])
    errors = state.setdefault("errors", [])

    state["chart_png"] = None
    try:
        state["chart_png"] = render_price_chart(state["report"])
    except Exception as exc:  # pylint: disable=broad-except
        errors.append(f"ChartBuilder price chart failed: {exc}")
        return state

    if state["chart_png"] is None:
        logs.append("ChartBuilder -> price data empty, skip chart")
    else:
        logs.append("ChartBuilder -> price chart rendered")
    return state
