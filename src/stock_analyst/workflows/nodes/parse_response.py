"""LangGraph node turning the raw reply into a validated report."""
from __future__ import annotations

from stock_analyst.analysis.response_parser import parse_analysis_response
from stock_analyst.workflows.context import WorkflowContext
from stock_analyst.workflows.state import AnalysisState


def run(state: AnalysisState, context: WorkflowContext) -> AnalysisState:
    logs = state.setdefault("logs", [])
    report = parse_analysis_response(state.get("raw_text"), state.get("citations"))
    state["report"] = report
    logs.append(
        f"ResponseParser -> {report.symbol}: {len(report.history)} bars, {len(report.sources)} sources"
    )
    return state
