"""LangGraph node building the chat messages for the ticker."""
from __future__ import annotations

from datetime import date

from stock_analyst.analysis.request_builder import build_messages
from stock_analyst.workflows.context import WorkflowContext
from stock_analyst.workflows.state import AnalysisState


def run(state: AnalysisState, context: WorkflowContext) -> AnalysisState:
    logs = state.setdefault("logs", [])
    today = date.fromisoformat(state["report_date"])
    state["messages"] = build_messages(state["ticker"], today)
    logs.append(f"RequestBuilder -> prompt for {state['ticker']} dated {today.isoformat()}")
    return state
