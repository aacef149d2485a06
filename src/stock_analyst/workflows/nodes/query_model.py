"""LangGraph node performing the single outbound Gemini call."""
from __future__ import annotations

from stock_analyst.analysis.errors import TransportError
from stock_analyst.workflows.context import WorkflowContext
from stock_analyst.workflows.state import AnalysisState


def run(state: AnalysisState, context: WorkflowContext) -> AnalysisState:
    logs = state.setdefault("logs", [])

    if context.gemini is None:
        raise TransportError("Gemini client is not configured; set POE_API_KEY.")

    logs.append(f"GeminiAnalyst -> querying {context.gemini.model} (web_search={context.config.web_search})")
    reply = context.gemini.generate_grounded(
        state["messages"],
        web_search=context.config.web_search,
        thinking_budget=context.config.thinking_budget,
    )
    state["raw_text"] = reply.text
    state["citations"] = reply.citations
    logs.append(f"GeminiAnalyst -> received {len(reply.text)} chars, {len(reply.citations)} citations")
    return state
