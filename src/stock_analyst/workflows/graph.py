"""LangGraph workflow assembly for the analysis pipeline."""
from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from langgraph.graph import END, StateGraph

from stock_analyst.config import Config
from stock_analyst.domain.models.analysis import AnalysisReport
from stock_analyst.infrastructure.llm.gemini_client import GeminiClient
from stock_analyst.presentation.html import DashboardRenderer
from stock_analyst.workflows import context as context_module
from stock_analyst.workflows.blueprint import StageSpec, build_default_stages
from stock_analyst.workflows.state import AnalysisState

logger = logging.getLogger(__name__)

_UNSET = object()


class AnalysisWorkflow:
    """Compose LangGraph nodes into a runnable workflow."""

    def __init__(self, config: Config, *, gemini: Any = _UNSET) -> None:
        self._config = config
        self._context = self._build_context(gemini)
        self._stages: List[StageSpec] = build_default_stages()
        self._graph = self._build_graph()

    @property
    def config(self) -> Config:
        return self._config

    def _build_context(self, gemini: Any) -> context_module.WorkflowContext:
        if gemini is _UNSET:
            try:
                gemini = GeminiClient(
                    api_key=self._config.poe_api_key or "",
                    model=self._config.gemini_model,
                    base_url=self._config.llm_base_url,
                    proxy_url=self._config.proxy_url,
                    timeout=self._config.request_timeout,
                    default_web_search=self._config.web_search,
                    default_thinking_budget=self._config.thinking_budget,
                )
            except ValueError as exc:
                logger.warning("Gemini client unavailable: %s", exc)
                gemini = None

        return context_module.WorkflowContext(
            config=self._config,
            gemini=gemini,
            renderer=DashboardRenderer(),
        )

    def _build_graph(self):
        builder = StateGraph(dict)

        if not self._stages:
            raise RuntimeError("Workflow blueprint is empty; cannot build LangGraph.")

        for stage in self._stages:
            builder.add_node(stage.key, self._wrap(stage.handler))

        builder.set_entry_point(self._stages[0].key)
        for current, nxt in zip(self._stages, self._stages[1:]):
            builder.add_edge(current.key, nxt.key)
        builder.add_edge(self._stages[-1].key, END)

        return builder.compile(checkpointer=None)

    def _wrap(self, func: Callable[[AnalysisState, context_module.WorkflowContext], AnalysisState]):
        def wrapper(state: Dict[str, Any]) -> Dict[str, Any]:
            return func(state, self._context)

        return wrapper

    def run(self, ticker: str, today: Optional[date] = None) -> AnalysisState:
        """Execute the workflow for a single ticker.

        Request, transport and parse failures propagate as AnalysisError
        subclasses; chart/render problems are collected in ``errors``.
        """
        initial_state: AnalysisState = {
            "ticker": ticker,
            "report_date": (today or date.today()).isoformat(),
            "logs": [],
            "errors": [],
            "stage_order": [stage.key for stage in self._stages],
        }
        result: AnalysisState = self._graph.invoke(initial_state)
        return result

    def persist_html(self, html: str, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(html, encoding="utf-8")

    def persist_report(self, report: AnalysisReport, path: Path) -> None:
        """Write the report in its camelCase wire form."""
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(report.to_payload(), indent=2, ensure_ascii=False)
        path.write_text(payload, encoding="utf-8")

    def describe_stages(self) -> List[str]:
        """Return human-readable workflow stage descriptions."""
        return [f"{stage.key}: {stage.description}" for stage in self._stages]

    def close(self) -> None:
        self._context.close()
