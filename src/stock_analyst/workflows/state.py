"""Workflow state definitions shared by LangGraph nodes."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, TypedDict

from stock_analyst.domain.models.analysis import AnalysisReport


class AnalysisState(TypedDict, total=False):
    ticker: str
    report_date: str
    stage_order: List[str]

    messages: List[Dict[str, str]]
    raw_text: str
    citations: List[Any]

    report: Optional[AnalysisReport]
    chart_png: Optional[bytes]
    html_report: Optional[str]

    logs: List[str]
    errors: List[str]
