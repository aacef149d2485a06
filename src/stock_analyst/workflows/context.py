"""Workflow dependency container."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from stock_analyst.config import Config
from stock_analyst.infrastructure.llm.gemini_client import GeminiClient
from stock_analyst.presentation.html import DashboardRenderer


@dataclass
class WorkflowContext:
    """Holds long-lived collaborators shared by LangGraph nodes."""

    config: Config
    gemini: Optional[GeminiClient]
    renderer: DashboardRenderer

    def close(self) -> None:
        """Release any dependencies that need explicit cleanup."""
        if self.gemini is not None:
            self.gemini.close()
