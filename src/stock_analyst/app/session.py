"""Request/response lifecycle for one interactive session."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, Optional, Protocol

from stock_analyst.domain.models.analysis import AnalysisReport

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "分析股票失败，请检查代码或重试。"


class SessionStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class SessionState:
    status: SessionStatus = SessionStatus.IDLE
    ticker: Optional[str] = None
    report: Optional[AnalysisReport] = None
    error: Optional[str] = None
    run_state: Dict[str, Any] = field(default_factory=dict)


class Workflow(Protocol):
    def run(self, ticker: str, today: Optional[date] = None) -> Dict[str, Any]:
        ...


class AnalysisSession:
    """Owns the idle -> loading -> success|error state for one user.

    Only one request may be in flight; submissions while loading are refused.
    """

    def __init__(
        self,
        workflow: Workflow,
        *,
        on_change: Optional[Callable[[SessionState], None]] = None,
    ) -> None:
        self._workflow = workflow
        self._on_change = on_change
        self._state = SessionState()

    @property
    def state(self) -> SessionState:
        return self._state

    def _set(self, state: SessionState) -> None:
        self._state = state
        if self._on_change is not None:
            self._on_change(state)

    def submit(self, ticker: str, today: Optional[date] = None) -> bool:
        """Run one analysis; returns False when the submission was ignored."""
        cleaned = (ticker or "").strip()
        if not cleaned:
            return False
        if self._state.status is SessionStatus.LOADING:
            logger.info("Ignoring %s: a request is already in flight", cleaned)
            return False

        self._set(SessionState(status=SessionStatus.LOADING, ticker=cleaned))
        try:
            result = self._workflow.run(cleaned, today)
        except Exception as exc:  # pylint: disable=broad-except
            logger.debug("Analysis for %s failed", cleaned, exc_info=True)
            self._set(
                SessionState(
                    status=SessionStatus.ERROR,
                    ticker=cleaned,
                    error=str(exc) or DEFAULT_ERROR_MESSAGE,
                )
            )
            return True

        self._set(
            SessionState(
                status=SessionStatus.SUCCESS,
                ticker=cleaned,
                report=result.get("report"),
                run_state=dict(result),
            )
        )
        return True
