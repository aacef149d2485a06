"""Shared fixtures: a well-formed model payload and a fake Gemini client."""
from __future__ import annotations

import copy
import json
from typing import Any, Dict, List, Optional

import pytest

from stock_analyst.infrastructure.llm.gemini_client import ModelReply

BASE_PAYLOAD: Dict[str, Any] = {
    "symbol": "AAPL",
    "companyName": "苹果公司",
    "currentPrice": 150.0,
    "currency": "USD",
    "changeAmount": 1.5,
    "changePercent": 1.01,
    "lastUpdated": "2024-01-05",
    "history": [
        {
            "date": "2024-01-02",
            "open": 148.0,
            "close": 150.0,
            "high": 151.0,
            "low": 147.5,
            "changePercent": 1.0,
            "volume": "50M",
            "turnover": "7.5B",
            "turnoverRate": "0.5%",
        }
    ],
    "trendAnalysis": {"summary": "震荡上行", "supportLevels": ["145"], "resistanceLevels": ["155"]},
    "volumeAnalysis": {"volume": "50M", "assessment": "量能温和"},
    "riskAssessment": {"volatility": "中等", "riskLevel": "Medium", "description": "注意宏观风险"},
    "priceTargets": {"shortTerm": "155", "midTerm": "160"},
    "technicalLevels": {"summary": "均线多头", "indicators": ["RSI: 60", "MACD: Bullish"]},
    "tradingAdvice": {"action": "Buy", "entryZone": "146-149", "stopLoss": "142", "rationale": "趋势向好"},
}


def fence(payload: Any) -> str:
    """Wrap a payload the way the model is asked to."""
    body = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False)
    return f"以下是分析结果：\n```json\n{body}\n```\n祝投资顺利。"


@pytest.fixture
def payload() -> Dict[str, Any]:
    return copy.deepcopy(BASE_PAYLOAD)


class FakeGemini:
    """Stands in for GeminiClient; records calls, replays a canned reply."""

    model = "fake-gemini"

    def __init__(self, text: str = "", citations: Optional[List[Any]] = None, error: Optional[Exception] = None):
        self.text = text
        self.citations = citations or []
        self.error = error
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def generate_grounded(self, messages, *, web_search=None, thinking_budget=None, temperature=0.2):
        self.calls.append({"messages": messages, "web_search": web_search, "thinking_budget": thinking_budget})
        if self.error is not None:
            raise self.error
        return ModelReply(text=self.text, citations=list(self.citations))

    def close(self) -> None:
        self.closed = True
