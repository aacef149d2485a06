"""Display helpers shared by the console and HTML dashboards.

Enumerated fields arrive as free text from the model, so every helper here
falls back to the raw value (or a neutral tone) for anything unrecognized.
"""
from __future__ import annotations

from typing import Optional

from stock_analyst.domain.models.analysis import RiskLevel, TradingAction

POSITIVE_COLOR = "#10b981"
NEGATIVE_COLOR = "#f43f5e"

_RISK_LABELS = {
    RiskLevel.LOW: "低风险",
    RiskLevel.MEDIUM: "中等风险",
    RiskLevel.HIGH: "高风险",
    RiskLevel.VERY_HIGH: "极高风险",
}

_ACTION_LABELS = {
    TradingAction.BUY: "买入",
    TradingAction.SELL: "卖出",
    TradingAction.HOLD: "持有",
    TradingAction.WAIT: "观望",
}


def risk_label(level: Optional[str]) -> str:
    member = RiskLevel.coerce(level)
    if member is None:
        return level or "-"
    return _RISK_LABELS[member]


def action_label(action: Optional[str]) -> str:
    member = TradingAction.coerce(action)
    if member is None:
        return action or "-"
    return _ACTION_LABELS[member]


def risk_tone(level: Optional[str]) -> str:
    """Map a risk level to positive/warning/negative."""
    member = RiskLevel.coerce(level)
    if member is RiskLevel.LOW:
        return "positive"
    if member is RiskLevel.MEDIUM:
        return "warning"
    return "negative"


def action_tone(action: Optional[str]) -> str:
    member = TradingAction.coerce(action)
    if member is TradingAction.BUY:
        return "positive"
    if member is TradingAction.SELL:
        return "negative"
    return "warning"


def format_price(value: Optional[float]) -> str:
    if value is None:
        return "-"
    return f"{value:.2f}"


def format_signed(value: Optional[float]) -> str:
    """Two decimals with an explicit plus sign for gains."""
    if value is None:
        return "-"
    return f"+{value:.2f}" if value > 0 else f"{value:.2f}"


def format_percent(value: Optional[float]) -> str:
    if value is None:
        return "-"
    return f"{format_signed(value)}%"


def date_tick(value: str) -> str:
    """YYYY-MM-DD -> MM-DD for compact axis labels."""
    if value and len(value) >= 10:
        return value[5:10]
    return value


def price_color(change: Optional[float]) -> str:
    return POSITIVE_COLOR if (change or 0) >= 0 else NEGATIVE_COLOR


def safe_href(uri: Optional[str]) -> str:
    """Only http(s) links are clickable; anything else becomes "#"."""
    if uri and uri.strip().lower().startswith(("http://", "https://")):
        return uri.strip()
    return "#"
