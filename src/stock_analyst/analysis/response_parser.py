"""Turn the model's free-text reply into a validated AnalysisReport.

The reply is expected to carry a single fenced ```json block. Validation is
all-or-nothing: either every required field checks out and a complete report
is returned, or a typed AnalysisError is raised and the raw text is logged.
"""
from __future__ import annotations

import json
import logging
import math
import re
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from stock_analyst.analysis.errors import (
    AnalysisError,
    EmptyResponseError,
    FormatError,
    ParseError,
    SchemaError,
)
from stock_analyst.domain.models.analysis import (
    AnalysisReport,
    DailyBar,
    GroundingSource,
    PriceTargets,
    RiskAssessment,
    TechnicalLevels,
    TradingAdvice,
    TrendAnalysis,
    VolumeAnalysis,
)

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_TITLE = "来源"
DEFAULT_SOURCE_URI = "#"

REQUIRED_SECTIONS = (
    "trendAnalysis",
    "volumeAnalysis",
    "riskAssessment",
    "priceTargets",
    "tradingAdvice",
)

_JSON_BLOCK = re.compile(r"```json[ \t]*\r?\n(.*?)\r?\n[ \t]*```", re.DOTALL | re.IGNORECASE)
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _get(obj: Any, name: str) -> Any:
    """Read a field from either a mapping or an attribute-style object."""
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def normalize_citations(chunks: Optional[Iterable[Any]]) -> List[GroundingSource]:
    """Map grounding chunks to sources, defaulting missing title/uri."""
    sources: List[GroundingSource] = []
    seen = set()
    for chunk in chunks or []:
        web = _get(chunk, "web")
        if web is None:
            continue
        source = GroundingSource(
            title=_get(web, "title") or DEFAULT_SOURCE_TITLE,
            uri=_get(web, "uri") or DEFAULT_SOURCE_URI,
        )
        key = (source.title, source.uri)
        if key in seen:
            continue
        seen.add(key)
        sources.append(source)
    return sources


def extract_json_block(text: str) -> str:
    """Return the body of the first ```json fenced block."""
    match = _JSON_BLOCK.search(text)
    if match is None:
        raise FormatError()
    return match.group(1)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def _load_json(block: str) -> Any:
    try:
        return json.loads(block, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise ParseError(
            f"invalid JSON in model response: {exc.msg} (line {exc.lineno}, column {exc.colno})"
        ) from exc
    except ValueError as exc:
        raise ParseError(f"invalid JSON in model response: {exc}") from exc


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_float(value: Any) -> Optional[float]:
    """Accept finite JSON numbers and numeric strings ("1,234.5"); None otherwise."""
    try:
        if _is_number(value):
            result = float(value)
        elif isinstance(value, str):
            result = float(value.replace(",", "").strip())
        else:
            return None
    except (OverflowError, ValueError):
        return None
    return result if math.isfinite(result) else None


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip().rstrip("%")
    return _to_float(value)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _text_list(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(_text(item) for item in value if item is not None)
    return (_text(value),)


def _is_iso_date(value: Any) -> bool:
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _validate(payload: Any) -> None:
    """Collect every missing/invalid required field and fail once."""
    if not isinstance(payload, dict):
        raise SchemaError(["<root>"], "expected a JSON object")

    problems: List[str] = []

    symbol = payload.get("symbol")
    if not isinstance(symbol, str) or not symbol.strip():
        problems.append("symbol")

    if _to_float(payload.get("currentPrice")) is None:
        problems.append("currentPrice")

    history = payload.get("history")
    if not isinstance(history, list) or not history:
        problems.append("history")
    else:
        for idx, bar in enumerate(history):
            if not isinstance(bar, dict):
                problems.append(f"history[{idx}]")
                continue
            if not _is_iso_date(bar.get("date")):
                problems.append(f"history[{idx}].date")
            if _to_float(bar.get("close")) is None:
                problems.append(f"history[{idx}].close")

    for section in REQUIRED_SECTIONS:
        if not isinstance(payload.get(section), dict):
            problems.append(section)

    technical = payload.get("technicalLevels")
    if technical is not None and not isinstance(technical, dict):
        problems.append("technicalLevels")

    if problems:
        raise SchemaError(problems)


def _build_bar(raw: Dict[str, Any]) -> DailyBar:
    return DailyBar(
        date=raw["date"],
        close=float(_to_float(raw["close"])),
        open=_optional_float(raw.get("open")),
        high=_optional_float(raw.get("high")),
        low=_optional_float(raw.get("low")),
        change_percent=_optional_float(raw.get("changePercent")),
        volume=_text(raw.get("volume")),
        turnover=_text(raw.get("turnover")),
        turnover_rate=_text(raw.get("turnoverRate")),
    )


def _build_report(payload: Dict[str, Any], sources: List[GroundingSource]) -> AnalysisReport:
    # Fixed-width ISO dates sort chronologically as plain strings.
    history = tuple(sorted((_build_bar(bar) for bar in payload["history"]), key=lambda bar: bar.date))

    trend = payload["trendAnalysis"]
    volume = payload["volumeAnalysis"]
    risk = payload["riskAssessment"]
    targets = payload["priceTargets"]
    technical = payload.get("technicalLevels") or {}
    advice = payload["tradingAdvice"]

    symbol = payload["symbol"].strip()
    return AnalysisReport(
        symbol=symbol,
        company_name=_text(payload.get("companyName")) or symbol,
        currency=_text(payload.get("currency")),
        last_updated=_text(payload.get("lastUpdated")) or history[-1].date,
        current_price=float(_to_float(payload["currentPrice"])),
        change_amount=_optional_float(payload.get("changeAmount")) or 0.0,
        change_percent=_optional_float(payload.get("changePercent")) or 0.0,
        history=history,
        trend_analysis=TrendAnalysis(
            summary=_text(trend.get("summary")),
            support_levels=_text_list(trend.get("supportLevels")),
            resistance_levels=_text_list(trend.get("resistanceLevels")),
        ),
        volume_analysis=VolumeAnalysis(
            volume=_text(volume.get("volume")),
            assessment=_text(volume.get("assessment")),
        ),
        risk_assessment=RiskAssessment(
            volatility=_text(risk.get("volatility")),
            risk_level=_text(risk.get("riskLevel")),
            description=_text(risk.get("description")),
        ),
        price_targets=PriceTargets(
            short_term=_text(targets.get("shortTerm")),
            mid_term=_text(targets.get("midTerm")),
        ),
        technical_levels=TechnicalLevels(
            summary=_text(technical.get("summary")),
            indicators=_text_list(technical.get("indicators")),
        ),
        trading_advice=TradingAdvice(
            action=_text(advice.get("action")),
            entry_zone=_text(advice.get("entryZone")),
            stop_loss=_text(advice.get("stopLoss")),
            rationale=_text(advice.get("rationale")),
        ),
        sources=tuple(sources),
    )


def parse_analysis_response(
    text: Optional[str],
    citations: Optional[Iterable[Any]] = None,
) -> AnalysisReport:
    """Parse and validate a raw model reply into an AnalysisReport."""
    if text is None or not text.strip():
        raise EmptyResponseError()

    try:
        sources = normalize_citations(citations)
        payload = _load_json(extract_json_block(text))
        _validate(payload)
        return _build_report(payload, sources)
    except AnalysisError as exc:
        logger.error("Failed to parse model response (%s). Raw response:\n%s", exc, text)
        raise
