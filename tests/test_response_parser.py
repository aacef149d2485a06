from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from conftest import fence
from stock_analyst.analysis.errors import (
    AnalysisError,
    EmptyResponseError,
    FormatError,
    ParseError,
    SchemaError,
)
from stock_analyst.analysis.response_parser import (
    extract_json_block,
    normalize_citations,
    parse_analysis_response,
)
from stock_analyst.domain.models.analysis import GroundingSource


def test_single_bar_with_one_citation(payload):
    report = parse_analysis_response(
        fence(payload), [{"web": {"title": "Yahoo", "uri": "https://y"}}]
    )

    assert report.symbol == "AAPL"
    assert report.current_price == 150.0
    assert report.sources == (GroundingSource(title="Yahoo", uri="https://y"),)
    assert [bar.date for bar in report.history] == ["2024-01-02"]
    assert report.history[0].volume == "50M"
    assert report.trading_advice.action == "Buy"
    assert report.technical_levels.indicators == ("RSI: 60", "MACD: Bullish")


def test_report_collections_are_immutable(payload):
    report = parse_analysis_response(fence(payload), [{"web": {"title": "Yahoo", "uri": "https://y"}}])

    assert isinstance(report.history, tuple)
    assert isinstance(report.sources, tuple)
    assert isinstance(report.trend_analysis.support_levels, tuple)
    with pytest.raises(AttributeError):
        report.history.append(report.history[0])
    with pytest.raises(AttributeError):
        report.technical_levels.indicators.append("RSI: 70")


def test_history_sorted_ascending(payload):
    payload["history"] = [
        {"date": "2024-01-05", "close": 152.0},
        {"date": "2024-01-02", "close": 150.0},
    ]
    report = parse_analysis_response(fence(payload))
    assert [bar.date for bar in report.history] == ["2024-01-02", "2024-01-05"]
    assert report.latest_bar.close == 152.0


def test_payload_round_trip_keeps_history_sorted(payload):
    payload["history"] = [
        {"date": "2024-01-04", "close": 151.0},
        {"date": "2024-01-02", "close": 150.0},
        {"date": "2024-01-03", "close": 149.0},
    ]
    first = parse_analysis_response(fence(payload))
    shuffled = first.to_payload()
    shuffled["history"] = list(reversed(shuffled["history"]))

    second = parse_analysis_response(fence(shuffled))
    assert [bar.date for bar in second.history] == ["2024-01-02", "2024-01-03", "2024-01-04"]
    assert second.trend_analysis == first.trend_analysis


def test_missing_fence_raises_format_error():
    with pytest.raises(FormatError, match="no JSON block found"):
        parse_analysis_response('Here is the data: {"symbol": "AAPL"}')


@pytest.mark.parametrize(
    "text",
    [
        "plain prose, no code at all",
        "```\n{\"symbol\": \"AAPL\"}\n```",
        "```python\nprint('hi')\n```",
        "```json {\"symbol\": \"AAPL\"}```",
    ],
)
def test_untagged_or_inline_blocks_are_format_errors(text):
    with pytest.raises(FormatError):
        parse_analysis_response(text)


def test_trailing_comma_is_parse_error():
    with pytest.raises(ParseError) as excinfo:
        parse_analysis_response(fence('{"symbol": "AAPL", "currentPrice": 1.0,}'))
    assert "line" in str(excinfo.value)


def test_comments_and_nan_are_not_repaired():
    with pytest.raises(ParseError):
        parse_analysis_response(fence('{"symbol": "AAPL" // ticker\n}'))
    with pytest.raises(ParseError):
        parse_analysis_response(fence('{"symbol": "AAPL", "currentPrice": NaN}'))


def test_missing_history_names_field():
    with pytest.raises(SchemaError) as excinfo:
        parse_analysis_response(fence({"symbol": "AAPL"}))
    assert "history" in excinfo.value.fields
    assert "history" in str(excinfo.value)


def test_empty_history_is_schema_error(payload):
    payload["history"] = []
    with pytest.raises(SchemaError) as excinfo:
        parse_analysis_response(fence(payload))
    assert excinfo.value.fields == ("history",)


def test_malformed_bar_date_fails_instead_of_skipping(payload):
    payload["history"].append({"date": "2024/01/03", "close": 151.0})
    payload["history"].append({"date": "2024-02-30", "close": 151.0})
    with pytest.raises(SchemaError) as excinfo:
        parse_analysis_response(fence(payload))
    assert excinfo.value.fields == ("history[1].date", "history[2].date")


def test_bar_requires_close(payload):
    payload["history"].append({"date": "2024-01-03"})
    with pytest.raises(SchemaError, match=r"history\[1\]\.close"):
        parse_analysis_response(fence(payload))


def test_missing_sections_and_bad_types_reported_together(payload):
    del payload["tradingAdvice"]
    payload["riskAssessment"] = "High"
    payload["currentPrice"] = True
    with pytest.raises(SchemaError) as excinfo:
        parse_analysis_response(fence(payload))
    assert set(excinfo.value.fields) == {"currentPrice", "riskAssessment", "tradingAdvice"}


@pytest.mark.parametrize("value", ["NaN", "Infinity", "-inf", "1e400"])
def test_non_finite_prices_are_schema_errors(payload, value):
    payload["currentPrice"] = value
    payload["history"][0]["close"] = value
    with pytest.raises(SchemaError) as excinfo:
        parse_analysis_response(fence(payload))
    assert excinfo.value.fields == ("currentPrice", "history[0].close")


def test_non_finite_optional_numbers_are_dropped(payload):
    payload["history"][0]["open"] = "Infinity"
    payload["changeAmount"] = "NaN"
    report = parse_analysis_response(fence(payload))
    assert report.history[0].open is None
    assert report.change_amount == 0.0


def test_top_level_must_be_object():
    with pytest.raises(SchemaError):
        parse_analysis_response(fence("[1, 2, 3]"))


def test_empty_text_is_empty_response_error():
    with pytest.raises(EmptyResponseError):
        parse_analysis_response("   \n")
    with pytest.raises(EmptyResponseError):
        parse_analysis_response(None)


def test_optional_fields_have_defaults(payload):
    for key in ("companyName", "currency", "changeAmount", "changePercent", "lastUpdated", "technicalLevels"):
        payload.pop(key)
    payload["currentPrice"] = "1,234.50"
    report = parse_analysis_response(fence(payload))

    assert report.company_name == "AAPL"
    assert report.currency == ""
    assert report.change_amount == 0.0
    assert report.last_updated == "2024-01-02"
    assert report.current_price == 1234.5
    assert report.technical_levels.indicators == ()


def test_unknown_enum_values_pass_through(payload):
    payload["riskAssessment"]["riskLevel"] = "Extreme"
    payload["tradingAdvice"]["action"] = "Accumulate"
    report = parse_analysis_response(fence(payload))
    assert report.risk_assessment.risk_level == "Extreme"
    assert report.trading_advice.action == "Accumulate"


def test_only_first_json_block_is_used(payload):
    text = fence(payload) + "\n```json\n{\"symbol\": \"MSFT\"}\n```"
    assert parse_analysis_response(text).symbol == "AAPL"


def test_extract_handles_crlf_and_uppercase_tag():
    assert extract_json_block('intro\r\n```JSON\r\n{"a": 1}\r\n```') == '{"a": 1}'


def test_citation_defaults_and_drops():
    chunks = [
        {"web": {"title": None, "uri": "https://a"}},
        {"web": {"title": "B", "uri": None}},
        None,
        {"web": None},
        {},
        SimpleNamespace(web=SimpleNamespace(title="C", uri="https://c")),
        {"web": {"title": "B", "uri": None}},
    ]
    assert normalize_citations(chunks) == [
        GroundingSource(title="来源", uri="https://a"),
        GroundingSource(title="B", uri="#"),
        GroundingSource(title="C", uri="https://c"),
    ]
    assert normalize_citations(None) == []


def test_failures_log_raw_text(caplog):
    with caplog.at_level("ERROR", logger="stock_analyst.analysis.response_parser"):
        with pytest.raises(FormatError):
            parse_analysis_response("sorry, I cannot help")
    assert "sorry, I cannot help" in caplog.text


@pytest.mark.parametrize(
    "text",
    ["", "```json\n\n```", "```json\n{}\n```", "```json\nnull\n```", "```json\n{\"history\": {}}\n```"],
)
def test_only_typed_errors_escape(text):
    with pytest.raises(AnalysisError):
        parse_analysis_response(text)


def test_numbers_as_strings_in_bars(payload):
    payload["history"] = [
        {"date": "2024-01-02", "close": "150.5", "open": "149", "changePercent": "-1.2%", "volume": 1200}
    ]
    report = parse_analysis_response(fence(json.dumps(payload)))
    bar = report.history[0]
    assert bar.close == 150.5
    assert bar.open == 149.0
    assert bar.change_percent == -1.2
    assert bar.volume == "1200"
    assert bar.high is None
