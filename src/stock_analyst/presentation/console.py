"""Rich terminal rendering of an analysis report."""
from __future__ import annotations

from rich.columns import Columns
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from stock_analyst.domain.models.analysis import AnalysisReport
from stock_analyst.presentation import formatting
from stock_analyst.presentation.html import DISCLAIMER
from stock_analyst.presentation.tables import history_frame

_TONE_STYLES = {
    "positive": "bold green",
    "warning": "bold yellow",
    "negative": "bold red",
}


def _header(report: AnalysisReport) -> Panel:
    style = "green" if report.is_positive else "red"
    arrow = "▲" if report.is_positive else "▼"
    title = Text.assemble((report.symbol, "bold white"), "  ", (report.company_name, "cyan"))
    price = Text.assemble(
        (formatting.format_price(report.current_price), "bold white"),
        "  ",
        (
            f"{arrow} {formatting.format_signed(report.change_amount)} "
            f"({formatting.format_percent(report.change_percent)})",
            style,
        ),
    )
    meta = Text(f"最后更新: {report.last_updated} | 货币: {report.currency or '-'}", style="dim")
    return Panel(Group(title, price, meta), border_style=style)


def _cards(report: AnalysisReport) -> Columns:
    trend = report.trend_analysis
    trend_body = Text.assemble(
        trend.summary,
        "\n支撑位: ",
        (", ".join(trend.support_levels) or "-", "green"),
        "\n压力位: ",
        (", ".join(trend.resistance_levels) or "-", "red"),
    )

    volume = report.volume_analysis
    volume_body = Text.assemble(("近期成交量: ", "dim"), volume.volume, "\n", volume.assessment)

    risk = report.risk_assessment
    risk_style = _TONE_STYLES[formatting.risk_tone(risk.risk_level)]
    risk_body = Text.assemble(
        ("风险等级: ", "dim"),
        (formatting.risk_label(risk.risk_level), risk_style),
        "\n",
        risk.description,
        ("\n波动率分析: " + risk.volatility, "dim"),
    )

    targets = report.price_targets
    targets_body = Text.assemble(
        ("短期目标 (1-4 周): ", "dim"), targets.short_term, "\n", ("中期目标 (1-3 月): ", "dim"), targets.mid_term
    )

    technical = report.technical_levels
    technical_body = Text.assemble(technical.summary, "\n", (" | ".join(technical.indicators), "cyan"))

    advice = report.trading_advice
    advice_style = _TONE_STYLES[formatting.action_tone(advice.action)]
    advice_body = Text.assemble(
        ("操作建议: ", "dim"),
        (formatting.action_label(advice.action), advice_style),
        ("\n建议入场区间: ", "dim"),
        advice.entry_zone,
        ("\n建议止损位: ", "dim"),
        (advice.stop_loss, "red"),
        "\n",
        (f'"{advice.rationale}"', "italic"),
    )

    cards = [
        Panel(trend_body, title="趋势分析", width=44),
        Panel(volume_body, title="成交量分析", width=44),
        Panel(risk_body, title="风险评估", width=44),
        Panel(targets_body, title="目标价位", width=44),
        Panel(technical_body, title="关键技术位", width=44),
        Panel(advice_body, title="具体交易建议", width=44, border_style=advice_style),
    ]
    return Columns(cards)


def _history_table(report: AnalysisReport) -> Table:
    table = Table(title="历史行情 (Daily K-Line)", header_style="bold magenta")
    for column in ("日期", "收盘价", "涨跌幅", "开盘价", "最高价", "最低价", "成交量", "成交额", "换手率"):
        table.add_column(column)

    for idx, row in enumerate(history_frame(report).to_dict(orient="records")):
        change = row["change_percent"]
        change_style = "green" if (change or 0) >= 0 else "red"
        date_cell = f"{row['date']} 最新" if idx == 0 else row["date"]
        table.add_row(
            date_cell,
            formatting.format_price(row["close"]),
            Text(formatting.format_percent(change), style=change_style),
            formatting.format_price(row["open"]),
            formatting.format_price(row["high"]),
            formatting.format_price(row["low"]),
            Text(row["volume"] or "-"),
            Text(row["turnover"] or "-"),
            Text(row["turnover_rate"] or "-"),
            style="bold" if idx == 0 else None,
        )
    return table


def print_dashboard(console: Console, report: AnalysisReport) -> None:
    """Print header, analysis cards, history and sources."""
    console.print(_header(report))
    console.print(_cards(report))
    console.print(_history_table(report))
    if report.sources:
        console.print("[bold]数据出处 (Data Sources)[/bold]")
        for source in report.sources:
            console.print(Text.assemble("- ", (source.title, "cyan"), ": ", source.uri))
    console.print(f"[dim]{DISCLAIMER}[/dim]")
