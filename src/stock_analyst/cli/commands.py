"""CLI command definitions for the stock analysis dashboard."""
from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from stock_analyst.app.session import AnalysisSession, SessionState, SessionStatus
from stock_analyst.config import Config
from stock_analyst.presentation.console import print_dashboard
from stock_analyst.settings.loader import load_settings
from stock_analyst.utils.logging import configure_logging
from stock_analyst.workflows.graph import AnalysisWorkflow

console = Console()
app = typer.Typer(help="Analyze a stock ticker with Gemini + web search and render a dashboard.")

_EXIT_WORDS = {"quit", "exit"}


@dataclass
class AppContext:
    """Holds reusable process-wide objects for CLI commands."""

    config: Config
    workflow: AnalysisWorkflow


def _init_context(debug_override: Optional[bool] = None) -> AppContext:
    """Create a context with configuration, logging, and workflow wiring."""
    config = load_settings(debug_override)
    configure_logging(debug=config.debug)
    return AppContext(config=config, workflow=AnalysisWorkflow(config=config))


@app.callback()
def main_callback(
    ctx: typer.Context,
    debug: Optional[bool] = typer.Option(
        None,
        "--debug/--no-debug",
        help="Temporarily toggle verbose logging without touching environment variables.",
    ),
) -> None:
    """Attach the lazily constructed application context to Typer."""
    ctx.obj = _init_context(debug_override=debug)
    ctx.call_on_close(ctx.obj.workflow.close)


def _run_once(
    context: AppContext,
    ticker: str,
    *,
    html_path: Optional[Path] = None,
    write_html: bool = True,
    json_path: Optional[Path] = None,
    verbose: bool = False,
) -> SessionState:
    status = None

    def _on_change(state: SessionState) -> None:
        nonlocal status
        if state.status is SessionStatus.LOADING:
            status = console.status(f"[bold cyan]正在分析 {escape(state.ticker)}：读取行情并计算风险模型...")
            status.start()
        elif status is not None:
            status.stop()

    session = AnalysisSession(context.workflow, on_change=_on_change)
    session.submit(ticker)
    state = session.state

    if state.status is SessionStatus.ERROR:
        console.print(f"[bold red]分析失败:[/bold red] {escape(state.error or '')}")
        return state
    if state.report is None:
        return state

    print_dashboard(console, state.report)
    run_state = state.run_state

    if verbose:
        for line in run_state.get("logs", []):
            console.print(f"[dim]{escape(line)}[/dim]")
    for issue in run_state.get("errors", []):
        console.print(f"[yellow]{escape(issue)}[/yellow]")

    report_date = run_state.get("report_date", "")
    if write_html and run_state.get("html_report"):
        target = html_path
        if target is None:
            context.config.ensure_directories()
            safe_symbol = re.sub(r"[^\w.-]+", "_", state.report.symbol)
            target = context.config.output_dir / f"{safe_symbol}_{report_date}.html"
        context.workflow.persist_html(run_state["html_report"], target)
        console.print(f"HTML dashboard available at {escape(str(target))}")
    if json_path is not None:
        context.workflow.persist_report(state.report, json_path)
        console.print(f"Report JSON saved to {escape(str(json_path))}")
    return state


@app.command()
def analyze(
    ctx: typer.Context,
    ticker: str = typer.Argument(..., help="Ticker, e.g. AAPL, 00700.HK, 600519"),
    html: Optional[Path] = typer.Option(None, "--html", help="Custom path for the HTML dashboard."),
    no_html: bool = typer.Option(False, "--no-html", help="Skip writing the HTML dashboard."),
    json_path: Optional[Path] = typer.Option(None, "--json", help="Persist the validated report as JSON."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print workflow stage logs."),
) -> None:
    """Analyze one ticker and present the dashboard."""
    if ctx.obj is None:
        raise typer.Exit(code=1)
    if not ticker.strip():
        console.print("[red]Ticker must not be empty.[/red]")
        raise typer.Exit(code=2)

    context: AppContext = ctx.obj
    console.rule(f"Analyzing {escape(ticker.strip())}")
    state = _run_once(
        context,
        ticker,
        html_path=html,
        write_html=not no_html,
        json_path=json_path,
        verbose=verbose,
    )
    if state.status is SessionStatus.ERROR:
        raise typer.Exit(code=1)


@app.command()
def interactive(
    ctx: typer.Context,
    no_html: bool = typer.Option(False, "--no-html", help="Skip writing HTML dashboards."),
) -> None:
    """Prompt for tickers until 'quit'; each answer replaces the previous one."""
    if ctx.obj is None:
        raise typer.Exit(code=1)

    context: AppContext = ctx.obj
    console.print("[bold]Gemini 智能股票分析师[/bold]  支持: 美股、港股、A股、加密货币。输入 quit 退出。")
    while True:
        ticker = typer.prompt("请输入股票代码", default="", show_default=False)
        if ticker.strip().lower() in _EXIT_WORDS:
            break
        if not ticker.strip():
            continue
        console.rule(f"Analyzing {escape(ticker.strip())}")
        _run_once(context, ticker, write_html=not no_html)


@app.command()
def plan(ctx: typer.Context) -> None:
    """Display the workflow stages for quick operator reference."""
    if ctx.obj is None:
        raise typer.Exit(code=1)

    context: AppContext = ctx.obj
    table = Table(title="Workflow Stages")
    table.add_column("Step", style="cyan")
    table.add_column("Description")

    for idx, step in enumerate(context.workflow.describe_stages(), start=1):
        table.add_row(str(idx), step)

    console.print(table)
