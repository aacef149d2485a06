"""HTML dashboard rendering using Jinja2 templates."""
from __future__ import annotations

import base64
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from stock_analyst.domain.models.analysis import AnalysisReport
from stock_analyst.presentation import formatting
from stock_analyst.presentation.tables import history_frame

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

DISCLAIMER = (
    "免责声明: 本分析由 AI 基于搜索引擎公开数据生成。金融市场波动剧烈，历史数据不代表未来表现。"
    "本内容仅供参考，不构成投资建议，请自行评估风险。"
)


@dataclass
class DashboardRenderer:
    """Render a validated report into a standalone HTML page."""

    template_dir: Path = TEMPLATE_DIR
    template_name: str = "dashboard.html.j2"
    _env: Environment = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(["html", "j2"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._env.filters.update(
            price=formatting.format_price,
            signed=formatting.format_signed,
            percent=formatting.format_percent,
            href=formatting.safe_href,
        )

    def render(
        self,
        report: AnalysisReport,
        *,
        chart_png: Optional[bytes] = None,
        generated_at: Optional[datetime] = None,
    ) -> str:
        """Render the configured template for one report."""
        template = self._env.get_template(self.template_name)
        return template.render(**self.build_context(report, chart_png=chart_png, generated_at=generated_at))

    def build_context(
        self,
        report: AnalysisReport,
        *,
        chart_png: Optional[bytes] = None,
        generated_at: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        chart_data_url = None
        if chart_png:
            chart_data_url = "data:image/png;base64," + base64.b64encode(chart_png).decode("ascii")

        rows = history_frame(report).to_dict(orient="records")
        return {
            "report": report,
            "is_positive": report.is_positive,
            "price_color": formatting.price_color(report.change_amount),
            "risk_label": formatting.risk_label(report.risk_assessment.risk_level),
            "risk_tone": formatting.risk_tone(report.risk_assessment.risk_level),
            "action_label": formatting.action_label(report.trading_advice.action),
            "action_tone": formatting.action_tone(report.trading_advice.action),
            "chart_data_url": chart_data_url,
            "history_rows": rows,
            "sources": report.sources,
            "disclaimer": DISCLAIMER,
            "generated_at": (generated_at or datetime.now()).isoformat(timespec="seconds"),
        }
