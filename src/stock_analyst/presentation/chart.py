"""Price chart rendering with matplotlib."""
from __future__ import annotations

import io
from typing import Optional

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.ticker import FormatStrFormatter  # noqa: E402

from stock_analyst.domain.models.analysis import AnalysisReport  # noqa: E402
from stock_analyst.presentation.formatting import date_tick, price_color  # noqa: E402
from stock_analyst.presentation.tables import history_frame  # noqa: E402

_BACKGROUND = "#1e293b"
_GRID = "#334155"
_AXIS = "#94a3b8"


def render_price_chart(report: AnalysisReport, *, color: Optional[str] = None) -> Optional[bytes]:
    """Render close prices as an area chart; None when there is no history."""
    frame = history_frame(report, newest_first=False)
    frame = frame[frame["close"].notna()]
    if frame.empty:
        return None

    dates = [date_tick(d) for d in frame["date"]]
    closes = [float(c) for c in frame["close"]]
    line_color = color or price_color(report.change_amount)

    low, high = min(closes), max(closes)
    padding = (high - low) * 0.1 or max(abs(high) * 0.01, 0.01)

    fig, ax = plt.subplots(figsize=(9, 3.6))
    try:
        fig.patch.set_facecolor(_BACKGROUND)
        ax.set_facecolor(_BACKGROUND)
        ax.plot(dates, closes, color=line_color, linewidth=2)
        ax.fill_between(dates, closes, low - padding, color=line_color, alpha=0.2)
        ax.set_ylim(low - padding, high + padding)
        ax.set_title(f"{report.symbol} Price Trend", color="#f8fafc")
        if len(dates) > 8:
            ax.set_xticks(dates[:: max(1, len(dates) // 8)])
        ax.tick_params(colors=_AXIS, labelsize=9)
        ax.yaxis.set_major_formatter(FormatStrFormatter("%.1f"))
        ax.grid(True, axis="y", linestyle="--", color=_GRID, alpha=0.6)
        for spine in ax.spines.values():
            spine.set_visible(False)

        buf = io.BytesIO()
        fig.tight_layout()
        fig.savefig(buf, format="png", facecolor=fig.get_facecolor())
        return buf.getvalue()
    finally:
        plt.close(fig)
