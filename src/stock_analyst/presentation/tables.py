"""Tabular views over the report history."""
from __future__ import annotations

import pandas as pd

from stock_analyst.domain.models.analysis import AnalysisReport

HISTORY_COLUMNS = [
    "date",
    "close",
    "change_percent",
    "open",
    "high",
    "low",
    "volume",
    "turnover",
    "turnover_rate",
]


def history_frame(report: AnalysisReport, *, newest_first: bool = True) -> pd.DataFrame:
    """Return the daily bars as a DataFrame, newest row first by default."""
    frame = pd.DataFrame(
        [
            {
                "date": bar.date,
                "close": bar.close,
                "change_percent": bar.change_percent,
                "open": bar.open,
                "high": bar.high,
                "low": bar.low,
                "volume": bar.volume,
                "turnover": bar.turnover,
                "turnover_rate": bar.turnover_rate,
            }
            for bar in report.history
        ],
        columns=HISTORY_COLUMNS,
    )
    frame = frame.sort_values("date", ascending=not newest_first, kind="stable")
    frame = frame.reset_index(drop=True)
    # Keep None (not NaN) in optional numeric columns so formatters see missing values.
    return frame.astype(object).where(frame.notna(), None)
