"""Domain models describing the analysis report returned by the model."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    VERY_HIGH = "Very High"

    @classmethod
    def coerce(cls, value: Optional[str]) -> Optional["RiskLevel"]:
        """Match a free-text level case-insensitively; None when unrecognized."""
        if not value:
            return None
        key = " ".join(str(value).split()).lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        return None


class TradingAction(str, Enum):
    BUY = "Buy"
    SELL = "Sell"
    HOLD = "Hold"
    WAIT = "Wait"

    @classmethod
    def coerce(cls, value: Optional[str]) -> Optional["TradingAction"]:
        """Match a free-text action case-insensitively; None when unrecognized."""
        if not value:
            return None
        key = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        return None


@dataclass(frozen=True)
class DailyBar:
    """One trading day as reported by the model."""

    date: str  # YYYY-MM-DD
    close: float
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    change_percent: Optional[float] = None
    # Magnitude-suffixed display strings such as "50M" or "0.5%".
    volume: str = ""
    turnover: str = ""
    turnover_rate: str = ""


@dataclass(frozen=True)
class TrendAnalysis:
    summary: str = ""
    support_levels: Tuple[str, ...] = ()
    resistance_levels: Tuple[str, ...] = ()


@dataclass(frozen=True)
class VolumeAnalysis:
    volume: str = ""
    assessment: str = ""


@dataclass(frozen=True)
class RiskAssessment:
    volatility: str = ""
    risk_level: str = ""  # raw value; see RiskLevel.coerce
    description: str = ""


@dataclass(frozen=True)
class PriceTargets:
    short_term: str = ""
    mid_term: str = ""


@dataclass(frozen=True)
class TechnicalLevels:
    summary: str = ""
    indicators: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TradingAdvice:
    action: str = ""  # raw value; see TradingAction.coerce
    entry_zone: str = ""
    stop_loss: str = ""
    rationale: str = ""


@dataclass(frozen=True)
class GroundingSource:
    """A web result the model cited while answering."""

    title: str
    uri: str


@dataclass(frozen=True)
class AnalysisReport:
    """Validated, immutable analysis for a single ticker."""

    symbol: str
    company_name: str
    currency: str
    last_updated: str
    current_price: float
    change_amount: float
    change_percent: float
    history: Tuple[DailyBar, ...]
    trend_analysis: TrendAnalysis
    volume_analysis: VolumeAnalysis
    risk_assessment: RiskAssessment
    price_targets: PriceTargets
    technical_levels: TechnicalLevels
    trading_advice: TradingAdvice
    sources: Tuple[GroundingSource, ...] = ()

    @property
    def latest_bar(self) -> DailyBar:
        return self.history[-1]

    @property
    def is_positive(self) -> bool:
        return self.change_amount >= 0

    def to_payload(self) -> Dict[str, Any]:
        """Return the camelCase wire form the model is asked to produce."""
        return {
            "symbol": self.symbol,
            "companyName": self.company_name,
            "currentPrice": self.current_price,
            "currency": self.currency,
            "changeAmount": self.change_amount,
            "changePercent": self.change_percent,
            "lastUpdated": self.last_updated,
            "history": [
                {
                    "date": bar.date,
                    "open": bar.open,
                    "close": bar.close,
                    "high": bar.high,
                    "low": bar.low,
                    "changePercent": bar.change_percent,
                    "volume": bar.volume,
                    "turnover": bar.turnover,
                    "turnoverRate": bar.turnover_rate,
                }
                for bar in self.history
            ],
            "trendAnalysis": {
                "summary": self.trend_analysis.summary,
                "supportLevels": list(self.trend_analysis.support_levels),
                "resistanceLevels": list(self.trend_analysis.resistance_levels),
            },
            "volumeAnalysis": {
                "volume": self.volume_analysis.volume,
                "assessment": self.volume_analysis.assessment,
            },
            "riskAssessment": {
                "volatility": self.risk_assessment.volatility,
                "riskLevel": self.risk_assessment.risk_level,
                "description": self.risk_assessment.description,
            },
            "priceTargets": {
                "shortTerm": self.price_targets.short_term,
                "midTerm": self.price_targets.mid_term,
            },
            "technicalLevels": {
                "summary": self.technical_levels.summary,
                "indicators": list(self.technical_levels.indicators),
            },
            "tradingAdvice": {
                "action": self.trading_advice.action,
                "entryZone": self.trading_advice.entry_zone,
                "stopLoss": self.trading_advice.stop_loss,
                "rationale": self.trading_advice.rationale,
            },
            "sources": [{"title": s.title, "uri": s.uri} for s in self.sources],
        }
