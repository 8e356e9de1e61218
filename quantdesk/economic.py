"""Economic and sentiment records used to shape strategy choice."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class EconomicIndicator:
    """One reading of an economic series with its change and history figures."""

    symbol: str = ""
    name: str = ""
    value: float = 0.0
    unit: str = ""
    date: datetime = field(default_factory=datetime.now)
    source: str = ""
    previous_value: float = 0.0
    change: float = 0.0
    change_percent: float = 0.0
    historical_average: float = 0.0
    volatility: float = 0.0


@dataclass
class MarketSentiment:
    """Fear and volatility gauges for the broad market."""

    vix_level: float = 0.0
    put_call_ratio: float = 0.0
    fear_greed_index: float = 0.0
    market_regime: str = ""
    correlation_spy_vix: float = 0.0
    skew_index: float = 0.0
    term_structure: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class TreasuryYieldCurve:
    """Yields keyed by maturity in months, with shape measures."""

    yields: dict[int, float] = field(default_factory=dict)
    slope: float = 0.0
    curvature: float = 0.0
    inverted: bool = False
    parallel_shift: float = 0.0
    twist_risk: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class StrategySignals:
    """Strategy guidance derived from the economic picture."""

    high_volatility_environment: bool = False
    yield_curve_inversion: bool = False
    recessionary: bool = False
    optimal_iv_rank: float = 0.5
    recommended_strategy: str = ""
    avoid_strategies: list[str] = field(default_factory=list)
    confidence_level: float = 0.0
    strategy_weights: dict[str, float] = field(default_factory=dict)