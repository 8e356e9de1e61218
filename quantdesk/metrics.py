"""Aggregate figures describing a whole portfolio."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime


@dataclass
class PortfolioMetrics:
    """Value, greeks, risk and exposure totals for a portfolio."""

    total_value: float = 0.0
    total_pnl: float = 0.0
    day_pnl: float = 0.0
    cash: float = 0.0

    net_delta: float = 0.0
    net_gamma: float = 0.0
    net_theta: float = 0.0
    net_vega: float = 0.0
    net_rho: float = 0.0

    net_volga: float = 0.0
    net_vanna: float = 0.0
    dollar_delta: float = 0.0
    dollar_gamma: float = 0.0

    var95: float = 0.0
    var99: float = 0.0
    expected_shortfall: float = 0.0
    max_drawdown: float = 0.0
    leverage_ratio: float = 0.0

    portfolio_prob_profit: float = 0.0
    sharpe_ratio: float = 0.0
    kelly_optimal: float = 0.0
    correlation_risk: float = 0.0

    underlying_exposures: dict[str, float] = field(default_factory=dict)
    sector_exposures: dict[str, float] = field(default_factory=dict)
    strategy_allocations: dict[str, float] = field(default_factory=dict)

    timestamp: datetime = field(default_factory=datetime.now)

    def add_underlying_exposure(self, underlying: str, exposure: float) -> None:
        self.underlying_exposures[underlying] = (
            self.underlying_exposures.get(underlying, 0.0) + exposure
        )

    def add_sector_exposure(self, sector: str, exposure: float) -> None:
        self.sector_exposures[sector] = self.sector_exposures.get(sector, 0.0) + exposure

    def add_strategy_allocation(self, strategy: str, allocation: float) -> None:
        self.strategy_allocations[strategy] = (
            self.strategy_allocations.get(strategy, 0.0) + allocation
        )

    def total_exposure(self) -> float:
        """Gross exposure across underlyings."""
        return sum(abs(exposure) for exposure in self.underlying_exposures.values())

    def max_single_exposure(self) -> float:
        """Largest gross exposure to one underlying."""
        return max((abs(e) for e in self.underlying_exposures.values()), default=0.0)

    def concentration_ratio(self) -> float:
        """Share of gross exposure held in the largest underlying; 0.0 when flat."""
        total = self.total_exposure()
        return self.max_single_exposure() / total if total > 0 else 0.0

    def update_timestamp(self) -> None:
        self.timestamp = datetime.now()

    def reset(self) -> None:
        """Return every figure to its default and stamp the current time."""
        fresh = PortfolioMetrics()
        for item in fields(self):
            setattr(self, item.name, getattr(fresh, item.name))