"""Risk limits for a portfolio and the outcome of checking a portfolio against them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

HIGH_RISK_SCORE = 0.8


@dataclass
class RiskLimits:
    """Upper bounds on portfolio greeks, size, leverage and losses."""

    max_delta: float = 0.0
    max_gamma: float = 0.0
    max_theta: float = 0.0
    max_vega: float = 0.0
    max_position_size: float = 0.0
    max_portfolio_risk: float = 0.0
    max_leverage: float = 0.0
    max_concentration: float = 0.0
    max_var: float = 0.0
    max_drawdown: float = 0.0
    max_daily_loss: float = 0.0
    max_weekly_loss: float = 0.0
    max_monthly_loss: float = 0.0


@dataclass
class RiskAssessment:
    """Result of a risk check: violations, score, recommendations and hedges."""

    within_limits: bool = True
    violations: list[str] = field(default_factory=list)
    risk_score: float = 0.0
    recommendations: dict[str, float] = field(default_factory=dict)
    hedge_orders: list[Any] = field(default_factory=list)
    capital_efficiency: float = 0.0
    portfolio_heat: float = 0.0
    stress_test_score: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)

    def add_violation(self, violation: str) -> None:
        self.violations.append(violation)

    def add_recommendation(self, metric: str, value: float) -> None:
        self.recommendations[metric] = value

    def add_hedge_order(self, order: Any) -> None:
        self.hedge_orders.append(order)

    def has_violations(self) -> bool:
        return bool(self.violations)

    def is_high_risk(self) -> bool:
        return self.risk_score > HIGH_RISK_SCORE

    def needs_hedging(self) -> bool:
        return bool(self.hedge_orders)

    def update_timestamp(self) -> None:
        self.timestamp = datetime.now()

    def clear(self) -> None:
        """Return every field to its default and stamp the current time."""
        self.within_limits = True
        self.violations = []
        self.risk_score = 0.0
        self.recommendations = {}
        self.hedge_orders = []
        self.capital_efficiency = 0.0
        self.portfolio_heat = 0.0
        self.stress_test_score = 0.0
        self.update_timestamp()