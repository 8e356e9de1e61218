"""An option or equity position with its pricing analytics."""

from __future__ import annotations

import math
import re
import time
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Protocol

from quantdesk.market import Greeks

DEFAULT_EXPIRY_DAYS = 30
CONTRACT_MULTIPLIER = 100

_DATE_PATTERN = re.compile(r"\s*(\d{1,4})-(\d{1,2})-(\d{1,2})")


@dataclass
class ExtendedGreeks:
    """First- and second-order sensitivities scaled to a position."""

    delta: float = 0.0
    gamma: float = 0.0
    theta: float = 0.0
    vega: float = 0.0
    rho: float = 0.0
    volga: float = 0.0
    vanna: float = 0.0
    dollar_delta: float = 0.0
    dollar_gamma: float = 0.0


@dataclass
class ProbabilityMetrics:
    """Probabilities of where an option finishes."""

    probability_itm: float = 0.0
    probability_otm: float = 0.0
    probability_touch: float = 0.0
    expected_value: float = 0.0


class PricingEngine(Protocol):
    """What a position needs from a pricing engine to refresh its analytics."""

    def black_scholes(
        self,
        spot: float,
        strike: float,
        time_to_expiry: float,
        risk_free_rate: float,
        volatility: float,
        is_call: bool,
    ) -> Greeks: ...

    def second_order_greeks(
        self,
        spot: float,
        strike: float,
        time_to_expiry: float,
        risk_free_rate: float,
        volatility: float,
        is_call: bool,
        quantity: float,
    ) -> ExtendedGreeks: ...

    def analyze_option(
        self,
        spot: float,
        strike: float,
        volatility: float,
        time_to_expiry: float,
        is_call: bool,
        premium: float,
    ) -> ProbabilityMetrics: ...


def _expiration_timestamp(expiration: str) -> float | None:
    """Local midnight of a YYYY-MM-DD date as a POSIX timestamp, or None."""
    match = _DATE_PATTERN.match(expiration)
    if match is None:
        return None
    year, month, day = (int(part) for part in match.groups())
    if not 1 <= month <= 12 or not 1 <= day <= 31 or year < 1:
        return None
    # Days past the end of the month roll into the next one.
    expiry = date(year, month, 1) + timedelta(days=day - 1)
    return datetime(expiry.year, expiry.month, expiry.day).timestamp()


@dataclass
class EnhancedPosition:
    """A held contract together with its greeks, risk figures and P&L."""

    symbol: str = ""
    underlying: str = ""
    option_symbol: str = ""
    strike: float = 0.0
    expiration: str = ""
    is_call: bool = True
    quantity: float = 0.0
    avg_price: float = 0.0
    current_price: float = 0.0
    underlying_price: float = 0.0

    greeks: Greeks = field(default_factory=Greeks)
    extended_greeks: ExtendedGreeks = field(default_factory=ExtendedGreeks)
    prob_metrics: ProbabilityMetrics = field(default_factory=ProbabilityMetrics)

    theoretical_value: float = 0.0
    implied_vol: float = 0.0
    unrealized_pnl: float = 0.0
    day_change: float = 0.0
    delta_adjusted_exposure: float = 0.0
    gamma_risk: float = 0.0
    vega_risk: float = 0.0
    theta_decay: float = 0.0

    entry_time: datetime = field(default_factory=datetime.now)
    last_update: datetime = field(default_factory=datetime.now)

    def update_analytics(
        self,
        underlying_px: float,
        vol: float,
        risk_free_rate: float,
        engine: PricingEngine,
    ) -> None:
        """Reprice the position and refresh its P&L and risk figures."""
        self.underlying_price = underlying_px
        self.implied_vol = vol
        self.last_update = datetime.now()

        time_to_expiry = self.days_to_expiry() / 365.0

        if time_to_expiry > 0 and vol > 0 and self.underlying_price > 0 and self.strike > 0:
            self.greeks = engine.black_scholes(
                self.underlying_price, self.strike, time_to_expiry,
                risk_free_rate, vol, self.is_call,
            )
            self.theoretical_value = self.greeks.price
            self.extended_greeks = engine.second_order_greeks(
                self.underlying_price, self.strike, time_to_expiry,
                risk_free_rate, vol, self.is_call, self.quantity,
            )
            self.prob_metrics = engine.analyze_option(
                self.underlying_price, self.strike, vol,
                time_to_expiry, self.is_call, self.current_price,
            )

        self.unrealized_pnl = (
            (self.current_price - self.avg_price) * self.quantity * CONTRACT_MULTIPLIER
        )
        self.delta_adjusted_exposure = self.greeks.delta * self.quantity * self.underlying_price
        self.gamma_risk = abs(
            self.greeks.gamma * self.quantity * self.underlying_price ** 2 * 0.01
        )
        self.vega_risk = abs(self.greeks.vega * self.quantity)
        self.theta_decay = self.greeks.theta * self.quantity

    def days_to_expiry(self) -> float:
        """Days until expiration in whole hours; an unreadable date counts as 30 days out."""
        now = time.time()
        expiry = _expiration_timestamp(self.expiration)
        if expiry is None:
            return float(DEFAULT_EXPIRY_DAYS)
        hours = math.trunc((expiry - now) / 3600)
        return hours / 24.0

    def notional_value(self) -> float:
        return self.current_price * abs(self.quantity) * CONTRACT_MULTIPLIER

    def implied_probability(self) -> float:
        return self.prob_metrics.probability_itm

    def moneyness(self) -> float:
        """Spot over strike for calls, strike over spot for puts; 1.0 without prices."""
        if self.underlying_price <= 0 or self.strike <= 0:
            return 1.0
        if self.is_call:
            return self.underlying_price / self.strike
        return self.strike / self.underlying_price

    def is_expiring(self, days: int = 7) -> bool:
        return self.days_to_expiry() <= days

    def is_option(self) -> bool:
        return bool(self.option_symbol) or (self.strike > 0 and bool(self.expiration))

    def is_equity(self) -> bool:
        return not self.is_option()