"""Option strategies that turn a chain and market conditions into opportunities."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Sequence

from quantdesk.conditions import FEAR, GREED, NEUTRAL, MarketConditions
from quantdesk.market import OptionChain, Quote

_NPOS = 2**64 - 1


def _divide(numerator: float, denominator: float) -> float:
    """Floating division that yields inf or nan instead of raising on zero."""
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


@dataclass
class StrategyOpportunity:
    """A trade idea produced by a strategy."""

    name: str = ""
    underlying: str = ""
    confidence: float = 0.0
    expected_profit: float = 0.0
    max_risk: float = 0.0
    probability_profit: float = 0.0
    sharpe_ratio: float = 0.0
    reasoning: str = ""
    suitable_for_current_vol: bool = False
    suitable_for_current_regime: bool = False
    optimal_iv_rank: float = 0.0
    legs: list[str] = field(default_factory=list)

    def score(self) -> float:
        """Reward per unit of risk, weighted by confidence."""
        return _divide(self.expected_profit, self.max_risk) * self.confidence


class Strategy(ABC):
    """Base for strategies the engine can run."""

    name: str = ""
    min_confidence: float = 0.65

    @abstractmethod
    def analyze(
        self,
        underlying: str,
        spot: float,
        chain: OptionChain,
        conditions: MarketConditions,
    ) -> StrategyOpportunity:
        """Evaluate the strategy for one underlying."""

    def _new_opportunity(self, underlying: str) -> StrategyOpportunity:
        return StrategyOpportunity(name=self.name, underlying=underlying)


def _credit(sold: Sequence[Quote], bought: Sequence[Quote]) -> float:
    credit = sum(q.bid for q in sold if q.bid is not None)
    return credit - sum(q.ask for q in bought if q.ask is not None)


class IronCondorStrategy(Strategy):
    """Sell an out-of-the-money put spread and call spread in high volatility."""

    name = "Iron Condor"
    min_confidence = 0.65

    def __init__(self, min_iv_rank: float = 0.6) -> None:
        self.min_iv_rank = min_iv_rank

    @staticmethod
    def _closest_strike(options: Sequence[Quote], target: float) -> Quote:
        needle = str(int(target))

        def distance(quote: Quote) -> float:
            position = quote.symbol.find(needle)
            if position < 0:
                position = _NPOS
            return abs(position - target)

        return min(options, key=distance, default=Quote())

    def analyze(self, underlying, spot, chain, conditions):
        opportunity = self._new_opportunity(underlying)

        if not conditions.high_vol_environment or conditions.iv_rank < self.min_iv_rank:
            opportunity.confidence = 0.3
            opportunity.reasoning = "Low IV environment not suitable for premium selling"
            return opportunity

        short_put = self._closest_strike(chain.puts, spot * 0.95)
        long_put = self._closest_strike(chain.puts, spot * 0.90)
        short_call = self._closest_strike(chain.calls, spot * 1.05)
        long_call = self._closest_strike(chain.calls, spot * 1.10)

        total_credit = _credit((short_put, short_call), (long_put, long_call))

        opportunity.expected_profit = total_credit * 100
        opportunity.max_risk = (500 - total_credit) * 100
        opportunity.probability_profit = 0.68
        opportunity.sharpe_ratio = _divide(opportunity.expected_profit, opportunity.max_risk)
        opportunity.confidence = 0.85 if conditions.iv_rank > 0.75 else 0.70
        opportunity.suitable_for_current_vol = True
        opportunity.suitable_for_current_regime = conditions.regime != FEAR
        opportunity.optimal_iv_rank = 0.75
        opportunity.reasoning = (
            f"High IV rank ({int(conditions.iv_rank * 100)}%) favors premium selling strategies"
        )
        opportunity.legs = [
            f"{short_put.symbol} SELL",
            f"{long_put.symbol} BUY",
            f"{short_call.symbol} SELL",
            f"{long_call.symbol} BUY",
        ]
        return opportunity


class ShortStrangleStrategy(Strategy):
    """Sell an out-of-the-money put and call near 30 delta."""

    name = "Short Strangle"

    @staticmethod
    def _otm_option(options: Sequence[Quote], is_call: bool) -> Quote:
        target_delta = 0.3 if is_call else -0.3

        def distance(quote: Quote) -> float:
            if quote.greeks is not None:
                delta = quote.greeks.delta
            else:
                delta = 0.5 if "C" in quote.symbol else -0.5
            return abs(delta - target_delta)

        return min(options, key=distance, default=Quote())

    def analyze(self, underlying, spot, chain, conditions):
        opportunity = self._new_opportunity(underlying)

        if not conditions.high_vol_environment:
            opportunity.confidence = 0.4
            opportunity.reasoning = "Normal volatility environment"
            return opportunity

        short_put = self._otm_option(chain.puts, is_call=False)
        short_call = self._otm_option(chain.calls, is_call=True)

        total_credit = _credit((short_put, short_call), ())

        opportunity.expected_profit = total_credit * 100
        opportunity.max_risk = (spot * 0.2 - total_credit) * 100
        opportunity.probability_profit = 0.60
        opportunity.sharpe_ratio = _divide(opportunity.expected_profit, opportunity.max_risk)
        opportunity.confidence = 0.80 if conditions.iv_rank > 0.8 else 0.65
        opportunity.suitable_for_current_vol = True
        opportunity.suitable_for_current_regime = conditions.regime == NEUTRAL
        opportunity.optimal_iv_rank = 0.80
        opportunity.reasoning = "High volatility with neutral market outlook"
        opportunity.legs = [f"{short_put.symbol} SELL", f"{short_call.symbol} SELL"]
        return opportunity


class CalendarSpreadStrategy(Strategy):
    """Sell near-term and buy longer-term options at the same strike."""

    name = "Calendar Spread"

    def analyze(self, underlying, spot, chain, conditions):
        opportunity = self._new_opportunity(underlying)
        opportunity.confidence = 0.65
        opportunity.expected_profit = 150.0
        opportunity.max_risk = 300.0
        opportunity.probability_profit = 0.55
        opportunity.reasoning = "Time decay advantage in neutral environment"
        opportunity.suitable_for_current_vol = 0.4 < conditions.iv_rank < 0.8
        opportunity.suitable_for_current_regime = conditions.regime == NEUTRAL
        opportunity.optimal_iv_rank = 0.60
        return opportunity


class LongStraddleStrategy(Strategy):
    """Buy a put and a call to profit from a volatility expansion."""

    name = "Long Straddle"

    def analyze(self, underlying, spot, chain, conditions):
        opportunity = self._new_opportunity(underlying)

        if conditions.iv_rank > 0.5:
            opportunity.confidence = 0.3
            opportunity.reasoning = "High IV makes long premium expensive"
            return opportunity

        opportunity.confidence = 0.75
        opportunity.expected_profit = 300.0
        opportunity.max_risk = 250.0
        opportunity.probability_profit = 0.45
        opportunity.reasoning = "Low IV with volatility expansion expected"
        opportunity.suitable_for_current_vol = conditions.iv_rank < 0.3
        opportunity.suitable_for_current_regime = conditions.regime in (FEAR, GREED)
        opportunity.optimal_iv_rank = 0.25
        return opportunity