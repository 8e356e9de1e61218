"""Runs strategies across option chains and ranks the opportunities found."""

from __future__ import annotations

import math
import statistics
from typing import Callable, Iterable, Mapping, Sequence

from quantdesk.conditions import FEAR, GREED, NEUTRAL, MarketConditions
from quantdesk.market import OptionChain, Quote
from quantdesk.strategies import (
    CalendarSpreadStrategy,
    IronCondorStrategy,
    LongStraddleStrategy,
    ShortStrangleStrategy,
    Strategy,
    StrategyOpportunity,
)

VIX_SYMBOL = "^VIX"
DEFAULT_VIX = 20.0
DEFAULT_CORRELATION = 0.7


def _annualized_volatility(prices: Sequence[float]) -> float:
    """Annualized standard deviation of daily log returns."""
    returns = [math.log(b / a) for a, b in zip(prices, prices[1:]) if a > 0 and b > 0]
    if len(returns) < 2:
        return 0.0
    return statistics.stdev(returns) * math.sqrt(252)


def _ranking_key(opportunity: StrategyOpportunity) -> float:
    score = opportunity.score()
    return -math.inf if math.isnan(score) else score


class StrategyEngine:
    """Holds a set of strategies and scans markets with them."""

    def __init__(
        self,
        realized_volatility: Callable[[Sequence[float]], float] | None = None,
        economic_data: object | None = None,
    ) -> None:
        self._realized_volatility = realized_volatility or _annualized_volatility
        self.economic_data = economic_data
        self._strategies: list[Strategy] = [
            IronCondorStrategy(),
            ShortStrangleStrategy(),
            CalendarSpreadStrategy(),
            LongStraddleStrategy(),
        ]

    def add_strategy(self, strategy: Strategy) -> None:
        self._strategies.append(strategy)

    def remove_strategy(self, name: str) -> None:
        self._strategies = [s for s in self._strategies if s.name != name]

    def available_strategies(self) -> list[str]:
        return [s.name for s in self._strategies]

    def scan_opportunities(
        self,
        option_chains: Mapping[str, OptionChain],
        underlying_quotes: Mapping[str, Quote],
    ) -> list[StrategyOpportunity]:
        """Run every strategy on every chain with a priced underlying, best first."""
        conditions = self.assess_market_conditions(underlying_quotes)
        opportunities: list[StrategyOpportunity] = []

        for underlying, chain in sorted(option_chains.items()):
            quote = underlying_quotes.get(underlying)
            if quote is None or quote.last is None:
                continue
            for strategy in self._strategies:
                try:
                    opportunity = strategy.analyze(underlying, quote.last, chain, conditions)
                except Exception:
                    continue
                if opportunity.confidence >= strategy.min_confidence:
                    opportunities.append(opportunity)

        opportunities.sort(key=_ranking_key, reverse=True)
        return opportunities

    def analyze_specific_strategy(
        self,
        strategy_name: str,
        underlying: str,
        chain: OptionChain,
        underlying_quote: Quote,
    ) -> StrategyOpportunity:
        """Run the named strategy; an empty opportunity if it or the price is missing."""
        if underlying_quote.last is None:
            return StrategyOpportunity()
        conditions = self.assess_market_conditions({underlying: underlying_quote})
        for strategy in self._strategies:
            if strategy.name == strategy_name:
                return strategy.analyze(underlying, underlying_quote.last, chain, conditions)
        return StrategyOpportunity()

    def assess_market_conditions(self, quotes: Mapping[str, Quote]) -> MarketConditions:
        conditions = MarketConditions()
        ordered = sorted(quotes.items())

        vix = quotes.get(VIX_SYMBOL)
        if vix is not None and vix.last is not None:
            conditions.vix_level = vix.last
            conditions.high_vol_environment = conditions.vix_level > 25.0
        else:
            conditions.vix_level = DEFAULT_VIX
            conditions.high_vol_environment = False

        implied_vols = [q.greeks.implied_vol for _, q in ordered if q.greeks is not None]
        if implied_vols:
            conditions.iv_rank = self._iv_rank(implied_vols)
            conditions.hv_rank = self._hv_rank(self._prices(q for _, q in ordered))

        if conditions.vix_level > 30:
            conditions.regime = FEAR
        elif conditions.vix_level < 15:
            conditions.regime = GREED
        else:
            conditions.regime = NEUTRAL

        conditions.correlations = DEFAULT_CORRELATION
        return conditions

    @staticmethod
    def _iv_rank(implied_vols: Sequence[float]) -> float:
        if not implied_vols:
            return 0.5
        low, high = min(implied_vols), max(implied_vols)
        spread = high - low
        if spread <= 0:
            return 0.5
        return (implied_vols[-1] - low) / spread

    def _hv_rank(self, prices: Sequence[float]) -> float:
        if len(prices) < 20:
            return 0.5
        return self._realized_volatility(prices) / 0.3

    @staticmethod
    def _prices(quotes: Iterable[Quote]) -> list[float]:
        return [q.last for q in quotes if q.last is not None]