"""Snapshot of the market environment used to judge strategies."""

from __future__ import annotations

from dataclasses import dataclass

FEAR = "Fear"
GREED = "Greed"
NEUTRAL = "Neutral"


@dataclass
class MarketConditions:
    """Volatility level, rank and regime of the market."""

    vix_level: float = 0.0
    iv_rank: float = 0.0
    hv_rank: float = 0.0
    regime: str = ""
    high_vol_environment: bool = False
    correlations: float = 0.0
    trend_strength: float = 0.0
    market_stress: float = 0.0
    liquidity_condition: float = 0.0

    def is_fear_regime(self) -> bool:
        return self.regime == FEAR

    def is_greed_regime(self) -> bool:
        return self.regime == GREED

    def is_neutral_regime(self) -> bool:
        return self.regime == NEUTRAL

    def is_trending_market(self) -> bool:
        return self.trend_strength > 0.7

    def is_stressed_market(self) -> bool:
        return self.market_stress > 0.8

    def is_high_liquidity(self) -> bool:
        return self.liquidity_condition > 0.7