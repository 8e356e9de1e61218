"""Market data records: quotes, option chains and option sensitivities."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Greeks:
    """First-order option sensitivities together with the model price."""

    delta: float = 0.0
    gamma: float = 0.0
    theta: float = 0.0
    vega: float = 0.0
    rho: float = 0.0
    implied_vol: float = 0.0
    price: float = 0.0


@dataclass
class Quote:
    """A quote for an equity, index or option contract."""

    symbol: str = ""
    bid: float | None = None
    ask: float | None = None
    last: float | None = None
    greeks: Greeks | None = None

    def mid(self) -> float | None:
        """Midpoint of bid and ask, or None when either side is missing."""
        if self.bid is None or self.ask is None:
            return None
        return (self.bid + self.ask) / 2.0


@dataclass
class OptionChain:
    """Calls and puts listed on one underlying."""

    underlying: str = ""
    calls: list[Quote] = field(default_factory=list)
    puts: list[Quote] = field(default_factory=list)