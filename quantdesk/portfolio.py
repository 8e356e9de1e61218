"""Portfolio bookkeeping: positions, cash, aggregate greeks and risk metrics."""

from __future__ import annotations

import copy
import math
import random
import statistics
import threading
from collections.abc import Callable, Iterator, Mapping
from datetime import datetime

from quantdesk.market import Greeks, OptionChain, Quote
from quantdesk.metrics import PortfolioMetrics
from quantdesk.position import CONTRACT_MULTIPLIER, EnhancedPosition, PricingEngine

RISK_FREE_RATE = 0.05
SIMULATIONS = 10_000
MARKET_MOVE_STDEV = 0.02
HISTORY_LENGTH = 252
TRADING_DAYS = 252
SHARPE_HURDLE = 0.02

PositionCallback = Callable[[EnhancedPosition], None]
MetricsCallback = Callable[[PortfolioMetrics], None]


class PortfolioManager:
    """Tracks positions and cash and computes portfolio-wide analytics."""

    def __init__(
        self,
        engine: PricingEngine,
        *,
        rng: random.Random | None = None,
        interval: float = 1.0,
    ) -> None:
        self._engine = engine
        self._rng = rng or random.Random()
        self._interval = interval

        self._positions: dict[str, EnhancedPosition] = {}
        self._metrics_history: list[PortfolioMetrics] = []
        self._pnl_history: dict[str, list[float]] = {}
        self._cash = 0.0

        self._positions_lock = threading.RLock()
        self._metrics_lock = threading.RLock()

        self._total_value = 0.0
        self._total_pnl = 0.0
        self._risk_score = 0.0

        self._position_callbacks: list[PositionCallback] = []
        self._metrics_callbacks: list[MetricsCallback] = []

        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

    # Lifecycle -------------------------------------------------------------

    def start(self) -> None:
        """Start the background analytics loop; does nothing if already running."""
        with self._positions_lock:
            if self.is_running:
                return
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._analytics_loop, daemon=True)
            self._thread.start()

    def stop(self) -> None:
        """Stop the analytics loop and wait for it to finish."""
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def __enter__(self) -> PortfolioManager:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    # Position updates ------------------------------------------------------

    def _sorted_positions(self) -> Iterator[EnhancedPosition]:
        for symbol in sorted(self._positions):
            yield self._positions[symbol]

    def add_position(self, position: EnhancedPosition) -> None:
        """Store a copy of a fully described position, replacing any with its symbol."""
        with self._positions_lock:
            stored = copy.deepcopy(position)
            self._positions[stored.symbol] = stored
            if stored.quantity == 0.0:
                del self._positions[stored.symbol]
            self._update_total_values()
            self._notify_position_updated(stored)

    def update_position(self, symbol: str, quantity: float, price: float) -> None:
        """Set quantity and average price; a zero quantity closes the position."""
        with self._positions_lock:
            position = self._positions.setdefault(symbol, EnhancedPosition(symbol=symbol))
            position.symbol = symbol
            position.quantity = quantity
            position.avg_price = price
            position.last_update = datetime.now()
            if quantity == 0.0:
                del self._positions[symbol]
            self._update_total_values()
            self._notify_position_updated(position)

    def update_position_price(self, symbol: str, price: float, underlying_price: float) -> None:
        """Record a new price; the day change is the move from the previous price."""
        with self._positions_lock:
            position = self._positions.get(symbol)
            if position is None:
                return
            old_price = position.current_price
            position.current_price = price
            position.underlying_price = underlying_price
            position.day_change = price - old_price
            position.last_update = datetime.now()
            self._update_total_values()
            self._notify_position_updated(position)

    def update_position_greeks(self, symbol: str, greeks: Greeks) -> None:
        with self._positions_lock:
            position = self._positions.get(symbol)
            if position is None:
                return
            position.greeks = copy.copy(greeks)
            self._notify_position_updated(position)

    def update_all_positions(
        self,
        quotes: Mapping[str, Quote],
        chains: Mapping[str, OptionChain],
    ) -> None:
        """Reprice every position whose underlying has a last price."""
        with self._positions_lock:
            for symbol, position in sorted(self._positions.items()):
                quote = quotes.get(position.underlying)
                if quote is None or quote.last is None:
                    continue
                position.underlying_price = quote.last

                chain = chains.get(position.underlying)
                if chain is not None:
                    for options in (chain.calls, chain.puts):
                        match = next((o for o in options if o.symbol == symbol), None)
                        if match is not None:
                            _apply_option_quote(position, match)

                position.update_analytics(
                    position.underlying_price,
                    position.greeks.implied_vol,
                    RISK_FREE_RATE,
                    self._engine,
                )
            self._update_total_values()

    # Queries ---------------------------------------------------------------

    def calculate_metrics(self) -> PortfolioMetrics:
        """Aggregate value, P&L, greeks, exposures and simulated risk."""
        with self._positions_lock:
            metrics = PortfolioMetrics(cash=self._cash, timestamp=datetime.now())
            for position in self._sorted_positions():
                notional = position.notional_value()
                extended = position.extended_greeks
                metrics.total_value += notional
                metrics.total_pnl += position.unrealized_pnl
                metrics.day_pnl += position.day_change * position.quantity * CONTRACT_MULTIPLIER
                metrics.net_delta += extended.delta
                metrics.net_gamma += extended.gamma
                metrics.net_theta += extended.theta
                metrics.net_vega += extended.vega
                metrics.net_rho += extended.rho
                metrics.net_volga += extended.volga
                metrics.net_vanna += extended.vanna
                metrics.dollar_delta += extended.dollar_delta
                metrics.dollar_gamma += extended.dollar_gamma
                metrics.add_underlying_exposure(position.underlying, notional)
            metrics.total_value += metrics.cash

            self._calculate_portfolio_risk(metrics)
            self._calculate_advanced_metrics(metrics)
            return metrics

    def positions(self) -> list[EnhancedPosition]:
        with self._positions_lock:
            return [copy.deepcopy(p) for p in self._sorted_positions()]

    def position(self, symbol: str) -> EnhancedPosition:
        """A copy of the position, or an empty position when none is held."""
        with self._positions_lock:
            found = self._positions.get(symbol)
            return copy.deepcopy(found) if found is not None else EnhancedPosition()

    def positions_by_underlying(self, underlying: str) -> list[EnhancedPosition]:
        with self._positions_lock:
            return [
                copy.deepcopy(p) for p in self._sorted_positions() if p.underlying == underlying
            ]

    def expiring_positions(self, days: int = 7) -> list[EnhancedPosition]:
        with self._positions_lock:
            return [copy.deepcopy(p) for p in self._sorted_positions() if p.is_expiring(days)]

    def high_risk_positions(self, threshold: float = 0.8) -> list[EnhancedPosition]:
        with self._positions_lock:
            return [
                copy.deepcopy(p)
                for p in self._sorted_positions()
                if self._position_risk(p) > threshold
            ]

    @property
    def cash(self) -> float:
        with self._positions_lock:
            return self._cash

    @cash.setter
    def cash(self, value: float) -> None:
        with self._positions_lock:
            self._cash = value
            self._update_total_values()

    def add_cash(self, amount: float) -> None:
        with self._positions_lock:
            self._cash += amount
            self._update_total_values()

    @property
    def total_value(self) -> float:
        return self._total_value

    @property
    def total_pnl(self) -> float:
        return self._total_pnl

    @property
    def risk_score(self) -> float:
        """Mean position risk score; NaN when no positions are held."""
        return self._risk_score

    @property
    def metrics_history(self) -> list[PortfolioMetrics]:
        with self._metrics_lock:
            return list(self._metrics_history)

    @property
    def pnl_history(self) -> dict[str, list[float]]:
        with self._positions_lock:
            return {symbol: list(values) for symbol, values in self._pnl_history.items()}

    def portfolio_greeks(self) -> Greeks:
        """Quantity-weighted sum of first-order greeks."""
        with self._positions_lock:
            total = Greeks()
            for position in self._sorted_positions():
                total.delta += position.greeks.delta * position.quantity
                total.gamma += position.greeks.gamma * position.quantity
                total.theta += position.greeks.theta * position.quantity
                total.vega += position.greeks.vega * position.quantity
                total.rho += position.greeks.rho * position.quantity
            return total

    def underlyings(self) -> list[str]:
        """Distinct underlyings in order of first appearance by symbol."""
        with self._positions_lock:
            return list(dict.fromkeys(p.underlying for p in self._sorted_positions()))

    def underlying_exposures(self) -> dict[str, float]:
        with self._positions_lock:
            exposures: dict[str, float] = {}
            for position in self._sorted_positions():
                exposures[position.underlying] = (
                    exposures.get(position.underlying, 0.0) + position.notional_value()
                )
            return dict(sorted(exposures.items()))

    def add_position_callback(self, callback: PositionCallback) -> None:
        with self._positions_lock:
            self._position_callbacks.append(callback)

    def add_metrics_callback(self, callback: MetricsCallback) -> None:
        with self._metrics_lock:
            self._metrics_callbacks.append(callback)

    # Internals -------------------------------------------------------------

    def _analytics_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                metrics = self.calculate_metrics()
                self._update_metrics_history(metrics)
                self._update_pnl_history()
                with self._metrics_lock:
                    callbacks = list(self._metrics_callbacks)
                for callback in callbacks:
                    callback(metrics)
            except Exception:
                pass
            self._stop_event.wait(self._interval)

    def _calculate_portfolio_risk(self, metrics: PortfolioMetrics) -> None:
        linear = 0.0
        quadratic = 0.0
        for position in self._sorted_positions():
            spot = position.underlying_price
            linear += position.extended_greeks.delta * spot
            quadratic += 0.5 * position.extended_greeks.gamma * spot * spot

        simulations = sorted(
            linear * move + quadratic * move * move
            for move in (self._rng.gauss(0.0, MARKET_MOVE_STDEV) for _ in range(SIMULATIONS))
        )
        tail = int(SIMULATIONS * 0.05)
        metrics.var95 = simulations[tail]
        metrics.var99 = simulations[int(SIMULATIONS * 0.01)]
        metrics.expected_shortfall = sum(simulations[:tail]) / (SIMULATIONS * 0.05)

    def _calculate_advanced_metrics(self, metrics: PortfolioMetrics) -> None:
        metrics.leverage_ratio = self._leverage_ratio()
        metrics.correlation_risk = self._concentration_risk()

        with self._metrics_lock:
            values = [m.total_value for m in self._metrics_history]
        pairs = list(zip(values, values[1:]))
        if not pairs or any(previous == 0 for previous, _ in pairs):
            return
        returns = [(current - previous) / previous for previous, current in pairs]
        average = statistics.fmean(returns)
        volatility = math.sqrt(statistics.pvariance(returns, mu=average) * TRADING_DAYS)
        if volatility > 0:
            metrics.sharpe_ratio = (average * TRADING_DAYS - SHARPE_HURDLE) / volatility

    def _update_metrics_history(self, metrics: PortfolioMetrics) -> None:
        with self._metrics_lock:
            self._metrics_history.append(metrics)
            del self._metrics_history[:-HISTORY_LENGTH]

    def _update_pnl_history(self) -> None:
        with self._positions_lock:
            for symbol, position in sorted(self._positions.items()):
                history = self._pnl_history.setdefault(symbol, [])
                history.append(position.unrealized_pnl)
                del history[:-HISTORY_LENGTH]

    def _notify_position_updated(self, position: EnhancedPosition) -> None:
        for callback in self._position_callbacks:
            callback(position)

    def _update_total_values(self) -> None:
        total_value = self._cash
        total_pnl = 0.0
        risk = 0.0
        for position in self._sorted_positions():
            total_value += position.notional_value()
            total_pnl += position.unrealized_pnl
            risk += self._position_risk(position)
        self._total_value = total_value
        self._total_pnl = total_pnl
        self._risk_score = risk / len(self._positions) if self._positions else math.nan

    def _concentration_risk(self) -> float:
        exposures = [abs(e) for e in self.underlying_exposures().values()]
        total = sum(exposures)
        return max(exposures) / total if total > 0 else 0.0

    def _leverage_ratio(self) -> float:
        notional = sum(p.notional_value() for p in self._positions.values())
        equity = self._total_value
        return notional / equity if equity > 0 else 0.0

    @staticmethod
    def _position_risk(position: EnhancedPosition) -> float:
        time_risk = 0.5 if position.is_expiring(7) else 0.0
        delta_risk = min(1.0, abs(position.greeks.delta) / 0.5)
        theta_risk = min(1.0, abs(position.greeks.theta) / 50.0)
        return (time_risk + delta_risk + theta_risk) / 3.0


def _apply_option_quote(position: EnhancedPosition, option: Quote) -> None:
    if option.last is not None:
        position.current_price = option.last
    else:
        mid = option.mid()
        if mid is not None:
            position.current_price = mid
    if option.greeks is not None:
        position.greeks = copy.copy(option.greeks)