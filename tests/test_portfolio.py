import random
import threading

import pytest

from quantdesk.market import Greeks, OptionChain, Quote
from quantdesk.metrics import PortfolioMetrics
from quantdesk.portfolio import PortfolioManager
from quantdesk.position import EnhancedPosition, ExtendedGreeks, ProbabilityMetrics

FUTURE = "2099-12-31"
PAST = "2000-01-01"


class FakeEngine:
    def __init__(self):
        self.calls = []

    def black_scholes(self, spot, strike, time_to_expiry, risk_free_rate, volatility, is_call):
        self.calls.append((spot, strike, risk_free_rate, volatility, is_call))
        return Greeks(delta=0.4, gamma=0.01, theta=-0.05, vega=0.1, rho=0.02,
                      implied_vol=volatility, price=2.5)

    def second_order_greeks(self, spot, strike, time_to_expiry, risk_free_rate,
                            volatility, is_call, quantity):
        return ExtendedGreeks(delta=40.0, gamma=1.0)

    def analyze_option(self, spot, strike, volatility, time_to_expiry, is_call, premium):
        return ProbabilityMetrics(probability_itm=0.35)


@pytest.fixture
def manager():
    return PortfolioManager(FakeEngine(), rng=random.Random(7), interval=0.01)


def test_update_position_stores_quantity_and_price(manager):
    manager.update_position("AAPL", 3.0, 1.25)
    pos = manager.position("AAPL")
    assert pos.symbol == "AAPL"
    assert pos.quantity == 3.0
    assert pos.avg_price == 1.25


def test_zero_quantity_closes_position_and_notifies(manager):
    seen = []
    manager.add_position_callback(lambda p: seen.append((p.symbol, p.quantity)))
    manager.update_position("AAPL", 3.0, 1.25)
    manager.update_position("AAPL", 0.0, 1.25)
    assert manager.positions() == []
    assert seen == [("AAPL", 3.0), ("AAPL", 0.0)]


def test_missing_position_is_empty(manager):
    assert manager.position("NOPE").symbol == ""


def test_returned_position_is_a_copy(manager):
    manager.update_position("AAPL", 3.0, 1.25)
    copy_ = manager.position("AAPL")
    copy_.quantity = 99.0
    assert manager.position("AAPL").quantity == 3.0


def test_update_position_price_sets_day_change(manager):
    manager.update_position("AAPL", 1.0, 1.0)
    manager.update_position_price("AAPL", 2.0, 150.0)
    manager.update_position_price("AAPL", 2.75, 151.0)
    pos = manager.position("AAPL")
    assert pos.current_price == 2.75
    assert pos.underlying_price == 151.0
    assert pos.day_change == pytest.approx(0.75)


def test_price_update_for_unknown_symbol_is_ignored(manager):
    manager.update_position_price("ZZZ", 2.0, 10.0)
    assert manager.positions() == []


def test_total_value_is_cash_plus_notional(manager):
    manager.cash = 1000.0
    manager.update_position("A", 2.0, 1.0)
    manager.update_position_price("A", 1.5, 50.0)
    manager.update_position("B", -1.0, 1.0)
    manager.update_position_price("B", 3.0, 60.0)
    notional = sum(p.notional_value() for p in manager.positions())
    assert manager.total_value == pytest.approx(1000.0 + notional)


def test_cash_and_add_cash(manager):
    manager.cash = 500.0
    manager.add_cash(250.0)
    manager.add_cash(-100.0)
    assert manager.cash == pytest.approx(650.0)
    assert manager.total_value == pytest.approx(650.0)


def test_risk_score_is_nan_without_positions(manager):
    manager.cash = 10.0
    assert manager.total_value == pytest.approx(10.0)
    assert manager.risk_score == pytest.approx(float("nan"), nan_ok=True)


def test_portfolio_greeks_weighted_by_quantity(manager):
    manager.update_position("A", 2.0, 1.0)
    manager.update_position_greeks("A", Greeks(delta=0.5, gamma=0.1, theta=-3.0))
    greeks = manager.portfolio_greeks()
    assert greeks.delta == pytest.approx(1.0)
    assert greeks.gamma == pytest.approx(0.2)
    assert greeks.theta == pytest.approx(-6.0)


def test_underlyings_are_unique_and_grouped(manager):
    for symbol, underlying in [("A1", "SPY"), ("A2", "QQQ"), ("A3", "SPY")]:
        manager.add_position(EnhancedPosition(symbol=symbol, underlying=underlying,
                                              quantity=1.0, current_price=1.0))
    assert sorted(manager.underlyings()) == ["QQQ", "SPY"]
    assert len(manager.underlyings()) == 2
    assert [p.symbol for p in manager.positions_by_underlying("SPY")] == ["A1", "A3"]


def test_underlying_exposures_sum_notional(manager):
    manager.add_position(EnhancedPosition(symbol="A1", underlying="SPY",
                                          quantity=1.0, current_price=2.0))
    manager.add_position(EnhancedPosition(symbol="A2", underlying="SPY",
                                          quantity=-3.0, current_price=1.0))
    manager.add_position(EnhancedPosition(symbol="B1", underlying="QQQ",
                                          quantity=1.0, current_price=4.0))
    exposures = manager.underlying_exposures()
    positions = {p.symbol: p for p in manager.positions()}
    assert exposures["SPY"] == pytest.approx(
        positions["A1"].notional_value() + positions["A2"].notional_value())
    assert exposures["QQQ"] == pytest.approx(positions["B1"].notional_value())


def test_expiring_positions(manager):
    manager.add_position(EnhancedPosition(symbol="OLD", expiration=PAST, quantity=1.0))
    manager.add_position(EnhancedPosition(symbol="NEW", expiration=FUTURE, quantity=1.0))
    assert [p.symbol for p in manager.expiring_positions(7)] == ["OLD"]


def test_high_risk_positions(manager):
    manager.add_position(EnhancedPosition(
        symbol="HOT", expiration=PAST, quantity=1.0,
        greeks=Greeks(delta=1.0, theta=-100.0)))
    manager.add_position(EnhancedPosition(
        symbol="CALM", expiration=FUTURE, quantity=1.0,
        greeks=Greeks(delta=0.05, theta=-1.0)))
    assert [p.symbol for p in manager.high_risk_positions(0.8)] == ["HOT"]
    assert len(manager.high_risk_positions(0.0)) == 2


def test_update_all_positions_prices_from_chain(manager):
    engine = FakeEngine()
    mgr = PortfolioManager(engine, rng=random.Random(1))
    symbol = "SPY991231C00450000"
    mgr.add_position(EnhancedPosition(symbol=symbol, underlying="SPY", strike=450.0,
                                      expiration=FUTURE, quantity=1.0, avg_price=2.0))
    quotes = {"SPY": Quote(symbol="SPY", last=455.0)}
    chains = {"SPY": OptionChain(underlying="SPY", calls=[
        Quote(symbol="OTHER", last=9.0),
        Quote(symbol=symbol, bid=3.0, ask=4.0, greeks=Greeks(implied_vol=0.2)),
    ])}
    mgr.update_all_positions(quotes, chains)
    pos = mgr.position(symbol)
    assert pos.current_price == pytest.approx(3.5)
    assert pos.underlying_price == 455.0
    assert engine.calls == [(455.0, 450.0, 0.05, 0.2, True)]
    assert pos.theoretical_value == 2.5
    assert pos.extended_greeks.delta == 40.0
    assert pos.implied_probability() == 0.35


def test_update_all_positions_skips_without_quote(manager):
    manager.add_position(EnhancedPosition(symbol="X", underlying="SPY", quantity=1.0,
                                          current_price=1.0))
    manager.update_all_positions({}, {})
    assert manager.position("X").underlying_price == 0.0


def test_metrics_of_empty_portfolio(manager):
    manager.cash = 2500.0
    metrics = manager.calculate_metrics()
    assert metrics.total_value == 2500.0
    assert metrics.cash == 2500.0
    assert metrics.var95 == 0.0
    assert metrics.var99 == 0.0
    assert metrics.expected_shortfall == 0.0
    assert metrics.leverage_ratio == 0.0


def test_metrics_aggregate_positions(manager):
    manager.cash = 1000.0
    manager.add_position(EnhancedPosition(
        symbol="A", underlying="SPY", quantity=1.0, current_price=2.0,
        underlying_price=100.0, extended_greeks=ExtendedGreeks(delta=10.0)))
    manager.add_position(EnhancedPosition(
        symbol="B", underlying="QQQ", quantity=1.0, current_price=2.0,
        underlying_price=100.0, extended_greeks=ExtendedGreeks(delta=5.0)))
    metrics = manager.calculate_metrics()
    notional = sum(p.notional_value() for p in manager.positions())
    assert metrics.net_delta == pytest.approx(15.0)
    assert metrics.total_value == pytest.approx(1000.0 + notional)
    assert metrics.underlying_exposures == manager.underlying_exposures()
    assert metrics.correlation_risk == pytest.approx(0.5)
    assert metrics.leverage_ratio == pytest.approx(notional / manager.total_value)
    assert metrics.var95 < 0
    assert metrics.var99 <= metrics.var95
    assert metrics.expected_shortfall <= metrics.var95


def test_analytics_loop_delivers_metrics(manager):
    manager.cash = 42.0
    received = []
    done = threading.Event()

    def on_metrics(metrics):
        received.append(metrics)
        done.set()

    manager.add_metrics_callback(on_metrics)
    with manager:
        assert manager.is_running
        assert done.wait(5.0)
    assert not manager.is_running
    assert isinstance(received[0], PortfolioMetrics) and received[0].total_value == 42.0
    assert len(manager.metrics_history) >= 1


def test_pnl_history_recorded_by_loop(manager):
    manager.add_position(EnhancedPosition(symbol="A", quantity=1.0, unrealized_pnl=12.5))
    done = threading.Event()
    manager.add_metrics_callback(lambda m: done.set())
    manager.start()
    try:
        assert done.wait(5.0)
    finally:
        manager.stop()
    assert manager.pnl_history["A"][0] == 12.5