import pytest

from quantdesk.engine import StrategyEngine
from quantdesk.market import Greeks, OptionChain, Quote
from quantdesk.strategies import Strategy, StrategyOpportunity


class _Broken(Strategy):
    name = "Broken"

    def analyze(self, underlying, spot, chain, conditions):
        raise RuntimeError("bad data")


class _Sure(Strategy):
    name = "Sure Thing"
    min_confidence = 0.5

    def analyze(self, underlying, spot, chain, conditions):
        return StrategyOpportunity(name=self.name, underlying=underlying, confidence=1.0,
                                   expected_profit=spot, max_risk=1.0)


DEFAULT_NAMES = ["Iron Condor", "Short Strangle", "Calendar Spread", "Long Straddle"]


def test_default_strategies():
    assert StrategyEngine().available_strategies() == DEFAULT_NAMES


def test_add_and_remove_strategy():
    engine = StrategyEngine()
    engine.add_strategy(_Sure())
    assert engine.available_strategies()[-1] == "Sure Thing"
    engine.remove_strategy("Iron Condor")
    assert "Iron Condor" not in engine.available_strategies()
    assert len(engine.available_strategies()) == 4


def test_remove_unknown_strategy_keeps_all():
    engine = StrategyEngine()
    engine.remove_strategy("Nothing")
    assert engine.available_strategies() == DEFAULT_NAMES


@pytest.mark.parametrize("vix, regime, high", [(35.0, "Fear", True), (10.0, "Greed", False), (26.0, "Neutral", True)])
def test_conditions_from_vix(vix, regime, high):
    conditions = StrategyEngine().assess_market_conditions({"^VIX": Quote(symbol="^VIX", last=vix)})
    assert conditions.vix_level == vix
    assert conditions.regime == regime
    assert conditions.high_vol_environment is high


def test_conditions_without_vix_use_default():
    conditions = StrategyEngine().assess_market_conditions({})
    assert conditions.vix_level == 20.0
    assert conditions.regime == "Neutral"
    assert conditions.high_vol_environment is False
    assert conditions.correlations == 0.7


def test_iv_rank_uses_last_symbol_in_order():
    quotes = {
        "ZZZ": Quote(symbol="ZZZ", last=10.0, greeks=Greeks(implied_vol=0.4)),
        "AAA": Quote(symbol="AAA", last=20.0, greeks=Greeks(implied_vol=0.1)),
    }
    conditions = StrategyEngine().assess_market_conditions(quotes)
    assert conditions.iv_rank == pytest.approx(1.0)
    assert conditions.hv_rank == 0.5


def test_iv_rank_flat_is_half():
    quotes = {s: Quote(symbol=s, greeks=Greeks(implied_vol=0.2)) for s in ("A", "B")}
    assert StrategyEngine().assess_market_conditions(quotes).iv_rank == 0.5


def test_hv_rank_uses_volatility_function():
    quotes = {f"S{i:02d}": Quote(last=100.0 + i, greeks=Greeks(implied_vol=0.2)) for i in range(20)}
    engine = StrategyEngine(realized_volatility=lambda prices: 0.3 * len(prices) / 20)
    assert engine.assess_market_conditions(quotes).hv_rank == pytest.approx(1.0)


def test_scan_ranks_by_score():
    chains = {"SPY": OptionChain(underlying="SPY")}
    quotes = {"SPY": Quote(symbol="SPY", last=100.0)}
    found = StrategyEngine().scan_opportunities(chains, quotes)
    assert [o.name for o in found] == ["Long Straddle", "Calendar Spread"]
    scores = [o.score() for o in found]
    assert scores == sorted(scores, reverse=True)


def test_scan_skips_unpriced_underlyings():
    chains = {"SPY": OptionChain(), "QQQ": OptionChain()}
    quotes = {"SPY": Quote(symbol="SPY"), "IWM": Quote(symbol="IWM", last=50.0)}
    assert StrategyEngine().scan_opportunities(chains, quotes) == []


def test_scan_ignores_failing_strategy():
    engine = StrategyEngine()
    engine.add_strategy(_Broken())
    engine.add_strategy(_Sure())
    found = engine.scan_opportunities({"SPY": OptionChain()}, {"SPY": Quote(last=100.0)})
    assert found[0].name == "Sure Thing"
    assert all(o.name != "Broken" for o in found)


def test_analyze_specific_strategy_by_name():
    result = StrategyEngine().analyze_specific_strategy(
        "Calendar Spread", "IWM", OptionChain(), Quote(symbol="IWM", last=50.0))
    assert result.name == "Calendar Spread"
    assert result.underlying == "IWM"
    assert result.expected_profit == 150.0


def test_analyze_specific_strategy_unknown_name():
    result = StrategyEngine().analyze_specific_strategy("Nope", "IWM", OptionChain(), Quote(last=50.0))
    assert result == StrategyOpportunity()


def test_analyze_specific_strategy_needs_price():
    result = StrategyEngine().analyze_specific_strategy("Long Straddle", "IWM", OptionChain(), Quote())
    assert result == StrategyOpportunity()