from dataclasses import replace

from quantdesk.economic import (
    EconomicIndicator,
    MarketSentiment,
    StrategySignals,
    TreasuryYieldCurve,
)


def test_strategy_signals_defaults():
    signals = StrategySignals()
    assert signals.optimal_iv_rank == 0.5
    assert signals.high_volatility_environment is False
    assert signals.avoid_strategies == []
    assert signals.strategy_weights == {}


def test_strategy_signals_lists_not_shared():
    first = StrategySignals()
    second = StrategySignals()
    first.avoid_strategies.append("Iron Condor")
    first.strategy_weights["Long Straddle"] = 1.0
    assert second.avoid_strategies == []
    assert second.strategy_weights == {}


def test_yield_curve_holds_maturities():
    curve = TreasuryYieldCurve(yields={3: 5.2, 120: 4.3}, inverted=True)
    assert sorted(curve.yields) == [3, 120]
    assert curve.inverted is True
    assert TreasuryYieldCurve().yields == {}


def test_indicator_replace_round_trip():
    indicator = EconomicIndicator(symbol="DGS10", name="10-Year Treasury", value=4.3)
    changed = replace(indicator, value=4.5, previous_value=indicator.value)
    assert changed.previous_value == indicator.value
    assert replace(changed, value=indicator.value, previous_value=0.0) == indicator


def test_sentiment_fields():
    sentiment = MarketSentiment(vix_level=32.0, market_regime="Fear")
    assert sentiment.vix_level == 32.0
    assert sentiment.market_regime == "Fear"
    assert MarketSentiment().market_regime == ""