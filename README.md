# quantdesk

`quantdesk` is a small, dependency-free library for options traders. It
scores a set of classic option strategies against current market
conditions, keeps a book of option positions with their Greeks and P&L,
and provides plain data records for risk limits, risk assessments and
economic indicators.

It is a library only: there is no command to run. Import the modules you
need.

## Market data — `quantdesk.market`

- `Greeks`: `delta`, `gamma`, `theta`, `vega`, `rho`, `implied_vol` and
  `price`, all defaulting to 0.
- `Quote`: a quote for an underlying or an option contract, with a
  `symbol` and optional `bid`, `ask`, `last` and `greeks`. `Quote.mid()`
  returns the bid/ask midpoint, or `None` when either side is missing.
- `OptionChain`: the `calls` and `puts` quoted for one `underlying`.

## Market conditions — `quantdesk.conditions`

`MarketConditions` holds `vix_level`, `iv_rank`, `hv_rank`, `regime`
(`"Fear"`, `"Greed"` or `"Neutral"`), `high_vol_environment`,
`correlations`, `trend_strength`, `market_stress` and
`liquidity_condition`. The predicates `is_fear_regime()`,
`is_greed_regime()` and `is_neutral_regime()` test the regime;
`is_trending_market()` (trend strength above 0.7), `is_stressed_market()`
(stress above 0.8) and `is_high_liquidity()` (liquidity above 0.7) test the
other figures.

## Strategies — `quantdesk.strategies`

Every strategy derives from the abstract `Strategy`, has a `name` and a
`min_confidence` (0.65 for all built-in strategies), and implements
`analyze(underlying, spot, chain, conditions)`, returning a
`StrategyOpportunity`. An opportunity carries `expected_profit`,
`max_risk`, `probability_profit`, `sharpe_ratio`, `confidence`,
`reasoning`, `suitable_for_current_vol`, `suitable_for_current_regime`,
`optimal_iv_rank` and the `legs` to trade (such as `"<symbol> SELL"`).
`StrategyOpportunity.score()` is expected profit / max risk × confidence;
a zero max risk gives an infinite or NaN score rather than an error.

| Strategy                 | Behaviour                                                                 |
|--------------------------|---------------------------------------------------------------------------|
| `IronCondorStrategy`     | Needs a high-volatility environment and IV rank of at least `min_iv_rank` (0.6 by default); otherwise confidence 0.3. Sells puts/calls near 95%/105% of spot and buys near 90%/110%. Confidence 0.85 above an IV rank of 0.75, else 0.70. |
| `ShortStrangleStrategy`  | Needs a high-volatility environment; otherwise confidence 0.4. Sells the put and call whose delta is closest to ∓0.3. Confidence 0.80 above an IV rank of 0.8, else 0.65. |
| `CalendarSpreadStrategy` | Fixed figures: confidence 0.65, expected profit 150, max risk 300. No legs. |
| `LongStraddleStrategy`   | Confidence 0.3 when IV rank is above 0.5; otherwise confidence 0.75, expected profit 300, max risk 250. No legs. |

## Strategy engine — `quantdesk.engine`

`StrategyEngine(realized_volatility=None, economic_data=None)` comes loaded
with the four built-in strategies. `realized_volatility` is an optional
function of a price sequence; by default the annualised standard deviation
of log returns is used.

- `assess_market_conditions(quotes)` derives `MarketConditions` from a
  mapping of symbol to `Quote`. A `^VIX` quote with a last price sets the
  VIX level (20 when absent); above 25 marks a high-volatility
  environment, above 30 is `"Fear"` and below 15 `"Greed"`. When any quote
  carries Greeks, the IV rank is where the last of those implied
  volatilities (by symbol order) sits between their minimum and maximum
  (0.5 when they are all equal), and the HV rank is realised volatility of
  the last prices divided by 0.3 (0.5 with fewer than 20 prices).
  `correlations` is set to 0.7.
- `scan_opportunities(option_chains, underlying_quotes)` runs every
  strategy over every chain whose underlying has a last price, drops
  strategies that raise, keeps results that reach the strategy's minimum
  confidence, and returns them sorted by `score()`, best first (NaN scores
  last).
- `analyze_specific_strategy(strategy_name, underlying, chain, underlying_quote)`
  runs one named strategy; it returns an empty `StrategyOpportunity` when
  the quote has no last price or no strategy has that name.
- `add_strategy(strategy)`, `remove_strategy(name)` and
  `available_strategies()` manage the set of strategies.

```python
from quantdesk.engine import StrategyEngine
from quantdesk.market import Greeks, OptionChain, Quote

engine = StrategyEngine()
quotes = {
    "^VIX": Quote(symbol="^VIX", last=32.0),
    "SPY": Quote(symbol="SPY", last=500.0),
}
chains = {"SPY": OptionChain(underlying="SPY", calls=[...], puts=[...])}
for opportunity in engine.scan_opportunities(chains, quotes):
    print(opportunity.name, opportunity.confidence, opportunity.legs)
```

## Positions — `quantdesk.position`

`EnhancedPosition` tracks one position: `symbol`, `underlying`,
`option_symbol`, `strike`, `expiration` (`YYYY-MM-DD`), `is_call`,
`quantity`, `avg_price`, `current_price`, `underlying_price`, its `greeks`,
`ExtendedGreeks` and `ProbabilityMetrics`, and derived risk and P&L
figures.

- `days_to_expiry()`: days to local midnight of the expiration date,
  counted in whole hours; an unreadable date counts as 30 days.
- `is_expiring(days=7)`: true when no more than `days` remain.
- `notional_value()`: current price × |quantity| × 100.
- `moneyness()`: spot / strike for calls, strike / spot for puts, 1.0
  without positive prices.
- `implied_probability()`: the probability of finishing in the money.
- `is_option()` / `is_equity()`: an option has an option symbol, or a
  strike and an expiration.
- `update_analytics(underlying_px, vol, risk_free_rate, engine)`: reprices
  through a pricing engine (see below) when time, volatility, spot and
  strike are all positive, then refreshes unrealised P&L, delta-adjusted
  exposure, gamma, vega and theta figures.

The pricing engine is any object with the methods described by the
`PricingEngine` protocol: `black_scholes(...)` returning `Greeks`,
`second_order_greeks(...)` returning `ExtendedGreeks` and
`analyze_option(...)` returning `ProbabilityMetrics`.

## Portfolio metrics — `quantdesk.metrics`

`PortfolioMetrics` aggregates a book: value, P&L, cash, net Greeks
(including volga and vanna), dollar delta and gamma, `var95`, `var99`,
`expected_shortfall`, leverage, Sharpe ratio and exposures by underlying,
sector and strategy. `add_underlying_exposure`, `add_sector_exposure` and
`add_strategy_allocation` accumulate into those maps; `total_exposure()`,
`max_single_exposure()` and `concentration_ratio()` read the gross
underlying exposures. `update_timestamp()` stamps the current time and
`reset()` returns every figure to its default.

## Portfolio manager — `quantdesk.portfolio`

`PortfolioManager(engine, *, rng=None, interval=1.0)` keeps positions and
cash:

- `add_position(position)` stores a copy of a full position;
  `update_position(symbol, quantity, price)` sets quantity and average
  price. A zero quantity removes the position.
- `update_position_price(symbol, price, underlying_price)` records a new
  price and the change from the previous one;
  `update_position_greeks(symbol, greeks)` replaces a position's Greeks.
- `update_all_positions(quotes, chains)` prices each position from its
  underlying's quote and the matching option in the chain (last price, or
  the bid/ask midpoint) and calls `update_analytics` with a 5% rate.
- `calculate_metrics()` returns `PortfolioMetrics`, including a 10,000-run
  simulated VaR at 95% and 99% and expected shortfall from delta and gamma
  under a 2% market move, leverage, concentration and, from the recorded
  history, a Sharpe ratio. Pass `rng` (a `random.Random`) for repeatable
  results.
- `positions()`, `position(symbol)`, `positions_by_underlying(underlying)`,
  `expiring_positions(days=7)` and `high_risk_positions(threshold=0.8)`
  return copies. `position` returns an empty position for an unknown
  symbol.
- `cash` (read/write), `add_cash(amount)`, `total_value`, `total_pnl`,
  `risk_score` (NaN with no positions), `portfolio_greeks()`,
  `underlyings()` and `underlying_exposures()`.
- `add_position_callback(callback)` is called after every position
  update; `add_metrics_callback(callback)` is called by the analytics loop.
- `start()` and `stop()` run a background thread that every `interval`
  seconds computes metrics, records up to 252 entries of metrics and
  per-position P&L history (`metrics_history`, `pnl_history`) and calls
  the metrics callbacks. The manager is also a context manager that starts
  and stops this loop.

## Risk and economic records — `quantdesk.risk`, `quantdesk.economic`

- `RiskLimits` groups Greek, position size, portfolio risk, leverage,
  concentration, VaR, drawdown and daily/weekly/monthly loss limits, all 0
  by default.
- `RiskAssessment` collects violations, recommendations and hedge orders
  with `add_violation`, `add_recommendation` and `add_hedge_order`;
  `has_violations()`, `needs_hedging()` and `is_high_risk()` (risk score
  above 0.8) read it, and `clear()` resets it.
- `EconomicIndicator`, `MarketSentiment`, `TreasuryYieldCurve` and
  `StrategySignals` are plain records for macro inputs.

## What this package does not do

- It contains no option pricing model: `update_analytics` and
  `update_all_positions` need a pricing engine supplied by you.
- It does not fetch market or economic data; quotes, chains and economic
  records must be filled in by the caller.
- It does not check a portfolio against `RiskLimits` or produce hedge
  orders; `RiskAssessment` only records the results of such a check.
- It does not place orders or talk to brokers, and has no command-line or
  graphical interface.

## Requirements

Python 3.10 or newer. No third-party runtime dependencies; the `test`
extra installs pytest for the test suite.