"""Risk and return statistics over closed trades.

Trades are read from a JSON file holding two lists:

    {"stockTrades": [{"symbol", "entry_price", "exit_price", "quantity", "exit_date"}, ...],
     "optionTrades": [{"symbol", "action", "total_value", "date"}, ...]}

Stock trades count once closed (exit price and exit date set). Option trades
use the premium as P&L: credit for a sell, debit otherwise.
"""

import json
import logging
import math
import os
from datetime import date
from typing import Iterable, List, Optional, Tuple

import settings

logger = logging.getLogger(__name__)

TRADING_DAYS_PER_YEAR = 252
STARTING_CAPITAL = 100000.0
DEFAULT_RISK_FREE_RATE = 0.05


def load_trades(path: Optional[str] = None) -> Tuple[List[dict], List[dict]]:
    """Read (stock_trades, option_trades); a missing file means no trades."""
    path = path or settings.trades_path()
    if not os.path.exists(path):
        logger.info("No trades file at %s", path)
        return [], []
    with open(path, 'r') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain an object with stockTrades and optionTrades")
    return list(data.get('stockTrades') or []), list(data.get('optionTrades') or [])


def _day(value) -> date:
    return date.fromisoformat(str(value)[:10])


def trade_returns(stock_trades: Iterable[dict], option_trades: Iterable[dict] = ()) -> List[dict]:
    """P&L and percent return per trade, oldest first."""
    returns = []
    for trade in stock_trades:
        if not trade.get('exit_price') or not trade.get('exit_date'):
            continue
        entry = float(trade['entry_price'])
        exit_price = float(trade['exit_price'])
        quantity = float(trade['quantity'])
        returns.append({
            'date': str(trade['exit_date']),
            'returnPct': (exit_price - entry) / entry * 100 if entry else 0.0,
            'pnl': (exit_price - entry) * quantity,
            'symbol': trade.get('symbol'),
        })

    for trade in option_trades:
        value = float(trade.get('total_value') or 0)
        pnl = value if trade.get('action') == 'sell' else -value
        returns.append({
            'date': str(trade['date']),
            'returnPct': pnl / abs(value) * 100 if value else 0.0,
            'pnl': pnl,
            'symbol': trade.get('symbol'),
        })

    returns.sort(key=lambda t: (_day(t['date']), t['date']))
    return returns


def daily_returns(trades: List[dict], starting_capital: float = STARTING_CAPITAL) -> List[dict]:
    """Group trade P&L by date into returns on a running capital base."""
    pnl_by_date = {}
    for trade in trades:
        pnl_by_date[trade['date']] = pnl_by_date.get(trade['date'], 0.0) + trade['pnl']

    rows = []
    capital = starting_capital
    cumulative = 0.0
    for day, pnl in pnl_by_date.items():
        daily_return = pnl / capital
        cumulative += pnl
        capital += pnl
        rows.append({'date': day, 'dailyReturn': daily_return, 'cumulativePnl': cumulative})
    return rows


def max_drawdown(returns: List[float], starting_capital: float = STARTING_CAPITAL) -> float:
    """Largest peak-to-trough fall of the compounded returns, as a fraction."""
    peak = 0.0
    worst = 0.0
    value = starting_capital
    for r in returns:
        value *= 1 + r
        peak = max(peak, value)
        if peak > 0:
            worst = max(worst, (peak - value) / peak)
    return worst


def portfolio_returns(stock_trades: Iterable[dict], option_trades: Iterable[dict] = (),
                      risk_free_rate: float = DEFAULT_RISK_FREE_RATE) -> dict:
    """Win/loss statistics and annualized risk metrics of closed trades.

    Args:
        stock_trades: Stock trade rows; open trades are skipped.
        option_trades: Option trade rows.
        risk_free_rate: Annual rate as a fraction, used by Sharpe and Sortino.

    Returns:
        Dict of trade and daily returns plus the statistics. Returns and
        volatility are percents; ratios are plain numbers. With fewer than
        two trading days the annual figures are rough placeholders.
    """
    trades = trade_returns(stock_trades, option_trades)
    if not trades:
        return {
            'dailyReturns': [],
            'tradeReturns': [],
            'annualizedReturn': 0.0,
            'annualizedVolatility': 0.0,
            'sharpeRatio': 0.0,
            'sortinoRatio': 0.0,
            'maxDrawdown': 0.0,
            'totalPnL': 0.0,
            'totalTrades': 0,
            'winRate': 0.0,
            'averageWin': 0.0,
            'averageLoss': 0.0,
            'profitFactor': 0.0,
            'calmarRatio': 0.0,
            'hasRealData': False,
        }

    daily = daily_returns(trades)
    total_pnl = sum(t['pnl'] for t in trades)
    wins = [t['pnl'] for t in trades if t['pnl'] > 0]
    losses = [t['pnl'] for t in trades if t['pnl'] < 0]
    gross_profit = sum(wins)
    gross_loss = abs(sum(losses))
    if gross_loss > 0:
        profit_factor = gross_profit / gross_loss
    else:
        profit_factor = math.inf if gross_profit > 0 else 0.0

    stats = {
        'dailyReturns': daily,
        'tradeReturns': trades,
        'totalPnL': total_pnl,
        'totalTrades': len(trades),
        'winRate': len(wins) / len(trades) * 100,
        'averageWin': gross_profit / len(wins) if wins else 0.0,
        'averageLoss': gross_loss / len(losses) if losses else 0.0,
        'profitFactor': profit_factor,
        'hasRealData': True,
    }

    returns = [d['dailyReturn'] for d in daily]
    if len(returns) < 2:
        stats.update({
            'annualizedReturn': 10.0 if total_pnl > 0 else -10.0,
            'annualizedVolatility': 20.0,
            'sharpeRatio': 0.0,
            'sortinoRatio': 0.0,
            'maxDrawdown': 0.0,
            'calmarRatio': 0.0,
        })
        return stats

    mean = sum(returns) / len(returns)
    day_span = max(1, (_day(daily[-1]['date']) - _day(daily[0]['date'])).days)
    annualization = TRADING_DAYS_PER_YEAR / min(day_span, TRADING_DAYS_PER_YEAR)
    annual_return = mean * annualization

    variance = sum((r - mean) ** 2 for r in returns) / (len(returns) - 1)
    annual_volatility = math.sqrt(variance) * math.sqrt(TRADING_DAYS_PER_YEAR)
    sharpe = (annual_return - risk_free_rate) / annual_volatility if annual_volatility > 0 else 0.0

    downside = [r for r in returns if r < 0]
    downside_variance = sum(r ** 2 for r in downside) / len(downside) if downside else 0.0
    downside_deviation = math.sqrt(downside_variance) * math.sqrt(TRADING_DAYS_PER_YEAR)
    sortino = (annual_return - risk_free_rate) / downside_deviation if downside_deviation > 0 else sharpe

    drawdown = max_drawdown(returns)
    stats.update({
        'annualizedReturn': annual_return * 100,
        'annualizedVolatility': annual_volatility * 100,
        'sharpeRatio': sharpe,
        'sortinoRatio': sortino,
        'maxDrawdown': drawdown * 100,
        'calmarRatio': annual_return / drawdown if drawdown > 0 else 0.0,
    })
    return stats
