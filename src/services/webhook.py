"""TradingView alert webhook.

Normalizes incoming alert signals and, for alerts tied to a user, records a
synthetic single-trade backtest row in a local JSON file store.
"""

import json
import logging
import os
import random
import threading
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

import settings

logger = logging.getLogger(__name__)

INITIAL_CAPITAL = 10000
MAX_MOVE = 0.1
SOURCE = 'tradingview_webhook'


class BacktestStore:
    """Append-only list of backtest rows persisted as a JSON array."""

    def __init__(self, path: Optional[str] = None):
        self.path = path or settings.webhook_store_path()
        self._lock = threading.Lock()

    def all(self) -> List[dict]:
        if not os.path.exists(self.path):
            return []
        with open(self.path, 'r') as f:
            return json.load(f)

    def insert(self, row: dict) -> None:
        with self._lock:
            rows = self.all()
            rows.append(row)
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, 'w') as f:
                json.dump(rows, f, indent=2)


def normalize_signal(body: dict, now: datetime) -> dict:
    return {
        'symbol': str(body['symbol']).upper(),
        'action': str(body['action']).lower(),
        'price': body.get('price') or None,
        'strategy': body.get('strategy') or 'TradingView Signal',
        'user_id': body.get('user_id') or None,
        'quantity': body.get('quantity') or 1,
        'timeframe': body.get('timeframe') or '1D',
        'entry_condition': body.get('entry_condition') or None,
        'exit_condition': body.get('exit_condition') or None,
        'received_at': now.isoformat(),
        'source': SOURCE,
    }


def backtest_row(body: dict, signal: dict, move: float, now: datetime) -> dict:
    """Single-trade backtest for a signal; `move` is the fractional price change."""
    # Normalized action, so "BUY" and "buy" move the same way
    action = signal['action']
    final_capital = INITIAL_CAPITAL * (1 + (move if action == 'buy' else -move))
    won = final_capital > INITIAL_CAPITAL
    today = now.date().isoformat()
    return {
        'user_id': signal['user_id'],
        'strategy_name': f"{body.get('strategy') or 'TradingView'} - {action.upper()}",
        'symbol': signal['symbol'],
        'start_date': today,
        'end_date': today,
        'initial_capital': INITIAL_CAPITAL,
        'final_capital': final_capital,
        'total_trades': 1,
        'winning_trades': 1 if won else 0,
        'win_rate': 100 if won else 0,
        'parameters': {
            'source': SOURCE,
            'action': action,
            'price': body.get('price'),
            'timeframe': body.get('timeframe'),
            'entry_condition': body.get('entry_condition'),
            'exit_condition': body.get('exit_condition'),
            'received_at': signal['received_at'],
        },
    }


class TradingViewWebhook:
    def __init__(self, store: Optional[BacktestStore] = None, rng: Callable[[], float] = random.random,
                 clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        self.store = store or BacktestStore()
        self.rng = rng
        self.clock = clock

    def handle(self, body) -> Tuple[int, dict]:
        try:
            if not isinstance(body, dict):
                raise ValueError("Request body must be a JSON object")
            logger.info("TradingView webhook received: %s", json.dumps(body, default=str))
            if not body.get('symbol') or not body.get('action'):
                return 400, {'error': 'Missing required fields: symbol and action'}

            now = self.clock()
            signal = normalize_signal(body, now)
            logger.info("Processing signal: %s %s", signal['action'], signal['symbol'])

            if signal['user_id']:
                move = (self.rng() - 0.5) * MAX_MOVE
                try:
                    self.store.insert(backtest_row(body, signal, move, now))
                    logger.info("Backtest result stored successfully")
                except (OSError, ValueError) as e:
                    logger.error("Error storing backtest result: %s", e)

            return 200, {'success': True, 'message': 'Webhook signal received and processed', 'signal': signal}
        except Exception as e:
            logger.exception("Error processing TradingView webhook")
            return 500, {'error': str(e) or 'Internal server error'}
