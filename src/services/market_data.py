"""Finnhub market data client."""

import logging
from datetime import date, timedelta
from typing import Optional

import requests

import settings

logger = logging.getLogger(__name__)

FINNHUB_BASE_URL = 'https://finnhub.io/api/v1'
NEWS_LIMIT = 5


class MarketDataError(Exception):
    pass


class FinnhubClient:
    def __init__(self, api_key: Optional[str] = None, session: Optional[requests.Session] = None,
                 timeout: float = 10, base_url: str = FINNHUB_BASE_URL):
        self.api_key = api_key or settings.finnhub_api_key()
        self.session = session or requests.Session()
        self.timeout = timeout
        self.base_url = base_url

    @property
    def name(self) -> str:
        return "Finnhub"

    def _get(self, path: str, **params):
        if not self.api_key:
            raise MarketDataError("FINNHUB_API_KEY is not configured")
        params['token'] = self.api_key
        try:
            response = self.session.get(f"{self.base_url}/{path}", params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"{self.name} error for {path} {params.get('symbol')}: {e}")
            raise MarketDataError(f"{self.name} request failed: {e}") from e

    def quote(self, symbol: str) -> dict:
        """Raw quote: c (current), d (change), dp (change %), h, l, pc (previous close)."""
        return self._get('quote', symbol=symbol)

    def profile(self, symbol: str) -> dict:
        return self._get('stock/profile2', symbol=symbol)

    def company_news(self, symbol: str, days: int = 7, today: Optional[date] = None) -> list:
        """The first five news items for a symbol over the last `days` days."""
        today = today or date.today()
        start = today - timedelta(days=days)
        news = self._get('company-news', symbol=symbol, **{'from': start.isoformat(), 'to': today.isoformat()})
        return news[:NEWS_LIMIT] if isinstance(news, list) else []

    def snapshot(self, symbol: str) -> dict:
        """Quote, profile and recent news in one dictionary."""
        snapshot = {
            'quote': self.quote(symbol),
            'profile': self.profile(symbol),
            'news': self.company_news(symbol),
        }
        logger.info(f"{self.name}: {symbol} = {snapshot['quote'].get('c')}")
        return snapshot
