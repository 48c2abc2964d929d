"""AI trade plan generation from live market data.

Handlers return (status, body) tuples so any HTTP layer or the MCP server
can relay them unchanged.
"""

import json
import logging
import math
import re
from datetime import datetime, timezone
from typing import Any, Optional, Tuple

from services.llm_gateway import GatewayError, LLMGatewayClient
from services.market_data import FinnhubClient, MarketDataError

logger = logging.getLogger(__name__)

TICKER_REGEX = re.compile(r'^[A-Z]{1,10}$')
VALID_ACTIONS = ('refresh_price', 'analyze')
DEFAULT_PORTFOLIO_SIZE = 25000
MAX_PORTFOLIO_SIZE = 100_000_000
DEFAULT_RISK_PERCENT = 1
JSON_OBJECT = re.compile(r'\{[\s\S]*\}')

SYSTEM_PROMPT = """You are an institutional quantitative trading analyst. Generate a comprehensive trade plan with precise entry, stop-loss, and take-profit levels.

IMPORTANT: The user has provided LIVE market data. Use the exact current price provided - do NOT make up a different price.

Analyze the asset thoroughly and provide:
1. Optimal entry price (can be the current price or a limit order level slightly below)
2. Stop-loss level based on technical analysis (support levels, ATR, typical volatility)
3. Three staggered take-profit levels (TP1: 50%, TP2: 30%, TP3: 20% of position)
4. Detailed reasoning for the trade setup
5. Sentiment analysis based on the news provided"""


class TradePlanError(Exception):
    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def validate_ticker(ticker: Any) -> str:
    clean = str(ticker or '').upper().strip()
    if not TICKER_REGEX.match(clean):
        raise TradePlanError(400, "Invalid ticker symbol (1-10 uppercase letters)")
    return clean


def validate_portfolio_size(value: Any) -> float:
    return value if _is_number(value) and 0 < value <= MAX_PORTFOLIO_SIZE else DEFAULT_PORTFOLIO_SIZE


def validate_risk_percent(value: Any) -> float:
    return value if _is_number(value) and 0 < value <= 100 else DEFAULT_RISK_PERCENT


def trim_news(news: list) -> list:
    trimmed = []
    for item in news:
        timestamp = item.get('datetime')
        trimmed.append({
            'headline': str(item.get('headline') or '')[:200],
            'summary': str(item.get('summary') or '')[:500],
            'source': str(item.get('source') or '')[:50],
            'datetime': datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat() if _is_number(timestamp) else None,
        })
    return trimmed


def position_size(portfolio_size: float, risk_percent: float, entry: float, stop: float) -> dict:
    """Shares to buy so that hitting the stop loses risk_percent of the portfolio."""
    risk_amount = portfolio_size * risk_percent / 100
    risk_per_share = abs(entry - stop)
    shares = math.floor(risk_amount / risk_per_share) if risk_per_share > 0 else 0
    return {
        'riskAmount': risk_amount,
        'riskPerShare': risk_per_share,
        'shares': shares,
        'positionValue': shares * entry,
    }


def _fmt(value: Any) -> str:
    return f"{value:.2f}" if _is_number(value) else 'N/A'


class TradePlanService:
    def __init__(self, market: Optional[FinnhubClient] = None, gateway: Optional[LLMGatewayClient] = None):
        self.market = market or FinnhubClient()
        self.gateway = gateway or LLMGatewayClient()

    def refresh_price(self, ticker: str) -> dict:
        quote = self.market.quote(ticker)
        if not quote.get('c'):
            raise TradePlanError(500, f"Could not fetch live price for {ticker}")
        return {
            'price': quote['c'],
            'change': quote.get('d'),
            'changePercent': quote.get('dp'),
            'high': quote.get('h'),
            'low': quote.get('l'),
            'previousClose': quote.get('pc'),
        }

    def analyze(self, ticker: str, portfolio_size: float, risk_percent: float) -> dict:
        data = self.market.snapshot(ticker)
        quote = data['quote']
        live_price = quote.get('c')
        if not live_price:
            raise TradePlanError(500, f"Could not fetch market data for {ticker}. Please verify the ticker symbol.")
        company_name = (data.get('profile') or {}).get('name') or ticker
        news = trim_news(data.get('news') or [])
        headlines = '\n'.join(f"- {n['headline']} ({n['source']})" for n in news)

        user_prompt = f"""Generate an institutional-grade trade plan for {ticker} ({company_name}).

LIVE MARKET DATA (from Finnhub - use these exact values):
- Current Price: ${live_price:.2f}
- Day High: ${_fmt(quote.get('h'))}
- Day Low: ${_fmt(quote.get('l'))}
- Previous Close: ${_fmt(quote.get('pc'))}
- Change: {_fmt(quote.get('dp') or 0)}%

Portfolio size: ${portfolio_size:,.0f}
Risk tolerance: {risk_percent}% per trade

Recent News:
{headlines}

Return a JSON object with currentPrice, entryPrice, stopLoss, tp1, tp2, tp3, reasoning,
headlines, newsArticles and sentiment {{label, score, summary}}.

CRITICAL: The currentPrice MUST be exactly {live_price}."""

        logger.info("Generating AI trade plan for %s", ticker)
        content = self.gateway.chat(
            [{'role': 'system', 'content': SYSTEM_PROMPT}, {'role': 'user', 'content': user_prompt}],
            temperature=0.7,
        )
        match = JSON_OBJECT.search(content or '')
        if not match:
            raise TradePlanError(500, "Failed to parse trade plan data")
        try:
            plan = json.loads(match.group(0))
        except ValueError as e:
            raise TradePlanError(500, "Failed to parse trade plan data") from e
        if not isinstance(plan, dict) or not plan.get('entryPrice') or not plan.get('stopLoss'):
            raise TradePlanError(500, "Incomplete trade plan data")

        plan['currentPrice'] = live_price
        plan['companyName'] = company_name
        plan['liveData'] = {
            'high': quote.get('h'),
            'low': quote.get('l'),
            'previousClose': quote.get('pc'),
            'change': quote.get('d'),
            'changePercent': quote.get('dp'),
        }
        if _is_number(plan['entryPrice']) and _is_number(plan['stopLoss']):
            plan['positionSize'] = position_size(portfolio_size, risk_percent, plan['entryPrice'], plan['stopLoss'])
        logger.info("Trade plan generated for %s: live %s entry %s stop %s",
                    ticker, live_price, plan['entryPrice'], plan['stopLoss'])
        return plan

    def handle(self, payload: dict, authorization: Optional[str] = None) -> Tuple[int, dict]:
        """Validate a request and run the requested action.

        Returns:
            (status, body); errors are (status, {"error": message}).
        """
        if not authorization:
            return 401, {'error': 'Unauthorized'}
        try:
            if not self.gateway.api_key:
                raise TradePlanError(500, "LLM_GATEWAY_API_KEY is not configured")
            if not self.market.api_key:
                raise TradePlanError(500, "FINNHUB_API_KEY is not configured")

            ticker = validate_ticker(payload.get('ticker'))
            portfolio_size = validate_portfolio_size(payload.get('portfolioSize'))
            risk_percent = validate_risk_percent(payload.get('riskPercent'))
            action = payload.get('action')
            if action and action not in VALID_ACTIONS:
                raise TradePlanError(400, "Invalid action")

            if action == 'refresh_price':
                return 200, self.refresh_price(ticker)
            return 200, self.analyze(ticker, portfolio_size, risk_percent)
        except (TradePlanError, GatewayError) as e:
            if e.status >= 500:
                logger.error("Trade plan error: %s", e.message)
            return e.status, {'error': e.message}
        except MarketDataError as e:
            logger.error("Trade plan market data error: %s", e)
            return 500, {'error': str(e)}
