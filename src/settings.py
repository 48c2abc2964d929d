"""Runtime configuration read from the environment (and a .env file)."""

import logging
import os
import sys

from dotenv import load_dotenv

ROOT_DIR = os.path.normpath(os.path.join(os.path.dirname(__file__), '..'))
REFERENCE_DIR = os.path.join(ROOT_DIR, 'reference')
INPUT_PARAMETERS_DIR = os.path.join(ROOT_DIR, 'input-parameters')

DEFAULT_LLM_GATEWAY_URL = 'https://ai.gateway.lovable.dev/v1/chat/completions'
DEFAULT_LLM_MODEL = 'google/gemini-3-flash-preview'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

load_dotenv(os.path.join(ROOT_DIR, '.env'))


def llm_gateway_api_key() -> str | None:
    return os.getenv('LLM_GATEWAY_API_KEY')


def llm_gateway_url() -> str:
    return os.getenv('LLM_GATEWAY_URL', DEFAULT_LLM_GATEWAY_URL)


def llm_model() -> str:
    return os.getenv('LLM_MODEL', DEFAULT_LLM_MODEL)


def finnhub_api_key() -> str | None:
    return os.getenv('FINNHUB_API_KEY')


def default_program() -> str | None:
    return os.getenv('PAYCHECK_PLANNER_PROGRAM')


def webhook_store_path() -> str:
    return os.getenv('WEBHOOK_STORE_PATH', os.path.join(ROOT_DIR, 'data', 'backtest_results.json'))


def trades_path() -> str:
    return os.getenv('PORTFOLIO_TRADES_PATH', os.path.join(ROOT_DIR, 'data', 'trades.json'))


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger once with a single stderr handler.

    The level comes from the argument, then PAYCHECK_PLANNER_LOG_LEVEL, then WARNING.
    Logs go to stderr so stdout stays free for reports and the MCP stdio transport.
    """
    level_name = (level or os.getenv('PAYCHECK_PLANNER_LOG_LEVEL') or 'WARNING').upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name, logging.WARNING))
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
