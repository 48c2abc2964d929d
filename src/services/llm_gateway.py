"""Client for the OpenAI-compatible LLM chat gateway and the AI payroll provider."""

import functools
import json
import logging
from typing import List, Optional

import requests

import settings
from calc.pay_schedule import pay_periods_per_year
from calc.paycheck_calculator import fallback_withholding
from model.PaycheckResult import PaycheckRequest, TaxWithholding
from services.retry import RetryOptions, invoke_with_retry

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."
PAYMENT_REQUIRED_MESSAGE = "AI service payment required."

PAYROLL_SYSTEM_PROMPT = ("You are a precise US payroll tax calculator. "
                         "Always return valid JSON only, no markdown or extra text.")


class GatewayError(Exception):
    """A failed gateway call, carrying the HTTP status to report to callers."""

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


def extract_json(content: str):
    """Parse a JSON reply, tolerating ```json fences around it.

    Raises:
        ValueError: if the content is not valid JSON.
    """
    text = (content or '').strip()
    if text.startswith('```json'):
        text = text[7:]
    elif text.startswith('```'):
        text = text[3:]
    if text.endswith('```'):
        text = text[:-3]
    return json.loads(text.strip())


class LLMGatewayClient:
    def __init__(self, api_key: Optional[str] = None, url: Optional[str] = None, model: Optional[str] = None,
                 session: Optional[requests.Session] = None, timeout: float = 60,
                 retry_options: Optional[RetryOptions] = None):
        self.api_key = api_key or settings.llm_gateway_api_key()
        self.url = url or settings.llm_gateway_url()
        self.model = model or settings.llm_model()
        self.session = session or requests.Session()
        self.timeout = timeout
        self.retry_options = retry_options

    def chat(self, messages: List[dict], model: Optional[str] = None, temperature: float = 0.1) -> str:
        """Send a chat completion and return the first choice's message content.

        Raises:
            GatewayError: 429 and 402 keep their status; anything else is a 500.
        """
        if not self.api_key:
            raise GatewayError(500, "LLM_GATEWAY_API_KEY is not configured")

        post = functools.partial(
            self.session.post,
            self.url,
            headers={'Authorization': f'Bearer {self.api_key}', 'Content-Type': 'application/json'},
            json={'model': model or self.model, 'messages': messages, 'temperature': temperature},
            timeout=self.timeout,
        )
        result = invoke_with_retry(post, options=self.retry_options)
        if result.error is not None:
            status = result.error.status
            logger.error("AI gateway error: %s %s", status, result.error.message)
            if status == 429:
                raise GatewayError(429, RATE_LIMIT_MESSAGE)
            if status == 402:
                raise GatewayError(402, PAYMENT_REQUIRED_MESSAGE)
            raise GatewayError(500, f"AI gateway error: {status or result.error.message}")

        try:
            return result.data['choices'][0]['message']['content'] or ''
        except (KeyError, IndexError, TypeError) as e:
            raise GatewayError(500, "No response from AI") from e


def payroll_prompt(request: PaycheckRequest, taxable_income: float) -> str:
    return f"""You are a US payroll tax calculator. Calculate the following taxes for a single paycheck.

INPUT DATA:
- Gross Pay (per paycheck): ${request.gross_pay:.2f}
- Pay Frequency: {request.pay_frequency}
- ZIP Code: {request.zip_code}
- Filing Status: {request.filing_status}
- Allowances/Withholdings: {request.allowances}
- Taxable Income (after pre-tax deductions): ${taxable_income:.2f}

CALCULATE AND RETURN AS JSON:
1. Federal Income Tax withholding for this paycheck
2. State Income Tax (determine the state from ZIP code)
3. Local/County Tax if applicable (based on ZIP code location)
4. Social Security Tax (6.2% of gross, up to annual limit)
5. Medicare Tax (1.45% of gross, plus 0.9% additional for high earners)

Return ONLY valid JSON in this exact format:
{{
  "federalTax": <number>,
  "stateTax": <number>,
  "stateName": "<state name>",
  "localTax": <number>,
  "localTaxName": "<county/city name or null>",
  "socialSecurity": <number>,
  "medicare": <number>,
  "taxBreakdown": {{
    "federalRate": "<effective rate as string>",
    "stateRate": "<state tax rate as string>",
    "localRate": "<local tax rate or N/A>"
  }},
  "notes": "<any relevant notes about the calculations>"
}}"""


class AIWithholdingProvider:
    """Asks the LLM gateway for withholding figures.

    Gateway errors propagate; a reply that cannot be parsed falls back to the
    flat estimate of fallback_withholding.
    """

    def __init__(self, client: LLMGatewayClient):
        self.client = client

    def withholding(self, request: PaycheckRequest, taxable_income: float, tax_year: int) -> TaxWithholding:
        messages = [
            {'role': 'system', 'content': PAYROLL_SYSTEM_PROMPT},
            {'role': 'user', 'content': payroll_prompt(request, taxable_income)},
        ]
        content = self.client.chat(messages, temperature=0.1)
        try:
            data = extract_json(content)
            if not isinstance(data, dict) or 'federalTax' not in data:
                raise ValueError("reply has no federalTax")
            return TaxWithholding.from_dict(data)
        except (ValueError, TypeError) as e:
            logger.warning("Failed to parse AI withholding response, using estimated rates: %s", e)
            periods = pay_periods_per_year(request.pay_frequency)
            return fallback_withholding(request.gross_pay, taxable_income, periods)
