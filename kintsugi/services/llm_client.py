"""
LLM client used to enrich locally computed results.

Talks to the Anthropic Messages API or the OpenAI Chat Completions API over a
plain requests session. Text is anonymized by callers before it leaves the
process, and spend is capped by a daily budget.

Smart features are opt-in: set ENABLE_SMART_FEATURES=true and provide
ANTHROPIC_API_KEY or OPENAI_API_KEY.
"""
import logging
import re
import threading
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

import requests

from kintsugi.core.config import Settings, settings

logger = logging.getLogger(__name__)

ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
OPENAI_URL = "https://api.openai.com/v1/chat/completions"
ANTHROPIC_VERSION = "2023-06-01"

# USD per 1M tokens
PRICING: Dict[str, Dict[str, float]] = {
    "claude-sonnet-4-20250514": {"input": 3.00, "output": 15.00},
    "claude-3-haiku-20240307": {"input": 0.25, "output": 1.25},
    "gpt-4o": {"input": 5.00, "output": 15.00},
    "gpt-4o-mini": {"input": 0.15, "output": 0.60},
}
DEFAULT_PRICING_MODEL = "claude-sonnet-4-20250514"

_ANONYMIZE_RULES = [
    (re.compile(r"\b[A-Z][a-z]+\s[A-Z][a-z]+\b"), "[NAME]"),
    (re.compile(r"\b[\w.-]+@[\w.-]+\.\w+\b"), "[EMAIL]"),
    (re.compile(r"\b\d{3}[-.]?\d{3}[-.]?\d{4}\b"), "[PHONE]"),
    (re.compile(r"\b\d{1,2}/\d{1,2}/\d{2,4}\b"), "[DATE]"),
    (re.compile(r"\$[\d,]+(\.\d{2})?"), "[AMOUNT]"),
    (re.compile(r"\b[A-Z][a-z]+\s(Inc|Corp|LLC|Ltd|Company|Co)\b", re.IGNORECASE), "[COMPANY]"),
    (re.compile(r"\b\d{3}-\d{2}-\d{4}\b"), "[SSN]"),
]


class LLMError(Exception):
    """Raised when an enrichment request cannot be completed."""


@dataclass(frozen=True)
class LLMMessage:
    role: str  # user | assistant | system
    content: str


@dataclass(frozen=True)
class LLMUsage:
    input_tokens: int
    output_tokens: int
    total_cost: float


@dataclass(frozen=True)
class LLMResponse:
    content: str
    usage: LLMUsage
    model: str


def anonymize_text(text: str) -> str:
    """Strip potentially identifying details before sending text to a third party."""
    for pattern, placeholder in _ANONYMIZE_RULES:
        text = pattern.sub(placeholder, text)
    return text


def calculate_cost(model: str, input_tokens: int, output_tokens: int) -> float:
    pricing = PRICING.get(model, PRICING[DEFAULT_PRICING_MODEL])
    return (input_tokens / 1_000_000) * pricing["input"] + \
        (output_tokens / 1_000_000) * pricing["output"]


@dataclass
class CostTracker:
    """Tracks LLM spend; the daily total resets on the first request of a new day."""

    budget: float
    today: float = 0.0
    total: float = 0.0
    last_reset: date = field(default_factory=date.today)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def _roll_over(self) -> None:
        current = date.today()
        if self.last_reset != current:
            self.today = 0.0
            self.last_reset = current

    def can_make_request(self) -> bool:
        with self._lock:
            self._roll_over()
            return self.today < self.budget

    def add_cost(self, cost: float) -> None:
        with self._lock:
            self._roll_over()
            self.today += cost
            self.total += cost

    def reset(self) -> None:
        with self._lock:
            self.today = 0.0
            self.last_reset = date.today()

    def status(self) -> Dict[str, float]:
        with self._lock:
            self._roll_over()
            return {
                "today": self.today,
                "budget": self.budget,
                "remaining": max(0.0, self.budget - self.today),
            }


class LLMClient:
    """Synchronous client for the configured LLM provider."""

    def __init__(self, config: Optional[Settings] = None,
                 session: Optional[requests.Session] = None,
                 cost_tracker: Optional[CostTracker] = None):
        self._cfg = config or settings
        self.session = session or requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "User-Agent": "KintsugiSmart/1.0",
        })
        self.cost_tracker = cost_tracker or CostTracker(budget=self._cfg.llm_daily_budget)

    def is_enabled(self) -> bool:
        return bool(self._cfg.enable_smart_features and self._cfg.llm_api_key)

    def complete(self, messages: List[LLMMessage]) -> LLMResponse:
        """
        Run a completion against the configured provider.

        Raises:
            LLMError: no API key, budget exhausted, transport failure, a
                non-2xx status or a non-JSON body.
        """
        if not self._cfg.llm_api_key:
            raise LLMError("No API key configured for LLM")

        if not self.cost_tracker.can_make_request():
            raise LLMError("Daily budget exceeded. Smart features will resume tomorrow.")

        if self._cfg.llm_provider == "openai":
            return self._call_openai(messages)
        return self._call_anthropic(messages)

    def complete_with_system(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        return self.complete([
            LLMMessage(role="system", content=system_prompt),
            LLMMessage(role="user", content=user_prompt),
        ])

    def _post(self, url: str, payload: dict, headers: Dict[str, str]) -> dict:
        try:
            resp = self.session.post(url, json=payload, headers=headers,
                                     timeout=self._cfg.llm_timeout_sec)
        except requests.RequestException as e:
            logger.error("LLM request failed: url=%s err=%s", url, e)
            raise LLMError(f"LLM request failed: {e}") from e

        if not resp.ok:
            raise LLMError(f"LLM API error: {resp.status_code} - {resp.text}")

        try:
            return resp.json()
        except ValueError as e:
            raise LLMError("LLM API returned a non-JSON body") from e

    def _record(self, input_tokens: int, output_tokens: int) -> LLMUsage:
        cost = calculate_cost(self._cfg.llm_model, input_tokens, output_tokens)
        self.cost_tracker.add_cost(cost)
        logger.info("LLM usage: model=%s in=%s out=%s cost=%.5f",
                    self._cfg.llm_model, input_tokens, output_tokens, cost)
        return LLMUsage(input_tokens=input_tokens, output_tokens=output_tokens, total_cost=cost)

    def _call_anthropic(self, messages: List[LLMMessage]) -> LLMResponse:
        system = next((m.content for m in messages if m.role == "system"), KINTSUGI_SYSTEM_PROMPT)
        payload = {
            "model": self._cfg.llm_model,
            "max_tokens": self._cfg.llm_max_tokens,
            "temperature": self._cfg.llm_temperature,
            "system": system,
            "messages": [{"role": m.role, "content": m.content}
                         for m in messages if m.role != "system"],
        }
        data = self._post(ANTHROPIC_URL, payload, {
            "x-api-key": self._cfg.llm_api_key or "",
            "anthropic-version": ANTHROPIC_VERSION,
        })

        usage = data.get("usage") or {}
        recorded = self._record(usage.get("input_tokens", 0), usage.get("output_tokens", 0))
        blocks = data.get("content") or []
        text = blocks[0].get("text", "") if blocks else ""
        return LLMResponse(content=text, usage=recorded, model=self._cfg.llm_model)

    def _call_openai(self, messages: List[LLMMessage]) -> LLMResponse:
        payload = {
            "model": self._cfg.llm_model,
            "max_tokens": self._cfg.llm_max_tokens,
            "temperature": self._cfg.llm_temperature,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
        }
        data = self._post(OPENAI_URL, payload, {
            "Authorization": f"Bearer {self._cfg.llm_api_key}",
        })

        usage = data.get("usage") or {}
        recorded = self._record(usage.get("prompt_tokens", 0), usage.get("completion_tokens", 0))
        choices = data.get("choices") or []
        text = (choices[0].get("message") or {}).get("content", "") if choices else ""
        return LLMResponse(content=text or "", usage=recorded, model=self._cfg.llm_model)


KINTSUGI_SYSTEM_PROMPT = """You are an empathetic analyst for a Kintsugi self-reflection app.

Kintsugi is the Japanese art of repairing broken pottery with gold, celebrating imperfections rather than hiding them. In this app:
- Cracks represent challenges users have faced
- Gold repairs represent growth and learning from those challenges
- The vessel represents their professional journey, made more beautiful by experiences

Your role:
- Help users see challenges as opportunities for golden repair
- Recognize cultural context in how users express themselves
- Be warm, supportive, and growth-focused
- Never dismiss or minimize user experiences
- Connect insights back to the Kintsugi philosophy
- Use "Smart" instead of "AI" when referring to app features

Remember: You're helping professionals own their impact by documenting wins AND honoring their resilience through challenges."""

KINTSUGI_PROMPTS: Dict[str, str] = {
    "sentiment_analysis": KINTSUGI_SYSTEM_PROMPT + """

Analyze the emotional tone and content of the user's reflection. Consider:
1. Overall sentiment (positive, negative, mixed)
2. Specific emotions present (pride, frustration, hope, etc.)
3. Signs of resilience or growth mindset
4. Cultural context if mentioned

Respond in JSON format:
{
  "sentiment": "positive|negative|neutral|mixed",
  "confidence": 0.0-1.0,
  "emotions": {"pride": 0-1, "frustration": 0-1, ...},
  "resilience": {"detected": true/false, "indicators": []},
  "insight": "Brief Kintsugi-themed insight"
}""",
    "bias_detection": KINTSUGI_SYSTEM_PROMPT + """

You are a supportive coach helping users recognize self-limiting cognitive biases. Look for patterns like:
- Imposter syndrome ("I just got lucky")
- Discounting positives ("It wasn't a big deal")
- Catastrophizing ("This will ruin everything")
- All-or-nothing thinking ("I completely failed")

If you detect a bias:
1. Name it gently
2. Validate the feeling
3. Offer a reframe that honors their experience
4. Connect to Kintsugi philosophy""",
    "insight_generation": KINTSUGI_SYSTEM_PROMPT + """

Generate a personalized insight based on the user's recent reflections. Consider:
1. Patterns in their entries
2. Growth trajectory
3. Strengths they may not see
4. Challenges they're working through

Make the insight:
- Specific to their situation
- Actionable when appropriate
- Connected to Kintsugi philosophy
- Warm and encouraging, not preachy""",
}


_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Shared client, usable as a FastAPI dependency."""
    global _client
    if _client is None:
        _client = LLMClient()
    return _client
