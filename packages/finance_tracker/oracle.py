"""Optional external categorization oracle.

The rule-based classifier is always authoritative as a fallback. An oracle
may be layered on top to override the category of descriptions the rules do
not know about. Contract:

- Input: cleaned descriptions, deduplicated, in first-seen order.
- Output: a mapping ``description -> Category`` that may be partial or empty.
- Failure: never raised to the caller. Missing configuration, timeouts,
  network errors and malformed responses all yield an empty mapping and a
  warning log line.

:class:`OpenAIOracle` implements the contract on top of the OpenAI Responses
API with a strict timeout and no retries.
"""

from __future__ import annotations

import json
import os
import time
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from openai import OpenAI
from openai.types.responses import ResponseTextConfigParam
from pydantic import BaseModel, ConfigDict

from . import prompting
from .logging_setup import get_logger
from .models import Category

DEFAULT_MODEL = "gpt-5-mini"
DEFAULT_TIMEOUT_SEC = 10.0

_logger = get_logger("finance_tracker.oracle")


class CategorizationOracle(Protocol):
    def categorize(self, descriptions: Sequence[str]) -> Mapping[str, Category]: ...


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class OracleDecision(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore", str_strip_whitespace=True)

    description: str
    category: str


class OracleResponse(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore")

    results: list[OracleDecision]


def coerce_category(label: str) -> Category:
    """Map a returned label onto the closed category set (``OTHER`` if unknown)."""

    try:
        return Category(label)
    except ValueError:
        return Category.OTHER


def _extract_response_json_mapping(resp: Any) -> Mapping[str, Any]:
    """Decode the JSON mapping from an OpenAI Responses SDK result.

    Prefers ``resp.output_text`` and falls back to
    ``resp.output[0].content[0].text``. Raises ``ValueError`` when no text can
    be located or it is not valid JSON.
    """

    text: str | None = getattr(resp, "output_text", None)
    if not text:
        output = getattr(resp, "output", None)
        content = getattr(output[0], "content", None) if output else None
        if content:
            txt_obj = getattr(content[0], "text", None)
            if isinstance(txt_obj, str):
                text = txt_obj
    if not text or not isinstance(text, str):
        raise ValueError("Unexpected Responses API shape; unable to locate text output")

    try:
        decoded = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError("Model output was not valid JSON per the requested schema") from e
    if not isinstance(decoded, Mapping):
        raise ValueError("Invalid response: expected a JSON object at top level")
    return decoded


class OpenAIOracle:
    """Categorization oracle backed by the OpenAI Responses API."""

    def __init__(self, *, model: str = DEFAULT_MODEL, timeout: float = DEFAULT_TIMEOUT_SEC) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.model = model
        self.timeout = timeout

    def _create_client(self) -> OpenAI:
        return OpenAI(timeout=self.timeout, max_retries=0)

    def categorize(self, descriptions: Sequence[str]) -> Mapping[str, Category]:
        unique = list(dict.fromkeys(d for d in descriptions if d and d.strip()))
        if not unique:
            return {}

        _logger.info("oracle:request model=%s descriptions=%d", self.model, len(unique))
        t0 = time.perf_counter()
        try:
            client = self._create_client()
            resp = client.responses.create(
                model=self.model,
                instructions=prompting.build_system_instructions(),
                input=prompting.build_user_content(unique),
                text=ResponseTextConfigParam(format=prompting.build_response_format()),
            )
            parsed = OracleResponse.model_validate(_extract_response_json_mapping(resp))
        except Exception as e:  # noqa: BLE001 - any failure falls back to local rules
            _logger.warning(
                "oracle:failed model=%s latency_ms=%.2f error=%s",
                self.model,
                (time.perf_counter() - t0) * 1000.0,
                e.__class__.__name__,
            )
            return {}

        wanted = set(unique)
        out: dict[str, Category] = {}
        for decision in parsed.results:
            if decision.description in wanted:
                out[decision.description] = coerce_category(decision.category)
        _logger.info(
            "oracle:done model=%s answered=%d latency_ms=%.2f",
            self.model,
            len(out),
            (time.perf_counter() - t0) * 1000.0,
        )
        return out


def _env_timeout() -> float:
    raw = os.getenv("FT_ORACLE_TIMEOUT_SEC")
    try:
        value = float(raw) if raw else DEFAULT_TIMEOUT_SEC
    except ValueError:
        value = DEFAULT_TIMEOUT_SEC
    return value if value > 0 else DEFAULT_TIMEOUT_SEC


def oracle_from_env() -> OpenAIOracle | None:
    """Return a configured :class:`OpenAIOracle`, or ``None`` without an API key."""

    if not os.getenv("OPENAI_API_KEY"):
        _logger.info("oracle:disabled reason=missing_api_key")
        return None
    return OpenAIOracle(
        model=os.getenv("FT_ORACLE_MODEL") or DEFAULT_MODEL,
        timeout=_env_timeout(),
    )


__all__ = [
    "CategorizationOracle",
    "OracleDecision",
    "OracleResponse",
    "OpenAIOracle",
    "coerce_category",
    "oracle_from_env",
]
