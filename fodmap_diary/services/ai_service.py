"""
Claude AI integration for diary entry classification and correlation analysis.

This service provides two AI capabilities:
1. Free-text classification into food or symptom entries (web search enabled)
2. Food/symptom correlation analysis over a set of entries (JSON prefill)

Each operation makes exactly one API call. There is no retry and no caching:
a failure surfaces to the caller immediately.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import tzinfo
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

import anthropic
import httpx
from anthropic import AsyncAnthropic
from pydantic import TypeAdapter, ValidationError

from fodmap_diary.config import settings
from fodmap_diary.exceptions import (
    AnalysisError,
    ClassificationError,
    EmptyInputError,
    NoJsonFoundError,
    RemoteCallError,
)
from fodmap_diary.services.ai_schemas import AnalysisSchema, ClassificationSchema
from fodmap_diary.services.entry_formatter import format_entries_for_analysis
from fodmap_diary.services.json_extract import extract_json
from fodmap_diary.services.prompts import (
    ANALYSIS_SYSTEM_PROMPT,
    CLASSIFY_SYSTEM_PROMPT,
    build_analysis_user_message,
)

logger = logging.getLogger(__name__)

_classification_adapter = TypeAdapter(ClassificationSchema)


class DiaryAIProvider(ABC):
    """
    Abstract LLM provider interface.

    Route and service code depend on this interface only, so tests can swap
    in a deterministic fake.
    """

    @abstractmethod
    async def classify(self, text: str) -> dict:
        """
        Classify free text as a food or symptom entry.

        Returns the classification payload (``type``, ``factors`` or
        ``severity``, ``note``). Raises ClassificationError.
        """
        pass

    @abstractmethod
    async def analyze(self, entries: list) -> dict:
        """
        Look for food/symptom correlations across ``entries``.

        Returns ``summary``, ``correlations``, ``recommendations``,
        ``safe_foods`` and ``trigger_foods``. Raises AnalysisError.
        """
        pass


class ClaudeService(DiaryAIProvider):
    """Anthropic Messages API implementation of DiaryAIProvider."""

    def __init__(self, api_key: Optional[str] = None, tz: Optional[tzinfo] = None):
        timeout = httpx.Timeout(
            timeout=settings.anthropic_timeout,
            connect=settings.anthropic_connect_timeout,
        )
        self.api_key = settings.anthropic_api_key if api_key is None else api_key
        # max_retries=0: the SDK would otherwise retry failed calls on its own
        self.client = AsyncAnthropic(api_key=self.api_key, timeout=timeout, max_retries=0)
        self.classify_model = settings.classify_model
        self.analysis_model = settings.analysis_model
        self.tz = tz or ZoneInfo(settings.diary_timezone)

    async def _create_message(self, **request_params) -> str:
        """
        Make one Messages API call and return the concatenated text blocks.

        Web search responses interleave tool-use and search-result blocks with
        the text blocks; only the text is kept.

        Raises:
            RemoteCallError: missing key, non-2xx status, connection failure,
                or a response without text content
        """
        if not self.api_key:
            raise RemoteCallError("ANTHROPIC_API_KEY environment variable is not set")

        try:
            response = await self.client.messages.create(**request_params)
        except anthropic.APIStatusError as e:
            raise RemoteCallError(f"Anthropic API error: {e.status_code} {e.message}") from e
        except anthropic.APIConnectionError as e:
            raise RemoteCallError(f"Anthropic API unreachable: {e}") from e

        response_text = ""
        for block in getattr(response, "content", None) or []:
            if hasattr(block, "text"):
                response_text += block.text

        if not response_text.strip():
            raise RemoteCallError("Unexpected response structure from Anthropic API")

        return response_text

    # =========================================================================
    # CLASSIFICATION
    # =========================================================================

    async def classify(self, text: str) -> dict:
        request_params = {
            "model": self.classify_model,
            "max_tokens": settings.llm_max_tokens,
            "temperature": settings.llm_temperature,
            "system": CLASSIFY_SYSTEM_PROMPT,
            "messages": [{"role": "user", "content": text}],
            # Structured output is unavailable with tools, so the reply is
            # prose that contains the JSON object
            "tools": [
                {
                    "type": "web_search_20250305",
                    "name": "web_search",
                    "max_uses": settings.web_search_max_uses,
                }
            ],
        }

        try:
            content = await self._create_message(**request_params)
        except RemoteCallError as e:
            raise ClassificationError(str(e)) from e

        try:
            parsed = extract_json(content)
            validated = _classification_adapter.validate_python(parsed)
        except (EmptyInputError, NoJsonFoundError, ValidationError) as e:
            logger.warning("Classification response rejected: %s", e)
            raise ClassificationError(
                f"Failed to parse LLM response: {e}. Response was: {content[:200]}..."
            ) from e

        return validated.model_dump()

    # =========================================================================
    # ANALYSIS
    # =========================================================================

    async def analyze(self, entries: Iterable) -> dict:
        entries = list(entries)
        if not entries:
            raise AnalysisError("No entries to analyze")

        try:
            formatted = format_entries_for_analysis(entries, tz=self.tz)
        except ValidationError as e:
            raise AnalysisError(f"Invalid diary entry: {e}") from e

        prefill = "{"
        request_params = {
            "model": self.analysis_model,
            "max_tokens": settings.llm_max_tokens,
            "temperature": settings.llm_temperature,
            "system": ANALYSIS_SYSTEM_PROMPT,
            "messages": [
                {"role": "user", "content": build_analysis_user_message(formatted)},
                {"role": "assistant", "content": prefill},
            ],
        }

        try:
            content = await self._create_message(**request_params)
        except RemoteCallError as e:
            raise AnalysisError(str(e)) from e

        json_str = prefill + content.strip()
        try:
            validated = AnalysisSchema.model_validate(json.loads(json_str))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Analysis response rejected: %s", e)
            raise AnalysisError(
                f"Failed to parse LLM response: {e}. Response was: {json_str[:200]}..."
            ) from e

        return validated.model_dump()
