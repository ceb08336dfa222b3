"""
Unit tests for ClaudeService (AI integration).

Tests request construction and response handling against a mocked
Anthropic client:
- Classification with web search and JSON recovery from prose
- Analysis with assistant prefill
- Mapping of API failures to diary errors
"""
import json
from datetime import timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest

from fodmap_diary.exceptions import AnalysisError, ClassificationError
from fodmap_diary.services.ai_service import ClaudeService, DiaryAIProvider
from fodmap_diary.services.prompts import ANALYSIS_SYSTEM_PROMPT, CLASSIFY_SYSTEM_PROMPT
from tests.factories import food_entry, symptom_entry


def _text(text):
    return SimpleNamespace(type="text", text=text)


def _response(*blocks):
    return SimpleNamespace(content=list(blocks))


def _request():
    return httpx.Request("POST", "https://api.anthropic.com/v1/messages")


@pytest.fixture
def service():
    """ClaudeService with its Anthropic client replaced by a mock."""
    svc = ClaudeService(api_key="test-key", tz=timezone.utc)
    svc.client = MagicMock()
    svc.client.messages.create = AsyncMock()
    return svc


def test_claude_service_is_provider():
    assert issubclass(ClaudeService, DiaryAIProvider)


class TestClassify:
    """Tests for free-text classification."""

    @pytest.mark.asyncio
    async def test_classify_food_from_prose_with_search_blocks(self, service):
        """Test that text blocks are joined and the JSON object recovered."""
        service.client.messages.create.return_value = _response(
            SimpleNamespace(type="server_tool_use", id="srv_1", name="web_search", input={"query": "x"}),
            _text("Let me look that up. "),
            SimpleNamespace(type="web_search_tool_result", tool_use_id="srv_1", content=[]),
            _text('Here you go: {"type": "food", "factors": {"fructans": "HIGH", "garlic": "high"}, '
                  '"note": "Contains garlic"}'),
        )

        result = await service.classify("garlic bread")

        assert result == {"type": "food", "factors": {"fructans": "high"}, "note": "Contains garlic"}

    @pytest.mark.asyncio
    async def test_classify_symptom(self, service):
        service.client.messages.create.return_value = _response(
            _text('{"type": "symptom", "severity": "High", "note": "Bloating"}')
        )

        result = await service.classify("really bloated")

        assert result == {"type": "symptom", "severity": "high", "note": "Bloating"}

    @pytest.mark.asyncio
    async def test_classify_request(self, service):
        """Test the classify request: prompt, user text and web search tool."""
        service.client.messages.create.return_value = _response(_text('{"type": "food", "factors": {}}'))

        await service.classify("banana")

        kwargs = service.client.messages.create.call_args.kwargs
        assert kwargs["system"] == CLASSIFY_SYSTEM_PROMPT
        assert kwargs["messages"] == [{"role": "user", "content": "banana"}]
        assert kwargs["model"] == service.classify_model
        (tool,) = kwargs["tools"]
        assert tool["name"] == "web_search"
        assert tool["type"] == "web_search_20250305"
        assert service.client.messages.create.await_count == 1

    @pytest.mark.asyncio
    async def test_classify_no_json(self, service):
        service.client.messages.create.return_value = _response(_text("I am not sure what that is."))

        with pytest.raises(ClassificationError, match="Failed to parse LLM response"):
            await service.classify("???")

    @pytest.mark.asyncio
    async def test_classify_unknown_type(self, service):
        """Test that JSON with an unexpected type fails classification."""
        service.client.messages.create.return_value = _response(_text('{"type": "drink", "note": ""}'))

        with pytest.raises(ClassificationError):
            await service.classify("coffee")

    @pytest.mark.asyncio
    async def test_classify_status_error(self, service):
        """Test that a non-2xx status maps to ClassificationError with the status."""
        service.client.messages.create.side_effect = anthropic.APIStatusError(
            "Internal server error",
            response=httpx.Response(500, request=_request()),
            body=None,
        )

        with pytest.raises(ClassificationError, match="500"):
            await service.classify("banana")

        assert service.client.messages.create.await_count == 1

    @pytest.mark.asyncio
    async def test_classify_connection_error(self, service):
        service.client.messages.create.side_effect = anthropic.APIConnectionError(request=_request())

        with pytest.raises(ClassificationError, match="unreachable"):
            await service.classify("banana")

    @pytest.mark.asyncio
    async def test_classify_empty_content(self, service):
        service.client.messages.create.return_value = _response()

        with pytest.raises(ClassificationError, match="Unexpected response structure"):
            await service.classify("banana")

    @pytest.mark.asyncio
    async def test_classify_missing_api_key(self):
        """Test that no request is made without an API key."""
        svc = ClaudeService(api_key="", tz=timezone.utc)
        svc.client = MagicMock()
        svc.client.messages.create = AsyncMock()

        with pytest.raises(ClassificationError, match="ANTHROPIC_API_KEY"):
            await svc.classify("banana")

        svc.client.messages.create.assert_not_called()


class TestAnalyze:
    """Tests for correlation analysis."""

    ANALYSIS_BODY = {
        "summary": "Fructans look like a trigger",
        "correlations": [
            {"food": "garlic bread", "symptom": "bloating", "confidence": "High", "explanation": "Same evening"}
        ],
        "recommendations": ["Try a garlic-free week"],
        "safe_foods": ["banana"],
        "trigger_foods": ["garlic bread"],
    }

    @pytest.mark.asyncio
    async def test_analyze_with_prefill(self, service):
        """Test that the reply is parsed as the continuation of the '{' prefill."""
        body = json.dumps(self.ANALYSIS_BODY)
        service.client.messages.create.return_value = _response(_text(body[1:]))

        result = await service.analyze([food_entry(), symptom_entry()])

        assert result["summary"] == "Fructans look like a trigger"
        assert result["correlations"][0]["confidence"] == "high"
        assert result["trigger_foods"] == ["garlic bread"]

    @pytest.mark.asyncio
    async def test_analyze_request(self, service):
        """Test the analyze request: formatted entries, prefill and no tools."""
        service.client.messages.create.return_value = _response(_text('"summary": "ok"}'))

        await service.analyze([food_entry(timestamp="2024-01-01T08:00:00.000Z")])

        kwargs = service.client.messages.create.call_args.kwargs
        assert kwargs["system"] == ANALYSIS_SYSTEM_PROMPT
        assert kwargs["model"] == service.analysis_model
        assert "tools" not in kwargs
        user, assistant = kwargs["messages"]
        assert "Jan 1\n  8:00 AM: banana [low fructans]" in user["content"]
        assert assistant == {"role": "assistant", "content": "{"}

    @pytest.mark.asyncio
    async def test_analyze_defaults_missing_lists(self, service):
        service.client.messages.create.return_value = _response(_text('"summary": "Not enough data"}'))

        result = await service.analyze([food_entry()])

        assert result == {
            "summary": "Not enough data",
            "correlations": [],
            "recommendations": [],
            "safe_foods": [],
            "trigger_foods": [],
        }

    @pytest.mark.asyncio
    async def test_analyze_empty(self, service):
        with pytest.raises(AnalysisError, match="No entries"):
            await service.analyze([])

        service.client.messages.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_analyze_malformed_json(self, service):
        service.client.messages.create.return_value = _response(_text('"summary": "cut off'))

        with pytest.raises(AnalysisError, match="Failed to parse LLM response"):
            await service.analyze([food_entry()])

    @pytest.mark.asyncio
    async def test_analyze_missing_summary(self, service):
        service.client.messages.create.return_value = _response(_text('"correlations": []}'))

        with pytest.raises(AnalysisError):
            await service.analyze([food_entry()])

    @pytest.mark.asyncio
    async def test_analyze_status_error(self, service):
        service.client.messages.create.side_effect = anthropic.APIStatusError(
            "Overloaded",
            response=httpx.Response(529, request=_request()),
            body=None,
        )

        with pytest.raises(AnalysisError, match="529"):
            await service.analyze([food_entry()])
