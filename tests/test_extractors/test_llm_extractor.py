"""Tests for the OpenAI purchase-order extractor."""

import asyncio
import json
from types import SimpleNamespace

import pytest
from openai import OpenAIError

from orderextract.core.exceptions import ExtractionError
from orderextract.extractors import (
    OrderExtractor,
    parse_extraction_text,
    repair_truncated_json,
    strip_code_fences,
)


class FakeCompletions:
    """Stands in for client.chat.completions."""

    def __init__(self, content: str | None = None, error: Exception | None = None):
        self.content = content
        self.error = error
        self.requests: list[dict] = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _client(completions: FakeCompletions) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


class TestParseExtractionText:
    """Test cases for parse_extraction_text."""

    def test_plain_json(self):
        assert parse_extraction_text('{"cliente": "ACME", "linhas": []}') == {"cliente": "ACME", "linhas": []}

    def test_code_fences_are_stripped(self):
        text = '```json\n{"cliente": "ACME"}\n```'

        assert strip_code_fences(text) == '{"cliente": "ACME"}'
        assert parse_extraction_text(text) == {"cliente": "ACME"}

    def test_invalid_json_raises(self):
        with pytest.raises(ExtractionError):
            parse_extraction_text('{"cliente": "ACME", "linhas": [')

    def test_empty_response_raises(self):
        with pytest.raises(ExtractionError):
            parse_extraction_text("   ")

    def test_non_object_raises(self):
        with pytest.raises(ExtractionError):
            parse_extraction_text("[1, 2]")

    def test_truncated_json_repaired_when_enabled(self):
        text = '{"cliente": "ACME", "linhas": [{"designacao": "Parafuso [M6]", "entregas": [{"data": "2026-01-29"},'

        data = parse_extraction_text(text, repair=True)

        assert data["linhas"][0]["designacao"] == "Parafuso [M6]"
        assert data["linhas"][0]["entregas"] == [{"data": "2026-01-29"}]

    def test_unrepairable_json_raises(self):
        with pytest.raises(ExtractionError):
            parse_extraction_text('{"cliente": }', repair=True)


class TestRepairTruncatedJson:
    """Test cases for repair_truncated_json."""

    def test_closes_nested_brackets_in_order(self):
        assert repair_truncated_json('{"a": [{"b": 1}, {"c": [2') == '{"a": [{"b": 1}, {"c": [2]}]}'

    def test_closes_open_string(self):
        repaired = repair_truncated_json('{"cliente": "AC')

        assert json.loads(repaired) == {"cliente": "AC"}

    def test_balanced_text_is_unchanged(self):
        assert repair_truncated_json('{"a": "}"}') == '{"a": "}"}'


class TestOrderExtractor:
    """Test cases for OrderExtractor."""

    def test_pdf_is_sent_as_file_part(self):
        completions = FakeCompletions(content='{"cliente": "ACME", "linhas": []}')
        extractor = OrderExtractor(api_key="sk-test", client=_client(completions))

        data = asyncio.run(extractor.extract(b"%PDF-1.4", "application/pdf", "ne.pdf"))

        assert data == {"cliente": "ACME", "linhas": []}
        request = completions.requests[0]
        parts = request["messages"][1]["content"]
        assert parts[0]["type"] == "file"
        assert parts[0]["file"]["filename"] == "ne.pdf"
        assert parts[0]["file"]["file_data"].startswith("data:application/pdf;base64,")
        assert "linhas" in parts[1]["text"]
        assert request["response_format"] == {"type": "json_object"}

    def test_image_is_sent_as_image_part(self):
        completions = FakeCompletions(content='{"linhas": []}')
        extractor = OrderExtractor(api_key="sk-test", client=_client(completions))

        asyncio.run(extractor.extract(b"\x89PNG", "image/png", "scan.png"))

        part = completions.requests[0]["messages"][1]["content"][0]
        assert part["type"] == "image_url"
        assert part["image_url"]["url"].startswith("data:image/png;base64,")

    def test_service_error_becomes_extraction_error(self):
        completions = FakeCompletions(error=OpenAIError("overloaded"))
        extractor = OrderExtractor(api_key="sk-test", client=_client(completions))

        with pytest.raises(ExtractionError, match="overloaded"):
            asyncio.run(extractor.extract(b"%PDF-1.4", "application/pdf", "ne.pdf"))

    def test_unsupported_media_type(self):
        completions = FakeCompletions(content="{}")
        extractor = OrderExtractor(api_key="sk-test", client=_client(completions))

        with pytest.raises(ExtractionError):
            asyncio.run(extractor.extract(b"GIF89a", "image/gif", "scan.gif"))
        assert completions.requests == []
