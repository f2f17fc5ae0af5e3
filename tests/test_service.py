"""Tests for the caller-facing extraction entry point with a fake model call."""

# pylint: disable=missing-class-docstring,missing-function-docstring

import asyncio
from unittest.mock import patch

import pytest

from listing_extract.documents import Document, MissingDocumentError, UnsupportedDocumentError
from listing_extract.llm.client import ModelConfigurationError
from listing_extract.llm.retry import RetryPolicy
from listing_extract.service import (
    CONNECTIVITY_SUGGESTION,
    GENERIC_SUGGESTION,
    build_request_summary,
    extract_document,
)

PIPE_TEXT = "TABLE: Inventory\nHEADERS: Unit | Price\nROW: A1 | 1.0M"


async def _no_wait(_delay: float) -> None:
    return None


class FakeModel:
    """Model call that fails *failures* times with *error*, then returns *text*."""

    def __init__(self, text: str = PIPE_TEXT, failures: int = 0, error: Exception | None = None):
        self.text = text
        self.failures = failures
        self.error = error or ConnectionError("network down")
        self.calls: list[tuple[str, str]] = []

    def __call__(self, document: Document, prompt: str) -> str:
        self.calls.append((document.name, prompt))
        if len(self.calls) <= self.failures:
            raise self.error
        return self.text


def _image() -> Document:
    return Document(name="listing.png", content_type="image/png", data=b"\x89PNG")


def _run(document, model, **kwargs):
    policy = RetryPolicy(max_attempts=3, initial_delay=1.0, sleep=_no_wait)
    return asyncio.run(extract_document(document, model_call=model, model_name="test-model", retry_policy=policy, **kwargs))


# ===========================================================================
# Input validation
# ===========================================================================


class TestInputValidation:

    def test_missing_document(self):
        model = FakeModel()
        with pytest.raises(MissingDocumentError):
            _run(None, model)
        assert model.calls == []

    def test_unsupported_content_type(self):
        model = FakeModel()
        document = Document(name="notes.txt", content_type="text/plain", data=b"hello")
        with pytest.raises(UnsupportedDocumentError):
            _run(document, model)
        assert model.calls == []

    def test_unknown_dialect(self):
        model = FakeModel()
        with pytest.raises(ValueError, match="Unknown prompt dialect"):
            _run(_image(), model, dialect="yaml")
        assert model.calls == []

    def test_pdf_accepted(self):
        document = Document(name="listing.pdf", content_type="application/pdf", data=b"%PDF")
        assert _run(document, FakeModel()).success is True


# ===========================================================================
# Successful extraction
# ===========================================================================


class TestExtraction:

    def test_pipe_response(self):
        result = _run(_image(), FakeModel())
        assert result.success is True
        assert result.tables[0].name == "Inventory"
        assert result.tables[0].data == [["A1", "1.0M"]]
        assert result.debug.raw_response == PIPE_TEXT

    def test_prompt_follows_dialect(self):
        model = FakeModel()
        _run(_image(), model, dialect="json")
        assert '{"tables":' in model.calls[0][1]

    def test_request_summary(self):
        result = _run(_image(), FakeModel())
        assert "Model: test-model" in result.debug.request_summary
        assert "File: listing.png (image/png, 4 bytes)" in result.debug.request_summary

    def test_transient_failure_then_success(self):
        model = FakeModel(failures=2)
        result = _run(_image(), model)
        assert result.success is True
        assert len(model.calls) == 3

    def test_garbage_response_falls_back(self):
        result = _run(_image(), FakeModel(text="random prose with no structure"))
        assert result.success is True
        assert result.debug.status == "fallback"
        assert result.tables[0].headers == ["Content"]


# ===========================================================================
# Terminal failures
# ===========================================================================


class TestFailures:

    def test_retry_exhaustion_is_connectivity_error(self):
        model = FakeModel(failures=99, error=ConnectionError("network unreachable"))
        result = _run(_image(), model)
        assert len(model.calls) == 3
        assert result.success is False
        assert result.tables == []
        assert result.debug.status == "error"
        assert result.debug.is_connectivity_error is True
        assert result.debug.suggestion == CONNECTIVITY_SUGGESTION
        assert "network unreachable" in result.debug.error_message

    def test_permanent_failure(self):
        result = _run(_image(), FakeModel(failures=99, error=ValueError("invalid api key")))
        assert result.success is False
        assert result.debug.is_connectivity_error is False
        assert result.debug.suggestion == GENERIC_SUGGESTION

    def test_model_not_configured(self):
        with patch("listing_extract.service.VisionModel.from_env", side_effect=ModelConfigurationError("not configured")):
            result = asyncio.run(extract_document(_image()))
        assert result.success is False
        assert result.debug.error_message == "not configured"
        assert result.debug.is_connectivity_error is False


class TestBuildRequestSummary:

    def test_prompt_truncated(self):
        summary = build_request_summary("gpt-4.1", _image(), "p" * 500)
        assert summary.endswith("p" * 200 + "...")

    def test_short_prompt_kept(self):
        summary = build_request_summary("gpt-4.1", _image(), "short prompt")
        assert summary.endswith("Prompt: short prompt")
        assert summary.startswith("Request to gpt-4.1:")
