"""Caller-facing extraction entry point.

Validates the document, calls the vision model through the retry policy, and
parses whatever text comes back.  Always returns an ExtractionResult; the only
exceptions raised are caller input errors, DocumentError subclasses for a
missing or unsupported document and ValueError for an unknown prompt dialect.
Both are raised before any model call.

Usage:
    result = asyncio.run(extract_document(Document.from_path("listing.pdf")))
"""

import asyncio
import logging
from typing import Callable

from listing_extract.config import PROMPT_DIALECT, REQUEST_SUMMARY_PROMPT_CHARS, VISION_DEPLOYMENT
from listing_extract.documents import Document, validate_document
from listing_extract.extraction.chain import StrategyChain
from listing_extract.extraction.pipeline import parse_response
from listing_extract.extraction.schema import DebugInfo, ExtractionResult
from listing_extract.llm.client import ModelConfigurationError, VisionModel
from listing_extract.llm.prompts import get_prompt
from listing_extract.llm.retry import RetryExhaustedError, RetryPolicy, is_connectivity_error

logger = logging.getLogger(__name__)

# Synchronous model call: (document, prompt) -> raw text, raising on failure
ModelCall = Callable[[Document, str], str]

CONNECTIVITY_SUGGESTION = "Check your internet connection and try again in a few moments."
GENERIC_SUGGESTION = "Verify the model configuration and try a different file."


def build_request_summary(model_name: str, document: Document, prompt: str) -> str:
    """Human-readable trace of what was sent to the model (prompt truncated)."""
    truncated = prompt[:REQUEST_SUMMARY_PROMPT_CHARS]
    if len(prompt) > REQUEST_SUMMARY_PROMPT_CHARS:
        truncated += "..."
    return f"Request to {model_name}:\nModel: {model_name}\nFile: {document.name} ({document.content_type}, {document.size} bytes)\nPrompt: {truncated}"


def failure_result(request_summary: str, error: BaseException) -> ExtractionResult:
    """Build the success=False result for a model call that could not be completed."""
    last_error = error.last_error if isinstance(error, RetryExhaustedError) else error
    connectivity = is_connectivity_error(last_error)
    return ExtractionResult(
        success=False,
        tables=[],
        debug=DebugInfo(
            request_summary=request_summary,
            raw_response="",
            status="error",
            error_message=str(last_error) or type(last_error).__name__,
            is_connectivity_error=connectivity,
            suggestion=CONNECTIVITY_SUGGESTION if connectivity else GENERIC_SUGGESTION,
        ),
    )


async def extract_document(
    document: Document | None,
    *,
    dialect: str = PROMPT_DIALECT,
    model_call: ModelCall | None = None,
    model_name: str | None = None,
    retry_policy: RetryPolicy | None = None,
    chain: StrategyChain | None = None,
) -> ExtractionResult:
    """Extract tables from *document*, retrying the model call and falling back gracefully.

    *model_call* defaults to the Azure OpenAI vision deployment.  It is
    synchronous and runs in a worker thread, so other requests on the event
    loop keep going during the call and during the backoff.
    """
    document = validate_document(document)
    prompt = get_prompt(dialect)
    model_name = model_name or VISION_DEPLOYMENT
    request_summary = build_request_summary(model_name, document, prompt)
    logger.info("Extracting tables from %s (%s, %d bytes, dialect=%s)", document.name, document.content_type, document.size, dialect)

    if model_call is None:
        try:
            model_call = VisionModel.from_env()
        except ModelConfigurationError as exc:
            logger.error("Cannot call the model: %s", exc)
            return failure_result(request_summary, exc)

    policy = retry_policy or RetryPolicy()

    async def _attempt() -> str:
        return await asyncio.to_thread(model_call, document, prompt)

    try:
        raw_text = await policy.invoke(_attempt)
    except RetryExhaustedError as exc:
        return failure_result(request_summary, exc)

    result = parse_response(raw_text, request_summary, chain)
    logger.info("Extraction finished: status=%s, %d table(s)", result.debug.status, len(result.tables))
    return result
