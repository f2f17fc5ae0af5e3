"""Vision model call boundary.

Sends one document (image or PDF) plus a prompt to an Azure OpenAI vision
deployment and returns the raw response text.  The call either returns text
or raises; classifying and retrying failures is the retry policy's job.
"""

import base64
import logging
import time

from openai import OpenAI

from listing_extract.config import AZURE_OPENAI_API_KEY, AZURE_OPENAI_ENDPOINT, VISION_DEPLOYMENT
from listing_extract.documents import PDF_CONTENT_TYPE, Document

logger = logging.getLogger(__name__)


class ModelConfigurationError(RuntimeError):
    """The model endpoint or key is not configured."""


def build_document_part(document: Document) -> dict:
    """Encode *document* as a chat-completions content part (image_url for images, file for PDFs)."""
    data_b64 = base64.b64encode(document.data).decode("utf-8")
    data_uri = f"data:{document.content_type};base64,{data_b64}"
    if document.content_type == PDF_CONTENT_TYPE:
        return {"type": "file", "file": {"filename": document.name, "file_data": data_uri}}
    return {"type": "image_url", "image_url": {"url": data_uri, "detail": "high"}}


class VisionModel:
    """Callable ``(document, prompt) -> raw text`` backed by an OpenAI-compatible client."""

    def __init__(self, client: OpenAI, deployment: str):
        self.client = client
        self.deployment = deployment

    @classmethod
    def from_env(cls) -> "VisionModel":
        """Build the client from the Azure OpenAI settings in the environment / .env."""
        if not AZURE_OPENAI_ENDPOINT or not AZURE_OPENAI_API_KEY:
            raise ModelConfigurationError("Azure OpenAI credentials not configured (AZURE_OPENAI_ENDPOINT / AZURE_OPENAI_API_KEY)")
        base_url = f"{AZURE_OPENAI_ENDPOINT}/openai/v1/"
        logger.info("Connecting to Azure OpenAI at %s  (deployment=%s)", base_url, VISION_DEPLOYMENT)
        return cls(OpenAI(base_url=base_url, api_key=AZURE_OPENAI_API_KEY), VISION_DEPLOYMENT)

    def __call__(self, document: Document, prompt: str) -> str:
        logger.info("Sending %s (%s, %.1f KB) to %s", document.name, document.content_type, document.size / 1024, self.deployment)
        t0 = time.time()
        response = self.client.chat.completions.create(
            model=self.deployment,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        build_document_part(document),
                    ],
                },
            ],
        )
        logger.debug("Model responded in %.1fs", time.time() - t0)
        return response.choices[0].message.content or ""
