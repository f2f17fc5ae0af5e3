"""Input documents and the caller-facing validation that runs before any model call."""

import mimetypes
from pathlib import Path

from pydantic import BaseModel

PDF_CONTENT_TYPE = "application/pdf"


class DocumentError(ValueError):
    """Caller input error; raised before any retry or extraction logic runs."""


class MissingDocumentError(DocumentError):
    """No document was supplied."""


class UnsupportedDocumentError(DocumentError):
    """The document is neither an image nor a PDF."""


class Document(BaseModel):
    """An uploaded document blob."""

    name: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: Path, content_type: str | None = None) -> "Document":
        """Read a document from disk, guessing the content type from the file suffix."""
        path = Path(path).expanduser()
        if content_type is None:
            content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        with open(path, "rb") as fopen:
            data = fopen.read()
        return cls(name=path.name, content_type=content_type, data=data)


def is_supported_content_type(content_type: str) -> bool:
    """Only images and PDFs can be sent to the vision model."""
    return content_type.startswith("image/") or content_type == PDF_CONTENT_TYPE


def validate_document(document: Document | None) -> Document:
    """Return *document* unchanged, or raise MissingDocumentError / UnsupportedDocumentError."""
    if document is None:
        raise MissingDocumentError("No document provided")
    if not is_supported_content_type(document.content_type):
        raise UnsupportedDocumentError(f"Unsupported file type '{document.content_type}'. Supported: image/*, {PDF_CONTENT_TYPE}")
    return document
