"""Command-line interface for listing extraction.

Usage:
    listing-extract extract listing.pdf [--dialect json|pipe] [--max-attempts 3] [--initial-delay 1.0]
    listing-extract parse response.txt [--format json|pipe]
    listing-extract check-config

Exit status: 0 on success, 1 when the extraction result has success=false,
2 on invalid input (missing file, unsupported type).
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from listing_extract.config import INITIAL_DELAY_SECONDS, MAX_ATTEMPTS, PROMPT_DIALECT, check_config
from listing_extract.documents import Document, DocumentError
from listing_extract.extraction.pipeline import parse_response
from listing_extract.extraction.protocol import to_protocol_text
from listing_extract.extraction.schema import ExtractionResult
from listing_extract.llm.prompts import PROMPTS
from listing_extract.llm.retry import RetryPolicy
from listing_extract.service import extract_document

logger = logging.getLogger(__name__)


def _render(result: ExtractionResult, output_format: str) -> str:
    if output_format == "pipe":
        return to_protocol_text(result.tables)
    return json.dumps(result.model_dump(), indent=2, ensure_ascii=False)


def _cmd_extract(args: argparse.Namespace) -> int:
    path = Path(args.file)
    if not path.is_file():
        logger.error("File not found: %s", path)
        return 2
    try:
        document = Document.from_path(path, content_type=args.content_type)
        policy = RetryPolicy(max_attempts=args.max_attempts, initial_delay=args.initial_delay)
        result = asyncio.run(extract_document(document, dialect=args.dialect, retry_policy=policy))
    except DocumentError as exc:
        logger.error("%s", exc)
        return 2
    print(_render(result, args.format))
    return 0 if result.success else 1


def _cmd_parse(args: argparse.Namespace) -> int:
    path = Path(args.file)
    if not path.is_file():
        logger.error("File not found: %s", path)
        return 2
    with open(path, "r", encoding="utf-8") as fopen:
        raw_text = fopen.read()
    result = parse_response(raw_text, request_summary=f"Parsed from {path.name}")
    print(_render(result, args.format))
    return 0


def _cmd_check_config(_args: argparse.Namespace) -> int:
    status = check_config()
    print(json.dumps(status, indent=2))
    return 0 if status["configured"] else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="listing-extract", description="Extract property-listing tables from documents.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable DEBUG logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract = subparsers.add_parser("extract", help="Send a document to the vision model and parse its tables")
    extract.add_argument("file", help="Image or PDF to extract from")
    extract.add_argument("--dialect", choices=sorted(PROMPTS), default=PROMPT_DIALECT, help="Prompt dialect (default: %(default)s)")
    extract.add_argument("--content-type", default=None, help="Override the content type guessed from the file suffix")
    extract.add_argument("--max-attempts", type=int, default=MAX_ATTEMPTS)
    extract.add_argument("--initial-delay", type=float, default=INITIAL_DELAY_SECONDS, help="Backoff before the 2nd attempt, in seconds")
    extract.add_argument("--format", choices=("json", "pipe"), default="json", help="Output format (default: %(default)s)")
    extract.set_defaults(func=_cmd_extract)

    parse = subparsers.add_parser("parse", help="Parse a saved raw model response without calling the model")
    parse.add_argument("file", help="Text file holding the raw model response")
    parse.add_argument("--format", choices=("json", "pipe"), default="json", help="Output format (default: %(default)s)")
    parse.set_defaults(func=_cmd_parse)

    check = subparsers.add_parser("check-config", help="Report whether model credentials are configured")
    check.set_defaults(func=_cmd_check_config)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
