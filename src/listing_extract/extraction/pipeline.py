"""Turn raw model text into a caller-facing ExtractionResult.

Runs the strategy chain, normalizes every table it produced, and falls back to
a single-cell table holding the raw text when no strategy succeeds.  Malformed
output is never an error here: the worst case is a "fallback" result that
still has ``success=True``.
"""

import logging

from listing_extract.extraction.chain import StrategyChain
from listing_extract.extraction.normalize import fallback_table, normalize
from listing_extract.extraction.schema import DebugInfo, ExtractionResult

logger = logging.getLogger(__name__)

FALLBACK_STRATEGY = "fallback"


def parse_response(raw_text: str, request_summary: str = "", chain: StrategyChain | None = None) -> ExtractionResult:
    """Extract normalized tables from *raw_text*, always returning a successful result."""
    chain = chain or StrategyChain()
    logger.debug("Raw response (first 500 chars): %s", raw_text[:500])

    chain_result = chain.run(raw_text)
    if chain_result is not None:
        tables = [normalize(table) for table in chain_result.tables]
        status = chain_result.strategy.status
        error_message = None if status == "success" else "Used fallback extraction method"
        return ExtractionResult(
            success=True,
            tables=tables,
            debug=DebugInfo(
                request_summary=request_summary,
                raw_response=raw_text,
                status=status,
                error_message=error_message,
                strategy=chain_result.strategy.name,
            ),
        )

    logger.warning("No structured table found; returning raw text as a single-cell table")
    return ExtractionResult(
        success=True,
        tables=[fallback_table(raw_text)],
        debug=DebugInfo(
            request_summary=request_summary,
            raw_response=raw_text,
            status="fallback",
            error_message="Failed to extract structured data",
            strategy=FALLBACK_STRATEGY,
        ),
    )
