"""Ordered fallback chain of extraction strategies.

Each strategy is a pure ``text -> list[RawTable] | None`` function.  The chain
tries them in fixed priority order and returns the first one that yields at
least one table with headers.  Results from different strategies are never
merged.
"""

import logging
from dataclasses import dataclass
from typing import Callable

from listing_extract.extraction.heuristic import extract_heuristic_tables
from listing_extract.extraction.json_strategy import extract_json_tables
from listing_extract.extraction.protocol import parse_protocol_tables
from listing_extract.extraction.schema import ExtractionStatus, RawTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Strategy:
    """A named extraction function plus the debug status it reports when it wins."""

    name: str
    extract: Callable[[str], list[RawTable] | None]
    status: ExtractionStatus = "success"


@dataclass(frozen=True)
class ChainResult:
    """The winning strategy and the tables it produced."""

    strategy: Strategy
    tables: list[RawTable]


DEFAULT_STRATEGIES: tuple[Strategy, ...] = (
    Strategy("json", extract_json_tables),
    Strategy("protocol", parse_protocol_tables),
    Strategy("heuristic", extract_heuristic_tables, status="partial"),
)


class StrategyChain:
    """Run strategies in order; the first non-empty result wins."""

    def __init__(self, strategies: tuple[Strategy, ...] = DEFAULT_STRATEGIES):
        self.strategies = tuple(strategies)

    def run(self, text: str) -> ChainResult | None:
        """Return the first successful strategy's tables, or None if every strategy fails."""
        for strategy in self.strategies:
            try:
                tables = strategy.extract(text)
            except Exception:  # pylint: disable=broad-exception-caught
                logger.exception("Strategy '%s' raised; moving on to the next strategy", strategy.name)
                continue

            # Only tables with at least one header count as a result
            usable = [table for table in tables or [] if table.headers]
            if usable:
                logger.info("Strategy '%s' produced %d table(s)", strategy.name, len(usable))
                return ChainResult(strategy=strategy, tables=usable)
            logger.debug("Strategy '%s' found no tables", strategy.name)

        logger.info("No strategy produced a table (%d tried)", len(self.strategies))
        return None

    def extract(self, text: str) -> list[RawTable]:
        """Return the winning strategy's tables (possibly empty)."""
        result = self.run(text)
        return result.tables if result is not None else []
