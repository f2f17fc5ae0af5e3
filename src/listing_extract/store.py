"""In-process store for extraction results with last-write-wins ordering.

The request-handling layer owns one ResultStore.  Each request takes a ticket
from ``begin()`` before it starts; tickets carry a monotonically increasing
timestamp.  When results arrive out of order, an older request's result is
still recorded under its request id but never replaces a newer current
result.  Storage is ephemeral and lost on restart.
"""

import itertools
import logging
import threading
import uuid
from dataclasses import dataclass

from listing_extract.extraction.normalize import fit_row
from listing_extract.extraction.schema import ExtractionResult, Table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestTicket:
    """Identity and ordering stamp for one extraction request."""

    request_id: str
    timestamp: int


class ResultStore:
    """Keeps results by request id and tracks the most recent one as current."""

    def __init__(self):
        self._lock = threading.Lock()
        self._clock = itertools.count(1)
        self._results: dict[str, ExtractionResult] = {}
        self._current: tuple[RequestTicket, ExtractionResult] | None = None

    def begin(self) -> RequestTicket:
        """Issue a ticket for a new request; later tickets always have larger timestamps."""
        with self._lock:
            return RequestTicket(request_id=uuid.uuid4().hex, timestamp=next(self._clock))

    def apply(self, ticket: RequestTicket, result: ExtractionResult) -> bool:
        """Record *result*; make it current only if *ticket* is not older than the current one.

        Returns True when the result became current.
        """
        with self._lock:
            self._results[ticket.request_id] = result
            if self._current is not None and ticket.timestamp < self._current[0].timestamp:
                logger.info("Discarding stale result for request %s (timestamp %d < %d)", ticket.request_id, ticket.timestamp, self._current[0].timestamp)
                return False
            self._current = (ticket, result)
            return True

    def current(self) -> ExtractionResult | None:
        """The result of the most recent applied request, if any."""
        with self._lock:
            return self._current[1] if self._current is not None else None

    def get(self, request_id: str) -> ExtractionResult | None:
        with self._lock:
            return self._results.get(request_id)

    def save_table_data(self, table_id: str, data: list[list[str]]) -> Table:
        """Replace the rows of a table in the current result (fitted to its header width).

        Raises KeyError if the current result has no table with *table_id*.
        """
        with self._lock:
            if self._current is None:
                raise KeyError(table_id)
            ticket, result = self._current
            for idx, table in enumerate(result.tables):
                if table.id == table_id:
                    width = len(table.headers)
                    updated = table.model_copy(update={"data": [fit_row(row, width) for row in data]})
                    tables = list(result.tables)
                    tables[idx] = updated
                    new_result = result.model_copy(update={"tables": tables})
                    self._current = (ticket, new_result)
                    self._results[ticket.request_id] = new_result
                    logger.info("Saved %d row(s) to table %s", len(data), table_id)
                    return updated
            raise KeyError(table_id)
