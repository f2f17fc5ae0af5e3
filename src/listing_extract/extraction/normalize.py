"""Row rectangularization and the terminal single-cell fallback table."""

import itertools
import logging
import time

from listing_extract.config import FALLBACK_MAX_CHARS
from listing_extract.extraction.schema import RawTable, Table

logger = logging.getLogger(__name__)

# Process-wide sequence so ids stay unique even within the same millisecond
_TABLE_SEQUENCE = itertools.count(1)

FALLBACK_TABLE_NAME = "Extracted Text"
FALLBACK_HEADER = "Content"


def new_table_id() -> str:
    """Return an identifier unique within this process, e.g. 'table-1718000000000-7'."""
    return f"table-{int(time.time() * 1000)}-{next(_TABLE_SEQUENCE)}"


def fit_row(row: list[str], width: int) -> list[str]:
    """Pad *row* with empty cells, or cut trailing cells, so it has exactly *width* cells."""
    if len(row) < width:
        return list(row) + [""] * (width - len(row))
    return list(row[:width])


def normalize(table: RawTable) -> Table:
    """Rectangularize every row of *table* against its header width.

    Rows and headers are never dropped or reordered.  A RawTable gets a fresh
    id; an already-normalized Table keeps its id, so normalizing twice is a
    no-op.
    """
    width = len(table.headers)
    data = [fit_row(row, width) for row in table.data]
    table_id = table.id if isinstance(table, Table) else new_table_id()
    return Table(id=table_id, name=table.name, headers=list(table.headers), data=data)


def fallback_table(text: str, max_chars: int = FALLBACK_MAX_CHARS) -> Table:
    """Wrap raw model text as a one-cell table, truncated with a trailing '...' marker."""
    content = text[:max_chars] + "..." if len(text) > max_chars else text
    logger.debug("Wrapping %d characters of raw text in the fallback table", len(text))
    return Table(id=new_table_id(), name=FALLBACK_TABLE_NAME, headers=[FALLBACK_HEADER], data=[[content]])
