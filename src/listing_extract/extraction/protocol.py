"""Parser and serializer for the TABLE: / HEADERS: / ROW: line protocol.

Example::

    TABLE: Inventory
    HEADERS: Unit | Price
    ROW: A1 | 1.0M

A two-state machine (no table open / table open).  A table is emitted when the
next TABLE: line arrives or input ends, and only if it has at least one header.
Lines that match none of the prefixes are ignored.
"""

import logging

from listing_extract.extraction.patterns import HEADERS_PREFIX, PROTOCOL_DELIMITER, ROW_PREFIX, TABLE_PREFIX
from listing_extract.extraction.schema import RawTable

logger = logging.getLogger(__name__)


def split_fields(line: str) -> list[str]:
    """Split a protocol payload on '|' and trim every field."""
    return [field.strip() for field in line.split(PROTOCOL_DELIMITER)]


def parse_protocol_tables(text: str) -> list[RawTable] | None:
    """Parse every table in *text*; None when no table with headers is found."""
    tables: list[RawTable] = []
    current: RawTable | None = None
    unnamed_count = 0

    def _emit() -> None:
        if current is not None and current.headers:
            tables.append(current)
        elif current is not None:
            logger.debug("Dropping protocol table '%s' with no headers", current.name)

    for raw_line in text.splitlines():
        line = raw_line.strip()

        if line.startswith(TABLE_PREFIX):
            _emit()
            name = line[len(TABLE_PREFIX) :].strip()
            if not name:
                unnamed_count += 1
                name = f"Unnamed Table {unnamed_count}"
            current = RawTable(name=name)
            continue

        # HEADERS:/ROW: only mean something inside an open table
        if current is None:
            continue

        if line.startswith(HEADERS_PREFIX):
            current.headers = split_fields(line[len(HEADERS_PREFIX) :].strip())
        elif line.startswith(ROW_PREFIX):
            current.data.append(split_fields(line[len(ROW_PREFIX) :].strip()))

    _emit()
    return tables or None


def to_protocol_text(tables: list[RawTable]) -> str:
    """Serialize tables back into the line protocol (inverse of parse_protocol_tables).

    The round trip holds for named tables whose cells contain no '|'.  An
    unnamed table is written as a bare 'TABLE:' line and reads back as
    "Unnamed Table N"; a '|' inside a cell is not escaped, so it splits the
    cell when parsed again.
    """
    lines: list[str] = []
    for table in tables:
        lines.append(f"{TABLE_PREFIX} {table.name or ''}".rstrip())
        lines.append(f"{HEADERS_PREFIX} " + f" {PROTOCOL_DELIMITER} ".join(table.headers))
        for row in table.data:
            lines.append(f"{ROW_PREFIX} " + f" {PROTOCOL_DELIMITER} ".join(row))
        lines.append("")
    return "\n".join(lines).rstrip("\n")
