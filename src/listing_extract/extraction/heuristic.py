"""Keyword + delimiter heuristics for tables buried in unstructured prose.

Pass 1 splits the text into blocks at table-name lines (a line mentioning
table/inventory/properties/listings with no ':' ',' or '[').  Pass 2 looks for
a delimited header line near the top of each block and reads the delimited
lines after it as rows.  Without any table-name line the whole text is one
implicit block.

Two table-name lines with nothing usable between them produce no table; that
block is dropped.
"""

import logging

from listing_extract.extraction.patterns import (
    BRACKET_CHARS,
    DELIMITERS,
    HEADER_SCAN_LINES,
    MARKDOWN_SEPARATOR_RE,
    TABLE_NAME_EXCLUDED_CHARS,
    TABLE_NAME_KEYWORD_RE,
)
from listing_extract.extraction.schema import RawTable

logger = logging.getLogger(__name__)

IMPLICIT_TABLE_NAME = "Extracted Table"


# ─── Line Classification ─────────────────────────────────────────────────────


def is_table_name_line(line: str) -> bool:
    """Return True if the line reads like a table title rather than data."""
    if any(char in line for char in TABLE_NAME_EXCLUDED_CHARS):
        return False
    return bool(TABLE_NAME_KEYWORD_RE.search(line))


def detect_delimiter(line: str) -> str | None:
    """Return the highest-priority delimiter present in *line* ('|' > tab > ',')."""
    for delimiter in DELIMITERS:
        if delimiter in line:
            return delimiter
    return None


def _is_header_candidate(line: str) -> bool:
    if detect_delimiter(line) is None:
        return False
    if any(char in line for char in BRACKET_CHARS):
        return False
    return not MARKDOWN_SEPARATOR_RE.match(line)


def split_cells(line: str, delimiter: str, borders: bool = True) -> list[str]:
    """Split a delimited line into trimmed cells.

    With *borders*, a leading and trailing markdown border pipe is dropped
    first; otherwise a leading pipe marks an empty first cell.
    """
    if delimiter == "|" and borders:
        line = line.strip()
        if line.startswith("|"):
            line = line[1:]
        if line.endswith("|"):
            line = line[:-1]
    return [cell.strip() for cell in line.split(delimiter)]


# ─── Pass 1: Segmentation ────────────────────────────────────────────────────


def segment_blocks(lines: list[str]) -> list[tuple[str, list[str]]]:
    """Group lines into (table name, block lines) pairs at table-name boundaries.

    Lines before the first boundary belong to no block.  Returns an empty list
    when there is no boundary at all.
    """
    blocks: list[tuple[str, list[str]]] = []
    for line in lines:
        if is_table_name_line(line):
            blocks.append((line, []))
        elif blocks:
            blocks[-1][1].append(line)
    return blocks


# ─── Pass 2: Per-Block Extraction ────────────────────────────────────────────


def extract_block(lines: list[str], name: str) -> RawTable | None:
    """Read one block: a delimited header line within the first few lines, then delimited rows."""
    header_idx = next((i for i, line in enumerate(lines[:HEADER_SCAN_LINES]) if _is_header_candidate(line)), None)
    if header_idx is None:
        return None

    header_line = lines[header_idx].strip()
    delimiter = detect_delimiter(header_line)
    headers = split_cells(header_line, delimiter)
    # Rows only carry border pipes when the header does
    borders = header_line.startswith("|") or header_line.endswith("|")

    data: list[list[str]] = []
    for line in lines[header_idx + 1 :]:
        stripped = line.strip()
        # Blank lines, stray titles and markdown separator rows are not data
        if not stripped or is_table_name_line(stripped) or MARKDOWN_SEPARATOR_RE.match(stripped):
            continue
        if delimiter not in stripped:
            continue
        data.append(split_cells(stripped, delimiter, borders))

    if not headers or not data:
        logger.debug("Block '%s' has a header line but no data rows", name)
        return None
    return RawTable(name=name or IMPLICIT_TABLE_NAME, headers=headers, data=data)


def extract_heuristic_tables(text: str) -> list[RawTable] | None:
    """Scan free text for delimited tables; None when nothing table-like is found."""
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    blocks = segment_blocks(lines)
    if not blocks:
        blocks = [(IMPLICIT_TABLE_NAME, lines)]
    else:
        logger.debug("Found %d table-name boundaries", len(blocks))

    tables = [table for table in (extract_block(block, name) for name, block in blocks) if table is not None]
    return tables or None
