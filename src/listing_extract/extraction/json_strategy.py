"""Recover ``{"tables": [...]}`` shaped data from noisy, JSON-ish model output.

Four methods are tried in order, each more forgiving than the last:

  1. direct parse        -- strip fences and control characters, parse the outermost {...}
  2. tables-array parse  -- parse only the bracket-matched array after "tables":
  3. per-table fragments -- regex out each {"name", "headers", "data"} object separately
  4. bare string arrays  -- first array of strings is the header, the rest are rows

Every method returns None instead of raising, so a malformed response simply
falls through to the next method.
"""

import json
import logging
from typing import Any, Callable

from listing_extract.extraction.patterns import (
    CODE_FENCE_RE,
    CONTROL_CHARS_RE,
    JSON_OBJECT_RE,
    STRING_ARRAY_RE,
    TABLE_FRAGMENT_RE,
    TABLES_KEY_RE,
)
from listing_extract.extraction.schema import RawTable

logger = logging.getLogger(__name__)

BARE_ARRAY_TABLE_NAME = "Extracted Table"


# ─── Cleanup & Conversion Helpers ────────────────────────────────────────────


def strip_code_fences(text: str) -> str:
    """Remove Markdown code-fence markers (```json, ```) anywhere in *text*."""
    return CODE_FENCE_RE.sub("", text)


def strip_control_chars(text: str) -> str:
    """Remove C0/C1 control characters (U+0000-U+001F, U+007F-U+009F)."""
    return CONTROL_CHARS_RE.sub("", text)


def _clean(text: str) -> str:
    return strip_control_chars(strip_code_fences(text)).strip()


def _to_cell(value: Any) -> str:
    """Coerce a JSON value to a cell string (null -> "", numbers/booleans by their JSON spelling)."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def _to_row(row: Any, headers: list[str]) -> list[str] | None:
    """Convert one JSON row (array, or object keyed by header) into a list of cell strings."""
    if isinstance(row, list):
        return [_to_cell(cell) for cell in row]
    if isinstance(row, dict):
        return [_to_cell(row.get(header)) for header in headers]
    return None


def _table_from_obj(obj: Any, default_name: str | None = None) -> RawTable | None:
    """Build a RawTable from a parsed ``{"name", "headers", "data"}`` object, or None if malformed."""
    if not isinstance(obj, dict) or not isinstance(obj.get("headers"), list):
        return None
    data = obj.get("data", [])
    if not isinstance(data, list):
        return None

    headers = [_to_cell(header) for header in obj["headers"]]
    if not headers:
        return None
    rows = [converted for converted in (_to_row(row, headers) for row in data) if converted is not None]
    name = obj.get("name")
    return RawTable(name=_to_cell(name) if name is not None else default_name, headers=headers, data=rows)


def _tables_from_list(items: Any) -> list[RawTable] | None:
    """Convert a parsed ``tables`` array, skipping malformed entries.  None if nothing survives."""
    if not isinstance(items, list):
        return None
    tables = [table for table in (_table_from_obj(item) for item in items) if table is not None]
    return tables or None


def find_matching_bracket(text: str, open_idx: int) -> int | None:
    """Return the index of the "]" closing the "[" at *open_idx*, ignoring brackets inside strings."""
    depth = 0
    in_string = False
    escaped = False
    for i in range(open_idx, len(text)):
        char = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return i
    return None


# ─── Method 1: Direct Parse ──────────────────────────────────────────────────


def parse_direct(text: str) -> list[RawTable] | None:
    """Parse the outermost {...} span; accept a "tables" array or a bare headers+data object."""
    match = JSON_OBJECT_RE.search(_clean(text))
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except (ValueError, RecursionError):
        return None

    if not isinstance(parsed, dict):
        return None
    if isinstance(parsed.get("tables"), list):
        return _tables_from_list(parsed["tables"])
    # Single-table schema: {"name": ..., "headers": [...], "data": [[...]]}
    if isinstance(parsed.get("headers"), list) and isinstance(parsed.get("data"), list):
        table = _table_from_obj(parsed)
        return [table] if table is not None else None
    return None


# ─── Method 2: Tables-Array Isolation ────────────────────────────────────────


def parse_tables_array(text: str) -> list[RawTable] | None:
    """Parse just the array following "tables":, tolerating a broken object around it."""
    stripped = strip_code_fences(text)
    key = TABLES_KEY_RE.search(stripped)
    if not key:
        return None
    open_idx = key.end() - 1
    close_idx = find_matching_bracket(stripped, open_idx)
    if close_idx is None:
        return None
    try:
        items = json.loads(strip_control_chars(stripped[open_idx : close_idx + 1]))
    except (ValueError, RecursionError):
        return None
    return _tables_from_list(items)


# ─── Method 3: Per-Table Fragments ───────────────────────────────────────────


def parse_table_fragments(text: str) -> list[RawTable] | None:
    """Regex out each {"name", "headers", "data"} object; each only needs to be locally valid."""
    tables: list[RawTable] = []
    for match in TABLE_FRAGMENT_RE.finditer(_clean(text)):
        try:
            fragment = {
                "name": json.loads(match.group("name")),
                "headers": json.loads(match.group("headers")),
                "data": json.loads(match.group("data")),
            }
        except (ValueError, RecursionError):
            logger.debug("Skipping malformed table fragment at offset %d", match.start())
            continue
        table = _table_from_obj(fragment)
        if table is not None:
            tables.append(table)
    return tables or None


# ─── Method 4: Bare String Arrays ────────────────────────────────────────────


def parse_bare_arrays(text: str) -> list[RawTable] | None:
    """Pair every array of quoted strings: the first becomes headers, the rest become rows."""
    arrays: list[list[str]] = []
    for match in STRING_ARRAY_RE.finditer(_clean(text)):
        try:
            arrays.append([_to_cell(cell) for cell in json.loads(match.group(0))])
        except (ValueError, RecursionError):
            continue

    if len(arrays) < 2:
        return None
    return [RawTable(name=BARE_ARRAY_TABLE_NAME, headers=arrays[0], data=arrays[1:])]


# ─── Strategy Entry Point ────────────────────────────────────────────────────

JSON_METHODS: tuple[tuple[str, Callable[[str], list[RawTable] | None]], ...] = (
    ("direct", parse_direct),
    ("tables-array", parse_tables_array),
    ("fragments", parse_table_fragments),
    ("bare-arrays", parse_bare_arrays),
)


def extract_json_tables(text: str) -> list[RawTable] | None:
    """Try the four JSON recovery methods in order and return the first non-empty result."""
    for method_name, method in JSON_METHODS:
        tables = method(text)
        if tables:
            logger.debug("JSON method '%s' recovered %d table(s)", method_name, len(tables))
            return tables
        logger.debug("JSON method '%s' found nothing", method_name)
    return None
