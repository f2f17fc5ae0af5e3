"""Compiled regex patterns and constant tuples for table extraction.

Shared by the JSON, line-protocol, and heuristic strategies.  Model output
is noisy, so every pattern here is deliberately loose.
"""

import re

# ─── JSON Cleanup ─────────────────────────────────────────────────────────────

# Markdown code-fence markers such as "```json" or a bare "```"
CODE_FENCE_RE = re.compile(r"```[A-Za-z]*[ \t]*")

# C0 and C1 control characters; they routinely appear in model output and break json.loads
CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f-\x9f]")

# First "{" through the last "}" (greedy, spans newlines)
JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")

# The opening of a "tables" array; the matching "]" is found by bracket scanning
TABLES_KEY_RE = re.compile(r'"tables"\s*:\s*\[')


# ─── Per-Table / Bare-Array Fragments ─────────────────────────────────────────

# A JSON string literal (escapes allowed)
_JSON_STRING = r'"(?:[^"\\]|\\.)*"'

# A flat array with no nested brackets, e.g. ["Unit", "Price", 1.5]
_FLAT_ARRAY = r"\[[^\[\]]*\]"

# {"name": "...", "headers": [...], "data": [[...], [...]]}
TABLE_FRAGMENT_RE = re.compile(
    r"\{\s*\"name\"\s*:\s*(?P<name>" + _JSON_STRING + r")\s*,"
    r"\s*\"headers\"\s*:\s*(?P<headers>" + _FLAT_ARRAY + r")\s*,"
    r"\s*\"data\"\s*:\s*(?P<data>\[\s*(?:" + _FLAT_ARRAY + r"(?:\s*,\s*" + _FLAT_ARRAY + r")*)?\s*\])\s*\}"
)

# An array made only of quoted strings, e.g. ["A1", "1.0M"]
STRING_ARRAY_RE = re.compile(r"\[\s*" + _JSON_STRING + r"(?:\s*,\s*" + _JSON_STRING + r")*\s*\]")


# ─── Line Protocol ────────────────────────────────────────────────────────────

TABLE_PREFIX = "TABLE:"
HEADERS_PREFIX = "HEADERS:"
ROW_PREFIX = "ROW:"
PROTOCOL_DELIMITER = "|"


# ─── Heuristic Text Scan ──────────────────────────────────────────────────────

# Words that mark a line as a table title in free prose
TABLE_NAME_KEYWORD_RE = re.compile(r"table|inventory|properties|listings", re.IGNORECASE)

# A title line may not contain any of these (they signal data or key/value text)
TABLE_NAME_EXCLUDED_CHARS = (":", ",", "[")

# Delimiters in priority order: pipe beats tab beats comma
DELIMITERS = ("|", "\t", ",")

# Lines carrying any of these are JSON debris, never a header line
BRACKET_CHARS = ("{", "}", "[", "]")

# Only this many lines at the top of a block are searched for the header line
HEADER_SCAN_LINES = 10

# Markdown separator row such as "|---|:---:|"
MARKDOWN_SEPARATOR_RE = re.compile(r"^\|?\s*:?-{3,}:?\s*(\|\s*:?-{3,}:?\s*)*\|?$")
