"""Prompt dialects for the vision model.

Both dialects are parsed by the same strategy chain, so switching between
them never requires a parser change.
"""

JSON_PROMPT = """\
You are an expert at extracting tables from real estate inventory documents
(PDFs or images) without missing any detail.

Extract EVERY table in the document, keeping each table's title, headers and
rows exactly as they appear.

Return ONLY a JSON object with this exact structure and nothing else:

{"tables": [{"name": "Table title", "headers": ["Header1", "Header2"], "data": [["Value1", "Value2"]]}]}

Rules:
  1. Do NOT wrap the JSON in markdown code fences.
  2. Every row in data must have exactly as many values as headers.
  3. Use an empty string for missing or unreadable values.
  4. If a table has no title, name it "Unnamed Table 1", "Unnamed Table 2", ... in order.
  5. Do NOT invent, interpret or reorder anything.
"""

PIPE_PROMPT = """\
You are an expert at extracting tables from real estate inventory documents
(PDFs or images) without missing any detail.

Extract EVERY table in the document, keeping each table's title, headers and
rows exactly as they appear.  Do not answer in JSON.  Use this text format:

TABLE: Table title
HEADERS: Header1 | Header2 | ... | HeaderN
ROW: Value1 | Value2 | ... | ValueN
ROW: Value1 | Value2 | ... | ValueN

Rules:
  1. Start each table with "TABLE:" followed by its title.  If a table has no
     title, use "Unnamed Table 1", "Unnamed Table 2", ... in order.
  2. Start the header line with "HEADERS:" and each data row with "ROW:".
  3. Separate values with the pipe character (|).  Leave a value empty
     (||) when it is missing or unreadable.
  4. Keep the exact header titles and column order of the original table.
  5. Include every table, every column and every row.  Do NOT invent,
     interpret or reorder anything.
"""

PROMPTS = {
    "json": JSON_PROMPT,
    "pipe": PIPE_PROMPT,
}


def get_prompt(dialect: str) -> str:
    """Return the prompt text for *dialect* ('json' or 'pipe')."""
    try:
        return PROMPTS[dialect]
    except KeyError:
        raise ValueError(f"Unknown prompt dialect '{dialect}'. Supported: {sorted(PROMPTS)}") from None
