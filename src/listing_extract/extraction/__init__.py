"""Table recovery from raw model text.

Submodules:
  patterns        -- compiled regex patterns and constant tuples
  schema          -- RawTable / Table / ExtractionResult Pydantic models
  json_strategy   -- four-step JSON recovery (direct, tables array, per-table, bare arrays)
  protocol        -- TABLE: / HEADERS: / ROW: line protocol parser and serializer
  heuristic       -- keyword + delimiter scan over unstructured prose
  normalize       -- rectangularization and the terminal single-cell fallback table
  chain           -- ordered strategy chain, first non-empty result wins
  pipeline        -- raw text -> ExtractionResult entry point
"""
