"""Pydantic models for extracted tables and the caller-facing extraction result.

A RawTable is whatever a strategy managed to recover; its rows may be ragged.
A Table is a RawTable after normalization, and its model_validator guarantees
that every data row has exactly len(headers) cells.
"""

from typing import Literal

from pydantic import BaseModel, Field, model_validator

ExtractionStatus = Literal["success", "partial", "fallback", "error"]


class RawTable(BaseModel):
    """A table as recovered by one extraction strategy, before rectangularization."""

    name: str | None = None
    headers: list[str] = Field(default_factory=list)
    data: list[list[str]] = Field(default_factory=list)


class Table(RawTable):
    """A normalized table with a process-unique id.

    Tables are created fresh per extraction call and handed to the caller;
    strategies never reuse a Table produced earlier in the chain.
    """

    id: str

    @model_validator(mode="after")
    def validate_row_widths(self) -> "Table":
        """Ensure every data row has exactly len(headers) cells."""
        n_cols = len(self.headers)
        for i, row in enumerate(self.data):
            if len(row) != n_cols:
                raise ValueError(f"Row {i} has {len(row)} cells, expected {n_cols} (matching headers)")
        return self


class DebugInfo(BaseModel):
    """Observability trace attached to every extraction attempt."""

    request_summary: str = ""
    raw_response: str = ""
    status: ExtractionStatus
    error_message: str | None = None
    is_connectivity_error: bool = False
    suggestion: str | None = None
    # Name of the strategy (or "fallback") that produced the tables
    strategy: str | None = None


class ExtractionResult(BaseModel):
    """Caller-facing result.  Returned, never raised, even on total failure."""

    success: bool
    tables: list[Table] = Field(default_factory=list)
    debug: DebugInfo

    @model_validator(mode="after")
    def validate_failure_has_no_tables(self) -> "ExtractionResult":
        """A failed extraction never carries tables."""
        if not self.success and self.tables:
            raise ValueError("tables must be empty when success is False")
        return self
