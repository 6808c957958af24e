"""Pydantic models for datasets, chat messages and sessions."""

from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


class ErrorDetail(BaseModel):
    """Error detail structure."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    max_file_size_mb: Optional[int] = Field(None, description="Max file size in MB (if applicable)")


class UploadedDataset(BaseModel):
    """Normalized tabular projection of one sheet of an uploaded spreadsheet."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Display name of the source file")
    sheet_names: List[str] = Field(..., description="Ordered sheet names in the workbook")
    selected_sheet: str = Field(..., description="Sheet the dataset was derived from")
    headers: List[str] = Field(default_factory=list, description="Column labels from the first row")
    rows: List[List[Any]] = Field(default_factory=list, description="Data rows, header row excluded")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def row_count(self) -> int:
        return len(self.rows)

    @model_validator(mode="after")
    def _check_selected_sheet(self) -> "UploadedDataset":
        if not self.sheet_names:
            raise ValueError("A dataset needs at least one sheet")
        if self.selected_sheet not in self.sheet_names:
            raise ValueError(f"Sheet '{self.selected_sheet}' is not one of {self.sheet_names}")
        return self


class TablePayload(BaseModel):
    """Inline table attached to an assistant message."""

    model_config = ConfigDict(frozen=True)

    headers: List[str] = Field(..., description="Column labels")
    rows: List[List[Any]] = Field(..., description="Row values (2D array)")


class ChatMessage(BaseModel):
    """A single message in a session log."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Message identifier, unique within its session")
    role: Literal["user", "assistant"] = Field(..., description="Message author")
    content: str = Field(..., description="Display text (may contain **emphasis** markers)")
    timestamp: datetime = Field(default_factory=datetime.now, description="Creation time")
    table: Optional[TablePayload] = Field(None, description="Tabular evidence for assistant replies")


class ChatSession(BaseModel):
    """An independent conversation thread with at most one bound dataset."""

    id: str = Field(..., description="Session identifier")
    name: str = Field(..., description="Display name")
    file: Optional[UploadedDataset] = Field(None, description="Dataset bound to this session")
    messages: List[ChatMessage] = Field(default_factory=list, description="Append-only message log")
    created_at: datetime = Field(default_factory=datetime.now, description="Creation time")

    @property
    def file_name(self) -> Optional[str]:
        return self.file.name if self.file is not None else None


class SessionSummary(BaseModel):
    """Lightweight projection of a session for the session list."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    file_name: Optional[str] = None
    created_at: datetime


class DispatchResult(BaseModel):
    """Canned answer produced for a question."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(..., description="Answer text")
    table: Optional[TablePayload] = Field(None, description="Optional inline table")
    intent: str = Field(..., description="Name of the rule that produced the answer")
