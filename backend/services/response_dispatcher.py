"""Keyword-matched canned answers about an uploaded dataset."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from backend import config
from backend.models.schemas import DispatchResult, TablePayload, UploadedDataset

logger = logging.getLogger(__name__)

EXAMPLE_QUESTIONS: Tuple[str, ...] = (
    "Show me a summary",
    "Preview the first rows",
    "What columns are available?",
    "How many rows are there?",
)

NO_FILE_MESSAGE = (
    "Please upload an Excel file first so I can analyze your data. "
    "Click the upload button in the sidebar to get started!"
)


@dataclass(frozen=True)
class ResponseRule:
    """A keyword set and the answer it produces; first matching rule wins."""

    name: str
    keywords: Tuple[str, ...]
    handler: Callable[[UploadedDataset], DispatchResult]

    def matches(self, question_lower: str) -> bool:
        return any(keyword in question_lower for keyword in self.keywords)


def _summary(dataset: UploadedDataset) -> DispatchResult:
    content = (
        f"Here's a summary of your data from **{dataset.name}** (Sheet: {dataset.selected_sheet}):\n\n"
        f"📊 **Dataset Overview**\n"
        f"• Total Rows: {dataset.row_count}\n"
        f"• Total Columns: {len(dataset.headers)}\n"
        f"• Columns: {', '.join(dataset.headers)}\n\n"
        "You can ask me about any column or request a preview of the rows."
    )
    return DispatchResult(content=content, intent="summary")


def _columns(dataset: UploadedDataset) -> DispatchResult:
    listing = "\n".join(f"{i}. **{header}**" for i, header in enumerate(dataset.headers, 1))
    content = (
        f"Your dataset contains **{len(dataset.headers)} columns**:\n\n{listing}\n\n"
        "Would you like me to look at any specific column?"
    )
    return DispatchResult(content=content, intent="columns")


def _row_count(dataset: UploadedDataset) -> DispatchResult:
    content = (
        f"Your dataset contains **{dataset.row_count} rows** of data across "
        f"**{len(dataset.headers)} columns** in the \"{dataset.selected_sheet}\" sheet."
    )
    return DispatchResult(content=content, intent="row_count")


def _preview(dataset: UploadedDataset) -> DispatchResult:
    rows = dataset.rows[: config.PREVIEW_ROW_LIMIT]
    return DispatchResult(
        content=f"Here's a preview of the first {len(rows)} rows from your data:",
        table=TablePayload(headers=dataset.headers, rows=rows),
        intent="preview",
    )


def _last_rows(dataset: UploadedDataset) -> DispatchResult:
    # Source order is kept, not reversed
    rows = dataset.rows[-config.PREVIEW_ROW_LIMIT:] if dataset.rows else []
    return DispatchResult(
        content=f"Here are the last {len(rows)} rows from your data:",
        table=TablePayload(headers=dataset.headers, rows=rows),
        intent="last_rows",
    )


def _default(dataset: UploadedDataset) -> DispatchResult:
    shown = ", ".join(dataset.headers[: config.DEFAULT_HEADER_LIMIT])
    remaining = len(dataset.headers) - config.DEFAULT_HEADER_LIMIT
    more = f" and {remaining} more" if remaining > 0 else ""
    suggestions = "\n".join(f"• \"{question}\"" for question in EXAMPLE_QUESTIONS)
    content = (
        f"Great question about your data! Based on the \"{dataset.selected_sheet}\" sheet in "
        f"**{dataset.name}**, here's what I found:\n\n"
        f"📋 Your dataset has **{dataset.row_count} records** across **{len(dataset.headers)} columns**: "
        f"{shown}{more}.\n\n"
        f"Try asking me to:\n{suggestions}"
    )
    return DispatchResult(content=content, intent="default")


RESPONSE_RULES: Tuple[ResponseRule, ...] = (
    ResponseRule("summary", ("summary", "overview", "describe"), _summary),
    ResponseRule("columns", ("column", "header", "field"), _columns),
    ResponseRule("row_count", ("row", "count", "how many"), _row_count),
    ResponseRule("preview", ("show", "preview", "sample", "first"), _preview),
    ResponseRule("last_rows", ("last",), _last_rows),
)


def respond(question: str, dataset: Optional[UploadedDataset]) -> DispatchResult:
    """
    Produce the canned answer for a question.

    Pure function: the same question and dataset always give the same result.

    Args:
        question: User question text
        dataset: Dataset bound to the session, or None

    Returns:
        DispatchResult with content, optional table and the rule name
    """
    if dataset is None:
        return DispatchResult(content=NO_FILE_MESSAGE, intent="no_file")

    question_lower = question.lower()
    for rule in RESPONSE_RULES:
        if rule.matches(question_lower):
            logger.debug(f"Question matched rule '{rule.name}'")
            return rule.handler(dataset)

    logger.debug("Question matched no rule, using default answer")
    return _default(dataset)
