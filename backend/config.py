"""Configuration constants for the spreadsheet chat application."""

import os
from pathlib import Path
from typing import Dict, Final

from dotenv import load_dotenv

# Load project-level .env if it exists
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

# Allowed file types
ALLOWED_FILE_TYPES: Final[set[str]] = {"xlsx", "xls", "csv"}

# MIME type -> file type (two workbook families plus comma-separated text)
ACCEPTED_MIME_TYPES: Final[Dict[str, str]] = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "xlsx",
    "application/vnd.ms-excel": "xls",
    "text/csv": "csv",
}

# File size limits
MAX_FILE_SIZE_MB: Final[int] = int(os.getenv("MAX_FILE_SIZE_MB", "50"))
MAX_FILE_SIZE_BYTES: Final[int] = MAX_FILE_SIZE_MB * 1024 * 1024

# Simulated response latency, [min, max) in milliseconds
RESPONSE_DELAY_MIN_MS: Final[int] = int(os.getenv("RESPONSE_DELAY_MIN_MS", "1200"))
RESPONSE_DELAY_MAX_MS: Final[int] = int(os.getenv("RESPONSE_DELAY_MAX_MS", "2000"))

# Answer shaping
PREVIEW_ROW_LIMIT: Final[int] = 5
SUMMARY_HEADER_LIMIT: Final[int] = 4
DEFAULT_HEADER_LIMIT: Final[int] = 5

# CSV input is exposed as a single sheet with this name
CSV_SHEET_NAME: Final[str] = "Sheet1"

# Session defaults
DEFAULT_SESSION_ID: Final[str] = "default"
WELCOME_SESSION_NAME: Final[str] = "Welcome Chat"
NEW_SESSION_NAME: Final[str] = "New Chat"

# Logging
LOG_LEVEL: Final[str] = os.getenv("LOG_LEVEL", "INFO")
