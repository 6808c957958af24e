"""Upload errors surfaced to the user as inline messages."""

from typing import Optional

from backend import config
from backend.models.schemas import ErrorDetail


class UploadError(Exception):
    """Base class for errors raised while accepting an uploaded file."""

    code: str = "UPLOAD_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_detail(self) -> ErrorDetail:
        return ErrorDetail(code=self.code, message=self.message)


class RejectedFileType(UploadError):
    """File extension / MIME type is not one of the accepted spreadsheet kinds."""

    code = "UNSUPPORTED_FILE_TYPE"

    def __init__(self, file_name: str, message: Optional[str] = None):
        self.file_name = file_name
        super().__init__(message or "Only Excel files (.xlsx, .xls) and CSV files are allowed!")


class FileTooLarge(UploadError):
    """File exceeds the configured size limit."""

    code = "FILE_TOO_LARGE"

    def __init__(self, file_name: str, max_file_size_mb: int = config.MAX_FILE_SIZE_MB):
        self.file_name = file_name
        self.max_file_size_mb = max_file_size_mb
        super().__init__(
            f"File exceeds the size limit (max {max_file_size_mb}MB). Please split or compress it and try again."
        )

    def to_detail(self) -> ErrorDetail:
        return ErrorDetail(code=self.code, message=self.message, max_file_size_mb=self.max_file_size_mb)


class ParseError(UploadError):
    """Byte stream is not a readable spreadsheet container."""

    code = "PARSE_ERROR"

    def __init__(self, file_name: str = "", message: Optional[str] = None):
        self.file_name = file_name
        super().__init__(message or "Failed to parse the file. Please ensure it's a valid Excel file.")
