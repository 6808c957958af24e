"""Spreadsheet ingestion: upload validation and workbook parsing."""

import csv
import io
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import xlrd
from openpyxl import load_workbook

from backend import config
from backend.exceptions import FileTooLarge, ParseError, RejectedFileType
from backend.models.schemas import UploadedDataset

logger = logging.getLogger(__name__)

# Container signatures
_XLSX_MAGIC = b"PK\x03\x04"  # ZIP archive (OOXML)
_XLS_MAGIC = b"\xd0\xcf\x11\xe0"  # OLE2 compound document

Grid = List[List[Any]]


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _normalize_row(cells: List[Any]) -> List[Any]:
    """Drop trailing empty cells; inner gaps are kept as None."""
    row = [None if _is_empty(cell) else cell for cell in cells]
    while row and row[-1] is None:
        row.pop()
    return row


def _clean_csv_cell(cell_value: str) -> Optional[Any]:
    """
    Convert a raw CSV cell to a scalar.

    Args:
        cell_value: Raw text from the CSV reader

    Returns:
        int, float, the stripped string, or None for empty cells
    """
    cell_str = cell_value.strip()
    if not cell_str:
        return None
    if "_" in cell_str:
        return cell_str

    try:
        if "." not in cell_str and "e" not in cell_str.lower():
            return int(cell_str)
        return float(cell_str)
    except ValueError:
        return cell_str


def _xls_cell_value(cell: "xlrd.sheet.Cell", datemode: int) -> Any:
    if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
        return None
    if cell.ctype == xlrd.XL_CELL_NUMBER and float(cell.value).is_integer():
        return int(cell.value)
    if cell.ctype == xlrd.XL_CELL_DATE:
        return xlrd.xldate_as_datetime(cell.value, datemode)
    if cell.ctype == xlrd.XL_CELL_BOOLEAN:
        return bool(cell.value)
    if cell.ctype == xlrd.XL_CELL_ERROR:
        return xlrd.error_text_from_code.get(cell.value)
    return cell.value


class ParsedWorkbook:
    """All sheets of one uploaded file, read once and held in memory."""

    def __init__(self, name: str, sheets: Dict[str, Grid]):
        if not sheets:
            raise ParseError(name, "The file does not contain any sheets.")
        self.name = name
        self._sheets = sheets

    @property
    def sheet_names(self) -> List[str]:
        return list(self._sheets)

    def read_sheet(self, sheet_name: str) -> Tuple[List[str], Grid]:
        """
        Project one sheet into (headers, rows).

        Args:
            sheet_name: Name of the sheet

        Returns:
            Tuple of (headers, rows); headers are the first row coerced to
            text, rows are every later row

        Raises:
            KeyError: If the sheet does not exist
        """
        grid = self._sheets[sheet_name]
        if not grid:
            return [], []

        headers = ["" if cell is None else str(cell) for cell in grid[0]]
        rows = [list(row) for row in grid[1:]]
        return headers, rows

    def to_dataset(self, sheet_name: Optional[str] = None) -> UploadedDataset:
        """Build the dataset for ``sheet_name`` (first sheet by default)."""
        selected = sheet_name if sheet_name is not None else self.sheet_names[0]
        headers, rows = self.read_sheet(selected)
        logger.info(f"Selected sheet '{selected}' of {self.name}: {len(rows)} rows, {len(headers)} columns")
        return UploadedDataset(
            name=self.name,
            sheet_names=self.sheet_names,
            selected_sheet=selected,
            headers=headers,
            rows=rows,
        )


def detect_file_type(file_name: str, mime_type: Optional[str] = None) -> str:
    """
    Detect file type from file name extension, falling back to MIME type.

    Args:
        file_name: File name
        mime_type: MIME type reported by the host, if any

    Returns:
        File type (xlsx, xls, csv)

    Raises:
        RejectedFileType: If neither the extension nor the MIME type is accepted
    """
    ext = Path(file_name).suffix.lower().lstrip(".")
    if ext in config.ALLOWED_FILE_TYPES:
        return ext
    if not ext and mime_type in config.ACCEPTED_MIME_TYPES:
        return config.ACCEPTED_MIME_TYPES[mime_type]
    raise RejectedFileType(file_name)


def validate_upload(file_name: str, size_bytes: int, mime_type: Optional[str] = None) -> str:
    """
    Validate an upload (type, size) before any parsing.

    Returns:
        Detected file type

    Raises:
        RejectedFileType: If the file type is not supported
        FileTooLarge: If the file exceeds MAX_FILE_SIZE_BYTES
    """
    try:
        file_type = detect_file_type(file_name, mime_type)
    except RejectedFileType:
        logger.warning(f"Unsupported file type: name={file_name}, mime_type={mime_type}")
        raise

    if size_bytes > config.MAX_FILE_SIZE_BYTES:
        logger.warning(
            f"File too large: {file_name}, size={size_bytes / (1024 * 1024):.2f}MB, "
            f"limit={config.MAX_FILE_SIZE_MB}MB"
        )
        raise FileTooLarge(file_name)

    return file_type


def load_xlsx_sheets(raw_bytes: bytes) -> Dict[str, Grid]:
    """Read every sheet of an OOXML workbook."""
    workbook = load_workbook(io.BytesIO(raw_bytes), read_only=True, data_only=True)
    try:
        sheets: Dict[str, Grid] = {}
        # Chart sheets hold no cells and are not listed in worksheets
        for worksheet in workbook.worksheets:
            sheet_name = worksheet.title
            rows: Grid = []
            for row in worksheet.iter_rows(values_only=True):
                normalized = _normalize_row(list(row))
                if normalized:
                    rows.append(normalized)
            logger.debug(f"Loaded {len(rows)} rows from sheet: {sheet_name}")
            sheets[sheet_name] = rows
        return sheets
    finally:
        workbook.close()


def load_xls_sheets(raw_bytes: bytes) -> Dict[str, Grid]:
    """Read every sheet of a legacy BIFF workbook."""
    workbook = xlrd.open_workbook(file_contents=raw_bytes)
    sheets: Dict[str, Grid] = {}
    for sheet in workbook.sheets():
        rows: Grid = []
        for row_index in range(sheet.nrows):
            cells = [_xls_cell_value(cell, workbook.datemode) for cell in sheet.row(row_index)]
            normalized = _normalize_row(cells)
            if normalized:
                rows.append(normalized)
        logger.debug(f"Loaded {len(rows)} rows from sheet: {sheet.name}")
        sheets[sheet.name] = rows
    return sheets


def load_csv_sheets(raw_bytes: bytes) -> Dict[str, Grid]:
    """Read comma-separated text as a single sheet."""
    text = raw_bytes.decode("utf-8-sig", errors="replace")
    rows: Grid = []
    for row in csv.reader(io.StringIO(text)):
        # Header labels stay as text; only data rows are coerced
        if rows:
            normalized = _normalize_row([_clean_csv_cell(cell) for cell in row])
        else:
            normalized = _normalize_row([cell.strip() for cell in row])
        if normalized:
            rows.append(normalized)
    logger.debug(f"Loaded {len(rows)} rows from CSV")
    return {config.CSV_SHEET_NAME: rows}


def parse_workbook(raw_bytes: bytes, file_type: str, name: str = "") -> ParsedWorkbook:
    """
    Parse raw bytes into a ParsedWorkbook.

    The reader is chosen by container signature so a mislabelled workbook
    still parses; plain text is only accepted for csv uploads.

    Args:
        raw_bytes: File content
        file_type: Detected file type (xlsx, xls, csv)
        name: Display name of the file

    Returns:
        ParsedWorkbook with every sheet loaded

    Raises:
        ParseError: If the bytes are not a readable spreadsheet
    """
    logger.info(f"Parsing file: name={name}, type={file_type}, size={len(raw_bytes)} bytes")

    if raw_bytes.startswith(_XLSX_MAGIC):
        reader = load_xlsx_sheets
    elif raw_bytes.startswith(_XLS_MAGIC):
        reader = load_xls_sheets
    elif file_type == "csv":
        reader = load_csv_sheets
    else:
        logger.warning(f"Unrecognized spreadsheet container: {name}")
        raise ParseError(name)

    try:
        sheets = reader(raw_bytes)
    except Exception as e:
        logger.exception(f"Error parsing file: {name}")
        raise ParseError(name) from e

    workbook = ParsedWorkbook(name, sheets)
    logger.info(f"Parsed {name}: sheets={workbook.sheet_names}")
    return workbook


def load_upload(file_name: str, raw_bytes: bytes, mime_type: Optional[str] = None) -> ParsedWorkbook:
    """
    Validate and parse an uploaded file.

    Raises:
        RejectedFileType: Unsupported type; parsing is never attempted
        FileTooLarge: File exceeds the size limit; parsing is never attempted
        ParseError: Content is not a readable spreadsheet
    """
    file_type = validate_upload(file_name, len(raw_bytes), mime_type)
    return parse_workbook(raw_bytes, file_type, name=file_name)
