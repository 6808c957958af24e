"""Tests for upload validation and workbook parsing."""

import io

import pytest
from openpyxl import Workbook
from openpyxl.chart import BarChart, Reference

from backend import config
from backend.exceptions import FileTooLarge, ParseError, RejectedFileType
from backend.services import file_loader
from backend.services.file_loader import detect_file_type, load_upload, parse_workbook, validate_upload


@pytest.mark.parametrize(
    "file_name,expected",
    [("report.xlsx", "xlsx"), ("Q3-Report.XLSX", "xlsx"), ("legacy.Xls", "xls"), ("data.csv", "csv")],
)
def test_detect_file_type_by_extension(file_name, expected):
    assert detect_file_type(file_name) == expected


def test_detect_file_type_falls_back_to_mime_without_extension():
    assert detect_file_type("export", "text/csv") == "csv"
    assert detect_file_type("export", "application/vnd.ms-excel") == "xls"


@pytest.mark.parametrize("file_name", ["notes.txt", "image.png", "archive.xlsx.zip", "export"])
def test_detect_file_type_rejects_unsupported(file_name):
    with pytest.raises(RejectedFileType) as exc_info:
        detect_file_type(file_name, "application/octet-stream")
    assert exc_info.value.code == "UNSUPPORTED_FILE_TYPE"
    assert exc_info.value.to_detail().message == exc_info.value.message


def test_known_mime_does_not_rescue_wrong_extension():
    with pytest.raises(RejectedFileType):
        detect_file_type("notes.txt", "text/csv")


def test_validate_upload_rejects_large_files():
    with pytest.raises(FileTooLarge) as exc_info:
        validate_upload("big.xlsx", config.MAX_FILE_SIZE_BYTES + 1)
    detail = exc_info.value.to_detail()
    assert detail.code == "FILE_TOO_LARGE"
    assert detail.max_file_size_mb == config.MAX_FILE_SIZE_MB


def test_rejected_upload_never_parses(monkeypatch):
    calls = []
    monkeypatch.setattr(file_loader, "parse_workbook", lambda *args, **kwargs: calls.append(args))

    with pytest.raises(RejectedFileType):
        load_upload("malware.exe", b"MZ\x90\x00")
    assert calls == []


def test_parse_xlsx_lists_sheets_and_projects_first_row_as_headers(xlsx_bytes):
    workbook = load_upload("orders.xlsx", xlsx_bytes)
    assert workbook.sheet_names == ["Orders", "Notes"]

    headers, rows = workbook.read_sheet("Orders")
    assert headers == ["Order", "Customer", "Amount", "Paid"]
    assert rows == [
        [1001, "Acme", 250.5, True],
        [1002, "Globex", 99, False],
        [1003, "Initech"],
    ]


def test_to_dataset_defaults_to_first_sheet(xlsx_bytes):
    dataset = load_upload("orders.xlsx", xlsx_bytes).to_dataset()
    assert dataset.name == "orders.xlsx"
    assert dataset.selected_sheet == "Orders"
    assert dataset.sheet_names == ["Orders", "Notes"]
    assert dataset.row_count == 3


def test_reselecting_sheet_rederives_dataset(xlsx_bytes):
    workbook = load_upload("orders.xlsx", xlsx_bytes)
    orders = workbook.to_dataset("Orders")
    notes = workbook.to_dataset("Notes")

    assert notes.headers == ["Note"]
    assert notes.rows == [["Q3 numbers are provisional"]]
    assert notes.row_count == 1
    # The earlier dataset is a separate value and is left untouched
    assert orders.row_count == 3
    assert workbook.to_dataset("Orders") == orders


def test_unknown_sheet_raises_key_error(xlsx_bytes):
    workbook = load_upload("orders.xlsx", xlsx_bytes)
    with pytest.raises(KeyError):
        workbook.read_sheet("Missing")


def test_mislabelled_workbook_is_parsed_by_content(xlsx_bytes):
    workbook = parse_workbook(xlsx_bytes, "xls", name="really-xlsx.xls")
    assert workbook.sheet_names == ["Orders", "Notes"]


def test_parse_csv_coerces_numbers_and_skips_blank_lines(csv_bytes):
    dataset = load_upload("people.csv", csv_bytes, mime_type="text/csv").to_dataset()
    assert dataset.sheet_names == [config.CSV_SHEET_NAME]
    assert dataset.headers == ["name", "age", "salary", "department"]
    assert dataset.rows == [
        ["Alice", 30, 50000.5, "Engineering"],
        ["Bob", 25, 45000],
        ["Charlie", 35, 60000, "Engineering"],
    ]
    assert dataset.row_count == 3


def test_csv_with_byte_order_mark():
    dataset = load_upload("bom.csv", "\ufeffcity,population\nOslo,709000\n".encode("utf-8")).to_dataset()
    assert dataset.headers == ["city", "population"]


def test_empty_csv_yields_empty_dataset():
    dataset = load_upload("empty.csv", b"").to_dataset()
    assert dataset.headers == []
    assert dataset.rows == []
    assert dataset.row_count == 0


@pytest.mark.parametrize("file_name", ["broken.xlsx", "broken.xls"])
def test_garbage_workbook_raises_parse_error(file_name):
    with pytest.raises(ParseError) as exc_info:
        load_upload(file_name, b"this is not a spreadsheet")
    assert exc_info.value.code == "PARSE_ERROR"


def test_corrupt_zip_container_raises_parse_error():
    with pytest.raises(ParseError) as exc_info:
        load_upload("corrupt.xlsx", b"PK\x03\x04" + b"\x00" * 64)
    assert exc_info.value.__cause__ is not None


def test_corrupt_ole_container_raises_parse_error():
    with pytest.raises(ParseError):
        load_upload("corrupt.xls", b"\xd0\xcf\x11\xe0" + b"\x00" * 64)


def test_chart_sheets_are_skipped():
    workbook = Workbook()
    data = workbook.active
    data.title = "Data"
    data.append(["Month", "Sales"])
    data.append(["Jan", 10])
    data.append(["Feb", 12])

    chart = BarChart()
    chart.add_data(Reference(data, min_col=2, min_row=1, max_row=3), titles_from_data=True)
    chartsheet = workbook.create_chartsheet("Chart")
    chartsheet.add_chart(chart)

    buffer = io.BytesIO()
    workbook.save(buffer)

    parsed = load_upload("withchart.xlsx", buffer.getvalue())
    assert parsed.sheet_names == ["Data"]
    assert parsed.to_dataset().rows == [["Jan", 10], ["Feb", 12]]


def test_csv_headers_keep_their_text():
    dataset = load_upload("codes.csv", b"007,1e3,1_000, name \n1,2,3,x\n").to_dataset()
    assert dataset.headers == ["007", "1e3", "1_000", "name"]
    assert dataset.rows == [[1, 2, 3, "x"]]


def test_csv_underscore_numerals_stay_text():
    dataset = load_upload("ids.csv", b"id,code\n1_000,2_5\n").to_dataset()
    assert dataset.rows == [["1_000", "2_5"]]
