"""Shared fixtures for the backend tests."""

import io
import random
from typing import Any, List, Optional

import pytest
from openpyxl import Workbook

from backend.models.schemas import UploadedDataset
from backend.services.session_store import SessionStore


def make_dataset(
    n_rows: int,
    headers: Optional[List[str]] = None,
    name: str = "sales.xlsx",
    sheet: str = "Sheet1",
) -> UploadedDataset:
    headers = headers if headers is not None else ["Region", "Product", "Units", "Revenue"]
    rows: List[List[Any]] = [[f"R{i}", f"P{i}", i, i * 10.5] for i in range(1, n_rows + 1)]
    return UploadedDataset(name=name, sheet_names=[sheet], selected_sheet=sheet, headers=headers, rows=rows)


@pytest.fixture
def dataset_12() -> UploadedDataset:
    return make_dataset(12)


@pytest.fixture
def dataset_3() -> UploadedDataset:
    return make_dataset(3)


@pytest.fixture
def store() -> SessionStore:
    """Store with a short, seeded delay so async scenarios finish quickly."""
    return SessionStore(delay_range_ms=(5, 10), rng=random.Random(42))


@pytest.fixture
def xlsx_bytes() -> bytes:
    """Two-sheet workbook: Orders (3 data rows, one short) and Notes."""
    workbook = Workbook()
    orders = workbook.active
    orders.title = "Orders"
    orders.append(["Order", "Customer", "Amount", "Paid"])
    orders.append([1001, "Acme", 250.5, True])
    orders.append([1002, "Globex", 99, False])
    orders.append([1003, "Initech"])

    notes = workbook.create_sheet("Notes")
    notes.append(["Note"])
    notes.append(["Q3 numbers are provisional"])

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def csv_bytes() -> bytes:
    return (
        "name,age,salary,department\n"
        "Alice,30,50000.5,Engineering\n"
        "Bob,25,45000,\n"
        "\n"
        "Charlie,35,60000,Engineering\n"
    ).encode("utf-8")
