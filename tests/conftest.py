import dataclasses
import io
from collections.abc import Callable
from datetime import datetime, timezone
from decimal import Decimal

import openpyxl
import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from ledgerlens.database.exceptions import DocumentNotFoundError, InvalidStatusTransitionError
from ledgerlens.database.repositories.documents_repository import DocumentsRepository
from ledgerlens.records.models import Document, DocumentStatus, DocumentWithRecords, Record

FIXED_NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


def make_record(
    amount: str | int | Decimal,
    category: str = "Revenue",
    period: str = "2024-Q1",
    account_name: str = "Sales",
    **kwargs: object,
) -> Record:
    return Record(
        account_name=account_name,
        period=period,
        amount=Decimal(str(amount)),
        category=category,
        recorded_at=FIXED_NOW,
        **kwargs,  # type: ignore[arg-type]
    )


class InMemoryDocumentsRepository(DocumentsRepository):
    """Dict-backed stand-in for the PostgreSQL repository."""

    def __init__(self) -> None:
        self.documents: dict[int, Document] = {}
        self.records: list[Record] = []
        self.status_history: list[tuple[int, DocumentStatus]] = []

    def create_document(self, document: Document) -> int:
        document_id = len(self.documents) + 1
        self.documents[document_id] = dataclasses.replace(document, id=document_id)
        return document_id

    def bulk_insert_records(self, records: list[Record]) -> None:
        start = len(self.records)
        self.records.extend(
            dataclasses.replace(record, id=start + index + 1)
            for index, record in enumerate(records)
        )

    def update_document_status(self, document_id: int, status: DocumentStatus) -> None:
        document = self.documents.get(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        if not document.status.can_transition_to(status):
            raise InvalidStatusTransitionError(
                f"Document {document_id} cannot move from {document.status} to {status}"
            )
        self.documents[document_id] = dataclasses.replace(document, status=status)
        self.status_history.append((document_id, status))

    def get_document_with_records(self, document_id: int) -> DocumentWithRecords:
        document = self.documents.get(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return DocumentWithRecords(
            document=document,
            records=[r for r in self.records if r.document_id == document_id],
        )

    def get_records_by_period(self, period: str) -> list[Record]:
        return [r for r in self.records if r.period == period]

    def get_records_by_category(self, category: str) -> list[Record]:
        matches = [r for r in self.records if r.has_category(category)]
        return sorted(matches, key=lambda r: (r.period, r.id or 0))

    def get_all_records(self) -> list[Record]:
        return sorted(self.records, key=lambda r: (r.period, r.id or 0))


@pytest.fixture()
def memory_repo() -> InMemoryDocumentsRepository:
    return InMemoryDocumentsRepository()


def _pdf_with_lines(pages: list[list[str]]) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for lines in pages:
        y = 720
        for line in lines:
            c.drawString(72, y, line)
            y -= 20
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def pdf_factory() -> Callable[[list[list[str]]], bytes]:
    """Build a PDF whose pages carry the given text lines."""
    return _pdf_with_lines


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    return _pdf_with_lines([["Quarterly statement"]])


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    return _pdf_with_lines([["Page one content"], ["Page two content"]])


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """A valid PDF with a blank page and no text layer."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def statement_pdf_bytes() -> bytes:
    """Text-layer PDF with three recognizable amount lines."""
    return _pdf_with_lines(
        [
            [
                "Income statement",
                "Sales Revenue $150,000.00",
                "Consulting Income 42,500",
                "Office Rent $12,000",
            ]
        ]
    )


def _xlsx_with_rows(rows: list[list[object]]) -> bytes:
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    buf = io.BytesIO()
    workbook.save(buf)
    return buf.getvalue()


@pytest.fixture()
def xlsx_factory() -> Callable[[list[list[object]]], bytes]:
    """Build an .xlsx workbook whose first sheet holds the given rows."""
    return _xlsx_with_rows


@pytest.fixture()
def sample_csv_bytes() -> bytes:
    return (
        "Account Name,Period,Amount,Category\n"
        "Sales,2024-Q1,150000,Revenue\n"
        "Rent,2024-Q1,12000,Expense\n"
    ).encode("utf-8")
