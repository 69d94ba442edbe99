from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import StrEnum


class FileFormat(StrEnum):
    SPREADSHEET = "spreadsheet"
    DELIMITED_TEXT = "delimited_text"
    PORTABLE_DOCUMENT = "portable_document"
    UNKNOWN = "unknown"


class DocumentStatus(StrEnum):
    UPLOADED = "Uploaded"
    PROCESSING = "Processing"
    ANALYZED = "Analyzed"
    ERROR = "Error"

    def can_transition_to(self, target: "DocumentStatus") -> bool:
        return target in _NEXT_STATUSES[self]

    @property
    def is_terminal(self) -> bool:
        return not _NEXT_STATUSES[self]


_NEXT_STATUSES: dict[DocumentStatus, frozenset[DocumentStatus]] = {
    DocumentStatus.UPLOADED: frozenset({DocumentStatus.PROCESSING, DocumentStatus.ERROR}),
    DocumentStatus.PROCESSING: frozenset({DocumentStatus.ANALYZED, DocumentStatus.ERROR}),
    DocumentStatus.ANALYZED: frozenset(),
    DocumentStatus.ERROR: frozenset(),
}


class FinancialCategory(StrEnum):
    REVENUE = "Revenue"
    EXPENSE = "Expense"
    ASSET = "Asset"
    LIABILITY = "Liability"
    EQUITY = "Equity"


UNKNOWN_CATEGORY = "Unknown"
DEFAULT_CURRENCY = "USD"


@dataclass(frozen=True)
class Record:
    """One normalized ledger line extracted from a document."""

    account_name: str
    period: str
    amount: Decimal
    category: str
    recorded_at: datetime
    account_code: str | None = None
    currency: str = DEFAULT_CURRENCY
    sub_category: str | None = None
    document_id: int | None = None
    id: int | None = None

    def has_category(self, category: str) -> bool:
        return self.category.casefold() == category.casefold()


@dataclass(frozen=True)
class Document:
    """Metadata of one uploaded file."""

    file_name: str
    file_format: FileFormat
    uploaded_at: datetime
    file_size: int
    storage_path: str
    status: DocumentStatus = DocumentStatus.UPLOADED
    owner: str = "System"
    id: int | None = None


@dataclass(frozen=True)
class DocumentWithRecords:
    document: Document
    records: list[Record]


@dataclass
class ExtractionResult:
    """Outcome of a single ingest call, returned to the caller."""

    file_name: str
    success: bool = False
    document_id: int | None = None
    records_imported: int = 0
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    processing_time_ms: int = 0

    def add_error(self, message: str) -> None:
        if message and message.strip():
            self.errors.append(message)

    def add_warning(self, message: str) -> None:
        if message and message.strip():
            self.warnings.append(message)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)
