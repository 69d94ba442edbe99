from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg.rows import dict_row

from ledgerlens.database.connection import get_connection
from ledgerlens.database.exceptions import (
    DocumentNotFoundError,
    InvalidStatusTransitionError,
    RepositoryError,
)
from ledgerlens.records.models import (
    Document,
    DocumentStatus,
    DocumentWithRecords,
    FileFormat,
    Record,
)

_RECORD_COLUMNS = """
    id, document_id, account_name, account_code, period, amount,
    currency, category, sub_category, recorded_at
"""


def _record_from_row(row: dict[str, Any]) -> Record:
    return Record(
        id=row["id"],
        document_id=row["document_id"],
        account_name=row["account_name"],
        account_code=row["account_code"],
        period=row["period"],
        amount=row["amount"],
        currency=row["currency"],
        category=row["category"],
        sub_category=row["sub_category"],
        recorded_at=row["recorded_at"],
    )


def _document_from_row(row: dict[str, Any]) -> Document:
    return Document(
        id=row["id"],
        file_name=row["file_name"],
        file_format=FileFormat(row["file_format"]),
        uploaded_at=row["uploaded_at"],
        file_size=row["file_size"],
        storage_path=row["storage_path"],
        status=DocumentStatus(row["status"]),
        owner=row["owner"],
    )


@contextmanager
def _connection() -> Generator[psycopg.Connection[Any], None, None]:
    """Pooled connection whose driver errors surface as RepositoryError."""
    try:
        with get_connection() as conn:
            yield conn
    except psycopg.Error as exc:
        raise RepositoryError(f"Database error: {exc}") from exc


class DocumentsRepository:
    """Database operations for the financial_documents and financial_records tables."""

    def create_document(self, document: Document) -> int:
        """Insert a document row and return its id."""
        with _connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO financial_documents
                        (file_name, file_format, uploaded_at, file_size,
                         storage_path, status, owner)
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                    RETURNING id
                    """,
                    (
                        document.file_name,
                        document.file_format.value,
                        document.uploaded_at,
                        document.file_size,
                        document.storage_path,
                        document.status.value,
                        document.owner,
                    ),
                )
                row = cur.fetchone()
            conn.commit()
        if row is None:
            raise RuntimeError(f"Insert of document {document.file_name} returned no id")
        return int(row[0])

    def bulk_insert_records(self, records: list[Record]) -> None:
        """Insert all records in one transaction.

        Raises:
            ValueError: if a record is not bound to a document.
        """
        if not records:
            return
        unbound = [record.account_name for record in records if record.document_id is None]
        if unbound:
            raise ValueError(f"{len(unbound)} records are not bound to a document")

        with _connection() as conn:
            with conn.cursor() as cur:
                cur.executemany(
                    """
                    INSERT INTO financial_records
                        (document_id, account_name, account_code, period, amount,
                         currency, category, sub_category, recorded_at)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                    """,
                    [
                        (
                            record.document_id,
                            record.account_name,
                            record.account_code,
                            record.period,
                            record.amount,
                            record.currency,
                            record.category,
                            record.sub_category,
                            record.recorded_at,
                        )
                        for record in records
                    ],
                )
            conn.commit()

    def update_document_status(self, document_id: int, status: DocumentStatus) -> None:
        """Move a document forward to ``status``.

        Raises:
            DocumentNotFoundError: if the document does not exist.
            InvalidStatusTransitionError: if the current status cannot move to ``status``.
        """
        predecessors = [
            current.value for current in DocumentStatus if current.can_transition_to(status)
        ]
        with _connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE financial_documents
                    SET status = %s
                    WHERE id = %s AND status = ANY(%s)
                    """,
                    (status.value, document_id, predecessors),
                )
                updated = cur.rowcount
                current_row = None
                if updated == 0:
                    cur.execute(
                        "SELECT status FROM financial_documents WHERE id = %s",
                        (document_id,),
                    )
                    current_row = cur.fetchone()
            conn.commit()

        if updated:
            return
        if current_row is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        raise InvalidStatusTransitionError(
            f"Document {document_id} cannot move from {current_row[0]} to {status.value}"
        )

    def get_document_with_records(self, document_id: int) -> DocumentWithRecords:
        """Load a document and all of its records.

        Raises:
            DocumentNotFoundError: if the document does not exist.
        """
        with _connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, file_name, file_format, uploaded_at, file_size,
                           storage_path, status, owner
                    FROM financial_documents
                    WHERE id = %s
                    """,
                    (document_id,),
                )
                document_row = cur.fetchone()
                record_rows: list[dict[str, Any]] = []
                if document_row is not None:
                    cur.execute(
                        f"SELECT {_RECORD_COLUMNS} FROM financial_records "
                        "WHERE document_id = %s ORDER BY id",
                        (document_id,),
                    )
                    record_rows = cur.fetchall()

        if document_row is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return DocumentWithRecords(
            document=_document_from_row(document_row),
            records=[_record_from_row(row) for row in record_rows],
        )

    def get_records_by_period(self, period: str) -> list[Record]:
        with _connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_RECORD_COLUMNS} FROM financial_records "
                    "WHERE period = %s ORDER BY id",
                    (period,),
                )
                rows = cur.fetchall()
        return [_record_from_row(row) for row in rows]

    def get_records_by_category(self, category: str) -> list[Record]:
        """Records of one category across all documents, case-insensitively."""
        with _connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_RECORD_COLUMNS} FROM financial_records "
                    "WHERE lower(category) = lower(%s) ORDER BY period, id",
                    (category,),
                )
                rows = cur.fetchall()
        return [_record_from_row(row) for row in rows]

    def get_all_records(self) -> list[Record]:
        """Every stored record, ordered by period."""
        with _connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(f"SELECT {_RECORD_COLUMNS} FROM financial_records ORDER BY period, id")
                rows = cur.fetchall()
        return [_record_from_row(row) for row in rows]
