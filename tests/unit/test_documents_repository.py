from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock, patch

import psycopg
import pytest

from ledgerlens.database.exceptions import (
    DocumentNotFoundError,
    InvalidStatusTransitionError,
    RepositoryError,
)
from ledgerlens.database.repositories.documents_repository import DocumentsRepository
from ledgerlens.records.models import Document, DocumentStatus, FileFormat
from tests.conftest import make_record

UPLOADED_AT = datetime(2024, 3, 1, tzinfo=timezone.utc)


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Wire up a mock connection + cursor and return (mock_conn, mock_cursor)."""
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


def _document_row() -> dict:
    return {
        "id": 7,
        "file_name": "q1.csv",
        "file_format": "delimited_text",
        "uploaded_at": UPLOADED_AT,
        "file_size": 120,
        "storage_path": "uploads/q1.csv",
        "status": "Analyzed",
        "owner": "System",
    }


def _record_row(record_id: int = 1) -> dict:
    return {
        "id": record_id,
        "document_id": 7,
        "account_name": "Sales",
        "account_code": None,
        "period": "2024-Q1",
        "amount": Decimal("150000.00"),
        "currency": "USD",
        "category": "Revenue",
        "sub_category": None,
        "recorded_at": UPLOADED_AT,
    }


MODULE = "ledgerlens.database.repositories.documents_repository.get_connection"


class TestCreateDocument:
    @patch(MODULE)
    def test_returns_new_id_and_commits(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = (42,)
        document = Document(
            file_name="q1.csv",
            file_format=FileFormat.DELIMITED_TEXT,
            uploaded_at=UPLOADED_AT,
            file_size=120,
            storage_path="uploads/q1.csv",
            status=DocumentStatus.PROCESSING,
        )

        assert DocumentsRepository().create_document(document) == 42

        params = mock_cursor.execute.call_args.args[1]
        assert params[1] == "delimited_text"
        assert params[5] == "Processing"
        mock_conn.commit.assert_called_once()


class TestBulkInsertRecords:
    @patch(MODULE)
    def test_inserts_all_rows_in_one_batch(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        records = [make_record(10, document_id=7), make_record(20, document_id=7)]

        DocumentsRepository().bulk_insert_records(records)

        mock_cursor.executemany.assert_called_once()
        rows = mock_cursor.executemany.call_args.args[1]
        assert [row[4] for row in rows] == [Decimal(10), Decimal(20)]
        mock_conn.commit.assert_called_once()

    @patch(MODULE)
    def test_empty_list_is_a_no_op(self, mock_get_conn: MagicMock) -> None:
        DocumentsRepository().bulk_insert_records([])
        mock_get_conn.assert_not_called()

    @patch(MODULE)
    def test_rejects_unbound_records(self, mock_get_conn: MagicMock) -> None:
        with pytest.raises(ValueError, match="not bound"):
            DocumentsRepository().bulk_insert_records([make_record(10)])
        mock_get_conn.assert_not_called()


class TestUpdateDocumentStatus:
    @patch(MODULE)
    def test_updates_from_allowed_predecessors(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 1

        DocumentsRepository().update_document_status(7, DocumentStatus.ANALYZED)

        params = mock_cursor.execute.call_args.args[1]
        assert params[0] == "Analyzed"
        assert params[1] == 7
        assert params[2] == ["Processing"]
        mock_conn.commit.assert_called_once()

    @patch(MODULE)
    def test_raises_when_document_missing(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 0
        mock_cursor.fetchone.return_value = None

        with pytest.raises(DocumentNotFoundError, match="Document 9 not found"):
            DocumentsRepository().update_document_status(9, DocumentStatus.ERROR)

    @patch(MODULE)
    def test_raises_on_backward_transition(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 0
        mock_cursor.fetchone.return_value = ("Analyzed",)

        with pytest.raises(InvalidStatusTransitionError, match="from Analyzed to Error"):
            DocumentsRepository().update_document_status(7, DocumentStatus.ERROR)


class TestGetDocumentWithRecords:
    @patch(MODULE)
    def test_returns_document_and_records(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = _document_row()
        mock_cursor.fetchall.return_value = [_record_row(1), _record_row(2)]

        result = DocumentsRepository().get_document_with_records(7)

        assert result.document.id == 7
        assert result.document.file_format is FileFormat.DELIMITED_TEXT
        assert result.document.status is DocumentStatus.ANALYZED
        assert [r.id for r in result.records] == [1, 2]
        assert result.records[0].amount == Decimal("150000.00")

    @patch(MODULE)
    def test_raises_when_missing(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        with pytest.raises(DocumentNotFoundError, match="Document 999 not found"):
            DocumentsRepository().get_document_with_records(999)
        mock_cursor.fetchall.assert_not_called()


class TestRecordQueries:
    @patch(MODULE)
    def test_get_records_by_period(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchall.return_value = [_record_row()]

        records = DocumentsRepository().get_records_by_period("2024-Q1")

        assert mock_cursor.execute.call_args.args[1] == ("2024-Q1",)
        assert records[0].period == "2024-Q1"

    @patch(MODULE)
    def test_get_all_records_orders_by_period(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchall.return_value = [_record_row(1), _record_row(2)]

        records = DocumentsRepository().get_all_records()

        assert [r.id for r in records] == [1, 2]
        assert "ORDER BY period, id" in mock_cursor.execute.call_args.args[0]

    @patch(MODULE)
    def test_get_records_by_category_is_case_insensitive(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchall.return_value = []

        assert DocumentsRepository().get_records_by_category("REVENUE") == []
        assert "lower(category) = lower(%s)" in mock_cursor.execute.call_args.args[0]


class TestDriverErrors:
    @patch(MODULE)
    def test_insert_failure_is_raised_as_repository_error(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.executemany.side_effect = psycopg.OperationalError("connection lost")

        with pytest.raises(RepositoryError, match="connection lost") as exc_info:
            DocumentsRepository().bulk_insert_records([make_record(10, document_id=7)])
        assert isinstance(exc_info.value.__cause__, psycopg.OperationalError)

    @patch(MODULE)
    def test_pool_failure_is_raised_as_repository_error(self, mock_get_conn: MagicMock) -> None:
        mock_get_conn.side_effect = psycopg.OperationalError("pool timeout")

        with pytest.raises(RepositoryError, match="pool timeout"):
            DocumentsRepository().update_document_status(7, DocumentStatus.ERROR)

    @patch(MODULE)
    def test_not_found_is_not_rewrapped(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        with pytest.raises(DocumentNotFoundError):
            DocumentsRepository().get_document_with_records(1)
