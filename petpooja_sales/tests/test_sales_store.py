"""
Unit tests for the sales table store.
"""

import sqlite3
from unittest.mock import MagicMock, patch

import psycopg2
import pytest

from petpooja_sales.config import Config
from petpooja_sales.load.sales_store import (
    COLUMNS,
    count_rows,
    ensure_schema,
    insert_record,
    record_to_row,
)
from petpooja_sales.transform.normalizer import SalesRecord

BASE_SETTINGS = dict(
    app_key="key",
    app_secret="secret",
    access_token="token",
    rest_id="rest",
    from_date="2024-01-01",
    to_date="2024-01-31",
)


@pytest.fixture
def sqlite_config(tmp_path):
    return Config(db_path=str(tmp_path / "sales.db"), **BASE_SETTINGS)


@pytest.fixture
def postgres_config():
    return Config(database_url="postgresql://u:p@db/sales", **BASE_SETTINGS)


def _table_columns(db_path):
    conn = sqlite3.connect(db_path)
    try:
        return [row[1] for row in conn.execute("PRAGMA table_info(sales_data)")]
    finally:
        conn.close()


class TestSqliteStore:
    """Test schema creation and inserts against a SQLite file."""

    def test_ensure_schema_is_idempotent(self, sqlite_config):
        """Test creating the schema twice leaves exactly one table."""
        ensure_schema(sqlite_config)
        ensure_schema(sqlite_config)

        conn = sqlite3.connect(sqlite_config.db_path)
        try:
            tables = conn.execute(
                "SELECT name FROM sqlite_master "
                "WHERE type = 'table' AND name = 'sales_data'"
            ).fetchall()
        finally:
            conn.close()

        assert tables == [("sales_data",)]
        assert _table_columns(sqlite_config.db_path) == ["id"] + COLUMNS

    def test_insert_stores_values(self, sqlite_config):
        """Test a record lands in one row with the id assigned."""
        ensure_schema(sqlite_config)
        record = SalesRecord(
            receipt_number="R1",
            sale_amount=100.0,
            tax_amount=5.0,
            net_sale=95.0,
            transaction_status="SALE",
        )

        assert insert_record(sqlite_config, record) == 1
        assert insert_record(sqlite_config, record) == 1

        conn = sqlite3.connect(sqlite_config.db_path)
        try:
            rows = conn.execute(
                "SELECT id, receipt_number, sale_amount, net_sale, payment_mode "
                "FROM sales_data ORDER BY id"
            ).fetchall()
        finally:
            conn.close()

        assert rows == [(1, "R1", 100.0, 95.0, None), (2, "R1", 100.0, 95.0, None)]
        assert count_rows(sqlite_config) == 2

    def test_empty_text_is_null_and_numbers_are_not(self, sqlite_config):
        """Test empty strings map to NULL while zero amounts stay zero."""
        ensure_schema(sqlite_config)
        insert_record(sqlite_config, SalesRecord())

        conn = sqlite3.connect(sqlite_config.db_path)
        try:
            row = conn.execute(
                f"SELECT {', '.join(COLUMNS)} FROM sales_data"
            ).fetchone()
        finally:
            conn.close()

        values = dict(zip(COLUMNS, row))
        assert values["receipt_number"] is None
        assert values["transaction_status"] is None
        assert values["sale_amount"] == 0.0
        assert values["round_off"] == 0.0

    def test_insert_failure_returns_zero(self, sqlite_config, capsys):
        """Test a failing insert is logged and counted as zero."""
        # no ensure_schema: the table is missing
        assert insert_record(sqlite_config, SalesRecord(receipt_number="R1")) == 0
        assert "DB insert error" in capsys.readouterr().out

    def test_ensure_schema_failure_propagates(self, tmp_path):
        """Test schema errors are not swallowed."""
        config = Config(
            db_path=str(tmp_path / "missing-dir" / "sales.db"), **BASE_SETTINGS
        )
        with pytest.raises(sqlite3.Error):
            ensure_schema(config)


class TestRecordToRow:
    """Test parameter conversion."""

    def test_row_order_and_nulls(self):
        record = SalesRecord(receipt_number="R7", sale_amount=12.5, order_type="")
        row = record_to_row(record)

        assert len(row) == len(COLUMNS)
        assert row[COLUMNS.index("receipt_number")] == "R7"
        assert row[COLUMNS.index("sale_amount")] == 12.5
        assert row[COLUMNS.index("order_type")] is None
        assert row[COLUMNS.index("discount_amount")] == 0.0


class TestPostgresStore:
    """Test the PostgreSQL path with a mocked psycopg2 connection."""

    @patch("petpooja_sales.load.sales_store.psycopg2.connect")
    def test_ensure_schema_uses_postgres_ddl(self, mock_connect, postgres_config):
        mock_conn = MagicMock()
        mock_connect.return_value = mock_conn

        ensure_schema(postgres_config)

        mock_connect.assert_called_once_with(
            "postgresql://u:p@db/sales", connect_timeout=10
        )
        ddl = mock_conn.cursor.return_value.execute.call_args[0][0]
        assert "CREATE TABLE IF NOT EXISTS sales_data" in ddl
        assert "SERIAL PRIMARY KEY" in ddl
        assert "net_sale DOUBLE PRECISION" in ddl
        assert "NUMERIC" not in ddl
        mock_conn.commit.assert_called_once()
        mock_conn.close.assert_called_once()

    @patch("petpooja_sales.load.sales_store.psycopg2.connect")
    def test_insert_uses_pyformat_placeholders(self, mock_connect, postgres_config):
        mock_conn = MagicMock()
        mock_conn.cursor.return_value.rowcount = 1
        mock_connect.return_value = mock_conn

        assert insert_record(postgres_config, SalesRecord(receipt_number="R1")) == 1

        sql, params = mock_conn.cursor.return_value.execute.call_args[0]
        assert sql.count("%s") == len(COLUMNS)
        assert "?" not in sql
        assert params[0] == "R1"
        mock_conn.close.assert_called_once()

    @patch("petpooja_sales.load.sales_store.psycopg2.connect")
    def test_insert_database_error_returns_zero(self, mock_connect, postgres_config):
        mock_connect.side_effect = psycopg2.OperationalError("connection refused")

        assert insert_record(postgres_config, SalesRecord()) == 0

    @patch("petpooja_sales.load.sales_store.psycopg2.connect")
    def test_insert_without_affected_rows_returns_zero(
        self, mock_connect, postgres_config
    ):
        mock_conn = MagicMock()
        mock_conn.cursor.return_value.rowcount = 0
        mock_connect.return_value = mock_conn

        assert insert_record(postgres_config, SalesRecord()) == 0
