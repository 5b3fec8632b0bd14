"""
Sales table persistence module.

Creates the sales_data table and inserts one normalized record per call.
Rows go to a local SQLite file by default, or to PostgreSQL when a
database URL is configured.
"""

import sqlite3
from dataclasses import astuple, fields
from pathlib import Path
from typing import Any, Tuple

import psycopg2

from petpooja_sales.config import Config
from petpooja_sales.transform.normalizer import SalesRecord
from petpooja_sales.utils.logging_utils import log_progress, log_error

TABLE_NAME = "sales_data"

COLUMNS = [field.name for field in fields(SalesRecord)]

TEXT_COLUMNS = {
    "receipt_number",
    "sale_date",
    "transaction_time",
    "payment_mode",
    "order_type",
    "transaction_status",
}

SQLITE_SCHEMA = f"""
    CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        receipt_number TEXT,
        sale_date TEXT,
        transaction_time TEXT,
        sale_amount REAL,
        tax_amount REAL,
        discount_amount REAL,
        round_off REAL,
        net_sale REAL,
        payment_mode TEXT,
        order_type TEXT,
        transaction_status TEXT
    )
"""

POSTGRES_SCHEMA = f"""
    CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
        id SERIAL PRIMARY KEY,
        receipt_number TEXT,
        sale_date TEXT,
        transaction_time TEXT,
        sale_amount DOUBLE PRECISION,
        tax_amount DOUBLE PRECISION,
        discount_amount DOUBLE PRECISION,
        round_off DOUBLE PRECISION,
        net_sale DOUBLE PRECISION,
        payment_mode TEXT,
        order_type TEXT,
        transaction_status TEXT
    )
"""

# Errors an insert may raise that are logged and counted as zero rows
DATABASE_ERRORS = (sqlite3.Error, psycopg2.Error)


def get_connection(config: Config):
    """
    Open a new connection to the configured store.

    Args:
        config: Loaded configuration.

    Returns:
        A DB-API connection; the caller closes it.
    """
    if config.uses_postgres:
        return psycopg2.connect(config.database_url, connect_timeout=10)
    return sqlite3.connect(config.db_path)


def _insert_statement(config: Config) -> str:
    placeholder = "%s" if config.uses_postgres else "?"
    return (
        f"INSERT INTO {TABLE_NAME} ({', '.join(COLUMNS)}) "
        f"VALUES ({', '.join([placeholder] * len(COLUMNS))})"
    )


def record_to_row(record: SalesRecord) -> Tuple[Any, ...]:
    """
    Convert a record to insert parameters in COLUMNS order.

    Empty text becomes NULL; numeric values are passed through unchanged.
    """
    return tuple(
        (value or None) if name in TEXT_COLUMNS else value
        for name, value in zip(COLUMNS, astuple(record))
    )


def describe_target(config: Config) -> str:
    """Human-readable store location without credentials."""
    if config.uses_postgres:
        return "PostgreSQL"
    return f"'{Path(config.db_path).resolve()}'"


def ensure_schema(config: Config) -> None:
    """
    Create the sales table if it does not exist yet.

    Args:
        config: Loaded configuration.

    Raises:
        sqlite3.Error | psycopg2.Error: If the table cannot be created.
    """
    schema = POSTGRES_SCHEMA if config.uses_postgres else SQLITE_SCHEMA
    conn = get_connection(config)
    try:
        cursor = conn.cursor()
        cursor.execute(schema)
        cursor.close()
        conn.commit()
    finally:
        conn.close()

    log_progress("Schema Store", f"Database ensured at {describe_target(config)}")


def insert_record(config: Config, record: SalesRecord) -> int:
    """
    Insert one record using its own connection.

    Args:
        config: Loaded configuration.
        record: Normalized sales record.

    Returns:
        int: 1 if a row was written, 0 if nothing was written or the insert
        failed (the failure is logged).
    """
    try:
        conn = get_connection(config)
        try:
            cursor = conn.cursor()
            cursor.execute(_insert_statement(config), record_to_row(record))
            changed = cursor.rowcount
            cursor.close()
            conn.commit()
        finally:
            conn.close()
    except DATABASE_ERRORS as e:
        log_error("Schema Store", f"DB insert error: {e}")
        return 0

    return 1 if changed > 0 else 0


def count_rows(config: Config) -> int:
    """Return the number of rows currently stored in the sales table."""
    conn = get_connection(config)
    try:
        cursor = conn.cursor()
        cursor.execute(f"SELECT COUNT(*) FROM {TABLE_NAME}")
        count = cursor.fetchone()[0]
        cursor.close()
        return count
    finally:
        conn.close()
