"""
Entry point for the PetPooja sales ingestion run.

Orchestrates fetch, record location, normalization and persistence, and
maps the outcome onto process exit codes.
"""

import json
import sys
from dataclasses import dataclass
from typing import Callable, Optional

from petpooja_sales.config import Config, build_request_url, load_dotenv_if_present
from petpooja_sales.extract.api_client import fetch_with_retry
from petpooja_sales.load.sales_store import (
    DATABASE_ERRORS,
    count_rows,
    ensure_schema,
    insert_record,
)
from petpooja_sales.transform.normalizer import normalize_record
from petpooja_sales.transform.payload import locate_records
from petpooja_sales.utils.logging_utils import (
    log_section_start,
    log_section_complete,
    log_progress,
    log_warning,
    log_error,
)

EXIT_OK = 0
EXIT_NO_DATA = 1
EXIT_FAILURE = 2

STATUS_SUCCESS = "success"
STATUS_NO_DATA = "no_data"

Fetcher = Callable[..., Optional[str]]


@dataclass
class PipelineResult:
    """Outcome of one ingestion run."""

    status: str
    rows_inserted: int = 0
    candidates: int = 0

    @property
    def exit_code(self) -> int:
        return EXIT_OK if self.status == STATUS_SUCCESS else EXIT_NO_DATA


def ingest_payload(config: Config, body: str) -> PipelineResult:
    """
    Parse a response body and insert every record it holds.

    Args:
        config: Loaded configuration.
        body: Raw JSON text returned by the API.

    Returns:
        PipelineResult: Counts of candidate records and inserted rows.

    Raises:
        json.JSONDecodeError: If the body is not valid JSON.
    """
    document = json.loads(body)

    inserted = 0
    candidates = 0
    for element in locate_records(document):
        candidates += 1
        record = normalize_record(element)
        if record is not None:
            inserted += insert_record(config, record)

    return PipelineResult(
        status=STATUS_SUCCESS, rows_inserted=inserted, candidates=candidates
    )


def run_pipeline(config: Config, fetch: Optional[Fetcher] = None) -> PipelineResult:
    """
    Run fetch, schema setup and ingestion for one configuration.

    Args:
        config: Loaded configuration.
        fetch: Function with the signature of fetch_with_retry, which is
            used when omitted.

    Returns:
        PipelineResult: ``no_data`` when the API returned nothing usable,
        ``success`` otherwise.
    """
    if fetch is None:
        fetch = fetch_with_retry

    url = build_request_url(config)
    log_progress("Ingestion Pipeline", "Request URL built")

    log_section_start("Sales Data Fetch")
    body = fetch(
        url,
        config.max_retries,
        config.retry_delay_ms,
        timeout=config.request_timeout,
    )
    if body is None or not body.strip():
        log_error("Sales Data Fetch", "No response or empty response received")
        return PipelineResult(status=STATUS_NO_DATA)
    if config.log_raw_response:
        log_progress("Sales Data Fetch", f"Raw JSON response:\n{body}")
    log_section_complete("Sales Data Fetch", f"{len(body)} characters received")

    log_section_start("Schema Setup")
    ensure_schema(config)
    log_section_complete("Schema Setup")

    log_section_start("Record Ingestion")
    result = ingest_payload(config, body)
    log_section_complete(
        "Record Ingestion",
        f"{result.rows_inserted} of {result.candidates} candidate record(s) inserted",
    )
    try:
        log_progress(
            "Ingestion Pipeline", f"Table now holds {count_rows(config)} row(s)"
        )
    except DATABASE_ERRORS as e:
        log_warning("Ingestion Pipeline", f"Could not count stored rows: {e}")
    return result


def main() -> int:
    """
    Load configuration and run the pipeline.

    Returns:
        int: 0 on success, 1 when no data could be fetched, 2 on any other
        fatal error.
    """
    log_section_start("PetPooja Sales Fetcher")

    try:
        load_dotenv_if_present()

        log_section_start("Configuration Validation")
        config = Config.from_env()
        log_section_complete("Configuration Validation")

        result = run_pipeline(config)
        if result.status == STATUS_NO_DATA:
            log_progress("PetPooja Sales Fetcher", "Exiting without data")
            return EXIT_NO_DATA

        log_section_complete(
            "PetPooja Sales Fetcher", f"Rows inserted: {result.rows_inserted}"
        )
        return result.exit_code

    except Exception as e:
        log_error("PetPooja Sales Fetcher", e, include_traceback=True)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
