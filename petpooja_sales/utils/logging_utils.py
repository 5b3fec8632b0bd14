"""
Provides UTC timestamped logging helpers for the sales ingestion run.
"""

import traceback
from datetime import datetime, UTC
from typing import Optional


def _utc_timestamp() -> str:
    """
    Generate the current UTC timestamp string.

    Returns:
        str: Timestamp formatted as YYYY-MM-DD HH:MM:SS in UTC.
    """
    return datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")


def _emit(message: str) -> None:
    print(f"[{_utc_timestamp()}] {message}", flush=True)


def log_section_start(section: str) -> None:
    """
    Log the start of a pipeline section.

    Args:
        section (str): Description of the section that is beginning.
    """
    _emit(f"Starting: {section}")


def log_section_complete(section: str, details: Optional[str] = None) -> None:
    """
    Log the completion of a pipeline section.

    Args:
        section (str): Description of the section that finished.
        details (Optional[str]): Optional extra context to append to the message.
    """
    suffix = f" - {details}" if details else ""
    _emit(f"Completed: {section}{suffix}")


def log_progress(section: str, message: str) -> None:
    """
    Log an in-progress update for a section.

    Args:
        section (str): Description of the section that is running.
        message (str): Progress message to display for the section.
    """
    _emit(f"{section}: {message}")


def log_warning(section: str, message: str) -> None:
    """Log a recoverable problem that does not stop the section."""
    _emit(f"Warning in {section}: {message}")


def log_error(
    section: str, error: Exception | str, *, include_traceback: bool = False
) -> None:
    """
    Log an error that occurred during a section.

    Args:
        section (str): Description of the section where the error occurred.
        error (Exception | str): Exception instance or error message to record.
        include_traceback (bool): Also print the formatted traceback of ``error``
            when it is an exception.
    """
    _emit(f"Error in {section}: {error}")
    if include_traceback and isinstance(error, BaseException):
        print(
            "".join(traceback.format_exception(type(error), error, error.__traceback__)),
            end="",
            flush=True,
        )
