"""
Locates the list of sales records inside a decoded API response.

The vendor does not document a stable envelope, so the records may sit at
the root, under a well-known key, or under any other array-valued key.
"""

from typing import Any, Dict, Iterator, List, Optional

from petpooja_sales.utils.logging_utils import log_progress

SECTION = "Payload Locator"

# Checked in this order before falling back to the first array-valued field
PREFERRED_KEYS = ("data", "orders", "sales")


def find_record_array(document: Any) -> Optional[List[Any]]:
    """
    Find the array holding the records.

    Args:
        document: Decoded JSON value.

    Returns:
        The array, or None if the document contains no array at the root
        or one level below it.
    """
    if isinstance(document, list):
        return document

    if not isinstance(document, dict):
        return None

    for key in PREFERRED_KEYS:
        value = document.get(key)
        if isinstance(value, list):
            return value

    # dicts keep the document's field order
    for key, value in document.items():
        if isinstance(value, list):
            log_progress(SECTION, f"Using first array-valued field '{key}'")
            return value

    return None


def locate_records(document: Any) -> Iterator[Dict[str, Any]]:
    """
    Yield the candidate record objects of a decoded API response.

    Non-object elements of the located array are skipped. If no array is
    found and the root is an object, the root itself is the only record.

    Args:
        document: Decoded JSON value.

    Yields:
        Each candidate record object, in document order.
    """
    records = find_record_array(document)

    if records is None:
        if isinstance(document, dict):
            log_progress(
                SECTION,
                "Could not find an array of sales/orders, "
                "treating the response as a single record",
            )
            yield document
        else:
            log_progress(SECTION, "Response holds no records")
        return

    for element in records:
        if isinstance(element, dict):
            yield element
