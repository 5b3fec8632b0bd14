"""
Record normalization module.

Maps one loosely-keyed sales object from the API onto the fixed SalesRecord
columns, coercing values and deriving the round-off amount when the source
does not provide one.
"""

import json
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

from petpooja_sales.utils.logging_utils import log_error

SECTION = "Record Normalizer"

ROUND_OFF_KEYS = ("round_off", "roundoff", "roundOff")


@dataclass
class SalesRecord:
    """One sales row in the canonical column layout."""

    receipt_number: str = ""
    sale_date: str = ""
    transaction_time: str = ""
    sale_amount: float = 0.0
    tax_amount: float = 0.0
    discount_amount: float = 0.0
    round_off: float = 0.0
    net_sale: float = 0.0
    payment_mode: str = ""
    order_type: str = ""
    transaction_status: str = ""


def _to_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def _to_float(value: Any) -> Optional[float]:
    """Coerce a JSON number or numeric string, None if it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace(",", ""))
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def get_string(element: Dict[str, Any], *names: str) -> str:
    """
    Return the first present, non-null value among ``names`` as text.

    Args:
        element: Source record object.
        names: Candidate keys, tried in order.

    Returns:
        str: The value as text, or "" if none of the keys hold a value.
    """
    for name in names:
        value = element.get(name)
        if value is not None:
            return _to_text(value)
    return ""


def get_number(element: Dict[str, Any], *names: str) -> float:
    """
    Return the first parsable numeric value among ``names``.

    JSON numbers are used as-is and strings are parsed as decimals. A key
    whose value cannot be parsed falls through to the next candidate.

    Args:
        element: Source record object.
        names: Candidate keys, tried in order.

    Returns:
        float: The value, or 0.0 if no candidate parses.
    """
    for name in names:
        value = element.get(name)
        if value is None:
            continue
        number = _to_float(value)
        if number is not None:
            return number
    return 0.0


def derive_round_off(
    explicit: float,
    net_sale: float,
    sale_amount: float,
    tax_amount: float,
    discount_amount: float,
) -> float:
    """
    Resolve the round-off amount.

    A non-zero explicit value wins. Otherwise, when either net sale or sale
    amount is non-zero, the round-off is
    ``net_sale - (sale_amount - tax_amount - discount_amount)`` to 2 places.
    """
    if explicit != 0.0:
        return explicit
    if net_sale != 0.0 or sale_amount != 0.0:
        return round(net_sale - (sale_amount - tax_amount - discount_amount), 2)
    return 0.0


def build_record(element: Dict[str, Any]) -> SalesRecord:
    """
    Map a source object onto a SalesRecord.

    Raises whatever the lookups raise; see normalize_record for the
    error-isolating wrapper.
    """
    sale_amount = get_number(element, "Invoice amount")
    discount_amount = get_number(element, "Discount amount")
    tax_amount = get_number(element, "Tax amount")
    net_sale = get_number(element, "Net sale")

    round_off = derive_round_off(
        get_number(element, *ROUND_OFF_KEYS),
        net_sale,
        sale_amount,
        tax_amount,
        discount_amount,
    )

    return SalesRecord(
        receipt_number=get_string(element, "Receipt number"),
        # kept as the raw vendor string, no date/time splitting
        sale_date=get_string(element, "Receipt Date"),
        transaction_time=get_string(element, "Transaction Time"),
        sale_amount=sale_amount,
        tax_amount=tax_amount,
        discount_amount=discount_amount,
        round_off=round_off,
        net_sale=net_sale,
        payment_mode=get_string(element, "Payment Mode"),
        order_type=get_string(element, "Order Type"),
        transaction_status=get_string(element, "Transaction status"),
    )


def normalize_record(element: Dict[str, Any]) -> Optional[SalesRecord]:
    """
    Normalize one candidate record, isolating failures.

    Args:
        element: Source record object.

    Returns:
        The SalesRecord, or None if the element could not be parsed.
    """
    try:
        return build_record(element)
    except Exception as e:
        log_error(SECTION, f"Failed parsing a record: {e}")
        return None

