# gaadiyaan/dealer_ids.py
"""Dealer identifier generation.

Dealer ids look like ``GD2024007``: the ``GD`` prefix, the calendar year the id
was issued in, and a per-year sequence zero padded to three digits. Sequences
restart every year. Reserving an id (``crud.reserve_dealer_id``) goes through
the ``dealer_ids`` table whose unique constraint rejects a second writer that
computed the same next value.
"""
import re
from datetime import datetime, timezone
from typing import Optional

from .exceptions import GenerationExhausted

PREFIX = "GD"
MAX_SEQUENCE = 999
MAX_RESERVE_ATTEMPTS = 5

_DEALER_ID_RE = re.compile(r"^GD(\d{4})(\d{3,})$")


def current_year() -> int:
    return datetime.now(timezone.utc).year


def format_dealer_id(year: int, sequence: int) -> str:
    return f"{PREFIX}{year}{sequence:03d}"


def parse_dealer_id(dealer_id: str):
    """Return ``(year, sequence)`` for a well formed dealer id, else ``None``."""
    m = _DEALER_ID_RE.match(dealer_id or "")
    if not m:
        return None
    return int(m.group(1)), int(m.group(2))


def next_dealer_id(max_sequence: Optional[int], year: Optional[int] = None) -> str:
    """Next id after `max_sequence` (the highest sequence already issued for
    `year`, or None when the year has none)."""
    year = current_year() if year is None else year
    sequence = (max_sequence or 0) + 1
    if sequence > MAX_SEQUENCE:
        raise GenerationExhausted(f"Unable to generate unique dealer ID for {year}")
    return format_dealer_id(year, sequence)
