# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Optional


def canon(s: str) -> str:
    """Canonicalise keys for comparisons (trim + lower)."""
    return (s or "").strip().lower()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(dt: datetime) -> str:
    """ISO 8601 in UTC with milliseconds and a `Z` suffix (2024-01-15T10:00:00.000Z)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str) -> Optional[datetime]:
    """Parse an ISO date or timestamp; naive values are taken as UTC. None if unparseable."""
    s = (value or "").strip()
    if not s:
        return None
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_number(value: float) -> str:
    """Plain number text: integral floats without `.0`, others in shortest round-trip form."""
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def _br_separators(s: str) -> str:
    return s.replace(",", "_").replace(".", ",").replace("_", ".")


def format_brl(value: float) -> str:
    """R$ 1.234,56"""
    return "R$ " + _br_separators(f"{float(value):,.2f}")


def format_area_br(value: float) -> str:
    """1.500 / 1.234,5 (pt-BR grouping, at most 2 decimals)."""
    v = float(value)
    if v.is_integer():
        return _br_separators(f"{v:,.0f}")
    return _br_separators(f"{v:,.2f}".rstrip("0").rstrip("."))


def format_date_br(value: str) -> str:
    """dd/mm/yyyy for an ISO date/timestamp, '' when unparseable."""
    dt = parse_iso(value)
    return dt.strftime("%d/%m/%Y") if dt else ""


def dated_filename(prefix: str, day: Optional[date] = None, ext: str = "csv") -> str:
    """`<prefix>_<YYYY-MM-DD>.<ext>` (UTC date unless given)."""
    d = day or utc_now().date()
    return f"{prefix}_{d.isoformat()}.{ext}"
