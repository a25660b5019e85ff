# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Iterable, List, Optional

from loteamentos.core.models import Area, AreaStatus, AreaType
from loteamentos.core.utils import canon, parse_iso, utc_now


def find_area(areas: Iterable[Area], area_id: str) -> Optional[Area]:
    """Return the first area with this id, or None."""
    for a in areas:
        if a.id == area_id:
            return a
    return None


def _as_date(value: date | str | None) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    dt = parse_iso(str(value))
    return dt.date() if dt else None


def filter_areas(
    areas: Iterable[Area],
    *,
    status: AreaStatus | str | None = None,
    type: AreaType | str | None = None,
    broker: str = "",
    start: date | str | None = None,
    end: date | str | None = None,
) -> List[Area]:
    """Filter by status, type, broker substring (case-insensitive) and creation date range.

    `start` / `end` are inclusive calendar days compared against `created_at`.
    An area whose `created_at` cannot be parsed is dropped when a date bound is set.
    """
    want_status = AreaStatus.parse(status) if status else None
    want_type = AreaType.parse(type) if type else None
    if status and want_status is None:
        return []
    if type and want_type is None:
        return []
    broker_q = canon(broker)
    start_d = _as_date(start)
    end_d = _as_date(end)

    out: List[Area] = []
    for a in areas:
        if want_status is not None and a.status is not want_status:
            continue
        if want_type is not None and a.type is not want_type:
            continue
        if broker_q and broker_q not in canon(a.broker):
            continue
        if start_d or end_d:
            created = _as_date(a.created_at)
            if created is None:
                continue
            if start_d and created < start_d:
                continue
            if end_d and created > end_d:
                continue
        out.append(a)
    return out


def is_overdue(area: Area, now: Optional[datetime] = None) -> bool:
    """Next action date already passed while the area is still open."""
    if area.status.is_closed:
        return False
    due = parse_iso(area.next_action_date)
    if due is None:
        return False
    now = now or utc_now()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return due < now


def brokers(areas: Iterable[Area]) -> List[str]:
    """Distinct broker names in first-seen order."""
    seen: List[str] = []
    for a in areas:
        if a.broker and a.broker not in seen:
            seen.append(a.broker)
    return seen
