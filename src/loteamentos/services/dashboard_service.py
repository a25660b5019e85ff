# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from loteamentos.core.models import Area, AreaStatus, AreaType, HistoryEntry
from loteamentos.services.record_service import is_overdue

OVERDUE_LIMIT = 5
RECENT_HISTORY_LIMIT = 5


def areas_frame(areas: Sequence[Area]) -> pd.DataFrame:
    """One row per area with the columns the summaries aggregate on."""
    cols = ["id", "name", "type", "status", "broker", "size", "total_value"]
    if not areas:
        return pd.DataFrame(columns=cols)
    return pd.DataFrame(
        [
            {
                "id": a.id,
                "name": a.name,
                "type": a.type.value,
                "status": a.status.value,
                "broker": a.broker,
                "size": float(a.size),
                "total_value": float(a.total_value),
            }
            for a in areas
        ],
        columns=cols,
    )


def _counts(df: pd.DataFrame, col: str, labels: List[str]) -> Dict[str, int]:
    if df.empty:
        return {label: 0 for label in labels}
    vc = df[col].value_counts().reindex(labels, fill_value=0)
    return {label: int(vc[label]) for label in labels}


def summarize(areas: Sequence[Area]) -> Dict[str, Any]:
    """Totals, success rate and per-status / per-type counts."""
    df = areas_frame(areas)
    total = int(len(df))
    status_counts = _counts(df, "status", [s.value for s in AreaStatus])
    type_counts = _counts(df, "type", [t.value for t in AreaType])
    prospected = status_counts[AreaStatus.PROSPECTED.value]
    return {
        "total_areas": total,
        "total_size": float(df["size"].sum()) if total else 0.0,
        "total_value": float(df["total_value"].sum()) if total else 0.0,
        "prospected_areas": prospected,
        "success_rate": round(prospected / total * 100, 1) if total else 0.0,
        "status_counts": status_counts,
        "type_counts": type_counts,
    }


def build_dashboard(
    areas: Sequence[Area],
    history: Sequence[HistoryEntry],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    overdue = [a for a in areas if is_overdue(a, now)]
    out = summarize(areas)
    out["overdue_count"] = len(overdue)
    out["overdue_areas"] = [a.to_dict() for a in overdue[:OVERDUE_LIMIT]]
    out["recent_history"] = [h.to_dict() for h in reversed(list(history)[-RECENT_HISTORY_LIMIT:])]
    return out
