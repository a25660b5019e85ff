# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from loteamentos.auth.credentials import generate_id
from loteamentos.core.errors import AreaNotFoundError, AreaValidationError
from loteamentos.core.models import Area, AreaStatus, AreaType, Checklist, HistoryEntry
from loteamentos.core.utils import to_iso, utc_now
from loteamentos.infra.collections_repo import read_areas, read_history, write_areas, write_history
from loteamentos.infra.storage import KeyValueStore
from loteamentos.services.record_service import filter_areas, find_area

logger = logging.getLogger(__name__)

DEFAULT_USER_LABEL = "Sistema"

# Payload keys (persisted camelCase form) that callers may set.
EDITABLE_FIELDS = (
    "name",
    "type",
    "location",
    "size",
    "areaSize",
    "broker",
    "status",
    "pricePerSquareMeter",
    "nextAction",
    "nextActionDate",
    "observations",
    "attachments",
    "checklist",
)


def _number(value: Any, label: str, errors: List[str]) -> Optional[float]:
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        errors.append(f"{label} inválido")
        return None
    try:
        n = float(value)
    except (TypeError, ValueError):
        errors.append(f"{label} inválido")
        return None
    if not math.isfinite(n):
        errors.append(f"{label} inválido")
        return None
    return n


def _build_area(fields: Dict[str, Any], *, area_id: str, created_at: str, updated_at: str) -> Area:
    """Validate merged payload fields and return the record (total value recomputed)."""
    errors: List[str] = []

    name = str(fields.get("name") or "").strip()
    if not name:
        errors.append("Nome da área é obrigatório")
    broker = str(fields.get("broker") or "").strip()
    if not broker:
        errors.append("Corretor é obrigatório")

    area_type = AreaType.parse(fields.get("type"))
    if area_type is None:
        errors.append(f"Tipo inválido \"{fields.get('type') or ''}\"")
    status = AreaStatus.parse(fields.get("status"))
    if status is None:
        errors.append(f"Status inválido \"{fields.get('status') or ''}\"")

    size = _number(fields.get("size"), "Tamanho", errors)
    if size is not None and size <= 0:
        errors.append("Tamanho deve ser maior que zero")
    price = _number(fields.get("pricePerSquareMeter"), "Valor por m²", errors)
    if price is not None and price < 0:
        errors.append("Valor por m² não pode ser negativo")

    attachments = fields.get("attachments") or []
    if not isinstance(attachments, (list, tuple)):
        errors.append("Anexos devem ser uma lista de identificadores")
        attachments = []
    checklist = fields.get("checklist")
    if checklist is not None and not isinstance(checklist, (dict, Checklist)):
        errors.append("Checklist inválido")
        checklist = None

    if errors:
        raise AreaValidationError(errors)

    # unique, order-preserving
    attachment_ids: List[str] = []
    for a in attachments:
        s = str(a)
        if s and s not in attachment_ids:
            attachment_ids.append(s)

    return Area(
        id=area_id,
        name=name,
        type=area_type,
        location=str(fields.get("location") or ""),
        size=size,
        area_size=str(fields.get("areaSize") or ""),
        broker=broker,
        status=status,
        price_per_square_meter=price,
        total_value=size * price,
        created_at=created_at,
        updated_at=updated_at,
        next_action=str(fields.get("nextAction") or ""),
        next_action_date=str(fields.get("nextActionDate") or ""),
        observations=str(fields.get("observations") or ""),
        attachments=attachment_ids,
        checklist=checklist if isinstance(checklist, Checklist) else Checklist.from_dict(checklist),
    )


def list_areas(
    store: KeyValueStore,
    *,
    status: Optional[str] = None,
    type: Optional[str] = None,
    broker: str = "",
) -> List[Area]:
    """All areas, narrowed by status / type / broker substring when given."""
    areas = read_areas(store)
    if not (status or type or broker):
        return areas
    return filter_areas(areas, status=status, type=type, broker=broker)


def get_area(store: KeyValueStore, area_id: str) -> Area:
    area = find_area(read_areas(store), area_id)
    if area is None:
        raise AreaNotFoundError(f"Área '{area_id}' não encontrada")
    return area


def create_area(
    store: KeyValueStore,
    fields: Dict[str, Any],
    *,
    clock: Callable[[], datetime] = utc_now,
) -> Area:
    """Create a new area: id and timestamps are assigned here."""
    now = to_iso(clock())
    payload = {k: fields[k] for k in EDITABLE_FIELDS if k in fields}
    area = _build_area(payload, area_id=generate_id(), created_at=now, updated_at=now)

    areas = read_areas(store)
    areas.append(area)
    write_areas(store, areas)
    logger.info("Area created %s (%s)", area.id, area.name)
    return area


def update_area(
    store: KeyValueStore,
    area_id: str,
    fields: Dict[str, Any],
    *,
    user_label: str = DEFAULT_USER_LABEL,
    clock: Callable[[], datetime] = utc_now,
) -> Area:
    """Apply an edit; a status change also appends one history entry.

    `id` and `createdAt` cannot be changed. `updatedAt` is always refreshed.
    """
    areas = read_areas(store)
    idx = next((i for i, a in enumerate(areas) if a.id == area_id), None)
    if idx is None:
        raise AreaNotFoundError(f"Área '{area_id}' não encontrada")

    current = areas[idx]
    merged = current.to_dict()
    merged.update({k: fields[k] for k in EDITABLE_FIELDS if k in fields})
    now_dt = clock()
    updated = _build_area(merged, area_id=current.id, created_at=current.created_at, updated_at=to_iso(now_dt))

    areas[idx] = updated
    write_areas(store, areas)
    logger.info("Area updated %s", area_id)

    if updated.status is not current.status:
        entry = HistoryEntry(
            id=generate_id(),
            area_id=current.id,
            area_name=updated.name,
            user=user_label or DEFAULT_USER_LABEL,
            date=to_iso(now_dt),
            previous_status=current.status.value,
            new_status=updated.status.value,
        )
        history = read_history(store)
        history.append(entry)
        write_history(store, history)
        logger.info(
            "Area %s status %s -> %s",
            area_id,
            current.status.value,
            updated.status.value,
        )
    return updated


def delete_area(store: KeyValueStore, area_id: str) -> None:
    """Remove an area by id. History entries referring to it are kept."""
    areas = read_areas(store)
    remaining = [a for a in areas if a.id != area_id]
    if len(remaining) == len(areas):
        raise AreaNotFoundError(f"Área '{area_id}' não encontrada")
    write_areas(store, remaining)
    logger.info("Area deleted %s", area_id)


def status_history(store: KeyValueStore, area_id: Optional[str] = None) -> List[HistoryEntry]:
    """Whole history, or only the entries of one area, oldest first."""
    history = read_history(store)
    if area_id is None:
        return history
    return [h for h in history if h.area_id == area_id]
