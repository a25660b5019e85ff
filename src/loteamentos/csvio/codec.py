# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""CSV export/import for areas and status history.

Export quotes every field and doubles embedded quotes; newlines inside
free-text values are written as the two characters ``\\n``. Import resolves columns by
header name (extra or reordered columns are fine), validates every row and
either returns the complete list or raises on the first bad row.
"""

from __future__ import annotations

import math
from typing import Dict, Iterator, List, Sequence, Tuple

from loteamentos.core.errors import FormatError, RowShapeError, RowValueError, SchemaError
from loteamentos.core.models import CHECKLIST_KEYS, Area, AreaStatus, AreaType, Checklist, HistoryEntry
from loteamentos.core.utils import format_number
from loteamentos.csvio.tokenizer import tokenize_line

AREA_COLUMNS: Tuple[str, ...] = (
    "id",
    "name",
    "type",
    "size",
    "broker",
    "status",
    "pricePerSquareMeter",
    "totalValue",
    "createdAt",
    "updatedAt",
    "nextAction",
    "nextActionDate",
    "observations",
    "attachments",
    "visitaTecnica",
    "levantamentoDocumental",
    "propostaApresentada",
    "aprovacaoGestor",
)

# Written after the fixed columns; optional on import.
AREA_TRAILING_COLUMNS: Tuple[str, ...] = ("location", "areaSize")

HISTORY_COLUMNS: Tuple[str, ...] = (
    "id",
    "areaId",
    "areaName",
    "user",
    "date",
    "previousStatus",
    "newStatus",
)

# Columns whose newlines are written as ``\n`` and restored on import.
FREE_TEXT_COLUMNS = frozenset(
    {"name", "broker", "nextAction", "observations", "location", "areaSize", "areaName", "user"}
)

ATTACHMENT_SEPARATOR = "|"


# --- export ---


def _format_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    if value is None:
        return ""
    return str(value)


def _normalize_newlines(s: str) -> str:
    return s.replace("\r\n", "\n").replace("\r", "\n")


def _quote(value: object, column: str = "") -> str:
    s = _normalize_newlines(_format_value(value))
    if column in FREE_TEXT_COLUMNS:
        s = s.replace("\n", "\\n")
    else:
        # no escape outside free text, keep the record on one line
        s = s.replace("\n", " ")
    return '"' + s.replace('"', '""') + '"'


def _build_csv(columns: Sequence[str], rows: Iterator[Sequence[object]]) -> str:
    lines = [",".join(_quote(c) for c in columns)]
    for row in rows:
        lines.append(",".join(_quote(v, c) for c, v in zip(columns, row)))
    return "\n".join(lines)


def _area_row(area: Area) -> List[object]:
    checklist = area.checklist.to_dict()
    return [
        area.id,
        area.name,
        area.type.value,
        area.size,
        area.broker,
        area.status.value,
        area.price_per_square_meter,
        area.total_value,
        area.created_at,
        area.updated_at,
        area.next_action,
        area.next_action_date,
        area.observations,
        ATTACHMENT_SEPARATOR.join(area.attachments),
    ] + [checklist[key] for _, key in CHECKLIST_KEYS] + [area.location, area.area_size]


def _history_row(entry: HistoryEntry) -> List[object]:
    return [
        entry.id,
        entry.area_id,
        entry.area_name,
        entry.user,
        entry.date,
        entry.previous_status,
        entry.new_status,
    ]


def export_areas_csv(areas: Sequence[Area]) -> str:
    return _build_csv(AREA_COLUMNS + AREA_TRAILING_COLUMNS, (_area_row(a) for a in areas))


def export_history_csv(history: Sequence[HistoryEntry]) -> str:
    return _build_csv(HISTORY_COLUMNS, (_history_row(e) for e in history))


# --- import ---


class _Row:
    """One tokenized data row with header-name lookup."""

    def __init__(self, line: int, index: Dict[str, int], values: List[str]) -> None:
        self.line = line
        self._index = index
        self._values = values

    def has(self, column: str) -> bool:
        return column in self._index

    def text(self, column: str) -> str:
        idx = self._index.get(column)
        raw = self._values[idx] if idx is not None else ""
        if column in FREE_TEXT_COLUMNS:
            return raw.replace("\\n", "\n")
        return raw

    def number(self, column: str) -> float:
        raw = self.text(column).strip()
        if not raw:
            return 0.0
        if "_" in raw:
            raise RowValueError(self.line, f"valor numérico inválido em '{column}': \"{raw}\"")
        try:
            value = float(raw)
        except ValueError:
            raise RowValueError(self.line, f"valor numérico inválido em '{column}': \"{raw}\"") from None
        if not math.isfinite(value):
            raise RowValueError(self.line, f"valor numérico inválido em '{column}': \"{raw}\"")
        return value

    def flag(self, column: str) -> bool:
        return self.text(column) == "true"

    def items(self, column: str) -> List[str]:
        raw = self.text(column)
        return raw.split(ATTACHMENT_SEPARATOR) if raw else []


def _split_lines(text: str) -> List[str]:
    body = (text or "").lstrip("\ufeff").strip()
    return [ln[:-1] if ln.endswith("\r") else ln for ln in body.split("\n")]


def _read_rows(text: str, required: Sequence[str]) -> Iterator[_Row]:
    lines = _split_lines(text)
    if len(lines) < 2:
        raise FormatError()

    headers = [h.strip() for h in tokenize_line(lines[0])]
    missing = [c for c in required if c not in headers]
    if missing:
        raise SchemaError(missing)

    index: Dict[str, int] = {}
    for pos, name in enumerate(headers):
        index.setdefault(name, pos)

    for i, line in enumerate(lines[1:], start=2):
        values = tokenize_line(line)
        if len(values) != len(headers):
            raise RowShapeError(i, expected=len(headers), found=len(values))
        yield _Row(i, index, values)


def _require(row: _Row, columns: Sequence[str]) -> None:
    empty = [c for c in columns if not row.text(c)]
    if empty:
        raise RowValueError(row.line, f"campos obrigatórios ausentes: {', '.join(empty)}")


def _parse_area(row: _Row) -> Area:
    size = row.number("size")
    price = row.number("pricePerSquareMeter")
    total = row.number("totalValue")

    _require(row, ("id", "name", "type", "broker", "status"))

    area_type = AreaType.parse(row.text("type"))
    if area_type is None:
        raise RowValueError(row.line, f"tipo inválido \"{row.text('type')}\"")
    status = AreaStatus.parse(row.text("status"))
    if status is None:
        raise RowValueError(row.line, f"status inválido \"{row.text('status')}\"")
    if size <= 0:
        raise RowValueError(row.line, "tamanho inválido (deve ser maior que zero)")
    if price < 0:
        raise RowValueError(row.line, "preço por m² inválido (não pode ser negativo)")

    return Area(
        id=row.text("id"),
        name=row.text("name"),
        type=area_type,
        size=size,
        broker=row.text("broker"),
        status=status,
        price_per_square_meter=price,
        total_value=total,
        created_at=row.text("createdAt"),
        updated_at=row.text("updatedAt"),
        next_action=row.text("nextAction"),
        next_action_date=row.text("nextActionDate"),
        observations=row.text("observations"),
        attachments=row.items("attachments"),
        checklist=Checklist(**{attr: row.flag(key) for attr, key in CHECKLIST_KEYS}),
        location=row.text("location") if row.has("location") else "",
        area_size=row.text("areaSize") if row.has("areaSize") else "",
    )


def _parse_history(row: _Row) -> HistoryEntry:
    _require(row, ("id", "areaId", "areaName", "user", "date"))
    return HistoryEntry(
        id=row.text("id"),
        area_id=row.text("areaId"),
        area_name=row.text("areaName"),
        user=row.text("user"),
        date=row.text("date"),
        previous_status=row.text("previousStatus"),
        new_status=row.text("newStatus"),
    )


def import_areas_csv(text: str) -> List[Area]:
    """Parse and validate an areas CSV. Raises a CsvImportError subclass on the first problem."""
    return [_parse_area(row) for row in _read_rows(text, AREA_COLUMNS)]


def import_history_csv(text: str) -> List[HistoryEntry]:
    """Parse and validate a history CSV. Raises a CsvImportError subclass on the first problem."""
    return [_parse_history(row) for row in _read_rows(text, HISTORY_COLUMNS)]
