# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""CSV backup/restore of the areas and history collections.

An import replaces the whole collection, and only after every row parsed
and validated; on any error the stored collection is left as it was.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from loteamentos.core.errors import CsvImportError
from loteamentos.core.utils import dated_filename
from loteamentos.csvio.codec import export_areas_csv, export_history_csv, import_areas_csv, import_history_csv
from loteamentos.infra.collections_repo import read_areas, read_history, write_areas, write_history
from loteamentos.infra.storage import KeyValueStore

logger = logging.getLogger(__name__)

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"


@dataclass(frozen=True)
class CsvExport:
    filename: str
    content: str

    def encode(self) -> bytes:
        return self.content.encode("utf-8")


def export_areas(store: KeyValueStore, *, day: Optional[date] = None) -> CsvExport:
    areas = read_areas(store)
    return CsvExport(filename=dated_filename("areas", day), content=export_areas_csv(areas))


def export_history(store: KeyValueStore, *, day: Optional[date] = None) -> CsvExport:
    history = read_history(store)
    return CsvExport(filename=dated_filename("historico", day), content=export_history_csv(history))


def import_areas(store: KeyValueStore, text: str) -> int:
    """Replace all areas with the CSV content. Returns the imported count."""
    try:
        areas = import_areas_csv(text)
    except CsvImportError as e:
        logger.warning("Areas import rejected: %s", e)
        raise
    write_areas(store, areas)
    logger.info("Areas import replaced collection with %d record(s)", len(areas))
    return len(areas)


def import_history(store: KeyValueStore, text: str) -> int:
    """Replace the status history with the CSV content. Returns the imported count."""
    try:
        history = import_history_csv(text)
    except CsvImportError as e:
        logger.warning("History import rejected: %s", e)
        raise
    write_history(store, history)
    logger.info("History import replaced collection with %d record(s)", len(history))
    return len(history)


def decode_upload(raw: bytes) -> str:
    """Decode an uploaded CSV (UTF-8, optional BOM)."""
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise CsvImportError("Arquivo CSV deve estar codificado em UTF-8") from e
