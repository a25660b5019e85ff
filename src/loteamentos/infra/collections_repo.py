# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Read/write the JSON-array collections kept in the key-value store."""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, Iterable, List, TypeVar

from loteamentos.core.models import Area, HistoryEntry, User
from loteamentos.infra.storage import KeyValueStore

AREAS_KEY = "loteamentos-areas"
HISTORY_KEY = "loteamentos-history"
USERS_KEY = "loteamentos-users"
SESSION_KEY = "loteamentos-session"

T = TypeVar("T")


def _read_list(store: KeyValueStore, key: str, factory: Callable[[Dict[str, Any]], T]) -> List[T]:
    raw = store.get(key)
    if not raw:
        return []
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError(f"Conteúdo inválido em '{key}': esperado uma lista")
    return [factory(item) for item in data if isinstance(item, dict)]


def _write_list(store: KeyValueStore, key: str, items: Iterable[Any]) -> None:
    store.set(key, json.dumps([i.to_dict() for i in items], ensure_ascii=False))


def read_areas(store: KeyValueStore) -> List[Area]:
    return _read_list(store, AREAS_KEY, Area.from_dict)


def write_areas(store: KeyValueStore, areas: Iterable[Area]) -> None:
    _write_list(store, AREAS_KEY, areas)


def read_history(store: KeyValueStore) -> List[HistoryEntry]:
    return _read_list(store, HISTORY_KEY, HistoryEntry.from_dict)


def write_history(store: KeyValueStore, history: Iterable[HistoryEntry]) -> None:
    _write_list(store, HISTORY_KEY, history)


def read_users(store: KeyValueStore) -> List[User]:
    return _read_list(store, USERS_KEY, User.from_dict)


def write_users(store: KeyValueStore, users: Iterable[User]) -> None:
    _write_list(store, USERS_KEY, users)
