import json
import threading

import pytest

from loteamentos.infra.collections_repo import AREAS_KEY, read_areas, read_users, write_areas
from loteamentos.infra.storage import JsonFileStore, MemoryStore


def test_memory_store():
    s = MemoryStore({"a": "1"})
    assert s.get("a") == "1"
    s.set("b", "2")
    s.remove("a")
    s.remove("missing")
    assert s.keys() == ["b"]


def test_json_file_store_persists(tmp_path):
    path = tmp_path / "nested" / "storage.json"
    s = JsonFileStore(path)
    assert s.get("x") is None
    s.set("x", "[1]")
    assert json.loads(path.read_text(encoding="utf-8")) == {"x": "[1]"}
    assert JsonFileStore(path).get("x") == "[1]"
    s.remove("x")
    assert JsonFileStore(path).get("x") is None


def test_json_file_store_rejects_non_object(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(ValueError):
        JsonFileStore(path).get("x")


def test_collections_round_trip(store, sample_areas):
    assert read_areas(store) == []
    write_areas(store, sample_areas)
    assert read_areas(store) == sample_areas
    assert json.loads(store.get(AREAS_KEY))[0]["pricePerSquareMeter"] == 120.5


def test_collection_must_be_a_list(store):
    store.set("loteamentos-users", '{"id": "u1"}')
    with pytest.raises(ValueError):
        read_users(store)


def test_json_file_store_concurrent_writes(tmp_path):
    path = tmp_path / "storage.json"
    errors = []

    def worker(n: int) -> None:
        s = JsonFileStore(path)
        try:
            for i in range(30):
                s.set(f"k{n}-{i}", str(i))
        except Exception as e:  # collected for the assertion below
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(JsonFileStore(path).keys()) == 240
    assert [p.name for p in tmp_path.iterdir()] == ["storage.json"]
