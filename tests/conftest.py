import os
import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

import importlib
from datetime import datetime, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from loteamentos.core.models import Area, AreaStatus, AreaType, Checklist, HistoryEntry
from loteamentos.infra.storage import MemoryStore

SEED_PASSWORD = "Seed@Pass1"


class FixedClock:
    """Callable clock the tests move forward by hand."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc))


@pytest.fixture()
def sample_areas() -> list:
    """Three areas covering every type, an open/closed status and multi-line text."""
    return [
        Area(
            id="1705312800000abc123xyz",
            name="Fazenda Boa Vista",
            type=AreaType.CONDOMINIUM,
            size=1500.0,
            broker="João Silva",
            status=AreaStatus.INTEREST,
            price_per_square_meter=120.5,
            total_value=180750.0,
            created_at="2024-01-15T10:00:00.000Z",
            updated_at="2024-01-15T10:00:00.000Z",
            next_action="Ligar para o proprietário",
            next_action_date="2024-01-20",
            observations='Linha 1\nLinha 2 com "aspas", e vírgula',
            attachments=["att1", "att2"],
            checklist=Checklist(visita_tecnica=True),
        ),
        Area(
            id="1705399200000def456uvw",
            name="Gleba Norte",
            type=AreaType.OPEN,
            size=32000.0,
            broker="Maria Souza",
            status=AreaStatus.PROSPECTED,
            price_per_square_meter=45.0,
            total_value=1440000.0,
            created_at="2024-02-01T12:30:00.000Z",
            updated_at="2024-03-01T08:00:00.000Z",
            checklist=Checklist(
                visita_tecnica=True,
                levantamento_documental=True,
                proposta_apresentada=True,
                aprovacao_gestor=True,
            ),
        ),
        Area(
            id="1705485600000ghi789rst",
            name="Polo Rodovia",
            type=AreaType.LOGISTICS,
            size=80000.0,
            broker="João Silva",
            status=AreaStatus.PROSPECTING,
            price_per_square_meter=0.0,
            total_value=0.0,
            created_at="2024-03-10T09:15:00.000Z",
            updated_at="2024-03-10T09:15:00.000Z",
            next_action="Enviar proposta",
            next_action_date="2024-03-12",
            location="Rodovia SP-330, km 98\nJundiaí",
            area_size="8 hectares",
        ),
    ]


@pytest.fixture()
def sample_history() -> list:
    return [
        HistoryEntry(
            id="h1",
            area_id="1705399200000def456uvw",
            area_name="Gleba Norte",
            user="Jorge Pereira",
            date="2024-02-10T10:00:00.000Z",
            previous_status="Interesse",
            new_status="Em Prospecção",
        ),
        HistoryEntry(
            id="h2",
            area_id="1705399200000def456uvw",
            area_name="Gleba Norte",
            user="Jorge Pereira",
            date="2024-03-01T08:00:00.000Z",
            previous_status="Em Prospecção",
            new_status="Prospectado",
        ),
    ]


@pytest.fixture()
def app_module(tmp_path: Path, monkeypatch):
    """The FastAPI module reloaded against a temporary data dir."""
    data_dir = tmp_path / "data"
    monkeypatch.setenv("LOT_DATA_DIR", str(data_dir))
    monkeypatch.delenv("LOT_STORE_FILE", raising=False)
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("LOT_SEED_PASSWORD", SEED_PASSWORD)
    monkeypatch.delenv("LOT_SEED_USERS_PATH", raising=False)

    import loteamentos.auth.users as users_module
    import loteamentos.app as module

    importlib.reload(users_module)
    importlib.reload(module)
    return module


@pytest.fixture()
def client(app_module):
    with TestClient(app_module.app) as c:
        yield c


@pytest.fixture()
def admin_client(client):
    r = client.post("/login", data={"email": "ti@expandhurbanismo.com.br", "password": SEED_PASSWORD})
    assert r.status_code == 200, r.text
    return client
