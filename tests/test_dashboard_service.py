from datetime import datetime, timezone

from loteamentos.services.dashboard_service import build_dashboard, summarize


def test_summarize(sample_areas):
    s = summarize(sample_areas)
    assert s["total_areas"] == 3
    assert s["total_size"] == 113500.0
    assert s["total_value"] == 1620750.0
    assert s["prospected_areas"] == 1
    assert s["success_rate"] == 33.3
    assert s["status_counts"] == {"Interesse": 1, "Em Prospecção": 1, "Prospectado": 1, "Perdido": 0}
    assert s["type_counts"] == {"Condomínio": 1, "Aberto": 1, "Logístico": 1}


def test_summarize_empty():
    s = summarize([])
    assert s["total_areas"] == 0
    assert s["success_rate"] == 0.0
    assert s["status_counts"]["Perdido"] == 0


def test_build_dashboard(sample_areas, sample_history):
    d = build_dashboard(sample_areas, sample_history, now=datetime(2024, 3, 15, tzinfo=timezone.utc))
    assert d["overdue_count"] == 2
    assert [a["name"] for a in d["overdue_areas"]] == ["Fazenda Boa Vista", "Polo Rodovia"]
    assert [h["id"] for h in d["recent_history"]] == ["h2", "h1"]
