from datetime import date

import pytest

from loteamentos.services.report_service import (
    REPORT_COLUMNS,
    ReportFilters,
    build_report,
    render_report_html,
    report_csv,
    report_filename,
)


def test_build_report_applies_filters(sample_areas):
    report = build_report(sample_areas, ReportFilters(broker="joão", start=date(2024, 2, 1)))
    assert [a["name"] for a in report["areas"]] == ["Polo Rodovia"]
    assert report["summary"]["total_areas"] == 1
    assert report["brokers"] == ["João Silva", "Maria Souza"]
    assert report["filters"]["start"] == "2024-02-01"


def test_report_csv(sample_areas):
    text = report_csv(sample_areas)
    lines = text.strip("\n").split("\n")
    assert lines[0] == ",".join(f'"{c}"' for c in REPORT_COLUMNS)
    assert len(lines) == 4
    assert '"Fazenda Boa Vista","Condomínio"' in lines[1]
    assert '"15/01/2024"' in lines[1]


def test_report_filename():
    assert report_filename(date(2024, 7, 1)) == "relatorio_areas_2024-07-01.csv"


def test_render_report_html(sample_areas):
    html = render_report_html(sample_areas, ReportFilters(status="Prospectado"))
    assert "Gleba Norte" in html
    assert "Fazenda Boa Vista" not in html
    assert "R$ 1.440.000,00" in html
    assert "4/4" in html


def test_render_report_html_escapes_text(sample_areas):
    html = render_report_html(sample_areas, ReportFilters(broker="<script>"))
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_render_report_html_missing_template(sample_areas, tmp_path):
    with pytest.raises(FileNotFoundError):
        render_report_html(sample_areas, template_html_path=str(tmp_path / "none.html.j2"))
