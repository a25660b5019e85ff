# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import csv
import io
import os
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
from jinja2 import Environment, FileSystemLoader, select_autoescape

from loteamentos.core.models import Area, AreaStatus, AreaType
from loteamentos.core.utils import dated_filename, format_area_br, format_brl, format_date_br, format_number
from loteamentos.services.dashboard_service import summarize
from loteamentos.services.record_service import brokers, filter_areas

BASE_DIR = Path(__file__).resolve().parents[1]
REPORT_TEMPLATE_HTML = Path(
    os.getenv("LOT_REPORT_TEMPLATE_HTML", str(BASE_DIR / "report_templates" / "areas_report.html.j2"))
).resolve()

REPORT_COLUMNS = [
    "Nome da Área",
    "Tipo",
    "Localização",
    "Tamanho da Área",
    "Tamanho (m²)",
    "Corretor",
    "Status",
    "Valor por m²",
    "Valor da Área",
    "Data de Cadastro",
    "Próxima Ação",
    "Data da Próxima Ação",
    "Observações",
]


@dataclass(frozen=True)
class ReportFilters:
    status: str = ""
    type: str = ""
    broker: str = ""
    start: Optional[date] = None
    end: Optional[date] = None

    def apply(self, areas: Sequence[Area]) -> List[Area]:
        return filter_areas(
            areas,
            status=self.status or None,
            type=self.type or None,
            broker=self.broker,
            start=self.start,
            end=self.end,
        )

    def describe(self) -> Dict[str, str]:
        return {
            "status": self.status,
            "type": self.type,
            "broker": self.broker,
            "start": self.start.isoformat() if self.start else "",
            "end": self.end.isoformat() if self.end else "",
        }


def build_report(areas: Sequence[Area], filters: Optional[ReportFilters] = None) -> Dict[str, Any]:
    """Filtered areas plus their summary and the broker list of the whole set."""
    f = filters or ReportFilters()
    selected = f.apply(areas)
    return {
        "filters": f.describe(),
        "summary": summarize(selected),
        "brokers": brokers(areas),
        "areas": [a.to_dict() for a in selected],
    }


def _one_line(text: str) -> str:
    return " ".join(text.splitlines())


def report_frame(areas: Sequence[Area]) -> pd.DataFrame:
    rows = [
        [
            _one_line(a.name),
            a.type.value,
            _one_line(a.location),
            _one_line(a.area_size),
            format_number(float(a.size)),
            _one_line(a.broker),
            a.status.value,
            format_number(float(a.price_per_square_meter)),
            format_number(float(a.total_value)),
            format_date_br(a.created_at),
            _one_line(a.next_action),
            format_date_br(a.next_action_date),
            _one_line(a.observations),
        ]
        for a in areas
    ]
    return pd.DataFrame(rows, columns=REPORT_COLUMNS)


def report_csv(areas: Sequence[Area]) -> str:
    """Human-readable report CSV (every field quoted, `\\n` line ends)."""
    buf = io.StringIO()
    report_frame(areas).to_csv(buf, index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
    return buf.getvalue()


def report_filename(day: Optional[date] = None) -> str:
    return dated_filename("relatorio_areas", day)


def render_report_html(
    areas: Sequence[Area],
    filters: Optional[ReportFilters] = None,
    *,
    template_html_path: Optional[str] = None,
) -> str:
    """Render the filtered report through the Jinja2 HTML template."""
    tpl_path = Path(template_html_path).resolve() if template_html_path else REPORT_TEMPLATE_HTML
    if not tpl_path.exists():
        raise FileNotFoundError(f"Modelo de relatório não encontrado: {tpl_path}")

    env = Environment(
        loader=FileSystemLoader(str(tpl_path.parent)),
        autoescape=select_autoescape(["html", "xml", "html.j2"]),
    )
    env.filters["brl"] = format_brl
    env.filters["m2"] = format_area_br
    env.filters["date_br"] = format_date_br
    tpl = env.get_template(tpl_path.name)

    f = filters or ReportFilters()
    selected = f.apply(areas)
    context: Dict[str, Any] = {
        "generated_at": datetime.now().strftime("%d/%m/%Y %H:%M"),
        "filters": f.describe(),
        "summary": summarize(selected),
        "statuses": [s.value for s in AreaStatus],
        "types": [t.value for t in AreaType],
        "areas": selected,
    }
    return tpl.render(**context)
