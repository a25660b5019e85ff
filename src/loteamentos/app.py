# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Body, Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, JSONResponse, Response

from loteamentos.auth.session import (
    COOKIE_NAME,
    DEFAULT_MAX_AGE_SECONDS,
    SessionStore,
    new_session_id,
    session_key,
    sign_session,
)
from loteamentos.auth.users import UserDirectory
from loteamentos.core.errors import AreaNotFoundError, AreaValidationError, CsvImportError
from loteamentos.core.models import SessionUser
from loteamentos.infra.collections_repo import read_areas, read_history
from loteamentos.infra.storage import JsonFileStore
from loteamentos.logging_config import setup_logging
from loteamentos.permissions import (
    cookie_settings,
    current_user_optional,
    require_role,
    require_user,
    session_for_request,
)
from loteamentos.services import auth_service
from loteamentos.services.crud_service import (
    create_area,
    delete_area,
    get_area,
    list_areas,
    status_history,
    update_area,
)
from loteamentos.services.dashboard_service import build_dashboard
from loteamentos.services.data_service import (
    CSV_MEDIA_TYPE,
    CsvExport,
    decode_upload,
    export_areas,
    export_history,
    import_areas,
    import_history,
)
from loteamentos.services.report_service import (
    ReportFilters,
    build_report,
    render_report_html,
    report_csv,
    report_filename,
)

logger = logging.getLogger(__name__)

DATA_DIR = Path(os.getenv("LOT_DATA_DIR", "data")).resolve()
STORE_FILE = Path(os.getenv("LOT_STORE_FILE", str(DATA_DIR / "storage.json"))).resolve()
STORE = JsonFileStore(STORE_FILE)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    created = UserDirectory(app.state.store).seed_defaults()
    if created:
        logger.info("First run: %d default account(s) created in %s", created, STORE_FILE)
    yield


app = FastAPI(title="Prospecção de Loteamentos", lifespan=lifespan)
app.state.store = STORE


@app.middleware("http")
async def _auth_middleware(request: Request, call_next):
    request.state.user = current_user_optional(request)
    return await call_next(request)


# ------------------ Error mapping ------------------


@app.exception_handler(AreaValidationError)
async def _area_validation_handler(request: Request, exc: AreaValidationError):
    return JSONResponse(status_code=400, content={"errors": exc.errors})


@app.exception_handler(AreaNotFoundError)
async def _area_not_found_handler(request: Request, exc: AreaNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(CsvImportError)
async def _csv_import_handler(request: Request, exc: CsvImportError):
    body: Dict[str, Any] = {"detail": str(exc)}
    if getattr(exc, "line", None) is not None:
        body["line"] = exc.line
    if getattr(exc, "missing", None):
        body["missing"] = exc.missing
    return JSONResponse(status_code=400, content=body)


def _csv_download(export: CsvExport) -> Response:
    return Response(
        content=export.encode(),
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


def _directory(request: Request) -> UserDirectory:
    return UserDirectory(request.app.state.store)


# ------------------ Auth ------------------


@app.post("/login")
def login_post(request: Request, email: str = Form(""), password: str = Form("")):
    sid = new_session_id()
    sessions = SessionStore(request.app.state.store, key=session_key(sid))
    result = auth_service.login(_directory(request), sessions, email, password)
    if not result.ok:
        return JSONResponse(status_code=401, content={"errors": result.errors})
    resp = JSONResponse(content={"user": result.user.to_dict()})
    resp.set_cookie(COOKIE_NAME, sign_session(sid), max_age=DEFAULT_MAX_AGE_SECONDS, **cookie_settings())
    return resp


@app.post("/logout")
def logout_post(request: Request):
    sessions = session_for_request(request)
    if sessions is not None:
        auth_service.logout(sessions)
    resp = JSONResponse(content={"ok": True})
    resp.delete_cookie(COOKIE_NAME)
    return resp


@app.post("/register")
def register_post(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    confirm_password: str = Form(""),
):
    result = auth_service.register(_directory(request), name, email, password, confirm_password)
    if not result.ok:
        return JSONResponse(status_code=400, content={"errors": result.errors})
    return JSONResponse(status_code=201, content={"user": result.user.to_dict()})


@app.post("/forgot-password")
def forgot_password_post(request: Request, email: str = Form("")):
    result = auth_service.forgot_password(_directory(request), email)
    if not result.ok:
        return JSONResponse(status_code=400, content={"errors": result.errors})
    return {"ok": True, "email": result.user.email}


@app.post("/change-password")
def change_password_post(
    request: Request,
    current_password: str = Form(""),
    new_password: str = Form(""),
    confirm_password: str = Form(""),
    user: SessionUser = Depends(require_user),
):
    result = auth_service.change_password(
        _directory(request), user.id, current_password, new_password, confirm_password
    )
    if not result.ok:
        return JSONResponse(status_code=400, content={"errors": result.errors})
    return {"ok": True}


@app.get("/me")
def me(user: SessionUser = Depends(require_user)):
    return {"user": user.to_dict()}


# ------------------ Areas ------------------


@app.get("/areas")
def areas_list(
    request: Request,
    status: str = "",
    type: str = "",
    broker: str = "",
    user: SessionUser = Depends(require_user),
):
    selected = list_areas(request.app.state.store, status=status or None, type=type or None, broker=broker)
    return {"areas": [a.to_dict() for a in selected]}


@app.post("/areas", status_code=201)
def areas_create(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    user: SessionUser = Depends(require_user),
):
    area = create_area(request.app.state.store, payload)
    return {"area": area.to_dict()}


@app.get("/areas/{area_id}")
def areas_get(request: Request, area_id: str, user: SessionUser = Depends(require_user)):
    area = get_area(request.app.state.store, area_id)
    return {"area": area.to_dict(), "history": [h.to_dict() for h in status_history(request.app.state.store, area_id)]}


@app.put("/areas/{area_id}")
def areas_update(
    request: Request,
    area_id: str,
    payload: Dict[str, Any] = Body(...),
    user: SessionUser = Depends(require_user),
):
    area = update_area(request.app.state.store, area_id, payload, user_label=user.name)
    return {"area": area.to_dict()}


@app.delete("/areas/{area_id}")
def areas_delete(request: Request, area_id: str, user: SessionUser = Depends(require_user)):
    delete_area(request.app.state.store, area_id)
    return {"ok": True}


@app.get("/history")
def history_list(request: Request, area_id: str = "", user: SessionUser = Depends(require_user)):
    entries = status_history(request.app.state.store, area_id or None)
    return {"history": [h.to_dict() for h in entries]}


# ------------------ Dashboard / reports ------------------


@app.get("/dashboard")
def dashboard(request: Request, user: SessionUser = Depends(require_user)):
    store = request.app.state.store
    return build_dashboard(read_areas(store), read_history(store))


def _report_filters(
    status: str = "",
    type: str = "",
    broker: str = "",
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> ReportFilters:
    return ReportFilters(status=status, type=type, broker=broker, start=start, end=end)


@app.get("/reports")
def reports(
    request: Request,
    filters: ReportFilters = Depends(_report_filters),
    user: SessionUser = Depends(require_user),
):
    return build_report(read_areas(request.app.state.store), filters)


@app.get("/reports/areas.csv")
def reports_csv(
    request: Request,
    filters: ReportFilters = Depends(_report_filters),
    user: SessionUser = Depends(require_user),
):
    selected = filters.apply(read_areas(request.app.state.store))
    return _csv_download(CsvExport(filename=report_filename(), content=report_csv(selected)))


@app.get("/reports/areas.html", response_class=HTMLResponse)
def reports_html(
    request: Request,
    filters: ReportFilters = Depends(_report_filters),
    user: SessionUser = Depends(require_user),
):
    return HTMLResponse(render_report_html(read_areas(request.app.state.store), filters))


# ------------------ CSV data management ------------------


@app.get("/export/areas.csv")
def export_areas_csv(request: Request, user: SessionUser = Depends(require_user)):
    return _csv_download(export_areas(request.app.state.store))


@app.get("/export/history.csv")
def export_history_csv(request: Request, user: SessionUser = Depends(require_user)):
    return _csv_download(export_history(request.app.state.store))


def _check_csv_upload(file: UploadFile) -> None:
    name = (file.filename or "").lower()
    if file.content_type != "text/csv" and not name.endswith(".csv"):
        raise CsvImportError("Por favor, selecione um arquivo CSV válido")


@app.post("/import/areas")
async def import_areas_post(
    request: Request,
    file: UploadFile = File(...),
    user: SessionUser = Depends(require_role("admin")),
):
    _check_csv_upload(file)
    text = decode_upload(await file.read())
    count = import_areas(request.app.state.store, text)
    return {"imported": count, "message": f"{count} área(s) importada(s) com sucesso!"}


@app.post("/import/history")
async def import_history_post(
    request: Request,
    file: UploadFile = File(...),
    user: SessionUser = Depends(require_role("admin")),
):
    _check_csv_upload(file)
    text = decode_upload(await file.read())
    count = import_history(request.app.state.store, text)
    return {"imported": count, "message": f"{count} registro(s) de histórico importado(s) com sucesso!"}
