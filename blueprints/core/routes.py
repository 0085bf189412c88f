from __future__ import annotations
import json
import logging
import time
from datetime import datetime, timezone
from uuid import uuid4

from flask import current_app, g, jsonify, redirect, render_template, request
from flask_login import current_user, login_required
from flask_wtf.csrf import generate_csrf
from werkzeug.wrappers.response import Response

from extensions import csrf
from . import api_bp, bp
from .filters import register_filters

log = logging.getLogger(__name__)

VISITOR_COOKIE = "visitor_id"
VISITOR_MAX_AGE = 60 * 60 * 24 * 180  # полгода

# поля из extra=..., которые попадают в JSON-строку лога
LOG_FIELDS = ("event", "method", "path", "status", "duration_ms", "visitor_id", "user_id")

def _iso_now(timespec: str = "milliseconds") -> str:
    return datetime.now(timezone.utc).isoformat(timespec=timespec).replace("+00:00", "Z")

class JSONFormatter(logging.Formatter):
    """One JSON object per line: both page requests and backend calls."""

    def format(self, record: logging.LogRecord) -> str:
        line = {
            "ts": _iso_now(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        line.update({k: getattr(record, k) for k in LOG_FIELDS if hasattr(record, k)})
        if record.exc_info:
            line["exc"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=False)

def _install_json_logging(app) -> None:
    # корневой логгер: сюда же пишут backend_api и все blueprints
    root = logging.getLogger()
    if not any(isinstance(h.formatter, JSONFormatter) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        root.addHandler(handler)
    root.setLevel(logging.DEBUG if app.debug else logging.INFO)

@bp.record_once
def _on_register(state):
    _install_json_logging(state.app)
    register_filters(state.app)

# ---------- запрос: visitor id + время ответа ----------
@bp.before_app_request
def _start_request():
    g.request_started = time.monotonic()
    g.visitor_id = request.cookies.get(VISITOR_COOKIE)
    g.new_visitor = not g.visitor_id
    if g.new_visitor:
        g.visitor_id = uuid4().hex

@bp.after_app_request
def _finish_request(response: Response):
    if g.get("new_visitor"):
        response.set_cookie(
            VISITOR_COOKIE, g.visitor_id,
            max_age=VISITOR_MAX_AGE, secure=request.is_secure, samesite="Lax",
        )
    started = g.get("request_started")
    log.info("request handled", extra={
        "event": "http_request",
        "method": request.method,
        "path": request.path,
        "status": response.status_code,
        "duration_ms": int((time.monotonic() - started) * 1000) if started is not None else None,
        "visitor_id": g.get("visitor_id"),
        "user_id": getattr(current_user, "id", None),
    })
    return response

@bp.app_context_processor
def _inject_ui_settings():
    # границы шкалы оценок и задержка поиска нужны и в шаблонах, и в app.js
    cfg = current_app.config
    return {
        "score_min": cfg.get("SCORE_MIN", 0),
        "score_max": cfg.get("SCORE_MAX", 100),
        "search_debounce_ms": cfg.get("SEARCH_DEBOUNCE_MS", 500),
    }

# ---------- страницы ----------
@bp.get("/")
def home():
    return render_template("core/index.html")

@bp.get("/dashboard")
@login_required
def dashboard():
    from blueprints.auth.routes import dashboard_url_for
    return redirect(dashboard_url_for(current_user.role))

# ---------- служебное ----------
@api_bp.get("/csrf")
@csrf.exempt
def get_csrf():
    # для клиентов без серверной страницы: meta csrf-token у них нет
    token = generate_csrf()
    resp = jsonify({"csrf": token})
    resp.set_cookie("csrf_token", token, samesite="Lax")
    return resp

@bp.get("/health")
def health():
    return jsonify({
        "status": "ok",
        "ts": _iso_now("seconds"),
        "visitor_id": g.get("visitor_id"),
        "backend": current_app.config.get("BACKEND_API_URL"),
    })
