from __future__ import annotations
from flask import Blueprint, current_app, jsonify, render_template

from backend_api import BackendError
from extensions import backend
from blueprints.auth.routes import admin_required
from blueprints.helpers import flash_backend
from .services import QuickStats, collect_stats

bp = Blueprint("admin", __name__, template_folder="../../templates", static_folder="../../static")
api_bp = Blueprint("admin_api", __name__)

# ---------- PAGES ----------
@bp.get("/")
@admin_required
def dashboard():
    try:
        stats = collect_stats(backend, current_app.config.get("STATS_LIMIT", 1000))
    except BackendError as ex:
        flash_backend(ex, "Не удалось получить статистику")
        stats = QuickStats()
    return render_template("admin/dashboard.html", stats=stats)

# ---------- API (виджет статистики) ----------
@api_bp.get("/admin/stats")
@admin_required
def stats():
    s = collect_stats(backend, current_app.config.get("STATS_LIMIT", 1000))
    return jsonify(s.to_json())
