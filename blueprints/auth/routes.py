# blueprints/auth/routes.py
from __future__ import annotations
import logging
from functools import wraps
from typing import Callable, Optional

from flask import (
    Blueprint, request, jsonify, redirect, url_for,
    render_template, abort, flash
)
from flask_login import login_required, current_user
from pydantic import ValidationError

from backend_api import BackendError, BackendUnauthorized
from backend_api.errors import DEFAULT_MESSAGE
from extensions import backend, login_manager
from models import Role, SessionUser
from blueprints.helpers import flash_backend, flash_invalid
from .schemas import LoginIn, RegisterIn
from .session import end_session, load_session, start_session

log = logging.getLogger(__name__)

bp = Blueprint("auth", __name__, template_folder="../../templates", static_folder="../../static")

@login_manager.user_loader
def load_user(uid: str) -> Optional[SessionUser]:
    auth = load_session()
    if auth is None or str(auth.user_id) != str(uid):
        return None
    return auth.user()

# ---------- декораторы ролей ----------
def role_required(*roles: str) -> Callable:
    allowed = {r.value if isinstance(r, Role) else r for r in roles}

    def decorator(fn: Callable):
        @wraps(fn)
        @login_required
        def wrapper(*args, **kwargs):
            if getattr(current_user, "role", None) not in allowed:
                abort(403)
            return fn(*args, **kwargs)
        return wrapper
    return decorator

admin_required = role_required(Role.ADMIN)
teacher_required = role_required(Role.TEACHER)
student_required = role_required(Role.STUDENT)

def dashboard_url_for(role: Optional[str]) -> str:
    parsed = Role.parse(role)
    if parsed is Role.ADMIN:
        return url_for("admin.dashboard")
    if parsed is Role.TEACHER:
        return url_for("teacher.dashboard")
    if parsed is Role.STUDENT:
        return url_for("student.dashboard")
    return url_for("core.home")

# ---------- обработчики 401/403 ----------
@login_manager.unauthorized_handler
def _unauth():
    if request.path.startswith("/api/"):
        return jsonify({"error": "unauthorized"}), 401
    return redirect(url_for("auth.login"))

@bp.app_errorhandler(BackendUnauthorized)
def _backend_unauthorized(ex: BackendUnauthorized):
    # токен протух или отозван: гасим сессию целиком
    log.info("backend rejected token", extra={"event": "forced_logout", "path": request.path})
    end_session()
    if request.path.startswith("/api/"):
        return jsonify({"error": "unauthorized"}), 401
    flash("Сессия истекла, войдите снова", "warning")
    return redirect(url_for("auth.login"))

@bp.app_errorhandler(403)
def _forbidden(e):
    if request.path.startswith("/api/"):
        return jsonify({"error": "forbidden"}), 403
    return render_template("errors/403.html"), 403

@bp.app_errorhandler(BackendError)
def _backend_failed(ex: BackendError):
    # сюда попадает только то, что view не перехватил сам
    log.warning("unhandled backend error", extra={"event": "backend_error", "path": request.path,
                                                  "status": ex.status})
    if request.path.startswith("/api/"):
        return jsonify({"error": "backend_error", "message": ex.message or DEFAULT_MESSAGE}), 502
    return render_template("errors/backend.html", error=ex), 502

# ---------- SSR ----------
@bp.route("/login", methods=["GET", "POST"])
def login():
    if request.method == "GET":
        if current_user.is_authenticated:
            # проверяем, что токен ещё жив
            try:
                me = backend.get_current_user()
            except BackendError:
                end_session()
            else:
                return redirect(dashboard_url_for(me.get("role") or current_user.role))
        return render_template("auth/login.html")

    try:
        form = LoginIn.model_validate(request.form.to_dict())
    except ValidationError as ex:
        flash_invalid(ex)
        return render_template("auth/login.html", username=request.form.get("username", "")), 400

    try:
        data = backend.login(form.username, form.password)
    except (BackendError, BackendUnauthorized) as ex:
        # 401 здесь значит неверный пароль, а не протухший токен
        flash_backend(ex, "Неверное имя пользователя или пароль")
        return render_template("auth/login.html", username=form.username), 401

    token = data.get("access_token") or data.get("accessToken") or data.get("token")
    if not token:
        flash("Сервер не вернул токен доступа", "error")
        return render_template("auth/login.html", username=form.username), 502

    user_id, role, username = data.get("id"), data.get("role"), form.username
    if user_id is None or not role:
        # старые версии backend отдают только токен; сессию пишем только с полным профилем
        try:
            me = backend.get_current_user(token=token)
        except (BackendError, BackendUnauthorized) as ex:
            log.warning("login profile failed", extra={"event": "login_failed", "path": request.path})
            flash_backend(ex, "Не удалось получить профиль пользователя")
            return render_template("auth/login.html", username=form.username), 502
        if me.get("id") is None:
            flash("Не удалось получить профиль пользователя", "error")
            return render_template("auth/login.html", username=form.username), 502
        user_id, role = me["id"], me.get("role") or ""
        username = me.get("username") or username
    user = start_session(token, user_id, role, username)
    log.info("login", extra={"event": "login", "path": request.path})
    return redirect(dashboard_url_for(user.role))

@bp.route("/register", methods=["GET", "POST"])
def register():
    if current_user.is_authenticated:
        return redirect(url_for("core.dashboard"))
    if request.method == "GET":
        return render_template("auth/register.html", form={})

    try:
        form = RegisterIn.model_validate(request.form.to_dict())
    except ValidationError as ex:
        flash_invalid(ex)
        return render_template("auth/register.html", form=request.form), 400

    try:
        backend.register_user(form.username, form.password, form.first_name, form.last_name)
    except BackendError as ex:
        flash_backend(ex, "Произошла ошибка, попробуйте ещё раз")
        return render_template("auth/register.html", form=request.form), 400
    flash("Регистрация прошла успешно, теперь можно войти", "success")
    return redirect(url_for("auth.login"))

@bp.post("/logout")
def logout():
    end_session()
    return redirect(url_for("auth.login"))
