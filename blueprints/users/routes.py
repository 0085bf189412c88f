# blueprints/users/routes.py
from __future__ import annotations
from flask import Blueprint, current_app, flash, jsonify, redirect, render_template, request, url_for
from pydantic import ValidationError

from backend_api import BackendError
from extensions import backend
from models import Group, Role, User
from blueprints.auth.routes import admin_required
from blueprints.helpers import (
    flash_backend, flash_invalid, list_args, optional_int, page_size, parse_ids
)
from .schemas import UserIn, UserUpdateIn
from .services import UserListing, changed_fields, summarize_upload

bp = Blueprint("users", __name__, template_folder="../../templates", static_folder="../../static")
api_bp = Blueprint("users_api", __name__)

def _back():
    # возвращаемся на ту же страницу с теми же фильтрами
    args = {k: v for k, v in request.args.items() if k in ("page", "search", "role", "group_id") and v}
    return redirect(url_for("users.index", **args))

def _listing() -> UserListing:
    page, search = list_args()
    return UserListing(
        backend,
        limit=page_size(),
        page=page,
        search=search,
        role=request.args.get("role", ""),
        group_id=optional_int(request.args.get("group_id")),
    )

def _report(listing: UserListing, ok: bool, success: str):
    if ok:
        flash(success, "success")
    else:
        flash(listing.error, "error")
    return _back()

def _groups():
    try:
        page = backend.list_groups(1, current_app.config.get("LOOKUP_LIMIT", 100))
    except BackendError:
        return []
    return [Group.model_validate(g) for g in page.items]

# ---------- SSR ----------
@bp.get("/")
@admin_required
def index():
    listing = _listing()
    listing.fetch_users()
    if listing.error:
        flash(listing.error, "error")
    return render_template(
        "users/index.html",
        listing=listing,
        groups=_groups(),
        roles=list(Role),
        upload=None,
    )

@bp.post("/")
@admin_required
def create():
    try:
        form = UserIn.model_validate(request.form.to_dict())
    except ValidationError as ex:
        flash_invalid(ex)
        return _back()
    listing = _listing()
    ok = listing.create_user(form.username, form.password, form.role.value, form.first_name,
                             form.last_name, form.group_id, refresh=False)
    return _report(listing, ok, "Пользователь успешно создан")

@bp.post("/<int:user_id>")
@admin_required
def update(user_id: int):
    try:
        form = UserUpdateIn.model_validate(request.form.to_dict())
    except ValidationError as ex:
        flash_invalid(ex)
        return _back()
    current = User(
        id=user_id,
        username=request.form.get("orig_username"),
        role=request.form.get("orig_role"),
        first_name=request.form.get("orig_first_name") or "",
        last_name=request.form.get("orig_last_name") or "",
    )
    data = changed_fields(current, form.username, form.role.value, form.first_name,
                          form.last_name, form.password)
    if not data:
        flash("Изменений нет", "info")
        return _back()
    listing = _listing()
    ok = listing.update_user(user_id, data, refresh=False)
    return _report(listing, ok, "Пользователь успешно обновлён")

@bp.post("/<int:user_id>/delete")
@admin_required
def delete(user_id: int):
    listing = _listing()
    ok = listing.delete_user(user_id, refresh=False)
    return _report(listing, ok, "Пользователь успешно удалён")

@bp.post("/bulk-delete")
@admin_required
def bulk_delete():
    ids = parse_ids(request.form.getlist("user_ids"))
    if not ids:
        flash("Не выбрано ни одного пользователя", "warning")
        return _back()
    listing = _listing()
    ok = listing.delete_users(ids, refresh=False)
    return _report(listing, ok, f"Удалено пользователей: {len(ids)}")

@bp.post("/students/delete-all")
@admin_required
def delete_all_students():
    if request.form.get("confirm") != "yes":
        flash("Подтвердите удаление всех студентов", "warning")
        return _back()
    try:
        backend.delete_all_students()
    except BackendError as ex:
        flash_backend(ex, "Не удалось удалить студентов")
    else:
        flash("Все студенты удалены", "success")
    return _back()

@bp.post("/upload")
@admin_required
def upload_excel():
    upload = request.files.get("file")
    if not upload or not upload.filename:
        flash("Выберите файл Excel или CSV", "warning")
        return _back()
    try:
        data = backend.upload_users_excel(upload)
    except BackendError as ex:
        flash_backend(ex, "Ошибка при загрузке файла")
        return _back()

    summary = summarize_upload(data)
    if summary["created"]:
        flash(f"Новых пользователей зарегистрировано: {len(summary['created'])}", "success")
    if summary["reactivated"]:
        flash(f"Повторно активировано: {len(summary['reactivated'])}", "success")
    for d in summary["duplicates"]:
        flash(f"{d.get('firstName', '')} {d.get('lastName', '')} ({d.get('username')}): {d.get('message', '')}",
              "warning")
    for err in summary["errors"]:
        flash(err, "error")

    listing = UserListing(backend, limit=page_size())
    listing.fetch_users()
    return render_template("users/index.html", listing=listing, groups=_groups(),
                           roles=list(Role), upload=summary)

# ---------- API (живой поиск) ----------
@api_bp.get("/users")
@admin_required
def api_users():
    page, search = list_args()
    limit = min(100, optional_int(request.args.get("limit")) or page_size())
    listing = UserListing(backend, limit=limit)
    ok = listing.fetch_users(page=page, search=search, role=request.args.get("role", ""),
                             group_id=optional_int(request.args.get("group_id")))
    if not ok:
        return jsonify({"error": listing.error}), 502
    return jsonify({
        "items": [u.model_dump(mode="json", by_alias=True) for u in listing.users],
        "meta": {"page": listing.filters.page, "limit": limit, "totalPages": listing.total_pages},
    })
