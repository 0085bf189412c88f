# blueprints/groups/routes.py
from __future__ import annotations
from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for
from pydantic import ValidationError

from backend_api import BackendError, Page
from extensions import backend
from models import CourseGroup, Group
from blueprints.auth.routes import admin_required
from blueprints.course_groups.routes import lookups as course_group_lookups
from blueprints.helpers import (
    flash_backend, flash_bulk_result, flash_invalid, list_args, page_size, parse_ids
)
from .schemas import GroupIn
from .services import Roster, filter_roster, parse_usernames, reconcile_roster

bp = Blueprint("groups", __name__, template_folder="../../templates", static_folder="../../static")

def _back():
    page, search = list_args()
    return redirect(url_for("groups.index", page=page, search=search or None))

def _back_to_roster(group_id: int):
    return redirect(url_for("groups.students", group_id=group_id, q=request.args.get("q") or None))

def load_roster(group_id: int) -> Roster:
    return reconcile_roster(backend.get_group_students(group_id))

# ---------- группы ----------
@bp.get("/")
@admin_required
def index():
    page, search = list_args()
    try:
        groups = backend.list_groups(page, page_size(), search).map(Group.model_validate)
    except BackendError as ex:
        flash_backend(ex, "Не удалось загрузить группы")
        groups = Page(page=page, limit=page_size())
    return render_template("groups/index.html", groups=groups, search=search)

@bp.post("/")
@admin_required
def create():
    try:
        form = GroupIn.model_validate(request.form.to_dict())
    except ValidationError as ex:
        flash_invalid(ex)
        return _back()
    try:
        backend.create_group(form.name)
    except BackendError as ex:
        flash_backend(ex, "Не удалось создать группу")
    else:
        flash("Группа создана", "success")
    return _back()

@bp.post("/<int:group_id>")
@admin_required
def update(group_id: int):
    try:
        form = GroupIn.model_validate(request.form.to_dict())
    except ValidationError as ex:
        flash_invalid(ex)
        return _back()
    try:
        backend.update_group(group_id, form.name)
    except BackendError as ex:
        flash_backend(ex, "Не удалось переименовать группу")
    else:
        flash("Группа обновлена", "success")
    return _back()

@bp.post("/<int:group_id>/delete")
@admin_required
def delete(group_id: int):
    try:
        backend.delete_group(group_id)
    except BackendError as ex:
        flash_backend(ex, "Не удалось удалить группу")
    else:
        flash("Группа удалена", "success")
    return _back()

# ---------- состав группы ----------
@bp.get("/<int:group_id>/students")
@admin_required
def students(group_id: int):
    term = request.args.get("q", "")
    try:
        roster = load_roster(group_id)
    except BackendError as ex:
        flash_backend(ex, "Ошибка при получении студентов")
        roster = Roster()
    try:
        assignments = [
            CourseGroup.model_validate(g)
            for g in backend.list_course_groups(1, current_app.config.get("LOOKUP_LIMIT", 100),
                                                group_id=group_id).items
        ]
    except BackendError as ex:
        flash_backend(ex, "Ошибка при получении курсов группы")
        assignments = []
    courses, professors = course_group_lookups()
    return render_template(
        "groups/students.html",
        group_id=group_id,
        group_name=request.args.get("name"),
        roster=roster,
        enrolled=filter_roster(roster.enrolled, term),
        term=term,
        assignments=assignments,
        courses=courses,
        professors=professors,
    )

@bp.post("/<int:group_id>/students/bulk")
@admin_required
def add_students(group_id: int):
    usernames = parse_usernames(request.form.get("usernames"))
    if not usernames:
        flash("Введите хотя бы одно корректное имя пользователя", "warning")
        return _back_to_roster(group_id)
    try:
        data = backend.add_students_to_group_by_username(group_id, usernames)
    except BackendError as ex:
        flash_backend(ex, "Ошибка при добавлении студентов")
    else:
        flash_bulk_result(data, "В группу добавлено студентов: {count}")
    return _back_to_roster(group_id)

@bp.post("/<int:group_id>/students/remove")
@admin_required
def remove_students(group_id: int):
    ids = parse_ids(request.form.getlist("student_ids"))
    if not ids:
        flash("Не выбрано ни одного студента", "warning")
        return _back_to_roster(group_id)
    try:
        backend.remove_students_from_group(group_id, ids)
    except BackendError as ex:
        flash_backend(ex, "Ошибка при удалении студентов")
    else:
        flash("Выбранные студенты удалены из группы", "success")
    return _back_to_roster(group_id)
