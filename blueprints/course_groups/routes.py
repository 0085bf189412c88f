# blueprints/course_groups/routes.py
from __future__ import annotations
from flask import Blueprint, current_app, flash, jsonify, redirect, render_template, request, url_for
from pydantic import ValidationError

from backend_api import BackendError, Page
from extensions import backend
from models import Course, CourseGroup, User
from blueprints.auth.routes import admin_required
from blueprints.groups.services import Roster, filter_roster, parse_usernames, reconcile_roster
from blueprints.helpers import (
    flash_backend, flash_bulk_result, flash_invalid, list_args, optional_int, page_size, parse_ids
)
from blueprints.users.services import summarize_upload
from .schemas import CourseGroupIn

bp = Blueprint("course_groups", __name__, template_folder="../../templates", static_folder="../../static")
api_bp = Blueprint("course_groups_api", __name__)

def _back():
    nxt = request.form.get("next") or request.args.get("next")
    if nxt and nxt.startswith("/") and not nxt.startswith("//"):
        return redirect(nxt)
    page, search = list_args()
    return redirect(url_for("course_groups.index", page=page, search=search or None))

def _back_to_roster(course_group_id: int):
    return redirect(url_for("course_groups.students", course_group_id=course_group_id))

def lookups():
    """Courses and teachers for the create form."""
    limit = current_app.config.get("LOOKUP_LIMIT", 100)
    try:
        courses = [Course.model_validate(c) for c in backend.list_courses(1, limit).items]
        professors = [User.model_validate(u) for u in backend.list_users(1, limit, role="teacher").items]
    except BackendError as ex:
        flash_backend(ex, "Не удалось загрузить курсы и преподавателей")
        return [], []
    return courses, professors

def load_roster(course_group_id: int) -> Roster:
    return reconcile_roster(backend.get_course_group_students_status(course_group_id))

# ---------- список ----------
@bp.get("/")
@admin_required
def index():
    page, search = list_args()
    try:
        groups = backend.list_course_groups(page, page_size(), search).map(CourseGroup.model_validate)
    except BackendError as ex:
        flash_backend(ex, "Не удалось загрузить группы курсов")
        groups = Page(page=page, limit=page_size())
    courses, professors = lookups()
    return render_template("course_groups/index.html", groups=groups, search=search,
                           courses=courses, professors=professors)

@bp.post("/")
@admin_required
def create():
    try:
        form = CourseGroupIn.model_validate(request.form.to_dict())
    except ValidationError as ex:
        flash_invalid(ex)
        return _back()
    try:
        backend.create_course_group(form.course_id, form.professor_id, form.group_id, form.capacity)
    except BackendError as ex:
        flash_backend(ex, "Не удалось создать группу курса")
    else:
        flash("Группа курса создана", "success")
    return _back()

@bp.post("/<int:course_group_id>/delete")
@admin_required
def delete(course_group_id: int):
    try:
        backend.delete_course_group(course_group_id)
    except BackendError as ex:
        flash_backend(ex, "Ошибка при удалении группы курса")
    else:
        flash("Группа курса удалена", "success")
    return _back()

# ---------- студенты группы курса ----------
@bp.get("/<int:course_group_id>/students")
@admin_required
def students(course_group_id: int):
    term = request.args.get("q", "")
    try:
        roster = load_roster(course_group_id)
    except BackendError as ex:
        flash_backend(ex, "Ошибка при получении студентов")
        roster = Roster()
    return render_template(
        "course_groups/students.html",
        course_group_id=course_group_id,
        roster=roster,
        enrolled=filter_roster(roster.enrolled, term),
        available=filter_roster(roster.available, term),
        term=term,
    )

@bp.post("/<int:course_group_id>/students")
@admin_required
def enroll_selected(course_group_id: int):
    ids = parse_ids(request.form.getlist("student_ids"))
    if not ids:
        flash("Не выбрано ни одного студента", "warning")
        return _back_to_roster(course_group_id)
    try:
        backend.add_students_to_course_group(course_group_id, ids)
    except BackendError as ex:
        flash_backend(ex, "Ошибка при записи студентов")
    else:
        flash(f"Записано студентов: {len(ids)}", "success")
    return _back_to_roster(course_group_id)

@bp.post("/<int:course_group_id>/students/remove")
@admin_required
def unenroll(course_group_id: int):
    ids = parse_ids(request.form.getlist("student_ids"))
    if not ids:
        flash("Не выбрано ни одного студента", "warning")
        return _back_to_roster(course_group_id)
    try:
        backend.remove_students_from_course_group(course_group_id, ids)
    except BackendError as ex:
        flash_backend(ex, "Ошибка при отчислении студентов")
    else:
        flash("Студенты отчислены из группы курса", "success")
    return _back_to_roster(course_group_id)

@bp.post("/<int:course_group_id>/students/bulk")
@admin_required
def enroll_by_username(course_group_id: int):
    usernames = parse_usernames(request.form.get("usernames"))
    if not usernames:
        flash("Введите хотя бы одно корректное имя пользователя", "warning")
        return _back_to_roster(course_group_id)
    try:
        data = backend.add_students_to_course_group_by_username(course_group_id, usernames)
    except BackendError as ex:
        flash_backend(ex, "Ошибка при записи студентов")
    else:
        flash_bulk_result(data, "Успешно записано студентов: {count}")
    return _back_to_roster(course_group_id)

@bp.post("/<int:course_group_id>/students/excel")
@admin_required
def enroll_from_excel(course_group_id: int):
    # регистрируем пользователей из файла, затем пишем в группу по username
    upload = request.files.get("file")
    if not upload or not upload.filename:
        flash("Выберите файл Excel или CSV", "warning")
        return _back_to_roster(course_group_id)
    try:
        summary = summarize_upload(backend.upload_users_excel(upload))
    except BackendError as ex:
        flash_backend(ex, "Ошибка при загрузке файла")
        return _back_to_roster(course_group_id)

    for d in summary["duplicates"]:
        flash(f"{d.get('username')}: {d.get('message', '')}", "warning")
    for err in summary["errors"]:
        flash(err, "error")

    usernames = [u.get("username") for u in summary["valid"] if u.get("username")]
    if not usernames:
        flash("Нет студентов для записи", "warning")
        return _back_to_roster(course_group_id)
    try:
        data = backend.add_students_to_course_group_by_username(course_group_id, usernames)
    except BackendError as ex:
        flash_backend(ex, "Ошибка при записи студентов")
    else:
        flash_bulk_result(data, "Успешно записано студентов: {count}")
    return _back_to_roster(course_group_id)

# ---------- API ----------
@api_bp.get("/course-groups/<int:course_group_id>/roster")
@admin_required
def api_roster(course_group_id: int):
    roster = load_roster(course_group_id)
    return jsonify(roster.to_json())

@api_bp.get("/course-groups")
@admin_required
def api_course_groups():
    page, search = list_args()
    groups = backend.list_course_groups(page, page_size(), search,
                                        group_id=optional_int(request.args.get("group_id")))
    return jsonify({
        "items": [CourseGroup.model_validate(g).model_dump(mode="json", by_alias=True) for g in groups.items],
        "meta": {"page": groups.page, "limit": groups.limit, "totalPages": groups.total_pages},
    })
