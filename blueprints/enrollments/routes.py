# blueprints/enrollments/routes.py
from __future__ import annotations
from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for
from pydantic import ValidationError

from backend_api import BackendError, Page
from extensions import backend
from models import CourseGroup, Enrollment, User
from blueprints.auth.routes import admin_required
from blueprints.helpers import flash_backend, flash_invalid, list_args, page_size
from .schemas import EnrollmentIn
from .services import parse_score

bp = Blueprint("enrollments", __name__, template_folder="../../templates", static_folder="../../static")

def _back_to_scores():
    page, search = list_args()
    return redirect(url_for("enrollments.scores", page=page, search=search or None))

# ---------- новая запись на курс ----------
@bp.get("/enrollments")
@admin_required
def index():
    limit = current_app.config.get("LOOKUP_LIMIT", 100)
    try:
        students = [User.model_validate(u) for u in backend.list_users(1, limit, role="student").items]
        groups = [CourseGroup.model_validate(g) for g in backend.list_course_groups(1, limit).items]
    except BackendError as ex:
        flash_backend(ex, "Не удалось загрузить студентов и группы")
        students, groups = [], []
    return render_template("enrollments/index.html", students=students, groups=groups)

@bp.post("/enrollments")
@admin_required
def create():
    try:
        form = EnrollmentIn.model_validate(request.form.to_dict())
    except ValidationError as ex:
        flash_invalid(ex)
        return redirect(url_for("enrollments.index"))
    try:
        backend.create_enrollment(form.student_id, form.group_id)
    except BackendError as ex:
        flash_backend(ex, "Не удалось записать студента")
    else:
        flash("Студент записан на курс", "success")
    return redirect(url_for("enrollments.index"))

# ---------- оценки ----------
@bp.get("/scores")
@admin_required
def scores():
    page, search = list_args()
    try:
        enrollments = backend.list_enrollments(page, page_size(), search).map(Enrollment.model_validate)
    except BackendError as ex:
        flash_backend(ex, "Не удалось загрузить записи")
        enrollments = Page(page=page, limit=page_size())
    return render_template("enrollments/scores.html", enrollments=enrollments, search=search)

@bp.post("/scores/<int:enrollment_id>")
@admin_required
def update_score(enrollment_id: int):
    try:
        score = parse_score(request.form.get("score"))
    except ValueError as ex:
        flash(f"Оценка: {ex}", "error")
        return _back_to_scores()
    try:
        backend.update_score(enrollment_id, score)
    except BackendError as ex:
        flash_backend(ex, "Не удалось сохранить оценку")
    else:
        flash("Оценка сохранена", "success")
    return _back_to_scores()
