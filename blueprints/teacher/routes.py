# blueprints/teacher/routes.py
from __future__ import annotations
from flask import Blueprint, abort, flash, redirect, render_template, request, url_for

from backend_api import BackendError
from extensions import backend
from blueprints.auth.routes import teacher_required
from blueprints.enrollments.services import collect_scores
from blueprints.helpers import flash_backend
from . import services as svc

bp = Blueprint("teacher", __name__, template_folder="../../templates", static_folder="../../static")

def _courses():
    try:
        return svc.parse_courses(backend.get_professor_courses())
    except BackendError as ex:
        flash_backend(ex, "Ошибка при получении данных курсов")
        return []

# ---------- SSR ----------
@bp.get("/")
@teacher_required
def dashboard():
    courses = _courses()
    try:
        objections = svc.parse_objections(backend.list_teacher_objections())
    except BackendError as ex:
        flash_backend(ex, "Ошибка при получении апелляций")
        objections = []
    tab = "objections" if request.args.get("tab") == "objections" else "courses"
    return render_template(
        "teacher/dashboard.html",
        courses=courses,
        total_students=svc.total_students(courses),
        objections=objections,
        pending=svc.pending_count(objections),
        tab=tab,
    )

@bp.get("/groups/<int:group_id>/scores")
@teacher_required
def score_sheet(group_id: int):
    course, group = svc.find_group(_courses(), group_id)
    if group is None:
        abort(404)
    mode = request.args.get("show", "all")
    if mode not in ("all", "scored", "unscored"):
        mode = "all"
    term = request.args.get("q", "")
    return render_template(
        "teacher/scores.html",
        course=course,
        group=group,
        students=svc.filter_sheet(group.students, term, mode),
        mode=mode,
        term=term,
    )

@bp.post("/groups/<int:group_id>/scores")
@teacher_required
def submit_scores(group_id: int):
    scores, rejected = collect_scores(request.form.items())
    if rejected:
        flash(f"Некорректные оценки пропущены (студенты: {', '.join(rejected)})", "warning")
    if not scores:
        flash("Нет оценок для сохранения", "warning")
        return redirect(url_for("teacher.score_sheet", group_id=group_id))
    try:
        backend.submit_group_scores(group_id, scores)
    except BackendError as ex:
        flash_backend(ex, "Ошибка при сохранении оценок")
        return redirect(url_for("teacher.score_sheet", group_id=group_id))
    flash("Оценки успешно сохранены", "success")
    return redirect(url_for("teacher.dashboard"))

@bp.post("/groups/<int:group_id>/scores/upload")
@teacher_required
def upload_scores(group_id: int):
    upload = request.files.get("file")
    if not upload or not upload.filename:
        flash("Выберите файл Excel", "warning")
        return redirect(url_for("teacher.score_sheet", group_id=group_id))
    try:
        backend.upload_group_scores_excel(group_id, upload)
    except BackendError as ex:
        flash_backend(ex, "Ошибка при загрузке файла")
        return redirect(url_for("teacher.score_sheet", group_id=group_id))
    flash("Оценки успешно загружены", "success")
    return redirect(url_for("teacher.score_sheet", group_id=group_id))

@bp.post("/objections/<int:objection_id>/resolve")
@teacher_required
def resolve_objection(objection_id: int):
    response = (request.form.get("response") or "").strip()
    if not response:
        flash("Введите ответ на апелляцию", "warning")
        return redirect(url_for("teacher.dashboard", tab="objections"))
    try:
        backend.resolve_objection(objection_id, response)
    except BackendError as ex:
        flash_backend(ex, "Ошибка при сохранении ответа")
    else:
        flash("Ответ успешно сохранён", "success")
    return redirect(url_for("teacher.dashboard", tab="objections"))
