# blueprints/tickets/routes.py
from __future__ import annotations
from datetime import datetime, timezone
from typing import List

from flask import Blueprint, abort, flash, redirect, render_template, request, url_for
from flask_login import login_required
from pydantic import ValidationError

from backend_api import BackendError, BackendNotFound, Page, clamp_page
from extensions import backend
from models import Comment, Ticket
from blueprints.helpers import flash_backend, flash_invalid, page_size
from .schemas import CommentIn, TicketIn

bp = Blueprint("tickets", __name__, template_folder="../../templates", static_folder="../../static")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)

def _when(c: Comment) -> datetime:
    if c.created_at is None:
        return _EPOCH
    return c.created_at if c.created_at.tzinfo else c.created_at.replace(tzinfo=timezone.utc)

def sort_comments(comments: List[Comment]) -> List[Comment]:
    """Oldest first; comments without a date go on top in backend order."""
    return sorted(comments, key=_when)

@bp.get("/")
@login_required
def index():
    page = clamp_page(request.args.get("page", 1))
    try:
        tickets = backend.list_tickets(page, page_size()).map(Ticket.model_validate)
    except BackendError as ex:
        flash_backend(ex, "Ошибка при получении тикетов")
        tickets = Page(page=page, limit=page_size())
    return render_template("tickets/index.html", tickets=tickets, form={})

@bp.post("/")
@login_required
def create():
    try:
        form = TicketIn.model_validate(request.form.to_dict())
    except ValidationError as ex:
        flash_invalid(ex)
        return redirect(url_for("tickets.index"))
    try:
        created = backend.create_ticket(form.title, form.description)
    except BackendError as ex:
        flash_backend(ex, "Ошибка при создании тикета")
        return redirect(url_for("tickets.index"))
    flash("Тикет создан", "success")
    if isinstance(created, dict) and created.get("id") is not None:
        return redirect(url_for("tickets.detail", ticket_id=created["id"]))
    return redirect(url_for("tickets.index"))

@bp.get("/<int:ticket_id>")
@login_required
def detail(ticket_id: int):
    try:
        ticket = Ticket.model_validate(backend.get_ticket(ticket_id))
    except BackendNotFound:
        abort(404)
    except ValidationError:
        abort(404)
    try:
        comments = sort_comments([
            Comment.model_validate(c) for c in backend.list_ticket_comments(ticket_id)
            if isinstance(c, dict)
        ])
    except BackendError as ex:
        flash_backend(ex, "Ошибка при получении комментариев")
        comments = []
    return render_template("tickets/detail.html", ticket=ticket, comments=comments)

@bp.post("/<int:ticket_id>/comments")
@login_required
def add_comment(ticket_id: int):
    try:
        form = CommentIn.model_validate(request.form.to_dict())
    except ValidationError as ex:
        flash_invalid(ex)
        return redirect(url_for("tickets.detail", ticket_id=ticket_id))
    try:
        backend.add_ticket_comment(ticket_id, form.text)
    except BackendError as ex:
        flash_backend(ex, "Ошибка при отправке комментария")
    else:
        flash("Комментарий добавлен", "success")
    return redirect(url_for("tickets.detail", ticket_id=ticket_id))
