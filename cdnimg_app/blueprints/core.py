# cdnimg_app/blueprints/core.py
# -*- coding: utf-8 -*-
from __future__ import annotations
from flask import Blueprint, render_template, redirect, url_for, session

from cdnimg_app.blueprints.auth import current_user
from cdnimg_app.blueprints.uploads import github_settings
from cdnimg_app.decorators import login_required
from cdnimg_app.services.dashboard import build_dashboard, human_bytes
from cdnimg_app.services.uploads import get_upload_stats, list_uploads
from cdnimg_app.services.validation import ALLOWED_MIME_TYPES

bp = Blueprint("core", __name__)

@bp.route("/")
def index():
    if session.get("user"):
        return redirect(url_for("core.upload_page"))
    return render_template("landing.html")

@bp.route("/upload", methods=["GET"])
@login_required
def upload_page():
    return render_template(
        "upload.html",
        settings=github_settings(),
        accept=",".join(sorted(ALLOWED_MIME_TYPES)),
        last_cdn_link=session.pop("last_cdn_link", None),
    )

@bp.route("/historico")
@login_required
def history():
    u = current_user()
    uploads = list_uploads(u.id) if u else []
    # mais recentes primeiro na tela
    return render_template("history.html", uploads=list(reversed(uploads)), human_bytes=human_bytes)

@bp.route("/dashboard")
@login_required
def dashboard():
    u = current_user()
    uploads = list_uploads(u.id) if u else []
    stats = get_upload_stats(u.id) if u else None
    return render_template(
        "dashboard.html",
        stats=stats,
        data=build_dashboard(uploads),
        human_bytes=human_bytes,
    )
