# cdnimg_app/blueprints/github.py
# -*- coding: utf-8 -*-
from __future__ import annotations
from flask import Blueprint, current_app, render_template, request, redirect, url_for, flash, session

from cdnimg_app.blueprints.uploads import github_settings
from cdnimg_app.decorators import login_required
from cdnimg_app.exceptions import UploaderError
from cdnimg_app.services.github_client import GitHubClient
from cdnimg_app.services.workflow import GitHubSettings, verify_settings

bp = Blueprint("github", __name__)

@bp.route("/github", methods=["GET"])
@login_required
def settings_view():
    return render_template("github_settings.html", settings=github_settings())

@bp.route("/github", methods=["POST"])
@login_required
def settings_save():
    token = request.form.get("token", "")
    owner = request.form.get("owner", "")
    repo = request.form.get("repo", "")

    client = GitHubClient.from_config(current_app.config)
    try:
        settings = verify_settings(client, token, owner, repo)
    except UploaderError as e:
        flash(str(e), "danger")
        return redirect(url_for("github.settings_view"))
    except Exception:
        current_app.logger.exception("Falha ao validar configuração do GitHub")
        flash("Erro ao validar token.", "danger")
        return redirect(url_for("github.settings_view"))

    settings.save(session)
    flash(f"Token validado. Enviando para {settings.owner}/{settings.repo}@{settings.branch}.", "success")
    return redirect(url_for("core.upload_page"))

@bp.route("/github/clear", methods=["POST"])
@login_required
def settings_clear():
    GitHubSettings.clear(session)
    flash("Configuração do GitHub removida.", "info")
    return redirect(url_for("github.settings_view"))
