# cdnimg_app/blueprints/uploads.py
# -*- coding: utf-8 -*-
from __future__ import annotations
import math

from flask import Blueprint, current_app, request, redirect, url_for, flash, session, jsonify
from werkzeug.exceptions import RequestEntityTooLarge

from cdnimg_app.blueprints.auth import current_user
from cdnimg_app.decorators import login_required
from cdnimg_app.exceptions import UploaderError, ValidationError, GitHubAPIError
from cdnimg_app.services.github_client import GitHubClient
from cdnimg_app.services.uploads import create_upload, get_upload_stats, list_uploads
from cdnimg_app.services.validation import ALLOWED_MIME_TYPES, too_large_message
from cdnimg_app.services.workflow import GitHubSettings, UploadWorkflow

bp = Blueprint("uploads", __name__)

# campo JSON -> (coluna, tipo)
CREATE_FIELDS = {
    "filename": ("filename", str),
    "originalFilename": ("original_filename", str),
    "fileSize": ("file_size", int),
    "mimeType": ("mime_type", str),
    "githubUrl": ("github_url", str),
    "cdnLink": ("cdn_link", str),
}

def _parse_create_input(payload) -> tuple[dict, list[str]]:
    data, bad = {}, []
    if not isinstance(payload, dict):
        return data, list(CREATE_FIELDS)
    for key, (col, typ) in CREATE_FIELDS.items():
        v = payload.get(key)
        if typ is int:
            # bool é subclasse de int, mas não é um tamanho
            if isinstance(v, bool) or not isinstance(v, (int, float)) \
                    or (isinstance(v, float) and not math.isfinite(v)) or v < 0 or int(v) != v:
                bad.append(key); continue
            data[col] = int(v)
        else:
            if not isinstance(v, str):
                bad.append(key); continue
            data[col] = v
    return data, bad

def github_settings() -> GitHubSettings:
    cfg = current_app.config
    return GitHubSettings.from_session(
        session,
        default_owner=cfg.get("GITHUB_DEFAULT_OWNER", ""),
        default_repo=cfg.get("GITHUB_DEFAULT_REPO", ""),
        default_branch=cfg.get("GITHUB_DEFAULT_BRANCH", "main"),
    )

def build_workflow(settings: GitHubSettings) -> UploadWorkflow:
    cfg = current_app.config
    return UploadWorkflow(
        GitHubClient.from_config(cfg),
        settings,
        path_prefix=cfg.get("UPLOAD_PATH_PREFIX", "images"),
        max_bytes=cfg.get("MAX_IMAGE_BYTES", 10 * 1024 * 1024),
        allowed_mime_types=ALLOWED_MIME_TYPES,
    )

# ------------------------------------------------------------------ API JSON
@bp.route("/api/uploads", methods=["GET"])
def api_list():
    u = current_user()
    if not u:
        return jsonify([])
    return jsonify([rec.to_dict() for rec in list_uploads(u.id)])

@bp.route("/api/uploads/stats", methods=["GET"])
def api_stats():
    u = current_user()
    if not u:
        return jsonify(None)
    s = get_upload_stats(u.id)
    return jsonify(s.to_dict() if s else None)

@bp.route("/api/uploads", methods=["POST"])
def api_create():
    u = current_user()
    if not u:
        return jsonify({"error": "Unauthorized"}), 401

    data, bad = _parse_create_input(request.get_json(silent=True))
    if bad:
        return jsonify({"error": "Dados inválidos", "fields": bad}), 400

    rec = create_upload(u.id, **data)
    current_app.logger.info("Upload registrado: user=%s upload=%s", u.id, rec.id)
    return jsonify({"success": True})

# ------------------------------------------------------------------ HTML
@bp.route("/upload", methods=["POST"])
@login_required
def upload_image():
    u = current_user()
    if not u:
        flash("Sessão expirada. Faça login novamente.", "warning")
        return redirect(url_for("auth.login"))

    f = request.files.get("image")
    if not f or not f.filename:
        flash("Selecione uma imagem.", "warning")
        return redirect(url_for("core.upload_page"))

    content = f.read()
    mime = (f.mimetype or "").lower()
    settings = github_settings()

    try:
        outcome = build_workflow(settings).run(u.id, f.filename, mime, content)
    except ValidationError as e:
        flash(str(e), "warning")
        return redirect(url_for("core.upload_page"))
    except GitHubAPIError as e:
        current_app.logger.warning("Commit recusado para %s/%s: %s", settings.owner, settings.repo, e)
        flash(f"Erro ao fazer upload: {e}", "danger")
        return redirect(url_for("core.upload_page"))
    except UploaderError as e:
        flash(f"Erro ao fazer upload: {e}", "danger")
        return redirect(url_for("core.upload_page"))
    except Exception:
        current_app.logger.exception("Falha inesperada no upload")
        flash("Erro ao fazer upload: Erro desconhecido", "danger")
        return redirect(url_for("core.upload_page"))

    session["last_cdn_link"] = outcome.cdn_link
    flash("Imagem enviada com sucesso!", "success")
    return redirect(url_for("core.upload_page"))

@bp.errorhandler(RequestEntityTooLarge)
def upload_too_large(e):
    # corpo acima de MAX_CONTENT_LENGTH: o Werkzeug recusa antes de ler o arquivo
    if request.path.startswith("/api/"):
        return jsonify({"error": "Arquivo muito grande"}), 413
    flash(too_large_message(current_app.config.get("MAX_IMAGE_BYTES", 10 * 1024 * 1024)), "warning")
    return redirect(url_for("core.upload_page"))
