# cdnimg_app/services/uploads.py
# -*- coding: utf-8 -*-
from __future__ import annotations
from datetime import datetime
from sqlalchemy import func
from ..extensions import db
from ..models import User, Upload, UploadStats

UPLOAD_FIELDS = ("filename", "original_filename", "file_size", "mime_type", "github_url", "cdn_link")

def list_uploads(user_id: int) -> list[Upload]:
    # ordem de inserção
    return Upload.query.filter_by(user_id=user_id).order_by(Upload.id.asc()).all()

def get_upload_stats(user_id: int) -> UploadStats | None:
    return UploadStats.query.filter_by(user_id=user_id).first()

def _recompute_stats(user_id: int) -> UploadStats:
    """Reagrega TODOS os uploads do usuário (não é incremento) e faz upsert.

    Não faz commit: quem chama decide o limite da transação.
    """
    total, size = (db.session.query(func.count(Upload.id), func.coalesce(func.sum(Upload.file_size), 0))
                   .filter(Upload.user_id == user_id)
                   .one())
    s = UploadStats.query.filter_by(user_id=user_id).first()
    if not s:
        s = UploadStats(user_id=user_id)
        db.session.add(s)
    s.total_uploads = int(total or 0)
    s.total_size = int(size or 0)
    s.updated_at = datetime.utcnow()
    return s

def create_upload(user_id: int, **data) -> Upload:
    """Grava o upload e recalcula as estatísticas na mesma transação."""
    rec = Upload(user_id=user_id, **{k: data[k] for k in UPLOAD_FIELDS})
    try:
        db.session.add(rec)
        db.session.flush()
        _recompute_stats(user_id)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return rec

def recompute_stats(user_id: int) -> UploadStats:
    s = _recompute_stats(user_id)
    db.session.commit()
    return s

def reconcile_all_stats() -> int:
    """Recalcula as estatísticas de todos os usuários que já enviaram algo."""
    user_ids = [uid for (uid,) in db.session.query(User.id).join(Upload, Upload.user_id == User.id).distinct()]
    for uid in user_ids:
        _recompute_stats(uid)
    db.session.commit()
    return len(user_ids)
