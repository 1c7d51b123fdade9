# cdnimg_app/models/upload.py
# -*- coding: utf-8 -*-
from __future__ import annotations
from datetime import datetime
from ..extensions import db

class Upload(db.Model):
    __tablename__ = "uploads"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    filename = db.Column(db.String(255), nullable=False)            # nome no repositório (prefixo de tempo)
    original_filename = db.Column(db.String(255), nullable=False)
    file_size = db.Column(db.Integer, nullable=False)
    mime_type = db.Column(db.String(100), nullable=False)
    github_url = db.Column(db.Text, nullable=False)                 # html_url do blob commitado
    cdn_link = db.Column(db.Text, nullable=False)
    uploaded_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "filename": self.filename,
            "originalFilename": self.original_filename,
            "fileSize": self.file_size,
            "mimeType": self.mime_type,
            "githubUrl": self.github_url,
            "cdnLink": self.cdn_link,
            "uploadedAt": self.uploaded_at.isoformat() if self.uploaded_at else None,
        }

class UploadStats(db.Model):
    __tablename__ = "upload_stats"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)

    total_uploads = db.Column(db.Integer, nullable=False, default=0)
    total_size = db.Column(db.BigInteger, nullable=False, default=0)    # bytes

    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "totalUploads": self.total_uploads,
            "totalSize": self.total_size,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
