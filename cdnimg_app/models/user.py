# cdnimg_app/models/user.py
# -*- coding: utf-8 -*-
from __future__ import annotations
import uuid
from datetime import datetime
from ..extensions import db, bcrypt

class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    # identidade externa (provedor de login); contas locais recebem "local:<uuid>"
    open_id = db.Column(db.String(64), unique=True, nullable=False, index=True,
                        default=lambda: f"local:{uuid.uuid4().hex}")
    name = db.Column(db.String(120))
    email = db.Column(db.String(320), unique=True, index=True)
    password_hash = db.Column(db.String(255))
    login_method = db.Column(db.String(64), default="password")
    role = db.Column(db.String(16), nullable=False, default="user")  # user|admin
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    last_signed_in = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    uploads = db.relationship("Upload", backref="user", lazy="dynamic",
                              cascade="all, delete-orphan")
    upload_stats = db.relationship("UploadStats", backref="user", uselist=False,
                                   cascade="all, delete-orphan")

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def set_password(self, raw: str) -> None:
        self.password_hash = bcrypt.generate_password_hash(raw).decode("utf-8")

    def check_password(self, raw: str) -> bool:
        if not self.password_hash or not raw:
            return False
        return bcrypt.check_password_hash(self.password_hash, raw)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "openId": self.open_id,
            "name": self.name,
            "email": self.email,
            "loginMethod": self.login_method,
            "role": self.role,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "lastSignedIn": self.last_signed_in.isoformat() if self.last_signed_in else None,
        }
