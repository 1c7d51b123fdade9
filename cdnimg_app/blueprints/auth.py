# cdnimg_app/blueprints/auth.py
# -*- coding: utf-8 -*-
from __future__ import annotations

from datetime import datetime

from flask import Blueprint, render_template, request, redirect, url_for, flash, session, jsonify

from cdnimg_app.extensions import db
from cdnimg_app.models import User

bp = Blueprint("auth", __name__)

def current_user():
    data = session.get("user")
    if not data:
        return None
    uid = data.get("id")
    if uid:
        return db.session.get(User, uid)
    email = data.get("email")
    if not email:
        return None
    return User.query.filter_by(email=email).first()

def _start_session(u: User) -> None:
    session["user"] = {
        "id": u.id, "name": u.name, "email": u.email,
        "role": u.role, "is_admin": u.is_admin,
    }

@bp.route("/login", methods=["GET","POST"])
def login():
    if request.method == "POST":
        email = (request.form.get("email") or "").strip().lower()
        pwd = request.form.get("password")

        u = User.query.filter_by(email=email).first()
        if not u or not u.check_password(pwd):
            flash("Credenciais inválidas.", "danger")
            return redirect(url_for("auth.login"))

        u.last_signed_in = datetime.utcnow()
        db.session.commit()

        _start_session(u)
        flash("Login efetuado.", "success")
        next_url = request.args.get("next") or ""
        # só redireciona para caminhos internos
        if not next_url.startswith("/") or next_url.startswith("//"):
            next_url = url_for("core.upload_page")
        return redirect(next_url)
    return render_template("auth_login.html")

@bp.route("/logout")
def logout():
    session.clear()
    flash("Você saiu da sessão.", "info")
    return redirect(url_for("core.index"))

@bp.route("/register", methods=["GET","POST"])
def register():
    if request.method == "POST":
        name = request.form.get("name","Usuário")
        email = (request.form.get("email") or "").strip().lower()
        pwd = request.form.get("password")

        if not email or not pwd:
            flash("Informe e-mail e senha.", "warning")
            return redirect(url_for("auth.register"))

        if User.query.filter_by(email=email).first():
            flash("E-mail já cadastrado.", "warning")
            return redirect(url_for("auth.register"))

        u = User(name=name, email=email, login_method="password")
        u.set_password(pwd)
        db.session.add(u)
        db.session.commit()

        _start_session(u)
        flash("Conta criada com sucesso.", "success")
        return redirect(url_for("core.upload_page"))

    return render_template("auth_register.html")

# ------------------------------------------------------------------ API JSON
@bp.route("/api/auth/me")
def me():
    u = current_user()
    return jsonify(u.to_dict() if u else None)

@bp.route("/api/auth/logout", methods=["POST"])
def api_logout():
    session.clear()
    return jsonify({"success": True})
