# cdnimg_app/__init__.py
# -*- coding: utf-8 -*-
from __future__ import annotations

import os

from flask import Flask
from config import Config, TestingConfig, StagingConfig, ProductionConfig
from .extensions import db, scheduler, init_extensions, init_scheduler, register_cli
from .blueprints.core import bp as core_bp
from .blueprints.auth import bp as auth_bp
from .blueprints.uploads import bp as uploads_bp
from .blueprints.github import bp as github_bp
from datetime import datetime

def create_app(config_object: type[Config] | None = None, overrides: dict | None = None) -> Flask:
    app = Flask(__name__, template_folder="../templates")
    app_env = os.getenv("APP_ENV", "").lower()

    if config_object is not None:
        app.config.from_object(config_object)
    elif app_env == "testing":
        app.config.from_object(TestingConfig)
    elif app_env == "staging":
        app.config.from_object(StagingConfig)
    elif app_env == "production":
        app.config.from_object(ProductionConfig)
    else:
        app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    # Extensões (DB/Bcrypt/Migrate/Scheduler)
    init_extensions(app)
    app.config["STARTED_AT"] = datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S UTC")

    # Blueprints
    app.register_blueprint(core_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(uploads_bp)
    app.register_blueprint(github_bp)
    # CLI (ex.: flask init-db)
    register_cli(app)

    # Scheduler (reconciliação diária das estatísticas)
    if not app.config.get("TESTING") and os.getenv("DISABLE_SCHEDULER") != "1":
        init_scheduler(app)
        if not scheduler.running:
            scheduler.start()

    @app.template_filter("datetimeformat")
    def datetimeformat(value, fmt="%d/%m/%Y %H:%M"):
        if value is None:
            return "—"
        return value.strftime(fmt)
    return app
