# cdnimg_app/extensions.py
# -*- coding: utf-8 -*-
from __future__ import annotations
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_migrate import Migrate
from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy import text



db = SQLAlchemy()
bcrypt = Bcrypt()
migrate = Migrate()
scheduler = BackgroundScheduler(daemon=True)

STATS_JOB_ID = "reconcile-upload-stats"

def init_extensions(app):
    # DB/Bcrypt/Migrate
    db.init_app(app)
    bcrypt.init_app(app)
    migrate.init_app(app, db)

def init_scheduler(app):
    """Agenda a reconciliação diária das estatísticas de upload."""
    from .services.uploads import reconcile_all_stats

    def _job():
        with app.app_context():
            n = reconcile_all_stats()
            app.logger.info("Estatísticas reconciliadas para %s usuário(s).", n)

    scheduler.add_job(
        _job, "cron", hour=app.config.get("STATS_RECONCILE_HOUR", 3), minute=0,
        id=STATS_JOB_ID, replace_existing=True,
    )

def register_cli(app):
    @app.cli.command("init-db")
    def init_db_cmd():
        """Cria as tabelas iniciais (DEV/MVP). Para produção: use flask db upgrade."""
        with app.app_context():
            # sanity check
            db.session.execute(text("SELECT 1"))
            db.create_all()
            print("Tabelas criadas.")

    @app.cli.command("recompute-stats")
    def recompute_stats_cmd():
        """Recalcula as estatísticas de upload de todos os usuários."""
        from .services.uploads import reconcile_all_stats
        with app.app_context():
            n = reconcile_all_stats()
            print(f"Estatísticas recalculadas: {n} usuário(s).")
