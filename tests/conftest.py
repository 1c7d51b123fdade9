# tests/conftest.py
# -*- coding: utf-8 -*-
import os
import sys
import uuid
import pathlib
import tempfile

import pytest


# =====================================================================================
# Localização do projeto (garante que "cdnimg_app" esteja no sys.path)
# =====================================================================================
def _add_project_root():
    here = pathlib.Path(__file__).resolve()
    for base in [here.parent, here.parent.parent, pathlib.Path.cwd()]:
        for candidate in [base, *base.parents]:
            if (candidate / "cdnimg_app").is_dir():
                if str(candidate) not in sys.path:
                    sys.path.insert(0, str(candidate))
                return candidate
    return None


PROJECT_ROOT = _add_project_root()


# =====================================================================================
# Ambiente de testes unitários (sem serviços externos)
# =====================================================================================
@pytest.fixture(autouse=True, scope="session")
def _testing_env():
    os.environ["APP_ENV"] = "testing"
    os.environ["FLASK_ENV"] = "testing"
    os.environ["TESTING"] = "1"
    os.environ["DISABLE_SCHEDULER"] = "1"
    os.environ.setdefault("SECRET_KEY", "testing-secret")
    yield


# =====================================================================================
# App Flask com SQLite temporário e schema criado uma vez por sessão
# =====================================================================================
@pytest.fixture(scope="session")
def app(_testing_env):
    fd, db_path = tempfile.mkstemp(prefix="cdnimg_test_", suffix=".sqlite")
    os.close(fd)

    from config import TestingConfig
    from cdnimg_app import create_app
    from cdnimg_app.extensions import db
    from sqlalchemy import event

    app = create_app(TestingConfig, overrides={
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path}",
        "SECRET_KEY": "testing-secret",
        "GITHUB_API_URL": "https://api.github.test",
        "GITHUB_DEFAULT_OWNER": "Ser4ph4",
        "GITHUB_DEFAULT_REPO": "ser4ph4.github.io",
    })

    # PRAGMAs sempre que o engine abrir uma conexão (WAL evita locks entre sessões;
    # foreign_keys liga o ON DELETE CASCADE no sqlite)
    def _set_sqlite_pragmas(dbapi_conn, _conn_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA busy_timeout=30000")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    with app.app_context():
        event.listen(db.engine, "connect", _set_sqlite_pragmas)
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.engine.dispose()
    try:
        os.remove(db_path)
    except OSError:
        pass


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db_session(app):
    from cdnimg_app.extensions import db
    with app.app_context():
        try:
            yield db.session
        finally:
            db.session.rollback()
            db.session.close()


# =====================================================================================
# Fake da API do GitHub: nenhum teste toca a rede.
# Rotas registradas por (método, sufixo da URL); o que não estiver registrado
# devolve 404.
# =====================================================================================
class FakeResponse:
    def __init__(self, status_code=200, json_data=None, headers=None, reason="OK"):
        self.status_code = status_code
        self._json = json_data
        self.headers = headers or {}
        self.reason = reason
        self.text = "" if json_data is None else str(json_data)

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._json is None:
            raise ValueError("no json")
        return self._json


class FakeGitHub:
    def __init__(self):
        self.routes = {}
        self.calls = []

    def on(self, method, url_suffix, response):
        """`response`: FakeResponse, uma exceção ou um callable(url, kwargs)."""
        self.routes[(method.upper(), url_suffix)] = response
        return self

    def _dispatch(self, method, url, kwargs):
        self.calls.append((method, url, kwargs))
        for (m, suffix), resp in self.routes.items():
            if m == method and url.endswith(suffix):
                if isinstance(resp, Exception):
                    raise resp
                if callable(resp):
                    return resp(url, kwargs)
                return resp
        return FakeResponse(404, {"message": "Not Found"}, reason="Not Found")

    def calls_for(self, method):
        return [c for c in self.calls if c[0] == method]


@pytest.fixture(autouse=True)
def fake_github(monkeypatch):
    import requests

    fake = FakeGitHub()
    monkeypatch.setattr(requests, "get", lambda url, **k: fake._dispatch("GET", url, k))
    monkeypatch.setattr(requests, "put", lambda url, **k: fake._dispatch("PUT", url, k))
    monkeypatch.setattr(requests, "post", lambda url, **k: fake._dispatch("POST", url, k))
    yield fake


# =====================================================================================
# Usuários e clientes logados
# =====================================================================================
@pytest.fixture
def user_admin(db_session):
    from cdnimg_app.models.user import User
    email = f"admin+{uuid.uuid4().hex[:6]}@test.com"
    u = User(name="Admin", email=email, role="admin")
    u.set_password("secret123")
    db_session.add(u); db_session.commit()
    return u


@pytest.fixture
def user_normal(db_session):
    from cdnimg_app.models.user import User
    email = f"user+{uuid.uuid4().hex[:6]}@test.com"
    u = User(name="User", email=email)
    u.set_password("secret123")
    db_session.add(u); db_session.commit()
    return u


@pytest.fixture
def logged_client_admin(client, user_admin):
    with client.session_transaction() as sess:
        sess["user"] = {"id": user_admin.id, "email": user_admin.email, "role": "admin", "is_admin": True}
    return client


@pytest.fixture
def logged_client_user(client, user_normal):
    with client.session_transaction() as sess:
        sess["user"] = {"id": user_normal.id, "email": user_normal.email, "role": "user", "is_admin": False}
    return client


@pytest.fixture
def github_configured(logged_client_user):
    """Cliente logado com token/owner/repo já salvos na sessão."""
    with logged_client_user.session_transaction() as sess:
        sess["github_token"] = "ghp_testtoken1234"
        sess["github_owner"] = "Ser4ph4"
        sess["github_repo"] = "ser4ph4.github.io"
        sess["github_branch"] = "main"
    return logged_client_user


def commit_ok(path="images/x.png", status=201, sha="c0ffee"):
    return FakeResponse(status, {
        "commit": {"sha": sha, "url": f"https://api.github.test/commits/{sha}"},
        "content": {
            "name": path.rsplit("/", 1)[-1], "path": path, "sha": "blob123", "size": 3,
            "html_url": f"https://github.com/Ser4ph4/ser4ph4.github.io/blob/main/{path}",
            "download_url": f"https://raw.githubusercontent.com/Ser4ph4/ser4ph4.github.io/main/{path}",
            "type": "file",
        },
    }, reason="Created" if status == 201 else "OK")


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def commit_response():
    return commit_ok
