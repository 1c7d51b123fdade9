# tests/test_auth_blueprint.py
import uuid

from cdnimg_app.models import User


def test_login_get(client):
    r = client.get("/login")
    assert r.status_code == 200


def test_login_post_wrong(client):
    r = client.post("/login", data={"email": "no@no.com", "password": "x"}, follow_redirects=True)
    assert r.status_code == 200
    assert "Credenciais inválidas" in r.get_data(as_text=True)


def test_login_ok_sets_session_and_redirects(client, user_normal):
    r = client.post("/login", data={"email": user_normal.email, "password": "secret123"})
    assert r.status_code == 302
    assert r.location.endswith("/upload")
    with client.session_transaction() as sess:
        assert sess["user"]["id"] == user_normal.id


def test_login_ignores_external_next(client, user_normal):
    r = client.post("/login?next=https://evil.example/", data={"email": user_normal.email, "password": "secret123"})
    assert "evil.example" not in r.location


def test_login_honours_internal_next(client, user_normal):
    r = client.post("/login?next=/dashboard", data={"email": user_normal.email, "password": "secret123"})
    assert r.location.endswith("/dashboard")


def test_register_creates_user(client, db_session):
    email = f"new+{uuid.uuid4().hex[:6]}@test.com"
    r = client.post("/register", data={"name": "Novo", "email": email, "password": "pw"})
    assert r.status_code == 302
    u = User.query.filter_by(email=email).one()
    assert u.open_id.startswith("local:")
    assert u.role == "user"
    assert u.check_password("pw") and not u.check_password("other")


def test_register_requires_email_and_password(client):
    r = client.post("/register", data={"email": ""}, follow_redirects=True)
    assert "Informe e-mail e senha" in r.get_data(as_text=True)


def test_register_duplicate_email(client, user_normal):
    r = client.post("/register", data={"email": user_normal.email, "password": "x"}, follow_redirects=True)
    assert "já cadastrado" in r.get_data(as_text=True)


def test_logout_redirect(logged_client_user):
    r = logged_client_user.get("/logout", follow_redirects=False)
    assert r.status_code in (302, 303)
    with logged_client_user.session_transaction() as sess:
        assert "user" not in sess
