from types import SimpleNamespace

from wayne_rm.config import settings
from wayne_rm.modules.auth import service as auth_service
from wayne_rm.modules.auth.service import AuthService, RESET_PASSWORD_MESSAGE


def test_register_creates_user_with_metadata_and_redirect(client, db):
    response = client.post("/api/v1/auth/register", json={
        "email": "bruce@wayne.app.br",
        "password": "Batman123",
        "full_name": "Bruce Wayne",
    })
    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "bruce@wayne.app.br"

    call = db.auth.sign_up_calls[0]
    assert call["options"]["data"] == {"full_name": "Bruce Wayne"}
    assert call["options"]["email_redirect_to"].endswith("/")


def test_register_rejects_weak_password(client, db):
    response = client.post("/api/v1/auth/register", json={
        "email": "alfred@wayne.app.br",
        "password": "abc",
        "full_name": "Alfred",
    })
    assert response.status_code == 400
    assert "6 caracteres" in response.json()["detail"]
    assert db.auth.sign_up_calls == []


def test_register_duplicate_email(client, db):
    payload = {"email": "lucius@wayne.app.br", "password": "Fox12345", "full_name": "Lucius Fox"}
    assert client.post("/api/v1/auth/register", json=payload).status_code == 201

    response = client.post("/api/v1/auth/register", json=payload)
    assert response.status_code == 400
    assert response.json()["detail"] == "User already exists"


def test_login_and_me(client, db):
    client.post("/api/v1/auth/register", json={
        "email": "dick@wayne.app.br", "password": "Robin123", "full_name": "Dick Grayson"
    })
    user = next(u for u in db.auth.users.values() if u.email == "dick@wayne.app.br")
    db.add("profiles", user_id=user.id, full_name="Dick Grayson", role="gerente")

    login = client.post("/api/v1/auth/login", json={"email": "dick@wayne.app.br", "password": "Robin123"})
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    body = me.json()
    assert body["profile"]["role"] == "gerente"
    assert "resources:create" in body["permissions"]
    assert "resources:delete" not in body["permissions"]


def test_me_without_profile_is_not_an_error(client, db):
    user = db.auth.add_user("new@wayne.app.br")
    token = db.auth.issue_token(user)

    response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["profile"] is None
    assert "resources:read" in response.json()["permissions"]


def test_login_bad_credentials(client):
    response = client.post("/api/v1/auth/login", json={"email": "nobody@wayne.app.br", "password": "Wrong123"})
    assert response.status_code == 401


def test_invalid_token_is_rejected(client):
    response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_forgot_password_answers_the_same_for_unknown_email(client, db):
    response = client.post("/api/v1/auth/forgot-password", json={"email": "ghost@wayne.app.br"})
    assert response.status_code == 200
    assert response.json()["message"] == RESET_PASSWORD_MESSAGE

    email, options = db.auth.reset_requests[0]
    assert email == "ghost@wayne.app.br"
    assert options["redirect_to"].endswith("/reset-password")


def test_update_password_uses_admin_api(client, db):
    user_id, headers = db.add_user()
    response = client.post("/api/v1/auth/update-password", json={"password": "NewPass1"}, headers=headers)
    assert response.status_code == 200
    assert db.auth.admin.password_updates == [(user_id, {"password": "NewPass1"})]


def test_update_password_validates(client, db):
    _, headers = db.add_user()
    response = client.post("/api/v1/auth/update-password", json={"password": "alllowercase1"}, headers=headers)
    assert response.status_code == 400
    assert db.auth.admin.password_updates == []


def test_update_password_without_service_key(client, app, db):
    from wayne_rm.database.supabase_client import get_service_supabase

    app.dependency_overrides[get_service_supabase] = lambda: None
    _, headers = db.add_user()
    response = client.post("/api/v1/auth/update-password", json={"password": "NewPass1"}, headers=headers)
    assert response.status_code == 500


def test_verify_otp(client):
    ok = client.post("/api/v1/auth/verify-otp", json={
        "email": "selina@wayne.app.br", "token": "123456", "type": "signup"
    })
    assert ok.status_code == 200
    assert ok.json()["access_token"]

    bad = client.post("/api/v1/auth/verify-otp", json={
        "email": "selina@wayne.app.br", "token": "000000", "type": "recovery"
    })
    assert bad.status_code == 400


def test_logout(client, db):
    _, headers = db.add_user()
    response = client.post("/api/v1/auth/logout", headers=headers)
    assert response.status_code == 200


def _count_user_lookups(db, monkeypatch):
    calls = []
    lookup = db.auth.get_user

    def get_user(jwt=None):
        calls.append(jwt)
        return lookup(jwt=jwt)

    monkeypatch.setattr(db.auth, "get_user", get_user)
    return calls


def _token(headers):
    return headers["Authorization"].split(" ", 1)[1]


def test_token_lookups_are_cached(db, monkeypatch):
    user_id, headers = db.add_user()
    calls = _count_user_lookups(db, monkeypatch)
    service = AuthService(db)

    assert service.get_current_user(_token(headers))["id"] == user_id
    assert service.get_current_user(_token(headers))["id"] == user_id
    assert calls == [_token(headers)]


def test_cached_token_expires_after_ttl(db, monkeypatch):
    _, headers = db.add_user()
    calls = _count_user_lookups(db, monkeypatch)
    clock = [1000.0]
    monkeypatch.setattr(auth_service, "time", SimpleNamespace(monotonic=lambda: clock[0]))
    service = AuthService(db)

    service.get_current_user(_token(headers))
    clock[0] += settings.auth_cache_ttl_sec - 1
    service.get_current_user(_token(headers))
    assert len(calls) == 1

    clock[0] += 1
    service.get_current_user(_token(headers))
    assert len(calls) == 2


def test_logout_drops_the_cached_token(client, db, monkeypatch):
    _, headers = db.add_user()
    calls = _count_user_lookups(db, monkeypatch)

    client.get("/api/v1/auth/me", headers=headers)
    client.get("/api/v1/auth/me", headers=headers)
    assert len(calls) == 1

    client.post("/api/v1/auth/logout", headers=headers)
    client.get("/api/v1/auth/me", headers=headers)
    assert len(calls) == 2


def test_permission_matrix(client, db):
    _, headers = db.add_user()
    assert client.get("/api/v1/auth/permissions").status_code in (401, 403)

    body = client.get("/api/v1/auth/permissions", headers=headers).json()
    descriptions = {p["name"]: p["description"] for p in body["permissions"]}
    assert descriptions["resources:request"] == "Request access to an available resource"
    assert descriptions["resources:create"] == "Create resources"
    assert body["modules"]["resources"] == "Equipment, vehicle and device management"
    assert "system:read" in body["roles"]["admin"]
    assert "system:read" not in body["roles"]["gerente"]
