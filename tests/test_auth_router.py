from datetime import timedelta

from sqlmodel import Session

from todo_api.core.cache import get_cache
from todo_api.db.session import engine
from todo_api.models.user import utcnow
from todo_api.services.auth_service import access_token_cache_key
from todo_api.services.user_store import UserStore

API = "/api"
PASSWORD = "pw123456"


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


def test_health(client):
    assert client.get("/health").json() == {"ok": True}
    assert client.get("/health/db").json() == {"ok": True}


def test_login_response_shape(client, register):
    user = register(firstName="Ada", lastName="Lovelace")

    res = client.post(f"{API}/auth/login", json={"email": "a@x.com", "password": PASSWORD})

    assert res.status_code == 200
    body = res.json()
    assert body["user"] == {
        "id": user["id"],
        "email": "a@x.com",
        "firstName": "Ada",
        "lastName": "Lovelace",
    }
    assert body["accessToken"] and body["refreshToken"]
    assert get_cache().get(access_token_cache_key(user["id"])) == body["accessToken"]


def test_login_errors_do_not_reveal_which_part_failed(client, register):
    register()

    unknown = client.post(f"{API}/auth/login", json={"email": "b@x.com", "password": PASSWORD})
    mismatch = client.post(f"{API}/auth/login", json={"email": "a@x.com", "password": "nope-nope"})

    assert unknown.status_code == mismatch.status_code == 401
    assert unknown.json() == mismatch.json()
    assert unknown.json()["error"]["code"] == "invalid_credentials"


def test_login_validation_error_envelope(client):
    res = client.post(f"{API}/auth/login", json={"email": "not-an-email"})

    assert res.status_code == 400
    error = res.json()["error"]
    assert error["code"] == "validation_error"
    assert error["details"]


def test_refresh_scenario(client, register, login):
    register()
    t1 = login()

    res = client.post(f"{API}/auth/refresh", json={"refreshToken": t1["refreshToken"]})
    assert res.status_code == 200
    t2 = res.json()
    assert set(t2) == {"accessToken", "refreshToken"}
    assert t2["refreshToken"] != t1["refreshToken"]

    stale = client.post(f"{API}/auth/refresh", json={"refreshToken": t1["refreshToken"]})
    assert stale.status_code == 401
    assert stale.json()["error"]["code"] == "invalid_refresh_token"

    again = client.post(f"{API}/auth/refresh", json={"refreshToken": t2["refreshToken"]})
    assert again.status_code == 200


def test_access_token_is_not_a_refresh_token(client, register, login):
    register()
    tokens = login()

    res = client.post(f"{API}/auth/refresh", json={"refreshToken": tokens["accessToken"]})

    assert res.status_code == 401


def test_logout_requires_bearer_token(client):
    res = client.post(f"{API}/auth/logout")

    assert res.status_code == 401
    assert res.json()["error"]["code"] == "unauthorized"
    assert res.headers["WWW-Authenticate"] == "Bearer"


def test_logout_twice_and_refresh_afterwards(client, register, login):
    user = register()
    tokens = login()
    headers = _bearer(tokens["accessToken"])

    first = client.post(f"{API}/auth/logout", headers=headers)
    second = client.post(f"{API}/auth/logout", headers=headers)

    assert first.status_code == second.status_code == 200
    assert second.json() == {"message": "Logout successful"}
    assert get_cache().get(access_token_cache_key(user["id"])) is None
    res = client.post(f"{API}/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert res.status_code == 401


def test_access_token_still_accepted_after_logout(client, register, login):
    register()
    tokens = login()
    headers = _bearer(tokens["accessToken"])
    client.post(f"{API}/auth/logout", headers=headers)

    # 인증은 서명/만료만 보므로 만료 전 access token은 계속 유효
    assert client.get(f"{API}/users/profile", headers=headers).status_code == 200


def test_forgot_password_unknown_email(client):
    res = client.post(f"{API}/auth/forgot-password", json={"email": "nobody@x.com"})

    assert res.status_code == 404
    assert res.json()["error"]["code"] == "user_not_found"


def test_forgot_and_reset_password_flow(client, register):
    register()

    forgot = client.post(f"{API}/auth/forgot-password", json={"email": "a@x.com"})
    assert forgot.status_code == 200
    token = forgot.json()["resetToken"]

    reset = client.post(
        f"{API}/auth/reset-password", json={"token": token, "newPassword": "brand-new-pw"}
    )
    assert reset.status_code == 200
    assert reset.json() == {"message": "Password has been reset successfully"}

    old = client.post(f"{API}/auth/login", json={"email": "a@x.com", "password": PASSWORD})
    new = client.post(f"{API}/auth/login", json={"email": "a@x.com", "password": "brand-new-pw"})
    assert old.status_code == 401
    assert new.status_code == 200

    reused = client.post(
        f"{API}/auth/reset-password", json={"token": token, "newPassword": "another-pw-1"}
    )
    assert reused.status_code == 400


def test_reset_password_expired_and_unknown_look_the_same(client, register):
    user = register()
    token = client.post(f"{API}/auth/forgot-password", json={"email": "a@x.com"}).json()["resetToken"]
    with Session(engine) as s:
        UserStore(s).update_fields(user["id"], reset_token_expires_at=utcnow() - timedelta(minutes=1))

    expired = client.post(
        f"{API}/auth/reset-password", json={"token": token, "newPassword": "brand-new-pw"}
    )
    unknown = client.post(
        f"{API}/auth/reset-password", json={"token": "0" * 64, "newPassword": "brand-new-pw"}
    )

    assert expired.status_code == unknown.status_code == 400
    assert expired.json() == unknown.json()
    assert expired.json()["error"]["code"] == "invalid_or_expired_token"


def test_reset_password_requires_eight_characters(client, register):
    register()
    token = client.post(f"{API}/auth/forgot-password", json={"email": "a@x.com"}).json()["resetToken"]

    res = client.post(f"{API}/auth/reset-password", json={"token": token, "newPassword": "short"})

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "validation_error"
