import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from bo_core.tests.helpers import audit_entries

pytestmark = pytest.mark.django_db


def test_me_requires_auth():
    res = APIClient().get("/api/v1/me/")
    assert res.status_code in (401, 403)


def test_login_sets_cookies_and_records_login(make_user, settings, django_capture_on_commit_callbacks):
    user = make_user("login-user", grants=["item:read"])
    c = APIClient()

    with django_capture_on_commit_callbacks(execute=True):
        res = c.post(
            "/api/v1/auth/login/",
            {"username": "login-user", "password": "Pass@12345"},
            format="json",
            HTTP_USER_AGENT="pytest",
        )

    assert res.status_code == 200
    assert settings.SIMPLE_JWT["AUTH_COOKIE"] in res.cookies
    assert settings.SIMPLE_JWT["AUTH_COOKIE_REFRESH"] in res.cookies

    entries = audit_entries("auth", user.id)
    assert [e.action for e in entries] == ["LOGIN"]
    assert entries[0].actor_id == str(user.id)
    assert entries[0].metadata["user_agent"] == "pytest"


def test_failed_login_records_nothing(make_user, django_capture_on_commit_callbacks):
    user = make_user("login-user")

    with django_capture_on_commit_callbacks(execute=True):
        res = APIClient().post(
            "/api/v1/auth/login/",
            {"username": "login-user", "password": "wrong"},
            format="json",
        )

    assert res.status_code == 401
    assert audit_entries("auth", user.id) == []


def test_logout_records_logout_and_clears_cookies(make_user, django_capture_on_commit_callbacks):
    user = make_user("logout-user")
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f"Bearer {RefreshToken.for_user(user).access_token}")

    with django_capture_on_commit_callbacks(execute=True):
        res = c.post("/api/v1/auth/logout/")

    assert res.status_code == 200
    assert res.cookies["bo_access"].value == ""
    assert [e.action for e in audit_entries("auth", user.id)] == ["LOGOUT"]


def test_cookie_token_authenticates(make_user):
    user = make_user("cookie-user")
    c = APIClient()
    c.cookies["bo_access"] = str(RefreshToken.for_user(user).access_token)

    res = c.get("/api/v1/me/")
    assert res.status_code == 200
    assert res.data["user"]["id"] == user.id


def test_me_lists_cached_permissions(make_user, client_for):
    user = make_user("viewer", grants=["item:read", "order:read"])
    res = client_for(user).get("/api/v1/me/")

    assert res.status_code == 200
    assert res.data["permissions"] == ["item:read", "order:read"]
    assert res.data["profile"]["role"] == "role-viewer"
