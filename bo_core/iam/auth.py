# bo_core/iam/auth.py
from __future__ import annotations

from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication


def access_cookie_name() -> str:
    return settings.SIMPLE_JWT.get("AUTH_COOKIE", "bo_access")


class CookieOrHeaderJWTAuthentication(JWTAuthentication):
    """
    API clients send `Authorization: Bearer <access>`; the admin UI relies on
    the HttpOnly access cookie set at login. The header wins when both exist.
    """

    def authenticate(self, request):
        header = self.get_header(request)
        raw_token = self.get_raw_token(header) if header is not None else request.COOKIES.get(access_cookie_name())
        if not raw_token:
            return None

        token = self.get_validated_token(raw_token)
        return self.get_user(token), token
