# bo_core/iam/openapi.py
from drf_spectacular.extensions import OpenApiAuthenticationExtension

from bo_core.iam.auth import access_cookie_name


class BackOfficeJWTScheme(OpenApiAuthenticationExtension):
    target_class = "bo_core.iam.auth.CookieOrHeaderJWTAuthentication"
    name = "BearerOrCookieJWT"

    def get_security_definition(self, auto_schema):
        cookie = access_cookie_name()
        return {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": f"Bearer access token, or the `{cookie}` cookie set by /api/v1/auth/login/.",
        }
