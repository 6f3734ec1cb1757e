# bo_core/iam/apps.py
from django.apps import AppConfig


class IamConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "bo_core.iam"
    verbose_name = "Identity and access"

    # built once per process; see bo_core.iam.permission_cache.get_permission_cache
    permission_cache = None

    def ready(self) -> None:
        from bo_core.common.events import CACHE_INVALIDATED, subscribe
        from bo_core.iam import openapi  # noqa: F401  (registers the auth scheme)
        from bo_core.iam.permission_cache import PermissionCache, drop_on_access_change

        if self.permission_cache is None:
            self.permission_cache = PermissionCache.from_settings()
        subscribe(CACHE_INVALIDATED)(drop_on_access_change)
