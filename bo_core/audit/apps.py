from django.apps import AppConfig


class AuditConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "bo_core.audit"

    recorder = None

    def ready(self) -> None:
        from bo_core.audit.services import AuditRecorder

        self.recorder = AuditRecorder.from_settings()
