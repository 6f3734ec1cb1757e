# config/settings/test.py
from .base import *  # noqa

# File-backed SQLite so worker threads (allocator race tests) share the test database.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",  # noqa: F405
        "OPTIONS": {"timeout": 30},
        "TEST": {"NAME": str(BASE_DIR / "test_db.sqlite3")},  # noqa: F405
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# Tests assert on audit rows right after the on_commit callbacks run.
AUDIT_DISPATCH = "inline"

LOGGING["loggers"]["bo_core"]["level"] = "WARNING"  # noqa: F405
LOGGING["loggers"]["bo_core"]["propagate"] = True  # noqa: F405
