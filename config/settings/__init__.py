# config/settings/__init__.py
import os

# DJANGO_ENV=prod|local; pytest points DJANGO_SETTINGS_MODULE at config.settings.test directly
if os.getenv("DJANGO_ENV", "local").strip().lower() in ("prod", "production"):
    from .prod import *  # noqa: F401,F403
else:
    from .local import *  # noqa: F401,F403
