"""Settings used by the test suite: SQLite, in-memory cache and mail."""

import tempfile

from .settings import *  # noqa: F401,F403

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHES = {"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"}}

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

MEDIA_ROOT = tempfile.mkdtemp(prefix="social-chat-media-")

BCRYPT_ROUNDS = 4

ADMIN_EMAIL = "root@example.com"
ADMIN_PASSWORD = "RootPass123!"

OPENAI_API_KEY = "test-key"
OPENAI_API_URL = None
OPENAI_API_MODEL = "gpt-test"

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {"null": {"class": "logging.NullHandler"}},
    "root": {"handlers": ["null"], "level": "CRITICAL"},
}
