"""Django settings for the social chat backend.

Environment-driven configuration for Postgres, Redis, mail, the completion
API, and security defaults.
"""
import os
from pathlib import Path
from urllib.parse import urlparse

from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent


def _get_env(name: str, default: str | None = None) -> str | None:
    """Read an environment variable with an optional fallback."""
    return os.environ.get(name, default)


def _get_bool(name: str, default: str = "False") -> bool:
    return _get_env(name, default) == "True"


def _parse_database_url(url: str) -> dict:
    """Parse a PostgreSQL or SQLite DATABASE_URL into a Django DATABASES entry."""
    parsed = urlparse(url)
    if parsed.scheme == "sqlite":
        # sqlite:///relative.db and sqlite:////absolute/path.db
        return {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": parsed.path[1:] if parsed.path.startswith("//") else parsed.path.lstrip("/"),
        }
    return {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": parsed.path.lstrip("/"),
        "USER": parsed.username,
        "PASSWORD": parsed.password,
        "HOST": parsed.hostname,
        "PORT": parsed.port or "5432",
    }


SECRET_KEY = _get_env("SECRET_KEY", "dev-secret-key-change-me")
DEBUG = _get_bool("DEBUG", "True")
if not DEBUG and SECRET_KEY in ("change-me", "dev-secret-key-change-me"):
    raise ImproperlyConfigured("SECRET_KEY must be set in production")
ALLOWED_HOSTS = [
    h.strip()
    for h in _get_env("ALLOWED_HOSTS", "localhost,127.0.0.1,0.0.0.0").split(",")
    if h.strip()
]

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.staticfiles",
    "rest_framework",
    "drf_spectacular",
    "core",
    "authentication",
    "access_control",
    "posts",
    "chats",
    "uploads",
    "assistant",
    "dbadmin",
    "scripts",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    # Sessions are bearer JWTs; this middleware attaches request.user.
    "core.middleware.JWTAuthMiddleware",
]

ROOT_URLCONF = "core.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
            ],
        },
    },
]

WSGI_APPLICATION = "core.wsgi.application"

DATABASE_URL = _get_env("DATABASE_URL")
if DATABASE_URL:
    DATABASES = {"default": _parse_database_url(DATABASE_URL)}
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": _get_env("POSTGRES_DB", "social_chat"),
            "USER": _get_env("POSTGRES_USER", "social_chat"),
            "PASSWORD": _get_env("POSTGRES_PASSWORD", "social_chat"),
            "HOST": _get_env("POSTGRES_HOST", "localhost"),
            "PORT": _get_env("POSTGRES_PORT", "5432"),
        }
    }

CACHE_URL = _get_env("CACHE_URL")
if CACHE_URL:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.redis.RedisCache",
            "LOCATION": CACHE_URL,
        }
    }
else:
    CACHES = {"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"}}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
MEDIA_URL = "media/"
MEDIA_ROOT = Path(_get_env("MEDIA_ROOT", str(BASE_DIR / "media")))

BCRYPT_ROUNDS = int(_get_env("BCRYPT_ROUNDS", "12"))

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

AUTH_USER_MODEL = "authentication.User"

# Redirect-equivalent destinations surfaced by the session resolver.
LOGIN_URL = "/auth/signin"
UNAUTHORIZED_URL = "/unauthorized"
APP_BASE_URL = _get_env("APP_BASE_URL", "http://localhost:3000")

DEBUG_AUTH_ERRORS = _get_bool("DEBUG_AUTH_ERRORS")
REDIS_URL = _get_env("REDIS_URL", "redis://localhost:6379/0")
REDIS_SOCKET_TIMEOUT = float(_get_env("REDIS_SOCKET_TIMEOUT", "2.0"))

ADMIN_EMAIL = _get_env("ADMIN_EMAIL")
ADMIN_PASSWORD = _get_env("ADMIN_PASSWORD")

OPENAI_API_KEY = _get_env("OPENAI_API_KEY")
OPENAI_API_URL = _get_env("OPENAI_API_URL")
OPENAI_API_MODEL = _get_env("OPENAI_API_MODEL", "gpt-4o")

EMAIL_BACKEND = _get_env("EMAIL_BACKEND", "django.core.mail.backends.smtp.EmailBackend")
EMAIL_HOST = _get_env("EMAIL_HOST", "smtp.ethereal.email")
EMAIL_PORT = int(_get_env("EMAIL_PORT", "587"))
EMAIL_HOST_USER = _get_env("EMAIL_HOST_USER", "")
EMAIL_HOST_PASSWORD = _get_env("EMAIL_HOST_PASSWORD", "")
EMAIL_USE_TLS = _get_bool("EMAIL_USE_TLS", "True")
DEFAULT_FROM_EMAIL = _get_env("DEFAULT_FROM_EMAIL", "Social Chat <noreply@example.com>")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "root": {"handlers": ["console"], "level": _get_env("LOG_LEVEL", "INFO")},
    "loggers": {
        "django.db.backends": {"level": "WARNING"},
    },
}

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": ["core.authentication.MiddlewareUserAuthentication"],
    "DEFAULT_PERMISSION_CLASSES": [],
    "EXCEPTION_HANDLER": "core.exceptions.custom_exception_handler",
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
}

SPECTACULAR_SETTINGS = {
    "TITLE": "Social Chat API",
    "DESCRIPTION": (
        "Posts, comments, peer chat, and an assistant chat proxy guarded by "
        "ownership-based permission checks and JWT bearer sessions."
    ),
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
    "SERVE_PUBLIC": True,
    "APPEND_COMPONENTS": {
        "securitySchemes": {
            "bearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "bearerFormat": "JWT",
            }
        }
    },
    "SECURITY": [{"bearerAuth": []}],
}
