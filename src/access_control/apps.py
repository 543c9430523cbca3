"""App configuration for the access_control Django application.

Holds the ownership-based permission checker shared by every resource
app; it has no models of its own.
"""

from django.apps import AppConfig


class AccessControlConfig(AppConfig):
    """Application configuration for the access_control app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "access_control"
