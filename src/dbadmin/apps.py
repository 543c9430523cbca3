"""App configuration for the admin table browser."""

from django.apps import AppConfig


class DbAdminConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "dbadmin"
