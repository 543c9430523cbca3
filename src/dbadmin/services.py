"""Read-only table browser for administrators.

Table names reach SQL only after they match ``TABLE_NAME_PATTERN`` and
appear in the database's own table list; they are then quoted by the
backend. Row dumps are capped at ``ROW_LIMIT``.
"""

import logging
import re
import secrets

from django.conf import settings
from django.db import connection
from rest_framework import status

from core.results import ActionResult, storage_action

from .serializers import AdminCredentialsSerializer

logger = logging.getLogger(__name__)

TABLE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")
ROW_LIMIT = 100


def verify_admin_credentials(data) -> ActionResult:
    """Compare submitted credentials with ``ADMIN_EMAIL``/``ADMIN_PASSWORD``."""
    admin_email = settings.ADMIN_EMAIL
    admin_password = settings.ADMIN_PASSWORD
    if not admin_email or not admin_password:
        logger.error("Admin credentials are not configured; set ADMIN_EMAIL and ADMIN_PASSWORD")
        return ActionResult.fail(
            "Admin credentials are not configured.", status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    serializer = AdminCredentialsSerializer(data=data)
    if not serializer.is_valid():
        return ActionResult.invalid(serializer)

    email_ok = secrets.compare_digest(
        serializer.validated_data["email"].encode(), admin_email.encode()
    )
    password_ok = secrets.compare_digest(
        serializer.validated_data["password"].encode(), admin_password.encode()
    )
    if not (email_ok and password_ok):
        logger.warning("Rejected admin credential verification")
        return ActionResult.fail("Invalid credentials.", status=status.HTTP_401_UNAUTHORIZED)
    return ActionResult.ok({"success": True})


def _table_names() -> list[str]:
    with connection.cursor() as cursor:
        return sorted(connection.introspection.table_names(cursor))


@storage_action("Failed to load the table list.")
def list_tables() -> ActionResult:
    names = _table_names()
    tables = []
    with connection.cursor() as cursor:
        for name in names:
            cursor.execute(f"SELECT COUNT(*) FROM {connection.ops.quote_name(name)}")
            tables.append({"name": name, "count": cursor.fetchone()[0]})
    return ActionResult.ok({"tables": tables})


@storage_action("Failed to load the table.")
def table_rows(table_name: str) -> ActionResult:
    if not TABLE_NAME_PATTERN.match(table_name or ""):
        return ActionResult.fail("Invalid table name.")
    if table_name not in _table_names():
        return ActionResult.not_found("Table not found.")

    with connection.cursor() as cursor:
        cursor.execute(
            f"SELECT * FROM {connection.ops.quote_name(table_name)} LIMIT %s", [ROW_LIMIT]
        )
        columns = [column[0] for column in cursor.description]
        records = [dict(zip(columns, row)) for row in cursor.fetchall()]
    return ActionResult.ok({"table": table_name, "columns": columns, "records": records})


__all__ = ["ROW_LIMIT", "list_tables", "table_rows", "verify_admin_credentials"]
