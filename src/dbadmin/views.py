"""Admin endpoints: credential check and the table browser."""

from core.response import BaseAPIView, result_response
from core.session import get_admin_session
from . import services


class AdminVerifyView(BaseAPIView):
    """Check submitted credentials against the configured admin account."""

    def post(self, request):
        return result_response(services.verify_admin_credentials(request.data))


class TableListView(BaseAPIView):
    def get(self, request):
        get_admin_session(request)
        return result_response(services.list_tables())


class TableRowsView(BaseAPIView):
    def get(self, request, table_name):
        get_admin_session(request)
        return result_response(services.table_rows(table_name))


__all__ = ["AdminVerifyView", "TableListView", "TableRowsView"]
