"""File endpoints; uploads arrive as multipart form data."""

from rest_framework.parsers import FormParser, MultiPartParser

from core.response import BaseAPIView, result_response
from core.session import get_auth_session
from . import services


class FileListView(BaseAPIView):
    parser_classes = [MultiPartParser, FormParser]

    def get(self, request):
        session = get_auth_session(request)
        return result_response(services.list_my_files(session))

    def post(self, request):
        session = get_auth_session(request)
        return result_response(services.upload_file(session, request.data))


class FileDetailView(BaseAPIView):
    def delete(self, request, file_id):
        session = get_auth_session(request)
        return result_response(services.delete_file(session, file_id))


__all__ = ["FileDetailView", "FileListView"]
