"""Routing for file endpoints."""

from django.urls import path

from .views import FileDetailView, FileListView

urlpatterns = [
    path("files/", FileListView.as_view(), name="file-list"),
    path("files/<uuid:file_id>/", FileDetailView.as_view(), name="file-detail"),
]
