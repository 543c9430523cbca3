"""Routing for admin endpoints."""

from django.urls import path

from .views import AdminVerifyView, TableListView, TableRowsView

urlpatterns = [
    path("admin/auth/verify/", AdminVerifyView.as_view(), name="admin-verify"),
    path("admin/tables/", TableListView.as_view(), name="admin-tables"),
    path("admin/tables/<str:table_name>/", TableRowsView.as_view(), name="admin-table-rows"),
]
