"""URL patterns for user profiles."""

from django.urls import path

from .views import UserDetailView, UserListView

urlpatterns = [
    path("users/", UserListView.as_view(), name="user-list"),
    path("users/<uuid:user_id>/", UserDetailView.as_view(), name="user-detail"),
]
