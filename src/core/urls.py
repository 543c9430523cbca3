"""Root URL configuration for the Social Chat API."""
from django.conf import settings
from django.conf.urls.static import static
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView

urlpatterns = [
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("auth/", include("authentication.urls")),
    path("", include("authentication.users_urls")),
    path("", include("posts.urls")),
    path("", include("chats.urls")),
    path("", include("uploads.urls")),
    path("", include("assistant.urls")),
    path("", include("dbadmin.urls")),
] + static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
