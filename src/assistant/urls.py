"""Routing for assistant chat endpoints."""

from django.urls import path

from .views import AssistantChatView, AssistantMessageView

urlpatterns = [
    path("assistant/chat/", AssistantChatView.as_view(), name="assistant-chat"),
    path("assistant/messages/", AssistantMessageView.as_view(), name="assistant-messages"),
]
