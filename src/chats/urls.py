"""Routing for peer chat endpoints."""

from django.urls import path

from .views import ChatDetailView, ChatListView, ChatMessagesView, ChatParticipantsView

urlpatterns = [
    path("chats/", ChatListView.as_view(), name="chat-list"),
    path("chats/<uuid:chat_id>/", ChatDetailView.as_view(), name="chat-detail"),
    path("chats/<uuid:chat_id>/messages/", ChatMessagesView.as_view(), name="chat-messages"),
    path("chats/<uuid:chat_id>/participants/", ChatParticipantsView.as_view(), name="chat-participants"),
]
