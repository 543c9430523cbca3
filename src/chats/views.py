"""Peer chat endpoints."""

from core.response import BaseAPIView, result_response
from core.session import get_auth_session
from . import services


class ChatListView(BaseAPIView):
    def get(self, request):
        session = get_auth_session(request)
        return result_response(services.get_user_chats(session))

    def post(self, request):
        session = get_auth_session(request)
        return result_response(services.create_chat(session, request.data))


class ChatDetailView(BaseAPIView):
    """Chat with its full history; DELETE leaves the chat."""

    def get(self, request, chat_id):
        session = get_auth_session(request)
        return result_response(services.get_chat_by_id(session, chat_id))

    def delete(self, request, chat_id):
        session = get_auth_session(request)
        return result_response(services.leave_chat(session, chat_id))


class ChatMessagesView(BaseAPIView):
    """Polling endpoint; ``?after=<message id>`` returns only newer messages."""

    def get(self, request, chat_id):
        session = get_auth_session(request)
        after = request.query_params.get("after")
        return result_response(services.get_chat_messages(session, chat_id, after=after))

    def post(self, request, chat_id):
        session = get_auth_session(request)
        return result_response(services.send_message(session, chat_id, request.data))


class ChatParticipantsView(BaseAPIView):
    def post(self, request, chat_id):
        session = get_auth_session(request)
        return result_response(services.add_chat_participant(session, chat_id, request.data))


__all__ = ["ChatDetailView", "ChatListView", "ChatMessagesView", "ChatParticipantsView"]
