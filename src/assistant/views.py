"""Assistant chat endpoints."""

from core.response import BaseAPIView, result_response
from core.session import get_auth_session
from . import services


class AssistantChatView(BaseAPIView):
    """POST proxies a completion; GET lists chats or, with ``?chat_id=``, returns one."""

    def get(self, request):
        session = get_auth_session(request)
        chat_id = request.query_params.get("chat_id")
        if chat_id:
            return result_response(services.get_chat_with_messages(session, chat_id))
        return result_response(services.list_chats(session))

    def post(self, request):
        session = get_auth_session(request)
        return result_response(services.complete_chat(session, request.data))


class AssistantMessageView(BaseAPIView):
    def post(self, request):
        session = get_auth_session(request)
        return result_response(services.send_chat_message(session, request.data))


__all__ = ["AssistantChatView", "AssistantMessageView"]
