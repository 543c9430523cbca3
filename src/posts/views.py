"""Post and comment endpoints."""

from core.response import BaseAPIView, page_params, result_response
from core.session import get_auth_session
from . import services


class PostListView(BaseAPIView):
    """Published feed and post creation."""

    def get(self, request):
        get_auth_session(request)
        page, per_page = page_params(request)
        return result_response(services.get_posts(page, per_page))

    def post(self, request):
        session = get_auth_session(request)
        return result_response(services.create_post(session, request.data))


class MyPostListView(BaseAPIView):
    """Posts written by the caller, published or not."""

    def get(self, request):
        session = get_auth_session(request)
        page, per_page = page_params(request)
        return result_response(services.get_my_posts(session, page, per_page))


class PostDetailView(BaseAPIView):
    def get(self, request, post_id):
        session = get_auth_session(request)
        return result_response(services.get_post_by_id(session, post_id))

    def put(self, request, post_id):
        session = get_auth_session(request)
        return result_response(services.update_post(session, post_id, request.data))

    def delete(self, request, post_id):
        session = get_auth_session(request)
        return result_response(services.delete_post(session, post_id))


class CommentCreateView(BaseAPIView):
    def post(self, request, post_id):
        session = get_auth_session(request)
        return result_response(services.create_comment(session, post_id, request.data))


class CommentDetailView(BaseAPIView):
    def delete(self, request, comment_id):
        session = get_auth_session(request)
        return result_response(services.delete_comment(session, comment_id))


__all__ = [
    "CommentCreateView",
    "CommentDetailView",
    "MyPostListView",
    "PostDetailView",
    "PostListView",
]
