"""Routing for post and comment endpoints."""

from django.urls import path

from .views import CommentCreateView, CommentDetailView, MyPostListView, PostDetailView, PostListView

urlpatterns = [
    path("posts/", PostListView.as_view(), name="post-list"),
    path("posts/mine/", MyPostListView.as_view(), name="post-mine"),
    path("posts/<uuid:post_id>/", PostDetailView.as_view(), name="post-detail"),
    path("posts/<uuid:post_id>/comments/", CommentCreateView.as_view(), name="post-comments"),
    path("comments/<uuid:comment_id>/", CommentDetailView.as_view(), name="comment-detail"),
]
