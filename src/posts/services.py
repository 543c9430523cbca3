"""Post and comment actions.

Views resolve the ``Session`` and hand it in. Actions validate input, check
permissions, touch storage, invalidate cached view paths, and return an
``ActionResult``.
"""

import logging
import math

from django.db.models import Count
from rest_framework import status

from access_control.permissions import COMMENT, POST, check_permission
from core.cache import cached_for_path, revalidate_path
from core.dto import to_comment_dtos, to_post_dto, to_post_dtos
from core.results import ActionResult, storage_action
from core.session import Session, get_session_user_id

from .models import Comment, Post
from .serializers import CommentInputSerializer, PostInputSerializer, PostUpdateSerializer

logger = logging.getLogger(__name__)

FEED_PATH = "/posts"


def post_path(post_id) -> str:
    return f"/posts/{post_id}"


def _with_counts(queryset):
    return queryset.select_related("user").annotate(comment_count=Count("comments"))


def _paginate(queryset, page: int, per_page: int) -> tuple[list, int]:
    total = queryset.count()
    offset = (page - 1) * per_page
    return list(queryset[offset:offset + per_page]), math.ceil(total / per_page)


@storage_action("Failed to load posts.")
def get_posts(page: int = 1, per_page: int = 10) -> ActionResult:
    """Published feed, newest first; cached until a post changes."""

    def build():
        posts, total_pages = _paginate(
            _with_counts(Post.objects.filter(published=True)).order_by("-created_at"), page, per_page
        )
        return {"posts": to_post_dtos(posts), "total_pages": total_pages}

    return ActionResult.ok(cached_for_path(FEED_PATH, f"{page}:{per_page}", build))


@storage_action("Failed to load posts.")
def get_my_posts(session: Session, page: int = 1, per_page: int = 10) -> ActionResult:
    user_id = get_session_user_id(session)
    posts, total_pages = _paginate(
        _with_counts(Post.objects.filter(user_id=user_id)).order_by("-created_at"), page, per_page
    )
    return ActionResult.ok({"posts": to_post_dtos(posts), "total_pages": total_pages})


@storage_action("Failed to load the post.")
def get_post_by_id(session: Session, post_id) -> ActionResult:
    post = _with_counts(Post.objects.filter(pk=post_id)).first()
    if post is None:
        return ActionResult.not_found("Post not found.")

    if not post.published:
        permission = check_permission(session, POST, post_id)
        if not permission.allowed:
            return ActionResult.fail(
                "You do not have permission to view this post.", status=status.HTTP_403_FORBIDDEN
            )

    comments = Comment.objects.filter(post=post).select_related("user").order_by("-created_at")
    return ActionResult.ok({"post": to_post_dto(post), "comments": to_comment_dtos(comments)})


@storage_action("Failed to create the post.")
def create_post(session: Session, data) -> ActionResult:
    user_id = get_session_user_id(session)
    serializer = PostInputSerializer(data=data)
    if not serializer.is_valid():
        return ActionResult.invalid(serializer)

    post = Post.objects.create(user_id=user_id, **serializer.validated_data)
    logger.info("Post %s created by %s", post.id, user_id)
    revalidate_path(FEED_PATH)
    return ActionResult.ok({"post_id": str(post.id)}, status=status.HTTP_201_CREATED)


@storage_action("Failed to update the post.")
def update_post(session: Session, post_id, data) -> ActionResult:
    permission = check_permission(session, POST, post_id)
    if not permission.allowed:
        return ActionResult.denied(permission, "You do not have permission to perform this action.")

    serializer = PostUpdateSerializer(data=data)
    if not serializer.is_valid():
        return ActionResult.invalid(serializer)

    post = Post.objects.filter(pk=post_id).first()
    if post is None:
        return ActionResult.not_found("Post not found.")
    # Owner is never part of an update.
    for field, value in serializer.validated_data.items():
        setattr(post, field, value)
    post.save(update_fields=[*serializer.validated_data, "updated_at"])
    revalidate_path(post_path(post_id), FEED_PATH)
    return ActionResult.ok({"post_id": str(post_id)})


@storage_action("Failed to delete the post.")
def delete_post(session: Session, post_id) -> ActionResult:
    permission = check_permission(session, POST, post_id)
    if not permission.allowed:
        return ActionResult.denied(permission, "You do not have permission to perform this action.")

    Post.objects.filter(pk=post_id).delete()
    logger.info("Post %s deleted by %s", post_id, session.user_id)
    revalidate_path(post_path(post_id), FEED_PATH)
    return ActionResult.ok(status=status.HTTP_204_NO_CONTENT)


@storage_action("Failed to post the comment.")
def create_comment(session: Session, post_id, data) -> ActionResult:
    user_id = get_session_user_id(session)
    serializer = CommentInputSerializer(data=data)
    if not serializer.is_valid():
        return ActionResult.invalid(serializer)

    post = Post.objects.filter(pk=post_id).only("id", "published").first()
    if post is None:
        return ActionResult.not_found("Post not found.")
    if not post.published:
        return ActionResult.fail("Comments are not allowed on unpublished posts.")

    comment = Comment.objects.create(user_id=user_id, post=post, **serializer.validated_data)
    revalidate_path(post_path(post_id), FEED_PATH)
    return ActionResult.ok({"comment_id": str(comment.id)}, status=status.HTTP_201_CREATED)


@storage_action("Failed to delete the comment.")
def delete_comment(session: Session, comment_id) -> ActionResult:
    permission = check_permission(session, COMMENT, comment_id)
    if not permission.allowed:
        return ActionResult.denied(permission, "You do not have permission to perform this action.")

    comment = Comment.objects.filter(pk=comment_id).only("id", "post_id").first()
    if comment is None:
        return ActionResult.not_found("Comment not found.")

    comment.delete()
    revalidate_path(post_path(comment.post_id), FEED_PATH)
    return ActionResult.ok(status=status.HTTP_204_NO_CONTENT)


__all__ = [
    "create_comment",
    "create_post",
    "delete_comment",
    "delete_post",
    "get_my_posts",
    "get_post_by_id",
    "get_posts",
    "update_post",
]
