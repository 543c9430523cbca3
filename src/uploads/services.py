"""File upload actions."""

import logging

from rest_framework import status

from access_control.permissions import FILE, check_permission
from core.cache import revalidate_path
from core.dto import to_file_dto, to_file_dtos
from core.results import ActionResult, storage_action
from core.session import Session, get_session_user_id

from .models import File
from .serializers import FileUploadSerializer

logger = logging.getLogger(__name__)

FILES_PATH = "/files"


@storage_action("Failed to load files.")
def list_my_files(session: Session) -> ActionResult:
    user_id = get_session_user_id(session)
    files = File.objects.filter(user_id=user_id).order_by("-created_at")
    return ActionResult.ok({"files": to_file_dtos(files)})


@storage_action("Failed to upload the file.")
def upload_file(session: Session, data) -> ActionResult:
    user_id = get_session_user_id(session)
    serializer = FileUploadSerializer(data=data)
    if not serializer.is_valid():
        return ActionResult.invalid(serializer)

    upload = serializer.validated_data["file"]
    record = File(
        user_id=user_id,
        name=upload.name,
        size=upload.size,
        content_type=upload.content_type,
    )
    record.blob.save(upload.name, upload, save=False)
    try:
        record.save()
    except Exception:
        # Keep storage and rows in step.
        record.blob.delete(save=False)
        raise

    logger.info("File %s (%d bytes) uploaded by %s", record.id, record.size, user_id)
    revalidate_path(FILES_PATH)
    return ActionResult.ok({"file": to_file_dto(record)}, status=status.HTTP_201_CREATED)


@storage_action("Failed to delete the file.")
def delete_file(session: Session, file_id) -> ActionResult:
    permission = check_permission(session, FILE, file_id)
    if not permission.allowed:
        return ActionResult.denied(permission, "You do not have permission to perform this action.")

    record = File.objects.filter(pk=file_id).first()
    if record is None:
        return ActionResult.not_found("File not found.")

    blob = record.blob
    record.delete()
    if blob:
        blob.delete(save=False)
    revalidate_path(FILES_PATH)
    return ActionResult.ok(status=status.HTTP_204_NO_CONTENT)


__all__ = ["delete_file", "list_my_files", "upload_file"]
