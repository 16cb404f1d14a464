"""
Resume file storage.

Uses Django's default_storage, so local development writes under MEDIA_ROOT
and production can swap in any storage backend through settings.
"""
import logging
import os
import re
import time
from typing import Optional, Tuple

from django.conf import settings
from django.core.files.storage import default_storage
from django.db import DatabaseError
from django.utils import timezone

from hiring.exceptions import StorageError

logger = logging.getLogger(__name__)

MAX_RESUME_SIZE = 5 * 1024 * 1024  # 5MB in bytes
ALLOWED_RESUME_MIME_TYPES = {
    'application/pdf',
    'application/msword',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
}

RESUME_FIELDS = (
    'resume_url',
    'resume_path',
    'resume_original_name',
    'resume_mime',
    'resume_size',
    'resume_updated_at',
)


def _max_size():
    return getattr(settings, 'RESUME_MAX_BYTES', MAX_RESUME_SIZE)


def _allowed_types():
    return set(getattr(settings, 'RESUME_ALLOWED_MIME_TYPES', ALLOWED_RESUME_MIME_TYPES))


def validate_resume_file(file_obj) -> Tuple[bool, Optional[str]]:
    """
    Check type and size before anything is written.

    Returns:
        (is_valid, error_message)
    """
    if not file_obj:
        return False, "No file provided"

    content_type = getattr(file_obj, 'content_type', None)
    if content_type not in _allowed_types():
        return False, "Invalid file type. Allowed types: PDF, DOC, DOCX"

    if file_obj.size > _max_size():
        max_mb = _max_size() / (1024 * 1024)
        return False, f"File size exceeds {max_mb:.0f}MB limit"

    return True, None


def safe_file_name(name: str) -> str:
    return re.sub(r'[^a-zA-Z0-9._-]', '_', os.path.basename(name or 'resume'))


def save_resume_file(profile, file_obj, request=None):
    """Store ``file_obj`` as the profile's only resume, replacing any previous file."""
    path = f"resumes/{profile.account_id}/{int(time.time() * 1000)}-{safe_file_name(file_obj.name)}"
    previous_path = profile.resume_path

    try:
        stored_path = default_storage.save(path, file_obj)
    except OSError as e:
        logger.error(f"Failed to store resume for account {profile.account_id}: {e}", exc_info=True)
        raise StorageError()

    url = default_storage.url(stored_path)
    if request is not None and url.startswith('/'):
        url = request.build_absolute_uri(url)

    profile.resume_url = url
    profile.resume_path = stored_path
    profile.resume_original_name = file_obj.name
    profile.resume_mime = file_obj.content_type
    profile.resume_size = file_obj.size
    profile.resume_updated_at = timezone.now()
    try:
        profile.save(update_fields=list(RESUME_FIELDS) + ['updated_at'])
    except DatabaseError as e:
        logger.error(f"Failed to record resume for account {profile.account_id}: {e}", exc_info=True)
        # Nothing points at the new file
        delete_stored_file(stored_path)
        raise StorageError()

    if previous_path and previous_path != stored_path:
        delete_stored_file(previous_path)

    logger.info(f"Stored resume {stored_path} for account {profile.account_id}")
    return profile


def delete_stored_file(path: str) -> bool:
    """
    Delete a stored file; a missing file counts as deleted.

    Returns:
        True if deleted successfully or the file didn't exist
    """
    if not path:
        return True
    try:
        if default_storage.exists(path):
            default_storage.delete(path)
            logger.info(f"Deleted stored file: {path}")
        return True
    except OSError as e:
        logger.error(f"Failed to delete file {path}: {e}")
        return False


def delete_resume_file(profile):
    """Remove the stored resume and clear every resume field on the profile."""
    delete_stored_file(profile.resume_path)
    for attr in RESUME_FIELDS:
        setattr(profile, attr, None)
    profile.save(update_fields=list(RESUME_FIELDS) + ['updated_at'])
    logger.info(f"Cleared resume for account {profile.account_id}")
    return profile
