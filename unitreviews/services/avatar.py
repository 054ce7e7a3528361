"""Profile image storage."""

from pathlib import Path

from unitreviews.config import settings
from unitreviews.core.logging import get_logger

logger = get_logger(__name__)


def is_stored_avatar(profile_img: str | None) -> bool:
    """True if profile_img names a file in our avatar store (not an external URL)."""
    if not profile_img:
        return False
    return "://" not in profile_img and "/" not in profile_img and profile_img not in (".", "..")


def delete_profile_image(profile_img: str | None) -> bool:
    """Best-effort removal of a user's stored avatar file.

    Called after the owning user has been deleted. Failures are logged and
    never raised; an orphaned file is preferable to failing the deletion.

    Args:
        profile_img: The user's profile_img value

    Returns:
        True if a file was deleted, False otherwise
    """
    if not is_stored_avatar(profile_img):
        return False

    assert profile_img is not None
    file_path = Path(settings.AVATAR_STORAGE_PATH) / profile_img
    try:
        if not file_path.exists():
            return False
        file_path.unlink()
    except OSError as e:
        logger.warning("avatar_delete_failed", filename=profile_img, error=str(e))
        return False

    logger.info("avatar_deleted", filename=profile_img)
    return True
