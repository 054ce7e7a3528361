"""Tests for profile image deletion."""

from unittest.mock import patch

import pytest

from unitreviews.services.avatar import delete_profile_image, is_stored_avatar


@pytest.mark.unit
class TestDeleteProfileImage:
    def test_deletes_stored_file(self, tmp_path):
        (tmp_path / "alice.png").write_bytes(b"png")

        with patch("unitreviews.services.avatar.settings.AVATAR_STORAGE_PATH", str(tmp_path)):
            assert delete_profile_image("alice.png") is True

        assert not (tmp_path / "alice.png").exists()

    def test_missing_file_is_not_an_error(self, tmp_path):
        with patch("unitreviews.services.avatar.settings.AVATAR_STORAGE_PATH", str(tmp_path)):
            assert delete_profile_image("gone.png") is False

    def test_external_urls_are_left_alone(self):
        assert is_stored_avatar("https://lh3.googleusercontent.com/a/photo.jpg") is False
        assert delete_profile_image("https://res.cloudinary.com/x/image.png") is False

    def test_no_image(self):
        assert delete_profile_image(None) is False
        assert delete_profile_image("") is False

    def test_path_traversal_rejected(self):
        assert is_stored_avatar("../secrets.txt") is False
        assert is_stored_avatar("..") is False

    def test_os_errors_are_swallowed(self, tmp_path):
        (tmp_path / "locked.png").write_bytes(b"png")

        with (
            patch("unitreviews.services.avatar.settings.AVATAR_STORAGE_PATH", str(tmp_path)),
            patch("pathlib.Path.unlink", side_effect=PermissionError("read-only")),
        ):
            assert delete_profile_image("locked.png") is False
