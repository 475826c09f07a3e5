"""Tests for sharing admin configuration."""

import pytest

from sharebox.apps.sharing.logic.share_operations import create_share
from sharebox.apps.sharing.models import ShareType


@pytest.mark.django_db
class TestShareRecordAdmin:
    """Tests for ShareRecordAdmin."""

    def test_changelist(self, admin_client, user, owner_files):
        """Test shares are listed in the admin."""
        create_share(user, ['docs/report.pdf'], ShareType.WEBSITE, password='hunter2')

        response = admin_client.get('/admin/sharing/sharerecord/')

        assert response.status_code == 200
        assert b'testuser' in response.content

    def test_change_page_hides_password(self, admin_client, user, owner_files):
        """Test the password hash is never shown."""
        share_uri = create_share(
            user,
            ['docs/report.pdf'],
            ShareType.WEBSITE,
            password='hunter2',
        )

        response = admin_client.get(f'/admin/sharing/sharerecord/{share_uri}/change/')

        assert response.status_code == 200
        assert b'md5$' not in response.content

    def test_add_is_disabled(self, admin_client):
        """Test shares cannot be created through the admin."""
        response = admin_client.get('/admin/sharing/sharerecord/add/')

        assert response.status_code == 403
