"""Tests for personal directory HTTP views."""

import base64

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile


def _basic_auth(username, password):
    token = base64.b64encode(f'{username}:{password}'.encode()).decode()
    return {'HTTP_AUTHORIZATION': f'Basic {token}'}


@pytest.fixture
def logged_client(client, user):
    """Client with a session of the test user.

    Returns:
        Django test client.
    """
    client.force_login(user)
    return client


@pytest.mark.django_db
class TestPersonalDirectoryView:
    """Tests for /file/p endpoints."""

    def test_anonymous_is_unauthorized(self, client):
        """Test requests without identity get 401 in the envelope."""
        response = client.get('/file/p')

        assert response.status_code == 401
        assert response.json()['code'] == 401

    def test_list_root(self, logged_client):
        """Test listing the empty sandbox root."""
        response = logged_client.get('/file/p')

        assert response.status_code == 200
        assert response.json() == {'code': 200, 'data': []}

    def test_upload_and_list(self, logged_client, user_root):
        """Test multipart upload followed by a listing."""
        upload = SimpleUploadedFile('report.pdf', b'x' * 1024)

        response = logged_client.post('/file/p/docs', {'file': upload})

        assert response.status_code == 201
        assert response.json()['data']['filename'] == 'report.pdf'
        assert (user_root / 'docs' / 'report.pdf').stat().st_size == 1024

        listing = logged_client.get('/file/p/docs').json()['data']
        assert [entry['filename'] for entry in listing] == ['report.pdf']
        assert listing[0]['size'] == 1024
        assert listing[0]['extension'] == 'pdf'

    def test_upload_without_file_field(self, logged_client):
        """Test a POST without the file field is rejected."""
        response = logged_client.post('/file/p/docs', {'other': 'value'})

        assert response.status_code == 400

    def test_make_directory(self, logged_client, user_root):
        """Test PUT creates nested directories."""
        response = logged_client.put('/file/p/a/b')

        assert response.status_code == 200
        assert response.json()['data']['is_directory'] is True
        assert (user_root / 'a' / 'b').is_dir()

    def test_delete(self, logged_client, user_root, make_file):
        """Test DELETE removes a file."""
        make_file(user_root, 'docs/a.txt')

        response = logged_client.delete('/file/p/docs/a.txt')

        assert response.status_code == 200
        assert not (user_root / 'docs' / 'a.txt').exists()

    def test_delete_missing(self, logged_client, user_root):
        """Test deleting a missing path returns 404."""
        response = logged_client.delete('/file/p/ghost.txt')

        assert response.status_code == 404
        assert response.json()['code'] == 404

    @pytest.mark.parametrize('method', ['put', 'delete'])
    def test_root_only_allows_list_and_upload(self, logged_client, method):
        """Test the sandbox root cannot be created or deleted."""
        response = getattr(logged_client, method)('/file/p')

        assert response.status_code == 405

    def test_traversal_is_bad_request(self, logged_client, other_user):
        """Test encoded traversal in the URL is rejected."""
        response = logged_client.get('/file/p/..%2Fotheruser')

        assert response.status_code == 400

    def test_list_root_with_trailing_slash(self, logged_client, user_root, make_file):
        """Test /file/p/ lists the sandbox root like /file/p."""
        make_file(user_root, 'a.txt')

        response = logged_client.get('/file/p/')

        assert response.status_code == 200
        assert [entry['filename'] for entry in response.json()['data']] == ['a.txt']

    def test_directory_below_file_is_bad_request(self, logged_client, user_root, make_file):
        """Test creating a directory under an existing file returns 400."""
        make_file(user_root, 'report.pdf')

        response = logged_client.put('/file/p/report.pdf/sub')

        assert response.status_code == 400
        assert response.json()['code'] == 400
        assert (user_root / 'report.pdf').is_file()

    def test_basic_auth(self, client, user, user_root, make_file):
        """Test API clients authenticate with Basic credentials."""
        make_file(user_root, 'a.txt')

        response = client.get('/file/p', **_basic_auth('testuser', 'testpass123'))

        assert response.status_code == 200
        assert response.json()['data'][0]['filename'] == 'a.txt'

    def test_basic_auth_wrong_password(self, client, user):
        """Test wrong Basic credentials leave the request anonymous."""
        response = client.get('/file/p', **_basic_auth('testuser', 'wrong'))

        assert response.status_code == 401


@pytest.mark.django_db
@pytest.mark.usefixtures('extension_mime')
class TestPersonalFileView:
    """Tests for /file/f downloads."""

    def test_download(self, logged_client, user_root, make_file):
        """Test a file is streamed as an attachment."""
        make_file(user_root, 'docs/report.pdf', b'%PDF' + b'x' * 2000)

        response = logged_client.get('/file/f/docs/report.pdf')

        assert response.status_code == 200
        assert response.streaming
        assert response['Content-Type'] == 'application/pdf'
        assert response['Content-Length'] == '2004'
        assert response['Content-Disposition'] == (
            'attachment; filename="report.pdf"'
        )
        assert b''.join(response.streaming_content) == b'%PDF' + b'x' * 2000

    def test_download_missing(self, logged_client, user_root):
        """Test missing files answer 404."""
        response = logged_client.get('/file/f/ghost.pdf')

        assert response.status_code == 404

    def test_download_directory(self, logged_client, user_root):
        """Test directories cannot be fetched as files."""
        (user_root / 'docs').mkdir()

        response = logged_client.get('/file/f/docs')

        assert response.status_code == 400

    def test_download_requires_identity(self, client):
        """Test anonymous downloads are unauthorized."""
        response = client.get('/file/f/docs/report.pdf')

        assert response.status_code == 401
