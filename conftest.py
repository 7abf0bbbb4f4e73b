import pytest

from config import TestingConfig
from twitchviewer import create_app
from twitchviewer.sessions import MemorySessionStore
from twitchviewer.storage import MemStorage

PASSWORD = 'secret123'


@pytest.fixture()
def storage():
    return MemStorage()


@pytest.fixture()
def session_store():
    return MemorySessionStore()


@pytest.fixture()
def app(storage, session_store, tmp_path):
    app = create_app(TestingConfig, storage=storage, session_store=session_store)
    app.config['UPLOAD_FOLDER'] = str(tmp_path / 'uploads')
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


def register(client, username, email=None, password=PASSWORD):
    return client.post('/api/register', json={
        'username': username,
        'email': email or f'{username}@example.com',
        'password': password,
    })


@pytest.fixture()
def admin_client(app):
    """Logged in as the first registered user, who becomes the admin."""
    client = app.test_client()
    response = register(client, 'admin')
    assert response.status_code == 201
    assert response.get_json()['role'] == 'admin'
    return client


@pytest.fixture()
def user_client(app, admin_client):
    """Logged in as an ordinary, unverified user."""
    client = app.test_client()
    response = register(client, 'viewer')
    assert response.status_code == 201
    return client
