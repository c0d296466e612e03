import json

import pytest

from emblog import create_app
from emblog.config import TestConfig
from emblog.extensions import db as _db
from emblog.middleware.auth import create_token
from emblog.models.user import ROLE_ADMIN, User


@pytest.fixture
def app(tmp_path):
    """Create a test Flask application with SQLite in-memory database."""
    application = create_app(TestConfig)
    application.config['UPLOAD_FOLDER'] = str(tmp_path / 'uploads')

    with application.app_context():
        _db.create_all()
        yield application
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    with app.test_client() as test_client:
        yield test_client


def auth_header(token):
    return {'Authorization': f'Bearer {token}'}


def post_json(client, url, payload, token=None):
    return client.post(
        url,
        data=json.dumps(payload),
        content_type='application/json',
        headers=auth_header(token) if token else None,
    )


def put_json(client, url, payload, token=None):
    return client.put(
        url,
        data=json.dumps(payload),
        content_type='application/json',
        headers=auth_header(token) if token else None,
    )


def create_user(name='Test User', email='test@example.com', password='secret1', role='user', blocked=False):
    """Insert a user directly and return ``(user, token)``. Needs an app context."""
    user = User(name=name, email=email, role=role, is_blocked=blocked)
    user.set_password(password)
    _db.session.add(user)
    _db.session.commit()
    return user, create_token(user.id)


@pytest.fixture
def user_token(app):
    _, token = create_user()
    return token


@pytest.fixture
def other_token(app):
    _, token = create_user(name='Other User', email='other@example.com')
    return token


@pytest.fixture
def admin_token(app):
    _, token = create_user(name='Admin', email='admin@example.com', role=ROLE_ADMIN)
    return token


def make_article(client, token, **overrides):
    """Create an article through the API and return its JSON."""
    payload = {
        'title': 'Test Article',
        'content': '<p>Hello world this is a test article with several words</p>',
        'status': 'published',
        'keywords': ['python'],
    }
    payload.update(overrides)
    resp = post_json(client, '/api/articles', payload, token)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()['article']
