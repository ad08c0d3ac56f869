import pytest

from blog_backend.app import create_app
from blog_backend.extensions import db
from blog_backend.models import UserType
from blog_backend.repositories import UserRepository
from blog_backend.security import hash_password

ACCESS_SECRET = 'test-access-secret-0123456789-abcdefghijklmnop'
REFRESH_SECRET = 'test-refresh-secret-0123456789-abcdefghijklmnop'
PASSWORD = 'secret123'


@pytest.fixture
def app():
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'ACCESS_TOKEN_SECRET': ACCESS_SECRET,
        'REFRESH_TOKEN_SECRET': REFRESH_SECRET,
        'BCRYPT_LOG_ROUNDS': 4,
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    """Creates a user directly in the database and returns its id."""
    def _make_user(name, user_type=UserType.BLOGGER, email=None, password=PASSWORD):
        with app.app_context():
            user = UserRepository.create(
                type=user_type,
                name=name,
                email=email or f'{name}@example.com',
                password_hash=hash_password(password),
            )
            return user.id
    return _make_user


@pytest.fixture
def auth_headers(app):
    def _auth_headers(user_id):
        token = app.extensions['token_service'].issue_access_token(user_id)
        return {'Authorization': f'Bearer {token}'}
    return _auth_headers


@pytest.fixture
def blogger(make_user):
    return make_user('alice')


@pytest.fixture
def other_blogger(make_user):
    return make_user('bob')


@pytest.fixture
def admin(make_user):
    return make_user('root', user_type=UserType.ADMIN)


@pytest.fixture
def create_post(client, auth_headers):
    """Creates a post through the API and returns its id."""
    def _create_post(user_id, title, publish=True, content='Some post content that is long enough.'):
        response = client.post('/api/v1/posts', headers=auth_headers(user_id), json={
            'title': title,
            'content': content,
            'publish': publish,
        })
        assert response.status_code == 201, response.get_json()
        return response.get_json()['postId']
    return _create_post


@pytest.fixture
def create_comment(client, auth_headers):
    def _create_comment(user_id, post_id, content='Nice post!'):
        response = client.post(f'/api/v1/comments/{post_id}', headers=auth_headers(user_id),
                               json={'content': content})
        assert response.status_code == 201, response.get_json()
        return response.get_json()['comment']['id']
    return _create_comment
