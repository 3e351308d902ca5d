from datetime import datetime, timedelta, timezone

import pytest

from quizroom import create_app
from quizroom import firestore_dao as dao
from quizroom.firestore_models import Question, User
from quizroom.services.classrooms import ClassroomService
from quizroom.services.profile import ProfileService
from quizroom.services.quizzes import QuizService
from quizroom.services.stats import StatsService

from fake_firestore import FakeFirestore


class TestingConfig:
    TESTING = True
    SECRET_KEY = 'test'
    LOG_LEVEL = 'DEBUG'
    FANOUT_MAX_WORKERS = 4
    CLASSROOM_PAGE_SIZE = 2
    SOCKETIO_ASYNC_MODE = 'threading'
    CORS_ALLOWED_ORIGINS = ''


@pytest.fixture
def db():
    return FakeFirestore()


@pytest.fixture
def classrooms(db):
    return ClassroomService(db, max_workers=4)


@pytest.fixture
def quizzes(db):
    return QuizService(db)


@pytest.fixture
def stats(db):
    return StatsService(db)


@pytest.fixture
def profile(db):
    return ProfileService(db, max_workers=4)


@pytest.fixture
def make_user(db):
    def make(uid, name=None, email=None):
        user = User(id=uid, name=name or f'User {uid}', email=email or f'{uid}@example.com')
        dao.create_user(db, user)
        return user
    return make


@pytest.fixture
def sample_questions():
    return [
        Question(question='2 + 2?', options=['3', '4'], answer='4'),
        Question(question='Capital of France?', options=['Paris', 'Rome', 'Oslo'], answer='Paris'),
    ]


@pytest.fixture
def in_an_hour():
    return datetime.now(timezone.utc) + timedelta(hours=1)


@pytest.fixture
def classroom(classrooms, make_user):
    """A classroom created by teacher 't1'."""
    make_user('t1', 'Tina Teacher')
    return classrooms.create_classroom('t1', 'Intro to Testing 2025').value


@pytest.fixture
def app(db, monkeypatch):
    # Bearer tokens in tests are the uid itself.
    monkeypatch.setattr('quizroom.decorators.verify_token', lambda token: token or None)
    return create_app(TestingConfig, db=db)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def enroll(classrooms, classroom, make_user):
    """Create user `uid` and join them to `classroom` as a student."""
    def join(uid, name=None):
        make_user(uid, name)
        return classrooms.join_classroom(uid, classroom.password)
    return join
