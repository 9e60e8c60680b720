import itertools
import uuid
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.core.security import get_password_hash, pwd_context
from app.db import base  # noqa: F401  registers every model
from app.db.session import Base, build_engine, get_db
from app.main import app
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.models.post import Post
from app.modules.user_management.models.user import User

# Cheap hashes; the algorithm is the same
pwd_context.update(bcrypt__rounds=4)

API = "/api/v1"
PASSWORD = "secret123"
BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'forum.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client_factory(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    # no context manager: startup hooks (table creation, sweeper) stay off
    yield lambda: TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def client(client_factory):
    return client_factory()


@pytest.fixture
def login(client_factory):
    """Register a user and return a client carrying its session cookie"""
    def _login(username):
        client = client_factory()
        response = client.post(f"{API}/auth/register", json={
            "username": username,
            "email": f"{username}@example.com",
            "password": PASSWORD,
        })
        assert response.status_code == 201, response.text
        response = client.post(f"{API}/auth/login", json={"username": username, "password": PASSWORD})
        assert response.status_code == 200, response.text
        client.user_id = response.json()["id"]
        return client
    return _login


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make_user(username=None):
        username = username or f"user{next(counter)}"
        user = User(
            id=str(uuid.uuid4()),
            username=username,
            email=f"{username}@example.com",
            hashed_password=get_password_hash(PASSWORD),
        )
        db.add(user)
        db.commit()
        return user
    return _make_user


@pytest.fixture
def make_post(db):
    """Posts with explicit timestamps so ordering assertions are stable"""
    def _make_post(author, minutes=0, title="A post"):
        post = Post(
            id=str(uuid.uuid4()),
            author_id=author.id,
            title=title,
            content="Some content",
            created_at=BASE_TIME + timedelta(minutes=minutes),
            updated_at=BASE_TIME + timedelta(minutes=minutes),
        )
        db.add(post)
        db.commit()
        return post
    return _make_post


@pytest.fixture
def make_comment(db):
    def _make_comment(post, author, parent=None, minutes=0, content="A comment"):
        comment = Comment(
            id=str(uuid.uuid4()),
            post_id=post.id,
            author_id=author.id,
            parent_id=parent.id if parent is not None else None,
            content=content,
            created_at=BASE_TIME + timedelta(minutes=minutes),
            updated_at=BASE_TIME + timedelta(minutes=minutes),
        )
        db.add(comment)
        db.commit()
        return comment
    return _make_comment
