import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from deps.auth import create_access_token, get_password_hash
from main import create_app
from models import User, Profile, UserRole


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture()
def SessionTest(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db(SessionTest):
    session = SessionTest()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(SessionTest):
    app = create_app(create_tables=False)

    def _get_db():
        session = SessionTest()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c


# ชุดเดียวกันใช้ได้ทุก user ใน test (hash ครั้งเดียว)
_PW_HASH = None


def _pw_hash():
    global _PW_HASH
    if _PW_HASH is None:
        _PW_HASH = get_password_hash("secret123")
    return _PW_HASH


@pytest.fixture()
def make_user(db):
    def _make(email, role=None, full_name=None):
        u = User(email=email, password_hash=_pw_hash())
        if full_name is not None:
            u.profile = Profile(full_name=full_name)
        db.add(u)
        db.flush()
        if role:
            db.add(UserRole(user_id=u.id, role=role))
        db.commit()
        db.refresh(u)
        return u
    return _make


def auth_header(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


@pytest.fixture()
def admin(make_user):
    return make_user("admin@example.com", role="admin", full_name="Admin")


@pytest.fixture()
def employee(make_user):
    return make_user("staff@example.com", role="employee", full_name="Staff")


@pytest.fixture()
def admin_headers(admin):
    return auth_header(admin)


@pytest.fixture()
def employee_headers(employee):
    return auth_header(employee)


@pytest.fixture()
def headers_for():
    return auth_header
