import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from dependencies import create_access_token, get_password_hash
from main import app
from models import User


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest_asyncio.fixture
async def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make_user(username, is_admin=False, password="secret-pw", name=None):
        user = User(
            username=username,
            password=get_password_hash(password),
            name=name or username.capitalize(),
            is_admin=is_admin,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def headers_for():
    def _headers_for(user):
        token = create_access_token(data={"sub": user.username})
        return {"Authorization": f"Bearer {token}"}
    return _headers_for


@pytest.fixture
def alice(make_user):
    return make_user("alice", name="Alice Kim")


@pytest.fixture
def bob(make_user):
    return make_user("bob", name="Bob Lee")


@pytest.fixture
def admin(make_user):
    return make_user("admin", is_admin=True, name="Administrator")
