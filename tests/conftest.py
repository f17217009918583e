"""
Pytest configuration for backend tests.

Every test runs against a fresh in-memory SQLite database. The environment
is set before the application is imported so settings pick it up.
"""
import os
from contextlib import contextmanager

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import httpx  # noqa: E402
import pytest  # noqa: E402
from httpx import ASGITransport  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from school_admin.core.context import request_scope, set_auth_context  # noqa: E402
from school_admin.core.permissions import Role  # noqa: E402
from school_admin.core.security import create_access_token, hash_password, token_service  # noqa: E402
from school_admin.db.base import Base  # noqa: E402
from school_admin.db.session import get_db  # noqa: E402
from school_admin.main import app  # noqa: E402
from school_admin.models import Institute, User  # noqa: E402

DEFAULT_PASSWORD = "Secret123!"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_token_cache():
    token_service.clear_cache()
    yield
    token_service.clear_cache()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    """HTTP client whose requests share the test's database session."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield httpx.AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
    finally:
        app.dependency_overrides.clear()


# =====================================================
# FACTORIES
# =====================================================

@pytest.fixture
def make_institute(db):
    counter = {"n": 0}

    def _make(**overrides) -> Institute:
        counter["n"] += 1
        values = dict(
            name=f"Green Valley School {counter['n']}",
            code=f"GVS{counter['n']:03d}",
            address="12 Orchard Road",
            contact_email=f"office{counter['n']}@greenvalley.edu",
            contact_phone=f"98000000{counter['n']:02d}",
        )
        values.update(overrides)
        institute = Institute(**values)
        db.add(institute)
        db.commit()
        db.refresh(institute)
        return institute

    return _make


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role=Role.INSTITUTE_ADMIN, institute=None, password=DEFAULT_PASSWORD, **overrides) -> User:
        counter["n"] += 1
        role = role.value if isinstance(role, Role) else role
        values = dict(
            first_name="Asha",
            last_name=f"Rao{counter['n']}",
            email=f"user{counter['n']}@greenvalley.edu",
            password_hash=hash_password(password),
            role=role,
            institute_id=institute.id if institute is not None else None,
        )
        values.update(overrides)
        user = User(**values)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        token = create_access_token({
            "sub": str(user.id),
            "email": user.email,
            "role": user.role,
            "institute_id": str(user.institute_id) if user.institute_id else None,
        })
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def acting_as():
    """Open a request scope populated as if ``user`` passed the authorization gate."""

    @contextmanager
    def _scope(user: User):
        with request_scope():
            set_auth_context(user)
            yield

    return _scope
