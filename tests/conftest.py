# tests/conftest.py
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gaadiyaan import crud, mapper
from gaadiyaan.config import Settings
from gaadiyaan.db import Base, get_db
from gaadiyaan.dependencies import get_image_store, get_settings
from gaadiyaan.main import app
from gaadiyaan.security import create_access_token, hash_password
from gaadiyaan.uploads import ImageStore
import gaadiyaan.models  # noqa: F401 ensure models are imported so tables are known


def listing_data(**overrides):
    data = {
        "dealerId": "GD2024001",
        "carTitle": "Maruti Swift VXI",
        "price": 500000,
        "year": 2021,
        "description": "Single owner, service records available",
        "make": "Maruti",
        "model": "Swift",
        "registrationYear": 2021,
        "insurance": "Comprehensive",
        "fuelType": "petrol",
        "seats": 5,
        "kmsDriven": 25000,
        "location": "Pune",
        "ownership": "First",
        "engineDisplacement": 1197,
        "transmission": "manual",
        "specifications": ["ABS", "Dual airbags"],
        "features": {"sunroof": False, "color": "red"},
        "images": ["http://testserver/uploads/vehicles/a.jpg"],
    }
    data.update(overrides)
    return data


@pytest.fixture
def engine():
    # one shared in-memory database per test
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
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
def settings(tmp_path):
    return Settings(
        database_url="sqlite://",
        upload_root=str(tmp_path / "uploads"),
        public_base_url="http://testserver",
        secret_key="test-secret-key-that-is-long-enough-for-hs256",
    )


@pytest.fixture
def image_store(settings):
    return ImageStore(
        root=settings.upload_root,
        public_base_url=settings.public_base_url,
        url_path=settings.upload_url_path,
        max_bytes=settings.max_upload_bytes,
    )


@pytest.fixture
def client(session_factory, settings, image_store):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_image_store] = lambda: image_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_listing(db):
    def _make(**overrides):
        return crud.create_listing(db, mapper.to_storage(listing_data(**overrides)))
    return _make


@pytest.fixture
def make_user(db):
    def _make(username, role="client", dealer_id=None, password="secret123"):
        return crud.create_user(db, {
            "username": username,
            "email": f"{username}@example.com",
            "password_hash": hash_password(password),
            "role": role,
            "dealer_id": dealer_id,
        })
    return _make


@pytest.fixture
def auth_headers(settings):
    def _headers(user):
        token = create_access_token(user.id, user.role, settings)
        return {"Authorization": f"Bearer {token}"}
    return _headers
