"""Shared pytest fixtures for the UAM API tests."""

import os
from dataclasses import dataclass

# Settings are read on first import of uam; keep tests off the real database
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from uam.auth.jwt import create_access_token
from uam.auth.passwords import hash_password
from uam.database import Base, get_db
from uam.main import app
from uam.models import (
    Asset, AssetStatus, Company, Location, Role, Section, User, ADMIN_ROLE
)
from uam.services.document_storage import (
    DocumentStorage, get_document_storage, get_image_storage, AVATAR_SUBDIRECTORY, IMAGE_MIME_TYPES
)
from uam.services.pdf_renderer import PdfRendererClient, get_pdf_renderer

CALLER_NATIONAL_ID = "1.234.567-8"
RECEIVER_NATIONAL_ID = "9.876.543-2"
OTHER_NATIONAL_ID = "5.555.555-5"
PASSWORD = "s3cret-pass"
PASSWORD_HASH = hash_password(PASSWORD)

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@dataclass
class Seed:
    it_section_id: int
    warehouse_section_id: int
    office_location_id: int
    shelf_location_id: int
    supplier_id: int
    caller_id: int
    receiver_id: int
    other_user_id: int
    admin_role_id: int
    asset_id: int


@pytest.fixture(autouse=True)
def _database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory():
    return TestingSessionLocal


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def renderer_calls():
    """Requests the mocked PDF renderer received."""
    return []


@pytest.fixture
def renderer_status():
    """HTTP status the mocked renderer answers with."""
    return {"code": 200}


@pytest.fixture
def upload_root(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def client(renderer_calls, renderer_status, upload_root):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    def handler(request: httpx.Request) -> httpx.Response:
        renderer_calls.append(request)
        if renderer_status["code"] != 200:
            return httpx.Response(renderer_status["code"], text="renderer down")
        return httpx.Response(200, content=b"%PDF-1.4 test", headers={"Content-Type": "application/pdf"})

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_pdf_renderer] = lambda: PdfRendererClient(
        url="http://renderer.test/render", transport=httpx.MockTransport(handler)
    )
    app.dependency_overrides[get_document_storage] = lambda: DocumentStorage(
        root=str(upload_root), subdirectory="invoices", max_bytes=1024
    )
    app.dependency_overrides[get_image_storage] = lambda: DocumentStorage(
        root=str(upload_root), subdirectory=AVATAR_SUBDIRECTORY, max_bytes=1024,
        allowed_types=IMAGE_MIME_TYPES
    )
    # Not used as a context manager: the startup hook would touch the configured database
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seed(db) -> Seed:
    """IT/Office-1 and Warehouse/Shelf-3, three users and one asset in use at IT/Office-1."""
    admin = Role(name=ADMIN_ROLE, description="Administrative rights")
    it = Section(name="IT", email="it@example.org")
    warehouse = Section(name="Warehouse")
    db.add_all([admin, it, warehouse])
    db.flush()

    office = Location(name="Office-1", section_id=it.id)
    shelf = Location(name="Shelf-3", section_id=warehouse.id)
    supplier = Company(tax_id="210000000011", legal_name="Acme S.A.", trade_name="Acme")
    db.add_all([office, shelf, supplier])
    db.flush()

    caller = User(
        email="caller@example.org", first_name="Ana", last_name="Pérez",
        national_id=CALLER_NATIONAL_ID, section_id=it.id, password_hash=PASSWORD_HASH
    )
    caller.roles = [admin]
    receiver = User(
        email="receiver@example.org", first_name="Bruno", last_name="Silva",
        national_id=RECEIVER_NATIONAL_ID, section_id=warehouse.id, password_hash=PASSWORD_HASH
    )
    other = User(
        email="other@example.org", first_name="Carla", last_name="Gómez",
        national_id=OTHER_NATIONAL_ID, section_id=it.id, password_hash=PASSWORD_HASH
    )
    asset = Asset(
        product_name="Laptop", serial_number="SN-001", inventory_code="INV-001",
        current_section_id=it.id, current_location_id=office.id,
        supplier_company_id=supplier.id, status=AssetStatus.IN_USE
    )
    db.add_all([caller, receiver, other, asset])
    db.commit()

    return Seed(
        it_section_id=it.id,
        warehouse_section_id=warehouse.id,
        office_location_id=office.id,
        shelf_location_id=shelf.id,
        supplier_id=supplier.id,
        caller_id=caller.id,
        receiver_id=receiver.id,
        other_user_id=other.id,
        admin_role_id=admin.id,
        asset_id=asset.id,
    )


@pytest.fixture
def auth_headers(seed):
    """Bearer token of the caller (Admin)."""
    return {"Authorization": f"Bearer {create_access_token(seed.caller_id)}"}


@pytest.fixture
def other_headers(seed):
    """Bearer token of a user without roles."""
    return {"Authorization": f"Bearer {create_access_token(seed.other_user_id)}"}
