"""
Pytest configuration and fixtures.
Provides test database, client, users per role and common test records.
"""

import os

# Configure before the application (and its engine) is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DISABLE_BOOTSTRAP_USERS"] = "true"

from datetime import datetime, timezone  # noqa: E402
from typing import Callable, Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402
from sqlmodel.pool import StaticPool  # noqa: E402

from app.core.config import settings  # noqa: E402
from app.db.session import get_session  # noqa: E402
from app.main import app  # noqa: E402
from app.models.bank import Bank  # noqa: E402
from app.models.bank_order import BankOrder  # noqa: E402
from app.models.courier import Courier, CourierType  # noqa: E402
from app.models.product import Product, ProductType  # noqa: E402
from app.models.user import User, UserRole  # noqa: E402
from app.models.vendor import Vendor  # noqa: E402
from app.schemas.user import UserCreate  # noqa: E402
from app.services.bank_order_service import BankOrderService  # noqa: E402
from app.services.bank_service import BankService  # noqa: E402
from app.services.courier_service import CourierService  # noqa: E402
from app.services.product_service import ProductService  # noqa: E402
from app.services.user_service import UserService  # noqa: E402
from app.services.vendor_service import VendorService  # noqa: E402

API = settings.API_V1_PREFIX

PASSWORDS = {
    UserRole.ADMIN: "adminpassword123",
    UserRole.STAFF: "staffpassword123",
    UserRole.DISPATCH: "dispatchpassword123",
}


@pytest.fixture(name="session")
def session_fixture() -> Generator[Session, None, None]:
    """
    Create a test database session.
    Uses an in-memory SQLite database for fast tests.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)

    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session) -> Generator[TestClient, None, None]:
    """
    Create a test client with dependency overrides.
    """

    def get_session_override() -> Generator[Session, None, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def create_user(session: Session, role: UserRole, email: str) -> User:
    return UserService(session).create_user(
        UserCreate(
            email=email,
            password=PASSWORDS[role],
            first_name=role.value.title(),
            last_name="User",
            role=role,
        )
    )


@pytest.fixture(name="test_admin")
def test_admin_fixture(session: Session) -> User:
    return create_user(session, UserRole.ADMIN, "admin@example.com")


@pytest.fixture(name="test_staff")
def test_staff_fixture(session: Session) -> User:
    return create_user(session, UserRole.STAFF, "staff@example.com")


@pytest.fixture(name="test_dispatch")
def test_dispatch_fixture(session: Session) -> User:
    return create_user(session, UserRole.DISPATCH, "dispatch@example.com")


def login(client: TestClient, email: str, password: str) -> dict:
    """Log in through the API and return the envelope's ``data``."""
    response = client.post(
        f"{API}/auth/login",
        data={"username": email, "password": password},
    )
    assert response.status_code == 200, response.text
    return response.json()["data"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(name="admin_headers")
def admin_headers_fixture(client: TestClient, test_admin: User) -> dict[str, str]:
    return bearer(login(client, test_admin.email, PASSWORDS[UserRole.ADMIN])["accessToken"])


@pytest.fixture(name="staff_headers")
def staff_headers_fixture(client: TestClient, test_staff: User) -> dict[str, str]:
    return bearer(login(client, test_staff.email, PASSWORDS[UserRole.STAFF])["accessToken"])


@pytest.fixture(name="dispatch_headers")
def dispatch_headers_fixture(client: TestClient, test_dispatch: User) -> dict[str, str]:
    return bearer(
        login(client, test_dispatch.email, PASSWORDS[UserRole.DISPATCH])["accessToken"]
    )


# Domain records


@pytest.fixture(name="bank")
def bank_fixture(session: Session) -> Bank:
    return BankService(session).create({"bank_name": "Meezan Bank"})


@pytest.fixture(name="vendor")
def vendor_fixture(session: Session) -> Vendor:
    return VendorService(session).create(
        {
            "vendor_name": "Acme Electronics",
            "phone": "0300-1234567",
            "email": "sales@acme.example.com",
            "address": "12 Mall Road",
            "city": "Lahore",
        }
    )


@pytest.fixture(name="courier")
def courier_fixture(session: Session) -> Courier:
    return CourierService(session).create(
        {
            "courier_name": "TCS",
            "courier_type": CourierType.TCS,
            "api_secret": "s3cret",
        }
    )


@pytest.fixture(name="make_product")
def make_product_fixture(session: Session) -> Callable[..., Product]:
    def _make(
        number: str = "GC-100",
        name: str = "Air Fryer",
        product_type: ProductType = ProductType.BANK_ORDER,
    ) -> Product:
        return ProductService(session).create(
            {"name": name, "bank_product_number": number, "product_type": product_type}
        )

    return _make


@pytest.fixture(name="make_bank_order")
def make_bank_order_fixture(session: Session, bank: Bank) -> Callable[..., BankOrder]:
    counter = {"value": 0}

    def _make(**overrides) -> BankOrder:
        counter["value"] += 1
        data = {
            "bank_id": bank.id,
            "cnic": "35202-1234567-1",
            "customer_name": "Ayesha Khan",
            "mobile1": "03001234567",
            "address": "House 5, Street 9",
            "city": "Karachi",
            "brand": "Philips",
            "product": "Air Fryer",
            "gift_code": "GC-100",
            "qty": 1,
            "ref_no": f"REF-{counter['value']}",
            "po_number": f"BPO-{counter['value']}",
            "order_date": datetime(2024, 5, 1, tzinfo=timezone.utc),
            "redeemed_points": 1500.0,
        }
        data.update(overrides)
        return BankOrderService(session).create(data)

    return _make
