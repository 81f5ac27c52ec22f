"""
Pytest configuration and fixtures for testing.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from portal.database.session import Base, get_db
from main import app
from portal.core.rate_limit import limiter
from portal.models import Customer
from portal.seed.seed_data import seed_permissions
from tests.fixtures import auth_headers_for, create_account, create_role


# Test database URL - using in-memory SQLite for tests
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

@pytest.fixture(scope="function")
def test_db():
    """
    Create a fresh test database for each test function.
    """
    engine = create_engine(
        SQLALCHEMY_TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        # Drop all tables after test
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def client(test_db):
    """
    Create a test client bound to the test database.
    """
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    limiter.reset()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def permission_catalog(test_db):
    """Seeded permission catalog"""
    return seed_permissions(test_db)


@pytest.fixture(scope="function")
def test_customer(test_db):
    customer = Customer(
        code="CUST001",
        customer_name="Test Customer",
        company_name="Test Logistics Ltd",
        contact_person="Alice Chen",
    )
    test_db.add(customer)
    test_db.commit()
    test_db.refresh(customer)
    return customer


@pytest.fixture(scope="function")
def second_customer(test_db):
    customer = Customer(
        code="CUST002",
        customer_name="Other Customer",
        company_name="Other Freight Co",
        contact_person="Bob Li",
    )
    test_db.add(customer)
    test_db.commit()
    test_db.refresh(customer)
    return customer


@pytest.fixture(scope="function")
def master_account(test_db, test_customer):
    return create_account(test_db, test_customer, "master", email="Master@Example.com")


@pytest.fixture(scope="function")
def master_headers(master_account):
    return auth_headers_for(master_account)


@pytest.fixture(scope="function")
def other_master_headers(test_db, second_customer):
    account = create_account(test_db, second_customer, "other_master", email="other@example.com")
    return auth_headers_for(account)


@pytest.fixture(scope="function")
def viewer_headers(test_db, test_customer, permission_catalog):
    """Sub-account whose role only grants view permissions"""
    role = create_role(
        test_db, test_customer, "Viewer",
        codes=("roles:view", "api:view"), permissions=permission_catalog,
    )
    account = create_account(test_db, test_customer, "viewer", email="viewer@example.com", role=role)
    return auth_headers_for(account)


@pytest.fixture(scope="function")
def manager_headers(test_db, test_customer, permission_catalog):
    """Sub-account allowed to manage roles and API keys"""
    role = create_role(
        test_db, test_customer, "Manager",
        codes=("roles:view", "roles:manage", "api:view", "api:manage"), permissions=permission_catalog,
    )
    account = create_account(test_db, test_customer, "manager", email="manager@example.com", role=role)
    return auth_headers_for(account)
