"""
Pytest fixtures for mall backend tests.

Provides an in-memory app, a fresh database per test, two competing stores
(X and Y) with catalog data, users for every role and their auth headers.
"""

from decimal import Decimal

import pytest
from mall import create_app
from mall.enums import AuthRole, StaffRole, StoreStatus
from mall.extensions import db
from mall.models import (
    User, Wing, Store, StoreStaff, Product, ProductVariant, Inventory,
)
from mall.services.auth_service import hash_password, create_default_roles, assign_role, issue_token


TEST_PASSWORD = "secret123"

TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    'JWT_SECRET_KEY': 'test-jwt-secret',
    'BCRYPT_LOG_ROUNDS': 4,
}


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TEST_CONFIG)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        db.session.rollback()
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        db.session.expunge_all()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def setup_roles(db_session):
    """Seed the four platform roles."""
    create_default_roles()
    db_session.commit()


@pytest.fixture(scope='function')
def make_user(db_session, setup_roles):
    """Factory: make_user("name", "email", AuthRole.X, ...)"""
    def _make(name, email, *roles, password=TEST_PASSWORD):
        user = User(name=name, email=email, password_hash=hash_password(password))
        db_session.add(user)
        db_session.commit()
        for role in roles:
            assign_role(user.id, role)
        return user
    return _make


@pytest.fixture(scope='function')
def admin(make_user):
    return make_user("Admin", "admin@mall.test", AuthRole.ADMIN)


@pytest.fixture(scope='function')
def tenant(make_user):
    """Owner of store X."""
    return make_user("Tenant X", "tenant.x@mall.test", AuthRole.TENANT)


@pytest.fixture(scope='function')
def other_tenant(make_user):
    """Owner of store Y."""
    return make_user("Tenant Y", "tenant.y@mall.test", AuthRole.TENANT)


@pytest.fixture(scope='function')
def customer(make_user):
    return make_user("Customer", "customer@mall.test", AuthRole.CUSTOMER)


@pytest.fixture(scope='function')
def wing(db_session):
    wing = Wing(name="Furniture", slug="furniture", sort_order=1, is_active=True)
    db_session.add(wing)
    db_session.commit()
    return wing


def _store(db_session, wing, owner, name, slug, status=StoreStatus.ACTIVE):
    store = Store(
        wing_id=wing.id,
        owner_user_id=owner.id,
        name=name,
        slug=slug,
        currency="YER",
        status=status.value,
    )
    db_session.add(store)
    db_session.commit()
    return store


@pytest.fixture(scope='function')
def store_x(db_session, wing, tenant):
    return _store(db_session, wing, tenant, "Store X", "store-x")


@pytest.fixture(scope='function')
def store_y(db_session, wing, other_tenant):
    return _store(db_session, wing, other_tenant, "Store Y", "store-y")


def _staff(make_user, db_session, store, name, email, role):
    user = make_user(name, email, AuthRole.STAFF)
    db_session.add(StoreStaff(store_id=store.id, user_id=user.id, role=role.value, is_active=True))
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def sales_staff(make_user, db_session, store_x):
    """SALES staff of store X."""
    return _staff(make_user, db_session, store_x, "Sales X", "sales.x@mall.test", StaffRole.SALES)


@pytest.fixture(scope='function')
def products_staff(make_user, db_session, store_x):
    """PRODUCTS staff of store X."""
    return _staff(make_user, db_session, store_x, "Products X", "products.x@mall.test", StaffRole.PRODUCTS)


@pytest.fixture(scope='function')
def manager_staff(make_user, db_session, store_x):
    """MANAGER staff of store X."""
    return _staff(make_user, db_session, store_x, "Manager X", "manager.x@mall.test", StaffRole.MANAGER)


def _product(db_session, store, name, base_price, stock=None):
    product = Product(
        store_id=store.id,
        name=name,
        base_price=Decimal(base_price),
        currency=store.currency,
        is_active=True,
    )
    db_session.add(product)
    db_session.flush()

    variant = None
    if stock is not None:
        variant = ProductVariant(product_id=product.id, sku=f"{name[:3].upper()}-1", is_active=True)
        variant.inventory = Inventory(stock_qty=stock, low_stock_threshold=2)
        db_session.add(variant)

    db_session.commit()
    return product, variant


@pytest.fixture(scope='function')
def product_x(db_session, store_x):
    """Store X product (100.00) with one variant in stock 5."""
    return _product(db_session, store_x, "Bed", "100.00", stock=5)


@pytest.fixture(scope='function')
def plain_product_x(db_session, store_x):
    """Store X product without variants (25.50)."""
    product, _ = _product(db_session, store_x, "Pillow", "25.50")
    return product


@pytest.fixture(scope='function')
def product_y(db_session, store_y):
    """Store Y product (40.00) with one variant in stock 3."""
    return _product(db_session, store_y, "Lamp", "40.00", stock=3)


def auth_headers(user) -> dict:
    """Helper to create Authorization headers for a user."""
    return {'Authorization': f'Bearer {issue_token(user)}'}


@pytest.fixture(scope='function')
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture(scope='function')
def tenant_headers(tenant):
    return auth_headers(tenant)


@pytest.fixture(scope='function')
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture(scope='function')
def sales_headers(sales_staff):
    return auth_headers(sales_staff)


@pytest.fixture(scope='function')
def headers_for():
    """Factory fixture for per-user Authorization headers."""
    return auth_headers
