# Overview: Pytest coverage for role checks and per-store isolation.

"""
Authorization tests.

Verifies:
- Unauthenticated requests to protected endpoints return 401
- Platform roles gate whole route groups (403)
- Store isolation: staff reach only their own store, and only with a
  permitted staff role; owners and admins bypass staff-role checks
- Disabled staff links grant nothing
"""

import pytest

from mall.enums import AuthRole, StaffRole
from mall.errors import BadRequestError, ForbiddenError
from mall.models import StoreStaff
from mall.services import access_service, session_service


# =============================================================================
# UNAUTHENTICATED ACCESS - 401
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/auth/me"),
            ("GET", "/api/checkout/cart"),
            ("POST", "/api/checkout/cart/items"),
            ("POST", "/api/checkout/checkout"),
            ("GET", "/api/tenant/stores/1/products"),
            ("POST", "/api/tenant/stores/1/sections"),
            ("GET", "/api/tenant/stores/1/orders"),
            ("GET", "/api/promotions/stores/1/promotions"),
            ("GET", "/api/admin/promotions"),
            ("POST", "/api/admin/promotions/1/decision"),
        ],
    )
    def test_requires_auth(self, client, setup_roles, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"


# =============================================================================
# PLATFORM ROLES - 403
# =============================================================================


class TestPlatformRoles:

    def test_customer_cannot_use_tenant_routes(self, client, customer_headers, store_x):
        resp = client.get(f"/api/tenant/stores/{store_x.id}/products", headers=customer_headers)
        assert resp.status_code == 403
        assert resp.get_json()["error"] == "Forbidden: role not allowed"

    def test_tenant_cannot_use_admin_routes(self, client, tenant_headers):
        resp = client.get("/api/admin/promotions", headers=tenant_headers)
        assert resp.status_code == 403

    def test_staff_cannot_checkout(self, client, sales_headers):
        resp = client.get("/api/checkout/cart", headers=sales_headers)
        assert resp.status_code == 403

    def test_admin_can_shop(self, client, admin_headers):
        resp = client.get("/api/checkout/cart", headers=admin_headers)
        assert resp.status_code == 200


# =============================================================================
# STORE ISOLATION
# =============================================================================


class TestStoreIsolation:
    """SALES staff of store X against store X and store Y endpoints."""

    def test_sales_can_read_own_store_orders(self, client, sales_headers, store_x):
        resp = client.get(f"/api/tenant/stores/{store_x.id}/orders", headers=sales_headers)
        assert resp.status_code == 200

    @pytest.mark.parametrize(
        "method,suffix",
        [
            ("GET", "products"),
            ("GET", "orders"),
            ("POST", "sections"),
            ("GET", "staff"),
        ],
    )
    def test_sales_denied_on_other_store(self, client, sales_headers, store_y, method, suffix):
        resp = getattr(client, method.lower())(
            f"/api/tenant/stores/{store_y.id}/{suffix}",
            json={"name": "Hacked"},
            headers=sales_headers,
        )
        assert resp.status_code == 403
        assert resp.get_json()["error"] == "Forbidden: no store access"

    @pytest.mark.parametrize(
        "method,suffix,payload",
        [
            ("POST", "sections", {"name": "Bedrooms"}),
            ("POST", "products", {"name": "Sofa", "basePrice": "10.00"}),
            ("GET", "inventory/low-stock", None),
            ("GET", "staff", None),
            ("POST", "staff", {"userEmail": "x@mall.test", "role": "SALES"}),
        ],
    )
    def test_sales_denied_on_manager_or_products_endpoints(
        self, client, sales_headers, store_x, method, suffix, payload
    ):
        resp = getattr(client, method.lower())(
            f"/api/tenant/stores/{store_x.id}/{suffix}",
            json=payload,
            headers=sales_headers,
        )
        assert resp.status_code == 403
        assert resp.get_json()["error"] == "Forbidden: insufficient staff role"

    def test_products_staff_can_create_section(self, client, headers_for, products_staff, store_x):
        resp = client.post(
            f"/api/tenant/stores/{store_x.id}/sections",
            json={"name": "Bedrooms"},
            headers=headers_for(products_staff),
        )
        assert resp.status_code == 201

    def test_products_staff_cannot_manage_staff(self, client, headers_for, products_staff, store_x):
        resp = client.get(f"/api/tenant/stores/{store_x.id}/staff", headers=headers_for(products_staff))
        assert resp.status_code == 403

    def test_owner_bypasses_staff_roles(self, client, tenant_headers, store_x):
        resp = client.get(f"/api/tenant/stores/{store_x.id}/staff", headers=tenant_headers)
        assert resp.status_code == 200

    def test_owner_denied_on_other_store(self, client, tenant_headers, store_y):
        resp = client.get(f"/api/tenant/stores/{store_y.id}/products", headers=tenant_headers)
        assert resp.status_code == 403

    def test_admin_reaches_any_store(self, client, admin_headers, store_x, store_y):
        for store in (store_x, store_y):
            resp = client.get(f"/api/tenant/stores/{store.id}/staff", headers=admin_headers)
            assert resp.status_code == 200

    def test_disabled_link_grants_nothing(self, client, db_session, headers_for, sales_staff, store_x):
        link = db_session.query(StoreStaff).filter_by(user_id=sales_staff.id).one()
        link.is_active = False
        db_session.commit()

        resp = client.get(f"/api/tenant/stores/{store_x.id}/orders", headers=headers_for(sales_staff))
        assert resp.status_code == 403

    def test_non_numeric_store_id(self, client, tenant_headers, store_x):
        resp = client.get("/api/tenant/stores/abc/products", headers=tenant_headers)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Invalid storeId"


class TestAccessPolicy:
    """access_service checked directly against built contexts."""

    def test_require_store_access_order(self, db_session, admin, tenant, sales_staff, store_x, store_y):
        admin_ctx = session_service.build_context(admin)
        owner_ctx = session_service.build_context(tenant)
        sales_ctx = session_service.build_context(sales_staff)
        managers = (StaffRole.MANAGER,)

        access_service.require_store_access(admin_ctx, store_y.id, managers)
        access_service.require_store_access(owner_ctx, store_x.id, managers)
        access_service.require_store_access(sales_ctx, store_x.id)

        with pytest.raises(ForbiddenError):
            access_service.require_store_access(sales_ctx, store_x.id, managers)
        with pytest.raises(ForbiddenError):
            access_service.require_store_access(owner_ctx, store_y.id)

    def test_resolve_store_id_precedence(self):
        assert access_service.resolve_store_id(None, "7", "9") == 7
        assert access_service.resolve_store_id("", None, "9") == 9
        with pytest.raises(BadRequestError):
            access_service.resolve_store_id(None, None, None)

    def test_require_any_role(self, db_session, customer):
        ctx = session_service.build_context(customer)
        access_service.require_any_role(ctx, (AuthRole.CUSTOMER, AuthRole.ADMIN))
        with pytest.raises(ForbiddenError):
            access_service.require_any_role(ctx, (AuthRole.TENANT,))
