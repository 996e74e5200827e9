# Overview: Flask API routes for store-side management; parses input and returns JSON responses.

# backend/mall/routes/tenant.py
"""
Tenant API routes: sections, products, variants, inventory, staff, orders.

Every route requires ADMIN, TENANT or STAFF plus access to the store in the
path. Staff-role restrictions per route:
- catalog writes and inventory: MANAGER or PRODUCTS
- staff management: MANAGER
- orders: MANAGER or SALES
"""

from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_auth, require_role, require_store_access
from ..enums import AuthRole, StaffRole, Currency, OrderStatus
from ..errors import ApiError, ValidationError, error_response
from ..services import catalog_service, inventory_service, staff_service, order_service
from ..validation import Field, validate_payload, parse_id


tenant_bp = Blueprint("tenant", __name__, url_prefix="/api/tenant")

STORE_ROLES = (AuthRole.ADMIN, AuthRole.TENANT, AuthRole.STAFF)
CATALOG_EDITORS = (StaffRole.MANAGER, StaffRole.PRODUCTS)
MANAGERS = (StaffRole.MANAGER,)
ORDER_DESK = (StaffRole.MANAGER, StaffRole.SALES)

SECTION_FIELDS = [
    Field("name", required=True, min_length=2, max_length=120),
    Field("sortOrder", kind="int", min_value=0),
]

PRODUCT_FIELDS = [
    Field("sectionId", kind="id"),
    Field("name", required=True, min_length=2, max_length=255),
    Field("description"),
    Field("basePrice", kind="money", required=True),
    Field("currency", choices=tuple(c.value for c in Currency)),
    Field("images", kind="list", default=()),
]

VARIANT_FIELDS = [
    Field("productId", kind="id", required=True),
    Field("sku", max_length=64),
    Field("priceOverride", kind="money"),
    Field("attributes", kind="list", default=()),
    Field("stockQty", kind="int", min_value=0, default=0),
    Field("lowStockThreshold", kind="int", min_value=0, default=5),
]

INVENTORY_FIELDS = [
    Field("stockQty", kind="int", min_value=0),
    Field("lowStockThreshold", kind="int", min_value=0),
]

STAFF_FIELDS = [
    Field("userEmail", kind="email", required=True),
    Field("role", required=True, choices=tuple(r.value for r in StaffRole)),
]

ORDER_STATUS_FIELDS = [
    Field("status", required=True, choices=tuple(s.value for s in OrderStatus)),
]


def _validate_attributes(raw) -> list[dict]:
    attributes = []
    problems = []
    for i, attr in enumerate(raw or []):
        name = attr.get("name") if isinstance(attr, dict) else None
        value = attr.get("value") if isinstance(attr, dict) else None
        if not isinstance(name, str) or not name.strip() or not isinstance(value, str) or not value.strip():
            problems.append({"field": f"attributes[{i}]", "message": "name and value are required"})
            continue
        attributes.append({"name": name.strip(), "value": value.strip()})
    if problems:
        raise ValidationError("Invalid request payload", details=problems)
    return attributes


def _validate_images(raw) -> list[str]:
    if not all(isinstance(url, str) and url.strip() for url in raw or []):
        raise ValidationError(
            "Invalid request payload",
            details=[{"field": "images", "message": "must be a list of URLs"}],
        )
    return [url.strip() for url in raw or []]


# =============================================================================
# SECTIONS
# =============================================================================

@tenant_bp.get("/stores/<store_id>/sections")
@require_auth
@require_role(*STORE_ROLES)
@require_store_access()
def list_sections(store_id, auth):
    sections = catalog_service.list_sections(store_id)
    return jsonify([s.to_dict() for s in sections]), 200


@tenant_bp.post("/stores/<store_id>/sections")
@require_auth
@require_role(*STORE_ROLES)
@require_store_access(staff_roles=CATALOG_EDITORS)
def create_section(store_id, auth):
    try:
        data = validate_payload(request.get_json(silent=True), SECTION_FIELDS)
        section = catalog_service.create_section(store_id, data["name"], data["sortOrder"])
        return jsonify(section.to_dict()), 201

    except ApiError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create section")
        return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# PRODUCTS & VARIANTS
# =============================================================================

@tenant_bp.get("/stores/<store_id>/products")
@require_auth
@require_role(*STORE_ROLES)
@require_store_access()
def list_products(store_id, auth):
    products = catalog_service.list_products(store_id)
    return jsonify([p.to_dict() for p in products]), 200


@tenant_bp.post("/stores/<store_id>/products")
@require_auth
@require_role(*STORE_ROLES)
@require_store_access(staff_roles=CATALOG_EDITORS)
def create_product(store_id, auth):
    try:
        data = validate_payload(request.get_json(silent=True), PRODUCT_FIELDS)
        product = catalog_service.create_product(
            store_id,
            name=data["name"],
            base_price=data["basePrice"],
            section_id=data["sectionId"],
            description=data["description"],
            currency=data["currency"],
            images=_validate_images(data["images"]),
        )
        return jsonify({"id": str(product.id)}), 201

    except ApiError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500


@tenant_bp.get("/stores/<store_id>/variants")
@require_auth
@require_role(*STORE_ROLES)
@require_store_access()
def list_variants(store_id, auth):
    try:
        product_id = request.args.get("productId")
        variants = catalog_service.list_variants(
            store_id,
            parse_id(product_id, "productId") if product_id else None,
        )
        return jsonify([v.to_dict() for v in variants]), 200

    except ApiError as e:
        return error_response(e)


@tenant_bp.post("/stores/<store_id>/variants")
@require_auth
@require_role(*STORE_ROLES)
@require_store_access(staff_roles=CATALOG_EDITORS)
def create_variant(store_id, auth):
    """Create a variant with attributes and its inventory row."""
    try:
        data = validate_payload(request.get_json(silent=True), VARIANT_FIELDS)
        variant = catalog_service.create_variant(
            store_id,
            data["productId"],
            sku=data["sku"],
            price_override=data["priceOverride"],
            attributes=_validate_attributes(data["attributes"]),
            stock_qty=data["stockQty"],
            low_stock_threshold=data["lowStockThreshold"],
        )
        return jsonify({"id": str(variant.id)}), 201

    except ApiError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create variant")
        return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# INVENTORY
# =============================================================================

@tenant_bp.post("/stores/<store_id>/variants/<variant_id>/inventory")
@require_auth
@require_role(*STORE_ROLES)
@require_store_access(staff_roles=CATALOG_EDITORS)
def set_inventory(store_id, variant_id, auth):
    try:
        data = validate_payload(request.get_json(silent=True), INVENTORY_FIELDS)
        if data["stockQty"] is None and data["lowStockThreshold"] is None:
            raise ValidationError("stockQty or lowStockThreshold required")

        inventory = inventory_service.set_stock(
            store_id,
            parse_id(variant_id, "variantId"),
            stock_qty=data["stockQty"],
            low_stock_threshold=data["lowStockThreshold"],
        )
        return jsonify(inventory.to_dict()), 200

    except ApiError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update inventory")
        return jsonify({"error": "Internal server error"}), 500


@tenant_bp.get("/stores/<store_id>/inventory/low-stock")
@require_auth
@require_role(*STORE_ROLES)
@require_store_access(staff_roles=CATALOG_EDITORS)
def low_stock(store_id, auth):
    return jsonify(inventory_service.list_low_stock(store_id)), 200


# =============================================================================
# STAFF
# =============================================================================

@tenant_bp.get("/stores/<store_id>/staff")
@require_auth
@require_role(*STORE_ROLES)
@require_store_access(staff_roles=MANAGERS)
def list_staff(store_id, auth):
    links = staff_service.list_staff(store_id)
    return jsonify([link.to_dict() for link in links]), 200


@tenant_bp.post("/stores/<store_id>/staff")
@require_auth
@require_role(*STORE_ROLES)
@require_store_access(staff_roles=MANAGERS)
def add_staff(store_id, auth):
    """Link a user as MANAGER, SALES or PRODUCTS (owner, manager or admin only)."""
    try:
        data = validate_payload(request.get_json(silent=True), STAFF_FIELDS)
        link = staff_service.upsert_staff(store_id, data["userEmail"], StaffRole(data["role"]))
        return jsonify({"id": str(link.id)}), 201

    except ApiError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to add staff")
        return jsonify({"error": "Internal server error"}), 500


@tenant_bp.post("/stores/<store_id>/staff/<link_id>/disable")
@require_auth
@require_role(*STORE_ROLES)
@require_store_access(staff_roles=MANAGERS)
def disable_staff(store_id, link_id, auth):
    try:
        link = staff_service.disable_staff(store_id, parse_id(link_id, "staffId"))
        return jsonify(link.to_dict()), 200

    except ApiError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to disable staff")
        return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# ORDERS
# =============================================================================

@tenant_bp.get("/stores/<store_id>/orders")
@require_auth
@require_role(*STORE_ROLES)
@require_store_access(staff_roles=ORDER_DESK)
def list_orders(store_id, auth):
    orders = order_service.list_store_orders(store_id)
    return jsonify([o.to_dict() for o in orders]), 200


@tenant_bp.get("/stores/<store_id>/orders/<order_id>")
@require_auth
@require_role(*STORE_ROLES)
@require_store_access(staff_roles=ORDER_DESK)
def get_order(store_id, order_id, auth):
    try:
        order = order_service.get_store_order(store_id, parse_id(order_id, "orderId"))
        return jsonify({**order.to_dict(), "items": [it.to_dict() for it in order.items]}), 200

    except ApiError as e:
        return error_response(e)


@tenant_bp.post("/stores/<store_id>/orders/<order_id>/status")
@require_auth
@require_role(*STORE_ROLES)
@require_store_access(staff_roles=ORDER_DESK)
def update_order_status(store_id, order_id, auth):
    try:
        data = validate_payload(request.get_json(silent=True), ORDER_STATUS_FIELDS)
        order = order_service.update_order_status(
            store_id,
            parse_id(order_id, "orderId"),
            OrderStatus(data["status"]),
        )
        return jsonify({"id": str(order.id), "status": order.status}), 200

    except ApiError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update order status")
        return jsonify({"error": "Internal server error"}), 500
