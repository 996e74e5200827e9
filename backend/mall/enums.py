# Overview: Closed vocabularies for roles, statuses and currencies.

from __future__ import annotations

import enum


class AuthRole(str, enum.Enum):
    ADMIN = "ADMIN"
    TENANT = "TENANT"
    CUSTOMER = "CUSTOMER"
    STAFF = "STAFF"


class StaffRole(str, enum.Enum):
    MANAGER = "MANAGER"
    SALES = "SALES"
    PRODUCTS = "PRODUCTS"


class StoreStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"


class Currency(str, enum.Enum):
    YER = "YER"
    SAR = "SAR"
    USD = "USD"


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PaymentStatus(str, enum.Enum):
    UNPAID = "UNPAID"
    PAID = "PAID"
    REFUNDED = "REFUNDED"


class PromotionType(str, enum.Enum):
    PERCENT = "PERCENT"
    AMOUNT = "AMOUNT"
    FREESHIP = "FREESHIP"
    COUPON = "COUPON"


class PromotionStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    REJECTED = "REJECTED"
    STOPPED = "STOPPED"


# Display names used when seeding the role table.
ROLE_NAMES = {
    AuthRole.ADMIN: "Mall owner",
    AuthRole.TENANT: "Store owner",
    AuthRole.CUSTOMER: "Customer",
    AuthRole.STAFF: "Staff",
}

# Decisions an admin may take on a promotion. PENDING is creation-only.
PROMOTION_DECISIONS = (
    PromotionStatus.ACTIVE,
    PromotionStatus.REJECTED,
    PromotionStatus.STOPPED,
)

# Forward-only order lifecycle for store staff.
ORDER_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}
