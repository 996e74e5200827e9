# Overview: Flask CLI command groups for bootstrap, demo data, and user maintenance.

# backend/mall/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-roles
#   Create the platform roles (ADMIN, TENANT, CUSTOMER, STAFF).
# - python -m flask system seed-demo
#   Idempotent demo data: users, wings, the "jubi" store, a product and an active promotion.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users create --name "Jane" --email jane@mall.com --password 123456 --role TENANT
#   Create a user (prompts if options are omitted).
# - python -m flask users grant-role jane@mall.com STAFF
#   Grant a platform role to an existing user.

from decimal import Decimal

import click
from flask.cli import with_appcontext

from .enums import AuthRole, StaffRole, StoreStatus, Currency, PromotionType, PromotionStatus
from .errors import ApiError
from .extensions import db
from .models import (
    User, Role, Wing, Store, StoreStaff, StoreSection, Product, ProductImage,
    ProductVariant, VariantAttribute, Inventory, Promotion,
)
from .services.auth_service import create_default_roles, assign_role, hash_password


DEMO_PASSWORD = "123456"

DEMO_USERS = [
    ("Admin", "admin@mall.com", AuthRole.ADMIN),
    ("Tenant Owner", "tenant@mall.com", AuthRole.TENANT),
    ("Sales Staff", "sales@mall.com", AuthRole.STAFF),
    ("Customer", "customer@mall.com", AuthRole.CUSTOMER),
]

DEMO_WINGS = [
    ("Fashion", "fashion", 1),
    ("Electronics", "electronics", 2),
    ("Furniture", "furniture", 3),
]


def _ensure_user(name: str, email: str, password: str) -> User:
    user = db.session.query(User).filter_by(email=email).first()
    if not user:
        user = User(name=name, email=email, password_hash=hash_password(password))
        db.session.add(user)
        db.session.flush()
    return user


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-roles')
@with_appcontext
def init_roles():
    """Create the platform roles (ADMIN, TENANT, CUSTOMER, STAFF)."""
    click.echo("LIST Creating default roles...")
    create_default_roles()
    roles = db.session.query(Role).order_by(Role.id.asc()).all()
    click.echo(f"PASS Roles: {', '.join(r.code for r in roles)}")


@system_group.command('seed-demo')
@with_appcontext
def seed_demo():
    """
    Seed demo data. Safe to run repeatedly.

    Creates:
    - Roles
    - Users: admin/tenant/sales/customer@mall.com, password "123456"
    - Wings: fashion, electronics, furniture
    - Store "jubi" (ACTIVE, YER) owned by the tenant, sales@mall.com linked as SALES
    - A section, a product with one variant (stock 5) and an ACTIVE promotion
    """
    click.echo("START Seeding demo data...")
    create_default_roles()

    users = {}
    for name, email, role in DEMO_USERS:
        user = _ensure_user(name, email, DEMO_PASSWORD)
        assign_role(user.id, role, commit=False)
        users[role] = user
    db.session.commit()
    click.echo(f"PASS Users: {', '.join(email for _, email, _ in DEMO_USERS)} (password: {DEMO_PASSWORD})")

    for name, slug, sort_order in DEMO_WINGS:
        wing = db.session.query(Wing).filter_by(slug=slug).first()
        if wing:
            wing.name, wing.sort_order, wing.is_active = name, sort_order, True
        else:
            db.session.add(Wing(name=name, slug=slug, sort_order=sort_order, is_active=True))
    db.session.commit()
    click.echo(f"PASS Wings: {', '.join(slug for _, slug, _ in DEMO_WINGS)}")

    furniture = db.session.query(Wing).filter_by(slug="furniture").one()
    tenant = users[AuthRole.TENANT]
    store = db.session.query(Store).filter_by(slug="jubi").first()
    if store:
        store.status = StoreStatus.ACTIVE.value
        store.currency = Currency.YER.value
    else:
        store = Store(
            wing_id=furniture.id,
            owner_user_id=tenant.id,
            name="Jubi Furniture",
            slug="jubi",
            description="Furniture and home furnishings",
            currency=Currency.YER.value,
            status=StoreStatus.ACTIVE.value,
            signboard_url="https://example.com/signboard.png",
        )
        db.session.add(store)
        db.session.flush()

    sales = users[AuthRole.STAFF]
    link = db.session.query(StoreStaff).filter_by(store_id=store.id, user_id=sales.id).first()
    if link:
        link.role, link.is_active = StaffRole.SALES.value, True
    else:
        db.session.add(StoreStaff(store_id=store.id, user_id=sales.id, role=StaffRole.SALES.value, is_active=True))

    section = db.session.query(StoreSection).filter_by(store_id=store.id, name="Bedrooms").first()
    if not section:
        section = StoreSection(store_id=store.id, name="Bedrooms", sort_order=1, is_active=True)
        db.session.add(section)
        db.session.flush()

    product = db.session.query(Product).filter_by(store_id=store.id, name="Modern bedroom set (6 pieces)").first()
    if not product:
        product = Product(
            store_id=store.id,
            section_id=section.id,
            name="Modern bedroom set (6 pieces)",
            description="Demo product",
            base_price=Decimal("150000"),
            currency=Currency.YER.value,
            is_active=True,
        )
        db.session.add(product)
        db.session.flush()
        db.session.add(ProductImage(
            product_id=product.id,
            image_url="https://images.unsplash.com/photo-1505691723518-36a5ac3b2d43?auto=format&fit=crop&w=1200&q=80",
            sort_order=1,
        ))

        variant = ProductVariant(product_id=product.id, sku="BD-102-W-180", is_active=True)
        db.session.add(variant)
        db.session.flush()
        db.session.add_all([
            VariantAttribute(variant_id=variant.id, attribute_name="Color", attribute_value="White"),
            VariantAttribute(variant_id=variant.id, attribute_name="Size", attribute_value="180x200"),
            Inventory(variant_id=variant.id, stock_qty=5, low_stock_threshold=3),
        ])

    promo_title = "20% off bedrooms"
    if not db.session.query(Promotion).filter_by(store_id=store.id, title=promo_title).first():
        db.session.add(Promotion(
            store_id=store.id,
            title=promo_title,
            promo_type=PromotionType.PERCENT.value,
            value=Decimal("20"),
            status=PromotionStatus.ACTIVE.value,
            created_by_user_id=tenant.id,
            approved_by_user_id=users[AuthRole.ADMIN].id,
            priority=10,
        ))

    db.session.commit()
    click.echo(f"PASS Store: {store.name} (slug: {store.slug}, ID: {store.id})")
    click.echo("PASS Seed complete.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init-roles' to initialize.")


# =============================================================================
# USER COMMANDS
# =============================================================================

@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--name', prompt=True, help='Display name')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice([r.value for r in AuthRole]), prompt=True, help='Role')
@with_appcontext
def create_user_cli(name, email, password, role):
    """Create a user with one platform role."""
    email = email.strip()
    if db.session.query(User).filter_by(email=email).first():
        click.echo(f"FAIL Email already exists: {email}")
        return
    if len(password) < 6:
        click.echo("FAIL Password must be at least 6 characters")
        return

    try:
        user = _ensure_user(name, email, password)
        assign_role(user.id, AuthRole(role))
    except ApiError as e:
        db.session.rollback()
        click.echo(f"FAIL {e.message}")
        return

    click.echo(f"PASS Created user: {name} ({email}) with role '{role}'")


@users_group.command('grant-role')
@click.argument('email')
@click.argument('role', type=click.Choice([r.value for r in AuthRole]))
@with_appcontext
def grant_role_cli(email, role):
    """Grant a platform role to an existing user (idempotent)."""
    user = db.session.query(User).filter_by(email=email.strip()).first()
    if not user:
        click.echo(f"FAIL User not found: {email}")
        return

    try:
        assign_role(user.id, AuthRole(role))
    except ApiError as e:
        click.echo(f"FAIL {e.message}")
        return

    click.echo(f"PASS Granted {role} to {user.email}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
