# Overview: Service-layer operations for the catalog; sections, products and variants.

from __future__ import annotations

from decimal import Decimal

from ..enums import StoreStatus
from ..errors import NotFoundError, ConflictError
from ..extensions import db
from ..models import (
    Wing, Store, StoreSection, Product, ProductImage, ProductVariant, VariantAttribute, Inventory,
)


# =============================================================================
# STORE-SIDE CATALOG
# =============================================================================

def list_sections(store_id: int) -> list[StoreSection]:
    return (
        db.session.query(StoreSection)
        .filter_by(store_id=store_id)
        .order_by(StoreSection.sort_order.asc(), StoreSection.id.asc())
        .all()
    )


def create_section(store_id: int, name: str, sort_order: int | None = None) -> StoreSection:
    if not db.session.query(Store).filter_by(id=store_id).first():
        raise NotFoundError("Store not found")

    existing = db.session.query(StoreSection).filter_by(store_id=store_id, name=name).first()
    if existing:
        raise ConflictError("Section already exists")

    section = StoreSection(store_id=store_id, name=name, sort_order=sort_order or 0, is_active=True)
    db.session.add(section)
    db.session.commit()
    return section


def list_products(store_id: int) -> list[Product]:
    return (
        db.session.query(Product)
        .filter_by(store_id=store_id)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .all()
    )


def create_product(
    store_id: int,
    *,
    name: str,
    base_price: Decimal,
    section_id: int | None = None,
    description: str | None = None,
    currency: str | None = None,
    images: list[str] | None = None,
) -> Product:
    """
    Create a product in the store.

    The section, when given, must belong to the same store. Currency
    defaults to the store's currency.
    """
    store = db.session.query(Store).filter_by(id=store_id).first()
    if not store:
        raise NotFoundError("Store not found")

    if section_id is not None:
        section = db.session.query(StoreSection).filter_by(id=section_id, store_id=store_id).first()
        if not section:
            raise NotFoundError("Section not found in this store")

    product = Product(
        store_id=store_id,
        section_id=section_id,
        name=name,
        description=description,
        base_price=base_price,
        currency=currency or store.currency,
        is_active=True,
    )
    product.images = [
        ProductImage(image_url=url, sort_order=i + 1) for i, url in enumerate(images or [])
    ]
    db.session.add(product)
    db.session.commit()
    return product


def list_variants(store_id: int, product_id: int | None = None) -> list[ProductVariant]:
    q = (
        db.session.query(ProductVariant)
        .join(Product, Product.id == ProductVariant.product_id)
        .filter(Product.store_id == store_id)
    )
    if product_id is not None:
        q = q.filter(ProductVariant.product_id == product_id)
    return q.order_by(ProductVariant.id.asc()).all()


def create_variant(
    store_id: int,
    product_id: int,
    *,
    sku: str | None = None,
    price_override: Decimal | None = None,
    attributes: list[dict] | None = None,
    stock_qty: int = 0,
    low_stock_threshold: int = 5,
) -> ProductVariant:
    """Create a variant with its attributes and its single inventory row."""
    product = db.session.query(Product).filter_by(id=product_id).first()
    if not product or product.store_id != store_id:
        raise NotFoundError("Product not found in this store")

    variant = ProductVariant(
        product_id=product_id,
        sku=sku,
        price_override=price_override,
        is_active=True,
    )
    variant.attributes = [
        VariantAttribute(attribute_name=a["name"], attribute_value=a["value"])
        for a in (attributes or [])
    ]
    variant.inventory = Inventory(stock_qty=stock_qty, low_stock_threshold=low_stock_threshold)
    db.session.add(variant)
    db.session.commit()
    return variant


# =============================================================================
# PUBLIC CATALOG
# =============================================================================

def list_wings() -> list[Wing]:
    return (
        db.session.query(Wing)
        .filter_by(is_active=True)
        .order_by(Wing.sort_order.asc(), Wing.id.asc())
        .all()
    )


def list_active_stores(wing_slug: str | None = None) -> list[Store]:
    q = db.session.query(Store).filter(Store.status == StoreStatus.ACTIVE.value)
    if wing_slug:
        q = q.join(Wing, Wing.id == Store.wing_id).filter(Wing.slug == wing_slug)
    return q.order_by(Store.name.asc()).all()


def get_active_store(slug: str) -> Store:
    store = (
        db.session.query(Store)
        .filter_by(slug=slug, status=StoreStatus.ACTIVE.value)
        .first()
    )
    if not store:
        raise NotFoundError("Store not found")
    return store


def list_store_products(slug: str) -> list[dict]:
    """Active products of an active store with variants, stock and images."""
    store = get_active_store(slug)
    products = (
        db.session.query(Product)
        .filter_by(store_id=store.id, is_active=True)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .all()
    )
    return [
        {
            **product.to_dict(),
            "images": [img.to_dict() for img in product.images],
            "variants": [v.to_dict() for v in product.variants if v.is_active],
        }
        for product in products
    ]
