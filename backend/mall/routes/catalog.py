# Overview: Public Flask API routes for browsing wings, stores and products.

# backend/mall/routes/catalog.py
"""Public catalog routes; no authentication, ACTIVE stores only"""

from flask import Blueprint, request, jsonify

from ..errors import ApiError, error_response
from ..services import catalog_service


catalog_bp = Blueprint("catalog", __name__, url_prefix="/api/catalog")


@catalog_bp.get("/wings")
def list_wings_route():
    return jsonify([w.to_dict() for w in catalog_service.list_wings()]), 200


@catalog_bp.get("/stores")
def list_stores_route():
    stores = catalog_service.list_active_stores(request.args.get("wing"))
    return jsonify([s.to_dict() for s in stores]), 200


@catalog_bp.get("/stores/<slug>")
def get_store_route(slug):
    try:
        store = catalog_service.get_active_store(slug)
        sections = [s.to_dict() for s in catalog_service.list_sections(store.id) if s.is_active]
        return jsonify({**store.to_dict(), "sections": sections}), 200

    except ApiError as e:
        return error_response(e)


@catalog_bp.get("/stores/<slug>/products")
def list_store_products_route(slug):
    try:
        return jsonify(catalog_service.list_store_products(slug)), 200

    except ApiError as e:
        return error_response(e)
