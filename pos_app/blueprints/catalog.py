"""Catalog blueprint: product CRUD with image uploads and category listing."""
from flask import Blueprint, request, jsonify, current_app, Response

from pos_app.database import get_session
from pos_app.services import product_service
from pos_app.services.storage_service import get_storage_service

catalog_bp = Blueprint('catalog', __name__, url_prefix='/api')


@catalog_bp.route('/products', methods=['GET'])
def products_list() -> Response:
    """List products filtered by ?search=, ?category= and ?stock=low."""
    products = product_service.list_products(
        get_session(),
        search=request.args.get('search', '').strip(),
        category=request.args.get('category', '').strip(),
        low_stock=request.args.get('stock') == 'low',
        low_stock_threshold=current_app.config.get('LOW_STOCK_THRESHOLD', 10)
    )
    return jsonify(products)


@catalog_bp.route('/products', methods=['POST'])
def products_create() -> Response:
    """Create a product from multipart form data (optional 'image' file)."""
    storage = get_storage_service()
    image = request.files.get('image')
    image_path = storage.upload_file(image) if image and image.filename else None

    try:
        product_service.create_product(get_session(), request.form, image_path=image_path)
    except Exception:
        # Don't leave orphan files behind when the row was not written
        storage.delete_file(image_path)
        raise

    return jsonify({'message': 'Product added successfully'})


@catalog_bp.route('/products/<product_id>', methods=['PUT'])
def products_update(product_id: str) -> Response:
    storage = get_storage_service()
    image = request.files.get('image')
    image_path = storage.upload_file(image) if image and image.filename else None

    try:
        old_image = product_service.update_product(
            get_session(), product_id, request.form, image_path=image_path
        )
    except Exception:
        storage.delete_file(image_path)
        raise

    if old_image:
        storage.delete_file(old_image)

    return jsonify({'message': 'Product updated successfully'})


@catalog_bp.route('/products/<product_id>', methods=['DELETE'])
def products_delete(product_id: str) -> Response:
    image_path = product_service.delete_product(get_session(), product_id)
    if image_path:
        get_storage_service().delete_file(image_path)
    return jsonify({'message': 'Product deleted successfully'})


@catalog_bp.route('/categories', methods=['GET'])
def categories_list() -> Response:
    return jsonify(product_service.list_categories(get_session()))
