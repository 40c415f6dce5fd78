import hmac
from functools import wraps

from flask import Blueprint, current_app, jsonify, request

from stockroom.routes import get_storefront, json_body, require_str
from stockroom.services.inventory_service import parse_codes

admin_bp = Blueprint('admin', __name__)


def require_admin(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        expected = current_app.config.get("ADMIN_PASSWORD")
        if not expected:
            return jsonify({"success": False, "error_code": "ADMIN_NOT_CONFIGURED",
                            "message": "ADMIN_PASSWORD not set"}), 500
        given = request.headers.get("X-Admin-Password") or request.args.get("p") or ""
        if not hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8")):
            return jsonify({"success": False, "error_code": "UNAUTHORIZED",
                            "message": "Unauthorized"}), 401
        return fn(*args, **kwargs)
    return wrapper


def _order_id_from_body():
    return require_str(json_body(), 'order_id')


@admin_bp.route('/orders', methods=['GET'])
@require_admin
def list_orders():
    """
    Most recent orders, newest first
    ---
    tags:
      - Admin
    parameters:
      - name: X-Admin-Password
        in: header
        type: string
        required: true
    responses:
      200:
        description: Recent orders
      401:
        description: Wrong admin password
    """
    limit = current_app.config["ADMIN_ORDERS_LIMIT"]
    return jsonify({"success": True, "orders": get_storefront().list_recent_orders(limit)}), 200


@admin_bp.route('/stock/add', methods=['POST'])
@require_admin
def add_stock():
    """
    Bulk-add codes to a product, one code per line
    ---
    tags:
      - Admin
    parameters:
      - name: X-Admin-Password
        in: header
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - product_slug
            - codes_text
          properties:
            product_slug:
              type: string
            codes_text:
              type: string
    responses:
      200:
        description: Codes added
      400:
        description: No codes in the upload
      404:
        description: Product not found
    """
    data = json_body()
    product_slug = require_str(data, 'product_slug')
    codes = parse_codes(require_str(data, 'codes_text'))
    result = get_storefront().add_stock(product_slug, codes)
    return jsonify({"success": True, **result}), 200


@admin_bp.route('/order/approve', methods=['POST'])
@require_admin
def approve_order():
    """
    Approve a paid order and hand out its codes
    ---
    tags:
      - Admin
    parameters:
      - name: X-Admin-Password
        in: header
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - order_id
          properties:
            order_id:
              type: string
    responses:
      200:
        description: Codes bound to the order (already=true on a repeat approval)
      404:
        description: Order not found
      409:
        description: Not enough stock, or order already rejected
      503:
        description: Store conflict, try again
    """
    result = get_storefront().approve_order(_order_id_from_body())
    return jsonify({"success": True, **result}), 200


@admin_bp.route('/order/reject', methods=['POST'])
@require_admin
def reject_order():
    """
    Reject a pending order
    ---
    tags:
      - Admin
    parameters:
      - name: X-Admin-Password
        in: header
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - order_id
          properties:
            order_id:
              type: string
    responses:
      200:
        description: Order rejected
      404:
        description: Order not found
      409:
        description: Order already approved
    """
    get_storefront().reject_order(_order_id_from_body())
    return jsonify({"success": True}), 200
