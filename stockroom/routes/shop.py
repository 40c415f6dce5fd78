from flask import Blueprint, current_app, jsonify

from stockroom.routes import get_storefront, json_body

shop_bp = Blueprint('shop', __name__)


@shop_bp.route('/config', methods=['GET'])
def get_config():
    """
    Public storefront settings
    ---
    tags:
      - Storefront
    responses:
      200:
        description: Store name and support contact
    """
    return jsonify({
        "success": True,
        "store_name": current_app.config["STORE_NAME"],
        "support_contact": current_app.config["SUPPORT_CONTACT"],
    }), 200


@shop_bp.route('/pay-methods', methods=['GET'])
def list_pay_methods():
    """
    Accepted payment methods
    ---
    tags:
      - Storefront
    responses:
      200:
        description: Payment method keys, labels, deposit addresses and ETAs
    """
    return jsonify({"success": True, "methods": current_app.config["PAY_METHODS"]}), 200


@shop_bp.route('/products', methods=['GET'])
def list_products():
    """
    List active products with their current stock
    ---
    tags:
      - Products
    responses:
      200:
        description: Active products; stock is a snapshot, not a reservation
    """
    return jsonify({"success": True, "products": get_storefront().list_active_products()}), 200


@shop_bp.route('/order', methods=['POST'])
def create_order():
    """
    Place an order against an operator-verified payment
    ---
    tags:
      - Orders
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - product_slug
            - qty
            - pay_method
            - txid
          properties:
            product_slug:
              type: string
            qty:
              type: integer
            pay_method:
              type: string
            txid:
              type: string
            contact:
              type: string
    responses:
      201:
        description: Order created in PENDING state
      400:
        description: Invalid input or out of stock
      404:
        description: Product not found
    """
    data = json_body()
    result = get_storefront().create_order(
        product_slug=data.get('product_slug'),
        qty=data.get('qty'),
        pay_method=data.get('pay_method'),
        txid=data.get('txid'),
        contact=data.get('contact'),
    )
    return jsonify({"success": True, **result}), 201


@shop_bp.route('/order/<order_id>', methods=['GET'])
def get_order(order_id):
    """
    Order status, delivered codes and remaining stock
    ---
    tags:
      - Orders
    parameters:
      - name: order_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: Order details
      404:
        description: Order not found
    """
    return jsonify({"success": True, **get_storefront().get_order(order_id)}), 200
