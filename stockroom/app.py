"""
Stockroom — Flask application
Storefront API plus the admin approval flow that hands out codes.
"""

import logging
import os
from datetime import datetime, timezone

from flasgger import Swagger
from flask import Flask, jsonify
from sqlalchemy import text

from stockroom.config import Config
from stockroom.errors import StockroomError
from stockroom.extensions import db
from stockroom.services.allocation import Allocator
from stockroom.services.catalog_service import seed_default_products
from stockroom.services.lifecycle import OrderLifecycle
from stockroom.services.store import SqlStore
from stockroom.services.storefront import Storefront

logger = logging.getLogger(__name__)


def init_db(app):
    with app.app_context():
        db.create_all()
        if app.config["SEED_PRODUCTS"]:
            seed_default_products(db.session)
            db.session.commit()


def create_app(overrides=None, allocator=None):
    app = Flask(__name__)

    # Configuration
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Initialize Extensions
    db.init_app(app)
    Swagger(app)

    store = SqlStore(
        lambda: db.session,
        attempts=app.config["STORE_RETRY_ATTEMPTS"],
        backoff=app.config["STORE_RETRY_BACKOFF"],
    )
    lifecycle = OrderLifecycle(
        store,
        allocator=allocator or Allocator(),
        pay_methods=[m["key"] for m in app.config["PAY_METHODS"]],
        max_qty=app.config["MAX_ORDER_QTY"],
        check_stock_on_create=app.config["CHECK_STOCK_ON_CREATE"],
        order_id_prefix=app.config["ORDER_ID_PREFIX"],
    )
    app.extensions["storefront"] = Storefront(store, lifecycle)

    # Register Blueprints
    from stockroom.routes.shop import shop_bp
    app.register_blueprint(shop_bp, url_prefix='/api')

    from stockroom.routes.admin import admin_bp
    app.register_blueprint(admin_bp, url_prefix='/api/admin')

    @app.errorhandler(StockroomError)
    def handle_stockroom_error(e):
        if e.status_code >= 500:
            logger.warning("%s: %s", e.error_code, e.message)
        return jsonify(e.to_dict()), e.status_code

    # --- Health check ---------------------------------------------------
    @app.route("/health")
    def health():
        try:
            db.session.execute(text("SELECT 1"))
            return jsonify({
                "status": "healthy",
                "service": "stockroom",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }), 200
        except Exception as e:
            return jsonify({"status": "unhealthy", "service": "stockroom", "error": str(e)}), 503

    if app.config["AUTO_CREATE_TABLES"]:
        init_db(app)

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "3000")))
