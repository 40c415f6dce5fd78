from stockroom.models.product import Product
from stockroom.models.code_unit import CodeUnit
from stockroom.models.order import Order, OrderCode, OrderStatus

__all__ = ["Product", "CodeUnit", "Order", "OrderCode", "OrderStatus"]
