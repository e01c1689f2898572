# sales/models/__init__.py

from .sales_order import SalesOrder, SalesOrderItem

__all__ = ["SalesOrder", "SalesOrderItem"]
