from .audit_log import InvoiceAuditLog
from .invoice import Invoice
from .invoice_item import InvoiceItem
from .payment import Payment

__all__ = ["Invoice", "InvoiceItem", "InvoiceAuditLog", "Payment"]
