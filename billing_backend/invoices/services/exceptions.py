# invoices/services/exceptions.py

"""
INVOICE LIFECYCLE ERRORS

All are business-rule refusals (legal input, refused by current state),
so the API maps them to 400 with their own code.
"""

from accounting.services.exceptions import BusinessRuleError


class InvoiceEditWindowExpiredError(BusinessRuleError):
    code = "EDIT_WINDOW_EXPIRED"


class InvoicePaymentExistsError(BusinessRuleError):
    code = "PAYMENT_EXISTS"


class InvalidInvoiceTransitionError(BusinessRuleError):
    code = "INVALID_TRANSITION"


class InvoiceAlreadyCreditedError(InvalidInvoiceTransitionError):
    code = "ALREADY_CREDITED"


class ConcurrentModificationError(BusinessRuleError):
    code = "CONCURRENT_MODIFICATION"


class DispatchAlreadyInvoicedError(BusinessRuleError):
    code = "DISPATCH_ALREADY_INVOICED"
