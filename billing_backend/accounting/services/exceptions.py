# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Centralized error taxonomy for every core service (accounting, invoices,
sales). The API layer maps `code` straight into the error envelope.

- AuthenticationError: no authenticated actor
- NotFoundError: invoice / customer / ledger absent
- ValidationError: malformed input, nothing persisted
- BusinessRuleError: legal input refused by state
- PersistenceError: storage failed mid-sequence (compensation already ran)
"""


class AccountingServiceError(Exception):
    """Base exception for all accounting service failures."""

    code = "ACCOUNTING_ERROR"

    def __init__(self, message: str = "", *, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class AuthenticationError(AccountingServiceError):
    code = "NOT_AUTHENTICATED"


class NotFoundError(AccountingServiceError):
    code = "NOT_FOUND"


class ValidationError(AccountingServiceError):
    code = "VALIDATION_ERROR"


class BusinessRuleError(AccountingServiceError):
    code = "BUSINESS_RULE_VIOLATION"


class PersistenceError(AccountingServiceError):
    code = "PERSISTENCE_ERROR"


class AccountResolutionError(NotFoundError):
    """Raised when an expected ledger account cannot be resolved."""

    code = "LEDGER_NOT_FOUND"


class JournalEntryCreationError(ValidationError):
    """Raised when a journal entry cannot be created."""

    code = "JOURNAL_ENTRY_INVALID"


class IdempotencyError(BusinessRuleError):
    """Raised on duplicate or retried accounting events."""

    code = "DUPLICATE_POSTING"


class COGSPostingError(AccountingServiceError):
    """Raised when a cost of goods sold entry cannot be built."""

    code = "COGS_POSTING_FAILED"


class DocumentNumberExhaustedError(PersistenceError):
    """Raised when every numbering attempt collided with a concurrent writer."""

    code = "DOCUMENT_NUMBER_CONFLICT"
