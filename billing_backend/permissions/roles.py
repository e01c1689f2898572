# permissions/roles.py

from __future__ import annotations

from typing import Optional

from django.core.exceptions import PermissionDenied
from rest_framework.permissions import BasePermission

from accounting.services.exceptions import AuthenticationError

# =========================================================
# ROLE CONSTANTS (STAFF JOB ROLES)
# =========================================================
ROLE_ADMIN = "admin"
ROLE_ACCOUNTANT = "accountant"
ROLE_SALES = "sales"
ROLE_VIEWER = "viewer"

STAFF_ROLES = {
    ROLE_ADMIN,
    ROLE_ACCOUNTANT,
    ROLE_SALES,
    ROLE_VIEWER,
}


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Services and views ask for capabilities, never for raw roles.
CAP_INVOICE_CREATE = "invoice.create"
CAP_INVOICE_EDIT = "invoice.edit"
CAP_INVOICE_CREDIT = "invoice.credit"
CAP_INVOICE_VIEW = "invoice.view"

CAP_PAYMENT_RECORD = "payment.record"

CAP_JOURNAL_POST = "journal.post"      # manual journal entries
CAP_LEDGER_VIEW = "ledger.view"

CAP_SALES_ORDER_CREATE = "sales_order.create"

ALL_CAPABILITIES = {
    CAP_INVOICE_CREATE,
    CAP_INVOICE_EDIT,
    CAP_INVOICE_CREDIT,
    CAP_INVOICE_VIEW,
    CAP_PAYMENT_RECORD,
    CAP_JOURNAL_POST,
    CAP_LEDGER_VIEW,
    CAP_SALES_ORDER_CREATE,
}


# =========================================================
# ROLE → CAPABILITY MAP (DEFAULT)
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_ACCOUNTANT: {
        CAP_INVOICE_CREATE,
        CAP_INVOICE_EDIT,
        CAP_INVOICE_CREDIT,
        CAP_INVOICE_VIEW,
        CAP_PAYMENT_RECORD,
        CAP_JOURNAL_POST,
        CAP_LEDGER_VIEW,
    },
    ROLE_SALES: {
        CAP_INVOICE_CREATE,
        CAP_INVOICE_EDIT,
        CAP_INVOICE_VIEW,
        CAP_SALES_ORDER_CREATE,
        # no credit notes, no cash handling, no manual journals
    },
    ROLE_VIEWER: {
        CAP_INVOICE_VIEW,
        CAP_LEDGER_VIEW,
    },
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def is_authenticated_actor(actor) -> bool:
    return bool(actor is not None and getattr(actor, "is_authenticated", False))


def effective_capabilities_for(user) -> set[str]:
    if getattr(user, "is_superuser", False):
        return set(ALL_CAPABILITIES)
    return set(ROLE_CAPABILITIES.get(get_user_role(user), set()))


def resource_company_id(resource):
    """
    Company scope of a resource:
    - a Company itself -> its pk
    - anything carrying company_id (Invoice, LedgerAccount, Customer, ...)
    - None when the resource is not company-scoped
    """
    if resource is None:
        return None
    meta = getattr(resource, "_meta", None)
    if meta is not None and meta.label_lower == "companies.company":
        return resource.pk
    return getattr(resource, "company_id", None)


# =========================================================
# THE CAPABILITY CHECK
# =========================================================
def can(actor, action: str, resource=None) -> bool:
    """
    Single capability check consulted at the entry of each core operation.

    - actor must be authenticated and hold `action`
    - if `resource` is company-scoped, actor must belong to that company
      (superusers are platform-wide)
    """
    if not is_authenticated_actor(actor):
        return False

    if action not in effective_capabilities_for(actor):
        return False

    company_id = resource_company_id(resource)
    if company_id is None or getattr(actor, "is_superuser", False):
        return True

    return str(getattr(actor, "company_id", None)) == str(company_id)


def require(actor, action: str, resource=None) -> None:
    if not is_authenticated_actor(actor):
        raise AuthenticationError("Not authenticated")
    if not can(actor, action, resource):
        raise PermissionDenied(f"You are not allowed to perform '{action}' on this resource")


# =========================================================
# DRF Permission (view-level gate)
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        view.required_capability = CAP_INVOICE_CREATE

    Object-level company scoping happens in the services via require().
    """

    def has_permission(self, request, view):
        user = request.user
        if not is_authenticated_actor(user):
            return False

        required = getattr(view, "required_capability", None)
        if not required:
            # Deny-by-default to avoid accidental open endpoints
            return False

        return can(user, required)


def scope_to_actor_company(queryset, actor, *, field: str = "company_id"):
    """
    Row scoping for list/retrieve endpoints.
    Superusers see every company; everyone else sees only their own.
    """
    if getattr(actor, "is_superuser", False):
        return queryset
    company_id = getattr(actor, "company_id", None)
    if company_id is None:
        return queryset.none()
    return queryset.filter(**{field: company_id})
