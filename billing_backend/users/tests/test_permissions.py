# users/tests/test_permissions.py

from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.core.exceptions import PermissionDenied
from django.test import TestCase
from rest_framework.test import APIRequestFactory

from accounting.services.exceptions import AuthenticationError
from accounting.tests.helpers import make_company, make_customer, make_user
from companies.models import Customer
from permissions.roles import (
    CAP_INVOICE_CREATE,
    CAP_INVOICE_CREDIT,
    CAP_INVOICE_VIEW,
    CAP_JOURNAL_POST,
    CAP_PAYMENT_RECORD,
    CAP_SALES_ORDER_CREATE,
    HasCapability,
    can,
    require,
    scope_to_actor_company,
)

User = get_user_model()


class CapabilityTests(TestCase):
    """
    GUARANTEES:
    - Capabilities follow the role map
    - Company-scoped resources only for members of that company
    - Anonymous actors are denied everywhere
    """

    def setUp(self):
        self.company = make_company()
        self.other_company = make_company(name="Other Co")

        self.admin = make_user(self.company, role="admin")
        self.accountant = make_user(self.company, role="accountant")
        self.sales = make_user(self.company, role="sales")
        self.viewer = make_user(self.company, role="viewer")
        self.superuser = User.objects.create_superuser(email="root@example.com", password="pass")

    def test_role_map(self):
        self.assertTrue(can(self.admin, CAP_JOURNAL_POST))
        self.assertTrue(can(self.accountant, CAP_INVOICE_CREDIT))
        self.assertTrue(can(self.accountant, CAP_PAYMENT_RECORD))
        self.assertFalse(can(self.accountant, CAP_SALES_ORDER_CREATE))
        self.assertTrue(can(self.sales, CAP_INVOICE_CREATE))
        self.assertFalse(can(self.sales, CAP_INVOICE_CREDIT))
        self.assertTrue(can(self.viewer, CAP_INVOICE_VIEW))
        self.assertFalse(can(self.viewer, CAP_INVOICE_CREATE))

    def test_unknown_role_or_capability_is_denied(self):
        self.viewer.role = "intern"
        self.assertFalse(can(self.viewer, CAP_INVOICE_VIEW))
        self.assertFalse(can(self.admin, "invoice.delete"))

    def test_company_scope(self):
        own = make_customer(self.company)
        foreign = make_customer(self.other_company)

        self.assertTrue(can(self.accountant, CAP_INVOICE_CREATE, self.company))
        self.assertTrue(can(self.accountant, CAP_INVOICE_CREATE, own))
        self.assertFalse(can(self.accountant, CAP_INVOICE_CREATE, self.other_company))
        self.assertFalse(can(self.accountant, CAP_INVOICE_CREATE, foreign))
        self.assertTrue(can(self.superuser, CAP_INVOICE_CREATE, foreign))

    def test_anonymous_is_denied(self):
        self.assertFalse(can(None, CAP_INVOICE_VIEW))
        self.assertFalse(can(AnonymousUser(), CAP_INVOICE_VIEW))

    def test_require(self):
        require(self.accountant, CAP_INVOICE_CREATE, self.company)

        with self.assertRaises(PermissionDenied):
            require(self.viewer, CAP_INVOICE_CREATE, self.company)
        with self.assertRaises(PermissionDenied):
            require(self.accountant, CAP_INVOICE_CREATE, self.other_company)
        with self.assertRaises(AuthenticationError):
            require(AnonymousUser(), CAP_INVOICE_VIEW)

    def test_has_capability_permission(self):
        factory = APIRequestFactory()
        permission = HasCapability()

        class View:
            required_capability = CAP_INVOICE_CREATE

        request = factory.get("/")
        request.user = self.sales
        self.assertTrue(permission.has_permission(request, View()))

        request.user = self.viewer
        self.assertFalse(permission.has_permission(request, View()))

        View.required_capability = None
        request.user = self.admin
        self.assertFalse(permission.has_permission(request, View()))

    def test_scope_to_actor_company(self):
        make_customer(self.company)
        make_customer(self.other_company)
        homeless = User.objects.create_user(email="nobody@example.com", password="pass", role="viewer")

        self.assertEqual(scope_to_actor_company(Customer.objects.all(), self.viewer).count(), 1)
        self.assertEqual(scope_to_actor_company(Customer.objects.all(), self.superuser).count(), 2)
        self.assertEqual(scope_to_actor_company(Customer.objects.all(), homeless).count(), 0)
