# permissions/tests/test_roles.py

from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.test import TestCase
from rest_framework.test import APIRequestFactory

from permissions.roles import (
    CAP_DISPUTE_RESOLVE,
    CAP_REFUND_PROCESS,
    CAP_REFUND_VIEW_ALL,
    CAP_REFUND_VIEW_OWN,
    CAP_VIOLATION_REPORT,
    CAP_VIOLATION_RESPOND,
    HasAnyCapability,
    HasCapability,
    capabilities_for,
    is_back_office,
    user_has_capability,
)

User = get_user_model()


class _View:
    def __init__(self, required=None, required_any=None):
        self.required_capability = required
        self.required_any_capabilities = required_any


class CapabilityTests(TestCase):
    """
    GUARANTEES:
    - Only admins arbitrate disputes and pay out refunds
    - Staff can look, not decide
    - Anonymous users denied everywhere
    """

    def setUp(self):
        self.factory = APIRequestFactory()

        self.admin = User.objects.create_user(email="admin@example.com", password="pass", role="admin")
        self.staff = User.objects.create_user(email="staff@example.com", password="pass", role="staff")
        self.provider = User.objects.create_user(
            email="provider@example.com", password="pass", role="provider"
        )
        self.customer = User.objects.create_user(
            email="customer@example.com", password="pass", role="customer"
        )

    # --------------------------------------------------
    # Helpers
    # --------------------------------------------------

    def _request_for(self, user=None):
        request = self.factory.get("/")
        request.user = user
        return request

    # --------------------------------------------------
    # ROLE MAP
    # --------------------------------------------------

    def test_admin_holds_every_decision(self):
        self.assertTrue(user_has_capability(self.admin, CAP_DISPUTE_RESOLVE))
        self.assertTrue(user_has_capability(self.admin, CAP_REFUND_PROCESS))

    def test_staff_reads_only(self):
        self.assertTrue(user_has_capability(self.staff, CAP_REFUND_VIEW_ALL))
        self.assertFalse(user_has_capability(self.staff, CAP_DISPUTE_RESOLVE))
        self.assertFalse(user_has_capability(self.staff, CAP_REFUND_PROCESS))

    def test_marketplace_roles(self):
        self.assertTrue(user_has_capability(self.provider, CAP_VIOLATION_REPORT))
        self.assertFalse(user_has_capability(self.customer, CAP_VIOLATION_REPORT))
        self.assertTrue(user_has_capability(self.customer, CAP_VIOLATION_RESPOND))
        self.assertFalse(user_has_capability(self.customer, CAP_REFUND_VIEW_ALL))

    def test_back_office(self):
        self.assertTrue(is_back_office(self.admin))
        self.assertTrue(is_back_office(self.staff))
        self.assertFalse(is_back_office(self.provider))

    def test_unknown_role_has_nothing(self):
        self.customer.role = "auditor"

        self.assertEqual(capabilities_for(self.customer), set())

    # --------------------------------------------------
    # DRF PERMISSION CLASSES
    # --------------------------------------------------

    def test_has_capability(self):
        view = _View(required=CAP_REFUND_PROCESS)

        self.assertTrue(HasCapability().has_permission(self._request_for(self.admin), view))
        self.assertFalse(HasCapability().has_permission(self._request_for(self.staff), view))

    def test_missing_capability_denies_by_default(self):
        self.assertFalse(HasCapability().has_permission(self._request_for(self.admin), _View()))
        self.assertFalse(HasAnyCapability().has_permission(self._request_for(self.admin), _View()))

    def test_has_any_capability(self):
        view = _View(required_any={CAP_REFUND_VIEW_ALL, CAP_REFUND_VIEW_OWN})

        self.assertTrue(HasAnyCapability().has_permission(self._request_for(self.staff), view))
        self.assertTrue(HasAnyCapability().has_permission(self._request_for(self.customer), view))

    def test_anonymous_denied(self):
        view = _View(required=CAP_VIOLATION_RESPOND, required_any={CAP_VIOLATION_RESPOND})

        for user in (None, AnonymousUser()):
            request = self._request_for(user)
            self.assertFalse(HasCapability().has_permission(request, view))
            self.assertFalse(HasAnyCapability().has_permission(request, view))
            self.assertFalse(user_has_capability(user, CAP_VIOLATION_RESPOND))
